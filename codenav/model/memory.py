"""In-memory code model with adjacency-list indexes."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable, Iterator, Sequence
from pathlib import PurePosixPath

from codenav.model.base import (
    CALLABLE_KINDS,
    DECLARATION_KINDS,
    Parameter,
    Relation,
    Symbol,
    SymbolKind,
    TypeRef,
)
from codenav.model.languages import DEFAULT_CATALOG, LanguageCatalog

logger = logging.getLogger(__name__)

ParameterSpec = Parameter | tuple[str, str | None] | str


def _normalize_path(file: str | None) -> str | None:
    if file is None:
        return None
    return PurePosixPath(file.replace("\\", "/")).as_posix()


def _simple_name(name: str) -> str:
    return name.rsplit(".", 1)[-1]


def receiver_base(receiver: str) -> str:
    """Type name of a Go receiver: ``*Server[T]`` -> ``Server``."""
    base = receiver.strip().lstrip("*").strip()
    return base.split("[", 1)[0].strip()


class InMemoryCodeModel:
    """Code model held entirely in memory.

    Declarations, supertype references, call expressions and plain references
    are added programmatically (by an indexer, a snapshot loader or a test)
    and answered from adjacency lists. Lookups by id are O(1); structural
    queries (inheritors, Go method sets) scan the declarations of one family.
    """

    __slots__ = (
        "catalog",
        "_symbols",
        "_children",
        "_by_qualified",
        "_by_name",
        "_type_refs",
        "_calls",
        "_call_targets",
        "_references",
        "_by_file",
        "_ready",
        "_reverse_cache",
    )

    def __init__(self, catalog: LanguageCatalog = DEFAULT_CATALOG, ready: bool = True) -> None:
        self.catalog = catalog
        self._symbols: dict[str, Symbol] = {}
        self._children: dict[str, list[str]] = defaultdict(list)
        self._by_qualified: dict[str, Symbol] = {}
        self._by_name: dict[str, list[Symbol]] = defaultdict(list)
        self._type_refs: dict[str, list[TypeRef]] = defaultdict(list)
        self._calls: dict[str, list[str]] = defaultdict(list)
        self._call_targets: dict[str, str] = {}
        self._references: dict[str, list[str]] = defaultdict(list)
        self._by_file: dict[str, list[str]] = defaultdict(list)
        self._ready = ready
        self._reverse_cache: dict[str, list[Symbol]] | None = None

    # -- population ---------------------------------------------------------

    def add(self, symbol: Symbol) -> Symbol:
        """Add a symbol node. O(1)."""
        if symbol.id in self._symbols:
            raise ValueError(f"Duplicate symbol id: {symbol.id}")
        if symbol.parent_id is not None and symbol.parent_id not in self._symbols:
            raise ValueError(f"Unknown parent {symbol.parent_id!r} for {symbol.id!r}")

        self._symbols[symbol.id] = symbol
        if symbol.parent_id is not None:
            self._children[symbol.parent_id].append(symbol.id)
        if symbol.file is not None:
            self._by_file[symbol.file].append(symbol.id)
        if symbol.kind in DECLARATION_KINDS:
            self._by_name[symbol.name].append(symbol)
            if symbol.qualified_name and symbol.qualified_name not in self._by_qualified:
                self._by_qualified[symbol.qualified_name] = symbol
        self._reverse_cache = None
        return symbol

    def declare(
        self,
        name: str,
        kind: SymbolKind,
        language: str,
        *,
        file: str | None = None,
        line: int | None = None,
        end_line: int | None = None,
        parent: Symbol | None = None,
        qualified_name: str | None = None,
        modifiers: Iterable[str] = (),
        parameters: Iterable[ParameterSpec] = (),
        return_type: str | None = None,
        receiver: str | None = None,
        library: bool = False,
        id: str | None = None,
    ) -> Symbol:
        """Declare a type, callable or variable and return its handle."""
        if qualified_name is None:
            if parent is not None:
                qualified_name = f"{parent.qualified_name or parent.name}.{name}"
            elif receiver is not None:
                qualified_name = f"{receiver_base(receiver)}.{name}"
            else:
                qualified_name = name
        if file is None and parent is not None:
            file = parent.file

        symbol = Symbol(
            id=id or self._new_id(qualified_name),
            name=name,
            kind=kind,
            language=language,
            qualified_name=qualified_name,
            file=_normalize_path(file),
            line=line,
            end_line=end_line if end_line is not None else line,
            parent_id=parent.id if parent is not None else None,
            modifiers=frozenset(modifiers),
            parameters=tuple(self._parameter(p) for p in parameters),
            return_type=return_type,
            receiver=receiver,
            library=library or (parent.library if parent is not None else False),
        )
        return self.add(symbol)

    def add_type_reference(
        self,
        owner: Symbol,
        name: str,
        qualified_name: str | None = None,
        relation: Relation = Relation.EXTENDS,
    ) -> TypeRef:
        """Record a supertype written on ``owner``'s declaration."""
        ref = TypeRef(name=name, qualified_name=qualified_name, relation=relation)
        self._type_refs[owner.id].append(ref)
        self._reverse_cache = None
        return ref

    def add_call(
        self,
        container: Symbol,
        target: Symbol | None = None,
        line: int | None = None,
        text: str | None = None,
        id: str | None = None,
    ) -> Symbol:
        """Record a call expression inside ``container``.

        A resolved call also counts as a reference to its target.
        """
        call = Symbol(
            id=id or self._new_id(f"{container.id}@call"),
            name=text or (target.name if target is not None else "<call>"),
            kind=SymbolKind.CALL,
            language=container.language,
            file=container.file,
            line=line if line is not None else container.line,
            end_line=line if line is not None else container.line,
            parent_id=container.id,
            text=text or (target.name if target is not None else None),
            library=container.library,
        )
        self.add(call)
        self._calls[container.id].append(call.id)
        if target is not None:
            self._call_targets[call.id] = target.id
            self._references[target.id].append(call.id)
        return call

    def add_reference(
        self,
        container: Symbol,
        target: Symbol,
        line: int | None = None,
        text: str | None = None,
    ) -> Symbol:
        """Record a non-call reference to ``target`` (e.g. a method reference)."""
        ref = Symbol(
            id=self._new_id(f"{container.id}@ref"),
            name=text or target.name,
            kind=SymbolKind.REFERENCE,
            language=container.language,
            file=container.file,
            line=line if line is not None else container.line,
            end_line=line if line is not None else container.line,
            parent_id=container.id,
            text=text or target.name,
            library=container.library,
        )
        self.add(ref)
        self._references[target.id].append(ref.id)
        return ref

    def set_ready(self, ready: bool) -> None:
        self._ready = ready

    # -- inspection ---------------------------------------------------------

    def __len__(self) -> int:
        return len(self._symbols)

    def __contains__(self, symbol_id: object) -> bool:
        return symbol_id in self._symbols

    def get(self, symbol_id: str) -> Symbol | None:
        """Get symbol by id. O(1)."""
        return self._symbols.get(symbol_id)

    def symbols(self) -> Iterator[Symbol]:
        """All symbols in insertion order."""
        return iter(self._symbols.values())

    def parent(self, symbol: Symbol) -> Symbol | None:
        return self._symbols.get(symbol.parent_id) if symbol.parent_id else None

    def children(self, symbol: Symbol) -> list[Symbol]:
        return [self._symbols[c] for c in self._children.get(symbol.id, [])]

    def iter_type_references(self) -> Iterator[tuple[Symbol, TypeRef]]:
        for owner_id, refs in self._type_refs.items():
            for ref in refs:
                yield self._symbols[owner_id], ref

    def iter_calls(self) -> Iterator[tuple[Symbol, Symbol | None]]:
        """Every call expression with its resolved target."""
        for call_ids in self._calls.values():
            for call_id in call_ids:
                target_id = self._call_targets.get(call_id)
                yield self._symbols[call_id], self._symbols.get(target_id) if target_id else None

    def iter_references(self) -> Iterator[tuple[Symbol, Symbol]]:
        """Every plain (non-call) reference with its target."""
        for target_id, ref_ids in self._references.items():
            for ref_id in ref_ids:
                ref = self._symbols[ref_id]
                if ref.kind is SymbolKind.REFERENCE:
                    yield ref, self._symbols[target_id]

    # -- CodeModel protocol -------------------------------------------------

    def is_ready(self) -> bool:
        return self._ready

    def element_at(self, file: str, line: int, column: int = 0) -> Symbol | None:
        """Innermost element covering ``line``.

        Columns are not tracked; the narrowest span starting closest to the
        line wins.
        """
        path = _normalize_path(file)
        candidates = [
            self._symbols[sid]
            for sid in self._by_file.get(path or "", [])
            if self._covers(self._symbols[sid], line)
        ]
        if not candidates:
            return None
        return min(
            candidates,
            key=lambda s: ((s.end_line or s.line or 0) - (s.line or 0), -(s.line or 0)),
        )

    def find_by_qualified_name(self, name: str) -> Symbol | None:
        return self._by_qualified.get(name)

    def containing(self, element: Symbol, kinds: Iterable[SymbolKind]) -> Symbol | None:
        wanted = frozenset(kinds)
        current: Symbol | None = element
        while current is not None:
            if current.kind in wanted:
                return current
            current = self.parent(current)
        return None

    def type_references(self, type_symbol: Symbol) -> Sequence[TypeRef]:
        return tuple(self._type_refs.get(type_symbol.id, ()))

    def resolve_type(self, ref: TypeRef, context: Symbol) -> Symbol | None:
        """Resolve by qualified name first, then by simple name.

        Simple-name candidates of the same language family are ranked: same
        file, then same directory, then declaration order.
        """
        family = self.catalog.family(context.language)
        for key in (ref.qualified_name, ref.name):
            if not key:
                continue
            found = self._by_qualified.get(key)
            if found is not None and found.is_type and self._family(found) == family:
                return found

        candidates = [
            s
            for s in self._by_name.get(_simple_name(ref.name), [])
            if s.is_type and self._family(s) == family
        ]
        if not candidates:
            return None
        for candidate in candidates:
            if candidate.file == context.file:
                return candidate
        for candidate in candidates:
            if candidate.directory == context.directory:
                return candidate
        return candidates[0]

    def inheritors(self, type_symbol: Symbol) -> Iterator[Symbol]:
        """Transitive inheritors, breadth first, excluding ``type_symbol``.

        Go interfaces are also satisfied structurally by any non-interface
        type whose method set covers the interface's method names.
        """
        seen = {type_symbol.id}
        queue = [type_symbol]
        reverse = self._reverse_index()
        while queue:
            current = queue.pop(0)
            for sub in reverse.get(current.id, []):
                if sub.id not in seen:
                    seen.add(sub.id)
                    queue.append(sub)
                    yield sub

        if self._family(type_symbol) == "go" and type_symbol.kind is SymbolKind.INTERFACE:
            required = self._required_methods(type_symbol, set())
            if not required:
                return
            for candidate in self._declarations_in_family("go"):
                if candidate.id in seen or not candidate.is_type:
                    continue
                if candidate.kind is SymbolKind.INTERFACE:
                    continue
                if required <= self._method_set(candidate, set()):
                    seen.add(candidate.id)
                    yield candidate

    def references(self, target: Symbol, include_libraries: bool = False) -> Iterator[Symbol]:
        for ref_id in self._references.get(target.id, []):
            ref = self._symbols[ref_id]
            if ref.library and not include_libraries:
                continue
            yield ref

    def calls_within(self, element: Symbol) -> Sequence[Symbol]:
        return tuple(self._symbols[c] for c in self._calls.get(element.id, []))

    def resolve_call(self, call: Symbol) -> Symbol | None:
        target_id = self._call_targets.get(call.id)
        return self._symbols.get(target_id) if target_id else None

    def members(self, type_symbol: Symbol) -> Sequence[Symbol]:
        result = [
            s
            for s in self.children(type_symbol)
            if s.kind in DECLARATION_KINDS
        ]
        if self._family(type_symbol) == "go":
            result.extend(self._receiver_methods(type_symbol))
        return tuple(result)

    def names(self, include_libraries: bool = False) -> Iterator[str]:
        for name, declared in self._by_name.items():
            if include_libraries or any(not s.library for s in declared):
                yield name

    def declarations_named(self, name: str, include_libraries: bool = False) -> Sequence[Symbol]:
        return tuple(
            s for s in self._by_name.get(name, []) if include_libraries or not s.library
        )

    # -- internals ----------------------------------------------------------

    def _new_id(self, base: str) -> str:
        if base not in self._symbols:
            return base
        n = 2
        while f"{base}#{n}" in self._symbols:
            n += 1
        return f"{base}#{n}"

    @staticmethod
    def _parameter(spec: ParameterSpec) -> Parameter:
        if isinstance(spec, Parameter):
            return spec
        if isinstance(spec, str):
            return Parameter(spec)
        return Parameter(spec[0], spec[1])

    @staticmethod
    def _covers(symbol: Symbol, line: int) -> bool:
        if symbol.line is None:
            return False
        end = symbol.end_line if symbol.end_line is not None else symbol.line
        return symbol.line <= line <= end

    def _family(self, symbol: Symbol) -> str:
        return self.catalog.family(symbol.language)

    def _declarations_in_family(self, family: str) -> Iterator[Symbol]:
        for symbol in self._symbols.values():
            if symbol.kind in DECLARATION_KINDS and self._family(symbol) == family:
                yield symbol

    def _reverse_index(self) -> dict[str, list[Symbol]]:
        """supertype id -> direct subtypes, rebuilt after any mutation."""
        if self._reverse_cache is None:
            reverse: dict[str, list[Symbol]] = defaultdict(list)
            for owner_id, refs in self._type_refs.items():
                owner = self._symbols[owner_id]
                for ref in refs:
                    resolved = self.resolve_type(ref, owner)
                    if resolved is not None and resolved.id != owner.id:
                        reverse[resolved.id].append(owner)
            self._reverse_cache = dict(reverse)
        return self._reverse_cache

    def _receiver_methods(self, type_symbol: Symbol) -> list[Symbol]:
        return [
            s
            for s in self._by_name_values()
            if s.kind in CALLABLE_KINDS
            and s.receiver is not None
            and receiver_base(s.receiver) == type_symbol.name
            and s.directory == type_symbol.directory
        ]

    def _by_name_values(self) -> Iterator[Symbol]:
        for declared in self._by_name.values():
            yield from declared

    def _embedded(self, type_symbol: Symbol) -> list[Symbol]:
        result = []
        for ref in self._type_refs.get(type_symbol.id, []):
            if ref.relation is not Relation.EMBEDS:
                continue
            resolved = self.resolve_type(ref, type_symbol)
            if resolved is not None:
                result.append(resolved)
        return result

    def _required_methods(self, interface: Symbol, visited: set[str]) -> frozenset[str]:
        if interface.id in visited:
            return frozenset()
        visited.add(interface.id)
        names = {m.name for m in self.members(interface) if m.kind in CALLABLE_KINDS}
        for embedded in self._embedded(interface):
            names |= self._required_methods(embedded, visited)
        return frozenset(names)

    def _method_set(self, type_symbol: Symbol, visited: set[str]) -> frozenset[str]:
        """Declared plus promoted method names of a Go type."""
        if type_symbol.id in visited:
            return frozenset()
        visited.add(type_symbol.id)
        names = {m.name for m in self.members(type_symbol) if m.kind in CALLABLE_KINDS}
        for embedded in self._embedded(type_symbol):
            names |= self._method_set(embedded, visited)
        return frozenset(names)
