"""Backend base class and the capability mixins built on it.

A backend is one language family's view of the code model. The base class
declares the navigation primitives (find the enclosing type, list and
resolve supertype references, resolve calls ...); the capability mixins turn
those primitives into hierarchy, call-graph and search results by running
the shared walks in :mod:`codenav.core.traversal`.

A concrete backend mixes in the capabilities it serves::

    class PythonBackend(
        TypeHierarchyCapability,
        CallHierarchyCapability,
        ...,
        LanguageBackend,
    ): ...
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator, Sequence
from typing import TYPE_CHECKING, ClassVar

from codenav.core.config import DEFAULT_LIMITS, Limits
from codenav.core.exceptions import UnsupportedOperationError
from codenav.core.matching import matches_query, rank_matches
from codenav.core.models import (
    CallHierarchy,
    Capability,
    Direction,
    ElementReference,
    Implementation,
    MethodInfo,
    SuperMethodEntry,
    SuperMethods,
    SymbolMatch,
    TypeHierarchy,
    TypeNode,
)
from codenav.core.traversal import (
    CallTarget,
    SuperMethodEdge,
    SupertypeEdge,
    ascend_supertypes,
    collect_bounded,
    walk_callees,
    walk_callers,
    walk_super_methods,
)
from codenav.model.base import CALLABLE_KINDS, TYPE_KINDS, Symbol, SymbolKind, TypeRef
from codenav.model.languages import DEFAULT_CATALOG, LanguageCatalog

if TYPE_CHECKING:
    from codenav.core.availability import AvailabilityGate
    from codenav.core.registry import CapabilityRegistry
    from codenav.model.base import Project

logger = logging.getLogger(__name__)


class LanguageBackend(ABC):
    """Navigation primitives for one language family."""

    family: ClassVar[str]
    default_language: ClassVar[str]

    def __init__(
        self,
        gate: AvailabilityGate,
        language_id: str | None = None,
        limits: Limits = DEFAULT_LIMITS,
        catalog: LanguageCatalog = DEFAULT_CATALOG,
    ) -> None:
        self.gate = gate
        self.language_id = language_id or self.default_language
        self.limits = limits
        self.catalog = catalog

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.language_id!r})"

    @property
    def capabilities(self) -> tuple[Capability, ...]:
        """Capabilities contributed by the mixins this backend is built from."""
        found = []
        for cls in type(self).__mro__:
            capability = vars(cls).get("capability")
            if isinstance(capability, Capability) and capability not in found:
                found.append(capability)
        return tuple(found)

    # -- dispatch -----------------------------------------------------------

    def is_available(self) -> bool:
        return self.gate.is_available()

    def handles_language(self, language_id: str) -> bool:
        return self.catalog.family(language_id) == self.family

    def can_handle(self, element: Symbol) -> bool:
        return self.is_available() and self.handles_language(element.language)

    # -- rendering ----------------------------------------------------------

    def language_name(self, symbol: Symbol) -> str:
        return self.catalog.display_name(symbol.language)

    def kind_name(self, symbol: Symbol) -> str:
        return symbol.kind.value

    def type_reference(self, type_symbol: Symbol, project: Project) -> ElementReference:
        return ElementReference(
            name=type_symbol.qualified_name or type_symbol.name,
            kind=self.kind_name(type_symbol),
            language=self.language_name(type_symbol),
            qualified_name=type_symbol.qualified_name,
            file=project.relative_path(type_symbol.file),
            line=type_symbol.line,
        )

    def callable_name(self, fn: Symbol, project: Project) -> str:
        """Display name of a callable in call trees: ``Owner.name``."""
        owner = self.containing_type(fn, project)
        return f"{owner.name}.{fn.name}" if owner is not None else fn.name

    def callable_reference(self, fn: Symbol, project: Project) -> ElementReference:
        return ElementReference(
            name=self.callable_name(fn, project),
            kind=self.kind_name(fn),
            language=self.language_name(fn),
            qualified_name=fn.qualified_name,
            file=project.relative_path(fn.file),
            line=fn.line,
        )

    def method_signature(self, fn: Symbol) -> str:
        params = ", ".join(p.name for p in fn.parameters)
        return f"{fn.name}({params})"

    # -- type primitives ----------------------------------------------------

    def find_type(self, element: Symbol, project: Project) -> Symbol | None:
        """The type declaration at or enclosing ``element``."""
        return project.model.containing(element, TYPE_KINDS)

    def supertype_references(self, type_symbol: Symbol, project: Project) -> Sequence[TypeRef]:
        return project.model.type_references(type_symbol)

    @abstractmethod
    def supertype_edge(
        self, type_symbol: Symbol, ref: TypeRef, project: Project
    ) -> SupertypeEdge | None:
        """Turn one written supertype into an edge, or None to omit it."""

    def supertype_targets(self, type_symbol: Symbol, project: Project) -> list[Symbol]:
        """Resolved direct supertypes, in edge order."""
        targets = []
        for ref in self.supertype_references(type_symbol, project):
            try:
                edge = self.supertype_edge(type_symbol, ref, project)
            except Exception as e:
                logger.debug("Dropping supertype %s of %s: %s", ref.name, type_symbol.name, e)
                continue
            if edge is not None and edge.target is not None:
                targets.append(edge.target)
        return targets

    def find_subtypes(self, type_symbol: Symbol, project: Project) -> Iterable[Symbol]:
        return project.model.inheritors(type_symbol)

    # -- callable primitives ------------------------------------------------

    def find_callable(self, element: Symbol, project: Project) -> Symbol | None:
        """The function or method at or enclosing ``element``."""
        return project.model.containing(element, CALLABLE_KINDS)

    def containing_type(self, fn: Symbol, project: Project) -> Symbol | None:
        return project.model.containing(fn, TYPE_KINDS)

    def callable_key(self, fn: Symbol, project: Project) -> str:
        """Stable identity used to avoid expanding a callable twice."""
        return fn.qualified_name or fn.name

    def call_targets(self, fn: Symbol, project: Project) -> Iterator[CallTarget]:
        model = project.model
        for call in model.calls_within(fn):
            target = model.resolve_call(call)
            if target is not None and not target.is_callable:
                target = None
            yield CallTarget(target, call.text or call.name)

    def unresolved_call(self, text: str) -> ElementReference | None:
        """Leaf reported for a call that does not resolve; None drops it."""
        return None

    def enclosing_callable(self, site: Symbol, project: Project) -> Symbol | None:
        return project.model.containing(site, CALLABLE_KINDS)

    def method_matches(self, candidate: Symbol, method: Symbol) -> bool:
        """Whether ``candidate`` overrides-or-is-overridden-by ``method``."""
        return candidate.is_callable and candidate.name == method.name

    def find_method_in_type(
        self, type_symbol: Symbol, method: Symbol, project: Project
    ) -> Symbol | None:
        """Method directly declared on ``type_symbol`` matching ``method``."""
        for member in project.model.members(type_symbol):
            if member != method and self.method_matches(member, method):
                return member
        return None

    def super_method_edge(
        self, match: Symbol, owner: Symbol, project: Project
    ) -> SuperMethodEdge:
        return SuperMethodEdge(
            method=match,
            owner_name=owner.qualified_name or owner.name,
            owner_kind=self.kind_name(owner),
            is_interface=owner.kind is SymbolKind.INTERFACE,
            owner=owner,
        )

    def direct_super_methods(self, method: Symbol, project: Project) -> Iterator[SuperMethodEdge]:
        """Nearest declaring ancestor method along each supertype path."""
        owner = self.containing_type(method, project)
        if owner is None:
            return
        visited = {owner.id}
        for parent in self.supertype_targets(owner, project):
            yield from self._nearest_declaring(parent, method, project, visited)

    def _nearest_declaring(
        self, type_symbol: Symbol, method: Symbol, project: Project, visited: set[str]
    ) -> Iterator[SuperMethodEdge]:
        if type_symbol.id in visited:
            return
        visited.add(type_symbol.id)
        match = self.find_method_in_type(type_symbol, method, project)
        if match is not None:
            yield self.super_method_edge(match, type_symbol, project)
            return
        for parent in self.supertype_targets(type_symbol, project):
            yield from self._nearest_declaring(parent, method, project, visited)

    def super_method_symbols(self, method: Symbol, project: Project) -> list[Symbol]:
        """Ancestor methods ``method`` overrides, nearest first."""
        pairs = walk_super_methods(
            method,
            lambda m: self.direct_super_methods(m, project),
            self.limits.max_hierarchy_depth,
        )
        return [edge.method for edge, _ in pairs]


class TypeHierarchyCapability(LanguageBackend):
    """Supertypes (recursively) and subtypes (flat) of a type."""

    capability = Capability.TYPE_HIERARCHY

    def type_hierarchy(self, element: Symbol, project: Project) -> TypeHierarchy | None:
        type_symbol = self.find_type(element, project)
        if type_symbol is None:
            return None

        root = self.type_reference(type_symbol, project)
        supertypes = ascend_supertypes(
            type_symbol,
            root.identity,
            lambda t: self.supertype_references(t, project),
            lambda t, ref: self.supertype_edge(t, ref, project),
            self.limits.max_hierarchy_depth,
        )
        subtypes = collect_bounded(
            self._subtype_candidates(type_symbol, project),
            lambda s: self.type_reference(s, project),
            type_symbol,
            self.limits.max_subtypes,
        )
        logger.debug(
            "Type hierarchy of %s: %d supertypes, %d subtypes",
            root.name,
            len(supertypes),
            len(subtypes),
        )
        return TypeHierarchy(TypeNode(root, supertypes), subtypes)

    def _subtype_candidates(self, type_symbol: Symbol, project: Project) -> Iterator[Symbol]:
        try:
            yield from self.find_subtypes(type_symbol, project)
        except Exception as e:
            logger.debug("Subtype search for %s failed: %s", type_symbol.name, e)


class CallHierarchyCapability(LanguageBackend):
    """Callers or callees of a callable, bounded in depth and fan-out."""

    capability = Capability.CALL_HIERARCHY

    def call_hierarchy(
        self,
        element: Symbol,
        project: Project,
        direction: Direction | str,
        depth: int,
    ) -> CallHierarchy | None:
        try:
            direction = Direction(direction)
        except ValueError:
            raise UnsupportedOperationError(
                f"Unknown call hierarchy direction {direction!r}; expected 'callers' or 'callees'"
            ) from None

        fn = self.find_callable(element, project)
        if fn is None:
            return None

        if direction is Direction.CALLERS:
            calls = walk_callers(
                fn,
                depth,
                search_set_of=lambda m: self.super_method_symbols(m, project),
                references_of=lambda target: project.model.references(target),
                enclosing_of=lambda site: self.enclosing_callable(site, project),
                key_of=lambda m: self.callable_key(m, project),
                to_reference=lambda m: self.callable_reference(m, project),
                limits=self.limits,
            )
        else:
            calls = walk_callees(
                fn,
                depth,
                calls_of=lambda m: self.call_targets(m, project),
                key_of=lambda m: self.callable_key(m, project),
                to_reference=lambda m: self.callable_reference(m, project),
                unresolved=self.unresolved_call,
                limits=self.limits,
            )
        logger.debug("Found %d %s of %s", len(calls), direction.value, fn.name)
        return CallHierarchy(self.callable_reference(fn, project), direction, calls)


class ImplementationsCapability(LanguageBackend):
    """Overriding methods of a method, or inheritors of a type."""

    capability = Capability.IMPLEMENTATIONS

    def find_implementations(
        self, element: Symbol, project: Project
    ) -> list[Implementation] | None:
        fn = self.find_callable(element, project)
        if fn is not None:
            return self.method_implementations(fn, project)

        type_symbol = self.find_type(element, project)
        if type_symbol is not None and self.has_implementations(type_symbol):
            return self.type_implementations(type_symbol, project)
        return None

    def has_implementations(self, type_symbol: Symbol) -> bool:
        return True

    def method_implementations(self, fn: Symbol, project: Project) -> list[Implementation]:
        owner = self.containing_type(fn, project)
        if owner is None:
            return []
        results: list[Implementation] = []
        try:
            for sub in self.find_subtypes(owner, project):
                if len(results) >= self.limits.max_implementations:
                    break
                match = self.find_method_in_type(sub, fn, project)
                if match is None or match.file is None:
                    continue
                results.append(
                    Implementation(
                        name=f"{sub.name}.{match.name}",
                        file=project.relative_path(match.file) or match.file,
                        line=match.line or 0,
                        kind=self.kind_name(match),
                        language=self.language_name(match),
                    )
                )
        except Exception as e:
            logger.debug("Implementation search for %s stopped: %s", fn.name, e)
        return results

    def type_implementations(self, type_symbol: Symbol, project: Project) -> list[Implementation]:
        results: list[Implementation] = []
        try:
            for sub in self.find_subtypes(type_symbol, project):
                if len(results) >= self.limits.max_implementations:
                    break
                if sub == type_symbol or sub.file is None:
                    continue
                results.append(
                    Implementation(
                        name=sub.qualified_name or sub.name,
                        file=project.relative_path(sub.file) or sub.file,
                        line=sub.line or 0,
                        kind=self.kind_name(sub),
                        language=self.language_name(sub),
                    )
                )
        except Exception as e:
            logger.debug("Implementation search for %s stopped: %s", type_symbol.name, e)
        return results


class SymbolSearchCapability(LanguageBackend):
    """Fuzzy declaration search over the family's names."""

    capability = Capability.SYMBOL_SEARCH

    def search_symbols(
        self,
        project: Project,
        pattern: str,
        include_libraries: bool = False,
        limit: int = 20,
    ) -> list[SymbolMatch]:
        query = pattern.strip()
        if not query or limit <= 0:
            return []

        model = project.model
        matches: list[SymbolMatch] = []
        seen: set[str] = set()
        for name in model.names(include_libraries):
            if not matches_query(name, query):
                continue
            for decl in model.declarations_named(name, include_libraries):
                if not self.handles_language(decl.language):
                    continue
                match = self.symbol_match(decl, project)
                key = f"{match.file}:{match.line}:{match.name}"
                if key in seen:
                    continue
                seen.add(key)
                matches.append(match)

        return rank_matches(matches, query, lambda m: m.name)[:limit]

    def symbol_match(self, symbol: Symbol, project: Project) -> SymbolMatch:
        container = None
        if not symbol.is_type:
            owner = self.containing_type(symbol, project)
            container = owner.name if owner is not None else None
        return SymbolMatch(
            name=symbol.name,
            kind=self.kind_name(symbol),
            file=project.relative_path(symbol.file) or "",
            line=symbol.line or 1,
            language=self.language_name(symbol),
            qualified_name=symbol.qualified_name,
            container_name=container,
        )


class SuperMethodsCapability(LanguageBackend):
    """The chain of ancestor methods a method overrides or implements."""

    capability = Capability.SUPER_METHODS

    def accepts_method(self, fn: Symbol) -> bool:
        return True

    def find_super_methods(self, element: Symbol, project: Project) -> SuperMethods | None:
        fn = self.find_callable(element, project)
        if fn is None or not self.accepts_method(fn):
            return None
        owner = self.containing_type(fn, project)
        if owner is None:
            return None

        method = MethodInfo(
            name=fn.name,
            signature=self.method_signature(fn),
            containing_class=owner.qualified_name or owner.name,
            language=self.language_name(fn),
            file=project.relative_path(fn.file),
            line=fn.line,
        )
        pairs = walk_super_methods(
            fn,
            lambda m: self.direct_super_methods(m, project),
            self.limits.max_hierarchy_depth,
        )
        hierarchy = tuple(
            SuperMethodEntry(
                name=edge.method.name,
                signature=self.method_signature(edge.method),
                containing_class=edge.owner_name,
                containing_class_kind=edge.owner_kind,
                is_interface=edge.is_interface,
                depth=depth,
                language=self.language_name(edge.method),
                file=project.relative_path(edge.method.file),
                line=edge.method.line,
            )
            for edge, depth in pairs
        )
        logger.debug("Found %d super methods of %s", len(hierarchy), fn.name)
        return SuperMethods(method, hierarchy)


def register_backend(registry: CapabilityRegistry, backend: LanguageBackend) -> None:
    """Register ``backend`` for every capability it serves."""
    for capability in backend.capabilities:
        registry.register(capability, backend.language_id, backend)
