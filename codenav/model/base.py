"""Code model boundary: resolved symbols and the provider protocol."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Protocol

from codenav.core.exceptions import IndexNotReadyError


class SymbolKind(Enum):
    """Kinds of elements a code model can hand out."""

    CLASS = "CLASS"
    INTERFACE = "INTERFACE"
    ENUM = "ENUM"
    ANNOTATION = "ANNOTATION"
    RECORD = "RECORD"
    STRUCT = "STRUCT"
    TYPE = "TYPE"
    METHOD = "METHOD"
    FUNCTION = "FUNCTION"
    FIELD = "FIELD"
    VARIABLE = "VARIABLE"
    # Non-declaration elements: call expressions and plain references
    CALL = "CALL"
    REFERENCE = "REFERENCE"


TYPE_KINDS = frozenset(
    {
        SymbolKind.CLASS,
        SymbolKind.INTERFACE,
        SymbolKind.ENUM,
        SymbolKind.ANNOTATION,
        SymbolKind.RECORD,
        SymbolKind.STRUCT,
        SymbolKind.TYPE,
    }
)
CALLABLE_KINDS = frozenset({SymbolKind.METHOD, SymbolKind.FUNCTION})
DECLARATION_KINDS = TYPE_KINDS | CALLABLE_KINDS | {SymbolKind.FIELD, SymbolKind.VARIABLE}


class Relation(Enum):
    """How a type names one of its supertypes."""

    EXTENDS = "extends"
    IMPLEMENTS = "implements"
    EMBEDS = "embeds"


@dataclass(frozen=True)
class Parameter:
    """A declared parameter of a callable."""

    name: str
    type: str | None = None


@dataclass(frozen=True)
class Symbol:
    """One resolved source element.

    Symbols are opaque handles as far as the backends are concerned; two
    symbols are the same element exactly when their ids are equal.
    """

    id: str
    name: str = field(compare=False)
    kind: SymbolKind = field(compare=False)
    language: str = field(compare=False)
    qualified_name: str | None = field(default=None, compare=False)
    file: str | None = field(default=None, compare=False)
    line: int | None = field(default=None, compare=False)
    end_line: int | None = field(default=None, compare=False)
    parent_id: str | None = field(default=None, compare=False)
    modifiers: frozenset[str] = field(default=frozenset(), compare=False)
    parameters: tuple[Parameter, ...] = field(default=(), compare=False)
    return_type: str | None = field(default=None, compare=False)
    receiver: str | None = field(default=None, compare=False)
    text: str | None = field(default=None, compare=False)
    library: bool = field(default=False, compare=False)

    @property
    def is_type(self) -> bool:
        return self.kind in TYPE_KINDS

    @property
    def is_callable(self) -> bool:
        return self.kind in CALLABLE_KINDS

    @property
    def is_abstract(self) -> bool:
        return "abstract" in self.modifiers

    @property
    def directory(self) -> str:
        """Directory of the declaring file ("" when unknown)."""
        if not self.file:
            return ""
        return str(PurePosixPath(self.file).parent)


@dataclass(frozen=True)
class TypeRef:
    """A supertype as written on a type declaration, not yet resolved."""

    name: str
    qualified_name: str | None = None
    relation: Relation = Relation.EXTENDS


class CodeModel(Protocol):
    """Semantic facts a host exposes to the backends.

    The model owns parsing and resolution. Backends only navigate.
    """

    def is_ready(self) -> bool:
        """Whether indexing is complete and queries may be answered."""
        ...

    def element_at(self, file: str, line: int, column: int = 0) -> Symbol | None:
        """Innermost element whose span covers the position."""
        ...

    def find_by_qualified_name(self, name: str) -> Symbol | None:
        """Declaration with the given fully qualified name."""
        ...

    def containing(self, element: Symbol, kinds: Iterable[SymbolKind]) -> Symbol | None:
        """The element itself or its nearest ancestor of one of ``kinds``."""
        ...

    def type_references(self, type_symbol: Symbol) -> Sequence[TypeRef]:
        """Supertypes written on the declaration, in source order."""
        ...

    def resolve_type(self, ref: TypeRef, context: Symbol) -> Symbol | None:
        """Resolve a supertype reference as seen from ``context``."""
        ...

    def inheritors(self, type_symbol: Symbol) -> Iterable[Symbol]:
        """Types deriving from, embedding or satisfying ``type_symbol``."""
        ...

    def references(self, target: Symbol, include_libraries: bool = False) -> Iterable[Symbol]:
        """Elements (calls or plain references) pointing at ``target``."""
        ...

    def calls_within(self, element: Symbol) -> Sequence[Symbol]:
        """Call expressions inside the body of ``element``, in source order."""
        ...

    def resolve_call(self, call: Symbol) -> Symbol | None:
        """Declaration a call expression resolves to."""
        ...

    def members(self, type_symbol: Symbol) -> Sequence[Symbol]:
        """Direct members of a type (Go: methods declared on it as receiver)."""
        ...

    def names(self, include_libraries: bool = False) -> Iterable[str]:
        """All declared names, each reported once."""
        ...

    def declarations_named(self, name: str, include_libraries: bool = False) -> Sequence[Symbol]:
        """Declarations carrying exactly ``name``."""
        ...


class Host(Protocol):
    """The environment the code model lives in."""

    def is_plugin_enabled(self, plugin_id: str) -> bool:
        """Whether semantic support for a language family is installed."""
        ...


@dataclass(frozen=True)
class StaticHost:
    """Host with a fixed set of enabled language plugins."""

    plugins: frozenset[str] = frozenset({"java", "go", "python", "javascript"})

    def is_plugin_enabled(self, plugin_id: str) -> bool:
        return plugin_id in self.plugins


@dataclass
class Project:
    """A code model plus the location its file paths are relative to."""

    model: CodeModel
    base_path: Path | None = None
    name: str = "project"

    def ensure_ready(self) -> None:
        """Raise IndexNotReadyError while the model is still indexing."""
        if not self.model.is_ready():
            raise IndexNotReadyError(
                f"Code model for '{self.name}' is still indexing; retry once indexing completes"
            )

    def relative_path(self, file: str | None) -> str | None:
        """Path of ``file`` relative to the project root, when it lies under it."""
        if file is None:
            return None
        if self.base_path is None:
            return file
        path = Path(file)
        if not path.is_absolute():
            return file
        try:
            return path.relative_to(self.base_path).as_posix()
        except ValueError:
            return file
