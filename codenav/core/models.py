"""Result entities returned by the language backends."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Capability(Enum):
    """Kinds of code-intelligence queries a backend can serve."""

    TYPE_HIERARCHY = "type-hierarchy"
    CALL_HIERARCHY = "call-hierarchy"
    IMPLEMENTATIONS = "implementations"
    SYMBOL_SEARCH = "symbol-search"
    SUPER_METHODS = "super-methods"


class Direction(Enum):
    """Direction of a call hierarchy walk."""

    CALLERS = "callers"
    CALLEES = "callees"


@dataclass(frozen=True)
class ElementReference:
    """A resolved symbol reduced to the facts needed to render it."""

    name: str
    kind: str
    language: str
    qualified_name: str | None = None
    file: str | None = None
    line: int | None = None

    @property
    def identity(self) -> str:
        """Deduplication key: (qualified name or name) + file + line."""
        return f"{self.qualified_name or self.name}:{self.file or ''}:{self.line or 0}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "qualified_name": self.qualified_name,
            "kind": self.kind,
            "language": self.language,
            "file": self.file,
            "line": self.line,
        }


@dataclass(frozen=True)
class TypeNode:
    """A type in a hierarchy together with its (recursively expanded) supertypes."""

    element: ElementReference
    supertypes: tuple[TypeNode, ...] = ()

    @property
    def name(self) -> str:
        return self.element.name

    @property
    def identity(self) -> str:
        return self.element.identity

    def __iter__(self) -> Iterator[TypeNode]:
        """Pre-order traversal."""
        yield self
        for parent in self.supertypes:
            yield from parent

    def to_dict(self) -> dict[str, Any]:
        result = self.element.to_dict()
        if self.supertypes:
            result["supertypes"] = [s.to_dict() for s in self.supertypes]
        return result


@dataclass(frozen=True)
class TypeHierarchy:
    """Type hierarchy rooted at one type: supertypes up, flat subtypes down."""

    root: TypeNode
    subtypes: tuple[ElementReference, ...] = ()

    @property
    def supertypes(self) -> tuple[TypeNode, ...]:
        return self.root.supertypes

    def to_dict(self) -> dict[str, Any]:
        return {
            "element": self.root.element.to_dict(),
            "supertypes": [s.to_dict() for s in self.root.supertypes],
            "subtypes": [s.to_dict() for s in self.subtypes],
        }


@dataclass(frozen=True)
class CallNode:
    """A callable in a call tree with its nested callers or callees."""

    element: ElementReference
    children: tuple[CallNode, ...] = ()

    @property
    def name(self) -> str:
        return self.element.name

    @property
    def file(self) -> str | None:
        return self.element.file

    @property
    def line(self) -> int | None:
        return self.element.line

    @property
    def height(self) -> int:
        """Number of levels in this subtree, counting this node."""
        return 1 + max((c.height for c in self.children), default=0)

    def __iter__(self) -> Iterator[CallNode]:
        """Pre-order traversal."""
        yield self
        for child in self.children:
            yield from child

    def __len__(self) -> int:
        """Total nodes in subtree."""
        return 1 + sum(len(c) for c in self.children)

    def to_dict(self) -> dict[str, Any]:
        result = self.element.to_dict()
        if self.children:
            result["children"] = [c.to_dict() for c in self.children]
        return result


@dataclass(frozen=True)
class CallHierarchy:
    """Callers or callees of one callable, up to the requested depth."""

    root: ElementReference
    direction: Direction
    calls: tuple[CallNode, ...] = ()

    @property
    def depth(self) -> int:
        """Deepest nesting level present in the result."""
        return max((c.height for c in self.calls), default=0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "element": self.root.to_dict(),
            "direction": self.direction.value,
            "calls": [c.to_dict() for c in self.calls],
        }


@dataclass(frozen=True)
class SymbolMatch:
    """A declaration found by symbol search."""

    name: str
    kind: str
    file: str
    line: int
    language: str
    qualified_name: str | None = None
    container_name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "qualified_name": self.qualified_name,
            "kind": self.kind,
            "file": self.file,
            "line": self.line,
            "container_name": self.container_name,
            "language": self.language,
        }


@dataclass(frozen=True)
class MethodInfo:
    """The method a super-method query was issued for."""

    name: str
    signature: str
    containing_class: str
    language: str
    file: str | None = None
    line: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "signature": self.signature,
            "containing_class": self.containing_class,
            "file": self.file,
            "line": self.line,
            "language": self.language,
        }


@dataclass(frozen=True)
class SuperMethodEntry:
    """An ancestor method that the queried method overrides or implements."""

    name: str
    signature: str
    containing_class: str
    containing_class_kind: str
    is_interface: bool
    depth: int
    language: str
    file: str | None = None
    line: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "signature": self.signature,
            "containing_class": self.containing_class,
            "containing_class_kind": self.containing_class_kind,
            "file": self.file,
            "line": self.line,
            "is_interface": self.is_interface,
            "depth": self.depth,
            "language": self.language,
        }


@dataclass(frozen=True)
class SuperMethods:
    """Override chain of a method, ordered by ascending depth."""

    method: MethodInfo
    hierarchy: tuple[SuperMethodEntry, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "method": self.method.to_dict(),
            "hierarchy": [h.to_dict() for h in self.hierarchy],
        }


@dataclass(frozen=True)
class Implementation:
    """A type or method implementing the queried abstraction."""

    name: str
    file: str
    line: int
    kind: str
    language: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "file": self.file,
            "line": self.line,
            "kind": self.kind,
            "language": self.language,
        }
