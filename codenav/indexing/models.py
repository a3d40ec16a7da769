"""Data models for parser results (before they enter the code model)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from codenav.model.base import Parameter, SymbolKind


@dataclass
class ParsedSymbol:
    """A declaration extracted from source code."""

    name: str
    qualified_name: str
    line: int
    end_line: int | None
    kind: SymbolKind
    parent_qualified_name: str | None = None
    parameters: list[Parameter] = field(default_factory=list)
    return_type: str | None = None
    modifiers: set[str] = field(default_factory=set)


@dataclass
class ParsedBase:
    """A base class as written in a class statement."""

    owner_qualified_name: str
    name: str


@dataclass
class ParsedCall:
    """A call expression and the scope it occurs in."""

    caller_qualified_name: str
    callee_name: str
    line: int


@dataclass
class TypedVar:
    """A variable with a known type annotation."""

    name: str
    type_name: str
    scope_qualified_name: str


@dataclass
class ParseResult:
    """Result of parsing one file."""

    file: Path
    module: str
    symbols: list[ParsedSymbol]
    bases: list[ParsedBase]
    calls: list[ParsedCall]
    imports: dict[str, str]
    typed_vars: list[TypedVar] = field(default_factory=list)


class IndexStats:
    """Statistics from an indexing run."""

    def __init__(self) -> None:
        self.files: int = 0
        self.symbols: int = 0
        self.type_refs: int = 0
        self.calls: int = 0
        self.resolved_calls: int = 0
        self.skipped: int = 0
        self.errors: list[str] = []

    def __repr__(self) -> str:
        return (
            f"IndexStats(files={self.files}, symbols={self.symbols}, "
            f"type_refs={self.type_refs}, calls={self.calls}, "
            f"resolved_calls={self.resolved_calls}, skipped={self.skipped}, "
            f"errors={len(self.errors)})"
        )
