"""Indexer that parses Python sources into an in-memory code model."""

from __future__ import annotations

import fnmatch
import logging
from collections.abc import Callable
from pathlib import Path

from codenav.core.exceptions import ParseError
from codenav.indexing.models import IndexStats, ParsedCall, ParseResult
from codenav.indexing.python import PythonParser
from codenav.model.base import Relation, Symbol, SymbolKind
from codenav.model.languages import PYTHON
from codenav.model.memory import InMemoryCodeModel

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[Path, int, int], None]

_SELF_PREFIX = "self."
_SUPER_PREFIX = "super."

DEFAULT_EXCLUDES = [
    "__pycache__",
    "*.egg-info",
    "node_modules",
    "build",
    "dist",
    "venv",
    ".venv",
]


class Indexer:
    """Coordinates file parsing and population of one code model."""

    def __init__(self, model: InMemoryCodeModel | None = None) -> None:
        self.model = model if model is not None else InMemoryCodeModel()
        self._parser = PythonParser()
        self._symbol_cache: dict[str, Symbol] = {}

    def index_directory(
        self,
        directory: Path,
        exclude_patterns: list[str] | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> IndexStats:
        """Index all Python files in a directory.

        Uses a two-pass approach:
        1. First pass: parse every file and declare its symbols
        2. Second pass: record base classes, then resolve and record calls

        Cross-file references resolve regardless of file order. Files that
        fail to parse are reported in ``IndexStats.errors`` and skipped.

        Args:
            directory: Directory to index
            exclude_patterns: Additional glob patterns to exclude (e.g., "tests")
            on_progress: Optional callback for progress updates (file, current, total)
        """
        all_excludes = DEFAULT_EXCLUDES + (exclude_patterns or [])
        stats = IndexStats()

        python_files = sorted(directory.rglob("*.py"))
        total_files = len(python_files)
        parse_results: list[ParseResult] = []

        for i, file in enumerate(python_files):
            relative_path = file.relative_to(directory)
            if self._should_exclude(relative_path.as_posix(), all_excludes):
                stats.skipped += 1
            else:
                try:
                    result = self._parser.parse(file, directory)
                except ParseError as e:
                    logger.debug("Skipping %s: %s", file, e)
                    stats.errors.append(str(e))
                else:
                    stats.symbols += self._declare(result, relative_path.as_posix())
                    parse_results.append(result)
                    stats.files += 1

            if on_progress:
                on_progress(file, i + 1, total_files)

        self._link(parse_results, stats)
        logger.info("Indexed %s: %r", directory, stats)
        return stats

    def index_file(self, file: Path, root: Path | None = None) -> IndexStats:
        """Index a single file.

        Raises:
            ParseError: If the file cannot be read or parsed
        """
        root = root or file.parent
        stats = IndexStats()
        result = self._parser.parse(file, root)
        stats.symbols += self._declare(result, file.relative_to(root).as_posix())
        stats.files = 1
        self._link([result], stats)
        return stats

    def _should_exclude(self, path: str, patterns: list[str]) -> bool:
        """Check if a path matches any exclusion pattern.

        Excludes:
        - Any path component starting with '.' (hidden files/directories)
        - Any path component matching the exclusion patterns
        """
        for part in Path(path).parts:
            if part.startswith("."):
                return True
            for pattern in patterns:
                if fnmatch.fnmatch(part, pattern):
                    return True
        return False

    def _declare(self, result: ParseResult, file: str) -> int:
        """Declare the parsed symbols of one file; returns how many were added."""
        count = 0
        for parsed in result.symbols:
            parent = None
            if parsed.parent_qualified_name is not None:
                parent = self._symbol_cache.get(parsed.parent_qualified_name)
            symbol = self.model.declare(
                parsed.name,
                parsed.kind,
                PYTHON,
                file=file,
                line=parsed.line,
                end_line=parsed.end_line,
                parent=parent,
                qualified_name=parsed.qualified_name,
                modifiers=parsed.modifiers,
                parameters=parsed.parameters,
                return_type=parsed.return_type,
            )
            self._symbol_cache.setdefault(parsed.qualified_name, symbol)
            count += 1
        return count

    def _link(self, parse_results: list[ParseResult], stats: IndexStats) -> None:
        # Bases first: resolving self/super calls walks the class hierarchy
        for result in parse_results:
            for base in result.bases:
                owner = self._symbol_cache.get(base.owner_qualified_name)
                if owner is None:
                    continue
                self.model.add_type_reference(
                    owner,
                    base.name.rsplit(".", 1)[-1],
                    self._qualify(base.name, result),
                    Relation.EXTENDS,
                )
                stats.type_refs += 1

        for result in parse_results:
            for call in result.calls:
                container = self._symbol_cache.get(call.caller_qualified_name)
                if container is None:
                    continue
                target = self._resolve_callee(call, result)
                self.model.add_call(container, target, line=call.line, text=call.callee_name)
                stats.calls += 1
                if target is not None:
                    stats.resolved_calls += 1

    def _qualify(self, name: str, result: ParseResult) -> str | None:
        """Best-effort qualified name of a dotted reference in ``result``'s module."""
        if name in self._symbol_cache:
            return name
        first_part, _, rest = name.partition(".")
        if first_part in result.imports:
            imported = result.imports[first_part]
            return f"{imported}.{rest}" if rest else imported
        local = f"{result.module}.{name}"
        if local in self._symbol_cache:
            return local
        return None

    def _resolve_callee(self, call: ParsedCall, result: ParseResult) -> Symbol | None:
        """Resolve a callee name to a declared callable.

        This handles:
        - self.method / super().method calls (resolve along the class hierarchy)
        - self.attr.method calls (resolve via instance variable type)
        - Typed parameter calls (service.method where service: TodoService)
        - Imported and module-local names
        - Class instantiation (resolves to ``__init__`` when declared)
        """
        callee_name = call.callee_name
        enclosing_class = self._get_enclosing_class(call.caller_qualified_name)

        if callee_name.startswith(_SELF_PREFIX) and enclosing_class is not None:
            rest = callee_name[len(_SELF_PREFIX) :]
            if "." in rest:
                return self._resolve_instance_var_call(rest, enclosing_class, result)
            return self._lookup_method(enclosing_class, rest, include_self=True)

        if callee_name.startswith(_SUPER_PREFIX) and enclosing_class is not None:
            rest = callee_name[len(_SUPER_PREFIX) :]
            if "." not in rest:
                return self._lookup_method(enclosing_class, rest, include_self=False)
            return None

        if "." in callee_name:
            resolved = self._resolve_typed_call(callee_name, call.caller_qualified_name, result)
            if resolved is not None:
                return resolved

        qualified = self._qualify(callee_name, result)
        if qualified is None:
            return None
        symbol = self._symbol_cache.get(qualified) or self.model.find_by_qualified_name(qualified)
        return self._as_callable(symbol)

    def _resolve_instance_var_call(
        self, rest: str, enclosing_class: Symbol, result: ParseResult
    ) -> Symbol | None:
        """Resolve ``self.<attr>.<method>`` through the attribute's recorded type."""
        attr, _, method_name = rest.partition(".")
        if "." in method_name:
            return None
        for tv in result.typed_vars:
            if tv.name == f"self.{attr}" and tv.scope_qualified_name == enclosing_class.qualified_name:
                return self._method_of_type(tv.type_name, method_name, result)
        return None

    def _resolve_typed_call(
        self, callee_name: str, caller_qualified_name: str, result: ParseResult
    ) -> Symbol | None:
        """Resolve ``var.method`` where ``var`` is an annotated parameter."""
        var_name, _, method_name = callee_name.partition(".")
        if "." in method_name:
            return None
        for tv in result.typed_vars:
            if tv.name == var_name and tv.scope_qualified_name == caller_qualified_name:
                return self._method_of_type(tv.type_name, method_name, result)
        return None

    def _method_of_type(self, type_name: str, method_name: str, result: ParseResult) -> Symbol | None:
        qualified = self._qualify(type_name, result)
        type_symbol = self._symbol_cache.get(qualified) if qualified else None
        if type_symbol is None or type_symbol.kind is not SymbolKind.CLASS:
            return None
        return self._lookup_method(type_symbol, method_name, include_self=True)

    def _lookup_method(self, class_symbol: Symbol, name: str, include_self: bool) -> Symbol | None:
        """Find ``name`` on the class or, failing that, on its bases (breadth first)."""
        visited: set[str] = set()
        pending = [class_symbol]
        first = True
        while pending:
            current = pending.pop(0)
            if current.id in visited:
                continue
            visited.add(current.id)
            if include_self or not first:
                method = self._symbol_cache.get(f"{current.qualified_name}.{name}")
                if method is not None and method.is_callable:
                    return method
            first = False
            for ref in self.model.type_references(current):
                base = self.model.resolve_type(ref, current)
                if base is not None:
                    pending.append(base)
        return None

    def _as_callable(self, symbol: Symbol | None) -> Symbol | None:
        """Callables resolve to themselves, classes to their constructor."""
        if symbol is None:
            return None
        if symbol.is_callable:
            return symbol
        if symbol.kind is SymbolKind.CLASS:
            return self._lookup_method(symbol, "__init__", include_self=True)
        return None

    def _get_enclosing_class(self, qualified_name: str) -> Symbol | None:
        """The class whose method body contains ``qualified_name``."""
        symbol = self._symbol_cache.get(qualified_name)
        while symbol is not None:
            parent = self.model.parent(symbol)
            if parent is not None and parent.kind is SymbolKind.CLASS and symbol.is_callable:
                return parent
            symbol = parent
        return None

