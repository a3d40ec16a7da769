"""Request routing: resolve a target, pick a backend, run the query.

The CLI and the MCP server both go through :class:`Navigator`; it owns the
steps the backends leave to the caller (target lookup, the indexing-complete
check, cross-backend aggregation of search results).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from codenav.core.config import DEFAULT_LIMITS, Limits
from codenav.core.exceptions import SymbolNotFoundError
from codenav.core.matching import rank_matches
from codenav.core.models import (
    CallHierarchy,
    Capability,
    Direction,
    Implementation,
    SuperMethods,
    SymbolMatch,
    TypeHierarchy,
)
from codenav.core.registry import CapabilityRegistry
from codenav.languages import register_default_backends
from codenav.model.base import DECLARATION_KINDS, Host, Project, StaticHost, Symbol
from codenav.model.languages import DEFAULT_CATALOG
from codenav.model.snapshot import model_from_dict, plugins_from_dict, read_snapshot

logger = logging.getLogger(__name__)


class Navigator:
    """Facade over one project and one capability registry."""

    def __init__(
        self,
        project: Project,
        registry: CapabilityRegistry | None = None,
        host: Host | None = None,
        limits: Limits = DEFAULT_LIMITS,
    ) -> None:
        self.project = project
        self.limits = limits
        if registry is None:
            registry = CapabilityRegistry()
            register_default_backends(registry, host or StaticHost(), limits)
        self.registry = registry

    @classmethod
    def from_snapshot(
        cls,
        path: Path,
        base_path: Path | None = None,
        limits: Limits = DEFAULT_LIMITS,
    ) -> Navigator:
        """Build a navigator over a saved model.

        The snapshot's plugin list decides which backends are available;
        a snapshot without one enables every language family.

        Raises:
            SnapshotError: If the file is missing or malformed
        """
        data = read_snapshot(path)
        model = model_from_dict(data, DEFAULT_CATALOG)
        plugins = plugins_from_dict(data)
        host = StaticHost(plugins) if plugins is not None else StaticHost()
        root = base_path or path.parent.parent
        project = Project(model, base_path=root, name=root.name)
        return cls(project, host=host, limits=limits)

    # -- target resolution --------------------------------------------------

    def resolve(
        self,
        target: str | None = None,
        file: str | None = None,
        line: int | None = None,
        column: int = 0,
    ) -> Symbol:
        """Element named by ``target`` or found at ``file:line``.

        ``target`` may be a qualified name (``pkg.mod.Class.method``), a
        dotted suffix of one (``Class.method``) or a simple name.

        Raises:
            SymbolNotFoundError: If nothing matches
        """
        model = self.project.model
        if file is not None and line is not None:
            path = file.replace("\\", "/")
            if Path(path).is_absolute():
                path = self.project.relative_path(path) or path
            element = model.element_at(path, line, column)
            if element is None:
                raise SymbolNotFoundError(f"No element at {file}:{line}")
            return element

        if not target:
            raise SymbolNotFoundError("Give a symbol name or --file and --line")

        element = model.find_by_qualified_name(target)
        if element is not None:
            return element

        simple = target.rsplit(".", 1)[-1]
        candidates = [
            s
            for s in model.declarations_named(simple, include_libraries=True)
            if s.kind in DECLARATION_KINDS
        ]
        if "." in target:
            suffix = f".{target}"
            candidates = [s for s in candidates if (s.qualified_name or "").endswith(suffix)]
        if not candidates:
            raise SymbolNotFoundError(f"No symbol found matching '{target}'")
        if len(candidates) > 1:
            logger.debug("'%s' is ambiguous (%d matches), using the first", target, len(candidates))
        # Project declarations before library ones
        return min(candidates, key=lambda s: s.library)

    # -- queries ------------------------------------------------------------

    def _backend(self, capability: Capability, element: Symbol) -> Any | None:
        self.project.ensure_ready()
        backend = self.registry.resolve(capability, element)
        if backend is None:
            logger.debug("No %s backend for %s (%s)", capability.value, element.name, element.language)
        return backend

    def type_hierarchy(self, element: Symbol) -> TypeHierarchy | None:
        backend = self._backend(Capability.TYPE_HIERARCHY, element)
        return backend.type_hierarchy(element, self.project) if backend else None

    def call_hierarchy(
        self, element: Symbol, direction: Direction | str = Direction.CALLERS, depth: int = 3
    ) -> CallHierarchy | None:
        backend = self._backend(Capability.CALL_HIERARCHY, element)
        if backend is None:
            return None
        return backend.call_hierarchy(element, self.project, direction, depth)

    def implementations(self, element: Symbol) -> list[Implementation] | None:
        backend = self._backend(Capability.IMPLEMENTATIONS, element)
        return backend.find_implementations(element, self.project) if backend else None

    def super_methods(self, element: Symbol) -> SuperMethods | None:
        backend = self._backend(Capability.SUPER_METHODS, element)
        return backend.find_super_methods(element, self.project) if backend else None

    def find_symbols(
        self, pattern: str, include_libraries: bool = False, limit: int = 20
    ) -> list[SymbolMatch]:
        """Search every available backend and merge the ranked results."""
        self.project.ensure_ready()
        query = pattern.strip()
        if not query:
            return []

        merged: list[SymbolMatch] = []
        seen: set[str] = set()
        for backend in self.registry.all_available(Capability.SYMBOL_SEARCH):
            for match in backend.search_symbols(self.project, query, include_libraries, limit):
                key = f"{match.file}:{match.line}:{match.name}"
                if key not in seen:
                    seen.add(key)
                    merged.append(match)
        return rank_matches(merged, query, lambda m: m.name)[:limit]

    def languages(self) -> dict[str, list[str]]:
        """Capability -> display names of the languages serving it."""
        result: dict[str, list[str]] = {}
        for capability in Capability:
            names: list[str] = []
            for language_id in self.registry.supported_languages(capability):
                name = DEFAULT_CATALOG.display_name(language_id)
                if name not in names:
                    names.append(name)
            result[capability.value] = names
        return result
