"""JavaScript and TypeScript backend.

One implementation serves both; the TypeScript instance is registered under
its own id, and JSX/TSX dialects reach these backends through the
registry's base-language fallback.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from codenav.core.availability import plugin_gate
from codenav.core.config import DEFAULT_LIMITS, Limits
from codenav.core.traversal import EdgeOrigin, SupertypeEdge
from codenav.languages.base import (
    CallHierarchyCapability,
    ImplementationsCapability,
    SuperMethodsCapability,
    SymbolSearchCapability,
    TypeHierarchyCapability,
    register_backend,
)
from codenav.model.base import Relation, Symbol, TypeRef
from codenav.model.languages import JAVASCRIPT, TYPESCRIPT

if TYPE_CHECKING:
    from codenav.core.registry import CapabilityRegistry
    from codenav.model.base import Host, Project

logger = logging.getLogger(__name__)

PLUGIN_ID = "javascript"


class JavaScriptBackend(
    TypeHierarchyCapability,
    CallHierarchyCapability,
    ImplementationsCapability,
    SymbolSearchCapability,
    SuperMethodsCapability,
):
    """ES classes plus TypeScript interfaces."""

    family = "javascript"
    default_language = JAVASCRIPT

    def supertype_references(self, type_symbol: Symbol, project: Project) -> Sequence[TypeRef]:
        refs = project.model.type_references(type_symbol)
        return sorted(refs, key=lambda ref: ref.relation is not Relation.EXTENDS)

    def supertype_edge(
        self, type_symbol: Symbol, ref: TypeRef, project: Project
    ) -> SupertypeEdge | None:
        resolved = project.model.resolve_type(ref, type_symbol)
        if resolved is None:
            return None
        origin = EdgeOrigin.IMPLEMENTS if ref.relation is Relation.IMPLEMENTS else EdgeOrigin.EXTENDS
        return SupertypeEdge(self.type_reference(resolved, project), origin, resolved)

    def callable_key(self, fn: Symbol, project: Project) -> str:
        return f"{fn.file}:{fn.qualified_name or fn.name}"

    def method_signature(self, fn: Symbol) -> str:
        params = ", ".join(f"{p.name}: {p.type}" if p.type else p.name for p in fn.parameters)
        signature = f"{fn.name}({params})"
        if fn.return_type:
            signature += f": {fn.return_type}"
        return signature


def register(
    registry: CapabilityRegistry, host: Host, limits: Limits = DEFAULT_LIMITS
) -> bool:
    """Register the JavaScript and TypeScript backends when the host supports them."""
    gate = plugin_gate(host, PLUGIN_ID)
    if not gate.is_available():
        logger.info("JavaScript support not available, skipping JavaScript and TypeScript backends")
        return False
    register_backend(registry, JavaScriptBackend(gate, JAVASCRIPT, limits))
    register_backend(registry, JavaScriptBackend(gate, TYPESCRIPT, limits))
    return True
