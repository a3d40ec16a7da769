"""Python backend."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from codenav.core.availability import plugin_gate
from codenav.core.config import DEFAULT_LIMITS, Limits
from codenav.core.traversal import EdgeOrigin, SuperMethodEdge, SupertypeEdge
from codenav.languages.base import (
    CallHierarchyCapability,
    ImplementationsCapability,
    SuperMethodsCapability,
    SymbolSearchCapability,
    TypeHierarchyCapability,
    register_backend,
)
from codenav.model.base import Symbol, TypeRef
from codenav.model.languages import PYTHON

if TYPE_CHECKING:
    from codenav.core.registry import CapabilityRegistry
    from codenav.model.base import Host, Project

logger = logging.getLogger(__name__)

PLUGIN_ID = "python"

IMPLICIT_ROOTS = frozenset({"object", "builtins.object"})


class PythonBackend(
    TypeHierarchyCapability,
    CallHierarchyCapability,
    ImplementationsCapability,
    SymbolSearchCapability,
    SuperMethodsCapability,
):
    """Classes with multiple inheritance; every class is a plain CLASS."""

    family = "python"
    default_language = PYTHON

    def supertype_edge(
        self, type_symbol: Symbol, ref: TypeRef, project: Project
    ) -> SupertypeEdge | None:
        if ref.name in IMPLICIT_ROOTS or ref.qualified_name in IMPLICIT_ROOTS:
            return None
        resolved = project.model.resolve_type(ref, type_symbol)
        if resolved is None:
            return None
        return SupertypeEdge(self.type_reference(resolved, project), EdgeOrigin.EXTENDS, resolved)

    def super_method_edge(
        self, match: Symbol, owner: Symbol, project: Project
    ) -> SuperMethodEdge:
        return SuperMethodEdge(
            method=match,
            owner_name=owner.qualified_name or owner.name,
            owner_kind="CLASS",
            is_interface=False,
            owner=owner,
        )


def register(
    registry: CapabilityRegistry, host: Host, limits: Limits = DEFAULT_LIMITS
) -> bool:
    """Register the Python backend when the host supports Python."""
    gate = plugin_gate(host, PLUGIN_ID)
    if not gate.is_available():
        logger.info("Python support not available, skipping Python backend")
        return False
    register_backend(registry, PythonBackend(gate, PYTHON, limits))
    return True
