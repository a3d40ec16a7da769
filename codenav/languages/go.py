"""Go backend.

Go has no inheritance. The type graph is built from embedding: a struct's
supertypes are its embedded fields, an interface's are its embedded
interfaces. Interfaces are satisfied implicitly, so "implementations" and
"super methods" look at method sets instead of declared relations.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
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
from codenav.model.base import TYPE_KINDS, Relation, Symbol, SymbolKind, TypeRef
from codenav.model.languages import GO
from codenav.model.memory import receiver_base

if TYPE_CHECKING:
    from codenav.core.registry import CapabilityRegistry
    from codenav.model.base import Host, Project

logger = logging.getLogger(__name__)

PLUGIN_ID = "go"


class GoBackend(
    TypeHierarchyCapability,
    CallHierarchyCapability,
    ImplementationsCapability,
    SymbolSearchCapability,
    SuperMethodsCapability,
):
    """Structs, interfaces and receiver methods."""

    family = "go"
    default_language = GO

    # -- types --------------------------------------------------------------

    def supertype_references(self, type_symbol: Symbol, project: Project) -> Sequence[TypeRef]:
        return [
            ref
            for ref in project.model.type_references(type_symbol)
            if ref.relation is Relation.EMBEDS
        ]

    def supertype_edge(
        self, type_symbol: Symbol, ref: TypeRef, project: Project
    ) -> SupertypeEdge | None:
        # Embedded types from outside the model are not reported
        resolved = project.model.resolve_type(ref, type_symbol)
        if resolved is None or not resolved.is_type:
            return None
        return SupertypeEdge(self.type_reference(resolved, project), EdgeOrigin.EMBEDS, resolved)

    def has_implementations(self, type_symbol: Symbol) -> bool:
        return type_symbol.kind is SymbolKind.INTERFACE

    # -- callables ----------------------------------------------------------

    def containing_type(self, fn: Symbol, project: Project) -> Symbol | None:
        if fn.receiver is None:
            return project.model.containing(fn, TYPE_KINDS)
        return project.model.resolve_type(TypeRef(receiver_base(fn.receiver)), fn)

    def callable_name(self, fn: Symbol, project: Project) -> str:
        if fn.receiver is not None:
            return f"{receiver_base(fn.receiver)}.{fn.name}"
        return super().callable_name(fn, project)

    def callable_key(self, fn: Symbol, project: Project) -> str:
        return f"{fn.file}:{fn.line}:{fn.name}"

    def method_signature(self, fn: Symbol) -> str:
        params = ", ".join(f"{p.name} {p.type}" if p.type else p.name for p in fn.parameters)
        signature = f"{fn.name}({params})"
        if fn.return_type:
            signature += f" {fn.return_type}"
        return signature

    # -- super methods ------------------------------------------------------

    def accepts_method(self, fn: Symbol) -> bool:
        return fn.receiver is not None

    def direct_super_methods(self, method: Symbol, project: Project) -> Iterator[SuperMethodEdge]:
        """Promoted methods of embedded types, then satisfied interface methods."""
        if method.receiver is None:
            return
        receiver_type = self.containing_type(method, project)
        if receiver_type is None:
            return

        yield from super().direct_super_methods(method, project)
        yield from self._interface_methods(method, receiver_type, project)

    def _interface_methods(
        self, method: Symbol, receiver_type: Symbol, project: Project
    ) -> Iterator[SuperMethodEdge]:
        model = project.model
        seen: set[str] = set()
        for candidate in model.declarations_named(method.name):
            if not candidate.is_callable or candidate.receiver is not None:
                continue
            if not self.handles_language(candidate.language):
                continue
            interface = model.containing(candidate, TYPE_KINDS)
            if interface is None or interface.kind is not SymbolKind.INTERFACE:
                continue
            if interface.id in seen:
                continue
            seen.add(interface.id)
            if any(t == receiver_type for t in model.inheritors(interface)):
                yield SuperMethodEdge(
                    method=candidate,
                    owner_name=interface.qualified_name or interface.name,
                    owner_kind=self.kind_name(interface),
                    is_interface=True,
                    owner=interface,
                )


def register(
    registry: CapabilityRegistry, host: Host, limits: Limits = DEFAULT_LIMITS
) -> bool:
    """Register the Go backend when the host supports Go."""
    gate = plugin_gate(host, PLUGIN_ID)
    if not gate.is_available():
        logger.info("Go support not available, skipping Go backend")
        return False
    register_backend(registry, GoBackend(gate, GO, limits))
    return True
