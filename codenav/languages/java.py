"""Java and Kotlin backend.

Kotlin shares the JVM semantics and is served by a second instance of the
same backend registered under the Kotlin language id.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from codenav.core.availability import plugin_gate
from codenav.core.config import DEFAULT_LIMITS, Limits
from codenav.core.models import ElementReference
from codenav.core.traversal import EdgeOrigin, SupertypeEdge
from codenav.languages.base import (
    CallHierarchyCapability,
    ImplementationsCapability,
    SuperMethodsCapability,
    SymbolSearchCapability,
    TypeHierarchyCapability,
    register_backend,
)
from codenav.model.base import Relation, Symbol, SymbolKind, TypeRef
from codenav.model.languages import JAVA, KOTLIN

if TYPE_CHECKING:
    from codenav.core.registry import CapabilityRegistry
    from codenav.model.base import Host, Project

logger = logging.getLogger(__name__)

PLUGIN_ID = "java"

# Implicit roots that never show up as supertypes
IMPLICIT_ROOTS = frozenset({"java.lang.Object", "kotlin.Any"})

UNRESOLVED_TEXT_LIMIT = 50


class JavaBackend(
    TypeHierarchyCapability,
    CallHierarchyCapability,
    ImplementationsCapability,
    SymbolSearchCapability,
    SuperMethodsCapability,
):
    """Classes, interfaces, enums and records with nominal inheritance."""

    family = "java"
    default_language = JAVA

    def kind_name(self, symbol: Symbol) -> str:
        if symbol.kind is SymbolKind.CLASS and symbol.is_abstract:
            return "ABSTRACT_CLASS"
        return symbol.kind.value

    # -- types --------------------------------------------------------------

    def supertype_references(self, type_symbol: Symbol, project: Project) -> Sequence[TypeRef]:
        refs = project.model.type_references(type_symbol)
        # The superclass comes before implemented interfaces
        return sorted(refs, key=lambda ref: ref.relation is not Relation.EXTENDS)

    def supertype_edge(
        self, type_symbol: Symbol, ref: TypeRef, project: Project
    ) -> SupertypeEdge | None:
        if ref.qualified_name in IMPLICIT_ROOTS or ref.name in IMPLICIT_ROOTS:
            return None
        origin = EdgeOrigin.IMPLEMENTS if ref.relation is Relation.IMPLEMENTS else EdgeOrigin.EXTENDS

        resolved = project.model.resolve_type(ref, type_symbol)
        if resolved is not None:
            if resolved.qualified_name in IMPLICIT_ROOTS:
                return None
            return SupertypeEdge(self.type_reference(resolved, project), origin, resolved)

        # Unresolved supertypes are still shown, as leaves without a location
        element = ElementReference(
            name=ref.qualified_name or ref.name,
            kind="INTERFACE" if origin is EdgeOrigin.IMPLEMENTS else "CLASS",
            language=self.language_name(type_symbol),
            qualified_name=ref.qualified_name,
        )
        return SupertypeEdge(element, origin)

    # -- callables ----------------------------------------------------------

    @staticmethod
    def _parameter_types(fn: Symbol) -> list[str]:
        return [p.type or "?" for p in fn.parameters]

    def callable_name(self, fn: Symbol, project: Project) -> str:
        owner = self.containing_type(fn, project)
        params = ", ".join(self._parameter_types(fn))
        if owner is None:
            return f"{fn.name}({params})"
        return f"{owner.name}.{fn.name}({params})"

    def callable_key(self, fn: Symbol, project: Project) -> str:
        owner = self.containing_type(fn, project)
        prefix = (owner.qualified_name or owner.name) if owner is not None else ""
        return f"{prefix}.{fn.name}({','.join(self._parameter_types(fn))})"

    def unresolved_call(self, text: str) -> ElementReference:
        return ElementReference(
            name=f"{text[:UNRESOLVED_TEXT_LIMIT]}(...) [unresolved]",
            kind="METHOD",
            language=self.catalog.display_name(self.language_id),
        )

    def method_signature(self, fn: Symbol) -> str:
        params = ", ".join(f"{p.type} {p.name}" if p.type else p.name for p in fn.parameters)
        return f"{fn.name}({params}): {fn.return_type or 'void'}"

    def method_matches(self, candidate: Symbol, method: Symbol) -> bool:
        """Same name and arity; parameter types must agree where both are known."""
        if not candidate.is_callable or candidate.name != method.name:
            return False
        if len(candidate.parameters) != len(method.parameters):
            return False
        return all(
            a.type is None or b.type is None or a.type == b.type
            for a, b in zip(candidate.parameters, method.parameters)
        )


def register(
    registry: CapabilityRegistry, host: Host, limits: Limits = DEFAULT_LIMITS
) -> bool:
    """Register the Java and Kotlin backends when the host supports them."""
    gate = plugin_gate(host, PLUGIN_ID)
    if not gate.is_available():
        logger.info("Java support not available, skipping Java and Kotlin backends")
        return False
    register_backend(registry, JavaBackend(gate, JAVA, limits))
    register_backend(registry, JavaBackend(gate, KOTLIN, limits))
    return True
