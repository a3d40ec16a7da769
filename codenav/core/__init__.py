"""
Core module: result models, errors, configuration and dispatch.

Models (models.py):
    - ElementReference: a resolved symbol reduced to renderable facts
    - TypeNode / TypeHierarchy: supertype trees and flat subtypes
    - CallNode / CallHierarchy: caller or callee trees
    - SymbolMatch, SuperMethods, Implementation
    - Capability / Direction: query kinds

Exceptions (exceptions.py):
    - CodeNavError: Base exception for all codenav errors
    - SymbolNotFoundError, UnsupportedOperationError, IndexNotReadyError,
      SnapshotError, ParseError

Dispatch:
    - AvailabilityGate (availability.py): memoized per-language probe
    - CapabilityRegistry (registry.py): capability -> language -> backend

Algorithms:
    - traversal.py: bounded supertype ascent, call walks, override chains
    - matching.py: fuzzy name matching and Levenshtein ranking
"""

from codenav.core.availability import AvailabilityGate, plugin_gate
from codenav.core.config import DEFAULT_LIMITS, Limits, get_default_snapshot_path
from codenav.core.exceptions import (
    CodeNavError,
    IndexNotReadyError,
    ParseError,
    SnapshotError,
    SymbolNotFoundError,
    UnsupportedOperationError,
)
from codenav.core.models import (
    CallHierarchy,
    CallNode,
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
from codenav.core.registry import CapabilityRegistry

__all__ = [
    # Models
    "ElementReference",
    "TypeNode",
    "TypeHierarchy",
    "CallNode",
    "CallHierarchy",
    "SymbolMatch",
    "MethodInfo",
    "SuperMethodEntry",
    "SuperMethods",
    "Implementation",
    "Capability",
    "Direction",
    # Exceptions
    "CodeNavError",
    "SymbolNotFoundError",
    "UnsupportedOperationError",
    "IndexNotReadyError",
    "SnapshotError",
    "ParseError",
    # Config
    "Limits",
    "DEFAULT_LIMITS",
    "get_default_snapshot_path",
    # Dispatch
    "AvailabilityGate",
    "plugin_gate",
    "CapabilityRegistry",
]
