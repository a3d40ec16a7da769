"""
Code model boundary: what the backends navigate.

The core never parses or resolves source; it asks a code model.

Boundary (base.py):
    - Symbol: opaque handle to one resolved element
    - TypeRef: a supertype as written on a declaration
    - CodeModel / Host: protocols a host implements
    - Project: a model plus its root directory

Languages (languages.py):
    - Language ids, families and dialect fallbacks (DEFAULT_CATALOG)

Reference implementation:
    - InMemoryCodeModel: adjacency-list model built by indexers and tests
    - snapshot: JSON persistence in .codenav/model.json
"""

from codenav.model.base import (
    CALLABLE_KINDS,
    TYPE_KINDS,
    CodeModel,
    Host,
    Parameter,
    Project,
    Relation,
    StaticHost,
    Symbol,
    SymbolKind,
    TypeRef,
)
from codenav.model.languages import DEFAULT_CATALOG, Language, LanguageCatalog
from codenav.model.memory import InMemoryCodeModel
from codenav.model.snapshot import load_snapshot, save_snapshot

__all__ = [
    # Boundary
    "Symbol",
    "SymbolKind",
    "Parameter",
    "TypeRef",
    "Relation",
    "CodeModel",
    "Host",
    "StaticHost",
    "Project",
    "TYPE_KINDS",
    "CALLABLE_KINDS",
    # Languages
    "Language",
    "LanguageCatalog",
    "DEFAULT_CATALOG",
    # Reference implementation
    "InMemoryCodeModel",
    "load_snapshot",
    "save_snapshot",
]
