"""
Python source indexer: populates an in-memory code model from .py files.

Components:
    - PythonParser: AST-based parser producing a ParseResult per file
    - Indexer: two-pass driver that declares symbols, then links bases and calls
    - IndexStats: counters and per-file errors from one run

The parser extracts:
    - Declarations: classes, functions, methods, fields and module variables
    - Bases: superclasses as written, qualified through imports
    - Calls: callee expressions with the scope they occur in
    - TypedVars: annotated parameters and attributes, for method resolution
"""

from codenav.indexing.indexer import DEFAULT_EXCLUDES, Indexer
from codenav.indexing.models import IndexStats, ParseResult
from codenav.indexing.python import PythonParser

__all__ = [
    "DEFAULT_EXCLUDES",
    "Indexer",
    "IndexStats",
    "ParseResult",
    "PythonParser",
]
