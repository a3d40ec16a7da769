"""
Language backends.

Each module contributes one backend class and a ``register`` function that
adds it to a CapabilityRegistry when the host has the language enabled:

    - java: Java and Kotlin
    - go: Go (embedding and implicit interfaces)
    - python: Python
    - javascript: JavaScript and TypeScript, including JSX/TSX
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from codenav.core.config import DEFAULT_LIMITS, Limits
from codenav.languages import go, java, javascript, python
from codenav.languages.base import (
    CallHierarchyCapability,
    ImplementationsCapability,
    LanguageBackend,
    SuperMethodsCapability,
    SymbolSearchCapability,
    TypeHierarchyCapability,
    register_backend,
)
from codenav.languages.go import GoBackend
from codenav.languages.java import JavaBackend
from codenav.languages.javascript import JavaScriptBackend
from codenav.languages.python import PythonBackend

if TYPE_CHECKING:
    from codenav.core.registry import CapabilityRegistry
    from codenav.model.base import Host

logger = logging.getLogger(__name__)

_MODULES = (java, python, javascript, go)


def register_default_backends(
    registry: CapabilityRegistry, host: Host, limits: Limits = DEFAULT_LIMITS
) -> list[str]:
    """Register every backend whose language the host supports.

    Returns the plugin ids that were registered.
    """
    registered = []
    for module in _MODULES:
        if module.register(registry, host, limits):
            registered.append(module.PLUGIN_ID)
    logger.info("Registered backends for: %s", ", ".join(registered) or "none")
    return registered


__all__ = [
    "LanguageBackend",
    "TypeHierarchyCapability",
    "CallHierarchyCapability",
    "ImplementationsCapability",
    "SymbolSearchCapability",
    "SuperMethodsCapability",
    "JavaBackend",
    "GoBackend",
    "PythonBackend",
    "JavaScriptBackend",
    "register_backend",
    "register_default_backends",
]
