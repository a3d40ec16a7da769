"""Capability registry: picks the backend serving a query."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any, Protocol

from codenav.core.models import Capability
from codenav.model.languages import DEFAULT_CATALOG, LanguageCatalog

if TYPE_CHECKING:
    from codenav.model.base import Symbol

logger = logging.getLogger(__name__)


class Backend(Protocol):
    """What the registry needs to know about a backend."""

    language_id: str

    def is_available(self) -> bool: ...

    def can_handle(self, element: Symbol) -> bool: ...


class CapabilityRegistry:
    """Per capability, a map of language id -> backend.

    Registration takes a lock; lookups never do. Each write replaces the
    per-capability dict wholesale, so readers always see a complete map.
    """

    def __init__(self, catalog: LanguageCatalog = DEFAULT_CATALOG) -> None:
        self.catalog = catalog
        self._lock = threading.Lock()
        self._backends: dict[Capability, dict[str, Any]] = {c: {} for c in Capability}

    def register(self, capability: Capability, language_id: str, backend: Any) -> None:
        """Register ``backend``; the last registration for a language wins."""
        with self._lock:
            updated = dict(self._backends[capability])
            if language_id in updated:
                logger.info("Replacing %s backend for %s", capability.value, language_id)
            updated[language_id] = backend
            self._backends[capability] = updated
        logger.info("Registered %s backend for %s", capability.value, language_id)

    def resolve(self, capability: Capability, element: Symbol) -> Any | None:
        """Backend for ``element``, or None when the capability does not apply.

        Order: exact language match, the language's base dialect chain, then
        any available backend that accepts the element.
        """
        backends = self._backends[capability]
        language_id = element.language

        backend = backends.get(language_id)
        if backend is not None and _accepts(backend, element):
            return backend

        seen = {language_id}
        base = self.catalog.base_of(language_id)
        while base is not None and base not in seen:
            seen.add(base)
            backend = backends.get(base)
            if backend is not None and _accepts(backend, element):
                logger.debug("Resolved %s for %s via base %s", capability.value, language_id, base)
                return backend
            base = self.catalog.base_of(base)

        for candidate in backends.values():
            if _accepts(candidate, element):
                return candidate
        return None

    def all_available(self, capability: Capability) -> list[Any]:
        """Every available backend registered for ``capability``."""
        return [b for b in self._backends[capability].values() if b.is_available()]

    def has_backends(self, capability: Capability) -> bool:
        return any(b.is_available() for b in self._backends[capability].values())

    def supported_languages(self, capability: Capability) -> list[str]:
        """Language ids with an available backend for ``capability``."""
        return [
            language_id
            for language_id, backend in self._backends[capability].items()
            if backend.is_available()
        ]

    def clear(self) -> None:
        with self._lock:
            self._backends = {c: {} for c in Capability}


def _accepts(backend: Backend, element: Symbol) -> bool:
    return bool(backend.is_available() and backend.can_handle(element))
