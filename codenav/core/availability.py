"""Per-language availability gate."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from codenav.model.base import Host

logger = logging.getLogger(__name__)

Probe = Callable[[], bool]


class AvailabilityGate:
    """Memoized "is semantic support for this language present" check.

    The probe runs at most once per gate. A probe that raises reports the
    language as unavailable; ``is_available`` itself never raises.
    """

    __slots__ = ("name", "_probe", "_lock", "_value")

    def __init__(self, name: str, probe: Probe) -> None:
        self.name = name
        self._probe = probe
        self._lock = threading.Lock()
        self._value: bool | None = None

    def is_available(self) -> bool:
        value = self._value
        if value is not None:
            return value
        with self._lock:
            if self._value is None:
                self._value = self._run_probe()
            return self._value

    def _run_probe(self) -> bool:
        try:
            available = bool(self._probe())
        except Exception as e:
            logger.warning("Availability check for %s failed: %s", self.name, e)
            return False
        logger.debug("%s support available: %s", self.name, available)
        return available

    def __repr__(self) -> str:
        state = "unknown" if self._value is None else str(self._value)
        return f"AvailabilityGate({self.name!r}, available={state})"


def plugin_gate(host: Host, plugin_id: str) -> AvailabilityGate:
    """Gate asking ``host`` whether ``plugin_id`` is enabled."""
    return AvailabilityGate(plugin_id, lambda: host.is_plugin_enabled(plugin_id))
