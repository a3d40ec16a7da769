"""Traversal limits and default paths."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path

ENV_PREFIX = "CODENAV_"


@dataclass(frozen=True)
class Limits:
    """Caps that keep every traversal finite.

    Each field can be overridden from the environment with the upper-cased
    field name prefixed by ``CODENAV_`` (for example
    ``CODENAV_MAX_RESULTS_PER_LEVEL=50``).
    """

    max_hierarchy_depth: int = 50
    max_subtypes: int = 100
    max_results_per_level: int = 20
    max_stack_depth: int = 50
    max_super_methods: int = 10
    max_implementations: int = 100

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> Limits:
        """Build limits from ``CODENAV_*`` variables, ignoring unset ones."""
        env = os.environ if environ is None else environ
        overrides: dict[str, int] = {}
        for f in fields(cls):
            raw = env.get(ENV_PREFIX + f.name.upper())
            if raw is None or not raw.strip():
                continue
            try:
                value = int(raw)
            except ValueError as e:
                raise ValueError(f"{ENV_PREFIX}{f.name.upper()} must be an integer, got {raw!r}") from e
            if value < 1:
                raise ValueError(f"{ENV_PREFIX}{f.name.upper()} must be positive, got {value}")
            overrides[f.name] = value
        return cls(**overrides)


DEFAULT_LIMITS = Limits()


def get_default_snapshot_path(project_root: Path) -> Path:
    """Get the default code model snapshot path for a project."""
    return project_root / ".codenav" / "model.json"
