"""JSON snapshot format for the in-memory code model."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from codenav.core.exceptions import SnapshotError
from codenav.model.base import Parameter, Relation, Symbol, SymbolKind
from codenav.model.languages import DEFAULT_CATALOG, LanguageCatalog
from codenav.model.memory import InMemoryCodeModel

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1

_SITE_KINDS = (SymbolKind.CALL, SymbolKind.REFERENCE)


def model_to_dict(model: InMemoryCodeModel, plugins: list[str] | None = None) -> dict[str, Any]:
    """Serialize a model to the snapshot shape."""
    symbols = [
        _symbol_to_dict(s) for s in model.symbols() if s.kind not in _SITE_KINDS
    ]
    type_refs = [
        {
            "owner": owner.id,
            "name": ref.name,
            "qualified_name": ref.qualified_name,
            "relation": ref.relation.value,
        }
        for owner, ref in model.iter_type_references()
    ]
    calls = []
    for call, target in model.iter_calls():
        calls.append(
            {
                "id": call.id,
                "container": call.parent_id,
                "target": target.id if target is not None else None,
                "line": call.line,
                "text": call.text,
            }
        )
    references = [
        {"container": ref.parent_id, "target": target.id, "line": ref.line, "text": ref.text}
        for ref, target in model.iter_references()
    ]
    return {
        "version": SNAPSHOT_VERSION,
        "plugins": sorted(plugins) if plugins is not None else None,
        "symbols": symbols,
        "type_refs": type_refs,
        "calls": calls,
        "references": references,
    }


def model_from_dict(
    data: dict[str, Any], catalog: LanguageCatalog = DEFAULT_CATALOG
) -> InMemoryCodeModel:
    """Rebuild a model from the snapshot shape.

    Raises:
        SnapshotError: If the data is not a valid snapshot.
    """
    if not isinstance(data, dict):
        raise SnapshotError("Snapshot must be a JSON object")
    version = data.get("version")
    if version != SNAPSHOT_VERSION:
        raise SnapshotError(f"Unsupported snapshot version: {version!r}")

    model = InMemoryCodeModel(catalog=catalog)
    try:
        for raw in data.get("symbols", []):
            model.add(_symbol_from_dict(raw))
        for raw in data.get("type_refs", []):
            owner = _require(model, raw["owner"])
            model.add_type_reference(
                owner,
                raw["name"],
                qualified_name=raw.get("qualified_name"),
                relation=Relation(raw.get("relation", "extends")),
            )
        for raw in data.get("calls", []):
            container = _require(model, raw["container"])
            target = _require(model, raw["target"]) if raw.get("target") else None
            model.add_call(
                container, target, line=raw.get("line"), text=raw.get("text"), id=raw.get("id")
            )
        for raw in data.get("references", []):
            model.add_reference(
                _require(model, raw["container"]),
                _require(model, raw["target"]),
                line=raw.get("line"),
                text=raw.get("text"),
            )
    except (KeyError, TypeError, ValueError) as e:
        raise SnapshotError(f"Malformed snapshot: {e}") from e
    return model


def plugins_from_dict(data: dict[str, Any]) -> frozenset[str] | None:
    """Language plugins recorded in a snapshot, or None when it records none."""
    plugins = data.get("plugins")
    if plugins is None:
        return None
    if not isinstance(plugins, list):
        raise SnapshotError("'plugins' must be a list")
    return frozenset(str(p) for p in plugins)


def save_snapshot(model: InMemoryCodeModel, path: Path, plugins: list[str] | None = None) -> None:
    """Write a snapshot file, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    data = model_to_dict(model, plugins)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    logger.debug("Wrote snapshot with %d symbols to %s", len(data["symbols"]), path)


def read_snapshot(path: Path) -> dict[str, Any]:
    """Read the raw snapshot data."""
    if not path.exists():
        raise SnapshotError(f"No code model snapshot found at {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise SnapshotError(f"Cannot read snapshot {path}: {e}") from e
    if not isinstance(data, dict):
        raise SnapshotError(f"Snapshot {path} is not a JSON object")
    return data


def load_snapshot(path: Path, catalog: LanguageCatalog = DEFAULT_CATALOG) -> InMemoryCodeModel:
    """Load a model from a snapshot file."""
    return model_from_dict(read_snapshot(path), catalog)


def _require(model: InMemoryCodeModel, symbol_id: str) -> Symbol:
    symbol = model.get(symbol_id)
    if symbol is None:
        raise SnapshotError(f"Snapshot refers to unknown symbol {symbol_id!r}")
    return symbol


def _symbol_to_dict(symbol: Symbol) -> dict[str, Any]:
    return {
        "id": symbol.id,
        "name": symbol.name,
        "kind": symbol.kind.value,
        "language": symbol.language,
        "qualified_name": symbol.qualified_name,
        "file": symbol.file,
        "line": symbol.line,
        "end_line": symbol.end_line,
        "parent": symbol.parent_id,
        "modifiers": sorted(symbol.modifiers),
        "parameters": [{"name": p.name, "type": p.type} for p in symbol.parameters],
        "return_type": symbol.return_type,
        "receiver": symbol.receiver,
        "library": symbol.library,
    }


def _symbol_from_dict(raw: dict[str, Any]) -> Symbol:
    kind = SymbolKind(raw["kind"])
    if kind in _SITE_KINDS:
        raise ValueError(f"symbol {raw.get('id')!r} has site kind {kind.value}")
    return Symbol(
        id=raw["id"],
        name=raw["name"],
        kind=kind,
        language=raw["language"],
        qualified_name=raw.get("qualified_name"),
        file=raw.get("file"),
        line=raw.get("line"),
        end_line=raw.get("end_line"),
        parent_id=raw.get("parent"),
        modifiers=frozenset(raw.get("modifiers") or ()),
        parameters=tuple(
            Parameter(p["name"], p.get("type")) for p in raw.get("parameters") or ()
        ),
        return_type=raw.get("return_type"),
        receiver=raw.get("receiver"),
        library=bool(raw.get("library", False)),
    )
