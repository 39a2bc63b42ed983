"""
Drink catalog and popularity loaders.

The catalog is a local JSON file (default: `data/catalogs/drinks.json`) holding
either a list of drinks or `{"drinks": [...]}`. We validate it into typed Pydantic
models so feature/scoring code can assume a consistent shape; a bad category or a
negative ABV fails here, at load time, not during scoring.

Popularity is a JSON object of `drink_id -> like count`.
"""

from __future__ import annotations

import json
import logging
import math
from pathlib import Path

from pydantic import TypeAdapter

from drinkjoy.core.env import resolve_project_path
from drinkjoy.domain.models import Drink

logger = logging.getLogger(__name__)

_DRINKS_ADAPTER = TypeAdapter(list[Drink])


def load_drinks(path: str | Path) -> list[Drink]:
    """Load and validate a drink catalog JSON file."""
    resolved = resolve_project_path(path)
    payload = json.loads(resolved.read_text(encoding="utf-8"))
    if isinstance(payload, dict):
        payload = payload.get("drinks", [])
    drinks = _DRINKS_ADAPTER.validate_python(payload)

    seen: set[str] = set()
    for d in drinks:
        if d.id in seen:
            raise ValueError(f"duplicate drink id in catalog: {d.id!r}")
        seen.add(d.id)
    return drinks


def load_popularity(path: str | Path) -> dict[str, int]:
    """Load a `drink_id -> likes` map; entries that are not finite non-negative numbers are skipped."""
    resolved = resolve_project_path(path)
    payload = json.loads(resolved.read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        return {}
    out: dict[str, int] = {}
    for k, v in payload.items():
        if not isinstance(k, str) or not k.strip():
            continue
        if isinstance(v, bool) or not isinstance(v, (int, float)) or not math.isfinite(v) or v < 0:
            logger.debug("Skipping popularity entry %r=%r", k, v)
            continue
        out[k] = int(v)
    return out
