"""
Offline catalog import.

Bar staff maintain one JSON file per category (beer.json, wine.json, ...). This
script validates those rows and merges them into the catalog the matcher reads
(default: `data/catalogs/drinks.json`). Invalid rows, and rows filed under the
wrong category, are reported and skipped; the catalog is always rewritten as a
valid `{"drinks": [...]}` document sorted by id.

Usage:
  python scripts/catalog_import.py --in-dir data/raw/menu
  python scripts/catalog_import.py --in-dir data/raw/menu --merge overwrite
"""

from __future__ import annotations

import argparse
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter, ValidationError

from drinkjoy.core.env import resolve_project_path
from drinkjoy.domain.models import Drink

# Source file -> the only category its rows may declare.
CATEGORY_FILES: dict[str, str] = {
    "beer.json": "beer",
    "wine.json": "wine",
    "cocktails.json": "cocktail",
    "spirits.json": "spirit",
    "non-alcoholic.json": "non-alcoholic",
}

_DRINK = TypeAdapter(Drink)


@dataclass
class ImportStats:
    read: int = 0
    added: int = 0
    updated: int = 0
    kept: int = 0
    rejected: int = 0


def read_rows(path: Path) -> list[dict[str, Any]]:
    """Rows from a JSON array or a `{"drinks": [...]}` document."""
    payload = json.loads(path.read_text(encoding="utf-8"))
    rows = payload.get("drinks", []) if isinstance(payload, dict) else payload
    if not isinstance(rows, list):
        raise ValueError(f"{path}: expected a JSON array or {{'drinks': [...]}}")
    return [r for r in rows if isinstance(r, dict)]


def merge_category_file(
    catalog: dict[str, dict[str, Any]],
    path: Path,
    category: str,
    *,
    overwrite: bool,
    stats: ImportStats,
) -> None:
    for row in read_rows(path):
        stats.read += 1
        try:
            drink = _DRINK.validate_python(row)
        except ValidationError as exc:
            stats.rejected += 1
            print(f"  rejected {row.get('id')!r}: {exc.error_count()} validation error(s)")
            continue
        if drink.category != category:
            stats.rejected += 1
            print(f"  rejected {drink.id!r}: category {drink.category!r} filed in {path.name}")
            continue

        record = drink.model_dump(mode="json", exclude_none=True)
        if drink.id not in catalog:
            catalog[drink.id] = record
            stats.added += 1
        elif overwrite:
            catalog[drink.id] = record
            stats.updated += 1
        else:
            stats.kept += 1


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Merge per-category drink files into the catalog (offline).")
    p.add_argument("--catalog", default="data/catalogs/drinks.json")
    p.add_argument("--in-dir", required=True, help="Directory holding beer.json, wine.json, cocktails.json, ...")
    p.add_argument("--merge", choices=["keep-existing", "overwrite"], default="keep-existing")
    args = p.parse_args(argv)

    catalog_path = resolve_project_path(args.catalog)
    in_dir = resolve_project_path(args.in_dir)

    catalog: dict[str, dict[str, Any]] = {}
    if catalog_path.exists():
        for row in read_rows(catalog_path):
            if row.get("id"):
                catalog[str(row["id"])] = row

    stats = ImportStats()
    for filename, category in CATEGORY_FILES.items():
        path = in_dir / filename
        if not path.exists():
            print(f"{filename}: not found, skipped")
            continue
        print(f"{filename}:")
        merge_category_file(catalog, path, category, overwrite=args.merge == "overwrite", stats=stats)

    catalog_path.parent.mkdir(parents=True, exist_ok=True)
    document = {"drinks": [catalog[k] for k in sorted(catalog)]}
    catalog_path.write_text(json.dumps(document, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")

    print(f"Wrote {len(catalog)} drinks to {catalog_path}")
    print(
        f"read={stats.read} added={stats.added} updated={stats.updated} "
        f"kept={stats.kept} rejected={stats.rejected}"
    )
    return 1 if stats.rejected and not (stats.added or stats.updated) else 0


if __name__ == "__main__":
    raise SystemExit(main())
