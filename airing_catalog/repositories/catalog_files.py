from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Iterable

from airing_catalog.models.catalog import CatalogIndex, MetaRecord


def catalog_dir(out_dir: Path) -> Path:
    return out_dir / "catalog" / "series"


def meta_dir(out_dir: Path) -> Path:
    return out_dir / "meta" / "series"


def write_json_atomic(path: Path, payload: Any) -> Path:
    """Write JSON to a temp file beside `path`, then rename it over `path`."""

    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(payload, fh, indent=2, ensure_ascii=False)
            fh.write("\n")
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return path


def write_meta_records(out_dir: Path, metas: Iterable[MetaRecord]) -> list[Path]:
    target_dir = meta_dir(out_dir)
    return [write_json_atomic(target_dir / f"{meta.id}.json", meta.to_dict()) for meta in metas]


def write_catalog_index(out_dir: Path, catalog_name: str, index: CatalogIndex) -> Path:
    return write_json_atomic(catalog_dir(out_dir) / f"{catalog_name}.json", index.to_dict())
