#!/usr/bin/env python3
from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from datetime import date
from pathlib import Path

from airing_catalog.ingestion.pipeline import run_build
from airing_catalog.settings import BuildSettings, SettingsError
from airing_catalog.utils.env import load_env

logger = logging.getLogger("build_catalog")


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="build_catalog",
        description="Rebuild the recently-aired series catalog and per-show meta files.",
    )
    parser.add_argument("--out-dir", default=None, help="Output root (catalog/ and meta/ are created under it).")
    parser.add_argument("--days", type=int, default=None, help="Trailing window length in days (default: 10).")
    parser.add_argument("--today", default=None, help="Anchor date YYYY-MM-DD (default: today, UTC).")
    parser.add_argument("--country", default=None, help="Country for the country-scoped schedule query.")
    parser.add_argument("--concurrency", type=int, default=None, help="Worker threads for provider fetches.")
    parser.add_argument(
        "--conservative-geography",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Exclude shows with no broadcaster country (English web originals excepted).",
    )
    parser.add_argument("--tmdb-pages", type=int, default=None, help="TMDb discover pages to scan (0 disables).")
    parser.add_argument("--updates-limit", type=int, default=None, help="TVmaze updated-show candidates (0 disables).")
    parser.add_argument("--dry-run", action="store_true", help="Collect and build without writing files.")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging.")
    return parser.parse_args(argv)


def _apply_overrides(settings: BuildSettings, args: argparse.Namespace) -> BuildSettings:
    overrides: dict[str, object] = {}
    if args.out_dir is not None:
        overrides["out_dir"] = Path(args.out_dir)
    if args.days is not None:
        overrides["window_days"] = args.days
    if args.country is not None:
        overrides["schedule_country"] = args.country.strip().upper() or None
    if args.concurrency is not None:
        overrides["concurrency"] = args.concurrency
    if args.conservative_geography is not None:
        overrides["conservative_geography"] = args.conservative_geography
    if args.tmdb_pages is not None:
        overrides["tmdb_discovery_pages"] = args.tmdb_pages
    if args.updates_limit is not None:
        overrides["updates_discovery_limit"] = args.updates_limit
    return replace(settings, **overrides) if overrides else settings


def _parse_today(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError as exc:
        raise SettingsError(f"--today must be YYYY-MM-DD, got {value!r}.") from exc


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        load_env()
        settings = _apply_overrides(BuildSettings.from_env(), args)
        summary, _built = run_build(settings, today=_parse_today(args.today), write=not args.dry_run)
    except Exception:
        logger.exception("Catalog build failed")
        return 1

    print(
        "BUILD summary "
        f"today={summary.today} "
        f"registered={summary.registered} "
        f"emitted={summary.emitted} "
        f"omitted={summary.omitted} "
        f"enriched={summary.fallback.enriched} "
        f"dropped={summary.fallback.dropped}"
    )
    if summary.catalog_path is not None:
        print(f"Wrote {summary.catalog_path} and {len(summary.meta_paths)} meta files.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
