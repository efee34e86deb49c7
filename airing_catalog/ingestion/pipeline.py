from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from pathlib import Path

from airing_catalog.ingestion.catalog_builder import CatalogBuild, build_catalog
from airing_catalog.ingestion.classifier import ContentClassifier, default_rules
from airing_catalog.ingestion.fallback_resolver import FallbackResolver, FallbackSummary
from airing_catalog.ingestion.registry import ShowRegistry
from airing_catalog.ingestion.schedule_discovery import DiscoverySummary, discover_from_schedules
from airing_catalog.integrations.fetcher import JsonFetcher, ThrottledFetcher
from airing_catalog.integrations.tmdb.client import TmdbClient
from airing_catalog.integrations.tvmaze.client import TVMAZE_PROVIDER, TvmazeClient, default_schedule_variants
from airing_catalog.models.catalog import CatalogIndex
from airing_catalog.repositories.catalog_files import write_catalog_index, write_meta_records
from airing_catalog.settings import BuildSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildSummary:
    today: str
    registered: int
    emitted: int
    omitted: int
    discovery: DiscoverySummary
    fallback: FallbackSummary
    catalog_path: Path | None = None
    meta_paths: list[Path] = field(default_factory=list)


def _now_ms() -> int:
    return int(datetime.now(UTC).timestamp() * 1000)


def _today_utc() -> date:
    return datetime.now(UTC).date()


def build_fetcher(settings: BuildSettings) -> ThrottledFetcher:
    return ThrottledFetcher(
        min_intervals={TVMAZE_PROVIDER: settings.tvmaze_min_interval_ms / 1000.0},
        max_retries=settings.max_retries,
        backoff_seconds=settings.backoff_ms / 1000.0,
        timeout_seconds=settings.timeout_seconds,
    )


def build_classifier(settings: BuildSettings) -> ContentClassifier:
    return ContentClassifier(
        default_rules(
            conservative_geography=settings.conservative_geography,
            blocked_broadcasters=settings.blocked_broadcasters,
            blocked_broadcaster_substrings=settings.blocked_broadcaster_substrings,
        )
    )


def collect_shows(
    settings: BuildSettings,
    *,
    fetcher: JsonFetcher,
    today: date,
    classifier: ContentClassifier | None = None,
) -> tuple[ShowRegistry, DiscoverySummary, FallbackSummary]:
    """Run schedule discovery and every fallback pass into a fresh registry."""

    classifier = classifier or build_classifier(settings)
    tvmaze = TvmazeClient(fetcher)
    tmdb = TmdbClient(fetcher, api_key=settings.tmdb_api_key) if settings.tmdb_api_key else None
    registry = ShowRegistry()

    discovery = discover_from_schedules(
        tvmaze,
        classifier,
        registry,
        today=today,
        window_days=settings.window_days,
        variants=default_schedule_variants(settings.schedule_country),
        concurrency=settings.concurrency,
    )
    resolver = FallbackResolver(
        tvmaze,
        classifier,
        registry,
        today=today,
        window_days=settings.window_days,
        tmdb=tmdb,
        concurrency=settings.concurrency,
    )
    fallback = resolver.run(
        tmdb_pages=settings.tmdb_discovery_pages if tmdb is not None else 0,
        updates_limit=settings.updates_discovery_limit,
    )
    return registry, discovery, fallback


def run_build(
    settings: BuildSettings,
    *,
    fetcher: JsonFetcher | None = None,
    today: date | None = None,
    now_ms: int | None = None,
    write: bool = True,
) -> tuple[BuildSummary, CatalogBuild]:
    """
    Rebuild the catalog from scratch for the trailing window ending `today`.

    Detail records are written first; the catalog index is written only once
    every detail record is on disk.
    """

    today = today or _today_utc()
    fetcher = fetcher or build_fetcher(settings)
    logger.info(f"Building catalog for {today.isoformat()} (window={settings.window_days} days)")

    registry, discovery, fallback = collect_shows(settings, fetcher=fetcher, today=today)
    built = build_catalog(registry.entries(), today=today, window_days=settings.window_days)

    catalog_path: Path | None = None
    meta_paths: list[Path] = []
    if write:
        meta_paths = write_meta_records(settings.out_dir, built.metas)
        index = CatalogIndex(metas=built.catalog, ts=now_ms if now_ms is not None else _now_ms())
        catalog_path = write_catalog_index(settings.out_dir, settings.catalog_name, index)

    summary = BuildSummary(
        today=today.isoformat(),
        registered=len(registry),
        emitted=len(built.catalog),
        omitted=built.omitted,
        discovery=discovery,
        fallback=fallback,
        catalog_path=catalog_path,
        meta_paths=meta_paths,
    )
    return summary, built
