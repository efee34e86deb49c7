from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Sequence

from airing_catalog.ingestion.classifier import ContentClassifier
from airing_catalog.ingestion.registry import ShowRegistry
from airing_catalog.integrations.tvmaze.client import (
    ScheduleVariant,
    TvmazeClient,
    default_schedule_variants,
    show_from_schedule_item,
)
from airing_catalog.utils.concurrency import map_in_order
from airing_catalog.utils.episodes import trailing_days

logger = logging.getLogger(__name__)


@dataclass
class DiscoverySummary:
    requests: int = 0
    episodes_seen: int = 0
    episodes_added: int = 0
    skipped_no_show: int = 0
    skipped_excluded: int = 0
    exclusions: dict[str, int] = field(default_factory=dict)


def discover_from_schedules(
    client: TvmazeClient,
    classifier: ContentClassifier,
    registry: ShowRegistry,
    *,
    today: date,
    window_days: int,
    variants: Sequence[ScheduleVariant] | None = None,
    concurrency: int = 1,
) -> DiscoverySummary:
    """
    Walk every (day, schedule variant) pair of the trailing window and register
    the shows behind the returned episodes.

    Episodes are appended as-is; duplicates across variants are collapsed later
    when the catalog is built.
    """

    variants = list(variants) if variants is not None else default_schedule_variants()
    pairs = [(day, variant) for day in trailing_days(today, window_days) for variant in variants]

    def _fetch(pair: tuple[date, ScheduleVariant]) -> list[dict[str, Any]]:
        day, variant = pair
        return client.schedule(variant, day)

    summary = DiscoverySummary(requests=len(pairs))
    for (day, variant), items in zip(pairs, map_in_order(_fetch, pairs, concurrency=concurrency)):
        logger.debug(f"schedule {variant.name} {day.isoformat()}: {len(items)} episodes")
        for item in items:
            summary.episodes_seen += 1
            show = show_from_schedule_item(item)
            if show is None:
                summary.skipped_no_show += 1
                continue
            reason = classifier.exclusion_reason(show)
            if reason is not None:
                summary.skipped_excluded += 1
                summary.exclusions[reason] = summary.exclusions.get(reason, 0) + 1
                continue
            registry.add_episode(show, item)
            summary.episodes_added += 1

    logger.info(
        f"Schedule discovery: requests={summary.requests} episodes={summary.episodes_added} "
        f"shows={len(registry)} excluded={summary.skipped_excluded}"
    )
    return summary
