from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable, Mapping

from airing_catalog.ingestion.registry import ShowEntry
from airing_catalog.models.catalog import SERIES_TYPE, CatalogEntry, MetaRecord, Video, namespaced_id
from airing_catalog.utils.episodes import clean_html, dedupe_episodes, filter_last_n_days, pick_date

logger = logging.getLogger(__name__)

DEFAULT_ID_SOURCE = "tvmaze"


@dataclass
class CatalogBuild:
    catalog: list[CatalogEntry] = field(default_factory=list)
    metas: list[MetaRecord] = field(default_factory=list)
    omitted: int = 0


def _image_urls(show: Mapping[str, Any]) -> tuple[str | None, str | None]:
    image = show.get("image")
    if not isinstance(image, Mapping):
        return None, None
    medium = image.get("medium") if isinstance(image.get("medium"), str) else None
    original = image.get("original") if isinstance(image.get("original"), str) else None
    return medium or original, original


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    return value if isinstance(value, int) else None


def build_videos(episodes: Iterable[Mapping[str, Any]], *, source: str = DEFAULT_ID_SOURCE) -> list[Video]:
    """Episode projections ordered by effective date; undated episodes sort first."""

    ordered = sorted(episodes, key=lambda ep: pick_date(ep) or "")
    return [
        Video(
            id=namespaced_id(source, ep.get("id")),
            title=ep.get("name") if isinstance(ep.get("name"), str) else None,
            season=_as_int(ep.get("season")),
            episode=_as_int(ep.get("number")),
            released=pick_date(ep),
            overview=clean_html(ep.get("summary")),
        )
        for ep in ordered
    ]


def build_entry(
    entry: ShowEntry,
    *,
    today: date,
    window_days: int,
    source: str = DEFAULT_ID_SOURCE,
) -> tuple[CatalogEntry, MetaRecord] | None:
    """
    Project one registry entry, or None when no episode falls in the window.

    The catalog row only looks at windowed episodes; the meta record lists the
    full deduplicated episode set.
    """

    episodes = dedupe_episodes(entry.episodes)
    entry.episodes = episodes
    recent = filter_last_n_days(episodes, window_days, today)
    if not recent:
        return None

    show = entry.show
    show_id = namespaced_id(source, show.get("id"))
    name = show.get("name") if isinstance(show.get("name"), str) else None
    description = clean_html(show.get("summary"))
    poster, background = _image_urls(show)
    latest_date = max(d for d in (pick_date(ep) for ep in recent) if d)

    catalog_entry = CatalogEntry(
        id=show_id,
        name=name,
        description=description,
        poster=poster,
        background=background,
        latest_date=latest_date,
    )

    show_fields = {key: value for key, value in show.items() if key != "_embedded"}
    show_fields.update(
        {
            "id": show_id,
            "type": SERIES_TYPE,
            "name": name,
            "description": description,
            "poster": poster,
            "background": background,
        }
    )
    meta = MetaRecord(id=show_id, show_fields=show_fields, videos=build_videos(episodes, source=source))
    return catalog_entry, meta


def build_catalog(
    entries: Iterable[ShowEntry],
    *,
    today: date,
    window_days: int,
    source: str = DEFAULT_ID_SOURCE,
) -> CatalogBuild:
    result = CatalogBuild()
    for entry in entries:
        built = build_entry(entry, today=today, window_days=window_days, source=source)
        if built is None:
            result.omitted += 1
            continue
        catalog_entry, meta = built
        result.catalog.append(catalog_entry)
        result.metas.append(meta)

    # Stable sort: equal dates keep discovery order.
    result.catalog.sort(key=lambda item: item.latest_date, reverse=True)
    logger.info(f"Catalog built: shows={len(result.catalog)} omitted={result.omitted}")
    return result
