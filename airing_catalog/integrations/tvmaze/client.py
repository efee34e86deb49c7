from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Mapping

from airing_catalog.integrations.fetcher import JsonFetcher

TVMAZE_API_BASE_URL = "https://api.tvmaze.com"
TVMAZE_PROVIDER = "tvmaze"


@dataclass(frozen=True)
class ScheduleVariant:
    """One by-date schedule query (`/schedule`, `/schedule/web`, `/schedule/full`)."""

    name: str
    path: str
    params: Mapping[str, str] = field(default_factory=dict)


def default_schedule_variants(country: str | None = "US") -> list[ScheduleVariant]:
    country_params = {"country": country} if country else {}
    return [
        ScheduleVariant("country", "/schedule", country_params),
        ScheduleVariant("web", "/schedule/web"),
        ScheduleVariant("full", "/schedule/full"),
    ]


def _as_list(payload: Any) -> list[dict[str, Any]]:
    if not isinstance(payload, list):
        return []
    return [item for item in payload if isinstance(item, dict)]


def _as_object(payload: Any) -> dict[str, Any] | None:
    return payload if isinstance(payload, dict) else None


class TvmazeClient:
    """
    Primary provider operations used by the pipeline.

    Every method soft-fails: a missing or malformed response is returned as an
    empty list / `None`, never raised.
    """

    def __init__(self, fetcher: JsonFetcher, *, base_url: str = TVMAZE_API_BASE_URL) -> None:
        self._fetcher = fetcher
        self._base_url = base_url.rstrip("/")

    def _get(self, path: str, params: Mapping[str, Any] | None = None) -> Any | None:
        return self._fetcher.fetch(f"{self._base_url}{path}", provider=TVMAZE_PROVIDER, params=params or None)

    def schedule(self, variant: ScheduleVariant, day: date) -> list[dict[str, Any]]:
        params = {**variant.params, "date": day.isoformat()}
        return _as_list(self._get(variant.path, params))

    def generic_schedule(self, day: date) -> list[dict[str, Any]]:
        return _as_list(self._get("/schedule", {"date": day.isoformat()}))

    def episodes_by_date(self, show_id: int, day: date) -> list[dict[str, Any]]:
        return _as_list(self._get(f"/shows/{int(show_id)}/episodesbydate", {"date": day.isoformat()}))

    def lookup_show(self, *, imdb: str | None = None, thetvdb: int | None = None) -> dict[str, Any] | None:
        if imdb:
            params: dict[str, Any] = {"imdb": imdb}
        elif thetvdb is not None:
            params = {"thetvdb": int(thetvdb)}
        else:
            return None
        return _as_object(self._get("/lookup/shows", params))

    def show_with_episodes(self, show_id: int) -> dict[str, Any] | None:
        return _as_object(self._get(f"/shows/{int(show_id)}", {"embed": "episodes"}))

    def show_updates(self, *, since: str = "week") -> dict[str, int]:
        payload = _as_object(self._get("/updates/shows", {"since": since}))
        if payload is None:
            return {}
        updates: dict[str, int] = {}
        for key, value in payload.items():
            if isinstance(value, int):
                updates[str(key)] = value
        return updates


def embedded_episodes(show: Mapping[str, Any] | None) -> list[dict[str, Any]]:
    if not isinstance(show, Mapping):
        return []
    embedded = show.get("_embedded")
    if not isinstance(embedded, Mapping):
        return []
    return _as_list(embedded.get("episodes"))


def show_from_schedule_item(item: Mapping[str, Any]) -> dict[str, Any] | None:
    """Schedule rows embed their show under `show` or, for web rows, `_embedded.show`."""

    show = item.get("show")
    if not isinstance(show, dict):
        embedded = item.get("_embedded")
        show = embedded.get("show") if isinstance(embedded, Mapping) else None
    if not isinstance(show, dict) or show.get("id") is None:
        return None
    return show


def show_imdb_id(show: Mapping[str, Any]) -> str | None:
    externals = show.get("externals")
    if not isinstance(externals, Mapping):
        return None
    value = externals.get("imdb")
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None
