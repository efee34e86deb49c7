from __future__ import annotations

import os
from datetime import date
from typing import Any, Mapping

from airing_catalog.integrations.fetcher import JsonFetcher
from airing_catalog.utils.ids import coerce_int

TMDB_API_BASE_URL = "https://api.themoviedb.org/3"
TMDB_PROVIDER = "tmdb"


def resolve_api_key(api_key: str | None = None) -> str | None:
    """
    Best-effort API key resolution for callers that want to continue when the key is missing.
    """

    resolved = (api_key or os.getenv("TMDB_API_KEY") or "").strip()
    return resolved or None


class TmdbClient:
    """
    Secondary provider: external id resolution and first-air-date discovery.

    The client is disabled (every call returns `None`/empty) when no API key is
    configured. The key travels as the `api_key` query parameter.
    """

    def __init__(
        self,
        fetcher: JsonFetcher,
        *,
        api_key: str | None = None,
        language: str = "en-US",
        base_url: str = TMDB_API_BASE_URL,
    ) -> None:
        self._fetcher = fetcher
        self._api_key = resolve_api_key(api_key)
        self._language = language
        self._base_url = base_url.rstrip("/")

    @property
    def enabled(self) -> bool:
        return self._api_key is not None

    def _get(self, path: str, params: Mapping[str, Any] | None = None) -> dict[str, Any] | None:
        if not self._api_key:
            return None
        payload = self._fetcher.fetch(
            f"{self._base_url}{path}",
            provider=TMDB_PROVIDER,
            params={"api_key": self._api_key, **(params or {})},
        )
        return payload if isinstance(payload, dict) else None

    def find_by_imdb_id(self, imdb_id: str) -> dict[str, Any] | None:
        """
        Resolve TMDb records from an IMDb id via `/find/{external_id}`.

        Callers should inspect `tv_results`.
        """

        imdb_id = str(imdb_id or "").strip()
        if not imdb_id:
            return None
        return self._get(f"/find/{imdb_id}", {"external_source": "imdb_id"})

    def fetch_tv_external_ids(self, tv_id: int) -> dict[str, Any] | None:
        return self._get(f"/tv/{int(tv_id)}/external_ids")

    def tvdb_id_for(self, tv_id: int) -> int | None:
        payload = self.fetch_tv_external_ids(tv_id)
        if payload is None:
            return None
        return coerce_int(payload.get("tvdb_id"))

    def discover_tv_by_first_air_date(
        self,
        start: date,
        end: date,
        *,
        page: int = 1,
    ) -> list[dict[str, Any]]:
        payload = self._get(
            "/discover/tv",
            {
                "first_air_date.gte": start.isoformat(),
                "first_air_date.lte": end.isoformat(),
                "sort_by": "popularity.desc",
                "language": self._language,
                "page": int(page),
            },
        )
        if payload is None:
            return []
        results = payload.get("results")
        if not isinstance(results, list):
            return []
        return [item for item in results if isinstance(item, dict)]
