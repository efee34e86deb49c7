from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Mapping

from airing_catalog.ingestion.classifier import ContentClassifier
from airing_catalog.ingestion.registry import ShowEntry, ShowRegistry
from airing_catalog.integrations.tmdb.client import TmdbClient
from airing_catalog.integrations.tmdb.matching import pick_tv_result
from airing_catalog.integrations.tvmaze.client import (
    TvmazeClient,
    embedded_episodes,
    show_from_schedule_item,
    show_imdb_id,
)
from airing_catalog.utils.concurrency import map_in_order
from airing_catalog.utils.episodes import filter_last_n_days, trailing_days, window_start
from airing_catalog.utils.ids import coerce_int

logger = logging.getLogger(__name__)


@dataclass
class FallbackSummary:
    registered_by_date: int = 0
    enriched: int = 0
    dropped: int = 0
    registered_from_tmdb: int = 0
    registered_from_updates: int = 0


def _show_tvdb_id(show: Mapping[str, Any]) -> int | None:
    externals = show.get("externals")
    if not isinstance(externals, Mapping):
        return None
    return coerce_int(externals.get("thetvdb"))


class FallbackResolver:
    """
    Second-chance discovery for shows the schedule feeds missed or left thin.

    Passes:
    - `episodes_by_date_pass`: per-show "episodes on this date" for shows in the
      generic schedule that discovery did not register.
    - `cross_provider_pass`: external id -> primary show id -> full detail with
      embedded episodes; the detail replaces the show record wholesale and is
      re-classified before it is kept.
    - `tmdb_discovery_pass` / `updates_discovery_pass`: shows absent from every
      schedule feed, accepted only with at least one episode in the window.
    """

    def __init__(
        self,
        tvmaze: TvmazeClient,
        classifier: ContentClassifier,
        registry: ShowRegistry,
        *,
        today: date,
        window_days: int,
        tmdb: TmdbClient | None = None,
        concurrency: int = 1,
    ) -> None:
        self._tvmaze = tvmaze
        self._tmdb = tmdb
        self._classifier = classifier
        self._registry = registry
        self._today = today
        self._window_days = window_days
        self._concurrency = max(1, int(concurrency))
        self.summary = FallbackSummary()

    def run(self, *, tmdb_pages: int = 0, updates_limit: int = 0) -> FallbackSummary:
        self.episodes_by_date_pass()
        self.cross_provider_pass()
        if tmdb_pages > 0:
            self.tmdb_discovery_pass(pages=tmdb_pages)
        if updates_limit > 0:
            self.updates_discovery_pass(limit=updates_limit)
        logger.info(
            "Fallback resolution: "
            f"by_date={self.summary.registered_by_date} "
            f"enriched={self.summary.enriched} "
            f"dropped={self.summary.dropped} "
            f"tmdb={self.summary.registered_from_tmdb} "
            f"updates={self.summary.registered_from_updates}"
        )
        return self.summary

    # -- episodes by date -------------------------------------------------

    def episodes_by_date_pass(self) -> int:
        registered = 0
        for day in trailing_days(self._today, self._window_days):
            candidates: list[dict[str, Any]] = []
            seen: set[Any] = set()
            for item in self._tvmaze.generic_schedule(day):
                show = show_from_schedule_item(item)
                if show is None:
                    continue
                show_id = show.get("id")
                if show_id in seen or self._registry.is_known(show_id):
                    continue
                seen.add(show_id)
                if self._classifier.is_excluded(show):
                    continue
                candidates.append(show)

            results = map_in_order(
                lambda show, day=day: self._tvmaze.episodes_by_date(show["id"], day),
                candidates,
                concurrency=self._concurrency,
            )
            for show, episodes in zip(candidates, results):
                if episodes and self._registry.register(show, episodes):
                    registered += 1

        self.summary.registered_by_date += registered
        return registered

    # -- cross-provider resolution ----------------------------------------

    def resolve_tvmaze_id(
        self,
        *,
        imdb_id: str | None = None,
        tvdb_id: int | None = None,
        premiered: str | None = None,
    ) -> int | None:
        """
        Map external identifiers onto a primary show id.

        Order: primary lookup by IMDb id, primary lookup by TheTVDB id, then the
        secondary provider (`/find` by IMDb id -> TheTVDB id -> primary lookup).
        """

        if imdb_id:
            found = coerce_int((self._tvmaze.lookup_show(imdb=imdb_id) or {}).get("id"))
            if found is not None:
                return found
        if tvdb_id is not None:
            found = coerce_int((self._tvmaze.lookup_show(thetvdb=tvdb_id) or {}).get("id"))
            if found is not None:
                return found
        if not imdb_id or self._tmdb is None or not self._tmdb.enabled:
            return None

        tmdb_id = pick_tv_result(self._tmdb.find_by_imdb_id(imdb_id), premiered=premiered)
        if tmdb_id is None:
            logger.debug(f"TMDb could not resolve {imdb_id} to a single TV show")
            return None
        secondary_tvdb = self._tmdb.tvdb_id_for(tmdb_id)
        if secondary_tvdb is None or secondary_tvdb == tvdb_id:
            return None
        return coerce_int((self._tvmaze.lookup_show(thetvdb=secondary_tvdb) or {}).get("id"))

    def _fetch_detail_for(self, entry: ShowEntry) -> dict[str, Any] | None:
        show = entry.show
        tvmaze_id = self.resolve_tvmaze_id(
            imdb_id=show_imdb_id(show),
            tvdb_id=_show_tvdb_id(show),
            premiered=show.get("premiered") if isinstance(show.get("premiered"), str) else None,
        )
        if tvmaze_id is None:
            return None
        if tvmaze_id != coerce_int(entry.show_id):
            # Each entry keeps its own show id; never pull in another show.
            logger.debug(f"Show {entry.show_id} external ids resolve to show {tvmaze_id}; skipping")
            return None
        detail = self._tvmaze.show_with_episodes(tvmaze_id)
        if not embedded_episodes(detail) or coerce_int(detail.get("id")) != tvmaze_id:
            return None
        return detail

    def cross_provider_pass(self) -> tuple[int, int]:
        candidates = [
            entry
            for entry in self._registry.entries()
            if show_imdb_id(entry.show) and not embedded_episodes(entry.show)
        ]
        details = map_in_order(self._fetch_detail_for, candidates, concurrency=self._concurrency)

        enriched = dropped = 0
        for entry, detail in zip(candidates, details):
            if detail is None:
                continue
            reason = self._classifier.exclusion_reason(detail)
            if reason is not None:
                logger.debug(f"Dropping show {entry.show_id} after detail fetch ({reason})")
                self._registry.remove(entry.show_id)
                dropped += 1
                continue
            self._registry.replace_show(entry.show_id, detail, embedded_episodes(detail))
            enriched += 1

        self.summary.enriched += enriched
        self.summary.dropped += dropped
        return enriched, dropped

    # -- broader discovery ------------------------------------------------

    def _accept_detail(self, detail: Mapping[str, Any] | None) -> list[dict[str, Any]] | None:
        if detail is None or detail.get("id") is None:
            return None
        if self._registry.is_known(detail.get("id")):
            return None
        if self._classifier.is_excluded(detail):
            return None
        episodes = embedded_episodes(detail)
        if not filter_last_n_days(episodes, self._window_days, self._today):
            return None
        return episodes

    def _register_details(self, details: list[dict[str, Any] | None]) -> int:
        registered = 0
        for detail in details:
            episodes = self._accept_detail(detail)
            if episodes is None:
                continue
            if self._registry.register(detail, episodes):
                registered += 1
        return registered

    def _detail_for_tmdb_result(self, result: Mapping[str, Any]) -> dict[str, Any] | None:
        tmdb_id = coerce_int(result.get("id"))
        if tmdb_id is None or self._tmdb is None:
            return None
        external_ids = self._tmdb.fetch_tv_external_ids(tmdb_id) or {}
        imdb_id = external_ids.get("imdb_id") if isinstance(external_ids.get("imdb_id"), str) else None
        tvmaze_id = self.resolve_tvmaze_id(imdb_id=imdb_id, tvdb_id=coerce_int(external_ids.get("tvdb_id")))
        if tvmaze_id is None or self._registry.is_known(tvmaze_id):
            return None
        return self._tvmaze.show_with_episodes(tvmaze_id)

    def tmdb_discovery_pass(self, *, pages: int = 1) -> int:
        if self._tmdb is None or not self._tmdb.enabled:
            return 0
        start = window_start(self._today, self._window_days)
        results: list[dict[str, Any]] = []
        for page in range(1, max(1, int(pages)) + 1):
            page_results = self._tmdb.discover_tv_by_first_air_date(start, self._today, page=page)
            if not page_results:
                break
            results.extend(page_results)

        details = map_in_order(self._detail_for_tmdb_result, results, concurrency=self._concurrency)
        registered = self._register_details(details)
        self.summary.registered_from_tmdb += registered
        return registered

    def updates_discovery_pass(self, *, limit: int) -> int:
        updates = self._tvmaze.show_updates(since="week")
        ranked = sorted(updates.items(), key=lambda item: item[1], reverse=True)
        show_ids: list[int] = []
        for raw_id, _updated_at in ranked:
            show_id = coerce_int(raw_id)
            if show_id is None or self._registry.is_known(show_id):
                continue
            show_ids.append(show_id)
            if len(show_ids) >= limit:
                break

        details = map_in_order(self._tvmaze.show_with_episodes, show_ids, concurrency=self._concurrency)
        registered = self._register_details(details)
        self.summary.registered_from_updates += registered
        return registered
