from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Any, Iterable, Mapping

from bs4 import BeautifulSoup

UNSET_AIRDATE = "0000-00-00"


def clean_html(value: str | None) -> str:
    """Strip markup from a provider summary, returning plain text."""

    if not isinstance(value, str) or not value:
        return ""
    return BeautifulSoup(value, "html.parser").get_text().strip()


def pick_date(episode: Mapping[str, Any] | None) -> str | None:
    """
    Effective air date of an episode as `YYYY-MM-DD`.

    Prefers `airdate` unless it is the provider's unset sentinel, then falls back
    to the date portion of `airstamp`.
    """

    if not isinstance(episode, Mapping):
        return None
    airdate = episode.get("airdate")
    if isinstance(airdate, str) and airdate and airdate != UNSET_AIRDATE:
        return airdate
    airstamp = episode.get("airstamp")
    if isinstance(airstamp, str) and airstamp:
        return airstamp[:10]
    return None


def _parse_date(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        return None


def window_start(today: date, days: int) -> date:
    return today - timedelta(days=max(1, int(days)) - 1)


def trailing_days(today: date, days: int) -> list[date]:
    """`today` first, then each earlier day of the trailing window."""

    return [today - timedelta(days=offset) for offset in range(max(1, int(days)))]


def in_window(value: str | None, *, today: date, days: int) -> bool:
    parsed = _parse_date(value)
    if parsed is None:
        return False
    return window_start(today, days) <= parsed <= today


def filter_last_n_days(
    episodes: Iterable[Mapping[str, Any]],
    days: int,
    today: date,
) -> list[Mapping[str, Any]]:
    """Episodes whose effective date falls in `[today - (days - 1), today]`; later dates are dropped."""

    return [ep for ep in episodes if in_window(pick_date(ep), today=today, days=days)]


def dedupe_episodes(episodes: Iterable[Mapping[str, Any]] | None) -> list[dict[str, Any]]:
    """
    Canonical episode set keyed by episode id.

    Episodes without an id are dropped; a repeated id keeps the later record.
    """

    by_id: dict[Any, dict[str, Any]] = {}
    for ep in episodes or []:
        if not isinstance(ep, Mapping):
            continue
        ep_id = ep.get("id")
        if ep_id is None or ep_id == "":
            continue
        by_id[ep_id] = dict(ep)
    return list(by_id.values())
