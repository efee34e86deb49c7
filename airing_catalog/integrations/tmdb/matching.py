from __future__ import annotations

from typing import Any, Mapping

from airing_catalog.utils.ids import coerce_int


def pick_tv_result(payload: Mapping[str, Any] | None, *, premiered: str | None = None) -> int | None:
    """
    TMDb TV id from a `/find` payload.

    A lone `tv_results` entry wins outright. With several, the one whose
    `first_air_date` year equals the premiere year is used; anything else is
    left unresolved.
    """

    if not isinstance(payload, Mapping) or not isinstance(payload.get("tv_results"), list):
        return None
    candidates: list[tuple[int, str]] = []
    for item in payload["tv_results"]:
        if not isinstance(item, Mapping):
            continue
        tmdb_id = coerce_int(item.get("id"))
        if tmdb_id is not None:
            candidates.append((tmdb_id, str(item.get("first_air_date") or "")[:4]))
    if len(candidates) == 1:
        return candidates[0][0]

    year = (premiered or "")[:4]
    if not year:
        return None
    same_year = [tmdb_id for tmdb_id, aired in candidates if aired == year]
    return same_year[0] if len(same_year) == 1 else None
