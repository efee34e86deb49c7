from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

SERIES_TYPE = "series"


def namespaced_id(source: str, native_id: Any) -> str:
    return f"{source}:{native_id}"


@dataclass(frozen=True)
class CatalogEntry:
    """
    One row of the catalog index.

    `latest_date` is the newest effective air date inside the trailing window.
    """

    id: str
    name: str | None
    description: str
    poster: str | None
    background: str | None
    latest_date: str
    type: str = SERIES_TYPE

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "name": self.name,
            "description": self.description,
            "poster": self.poster,
            "background": self.background,
            "latestDate": self.latest_date,
        }


@dataclass(frozen=True)
class Video:
    id: str
    title: str | None
    season: int | None
    episode: int | None
    released: str | None
    overview: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "season": self.season,
            "episode": self.episode,
            "released": self.released,
            "overview": self.overview,
        }


@dataclass(frozen=True)
class MetaRecord:
    """Per-show detail record: show fields plus its episodes ordered by air date."""

    id: str
    show_fields: Mapping[str, Any]
    videos: list[Video] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"meta": {**self.show_fields, "videos": [v.to_dict() for v in self.videos]}}


@dataclass(frozen=True)
class CatalogIndex:
    metas: list[CatalogEntry]
    ts: int

    def to_dict(self) -> dict[str, Any]:
        return {"metas": [m.to_dict() for m in self.metas], "ts": self.ts}
