from __future__ import annotations

from datetime import date
from typing import Any

from airing_catalog.ingestion.catalog_builder import build_catalog, build_entry, build_videos
from airing_catalog.ingestion.registry import ShowEntry

TODAY = date(2024, 5, 10)


def _entry(show_id: int, *airdates: str | None, **show_fields: Any) -> ShowEntry:
    show: dict[str, Any] = {"id": show_id, "name": f"Show {show_id}", **show_fields}
    episodes = [
        {"id": show_id * 100 + index, "name": f"Ep {index}", "number": index, "airdate": airdate}
        for index, airdate in enumerate(airdates, start=1)
    ]
    return ShowEntry(show=show, episodes=episodes)


def test_catalog_is_sorted_by_latest_in_window_date_descending() -> None:
    entries = [
        _entry(1, "2024-05-01"),
        _entry(2, "2024-05-03"),
        _entry(3, "2024-05-02"),
    ]

    built = build_catalog(entries, today=date(2024, 5, 3), window_days=10)

    assert [row.id for row in built.catalog] == ["tvmaze:2", "tvmaze:3", "tvmaze:1"]
    assert [row.latest_date for row in built.catalog] == ["2024-05-03", "2024-05-02", "2024-05-01"]


def test_latest_date_ignores_future_episodes() -> None:
    built = build_catalog([_entry(7, "2024-05-08", "2024-05-15")], today=TODAY, window_days=10)

    assert built.catalog[0].latest_date == "2024-05-08"
    # The meta record still lists every episode, upcoming ones included.
    assert [video.released for video in built.metas[0].videos] == ["2024-05-08", "2024-05-15"]


def test_shows_without_in_window_episodes_are_omitted() -> None:
    entries = [
        _entry(1, "2024-04-01"),
        _entry(2, "2024-05-20"),
        _entry(3, None),
        _entry(4, "2024-05-10"),
    ]

    built = build_catalog(entries, today=TODAY, window_days=10)

    assert [row.id for row in built.catalog] == ["tvmaze:4"]
    assert [meta.id for meta in built.metas] == ["tvmaze:4"]
    assert built.omitted == 3


def test_window_boundaries_are_inclusive() -> None:
    built = build_catalog([_entry(1, "2024-05-01"), _entry(2, "2024-04-30")], today=TODAY, window_days=10)

    assert [row.id for row in built.catalog] == ["tvmaze:1"]


def test_ties_keep_discovery_order() -> None:
    entries = [_entry(5, "2024-05-09"), _entry(3, "2024-05-09"), _entry(9, "2024-05-09")]

    built = build_catalog(entries, today=TODAY, window_days=10)

    assert [row.id for row in built.catalog] == ["tvmaze:5", "tvmaze:3", "tvmaze:9"]


def test_videos_are_ascending_with_undated_first() -> None:
    episodes = [
        {"id": 1, "airdate": "2024-05-09"},
        {"id": 2, "airdate": None},
        {"id": 3, "airdate": "0000-00-00", "airstamp": "2024-05-02T20:00:00+00:00"},
        {"id": 4, "airdate": "2024-05-05"},
    ]

    videos = build_videos(episodes)

    assert [video.id for video in videos] == ["tvmaze:2", "tvmaze:3", "tvmaze:4", "tvmaze:1"]
    assert videos[0].released is None
    assert videos[1].released == "2024-05-02"


def test_duplicate_episodes_are_collapsed_later_record_wins() -> None:
    entry = ShowEntry(
        show={"id": 42, "name": "Dupes"},
        episodes=[
            {"id": 1, "name": "Schedule title", "airdate": "2024-05-09"},
            {"id": 2, "name": "Other", "airdate": "2024-05-08"},
            {"id": 1, "name": "Detail title", "airdate": "2024-05-09"},
            {"name": "No id", "airdate": "2024-05-09"},
        ],
    )

    built = build_entry(entry, today=TODAY, window_days=10)

    assert built is not None
    _catalog_entry, meta = built
    assert [video.id for video in meta.videos] == ["tvmaze:2", "tvmaze:1"]
    assert meta.videos[1].title == "Detail title"
    assert [ep["id"] for ep in entry.episodes] == [1, 2]


def test_entry_projection_fields_and_meta_hygiene() -> None:
    entry = ShowEntry(
        show={
            "id": 42,
            "name": "Sample Drama",
            "summary": "<p>A <i>sample</i> drama &amp; more.</p>",
            "image": {"medium": "https://img/medium.jpg", "original": "https://img/original.jpg"},
            "genres": ["Drama"],
            "_embedded": {"episodes": [{"id": 1}]},
        },
        episodes=[
            {"id": 1001, "name": "Pilot", "season": 1, "number": 1, "airdate": "2024-05-10", "summary": "<p>First.</p>"}
        ],
    )

    built = build_entry(entry, today=TODAY, window_days=10)

    assert built is not None
    catalog_entry, meta = built
    assert catalog_entry.to_dict() == {
        "id": "tvmaze:42",
        "type": "series",
        "name": "Sample Drama",
        "description": "A sample drama & more.",
        "poster": "https://img/medium.jpg",
        "background": "https://img/original.jpg",
        "latestDate": "2024-05-10",
    }
    payload = meta.to_dict()["meta"]
    assert "_embedded" not in payload
    assert payload["id"] == "tvmaze:42"
    assert payload["type"] == "series"
    assert payload["genres"] == ["Drama"]
    assert payload["videos"] == [
        {
            "id": "tvmaze:1001",
            "title": "Pilot",
            "season": 1,
            "episode": 1,
            "released": "2024-05-10",
            "overview": "First.",
        }
    ]


def test_poster_falls_back_to_original_image() -> None:
    entry = _entry(1, "2024-05-10", image={"original": "https://img/original.jpg"})

    built = build_entry(entry, today=TODAY, window_days=10)

    assert built is not None
    assert built[0].poster == "https://img/original.jpg"
    assert built[0].background == "https://img/original.jpg"
