from __future__ import annotations

from datetime import date

from airing_catalog.ingestion.classifier import ContentClassifier
from airing_catalog.ingestion.registry import ShowRegistry
from airing_catalog.ingestion.schedule_discovery import discover_from_schedules
from airing_catalog.integrations.tvmaze.client import TvmazeClient, default_schedule_variants

TODAY = date(2024, 5, 10)


def test_discovery_registers_allowed_shows_only(make_fetcher, load_fixture) -> None:  # noqa: ANN001
    schedule = load_fixture("tvmaze", "schedule_sample.json")
    fetcher = make_fetcher({"https://api.tvmaze.com/schedule?country=US&date=2024-05-10": schedule})
    registry = ShowRegistry()

    summary = discover_from_schedules(
        TvmazeClient(fetcher),
        ContentClassifier(),
        registry,
        today=TODAY,
        window_days=2,
    )

    assert [entry.show_id for entry in registry.entries()] == [42, 99]
    assert summary.requests == 6
    assert summary.skipped_no_show == 1
    assert summary.skipped_excluded == 2
    assert summary.exclusions == {"news": 1, "geography": 1}
    assert len(fetcher.calls) == 6


def test_discovery_walks_every_day_and_variant(make_fetcher) -> None:  # noqa: ANN001
    fetcher = make_fetcher()

    discover_from_schedules(
        TvmazeClient(fetcher),
        ContentClassifier(),
        ShowRegistry(),
        today=TODAY,
        window_days=10,
        variants=default_schedule_variants("GB"),
    )

    keys = [key for _provider, key in fetcher.calls]
    assert len(keys) == 30
    assert keys[0] == "https://api.tvmaze.com/schedule?country=GB&date=2024-05-10"
    assert keys[-1] == "https://api.tvmaze.com/schedule/full?date=2024-05-01"


def test_same_episode_from_several_variants_is_appended(make_fetcher, load_fixture) -> None:  # noqa: ANN001
    schedule = load_fixture("tvmaze", "schedule_sample.json")[:1]
    fetcher = make_fetcher(
        {
            "https://api.tvmaze.com/schedule?country=US&date=2024-05-10": schedule,
            "https://api.tvmaze.com/schedule/full?date=2024-05-10": schedule,
        }
    )
    registry = ShowRegistry()

    discover_from_schedules(TvmazeClient(fetcher), ContentClassifier(), registry, today=TODAY, window_days=1)

    assert [ep["id"] for ep in registry.get(42).episodes] == [1001, 1001]


def test_concurrent_discovery_matches_sequential(make_fetcher, load_fixture) -> None:  # noqa: ANN001
    schedule = load_fixture("tvmaze", "schedule_sample.json")
    routes = {
        "https://api.tvmaze.com/schedule?country=US&date=2024-05-10": schedule,
        "https://api.tvmaze.com/schedule/web?date=2024-05-09": list(reversed(schedule)),
    }

    def _run(concurrency: int) -> list:
        registry = ShowRegistry()
        discover_from_schedules(
            TvmazeClient(make_fetcher(routes)),
            ContentClassifier(),
            registry,
            today=TODAY,
            window_days=3,
            concurrency=concurrency,
        )
        return [(e.show_id, [ep["id"] for ep in e.episodes]) for e in registry.entries()]

    assert _run(4) == _run(1)
