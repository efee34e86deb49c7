from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

from airing_catalog.ingestion.registry import ShowRegistry


def test_add_episode_creates_then_appends() -> None:
    registry = ShowRegistry()
    show = {"id": 1, "name": "A"}

    registry.add_episode(show, {"id": 10})
    registry.add_episode(show, {"id": 10})

    entry = registry.get(1)
    assert entry is not None
    assert entry.show == show
    assert [ep["id"] for ep in entry.episodes] == [10, 10]
    assert 1 in registry
    assert len(registry) == 1


def test_register_only_creates_new_entries() -> None:
    registry = ShowRegistry()
    assert registry.register({"id": 1}, [{"id": 10}]) is True
    assert registry.register({"id": 1}, [{"id": 11}]) is False
    assert [ep["id"] for ep in registry.get(1).episodes] == [10]


def test_replace_show_is_wholesale_and_unions_episodes() -> None:
    registry = ShowRegistry()
    thin = {"id": 1, "name": "Thin", "summary": "stale", "externals": {"imdb": "tt1"}}
    registry.add_episode(thin, {"id": 10, "name": "old title"})
    registry.add_episode(thin, {"id": 11})

    detail = {"id": 1, "name": "Rich"}
    entry = registry.replace_show(1, detail, [{"id": 10, "name": "new title"}, {"id": 12}])

    assert entry is not None
    assert entry.show == {"id": 1, "name": "Rich"}
    assert "summary" not in entry.show
    assert [ep["id"] for ep in entry.episodes] == [10, 11, 12]
    assert entry.episodes[0]["name"] == "new title"
    assert entry.enriched is True


def test_remove_marks_show_rejected() -> None:
    registry = ShowRegistry()
    registry.add_episode({"id": 1}, {"id": 10})

    registry.remove(1)

    assert 1 not in registry
    assert registry.is_known(1) is True
    assert registry.register({"id": 1}, [{"id": 10}]) is False
    assert registry.replace_show(1, {"id": 1}, []) is None


def test_entries_keep_discovery_order() -> None:
    registry = ShowRegistry()
    for show_id in (3, 1, 2):
        registry.add_episode({"id": show_id}, {"id": show_id * 10})
    assert [entry.show_id for entry in registry.entries()] == [3, 1, 2]


def test_concurrent_appends_are_not_lost() -> None:
    registry = ShowRegistry()
    show = {"id": 1}

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(lambda i: registry.add_episode(show, {"id": i}), range(200)))

    assert len(registry.get(1).episodes) == 200
