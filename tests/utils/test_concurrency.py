from __future__ import annotations

import threading
import time

import pytest

from airing_catalog.utils.concurrency import map_in_order


def test_sequential_map_preserves_order() -> None:
    assert map_in_order(lambda n: n * 2, [3, 1, 2]) == [6, 2, 4]


def test_threaded_map_returns_results_in_input_order() -> None:
    thread_names: set[str] = set()

    def _slow_square(n: int) -> int:
        thread_names.add(threading.current_thread().name)
        # Earlier items finish last.
        time.sleep(0.01 * (5 - n))
        return n * n

    assert map_in_order(_slow_square, [1, 2, 3, 4], concurrency=4) == [1, 4, 9, 16]
    assert all(name != "MainThread" for name in thread_names)


def test_worker_exceptions_propagate() -> None:
    def _boom(n: int) -> int:
        if n == 2:
            raise RuntimeError("bad item")
        return n

    with pytest.raises(RuntimeError, match="bad item"):
        map_in_order(_boom, [1, 2, 3], concurrency=2)


def test_empty_input() -> None:
    assert map_in_order(lambda n: n, [], concurrency=8) == []
