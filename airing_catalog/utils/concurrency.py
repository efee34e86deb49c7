from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Iterable, TypeVar

T = TypeVar("T")
R = TypeVar("R")


def map_in_order(fn: Callable[[T], R], items: Iterable[T], *, concurrency: int = 1) -> list[R]:
    """
    Apply `fn` to every item, returning results in input order.

    With `concurrency > 1` the calls run on a thread pool; callers apply the
    results afterwards so shared state sees the same order as a sequential run.
    """

    work = list(items)
    if concurrency <= 1 or len(work) <= 1:
        return [fn(item) for item in work]

    results: list[R | None] = [None] * len(work)
    with ThreadPoolExecutor(max_workers=concurrency) as pool:
        futures = {pool.submit(fn, item): idx for idx, item in enumerate(work)}
        for fut in as_completed(futures):
            results[futures[fut]] = fut.result()
    return results  # type: ignore[return-value]
