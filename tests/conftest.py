from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any, Mapping
from urllib.parse import urlencode

import pytest

FIXTURES_DIR = Path(__file__).resolve().parent / "fixtures"


def route_key(url: str, params: Mapping[str, Any] | None = None) -> str:
    if not params:
        return url
    return f"{url}?{urlencode(sorted(params.items()))}"


class FakeFetcher:
    """Canned JSON keyed by `url?sorted-params`; unknown routes return None like a soft failure."""

    def __init__(self, routes: Mapping[str, Any] | None = None) -> None:
        self.routes: dict[str, Any] = dict(routes or {})
        self.calls: list[tuple[str, str]] = []

    def fetch(self, url: str, *, provider: str, params: Mapping[str, Any] | None = None) -> Any | None:
        key = route_key(url, params)
        self.calls.append((provider, key))
        return copy.deepcopy(self.routes.get(key))

    def called(self, key: str) -> bool:
        return any(call_key == key for _provider, call_key in self.calls)


@pytest.fixture
def load_fixture():
    def _load(*parts: str) -> Any:
        return json.loads(FIXTURES_DIR.joinpath(*parts).read_text(encoding="utf-8"))

    return _load


@pytest.fixture
def make_fetcher():
    return FakeFetcher
