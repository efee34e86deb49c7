from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from threading import Lock
from typing import Any, Callable, Mapping, Protocol

import requests

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 5
DEFAULT_BACKOFF_SECONDS = 0.5
DEFAULT_TIMEOUT_SECONDS = 20.0


class JsonFetcher(Protocol):
    def fetch(self, url: str, *, provider: str, params: Mapping[str, Any] | None = None) -> Any | None: ...


@dataclass
class ProviderGate:
    """
    Minimum-interval gate shared by every call to one provider.

    `last_call` is a single timestamp per provider (not per URL). The lock only
    serializes the wait/stamp sequence for this provider; other providers are
    never blocked by it.
    """

    min_interval: float
    last_call: float | None = None
    lock: Lock = field(default_factory=Lock, repr=False)

    def wait_turn(self, clock: Callable[[], float], sleep: Callable[[float], None]) -> None:
        with self.lock:
            if self.last_call is not None:
                wait = self.min_interval - (clock() - self.last_call)
                if wait > 0:
                    sleep(wait)
            self.last_call = clock()

    def stamp(self, clock: Callable[[], float]) -> None:
        with self.lock:
            self.last_call = clock()


class ThrottledFetcher:
    """
    JSON fetcher with per-provider throttling and bounded 429 retries.

    `fetch` never raises: network errors, non-2xx responses and undecodable
    bodies all come back as `None`. Only HTTP 429 is retried, with a delay of
    `attempt * backoff_seconds`; after `max_retries` retries the call gives up.
    """

    def __init__(
        self,
        *,
        session: requests.Session | None = None,
        min_intervals: Mapping[str, float] | None = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
        backoff_seconds: float = DEFAULT_BACKOFF_SECONDS,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        extra_headers: Mapping[str, str] | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._session = session or requests.Session()
        self._gates = {name: ProviderGate(float(interval)) for name, interval in (min_intervals or {}).items()}
        self._max_retries = max(0, int(max_retries))
        self._backoff_seconds = max(0.0, float(backoff_seconds))
        self._timeout_seconds = timeout_seconds
        self._extra_headers = dict(extra_headers or {})
        self._clock = clock
        self._sleep = sleep

    def gate(self, provider: str) -> ProviderGate | None:
        return self._gates.get(provider)

    def fetch(self, url: str, *, provider: str, params: Mapping[str, Any] | None = None) -> Any | None:
        headers = {
            "accept": "application/json",
            "user-agent": "Mozilla/5.0",
            **self._extra_headers,
        }
        gate = self._gates.get(provider)

        for attempt in range(self._max_retries + 1):
            if gate is not None:
                gate.wait_turn(self._clock, self._sleep)

            try:
                resp = self._session.get(url, params=params, headers=headers, timeout=self._timeout_seconds)
            except requests.RequestException as exc:
                logger.debug(f"{provider} request failed: {url} ({exc})")
                return None
            finally:
                if gate is not None:
                    gate.stamp(self._clock)

            if resp.status_code == 429:
                if attempt >= self._max_retries:
                    logger.warning(f"{provider} rate limit retries exhausted: {url}")
                    return None
                delay = (attempt + 1) * self._backoff_seconds
                logger.warning(f"{provider} returned HTTP 429, retrying in {delay:.2f}s: {url}")
                self._sleep(delay)
                continue

            if not 200 <= resp.status_code < 300:
                logger.debug(f"{provider} request failed with HTTP {resp.status_code}: {url}")
                return None

            try:
                return resp.json()
            except ValueError:
                logger.debug(f"{provider} returned non-JSON response: {url}")
                return None

        return None
