from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping


class SettingsError(ValueError):
    pass


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise SettingsError(f"{name} must be an integer, got {raw!r}.") from exc


def _env_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise SettingsError(f"{name} must be a number, got {raw!r}.") from exc


def _env_bool(env: Mapping[str, str], name: str, default: bool = False) -> bool:
    raw = (env.get(name) or "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


def _env_list(env: Mapping[str, str], name: str) -> tuple[str, ...]:
    raw = env.get(name) or ""
    return tuple(part.strip() for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class BuildSettings:
    out_dir: Path = Path(".")
    window_days: int = 10
    schedule_country: str | None = "US"
    tvmaze_min_interval_ms: int = 150
    max_retries: int = 5
    backoff_ms: int = 500
    timeout_seconds: float = 20.0
    tmdb_api_key: str | None = field(default=None, repr=False)
    tmdb_discovery_pages: int = 1
    updates_discovery_limit: int = 0
    conservative_geography: bool = False
    blocked_broadcasters: tuple[str, ...] = ()
    blocked_broadcaster_substrings: tuple[str, ...] = ()
    concurrency: int = 1
    catalog_name: str = "tvmaze_weekly_schedule"

    def __post_init__(self) -> None:
        if self.window_days < 1:
            raise SettingsError("window_days must be >= 1.")
        if self.concurrency < 1:
            raise SettingsError("concurrency must be >= 1.")
        if self.max_retries < 0 or self.backoff_ms < 0 or self.tvmaze_min_interval_ms < 0:
            raise SettingsError("retry, backoff and interval settings must be >= 0.")
        if not self.catalog_name.strip():
            raise SettingsError("catalog_name must not be empty.")

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "BuildSettings":
        env = os.environ if env is None else env
        return cls(
            out_dir=Path((env.get("CATALOG_OUT_DIR") or ".").strip() or "."),
            window_days=_env_int(env, "CATALOG_WINDOW_DAYS", 10),
            schedule_country=(env.get("CATALOG_SCHEDULE_COUNTRY") or "US").strip().upper() or None,
            tvmaze_min_interval_ms=_env_int(env, "TVMAZE_MIN_INTERVAL_MS", 150),
            max_retries=_env_int(env, "FETCH_MAX_RETRIES", 5),
            backoff_ms=_env_int(env, "FETCH_BACKOFF_MS", 500),
            timeout_seconds=_env_float(env, "FETCH_TIMEOUT_SECONDS", 20.0),
            tmdb_api_key=(env.get("TMDB_API_KEY") or "").strip() or None,
            tmdb_discovery_pages=_env_int(env, "TMDB_DISCOVERY_PAGES", 1),
            updates_discovery_limit=_env_int(env, "TVMAZE_UPDATES_LIMIT", 0),
            conservative_geography=_env_bool(env, "CATALOG_CONSERVATIVE_GEOGRAPHY"),
            blocked_broadcasters=_env_list(env, "CATALOG_BLOCKED_BROADCASTERS"),
            blocked_broadcaster_substrings=_env_list(env, "CATALOG_BLOCKED_BROADCASTER_SUBSTRINGS"),
            concurrency=_env_int(env, "CATALOG_CONCURRENCY", 1),
            catalog_name=(env.get("CATALOG_NAME") or "tvmaze_weekly_schedule").strip(),
        )
