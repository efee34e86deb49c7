from __future__ import annotations

from dataclasses import dataclass, field
from threading import Lock
from typing import Any, Iterable, Mapping

from airing_catalog.utils.episodes import dedupe_episodes


@dataclass
class ShowEntry:
    """One show plus every episode collected for it during the run."""

    show: dict[str, Any]
    episodes: list[dict[str, Any]] = field(default_factory=list)
    enriched: bool = False

    @property
    def show_id(self) -> Any:
        return self.show.get("id")


class ShowRegistry:
    """
    Show id -> ShowEntry for a single build.

    Insertion order is discovery order and is what the catalog falls back to
    for ties. Updates are merge-by-key and guarded by one lock so callers can
    share the registry across worker threads.
    """

    def __init__(self) -> None:
        self._entries: dict[Any, ShowEntry] = {}
        self._rejected: set[Any] = set()
        self._lock = Lock()

    def __contains__(self, show_id: object) -> bool:
        with self._lock:
            return show_id in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, show_id: Any) -> ShowEntry | None:
        with self._lock:
            return self._entries.get(show_id)

    def is_known(self, show_id: Any) -> bool:
        """True when the show is registered or was dropped earlier in the run."""

        with self._lock:
            return show_id in self._entries or show_id in self._rejected

    def entries(self) -> list[ShowEntry]:
        with self._lock:
            return list(self._entries.values())

    def add_episode(self, show: Mapping[str, Any], episode: Mapping[str, Any]) -> ShowEntry:
        show_id = show.get("id")
        with self._lock:
            entry = self._entries.get(show_id)
            if entry is None:
                entry = ShowEntry(show=dict(show))
                self._entries[show_id] = entry
            entry.episodes.append(dict(episode))
            return entry

    def register(self, show: Mapping[str, Any], episodes: Iterable[Mapping[str, Any]]) -> bool:
        """Create an entry unless the show is already known; returns True when created."""

        show_id = show.get("id")
        with self._lock:
            if show_id in self._entries or show_id in self._rejected:
                return False
            self._entries[show_id] = ShowEntry(show=dict(show), episodes=[dict(ep) for ep in episodes])
            return True

    def replace_show(
        self,
        show_id: Any,
        show: Mapping[str, Any],
        episodes: Iterable[Mapping[str, Any]],
    ) -> ShowEntry | None:
        """
        Swap in a richer show record wholesale and union its episodes.

        The previous show record is discarded entirely (no field merge). Episodes
        are merged by id with the new ones winning.
        """

        with self._lock:
            entry = self._entries.get(show_id)
            if entry is None:
                return None
            entry.show = dict(show)
            entry.episodes = dedupe_episodes([*entry.episodes, *episodes])
            entry.enriched = True
            return entry

    def remove(self, show_id: Any) -> ShowEntry | None:
        with self._lock:
            self._rejected.add(show_id)
            return self._entries.pop(show_id, None)
