from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from ..metrics import SNAPSHOT_CACHE_HITS
from .engine import MoodSnapshot

DEFAULT_MAX_ENTRIES = 1024


@dataclass
class _CachedSnapshot:
    snapshot: MoodSnapshot
    expires_at: datetime


class SnapshotCache:
    """In-process snapshot cache keyed by user and reference date.

    Entries expire ``ttl_seconds`` after they were stored; a mood write for a
    user should call :meth:`invalidate_user` so the next read recomputes.
    Storing purges expired entries and drops the oldest ones beyond
    ``max_entries``.
    """

    def __init__(
        self,
        ttl_seconds: int,
        *,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._ttl = timedelta(seconds=max(60, ttl_seconds))
        self._max_entries = max(1, max_entries)
        self._clock = clock or datetime.utcnow
        self._entries: dict[tuple[int, date], _CachedSnapshot] = {}

    @property
    def ttl_seconds(self) -> int:
        return int(self._ttl.total_seconds())

    def get(self, user_id: int, reference_date: date) -> MoodSnapshot | None:
        key = (user_id, reference_date)
        cached = self._entries.get(key)
        if cached is None:
            return None
        if cached.expires_at <= self._clock():
            self._entries.pop(key, None)
            return None
        SNAPSHOT_CACHE_HITS.inc()
        return cached.snapshot

    def set(self, user_id: int, snapshot: MoodSnapshot) -> None:
        key = (user_id, snapshot.reference_date)
        self.purge_expired()
        # re-insert so dict order stays oldest first
        self._entries.pop(key, None)
        while len(self._entries) >= self._max_entries:
            del self._entries[next(iter(self._entries))]
        self._entries[key] = _CachedSnapshot(snapshot, self._clock() + self._ttl)

    def invalidate_user(self, user_id: int) -> int:
        keys = [key for key in self._entries if key[0] == user_id]
        for key in keys:
            del self._entries[key]
        return len(keys)

    def purge_expired(self) -> int:
        now = self._clock()
        expired = [key for key, cached in self._entries.items() if cached.expires_at <= now]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["SnapshotCache"]
