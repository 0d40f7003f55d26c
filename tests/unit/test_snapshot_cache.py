from __future__ import annotations

from datetime import date, datetime, timedelta

from backend.app.insights import SnapshotCache, build_snapshot

REFERENCE = date(2025, 3, 16)


class FakeClock:
    def __init__(self) -> None:
        self.now = datetime(2025, 3, 16, 12, 0)

    def __call__(self) -> datetime:
        return self.now


def _snapshot(reference: date = REFERENCE):
    return build_snapshot([], [], [], [], reference_date=reference)


def test_cache_returns_snapshot_until_expiry() -> None:
    clock = FakeClock()
    cache = SnapshotCache(ttl_seconds=1800, clock=clock)
    snapshot = _snapshot()
    cache.set(1, snapshot)

    assert cache.get(1, REFERENCE) is snapshot

    clock.now += timedelta(seconds=1799)
    assert cache.get(1, REFERENCE) is snapshot

    clock.now += timedelta(seconds=1)
    assert cache.get(1, REFERENCE) is None
    assert len(cache) == 0


def test_cache_enforces_minimum_ttl() -> None:
    cache = SnapshotCache(ttl_seconds=5)

    assert cache.ttl_seconds == 60


def test_invalidate_user_only_drops_that_user() -> None:
    cache = SnapshotCache(ttl_seconds=600, clock=FakeClock())
    cache.set(1, _snapshot())
    cache.set(1, _snapshot(REFERENCE - timedelta(days=1)))
    cache.set(2, _snapshot())

    assert cache.invalidate_user(1) == 2
    assert cache.get(1, REFERENCE) is None
    assert cache.get(2, REFERENCE) is not None


def test_purge_expired() -> None:
    clock = FakeClock()
    cache = SnapshotCache(ttl_seconds=60, clock=clock)
    cache.set(1, _snapshot())
    clock.now += timedelta(seconds=30)
    cache.set(2, _snapshot())
    clock.now += timedelta(seconds=45)

    assert cache.purge_expired() == 1
    assert len(cache) == 1


def test_set_drops_expired_entries() -> None:
    clock = FakeClock()
    cache = SnapshotCache(ttl_seconds=60, clock=clock)
    for offset in range(300):
        cache.set(1, _snapshot(REFERENCE - timedelta(days=offset)))
    assert len(cache) == 300

    clock.now += timedelta(minutes=2)
    cache.set(1, _snapshot())

    assert len(cache) == 1


def test_cache_size_is_capped() -> None:
    cache = SnapshotCache(ttl_seconds=1800, max_entries=50, clock=FakeClock())
    for offset in range(300):
        cache.set(1, _snapshot(REFERENCE - timedelta(days=offset)))

    assert len(cache) == 50
    assert cache.get(1, REFERENCE - timedelta(days=299)) is not None
    assert cache.get(1, REFERENCE) is None
