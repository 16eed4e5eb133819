"""
Tests for SnapshotCache freshness and persistence.
"""

import json
from datetime import UTC, datetime

import pytest

from stablecoin_supply.orchestration.cache import SnapshotCache
from stablecoin_supply.shared.models import Snapshot


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def snapshot():
    return Snapshot(last_updated=datetime(2024, 4, 1, tzinfo=UTC))


class TestSnapshotCache:
    def test_fresh_within_ttl(self, snapshot):
        clock = FakeClock(100.0)
        cache = SnapshotCache(ttl_seconds=600, clock=clock)

        entry = cache.put("usdc", snapshot)
        clock.now = 699.0

        assert entry.stored_at == 100.0
        assert cache.get("usdc") == entry

    def test_expired_entry_only_returned_when_stale_allowed(self, snapshot):
        clock = FakeClock(100.0)
        cache = SnapshotCache(ttl_seconds=600, clock=clock)
        cache.put("usdc", snapshot)

        clock.now = 700.0

        assert cache.get("usdc") is None
        assert cache.get("usdc", allow_stale=True).snapshot == snapshot

    def test_unknown_key(self):
        assert SnapshotCache().get("usdt", allow_stale=True) is None

    def test_persisted_entries_survive_restart(self, tmp_path, snapshot):
        path = tmp_path / "cache.json"
        clock = FakeClock(50.0)
        SnapshotCache(ttl_seconds=600, path=path, clock=clock).put("usdc", snapshot)

        restarted = SnapshotCache(ttl_seconds=600, path=path, clock=clock)

        entry = restarted.get("usdc")
        assert entry.snapshot == snapshot
        assert entry.stored_at == 50.0

    def test_corrupt_cache_file_starts_empty(self, tmp_path):
        path = tmp_path / "cache.json"
        path.write_text("{broken")

        cache = SnapshotCache(path=path)

        assert cache.get("usdc", allow_stale=True) is None

    def test_invalid_entries_are_discarded(self, tmp_path, snapshot):
        path = tmp_path / "cache.json"
        path.write_text(
            json.dumps(
                {
                    "usdc": {"stored_at": 1.0, "snapshot": snapshot.to_document()},
                    "usdt": {"stored_at": "soon"},
                }
            )
        )

        cache = SnapshotCache(path=path, clock=FakeClock(2.0))

        assert cache.get("usdc") is not None
        assert cache.get("usdt", allow_stale=True) is None

    def test_persist_failure_keeps_memory_entry(self, tmp_path, snapshot):
        blocker = tmp_path / "blocker"
        blocker.write_text("file")
        cache = SnapshotCache(path=blocker / "cache.json")

        cache.put("usdc", snapshot)

        assert cache.get("usdc").snapshot == snapshot
