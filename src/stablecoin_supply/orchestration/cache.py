"""
Snapshot Cache
==============

Write-through cache of the last live snapshot per coin with a freshness TTL,
optionally persisted to a JSON file so a restarted dashboard feed can show
the last known data straight away.
"""

from __future__ import annotations

import json
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from stablecoin_supply.infrastructure.observability import get_storage_logger
from stablecoin_supply.ingestion.exceptions import FileSystemError
from stablecoin_supply.shared.models import Snapshot
from stablecoin_supply.storage.atomic import write_text_atomic


@dataclass(frozen=True)
class CacheEntry:
    """Cached snapshot and the wall-clock time it was stored."""

    snapshot: Snapshot
    stored_at: float


class SnapshotCache:
    """In-memory snapshot cache keyed by coin."""

    def __init__(
        self,
        ttl_seconds: float = 600.0,
        path: Path | str | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.ttl_seconds = ttl_seconds
        self.path = Path(path) if path else None
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self.log = get_storage_logger("snapshot-cache")
        if self.path is not None:
            self._load()

    def is_fresh(self, entry: CacheEntry) -> bool:
        return self._clock() - entry.stored_at < self.ttl_seconds

    def get(self, key: str, allow_stale: bool = False) -> CacheEntry | None:
        """Return the entry for key; stale entries only when allow_stale."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if allow_stale or self.is_fresh(entry):
            return entry
        return None

    def put(self, key: str, snapshot: Snapshot) -> CacheEntry:
        entry = CacheEntry(snapshot=snapshot, stored_at=self._clock())
        self._entries[key] = entry
        if self.path is not None:
            self._persist()
        return entry

    def _persist(self) -> None:
        document = {
            key: {"stored_at": entry.stored_at, "snapshot": entry.snapshot.to_document()}
            for key, entry in self._entries.items()
        }
        try:
            write_text_atomic(self.path, json.dumps(document))
        except FileSystemError as e:
            self.log.warning("cache_persist_failed", file=str(self.path), error=str(e))

    def _load(self) -> None:
        """Load persisted entries; an unreadable cache file starts empty."""
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return
        except (OSError, ValueError) as e:
            self.log.warning("cache_file_unreadable", file=str(self.path), error=str(e))
            return

        if not isinstance(raw, dict):
            self.log.warning("cache_file_unreadable", file=str(self.path))
            return

        for key, item in raw.items():
            try:
                self._entries[key] = CacheEntry(
                    snapshot=Snapshot.model_validate(item["snapshot"]),
                    stored_at=float(item["stored_at"]),
                )
            except (KeyError, TypeError, ValueError, PydanticValidationError) as e:
                self.log.warning("cache_entry_discarded", key=key, error=str(e))
        self.log.info("cache_loaded", file=str(self.path), entries=len(self._entries))
