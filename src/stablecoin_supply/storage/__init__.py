"""Storage layer: CSV history and the consolidated JSON snapshot document."""

from stablecoin_supply.storage.atomic import write_atomic, write_text_atomic
from stablecoin_supply.storage.history_store import CsvHistoryStore
from stablecoin_supply.storage.snapshot_writer import (
    DEFAULT_DOCUMENT_NAME,
    SnapshotDocumentStore,
)

__all__ = [
    "CsvHistoryStore",
    "DEFAULT_DOCUMENT_NAME",
    "SnapshotDocumentStore",
    "write_atomic",
    "write_text_atomic",
]
