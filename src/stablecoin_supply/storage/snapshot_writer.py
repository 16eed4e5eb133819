"""Consolidated JSON snapshot document.

data.json holds one Snapshot per coin:
{ "<coin>": { monthly, yearly, chains, last_updated, metrics }, ... }
Each coin entry is replaced wholesale; other coins are preserved.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from stablecoin_supply.infrastructure.observability import get_storage_logger
from stablecoin_supply.ingestion.exceptions import FileSystemError, ParseError
from stablecoin_supply.shared.models import Snapshot
from stablecoin_supply.storage.atomic import write_text_atomic

DEFAULT_DOCUMENT_NAME = "data.json"


class SnapshotDocumentStore:
    """Reads and writes the consolidated snapshot document."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self.log = get_storage_logger("snapshot-document", file=str(self.path))

    def read_document(self) -> dict[str, Any]:
        """Load the raw document; a missing file is an empty document.

        Raises:
            ParseError: File is not a JSON object
            FileSystemError: File exists but cannot be read
        """
        try:
            content = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            raise FileSystemError(
                f"Failed to read {self.path}: {e}", endpoint=str(self.path)
            ) from e

        try:
            document = json.loads(content)
        except ValueError as e:
            raise ParseError(
                f"Malformed JSON in {self.path}: {e}", endpoint=str(self.path)
            ) from e
        if not isinstance(document, dict):
            raise ParseError(
                f"{self.path} must contain a JSON object", endpoint=str(self.path)
            )
        return document

    def read_snapshot(self, coin: str) -> Snapshot | None:
        """Load one coin's snapshot, or None if the document has no entry.

        Raises:
            ParseError: Document or entry is malformed
            FileSystemError: File exists but cannot be read
        """
        entry = self.read_document().get(coin.lower())
        if entry is None:
            return None
        try:
            return Snapshot.model_validate(entry)
        except PydanticValidationError as e:
            raise ParseError(
                f"Invalid snapshot for {coin} in {self.path}: {e}",
                endpoint=str(self.path),
            ) from e

    def write_snapshot(self, coin: str, snapshot: Snapshot) -> None:
        """Replace one coin's entry, preserving the others.

        An unreadable existing document is replaced rather than blocking
        the update.

        Raises:
            FileSystemError: If the document cannot be written
        """
        try:
            document = self.read_document()
        except ParseError as e:
            self.log.warning("snapshot_document_reset", reason=str(e))
            document = {}

        document[coin.lower()] = snapshot.to_document()
        write_text_atomic(self.path, json.dumps(document, indent=2) + "\n")
        self.log.info(
            "snapshot_written",
            coin=coin.lower(),
            months=len(snapshot.monthly),
            years=len(snapshot.yearly),
            chains=len(snapshot.chains),
        )
