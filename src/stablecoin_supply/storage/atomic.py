"""Atomic file writes: write a temp file beside the target, then os.replace."""

from __future__ import annotations

import os
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import IO

from stablecoin_supply.ingestion.exceptions import FileSystemError


def write_atomic(path: Path, write: Callable[[IO[str]], None]) -> None:
    """Write a text file atomically.

    ``write`` receives an open text handle on a temporary file in the target
    directory. The target is only replaced once the temp file is complete,
    so a failure leaves the previous file untouched.

    Raises:
        FileSystemError: If the directory or file cannot be written
    """
    path = Path(path)
    tmp_name: str | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
        )
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
            write(handle)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
        tmp_name = None
    except OSError as e:
        raise FileSystemError(f"Failed to write {path}: {e}", endpoint=str(path)) from e
    finally:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)


def write_text_atomic(path: Path, content: str) -> None:
    """Atomically replace ``path`` with ``content``."""
    write_atomic(path, lambda handle: handle.write(content))
