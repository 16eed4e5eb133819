"""CSV history store for monthly and yearly supply.

Files:
- <coin>_monthly_supply.csv with columns month, supply, change
- <coin>_yearly_supply.csv with columns year, supply, change

A missing or empty file is an empty history. Writes are atomic.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import pandas as pd
from pydantic import ValidationError as PydanticValidationError

from stablecoin_supply.infrastructure.observability import get_storage_logger
from stablecoin_supply.ingestion.exceptions import FileSystemError, ParseError
from stablecoin_supply.shared.models import MonthlyRecord, YearlyRecord
from stablecoin_supply.storage.atomic import write_atomic

MONTHLY_COLUMNS = ["month", "supply", "change"]
YEARLY_COLUMNS = ["year", "supply", "change"]


class CsvHistoryStore:
    """Reads and writes one coin's CSV history files."""

    def __init__(self, monthly_path: Path | str, yearly_path: Path | str):
        self.monthly_path = Path(monthly_path)
        self.yearly_path = Path(yearly_path)
        self.log = get_storage_logger("csv-history", path=str(self.monthly_path.parent))

    @classmethod
    def for_coin(
        cls, data_dir: Path | str, monthly_file: str, yearly_file: str
    ) -> CsvHistoryStore:
        data_dir = Path(data_dir)
        return cls(data_dir / monthly_file, data_dir / yearly_file)

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------
    def _read_frame(
        self, path: Path, columns: list[str], dtype: dict[str, type]
    ) -> pd.DataFrame | None:
        try:
            if not path.exists() or path.stat().st_size == 0:
                self.log.info("history_file_missing", file=str(path))
                return None
            frame = pd.read_csv(path, dtype=dtype)
        except pd.errors.EmptyDataError:
            self.log.info("history_file_missing", file=str(path))
            return None
        except pd.errors.ParserError as e:
            raise ParseError(f"Malformed CSV {path}: {e}", endpoint=str(path)) from e
        except (OSError, UnicodeDecodeError) as e:
            raise FileSystemError(f"Failed to read {path}: {e}", endpoint=str(path)) from e

        missing = [column for column in columns if column not in frame.columns]
        if missing:
            raise ParseError(
                f"CSV {path} is missing columns {missing}", endpoint=str(path)
            )
        return frame

    def read_monthly(self) -> list[MonthlyRecord]:
        """Load the monthly history, ascending by month.

        Raises:
            ParseError: Malformed CSV or rows that fail validation
            FileSystemError: File exists but cannot be read
        """
        frame = self._read_frame(self.monthly_path, MONTHLY_COLUMNS, {"month": str})
        if frame is None:
            return []
        frame["change"] = frame["change"].fillna(0.0)
        try:
            records = [
                MonthlyRecord(
                    period_key=row.month.strip(),
                    supply=float(row.supply),
                    change_pct=float(row.change),
                )
                for row in frame.itertuples(index=False)
            ]
        except (PydanticValidationError, TypeError, ValueError, AttributeError) as e:
            raise ParseError(
                f"Invalid monthly record in {self.monthly_path}: {e}",
                endpoint=str(self.monthly_path),
            ) from e
        records.sort(key=lambda r: r.period_key)
        self.log.info("history_loaded", file=str(self.monthly_path), records=len(records))
        return records

    def read_yearly(self) -> list[YearlyRecord]:
        """Load the yearly history, ascending by year.

        Raises:
            ParseError: Malformed CSV or rows that fail validation
            FileSystemError: File exists but cannot be read
        """
        frame = self._read_frame(self.yearly_path, YEARLY_COLUMNS, {})
        if frame is None:
            return []
        frame["change"] = frame["change"].fillna(0.0)
        try:
            records = [
                YearlyRecord(
                    year=int(row.year),
                    supply=float(row.supply),
                    change_pct=float(row.change),
                )
                for row in frame.itertuples(index=False)
            ]
        except (PydanticValidationError, TypeError, ValueError) as e:
            raise ParseError(
                f"Invalid yearly record in {self.yearly_path}: {e}",
                endpoint=str(self.yearly_path),
            ) from e
        records.sort(key=lambda r: r.year)
        self.log.info("history_loaded", file=str(self.yearly_path), records=len(records))
        return records

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------
    def _write_frame(self, path: Path, frame: pd.DataFrame) -> None:
        write_atomic(path, lambda handle: frame.to_csv(handle, index=False))
        self.log.info("history_written", file=str(path), records=len(frame))

    def write_monthly(self, records: Sequence[MonthlyRecord]) -> None:
        """Persist monthly records. Estimated placeholder months are never written.

        Raises:
            FileSystemError: If the file cannot be written
        """
        rows = [
            {"month": r.period_key, "supply": r.supply, "change": r.change_pct}
            for r in records
            if not r.estimated
        ]
        self._write_frame(
            self.monthly_path, pd.DataFrame(rows, columns=MONTHLY_COLUMNS)
        )

    def write_yearly(self, records: Sequence[YearlyRecord]) -> None:
        """Persist yearly records.

        Raises:
            FileSystemError: If the file cannot be written
        """
        rows = [
            {"year": r.year, "supply": r.supply, "change": r.change_pct}
            for r in records
        ]
        self._write_frame(self.yearly_path, pd.DataFrame(rows, columns=YEARLY_COLUMNS))
