"""Domain models for the supply pipeline."""

from .records import (
    ChainRecord,
    MonthlyRecord,
    Snapshot,
    SupplyMetrics,
    YearlyRecord,
)

__all__ = [
    "ChainRecord",
    "MonthlyRecord",
    "Snapshot",
    "SupplyMetrics",
    "YearlyRecord",
]
