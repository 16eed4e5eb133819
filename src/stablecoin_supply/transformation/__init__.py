"""Transformation layer: normalization, merging, roll-ups and quality checks."""

from stablecoin_supply.transformation.aggregator import aggregate_yearly
from stablecoin_supply.transformation.merger import (
    merge_monthly_history,
    percent_change,
    recompute_changes,
)
from stablecoin_supply.transformation.metrics import (
    average_growth,
    compute_supply_metrics,
)
from stablecoin_supply.transformation.normalizers import (
    ChainDistributionNormalizer,
    MonthlySeriesNormalizer,
)
from stablecoin_supply.transformation.snapshot import build_snapshot
from stablecoin_supply.transformation.validators import (
    Anomaly,
    CompletenessReport,
    CompletenessValidator,
    Gap,
)

__all__ = [
    "Anomaly",
    "ChainDistributionNormalizer",
    "CompletenessReport",
    "CompletenessValidator",
    "Gap",
    "MonthlySeriesNormalizer",
    "aggregate_yearly",
    "average_growth",
    "build_snapshot",
    "compute_supply_metrics",
    "merge_monthly_history",
    "percent_change",
    "recompute_changes",
]
