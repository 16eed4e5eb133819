"""Snapshot assembly."""

from collections.abc import Sequence
from datetime import datetime

from stablecoin_supply.common.utils import utc_now
from stablecoin_supply.shared.models import (
    ChainRecord,
    MonthlyRecord,
    Snapshot,
    YearlyRecord,
)
from stablecoin_supply.transformation.metrics import compute_supply_metrics


def build_snapshot(
    monthly: Sequence[MonthlyRecord],
    yearly: Sequence[YearlyRecord],
    chains: Sequence[ChainRecord],
    last_updated: datetime | None = None,
) -> Snapshot:
    """Bundle the series for one coin, with metrics computed from monthly.

    Chains are ordered descending by amount with any "Others" bucket last.
    """
    ordered_chains = sorted(
        chains,
        key=lambda c: (c.chain_name.startswith("Others ("), -c.amount),
    )
    return Snapshot(
        monthly=list(monthly),
        yearly=list(yearly),
        chains=ordered_chains,
        last_updated=last_updated or utc_now(),
        metrics=compute_supply_metrics(monthly),
    )
