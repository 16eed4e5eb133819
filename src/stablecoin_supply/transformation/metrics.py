"""Headline growth metrics derived from the monthly series."""

from collections.abc import Sequence

from stablecoin_supply.shared.models import MonthlyRecord, SupplyMetrics


def average_growth(
    monthly: Sequence[MonthlyRecord], months: int, precision: int = 2
) -> float | None:
    """Mean month-over-month growth (%) over the trailing window.

    The window holds the last ``months + 1`` records, giving up to ``months``
    steps. A step whose prior supply is 0 contributes 0 growth.

    Returns:
        Rounded mean growth, or None with fewer than 2 records in the window
    """
    window = list(monthly[-(months + 1):])
    if len(window) < 2:
        return None

    total = 0.0
    for previous, current in zip(window, window[1:]):
        if previous.supply > 0:
            total += (current.supply - previous.supply) / previous.supply
    return round(total / (len(window) - 1) * 100, precision)


def compute_supply_metrics(
    monthly: Sequence[MonthlyRecord], precision: int = 2
) -> SupplyMetrics:
    """Latest supply, 3-month change and 3/12-month average growth."""
    if not monthly:
        return SupplyMetrics()

    latest = monthly[-1].supply
    quarterly = (
        round(latest - monthly[-4].supply, precision) if len(monthly) >= 4 else None
    )
    return SupplyMetrics(
        latest_supply=latest,
        quarterly_change=quarterly,
        avg_growth_3m=average_growth(monthly, 3, precision),
        avg_growth_12m=average_growth(monthly, 12, precision),
    )
