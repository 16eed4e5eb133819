"""Yearly roll-up of the monthly supply series."""

from collections.abc import Iterable, Sequence

from stablecoin_supply.common.utils import parse_period_key
from stablecoin_supply.shared.models import MonthlyRecord, YearlyRecord
from stablecoin_supply.transformation.merger import percent_change


def aggregate_yearly(
    monthly: Sequence[MonthlyRecord],
    existing: Iterable[YearlyRecord] = (),
    precision: int = 2,
) -> list[YearlyRecord]:
    """Upsert one record per calendar year present in the monthly series.

    A year's supply is its December record when present, otherwise the
    latest month of that year. Years only present in ``existing`` are kept
    as they are. change_pct is recomputed for every year against the
    immediately preceding record (0 for the first one and when the prior
    supply is 0).

    Args:
        monthly: Monthly records (any order)
        existing: Previously persisted yearly records
        precision: Decimal places for change_pct

    Returns:
        New ascending list of YearlyRecord
    """
    latest_month: dict[int, tuple[int, float]] = {}
    for record in monthly:
        year, month = parse_period_key(record.period_key)
        current = latest_month.get(year)
        if current is None or month > current[0]:
            latest_month[year] = (month, record.supply)

    by_year: dict[int, YearlyRecord] = {record.year: record for record in existing}
    for year, (_, supply) in latest_month.items():
        by_year[year] = YearlyRecord(year=year, supply=supply)

    result: list[YearlyRecord] = []
    previous: YearlyRecord | None = None
    for year in sorted(by_year):
        record = by_year[year]
        change = (
            0.0
            if previous is None
            else percent_change(previous.supply, record.supply, precision)
        )
        result.append(record.model_copy(update={"change_pct": change}))
        previous = record
    return result
