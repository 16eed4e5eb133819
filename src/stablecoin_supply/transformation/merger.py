"""History merger for monthly supply series.

Combines persisted monthly records with freshly fetched ones into a single
deduplicated, ascending series and recomputes month-over-month change.
Neither input is mutated; merging the same fresh batch twice is a no-op.
"""

from collections.abc import Iterable, Sequence

from stablecoin_supply.shared.models import MonthlyRecord


def percent_change(previous: float, current: float, precision: int = 2) -> float:
    """Signed percentage change, 0 when the previous value is 0."""
    if not previous:
        return 0.0
    return round((current - previous) / previous * 100, precision)


def recompute_changes(
    records: Sequence[MonthlyRecord], precision: int = 2
) -> list[MonthlyRecord]:
    """Return copies of ascending records with change_pct recomputed."""
    result: list[MonthlyRecord] = []
    previous: MonthlyRecord | None = None
    for record in records:
        change = (
            0.0
            if previous is None
            else percent_change(previous.supply, record.supply, precision)
        )
        result.append(record.model_copy(update={"change_pct": change}))
        previous = record
    return result


def merge_monthly_history(
    existing: Iterable[MonthlyRecord],
    fresh: Iterable[MonthlyRecord],
    precision: int = 2,
) -> list[MonthlyRecord]:
    """Merge fresh monthly records over the existing history.

    Records are keyed by period; fresh values replace existing ones for the
    same month. The result is sorted ascending with change_pct recomputed
    for every record (0 for the first one).

    Args:
        existing: Persisted history (any order)
        fresh: Newly fetched records (any order)
        precision: Decimal places for change_pct

    Returns:
        New list of MonthlyRecord; inputs are left untouched
    """
    by_period: dict[str, MonthlyRecord] = {}
    for record in existing:
        by_period[record.period_key] = record
    for record in fresh:
        by_period[record.period_key] = record

    ordered = [by_period[key] for key in sorted(by_period)]
    return recompute_changes(ordered, precision)
