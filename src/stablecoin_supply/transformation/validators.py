"""Completeness checks for the monthly supply series.

Provides:
- CompletenessValidator: reports missing months and abnormal swings
- CompletenessReport: findings returned to the caller

Validators check data quality without modifying data and never raise:
findings are logged as warnings and returned.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field

from stablecoin_supply.common.utils import month_distance
from stablecoin_supply.infrastructure.observability import get_processing_logger
from stablecoin_supply.shared.models import MonthlyRecord

DEFAULT_ANOMALY_THRESHOLD_PCT = 100.0


@dataclass(frozen=True)
class Gap:
    """Months missing between two consecutive records."""

    start: str
    end: str
    missing_months: int


@dataclass(frozen=True)
class Anomaly:
    """Month-over-month change beyond the anomaly threshold."""

    period_key: str
    change_pct: float


@dataclass
class CompletenessReport:
    """Findings of one completeness check."""

    gaps: list[Gap] = field(default_factory=list)
    anomalies: list[Anomaly] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return not self.gaps and not self.anomalies


class CompletenessValidator:
    """Advisory gap and anomaly detection.

    Checks:
    - Adjacent period keys more than one month apart (gap)
    - |change_pct| above the configured threshold (anomaly)
    """

    def __init__(self, anomaly_threshold_pct: float = DEFAULT_ANOMALY_THRESHOLD_PCT):
        self.anomaly_threshold_pct = anomaly_threshold_pct
        self.log = get_processing_logger("completeness-validator")

    def validate(
        self, monthly: Sequence[MonthlyRecord], coin: str | None = None
    ) -> CompletenessReport:
        """Scan an ascending monthly series.

        Args:
            monthly: Monthly records sorted by period key
            coin: Optional coin key for log context

        Returns:
            CompletenessReport (empty when nothing was found)
        """
        report = CompletenessReport()

        for previous, current in zip(monthly, monthly[1:]):
            distance = month_distance(previous.period_key, current.period_key)
            if distance > 1:
                report.gaps.append(
                    Gap(
                        start=previous.period_key,
                        end=current.period_key,
                        missing_months=distance - 1,
                    )
                )

        for record in monthly:
            if abs(record.change_pct) > self.anomaly_threshold_pct:
                report.anomalies.append(
                    Anomaly(period_key=record.period_key, change_pct=record.change_pct)
                )

        for gap in report.gaps:
            self.log.warning(
                "history_gap_detected",
                coin=coin,
                start=gap.start,
                end=gap.end,
                missing_months=gap.missing_months,
            )
        for anomaly in report.anomalies:
            self.log.warning(
                "supply_anomaly_detected",
                coin=coin,
                period=anomaly.period_key,
                change_pct=anomaly.change_pct,
                threshold_pct=self.anomaly_threshold_pct,
            )

        return report
