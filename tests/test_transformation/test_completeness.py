"""
Tests for the advisory gap and anomaly checks.
"""

from stablecoin_supply.transformation.merger import merge_monthly_history
from stablecoin_supply.transformation.validators import (
    Anomaly,
    CompletenessValidator,
    Gap,
)
from tests.fixtures import monthly_series


class TestCompletenessValidator:
    def test_reports_missing_months(self):
        monthly = merge_monthly_history(
            [], monthly_series(("2024-01", 100.0), ("2024-02", 101.0), ("2024-05", 102.0))
        )

        report = CompletenessValidator().validate(monthly, coin="usdc")

        assert report.gaps == [Gap(start="2024-02", end="2024-05", missing_months=2)]
        assert report.anomalies == []
        assert not report.is_complete

    def test_gap_across_year_boundary(self):
        monthly = monthly_series(("2023-11", 100.0), ("2024-02", 100.0))

        report = CompletenessValidator().validate(monthly)

        assert report.gaps[0].missing_months == 2

    def test_reports_changes_beyond_threshold(self):
        monthly = merge_monthly_history(
            [], monthly_series(("2024-01", 100.0), ("2024-02", 250.0), ("2024-03", 260.0))
        )

        report = CompletenessValidator(anomaly_threshold_pct=100).validate(monthly)

        assert report.anomalies == [Anomaly(period_key="2024-02", change_pct=150.0)]

    def test_clean_series_is_complete(self):
        monthly = merge_monthly_history(
            [], monthly_series(("2024-01", 100.0), ("2024-02", 110.0))
        )

        assert CompletenessValidator().validate(monthly).is_complete

    def test_empty_series_is_complete(self):
        assert CompletenessValidator().validate([]).is_complete
