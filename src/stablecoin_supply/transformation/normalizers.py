"""Normalizers turning provider observations into canonical records.

Provides:
- MonthlySeriesNormalizer: (timestamp, USD market cap) points → MonthlyRecord,
  one per UTC calendar month, most recent observation wins
- ChainDistributionNormalizer: chain → balance map → ranked ChainRecord list
  with small chains collapsed into "Others (N)"

Normalizers convert; they do not fetch and do not persist.
"""

import math
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from stablecoin_supply.common.utils import period_key
from stablecoin_supply.infrastructure.observability import get_processing_logger
from stablecoin_supply.ingestion.config.value_objects import ChainNormalizationConfig
from stablecoin_supply.ingestion.exceptions import ValidationError
from stablecoin_supply.shared.models import ChainRecord, MonthlyRecord

MILLION = 1_000_000


def to_amount(value: Any, endpoint: str | None = None) -> float | None:
    """Coerce a provider amount to a finite float; None stays None.

    Raises:
        ValidationError: If the value is not a number or is NaN/infinite
    """
    if value is None:
        return None
    try:
        amount = float(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(
            f"Non-numeric amount {value!r}", endpoint=endpoint
        ) from exc
    if not math.isfinite(amount):
        raise ValidationError(f"Non-finite amount {value!r}", endpoint=endpoint)
    return amount


class MonthlySeriesNormalizer:
    """Collapse a daily (or finer) market-cap series to monthly supply.

    For every UTC calendar month only the observation with the latest
    timestamp is retained: that is the latest known supply for the month.
    Values are converted from currency units to millions.
    """

    def __init__(self, unit_divisor: float = MILLION, precision: int = 2):
        self.unit_divisor = unit_divisor
        self.precision = precision

    def normalize(
        self, points: Iterable[tuple[datetime, float]]
    ) -> list[MonthlyRecord]:
        """Collapse points into ascending monthly records.

        Args:
            points: (timestamp, market cap in currency units) pairs, any order

        Returns:
            MonthlyRecord list sorted by period key, change_pct left at 0

        Raises:
            ValidationError: If a value is not a finite number, or no usable
                point is present
        """
        latest: dict[str, tuple[datetime, float]] = {}
        for timestamp, raw in points:
            value = to_amount(raw)
            if value is None or value < 0:
                continue
            key = period_key(timestamp)
            current = latest.get(key)
            if current is None or timestamp >= current[0]:
                latest[key] = (timestamp, value)

        if not latest:
            raise ValidationError("Market-cap series contains no usable observations")

        return [
            MonthlyRecord(
                period_key=key,
                supply=round(value / self.unit_divisor, self.precision),
            )
            for key, (_, value) in sorted(latest.items())
        ]


class ChainDistributionNormalizer:
    """Rank chains by balance and bucket the long tail.

    A chain keeps its own record while it is within the top-N ranks and holds
    at least min_share_pct of the total; every other positive balance is
    summed into one "Others (<count>)" record. Shares are computed against the
    true total, so kept shares plus the Others share add up to 100.
    """

    def __init__(
        self,
        config: ChainNormalizationConfig | None = None,
        precision: int = 2,
    ):
        self.config = config or ChainNormalizationConfig()
        self.precision = precision
        self.log = get_processing_logger("chain-normalizer")

    def normalize(self, balances: Mapping[str, float]) -> list[ChainRecord]:
        """Build the chain distribution.

        Args:
            balances: Chain name → circulating balance (already in millions)

        Returns:
            Kept chains descending by amount, then the Others bucket if any

        Raises:
            ValidationError: If a balance is not a finite number, or the
                positive balances sum to zero
        """
        amounts = ((name, to_amount(amount)) for name, amount in balances.items())
        positive = [
            (name, amount) for name, amount in amounts if amount is not None and amount > 0
        ]
        total = sum(amount for _, amount in positive)
        if total <= 0:
            raise ValidationError(
                "Chain distribution total is zero; cannot compute shares"
            )

        positive.sort(key=lambda item: item[1], reverse=True)

        records: list[ChainRecord] = []
        others_amount = 0.0
        others_count = 0
        for name, amount in positive:
            share = amount / total * 100
            if len(records) < self.config.top_n and share >= self.config.min_share_pct:
                records.append(
                    ChainRecord(
                        chain_name=name,
                        amount=round(amount, self.precision),
                        share_pct=round(share, self.precision),
                    )
                )
            else:
                others_amount += amount
                others_count += 1

        if others_count:
            records.append(
                ChainRecord(
                    chain_name=f"Others ({others_count})",
                    amount=round(others_amount, self.precision),
                    share_pct=round(others_amount / total * 100, self.precision),
                )
            )

        self.log.debug(
            "chains_normalized",
            chains=len(positive),
            kept=len(records) - (1 if others_count else 0),
            collapsed=others_count,
        )
        return records
