"""
CoinPaprika market-cap adapter (tertiary source).

/tickers/{id}/historical returns daily ticks with an ISO timestamp and the
USD market cap, starting at the requested date.
"""

from datetime import datetime, timedelta
from typing import Any

from stablecoin_supply.common.utils import parse_iso_datetime, utc_now
from stablecoin_supply.ingestion.adapters.base import MarketCapAdapter
from stablecoin_supply.ingestion.adapters.response_validator import (
    CoinPaprikaResponseValidator,
)
from stablecoin_supply.ingestion.exceptions import ValidationError
from stablecoin_supply.ingestion.models.enums import DataProvider
from stablecoin_supply.transformation.normalizers import to_amount

COINPAPRIKA_BASE_URL = "https://api.coinpaprika.com/v1"


class CoinPaprikaMarketCapAdapter(MarketCapAdapter):
    """Market-cap history from CoinPaprika's historical ticks."""

    provider = DataProvider.COINPAPRIKA
    validator = CoinPaprikaResponseValidator()

    def _request(self) -> tuple[str, str, dict[str, Any] | None]:
        start = (utc_now() - timedelta(days=self.history_days)).date()
        params = {"start": start.isoformat(), "interval": "1d"}
        return f"tickers/{self.asset_id}/historical", "historical", params

    def _extract_points(self, payload: Any) -> list[tuple[datetime, float | None]]:
        endpoint = f"{self.provider.value}:historical"
        points: list[tuple[datetime, float | None]] = []
        for tick in payload:
            try:
                timestamp = parse_iso_datetime(tick["timestamp"])
                points.append((timestamp, to_amount(tick.get("market_cap"), endpoint)))
            except (KeyError, TypeError, ValueError, AttributeError) as exc:
                raise ValidationError(
                    f"Malformed historical tick {tick!r}: {exc}", endpoint=endpoint
                ) from exc
        return points
