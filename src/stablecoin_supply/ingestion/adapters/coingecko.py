"""
CoinGecko market-cap adapter.

Primary market-cap source: /coins/{id}/market_chart returns daily
[timestamp_ms, value] pairs for the requested window.
"""

from datetime import datetime
from typing import Any

from stablecoin_supply.common.utils import from_unix_ms
from stablecoin_supply.ingestion.adapters.base import MarketCapAdapter
from stablecoin_supply.ingestion.adapters.response_validator import (
    CoinGeckoResponseValidator,
)
from stablecoin_supply.ingestion.exceptions import ValidationError
from stablecoin_supply.ingestion.models.enums import DataProvider
from stablecoin_supply.transformation.normalizers import to_amount

COINGECKO_BASE_URL = "https://api.coingecko.com/api/v3"


class CoinGeckoMarketCapAdapter(MarketCapAdapter):
    """Market-cap history from CoinGecko's market_chart endpoint."""

    provider = DataProvider.COINGECKO
    validator = CoinGeckoResponseValidator()

    def _request(self) -> tuple[str, str, dict[str, Any] | None]:
        params = {
            "vs_currency": "usd",
            "days": str(self.history_days),
            "interval": "daily",
        }
        return f"coins/{self.asset_id}/market_chart", "market_chart", params

    def _extract_points(self, payload: Any) -> list[tuple[datetime, float | None]]:
        endpoint = f"{self.provider.value}:market_chart"
        points: list[tuple[datetime, float | None]] = []
        for entry in payload["market_caps"]:
            try:
                timestamp_ms, value = entry[0], entry[1]
                points.append((from_unix_ms(timestamp_ms), to_amount(value, endpoint)))
            except (TypeError, ValueError, IndexError, OverflowError) as exc:
                raise ValidationError(
                    f"Malformed market_caps entry {entry!r}: {exc}", endpoint=endpoint
                ) from exc
        return points
