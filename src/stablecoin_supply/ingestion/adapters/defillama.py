"""
DefiLlama adapters.

Two capabilities are served from stablecoins.llama.fi:
- DefiLlamaMarketCapAdapter: backup market-cap history from
  /stablecoincharts/all?stablecoin={id}
- DefiLlamaChainAdapter: per-chain circulating balances from /stablecoins,
  matched by symbol
"""

from datetime import datetime
from typing import Any

from stablecoin_supply.common.utils import from_unix_seconds
from stablecoin_supply.ingestion.adapters.base import BaseAdapter, MarketCapAdapter
from stablecoin_supply.ingestion.adapters.response_validator import (
    DefiLlamaChartResponseValidator,
    DefiLlamaStablecoinsResponseValidator,
)
from stablecoin_supply.ingestion.exceptions import ValidationError
from stablecoin_supply.ingestion.fetcher import ResilientFetcher
from stablecoin_supply.ingestion.models.enums import DataKind, DataProvider
from stablecoin_supply.shared.models import ChainRecord
from stablecoin_supply.transformation.normalizers import (
    MILLION,
    ChainDistributionNormalizer,
    to_amount,
)

DEFILLAMA_BASE_URL = "https://stablecoins.llama.fi"


def _pegged_usd(value: Any) -> Any:
    """Read the raw peggedUSD amount from a {"peggedUSD": n} object."""
    if not isinstance(value, dict):
        return None
    return value.get("peggedUSD")


class DefiLlamaMarketCapAdapter(MarketCapAdapter):
    """Market-cap history from DefiLlama's per-stablecoin circulation chart."""

    provider = DataProvider.DEFILLAMA
    validator = DefiLlamaChartResponseValidator()

    def _request(self) -> tuple[str, str, dict[str, Any] | None]:
        return "stablecoincharts/all", "stablecoincharts", {"stablecoin": self.asset_id}

    def _extract_points(self, payload: Any) -> list[tuple[datetime, float | None]]:
        endpoint = f"{self.provider.value}:stablecoincharts"
        points: list[tuple[datetime, float | None]] = []
        for item in payload:
            try:
                timestamp = from_unix_seconds(item["date"])
                circulating = _pegged_usd(item.get("totalCirculatingUSD"))
            except (KeyError, TypeError, ValueError, OverflowError, AttributeError) as exc:
                raise ValidationError(
                    f"Malformed chart point {item!r}: {exc}", endpoint=endpoint
                ) from exc
            points.append((timestamp, to_amount(circulating, endpoint)))
        return points


class DefiLlamaChainAdapter(BaseAdapter):
    """Per-chain distribution of one stablecoin."""

    provider = DataProvider.DEFILLAMA
    kind = DataKind.CHAIN_DISTRIBUTION
    validator = DefiLlamaStablecoinsResponseValidator()

    def __init__(
        self,
        fetcher: ResilientFetcher,
        base_url: str,
        coin: str,
        symbol: str,
        normalizer: ChainDistributionNormalizer | None = None,
    ):
        super().__init__(fetcher, base_url, coin)
        self.symbol = symbol
        self.normalizer = normalizer or ChainDistributionNormalizer()

    async def fetch_balances(self) -> dict[str, float]:
        """Fetch raw chain balances for the configured symbol, in millions.

        Raises:
            ValidationError: If the symbol is missing, has no chain data, or
                reports a non-numeric balance
        """
        payload = await self._get_json("stablecoins", "stablecoins")
        endpoint = f"{self.provider.value}:stablecoins"

        asset = next(
            (
                item
                for item in payload["peggedAssets"]
                if isinstance(item, dict) and item.get("symbol") == self.symbol
            ),
            None,
        )
        if asset is None:
            raise ValidationError(
                f"{self.symbol} not found in DefiLlama response", endpoint=endpoint
            )

        chains = asset.get("chainCirculating")
        if not isinstance(chains, dict) or not chains:
            raise ValidationError(
                f"{self.symbol} has no chain distribution data", endpoint=endpoint
            )

        balances: dict[str, float] = {}
        for chain_name, chain in chains.items():
            amount = to_amount(
                _pegged_usd(chain.get("current") if isinstance(chain, dict) else None),
                endpoint,
            )
            balances[chain_name] = (amount or 0.0) / MILLION
        return balances

    async def fetch_and_normalize(self) -> list[ChainRecord]:
        """Fetch balances and return the ranked distribution.

        Raises:
            ValidationError: Missing symbol or zero total supply
        """
        balances = await self.fetch_balances()
        records = self.normalizer.normalize(balances)
        self.log.info(
            "chain_distribution_normalized",
            symbol=self.symbol,
            chains=len(balances),
            records=len(records),
        )
        return records
