"""
Base adapters for provider-specific parsing behind one capability.

Every adapter declares which provider it talks to and what it delivers, and
exposes fetch_and_normalize(). Transport, retries and status handling are
delegated to the injected ResilientFetcher; the adapter only knows URLs and
payload shapes.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from stablecoin_supply.infrastructure.observability import get_ingestion_logger
from stablecoin_supply.ingestion.fetcher import ResilientFetcher
from stablecoin_supply.ingestion.models.enums import DataKind, DataProvider
from stablecoin_supply.ingestion.ports import IResponseValidator
from stablecoin_supply.shared.models import MonthlyRecord
from stablecoin_supply.transformation.normalizers import MonthlySeriesNormalizer


class BaseAdapter(ABC):
    """
    Base adapter for one provider endpoint.

    Attributes:
        provider: Which third-party service the data comes from
        kind: What the adapter delivers (market cap series, chain distribution)
        validator: Payload validator applied by the fetcher before parsing
    """

    provider: DataProvider
    kind: DataKind
    validator: IResponseValidator | None = None

    def __init__(self, fetcher: ResilientFetcher, base_url: str, coin: str):
        """Initialize adapter.

        Args:
            fetcher: Shared resilient fetcher
            base_url: Provider API root (no trailing slash)
            coin: Coin key used for log context (e.g., "usdc")
        """
        self.fetcher = fetcher
        self.base_url = base_url.rstrip("/")
        self.coin = coin
        self.log = get_ingestion_logger(
            f"{self.kind.value}-adapter", provider=self.provider.value, coin=coin
        )

    @property
    def provider_name(self) -> str:
        return self.provider.value

    async def _get_json(
        self, path: str, endpoint: str, params: dict[str, Any] | None = None
    ) -> Any:
        """GET a provider path through the fetcher and return the JSON body."""
        response = await self.fetcher.fetch(
            f"{self.base_url}/{path.lstrip('/')}",
            params=params,
            endpoint=f"{self.provider.value}:{endpoint}",
            validator=self.validator,
        )
        return response.body

    @abstractmethod
    async def fetch_and_normalize(self) -> Any:
        """Fetch from the provider and return canonical records."""

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"provider={self.provider.value}, "
            f"kind={self.kind.value}, "
            f"coin={self.coin})"
        )


class MarketCapAdapter(BaseAdapter):
    """Template for market-cap providers.

    Subclasses implement _request() (path, endpoint label, params) and
    _extract_points() (payload → (timestamp, USD market cap) pairs); the
    monthly collapse is shared.
    """

    kind = DataKind.MARKET_CAP

    def __init__(
        self,
        fetcher: ResilientFetcher,
        base_url: str,
        coin: str,
        asset_id: str,
        history_days: int = 365,
        normalizer: MonthlySeriesNormalizer | None = None,
    ):
        super().__init__(fetcher, base_url, coin)
        self.asset_id = asset_id
        self.history_days = history_days
        self.normalizer = normalizer or MonthlySeriesNormalizer()

    @abstractmethod
    def _request(self) -> tuple[str, str, dict[str, Any] | None]:
        """Return (path, endpoint label, query params) for the history call."""

    @abstractmethod
    def _extract_points(self, payload: Any) -> list[tuple[datetime, float | None]]:
        """Extract (timestamp, market cap in USD) pairs; None marks a gap."""

    async def fetch_and_normalize(self) -> list[MonthlyRecord]:
        """Fetch the market-cap history and collapse it to monthly records.

        Raises:
            SupplyPipelineError: Classified fetch, parse or validation failure
        """
        path, endpoint, params = self._request()
        payload = await self._get_json(path, endpoint, params)
        points = self._extract_points(payload)
        records = self.normalizer.normalize(points)
        self.log.info(
            "market_cap_normalized",
            observations=len(points),
            months=len(records),
            first=records[0].period_key,
            last=records[-1].period_key,
        )
        return records
