"""
Live Snapshot Loading
=====================

Dashboard-side live path: fetch market cap and chain distribution
concurrently and project them onto the bundled history. The shared history
store is only read here, never written.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable

from stablecoin_supply.infrastructure.observability import (
    get_infrastructure_logger,
    get_pipeline_logger,
)
from stablecoin_supply.ingestion.exceptions import SupplyPipelineError
from stablecoin_supply.ingestion.ports import ChainDistributionPort, IHttpClient, MarketCapPort
from stablecoin_supply.shared.models import ChainRecord, MonthlyRecord, Snapshot
from stablecoin_supply.transformation.aggregator import aggregate_yearly
from stablecoin_supply.transformation.merger import merge_monthly_history
from stablecoin_supply.transformation.snapshot import build_snapshot


async def fetch_supply_and_chains(
    market_cap: MarketCapPort, chains: ChainDistributionPort
) -> tuple[list[MonthlyRecord], list[ChainRecord]]:
    """Fetch both series concurrently; the first failure is re-raised.

    Both requests are awaited to completion before raising so no task is
    left running in the background.
    """
    monthly, chain_records = await asyncio.gather(
        market_cap.fetch_and_normalize(),
        chains.fetch_and_normalize(),
        return_exceptions=True,
    )
    for outcome in (monthly, chain_records):
        if isinstance(outcome, BaseException):
            raise outcome
    return monthly, chain_records


class LiveSnapshotLoader:
    """Builds a live Snapshot on top of a read-only bundled history."""

    def __init__(
        self,
        coin: str,
        market_cap: MarketCapPort,
        chains: ChainDistributionPort,
        bundled_source: Callable[[], Snapshot | None],
    ):
        self.coin = coin
        self.market_cap = market_cap
        self.chains = chains
        self.bundled_source = bundled_source
        self.log = get_pipeline_logger("live-loader", coin=coin)

    async def __call__(self) -> Snapshot:
        return await self.load()

    async def load(self) -> Snapshot:
        """Fetch live data and merge it over the bundled history.

        Raises:
            SupplyPipelineError: Any provider, validation or storage failure
        """
        fresh_monthly, chain_records = await fetch_supply_and_chains(
            self.market_cap, self.chains
        )

        try:
            bundled = self.bundled_source()
        except SupplyPipelineError as e:
            self.log.warning("bundled_history_unavailable", error=str(e))
            bundled = None
        base_monthly = [m for m in bundled.monthly if not m.estimated] if bundled else []
        base_yearly = bundled.yearly if bundled else []

        monthly = merge_monthly_history(base_monthly, fresh_monthly)
        yearly = aggregate_yearly(monthly, base_yearly)
        snapshot = build_snapshot(monthly, yearly, chain_records)
        self.log.info(
            "live_snapshot_built",
            months=len(monthly),
            fresh_months=len(fresh_monthly),
            chains=len(chain_records),
        )
        return snapshot


class HttpHealthProbe:
    """Reachability check against an endpoint independent of the data calls."""

    def __init__(self, http_client: IHttpClient, url: str, timeout: float | None = 5.0):
        self.http_client = http_client
        self.url = url
        self.timeout = timeout
        self.log = get_infrastructure_logger("health-probe", url=url)

    async def __call__(self) -> bool:
        try:
            response = await self.http_client.get(self.url, timeout=self.timeout)
        except SupplyPipelineError as e:
            self.log.warning("health_probe_error", error=str(e))
            return False
        return response.status_code == 200
