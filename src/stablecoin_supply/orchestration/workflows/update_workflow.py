"""
Supply Update Workflow
======================

Scheduled offline job for one coin:

1. Read persisted monthly and yearly history
2. Fetch market cap (provider chain) and chain distribution concurrently
3. Merge monthly history, roll up yearly, check completeness (advisory)
4. Write both CSV files and the coin's entry in the JSON document

Nothing is written unless both fetches succeed. Errors propagate as
classified SupplyPipelineError so the caller can map them to exit codes.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any

from stablecoin_supply.infrastructure.observability import get_pipeline_logger
from stablecoin_supply.ingestion.exceptions import SupplyPipelineError
from stablecoin_supply.ingestion.ports import ChainDistributionPort, MarketCapPort
from stablecoin_supply.orchestration.live import fetch_supply_and_chains
from stablecoin_supply.storage.history_store import CsvHistoryStore
from stablecoin_supply.storage.snapshot_writer import SnapshotDocumentStore
from stablecoin_supply.transformation.aggregator import aggregate_yearly
from stablecoin_supply.transformation.merger import merge_monthly_history
from stablecoin_supply.transformation.snapshot import build_snapshot
from stablecoin_supply.transformation.validators import (
    CompletenessReport,
    CompletenessValidator,
)


@dataclass
class WorkflowResult:
    """Result of one update run."""

    coin: str
    duration_seconds: float
    months: int = 0
    new_months: int = 0
    years: int = 0
    chains: int = 0
    provider: str | None = None
    report: CompletenessReport = field(default_factory=CompletenessReport)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "coin": self.coin,
            "duration_seconds": self.duration_seconds,
            "months": self.months,
            "new_months": self.new_months,
            "years": self.years,
            "chains": self.chains,
            "provider": self.provider,
            "gaps": len(self.report.gaps),
            "anomalies": len(self.report.anomalies),
        }


class SupplyUpdateWorkflow:
    """Coordinates fetch, merge, roll-up and persistence for one coin."""

    def __init__(
        self,
        coin: str,
        market_cap: MarketCapPort,
        chains: ChainDistributionPort,
        history_store: CsvHistoryStore,
        document_store: SnapshotDocumentStore,
        validator: CompletenessValidator | None = None,
    ):
        """
        Initialize update workflow.

        Args:
            coin: Coin key (e.g., "usdc")
            market_cap: Market-cap source, normally a MarketCapProviderChain
            chains: Chain-distribution adapter
            history_store: CSV history for this coin
            document_store: Consolidated JSON document
            validator: Completeness checker (default 100% anomaly threshold)
        """
        self.coin = coin.lower()
        self.market_cap = market_cap
        self.chains = chains
        self.history_store = history_store
        self.document_store = document_store
        self.validator = validator or CompletenessValidator()
        self._lock = asyncio.Lock()
        self.log = get_pipeline_logger(coin=self.coin)

    async def run(self) -> WorkflowResult:
        """Execute one update cycle.

        Raises:
            SupplyPipelineError: Classified failure of any step
        """
        async with self._lock:
            start = time.monotonic()
            self.log.info("update_started")
            try:
                result = await self._run()
            except SupplyPipelineError as e:
                self.log.error(
                    "update_failed",
                    category=e.category.value,
                    retryable=e.retryable,
                    error=str(e),
                    duration_s=round(time.monotonic() - start, 3),
                )
                raise
            result.duration_seconds = round(time.monotonic() - start, 3)
            self.log.info("update_completed", **result.to_dict())
            return result

    async def _run(self) -> WorkflowResult:
        existing_monthly = self.history_store.read_monthly()
        existing_yearly = self.history_store.read_yearly()

        fresh_monthly, chain_records = await fetch_supply_and_chains(
            self.market_cap, self.chains
        )

        monthly = merge_monthly_history(existing_monthly, fresh_monthly)
        yearly = aggregate_yearly(monthly, existing_yearly)
        report = self.validator.validate(monthly, coin=self.coin)

        self.history_store.write_monthly(monthly)
        self.history_store.write_yearly(yearly)

        snapshot = build_snapshot(monthly, yearly, chain_records)
        self.document_store.write_snapshot(self.coin, snapshot)

        known = {record.period_key for record in existing_monthly}
        return WorkflowResult(
            coin=self.coin,
            duration_seconds=0.0,
            months=len(monthly),
            new_months=sum(1 for r in monthly if r.period_key not in known),
            years=len(yearly),
            chains=len(chain_records),
            provider=getattr(self.market_cap, "last_provider", None),
            report=report,
        )
