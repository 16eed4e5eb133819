"""
Data port protocols for provider adapters.

Every adapter exposes the same capability, fetch_and_normalize(), returning
canonical records; provider-specific payload parsing never leaks past it.
"""

from __future__ import annotations

from typing import Protocol

from stablecoin_supply.shared.models import ChainRecord, MonthlyRecord


class MarketCapPort(Protocol):
    """Monthly supply series from a market-cap provider."""

    provider_name: str

    async def fetch_and_normalize(self) -> list[MonthlyRecord]:
        """Fetch the provider's history and collapse it to one record per month."""


class ChainDistributionPort(Protocol):
    """Per-chain circulating distribution."""

    provider_name: str

    async def fetch_and_normalize(self) -> list[ChainRecord]:
        """Fetch chain balances and return ranked, bucketed chain records."""
