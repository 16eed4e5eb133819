"""
MarketCapProviderChain: priority-ordered market-cap ingestion.
"""

from __future__ import annotations

from collections.abc import Sequence

from stablecoin_supply.infrastructure.observability import get_ingestion_logger
from stablecoin_supply.ingestion.exceptions import (
    ProviderChainError,
    SupplyPipelineError,
)
from stablecoin_supply.ingestion.ports import MarketCapPort
from stablecoin_supply.shared.models import MonthlyRecord


class MarketCapProviderChain:
    """Tries market-cap adapters in order; the first success wins.

    Only classified pipeline errors move the chain on to the next provider.
    Anything else is a programming error and propagates unchanged.
    """

    def __init__(self, adapters: Sequence[MarketCapPort], coin: str | None = None):
        if not adapters:
            raise ValueError("MarketCapProviderChain needs at least one adapter")
        self.adapters = list(adapters)
        self.last_provider: str | None = None
        self.log = get_ingestion_logger("provider-chain", coin=coin)

    @property
    def provider_names(self) -> list[str]:
        return [adapter.provider_name for adapter in self.adapters]

    async def fetch_and_normalize(self) -> list[MonthlyRecord]:
        """Return the first provider's monthly records.

        Raises:
            ProviderChainError: Every provider failed; carries each error
        """
        errors: list[SupplyPipelineError] = []
        for adapter in self.adapters:
            try:
                records = await adapter.fetch_and_normalize()
            except SupplyPipelineError as error:
                errors.append(error)
                self.log.warning(
                    "provider_failed",
                    provider=adapter.provider_name,
                    category=error.category.value,
                    retryable=error.retryable,
                    error=str(error),
                )
                continue

            self.last_provider = adapter.provider_name
            if errors:
                self.log.info(
                    "provider_fallback_succeeded",
                    provider=adapter.provider_name,
                    failed=[e.endpoint for e in errors],
                )
            return records

        summary = "; ".join(
            f"{adapter.provider_name}: {error}"
            for adapter, error in zip(self.adapters, errors)
        )
        raise ProviderChainError(
            f"All market-cap providers failed ({summary})", errors=errors
        )
