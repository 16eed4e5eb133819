"""
Adapter Factory
===============

Creates market-cap adapters by data provider, in the priority order the
configuration lists them.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from stablecoin_supply.config.state import ConfigState
from stablecoin_supply.ingestion.adapters import (
    CoinGeckoMarketCapAdapter,
    CoinPaprikaMarketCapAdapter,
    DefiLlamaChainAdapter,
    DefiLlamaMarketCapAdapter,
    MarketCapAdapter,
)
from stablecoin_supply.ingestion.fetcher import ResilientFetcher
from stablecoin_supply.ingestion.models.enums import DataProvider
from stablecoin_supply.transformation.normalizers import ChainDistributionNormalizer

AdapterBuilder = Callable[..., MarketCapAdapter]


class AdapterFactory:
    """Registry-driven factory for market-cap adapters."""

    def __init__(self) -> None:
        self._registry: dict[DataProvider, AdapterBuilder] = {}

    def register(self, provider: DataProvider, builder: AdapterBuilder) -> None:
        self._registry[provider] = builder

    def create(
        self, provider: DataProvider, *args: Any, **kwargs: Any
    ) -> MarketCapAdapter:
        if provider not in self._registry:
            raise ValueError(f"No adapter registered for provider {provider}")
        return self._registry[provider](*args, **kwargs)

    def available_providers(self) -> list[DataProvider]:
        return list(self._registry.keys())

    def create_market_cap_adapters(
        self, config: ConfigState, coin: str, fetcher: ResilientFetcher
    ) -> list[MarketCapAdapter]:
        """Build one adapter per configured provider, highest priority first."""
        coin_config = config.coin(coin)
        asset_ids = {
            DataProvider.COINGECKO: coin_config.coingecko_id,
            DataProvider.DEFILLAMA: coin_config.defillama_id,
            DataProvider.COINPAPRIKA: coin_config.coinpaprika_id,
        }
        return [
            self.create(
                provider,
                fetcher,
                config.providers.base_url(provider),
                coin.lower(),
                asset_id=asset_ids[provider],
                history_days=config.providers.history_days,
            )
            for provider in config.providers.market_cap_priority
        ]


def create_adapter_factory() -> AdapterFactory:
    """Factory with every built-in market-cap provider registered."""
    factory = AdapterFactory()
    factory.register(DataProvider.COINGECKO, CoinGeckoMarketCapAdapter)
    factory.register(DataProvider.DEFILLAMA, DefiLlamaMarketCapAdapter)
    factory.register(DataProvider.COINPAPRIKA, CoinPaprikaMarketCapAdapter)
    return factory


def create_chain_adapter(
    config: ConfigState, coin: str, fetcher: ResilientFetcher
) -> DefiLlamaChainAdapter:
    """Build the chain-distribution adapter for a coin."""
    return DefiLlamaChainAdapter(
        fetcher,
        config.providers.defillama_url,
        coin.lower(),
        symbol=config.coin(coin).symbol,
        normalizer=ChainDistributionNormalizer(config.chains.normalization_config()),
    )
