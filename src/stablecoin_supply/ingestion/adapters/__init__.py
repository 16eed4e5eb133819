"""
Provider adapters.
Exports the market-cap adapters (CoinGecko, DefiLlama, CoinPaprika) and the
DefiLlama chain-distribution adapter.
"""

from stablecoin_supply.ingestion.adapters.base import BaseAdapter, MarketCapAdapter
from stablecoin_supply.ingestion.adapters.coingecko import CoinGeckoMarketCapAdapter
from stablecoin_supply.ingestion.adapters.coinpaprika import (
    CoinPaprikaMarketCapAdapter,
)
from stablecoin_supply.ingestion.adapters.defillama import (
    DefiLlamaChainAdapter,
    DefiLlamaMarketCapAdapter,
)

__all__ = [
    "BaseAdapter",
    "MarketCapAdapter",
    "CoinGeckoMarketCapAdapter",
    "CoinPaprikaMarketCapAdapter",
    "DefiLlamaChainAdapter",
    "DefiLlamaMarketCapAdapter",
]
