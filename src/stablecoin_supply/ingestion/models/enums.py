"""
Enums for the provider-agnostic ingestion layer.
"""

from enum import Enum


class DataProvider(str, Enum):
    """
    Third-party data providers.

    Market-cap providers are tried in the configured priority order;
    DefiLlama also serves the per-chain distribution.
    """

    COINGECKO = "coingecko"
    DEFILLAMA = "defillama"
    COINPAPRIKA = "coinpaprika"


class DataKind(str, Enum):
    """What an adapter delivers."""

    MARKET_CAP = "market_cap"
    CHAIN_DISTRIBUTION = "chain_distribution"
