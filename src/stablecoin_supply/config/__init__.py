"""Configuration package for stablecoin_supply."""

from .state import CoinConfig, ConfigLoader, ConfigState, get_config

__all__ = [
    "CoinConfig",
    "ConfigLoader",
    "ConfigState",
    "get_config",
]
