"""
Factories Module - Adapter Creation
===================================

Registry-driven creation of provider adapters from configuration.
"""

from stablecoin_supply.common.factories.adapter_factory import (
    AdapterFactory,
    create_adapter_factory,
    create_chain_adapter,
)

__all__ = [
    "AdapterFactory",
    "create_adapter_factory",
    "create_chain_adapter",
]
