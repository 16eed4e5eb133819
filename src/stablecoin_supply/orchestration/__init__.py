"""
Orchestration layer: offline update workflow and the dashboard feed's
fallback cycle (cache, live, bundled, stale).
"""

from stablecoin_supply.orchestration.cache import CacheEntry, SnapshotCache
from stablecoin_supply.orchestration.fallback import (
    FallbackOrchestrator,
    RefreshResult,
    extend_with_estimates,
)
from stablecoin_supply.orchestration.live import HttpHealthProbe, LiveSnapshotLoader
from stablecoin_supply.orchestration.state import DataSource, FeedState, RefreshState

__all__ = [
    "CacheEntry",
    "DataSource",
    "FallbackOrchestrator",
    "FeedState",
    "HttpHealthProbe",
    "LiveSnapshotLoader",
    "RefreshResult",
    "RefreshState",
    "SnapshotCache",
    "extend_with_estimates",
]
