"""
Fallback Orchestrator
=====================

Dashboard-side refresh cycle. Each refresh resolves, in order:

1. Fresh cache entry (within TTL)
2. Live provider data, unless the feed is OFFLINE and cooling down
3. Last cached entry even if stale, when it is newer than the bundled
   snapshot (or no bundled snapshot exists)
4. Bundled snapshot, optionally extended with estimated months up to the
   current calendar month

and raises SnapshotUnavailableError only when all four come up empty.
Leaving OFFLINE needs a passing health probe and a successful live fetch.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime

from stablecoin_supply.common.utils import add_months, month_distance, period_key, utc_now
from stablecoin_supply.infrastructure.observability import get_pipeline_logger
from stablecoin_supply.ingestion.exceptions import (
    SnapshotUnavailableError,
    SupplyPipelineError,
)
from stablecoin_supply.orchestration.cache import SnapshotCache
from stablecoin_supply.orchestration.state import DataSource, FeedState, RefreshState
from stablecoin_supply.shared.models import MonthlyRecord, Snapshot
from stablecoin_supply.transformation.merger import percent_change
from stablecoin_supply.transformation.metrics import average_growth

LiveLoader = Callable[[], Awaitable[Snapshot]]
HealthProbe = Callable[[], Awaitable[bool]]
BundledSource = Callable[[], Snapshot | None]


def _is_newer(snapshot: Snapshot, other: Snapshot) -> bool:
    """Compare last_updated stamps; naive stamps are taken as UTC."""
    first, second = (
        dt if dt.tzinfo is not None else dt.replace(tzinfo=UTC)
        for dt in (snapshot.last_updated, other.last_updated)
    )
    return first > second


@dataclass(frozen=True)
class RefreshResult:
    """Outcome of one refresh cycle."""

    snapshot: Snapshot
    source: DataSource
    feed_state: FeedState
    notice: str | None = None

    @property
    def is_live(self) -> bool:
        return self.source in (DataSource.LIVE, DataSource.CACHE)


def extend_with_estimates(
    monthly: Sequence[MonthlyRecord],
    through: str,
    growth_window: int = 3,
    precision: int = 2,
) -> list[MonthlyRecord]:
    """Append estimated months after the last record up to ``through``.

    Each placeholder compounds the mean growth of the trailing window
    (0 when it cannot be computed) and is flagged estimated=True. Nothing
    is added when the series already reaches ``through``.

    Args:
        monthly: Ascending monthly records
        through: Last period key to fill (normally the current month)
        growth_window: Months used for the growth estimate
        precision: Decimal places for supply and change

    Returns:
        New list: the original records followed by any placeholders
    """
    result = list(monthly)
    if not result:
        return result

    missing = month_distance(result[-1].period_key, through)
    if missing <= 0:
        return result

    growth = (average_growth(result, growth_window, precision=6) or 0.0) / 100
    previous = result[-1]
    for _ in range(missing):
        supply = round(max(previous.supply * (1 + growth), 0.0), precision)
        record = MonthlyRecord(
            period_key=add_months(previous.period_key, 1),
            supply=supply,
            change_pct=percent_change(previous.supply, supply, precision),
            estimated=True,
        )
        result.append(record)
        previous = record
    return result


class FallbackOrchestrator:
    """Serialized refresh cycles with cache, live, bundled and stale fallbacks."""

    def __init__(
        self,
        coin: str,
        live_loader: LiveLoader,
        bundled_source: BundledSource,
        cache: SnapshotCache | None = None,
        state: RefreshState | None = None,
        health_probe: HealthProbe | None = None,
        failure_threshold: int = 2,
        cooldown_seconds: float = 300.0,
        synthetic_fill: bool = True,
        clock: Callable[[], float] = time.time,
        today: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize orchestrator.

        Args:
            coin: Coin key, also the cache key
            live_loader: Coroutine factory producing a live Snapshot
            bundled_source: Returns the bundled snapshot (or None)
            cache: Snapshot cache (default in-memory, 600 s TTL)
            state: Refresh state (default fresh LIVE state)
            health_probe: Independent reachability check used to leave OFFLINE;
                when omitted the live fetch alone decides
            failure_threshold: Consecutive failures that switch to OFFLINE
            cooldown_seconds: How long OFFLINE skips live attempts
            synthetic_fill: Extend bundled data with estimated months
            clock: Wall-clock seconds (cool-down and cache age)
            today: Current datetime (limits estimated months)
        """
        self.coin = coin
        self.live_loader = live_loader
        self.bundled_source = bundled_source
        self.cache = cache or SnapshotCache()
        self.state = state or RefreshState()
        self.health_probe = health_probe
        self.failure_threshold = failure_threshold
        self.cooldown_seconds = cooldown_seconds
        self.synthetic_fill = synthetic_fill
        self._clock = clock
        self._today = today
        self._lock = asyncio.Lock()
        self.log = get_pipeline_logger("fallback-orchestrator", coin=coin)

    async def refresh(self) -> RefreshResult:
        """Run one refresh cycle.

        Raises:
            SnapshotUnavailableError: No live, bundled or cached data exists
        """
        async with self._lock:
            return await self._refresh()

    async def _refresh(self) -> RefreshResult:
        entry = self.cache.get(self.coin)
        if entry is not None:
            self.log.debug("cache_hit", stored_at=entry.stored_at)
            return RefreshResult(entry.snapshot, DataSource.CACHE, self.state.feed_state)

        live = await self._try_live()
        if live is not None:
            return live

        bundled = self._read_bundled()
        stale = self.cache.get(self.coin, allow_stale=True)
        if stale is not None and (bundled is None or _is_newer(stale.snapshot, bundled)):
            self.log.warning("serving_stale_cache", stored_at=stale.stored_at)
            return RefreshResult(
                stale.snapshot,
                DataSource.STALE_CACHE,
                self.state.feed_state,
                notice=(
                    "Live data is unavailable; showing the last data received "
                    f"({stale.snapshot.last_updated.isoformat()})."
                ),
            )

        if bundled is not None:
            return self._bundled_result(bundled)

        raise SnapshotUnavailableError(
            f"No live, bundled or cached data available for {self.coin}"
        )

    async def _try_live(self) -> RefreshResult | None:
        now = self._clock()
        if not self.state.live_allowed(now, self.cooldown_seconds):
            self.log.info(
                "live_fetch_skipped",
                feed_state=self.state.feed_state.value,
                cooldown_remaining_s=round(
                    self.state.cooldown_remaining(now, self.cooldown_seconds), 1
                ),
            )
            return None

        if self.state.feed_state is FeedState.OFFLINE and self.health_probe is not None:
            if not await self.health_probe():
                self.state.restart_cooldown(self._clock(), "health probe failed")
                self.log.warning("health_probe_failed")
                return None
            self.log.info("health_probe_passed")

        try:
            snapshot = await self.live_loader()
        except SupplyPipelineError as e:
            self.state.record_failure(self._clock(), self.failure_threshold, str(e))
            self.log.warning(
                "live_refresh_failed",
                feed_state=self.state.feed_state.value,
                consecutive_failures=self.state.consecutive_failures,
                category=e.category.value,
                error=str(e),
            )
            return None

        previous = self.state.feed_state
        self.state.record_success(self._clock())
        self.cache.put(self.coin, snapshot)
        if previous is not FeedState.LIVE:
            self.log.info("feed_recovered", previous_state=previous.value)
        return RefreshResult(snapshot, DataSource.LIVE, self.state.feed_state)

    def _read_bundled(self) -> Snapshot | None:
        try:
            return self.bundled_source()
        except SupplyPipelineError as e:
            self.log.error("bundled_snapshot_unreadable", error=str(e))
            return None

    def _bundled_result(self, bundled: Snapshot) -> RefreshResult:
        estimated = 0
        if self.synthetic_fill and bundled.monthly:
            monthly = extend_with_estimates(bundled.monthly, period_key(self._today()))
            estimated = len(monthly) - len(bundled.monthly)
            if estimated:
                bundled = bundled.model_copy(update={"monthly": monthly})

        notice = (
            "Live data is unavailable; showing bundled data from "
            f"{bundled.last_updated.date().isoformat()}"
        )
        if estimated:
            notice += f" with {estimated} estimated month(s)"
        self.log.warning(
            "serving_bundled_snapshot",
            feed_state=self.state.feed_state.value,
            estimated_months=estimated,
        )
        return RefreshResult(
            bundled, DataSource.BUNDLED, self.state.feed_state, notice=notice + "."
        )
