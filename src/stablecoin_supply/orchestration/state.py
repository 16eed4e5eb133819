"""
Feed State
==========

Explicit refresh state for the dashboard feed. One RefreshState is owned by
one FallbackOrchestrator; nothing here is global.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class FeedState(str, Enum):
    """Health of the live data feed."""

    LIVE = "live"
    DEGRADED = "degraded"
    OFFLINE = "offline"


class DataSource(str, Enum):
    """Where a refresh result came from."""

    CACHE = "cache"
    LIVE = "live"
    BUNDLED = "bundled"
    STALE_CACHE = "stale_cache"


@dataclass
class RefreshState:
    """
    Consecutive-failure counter and cool-down bookkeeping.

    Transitions:
    - success: counter reset, LIVE
    - failure below threshold: DEGRADED
    - failure reaching threshold: OFFLINE, cool-down starts
    - failure (probe or fetch) while OFFLINE: cool-down restarts
    """

    feed_state: FeedState = FeedState.LIVE
    consecutive_failures: int = 0
    cooldown_started_at: float | None = None
    last_success_at: float | None = None
    last_error: str | None = None

    def record_success(self, now: float) -> None:
        self.feed_state = FeedState.LIVE
        self.consecutive_failures = 0
        self.cooldown_started_at = None
        self.last_success_at = now
        self.last_error = None

    def record_failure(self, now: float, threshold: int, error: str) -> None:
        self.consecutive_failures += 1
        self.last_error = error
        if self.feed_state is FeedState.OFFLINE or self.consecutive_failures >= threshold:
            self.feed_state = FeedState.OFFLINE
            self.cooldown_started_at = now
        else:
            self.feed_state = FeedState.DEGRADED

    def restart_cooldown(self, now: float, reason: str) -> None:
        """Stay OFFLINE and wait another full cool-down."""
        self.feed_state = FeedState.OFFLINE
        self.cooldown_started_at = now
        self.last_error = reason

    def cooldown_remaining(self, now: float, cooldown_seconds: float) -> float:
        if self.feed_state is not FeedState.OFFLINE or self.cooldown_started_at is None:
            return 0.0
        return max(0.0, self.cooldown_started_at + cooldown_seconds - now)

    def live_allowed(self, now: float, cooldown_seconds: float) -> bool:
        return self.cooldown_remaining(now, cooldown_seconds) == 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "feed_state": self.feed_state.value,
            "consecutive_failures": self.consecutive_failures,
            "cooldown_started_at": self.cooldown_started_at,
            "last_success_at": self.last_success_at,
            "last_error": self.last_error,
        }
