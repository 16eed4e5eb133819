"""Configuration value objects for dependency injection.

Instead of injecting the global ConfigState into each component, inject the
specific frozen dataclass it needs. Built once at the composition root from
the validated pydantic configuration.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class HttpClientConfig:
    """Configuration for HTTP client."""

    timeout: float = 20.0
    user_agent: str = "stablecoin-supply/0.1"


@dataclass(frozen=True)
class RetryConfig:
    """Configuration for retry behavior."""

    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0
    backoff_multiplier: float = 2.0
    retryable_status_codes: tuple[int, ...] = (429, 500, 502, 503, 504)


@dataclass(frozen=True)
class ChainNormalizationConfig:
    """Cutoffs for collapsing small chains into the Others bucket."""

    top_n: int = 8
    min_share_pct: float = 0.5
