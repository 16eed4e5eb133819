"""
Retry Handler

Distinguishes retryable failures (timeouts, connection errors, 429, 5xx)
from permanent ones (other 4xx, bad payloads, parse errors) and computes
exponential backoff delays.
"""

from stablecoin_supply.ingestion.config.value_objects import RetryConfig
from stablecoin_supply.ingestion.exceptions import (
    HttpStatusError,
    SupplyPipelineError,
)
from stablecoin_supply.ingestion.ports.validators import IRetryHandler


class RetryHandler(IRetryHandler):
    """Determines retry behavior for classified errors."""

    def __init__(self, config: RetryConfig | None = None):
        """Initialize retry handler.

        Args:
            config: Retry configuration
        """
        self.config = config or RetryConfig()
        self.max_retries = self.config.max_retries

    def should_retry(self, error: Exception) -> bool:
        """
        Determine if an error should be retried.

        Args:
            error: Exception raised by the failed attempt

        Returns:
            True if error is retryable, False otherwise
        """
        if isinstance(error, HttpStatusError):
            return error.status_code in self.config.retryable_status_codes or (
                error.status_code >= 500
            )
        if isinstance(error, SupplyPipelineError):
            return error.retryable
        return False

    def get_retry_delay(
        self,
        attempt_number: int,
        error: Exception | None = None,
        base_delay: float | None = None,
    ) -> float:
        """
        Calculate retry delay with exponential backoff.

        delay = base_delay * multiplier^(attempt - 1), capped at max_delay.
        A numeric Retry-After on a 429 takes precedence (also capped).

        Args:
            attempt_number: Attempt that just failed (1-indexed)
            error: Error from that attempt
            base_delay: Per-call override of the configured base delay

        Returns:
            Number of seconds to wait before retrying
        """
        if isinstance(error, HttpStatusError) and error.retry_after is not None:
            return min(max(error.retry_after, 0.0), self.config.max_delay)

        base = self.config.base_delay if base_delay is None else base_delay
        delay = base * (self.config.backoff_multiplier ** (attempt_number - 1))
        return min(delay, self.config.max_delay)
