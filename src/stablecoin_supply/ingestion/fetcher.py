"""Resilient fetcher shared by every provider adapter.

Wraps a single GET with timeout, exponential-backoff retry and error
classification. Retry policy, status mapping and payload validation are
injected, not implemented here.
"""

import asyncio
from collections import deque
from collections.abc import Awaitable, Callable
from typing import Any

from stablecoin_supply.infrastructure.observability import get_ingestion_logger
from stablecoin_supply.ingestion.error_handlers import create_error_mapper_chain
from stablecoin_supply.ingestion.exceptions import (
    SupplyPipelineError,
    ValidationError,
)
from stablecoin_supply.ingestion.ports import (
    HttpResponse,
    IErrorMapper,
    IHttpClient,
    IResponseValidator,
    IRetryHandler,
)
from stablecoin_supply.ingestion.retry_handler import RetryHandler


class ResilientFetcher:
    """Retrying GET coordinator.

    Dependencies injected (not instantiated):
    - http_client: Executes HTTP requests (timeouts enforced there)
    - retry_handler: Decides retry eligibility and delays
    - error_mapper: Maps non-200 responses to HttpStatusError
    """

    def __init__(
        self,
        http_client: IHttpClient,
        retry_handler: IRetryHandler | None = None,
        error_mapper: IErrorMapper | None = None,
        timeout: float | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        history_size: int = 50,
    ):
        """Initialize fetcher.

        Args:
            http_client: HTTP client implementation (e.g., AiohttpClient)
            retry_handler: Retry policy (default RetryHandler())
            error_mapper: Status code mapper (default standard chain)
            timeout: Per-attempt timeout override passed to the client
            sleep: Awaitable used for backoff waits (injected in tests)
            history_size: How many recent errors to keep for diagnostics
        """
        self.http_client = http_client
        self.retry_handler = retry_handler or RetryHandler()
        self.error_mapper = error_mapper or create_error_mapper_chain()
        self.timeout = timeout
        self._sleep = sleep
        self.recent_errors: deque[dict[str, Any]] = deque(maxlen=history_size)
        self.log = get_ingestion_logger("fetcher")

    async def fetch(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        endpoint: str | None = None,
        validator: IResponseValidator | None = None,
        max_retries: int | None = None,
        base_delay: float | None = None,
    ) -> HttpResponse:
        """Fetch a URL, retrying transient failures.

        Args:
            url: Full URL
            params: Query parameters
            endpoint: Short label used in logs and errors (defaults to url)
            validator: Optional payload validator applied to 200 responses
            max_retries: Retries after the first attempt (default from policy)
            base_delay: First backoff delay in seconds (default from policy)

        Returns:
            Successful HttpResponse

        Raises:
            SupplyPipelineError: Classified error of the last attempt
        """
        label = endpoint or url
        retries = self.retry_handler.max_retries if max_retries is None else max_retries
        max_attempts = max(retries, 0) + 1

        for attempt_number in range(1, max_attempts + 1):
            self.log.debug(
                "fetch_attempt",
                endpoint=label,
                attempt=attempt_number,
                max_attempts=max_attempts,
            )
            try:
                response = await self.http_client.get(
                    url, params=params, timeout=self.timeout
                )

                if response.status_code != 200:
                    raise self.error_mapper.map_error(
                        response.status_code, response.body, label, response.headers
                    )

                if validator is not None:
                    result = validator.validate(label, response.body)
                    if not result.is_valid:
                        raise ValidationError(
                            f"Invalid response structure for {label}: "
                            f"{result.error_message}",
                            endpoint=label,
                        )

                self.log.info("fetch_succeeded", endpoint=label, attempt=attempt_number)
                return response

            except SupplyPipelineError as error:
                failure = error
            except Exception as exc:
                failure = SupplyPipelineError(
                    f"Unexpected error fetching {label}: {exc}", endpoint=label
                )
                failure.__cause__ = exc

            failure.attempts = attempt_number
            self.recent_errors.append(failure.to_dict())

            if not self.retry_handler.should_retry(failure):
                self.log.error(
                    "fetch_failed_non_retryable",
                    endpoint=label,
                    attempt=attempt_number,
                    category=failure.category.value,
                    error=str(failure),
                )
                raise failure

            if attempt_number >= max_attempts:
                self.log.error(
                    "fetch_retries_exhausted",
                    endpoint=label,
                    attempts=attempt_number,
                    category=failure.category.value,
                    error=str(failure),
                )
                raise failure

            delay = self.retry_handler.get_retry_delay(
                attempt_number, failure, base_delay=base_delay
            )
            self.log.warning(
                "fetch_retry_scheduled",
                endpoint=label,
                attempt=attempt_number,
                max_attempts=max_attempts,
                delay_s=delay,
                error=str(failure),
            )
            await self._sleep(delay)

        # Should not reach here
        raise SupplyPipelineError(f"Failed to fetch {label}", endpoint=label)
