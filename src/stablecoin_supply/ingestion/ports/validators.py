"""Ports for the pieces the fetcher delegates: payload checks, status
classification and retry policy."""

from dataclasses import dataclass
from typing import Any, Protocol

from stablecoin_supply.ingestion.exceptions import HttpStatusError, SupplyPipelineError


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a payload shape check."""

    is_valid: bool
    error_message: str | None = None
    error_code: str | None = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(is_valid=True)

    @classmethod
    def failed(cls, message: str, code: str = "invalid_structure") -> "ValidationResult":
        return cls(is_valid=False, error_message=message, error_code=code)


class IResponseValidator(Protocol):
    """Checks a decoded 200 body before an adapter parses it."""

    def validate(self, endpoint: str, data: Any) -> ValidationResult: ...


class IErrorMapper(Protocol):
    """Turns a non-200 response into a classified HttpStatusError."""

    def map_error(
        self,
        status_code: int,
        body: Any,
        endpoint: str,
        headers: dict[str, str] | None = None,
    ) -> HttpStatusError: ...


class IRetryHandler(Protocol):
    """Retry eligibility and backoff for failed fetch attempts.

    Attributes:
        max_retries: Retries after the first attempt
    """

    max_retries: int

    def should_retry(self, error: SupplyPipelineError) -> bool: ...

    def get_retry_delay(
        self,
        attempt_number: int,
        error: SupplyPipelineError | None = None,
        base_delay: float | None = None,
    ) -> float:
        """Seconds to wait after ``attempt_number`` (1-indexed) failed.

        A Retry-After carried by ``error`` takes precedence over backoff.
        """
        ...
