"""
Supply Pipeline Exception Hierarchy

Every failure the pipeline can surface is a SupplyPipelineError carrying its
category, whether retrying could help, the endpoint (or path) involved and
when it happened. Retry decisions and CLI exit codes are taken from these
attributes, never from exception messages.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from stablecoin_supply.common.utils import utc_now


class ErrorCategory(str, Enum):
    """Classification of pipeline failures."""

    NETWORK = "network"
    HTTP = "http"
    VALIDATION = "validation"
    FILESYSTEM = "filesystem"
    PARSE = "parse"
    UNKNOWN = "unknown"


class SupplyPipelineError(Exception):
    """Base exception for all classified pipeline errors."""

    category: ErrorCategory = ErrorCategory.UNKNOWN
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        retryable: bool | None = None,
        timestamp: datetime | None = None,
    ):
        super().__init__(message)
        self.endpoint = endpoint
        self.retryable = self.default_retryable if retryable is None else retryable
        self.timestamp = timestamp or utc_now()
        self.attempts = 1

    def to_dict(self) -> dict[str, Any]:
        """Structured representation for logs and error history."""
        return {
            "category": self.category.value,
            "error_type": type(self).__name__,
            "message": str(self),
            "retryable": self.retryable,
            "endpoint": self.endpoint,
            "timestamp": self.timestamp.isoformat(),
            "attempts": self.attempts,
        }


class NetworkError(SupplyPipelineError):
    """Connection failure or timeout; transient."""

    category = ErrorCategory.NETWORK
    default_retryable = True


class HttpStatusError(SupplyPipelineError):
    """Non-success HTTP status. Retryable for 5xx and 429 only."""

    category = ErrorCategory.HTTP

    def __init__(
        self,
        message: str,
        status_code: int,
        endpoint: str | None = None,
        retry_after: float | None = None,
        **kwargs,
    ):
        kwargs.setdefault("retryable", status_code == 429 or status_code >= 500)
        super().__init__(message, endpoint=endpoint, **kwargs)
        self.status_code = status_code
        self.retry_after = retry_after

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["status_code"] = self.status_code
        return data


class ValidationError(SupplyPipelineError):
    """Malformed, empty or zero-total payload; upstream data problem."""

    category = ErrorCategory.VALIDATION


class FileSystemError(SupplyPipelineError):
    """History or snapshot file could not be read or written."""

    category = ErrorCategory.FILESYSTEM


class ParseError(SupplyPipelineError):
    """Response or stored file is not parseable (bad JSON/CSV)."""

    category = ErrorCategory.PARSE


class ProviderChainError(SupplyPipelineError):
    """Every provider in a priority chain failed."""

    def __init__(self, message: str, errors: list[SupplyPipelineError], **kwargs):
        kwargs.setdefault("retryable", any(e.retryable for e in errors))
        super().__init__(message, **kwargs)
        self.errors = errors
        self.category = (
            errors[-1].category if errors else ErrorCategory.UNKNOWN
        )

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["errors"] = [e.to_dict() for e in self.errors]
        return data


class SnapshotUnavailableError(SupplyPipelineError):
    """No live, cached or bundled snapshot could be produced."""

    category = ErrorCategory.UNKNOWN
