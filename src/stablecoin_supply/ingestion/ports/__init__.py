"""Ports: what adapters deliver and what the fetcher depends on."""

from .data_ports import ChainDistributionPort, MarketCapPort
from .http import HttpResponse, IHttpClient
from .validators import (
    IErrorMapper,
    IResponseValidator,
    IRetryHandler,
    ValidationResult,
)

__all__ = [
    "ChainDistributionPort",
    "HttpResponse",
    "IErrorMapper",
    "IHttpClient",
    "IResponseValidator",
    "IRetryHandler",
    "MarketCapPort",
    "ValidationResult",
]
