"""Error handlers mapping non-success HTTP responses to HttpStatusError.

Each status range gets its own handler class, tried in registration order
by ErrorMapperChain (first match wins). Add new cases by registering a
handler, not by growing an if/elif chain.
"""

from typing import Any, Protocol

from stablecoin_supply.ingestion.exceptions import HttpStatusError


def extract_error_message(body: Any, default: str) -> str:
    """Extract a readable message from a JSON or text error body."""
    if isinstance(body, dict):
        message = body.get("error") or body.get("message")
        status = body.get("status")
        # CoinGecko nests errors under status.error_message
        if not message and isinstance(status, dict):
            message = status.get("error_message")
        return str(message or default)
    if isinstance(body, str) and body.strip():
        return body.strip()[:200]
    return default


def parse_retry_after(value: Any) -> float | None:
    """Parse a numeric Retry-After value; HTTP-date forms are ignored."""
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class IErrorHandler(Protocol):
    """Strategy for handling specific error condition."""

    def can_handle(self, status_code: int, body: Any) -> bool:
        """Check if this handler can handle the error."""
        ...

    def handle(
        self,
        status_code: int,
        body: Any,
        endpoint: str,
        headers: dict[str, str],
    ) -> HttpStatusError:
        """Convert error response to exception."""
        ...


class RateLimitHandler(IErrorHandler):
    """Handle 429 Too Many Requests errors."""

    def can_handle(self, status_code: int, body: Any) -> bool:
        return status_code == 429

    def handle(
        self, status_code: int, body: Any, endpoint: str, headers: dict[str, str]
    ) -> HttpStatusError:
        retry_after = parse_retry_after(headers.get("Retry-After"))
        if retry_after is None and isinstance(body, dict):
            retry_after = parse_retry_after(
                body.get("retry_after", body.get("retryAfter"))
            )
        message = extract_error_message(body, "Rate limit exceeded")
        return HttpStatusError(
            f"Rate limited by {endpoint}: {message}",
            status_code=status_code,
            endpoint=endpoint,
            retry_after=retry_after,
        )


class ServerErrorHandler(IErrorHandler):
    """Handle 5xx Server errors."""

    def can_handle(self, status_code: int, body: Any) -> bool:
        return 500 <= status_code < 600

    def handle(
        self, status_code: int, body: Any, endpoint: str, headers: dict[str, str]
    ) -> HttpStatusError:
        message = extract_error_message(body, "Server error")
        return HttpStatusError(
            f"Server error {status_code} for {endpoint}: {message}",
            status_code=status_code,
            endpoint=endpoint,
        )


class ClientErrorHandler(IErrorHandler):
    """Handle remaining 4xx errors (bad request, not found, auth)."""

    def can_handle(self, status_code: int, body: Any) -> bool:
        return 400 <= status_code < 500

    def handle(
        self, status_code: int, body: Any, endpoint: str, headers: dict[str, str]
    ) -> HttpStatusError:
        message = extract_error_message(body, "Client error")
        return HttpStatusError(
            f"Request rejected with {status_code} by {endpoint}: {message}",
            status_code=status_code,
            endpoint=endpoint,
        )


class ErrorMapperChain:
    """Chain of Responsibility for error mapping."""

    def __init__(self):
        """Initialize empty chain."""
        self._handlers: list[IErrorHandler] = []

    def register(self, handler: IErrorHandler) -> None:
        """Register error handler.

        Handlers are tried in registration order; first match wins.
        """
        self._handlers.append(handler)

    def map_error(
        self,
        status_code: int,
        body: Any,
        endpoint: str,
        headers: dict[str, str] | None = None,
    ) -> HttpStatusError:
        """Map error response to exception using chain."""
        headers = headers or {}
        for handler in self._handlers:
            if handler.can_handle(status_code, body):
                return handler.handle(status_code, body, endpoint, headers)

        return HttpStatusError(
            f"Unexpected HTTP {status_code} for {endpoint}",
            status_code=status_code,
            endpoint=endpoint,
        )


def create_error_mapper_chain() -> ErrorMapperChain:
    """Factory to create pre-configured error mapper chain.

    Returns:
        Chain with all standard error handlers registered
    """
    chain = ErrorMapperChain()
    chain.register(RateLimitHandler())
    chain.register(ServerErrorHandler())
    chain.register(ClientErrorHandler())
    return chain
