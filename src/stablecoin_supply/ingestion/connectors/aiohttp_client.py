"""Concrete HTTP client implementation for async requests.

Wraps aiohttp behind IHttpClient abstraction and turns transport failures
into classified pipeline errors.
"""

import asyncio
import json
from typing import Any

import aiohttp

from stablecoin_supply.ingestion.config.value_objects import HttpClientConfig
from stablecoin_supply.ingestion.exceptions import NetworkError, ParseError
from stablecoin_supply.ingestion.ports.http import HttpResponse, IHttpClient


class AiohttpClient(IHttpClient):
    """HTTP client implementation using aiohttp."""

    def __init__(self, config: HttpClientConfig | None = None):
        """Initialize HTTP client.

        Args:
            config: HTTP client configuration
        """
        self.config = config or HttpClientConfig()
        self._session: aiohttp.ClientSession | None = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.config.timeout)
            self._session = aiohttp.ClientSession(
                timeout=timeout,
                headers={"User-Agent": self.config.user_agent},
            )
        return self._session

    async def get(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> HttpResponse:
        """Execute GET request.

        Args:
            url: Full URL
            params: Query parameters
            headers: HTTP headers
            timeout: Request timeout override

        Returns:
            HttpResponse with status, body, headers

        Raises:
            NetworkError: On timeouts and connection errors
            ParseError: If a 200 response is not valid JSON
        """
        session = await self._get_session()
        effective_timeout = timeout or self.config.timeout
        timeout_obj = aiohttp.ClientTimeout(total=effective_timeout)

        try:
            async with session.get(
                url,
                params=params,
                headers=headers,
                timeout=timeout_obj,
            ) as resp:
                text = await resp.text()
                body: Any = text
                if resp.status == 200:
                    try:
                        body = json.loads(text)
                    except ValueError as e:
                        raise ParseError(
                            f"Invalid JSON from {url}: {e}", endpoint=url
                        ) from e
                return HttpResponse(
                    status_code=resp.status,
                    body=body,
                    headers=dict(resp.headers),
                    url=str(resp.url),
                )
        except asyncio.TimeoutError as e:
            raise NetworkError(
                f"Request to {url} timed out after {effective_timeout}s",
                endpoint=url,
            ) from e
        except aiohttp.ClientError as e:
            raise NetworkError(f"Connection error for {url}: {e}", endpoint=url) from e

    async def close(self) -> None:
        """Close HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

    async def __aenter__(self):
        await self._get_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
