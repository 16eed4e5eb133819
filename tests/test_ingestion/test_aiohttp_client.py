"""
Tests for AiohttpClient response decoding and transport error mapping.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from stablecoin_supply.ingestion.config.value_objects import HttpClientConfig
from stablecoin_supply.ingestion.connectors.aiohttp_client import AiohttpClient
from stablecoin_supply.ingestion.exceptions import NetworkError, ParseError


class FakeResponse:
    def __init__(self, status=200, text="{}", headers=None):
        self.status = status
        self._text = text
        self.headers = headers or {}
        self.url = "https://api.example/data"

    async def text(self):
        return self._text

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


def client_with(response=None, error=None):
    session = MagicMock()
    session.closed = False
    session.close = AsyncMock()
    session.get = MagicMock(return_value=response, side_effect=error)
    client = AiohttpClient(HttpClientConfig(timeout=5.0))
    client._session = session
    return client, session


class TestAiohttpClient:
    @pytest.mark.asyncio
    async def test_success_body_is_decoded(self):
        client, session = client_with(
            FakeResponse(text='{"market_caps": []}', headers={"X-Rate": "1"})
        )

        response = await client.get("https://api.example/data", params={"days": "30"})

        assert response.status_code == 200
        assert response.body == {"market_caps": []}
        assert response.headers == {"X-Rate": "1"}
        kwargs = session.get.call_args.kwargs
        assert kwargs["params"] == {"days": "30"}
        assert kwargs["timeout"].total == 5.0

    @pytest.mark.asyncio
    async def test_error_body_is_left_as_text(self):
        client, _ = client_with(FakeResponse(status=502, text="<html>502 Bad Gateway</html>"))

        response = await client.get("https://api.example/data", timeout=1.0)

        assert response.status_code == 502
        assert response.body == "<html>502 Bad Gateway</html>"

    @pytest.mark.asyncio
    async def test_invalid_json_is_parse_error(self):
        client, _ = client_with(FakeResponse(text="not json"))

        with pytest.raises(ParseError):
            await client.get("https://api.example/data")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [asyncio.TimeoutError(), aiohttp.ClientConnectionError("refused")],
    )
    async def test_transport_failures_are_network_errors(self, error):
        client, _ = client_with(error=error)

        with pytest.raises(NetworkError) as exc_info:
            await client.get("https://api.example/data")

        assert exc_info.value.retryable is True

    @pytest.mark.asyncio
    async def test_close_releases_session(self):
        client, session = client_with(FakeResponse())

        await client.close()

        session.close.assert_awaited_once()
        assert client._session is None
