"""
Tests for provider adapters against recorded payloads.
"""

from unittest.mock import AsyncMock

import pytest

from stablecoin_supply.ingestion.adapters import (
    CoinGeckoMarketCapAdapter,
    CoinPaprikaMarketCapAdapter,
    DefiLlamaChainAdapter,
    DefiLlamaMarketCapAdapter,
)
from stablecoin_supply.ingestion.exceptions import ValidationError
from stablecoin_supply.ingestion.fetcher import ResilientFetcher
from stablecoin_supply.ingestion.models.enums import DataKind, DataProvider
from tests.fixtures import load_fixture, make_response


@pytest.fixture
def fetcher(http_client):
    return ResilientFetcher(http_client=http_client, sleep=AsyncMock())


def supplies(records):
    return [(r.period_key, r.supply) for r in records]


class TestCoinGeckoMarketCapAdapter:
    @pytest.fixture
    def adapter(self, fetcher):
        return CoinGeckoMarketCapAdapter(
            fetcher, "https://api.coingecko.com/api/v3/", "usdc", asset_id="usd-coin"
        )

    def test_identity(self, adapter):
        assert adapter.provider is DataProvider.COINGECKO
        assert adapter.kind is DataKind.MARKET_CAP
        assert adapter.provider_name == "coingecko"
        assert "coingecko" in repr(adapter)

    @pytest.mark.asyncio
    async def test_collapses_daily_caps_to_last_of_month(self, adapter, http_client):
        http_client.get.return_value = make_response(
            load_fixture("coingecko_market_chart")
        )

        records = await adapter.fetch_and_normalize()

        assert supplies(records) == [
            ("2024-01", 26000.0),
            ("2024-02", 28600.0),
            ("2024-03", 31460.0),
        ]
        assert all(r.change_pct == 0.0 for r in records)
        url = http_client.get.await_args.args[0]
        params = http_client.get.await_args.kwargs["params"]
        assert url == "https://api.coingecko.com/api/v3/coins/usd-coin/market_chart"
        assert params == {"vs_currency": "usd", "days": "365", "interval": "daily"}

    @pytest.mark.asyncio
    async def test_missing_market_caps_is_validation_error(self, adapter, http_client):
        http_client.get.return_value = make_response({"prices": []})

        with pytest.raises(ValidationError):
            await adapter.fetch_and_normalize()

        assert http_client.get.await_count == 1

    @pytest.mark.asyncio
    async def test_malformed_entry_is_validation_error(self, adapter, http_client):
        http_client.get.return_value = make_response(
            {"market_caps": [[None, 5.0]]}
        )

        with pytest.raises(ValidationError):
            await adapter.fetch_and_normalize()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("bad_value", ["n/a", float("nan"), float("-inf"), [1]])
    async def test_bad_value_after_first_entry_is_validation_error(
        self, adapter, http_client, bad_value
    ):
        http_client.get.return_value = make_response(
            {"market_caps": [[1706745600000, 1e9], [1709251200000, bad_value]]}
        )

        with pytest.raises(ValidationError) as exc_info:
            await adapter.fetch_and_normalize()

        assert exc_info.value.endpoint == "coingecko:market_chart"
        assert http_client.get.await_count == 1


class TestDefiLlamaMarketCapAdapter:
    @pytest.mark.asyncio
    async def test_reads_pegged_usd_and_skips_empty_points(self, fetcher, http_client):
        adapter = DefiLlamaMarketCapAdapter(
            fetcher, "https://stablecoins.llama.fi", "usdc", asset_id="2"
        )
        http_client.get.return_value = make_response(
            load_fixture("defillama_stablecoincharts")
        )

        records = await adapter.fetch_and_normalize()

        assert supplies(records) == [("2024-01", 26000.0), ("2024-02", 28600.0)]
        assert http_client.get.await_args.args[0] == (
            "https://stablecoins.llama.fi/stablecoincharts/all"
        )
        assert http_client.get.await_args.kwargs["params"] == {"stablecoin": "2"}

    @pytest.mark.asyncio
    async def test_chart_without_values_is_validation_error(self, fetcher, http_client):
        adapter = DefiLlamaMarketCapAdapter(
            fetcher, "https://stablecoins.llama.fi", "usdc", asset_id="2"
        )
        http_client.get.return_value = make_response(
            [{"date": "1706659200", "totalCirculatingUSD": {}}]
        )

        with pytest.raises(ValidationError):
            await adapter.fetch_and_normalize()

    @pytest.mark.asyncio
    async def test_non_numeric_later_point_is_validation_error(self, fetcher, http_client):
        adapter = DefiLlamaMarketCapAdapter(
            fetcher, "https://stablecoins.llama.fi", "usdc", asset_id="2"
        )
        http_client.get.return_value = make_response(
            [
                {"date": "1706659200", "totalCirculatingUSD": {"peggedUSD": 26e9}},
                {"date": "1709164800", "totalCirculatingUSD": {"peggedUSD": "NaN"}},
            ]
        )

        with pytest.raises(ValidationError, match="Non-finite"):
            await adapter.fetch_and_normalize()


class TestCoinPaprikaMarketCapAdapter:
    @pytest.mark.asyncio
    async def test_reads_historical_ticks(self, fetcher, http_client):
        adapter = CoinPaprikaMarketCapAdapter(
            fetcher,
            "https://api.coinpaprika.com/v1",
            "usdc",
            asset_id="usdc-usd-coin",
            history_days=30,
        )
        http_client.get.return_value = make_response(
            load_fixture("coinpaprika_historical")
        )

        records = await adapter.fetch_and_normalize()

        assert supplies(records) == [("2024-01", 26000.0), ("2024-02", 28600.0)]
        params = http_client.get.await_args.kwargs["params"]
        assert params["interval"] == "1d"
        assert len(params["start"]) == 10

    @pytest.mark.asyncio
    async def test_empty_history_is_validation_error(self, fetcher, http_client):
        adapter = CoinPaprikaMarketCapAdapter(
            fetcher, "https://api.coinpaprika.com/v1", "usdc", asset_id="usdc-usd-coin"
        )
        http_client.get.return_value = make_response([])

        with pytest.raises(ValidationError):
            await adapter.fetch_and_normalize()

    @pytest.mark.asyncio
    async def test_non_numeric_later_tick_is_validation_error(self, fetcher, http_client):
        adapter = CoinPaprikaMarketCapAdapter(
            fetcher, "https://api.coinpaprika.com/v1", "usdc", asset_id="usdc-usd-coin"
        )
        ticks = load_fixture("coinpaprika_historical")
        ticks[1]["market_cap"] = "unknown"
        http_client.get.return_value = make_response(ticks)

        with pytest.raises(ValidationError, match="Non-numeric") as exc_info:
            await adapter.fetch_and_normalize()

        assert exc_info.value.endpoint == "coinpaprika:historical"


class TestDefiLlamaChainAdapter:
    @pytest.fixture
    def adapter(self, fetcher, http_client):
        http_client.get.return_value = make_response(
            load_fixture("defillama_stablecoins")
        )
        return DefiLlamaChainAdapter(
            fetcher, "https://stablecoins.llama.fi", "usdc", symbol="USDC"
        )

    @pytest.mark.asyncio
    async def test_balances_are_in_millions(self, adapter):
        balances = await adapter.fetch_balances()

        assert balances["Ethereum"] == 40000.0
        assert balances["Near"] == 50.0
        assert balances["Retired"] == 0.0

    @pytest.mark.asyncio
    async def test_distribution_buckets_small_chains(self, adapter):
        records = await adapter.fetch_and_normalize()

        assert [(r.chain_name, r.amount, r.share_pct) for r in records] == [
            ("Ethereum", 40000.0, 80.08),
            ("Solana", 5000.0, 10.01),
            ("Base", 3000.0, 6.01),
            ("Arbitrum", 1500.0, 3.0),
            ("Polygon", 300.0, 0.6),
            ("Others (2)", 150.0, 0.3),
        ]
        assert sum(r.share_pct for r in records) == pytest.approx(100.0, abs=0.1)

    @pytest.mark.asyncio
    async def test_unknown_symbol_is_validation_error(self, fetcher, http_client):
        http_client.get.return_value = make_response(
            load_fixture("defillama_stablecoins")
        )
        adapter = DefiLlamaChainAdapter(
            fetcher, "https://stablecoins.llama.fi", "dai", symbol="DAI"
        )

        with pytest.raises(ValidationError, match="DAI not found"):
            await adapter.fetch_and_normalize()

    @pytest.mark.asyncio
    async def test_zero_total_is_validation_error(self, fetcher, http_client):
        http_client.get.return_value = make_response(
            {
                "peggedAssets": [
                    {"symbol": "USDC", "chainCirculating": {"Ethereum": {"current": {}}}}
                ]
            }
        )
        adapter = DefiLlamaChainAdapter(
            fetcher, "https://stablecoins.llama.fi", "usdc", symbol="USDC"
        )

        with pytest.raises(ValidationError, match="zero"):
            await adapter.fetch_and_normalize()

    @pytest.mark.asyncio
    async def test_non_numeric_balance_is_validation_error(self, fetcher, http_client):
        payload = load_fixture("defillama_stablecoins")
        chains = payload["peggedAssets"][1]["chainCirculating"]
        chains["Solana"]["current"]["peggedUSD"] = "pending"
        http_client.get.return_value = make_response(payload)
        adapter = DefiLlamaChainAdapter(
            fetcher, "https://stablecoins.llama.fi", "usdc", symbol="USDC"
        )

        with pytest.raises(ValidationError, match="Non-numeric") as exc_info:
            await adapter.fetch_and_normalize()

        assert exc_info.value.endpoint == "defillama:stablecoins"
