"""
Tests for the live snapshot loader and health probe.
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from stablecoin_supply.ingestion.exceptions import (
    NetworkError,
    ParseError,
    ValidationError,
)
from stablecoin_supply.orchestration.live import (
    HttpHealthProbe,
    LiveSnapshotLoader,
    fetch_supply_and_chains,
)
from stablecoin_supply.shared.models import ChainRecord, MonthlyRecord
from stablecoin_supply.transformation.aggregator import aggregate_yearly
from stablecoin_supply.transformation.merger import merge_monthly_history
from stablecoin_supply.transformation.snapshot import build_snapshot
from tests.fixtures import make_response, monthly_series


def source(result=None, error=None):
    port = MagicMock()
    port.fetch_and_normalize = AsyncMock(return_value=result, side_effect=error)
    return port


CHAINS = [ChainRecord(chain_name="Ethereum", amount=100.0, share_pct=100.0)]


@pytest.fixture
def bundled():
    monthly = merge_monthly_history(
        [], monthly_series(("2023-12", 80.0), ("2024-01", 90.0))
    )
    monthly.append(
        MonthlyRecord(period_key="2024-02", supply=999.0, change_pct=0.0, estimated=True)
    )
    return build_snapshot(
        monthly,
        aggregate_yearly(monthly[:2]),
        CHAINS,
        datetime(2024, 1, 31, tzinfo=UTC),
    )


class TestFetchSupplyAndChains:
    @pytest.mark.asyncio
    async def test_returns_both_series(self):
        monthly = monthly_series(("2024-01", 1.0))

        result = await fetch_supply_and_chains(source(monthly), source(CHAINS))

        assert result == (monthly, CHAINS)

    @pytest.mark.asyncio
    async def test_failure_waits_for_other_fetch(self):
        chains = source(CHAINS)

        with pytest.raises(NetworkError):
            await fetch_supply_and_chains(source(error=NetworkError("down")), chains)

        chains.fetch_and_normalize.assert_awaited_once()


class TestLiveSnapshotLoader:
    @pytest.mark.asyncio
    async def test_merges_fresh_data_over_bundled_history(self, bundled):
        fresh = monthly_series(("2024-01", 100.0), ("2024-02", 110.0))
        loader = LiveSnapshotLoader("usdc", source(fresh), source(CHAINS), lambda: bundled)

        snapshot = await loader()

        assert [(m.period_key, m.supply, m.change_pct) for m in snapshot.monthly] == [
            ("2023-12", 80.0, 0.0),
            ("2024-01", 100.0, 25.0),
            ("2024-02", 110.0, 10.0),
        ]
        assert not snapshot.has_estimates
        assert [(y.year, y.supply) for y in snapshot.yearly] == [(2023, 80.0), (2024, 110.0)]
        assert snapshot.chains == CHAINS
        assert snapshot.metrics.latest_supply == 110.0

    @pytest.mark.asyncio
    async def test_works_without_bundled_history(self):
        fresh = monthly_series(("2024-01", 100.0))
        loader = LiveSnapshotLoader("usdc", source(fresh), source(CHAINS), lambda: None)

        snapshot = await loader.load()

        assert [m.period_key for m in snapshot.monthly] == ["2024-01"]

    @pytest.mark.asyncio
    async def test_unreadable_bundled_history_is_ignored(self):
        fresh = monthly_series(("2024-01", 100.0))
        loader = LiveSnapshotLoader(
            "usdc",
            source(fresh),
            source(CHAINS),
            MagicMock(side_effect=ParseError("bad json")),
        )

        snapshot = await loader.load()

        assert len(snapshot.monthly) == 1

    @pytest.mark.asyncio
    async def test_provider_failure_propagates(self, bundled):
        loader = LiveSnapshotLoader(
            "usdc",
            source(monthly_series(("2024-01", 1.0))),
            source(error=ValidationError("zero total")),
            lambda: bundled,
        )

        with pytest.raises(ValidationError):
            await loader.load()


class TestHttpHealthProbe:
    @pytest.mark.asyncio
    async def test_ok_status_passes(self):
        client = MagicMock()
        client.get = AsyncMock(return_value=make_response({"gecko_says": "ok"}))

        probe = HttpHealthProbe(client, "https://api.example/ping", timeout=2.0)

        assert await probe() is True
        client.get.assert_awaited_once_with("https://api.example/ping", timeout=2.0)

    @pytest.mark.asyncio
    async def test_error_status_fails(self):
        client = MagicMock()
        client.get = AsyncMock(return_value=make_response({}, status_code=503))

        assert await HttpHealthProbe(client, "https://api.example/ping")() is False

    @pytest.mark.asyncio
    async def test_transport_error_fails(self):
        client = MagicMock()
        client.get = AsyncMock(side_effect=NetworkError("timeout"))

        assert await HttpHealthProbe(client, "https://api.example/ping")() is False

    @pytest.mark.asyncio
    async def test_unclassified_error_propagates(self):
        client = MagicMock()
        client.get = AsyncMock(side_effect=RuntimeError("bug"))

        with pytest.raises(RuntimeError):
            await HttpHealthProbe(client, "https://api.example/ping")()
