"""
Tests for SupplyUpdateWorkflow.
"""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from stablecoin_supply.ingestion.exceptions import (
    FileSystemError,
    ProviderChainError,
    ValidationError,
)
from stablecoin_supply.orchestration.workflows import SupplyUpdateWorkflow
from stablecoin_supply.shared.models import ChainRecord
from stablecoin_supply.storage.history_store import CsvHistoryStore
from stablecoin_supply.storage.snapshot_writer import SnapshotDocumentStore
from stablecoin_supply.transformation.validators import CompletenessValidator
from tests.fixtures import monthly_series

CHAINS = [
    ChainRecord(chain_name="Ethereum", amount=90.0, share_pct=75.0),
    ChainRecord(chain_name="Solana", amount=30.0, share_pct=25.0),
]


def source(result=None, error=None, last_provider=None):
    port = MagicMock()
    port.fetch_and_normalize = AsyncMock(return_value=result, side_effect=error)
    port.last_provider = last_provider
    return port


@pytest.fixture
def history(tmp_path):
    return CsvHistoryStore.for_coin(tmp_path, "usdc_monthly_supply.csv", "usdc_yearly_supply.csv")


@pytest.fixture
def documents(tmp_path):
    return SnapshotDocumentStore(tmp_path / "data.json")


def make_workflow(history, documents, market_cap, chains, **kwargs):
    return SupplyUpdateWorkflow(
        coin="USDC",
        market_cap=market_cap,
        chains=chains,
        history_store=history,
        document_store=documents,
        **kwargs,
    )


class TestSupplyUpdateWorkflow:
    @pytest.mark.asyncio
    async def test_first_run_writes_history_and_snapshot(self, history, documents):
        fresh = monthly_series(("2023-12", 100.0), ("2024-01", 110.0), ("2024-02", 120.0))
        workflow = make_workflow(
            history, documents, source(fresh, last_provider="coingecko"), source(CHAINS)
        )

        result = await workflow.run()

        assert [(m.period_key, m.change_pct) for m in history.read_monthly()] == [
            ("2023-12", 0.0),
            ("2024-01", 10.0),
            ("2024-02", 9.09),
        ]
        assert [(y.year, y.supply, y.change_pct) for y in history.read_yearly()] == [
            (2023, 100.0, 0.0),
            (2024, 120.0, 20.0),
        ]
        snapshot = documents.read_snapshot("usdc")
        assert len(snapshot.monthly) == 3
        assert snapshot.chains == CHAINS
        assert snapshot.metrics.latest_supply == 120.0

        assert result.coin == "usdc"
        assert result.months == 3
        assert result.new_months == 3
        assert result.years == 2
        assert result.chains == 2
        assert result.provider == "coingecko"
        assert result.report.is_complete
        assert result.duration_seconds >= 0
        assert result.to_dict()["gaps"] == 0

    @pytest.mark.asyncio
    async def test_rerun_with_same_data_is_idempotent(self, history, documents):
        fresh = monthly_series(("2024-01", 110.0), ("2024-02", 120.0))
        workflow = make_workflow(history, documents, source(fresh), source(CHAINS))

        await workflow.run()
        monthly_csv = history.monthly_path.read_text()
        yearly_csv = history.yearly_path.read_text()
        result = await workflow.run()

        assert history.monthly_path.read_text() == monthly_csv
        assert history.yearly_path.read_text() == yearly_csv
        assert result.new_months == 0

    @pytest.mark.asyncio
    async def test_existing_history_is_extended(self, history, documents):
        history.monthly_path.write_text(
            "month,supply,change\n2023-11,90.0,0\n2023-12,100.0,11.11\n"
        )
        history.yearly_path.write_text("year,supply,change\n2022,50.0,0\n2023,100.0,100.0\n")
        workflow = make_workflow(
            history,
            documents,
            source(monthly_series(("2024-01", 105.0))),
            source(CHAINS),
        )

        result = await workflow.run()

        assert [m.period_key for m in history.read_monthly()] == ["2023-11", "2023-12", "2024-01"]
        assert [y.year for y in history.read_yearly()] == [2022, 2023, 2024]
        assert result.new_months == 1

    @pytest.mark.asyncio
    async def test_gaps_are_reported_not_fatal(self, history, documents):
        fresh = monthly_series(("2024-01", 100.0), ("2024-04", 101.0))
        workflow = make_workflow(
            history,
            documents,
            source(fresh),
            source(CHAINS),
            validator=CompletenessValidator(anomaly_threshold_pct=50),
        )

        result = await workflow.run()

        assert result.report.gaps[0].missing_months == 2
        assert history.monthly_path.exists()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "market_cap_error,chain_error",
        [
            (ProviderChainError("all failed", errors=[]), None),
            (None, ValidationError("USDC not found")),
        ],
    )
    async def test_nothing_written_when_a_fetch_fails(
        self, history, documents, market_cap_error, chain_error
    ):
        workflow = make_workflow(
            history,
            documents,
            source(monthly_series(("2024-01", 1.0)), error=market_cap_error),
            source(CHAINS, error=chain_error),
        )

        with pytest.raises((ProviderChainError, ValidationError)):
            await workflow.run()

        assert not history.monthly_path.exists()
        assert not history.yearly_path.exists()
        assert not documents.path.exists()

    @pytest.mark.asyncio
    async def test_document_keeps_other_coins(self, history, documents):
        documents.path.write_text(json.dumps({"usdt": {"untouched": 1}}))
        workflow = make_workflow(
            history, documents, source(monthly_series(("2024-01", 1.0))), source(CHAINS)
        )

        await workflow.run()

        document = json.loads(documents.path.read_text())
        assert document["usdt"] == {"untouched": 1}
        assert "usdc" in document

    @pytest.mark.asyncio
    async def test_write_failure_propagates(self, tmp_path, documents):
        blocker = tmp_path / "blocker"
        blocker.write_text("file")
        history = CsvHistoryStore(blocker / "m.csv", blocker / "y.csv")
        workflow = make_workflow(
            history, documents, source(monthly_series(("2024-01", 1.0))), source(CHAINS)
        )

        with pytest.raises(FileSystemError):
            await workflow.run()

    @pytest.mark.asyncio
    async def test_concurrent_runs_do_not_interleave(self, history, documents):
        active = 0
        peak = 0

        async def slow_fetch():
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0)
            active -= 1
            return monthly_series(("2024-01", 1.0))

        market_cap = MagicMock()
        market_cap.fetch_and_normalize = slow_fetch
        market_cap.last_provider = None
        workflow = make_workflow(history, documents, market_cap, source(CHAINS))

        await asyncio.gather(workflow.run(), workflow.run())

        assert peak == 1
