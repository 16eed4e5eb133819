"""
Tests for snapshot assembly and its document form.
"""

from datetime import UTC, datetime

from stablecoin_supply.shared.models import ChainRecord
from stablecoin_supply.transformation.snapshot import build_snapshot
from tests.fixtures import monthly_series, yearly_series


class TestBuildSnapshot:
    def test_orders_chains_with_others_last(self):
        chains = [
            ChainRecord(chain_name="Others (3)", amount=500.0, share_pct=25.0),
            ChainRecord(chain_name="Solana", amount=300.0, share_pct=15.0),
            ChainRecord(chain_name="Ethereum", amount=1200.0, share_pct=60.0),
        ]
        stamp = datetime(2024, 3, 1, tzinfo=UTC)

        snapshot = build_snapshot(
            monthly_series(("2024-01", 100.0)), yearly_series((2024, 100.0)), chains, stamp
        )

        assert [c.chain_name for c in snapshot.chains] == ["Ethereum", "Solana", "Others (3)"]
        assert snapshot.last_updated == stamp
        assert snapshot.metrics.latest_supply == 100.0

    def test_document_uses_wire_names(self):
        snapshot = build_snapshot(
            monthly_series(("2024-01", 100.0)),
            yearly_series((2024, 100.0)),
            [ChainRecord(chain_name="Ethereum", amount=100.0, share_pct=100.0)],
            datetime(2024, 3, 1, tzinfo=UTC),
        )

        document = snapshot.to_document()

        assert document["monthly"][0] == {
            "month": "2024-01",
            "supply": 100.0,
            "change": 0.0,
            "estimated": False,
        }
        assert document["yearly"][0] == {"year": 2024, "supply": 100.0, "change": 0.0}
        assert document["chains"][0] == {
            "chain": "Ethereum",
            "amount": 100.0,
            "percentage": 100.0,
        }
