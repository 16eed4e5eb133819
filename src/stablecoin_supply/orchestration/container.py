"""
Dependency container for the supply pipeline.

Single place where concrete implementations are chosen:
- HTTP client (aiohttp wrapper)
- Error mapper (status classification) and retry handler (backoff)
- Resilient fetcher shared by every adapter
- Market-cap provider chain and chain-distribution adapter
- CSV history store and JSON snapshot document
- Update workflow (offline) and fallback orchestrator (dashboard feed)
"""

from __future__ import annotations

from pathlib import Path

from stablecoin_supply.common.factories import (
    AdapterFactory,
    create_adapter_factory,
    create_chain_adapter,
)
from stablecoin_supply.config.state import ConfigState
from stablecoin_supply.ingestion.adapters import DefiLlamaChainAdapter
from stablecoin_supply.ingestion.connectors.aiohttp_client import AiohttpClient
from stablecoin_supply.ingestion.error_handlers import create_error_mapper_chain
from stablecoin_supply.ingestion.fetcher import ResilientFetcher
from stablecoin_supply.ingestion.ports import IHttpClient
from stablecoin_supply.ingestion.retry_handler import RetryHandler
from stablecoin_supply.ingestion.service import MarketCapProviderChain
from stablecoin_supply.orchestration.cache import SnapshotCache
from stablecoin_supply.orchestration.fallback import FallbackOrchestrator
from stablecoin_supply.orchestration.live import HttpHealthProbe, LiveSnapshotLoader
from stablecoin_supply.orchestration.state import RefreshState
from stablecoin_supply.orchestration.workflows.update_workflow import (
    SupplyUpdateWorkflow,
)
from stablecoin_supply.shared.models import Snapshot
from stablecoin_supply.storage.history_store import CsvHistoryStore
from stablecoin_supply.storage.snapshot_writer import SnapshotDocumentStore
from stablecoin_supply.transformation.validators import CompletenessValidator


class SupplyDependencyContainer:
    """
    Wires pipeline components from a validated ConfigState.

    Usage:
        async with SupplyDependencyContainer(config) as container:
            result = await container.update_workflow("usdc").run()
    """

    def __init__(
        self,
        config: ConfigState,
        http_client: IHttpClient | None = None,
        adapter_factory: AdapterFactory | None = None,
    ):
        self.config = config
        self.http_client = http_client or AiohttpClient(config.http.client_config())
        self.adapter_factory = adapter_factory or create_adapter_factory()
        self.fetcher = ResilientFetcher(
            http_client=self.http_client,
            retry_handler=RetryHandler(config.http.retry_config()),
            error_mapper=create_error_mapper_chain(),
        )
        self._cache: SnapshotCache | None = None

    @property
    def data_dir(self) -> Path:
        return self.config.data_path

    def provider_chain(self, coin: str) -> MarketCapProviderChain:
        adapters = self.adapter_factory.create_market_cap_adapters(
            self.config, coin, self.fetcher
        )
        return MarketCapProviderChain(adapters, coin=coin.lower())

    def chain_adapter(self, coin: str) -> DefiLlamaChainAdapter:
        return create_chain_adapter(self.config, coin, self.fetcher)

    def history_store(self, coin: str) -> CsvHistoryStore:
        coin_config = self.config.coin(coin)
        return CsvHistoryStore.for_coin(
            self.data_dir, coin_config.monthly_file, coin_config.yearly_file
        )

    def document_store(self) -> SnapshotDocumentStore:
        return SnapshotDocumentStore(self.data_dir / self.config.fallback.bundled_snapshot)

    def update_workflow(self, coin: str) -> SupplyUpdateWorkflow:
        return SupplyUpdateWorkflow(
            coin=coin,
            market_cap=self.provider_chain(coin),
            chains=self.chain_adapter(coin),
            history_store=self.history_store(coin),
            document_store=self.document_store(),
            validator=CompletenessValidator(self.config.quality.anomaly_threshold_pct),
        )

    def snapshot_cache(self) -> SnapshotCache:
        if self._cache is None:
            fallback = self.config.fallback
            cache_path = self.data_dir / fallback.cache_file if fallback.cache_file else None
            self._cache = SnapshotCache(fallback.cache_ttl_seconds, path=cache_path)
        return self._cache

    def fallback_orchestrator(
        self, coin: str, state: RefreshState | None = None
    ) -> FallbackOrchestrator:
        coin_key = coin.lower()
        self.config.coin(coin_key)
        documents = self.document_store()

        def bundled_source() -> Snapshot | None:
            return documents.read_snapshot(coin_key)

        fallback = self.config.fallback
        return FallbackOrchestrator(
            coin=coin_key,
            live_loader=LiveSnapshotLoader(
                coin_key,
                self.provider_chain(coin_key),
                self.chain_adapter(coin_key),
                bundled_source,
            ),
            bundled_source=bundled_source,
            cache=self.snapshot_cache(),
            state=state,
            health_probe=HttpHealthProbe(self.http_client, fallback.health_probe_url),
            failure_threshold=fallback.failure_threshold,
            cooldown_seconds=fallback.cooldown_seconds,
            synthetic_fill=fallback.synthetic_fill,
        )

    async def close(self) -> None:
        await self.http_client.close()

    async def __aenter__(self) -> SupplyDependencyContainer:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
