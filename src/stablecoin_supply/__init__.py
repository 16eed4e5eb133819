"""
Stablecoin supply reconciliation pipeline.
Fetches, merges and publishes USDC/USDT supply history for the dashboard.

Modules:
- ingestion: Provider adapters, resilient fetching, error classification
- transformation: History merge, yearly roll-up, chain distribution, validation
- storage: CSV history and consolidated JSON snapshot persistence
- orchestration: Offline update workflow and dashboard-side fallback cycle
- infrastructure: Config, logging
"""

__version__ = "0.1.0"
