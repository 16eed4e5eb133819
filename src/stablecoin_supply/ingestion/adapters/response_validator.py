"""
Provider Response Validators

Validate payload structure before adapters parse it, so a provider that
changes shape fails as a ValidationError inside the fetcher instead of a
KeyError deep in parsing.
"""

from typing import Any

from stablecoin_supply.ingestion.ports import ValidationResult


class CoinGeckoResponseValidator:
    """Validates CoinGecko market_chart responses.

    Expected format:
    {
        "prices": [[ms, price], ...],
        "market_caps": [[ms, market_cap], ...],
        "total_volumes": [[ms, volume], ...]
    }
    """

    def validate(self, endpoint: str, data: Any) -> ValidationResult:
        if not isinstance(data, dict):
            return ValidationResult.failed(
                f"Response must be an object, got {type(data).__name__}"
            )

        caps = data.get("market_caps")
        if not isinstance(caps, list):
            return ValidationResult.failed("Missing required 'market_caps' list")
        if not caps:
            return ValidationResult.failed("'market_caps' is empty", code="empty")

        first = caps[0]
        if not isinstance(first, (list, tuple)) or len(first) < 2:
            return ValidationResult.failed(
                "'market_caps' entries must be [timestamp, value] pairs"
            )

        return ValidationResult.ok()


class DefiLlamaChartResponseValidator:
    """Validates DefiLlama /stablecoincharts responses.

    Expected format:
    [
        {"date": "1609459200", "totalCirculatingUSD": {"peggedUSD": 1.0e9}},
        ...
    ]
    """

    def validate(self, endpoint: str, data: Any) -> ValidationResult:
        if not isinstance(data, list):
            return ValidationResult.failed(
                f"Response must be a list, got {type(data).__name__}"
            )
        if not data:
            return ValidationResult.failed("Chart is empty", code="empty")

        for idx, item in enumerate(data[:1]):
            if not isinstance(item, dict):
                return ValidationResult.failed(
                    f"Item {idx} must be a dict, got {type(item).__name__}"
                )
            if "date" not in item:
                return ValidationResult.failed(f"Item {idx} missing required 'date' field")
            if not isinstance(item.get("totalCirculatingUSD"), dict):
                return ValidationResult.failed(
                    f"Item {idx} missing required 'totalCirculatingUSD' object"
                )

        return ValidationResult.ok()


class DefiLlamaStablecoinsResponseValidator:
    """Validates DefiLlama /stablecoins responses.

    Expected format:
    {
        "peggedAssets": [
            {"symbol": "USDC", "chainCirculating": {"Ethereum": {"current": {...}}}},
            ...
        ]
    }
    """

    def validate(self, endpoint: str, data: Any) -> ValidationResult:
        if not isinstance(data, dict):
            return ValidationResult.failed(
                f"Response must be an object, got {type(data).__name__}"
            )

        assets = data.get("peggedAssets")
        if not isinstance(assets, list):
            return ValidationResult.failed("Missing required 'peggedAssets' list")
        if not assets:
            return ValidationResult.failed("'peggedAssets' is empty", code="empty")

        return ValidationResult.ok()


class CoinPaprikaResponseValidator:
    """Validates CoinPaprika /tickers/{id}/historical responses.

    Expected format:
    [
        {"timestamp": "2024-01-01T00:00:00Z", "market_cap": 1.0e9, ...},
        ...
    ]
    """

    def validate(self, endpoint: str, data: Any) -> ValidationResult:
        if not isinstance(data, list):
            return ValidationResult.failed(
                f"Response must be a list, got {type(data).__name__}"
            )
        if not data:
            return ValidationResult.failed("History is empty", code="empty")

        first = data[0]
        if not isinstance(first, dict):
            return ValidationResult.failed(
                f"Item 0 must be a dict, got {type(first).__name__}"
            )
        for field in ("timestamp", "market_cap"):
            if field not in first:
                return ValidationResult.failed(f"Item 0 missing required field '{field}'")

        return ValidationResult.ok()
