"""
Test fixtures package.

Provides recorded provider payloads and record/response builders.
"""

import json
from pathlib import Path
from typing import Any

from stablecoin_supply.ingestion.ports import HttpResponse
from stablecoin_supply.shared.models import MonthlyRecord, YearlyRecord


def load_fixture(fixture_name: str) -> Any:
    """
    Load fixture data from provider_responses.json.

    Example:
        >>> chart = load_fixture("coingecko_market_chart")
    """
    fixtures_path = Path(__file__).parent / "provider_responses.json"

    with open(fixtures_path) as f:
        all_fixtures = json.load(f)

    if fixture_name not in all_fixtures:
        raise KeyError(f"Fixture '{fixture_name}' not found")

    return all_fixtures[fixture_name]


def get_mock_error_response(error_type: str) -> Any:
    """Get mock error response body."""
    errors = load_fixture("error_responses")

    if error_type not in errors:
        raise KeyError(f"Error type '{error_type}' not found")

    return errors[error_type]


def make_response(
    body: Any, status_code: int = 200, headers: dict[str, str] | None = None
) -> HttpResponse:
    """Build an HttpResponse as the aiohttp client would return it."""
    return HttpResponse(
        status_code=status_code,
        body=body,
        headers=headers or {},
        url="https://example.test",
    )


def monthly_series(*points: tuple[str, float]) -> list[MonthlyRecord]:
    """Monthly records from (period_key, supply) pairs, change left at 0."""
    return [MonthlyRecord(period_key=key, supply=supply) for key, supply in points]


def yearly_series(*points: tuple[int, float]) -> list[YearlyRecord]:
    """Yearly records from (year, supply) pairs, change left at 0."""
    return [YearlyRecord(year=year, supply=supply) for year, supply in points]


__all__ = [
    "load_fixture",
    "get_mock_error_response",
    "make_response",
    "monthly_series",
    "yearly_series",
]
