"""
Shared pytest fixtures for the supply pipeline tests.
"""

import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

# Ensure src on path
sys.path.insert(0, str(Path(__file__).parent / "src"))


@pytest.fixture
def http_client():
    """IHttpClient double; set get.return_value or get.side_effect per test."""
    client = MagicMock()
    client.get = AsyncMock()
    client.close = AsyncMock()
    return client
