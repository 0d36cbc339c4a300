# tests/conftest.py

"""Shared pytest fixtures for all tests."""

from collections.abc import Generator
from unittest.mock import AsyncMock, patch

import pytest

from src.services.strategy_runner import StrategyRunner


@pytest.fixture(autouse=True)
def mock_sleep() -> Generator[None, None, None]:
    """Patch time.sleep globally so retry loops run instantly."""
    with patch("time.sleep"):
        yield


@pytest.fixture(autouse=True)
def instant_pacing() -> Generator[AsyncMock, None, None]:
    """Skip the inter-strategy pacing pause."""
    with patch.object(
        StrategyRunner, "_pause", new_callable=AsyncMock
    ) as pause:
        yield pause
