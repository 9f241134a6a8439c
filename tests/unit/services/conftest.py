"""Fixtures for core service tests.

Stores are AsyncMocks specced on the core interfaces, so these tests
never touch SQLite.
"""

from unittest.mock import AsyncMock

import pytest

from stockledger.core.entities import ForecastState
from stockledger.core.interfaces import IForecastStore, IInventoryStore, ISupplierStore


@pytest.fixture
def inventory_store() -> AsyncMock:
    store = AsyncMock(spec=IInventoryStore)

    async def _apply_movement(item, expected_version, movement):
        movement.id = 101
        return movement

    async def _apply_reversal(item, expected_version, original, compensating):
        compensating.id = 102
        return compensating

    store.apply_movement.side_effect = _apply_movement
    store.apply_reversal.side_effect = _apply_reversal
    return store


@pytest.fixture
def forecast_store() -> AsyncMock:
    store = AsyncMock(spec=IForecastStore)

    async def _create_draft(forecast):
        forecast.id = 501
        return forecast

    async def _activate(forecast):
        forecast.state = ForecastState.ACTIVE
        return forecast

    store.create_draft.side_effect = _create_draft
    store.activate.side_effect = _activate
    store.latest_accuracy.return_value = None
    return store


@pytest.fixture
def supplier_store() -> AsyncMock:
    store = AsyncMock(spec=ISupplierStore)
    store.get.return_value = None
    return store
