"""Fixtures for API tests.

Routes run against real use cases wired to AsyncMock services and stores,
so requests exercise validation, role checks and error mapping without
touching SQLite.
"""

from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from stockledger.api import dependencies as deps
from stockledger.api.main import app
from stockledger.application.use_cases import (
    CreateInventoryItemUseCase,
    DeactivateInventoryItemUseCase,
    ExpireForecastsUseCase,
    FindActionableForecastsUseCase,
    GenerateForecastsUseCase,
    GetMovementSummaryUseCase,
    RecalculateForecastUseCase,
    RecordMovementUseCase,
    ReverseMovementUseCase,
    UpdateForecastAccuracyUseCase,
    UpdateInventoryItemUseCase,
)
from stockledger.core.interfaces import IForecastStore, IInventoryStore, ISupplierStore
from stockledger.core.services.forecast_service import ForecastService
from stockledger.core.services.stock_ledger import StockLedgerService


@pytest.fixture
def mock_ledger() -> AsyncMock:
    return AsyncMock(spec=StockLedgerService)


@pytest.fixture
def mock_forecasts() -> AsyncMock:
    return AsyncMock(spec=ForecastService)


@pytest.fixture
def mock_inventory_store() -> AsyncMock:
    store = AsyncMock(spec=IInventoryStore)
    store.get_item.return_value = None
    store.get_movement.return_value = None
    store.list_items.return_value = ([], 0)
    store.get_movements.return_value = []
    return store


@pytest.fixture
def mock_forecast_store() -> AsyncMock:
    store = AsyncMock(spec=IForecastStore)
    store.get.return_value = None
    store.list_active.return_value = []
    store.list_history.return_value = []
    return store


@pytest.fixture
def mock_supplier_store() -> AsyncMock:
    store = AsyncMock(spec=ISupplierStore)
    store.get.return_value = None
    store.list_suppliers.return_value = []
    return store


@pytest.fixture
def writer() -> dict[str, str]:
    return {"X-User-Id": "u-17", "X-User-Role": "inventory"}


@pytest.fixture
def admin() -> dict[str, str]:
    return {"X-User-Id": "u-1", "X-User-Role": "admin"}


@pytest.fixture
async def client(
    mock_ledger,
    mock_forecasts,
    mock_inventory_store,
    mock_forecast_store,
    mock_supplier_store,
):
    overrides = {
        deps.get_inv_store: lambda: mock_inventory_store,
        deps.get_fc_store: lambda: mock_forecast_store,
        deps.get_sup_store: lambda: mock_supplier_store,
        deps.get_create_item_use_case: lambda: CreateInventoryItemUseCase(mock_ledger),
        deps.get_update_item_use_case: lambda: UpdateInventoryItemUseCase(mock_ledger),
        deps.get_deactivate_item_use_case: lambda: DeactivateInventoryItemUseCase(mock_ledger),
        deps.get_record_movement_use_case: lambda: RecordMovementUseCase(mock_ledger),
        deps.get_reverse_movement_use_case: lambda: ReverseMovementUseCase(mock_ledger),
        deps.get_movement_summary_use_case: lambda: GetMovementSummaryUseCase(mock_ledger),
        deps.get_recalculate_forecast_use_case: lambda: RecalculateForecastUseCase(
            mock_forecasts
        ),
        deps.get_generate_forecasts_use_case: lambda: GenerateForecastsUseCase(mock_forecasts),
        deps.get_actionable_forecasts_use_case: lambda: FindActionableForecastsUseCase(
            mock_forecasts
        ),
        deps.get_forecast_accuracy_use_case: lambda: UpdateForecastAccuracyUseCase(
            mock_forecasts
        ),
        deps.get_expire_forecasts_use_case: lambda: ExpireForecastsUseCase(mock_forecasts),
    }
    app.dependency_overrides.update(overrides)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    for dependency in overrides:
        app.dependency_overrides.pop(dependency, None)
