"""Pytest fixtures for SQLite storage tests.

Every test gets a freshly migrated database file and its own
process-wide pool pointed at it.
"""

from collections.abc import AsyncGenerator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from stockledger.core.entities import (
    InventoryItem,
    InventoryMovement,
    MovementDirection,
    MovementType,
)
from stockledger.core.services.stock_ledger import StockLedgerService
from stockledger.infrastructure.storage.sqlite import connection as conn_module
from stockledger.infrastructure.storage.sqlite.forecast_store import SQLiteForecastStore
from stockledger.infrastructure.storage.sqlite.inventory_store import SQLiteInventoryStore
from stockledger.infrastructure.storage.sqlite.migrations.migrator import run_migrations
from stockledger.infrastructure.storage.sqlite.supplier_store import SQLiteSupplierStore


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "test.db"


@pytest.fixture
def mock_settings(temp_db_path: Path):
    """Mock settings with temp database path."""
    mock = MagicMock()
    mock.storage.db_path = temp_db_path
    mock.storage.pool_size = 3
    mock.storage.busy_timeout = 5000
    return mock


@pytest.fixture
async def migrated_db(temp_db_path: Path, mock_settings) -> AsyncGenerator[Path, None]:
    """Migrated database with the shared pool bound to it."""
    await run_migrations(temp_db_path, create_backup_before=False)
    conn_module._pool = None
    with patch.object(conn_module, "get_settings", return_value=mock_settings):
        try:
            yield temp_db_path
        finally:
            await conn_module.close_pool()


@pytest.fixture
def inventory_store(migrated_db) -> SQLiteInventoryStore:
    return SQLiteInventoryStore()


@pytest.fixture
def forecast_store(migrated_db) -> SQLiteForecastStore:
    return SQLiteForecastStore()


@pytest.fixture
def supplier_store(migrated_db) -> SQLiteSupplierStore:
    return SQLiteSupplierStore()


@pytest.fixture
def ledger(inventory_store) -> StockLedgerService:
    """Ledger over the real store with a generous retry budget."""
    return StockLedgerService(
        inventory_store,
        max_retries=200,
        retry_wait_min=0.001,
        retry_wait_max=0.01,
    )


@pytest.fixture
def seed_item(inventory_store):
    """Insert an item with its initial movement straight through the store."""

    async def _seed(
        part_number: str = "BRG-6204",
        current_stock: float = 100.0,
        **overrides,
    ) -> tuple[InventoryItem, InventoryMovement]:
        data = {
            "part_number": part_number,
            "material": "Deep groove ball bearing",
            "current_stock": current_stock,
            "min_stock": 10.0,
            "max_stock": 200.0,
            "reorder_point": 20.0,
            "average_cost": 4.0,
            "location": "A-01-03",
        }
        data.update(overrides)
        item = InventoryItem(**data)
        item.refresh_status()
        initial = InventoryMovement(
            inventory_item_id=0,
            movement_type=MovementType.INITIAL,
            direction=MovementDirection.INBOUND,
            quantity=item.current_stock,
            previous_stock=0.0,
            new_stock=item.current_stock,
            unit_cost=item.average_cost,
            reason="Initial stock entry",
        )
        return await inventory_store.create_item(item, initial)

    return _seed
