"""SQLite storage implementations."""

from stockledger.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    format_timestamp,
    get_connection,
    get_pool,
    get_transaction,
    parse_timestamp,
)
from stockledger.infrastructure.storage.sqlite.forecast_store import SQLiteForecastStore
from stockledger.infrastructure.storage.sqlite.inventory_store import SQLiteInventoryStore
from stockledger.infrastructure.storage.sqlite.supplier_store import SQLiteSupplierStore

# Singleton instances
_inventory_store: SQLiteInventoryStore | None = None
_forecast_store: SQLiteForecastStore | None = None
_supplier_store: SQLiteSupplierStore | None = None


async def get_inventory_store() -> SQLiteInventoryStore:
    """Get singleton inventory store instance."""
    global _inventory_store
    if _inventory_store is None:
        _inventory_store = SQLiteInventoryStore()
    return _inventory_store


async def get_forecast_store() -> SQLiteForecastStore:
    """Get singleton forecast store instance."""
    global _forecast_store
    if _forecast_store is None:
        _forecast_store = SQLiteForecastStore()
    return _forecast_store


async def get_supplier_store() -> SQLiteSupplierStore:
    """Get singleton supplier store instance."""
    global _supplier_store
    if _supplier_store is None:
        _supplier_store = SQLiteSupplierStore()
    return _supplier_store


__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
    "format_timestamp",
    "parse_timestamp",
    # Store classes
    "SQLiteInventoryStore",
    "SQLiteForecastStore",
    "SQLiteSupplierStore",
    # Factory functions
    "get_inventory_store",
    "get_forecast_store",
    "get_supplier_store",
]
