"""Storage infrastructure implementations."""

from stockledger.infrastructure.storage.sqlite import (
    SQLiteForecastStore,
    SQLiteInventoryStore,
    SQLiteSupplierStore,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)

__all__ = [
    # SQLite stores
    "SQLiteInventoryStore",
    "SQLiteForecastStore",
    "SQLiteSupplierStore",
    # Connection pool
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
]
