"""Core interfaces (ports) for dependency injection."""

from stockledger.core.interfaces.forecast_store import IForecastStore
from stockledger.core.interfaces.inventory_store import IInventoryStore
from stockledger.core.interfaces.supplier_store import ISupplierStore

__all__ = [
    "IInventoryStore",
    "IForecastStore",
    "ISupplierStore",
]
