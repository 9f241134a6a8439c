"""
Service factory functions for dependency injection.

This module provides factory functions that wire infrastructure
implementations to core services. Use cases should import from here.

Clean Architecture: Application layer orchestrates DI, not core layer.
"""

from typing import TYPE_CHECKING

from stockledger.config import get_settings
from stockledger.core.services import ForecastEngine, ForecastService, StockLedgerService

if TYPE_CHECKING:
    from stockledger.core.interfaces import IForecastStore, IInventoryStore, ISupplierStore


# Singleton service instances
_stock_ledger_service: StockLedgerService | None = None
_forecast_service: ForecastService | None = None


def get_stock_ledger_service(
    inventory_store: "IInventoryStore | None" = None,
) -> StockLedgerService:
    """
    Get or create the StockLedgerService.

    Policy and retry budget come from LedgerSettings. Passing a store
    builds a fresh, non-cached service around it.
    """
    global _stock_ledger_service

    if _stock_ledger_service is not None and inventory_store is None:
        return _stock_ledger_service

    store = inventory_store
    if store is None:
        # Lazy import infrastructure to avoid circular imports
        from stockledger.infrastructure.storage.sqlite import SQLiteInventoryStore

        store = SQLiteInventoryStore()

    ledger = get_settings().ledger
    service = StockLedgerService(
        inventory_store=store,
        negative_stock_policy=ledger.negative_stock_policy,
        max_retries=ledger.max_retries,
        retry_wait_min=ledger.retry_wait_min,
        retry_wait_max=ledger.retry_wait_max,
        enforce_reorder_le_max=ledger.enforce_reorder_le_max,
    )

    if inventory_store is None:
        _stock_ledger_service = service

    return service


def get_forecast_service(
    inventory_store: "IInventoryStore | None" = None,
    forecast_store: "IForecastStore | None" = None,
    supplier_store: "ISupplierStore | None" = None,
) -> ForecastService:
    """Get or create the ForecastService with its engine from ForecastSettings."""
    global _forecast_service

    overridden = any(s is not None for s in (inventory_store, forecast_store, supplier_store))
    if _forecast_service is not None and not overridden:
        return _forecast_service

    from stockledger.infrastructure.storage.sqlite import (
        SQLiteForecastStore,
        SQLiteInventoryStore,
        SQLiteSupplierStore,
    )

    settings = get_settings().forecast
    engine = ForecastEngine(
        lookback_months=settings.lookback_months,
        days_per_month=settings.days_per_month,
        validity_months=settings.validity_months,
        min_data_points=settings.min_data_points,
    )
    service = ForecastService(
        inventory_store=inventory_store or SQLiteInventoryStore(),
        forecast_store=forecast_store or SQLiteForecastStore(),
        supplier_store=supplier_store or SQLiteSupplierStore(),
        engine=engine,
        default_lead_time_days=settings.default_lead_time_days,
    )

    if not overridden:
        _forecast_service = service

    return service


def reset_services() -> None:
    """Reset all singleton services (for testing)."""
    global _stock_ledger_service, _forecast_service
    _stock_ledger_service = None
    _forecast_service = None
