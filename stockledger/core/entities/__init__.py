"""Core domain entities."""

from stockledger.core.entities.forecast import (
    ActionableForecast,
    ForecastAccuracy,
    ForecastFactors,
    ForecastMethodology,
    ForecastState,
    ForecastType,
    ForecastUrgency,
    InventoryForecast,
    PredictedDemand,
    can_transition,
)
from stockledger.core.entities.inventory import (
    InventoryItem,
    StockStatus,
    derive_status,
)
from stockledger.core.entities.movement import (
    InventoryMovement,
    MovementDirection,
    MovementSummary,
    MovementType,
    MovementTypeSummary,
    direction_for,
)
from stockledger.core.entities.supplier import Supplier, SupplierStatus

__all__ = [
    # Inventory
    "InventoryItem",
    "StockStatus",
    "derive_status",
    # Movements
    "InventoryMovement",
    "MovementDirection",
    "MovementSummary",
    "MovementType",
    "MovementTypeSummary",
    "direction_for",
    # Forecasts
    "ActionableForecast",
    "ForecastAccuracy",
    "ForecastFactors",
    "ForecastMethodology",
    "ForecastState",
    "ForecastType",
    "ForecastUrgency",
    "InventoryForecast",
    "PredictedDemand",
    "can_transition",
    # Suppliers
    "Supplier",
    "SupplierStatus",
]
