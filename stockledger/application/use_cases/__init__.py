"""Application use cases."""

from stockledger.application.use_cases.create_inventory_item import (
    CreateInventoryItemResult,
    CreateInventoryItemUseCase,
)
from stockledger.application.use_cases.expire_forecasts import ExpireForecastsUseCase
from stockledger.application.use_cases.find_actionable_forecasts import (
    ActionableForecastsResult,
    FindActionableForecastsUseCase,
)
from stockledger.application.use_cases.generate_forecasts import GenerateForecastsUseCase
from stockledger.application.use_cases.get_movement_summary import GetMovementSummaryUseCase
from stockledger.application.use_cases.recalculate_forecast import RecalculateForecastUseCase
from stockledger.application.use_cases.record_movement import RecordMovementUseCase
from stockledger.application.use_cases.reverse_movement import ReverseMovementUseCase
from stockledger.application.use_cases.update_forecast_accuracy import (
    UpdateForecastAccuracyUseCase,
)
from stockledger.application.use_cases.update_inventory_item import (
    DeactivateInventoryItemUseCase,
    UpdateInventoryItemUseCase,
)

__all__ = [
    # Inventory
    "CreateInventoryItemUseCase",
    "CreateInventoryItemResult",
    "UpdateInventoryItemUseCase",
    "DeactivateInventoryItemUseCase",
    # Movements
    "RecordMovementUseCase",
    "ReverseMovementUseCase",
    "GetMovementSummaryUseCase",
    # Forecasts
    "RecalculateForecastUseCase",
    "GenerateForecastsUseCase",
    "FindActionableForecastsUseCase",
    "ActionableForecastsResult",
    "UpdateForecastAccuracyUseCase",
    "ExpireForecastsUseCase",
]
