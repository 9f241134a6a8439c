"""Abstract interface for forecast storage."""

from abc import ABC, abstractmethod
from datetime import datetime

from stockledger.core.entities.forecast import (
    ActionableForecast,
    ForecastAccuracy,
    InventoryForecast,
)


class IForecastStore(ABC):
    """Interface for inventory forecast persistence. Rows are never deleted."""

    @abstractmethod
    async def create_draft(self, forecast: InventoryForecast) -> InventoryForecast:
        """Insert a forecast in draft state."""
        pass

    @abstractmethod
    async def activate(self, forecast: InventoryForecast) -> InventoryForecast:
        """Activate a draft and supersede the item's prior active forecast."""
        pass

    @abstractmethod
    async def get(self, forecast_id: int) -> InventoryForecast | None:
        """Get forecast by ID."""
        pass

    @abstractmethod
    async def get_active_for_item(self, inventory_item_id: int) -> InventoryForecast | None:
        """Get the active forecast of an item, if any."""
        pass

    @abstractmethod
    async def list_active(self, limit: int = 100, offset: int = 0) -> list[InventoryForecast]:
        """List active forecasts by confidence desc, stock-out asc."""
        pass

    @abstractmethod
    async def list_history(
        self, inventory_item_id: int, limit: int = 50
    ) -> list[InventoryForecast]:
        """List all forecasts of an item, newest first."""
        pass

    @abstractmethod
    async def latest_accuracy(self, inventory_item_id: int) -> ForecastAccuracy | None:
        """Most recent tracked accuracy for an item."""
        pass

    @abstractmethod
    async def find_actionable(
        self, until: datetime, now: datetime
    ) -> list[ActionableForecast]:
        """Active, valid forecasts with a stock-out on or before ``until``."""
        pass

    @abstractmethod
    async def update_accuracy(
        self, forecast_id: int, accuracy: ForecastAccuracy
    ) -> InventoryForecast:
        """Record accuracy of a forecast."""
        pass

    @abstractmethod
    async def expire_stale(self, now: datetime) -> int:
        """Move active forecasts past valid_until to expired. Returns count."""
        pass
