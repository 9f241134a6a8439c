"""Abstract interface for inventory storage."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from stockledger.core.entities.inventory import InventoryItem, StockStatus
from stockledger.core.entities.movement import InventoryMovement, MovementSummary


class IInventoryStore(ABC):
    """Interface for inventory item and movement persistence.

    Stock mutations go through ``apply_movement`` / ``apply_reversal`` only.
    Both compare the stored item version with ``expected_version`` and raise
    ``StaleItemVersionError`` when another writer got there first.
    """

    @abstractmethod
    async def create_item(
        self, item: InventoryItem, initial_movement: InventoryMovement
    ) -> tuple[InventoryItem, InventoryMovement]:
        """Create an item together with its initial movement."""
        pass

    @abstractmethod
    async def get_item(self, item_id: int) -> InventoryItem | None:
        """Get inventory item by ID."""
        pass

    @abstractmethod
    async def get_item_by_part_number(self, part_number: str) -> InventoryItem | None:
        """Get inventory item by part number."""
        pass

    @abstractmethod
    async def update_item(
        self, item: InventoryItem, expected_version: int
    ) -> InventoryItem:
        """Update non-stock fields of an item (thresholds, location, etc.)."""
        pass

    @abstractmethod
    async def list_items(
        self,
        status: StockStatus | None = None,
        supplier_id: int | None = None,
        location: str | None = None,
        search: str | None = None,
        include_inactive: bool = False,
        sort_by: str = "part_number",
        descending: bool = False,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[InventoryItem], int]:
        """List items with filters. Returns (items, total matching)."""
        pass

    @abstractmethod
    async def apply_movement(
        self,
        item: InventoryItem,
        expected_version: int,
        movement: InventoryMovement,
    ) -> InventoryMovement:
        """Persist item stock/status and append the movement atomically."""
        pass

    @abstractmethod
    async def apply_reversal(
        self,
        item: InventoryItem,
        expected_version: int,
        original: InventoryMovement,
        compensating: InventoryMovement,
    ) -> InventoryMovement:
        """Append a compensating movement and flag the original as reversed."""
        pass

    @abstractmethod
    async def get_movement(self, movement_id: int) -> InventoryMovement | None:
        """Get a single movement."""
        pass

    @abstractmethod
    async def get_movements(
        self,
        inventory_item_id: int,
        start: datetime | None = None,
        end: datetime | None = None,
        movement_types: list[str] | None = None,
        limit: int | None = 100,
        ascending: bool = False,
    ) -> list[InventoryMovement]:
        """Get movements for an item, newest first unless ascending."""
        pass

    @abstractmethod
    async def get_movement_summary(
        self,
        inventory_item_id: int,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> MovementSummary:
        """Aggregate movements of an item per type."""
        pass

    @abstractmethod
    async def get_analytics(self, since: datetime, top: int = 10) -> dict[str, Any]:
        """Inventory-wide totals and movement statistics since a date."""
        pass
