"""Inventory item entity and stock status derivation."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class StockStatus(str, Enum):
    """Stock level classification of an inventory item."""

    IN_STOCK = "in-stock"
    LOW_STOCK = "low-stock"
    OUT_OF_STOCK = "out-of-stock"
    OVERSTOCK = "overstock"


def derive_status(
    current_stock: float, reorder_point: float, max_stock: float
) -> StockStatus:
    """
    Classify a stock level.

    Precedence, first match wins:
    out-of-stock (== 0) > overstock (>= max) > low-stock (<= reorder) > in-stock.
    """
    if current_stock == 0:
        return StockStatus.OUT_OF_STOCK
    if current_stock >= max_stock:
        return StockStatus.OVERSTOCK
    if current_stock <= reorder_point:
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


class InventoryItem(BaseModel):
    """A stocked part with its current level and replenishment thresholds."""

    id: int | None = None
    part_number: str
    material: str
    description: str = ""
    category: str | None = None
    current_stock: float = Field(default=0.0, ge=0)
    min_stock: float = Field(default=0.0, ge=0)
    max_stock: float = Field(default=0.0, ge=0)
    reorder_point: float = Field(default=0.0, ge=0)
    average_cost: float = Field(default=0.0, ge=0)
    status: StockStatus = StockStatus.OUT_OF_STOCK
    location: str = ""
    supplier_id: int | None = None  # FK → suppliers.id
    unit: str = "units"
    notes: str | None = None
    is_active: bool = True
    version: int = 1  # optimistic lock stamp
    created_by: str | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def stock_value(self) -> float:
        """Inventory value = current_stock * average_cost."""
        return self.current_stock * self.average_cost

    @property
    def stock_coverage_days(self) -> int:
        """Rough coverage estimate in days, in whole reorder-point multiples."""
        return int(self.current_stock // max(1.0, self.reorder_point)) * 30

    def refresh_status(self) -> StockStatus:
        """Re-derive status from the current stock fields."""
        self.status = derive_status(
            self.current_stock, self.reorder_point, self.max_stock
        )
        return self.status
