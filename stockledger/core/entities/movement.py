"""Inventory movement entities: the append-only stock ledger."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class MovementType(str, Enum):
    """Types of stock movements."""

    IN = "in"
    OUT = "out"
    TRANSFER = "transfer"
    ADJUSTMENT = "adjustment"
    RETURN = "return"
    SCRAP = "scrap"
    INITIAL = "initial"


class MovementDirection(str, Enum):
    """Whether a movement adds to or removes from stock."""

    INBOUND = "inbound"
    OUTBOUND = "outbound"

    @property
    def sign(self) -> int:
        return 1 if self is MovementDirection.INBOUND else -1

    def opposite(self) -> "MovementDirection":
        if self is MovementDirection.INBOUND:
            return MovementDirection.OUTBOUND
        return MovementDirection.INBOUND


INBOUND_TYPES = frozenset({MovementType.IN, MovementType.RETURN, MovementType.INITIAL})


def direction_for(
    movement_type: MovementType,
    adjustment_direction: MovementDirection | None = None,
) -> MovementDirection:
    """Resolve the stock direction of a movement type.

    Adjustments carry an explicit sign; they default to outbound.
    """
    if movement_type is MovementType.ADJUSTMENT:
        return adjustment_direction or MovementDirection.OUTBOUND
    if movement_type in INBOUND_TYPES:
        return MovementDirection.INBOUND
    return MovementDirection.OUTBOUND


class InventoryMovement(BaseModel):
    """One immutable stock change with a before/after snapshot."""

    id: int | None = None
    inventory_item_id: int  # FK → inventory_items.id
    movement_type: MovementType
    direction: MovementDirection
    quantity: float = Field(..., ge=0)
    previous_stock: float = Field(..., ge=0)
    new_stock: float = Field(..., ge=0)
    unit_cost: float = Field(default=0.0, ge=0)
    reason: str
    reference: str | None = None  # e.g. PO number, work order number
    batch_number: str | None = None
    location_from: str | None = None
    location_to: str | None = None
    work_order_id: str | None = None
    purchase_order: str | None = None
    supplier_id: int | None = None
    customer: str | None = None
    notes: str | None = None
    is_reversed: bool = False
    reversal_reference: int | None = None  # FK → inventory_movements.id
    created_by: str | None = None
    approved_by: str | None = None
    approved_at: datetime | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def total_cost(self) -> float:
        return self.quantity * self.unit_cost

    @property
    def signed_quantity(self) -> float:
        """Quantity with the sign of its direction."""
        return self.quantity * self.direction.sign

    @property
    def value_change(self) -> float:
        if not self.unit_cost:
            return 0.0
        return self.signed_quantity * self.unit_cost

    @property
    def is_compensating(self) -> bool:
        """True for entries written to cancel an earlier movement."""
        return self.reversal_reference is not None and not self.is_reversed

    @property
    def is_consistent(self) -> bool:
        """Snapshot matches the signed quantity."""
        return abs((self.new_stock - self.previous_stock) - self.signed_quantity) < 1e-9


class MovementTypeSummary(BaseModel):
    """Aggregated movements of one type."""

    movement_type: MovementType
    quantity: float = 0.0
    count: int = 0
    value: float = 0.0


class MovementSummary(BaseModel):
    """Aggregated non-reversed movements of an item over a date range."""

    inventory_item_id: int
    start: datetime | None = None
    end: datetime | None = None
    movements: list[MovementTypeSummary] = Field(default_factory=list)
    total_movements: int = 0
    total_value: float = 0.0
    net_quantity: float = 0.0
