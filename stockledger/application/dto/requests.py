"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
These are the ONLY contracts between API and use cases.
"""

from pydantic import BaseModel, Field

from stockledger.core.entities.movement import MovementDirection, MovementType
from stockledger.core.entities.supplier import SupplierStatus

# --- Inventory ---


class CreateInventoryItemRequest(BaseModel):
    """Request to create an inventory item with its opening stock."""

    part_number: str = Field(..., min_length=1, max_length=100, description="Unique part number")
    material: str = Field(..., min_length=1, description="Material name")
    description: str = Field(default="", description="Free-text description")
    category: str | None = Field(default=None, description="Item category")
    current_stock: float = Field(default=0.0, ge=0, description="Opening stock level")
    min_stock: float = Field(default=0.0, ge=0)
    max_stock: float = Field(..., ge=0, description="Overstock threshold")
    reorder_point: float = Field(..., ge=0, description="Low-stock threshold")
    average_cost: float = Field(default=0.0, ge=0, description="Opening unit cost")
    location: str = Field(default="", description="Storage location")
    supplier_id: int | None = Field(default=None, description="Preferred supplier")
    unit: str = Field(default="units")
    notes: str | None = None


class UpdateInventoryItemRequest(BaseModel):
    """Partial update of an item's thresholds and descriptive fields.

    Stock levels are never edited here; record a movement instead.
    """

    part_number: str | None = Field(default=None, min_length=1, max_length=100)
    material: str | None = Field(default=None, min_length=1)
    description: str | None = None
    category: str | None = None
    min_stock: float | None = Field(default=None, ge=0)
    max_stock: float | None = Field(default=None, ge=0)
    reorder_point: float | None = Field(default=None, ge=0)
    location: str | None = None
    supplier_id: int | None = None
    unit: str | None = None
    notes: str | None = None


# --- Movements ---


class RecordMovementRequest(BaseModel):
    """Request to record a stock movement."""

    inventory_item_id: int = Field(..., description="Target inventory item")
    movement_type: MovementType = Field(
        ...,
        description="Movement type",
        examples=["in", "out", "adjustment"],
    )
    quantity: float = Field(..., gt=0, description="Quantity moved")
    reason: str = Field(..., min_length=1, description="Why the stock changed")
    adjustment_direction: MovementDirection | None = Field(
        default=None,
        description="Sign of an adjustment (defaults to outbound)",
    )
    unit_cost: float | None = Field(default=None, ge=0, description="Cost per unit")
    reference: str | None = Field(default=None, description="PO, work order or document reference")
    batch_number: str | None = None
    location_from: str | None = None
    location_to: str | None = None
    work_order_id: str | None = None
    purchase_order: str | None = None
    supplier_id: int | None = None
    customer: str | None = None
    notes: str | None = None
    approve: bool = Field(
        default=False,
        description="Sign the movement off as the caller (admin or manager only)",
    )


class ReverseMovementRequest(BaseModel):
    """Request to cancel a movement with a compensating entry."""

    reason: str = Field(..., min_length=1, description="Why the movement is reversed")


# --- Forecasts ---


class RecalculateForecastRequest(BaseModel):
    """Request to recompute an item's forecast."""

    seasonal_factor: float = Field(default=1.0, ge=0.1, le=5.0)
    trend_factor: float = Field(default=1.0, ge=0.1, le=3.0)
    target_stock: float | None = Field(
        default=None,
        ge=0,
        description="Order-up-to level (defaults to the item's max stock)",
    )


class UpdateForecastAccuracyRequest(BaseModel):
    """Actual usage observed over the forecast's first month."""

    actual_usage: float = Field(..., gt=0, description="Observed usage")


# --- Suppliers ---


class CreateSupplierRequest(BaseModel):
    """Request to register a supplier."""

    name: str = Field(..., min_length=1)
    code: str | None = None
    contact: str = ""
    email: str = ""
    phone: str = ""
    lead_time_days: int = Field(default=7, ge=0)
    rating: float = Field(default=5.0, ge=1, le=5)
    payment_terms: str = "Net 30"
    status: SupplierStatus = SupplierStatus.ACTIVE
    notes: str | None = None


class UpdateSupplierRequest(BaseModel):
    """Partial update of a supplier. A new lead time applies to the next forecast run."""

    name: str | None = Field(default=None, min_length=1)
    code: str | None = None
    contact: str | None = None
    email: str | None = None
    phone: str | None = None
    lead_time_days: int | None = Field(default=None, ge=0)
    rating: float | None = Field(default=None, ge=1, le=5)
    payment_terms: str | None = None
    status: SupplierStatus | None = None
    notes: str | None = None
