"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from stockledger.core.entities.forecast import ActionableForecast, InventoryForecast
from stockledger.core.entities.inventory import InventoryItem
from stockledger.core.entities.movement import InventoryMovement, MovementSummary
from stockledger.core.entities.supplier import Supplier

# --- Health / errors ---


class ComponentHealthResponse(BaseModel):
    """Health of a backing component."""

    name: str
    available: bool
    latency_ms: float | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    database: ComponentHealthResponse | None = None


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. INSUFFICIENT_STOCK)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    details: dict[str, Any] = Field(default_factory=dict, description="Structured context")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=datetime.now)


class PaginatedResponse(BaseModel):
    """Base for paginated responses."""

    total: int
    limit: int
    offset: int
    has_more: bool


# --- Inventory ---


class InventoryItemResponse(BaseModel):
    """Inventory item response DTO."""

    id: int
    part_number: str
    material: str
    description: str
    category: str | None = None
    current_stock: float
    min_stock: float
    max_stock: float
    reorder_point: float
    average_cost: float
    stock_value: float
    status: str
    location: str
    supplier_id: int | None = None
    unit: str
    notes: str | None = None
    is_active: bool
    version: int
    created_by: str | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, item: InventoryItem) -> "InventoryItemResponse":
        return cls(
            **item.model_dump(exclude={"status"}),
            status=item.status.value,
            stock_value=item.stock_value,
        )


class InventoryListResponse(PaginatedResponse):
    """Paginated inventory listing."""

    items: list[InventoryItemResponse]


class MovementResponse(BaseModel):
    """Stock movement response DTO."""

    id: int
    inventory_item_id: int
    movement_type: str
    direction: str
    quantity: float
    previous_stock: float
    new_stock: float
    unit_cost: float
    total_cost: float
    reason: str
    reference: str | None = None
    batch_number: str | None = None
    location_from: str | None = None
    location_to: str | None = None
    work_order_id: str | None = None
    purchase_order: str | None = None
    supplier_id: int | None = None
    customer: str | None = None
    notes: str | None = None
    is_reversed: bool = False
    reversal_reference: int | None = None
    created_by: str | None = None
    approved_by: str | None = None
    approved_at: datetime | None = None
    created_at: datetime

    @classmethod
    def from_entity(cls, movement: InventoryMovement) -> "MovementResponse":
        return cls(
            **movement.model_dump(exclude={"movement_type", "direction"}),
            movement_type=movement.movement_type.value,
            direction=movement.direction.value,
            total_cost=movement.total_cost,
        )


class CreateInventoryItemResponse(BaseModel):
    """Created item and its opening movement."""

    item: InventoryItemResponse
    initial_movement: MovementResponse


class RecordMovementResponse(BaseModel):
    """Result of a ledger write."""

    item: InventoryItemResponse
    movement: MovementResponse
    warnings: list[str] = Field(default_factory=list)


class MovementListResponse(BaseModel):
    """Movement history of an item."""

    inventory_item_id: int
    movements: list[MovementResponse]
    total: int


class MovementSummaryResponse(BaseModel):
    """Per-type movement totals."""

    summary: MovementSummary


class InventoryAnalyticsResponse(BaseModel):
    """Inventory-wide analytics."""

    period_days: int
    since: datetime
    total_items: int
    total_value: float
    low_stock_items: int
    out_of_stock_items: int
    overstock_items: int
    movements_by_type: dict[str, dict[str, float]]
    top_outbound_items: list[dict[str, Any]]


# --- Forecasts ---


class ForecastResponse(BaseModel):
    """Inventory forecast response DTO."""

    forecast: InventoryForecast
    days_until_stockout: int | None = None
    urgency: str
    accuracy_rating: str

    @classmethod
    def from_entity(
        cls, forecast: InventoryForecast, now: datetime | None = None
    ) -> "ForecastResponse":
        return cls(
            forecast=forecast,
            days_until_stockout=forecast.days_until_stockout(now),
            urgency=forecast.urgency(now).value,
            accuracy_rating=forecast.accuracy_rating,
        )


class ForecastListResponse(BaseModel):
    forecasts: list[ForecastResponse]
    total: int


class ActionableForecastResponse(BaseModel):
    """Forecast needing purchasing action, with item context."""

    forecast: ForecastResponse
    part_number: str
    material: str
    current_stock: float
    reorder_point: float

    @classmethod
    def from_entity(
        cls, actionable: ActionableForecast, now: datetime | None = None
    ) -> "ActionableForecastResponse":
        return cls(
            forecast=ForecastResponse.from_entity(actionable.forecast, now),
            part_number=actionable.part_number,
            material=actionable.material,
            current_stock=actionable.current_stock,
            reorder_point=actionable.reorder_point,
        )


class ActionableForecastListResponse(BaseModel):
    days: int
    forecasts: list[ActionableForecastResponse]
    total: int


class GenerateForecastsResponse(BaseModel):
    """Outcome of a batch forecast run."""

    generated: int
    failed: dict[int, str] = Field(default_factory=dict)
    forecasts: list[ForecastResponse] = Field(default_factory=list)


class ExpireForecastsResponse(BaseModel):
    expired: int
    as_of: datetime


# --- Suppliers ---


class SupplierResponse(BaseModel):
    """Supplier response DTO."""

    id: int
    name: str
    code: str | None = None
    contact: str
    email: str
    phone: str
    lead_time_days: int
    rating: float
    payment_terms: str
    status: str
    notes: str | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, supplier: Supplier) -> "SupplierResponse":
        return cls(
            **supplier.model_dump(exclude={"status"}),
            status=supplier.status.value,
        )


class SupplierListResponse(BaseModel):
    suppliers: list[SupplierResponse]
    total: int
