"""Inventory forecast entities."""

import math
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class ForecastType(str, Enum):
    DEMAND = "demand"
    SUPPLY = "supply"
    STOCKOUT = "stockout"
    REORDER = "reorder"


class ForecastMethodology(str, Enum):
    """How the forecast was produced."""

    MOVING_AVERAGE = "moving-average"
    EXPONENTIAL_SMOOTHING = "exponential-smoothing"
    LINEAR_REGRESSION = "linear-regression"
    SEASONAL_DECOMPOSITION = "seasonal-decomposition"
    INSUFFICIENT_DATA = "insufficient-data"


class ForecastState(str, Enum):
    """Forecast lifecycle: draft -> active -> (superseded | expired)."""

    DRAFT = "draft"
    ACTIVE = "active"
    SUPERSEDED = "superseded"
    EXPIRED = "expired"

    @property
    def is_terminal(self) -> bool:
        return self in (ForecastState.SUPERSEDED, ForecastState.EXPIRED)


_TRANSITIONS: dict[ForecastState, frozenset[ForecastState]] = {
    ForecastState.DRAFT: frozenset({ForecastState.ACTIVE}),
    ForecastState.ACTIVE: frozenset({ForecastState.SUPERSEDED, ForecastState.EXPIRED}),
    ForecastState.SUPERSEDED: frozenset(),
    ForecastState.EXPIRED: frozenset(),
}


def can_transition(current: ForecastState, target: ForecastState) -> bool:
    """Check whether a lifecycle transition is allowed."""
    return target in _TRANSITIONS[current]


class ForecastUrgency(str, Enum):
    """Operational urgency of a forecast."""

    EXPIRED = "expired"
    INACTIVE = "inactive"
    NO_STOCKOUT = "no-stockout"
    OVERDUE = "overdue"
    CRITICAL = "critical"
    WARNING = "warning"
    GOOD = "good"


class PredictedDemand(BaseModel):
    """Projected consumption over standard horizons."""

    next_month: float = 0.0
    next_3_months: float = 0.0
    next_6_months: float = 0.0
    next_year: float = 0.0


class ForecastFactors(BaseModel):
    """Inputs that shaped the confidence score."""

    historical_accuracy: float = 0.0
    data_points: int = 0
    seasonality: float = 1.0
    trend: float = 1.0
    volatility: float = 0.0


class ForecastAccuracy(BaseModel):
    """Tracked accuracy of a forecast against actual usage."""

    last_period_actual: float | None = None
    last_period_predicted: float | None = None
    mape: float | None = None  # Mean Absolute Percentage Error
    bias: float | None = None


class InventoryForecast(BaseModel):
    """Derived, time-boxed prediction of stock depletion for one item."""

    id: int | None = None
    inventory_item_id: int  # FK → inventory_items.id
    forecast_type: ForecastType = ForecastType.DEMAND
    current_stock: float = Field(..., ge=0)
    average_monthly_usage: float = Field(..., ge=0)
    seasonal_factor: float = Field(default=1.0, ge=0.1, le=5.0)
    trend_factor: float = Field(default=1.0, ge=0.1, le=3.0)
    predicted_demand: PredictedDemand = Field(default_factory=PredictedDemand)
    predicted_stock_out_date: datetime | None = None
    recommended_order_quantity: float = Field(default=0.0, ge=0)
    recommended_order_date: datetime | None = None
    confidence: float = Field(default=0.0, ge=0, le=100)
    factors: ForecastFactors = Field(default_factory=ForecastFactors)
    methodology: ForecastMethodology = ForecastMethodology.MOVING_AVERAGE
    window_months: int | None = None
    lead_time_days: int = 0
    valid_from: datetime = Field(default_factory=datetime.utcnow)
    valid_until: datetime
    accuracy: ForecastAccuracy = Field(default_factory=ForecastAccuracy)
    state: ForecastState = ForecastState.DRAFT
    notes: str | None = None
    generated_by: str | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def is_active(self) -> bool:
        return self.state is ForecastState.ACTIVE

    def days_until_stockout(self, now: datetime | None = None) -> int | None:
        """Whole days from now to the predicted stock-out, rounded up."""
        if self.predicted_stock_out_date is None:
            return None
        now = now or datetime.utcnow()
        delta = self.predicted_stock_out_date - now
        return math.ceil(delta.total_seconds() / 86400)

    def urgency(self, now: datetime | None = None) -> ForecastUrgency:
        now = now or datetime.utcnow()
        if now > self.valid_until:
            return ForecastUrgency.EXPIRED
        if not self.is_active:
            return ForecastUrgency.INACTIVE

        days = self.days_until_stockout(now)
        if days is None:
            return ForecastUrgency.NO_STOCKOUT
        if days < 0:
            return ForecastUrgency.OVERDUE
        if days <= 7:
            return ForecastUrgency.CRITICAL
        if days <= 30:
            return ForecastUrgency.WARNING
        return ForecastUrgency.GOOD

    @property
    def accuracy_rating(self) -> str:
        mape = self.accuracy.mape
        if mape is None:
            return "unknown"
        if mape < 10:
            return "excellent"
        if mape < 20:
            return "good"
        if mape < 35:
            return "fair"
        return "poor"


class ActionableForecast(BaseModel):
    """Active forecast joined with the item fields a buyer needs."""

    forecast: InventoryForecast
    part_number: str
    material: str
    current_stock: float
    reorder_point: float
