"""Supplier entity."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class SupplierStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class Supplier(BaseModel):
    """A vendor of stocked parts. Lead time drives reorder dates."""

    id: int | None = None
    name: str
    code: str | None = None
    contact: str = ""
    email: str = ""
    phone: str = ""
    lead_time_days: int = Field(default=7, ge=0)
    rating: float = Field(default=5.0, ge=1, le=5)
    payment_terms: str = "Net 30"
    status: SupplierStatus = SupplierStatus.ACTIVE
    notes: str | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
