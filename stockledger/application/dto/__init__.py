"""Data Transfer Objects for API layer.

Request DTOs: Validate and parse incoming API requests.
Response DTOs: Structure and serialize API responses.

These are the ONLY contracts between API handlers and use cases.
"""

from stockledger.application.dto.requests import (
    CreateInventoryItemRequest,
    CreateSupplierRequest,
    RecalculateForecastRequest,
    RecordMovementRequest,
    ReverseMovementRequest,
    UpdateForecastAccuracyRequest,
    UpdateInventoryItemRequest,
    UpdateSupplierRequest,
)
from stockledger.application.dto.responses import (
    ActionableForecastListResponse,
    ActionableForecastResponse,
    ComponentHealthResponse,
    CreateInventoryItemResponse,
    ErrorResponse,
    ExpireForecastsResponse,
    ForecastListResponse,
    ForecastResponse,
    GenerateForecastsResponse,
    HealthResponse,
    InventoryAnalyticsResponse,
    InventoryItemResponse,
    InventoryListResponse,
    MovementListResponse,
    MovementResponse,
    MovementSummaryResponse,
    PaginatedResponse,
    RecordMovementResponse,
    SupplierListResponse,
    SupplierResponse,
)

__all__ = [
    # Requests
    "CreateInventoryItemRequest",
    "UpdateInventoryItemRequest",
    "RecordMovementRequest",
    "ReverseMovementRequest",
    "RecalculateForecastRequest",
    "UpdateForecastAccuracyRequest",
    "CreateSupplierRequest",
    "UpdateSupplierRequest",
    # Responses
    "ErrorResponse",
    "HealthResponse",
    "ComponentHealthResponse",
    "PaginatedResponse",
    "InventoryItemResponse",
    "InventoryListResponse",
    "CreateInventoryItemResponse",
    "MovementResponse",
    "MovementListResponse",
    "MovementSummaryResponse",
    "RecordMovementResponse",
    "InventoryAnalyticsResponse",
    "ForecastResponse",
    "ForecastListResponse",
    "ActionableForecastResponse",
    "ActionableForecastListResponse",
    "GenerateForecastsResponse",
    "ExpireForecastsResponse",
    "SupplierResponse",
    "SupplierListResponse",
]
