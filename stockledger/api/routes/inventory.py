"""Inventory item endpoints: master data, movement history and analytics."""

from datetime import datetime, timedelta

from fastapi import APIRouter, Depends, Query, status

from stockledger.api.dependencies import (
    INVENTORY_ADMIN_ROLES,
    INVENTORY_WRITE_ROLES,
    CurrentUser,
    get_create_item_use_case,
    get_deactivate_item_use_case,
    get_inv_store,
    get_movement_summary_use_case,
    get_update_item_use_case,
    require_roles,
)
from stockledger.application.dto.requests import (
    CreateInventoryItemRequest,
    UpdateInventoryItemRequest,
)
from stockledger.application.dto.responses import (
    CreateInventoryItemResponse,
    ErrorResponse,
    InventoryAnalyticsResponse,
    InventoryItemResponse,
    InventoryListResponse,
    MovementListResponse,
    MovementResponse,
    MovementSummaryResponse,
)
from stockledger.application.use_cases import (
    CreateInventoryItemUseCase,
    DeactivateInventoryItemUseCase,
    GetMovementSummaryUseCase,
    UpdateInventoryItemUseCase,
)
from stockledger.core.entities.inventory import StockStatus
from stockledger.core.entities.movement import MovementType
from stockledger.core.exceptions import InventoryItemNotFoundError
from stockledger.core.interfaces import IInventoryStore

router = APIRouter(prefix="/api/inventory", tags=["inventory"])


@router.get("", response_model=InventoryListResponse)
async def list_items(
    status_filter: StockStatus | None = Query(default=None, alias="status"),
    supplier_id: int | None = None,
    location: str | None = None,
    search: str | None = Query(default=None, max_length=100),
    include_inactive: bool = False,
    sort_by: str = "part_number",
    descending: bool = False,
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    store: IInventoryStore = Depends(get_inv_store),
) -> InventoryListResponse:
    """List inventory items with filters and pagination."""
    items, total = await store.list_items(
        status=status_filter,
        supplier_id=supplier_id,
        location=location,
        search=search,
        include_inactive=include_inactive,
        sort_by=sort_by,
        descending=descending,
        limit=limit,
        offset=offset,
    )
    return InventoryListResponse(
        items=[InventoryItemResponse.from_entity(item) for item in items],
        total=total,
        limit=limit,
        offset=offset,
        has_more=offset + len(items) < total,
    )


@router.post(
    "",
    response_model=CreateInventoryItemResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
async def create_item(
    request: CreateInventoryItemRequest,
    user: CurrentUser = Depends(require_roles(*INVENTORY_WRITE_ROLES)),
    use_case: CreateInventoryItemUseCase = Depends(get_create_item_use_case),
) -> CreateInventoryItemResponse:
    """Create an item; opening stock is recorded as an initial movement."""
    result = await use_case.execute(request, created_by=user.user_id)
    return use_case.to_response(result)


@router.get("/analytics", response_model=InventoryAnalyticsResponse)
async def get_analytics(
    days: int = Query(default=30, ge=1, le=3650),
    top: int = Query(default=10, ge=1, le=100),
    store: IInventoryStore = Depends(get_inv_store),
) -> InventoryAnalyticsResponse:
    """Inventory totals and movement statistics for the last ``days`` days."""
    since = datetime.utcnow() - timedelta(days=days)
    analytics = await store.get_analytics(since=since, top=top)
    return InventoryAnalyticsResponse(period_days=days, **analytics)


@router.get(
    "/{item_id}",
    response_model=InventoryItemResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_item(
    item_id: int,
    store: IInventoryStore = Depends(get_inv_store),
) -> InventoryItemResponse:
    item = await store.get_item(item_id)
    if item is None:
        raise InventoryItemNotFoundError(item_id)
    return InventoryItemResponse.from_entity(item)


@router.patch(
    "/{item_id}",
    response_model=InventoryItemResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_item(
    item_id: int,
    request: UpdateInventoryItemRequest,
    user: CurrentUser = Depends(require_roles(*INVENTORY_WRITE_ROLES)),
    use_case: UpdateInventoryItemUseCase = Depends(get_update_item_use_case),
) -> InventoryItemResponse:
    """Update thresholds and descriptive fields. Stock is never edited here."""
    item = await use_case.execute(item_id, request)
    return use_case.to_response(item)


@router.delete(
    "/{item_id}",
    response_model=InventoryItemResponse,
    responses={404: {"model": ErrorResponse}},
)
async def deactivate_item(
    item_id: int,
    user: CurrentUser = Depends(require_roles(*INVENTORY_ADMIN_ROLES)),
    use_case: DeactivateInventoryItemUseCase = Depends(get_deactivate_item_use_case),
) -> InventoryItemResponse:
    """Soft-delete an item. Its movement history is retained."""
    item = await use_case.execute(item_id)
    return use_case.to_response(item)


@router.get(
    "/{item_id}/movements",
    response_model=MovementListResponse,
    responses={404: {"model": ErrorResponse}},
)
async def list_item_movements(
    item_id: int,
    start: datetime | None = None,
    end: datetime | None = None,
    movement_type: list[MovementType] | None = Query(default=None),
    limit: int = Query(default=100, ge=1, le=1000),
    store: IInventoryStore = Depends(get_inv_store),
) -> MovementListResponse:
    """Movement history of an item, newest first."""
    if await store.get_item(item_id) is None:
        raise InventoryItemNotFoundError(item_id)

    movements = await store.get_movements(
        item_id,
        start=start,
        end=end,
        movement_types=[t.value for t in movement_type] if movement_type else None,
        limit=limit,
    )
    return MovementListResponse(
        inventory_item_id=item_id,
        movements=[MovementResponse.from_entity(m) for m in movements],
        total=len(movements),
    )


@router.get(
    "/{item_id}/summary",
    response_model=MovementSummaryResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def get_movement_summary(
    item_id: int,
    start: datetime | None = None,
    end: datetime | None = None,
    use_case: GetMovementSummaryUseCase = Depends(get_movement_summary_use_case),
) -> MovementSummaryResponse:
    """Per-type totals of effective movements; reversed pairs cancel out."""
    summary = await use_case.execute(item_id, start, end)
    return use_case.to_response(summary)
