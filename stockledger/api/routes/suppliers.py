"""Supplier endpoints."""

from fastapi import APIRouter, Depends, Query, status

from stockledger.api.dependencies import (
    SUPPLIER_WRITE_ROLES,
    CurrentUser,
    get_sup_store,
    require_roles,
)
from stockledger.application.dto.requests import CreateSupplierRequest, UpdateSupplierRequest
from stockledger.application.dto.responses import (
    ErrorResponse,
    SupplierListResponse,
    SupplierResponse,
)
from stockledger.config import get_logger
from stockledger.core.entities.supplier import Supplier, SupplierStatus
from stockledger.core.exceptions import SupplierNotFoundError, ValidationError
from stockledger.core.interfaces import ISupplierStore

logger = get_logger(__name__)

router = APIRouter(prefix="/api/suppliers", tags=["suppliers"])


@router.get("", response_model=SupplierListResponse)
async def list_suppliers(
    status_filter: SupplierStatus | None = Query(default=None, alias="status"),
    search: str | None = Query(default=None, max_length=100),
    store: ISupplierStore = Depends(get_sup_store),
) -> SupplierListResponse:
    suppliers = await store.list_suppliers(status=status_filter, search=search)
    return SupplierListResponse(
        suppliers=[SupplierResponse.from_entity(s) for s in suppliers],
        total=len(suppliers),
    )


@router.post(
    "",
    response_model=SupplierResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
async def create_supplier(
    request: CreateSupplierRequest,
    user: CurrentUser = Depends(require_roles(*SUPPLIER_WRITE_ROLES)),
    store: ISupplierStore = Depends(get_sup_store),
) -> SupplierResponse:
    """Register a supplier. Its lead time feeds reorder dates of linked items."""
    supplier = await store.create(Supplier(**request.model_dump()))
    logger.info("supplier_registered", supplier_id=supplier.id, user_id=user.user_id)
    return SupplierResponse.from_entity(supplier)


@router.get(
    "/{supplier_id}",
    response_model=SupplierResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_supplier(
    supplier_id: int,
    store: ISupplierStore = Depends(get_sup_store),
) -> SupplierResponse:
    supplier = await store.get(supplier_id)
    if supplier is None:
        raise SupplierNotFoundError(supplier_id)
    return SupplierResponse.from_entity(supplier)


@router.patch(
    "/{supplier_id}",
    response_model=SupplierResponse,
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def update_supplier(
    supplier_id: int,
    request: UpdateSupplierRequest,
    user: CurrentUser = Depends(require_roles(*SUPPLIER_WRITE_ROLES)),
    store: ISupplierStore = Depends(get_sup_store),
) -> SupplierResponse:
    """Edit a supplier. Forecasts pick up a new lead time when next recalculated."""
    # null means "leave unchanged"
    changes = request.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise ValidationError("body", "no fields to update")

    supplier = await store.get(supplier_id)
    if supplier is None:
        raise SupplierNotFoundError(supplier_id)

    updated = Supplier.model_validate({**supplier.model_dump(), **changes})
    updated = await store.update(updated)
    logger.info(
        "supplier_edited",
        supplier_id=supplier_id,
        fields=sorted(changes),
        user_id=user.user_id,
    )
    return SupplierResponse.from_entity(updated)
