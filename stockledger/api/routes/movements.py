"""Stock movement endpoints.

Every change to an item's stock goes through ``POST /api/movements``.
Movements are never edited or deleted; a mistake is undone with
``POST /api/movements/{id}/reverse``.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from stockledger.api.dependencies import (
    INVENTORY_ADMIN_ROLES,
    INVENTORY_WRITE_ROLES,
    CurrentUser,
    get_inv_store,
    get_record_movement_use_case,
    get_reverse_movement_use_case,
    require_roles,
)
from stockledger.application.dto.requests import RecordMovementRequest, ReverseMovementRequest
from stockledger.application.dto.responses import (
    ErrorResponse,
    MovementResponse,
    RecordMovementResponse,
)
from stockledger.application.use_cases import RecordMovementUseCase, ReverseMovementUseCase
from stockledger.core.exceptions import MovementNotFoundError
from stockledger.core.interfaces import IInventoryStore

router = APIRouter(prefix="/api/movements", tags=["movements"])


@router.post(
    "",
    response_model=RecordMovementResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def record_movement(
    request: RecordMovementRequest,
    user: CurrentUser = Depends(require_roles(*INVENTORY_WRITE_ROLES)),
    use_case: RecordMovementUseCase = Depends(get_record_movement_use_case),
) -> RecordMovementResponse:
    """Record a movement and return the item as it stands afterwards.

    With ``approve`` set, an admin or manager caller is stored as the approver.
    """
    approved_by = None
    if request.approve:
        if user.role not in INVENTORY_ADMIN_ROLES:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role '{user.role}' may not approve movements",
            )
        approved_by = user.user_id
    result = await use_case.execute(
        request, created_by=user.user_id, approved_by=approved_by
    )
    return use_case.to_response(result)


@router.get(
    "/{movement_id}",
    response_model=MovementResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_movement(
    movement_id: int,
    store: IInventoryStore = Depends(get_inv_store),
) -> MovementResponse:
    movement = await store.get_movement(movement_id)
    if movement is None:
        raise MovementNotFoundError(movement_id)
    return MovementResponse.from_entity(movement)


@router.post(
    "/{movement_id}/reverse",
    response_model=RecordMovementResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def reverse_movement(
    movement_id: int,
    request: ReverseMovementRequest,
    user: CurrentUser = Depends(require_roles(*INVENTORY_WRITE_ROLES)),
    use_case: ReverseMovementUseCase = Depends(get_reverse_movement_use_case),
) -> RecordMovementResponse:
    """Cancel a movement by appending a compensating adjustment."""
    result = await use_case.execute(movement_id, request, created_by=user.user_id)
    return use_case.to_response(result)
