"""
Dependency injection container for FastAPI.

Provides service, store and caller-identity dependencies to route handlers.
"""

from collections.abc import Callable
from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException, status

from stockledger.application.use_cases import (
    CreateInventoryItemUseCase,
    DeactivateInventoryItemUseCase,
    ExpireForecastsUseCase,
    FindActionableForecastsUseCase,
    GenerateForecastsUseCase,
    GetMovementSummaryUseCase,
    RecalculateForecastUseCase,
    RecordMovementUseCase,
    ReverseMovementUseCase,
    UpdateForecastAccuracyUseCase,
    UpdateInventoryItemUseCase,
)
from stockledger.core.interfaces import IForecastStore, IInventoryStore, ISupplierStore
from stockledger.infrastructure.storage.sqlite import (
    get_forecast_store,
    get_inventory_store,
    get_supplier_store,
)

# Roles allowed to change stock and item master data
INVENTORY_WRITE_ROLES = ("admin", "manager", "inventory")
# Roles allowed to deactivate an item or sign off a movement
INVENTORY_ADMIN_ROLES = ("admin", "manager")
# Roles allowed to recalculate a single forecast or score its accuracy
FORECAST_WRITE_ROLES = ("admin", "manager", "inventory", "purchasing")
# Roles allowed to trigger batch forecast generation and expiry
FORECAST_ADMIN_ROLES = ("admin", "manager")
# Roles allowed to maintain suppliers
SUPPLIER_WRITE_ROLES = ("admin", "manager", "purchasing")


# Caller identity


@dataclass(frozen=True)
class CurrentUser:
    """Caller identity forwarded by the upstream authentication layer."""

    user_id: str
    role: str


async def get_current_user(
    x_user_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> CurrentUser:
    """Read the caller from X-User-Id / X-User-Role headers."""
    if not x_user_id or not x_user_role:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id or X-User-Role header",
        )
    return CurrentUser(user_id=x_user_id, role=x_user_role.strip().lower())


def require_roles(*roles: str) -> Callable:
    """Dependency factory gating a route to the given roles."""
    allowed = frozenset(roles)

    async def _check(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role '{user.role}' may not perform this operation",
            )
        return user

    return _check


# Store dependencies
async def get_inv_store() -> IInventoryStore:
    """Get inventory store."""
    return await get_inventory_store()


async def get_fc_store() -> IForecastStore:
    """Get forecast store."""
    return await get_forecast_store()


async def get_sup_store() -> ISupplierStore:
    """Get supplier store."""
    return await get_supplier_store()


# Use case dependencies
def get_create_item_use_case() -> CreateInventoryItemUseCase:
    return CreateInventoryItemUseCase()


def get_update_item_use_case() -> UpdateInventoryItemUseCase:
    return UpdateInventoryItemUseCase()


def get_deactivate_item_use_case() -> DeactivateInventoryItemUseCase:
    return DeactivateInventoryItemUseCase()


def get_record_movement_use_case() -> RecordMovementUseCase:
    return RecordMovementUseCase()


def get_reverse_movement_use_case() -> ReverseMovementUseCase:
    return ReverseMovementUseCase()


def get_movement_summary_use_case() -> GetMovementSummaryUseCase:
    return GetMovementSummaryUseCase()


def get_recalculate_forecast_use_case() -> RecalculateForecastUseCase:
    return RecalculateForecastUseCase()


def get_generate_forecasts_use_case() -> GenerateForecastsUseCase:
    return GenerateForecastsUseCase()


def get_actionable_forecasts_use_case() -> FindActionableForecastsUseCase:
    return FindActionableForecastsUseCase()


def get_forecast_accuracy_use_case() -> UpdateForecastAccuracyUseCase:
    return UpdateForecastAccuracyUseCase()


def get_expire_forecasts_use_case() -> ExpireForecastsUseCase:
    return ExpireForecastsUseCase()
