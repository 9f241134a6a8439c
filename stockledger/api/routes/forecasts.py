"""Demand forecast endpoints."""

from fastapi import APIRouter, Body, Depends, Query, status

from stockledger.api.dependencies import (
    FORECAST_ADMIN_ROLES,
    FORECAST_WRITE_ROLES,
    CurrentUser,
    get_actionable_forecasts_use_case,
    get_expire_forecasts_use_case,
    get_fc_store,
    get_forecast_accuracy_use_case,
    get_generate_forecasts_use_case,
    get_recalculate_forecast_use_case,
    require_roles,
)
from stockledger.application.dto.requests import (
    RecalculateForecastRequest,
    UpdateForecastAccuracyRequest,
)
from stockledger.application.dto.responses import (
    ActionableForecastListResponse,
    ErrorResponse,
    ExpireForecastsResponse,
    ForecastListResponse,
    ForecastResponse,
    GenerateForecastsResponse,
)
from stockledger.application.use_cases import (
    ExpireForecastsUseCase,
    FindActionableForecastsUseCase,
    GenerateForecastsUseCase,
    RecalculateForecastUseCase,
    UpdateForecastAccuracyUseCase,
)
from stockledger.core.exceptions import ForecastNotFoundError
from stockledger.core.interfaces import IForecastStore

router = APIRouter(prefix="/api/forecasts", tags=["forecasts"])


@router.get("", response_model=ForecastListResponse)
async def list_active_forecasts(
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    store: IForecastStore = Depends(get_fc_store),
) -> ForecastListResponse:
    """Active forecasts, most confident first."""
    forecasts = await store.list_active(limit=limit, offset=offset)
    return ForecastListResponse(
        forecasts=[ForecastResponse.from_entity(f) for f in forecasts],
        total=len(forecasts),
    )


@router.get("/actionable", response_model=ActionableForecastListResponse)
async def find_actionable_forecasts(
    days: int | None = Query(default=None, ge=0, le=3650),
    use_case: FindActionableForecastsUseCase = Depends(get_actionable_forecasts_use_case),
) -> ActionableForecastListResponse:
    """Items forecast to run out within ``days`` days, soonest first."""
    result = await use_case.execute(days)
    return use_case.to_response(result)


@router.post(
    "/generate",
    response_model=GenerateForecastsResponse,
    responses={403: {"model": ErrorResponse}},
)
async def generate_forecasts(
    user: CurrentUser = Depends(require_roles(*FORECAST_ADMIN_ROLES)),
    use_case: GenerateForecastsUseCase = Depends(get_generate_forecasts_use_case),
) -> GenerateForecastsResponse:
    """Recalculate forecasts for every active item."""
    report = await use_case.execute(generated_by=user.user_id)
    return use_case.to_response(report)


@router.post(
    "/expire",
    response_model=ExpireForecastsResponse,
    responses={403: {"model": ErrorResponse}},
)
async def expire_forecasts(
    user: CurrentUser = Depends(require_roles(*FORECAST_ADMIN_ROLES)),
    use_case: ExpireForecastsUseCase = Depends(get_expire_forecasts_use_case),
) -> ExpireForecastsResponse:
    return await use_case.execute()


@router.post(
    "/items/{item_id}/recalculate",
    response_model=ForecastResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}},
)
async def recalculate_forecast(
    item_id: int,
    request: RecalculateForecastRequest | None = Body(default=None),
    user: CurrentUser = Depends(require_roles(*FORECAST_WRITE_ROLES)),
    use_case: RecalculateForecastUseCase = Depends(get_recalculate_forecast_use_case),
) -> ForecastResponse:
    """Recompute an item's forecast; the previous active one is superseded."""
    forecast = await use_case.execute(item_id, request, generated_by=user.user_id)
    return use_case.to_response(forecast)


@router.get("/items/{item_id}/history", response_model=ForecastListResponse)
async def forecast_history(
    item_id: int,
    limit: int = Query(default=50, ge=1, le=500),
    store: IForecastStore = Depends(get_fc_store),
) -> ForecastListResponse:
    """All forecasts of an item in every state, newest first."""
    forecasts = await store.list_history(item_id, limit=limit)
    return ForecastListResponse(
        forecasts=[ForecastResponse.from_entity(f) for f in forecasts],
        total=len(forecasts),
    )


@router.get(
    "/{forecast_id}",
    response_model=ForecastResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_forecast(
    forecast_id: int,
    store: IForecastStore = Depends(get_fc_store),
) -> ForecastResponse:
    forecast = await store.get(forecast_id)
    if forecast is None:
        raise ForecastNotFoundError(forecast_id)
    return ForecastResponse.from_entity(forecast)


@router.put(
    "/{forecast_id}/accuracy",
    response_model=ForecastResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_forecast_accuracy(
    forecast_id: int,
    request: UpdateForecastAccuracyRequest,
    user: CurrentUser = Depends(require_roles(*FORECAST_WRITE_ROLES)),
    use_case: UpdateForecastAccuracyUseCase = Depends(get_forecast_accuracy_use_case),
) -> ForecastResponse:
    """Record actual usage against the forecast's next-month prediction."""
    forecast = await use_case.execute(forecast_id, request)
    return use_case.to_response(forecast)
