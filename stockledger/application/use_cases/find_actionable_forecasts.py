"""Find Actionable Forecasts Use Case: stock-outs coming up soon."""

from dataclasses import dataclass
from datetime import datetime

from stockledger.application.dto.responses import (
    ActionableForecastListResponse,
    ActionableForecastResponse,
)
from stockledger.config import get_settings
from stockledger.core.entities.forecast import ActionableForecast
from stockledger.core.services.forecast_service import ForecastService


@dataclass
class ActionableForecastsResult:
    days: int
    forecasts: list[ActionableForecast]
    as_of: datetime


class FindActionableForecastsUseCase:
    """Active forecasts whose stock-out falls within a day threshold."""

    def __init__(self, forecast_service: ForecastService | None = None):
        self._service = forecast_service

    def _get_service(self) -> ForecastService:
        if self._service is None:
            from stockledger.application.services import get_forecast_service

            self._service = get_forecast_service()
        return self._service

    async def execute(
        self, days: int | None = None, now: datetime | None = None
    ) -> ActionableForecastsResult:
        days = get_settings().forecast.actionable_days if days is None else days
        now = now or datetime.utcnow()
        forecasts = await self._get_service().find_actionable(days, now=now)
        return ActionableForecastsResult(days=days, forecasts=forecasts, as_of=now)

    def to_response(self, result: ActionableForecastsResult) -> ActionableForecastListResponse:
        return ActionableForecastListResponse(
            days=result.days,
            forecasts=[
                ActionableForecastResponse.from_entity(f, result.as_of)
                for f in result.forecasts
            ],
            total=len(result.forecasts),
        )
