"""Expire Forecasts Use Case."""

from datetime import datetime

from stockledger.application.dto.responses import ExpireForecastsResponse
from stockledger.core.services.forecast_service import ForecastService


class ExpireForecastsUseCase:
    """Move active forecasts past their validity window to expired."""

    def __init__(self, forecast_service: ForecastService | None = None):
        self._service = forecast_service

    def _get_service(self) -> ForecastService:
        if self._service is None:
            from stockledger.application.services import get_forecast_service

            self._service = get_forecast_service()
        return self._service

    async def execute(self, now: datetime | None = None) -> ExpireForecastsResponse:
        now = now or datetime.utcnow()
        expired = await self._get_service().expire(now)
        return ExpireForecastsResponse(expired=expired, as_of=now)
