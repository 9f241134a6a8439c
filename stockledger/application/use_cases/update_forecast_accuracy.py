"""Update Forecast Accuracy Use Case."""

from stockledger.application.dto.requests import UpdateForecastAccuracyRequest
from stockledger.application.dto.responses import ForecastResponse
from stockledger.core.entities.forecast import InventoryForecast
from stockledger.core.services.forecast_service import ForecastService


class UpdateForecastAccuracyUseCase:
    """Score a forecast's next-month prediction against actual usage."""

    def __init__(self, forecast_service: ForecastService | None = None):
        self._service = forecast_service

    def _get_service(self) -> ForecastService:
        if self._service is None:
            from stockledger.application.services import get_forecast_service

            self._service = get_forecast_service()
        return self._service

    async def execute(
        self, forecast_id: int, request: UpdateForecastAccuracyRequest
    ) -> InventoryForecast:
        return await self._get_service().update_accuracy(forecast_id, request.actual_usage)

    def to_response(self, forecast: InventoryForecast) -> ForecastResponse:
        return ForecastResponse.from_entity(forecast)
