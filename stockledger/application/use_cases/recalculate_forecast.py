"""Recalculate Forecast Use Case: compute, persist as draft, activate."""

from datetime import datetime

from stockledger.application.dto.requests import RecalculateForecastRequest
from stockledger.application.dto.responses import ForecastResponse
from stockledger.config import get_logger
from stockledger.core.entities.forecast import InventoryForecast
from stockledger.core.services.forecast_service import ForecastService

logger = get_logger(__name__)


class RecalculateForecastUseCase:
    """Recompute one item's forecast and supersede the previous one."""

    def __init__(self, forecast_service: ForecastService | None = None):
        self._service = forecast_service

    def _get_service(self) -> ForecastService:
        if self._service is None:
            from stockledger.application.services import get_forecast_service

            self._service = get_forecast_service()
        return self._service

    async def execute(
        self,
        item_id: int,
        request: RecalculateForecastRequest | None = None,
        generated_by: str | None = None,
        now: datetime | None = None,
    ) -> InventoryForecast:
        request = request or RecalculateForecastRequest()
        logger.info("recalculate_forecast_started", item_id=item_id)
        return await self._get_service().recalculate(
            item_id,
            now=now,
            seasonal_factor=request.seasonal_factor,
            trend_factor=request.trend_factor,
            target_stock=request.target_stock,
            generated_by=generated_by,
        )

    def to_response(
        self, forecast: InventoryForecast, now: datetime | None = None
    ) -> ForecastResponse:
        return ForecastResponse.from_entity(forecast, now)
