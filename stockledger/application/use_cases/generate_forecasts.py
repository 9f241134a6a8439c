"""Generate Forecasts Use Case: batch recalculation over active items."""

from datetime import datetime

from stockledger.application.dto.responses import ForecastResponse, GenerateForecastsResponse
from stockledger.core.services.forecast_service import ForecastService, GenerationReport


class GenerateForecastsUseCase:
    """Refresh forecasts for every active inventory item."""

    def __init__(self, forecast_service: ForecastService | None = None):
        self._service = forecast_service

    def _get_service(self) -> ForecastService:
        if self._service is None:
            from stockledger.application.services import get_forecast_service

            self._service = get_forecast_service()
        return self._service

    async def execute(
        self,
        generated_by: str | None = None,
        now: datetime | None = None,
    ) -> GenerationReport:
        return await self._get_service().generate_all(now=now, generated_by=generated_by)

    def to_response(
        self, report: GenerationReport, now: datetime | None = None
    ) -> GenerateForecastsResponse:
        return GenerateForecastsResponse(
            generated=report.generated,
            failed=report.failed,
            forecasts=[ForecastResponse.from_entity(f, now) for f in report.forecasts],
        )
