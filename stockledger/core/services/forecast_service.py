"""
Forecast Service.

Drives the forecast lifecycle: gathers inputs from the stores, runs the
engine, and persists draft -> active transitions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta

from stockledger.config import get_logger
from stockledger.core.entities.forecast import (
    ActionableForecast,
    InventoryForecast,
)
from stockledger.core.exceptions import (
    ForecastNotFoundError,
    InventoryItemInactiveError,
    InventoryItemNotFoundError,
    StockLedgerError,
    ValidationError,
)
from stockledger.core.interfaces.forecast_store import IForecastStore
from stockledger.core.interfaces.inventory_store import IInventoryStore
from stockledger.core.interfaces.supplier_store import ISupplierStore
from stockledger.core.services.forecast_engine import ForecastEngine, compute_accuracy

logger = get_logger(__name__)


@dataclass
class GenerationReport:
    """Outcome of a batch forecast run."""

    forecasts: list[InventoryForecast] = field(default_factory=list)
    failed: dict[int, str] = field(default_factory=dict)

    @property
    def generated(self) -> int:
        return len(self.forecasts)


class ForecastService:
    """
    Layer-pure forecast orchestration.

    Depends only on core interfaces and the pure ForecastEngine.
    A missing supplier store means every item uses the default lead time.
    """

    def __init__(
        self,
        inventory_store: IInventoryStore,
        forecast_store: IForecastStore,
        supplier_store: ISupplierStore | None = None,
        engine: ForecastEngine | None = None,
        default_lead_time_days: int = 14,
    ) -> None:
        self._inventory = inventory_store
        self._forecasts = forecast_store
        self._suppliers = supplier_store
        self._engine = engine or ForecastEngine()
        self._default_lead_time = default_lead_time_days

    @property
    def engine(self) -> ForecastEngine:
        return self._engine

    async def recalculate(
        self,
        item_id: int,
        now: datetime | None = None,
        seasonal_factor: float = 1.0,
        trend_factor: float = 1.0,
        target_stock: float | None = None,
        generated_by: str | None = None,
    ) -> InventoryForecast:
        """Compute a fresh forecast for one item and make it the active one."""
        now = now or datetime.utcnow()

        item = await self._inventory.get_item(item_id)
        if item is None:
            raise InventoryItemNotFoundError(item_id)
        if not item.is_active:
            raise InventoryItemInactiveError(item_id)

        lead_time = await self._lead_time_for(item.supplier_id)
        movements = await self._inventory.get_movements(
            item_id,
            start=now - timedelta(days=self._engine.lookback_months * 31),
            end=now,
            limit=None,
            ascending=True,
        )
        prior = await self._forecasts.latest_accuracy(item_id)

        draft = self._engine.compute(
            item,
            movements,
            now=now,
            lead_time_days=lead_time,
            seasonal_factor=seasonal_factor,
            trend_factor=trend_factor,
            target_stock=target_stock,
            prior_mape=prior.mape if prior is not None else None,
            generated_by=generated_by,
        )

        draft = await self._forecasts.create_draft(draft)
        active = await self._forecasts.activate(draft)

        logger.info(
            "forecast_recalculated",
            item_id=item_id,
            forecast_id=active.id,
            methodology=active.methodology.value,
            confidence=active.confidence,
            stock_out=(
                active.predicted_stock_out_date.isoformat()
                if active.predicted_stock_out_date
                else None
            ),
        )
        return active

    async def generate_all(
        self,
        now: datetime | None = None,
        generated_by: str | None = None,
        batch_size: int = 200,
    ) -> GenerationReport:
        """Recalculate forecasts for every active item."""
        now = now or datetime.utcnow()
        report = GenerationReport()
        offset = 0

        while True:
            items, total = await self._inventory.list_items(
                sort_by="id", limit=batch_size, offset=offset
            )
            for item in items:
                try:
                    forecast = await self.recalculate(
                        item.id, now=now, generated_by=generated_by  # type: ignore[arg-type]
                    )
                    report.forecasts.append(forecast)
                except StockLedgerError as e:
                    report.failed[item.id] = e.message  # type: ignore[index]
                    logger.warning(
                        "forecast_generation_item_failed",
                        item_id=item.id,
                        error=e.code,
                    )
            offset += len(items)
            if not items or offset >= total:
                break

        logger.info(
            "forecast_generation_complete",
            generated=report.generated,
            failed=len(report.failed),
        )
        return report

    async def find_actionable(
        self, days_threshold: int = 30, now: datetime | None = None
    ) -> list[ActionableForecast]:
        """Active forecasts predicting a stock-out within the threshold."""
        if days_threshold < 0:
            raise ValidationError("days", "threshold must not be negative", days_threshold)
        now = now or datetime.utcnow()
        return await self._forecasts.find_actionable(
            until=now + timedelta(days=days_threshold), now=now
        )

    async def update_accuracy(
        self, forecast_id: int, actual_usage: float
    ) -> InventoryForecast:
        """Track the forecast's next-month prediction against actual usage."""
        forecast = await self._forecasts.get(forecast_id)
        if forecast is None:
            raise ForecastNotFoundError(forecast_id)

        accuracy = compute_accuracy(forecast.predicted_demand.next_month, actual_usage)
        updated = await self._forecasts.update_accuracy(forecast_id, accuracy)

        logger.info(
            "forecast_accuracy_updated",
            forecast_id=forecast_id,
            mape=accuracy.mape,
            bias=accuracy.bias,
        )
        return updated

    async def expire(self, now: datetime | None = None) -> int:
        """Expire active forecasts whose validity window has passed."""
        now = now or datetime.utcnow()
        count = await self._forecasts.expire_stale(now)
        if count:
            logger.info("forecasts_expired", count=count)
        return count

    async def _lead_time_for(self, supplier_id: int | None) -> int:
        if supplier_id is None or self._suppliers is None:
            return self._default_lead_time
        supplier = await self._suppliers.get(supplier_id)
        if supplier is None:
            return self._default_lead_time
        return supplier.lead_time_days
