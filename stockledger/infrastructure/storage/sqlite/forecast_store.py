"""SQLite implementation of inventory forecast storage."""

from datetime import datetime

import aiosqlite

from stockledger.config import get_logger
from stockledger.core.entities.forecast import (
    ActionableForecast,
    ForecastAccuracy,
    ForecastFactors,
    ForecastMethodology,
    ForecastState,
    ForecastType,
    InventoryForecast,
    PredictedDemand,
    can_transition,
)
from stockledger.core.exceptions import ForecastNotFoundError, ForecastStateError
from stockledger.core.interfaces.forecast_store import IForecastStore
from stockledger.infrastructure.storage.sqlite.connection import (
    format_timestamp,
    get_connection,
    get_transaction,
    parse_timestamp,
)

logger = get_logger(__name__)


class SQLiteForecastStore(IForecastStore):
    """Forecast rows move through draft -> active -> superseded/expired."""

    async def create_draft(self, forecast: InventoryForecast) -> InventoryForecast:
        now = datetime.utcnow()
        forecast.state = ForecastState.DRAFT
        forecast.created_at = now
        forecast.updated_at = now

        async with get_transaction() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO inventory_forecasts (
                    inventory_item_id, forecast_type, current_stock,
                    average_monthly_usage, seasonal_factor, trend_factor,
                    predicted_demand, predicted_stock_out_date,
                    recommended_order_quantity, recommended_order_date,
                    confidence, factors, methodology, window_months,
                    lead_time_days, valid_from, valid_until, accuracy,
                    state, notes, generated_by, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    forecast.inventory_item_id,
                    forecast.forecast_type.value,
                    forecast.current_stock,
                    forecast.average_monthly_usage,
                    forecast.seasonal_factor,
                    forecast.trend_factor,
                    forecast.predicted_demand.model_dump_json(),
                    format_timestamp(forecast.predicted_stock_out_date),
                    forecast.recommended_order_quantity,
                    format_timestamp(forecast.recommended_order_date),
                    forecast.confidence,
                    forecast.factors.model_dump_json(),
                    forecast.methodology.value,
                    forecast.window_months,
                    forecast.lead_time_days,
                    format_timestamp(forecast.valid_from),
                    format_timestamp(forecast.valid_until),
                    forecast.accuracy.model_dump_json(),
                    forecast.state.value,
                    forecast.notes,
                    forecast.generated_by,
                    format_timestamp(forecast.created_at),
                    format_timestamp(forecast.updated_at),
                ),
            )
            forecast.id = cursor.lastrowid
        return forecast

    async def activate(self, forecast: InventoryForecast) -> InventoryForecast:
        """Promote a draft, superseding whatever was active for the item."""
        now = datetime.utcnow()

        async with get_transaction(immediate=True) as conn:
            cursor = await conn.execute(
                "SELECT inventory_item_id, state FROM inventory_forecasts WHERE id = ?",
                (forecast.id,),
            )
            row = await cursor.fetchone()
            if row is None:
                raise ForecastNotFoundError(forecast.id)  # type: ignore[arg-type]

            current = ForecastState(row["state"])
            if not can_transition(current, ForecastState.ACTIVE):
                raise ForecastStateError(forecast.id, current.value, ForecastState.ACTIVE.value)

            cursor = await conn.execute(
                """
                UPDATE inventory_forecasts
                SET state = 'superseded', updated_at = ?
                WHERE inventory_item_id = ? AND state = 'active'
                """,
                (format_timestamp(now), row["inventory_item_id"]),
            )
            superseded = cursor.rowcount

            await conn.execute(
                """
                UPDATE inventory_forecasts
                SET state = 'active', updated_at = ?
                WHERE id = ? AND state = 'draft'
                """,
                (format_timestamp(now), forecast.id),
            )

        forecast.state = ForecastState.ACTIVE
        forecast.updated_at = now
        logger.info(
            "forecast_activated",
            forecast_id=forecast.id,
            item_id=forecast.inventory_item_id,
            superseded=superseded,
        )
        return forecast

    async def get(self, forecast_id: int) -> InventoryForecast | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM inventory_forecasts WHERE id = ?", (forecast_id,)
            )
            row = await cursor.fetchone()
            return self._row_to_forecast(row) if row else None

    async def get_active_for_item(self, inventory_item_id: int) -> InventoryForecast | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM inventory_forecasts
                WHERE inventory_item_id = ? AND state = 'active'
                """,
                (inventory_item_id,),
            )
            row = await cursor.fetchone()
            return self._row_to_forecast(row) if row else None

    async def list_active(self, limit: int = 100, offset: int = 0) -> list[InventoryForecast]:
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM inventory_forecasts
                WHERE state = 'active'
                ORDER BY confidence DESC,
                         predicted_stock_out_date IS NULL,
                         predicted_stock_out_date ASC,
                         id ASC
                LIMIT ? OFFSET ?
                """,
                (limit, offset),
            )
            rows = await cursor.fetchall()
            return [self._row_to_forecast(row) for row in rows]

    async def list_history(
        self, inventory_item_id: int, limit: int = 50
    ) -> list[InventoryForecast]:
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM inventory_forecasts
                WHERE inventory_item_id = ?
                ORDER BY created_at DESC, id DESC
                LIMIT ?
                """,
                (inventory_item_id, limit),
            )
            rows = await cursor.fetchall()
            return [self._row_to_forecast(row) for row in rows]

    async def latest_accuracy(self, inventory_item_id: int) -> ForecastAccuracy | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT accuracy FROM inventory_forecasts
                WHERE inventory_item_id = ?
                  AND json_extract(accuracy, '$.mape') IS NOT NULL
                ORDER BY updated_at DESC, id DESC
                LIMIT 1
                """,
                (inventory_item_id,),
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return ForecastAccuracy.model_validate_json(row["accuracy"])

    async def find_actionable(
        self, until: datetime, now: datetime
    ) -> list[ActionableForecast]:
        """Soonest stock-outs first, higher confidence breaks ties."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT f.*, i.part_number, i.material,
                       i.current_stock AS item_current_stock,
                       i.reorder_point AS item_reorder_point
                FROM inventory_forecasts f
                JOIN inventory_items i ON i.id = f.inventory_item_id
                WHERE f.state = 'active'
                  AND f.valid_until >= ?
                  AND f.predicted_stock_out_date IS NOT NULL
                  AND f.predicted_stock_out_date <= ?
                  AND i.is_active = 1
                ORDER BY f.predicted_stock_out_date ASC, f.confidence DESC, f.id ASC
                """,
                (format_timestamp(now), format_timestamp(until)),
            )
            rows = await cursor.fetchall()

        return [
            ActionableForecast(
                forecast=self._row_to_forecast(row),
                part_number=row["part_number"],
                material=row["material"],
                current_stock=float(row["item_current_stock"]),
                reorder_point=float(row["item_reorder_point"]),
            )
            for row in rows
        ]

    async def update_accuracy(
        self, forecast_id: int, accuracy: ForecastAccuracy
    ) -> InventoryForecast:
        async with get_transaction() as conn:
            cursor = await conn.execute(
                """
                UPDATE inventory_forecasts
                SET accuracy = ?, updated_at = ?
                WHERE id = ?
                """,
                (accuracy.model_dump_json(), format_timestamp(datetime.utcnow()), forecast_id),
            )
            if cursor.rowcount == 0:
                raise ForecastNotFoundError(forecast_id)

        forecast = await self.get(forecast_id)
        if forecast is None:
            raise ForecastNotFoundError(forecast_id)
        return forecast

    async def expire_stale(self, now: datetime) -> int:
        async with get_transaction(immediate=True) as conn:
            cursor = await conn.execute(
                """
                UPDATE inventory_forecasts
                SET state = 'expired', updated_at = ?
                WHERE state = 'active' AND valid_until < ?
                """,
                (format_timestamp(now), format_timestamp(now)),
            )
            return cursor.rowcount

    @staticmethod
    def _row_to_forecast(row: aiosqlite.Row) -> InventoryForecast:
        return InventoryForecast(
            id=row["id"],
            inventory_item_id=row["inventory_item_id"],
            forecast_type=ForecastType(row["forecast_type"]),
            current_stock=float(row["current_stock"]),
            average_monthly_usage=float(row["average_monthly_usage"]),
            seasonal_factor=float(row["seasonal_factor"]),
            trend_factor=float(row["trend_factor"]),
            predicted_demand=PredictedDemand.model_validate_json(row["predicted_demand"]),
            predicted_stock_out_date=parse_timestamp(row["predicted_stock_out_date"]),
            recommended_order_quantity=float(row["recommended_order_quantity"]),
            recommended_order_date=parse_timestamp(row["recommended_order_date"]),
            confidence=float(row["confidence"]),
            factors=ForecastFactors.model_validate_json(row["factors"]),
            methodology=ForecastMethodology(row["methodology"]),
            window_months=row["window_months"],
            lead_time_days=int(row["lead_time_days"]),
            valid_from=parse_timestamp(row["valid_from"]) or datetime.utcnow(),
            valid_until=parse_timestamp(row["valid_until"]) or datetime.utcnow(),
            accuracy=ForecastAccuracy.model_validate_json(row["accuracy"]),
            state=ForecastState(row["state"]),
            notes=row["notes"],
            generated_by=row["generated_by"],
            created_at=parse_timestamp(row["created_at"]) or datetime.utcnow(),
            updated_at=parse_timestamp(row["updated_at"]) or datetime.utcnow(),
        )
