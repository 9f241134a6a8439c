"""
Forecast Engine.

Pure computation of demand forecasts from an item's movement history.
No storage access: callers pass the item, its movements and the clock.
"""

from __future__ import annotations

import math
import statistics
from collections.abc import Iterable
from datetime import datetime, timedelta

from dateutil.relativedelta import relativedelta

from stockledger.config import get_logger
from stockledger.core.entities.forecast import (
    ForecastAccuracy,
    ForecastFactors,
    ForecastMethodology,
    ForecastState,
    InventoryForecast,
    PredictedDemand,
)
from stockledger.core.entities.inventory import InventoryItem
from stockledger.core.entities.movement import InventoryMovement, MovementDirection
from stockledger.core.exceptions import ValidationError

logger = get_logger(__name__)

_MAX_BASE_CONFIDENCE = 95.0


class ForecastEngine:
    """Moving-average demand forecasting over a lookback window."""

    def __init__(
        self,
        lookback_months: int = 6,
        days_per_month: float = 30.0,
        validity_months: int = 3,
        min_data_points: int = 3,
    ) -> None:
        if lookback_months < 1:
            raise ValueError("lookback_months must be at least 1")
        if days_per_month <= 0:
            raise ValueError("days_per_month must be positive")
        self.lookback_months = lookback_months
        self.days_per_month = days_per_month
        self.validity_months = validity_months
        self.min_data_points = max(1, min_data_points)

    def usage_movements(
        self, movements: Iterable[InventoryMovement], now: datetime
    ) -> list[InventoryMovement]:
        """Outbound, effective movements inside the lookback window."""
        window_start = now - relativedelta(months=self.lookback_months)
        return [
            m
            for m in movements
            if m.direction is MovementDirection.OUTBOUND
            and not m.is_reversed
            and not m.is_compensating
            and m.quantity > 0
            and window_start <= m.created_at <= now
        ]

    def compute(
        self,
        item: InventoryItem,
        movements: Iterable[InventoryMovement],
        now: datetime | None = None,
        lead_time_days: int = 14,
        seasonal_factor: float = 1.0,
        trend_factor: float = 1.0,
        target_stock: float | None = None,
        prior_mape: float | None = None,
        generated_by: str | None = None,
    ) -> InventoryForecast:
        """
        Build a draft forecast for one item.

        Args:
            item: Item with its current stock and thresholds
            movements: Item movement history (any order, any type)
            now: Evaluation time
            lead_time_days: Supplier lead time used for the order date
            seasonal_factor: Multiplier applied to average usage
            trend_factor: Multiplier applied to average usage
            target_stock: Order-up-to level, defaults to item.max_stock
            prior_mape: MAPE of the item's previous forecast, if tracked
            generated_by: Caller identity

        Returns:
            Draft InventoryForecast, not yet persisted
        """
        if item.id is None:
            raise ValidationError("inventory_item_id", "item must be persisted before forecasting")
        if lead_time_days < 0:
            raise ValidationError("lead_time_days", "lead time must not be negative", lead_time_days)

        now = now or datetime.utcnow()
        usage = self.usage_movements(movements, now)
        total = sum(m.quantity for m in usage)
        current = item.current_stock
        target = item.max_stock if target_stock is None else target_stock

        valid_until = now + relativedelta(months=self.validity_months)

        if not usage or total <= 0:
            logger.debug("forecast_insufficient_data", item_id=item.id)
            return InventoryForecast(
                inventory_item_id=item.id,
                current_stock=current,
                average_monthly_usage=0.0,
                seasonal_factor=seasonal_factor,
                trend_factor=trend_factor,
                recommended_order_quantity=self._order_quantity(target, current, 0.0),
                confidence=0.0,
                factors=ForecastFactors(
                    data_points=0,
                    seasonality=seasonal_factor,
                    trend=trend_factor,
                ),
                methodology=ForecastMethodology.INSUFFICIENT_DATA,
                window_months=self.lookback_months,
                lead_time_days=lead_time_days,
                valid_from=now,
                valid_until=valid_until,
                state=ForecastState.DRAFT,
                generated_by=generated_by,
            )

        earliest = min(m.created_at for m in usage)
        span_months = (now - earliest).total_seconds() / 86400 / self.days_per_month
        months_observed = min(float(self.lookback_months), max(1.0, span_months))

        average = total / months_observed
        projected = average * seasonal_factor * trend_factor

        demand = PredictedDemand(
            next_month=round(projected, 4),
            next_3_months=round(projected * 3, 4),
            next_6_months=round(projected * 6, 4),
            next_year=round(projected * 12, 4),
        )

        stock_out = now + timedelta(days=current / projected * self.days_per_month)
        order_date = stock_out - timedelta(days=lead_time_days)
        lead_time_demand = projected / self.days_per_month * lead_time_days

        volatility = self._volatility(usage, now, months_observed)
        confidence = self._confidence(len(usage), volatility, prior_mape)

        return InventoryForecast(
            inventory_item_id=item.id,
            current_stock=current,
            average_monthly_usage=round(average, 4),
            seasonal_factor=seasonal_factor,
            trend_factor=trend_factor,
            predicted_demand=demand,
            predicted_stock_out_date=stock_out,
            recommended_order_quantity=self._order_quantity(target, current, lead_time_demand),
            recommended_order_date=order_date,
            confidence=confidence,
            factors=ForecastFactors(
                historical_accuracy=(
                    max(0.0, 100.0 - prior_mape) if prior_mape is not None else 0.0
                ),
                data_points=len(usage),
                seasonality=seasonal_factor,
                trend=trend_factor,
                volatility=round(volatility, 4),
            ),
            methodology=ForecastMethodology.MOVING_AVERAGE,
            window_months=self.lookback_months,
            lead_time_days=lead_time_days,
            valid_from=now,
            valid_until=valid_until,
            state=ForecastState.DRAFT,
            generated_by=generated_by,
        )

    def _volatility(
        self,
        usage: list[InventoryMovement],
        now: datetime,
        months_observed: float,
    ) -> float:
        """Coefficient of variation of usage per month-sized bucket."""
        buckets = [0.0] * max(1, math.ceil(months_observed))
        for m in usage:
            age_days = (now - m.created_at).total_seconds() / 86400
            index = min(len(buckets) - 1, int(age_days // self.days_per_month))
            buckets[index] += m.quantity

        if len(buckets) < 2:
            return 0.0
        mean = statistics.fmean(buckets)
        if mean <= 0:
            return 0.0
        return statistics.pstdev(buckets) / mean

    def _confidence(
        self, data_points: int, volatility: float, prior_mape: float | None
    ) -> float:
        if data_points <= 0:
            return 0.0

        score = min(_MAX_BASE_CONFIDENCE, 60.0 + 5.0 * data_points)
        if data_points < self.min_data_points:
            score *= data_points / self.min_data_points

        score *= 1.0 - min(volatility, 1.0) * 0.3

        if prior_mape is not None:
            score *= 1.0 - min(max(prior_mape, 0.0), 100.0) / 200.0

        return round(min(100.0, max(0.0, score)), 1)

    @staticmethod
    def _order_quantity(target: float, current: float, lead_time_demand: float) -> float:
        raw = target - current + lead_time_demand
        # Round away float noise before ceil (70.0000000001 -> 70)
        return float(max(0, math.ceil(round(raw, 6))))


def compute_accuracy(predicted: float, actual: float) -> ForecastAccuracy:
    """MAPE and bias of a prediction against observed usage."""
    if actual is None or not math.isfinite(actual) or actual <= 0:
        raise ValidationError("actual_usage", "actual usage must be positive", actual)

    mape = abs(predicted - actual) / actual * 100
    bias = (predicted - actual) / actual * 100
    return ForecastAccuracy(
        last_period_actual=actual,
        last_period_predicted=predicted,
        mape=round(mape, 2),
        bias=round(bias, 2),
    )
