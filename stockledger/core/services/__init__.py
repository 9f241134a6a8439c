"""
Core business logic services.

Layer-pure services that depend only on:
- stockledger/core/entities/*
- stockledger/core/interfaces/*
- stockledger/core/exceptions.py

NO infrastructure imports. All dependencies injected via constructor.
"""

from stockledger.core.services.forecast_engine import ForecastEngine, compute_accuracy
from stockledger.core.services.forecast_service import ForecastService, GenerationReport
from stockledger.core.services.stock_ledger import (
    MovementMetadata,
    RecordMovementResult,
    StockLedgerService,
    validate_thresholds,
)

__all__ = [
    # Stock Ledger
    "StockLedgerService",
    "MovementMetadata",
    "RecordMovementResult",
    "validate_thresholds",
    # Forecasting
    "ForecastEngine",
    "ForecastService",
    "GenerationReport",
    "compute_accuracy",
]
