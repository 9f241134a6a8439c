"""
Application layer - Use cases, DTOs, and service factories.

This layer orchestrates business logic by:
1. Defining request/response DTOs for API contracts
2. Implementing use cases that coordinate core services
3. Providing factory functions for dependency injection

Use cases are the only entry point for API handlers.
"""

from stockledger.application.services import (
    get_forecast_service,
    get_stock_ledger_service,
    reset_services,
)

__all__ = [
    "get_stock_ledger_service",
    "get_forecast_service",
    "reset_services",
]
