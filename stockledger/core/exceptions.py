"""
Domain exceptions for the stock ledger.

Every exception carries a machine-readable code and structured details
so the API layer can report it verbatim.
"""

from typing import Any


class StockLedgerError(Exception):
    """Base exception for all stock ledger errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Storage Exceptions
class StorageError(StockLedgerError):
    """Base exception for storage operations."""

    pass


class DatabaseError(StorageError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )


# Lookup Exceptions
class NotFoundError(StockLedgerError):
    """Referenced entity does not exist."""

    pass


class InventoryItemNotFoundError(NotFoundError):
    """Inventory item not found."""

    def __init__(self, item_id: int | str):
        super().__init__(
            f"Inventory item not found: {item_id}",
            code="INVENTORY_ITEM_NOT_FOUND",
            details={"item_id": item_id},
        )


class InventoryItemInactiveError(NotFoundError):
    """Inventory item exists but has been deactivated."""

    def __init__(self, item_id: int):
        super().__init__(
            f"Inventory item {item_id} is inactive",
            code="INVENTORY_ITEM_INACTIVE",
            details={"item_id": item_id},
        )


class MovementNotFoundError(NotFoundError):
    """Inventory movement not found."""

    def __init__(self, movement_id: int):
        super().__init__(
            f"Inventory movement not found: {movement_id}",
            code="MOVEMENT_NOT_FOUND",
            details={"movement_id": movement_id},
        )


class ForecastNotFoundError(NotFoundError):
    """Inventory forecast not found."""

    def __init__(self, forecast_id: int):
        super().__init__(
            f"Inventory forecast not found: {forecast_id}",
            code="FORECAST_NOT_FOUND",
            details={"forecast_id": forecast_id},
        )


class SupplierNotFoundError(NotFoundError):
    """Supplier not found."""

    def __init__(self, supplier_id: int):
        super().__init__(
            f"Supplier not found: {supplier_id}",
            code="SUPPLIER_NOT_FOUND",
            details={"supplier_id": supplier_id},
        )


# Ledger Exceptions
class InsufficientStockError(StockLedgerError):
    """Outbound movement would drive stock negative."""

    def __init__(self, item_id: int, requested: float, available: float):
        super().__init__(
            f"Insufficient stock for outbound movement on item {item_id}: "
            f"requested {requested}, available {available}",
            code="INSUFFICIENT_STOCK",
            details={
                "item_id": item_id,
                "requested": requested,
                "available": available,
            },
        )


class ConcurrencyConflictError(StockLedgerError):
    """Optimistic lock could not be acquired within the retry budget."""

    def __init__(self, item_id: int, attempts: int):
        super().__init__(
            f"Concurrent update conflict on item {item_id} after {attempts} attempts",
            code="CONCURRENCY_CONFLICT",
            details={"item_id": item_id, "attempts": attempts},
        )


class StaleItemVersionError(StockLedgerError):
    """Item version changed between read and write. Retried internally."""

    def __init__(self, item_id: int, expected_version: int):
        super().__init__(
            f"Item {item_id} changed since version {expected_version}",
            code="STALE_ITEM_VERSION",
            details={"item_id": item_id, "expected_version": expected_version},
        )


class ForecastStateError(StockLedgerError):
    """Illegal forecast lifecycle transition."""

    def __init__(self, forecast_id: int | None, current: str, target: str):
        super().__init__(
            f"Forecast {forecast_id} cannot move from '{current}' to '{target}'",
            code="INVALID_FORECAST_TRANSITION",
            details={"forecast_id": forecast_id, "current": current, "target": target},
        )


# Validation Exceptions
class ValidationError(StockLedgerError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


class DuplicatePartNumberError(ValidationError):
    """Part number already used by another item."""

    def __init__(self, part_number: str):
        super().__init__(
            field="part_number",
            message=f"Part number '{part_number}' already exists",
            value=part_number,
        )
        self.code = "DUPLICATE_PART_NUMBER"


class MovementAlreadyReversedError(ValidationError):
    """Movement was already reversed or is itself a reversal."""

    def __init__(self, movement_id: int, reason: str = "movement already reversed"):
        super().__init__(field="movement_id", message=reason, value=movement_id)
        self.code = "MOVEMENT_ALREADY_REVERSED"
        self.details["movement_id"] = movement_id


class ConfigurationError(StockLedgerError):
    """Configuration error."""

    pass
