"""
Error handling middleware.

Standardizes all API error responses to include:
- error_code: machine-readable identifier
- message: human-readable description
- hint: suggested recovery action
"""

import traceback
from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from stockledger.application.dto.responses import ErrorResponse
from stockledger.config import get_logger
from stockledger.core.exceptions import (
    ConcurrencyConflictError,
    ConfigurationError,
    ForecastStateError,
    InsufficientStockError,
    NotFoundError,
    StockLedgerError,
    StorageError,
    ValidationError,
)

logger = get_logger(__name__)


# Map exceptions to HTTP status codes; first match wins
EXCEPTION_STATUS_MAP: dict[type[Exception], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InsufficientStockError: status.HTTP_409_CONFLICT,
    ConcurrencyConflictError: status.HTTP_409_CONFLICT,
    ForecastStateError: status.HTTP_409_CONFLICT,
    StorageError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ConfigurationError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ValueError: status.HTTP_400_BAD_REQUEST,
}

# Hint messages per error code / exception type
HINT_MAP: dict[str, str] = {
    "INVENTORY_ITEM_NOT_FOUND": "Check the item ID and try GET /api/inventory to list items.",
    "INVENTORY_ITEM_INACTIVE": "The item was deactivated. Movements can only be recorded on active items.",
    "MOVEMENT_NOT_FOUND": "Check the movement ID and try GET /api/inventory/{id}/movements.",
    "FORECAST_NOT_FOUND": "Check the forecast ID and try GET /api/forecasts to list active forecasts.",
    "SUPPLIER_NOT_FOUND": "Check the supplier ID and try GET /api/suppliers.",
    "INSUFFICIENT_STOCK": "Reduce the quantity or receive stock before issuing it.",
    "CONCURRENCY_CONFLICT": "The item is under heavy concurrent update. Retry the request.",
    "INVALID_FORECAST_TRANSITION": "Only draft forecasts can be activated. Recalculate to get a new one.",
    "DUPLICATE_PART_NUMBER": "Use a different part number or update the existing item.",
    "MOVEMENT_ALREADY_REVERSED": "Reversed movements and reversal entries cannot be reversed again.",
    "VALIDATION_ERROR": "Check the request body against the API schema.",
    "DATABASE_ERROR": "A database operation failed. Check server logs.",
    "FORBIDDEN": "Your role does not permit this operation.",
    "ValueError": "A parameter value is invalid. Check the request.",
}

# Default hints by HTTP status code
STATUS_HINTS: dict[int, str] = {
    400: "Check the request parameters and body.",
    401: "Send the X-User-Id and X-User-Role headers.",
    403: "Your role does not permit this operation.",
    404: "The requested resource was not found. Verify the ID.",
    409: "The request conflicts with the current state. Reload and retry.",
    422: "The request could not be processed. Check the input format.",
    500: "An internal error occurred. Check server logs.",
}


def _get_hint(error_code: str, status_code: int) -> str:
    """Resolve hint from error code, falling back to status-based hint."""
    return HINT_MAP.get(error_code) or STATUS_HINTS.get(status_code, "")


def status_for(exc: Exception) -> int:
    """HTTP status for an exception."""
    for exc_type, code in EXCEPTION_STATUS_MAP.items():
        if isinstance(exc, exc_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def build_error_response(request: Request, exc: Exception) -> JSONResponse:
    """Convert an exception to the standardized JSON response."""
    status_code = status_for(exc)

    if isinstance(exc, StockLedgerError):
        error_code = exc.code
        message = exc.message
        details = exc.details
    else:
        error_code = exc.__class__.__name__
        message = str(exc)
        details = {}

    request_id = getattr(request.state, "request_id", None)
    log = logger.error if status_code >= 500 else logger.warning
    log(
        "request_error",
        request_id=request_id,
        path=request.url.path,
        error_type=error_code,
        error=message,
        status=status_code,
        traceback=traceback.format_exc() if status_code >= 500 else None,
    )

    error_response = ErrorResponse(
        error_code=error_code,
        message=message,
        hint=_get_hint(error_code, status_code),
        details=details,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status_code,
        content=error_response.model_dump(mode="json"),
    )


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Global error handling middleware.

    Converts exceptions to standardized JSON error responses.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            return build_error_response(request, e)


def setup_exception_handlers(app: FastAPI) -> None:
    """Set up FastAPI exception handlers."""
    from fastapi.exceptions import RequestValidationError
    from starlette.exceptions import HTTPException

    @app.exception_handler(StockLedgerError)
    async def domain_exception_handler(
        request: Request,
        exc: StockLedgerError,
    ) -> JSONResponse:
        return build_error_response(request, exc)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Handle Pydantic validation errors."""
        errors = []
        for error in exc.errors():
            loc = " -> ".join(str(part) for part in error["loc"])
            errors.append(f"{loc}: {error['msg']}")

        return JSONResponse(
            status_code=422,
            content=ErrorResponse(
                error_code="VALIDATION_ERROR",
                message="Request validation failed",
                hint="Check the request body fields and types.",
                detail="; ".join(errors),
                path=request.url.path,
            ).model_dump(mode="json"),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request,
        exc: HTTPException,
    ) -> JSONResponse:
        """Handle HTTP exceptions with standardized format."""
        error_code = _infer_error_code(exc.status_code)

        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error_code=error_code,
                message=str(exc.detail) if exc.detail else "An error occurred",
                hint=_get_hint(error_code, exc.status_code),
                path=request.url.path,
            ).model_dump(mode="json"),
        )


def _infer_error_code(status_code: int) -> str:
    """Machine-readable error code for a bare HTTPException."""
    return {
        400: "BAD_REQUEST",
        401: "UNAUTHENTICATED",
        403: "FORBIDDEN",
        404: "NOT_FOUND",
        422: "UNPROCESSABLE_ENTITY",
    }.get(status_code, "HTTP_ERROR")
