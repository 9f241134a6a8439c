"""
Structured logging configuration using structlog.

Every event carries the ledger it was written against (service, database
file and negative-stock policy) so logs from several deployments sharing a
collector stay attributable. Request-scoped fields are bound through
contextvars by the HTTP middleware.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from stockledger.config.settings import Settings, get_settings

# Third-party loggers that are chatty at INFO
_QUIET_LOGGERS = ("aiosqlite", "uvicorn.access", "tenacity")


def ledger_context(settings: Settings) -> Processor:
    """Processor stamping each event with the ledger's identity."""
    context = {
        "service": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
        "db": settings.storage.db_path.name,
        "stock_policy": settings.ledger.negative_stock_policy,
    }

    def _add(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        for key, value in context.items():
            event_dict.setdefault(key, value)
        return event_dict

    return _add


def bind_request_context(
    request_id: str, user_id: str | None = None, role: str | None = None
) -> None:
    """Start a fresh logging context for one request."""
    structlog.contextvars.clear_contextvars()
    fields: dict[str, Any] = {"request_id": request_id}
    if user_id:
        fields["user_id"] = user_id
    if role:
        fields["role"] = role.strip().lower()
    structlog.contextvars.bind_contextvars(**fields)


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog and the stdlib root logger.

    Development gets the colored console renderer; staging and production
    emit one JSON object per line.
    """
    settings = settings or get_settings()

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        ledger_context(settings),
    ]
    if settings.environment == "development":
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))
    else:
        processors.extend(
            [
                structlog.processors.dict_tracebacks,
                structlog.processors.JSONRenderer(),
            ]
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level),
    )
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
