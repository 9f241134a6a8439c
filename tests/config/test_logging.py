"""Tests for logging configuration."""

import logging

import pytest
import structlog

from stockledger.config.logging import (
    bind_request_context,
    clear_request_context,
    configure_logging,
    ledger_context,
)
from stockledger.config.settings import LedgerSettings, Settings, StorageSettings


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        environment="production",
        storage=StorageSettings(data_dir=tmp_path, db_name="plant-2.db"),
        ledger=LedgerSettings(negative_stock_policy="clamp"),
    )


@pytest.fixture
def restore_structlog():
    yield
    clear_request_context()
    structlog.reset_defaults()


def test_ledger_context_stamps_events(settings):
    add = ledger_context(settings)

    event = add(None, "info", {"event": "movement_recorded"})

    assert event["service"] == "Stock Ledger"
    assert event["environment"] == "production"
    assert event["db"] == "plant-2.db"
    assert event["stock_policy"] == "clamp"


def test_ledger_context_keeps_explicit_fields(settings):
    add = ledger_context(settings)

    event = add(None, "info", {"event": "migrated", "db": "backup.db"})

    assert event["db"] == "backup.db"


def test_request_context(restore_structlog):
    structlog.contextvars.bind_contextvars(stale="yes")

    bind_request_context("a1b2c3d4", user_id="u-2", role=" Manager ")

    assert structlog.contextvars.get_contextvars() == {
        "request_id": "a1b2c3d4",
        "user_id": "u-2",
        "role": "manager",
    }

    clear_request_context()
    assert structlog.contextvars.get_contextvars() == {}


def test_request_context_without_caller(restore_structlog):
    bind_request_context("a1b2c3d4")

    assert structlog.contextvars.get_contextvars() == {"request_id": "a1b2c3d4"}


def test_configure_quiets_driver_loggers(settings, restore_structlog):
    configure_logging(settings)

    assert logging.getLogger("aiosqlite").level == logging.WARNING
    assert logging.getLogger("tenacity").level == logging.WARNING
    assert isinstance(structlog.get_config()["processors"][-1], structlog.processors.JSONRenderer)
