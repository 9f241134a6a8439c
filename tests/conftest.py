"""Pytest configuration and fixtures."""

from collections.abc import Callable, Generator
from datetime import datetime

import pytest

from stockledger.core.entities import (
    InventoryItem,
    InventoryMovement,
    MovementDirection,
    MovementType,
)


@pytest.fixture(autouse=True)
def reset_singletons() -> Generator[None, None, None]:
    """Drop cached settings and services between tests."""
    yield
    from stockledger.application.services import reset_services
    from stockledger.config import reset_settings

    reset_services()
    reset_settings()


@pytest.fixture
def now() -> datetime:
    """Fixed evaluation time."""
    return datetime(2026, 7, 1, 12, 0, 0)


@pytest.fixture
def make_item() -> Callable[..., InventoryItem]:
    """Factory for persisted-looking inventory items."""

    def _make(**overrides) -> InventoryItem:
        data = {
            "id": 1,
            "part_number": "BRG-6204",
            "material": "Deep groove ball bearing 6204",
            "current_stock": 100.0,
            "min_stock": 10.0,
            "max_stock": 200.0,
            "reorder_point": 20.0,
            "average_cost": 4.0,
            "location": "A-01-03",
            "version": 1,
        }
        data.update(overrides)
        item = InventoryItem(**data)
        item.refresh_status()
        return item

    return _make


@pytest.fixture
def make_movement() -> Callable[..., InventoryMovement]:
    """Factory for ledger movements."""

    def _make(**overrides) -> InventoryMovement:
        data = {
            "id": 1,
            "inventory_item_id": 1,
            "movement_type": MovementType.OUT,
            "direction": MovementDirection.OUTBOUND,
            "quantity": 10.0,
            "previous_stock": 100.0,
            "new_stock": 90.0,
            "unit_cost": 4.0,
            "reason": "Issued to line 3",
        }
        data.update(overrides)
        return InventoryMovement(**data)

    return _make
