"""Concurrent writers against one item through the real ledger and store."""

import asyncio

import pytest

from stockledger.core.entities import MovementType, StockStatus
from stockledger.core.exceptions import InsufficientStockError
from stockledger.core.services.stock_ledger import MovementMetadata

WRITERS = 20


async def test_parallel_issues_never_lose_updates(ledger, inventory_store, seed_item):
    item, _ = await seed_item(current_stock=WRITERS)

    results = await asyncio.gather(
        *(
            ledger.record_movement(item.id, MovementType.OUT, 1, f"Issue {n}")
            for n in range(WRITERS)
        )
    )

    final = await inventory_store.get_item(item.id)
    assert final.current_stock == 0
    assert final.status is StockStatus.OUT_OF_STOCK
    assert final.version == 1 + WRITERS

    movements = await inventory_store.get_movements(item.id, limit=None)
    outs = [m for m in movements if m.movement_type is MovementType.OUT]
    assert len(outs) == WRITERS
    assert sum(m.signed_quantity for m in movements) == final.current_stock
    # Every writer saw a distinct snapshot
    assert sorted(m.previous_stock for m in outs) == list(range(1, WRITERS + 1))
    assert any(r.attempts > 1 for r in results)


async def test_overdraw_race_rejects_exactly_the_excess(ledger, inventory_store, seed_item):
    item, _ = await seed_item(current_stock=5)

    results = await asyncio.gather(
        *(
            ledger.record_movement(item.id, MovementType.OUT, 1, f"Issue {n}")
            for n in range(8)
        ),
        return_exceptions=True,
    )

    rejected = [r for r in results if isinstance(r, InsufficientStockError)]
    assert len(rejected) == 3
    assert (await inventory_store.get_item(item.id)).current_stock == 0


async def test_mixed_receipts_and_issues(ledger, inventory_store, seed_item):
    item, _ = await seed_item(current_stock=50, max_stock=500)

    await asyncio.gather(
        *(
            ledger.record_movement(
                item.id, MovementType.IN, 10, "Receipt", MovementMetadata(unit_cost=4.0)
            )
            for _ in range(10)
        ),
        *(ledger.record_movement(item.id, MovementType.OUT, 5, "Issue") for _ in range(10)),
    )

    final = await inventory_store.get_item(item.id)
    movements = await inventory_store.get_movements(item.id, limit=None)
    assert final.current_stock == pytest.approx(100)
    assert sum(m.signed_quantity for m in movements) == pytest.approx(final.current_stock)
    assert all(m.is_consistent for m in movements)
