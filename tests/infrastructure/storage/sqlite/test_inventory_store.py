"""Tests for the SQLite inventory store and movement ledger."""

from datetime import datetime, timedelta

import aiosqlite
import pytest

from stockledger.core.entities import (
    InventoryMovement,
    MovementDirection,
    MovementType,
    StockStatus,
)
from stockledger.core.exceptions import (
    DuplicatePartNumberError,
    MovementAlreadyReversedError,
    StaleItemVersionError,
    ValidationError,
)
from stockledger.core.services.stock_ledger import MovementMetadata
from stockledger.infrastructure.storage.sqlite.connection import get_transaction


def _outbound(item, quantity: float, **overrides) -> InventoryMovement:
    data = {
        "inventory_item_id": item.id,
        "movement_type": MovementType.OUT,
        "direction": MovementDirection.OUTBOUND,
        "quantity": quantity,
        "previous_stock": item.current_stock,
        "new_stock": item.current_stock - quantity,
        "unit_cost": item.average_cost,
        "reason": "Issued",
    }
    data.update(overrides)
    return InventoryMovement(**data)


class TestItems:
    async def test_create_and_get(self, inventory_store, seed_item):
        item, initial = await seed_item(current_stock=50)

        assert item.id is not None
        assert initial.id is not None
        assert initial.inventory_item_id == item.id

        loaded = await inventory_store.get_item(item.id)
        assert loaded.part_number == "BRG-6204"
        assert loaded.current_stock == 50
        assert loaded.status is StockStatus.IN_STOCK
        assert loaded.version == 1
        assert loaded.is_active is True

        by_part = await inventory_store.get_item_by_part_number("BRG-6204")
        assert by_part.id == item.id

    async def test_get_missing(self, inventory_store):
        assert await inventory_store.get_item(999) is None
        assert await inventory_store.get_item_by_part_number("NOPE") is None

    async def test_initial_movement_written(self, inventory_store, seed_item):
        item, _ = await seed_item(current_stock=50)

        movements = await inventory_store.get_movements(item.id)

        assert len(movements) == 1
        assert movements[0].movement_type is MovementType.INITIAL
        assert movements[0].new_stock == 50

    async def test_duplicate_part_number(self, seed_item):
        await seed_item()
        with pytest.raises(DuplicatePartNumberError):
            await seed_item()

    async def test_duplicate_leaves_no_orphan_movement(self, inventory_store, seed_item):
        item, _ = await seed_item()
        with pytest.raises(DuplicatePartNumberError):
            await seed_item()

        assert len(await inventory_store.get_movements(item.id, limit=None)) == 1

    async def test_unknown_supplier(self, seed_item):
        with pytest.raises(ValidationError) as exc:
            await seed_item(supplier_id=42)
        assert exc.value.details["field"] == "supplier_id"

    async def test_update_bumps_version(self, inventory_store, seed_item):
        item, _ = await seed_item()
        item.location = "B-02-01"

        updated = await inventory_store.update_item(item, expected_version=1)

        assert updated.version == 2
        loaded = await inventory_store.get_item(item.id)
        assert loaded.location == "B-02-01"
        assert loaded.version == 2

    async def test_update_with_stale_version(self, inventory_store, seed_item):
        item, _ = await seed_item()
        await inventory_store.update_item(item.model_copy(), expected_version=1)

        with pytest.raises(StaleItemVersionError):
            await inventory_store.update_item(item.model_copy(), expected_version=1)


class TestListItems:
    async def _seed_catalog(self, inventory_store, seed_item):
        await seed_item("BRG-6204", current_stock=100)
        await seed_item("BRG-6205", current_stock=15)
        await seed_item("SEAL-001", current_stock=0, material="Oil seal")
        retired, _ = await seed_item("OLD-001", current_stock=5)
        retired.is_active = False
        await inventory_store.update_item(retired, expected_version=1)

    async def test_default_hides_inactive(self, inventory_store, seed_item):
        await self._seed_catalog(inventory_store, seed_item)

        items, total = await inventory_store.list_items()

        assert total == 3
        assert [i.part_number for i in items] == ["BRG-6204", "BRG-6205", "SEAL-001"]

    async def test_include_inactive(self, inventory_store, seed_item):
        await self._seed_catalog(inventory_store, seed_item)

        _, total = await inventory_store.list_items(include_inactive=True)

        assert total == 4

    async def test_filter_by_status_and_search(self, inventory_store, seed_item):
        await self._seed_catalog(inventory_store, seed_item)

        low, _ = await inventory_store.list_items(status=StockStatus.LOW_STOCK)
        seals, _ = await inventory_store.list_items(search="seal")

        assert [i.part_number for i in low] == ["BRG-6205"]
        assert [i.part_number for i in seals] == ["SEAL-001"]

    async def test_sort_and_paginate(self, inventory_store, seed_item):
        await self._seed_catalog(inventory_store, seed_item)

        page, total = await inventory_store.list_items(
            sort_by="current_stock", descending=True, limit=2, offset=0
        )

        assert total == 3
        assert [i.current_stock for i in page] == [100, 15]

    async def test_rejects_unknown_sort(self, inventory_store):
        with pytest.raises(ValidationError):
            await inventory_store.list_items(sort_by="price; DROP TABLE")


class TestApplyMovement:
    async def test_swaps_stock_and_appends(self, inventory_store, seed_item):
        item, _ = await seed_item(current_stock=100)
        movement = _outbound(item, 30)
        item.current_stock = 70
        item.refresh_status()

        saved = await inventory_store.apply_movement(item, 1, movement)

        assert saved.id is not None
        loaded = await inventory_store.get_item(item.id)
        assert loaded.current_stock == 70
        assert loaded.version == 2
        stored = await inventory_store.get_movement(saved.id)
        assert stored.previous_stock == 100
        assert stored.new_stock == 70

    async def test_stale_version_writes_nothing(self, inventory_store, seed_item):
        item, _ = await seed_item(current_stock=100)
        movement = _outbound(item, 30)
        item.current_stock = 70

        with pytest.raises(StaleItemVersionError):
            await inventory_store.apply_movement(item, 7, movement)

        loaded = await inventory_store.get_item(item.id)
        assert loaded.current_stock == 100
        assert len(await inventory_store.get_movements(item.id)) == 1


class TestLedgerOverStore:
    async def test_record_and_reverse(self, ledger, inventory_store, seed_item):
        item, _ = await seed_item(current_stock=100)

        issued = await ledger.record_movement(item.id, MovementType.OUT, 30, "Issued")
        reversal = await ledger.reverse_movement(issued.movement.id, "Keyed twice")

        assert reversal.item.current_stock == 100
        original = await inventory_store.get_movement(issued.movement.id)
        assert original.is_reversed is True
        assert original.reversal_reference == reversal.movement.id
        assert reversal.movement.reversal_reference == original.id
        assert reversal.movement.is_compensating

        movements = await inventory_store.get_movements(item.id, limit=None)
        assert sum(m.signed_quantity for m in movements) == 100
        assert all(m.is_consistent for m in movements)

    async def test_double_reverse_rejected(self, ledger, seed_item):
        item, _ = await seed_item(current_stock=100)
        issued = await ledger.record_movement(item.id, MovementType.OUT, 30, "Issued")
        reversal = await ledger.reverse_movement(issued.movement.id, "Keyed twice")

        with pytest.raises(MovementAlreadyReversedError):
            await ledger.reverse_movement(issued.movement.id, "Again")
        with pytest.raises(MovementAlreadyReversedError):
            await ledger.reverse_movement(reversal.movement.id, "Undo")

    async def test_store_guards_concurrent_reversal(self, ledger, inventory_store, seed_item):
        item, _ = await seed_item(current_stock=100)
        issued = await ledger.record_movement(item.id, MovementType.OUT, 30, "Issued")
        stale_original = await inventory_store.get_movement(issued.movement.id)
        await ledger.reverse_movement(issued.movement.id, "First")

        current = await inventory_store.get_item(item.id)
        version = current.version
        current.current_stock = 130
        compensating = InventoryMovement(
            inventory_item_id=item.id,
            movement_type=MovementType.ADJUSTMENT,
            direction=MovementDirection.INBOUND,
            quantity=30,
            previous_stock=100,
            new_stock=130,
            reason="Second",
            reversal_reference=stale_original.id,
        )

        with pytest.raises(MovementAlreadyReversedError):
            await inventory_store.apply_reversal(current, version, stale_original, compensating)

        assert (await inventory_store.get_item(item.id)).current_stock == 100

    async def test_summary_counts_effective_movements(self, ledger, inventory_store, seed_item):
        item, _ = await seed_item(current_stock=100)
        await ledger.record_movement(
            item.id, MovementType.IN, 50, "PO receipt", MovementMetadata(unit_cost=6.0)
        )
        await ledger.record_movement(item.id, MovementType.OUT, 20, "Issued")
        mistake = await ledger.record_movement(item.id, MovementType.SCRAP, 5, "Damaged")
        await ledger.reverse_movement(mistake.movement.id, "Not damaged")

        summary = await inventory_store.get_movement_summary(item.id)

        by_type = {s.movement_type: s for s in summary.movements}
        assert set(by_type) == {MovementType.INITIAL, MovementType.IN, MovementType.OUT}
        assert by_type[MovementType.IN].quantity == 50
        assert by_type[MovementType.IN].value == 300
        assert summary.total_movements == 3
        assert summary.net_quantity == 130
        assert (await inventory_store.get_item(item.id)).current_stock == 130

    async def test_unknown_movement_supplier(self, ledger, inventory_store, seed_item):
        item, _ = await seed_item(current_stock=100)

        with pytest.raises(ValidationError) as exc:
            await ledger.record_movement(
                item.id, MovementType.IN, 5, "Receipt", MovementMetadata(supplier_id=999)
            )

        assert exc.value.details["field"] == "supplier_id"
        loaded = await inventory_store.get_item(item.id)
        assert loaded.current_stock == 100
        assert loaded.version == 1
        assert len(await inventory_store.get_movements(item.id, limit=None)) == 1

    async def test_unknown_supplier_on_update(self, ledger, inventory_store, seed_item):
        item, _ = await seed_item()

        with pytest.raises(ValidationError) as exc:
            await ledger.update_item(item.id, {"supplier_id": 999})

        assert exc.value.details["field"] == "supplier_id"
        assert (await inventory_store.get_item(item.id)).supplier_id is None

    async def test_unknown_supplier_on_reversal(self, inventory_store, seed_item):
        item, _ = await seed_item(current_stock=100)
        original = await inventory_store.apply_movement(
            item.model_copy(update={"current_stock": 70}), 1, _outbound(item, 30)
        )
        compensating = InventoryMovement(
            inventory_item_id=item.id,
            movement_type=MovementType.ADJUSTMENT,
            direction=MovementDirection.INBOUND,
            quantity=30,
            previous_stock=70,
            new_stock=100,
            reason="Undo",
            supplier_id=999,
            reversal_reference=original.id,
        )

        with pytest.raises(ValidationError):
            await inventory_store.apply_reversal(
                item.model_copy(update={"current_stock": 100}), 2, original, compensating
            )

        assert (await inventory_store.get_movement(original.id)).is_reversed is False
        assert (await inventory_store.get_item(item.id)).current_stock == 70

    async def test_wac_persisted(self, ledger, inventory_store, seed_item):
        item, _ = await seed_item(current_stock=100, average_cost=4.0, max_stock=500)

        await ledger.record_movement(
            item.id, MovementType.IN, 100, "PO receipt", MovementMetadata(unit_cost=6.0)
        )

        assert (await inventory_store.get_item(item.id)).average_cost == pytest.approx(5.0)


class TestMovementQueries:
    async def test_filters(self, ledger, inventory_store, seed_item):
        item, _ = await seed_item(current_stock=100)
        await ledger.record_movement(item.id, MovementType.OUT, 10, "Issued")
        await ledger.record_movement(item.id, MovementType.RETURN, 4, "Returned")

        outs = await inventory_store.get_movements(item.id, movement_types=["out"])
        oldest_first = await inventory_store.get_movements(item.id, ascending=True)
        newest = await inventory_store.get_movements(item.id, limit=1)
        future = await inventory_store.get_movements(
            item.id, start=datetime.utcnow() + timedelta(days=1)
        )

        assert [m.movement_type for m in outs] == [MovementType.OUT]
        assert oldest_first[0].movement_type is MovementType.INITIAL
        assert newest[0].movement_type is MovementType.RETURN
        assert future == []

    async def test_analytics(self, ledger, inventory_store, seed_item):
        busy, _ = await seed_item("BRG-6204", current_stock=100)
        quiet, _ = await seed_item("BRG-6205", current_stock=15)
        await ledger.record_movement(busy.id, MovementType.OUT, 40, "Issued")
        await ledger.record_movement(quiet.id, MovementType.OUT, 5, "Issued")

        analytics = await inventory_store.get_analytics(
            since=datetime.utcnow() - timedelta(days=1), top=1
        )

        assert analytics["total_items"] == 2
        assert analytics["total_value"] == pytest.approx(60 * 4 + 10 * 4)
        assert analytics["low_stock_items"] == 1
        assert analytics["movements_by_type"]["out"]["count"] == 2
        assert [m["part_number"] for m in analytics["top_outbound_items"]] == ["BRG-6204"]


class TestAppendOnly:
    async def test_delete_blocked(self, inventory_store, seed_item):
        item, initial = await seed_item()

        with pytest.raises(aiosqlite.Error, match="append-only"):
            async with get_transaction() as conn:
                await conn.execute(
                    "DELETE FROM inventory_movements WHERE id = ?", (initial.id,)
                )

        assert await inventory_store.get_movement(initial.id) is not None

    async def test_quantity_update_blocked(self, inventory_store, seed_item):
        _, initial = await seed_item()

        with pytest.raises(aiosqlite.Error, match="append-only"):
            async with get_transaction() as conn:
                await conn.execute(
                    "UPDATE inventory_movements SET quantity = 1 WHERE id = ?",
                    (initial.id,),
                )

        assert (await inventory_store.get_movement(initial.id)).quantity == 100
