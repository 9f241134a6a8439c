"""Tests for StockLedgerService with a mocked inventory store."""

import math
from datetime import datetime, timedelta

import pytest

from stockledger.core.entities import (
    InventoryMovement,
    MovementDirection,
    MovementType,
    StockStatus,
)
from stockledger.core.exceptions import (
    ConcurrencyConflictError,
    DuplicatePartNumberError,
    InsufficientStockError,
    InventoryItemInactiveError,
    InventoryItemNotFoundError,
    MovementAlreadyReversedError,
    MovementNotFoundError,
    StaleItemVersionError,
    ValidationError,
)
from stockledger.core.services.stock_ledger import (
    MovementMetadata,
    StockLedgerService,
    validate_thresholds,
)


@pytest.fixture
def ledger(inventory_store):
    return StockLedgerService(
        inventory_store, max_retries=5, retry_wait_min=0, retry_wait_max=0
    )


@pytest.fixture
def clamp_ledger(inventory_store):
    return StockLedgerService(
        inventory_store,
        negative_stock_policy="clamp",
        max_retries=5,
        retry_wait_min=0,
        retry_wait_max=0,
    )


def _serve(inventory_store, make_item, **fields):
    """Each get_item call returns a fresh copy, like a real read."""
    inventory_store.get_item.side_effect = lambda item_id: make_item(**fields)


class TestRecordMovement:
    async def test_outbound_updates_stock_and_snapshot(self, ledger, inventory_store, make_item):
        _serve(inventory_store, make_item, current_stock=100)

        result = await ledger.record_movement(1, MovementType.OUT, 30, "Issued to line 3")

        assert result.item.current_stock == 70
        assert result.item.version == 2
        assert result.movement.id == 101
        assert result.movement.previous_stock == 100
        assert result.movement.new_stock == 70
        assert result.movement.direction is MovementDirection.OUTBOUND
        assert result.movement.is_consistent
        assert result.warnings == []
        assert result.attempts == 1

        item_arg, expected_version, _ = inventory_store.apply_movement.call_args[0]
        assert expected_version == 1
        assert item_arg.current_stock == 70

    async def test_low_stock_at_reorder_point(self, ledger, inventory_store, make_item):
        _serve(
            inventory_store, make_item, current_stock=30, reorder_point=20, max_stock=100
        )

        result = await ledger.record_movement(1, "out", 10, "Issued")

        assert result.item.current_stock == 20
        assert result.item.status is StockStatus.LOW_STOCK

    async def test_reject_policy_blocks_overdraw(self, ledger, inventory_store, make_item):
        _serve(inventory_store, make_item, current_stock=3)

        with pytest.raises(InsufficientStockError) as exc:
            await ledger.record_movement(1, MovementType.OUT, 5, "Issued")

        assert exc.value.details == {"item_id": 1, "requested": 5, "available": 3}
        inventory_store.apply_movement.assert_not_called()

    async def test_clamp_policy_truncates_to_zero(self, clamp_ledger, inventory_store, make_item):
        _serve(inventory_store, make_item, current_stock=3)

        result = await clamp_ledger.record_movement(1, MovementType.OUT, 5, "Issued")

        assert result.movement.quantity == 3
        assert result.movement.new_stock == 0
        assert result.item.status is StockStatus.OUT_OF_STOCK
        assert len(result.warnings) == 1
        assert "clamped" in result.warnings[0]

    async def test_clamp_on_empty_item_records_zero_quantity(
        self, clamp_ledger, inventory_store, make_item
    ):
        _serve(inventory_store, make_item, current_stock=0)

        result = await clamp_ledger.record_movement(1, MovementType.SCRAP, 2, "Damaged")

        assert result.movement.quantity == 0
        assert result.movement.new_stock == 0
        assert result.warnings

    async def test_inbound_updates_weighted_average_cost(
        self, ledger, inventory_store, make_item
    ):
        _serve(inventory_store, make_item, current_stock=100, average_cost=4.0, max_stock=500)

        result = await ledger.record_movement(
            1, MovementType.IN, 100, "PO receipt", MovementMetadata(unit_cost=6.0)
        )

        assert result.item.current_stock == 200
        assert result.item.average_cost == pytest.approx(5.0)
        assert result.movement.unit_cost == 6.0

    async def test_inbound_without_cost_keeps_average(self, ledger, inventory_store, make_item):
        _serve(inventory_store, make_item, current_stock=100, average_cost=4.0)

        result = await ledger.record_movement(1, MovementType.RETURN, 10, "Customer return")

        assert result.item.average_cost == 4.0
        assert result.movement.unit_cost == 4.0

    async def test_outbound_uses_average_cost(self, ledger, inventory_store, make_item):
        _serve(inventory_store, make_item, current_stock=100, average_cost=12.5)

        result = await ledger.record_movement(1, MovementType.OUT, 20, "Issued")

        assert result.movement.unit_cost == 12.5
        assert result.movement.total_cost == 250.0

    async def test_adjustment_direction(self, ledger, inventory_store, make_item):
        _serve(inventory_store, make_item, current_stock=100)

        up = await ledger.record_movement(
            1,
            MovementType.ADJUSTMENT,
            5,
            "Cycle count surplus",
            MovementMetadata(adjustment_direction=MovementDirection.INBOUND),
        )
        down = await ledger.record_movement(1, MovementType.ADJUSTMENT, 5, "Cycle count loss")

        assert up.movement.new_stock == 105
        assert down.movement.new_stock == 95

    async def test_metadata_copied_onto_movement(self, ledger, inventory_store, make_item):
        _serve(inventory_store, make_item)

        result = await ledger.record_movement(
            1,
            MovementType.OUT,
            1,
            "  Work order issue  ",
            MovementMetadata(work_order_id="WO-77", batch_number="B-1", approved_by="lead"),
            created_by="u-42",
        )

        movement = result.movement
        assert movement.reason == "Work order issue"
        assert movement.work_order_id == "WO-77"
        assert movement.batch_number == "B-1"
        assert movement.created_by == "u-42"
        assert movement.approved_at is not None

    @pytest.mark.parametrize("quantity", [0, -1, math.nan, math.inf])
    async def test_rejects_bad_quantity(self, ledger, inventory_store, quantity):
        with pytest.raises(ValidationError) as exc:
            await ledger.record_movement(1, MovementType.OUT, quantity, "Issued")
        assert exc.value.details["field"] == "quantity"
        inventory_store.get_item.assert_not_called()

    @pytest.mark.parametrize("reason", ["", "   ", None])
    async def test_requires_reason(self, ledger, reason):
        with pytest.raises(ValidationError) as exc:
            await ledger.record_movement(1, MovementType.OUT, 1, reason)
        assert exc.value.details["field"] == "reason"

    @pytest.mark.parametrize("movement_type", ["initial", "teleport"])
    async def test_rejects_movement_type(self, ledger, movement_type):
        with pytest.raises(ValidationError) as exc:
            await ledger.record_movement(1, movement_type, 1, "Issued")
        assert exc.value.details["field"] == "movement_type"

    async def test_rejects_negative_unit_cost(self, ledger):
        with pytest.raises(ValidationError):
            await ledger.record_movement(
                1, MovementType.IN, 1, "Receipt", MovementMetadata(unit_cost=-1)
            )

    async def test_missing_item(self, ledger, inventory_store):
        inventory_store.get_item.return_value = None
        with pytest.raises(InventoryItemNotFoundError):
            await ledger.record_movement(99, MovementType.OUT, 1, "Issued")

    async def test_inactive_item(self, ledger, inventory_store, make_item):
        _serve(inventory_store, make_item, is_active=False)
        with pytest.raises(InventoryItemInactiveError):
            await ledger.record_movement(1, MovementType.OUT, 1, "Issued")


class TestOptimisticRetry:
    async def test_retries_after_stale_version(self, ledger, inventory_store, make_item):
        versions = iter([1, 2])
        inventory_store.get_item.side_effect = lambda item_id: make_item(
            current_stock=100, version=next(versions)
        )
        calls = []

        async def _apply(item, expected_version, movement):
            calls.append(expected_version)
            if len(calls) == 1:
                raise StaleItemVersionError(1, expected_version)
            movement.id = 101
            return movement

        inventory_store.apply_movement.side_effect = _apply

        result = await ledger.record_movement(1, MovementType.OUT, 10, "Issued")

        assert calls == [1, 2]
        assert result.attempts == 2
        assert result.item.version == 3
        assert inventory_store.get_item.await_count == 2

    async def test_exhaustion_raises_conflict(self, inventory_store, make_item):
        ledger = StockLedgerService(
            inventory_store, max_retries=3, retry_wait_min=0, retry_wait_max=0
        )
        _serve(inventory_store, make_item)
        inventory_store.apply_movement.side_effect = StaleItemVersionError(1, 1)

        with pytest.raises(ConcurrencyConflictError) as exc:
            await ledger.record_movement(1, MovementType.OUT, 1, "Issued")

        assert exc.value.details["attempts"] == 3
        assert inventory_store.apply_movement.await_count == 3

    async def test_policy_errors_are_not_retried(self, ledger, inventory_store, make_item):
        _serve(inventory_store, make_item, current_stock=1)

        with pytest.raises(InsufficientStockError):
            await ledger.record_movement(1, MovementType.OUT, 5, "Issued")

        assert inventory_store.get_item.await_count == 1

    def test_unknown_policy(self, inventory_store):
        with pytest.raises(ValueError):
            StockLedgerService(inventory_store, negative_stock_policy="ignore")


class TestReverseMovement:
    async def test_writes_opposite_compensating_entry(
        self, ledger, inventory_store, make_item, make_movement
    ):
        original = make_movement(id=7, quantity=10, previous_stock=100, new_stock=90)
        inventory_store.get_movement.side_effect = lambda movement_id: original.model_copy()
        _serve(inventory_store, make_item, current_stock=90)

        result = await ledger.reverse_movement(7, "Entered twice", created_by="u-1")

        compensating = result.movement
        assert compensating.id == 102
        assert compensating.movement_type is MovementType.ADJUSTMENT
        assert compensating.direction is MovementDirection.INBOUND
        assert compensating.quantity == 10
        assert compensating.previous_stock == 90
        assert compensating.new_stock == 100
        assert compensating.reversal_reference == 7
        assert result.item.current_stock == 100

        _, expected_version, passed_original, _ = inventory_store.apply_reversal.call_args[0]
        assert expected_version == 1
        assert passed_original.id == 7

    async def test_reversing_receipt_respects_policy(
        self, ledger, inventory_store, make_item, make_movement
    ):
        receipt = make_movement(
            id=8,
            movement_type=MovementType.IN,
            direction=MovementDirection.INBOUND,
            quantity=50,
            previous_stock=0,
            new_stock=50,
        )
        inventory_store.get_movement.return_value = receipt
        # Most of the receipt was already issued
        _serve(inventory_store, make_item, current_stock=20)

        with pytest.raises(InsufficientStockError):
            await ledger.reverse_movement(8, "Wrong item received")

    async def test_already_reversed(self, ledger, inventory_store, make_item, make_movement):
        inventory_store.get_movement.return_value = make_movement(
            id=7, is_reversed=True, reversal_reference=9
        )
        _serve(inventory_store, make_item)

        with pytest.raises(MovementAlreadyReversedError):
            await ledger.reverse_movement(7, "Again")
        inventory_store.apply_reversal.assert_not_called()

    async def test_compensating_entry_cannot_be_reversed(
        self, ledger, inventory_store, make_item, make_movement
    ):
        inventory_store.get_movement.return_value = make_movement(
            id=9,
            movement_type=MovementType.ADJUSTMENT,
            direction=MovementDirection.INBOUND,
            previous_stock=90,
            new_stock=100,
            reversal_reference=7,
        )
        _serve(inventory_store, make_item)

        with pytest.raises(MovementAlreadyReversedError) as exc:
            await ledger.reverse_movement(9, "Undo the undo")
        assert "compensating" in exc.value.details["message"]

    async def test_missing_movement(self, ledger, inventory_store):
        inventory_store.get_movement.return_value = None
        with pytest.raises(MovementNotFoundError):
            await ledger.reverse_movement(404, "Gone")


class TestItems:
    async def test_create_item_writes_initial_movement(self, ledger, inventory_store, make_item):
        inventory_store.get_item_by_part_number.return_value = None

        async def _create(item, initial):
            item.id = 5
            initial.id = 11
            initial.inventory_item_id = 5
            return item, initial

        inventory_store.create_item.side_effect = _create
        new_item = make_item(id=None, current_stock=50, reorder_point=20, max_stock=200)

        item, initial = await ledger.create_item(new_item, created_by="u-1")

        assert item.id == 5
        assert item.status is StockStatus.IN_STOCK
        assert item.created_by == "u-1"
        assert initial.movement_type is MovementType.INITIAL
        assert initial.direction is MovementDirection.INBOUND
        assert initial.quantity == 50
        assert initial.previous_stock == 0
        assert initial.new_stock == 50
        assert isinstance(initial, InventoryMovement)

    async def test_create_rejects_duplicate_part_number(self, ledger, inventory_store, make_item):
        inventory_store.get_item_by_part_number.return_value = make_item()

        with pytest.raises(DuplicatePartNumberError):
            await ledger.create_item(make_item(id=None))
        inventory_store.create_item.assert_not_called()

    async def test_create_rejects_reorder_above_max(self, ledger, make_item):
        with pytest.raises(ValidationError) as exc:
            await ledger.create_item(make_item(id=None, reorder_point=300, max_stock=200))
        assert exc.value.details["field"] == "reorder_point"

    async def test_update_rederives_status(self, ledger, inventory_store, make_item):
        _serve(inventory_store, make_item, current_stock=100, max_stock=200)

        async def _update(item, expected_version):
            return item

        inventory_store.update_item.side_effect = _update

        item = await ledger.update_item(1, {"max_stock": 80, "reorder_point": 10})

        assert item.status is StockStatus.OVERSTOCK
        assert item.version == 2
        assert inventory_store.update_item.call_args[0][1] == 1

    @pytest.mark.parametrize("field", ["current_stock", "status", "version", "id"])
    async def test_update_rejects_ledger_fields(self, ledger, inventory_store, field):
        with pytest.raises(ValidationError) as exc:
            await ledger.update_item(1, {field: 1})
        assert exc.value.details["field"] == field
        inventory_store.update_item.assert_not_called()

    async def test_update_rejects_invalid_merge(self, ledger, inventory_store, make_item):
        _serve(inventory_store, make_item)
        with pytest.raises(ValidationError):
            await ledger.update_item(1, {"reorder_point": 500})

    async def test_deactivate(self, ledger, inventory_store, make_item):
        _serve(inventory_store, make_item)
        inventory_store.update_item.side_effect = lambda item, version: item

        item = await ledger.deactivate_item(1)

        assert item.is_active is False


class TestQueries:
    async def test_summary_rejects_inverted_range(self, ledger):
        start = datetime(2026, 7, 1)
        with pytest.raises(ValidationError):
            await ledger.get_movement_summary(1, start, start - timedelta(days=1))

    async def test_summary_allowed_for_inactive_item(self, ledger, inventory_store, make_item):
        _serve(inventory_store, make_item, is_active=False)

        await ledger.get_movement_summary(1)

        inventory_store.get_movement_summary.assert_awaited_once_with(1, None, None)


def test_validate_thresholds_can_be_disabled(make_item):
    item = make_item(reorder_point=300, max_stock=200)
    validate_thresholds(item, enforce_reorder_le_max=False)
    with pytest.raises(ValidationError):
        validate_thresholds(item)
