"""
Stock Ledger Service.

Single write path for inventory stock. Every stock change is a movement
appended together with the item update in one store transaction, guarded
by the item's version stamp. Lost races are retried with jittered backoff.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_random_exponential,
)

from stockledger.config import get_logger
from stockledger.core.entities.inventory import InventoryItem
from stockledger.core.entities.movement import (
    InventoryMovement,
    MovementDirection,
    MovementSummary,
    MovementType,
    direction_for,
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
from stockledger.core.interfaces.inventory_store import IInventoryStore

logger = get_logger(__name__)

NegativeStockPolicy = Literal["reject", "clamp"]

# Fields that only the ledger itself may change
_PROTECTED_FIELDS = frozenset(
    {"id", "current_stock", "status", "version", "created_at", "created_by"}
)


@dataclass
class MovementMetadata:
    """Optional attributes attached to a recorded movement."""

    unit_cost: float | None = None
    reference: str | None = None
    batch_number: str | None = None
    location_from: str | None = None
    location_to: str | None = None
    work_order_id: str | None = None
    purchase_order: str | None = None
    supplier_id: int | None = None
    customer: str | None = None
    notes: str | None = None
    adjustment_direction: MovementDirection | None = None
    approved_by: str | None = None


@dataclass
class RecordMovementResult:
    """Outcome of a ledger write."""

    item: InventoryItem
    movement: InventoryMovement
    warnings: list[str] = field(default_factory=list)
    attempts: int = 1


def validate_thresholds(item: InventoryItem, enforce_reorder_le_max: bool = True) -> None:
    """Reject threshold combinations that make status derivation meaningless."""
    if not enforce_reorder_le_max:
        return
    if item.reorder_point > item.max_stock:
        raise ValidationError(
            "reorder_point",
            "reorder point must not exceed max stock",
            item.reorder_point,
        )
    if item.min_stock > item.max_stock:
        raise ValidationError(
            "min_stock",
            "min stock must not exceed max stock",
            item.min_stock,
        )


class StockLedgerService:
    """
    Records stock movements against inventory items.

    Depends only on the inventory store interface. Policy and retry
    budget are injected by the application layer.
    """

    def __init__(
        self,
        inventory_store: IInventoryStore,
        negative_stock_policy: NegativeStockPolicy = "reject",
        max_retries: int = 25,
        retry_wait_min: float = 0.001,
        retry_wait_max: float = 0.05,
        enforce_reorder_le_max: bool = True,
    ) -> None:
        if negative_stock_policy not in ("reject", "clamp"):
            raise ValueError(f"Unknown negative stock policy: {negative_stock_policy}")
        self._store = inventory_store
        self._policy = negative_stock_policy
        self._max_retries = max(1, max_retries)
        self._wait_min = retry_wait_min
        self._wait_max = retry_wait_max
        self._enforce_thresholds = enforce_reorder_le_max

    @property
    def negative_stock_policy(self) -> NegativeStockPolicy:
        return self._policy

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    async def create_item(
        self, item: InventoryItem, created_by: str | None = None
    ) -> tuple[InventoryItem, InventoryMovement]:
        """Create an item and its initial movement in one step."""
        validate_thresholds(item, self._enforce_thresholds)

        existing = await self._store.get_item_by_part_number(item.part_number)
        if existing is not None:
            raise DuplicatePartNumberError(item.part_number)

        now = datetime.utcnow()
        item.id = None
        item.version = 1
        item.is_active = True
        item.created_by = created_by
        item.created_at = now
        item.updated_at = now
        item.refresh_status()

        initial = InventoryMovement(
            inventory_item_id=0,  # assigned by the store
            movement_type=MovementType.INITIAL,
            direction=MovementDirection.INBOUND,
            quantity=item.current_stock,
            previous_stock=0.0,
            new_stock=item.current_stock,
            unit_cost=item.average_cost,
            reason="Initial stock entry",
            supplier_id=item.supplier_id,
            created_by=created_by,
            created_at=now,
        )
        item, initial = await self._store.create_item(item, initial)

        logger.info(
            "inventory_item_created",
            item_id=item.id,
            part_number=item.part_number,
            initial_stock=item.current_stock,
            status=item.status.value,
        )
        return item, initial

    async def update_item(self, item_id: int, changes: dict[str, Any]) -> InventoryItem:
        """Edit thresholds and descriptive fields, re-deriving status."""
        protected = sorted(_PROTECTED_FIELDS.intersection(changes))
        if protected:
            raise ValidationError(
                protected[0],
                "field is maintained by the stock ledger and cannot be edited directly",
            )

        async def _once() -> InventoryItem:
            item = await self._load_item(item_id, require_active=False)
            expected_version = item.version
            updated = item.model_copy(update=changes)
            # Re-run field validation on the merged item
            updated = InventoryItem.model_validate(updated.model_dump())
            validate_thresholds(updated, self._enforce_thresholds)
            updated.refresh_status()
            updated.version = expected_version + 1
            updated.updated_at = datetime.utcnow()
            return await self._store.update_item(updated, expected_version)

        item, _ = await self._with_optimistic_retry(item_id, _once)
        logger.info(
            "inventory_item_updated",
            item_id=item_id,
            fields=sorted(changes),
            status=item.status.value,
        )
        return item

    async def deactivate_item(self, item_id: int) -> InventoryItem:
        """Soft-delete an item. Its ledger is kept."""
        return await self.update_item(item_id, {"is_active": False})

    # ------------------------------------------------------------------
    # Movements
    # ------------------------------------------------------------------

    async def record_movement(
        self,
        item_id: int,
        movement_type: MovementType | str,
        quantity: float,
        reason: str,
        metadata: MovementMetadata | None = None,
        created_by: str | None = None,
    ) -> RecordMovementResult:
        """
        Record one stock movement.

        Args:
            item_id: Target inventory item (must exist and be active)
            movement_type: Any movement type except ``initial``
            quantity: Positive quantity
            reason: Mandatory free-text justification
            metadata: Optional references, cost and adjustment sign
            created_by: Caller identity for attribution

        Returns:
            Persisted item, movement, policy warnings and attempt count
        """
        mtype = self._parse_movement_type(movement_type)
        self._validate_quantity(quantity)
        reason = self._validate_reason(reason)
        metadata = metadata or MovementMetadata()
        if metadata.unit_cost is not None and metadata.unit_cost < 0:
            raise ValidationError("unit_cost", "unit cost must not be negative", metadata.unit_cost)

        async def _once() -> RecordMovementResult:
            return await self._record_once(
                item_id, mtype, quantity, reason, metadata, created_by
            )

        result, attempts = await self._with_optimistic_retry(item_id, _once)
        result.attempts = attempts

        logger.info(
            "movement_recorded",
            item_id=item_id,
            movement_id=result.movement.id,
            type=mtype.value,
            qty=result.movement.quantity,
            previous_stock=result.movement.previous_stock,
            new_stock=result.movement.new_stock,
            status=result.item.status.value,
            attempts=attempts,
        )
        return result

    async def reverse_movement(
        self,
        movement_id: int,
        reason: str,
        created_by: str | None = None,
    ) -> RecordMovementResult:
        """Cancel a movement by appending an opposite compensating entry."""
        reason = self._validate_reason(reason)

        original = await self._store.get_movement(movement_id)
        if original is None:
            raise MovementNotFoundError(movement_id)

        async def _once() -> RecordMovementResult:
            return await self._reverse_once(movement_id, reason, created_by)

        result, attempts = await self._with_optimistic_retry(original.inventory_item_id, _once)
        result.attempts = attempts

        logger.info(
            "movement_reversed",
            movement_id=movement_id,
            compensating_id=result.movement.id,
            item_id=result.item.id,
            new_stock=result.item.current_stock,
        )
        return result

    async def get_movement_summary(
        self,
        item_id: int,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> MovementSummary:
        """Per-type aggregate of an item's effective movements."""
        if start is not None and end is not None and start > end:
            raise ValidationError("start", "start must not be after end", start.isoformat())
        await self._load_item(item_id, require_active=False)
        return await self._store.get_movement_summary(item_id, start, end)

    async def get_movements(
        self, item_id: int, limit: int = 100
    ) -> list[InventoryMovement]:
        await self._load_item(item_id, require_active=False)
        return await self._store.get_movements(item_id, limit=limit)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _record_once(
        self,
        item_id: int,
        mtype: MovementType,
        quantity: float,
        reason: str,
        metadata: MovementMetadata,
        created_by: str | None,
    ) -> RecordMovementResult:
        item = await self._load_item(item_id)
        expected_version = item.version
        previous = item.current_stock
        direction = direction_for(mtype, metadata.adjustment_direction)

        applied, warnings = self._apply_policy(item, direction, quantity)
        new_stock = max(0.0, previous + direction.sign * applied)

        # Weighted average cost on priced receipts
        if direction is MovementDirection.INBOUND and metadata.unit_cost is not None:
            total = previous + applied
            if total > 0:
                item.average_cost = (
                    previous * item.average_cost + applied * metadata.unit_cost
                ) / total

        unit_cost = (
            metadata.unit_cost if metadata.unit_cost is not None else item.average_cost
        )
        now = datetime.utcnow()

        item.current_stock = new_stock
        item.refresh_status()
        item.version = expected_version + 1
        item.updated_at = now

        movement = InventoryMovement(
            inventory_item_id=item_id,
            movement_type=mtype,
            direction=direction,
            quantity=applied,
            previous_stock=previous,
            new_stock=new_stock,
            unit_cost=unit_cost,
            reason=reason,
            reference=metadata.reference,
            batch_number=metadata.batch_number,
            location_from=metadata.location_from,
            location_to=metadata.location_to,
            work_order_id=metadata.work_order_id,
            purchase_order=metadata.purchase_order,
            supplier_id=metadata.supplier_id,
            customer=metadata.customer,
            notes=metadata.notes,
            created_by=created_by,
            approved_by=metadata.approved_by,
            approved_at=now if metadata.approved_by else None,
            created_at=now,
        )
        movement = await self._store.apply_movement(item, expected_version, movement)
        return RecordMovementResult(item=item, movement=movement, warnings=warnings)

    async def _reverse_once(
        self,
        movement_id: int,
        reason: str,
        created_by: str | None,
    ) -> RecordMovementResult:
        original = await self._store.get_movement(movement_id)
        if original is None:
            raise MovementNotFoundError(movement_id)
        if original.is_reversed:
            raise MovementAlreadyReversedError(movement_id)
        if original.reversal_reference is not None:
            raise MovementAlreadyReversedError(
                movement_id, "compensating movements cannot be reversed"
            )

        item = await self._load_item(original.inventory_item_id)
        expected_version = item.version
        previous = item.current_stock
        direction = original.direction.opposite()

        applied, warnings = self._apply_policy(item, direction, original.quantity)
        new_stock = max(0.0, previous + direction.sign * applied)
        now = datetime.utcnow()

        item.current_stock = new_stock
        item.refresh_status()
        item.version = expected_version + 1
        item.updated_at = now

        compensating = InventoryMovement(
            inventory_item_id=item.id,  # type: ignore[arg-type]
            movement_type=MovementType.ADJUSTMENT,
            direction=direction,
            quantity=applied,
            previous_stock=previous,
            new_stock=new_stock,
            unit_cost=original.unit_cost,
            reason=reason,
            reference=original.reference,
            notes=f"Reversal of movement {movement_id}",
            reversal_reference=movement_id,
            created_by=created_by,
            created_at=now,
        )
        compensating = await self._store.apply_reversal(
            item, expected_version, original, compensating
        )
        return RecordMovementResult(item=item, movement=compensating, warnings=warnings)

    def _apply_policy(
        self,
        item: InventoryItem,
        direction: MovementDirection,
        quantity: float,
    ) -> tuple[float, list[str]]:
        """Resolve the quantity actually applied under the negative-stock policy."""
        available = item.current_stock
        if direction is MovementDirection.INBOUND or quantity <= available:
            return quantity, []

        if self._policy == "reject":
            raise InsufficientStockError(
                item_id=item.id,  # type: ignore[arg-type]
                requested=quantity,
                available=available,
            )

        warning = (
            f"insufficient stock for outbound movement: requested {quantity}, "
            f"available {available}; clamped to zero"
        )
        logger.warning(
            "movement_clamped",
            item_id=item.id,
            requested=quantity,
            available=available,
        )
        return available, [warning]

    async def _load_item(self, item_id: int, require_active: bool = True) -> InventoryItem:
        item = await self._store.get_item(item_id)
        if item is None:
            raise InventoryItemNotFoundError(item_id)
        if require_active and not item.is_active:
            raise InventoryItemInactiveError(item_id)
        return item

    async def _with_optimistic_retry(self, item_id: int, operation: Any) -> tuple[Any, int]:
        """Run ``operation`` until it wins the version check or the budget runs out."""
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._max_retries),
            wait=wait_random_exponential(multiplier=self._wait_min, max=self._wait_max),
            retry=retry_if_exception_type(StaleItemVersionError),
            before_sleep=self._log_conflict,
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    result = await operation()
                    return result, attempt.retry_state.attempt_number
        except StaleItemVersionError as e:
            logger.error(
                "optimistic_lock_exhausted",
                item_id=item_id,
                attempts=self._max_retries,
            )
            raise ConcurrencyConflictError(item_id, self._max_retries) from e
        raise ConcurrencyConflictError(item_id, self._max_retries)

    @staticmethod
    def _log_conflict(retry_state: RetryCallState) -> None:
        logger.debug(
            "optimistic_lock_conflict",
            attempt=retry_state.attempt_number,
            error=str(retry_state.outcome.exception()) if retry_state.outcome else None,
        )

    @staticmethod
    def _parse_movement_type(movement_type: MovementType | str) -> MovementType:
        try:
            mtype = MovementType(movement_type)
        except ValueError:
            raise ValidationError(
                "movement_type",
                f"must be one of {', '.join(t.value for t in MovementType)}",
                movement_type,
            ) from None
        if mtype is MovementType.INITIAL:
            raise ValidationError(
                "movement_type",
                "initial movements are only written at item creation",
                mtype.value,
            )
        return mtype

    @staticmethod
    def _validate_quantity(quantity: float) -> None:
        if quantity is None or not math.isfinite(quantity) or quantity <= 0:
            raise ValidationError("quantity", "quantity must be positive", quantity)

    @staticmethod
    def _validate_reason(reason: str | None) -> str:
        if reason is None or not reason.strip():
            raise ValidationError("reason", "reason is required")
        return reason.strip()
