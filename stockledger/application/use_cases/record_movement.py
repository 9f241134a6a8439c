"""Record Movement Use Case: the single write path for stock changes."""

from stockledger.application.dto.requests import RecordMovementRequest
from stockledger.application.dto.responses import (
    InventoryItemResponse,
    MovementResponse,
    RecordMovementResponse,
)
from stockledger.config import get_logger
from stockledger.core.services.stock_ledger import (
    MovementMetadata,
    RecordMovementResult,
    StockLedgerService,
)

logger = get_logger(__name__)


class RecordMovementUseCase:
    """Record a movement and return the updated item."""

    def __init__(self, ledger: StockLedgerService | None = None):
        self._ledger = ledger

    def _get_ledger(self) -> StockLedgerService:
        if self._ledger is None:
            from stockledger.application.services import get_stock_ledger_service

            self._ledger = get_stock_ledger_service()
        return self._ledger

    async def execute(
        self,
        request: RecordMovementRequest,
        created_by: str | None = None,
        approved_by: str | None = None,
    ) -> RecordMovementResult:
        logger.info(
            "record_movement_started",
            item_id=request.inventory_item_id,
            type=request.movement_type.value,
            qty=request.quantity,
            approved=approved_by is not None,
        )
        metadata = MovementMetadata(
            unit_cost=request.unit_cost,
            reference=request.reference,
            batch_number=request.batch_number,
            location_from=request.location_from,
            location_to=request.location_to,
            work_order_id=request.work_order_id,
            purchase_order=request.purchase_order,
            supplier_id=request.supplier_id,
            customer=request.customer,
            notes=request.notes,
            adjustment_direction=request.adjustment_direction,
            approved_by=approved_by,
        )
        return await self._get_ledger().record_movement(
            item_id=request.inventory_item_id,
            movement_type=request.movement_type,
            quantity=request.quantity,
            reason=request.reason,
            metadata=metadata,
            created_by=created_by,
        )

    def to_response(self, result: RecordMovementResult) -> RecordMovementResponse:
        return RecordMovementResponse(
            item=InventoryItemResponse.from_entity(result.item),
            movement=MovementResponse.from_entity(result.movement),
            warnings=result.warnings,
        )
