"""Reverse Movement Use Case: compensating entry, never a delete."""

from stockledger.application.dto.requests import ReverseMovementRequest
from stockledger.application.dto.responses import (
    InventoryItemResponse,
    MovementResponse,
    RecordMovementResponse,
)
from stockledger.config import get_logger
from stockledger.core.services.stock_ledger import RecordMovementResult, StockLedgerService

logger = get_logger(__name__)


class ReverseMovementUseCase:
    """Cancel a movement by appending its opposite."""

    def __init__(self, ledger: StockLedgerService | None = None):
        self._ledger = ledger

    def _get_ledger(self) -> StockLedgerService:
        if self._ledger is None:
            from stockledger.application.services import get_stock_ledger_service

            self._ledger = get_stock_ledger_service()
        return self._ledger

    async def execute(
        self,
        movement_id: int,
        request: ReverseMovementRequest,
        created_by: str | None = None,
    ) -> RecordMovementResult:
        logger.info("reverse_movement_started", movement_id=movement_id)
        return await self._get_ledger().reverse_movement(
            movement_id, request.reason, created_by=created_by
        )

    def to_response(self, result: RecordMovementResult) -> RecordMovementResponse:
        return RecordMovementResponse(
            item=InventoryItemResponse.from_entity(result.item),
            movement=MovementResponse.from_entity(result.movement),
            warnings=result.warnings,
        )
