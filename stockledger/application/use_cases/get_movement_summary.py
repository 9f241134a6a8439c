"""Get Movement Summary Use Case."""

from datetime import datetime

from stockledger.application.dto.responses import MovementSummaryResponse
from stockledger.core.entities.movement import MovementSummary
from stockledger.core.services.stock_ledger import StockLedgerService


class GetMovementSummaryUseCase:
    """Per-type totals of an item's effective movements."""

    def __init__(self, ledger: StockLedgerService | None = None):
        self._ledger = ledger

    def _get_ledger(self) -> StockLedgerService:
        if self._ledger is None:
            from stockledger.application.services import get_stock_ledger_service

            self._ledger = get_stock_ledger_service()
        return self._ledger

    async def execute(
        self,
        item_id: int,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> MovementSummary:
        return await self._get_ledger().get_movement_summary(item_id, start, end)

    def to_response(self, summary: MovementSummary) -> MovementSummaryResponse:
        return MovementSummaryResponse(summary=summary)
