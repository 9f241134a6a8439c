"""Create Inventory Item Use Case: item plus its opening movement."""

from dataclasses import dataclass

from stockledger.application.dto.requests import CreateInventoryItemRequest
from stockledger.application.dto.responses import (
    CreateInventoryItemResponse,
    InventoryItemResponse,
    MovementResponse,
)
from stockledger.config import get_logger
from stockledger.core.entities.inventory import InventoryItem
from stockledger.core.entities.movement import InventoryMovement
from stockledger.core.services.stock_ledger import StockLedgerService

logger = get_logger(__name__)


@dataclass
class CreateInventoryItemResult:
    """Result of creating an inventory item."""

    item: InventoryItem
    initial_movement: InventoryMovement


class CreateInventoryItemUseCase:
    """Register a new stocked part."""

    def __init__(self, ledger: StockLedgerService | None = None):
        self._ledger = ledger

    def _get_ledger(self) -> StockLedgerService:
        if self._ledger is None:
            from stockledger.application.services import get_stock_ledger_service

            self._ledger = get_stock_ledger_service()
        return self._ledger

    async def execute(
        self,
        request: CreateInventoryItemRequest,
        created_by: str | None = None,
    ) -> CreateInventoryItemResult:
        logger.info(
            "create_inventory_item_started",
            part_number=request.part_number,
            opening_stock=request.current_stock,
        )

        item = InventoryItem(**request.model_dump())
        item, initial = await self._get_ledger().create_item(item, created_by=created_by)

        return CreateInventoryItemResult(item=item, initial_movement=initial)

    def to_response(self, result: CreateInventoryItemResult) -> CreateInventoryItemResponse:
        return CreateInventoryItemResponse(
            item=InventoryItemResponse.from_entity(result.item),
            initial_movement=MovementResponse.from_entity(result.initial_movement),
        )
