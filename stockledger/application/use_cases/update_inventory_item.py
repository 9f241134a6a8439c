"""Update / Deactivate Inventory Item Use Cases."""

from stockledger.application.dto.requests import UpdateInventoryItemRequest
from stockledger.application.dto.responses import InventoryItemResponse
from stockledger.config import get_logger
from stockledger.core.entities.inventory import InventoryItem
from stockledger.core.exceptions import ValidationError
from stockledger.core.services.stock_ledger import StockLedgerService

logger = get_logger(__name__)


class _LedgerUseCase:
    def __init__(self, ledger: StockLedgerService | None = None):
        self._ledger = ledger

    def _get_ledger(self) -> StockLedgerService:
        if self._ledger is None:
            from stockledger.application.services import get_stock_ledger_service

            self._ledger = get_stock_ledger_service()
        return self._ledger

    def to_response(self, item: InventoryItem) -> InventoryItemResponse:
        return InventoryItemResponse.from_entity(item)


class UpdateInventoryItemUseCase(_LedgerUseCase):
    """Edit thresholds and descriptive fields; status is re-derived."""

    async def execute(
        self, item_id: int, request: UpdateInventoryItemRequest
    ) -> InventoryItem:
        changes = request.model_dump(exclude_unset=True)
        if not changes:
            raise ValidationError("body", "no fields to update")

        logger.info("update_inventory_item_started", item_id=item_id, fields=sorted(changes))
        return await self._get_ledger().update_item(item_id, changes)


class DeactivateInventoryItemUseCase(_LedgerUseCase):
    """Soft-delete an item; its movement history is kept."""

    async def execute(self, item_id: int) -> InventoryItem:
        item = await self._get_ledger().deactivate_item(item_id)
        logger.info("inventory_item_deactivated", item_id=item_id)
        return item
