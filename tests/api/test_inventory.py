"""API tests for inventory item endpoints."""

from datetime import datetime

import pytest

from stockledger.core.entities import (
    MovementDirection,
    MovementSummary,
    MovementType,
    MovementTypeSummary,
    StockStatus,
)
from stockledger.core.exceptions import (
    DuplicatePartNumberError,
    InventoryItemNotFoundError,
    ValidationError,
)

NEW_ITEM = {
    "part_number": "BRG-6204",
    "material": "Deep groove ball bearing 6204",
    "current_stock": 100,
    "min_stock": 10,
    "max_stock": 200,
    "reorder_point": 20,
    "average_cost": 4.0,
    "location": "A-01-03",
}


class TestListItems:
    async def test_empty(self, client, mock_inventory_store):
        response = await client.get("/api/inventory")

        assert response.status_code == 200
        data = response.json()
        assert data["items"] == []
        assert data["total"] == 0
        assert data["has_more"] is False

    async def test_filters_and_pagination(self, client, mock_inventory_store, make_item):
        mock_inventory_store.list_items.return_value = (
            [make_item(id=3, current_stock=15)],
            7,
        )

        response = await client.get(
            "/api/inventory",
            params={"status": "low-stock", "search": "brg", "limit": 1, "offset": 2},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["items"][0]["status"] == "low-stock"
        assert data["items"][0]["stock_value"] == 60
        assert data["has_more"] is True
        kwargs = mock_inventory_store.list_items.call_args.kwargs
        assert kwargs["status"] is StockStatus.LOW_STOCK
        assert kwargs["search"] == "brg"
        assert kwargs["offset"] == 2

    async def test_bad_sort_column(self, client, mock_inventory_store):
        mock_inventory_store.list_items.side_effect = ValidationError(
            "sort_by", "unsupported sort column", "price"
        )

        response = await client.get("/api/inventory", params={"sort_by": "price"})

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"


class TestCreateItem:
    async def test_created(self, client, mock_ledger, make_item, make_movement, writer):
        item = make_item()
        initial = make_movement(
            movement_type=MovementType.INITIAL,
            direction=MovementDirection.INBOUND,
            quantity=100,
            previous_stock=0,
            new_stock=100,
            reason="Initial stock",
        )
        mock_ledger.create_item.return_value = (item, initial)

        response = await client.post("/api/inventory", json=NEW_ITEM, headers=writer)

        assert response.status_code == 201
        data = response.json()
        assert data["item"]["part_number"] == "BRG-6204"
        assert data["initial_movement"]["movement_type"] == "initial"
        assert mock_ledger.create_item.call_args.kwargs["created_by"] == "u-17"

    async def test_duplicate_part_number(self, client, mock_ledger, writer):
        mock_ledger.create_item.side_effect = DuplicatePartNumberError("BRG-6204")

        response = await client.post("/api/inventory", json=NEW_ITEM, headers=writer)

        assert response.status_code == 400
        assert response.json()["error_code"] == "DUPLICATE_PART_NUMBER"

    async def test_negative_stock_rejected_by_schema(self, client, mock_ledger, writer):
        response = await client.post(
            "/api/inventory", json={**NEW_ITEM, "current_stock": -1}, headers=writer
        )

        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"
        mock_ledger.create_item.assert_not_awaited()

    async def test_requires_identity(self, client, mock_ledger):
        response = await client.post("/api/inventory", json=NEW_ITEM)

        assert response.status_code == 401
        assert response.json()["error_code"] == "UNAUTHENTICATED"

    async def test_viewer_forbidden(self, client, mock_ledger):
        response = await client.post(
            "/api/inventory",
            json=NEW_ITEM,
            headers={"X-User-Id": "u-9", "X-User-Role": "viewer"},
        )

        assert response.status_code == 403
        assert response.json()["error_code"] == "FORBIDDEN"
        mock_ledger.create_item.assert_not_awaited()


class TestSingleItem:
    async def test_get(self, client, mock_inventory_store, make_item):
        mock_inventory_store.get_item.return_value = make_item(id=5)

        response = await client.get("/api/inventory/5")

        assert response.status_code == 200
        assert response.json()["id"] == 5

    async def test_get_missing(self, client):
        response = await client.get("/api/inventory/404")

        assert response.status_code == 404
        data = response.json()
        assert data["error_code"] == "INVENTORY_ITEM_NOT_FOUND"
        assert data["path"] == "/api/inventory/404"

    async def test_update(self, client, mock_ledger, make_item, writer):
        mock_ledger.update_item.return_value = make_item(reorder_point=30, version=2)

        response = await client.patch(
            "/api/inventory/1", json={"reorder_point": 30}, headers=writer
        )

        assert response.status_code == 200
        assert response.json()["version"] == 2
        mock_ledger.update_item.assert_awaited_once_with(1, {"reorder_point": 30})

    async def test_update_without_fields(self, client, mock_ledger, writer):
        response = await client.patch("/api/inventory/1", json={}, headers=writer)

        assert response.status_code == 400
        mock_ledger.update_item.assert_not_awaited()

    async def test_deactivate(self, client, mock_ledger, make_item, admin):
        mock_ledger.deactivate_item.return_value = make_item(is_active=False)

        response = await client.delete("/api/inventory/1", headers=admin)

        assert response.status_code == 200
        assert response.json()["is_active"] is False

    async def test_deactivate_missing(self, client, mock_ledger, admin):
        mock_ledger.deactivate_item.side_effect = InventoryItemNotFoundError(9)

        response = await client.delete("/api/inventory/9", headers=admin)

        assert response.status_code == 404

    @pytest.mark.parametrize("role", ["inventory", "purchasing", "viewer"])
    async def test_deactivate_requires_manager(self, client, mock_ledger, role):
        response = await client.delete(
            "/api/inventory/1", headers={"X-User-Id": "u-17", "X-User-Role": role}
        )

        assert response.status_code == 403
        mock_ledger.deactivate_item.assert_not_awaited()

    async def test_manager_can_deactivate(self, client, mock_ledger, make_item):
        mock_ledger.deactivate_item.return_value = make_item(is_active=False)

        response = await client.delete(
            "/api/inventory/1", headers={"X-User-Id": "u-2", "X-User-Role": "manager"}
        )

        assert response.status_code == 200


class TestHistory:
    async def test_movements(self, client, mock_inventory_store, make_item, make_movement):
        mock_inventory_store.get_item.return_value = make_item()
        mock_inventory_store.get_movements.return_value = [make_movement(id=2), make_movement()]

        response = await client.get(
            "/api/inventory/1/movements", params={"movement_type": ["out"], "limit": 10}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        assert data["movements"][0]["total_cost"] == 40
        kwargs = mock_inventory_store.get_movements.call_args.kwargs
        assert kwargs["movement_types"] == ["out"]
        assert kwargs["limit"] == 10

    async def test_movements_for_missing_item(self, client, mock_inventory_store):
        response = await client.get("/api/inventory/77/movements")

        assert response.status_code == 404
        mock_inventory_store.get_movements.assert_not_awaited()

    async def test_summary(self, client, mock_ledger):
        mock_ledger.get_movement_summary.return_value = MovementSummary(
            inventory_item_id=1,
            movements=[
                MovementTypeSummary(
                    movement_type=MovementType.OUT, quantity=15, count=2, value=60
                )
            ],
            total_movements=2,
        )

        response = await client.get("/api/inventory/1/summary")

        assert response.status_code == 200
        summary = response.json()["summary"]
        assert summary["total_movements"] == 2
        assert summary["movements"][0]["movement_type"] == "out"

    async def test_analytics(self, client, mock_inventory_store):
        mock_inventory_store.get_analytics.return_value = {
            "since": datetime(2026, 6, 1),
            "total_items": 4,
            "total_value": 1250.0,
            "low_stock_items": 1,
            "out_of_stock_items": 1,
            "overstock_items": 0,
            "movements_by_type": {"out": {"count": 3, "quantity": 45.0, "value": 180.0}},
            "top_outbound_items": [{"part_number": "BRG-6204", "quantity": 45.0}],
        }

        response = await client.get("/api/inventory/analytics", params={"days": 7})

        assert response.status_code == 200
        data = response.json()
        assert data["period_days"] == 7
        assert data["total_items"] == 4
        assert data["top_outbound_items"][0]["part_number"] == "BRG-6204"
