"""SQLite implementation of inventory item and movement storage."""

from datetime import datetime
from typing import Any

import aiosqlite

from stockledger.config import get_logger
from stockledger.core.entities.inventory import InventoryItem, StockStatus
from stockledger.core.entities.movement import (
    InventoryMovement,
    MovementDirection,
    MovementSummary,
    MovementType,
    MovementTypeSummary,
)
from stockledger.core.exceptions import (
    DatabaseError,
    DuplicatePartNumberError,
    MovementAlreadyReversedError,
    StaleItemVersionError,
    ValidationError,
)
from stockledger.core.interfaces.inventory_store import IInventoryStore
from stockledger.infrastructure.storage.sqlite.connection import (
    format_timestamp,
    get_connection,
    get_transaction,
    parse_timestamp,
)

logger = get_logger(__name__)


def _integrity_error(
    operation: str, error: aiosqlite.IntegrityError, supplier_id: int | None
) -> Exception:
    """Map a constraint failure to a client error where the caller can fix it."""
    message = str(error)
    if "FOREIGN KEY" in message and supplier_id is not None:
        return ValidationError("supplier_id", "supplier does not exist", supplier_id)
    return DatabaseError(operation, message)

_SORTABLE_COLUMNS = {
    "id": "id",
    "part_number": "part_number",
    "material": "material",
    "current_stock": "current_stock",
    "status": "status",
    "location": "location",
    "average_cost": "average_cost",
    "created_at": "created_at",
    "updated_at": "updated_at",
}

# Neither reversed originals nor their compensating entries count as activity
_EFFECTIVE = "is_reversed = 0 AND reversal_reference IS NULL"

_MOVEMENT_COLUMNS = (
    "inventory_item_id, movement_type, direction, quantity, previous_stock, "
    "new_stock, unit_cost, reason, reference, batch_number, location_from, "
    "location_to, work_order_id, purchase_order, supplier_id, customer, notes, "
    "is_reversed, reversal_reference, created_by, approved_by, approved_at, created_at"
)


class SQLiteInventoryStore(IInventoryStore):
    """SQLite implementation of inventory items and the movement ledger."""

    async def create_item(
        self, item: InventoryItem, initial_movement: InventoryMovement
    ) -> tuple[InventoryItem, InventoryMovement]:
        """Insert the item and its initial movement in one transaction."""
        try:
            async with get_transaction(immediate=True) as conn:
                cursor = await conn.execute(
                    """
                    INSERT INTO inventory_items (
                        part_number, material, description, category,
                        current_stock, min_stock, max_stock, reorder_point,
                        average_cost, status, location, supplier_id, unit,
                        notes, is_active, version, created_by, created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        item.part_number,
                        item.material,
                        item.description,
                        item.category,
                        item.current_stock,
                        item.min_stock,
                        item.max_stock,
                        item.reorder_point,
                        item.average_cost,
                        item.status.value,
                        item.location,
                        item.supplier_id,
                        item.unit,
                        item.notes,
                        int(item.is_active),
                        item.version,
                        item.created_by,
                        format_timestamp(item.created_at),
                        format_timestamp(item.updated_at),
                    ),
                )
                item.id = cursor.lastrowid
                initial_movement.inventory_item_id = item.id  # type: ignore[assignment]
                initial_movement.id = await self._insert_movement(conn, initial_movement)
        except aiosqlite.IntegrityError as e:
            message = str(e)
            if "part_number" in message:
                raise DuplicatePartNumberError(item.part_number) from e
            raise _integrity_error("create_item", e, item.supplier_id) from e

        return item, initial_movement

    async def get_item(self, item_id: int) -> InventoryItem | None:
        """Get inventory item by ID."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM inventory_items WHERE id = ?", (item_id,)
            )
            row = await cursor.fetchone()
            return self._row_to_item(row) if row else None

    async def get_item_by_part_number(self, part_number: str) -> InventoryItem | None:
        """Get inventory item by part number."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM inventory_items WHERE part_number = ?", (part_number,)
            )
            row = await cursor.fetchone()
            return self._row_to_item(row) if row else None

    async def update_item(
        self, item: InventoryItem, expected_version: int
    ) -> InventoryItem:
        """Update non-stock fields, guarded by the version stamp."""
        try:
            async with get_transaction(immediate=True) as conn:
                cursor = await conn.execute(
                    """
                    UPDATE inventory_items SET
                        part_number = ?, material = ?, description = ?, category = ?,
                        min_stock = ?, max_stock = ?, reorder_point = ?,
                        average_cost = ?, status = ?, location = ?, supplier_id = ?,
                        unit = ?, notes = ?, is_active = ?,
                        version = ?, updated_at = ?
                    WHERE id = ? AND version = ?
                    """,
                    (
                        item.part_number,
                        item.material,
                        item.description,
                        item.category,
                        item.min_stock,
                        item.max_stock,
                        item.reorder_point,
                        item.average_cost,
                        item.status.value,
                        item.location,
                        item.supplier_id,
                        item.unit,
                        item.notes,
                        int(item.is_active),
                        expected_version + 1,
                        format_timestamp(item.updated_at),
                        item.id,
                        expected_version,
                    ),
                )
                if cursor.rowcount == 0:
                    raise StaleItemVersionError(item.id, expected_version)  # type: ignore[arg-type]
        except aiosqlite.IntegrityError as e:
            if "part_number" in str(e):
                raise DuplicatePartNumberError(item.part_number) from e
            raise _integrity_error("update_item", e, item.supplier_id) from e

        item.version = expected_version + 1
        return item

    async def list_items(
        self,
        status: StockStatus | None = None,
        supplier_id: int | None = None,
        location: str | None = None,
        search: str | None = None,
        include_inactive: bool = False,
        sort_by: str = "part_number",
        descending: bool = False,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[InventoryItem], int]:
        """List items with filters, sort and pagination."""
        column = _SORTABLE_COLUMNS.get(sort_by)
        if column is None:
            raise ValidationError(
                "sort_by", f"must be one of {', '.join(sorted(_SORTABLE_COLUMNS))}", sort_by
            )

        conditions: list[str] = []
        params: list[Any] = []
        if not include_inactive:
            conditions.append("is_active = 1")
        if status is not None:
            conditions.append("status = ?")
            params.append(StockStatus(status).value)
        if supplier_id is not None:
            conditions.append("supplier_id = ?")
            params.append(supplier_id)
        if location:
            conditions.append("location = ?")
            params.append(location)
        if search:
            conditions.append(
                "(part_number LIKE ? OR material LIKE ? OR description LIKE ?)"
            )
            pattern = f"%{search}%"
            params.extend([pattern, pattern, pattern])

        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        direction = "DESC" if descending else "ASC"

        async with get_connection() as conn:
            cursor = await conn.execute(
                f"SELECT COUNT(*) FROM inventory_items {where}", params
            )
            total = (await cursor.fetchone())[0]

            cursor = await conn.execute(
                f"""
                SELECT * FROM inventory_items {where}
                ORDER BY {column} {direction}, id {direction}
                LIMIT ? OFFSET ?
                """,
                [*params, limit, offset],
            )
            rows = await cursor.fetchall()

        return [self._row_to_item(row) for row in rows], total

    async def apply_movement(
        self,
        item: InventoryItem,
        expected_version: int,
        movement: InventoryMovement,
    ) -> InventoryMovement:
        """Compare-and-swap the item row, then append the movement."""
        try:
            async with get_transaction(immediate=True) as conn:
                await self._swap_item_stock(conn, item, expected_version)
                movement.id = await self._insert_movement(conn, movement)
        except aiosqlite.IntegrityError as e:
            raise _integrity_error("apply_movement", e, movement.supplier_id) from e
        return movement

    async def apply_reversal(
        self,
        item: InventoryItem,
        expected_version: int,
        original: InventoryMovement,
        compensating: InventoryMovement,
    ) -> InventoryMovement:
        """Append the compensating entry and flag the original, atomically."""
        try:
            async with get_transaction(immediate=True) as conn:
                await self._swap_item_stock(conn, item, expected_version)
                compensating.id = await self._insert_movement(conn, compensating)

                cursor = await conn.execute(
                    """
                    UPDATE inventory_movements
                    SET is_reversed = 1, reversal_reference = ?
                    WHERE id = ? AND is_reversed = 0 AND reversal_reference IS NULL
                    """,
                    (compensating.id, original.id),
                )
                if cursor.rowcount == 0:
                    raise MovementAlreadyReversedError(original.id)  # type: ignore[arg-type]
        except aiosqlite.IntegrityError as e:
            raise _integrity_error("apply_reversal", e, compensating.supplier_id) from e

        original.is_reversed = True
        original.reversal_reference = compensating.id
        return compensating

    async def get_movement(self, movement_id: int) -> InventoryMovement | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM inventory_movements WHERE id = ?", (movement_id,)
            )
            row = await cursor.fetchone()
            return self._row_to_movement(row) if row else None

    async def get_movements(
        self,
        inventory_item_id: int,
        start: datetime | None = None,
        end: datetime | None = None,
        movement_types: list[str] | None = None,
        limit: int | None = 100,
        ascending: bool = False,
    ) -> list[InventoryMovement]:
        """Get movements for an item, newest first unless ascending."""
        conditions = ["inventory_item_id = ?"]
        params: list[Any] = [inventory_item_id]
        if start is not None:
            conditions.append("created_at >= ?")
            params.append(format_timestamp(start))
        if end is not None:
            conditions.append("created_at <= ?")
            params.append(format_timestamp(end))
        if movement_types:
            conditions.append(f"movement_type IN ({', '.join('?' for _ in movement_types)})")
            params.extend(MovementType(t).value for t in movement_types)

        order = "ASC" if ascending else "DESC"
        params.append(-1 if limit is None else limit)

        async with get_connection() as conn:
            cursor = await conn.execute(
                f"""
                SELECT * FROM inventory_movements
                WHERE {' AND '.join(conditions)}
                ORDER BY created_at {order}, id {order}
                LIMIT ?
                """,
                params,
            )
            rows = await cursor.fetchall()
            return [self._row_to_movement(row) for row in rows]

    async def get_movement_summary(
        self,
        inventory_item_id: int,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> MovementSummary:
        """Per-type totals of effective movements in a date range."""
        conditions = ["inventory_item_id = ?", _EFFECTIVE]
        params: list[Any] = [inventory_item_id]
        if start is not None:
            conditions.append("created_at >= ?")
            params.append(format_timestamp(start))
        if end is not None:
            conditions.append("created_at <= ?")
            params.append(format_timestamp(end))

        async with get_connection() as conn:
            cursor = await conn.execute(
                f"""
                SELECT
                    movement_type,
                    SUM(quantity) AS quantity,
                    COUNT(*) AS count,
                    SUM(quantity * unit_cost) AS value,
                    SUM(CASE direction WHEN 'inbound' THEN quantity ELSE -quantity END) AS net
                FROM inventory_movements
                WHERE {' AND '.join(conditions)}
                GROUP BY movement_type
                ORDER BY movement_type
                """,
                params,
            )
            rows = await cursor.fetchall()

        per_type = [
            MovementTypeSummary(
                movement_type=MovementType(row["movement_type"]),
                quantity=float(row["quantity"] or 0),
                count=int(row["count"]),
                value=float(row["value"] or 0),
            )
            for row in rows
        ]
        return MovementSummary(
            inventory_item_id=inventory_item_id,
            start=start,
            end=end,
            movements=per_type,
            total_movements=sum(s.count for s in per_type),
            total_value=sum(s.value for s in per_type),
            net_quantity=sum(float(row["net"] or 0) for row in rows),
        )

    async def get_analytics(self, since: datetime, top: int = 10) -> dict[str, Any]:
        """Inventory totals and movement statistics since a date."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT
                    COUNT(*) AS total_items,
                    COALESCE(SUM(current_stock * average_cost), 0) AS total_value,
                    COALESCE(SUM(status = 'low-stock'), 0) AS low_stock,
                    COALESCE(SUM(status = 'out-of-stock'), 0) AS out_of_stock,
                    COALESCE(SUM(status = 'overstock'), 0) AS overstock
                FROM inventory_items
                WHERE is_active = 1
                """
            )
            totals = await cursor.fetchone()

            cursor = await conn.execute(
                f"""
                SELECT movement_type, SUM(quantity) AS quantity, COUNT(*) AS count,
                       SUM(quantity * unit_cost) AS value
                FROM inventory_movements
                WHERE created_at >= ? AND {_EFFECTIVE}
                GROUP BY movement_type
                ORDER BY movement_type
                """,
                (format_timestamp(since),),
            )
            by_type = await cursor.fetchall()

            cursor = await conn.execute(
                f"""
                SELECT m.inventory_item_id, i.part_number, i.material,
                       SUM(m.quantity) AS quantity, COUNT(*) AS count
                FROM inventory_movements m
                JOIN inventory_items i ON i.id = m.inventory_item_id
                WHERE m.created_at >= ? AND m.direction = 'outbound'
                  AND m.is_reversed = 0 AND m.reversal_reference IS NULL
                GROUP BY m.inventory_item_id
                ORDER BY quantity DESC, m.inventory_item_id
                LIMIT ?
                """,
                (format_timestamp(since), top),
            )
            movers = await cursor.fetchall()

        return {
            "since": since,
            "total_items": int(totals["total_items"]),
            "total_value": float(totals["total_value"]),
            "low_stock_items": int(totals["low_stock"]),
            "out_of_stock_items": int(totals["out_of_stock"]),
            "overstock_items": int(totals["overstock"]),
            "movements_by_type": {
                row["movement_type"]: {
                    "quantity": float(row["quantity"] or 0),
                    "count": int(row["count"]),
                    "value": float(row["value"] or 0),
                }
                for row in by_type
            },
            "top_outbound_items": [
                {
                    "inventory_item_id": row["inventory_item_id"],
                    "part_number": row["part_number"],
                    "material": row["material"],
                    "quantity": float(row["quantity"]),
                    "count": int(row["count"]),
                }
                for row in movers
            ],
        }

    # ------------------------------------------------------------------

    @staticmethod
    async def _swap_item_stock(
        conn: aiosqlite.Connection, item: InventoryItem, expected_version: int
    ) -> None:
        cursor = await conn.execute(
            """
            UPDATE inventory_items SET
                current_stock = ?, status = ?, average_cost = ?,
                version = version + 1, updated_at = ?
            WHERE id = ? AND version = ?
            """,
            (
                item.current_stock,
                item.status.value,
                item.average_cost,
                format_timestamp(item.updated_at),
                item.id,
                expected_version,
            ),
        )
        if cursor.rowcount == 0:
            raise StaleItemVersionError(item.id, expected_version)  # type: ignore[arg-type]
        item.version = expected_version + 1

    @staticmethod
    async def _insert_movement(
        conn: aiosqlite.Connection, movement: InventoryMovement
    ) -> int:
        cursor = await conn.execute(
            f"""
            INSERT INTO inventory_movements ({_MOVEMENT_COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                movement.inventory_item_id,
                movement.movement_type.value,
                movement.direction.value,
                movement.quantity,
                movement.previous_stock,
                movement.new_stock,
                movement.unit_cost,
                movement.reason,
                movement.reference,
                movement.batch_number,
                movement.location_from,
                movement.location_to,
                movement.work_order_id,
                movement.purchase_order,
                movement.supplier_id,
                movement.customer,
                movement.notes,
                int(movement.is_reversed),
                movement.reversal_reference,
                movement.created_by,
                movement.approved_by,
                format_timestamp(movement.approved_at),
                format_timestamp(movement.created_at),
            ),
        )
        logger.debug(
            "movement_row_inserted",
            movement_id=cursor.lastrowid,
            item_id=movement.inventory_item_id,
            type=movement.movement_type.value,
        )
        return cursor.lastrowid  # type: ignore[return-value]

    @staticmethod
    def _row_to_item(row: aiosqlite.Row) -> InventoryItem:
        return InventoryItem(
            id=row["id"],
            part_number=row["part_number"],
            material=row["material"],
            description=row["description"] or "",
            category=row["category"],
            current_stock=float(row["current_stock"]),
            min_stock=float(row["min_stock"]),
            max_stock=float(row["max_stock"]),
            reorder_point=float(row["reorder_point"]),
            average_cost=float(row["average_cost"]),
            status=StockStatus(row["status"]),
            location=row["location"] or "",
            supplier_id=row["supplier_id"],
            unit=row["unit"],
            notes=row["notes"],
            is_active=bool(row["is_active"]),
            version=int(row["version"]),
            created_by=row["created_by"],
            created_at=parse_timestamp(row["created_at"]) or datetime.utcnow(),
            updated_at=parse_timestamp(row["updated_at"]) or datetime.utcnow(),
        )

    @staticmethod
    def _row_to_movement(row: aiosqlite.Row) -> InventoryMovement:
        return InventoryMovement(
            id=row["id"],
            inventory_item_id=row["inventory_item_id"],
            movement_type=MovementType(row["movement_type"]),
            direction=MovementDirection(row["direction"]),
            quantity=float(row["quantity"]),
            previous_stock=float(row["previous_stock"]),
            new_stock=float(row["new_stock"]),
            unit_cost=float(row["unit_cost"]),
            reason=row["reason"],
            reference=row["reference"],
            batch_number=row["batch_number"],
            location_from=row["location_from"],
            location_to=row["location_to"],
            work_order_id=row["work_order_id"],
            purchase_order=row["purchase_order"],
            supplier_id=row["supplier_id"],
            customer=row["customer"],
            notes=row["notes"],
            is_reversed=bool(row["is_reversed"]),
            reversal_reference=row["reversal_reference"],
            created_by=row["created_by"],
            approved_by=row["approved_by"],
            approved_at=parse_timestamp(row["approved_at"]),
            created_at=parse_timestamp(row["created_at"]) or datetime.utcnow(),
        )
