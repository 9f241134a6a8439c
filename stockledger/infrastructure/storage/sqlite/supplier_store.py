"""SQLite implementation of supplier storage."""

from datetime import datetime
from typing import Any

import aiosqlite

from stockledger.config import get_logger
from stockledger.core.entities.supplier import Supplier, SupplierStatus
from stockledger.core.exceptions import DatabaseError, SupplierNotFoundError, ValidationError
from stockledger.core.interfaces.supplier_store import ISupplierStore
from stockledger.infrastructure.storage.sqlite.connection import (
    format_timestamp,
    get_connection,
    get_transaction,
    parse_timestamp,
)

logger = get_logger(__name__)


def _integrity_error(
    operation: str, error: aiosqlite.IntegrityError, supplier: Supplier
) -> Exception:
    message = str(error)
    if "suppliers.name" in message:
        return ValidationError("name", "supplier name already exists", supplier.name)
    if "suppliers.code" in message:
        return ValidationError("code", "supplier code already exists", supplier.code)
    return DatabaseError(operation, message)


class SQLiteSupplierStore(ISupplierStore):
    """SQLite implementation of supplier storage."""

    async def create(self, supplier: Supplier) -> Supplier:
        now = datetime.utcnow()
        supplier.created_at = now
        supplier.updated_at = now
        try:
            async with get_transaction() as conn:
                cursor = await conn.execute(
                    """
                    INSERT INTO suppliers (
                        name, code, contact, email, phone, lead_time_days,
                        rating, payment_terms, status, notes, created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        supplier.name,
                        supplier.code,
                        supplier.contact,
                        supplier.email,
                        supplier.phone,
                        supplier.lead_time_days,
                        supplier.rating,
                        supplier.payment_terms,
                        supplier.status.value,
                        supplier.notes,
                        format_timestamp(supplier.created_at),
                        format_timestamp(supplier.updated_at),
                    ),
                )
                supplier.id = cursor.lastrowid
        except aiosqlite.IntegrityError as e:
            raise _integrity_error("create_supplier", e, supplier) from e

        logger.info("supplier_created", supplier_id=supplier.id, name=supplier.name)
        return supplier

    async def update(self, supplier: Supplier) -> Supplier:
        supplier.updated_at = datetime.utcnow()
        try:
            async with get_transaction() as conn:
                cursor = await conn.execute(
                    """
                    UPDATE suppliers SET
                        name = ?, code = ?, contact = ?, email = ?, phone = ?,
                        lead_time_days = ?, rating = ?, payment_terms = ?,
                        status = ?, notes = ?, updated_at = ?
                    WHERE id = ?
                    """,
                    (
                        supplier.name,
                        supplier.code,
                        supplier.contact,
                        supplier.email,
                        supplier.phone,
                        supplier.lead_time_days,
                        supplier.rating,
                        supplier.payment_terms,
                        supplier.status.value,
                        supplier.notes,
                        format_timestamp(supplier.updated_at),
                        supplier.id,
                    ),
                )
                if cursor.rowcount == 0:
                    raise SupplierNotFoundError(supplier.id)
        except aiosqlite.IntegrityError as e:
            raise _integrity_error("update_supplier", e, supplier) from e

        logger.info(
            "supplier_updated",
            supplier_id=supplier.id,
            lead_time_days=supplier.lead_time_days,
        )
        return supplier

    async def get(self, supplier_id: int) -> Supplier | None:
        async with get_connection() as conn:
            cursor = await conn.execute("SELECT * FROM suppliers WHERE id = ?", (supplier_id,))
            row = await cursor.fetchone()
            return self._row_to_supplier(row) if row else None

    async def get_by_name(self, name: str) -> Supplier | None:
        async with get_connection() as conn:
            cursor = await conn.execute("SELECT * FROM suppliers WHERE name = ?", (name,))
            row = await cursor.fetchone()
            return self._row_to_supplier(row) if row else None

    async def list_suppliers(
        self,
        status: SupplierStatus | None = None,
        search: str | None = None,
    ) -> list[Supplier]:
        conditions: list[str] = []
        params: list[Any] = []
        if status is not None:
            conditions.append("status = ?")
            params.append(SupplierStatus(status).value)
        if search:
            conditions.append("(name LIKE ? OR code LIKE ?)")
            params.extend([f"%{search}%", f"%{search}%"])
        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""

        async with get_connection() as conn:
            cursor = await conn.execute(
                f"SELECT * FROM suppliers {where} ORDER BY name", params
            )
            rows = await cursor.fetchall()
            return [self._row_to_supplier(row) for row in rows]

    @staticmethod
    def _row_to_supplier(row: aiosqlite.Row) -> Supplier:
        return Supplier(
            id=row["id"],
            name=row["name"],
            code=row["code"],
            contact=row["contact"],
            email=row["email"],
            phone=row["phone"],
            lead_time_days=int(row["lead_time_days"]),
            rating=float(row["rating"]),
            payment_terms=row["payment_terms"],
            status=SupplierStatus(row["status"]),
            notes=row["notes"],
            created_at=parse_timestamp(row["created_at"]) or datetime.utcnow(),
            updated_at=parse_timestamp(row["updated_at"]) or datetime.utcnow(),
        )
