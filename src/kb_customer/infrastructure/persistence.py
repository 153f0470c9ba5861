"""CustomerRepository — concrete implementation of CustomerRepositoryProtocol.

Every statement filters on seller_id. Balance writes bump `version` and are
issued inside the caller's transaction, after the row has been locked with
get_customer_for_update().

Transaction ownership: the CALLER (application service) commits or rolls back.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.kb_common.errors import InternalError
from src.kb_customer.domain.models import Customer

_CUSTOMER_COLUMNS = """
    id, seller_id, name, phone, email, address, city, state, pincode, notes,
    total_purchase_amount, total_paid_amount, outstanding_balance, deposit_amount,
    is_active, version, created_at, updated_at
"""

# Columns a seller may edit directly. Balance columns are ledger-owned.
CONTACT_FIELDS = ("name", "phone", "email", "address", "city", "state", "pincode", "notes")

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_GET_CUSTOMER_SQL = text(f"""
    SELECT {_CUSTOMER_COLUMNS}
    FROM customers
    WHERE id = :customer_id AND seller_id = :seller_id
""")

_GET_CUSTOMER_FOR_UPDATE_SQL = text(f"""
    SELECT {_CUSTOMER_COLUMNS}
    FROM customers
    WHERE id = :customer_id AND seller_id = :seller_id
    FOR UPDATE
""")

_GET_BY_PHONE_SQL = text(f"""
    SELECT {_CUSTOMER_COLUMNS}
    FROM customers
    WHERE seller_id = :seller_id AND phone = :phone
""")

_LIST_CUSTOMERS_SQL = text(f"""
    SELECT {_CUSTOMER_COLUMNS}
    FROM customers
    WHERE seller_id = :seller_id
      AND (CAST(:is_active AS BOOLEAN) IS NULL OR is_active = CAST(:is_active AS BOOLEAN))
    ORDER BY created_at DESC, id DESC
""")

_INSERT_CUSTOMER_SQL = text(f"""
    INSERT INTO customers
        (seller_id, name, phone, email, address, city, state, pincode, notes)
    VALUES
        (:seller_id, :name, :phone, :email, :address, :city, :state, :pincode, :notes)
    RETURNING {_CUSTOMER_COLUMNS}
""")

_SAVE_BALANCES_SQL = text(f"""
    UPDATE customers
    SET total_purchase_amount = :total_purchase_amount,
        total_paid_amount     = :total_paid_amount,
        outstanding_balance   = :outstanding_balance,
        deposit_amount        = :deposit_amount,
        version = version + 1,
        updated_at = NOW()
    WHERE id = :customer_id AND seller_id = :seller_id
    RETURNING {_CUSTOMER_COLUMNS}
""")

_SET_ACTIVE_SQL = text(f"""
    UPDATE customers
    SET is_active = :is_active,
        updated_at = NOW()
    WHERE id = :customer_id AND seller_id = :seller_id
    RETURNING {_CUSTOMER_COLUMNS}
""")

_PURGE_TRANSACTIONS_SQL = text("""
    DELETE FROM transactions
    WHERE customer_id = :customer_id AND seller_id = :seller_id
""")

_PURGE_CUSTOMER_SQL = text("""
    DELETE FROM customers
    WHERE id = :customer_id AND seller_id = :seller_id
    RETURNING id
""")


def _row_to_customer(row: object) -> Customer:
    return Customer(
        id=str(row.id),  # type: ignore[attr-defined]
        seller_id=str(row.seller_id),  # type: ignore[attr-defined]
        name=row.name,  # type: ignore[attr-defined]
        phone=row.phone,  # type: ignore[attr-defined]
        email=row.email,  # type: ignore[attr-defined]
        address=row.address,  # type: ignore[attr-defined]
        city=row.city,  # type: ignore[attr-defined]
        state=row.state,  # type: ignore[attr-defined]
        pincode=row.pincode,  # type: ignore[attr-defined]
        notes=row.notes,  # type: ignore[attr-defined]
        total_purchase_amount=row.total_purchase_amount,  # type: ignore[attr-defined]
        total_paid_amount=row.total_paid_amount,  # type: ignore[attr-defined]
        outstanding_balance=row.outstanding_balance,  # type: ignore[attr-defined]
        deposit_amount=row.deposit_amount,  # type: ignore[attr-defined]
        is_active=row.is_active,  # type: ignore[attr-defined]
        version=row.version,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


class CustomerRepository:
    """Concrete repository — raw SQL, tenant-scoped on every statement."""

    async def get_customer(
        self, db: AsyncSession, seller_id: str, customer_id: str
    ) -> Customer | None:
        result = await db.execute(
            _GET_CUSTOMER_SQL, {"seller_id": seller_id, "customer_id": customer_id}
        )
        row = result.fetchone()
        return _row_to_customer(row) if row else None

    async def get_customer_for_update(
        self, db: AsyncSession, seller_id: str, customer_id: str
    ) -> Customer | None:
        result = await db.execute(
            _GET_CUSTOMER_FOR_UPDATE_SQL,
            {"seller_id": seller_id, "customer_id": customer_id},
        )
        row = result.fetchone()
        return _row_to_customer(row) if row else None

    async def get_customer_by_phone(
        self, db: AsyncSession, seller_id: str, phone: str
    ) -> Customer | None:
        result = await db.execute(
            _GET_BY_PHONE_SQL, {"seller_id": seller_id, "phone": phone}
        )
        row = result.fetchone()
        return _row_to_customer(row) if row else None

    async def list_customers(
        self, db: AsyncSession, seller_id: str, is_active: bool | None
    ) -> list[Customer]:
        result = await db.execute(
            _LIST_CUSTOMERS_SQL, {"seller_id": seller_id, "is_active": is_active}
        )
        return [_row_to_customer(row) for row in result.fetchall()]

    async def create_customer(
        self, db: AsyncSession, customer: Customer
    ) -> Customer:
        result = await db.execute(
            _INSERT_CUSTOMER_SQL,
            {
                "seller_id": customer.seller_id,
                "name": customer.name,
                "phone": customer.phone,
                "email": customer.email,
                "address": customer.address,
                "city": customer.city,
                "state": customer.state,
                "pincode": customer.pincode,
                "notes": customer.notes,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Customer insert returned no rows")
        return _row_to_customer(row)

    async def update_contact(
        self,
        db: AsyncSession,
        seller_id: str,
        customer_id: str,
        fields: dict[str, Any],
    ) -> Customer | None:
        changes = {k: v for k, v in fields.items() if k in CONTACT_FIELDS}
        if not changes:
            return await self.get_customer(db, seller_id, customer_id)
        # Column names come from the CONTACT_FIELDS whitelist, values are bound.
        assignments = ", ".join(f"{column} = :{column}" for column in changes)
        stmt = text(f"""
            UPDATE customers
            SET {assignments}, updated_at = NOW()
            WHERE id = :customer_id AND seller_id = :seller_id
            RETURNING {_CUSTOMER_COLUMNS}
        """)
        result = await db.execute(
            stmt, {**changes, "seller_id": seller_id, "customer_id": customer_id}
        )
        row = result.fetchone()
        return _row_to_customer(row) if row else None

    async def save_balances(
        self, db: AsyncSession, customer: Customer
    ) -> Customer:
        result = await db.execute(
            _SAVE_BALANCES_SQL,
            {
                "customer_id": customer.id,
                "seller_id": customer.seller_id,
                "total_purchase_amount": customer.total_purchase_amount,
                "total_paid_amount": customer.total_paid_amount,
                "outstanding_balance": customer.outstanding_balance,
                "deposit_amount": customer.deposit_amount,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError(f"Customer {customer.id} vanished during balance update")
        return _row_to_customer(row)

    async def set_active(
        self, db: AsyncSession, seller_id: str, customer_id: str, is_active: bool
    ) -> Customer | None:
        result = await db.execute(
            _SET_ACTIVE_SQL,
            {"seller_id": seller_id, "customer_id": customer_id, "is_active": is_active},
        )
        row = result.fetchone()
        return _row_to_customer(row) if row else None

    async def purge_customer(
        self, db: AsyncSession, seller_id: str, customer_id: str
    ) -> int | None:
        """Hard-delete a customer and its transactions. Returns deleted tx count, None if absent."""
        params = {"seller_id": seller_id, "customer_id": customer_id}
        tx_result = await db.execute(_PURGE_TRANSACTIONS_SQL, params)
        result = await db.execute(_PURGE_CUSTOMER_SQL, params)
        if result.fetchone() is None:
            return None
        return int(tx_result.rowcount or 0)
