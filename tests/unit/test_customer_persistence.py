"""Unit tests for CustomerRepository using a mocked AsyncSession."""

from datetime import UTC, datetime
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.kb_common.errors import InternalError
from src.kb_customer.domain.models import Customer
from src.kb_customer.infrastructure.persistence import CustomerRepository


def _make_row(**kwargs: Any) -> MagicMock:
    row = MagicMock()
    row.id = kwargs.get("id", "cust-1")
    row.seller_id = kwargs.get("seller_id", "seller-1")
    row.name = kwargs.get("name", "Ravi Kumar")
    row.phone = kwargs.get("phone", "9876543210")
    row.email = kwargs.get("email")
    row.address = kwargs.get("address")
    row.city = kwargs.get("city")
    row.state = kwargs.get("state")
    row.pincode = kwargs.get("pincode")
    row.notes = kwargs.get("notes")
    row.total_purchase_amount = kwargs.get("total_purchase_amount", 100000)
    row.total_paid_amount = kwargs.get("total_paid_amount", 20000)
    row.outstanding_balance = kwargs.get("outstanding_balance", 80000)
    row.deposit_amount = kwargs.get("deposit_amount", 0)
    row.is_active = kwargs.get("is_active", True)
    row.version = kwargs.get("version", 3)
    row.created_at = kwargs.get("created_at", datetime(2026, 1, 1, tzinfo=UTC))
    row.updated_at = kwargs.get("updated_at", datetime(2026, 1, 1, tzinfo=UTC))
    return row


def _db_returning(row: Any) -> MagicMock:
    result = MagicMock()
    result.fetchone.return_value = row
    result.fetchall.return_value = [row] if row is not None else []
    db = MagicMock()
    db.execute = AsyncMock(return_value=result)
    return db


def _sql(db: MagicMock, call: int = 0) -> str:
    return str(db.execute.call_args_list[call].args[0])


class TestCustomerRepository:
    async def test_get_for_update_locks_row(self) -> None:
        db = _db_returning(_make_row())

        customer = await CustomerRepository().get_customer_for_update(db, "seller-1", "cust-1")

        assert customer is not None
        assert customer.outstanding_balance == 80000
        assert customer.version == 3
        assert "FOR UPDATE" in _sql(db)

    async def test_get_customer_scopes_by_seller(self) -> None:
        db = _db_returning(None)

        assert await CustomerRepository().get_customer(db, "seller-2", "cust-1") is None
        assert db.execute.call_args.args[1] == {"seller_id": "seller-2", "customer_id": "cust-1"}

    async def test_save_balances_bumps_version(self) -> None:
        db = _db_returning(_make_row(version=4))
        customer = Customer(
            id="cust-1",
            seller_id="seller-1",
            name="Ravi Kumar",
            phone="9876543210",
            total_purchase_amount=100000,
            total_paid_amount=20000,
            outstanding_balance=80000,
            version=3,
        )

        saved = await CustomerRepository().save_balances(db, customer)

        assert saved.version == 4
        assert "version = version + 1" in _sql(db)
        assert db.execute.call_args.args[1]["outstanding_balance"] == 80000

    async def test_save_balances_missing_row(self) -> None:
        db = _db_returning(None)
        customer = Customer(id="cust-1", seller_id="seller-1", name="x", phone="1")

        with pytest.raises(InternalError):
            await CustomerRepository().save_balances(db, customer)

    async def test_update_contact_ignores_balance_columns(self) -> None:
        db = _db_returning(_make_row(city="Pune"))

        await CustomerRepository().update_contact(
            db, "seller-1", "cust-1", {"city": "Pune", "outstanding_balance": 0}
        )

        sql = _sql(db)
        assert "city = :city" in sql
        assert "outstanding_balance = " not in sql
        assert "outstanding_balance" not in db.execute.call_args.args[1]

    async def test_update_contact_without_changes_reads_row(self) -> None:
        db = _db_returning(_make_row())

        customer = await CustomerRepository().update_contact(db, "seller-1", "cust-1", {})

        assert customer is not None
        assert "UPDATE" not in _sql(db)

    async def test_purge_deletes_transactions_first(self) -> None:
        tx_result = MagicMock()
        tx_result.rowcount = 5
        customer_result = MagicMock()
        customer_result.fetchone.return_value = MagicMock()
        db = MagicMock()
        db.execute = AsyncMock(side_effect=[tx_result, customer_result])

        deleted = await CustomerRepository().purge_customer(db, "seller-1", "cust-1")

        assert deleted == 5
        assert "DELETE FROM transactions" in _sql(db, 0)
        assert "DELETE FROM customers" in _sql(db, 1)
