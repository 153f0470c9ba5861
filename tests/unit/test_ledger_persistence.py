"""Unit tests for TransactionRepository using a mocked AsyncSession."""

from datetime import UTC, datetime
from decimal import Decimal
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.kb_common.errors import InternalError
from src.kb_ledger.domain.models import Transaction, TransactionLine
from src.kb_ledger.infrastructure.persistence import TransactionRepository


def _make_row(**kwargs: Any) -> MagicMock:
    row = MagicMock()
    row.id = kwargs.get("id", "tx-1")
    row.seller_id = kwargs.get("seller_id", "seller-1")
    row.customer_id = kwargs.get("customer_id", "cust-1")
    row.type = kwargs.get("type", "purchase")
    row.amount = kwargs.get("amount", 100000)
    row.initial_payment = kwargs.get("initial_payment", 20000)
    row.interest = kwargs.get("interest", 0)
    row.interest_rate = kwargs.get("interest_rate")
    row.interest_duration = kwargs.get("interest_duration")
    row.interest_time_unit = kwargs.get("interest_time_unit")
    row.interest_start_date = kwargs.get("interest_start_date")
    row.description = kwargs.get("description")
    row.notes = kwargs.get("notes")
    row.balance_after_transaction = kwargs.get("balance_after_transaction", 80000)
    row.date = kwargs.get("date", datetime(2026, 1, 15, tzinfo=UTC))
    row.created_at = kwargs.get("created_at", datetime(2026, 1, 15, tzinfo=UTC))
    row.updated_at = kwargs.get("updated_at", datetime(2026, 1, 15, tzinfo=UTC))
    return row


def _result(rows: list[Any] | None = None, one: Any = None, scalar: Any = None) -> MagicMock:
    result = MagicMock()
    result.fetchall.return_value = rows or []
    result.fetchone.return_value = one
    result.scalar_one.return_value = scalar
    return result


class TestTransactionRepository:
    async def test_get_transaction_attaches_lines(self) -> None:
        line_row = MagicMock()
        line_row.id = 7
        line_row.transaction_id = "tx-1"
        line_row.product_id = "prod-1"
        line_row.name = "Sugar"
        line_row.quantity = Decimal("2.000")
        line_row.price_per_unit = 4500
        line_row.total_price = 9000
        db = MagicMock()
        db.execute = AsyncMock(side_effect=[_result(one=_make_row()), _result(rows=[line_row])])

        tx = await TransactionRepository().get_transaction(db, "seller-1", "tx-1")

        assert tx is not None
        assert tx.amount == 100000
        assert tx.lines == [
            TransactionLine(
                id="7",
                product_id="prod-1",
                name="Sugar",
                quantity=Decimal("2.000"),
                price_per_unit=4500,
                total_price=9000,
            )
        ]
        params = db.execute.call_args_list[0].args[1]
        assert params == {"seller_id": "seller-1", "transaction_id": "tx-1"}

    async def test_get_transaction_not_found(self) -> None:
        db = MagicMock()
        db.execute = AsyncMock(return_value=_result(one=None))

        assert await TransactionRepository().get_transaction(db, "seller-1", "nope") is None
        db.execute.assert_awaited_once()

    async def test_insert_writes_lines(self) -> None:
        db = MagicMock()
        db.execute = AsyncMock(side_effect=[_result(one=_make_row()), _result(scalar=11)])
        tx = Transaction(
            id=None,
            seller_id="seller-1",
            customer_id="cust-1",
            type="purchase",
            amount=100000,
            initial_payment=20000,
            balance_after_transaction=80000,
            lines=[TransactionLine("prod-1", "Sugar", Decimal("2"), 4500, 9000)],
        )

        saved = await TransactionRepository().insert_transaction(db, tx)

        assert saved.id == "tx-1"
        assert saved.lines[0].id == "11"
        insert_params = db.execute.call_args_list[0].args[1]
        assert insert_params["seller_id"] == "seller-1"
        assert "interest" not in insert_params
        line_params = db.execute.call_args_list[1].args[1]
        assert line_params["transaction_id"] == "tx-1"

    async def test_insert_without_row_raises(self) -> None:
        db = MagicMock()
        db.execute = AsyncMock(return_value=_result(one=None))
        tx = Transaction(
            id=None, seller_id="seller-1", customer_id="cust-1", type="payment", amount=1
        )

        with pytest.raises(InternalError):
            await TransactionRepository().insert_transaction(db, tx)

    async def test_delete_reports_missing_rows(self) -> None:
        db = MagicMock()
        db.execute = AsyncMock(return_value=_result(one=None))

        assert await TransactionRepository().delete_transaction(db, "seller-1", "tx-1") is False

    async def test_list_passes_filters_and_paging(self) -> None:
        db = MagicMock()
        db.execute = AsyncMock(side_effect=[_result(rows=[_make_row()]), _result(rows=[])])

        items = await TransactionRepository().list_transactions(
            db, "seller-1", "cust-1", "purchase", 20, 40
        )

        assert len(items) == 1
        params = db.execute.call_args_list[0].args[1]
        assert params == {
            "seller_id": "seller-1",
            "customer_id": "cust-1",
            "tx_type": "purchase",
            "limit": 20,
            "skip": 40,
        }

    async def test_ledger_totals(self) -> None:
        row = MagicMock()
        row.total_purchases = 300000
        row.total_payments = 120000
        row.legacy_interest = 500
        row.total_transactions = 7
        db = MagicMock()
        db.execute = AsyncMock(return_value=_result(one=row))

        totals = await TransactionRepository().ledger_totals(db, "seller-1")

        assert totals.total_purchases == 300000
        assert totals.total_payments == 120000
        assert totals.legacy_interest == 500
        assert totals.total_transactions == 7

    async def test_customer_totals(self) -> None:
        row = MagicMock()
        row.customer_id = "cust-1"
        row.total_purchase_amount = 5000
        row.total_paid_amount = 1500
        db = MagicMock()
        db.execute = AsyncMock(return_value=_result(rows=[row]))

        (totals,) = await TransactionRepository().customer_totals(db, "seller-1")

        assert totals.outstanding_balance == 3500
