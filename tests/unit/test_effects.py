"""Tests for apply_effect: the one place balances change."""

import pytest

from src.kb_customer.domain.models import Customer
from src.kb_ledger.domain.effects import apply_effect
from src.kb_ledger.domain.models import Transaction


def _customer(purchase: int = 0, paid: int = 0) -> Customer:
    return Customer(
        id="cust-1",
        seller_id="seller-1",
        name="Ravi",
        phone="9876543210",
        total_purchase_amount=purchase,
        total_paid_amount=paid,
        outstanding_balance=purchase - paid,
    )


def _tx(tx_type: str, amount: int, initial: int = 0) -> Transaction:
    return Transaction(
        id="tx-1",
        seller_id="seller-1",
        customer_id="cust-1",
        type=tx_type,
        amount=amount,
        initial_payment=initial,
    )


class TestApplyEffect:
    def test_purchase_with_initial_payment(self) -> None:
        result = apply_effect(_customer(), _tx("purchase", 100000, 20000), 1)
        assert result.total_purchase_amount == 100000
        assert result.total_paid_amount == 20000
        assert result.outstanding_balance == 80000

    def test_payment(self) -> None:
        result = apply_effect(_customer(100000, 20000), _tx("payment", 30000), 1)
        assert result.total_paid_amount == 50000
        assert result.outstanding_balance == 50000

    def test_reversal_includes_initial_payment(self) -> None:
        start = _customer(5000, 1000)
        tx = _tx("purchase", 100000, 20000)
        assert apply_effect(apply_effect(start, tx, 1), tx, -1) == start

    def test_reversal_has_no_floor(self) -> None:
        result = apply_effect(_customer(0, 0), _tx("purchase", 1000), -1)
        assert result.outstanding_balance == -1000
        assert result.balance_drift == 0

    def test_input_is_not_mutated(self) -> None:
        customer = _customer(1000, 0)
        apply_effect(customer, _tx("payment", 500), 1)
        assert customer.outstanding_balance == 1000

    def test_bad_sign(self) -> None:
        with pytest.raises(ValueError, match="sign"):
            apply_effect(_customer(), _tx("purchase", 1), 0)  # type: ignore[arg-type]

    def test_unknown_type(self) -> None:
        with pytest.raises(ValueError, match="refund"):
            apply_effect(_customer(), _tx("refund", 1), 1)
