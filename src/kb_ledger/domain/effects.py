"""Balance effect of a single ledger entry on a customer aggregate.

Create applies an entry with sign=+1, delete with sign=-1, and update is a
-1 of the old entry followed by a +1 of the new one. Because all three go
through apply_effect, outstanding_balance == total_purchase_amount -
total_paid_amount holds after every mutation.
"""

from dataclasses import replace
from typing import Literal

from src.kb_common.enums import TransactionType
from src.kb_customer.domain.models import Customer
from src.kb_ledger.domain.models import Transaction

Sign = Literal[1, -1]


def apply_effect(customer: Customer, transaction: Transaction, sign: Sign) -> Customer:
    """Return a copy of `customer` with the entry applied (+1) or reversed (-1)."""
    if sign not in (1, -1):
        raise ValueError(f"sign must be +1 or -1, got {sign}")

    if transaction.type == TransactionType.PURCHASE:
        return replace(
            customer,
            total_purchase_amount=customer.total_purchase_amount + sign * transaction.amount,
            total_paid_amount=customer.total_paid_amount + sign * transaction.initial_payment,
            outstanding_balance=(
                customer.outstanding_balance + sign * transaction.financed_principal
            ),
        )
    if transaction.type == TransactionType.PAYMENT:
        return replace(
            customer,
            total_paid_amount=customer.total_paid_amount + sign * transaction.amount,
            outstanding_balance=customer.outstanding_balance - sign * transaction.amount,
        )
    raise ValueError(f"Unknown transaction type: {transaction.type}")
