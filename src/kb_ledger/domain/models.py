"""Domain models for kb_ledger — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from src.kb_common.enums import TransactionType
from src.kb_ledger.domain.interest import deferred_interest


@dataclass
class TransactionLine:
    """One informational product line on a purchase. Not used in balance math."""

    product_id: str
    name: str
    quantity: Decimal
    price_per_unit: int       # paise
    total_price: int          # paise
    id: str | None = None


@dataclass
class Transaction:
    id: str | None
    seller_id: str
    customer_id: str
    type: str                              # TransactionType value
    amount: int                            # paise, face value
    initial_payment: int = 0               # paise, purchase only
    interest: int = 0                      # paise, legacy stored value; 0 on every write
    interest_rate: Decimal | None = None   # percent per year
    interest_duration: int | None = None
    interest_time_unit: str | None = None  # InterestTimeUnit value
    interest_start_date: datetime | None = None
    description: str | None = None
    notes: str | None = None
    balance_after_transaction: int = 0     # paise, customer balance snapshot
    date: datetime | None = None
    lines: list[TransactionLine] = field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_purchase(self) -> bool:
        return self.type == TransactionType.PURCHASE

    @property
    def financed_principal(self) -> int:
        """The part of a purchase that was not paid up front."""
        return self.amount - self.initial_payment

    @property
    def bears_interest(self) -> bool:
        return (
            self.is_purchase
            and bool(self.interest_rate)
            and self.interest_start_date is not None
        )

    def accrued_interest(self, as_of: datetime | None = None) -> int:
        """Interest owed on this purchase right now. Never read from storage."""
        if not self.bears_interest:
            return 0
        return deferred_interest(
            self.financed_principal,
            self.interest_rate,
            self.interest_start_date,
            self.interest_time_unit,
            as_of,
        )


def total_accrued_interest(
    transactions: list[Transaction], as_of: datetime | None = None
) -> int:
    """Sum of live accrued interest over a set of ledger entries (paise)."""
    return sum(t.accrued_interest(as_of) for t in transactions)
