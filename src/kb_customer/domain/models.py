"""Domain models for kb_customer — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Customer:
    id: str
    seller_id: str
    name: str
    phone: str
    total_purchase_amount: int = 0   # paise, sum of purchase face amounts
    total_paid_amount: int = 0       # paise, payments + purchase initial payments
    outstanding_balance: int = 0     # paise, purchases - paid, excludes accrued interest
    deposit_amount: int = 0          # paise, unused credit, always >= 0
    email: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    pincode: str | None = None
    notes: str | None = None
    is_active: bool = True
    version: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def balance_drift(self) -> int:
        """Difference between the cached balance and purchases - paid. Zero when consistent."""
        return self.outstanding_balance - (self.total_purchase_amount - self.total_paid_amount)


@dataclass
class CustomerTotals:
    """Aggregates recomputed from the transaction ledger for one customer."""

    customer_id: str
    total_purchase_amount: int
    total_paid_amount: int

    @property
    def outstanding_balance(self) -> int:
        return self.total_purchase_amount - self.total_paid_amount
