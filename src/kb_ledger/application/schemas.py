"""Pydantic schemas for the kb_ledger API.

Request bodies carry amounts as int paise; every response amount has a
matching *_display string for the UI.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from src.kb_common.enums import InterestTimeUnit, TransactionType
from src.kb_common.paise import paise_to_display
from src.kb_customer.application.schemas import CustomerBalance, CustomerResponse
from src.kb_ledger.domain.models import Transaction, TransactionLine

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class TransactionLineRequest(BaseModel):
    product_id: str
    quantity: Decimal = Field(..., gt=0)
    price_per_unit_paise: int = Field(..., ge=0)
    # Defaults to quantity x price_per_unit when omitted
    total_price_paise: int | None = Field(None, ge=0)


class CreateTransactionRequest(BaseModel):
    customer_id: str
    type: TransactionType
    amount_paise: int = Field(..., gt=0, description="Face value in paise")
    initial_payment_paise: int = Field(0, ge=0, description="Purchases only")
    apply_interest: bool = False
    interest_rate: Decimal | None = Field(None, description="Percent per year")
    interest_duration: int | None = Field(None, description="Interest-free period length")
    interest_time_unit: InterestTimeUnit = InterestTimeUnit.MONTHS
    lines: list[TransactionLineRequest] = Field(default_factory=list)
    description: str | None = Field(None, max_length=500)
    notes: str | None = Field(None, max_length=1000)
    send_sms: bool = False


class UpdateTransactionRequest(BaseModel):
    amount_paise: int = Field(..., gt=0)
    description: str | None = Field(None, max_length=500)
    notes: str | None = Field(None, max_length=1000)
    send_sms: bool = False


class InterestPreviewRequest(BaseModel):
    principal_paise: int = Field(..., ge=0)
    interest_rate: Decimal = Field(..., ge=0)
    duration: int = Field(..., ge=0)
    time_unit: InterestTimeUnit = InterestTimeUnit.MONTHS


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


class TransactionLineView(BaseModel):
    id: str | None
    product_id: str
    name: str
    quantity: str
    price_per_unit_paise: int
    total_price_paise: int
    total_price_display: str

    @classmethod
    def from_domain(cls, line: TransactionLine) -> "TransactionLineView":
        return cls(
            id=line.id,
            product_id=line.product_id,
            name=line.name,
            quantity=str(line.quantity),
            price_per_unit_paise=line.price_per_unit,
            total_price_paise=line.total_price,
            total_price_display=paise_to_display(line.total_price),
        )


class TransactionView(BaseModel):
    id: str
    customer_id: str
    type: str
    amount_paise: int
    amount_display: str
    initial_payment_paise: int
    interest_paise: int
    interest_display: str
    interest_rate: str | None
    interest_duration: int | None
    interest_time_unit: str | None
    interest_start_date: str | None
    description: str | None
    notes: str | None
    balance_after_paise: int
    balance_after_display: str
    date: str | None
    lines: list[TransactionLineView]
    created_at: str | None
    updated_at: str | None

    @classmethod
    def from_domain(
        cls, transaction: Transaction, as_of: datetime | None = None
    ) -> "TransactionView":
        # Live accrual for interest-bearing purchases; legacy stored value otherwise
        if transaction.bears_interest:
            interest = transaction.accrued_interest(as_of)
        else:
            interest = transaction.interest or 0
        return cls(
            id=transaction.id or "",
            customer_id=transaction.customer_id,
            type=transaction.type,
            amount_paise=transaction.amount,
            amount_display=paise_to_display(transaction.amount),
            initial_payment_paise=transaction.initial_payment,
            interest_paise=interest,
            interest_display=paise_to_display(interest),
            interest_rate=(
                str(transaction.interest_rate)
                if transaction.interest_rate is not None
                else None
            ),
            interest_duration=transaction.interest_duration,
            interest_time_unit=transaction.interest_time_unit,
            interest_start_date=_iso(transaction.interest_start_date),
            description=transaction.description,
            notes=transaction.notes,
            balance_after_paise=transaction.balance_after_transaction,
            balance_after_display=paise_to_display(transaction.balance_after_transaction),
            date=_iso(transaction.date),
            lines=[TransactionLineView.from_domain(line) for line in transaction.lines],
            created_at=_iso(transaction.created_at),
            updated_at=_iso(transaction.updated_at),
        )


class NotificationResponse(BaseModel):
    sent: bool
    channel: str
    message_id: str | None = None
    error: str | None = None


class TransactionResult(BaseModel):
    transaction: TransactionView
    customer_balance: CustomerBalance
    notification: NotificationResponse | None = None


class DeleteTransactionResponse(BaseModel):
    transaction_id: str
    customer_balance: CustomerBalance


class TransactionListResponse(BaseModel):
    items: list[TransactionView]
    total: int
    limit: int
    skip: int


class InterestPreviewResponse(BaseModel):
    principal_paise: int
    interest_paise: int
    interest_display: str
    total_paise: int
    total_display: str
    interest_start_date: str


class CustomerStatementResponse(BaseModel):
    """Customer aggregates plus the ledger entries behind them, newest first."""

    customer: CustomerResponse
    transactions: list[TransactionView]
    total_transactions: int
