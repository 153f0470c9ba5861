"""Pydantic schemas for the kb_customer API."""

from pydantic import BaseModel, EmailStr, Field

from src.kb_common.paise import paise_to_display
from src.kb_customer.domain.models import Customer

_PHONE_PATTERN = r"^[0-9]{10}$"


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class CreateCustomerRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    phone: str = Field(..., pattern=_PHONE_PATTERN, description="10-digit mobile number")
    email: EmailStr | None = None
    address: str | None = Field(None, max_length=500)
    city: str | None = Field(None, max_length=100)
    state: str | None = Field(None, max_length=100)
    pincode: str | None = Field(None, max_length=10)
    notes: str | None = Field(None, max_length=1000)


class UpdateCustomerRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    phone: str | None = Field(None, pattern=_PHONE_PATTERN)
    email: EmailStr | None = None
    address: str | None = Field(None, max_length=500)
    city: str | None = Field(None, max_length=100)
    state: str | None = Field(None, max_length=100)
    pincode: str | None = Field(None, max_length=10)
    notes: str | None = Field(None, max_length=1000)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class CustomerBalance(BaseModel):
    total_purchase_paise: int
    total_purchase_display: str
    total_paid_paise: int
    total_paid_display: str
    outstanding_balance_paise: int
    outstanding_balance_display: str
    deposit_paise: int
    deposit_display: str

    @classmethod
    def from_domain(cls, customer: Customer) -> "CustomerBalance":
        return cls(
            total_purchase_paise=customer.total_purchase_amount,
            total_purchase_display=paise_to_display(customer.total_purchase_amount),
            total_paid_paise=customer.total_paid_amount,
            total_paid_display=paise_to_display(customer.total_paid_amount),
            outstanding_balance_paise=customer.outstanding_balance,
            outstanding_balance_display=paise_to_display(customer.outstanding_balance),
            deposit_paise=customer.deposit_amount,
            deposit_display=paise_to_display(customer.deposit_amount),
        )


class CustomerResponse(BaseModel):
    id: str
    name: str
    phone: str
    email: str | None
    address: str | None
    city: str | None
    state: str | None
    pincode: str | None
    notes: str | None
    is_active: bool
    balance: CustomerBalance
    total_interest_paise: int
    total_interest_display: str
    amount_due_paise: int          # outstanding balance + accrued interest
    amount_due_display: str
    created_at: str

    @classmethod
    def from_domain(cls, customer: Customer, total_interest: int = 0) -> "CustomerResponse":
        amount_due = customer.outstanding_balance + total_interest
        return cls(
            id=customer.id,
            name=customer.name,
            phone=customer.phone,
            email=customer.email,
            address=customer.address,
            city=customer.city,
            state=customer.state,
            pincode=customer.pincode,
            notes=customer.notes,
            is_active=customer.is_active,
            balance=CustomerBalance.from_domain(customer),
            total_interest_paise=total_interest,
            total_interest_display=paise_to_display(total_interest),
            amount_due_paise=amount_due,
            amount_due_display=paise_to_display(amount_due),
            created_at=customer.created_at.isoformat() if customer.created_at else "",
        )


class CustomerListResponse(BaseModel):
    items: list[CustomerResponse]


class CustomerInterestResponse(BaseModel):
    customer_id: str
    total_interest_paise: int
    total_interest_display: str


class PurgeCustomerResponse(BaseModel):
    customer_id: str
    deleted_transactions: int

