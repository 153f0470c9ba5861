"""Pydantic schemas for kb_report."""

from pydantic import BaseModel, computed_field


class DashboardStats(BaseModel):
    total_customers: int
    total_active_customers: int     # active customers that owe money
    total_products: int
    total_purchases_paise: int
    total_payments_paise: int
    total_outstanding_paise: int
    total_interest_paise: int
    total_transactions: int
    total_purchases_display: str
    total_payments_display: str
    total_outstanding_display: str
    total_interest_display: str


class BalanceDrift(BaseModel):
    customer_id: str
    cached_purchase_paise: int
    ledger_purchase_paise: int
    cached_paid_paise: int
    ledger_paid_paise: int
    cached_outstanding_paise: int
    ledger_outstanding_paise: int


class IntegrityReport(BaseModel):
    customers_checked: int
    drifted: list[BalanceDrift]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def consistent(self) -> bool:
        return not self.drifted


class ReconcileResponse(BaseModel):
    customers_checked: int
    customers_repaired: list[str]
