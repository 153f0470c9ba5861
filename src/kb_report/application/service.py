"""ReportService — seller-wide aggregates and ledger/cache reconciliation.

Interest figures are never read from storage: they are recomputed from the
interest-bearing purchases at the moment of the request.
"""

import logging
from collections import defaultdict
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from src.kb_common.database import transactional
from src.kb_common.datetime_utils import utc_now
from src.kb_common.paise import paise_to_display
from src.kb_customer.domain.models import Customer, CustomerTotals
from src.kb_customer.domain.repository import CustomerRepositoryProtocol
from src.kb_customer.infrastructure.persistence import CustomerRepository
from src.kb_ledger.domain.models import total_accrued_interest
from src.kb_ledger.domain.repository import TransactionRepositoryProtocol
from src.kb_ledger.infrastructure.persistence import TransactionRepository
from src.kb_product.domain.repository import ProductRepositoryProtocol
from src.kb_product.infrastructure.persistence import ProductRepository
from src.kb_report.application.schemas import (
    BalanceDrift,
    DashboardStats,
    IntegrityReport,
    ReconcileResponse,
)

logger = logging.getLogger(__name__)


def _drift(customer: Customer, totals: CustomerTotals) -> BalanceDrift | None:
    if (
        customer.total_purchase_amount == totals.total_purchase_amount
        and customer.total_paid_amount == totals.total_paid_amount
        and customer.outstanding_balance == totals.outstanding_balance
    ):
        return None
    return BalanceDrift(
        customer_id=customer.id,
        cached_purchase_paise=customer.total_purchase_amount,
        ledger_purchase_paise=totals.total_purchase_amount,
        cached_paid_paise=customer.total_paid_amount,
        ledger_paid_paise=totals.total_paid_amount,
        cached_outstanding_paise=customer.outstanding_balance,
        ledger_outstanding_paise=totals.outstanding_balance,
    )


class ReportService:
    def __init__(
        self,
        transactions: TransactionRepositoryProtocol | None = None,
        customers: CustomerRepositoryProtocol | None = None,
        products: ProductRepositoryProtocol | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._transactions: TransactionRepositoryProtocol = (
            transactions or TransactionRepository()
        )
        self._customers: CustomerRepositoryProtocol = customers or CustomerRepository()
        self._products: ProductRepositoryProtocol = products or ProductRepository()
        self._clock = clock

    async def customer_total_interest(
        self,
        db: AsyncSession,
        seller_id: str,
        customer_id: str,
        now: datetime | None = None,
    ) -> int:
        purchases = await self._transactions.list_interest_bearing(db, seller_id, customer_id)
        return total_accrued_interest(purchases, now or self._clock())

    async def interest_by_customer(
        self, db: AsyncSession, seller_id: str, now: datetime | None = None
    ) -> dict[str, int]:
        """Accrued interest per customer id, from one scan of the seller's purchases."""
        as_of = now or self._clock()
        totals: dict[str, int] = defaultdict(int)
        for purchase in await self._transactions.list_interest_bearing(db, seller_id, None):
            totals[purchase.customer_id] += purchase.accrued_interest(as_of)
        return dict(totals)

    async def dashboard_stats(
        self, db: AsyncSession, seller_id: str, now: datetime | None = None
    ) -> DashboardStats:
        customers = await self._customers.list_customers(db, seller_id, True)
        ledger = await self._transactions.ledger_totals(db, seller_id)
        purchases = await self._transactions.list_interest_bearing(db, seller_id, None)
        total_products = await self._products.count_active_products(db, seller_id)

        total_outstanding = sum(c.outstanding_balance for c in customers)
        total_interest = (
            total_accrued_interest(purchases, now or self._clock()) + ledger.legacy_interest
        )
        return DashboardStats(
            total_customers=len(customers),
            total_active_customers=sum(1 for c in customers if c.outstanding_balance > 0),
            total_products=total_products,
            total_purchases_paise=ledger.total_purchases,
            total_payments_paise=ledger.total_payments,
            total_outstanding_paise=total_outstanding,
            total_interest_paise=total_interest,
            total_transactions=ledger.total_transactions,
            total_purchases_display=paise_to_display(ledger.total_purchases),
            total_payments_display=paise_to_display(ledger.total_payments),
            total_outstanding_display=paise_to_display(total_outstanding),
            total_interest_display=paise_to_display(total_interest),
        )

    async def verify_balances(self, db: AsyncSession, seller_id: str) -> IntegrityReport:
        """Compare each customer's cached totals with totals recomputed from the ledger."""
        customers = await self._customers.list_customers(db, seller_id, None)
        ledger = {t.customer_id: t for t in await self._transactions.customer_totals(db, seller_id)}

        drifted: list[BalanceDrift] = []
        for customer in customers:
            totals = ledger.get(customer.id, CustomerTotals(customer.id, 0, 0))
            drift = _drift(customer, totals)
            if drift is not None:
                logger.error(
                    "Balance drift for customer %s: cached outstanding=%d ledger=%d",
                    customer.id, drift.cached_outstanding_paise, drift.ledger_outstanding_paise,
                )
                drifted.append(drift)
        return IntegrityReport(customers_checked=len(customers), drifted=drifted)

    async def reconcile(self, db: AsyncSession, seller_id: str) -> ReconcileResponse:
        """Rewrite drifted customer aggregates from the transaction ledger."""
        report = await self.verify_balances(db, seller_id)
        repaired: list[str] = []
        async with transactional(db, "reconcile"):
            for drift in report.drifted:
                customer = await self._customers.get_customer_for_update(
                    db, seller_id, drift.customer_id
                )
                if customer is None:
                    continue
                await self._customers.save_balances(
                    db,
                    replace(
                        customer,
                        total_purchase_amount=drift.ledger_purchase_paise,
                        total_paid_amount=drift.ledger_paid_paise,
                        outstanding_balance=drift.ledger_outstanding_paise,
                    ),
                )
                repaired.append(customer.id)
        if repaired:
            logger.info("Reconciled %d customers for seller %s", len(repaired), seller_id)
        return ReconcileResponse(
            customers_checked=report.customers_checked, customers_repaired=repaired
        )
