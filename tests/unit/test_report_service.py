"""ReportService against the in-memory repositories."""

from datetime import timedelta
from decimal import Decimal

from src.kb_ledger.domain.models import Transaction
from src.kb_report.application.service import ReportService
from tests.unit.fakes import (
    NOW,
    Clock,
    FakeCustomerRepository,
    FakeProductRepository,
    FakeSession,
    FakeTransactionRepository,
    Store,
    add_customer,
    add_product,
)


def _service(store: Store, clock: Clock | None = None) -> ReportService:
    return ReportService(
        transactions=FakeTransactionRepository(store),
        customers=FakeCustomerRepository(store),
        products=FakeProductRepository(store),
        clock=clock or Clock(),
    )


def _add_tx(store: Store, customer_id: str, tx_type: str, amount: int, **kwargs) -> Transaction:
    tx = Transaction(
        id=store.next_id("tx"),
        seller_id=kwargs.pop("seller_id", "seller-1"),
        customer_id=customer_id,
        type=tx_type,
        amount=amount,
        date=NOW,
        **kwargs,
    )
    store.transactions[tx.id] = tx
    return tx


def _interest_terms(days_ago: int = 365) -> dict:
    return dict(
        interest_rate=Decimal("12"),
        interest_duration=0,
        interest_time_unit="days",
        interest_start_date=NOW - timedelta(days=days_ago),
    )


class TestCustomerTotalInterest:
    async def test_sums_accrued_interest(self) -> None:
        store = Store()
        customer = add_customer(store)
        _add_tx(store, customer.id, "purchase", 100000, **_interest_terms())
        _add_tx(store, customer.id, "purchase", 50000, initial_payment=0, **_interest_terms())
        _add_tx(store, customer.id, "purchase", 70000)

        total = await _service(store).customer_total_interest(
            FakeSession(store), "seller-1", customer.id
        )

        assert total == 12000 + 6000

    async def test_interest_on_financed_part_only(self) -> None:
        store = Store()
        customer = add_customer(store)
        _add_tx(store, customer.id, "purchase", 100000, initial_payment=50000, **_interest_terms())

        total = await _service(store).customer_total_interest(
            FakeSession(store), "seller-1", customer.id
        )

        assert total == 6000

    async def test_interest_by_customer(self) -> None:
        store = Store()
        first = add_customer(store)
        second = add_customer(store, phone="9000000000")
        _add_tx(store, first.id, "purchase", 100000, **_interest_terms())
        _add_tx(store, second.id, "purchase", 100000, **_interest_terms(days_ago=0))

        totals = await _service(store).interest_by_customer(FakeSession(store), "seller-1")

        assert totals == {first.id: 12000, second.id: 0}


class TestDashboardStats:
    async def test_aggregates(self) -> None:
        store = Store()
        owing = add_customer(
            store, total_purchase_amount=100000, total_paid_amount=20000, outstanding_balance=80000
        )
        settled = add_customer(store, phone="9000000000")
        add_customer(store, phone="9111111111", is_active=False, outstanding_balance=999)
        add_customer(store, seller_id="seller-2", phone="9222222222", outstanding_balance=5)
        add_product(store)
        add_product(store, name="Dal", is_active=False)
        _add_tx(store, owing.id, "purchase", 100000, initial_payment=20000, **_interest_terms())
        _add_tx(store, settled.id, "purchase", 3000, interest=150)
        _add_tx(store, settled.id, "payment", 3000)
        _add_tx(store, "other", "purchase", 777, seller_id="seller-2")

        stats = await _service(store).dashboard_stats(FakeSession(store), "seller-1")

        assert stats.total_customers == 2
        assert stats.total_active_customers == 1
        assert stats.total_products == 1
        assert stats.total_purchases_paise == 103000
        assert stats.total_payments_paise == 23000
        assert stats.total_outstanding_paise == 80000
        # 12% of 800.00 for a year, plus the legacy stored 1.50
        assert stats.total_interest_paise == 9600 + 150
        assert stats.total_transactions == 3
        assert stats.total_outstanding_display == "₹800.00"


class TestReconciliation:
    async def test_consistent_ledger(self) -> None:
        store = Store()
        customer = add_customer(
            store, total_purchase_amount=5000, total_paid_amount=1000, outstanding_balance=4000
        )
        _add_tx(store, customer.id, "purchase", 5000, initial_payment=1000)

        report = await _service(store).verify_balances(FakeSession(store), "seller-1")

        assert report.customers_checked == 1
        assert report.consistent

    async def test_drift_is_reported_and_repaired(self) -> None:
        store = Store()
        customer = add_customer(
            store, total_purchase_amount=5000, total_paid_amount=0, outstanding_balance=5000
        )
        _add_tx(store, customer.id, "purchase", 5000)
        _add_tx(store, customer.id, "payment", 2000)
        db = FakeSession(store)
        svc = _service(store)

        report = await svc.verify_balances(db, "seller-1")
        (drift,) = report.drifted
        assert drift.cached_outstanding_paise == 5000
        assert drift.ledger_outstanding_paise == 3000

        result = await svc.reconcile(db, "seller-1")

        assert result.customers_repaired == [customer.id]
        repaired = store.customers[customer.id]
        assert repaired.total_paid_amount == 2000
        assert repaired.outstanding_balance == 3000
        assert repaired.balance_drift == 0
        assert db.commits == 1
        assert (await svc.verify_balances(db, "seller-1")).consistent
