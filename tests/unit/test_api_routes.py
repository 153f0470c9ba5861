"""HTTP surface through ASGITransport with dependency overrides (no database)."""

from collections.abc import Iterator

import pytest
from httpx import AsyncClient

from src.kb_common.database import get_db_session
from src.kb_common.tenant import SellerContext
from src.kb_customer.api import router as customer_router
from src.kb_customer.application.service import CustomerApplicationService
from src.kb_gateway.auth.dependencies import get_current_seller
from src.kb_ledger.api import router as ledger_router
from src.kb_ledger.application.service import LedgerService
from src.kb_report.api import router as report_router
from src.kb_report.application.service import ReportService
from src.main import app
from tests.unit.fakes import (
    Clock,
    FakeCustomerRepository,
    FakeNotifier,
    FakeProductRepository,
    FakeSession,
    FakeTransactionRepository,
    Store,
    add_customer,
)

SELLER = SellerContext(id="seller-1", name="Amit", business_name="Sharma Stores")


@pytest.fixture
def store(monkeypatch: pytest.MonkeyPatch) -> Iterator[Store]:
    store = Store()
    transactions = FakeTransactionRepository(store)
    customers = FakeCustomerRepository(store)
    products = FakeProductRepository(store)
    reports = ReportService(transactions, customers, products, clock=Clock())
    ledger = LedgerService(transactions, customers, products, FakeNotifier(), clock=Clock())

    monkeypatch.setattr(ledger_router, "_service", ledger)
    monkeypatch.setattr(ledger_router, "_reports", reports)
    monkeypatch.setattr(customer_router, "_ledger", ledger)
    monkeypatch.setattr(
        customer_router, "_service", CustomerApplicationService(customers, reports)
    )
    monkeypatch.setattr(report_router, "_service", reports)

    async def _session() -> FakeSession:
        return FakeSession(store)

    app.dependency_overrides[get_current_seller] = lambda: SELLER
    app.dependency_overrides[get_db_session] = _session
    yield store
    app.dependency_overrides.clear()


class TestTransactionRoutes:
    async def test_create_purchase(self, client: AsyncClient, store: Store) -> None:
        customer = add_customer(store)

        resp = await client.post(
            "/api/v1/transactions",
            json={
                "customer_id": customer.id,
                "type": "purchase",
                "amount_paise": 100000,
                "initial_payment_paise": 20000,
            },
        )

        assert resp.status_code == 201
        body = resp.json()
        assert body["code"] == 0
        assert body["data"]["transaction"]["balance_after_paise"] == 80000
        assert body["data"]["customer_balance"]["outstanding_balance_display"] == "₹800.00"
        assert body["request_id"] == resp.headers["X-Request-ID"]

    async def test_overpayment_is_422(self, client: AsyncClient, store: Store) -> None:
        customer = add_customer(store, total_purchase_amount=1000, outstanding_balance=1000)

        resp = await client.post(
            "/api/v1/transactions",
            json={"customer_id": customer.id, "type": "payment", "amount_paise": 1001},
        )

        assert resp.status_code == 422
        assert resp.json()["code"] == 4003
        assert resp.json()["data"] is None
        assert store.transactions == {}

    async def test_zero_amount_fails_validation(self, client: AsyncClient, store: Store) -> None:
        resp = await client.post(
            "/api/v1/transactions",
            json={"customer_id": "cust-1", "type": "purchase", "amount_paise": 0},
        )

        assert resp.status_code == 422

    async def test_unknown_transaction_is_404(self, client: AsyncClient, store: Store) -> None:
        resp = await client.get("/api/v1/transactions/tx-missing")

        assert resp.status_code == 404
        assert resp.json()["code"] == 4001

    async def test_update_and_delete(self, client: AsyncClient, store: Store) -> None:
        customer = add_customer(store)
        created = await client.post(
            "/api/v1/transactions",
            json={"customer_id": customer.id, "type": "purchase", "amount_paise": 50000},
        )
        tx_id = created.json()["data"]["transaction"]["id"]

        updated = await client.put(f"/api/v1/transactions/{tx_id}", json={"amount_paise": 30000})
        assert updated.json()["data"]["customer_balance"]["outstanding_balance_paise"] == 30000

        deleted = await client.delete(f"/api/v1/transactions/{tx_id}")
        assert deleted.status_code == 200
        assert deleted.json()["data"]["customer_balance"]["outstanding_balance_paise"] == 0

    async def test_list_with_filters(self, client: AsyncClient, store: Store) -> None:
        customer = add_customer(store)
        await client.post(
            "/api/v1/transactions",
            json={"customer_id": customer.id, "type": "purchase", "amount_paise": 500},
        )

        resp = await client.get(
            "/api/v1/transactions", params={"customer_id": customer.id, "type": "purchase"}
        )

        data = resp.json()["data"]
        assert data["total"] == 1
        assert data["limit"] == 50

    async def test_interest_preview(self, client: AsyncClient, store: Store) -> None:
        resp = await client.post(
            "/api/v1/transactions/interest-preview",
            json={"principal_paise": 100000, "interest_rate": "12", "duration": 6},
        )

        assert resp.json()["data"]["interest_paise"] == 6000

    async def test_dashboard(self, client: AsyncClient, store: Store) -> None:
        add_customer(store, total_purchase_amount=700, outstanding_balance=700)

        resp = await client.get("/api/v1/transactions/stats/dashboard")

        assert resp.json()["data"]["total_outstanding_paise"] == 700

    async def test_send_notification(self, client: AsyncClient, store: Store) -> None:
        customer = add_customer(store, total_purchase_amount=700, outstanding_balance=700)

        resp = await client.post(f"/api/v1/transactions/{customer.id}/send-notification")

        assert resp.json()["data"]["sent"] is True
        assert resp.json()["message"] == "Notification sent"


class TestCustomerRoutes:
    async def test_add_and_list(self, client: AsyncClient, store: Store) -> None:
        created = await client.post(
            "/api/v1/customers", json={"name": "Ravi", "phone": "9876543210"}
        )
        assert created.status_code == 201

        listing = await client.get("/api/v1/customers", params={"is_active": "all"})

        assert [c["name"] for c in listing.json()["data"]["items"]] == ["Ravi"]

    async def test_bad_phone(self, client: AsyncClient, store: Store) -> None:
        resp = await client.post("/api/v1/customers", json={"name": "Ravi", "phone": "12345"})

        assert resp.status_code == 422

    async def test_duplicate_phone_is_409(self, client: AsyncClient, store: Store) -> None:
        add_customer(store, phone="9876543210")

        resp = await client.post("/api/v1/customers", json={"name": "Ravi", "phone": "9876543210"})

        assert resp.status_code == 409
        assert resp.json()["code"] == 2002

    async def test_balance_statement(self, client: AsyncClient, store: Store) -> None:
        customer = add_customer(store)
        await client.post(
            "/api/v1/transactions",
            json={"customer_id": customer.id, "type": "purchase", "amount_paise": 2500},
        )

        resp = await client.get(f"/api/v1/customers/{customer.id}/balance")

        data = resp.json()["data"]
        assert data["customer"]["balance"]["outstanding_balance_paise"] == 2500
        assert len(data["transactions"]) == 1


class TestReportRoutes:
    async def test_integrity(self, client: AsyncClient, store: Store) -> None:
        add_customer(store)

        resp = await client.get("/api/v1/reports/integrity")

        assert resp.json()["data"]["consistent"] is True


class TestAuth:
    async def test_missing_token_is_401(self, client: AsyncClient) -> None:
        resp = await client.get("/api/v1/transactions")

        assert resp.status_code == 401


async def test_health(client: AsyncClient) -> None:
    resp = await client.get("/health")

    assert resp.json()["status"] == "ok"
