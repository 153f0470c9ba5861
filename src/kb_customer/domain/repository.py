"""Repository Protocol — dependency inversion for testability.

Every method takes seller_id: a customer is only ever visible to the seller
that owns it. Unit tests inject a fake conforming to this Protocol; the
infrastructure layer provides the PostgreSQL implementation.
"""

from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.kb_customer.domain.models import Customer


class CustomerRepositoryProtocol(Protocol):
    async def get_customer(
        self, db: AsyncSession, seller_id: str, customer_id: str
    ) -> Customer | None: ...

    async def get_customer_for_update(
        self, db: AsyncSession, seller_id: str, customer_id: str
    ) -> Customer | None: ...

    async def get_customer_by_phone(
        self, db: AsyncSession, seller_id: str, phone: str
    ) -> Customer | None: ...

    async def list_customers(
        self, db: AsyncSession, seller_id: str, is_active: bool | None
    ) -> list[Customer]: ...

    async def create_customer(
        self, db: AsyncSession, customer: Customer
    ) -> Customer: ...

    async def update_contact(
        self,
        db: AsyncSession,
        seller_id: str,
        customer_id: str,
        fields: dict[str, Any],
    ) -> Customer | None: ...

    async def save_balances(
        self, db: AsyncSession, customer: Customer
    ) -> Customer: ...

    async def set_active(
        self, db: AsyncSession, seller_id: str, customer_id: str, is_active: bool
    ) -> Customer | None: ...

    async def purge_customer(
        self, db: AsyncSession, seller_id: str, customer_id: str
    ) -> int | None: ...
