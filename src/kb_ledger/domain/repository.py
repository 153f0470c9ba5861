"""Repository Protocol — dependency inversion for testability.

All lookups and listings require seller_id. Unit tests inject a fake that
conforms to this Protocol; infrastructure provides the PostgreSQL version.
"""

from dataclasses import dataclass
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.kb_customer.domain.models import CustomerTotals
from src.kb_ledger.domain.models import Transaction


@dataclass
class LedgerTotals:
    """Seller-wide sums over the transaction ledger (paise)."""

    total_purchases: int = 0     # purchase face amounts
    total_payments: int = 0      # payment amounts + purchase initial payments
    legacy_interest: int = 0     # stored non-zero `interest` on old records
    total_transactions: int = 0


class TransactionRepositoryProtocol(Protocol):
    async def get_transaction(
        self, db: AsyncSession, seller_id: str, transaction_id: str
    ) -> Transaction | None: ...

    async def insert_transaction(
        self, db: AsyncSession, transaction: Transaction
    ) -> Transaction: ...

    async def update_transaction(
        self, db: AsyncSession, transaction: Transaction
    ) -> Transaction: ...

    async def delete_transaction(
        self, db: AsyncSession, seller_id: str, transaction_id: str
    ) -> bool: ...

    async def list_transactions(
        self,
        db: AsyncSession,
        seller_id: str,
        customer_id: str | None,
        tx_type: str | None,
        limit: int,
        skip: int,
    ) -> list[Transaction]: ...

    async def count_transactions(
        self,
        db: AsyncSession,
        seller_id: str,
        customer_id: str | None,
        tx_type: str | None,
    ) -> int: ...

    async def list_interest_bearing(
        self, db: AsyncSession, seller_id: str, customer_id: str | None
    ) -> list[Transaction]: ...

    async def ledger_totals(
        self, db: AsyncSession, seller_id: str
    ) -> LedgerTotals: ...

    async def customer_totals(
        self, db: AsyncSession, seller_id: str
    ) -> list[CustomerTotals]: ...
