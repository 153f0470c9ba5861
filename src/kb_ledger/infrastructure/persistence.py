"""TransactionRepository — concrete implementation of TransactionRepositoryProtocol.

Raw text() SQL, every statement scoped by seller_id.
asyncpg NULL parameter pattern: CAST(:param AS TYPE) IS NULL required for None values.

Transaction ownership: the CALLER (LedgerService) commits or rolls back, so a
customer balance write and the ledger row write land in one DB transaction.
"""

from collections import defaultdict

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.kb_common.errors import InternalError
from src.kb_customer.domain.models import CustomerTotals
from src.kb_ledger.domain.models import Transaction, TransactionLine
from src.kb_ledger.domain.repository import LedgerTotals

_TX_COLUMNS = """
    id, seller_id, customer_id, type, amount, initial_payment, interest,
    interest_rate, interest_duration, interest_time_unit, interest_start_date,
    description, notes, balance_after_transaction, date, created_at, updated_at
"""

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_GET_TX_SQL = text(f"""
    SELECT {_TX_COLUMNS}
    FROM transactions
    WHERE id = :transaction_id AND seller_id = :seller_id
""")

_INSERT_TX_SQL = text(f"""
    INSERT INTO transactions
        (seller_id, customer_id, type, amount, initial_payment, interest,
         interest_rate, interest_duration, interest_time_unit, interest_start_date,
         description, notes, balance_after_transaction, date)
    VALUES
        (:seller_id, :customer_id, :type, :amount, :initial_payment, 0,
         :interest_rate, :interest_duration, :interest_time_unit, :interest_start_date,
         :description, :notes, :balance_after_transaction, :date)
    RETURNING {_TX_COLUMNS}
""")

_INSERT_LINE_SQL = text("""
    INSERT INTO transaction_lines
        (transaction_id, product_id, name, quantity, price_per_unit, total_price)
    VALUES
        (:transaction_id, :product_id, :name, :quantity, :price_per_unit, :total_price)
    RETURNING id
""")

_UPDATE_TX_SQL = text(f"""
    UPDATE transactions
    SET amount = :amount,
        description = :description,
        notes = :notes,
        balance_after_transaction = :balance_after_transaction,
        updated_at = NOW()
    WHERE id = :transaction_id AND seller_id = :seller_id
    RETURNING {_TX_COLUMNS}
""")

_DELETE_TX_SQL = text("""
    DELETE FROM transactions
    WHERE id = :transaction_id AND seller_id = :seller_id
    RETURNING id
""")

_LIST_TX_SQL = text(f"""
    SELECT {_TX_COLUMNS}
    FROM transactions
    WHERE seller_id = :seller_id
      AND (CAST(:customer_id AS TEXT) IS NULL OR customer_id = CAST(:customer_id AS TEXT))
      AND (CAST(:tx_type AS TEXT) IS NULL OR type = CAST(:tx_type AS TEXT))
    ORDER BY date DESC, id DESC
    LIMIT :limit OFFSET :skip
""")

_COUNT_TX_SQL = text("""
    SELECT COUNT(*)
    FROM transactions
    WHERE seller_id = :seller_id
      AND (CAST(:customer_id AS TEXT) IS NULL OR customer_id = CAST(:customer_id AS TEXT))
      AND (CAST(:tx_type AS TEXT) IS NULL OR type = CAST(:tx_type AS TEXT))
""")

_LIST_INTEREST_BEARING_SQL = text(f"""
    SELECT {_TX_COLUMNS}
    FROM transactions
    WHERE seller_id = :seller_id
      AND (CAST(:customer_id AS TEXT) IS NULL OR customer_id = CAST(:customer_id AS TEXT))
      AND type = 'purchase'
      AND interest_rate > 0
      AND interest_start_date IS NOT NULL
""")

_LIST_LINES_SQL = text("""
    SELECT id, transaction_id, product_id, name, quantity, price_per_unit, total_price
    FROM transaction_lines
    WHERE transaction_id = ANY(CAST(:transaction_ids AS TEXT[]))
    ORDER BY id
""")

_LEDGER_TOTALS_SQL = text("""
    SELECT
        COALESCE(SUM(amount) FILTER (WHERE type = 'purchase'), 0) AS total_purchases,
        COALESCE(SUM(amount) FILTER (WHERE type = 'payment'), 0)
          + COALESCE(SUM(initial_payment) FILTER (WHERE type = 'purchase'), 0)
          AS total_payments,
        COALESCE(SUM(interest) FILTER (WHERE type = 'purchase'), 0) AS legacy_interest,
        COUNT(*) AS total_transactions
    FROM transactions
    WHERE seller_id = :seller_id
""")

_CUSTOMER_TOTALS_SQL = text("""
    SELECT
        c.id AS customer_id,
        COALESCE(SUM(t.amount) FILTER (WHERE t.type = 'purchase'), 0) AS total_purchase_amount,
        COALESCE(SUM(t.amount) FILTER (WHERE t.type = 'payment'), 0)
          + COALESCE(SUM(t.initial_payment) FILTER (WHERE t.type = 'purchase'), 0)
          AS total_paid_amount
    FROM customers c
    LEFT JOIN transactions t
        ON t.customer_id = c.id AND t.seller_id = c.seller_id
    WHERE c.seller_id = :seller_id
    GROUP BY c.id
""")


# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------

def _row_to_transaction(row: object) -> Transaction:
    return Transaction(
        id=str(row.id),  # type: ignore[attr-defined]
        seller_id=str(row.seller_id),  # type: ignore[attr-defined]
        customer_id=str(row.customer_id),  # type: ignore[attr-defined]
        type=row.type,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        initial_payment=row.initial_payment,  # type: ignore[attr-defined]
        interest=row.interest,  # type: ignore[attr-defined]
        interest_rate=row.interest_rate,  # type: ignore[attr-defined]
        interest_duration=row.interest_duration,  # type: ignore[attr-defined]
        interest_time_unit=row.interest_time_unit,  # type: ignore[attr-defined]
        interest_start_date=row.interest_start_date,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        notes=row.notes,  # type: ignore[attr-defined]
        balance_after_transaction=row.balance_after_transaction,  # type: ignore[attr-defined]
        date=row.date,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _row_to_line(row: object) -> TransactionLine:
    return TransactionLine(
        id=str(row.id),  # type: ignore[attr-defined]
        product_id=str(row.product_id),  # type: ignore[attr-defined]
        name=row.name,  # type: ignore[attr-defined]
        quantity=row.quantity,  # type: ignore[attr-defined]
        price_per_unit=row.price_per_unit,  # type: ignore[attr-defined]
        total_price=row.total_price,  # type: ignore[attr-defined]
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------

class TransactionRepository:
    """Concrete repository — tenant-scoped raw SQL."""

    async def _attach_lines(
        self, db: AsyncSession, transactions: list[Transaction]
    ) -> list[Transaction]:
        ids = [t.id for t in transactions if t.id]
        if not ids:
            return transactions
        result = await db.execute(_LIST_LINES_SQL, {"transaction_ids": ids})
        by_tx: dict[str, list[TransactionLine]] = defaultdict(list)
        for row in result.fetchall():
            by_tx[str(row.transaction_id)].append(_row_to_line(row))
        for t in transactions:
            t.lines = by_tx.get(t.id or "", [])
        return transactions

    async def get_transaction(
        self, db: AsyncSession, seller_id: str, transaction_id: str
    ) -> Transaction | None:
        result = await db.execute(
            _GET_TX_SQL, {"seller_id": seller_id, "transaction_id": transaction_id}
        )
        row = result.fetchone()
        if row is None:
            return None
        (transaction,) = await self._attach_lines(db, [_row_to_transaction(row)])
        return transaction

    async def insert_transaction(
        self, db: AsyncSession, transaction: Transaction
    ) -> Transaction:
        result = await db.execute(
            _INSERT_TX_SQL,
            {
                "seller_id": transaction.seller_id,
                "customer_id": transaction.customer_id,
                "type": transaction.type,
                "amount": transaction.amount,
                "initial_payment": transaction.initial_payment,
                "interest_rate": transaction.interest_rate,
                "interest_duration": transaction.interest_duration,
                "interest_time_unit": transaction.interest_time_unit,
                "interest_start_date": transaction.interest_start_date,
                "description": transaction.description,
                "notes": transaction.notes,
                "balance_after_transaction": transaction.balance_after_transaction,
                "date": transaction.date,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Transaction insert returned no rows")
        saved = _row_to_transaction(row)

        for line in transaction.lines:
            line_result = await db.execute(
                _INSERT_LINE_SQL,
                {
                    "transaction_id": saved.id,
                    "product_id": line.product_id,
                    "name": line.name,
                    "quantity": line.quantity,
                    "price_per_unit": line.price_per_unit,
                    "total_price": line.total_price,
                },
            )
            line.id = str(line_result.scalar_one())
        saved.lines = list(transaction.lines)
        return saved

    async def update_transaction(
        self, db: AsyncSession, transaction: Transaction
    ) -> Transaction:
        result = await db.execute(
            _UPDATE_TX_SQL,
            {
                "transaction_id": transaction.id,
                "seller_id": transaction.seller_id,
                "amount": transaction.amount,
                "description": transaction.description,
                "notes": transaction.notes,
                "balance_after_transaction": transaction.balance_after_transaction,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError(f"Transaction {transaction.id} vanished during update")
        updated = _row_to_transaction(row)
        updated.lines = transaction.lines
        return updated

    async def delete_transaction(
        self, db: AsyncSession, seller_id: str, transaction_id: str
    ) -> bool:
        result = await db.execute(
            _DELETE_TX_SQL, {"seller_id": seller_id, "transaction_id": transaction_id}
        )
        return result.fetchone() is not None

    async def list_transactions(
        self,
        db: AsyncSession,
        seller_id: str,
        customer_id: str | None,
        tx_type: str | None,
        limit: int,
        skip: int,
    ) -> list[Transaction]:
        result = await db.execute(
            _LIST_TX_SQL,
            {
                "seller_id": seller_id,
                "customer_id": customer_id,
                "tx_type": tx_type,
                "limit": limit,
                "skip": skip,
            },
        )
        transactions = [_row_to_transaction(row) for row in result.fetchall()]
        return await self._attach_lines(db, transactions)

    async def count_transactions(
        self,
        db: AsyncSession,
        seller_id: str,
        customer_id: str | None,
        tx_type: str | None,
    ) -> int:
        result = await db.execute(
            _COUNT_TX_SQL,
            {"seller_id": seller_id, "customer_id": customer_id, "tx_type": tx_type},
        )
        return int(result.scalar_one())

    async def list_interest_bearing(
        self, db: AsyncSession, seller_id: str, customer_id: str | None
    ) -> list[Transaction]:
        result = await db.execute(
            _LIST_INTEREST_BEARING_SQL,
            {"seller_id": seller_id, "customer_id": customer_id},
        )
        return [_row_to_transaction(row) for row in result.fetchall()]

    async def ledger_totals(
        self, db: AsyncSession, seller_id: str
    ) -> LedgerTotals:
        result = await db.execute(_LEDGER_TOTALS_SQL, {"seller_id": seller_id})
        row = result.fetchone()
        if row is None:
            return LedgerTotals()
        return LedgerTotals(
            total_purchases=int(row.total_purchases),
            total_payments=int(row.total_payments),
            legacy_interest=int(row.legacy_interest),
            total_transactions=int(row.total_transactions),
        )

    async def customer_totals(
        self, db: AsyncSession, seller_id: str
    ) -> list[CustomerTotals]:
        result = await db.execute(_CUSTOMER_TOTALS_SQL, {"seller_id": seller_id})
        return [
            CustomerTotals(
                customer_id=str(row.customer_id),
                total_purchase_amount=int(row.total_purchase_amount),
                total_paid_amount=int(row.total_paid_amount),
            )
            for row in result.fetchall()
        ]
