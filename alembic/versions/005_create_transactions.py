"""005: create transactions table

Revision ID: 005
Revises: 004
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE transactions (
            id                          VARCHAR(36)     PRIMARY KEY DEFAULT gen_random_uuid()::text,
            seller_id                   VARCHAR(36)     NOT NULL REFERENCES sellers(id),
            customer_id                 VARCHAR(36)     NOT NULL REFERENCES customers(id),
            type                        VARCHAR(10)     NOT NULL,
            amount                      BIGINT          NOT NULL,
            initial_payment             BIGINT          NOT NULL DEFAULT 0,
            interest                    BIGINT          NOT NULL DEFAULT 0,
            interest_rate               NUMERIC(7, 4),
            interest_duration           INTEGER,
            interest_time_unit          VARCHAR(10),
            interest_start_date         TIMESTAMPTZ,
            description                 VARCHAR(500),
            notes                       TEXT,
            balance_after_transaction   BIGINT          NOT NULL DEFAULT 0,
            date                        TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            created_at                  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at                  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_transactions_type     CHECK (type IN ('purchase', 'payment')),
            CONSTRAINT ck_transactions_amount   CHECK (amount > 0),
            CONSTRAINT ck_transactions_initial_payment CHECK (
                initial_payment >= 0 AND initial_payment <= amount
                AND (type = 'purchase' OR initial_payment = 0)
            ),
            CONSTRAINT ck_transactions_time_unit CHECK (
                interest_time_unit IS NULL OR interest_time_unit IN ('days', 'months', 'years')
            ),
            CONSTRAINT ck_transactions_interest_terms CHECK (
                (interest_rate IS NULL AND interest_duration IS NULL
                    AND interest_time_unit IS NULL AND interest_start_date IS NULL)
                OR (type = 'purchase' AND interest_rate > 0 AND interest_duration >= 0
                    AND interest_time_unit IS NOT NULL AND interest_start_date IS NOT NULL)
            )
        );
    """)
    op.execute(
        "CREATE INDEX idx_transactions_seller_date ON transactions (seller_id, date DESC);"
    )
    op.execute(
        "CREATE INDEX idx_transactions_customer_date "
        "ON transactions (seller_id, customer_id, date DESC);"
    )
    op.execute(
        "CREATE INDEX idx_transactions_interest ON transactions (seller_id, customer_id) "
        "WHERE interest_start_date IS NOT NULL;"
    )
    op.execute("""
        CREATE TRIGGER trg_transactions_updated_at
            BEFORE UPDATE ON transactions
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute(
        "COMMENT ON COLUMN transactions.interest IS "
        "'legacy stored interest; always 0 on write, accrual is computed on read';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS transactions CASCADE;")
