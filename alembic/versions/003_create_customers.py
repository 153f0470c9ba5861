"""003: create customers table

Revision ID: 003
Revises: 002
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE customers (
            id                      VARCHAR(36)     PRIMARY KEY DEFAULT gen_random_uuid()::text,
            seller_id               VARCHAR(36)     NOT NULL REFERENCES sellers(id),
            name                    VARCHAR(200)    NOT NULL,
            phone                   VARCHAR(15)     NOT NULL,
            email                   VARCHAR(255),
            address                 VARCHAR(500),
            city                    VARCHAR(100),
            state                   VARCHAR(100),
            pincode                 VARCHAR(10),
            notes                   TEXT,
            total_purchase_amount   BIGINT          NOT NULL DEFAULT 0,
            total_paid_amount       BIGINT          NOT NULL DEFAULT 0,
            outstanding_balance     BIGINT          NOT NULL DEFAULT 0,
            deposit_amount          BIGINT          NOT NULL DEFAULT 0,
            is_active               BOOLEAN         NOT NULL DEFAULT TRUE,
            version                 BIGINT          NOT NULL DEFAULT 0,
            created_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_customers_seller_phone    UNIQUE (seller_id, phone),
            CONSTRAINT ck_customers_deposit         CHECK (deposit_amount >= 0)
        );
    """)
    op.execute(
        "CREATE INDEX idx_customers_seller_active ON customers (seller_id, is_active, created_at DESC);"
    )
    op.execute("""
        CREATE TRIGGER trg_customers_updated_at
            BEFORE UPDATE ON customers
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute(
        "COMMENT ON COLUMN customers.outstanding_balance IS "
        "'paise; total_purchase_amount - total_paid_amount, excludes accrued interest';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS customers CASCADE;")
