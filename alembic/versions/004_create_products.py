"""004: create products table

Revision ID: 004
Revises: 003
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE products (
            id              VARCHAR(36)     PRIMARY KEY DEFAULT gen_random_uuid()::text,
            seller_id       VARCHAR(36)     NOT NULL REFERENCES sellers(id),
            name            VARCHAR(200)    NOT NULL,
            unit            VARCHAR(10)     NOT NULL,
            description     TEXT,
            is_active       BOOLEAN         NOT NULL DEFAULT TRUE,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_products_seller_name  UNIQUE (seller_id, name),
            CONSTRAINT ck_products_unit         CHECK (unit IN ('kg', 'liter', 'piece', 'gram', 'ml'))
        );
    """)
    op.execute("CREATE INDEX idx_products_seller_active ON products (seller_id, is_active);")
    op.execute("""
        CREATE TRIGGER trg_products_updated_at
            BEFORE UPDATE ON products
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS products CASCADE;")
