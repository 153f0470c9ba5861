"""006: create transaction_lines table

Revision ID: 006
Revises: 005
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE transaction_lines (
            id              BIGSERIAL       PRIMARY KEY,
            transaction_id  VARCHAR(36)     NOT NULL REFERENCES transactions(id) ON DELETE CASCADE,
            product_id      VARCHAR(36)     NOT NULL REFERENCES products(id),
            name            VARCHAR(200)    NOT NULL,
            quantity        NUMERIC(12, 3)  NOT NULL,
            price_per_unit  BIGINT          NOT NULL,
            total_price     BIGINT          NOT NULL,
            CONSTRAINT ck_transaction_lines_quantity CHECK (quantity > 0)
        );
    """)
    op.execute(
        "CREATE INDEX idx_transaction_lines_transaction ON transaction_lines (transaction_id);"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS transaction_lines CASCADE;")
