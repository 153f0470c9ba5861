"""002: create sellers table

Revision ID: 002
Revises: 001
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE sellers (
            id                          VARCHAR(36)     PRIMARY KEY DEFAULT gen_random_uuid()::text,
            name                        VARCHAR(200)    NOT NULL,
            business_name               VARCHAR(200)    NOT NULL,
            email                       VARCHAR(255),
            phone                       VARCHAR(15)     NOT NULL,
            language                    VARCHAR(2)      NOT NULL DEFAULT 'en',
            sms_notification_enabled    BOOLEAN         NOT NULL DEFAULT TRUE,
            is_active                   BOOLEAN         NOT NULL DEFAULT TRUE,
            created_at                  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at                  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_sellers_phone     UNIQUE (phone),
            CONSTRAINT ck_sellers_language  CHECK (language IN ('en', 'hi'))
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_sellers_updated_at
            BEFORE UPDATE ON sellers
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE sellers IS 'Shop owners; each one is a tenant';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS sellers CASCADE;")
