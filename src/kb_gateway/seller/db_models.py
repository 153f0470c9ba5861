"""SQLAlchemy ORM model for the sellers table.

Table is created by Alembic migration: alembic/versions/002_create_sellers.py
Rows are written by the seller sign-up service; this service only reads them.
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, text
from sqlalchemy.orm import Mapped, mapped_column

from src.kb_common.database import Base
from src.kb_common.tenant import SellerContext


class SellerModel(Base):
    __tablename__ = "sellers"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        server_default=text("gen_random_uuid()::text"),
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    business_name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str] = mapped_column(String(15), nullable=False, unique=True)
    language: Mapped[str] = mapped_column(String(2), nullable=False, default="en")
    sms_notification_enabled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("NOW()")
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("NOW()")
    )

    def to_context(self) -> SellerContext:
        return SellerContext(
            id=str(self.id),
            name=self.name,
            business_name=self.business_name,
            language=self.language,
            notifications_enabled=self.sms_notification_enabled,
        )
