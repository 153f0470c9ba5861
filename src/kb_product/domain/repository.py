"""Repository Protocol for products. Every method is scoped by seller_id."""

from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.kb_product.domain.models import Product


class ProductRepositoryProtocol(Protocol):
    async def get_product(
        self, db: AsyncSession, seller_id: str, product_id: str
    ) -> Product | None: ...

    async def get_product_by_name(
        self, db: AsyncSession, seller_id: str, name: str
    ) -> Product | None: ...

    async def list_products(
        self, db: AsyncSession, seller_id: str, is_active: bool | None
    ) -> list[Product]: ...

    async def count_active_products(self, db: AsyncSession, seller_id: str) -> int: ...

    async def create_product(self, db: AsyncSession, product: Product) -> Product: ...

    async def update_product(
        self,
        db: AsyncSession,
        seller_id: str,
        product_id: str,
        fields: dict[str, Any],
    ) -> Product | None: ...

    async def set_active(
        self, db: AsyncSession, seller_id: str, product_id: str, is_active: bool
    ) -> Product | None: ...
