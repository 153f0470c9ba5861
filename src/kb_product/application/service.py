"""ProductApplicationService — catalogue CRUD for one seller.

Products are only referenced by purchase lines for display, so deleting one
is a soft delete (is_active = false) and never touches the ledger.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from src.kb_common.errors import ProductExistsError, ProductNotFoundError
from src.kb_product.application.schemas import (
    CreateProductRequest,
    ProductListResponse,
    ProductResponse,
    UpdateProductRequest,
)
from src.kb_product.domain.models import Product
from src.kb_product.domain.repository import ProductRepositoryProtocol
from src.kb_product.infrastructure.persistence import ProductRepository


class ProductApplicationService:
    def __init__(self, repo: ProductRepositoryProtocol | None = None) -> None:
        self._repo: ProductRepositoryProtocol = repo or ProductRepository()

    async def add_product(
        self, db: AsyncSession, seller_id: str, req: CreateProductRequest
    ) -> ProductResponse:
        try:
            if await self._repo.get_product_by_name(db, seller_id, req.name):
                raise ProductExistsError(req.name)
            product = await self._repo.create_product(
                db,
                Product(
                    id="",
                    seller_id=seller_id,
                    name=req.name,
                    unit=req.unit.value,
                    description=req.description,
                ),
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return ProductResponse.from_domain(product)

    async def list_products(
        self, db: AsyncSession, seller_id: str, is_active: bool | None
    ) -> ProductListResponse:
        products = await self._repo.list_products(db, seller_id, is_active)
        return ProductListResponse(items=[ProductResponse.from_domain(p) for p in products])

    async def get_product(
        self, db: AsyncSession, seller_id: str, product_id: str
    ) -> ProductResponse:
        product = await self._repo.get_product(db, seller_id, product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return ProductResponse.from_domain(product)

    async def update_product(
        self,
        db: AsyncSession,
        seller_id: str,
        product_id: str,
        req: UpdateProductRequest,
    ) -> ProductResponse:
        fields = req.model_dump(exclude_none=True, mode="json")
        try:
            if "name" in fields:
                clash = await self._repo.get_product_by_name(db, seller_id, fields["name"])
                if clash is not None and clash.id != product_id:
                    raise ProductExistsError(fields["name"])
            product = await self._repo.update_product(db, seller_id, product_id, fields)
            if product is None:
                raise ProductNotFoundError(product_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return ProductResponse.from_domain(product)

    async def delete_product(
        self, db: AsyncSession, seller_id: str, product_id: str
    ) -> ProductResponse:
        try:
            product = await self._repo.set_active(db, seller_id, product_id, False)
            if product is None:
                raise ProductNotFoundError(product_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return ProductResponse.from_domain(product)
