"""ProductRepository — concrete implementation of ProductRepositoryProtocol."""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.kb_common.errors import InternalError
from src.kb_product.domain.models import Product

_PRODUCT_COLUMNS = "id, seller_id, name, unit, description, is_active, created_at, updated_at"

_EDITABLE_FIELDS = ("name", "unit", "description")

_GET_PRODUCT_SQL = text(f"""
    SELECT {_PRODUCT_COLUMNS}
    FROM products
    WHERE id = :product_id AND seller_id = :seller_id
""")

_GET_BY_NAME_SQL = text(f"""
    SELECT {_PRODUCT_COLUMNS}
    FROM products
    WHERE seller_id = :seller_id AND name = :name
""")

_LIST_PRODUCTS_SQL = text(f"""
    SELECT {_PRODUCT_COLUMNS}
    FROM products
    WHERE seller_id = :seller_id
      AND (CAST(:is_active AS BOOLEAN) IS NULL OR is_active = CAST(:is_active AS BOOLEAN))
    ORDER BY created_at DESC, id DESC
""")

_COUNT_ACTIVE_SQL = text("""
    SELECT COUNT(*) FROM products WHERE seller_id = :seller_id AND is_active
""")

_INSERT_PRODUCT_SQL = text(f"""
    INSERT INTO products (seller_id, name, unit, description)
    VALUES (:seller_id, :name, :unit, :description)
    RETURNING {_PRODUCT_COLUMNS}
""")

_SET_ACTIVE_SQL = text(f"""
    UPDATE products
    SET is_active = :is_active, updated_at = NOW()
    WHERE id = :product_id AND seller_id = :seller_id
    RETURNING {_PRODUCT_COLUMNS}
""")


def _row_to_product(row: object) -> Product:
    return Product(
        id=str(row.id),  # type: ignore[attr-defined]
        seller_id=str(row.seller_id),  # type: ignore[attr-defined]
        name=row.name,  # type: ignore[attr-defined]
        unit=row.unit,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        is_active=row.is_active,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


class ProductRepository:
    async def get_product(
        self, db: AsyncSession, seller_id: str, product_id: str
    ) -> Product | None:
        result = await db.execute(
            _GET_PRODUCT_SQL, {"seller_id": seller_id, "product_id": product_id}
        )
        row = result.fetchone()
        return _row_to_product(row) if row else None

    async def get_product_by_name(
        self, db: AsyncSession, seller_id: str, name: str
    ) -> Product | None:
        result = await db.execute(_GET_BY_NAME_SQL, {"seller_id": seller_id, "name": name})
        row = result.fetchone()
        return _row_to_product(row) if row else None

    async def list_products(
        self, db: AsyncSession, seller_id: str, is_active: bool | None
    ) -> list[Product]:
        result = await db.execute(
            _LIST_PRODUCTS_SQL, {"seller_id": seller_id, "is_active": is_active}
        )
        return [_row_to_product(row) for row in result.fetchall()]

    async def count_active_products(self, db: AsyncSession, seller_id: str) -> int:
        result = await db.execute(_COUNT_ACTIVE_SQL, {"seller_id": seller_id})
        return int(result.scalar_one())

    async def create_product(self, db: AsyncSession, product: Product) -> Product:
        result = await db.execute(
            _INSERT_PRODUCT_SQL,
            {
                "seller_id": product.seller_id,
                "name": product.name,
                "unit": product.unit,
                "description": product.description,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Product insert returned no rows")
        return _row_to_product(row)

    async def update_product(
        self,
        db: AsyncSession,
        seller_id: str,
        product_id: str,
        fields: dict[str, Any],
    ) -> Product | None:
        changes = {k: v for k, v in fields.items() if k in _EDITABLE_FIELDS}
        if not changes:
            return await self.get_product(db, seller_id, product_id)
        assignments = ", ".join(f"{column} = :{column}" for column in changes)
        stmt = text(f"""
            UPDATE products
            SET {assignments}, updated_at = NOW()
            WHERE id = :product_id AND seller_id = :seller_id
            RETURNING {_PRODUCT_COLUMNS}
        """)
        result = await db.execute(
            stmt, {**changes, "seller_id": seller_id, "product_id": product_id}
        )
        row = result.fetchone()
        return _row_to_product(row) if row else None

    async def set_active(
        self, db: AsyncSession, seller_id: str, product_id: str, is_active: bool
    ) -> Product | None:
        result = await db.execute(
            _SET_ACTIVE_SQL,
            {"seller_id": seller_id, "product_id": product_id, "is_active": is_active},
        )
        row = result.fetchone()
        return _row_to_product(row) if row else None
