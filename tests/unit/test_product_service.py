"""Unit tests for ProductApplicationService using a mock repository."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest

from src.kb_common.errors import ProductExistsError, ProductNotFoundError
from src.kb_product.application.schemas import CreateProductRequest, UpdateProductRequest
from src.kb_product.application.service import ProductApplicationService
from src.kb_product.domain.models import Product


def _make_product(**kwargs) -> Product:
    defaults = dict(
        id="prod-1",
        seller_id="seller-1",
        name="Basmati Rice",
        unit="kg",
        description=None,
        is_active=True,
        created_at=datetime(2026, 1, 1, tzinfo=UTC),
    )
    defaults.update(kwargs)
    return Product(**defaults)


class TestAddProduct:
    async def test_add(self) -> None:
        repo = AsyncMock()
        repo.get_product_by_name.return_value = None
        repo.create_product.return_value = _make_product()
        db = AsyncMock()

        resp = await ProductApplicationService(repo=repo).add_product(
            db, "seller-1", CreateProductRequest(name="Basmati Rice", unit="kg")
        )

        assert resp.id == "prod-1"
        assert resp.unit == "kg"
        created = repo.create_product.call_args.args[1]
        assert created.seller_id == "seller-1"
        db.commit.assert_awaited_once()

    async def test_duplicate_name_rolls_back(self) -> None:
        repo = AsyncMock()
        repo.get_product_by_name.return_value = _make_product()
        db = AsyncMock()

        with pytest.raises(ProductExistsError):
            await ProductApplicationService(repo=repo).add_product(
                db, "seller-1", CreateProductRequest(name="Basmati Rice", unit="kg")
            )
        repo.create_product.assert_not_awaited()
        db.rollback.assert_awaited_once()

    def test_unit_must_be_known(self) -> None:
        with pytest.raises(ValueError):
            CreateProductRequest(name="Milk", unit="bottle")


class TestReadProducts:
    async def test_get_missing(self) -> None:
        repo = AsyncMock()
        repo.get_product.return_value = None

        with pytest.raises(ProductNotFoundError):
            await ProductApplicationService(repo=repo).get_product(AsyncMock(), "seller-1", "nope")

    async def test_list(self) -> None:
        repo = AsyncMock()
        repo.list_products.return_value = [_make_product(), _make_product(id="prod-2", name="Dal")]

        resp = await ProductApplicationService(repo=repo).list_products(AsyncMock(), "seller-1", True)

        assert [p.name for p in resp.items] == ["Basmati Rice", "Dal"]
        repo.list_products.assert_awaited_once()


class TestModifyProducts:
    async def test_rename_to_own_name_is_allowed(self) -> None:
        repo = AsyncMock()
        repo.get_product_by_name.return_value = _make_product()
        repo.update_product.return_value = _make_product(description="Long grain")

        resp = await ProductApplicationService(repo=repo).update_product(
            AsyncMock(),
            "seller-1",
            "prod-1",
            UpdateProductRequest(name="Basmati Rice", description="Long grain"),
        )

        assert resp.description == "Long grain"
        fields = repo.update_product.call_args.args[3]
        assert fields == {"name": "Basmati Rice", "description": "Long grain"}

    async def test_rename_clash(self) -> None:
        repo = AsyncMock()
        repo.get_product_by_name.return_value = _make_product(id="prod-2")

        with pytest.raises(ProductExistsError):
            await ProductApplicationService(repo=repo).update_product(
                AsyncMock(), "seller-1", "prod-1", UpdateProductRequest(name="Basmati Rice")
            )

    async def test_soft_delete(self) -> None:
        repo = AsyncMock()
        repo.set_active.return_value = _make_product(is_active=False)

        resp = await ProductApplicationService(repo=repo).delete_product(
            AsyncMock(), "seller-1", "prod-1"
        )

        assert resp.is_active is False
        repo.set_active.assert_awaited_once_with(
            repo.set_active.call_args.args[0], "seller-1", "prod-1", False
        )
