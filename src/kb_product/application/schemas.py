"""Pydantic schemas for the kb_product API."""

from pydantic import BaseModel, Field

from src.kb_common.enums import ProductUnit
from src.kb_product.domain.models import Product


class CreateProductRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    unit: ProductUnit
    description: str | None = Field(None, max_length=1000)


class UpdateProductRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    unit: ProductUnit | None = None
    description: str | None = Field(None, max_length=1000)


class ProductResponse(BaseModel):
    id: str
    name: str
    unit: str
    description: str | None
    is_active: bool
    created_at: str

    @classmethod
    def from_domain(cls, product: Product) -> "ProductResponse":
        return cls(
            id=product.id,
            name=product.name,
            unit=product.unit,
            description=product.description,
            is_active=product.is_active,
            created_at=product.created_at.isoformat() if product.created_at else "",
        )


class ProductListResponse(BaseModel):
    items: list[ProductResponse]
