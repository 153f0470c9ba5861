"""kb_product REST API — the seller's product catalogue."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.kb_common.database import get_db_session
from src.kb_common.response import ApiResponse, respond
from src.kb_common.tenant import SellerContext
from src.kb_gateway.auth.dependencies import get_current_seller
from src.kb_product.application.schemas import CreateProductRequest, UpdateProductRequest
from src.kb_product.application.service import ProductApplicationService

router = APIRouter(prefix="/products", tags=["products"])

_service = ProductApplicationService()


@router.post("", status_code=201)
async def add_product(
    body: CreateProductRequest,
    seller: Annotated[SellerContext, Depends(get_current_seller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.add_product(db, seller.id, body)
    return respond(request, data.model_dump(), "Product added")


@router.get("")
async def list_products(
    seller: Annotated[SellerContext, Depends(get_current_seller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    is_active: bool | None = Query(True, description="Status filter"),
) -> ApiResponse:
    data = await _service.list_products(db, seller.id, is_active)
    return respond(request, data.model_dump())


@router.get("/{product_id}")
async def get_product(
    product_id: str,
    seller: Annotated[SellerContext, Depends(get_current_seller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_product(db, seller.id, product_id)
    return respond(request, data.model_dump())


@router.put("/{product_id}")
async def update_product(
    product_id: str,
    body: UpdateProductRequest,
    seller: Annotated[SellerContext, Depends(get_current_seller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.update_product(db, seller.id, product_id, body)
    return respond(request, data.model_dump(), "Product updated")


@router.delete("/{product_id}")
async def delete_product(
    product_id: str,
    seller: Annotated[SellerContext, Depends(get_current_seller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.delete_product(db, seller.id, product_id)
    return respond(request, data.model_dump(), "Product deactivated")
