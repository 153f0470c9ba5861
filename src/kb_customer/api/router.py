"""kb_customer REST API — customer directory, balances and accrued interest."""

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.kb_common.database import get_db_session
from src.kb_common.response import ApiResponse, respond
from src.kb_common.tenant import SellerContext
from src.kb_customer.application.schemas import CreateCustomerRequest, UpdateCustomerRequest
from src.kb_customer.application.service import CustomerApplicationService
from src.kb_gateway.auth.dependencies import get_current_seller
from src.kb_ledger.application.service import LedgerService

router = APIRouter(prefix="/customers", tags=["customers"])

_service = CustomerApplicationService()
_ledger = LedgerService()

_ACTIVE_FILTER: dict[str, bool | None] = {"true": True, "false": False, "all": None}


@router.post("", status_code=201)
async def add_customer(
    body: CreateCustomerRequest,
    seller: Annotated[SellerContext, Depends(get_current_seller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.add_customer(db, seller.id, body)
    return respond(request, data.model_dump(), "Customer added")


@router.get("")
async def list_customers(
    seller: Annotated[SellerContext, Depends(get_current_seller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    is_active: Literal["true", "false", "all"] = Query("true", description="Status filter"),
) -> ApiResponse:
    data = await _service.list_customers(db, seller.id, _ACTIVE_FILTER[is_active])
    return respond(request, data.model_dump())


@router.get("/{customer_id}")
async def get_customer(
    customer_id: str,
    seller: Annotated[SellerContext, Depends(get_current_seller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_customer(db, seller.id, customer_id)
    return respond(request, data.model_dump())


@router.put("/{customer_id}")
async def update_customer(
    customer_id: str,
    body: UpdateCustomerRequest,
    seller: Annotated[SellerContext, Depends(get_current_seller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.update_customer(db, seller.id, customer_id, body)
    return respond(request, data.model_dump(), "Customer updated")


@router.delete("/{customer_id}")
async def delete_customer(
    customer_id: str,
    seller: Annotated[SellerContext, Depends(get_current_seller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.delete_customer(db, seller.id, customer_id)
    return respond(request, data.model_dump(), "Customer deactivated")


@router.delete("/{customer_id}/purge")
async def purge_customer(
    customer_id: str,
    seller: Annotated[SellerContext, Depends(get_current_seller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.purge_customer(db, seller.id, customer_id)
    return respond(request, data.model_dump(), "Customer and transactions deleted")


@router.get("/{customer_id}/balance")
async def get_balance(
    customer_id: str,
    seller: Annotated[SellerContext, Depends(get_current_seller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    limit: int = Query(100, ge=1, le=500),
    skip: int = Query(0, ge=0),
) -> ApiResponse:
    data = await _ledger.customer_statement(db, seller.id, customer_id, limit, skip)
    return respond(request, data.model_dump())


@router.get("/{customer_id}/interest")
async def get_interest(
    customer_id: str,
    seller: Annotated[SellerContext, Depends(get_current_seller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_customer_interest(db, seller.id, customer_id)
    return respond(request, data.model_dump())
