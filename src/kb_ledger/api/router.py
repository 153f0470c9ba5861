"""kb_ledger REST API — ledger entries, interest preview and reminders."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.kb_common.database import get_db_session
from src.kb_common.enums import TransactionType
from src.kb_common.response import ApiResponse, respond
from src.kb_common.tenant import SellerContext
from src.kb_gateway.auth.dependencies import get_current_seller
from src.kb_ledger.application.schemas import (
    CreateTransactionRequest,
    InterestPreviewRequest,
    UpdateTransactionRequest,
)
from src.kb_ledger.application.service import LedgerService
from src.kb_report.application.service import ReportService

router = APIRouter(prefix="/transactions", tags=["transactions"])

_service = LedgerService()
_reports = ReportService()


@router.post("", status_code=201)
async def create_transaction(
    body: CreateTransactionRequest,
    seller: Annotated[SellerContext, Depends(get_current_seller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.create_transaction(db, seller, body)
    return respond(request, data.model_dump(), "Transaction created")


@router.get("")
async def list_transactions(
    seller: Annotated[SellerContext, Depends(get_current_seller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    customer_id: str | None = Query(None, description="Filter by customer ID"),
    type: TransactionType | None = Query(None, description="purchase or payment"),
    limit: int = Query(50, ge=1, le=200, description="Items per page"),
    skip: int = Query(0, ge=0, description="Items to skip"),
) -> ApiResponse:
    data = await _service.list_transactions(db, seller.id, customer_id, type, limit, skip)
    return respond(request, data.model_dump())


@router.get("/stats/dashboard")
async def dashboard_stats(
    seller: Annotated[SellerContext, Depends(get_current_seller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _reports.dashboard_stats(db, seller.id)
    return respond(request, data.model_dump())


@router.post("/interest-preview")
async def interest_preview(
    body: InterestPreviewRequest,
    seller: Annotated[SellerContext, Depends(get_current_seller)],
    request: Request,
) -> ApiResponse:
    data = _service.preview_interest(body)
    return respond(request, data.model_dump())


@router.get("/{transaction_id}")
async def get_transaction(
    transaction_id: str,
    seller: Annotated[SellerContext, Depends(get_current_seller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_transaction(db, seller.id, transaction_id)
    return respond(request, data.model_dump())


@router.put("/{transaction_id}")
async def update_transaction(
    transaction_id: str,
    body: UpdateTransactionRequest,
    seller: Annotated[SellerContext, Depends(get_current_seller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.update_transaction(db, seller, transaction_id, body)
    return respond(request, data.model_dump(), "Transaction updated")


@router.delete("/{transaction_id}")
async def delete_transaction(
    transaction_id: str,
    seller: Annotated[SellerContext, Depends(get_current_seller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.delete_transaction(db, seller.id, transaction_id)
    return respond(request, data.model_dump(), "Transaction deleted")


@router.post("/{customer_id}/send-notification")
async def send_notification(
    customer_id: str,
    seller: Annotated[SellerContext, Depends(get_current_seller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.send_balance_notification(db, seller, customer_id)
    message = "Notification sent" if data.sent else "Notification failed"
    return respond(request, data.model_dump(), message)
