"""kb_report REST API — dashboard and balance integrity."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.kb_common.database import get_db_session
from src.kb_common.response import ApiResponse, respond
from src.kb_common.tenant import SellerContext
from src.kb_gateway.auth.dependencies import get_current_seller
from src.kb_report.application.service import ReportService

router = APIRouter(prefix="/reports", tags=["reports"])

_service = ReportService()


@router.get("/dashboard")
async def dashboard(
    seller: Annotated[SellerContext, Depends(get_current_seller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.dashboard_stats(db, seller.id)
    return respond(request, data.model_dump())


@router.get("/integrity")
async def integrity(
    seller: Annotated[SellerContext, Depends(get_current_seller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    report = await _service.verify_balances(db, seller.id)
    return respond(request, report.model_dump())


@router.post("/reconcile")
async def reconcile(
    seller: Annotated[SellerContext, Depends(get_current_seller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.reconcile(db, seller.id)
    return respond(request, data.model_dump(), "Balances reconciled")
