"""CustomerApplicationService — customer directory for one seller.

Balance columns are never written here: they belong to the ledger engine.
Listings and detail views are enriched with live accrued interest.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.kb_common.database import transactional
from src.kb_common.errors import CustomerExistsError, CustomerNotFoundError
from src.kb_common.paise import paise_to_display
from src.kb_customer.application.schemas import (
    CreateCustomerRequest,
    CustomerInterestResponse,
    CustomerListResponse,
    CustomerResponse,
    PurgeCustomerResponse,
    UpdateCustomerRequest,
)
from src.kb_customer.domain.models import Customer
from src.kb_customer.domain.repository import CustomerRepositoryProtocol
from src.kb_customer.infrastructure.persistence import CustomerRepository
from src.kb_report.application.service import ReportService

logger = logging.getLogger(__name__)


class CustomerApplicationService:
    def __init__(
        self,
        repo: CustomerRepositoryProtocol | None = None,
        reports: ReportService | None = None,
    ) -> None:
        self._repo: CustomerRepositoryProtocol = repo or CustomerRepository()
        self._reports = reports or ReportService(customers=self._repo)

    async def add_customer(
        self, db: AsyncSession, seller_id: str, req: CreateCustomerRequest
    ) -> CustomerResponse:
        async with transactional(db, "add_customer"):
            if await self._repo.get_customer_by_phone(db, seller_id, req.phone):
                raise CustomerExistsError(req.phone)
            customer = await self._repo.create_customer(
                db,
                Customer(
                    id="",
                    seller_id=seller_id,
                    name=req.name,
                    phone=req.phone,
                    email=req.email,
                    address=req.address,
                    city=req.city,
                    state=req.state,
                    pincode=req.pincode,
                    notes=req.notes,
                ),
            )
        logger.info("Added customer %s for seller %s", customer.id, seller_id)
        return CustomerResponse.from_domain(customer)

    async def list_customers(
        self, db: AsyncSession, seller_id: str, is_active: bool | None = True
    ) -> CustomerListResponse:
        customers = await self._repo.list_customers(db, seller_id, is_active)
        interest = await self._reports.interest_by_customer(db, seller_id)
        return CustomerListResponse(
            items=[CustomerResponse.from_domain(c, interest.get(c.id, 0)) for c in customers]
        )

    async def get_customer(
        self, db: AsyncSession, seller_id: str, customer_id: str
    ) -> CustomerResponse:
        customer = await self._get_or_raise(db, seller_id, customer_id)
        interest = await self._reports.customer_total_interest(db, seller_id, customer_id)
        return CustomerResponse.from_domain(customer, interest)

    async def get_customer_interest(
        self, db: AsyncSession, seller_id: str, customer_id: str
    ) -> CustomerInterestResponse:
        await self._get_or_raise(db, seller_id, customer_id)
        interest = await self._reports.customer_total_interest(db, seller_id, customer_id)
        return CustomerInterestResponse(
            customer_id=customer_id,
            total_interest_paise=interest,
            total_interest_display=paise_to_display(interest),
        )

    async def update_customer(
        self,
        db: AsyncSession,
        seller_id: str,
        customer_id: str,
        req: UpdateCustomerRequest,
    ) -> CustomerResponse:
        fields = req.model_dump(exclude_none=True)
        async with transactional(db, "update_customer"):
            if "phone" in fields:
                clash = await self._repo.get_customer_by_phone(db, seller_id, fields["phone"])
                if clash is not None and clash.id != customer_id:
                    raise CustomerExistsError(fields["phone"])
            customer = await self._repo.update_contact(db, seller_id, customer_id, fields)
            if customer is None:
                raise CustomerNotFoundError(customer_id)
        return CustomerResponse.from_domain(customer)

    async def delete_customer(
        self, db: AsyncSession, seller_id: str, customer_id: str
    ) -> CustomerResponse:
        """Soft delete: the customer disappears from active listings, its ledger stays."""
        async with transactional(db, "delete_customer"):
            customer = await self._repo.set_active(db, seller_id, customer_id, False)
            if customer is None:
                raise CustomerNotFoundError(customer_id)
        logger.info("Deactivated customer %s for seller %s", customer_id, seller_id)
        return CustomerResponse.from_domain(customer)

    async def purge_customer(
        self, db: AsyncSession, seller_id: str, customer_id: str
    ) -> PurgeCustomerResponse:
        """Hard delete of a customer together with every ledger entry it owns."""
        async with transactional(db, "purge_customer"):
            deleted = await self._repo.purge_customer(db, seller_id, customer_id)
            if deleted is None:
                raise CustomerNotFoundError(customer_id)
        logger.warning(
            "Purged customer %s for seller %s (%d transactions)", customer_id, seller_id, deleted
        )
        return PurgeCustomerResponse(customer_id=customer_id, deleted_transactions=deleted)

    async def _get_or_raise(
        self, db: AsyncSession, seller_id: str, customer_id: str
    ) -> Customer:
        customer = await self._repo.get_customer(db, seller_id, customer_id)
        if customer is None:
            raise CustomerNotFoundError(customer_id)
        return customer
