"""LedgerService — create / update / delete ledger entries for one seller.

Every mutation runs in a single DB transaction:
  1. lock the customer row (SELECT ... FOR UPDATE)
  2. validate against the locked state (nothing written yet)
  3. apply_effect() to get the new customer aggregate
  4. write the customer balances and the ledger row
  5. commit, or roll both writes back

Notifications are sent after the commit and never change the ledger outcome.
"""

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.kb_common.database import transactional
from src.kb_common.datetime_utils import utc_now
from src.kb_common.enums import NotificationChannel, TransactionType
from src.kb_common.errors import (
    CustomerNotFoundError,
    InvalidAmountError,
    InvalidInterestTermsError,
    InvalidTransactionError,
    MissingContactError,
    PaymentExceedsBalanceError,
    ProductNotFoundError,
    TransactionNotFoundError,
)
from src.kb_common.paise import paise_to_display, round_to_paise
from src.kb_common.tenant import SellerContext
from src.kb_customer.application.schemas import CustomerBalance, CustomerResponse
from src.kb_customer.domain.models import Customer
from src.kb_customer.domain.repository import CustomerRepositoryProtocol
from src.kb_customer.infrastructure.persistence import CustomerRepository
from src.kb_ledger.application.schemas import (
    CreateTransactionRequest,
    CustomerStatementResponse,
    DeleteTransactionResponse,
    InterestPreviewRequest,
    InterestPreviewResponse,
    NotificationResponse,
    TransactionListResponse,
    TransactionResult,
    TransactionView,
    UpdateTransactionRequest,
)
from src.kb_ledger.domain.effects import apply_effect
from src.kb_ledger.domain.interest import interest_start_date, simple_interest
from src.kb_ledger.domain.models import (
    Transaction,
    TransactionLine,
    total_accrued_interest,
)
from src.kb_ledger.domain.repository import TransactionRepositoryProtocol
from src.kb_ledger.infrastructure.persistence import TransactionRepository
from src.kb_notify.messages import render_message
from src.kb_notify.sender import NotificationSender, get_notification_sender
from src.kb_product.domain.repository import ProductRepositoryProtocol
from src.kb_product.infrastructure.persistence import ProductRepository

logger = logging.getLogger(__name__)

# interest_rate is stored as NUMERIC(7, 4)
MAX_INTEREST_RATE = Decimal("999.9999")


def _interest_start(now: datetime, duration: int, time_unit: str | None) -> datetime:
    try:
        return interest_start_date(now, duration, time_unit)
    except (OverflowError, ValueError):
        raise InvalidInterestTermsError(
            f"interest-free period of {duration} {time_unit} is out of range"
        ) from None


class LedgerService:
    def __init__(
        self,
        transactions: TransactionRepositoryProtocol | None = None,
        customers: CustomerRepositoryProtocol | None = None,
        products: ProductRepositoryProtocol | None = None,
        notifier: NotificationSender | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._transactions: TransactionRepositoryProtocol = (
            transactions or TransactionRepository()
        )
        self._customers: CustomerRepositoryProtocol = customers or CustomerRepository()
        self._products: ProductRepositoryProtocol = products or ProductRepository()
        self._notifier = notifier
        self._clock = clock

    @property
    def notifier(self) -> NotificationSender:
        if self._notifier is None:
            self._notifier = get_notification_sender()
        return self._notifier

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def create_transaction(
        self, db: AsyncSession, seller: SellerContext, req: CreateTransactionRequest
    ) -> TransactionResult:
        now = self._clock()
        async with transactional(db, "create_transaction"):
            customer = await self._locked_customer(db, seller.id, req.customer_id)
            transaction = await self._build_transaction(db, seller.id, req, now)
            if transaction.type == TransactionType.PAYMENT:
                await self._check_payment_limit(db, customer, transaction.amount, now)

            updated = apply_effect(customer, transaction, 1)
            transaction.balance_after_transaction = updated.outstanding_balance
            customer = await self._customers.save_balances(db, updated)
            saved = await self._transactions.insert_transaction(db, transaction)

        logger.info(
            "Created %s %s for customer %s: amount=%d balance=%d",
            saved.type, saved.id, customer.id, saved.amount, customer.outstanding_balance,
        )
        notification = None
        if req.send_sms:
            notification = await self._notify_after_write(
                seller, customer, saved.balance_after_transaction
            )
        return TransactionResult(
            transaction=TransactionView.from_domain(saved, now),
            customer_balance=CustomerBalance.from_domain(customer),
            notification=notification,
        )

    async def update_transaction(
        self,
        db: AsyncSession,
        seller: SellerContext,
        transaction_id: str,
        req: UpdateTransactionRequest,
    ) -> TransactionResult:
        """Change amount / description / notes of an existing entry.

        The old entry is reversed and the revised one re-applied, so the
        customer ends up exactly where it would be had the revised entry been
        created in the first place. Other entries' balance snapshots are left
        as they were.
        """
        now = self._clock()
        async with transactional(db, "update_transaction"):
            existing = await self._transactions.get_transaction(db, seller.id, transaction_id)
            if existing is None:
                raise TransactionNotFoundError(transaction_id)
            customer = await self._locked_customer(db, seller.id, existing.customer_id)

            if req.amount_paise <= 0:
                raise InvalidAmountError("amount must be greater than 0")
            if existing.is_purchase and req.amount_paise < existing.initial_payment:
                raise InvalidAmountError(
                    f"amount cannot be less than the initial payment "
                    f"({paise_to_display(existing.initial_payment)})"
                )

            reversed_customer = apply_effect(customer, existing, -1)
            if existing.type == TransactionType.PAYMENT:
                await self._check_payment_limit(db, reversed_customer, req.amount_paise, now)

            revised = replace(
                existing,
                amount=req.amount_paise,
                description=(
                    req.description if req.description is not None else existing.description
                ),
                notes=req.notes if req.notes is not None else existing.notes,
            )
            updated = apply_effect(reversed_customer, revised, 1)
            revised.balance_after_transaction = updated.outstanding_balance
            customer = await self._customers.save_balances(db, updated)
            saved = await self._transactions.update_transaction(db, revised)

        logger.info(
            "Updated %s %s for customer %s: amount %d -> %d balance=%d",
            saved.type, saved.id, customer.id, existing.amount, saved.amount,
            customer.outstanding_balance,
        )
        notification = None
        if req.send_sms:
            notification = await self._notify_after_write(
                seller, customer, saved.balance_after_transaction
            )
        return TransactionResult(
            transaction=TransactionView.from_domain(saved, now),
            customer_balance=CustomerBalance.from_domain(customer),
            notification=notification,
        )

    async def delete_transaction(
        self, db: AsyncSession, seller_id: str, transaction_id: str
    ) -> DeleteTransactionResponse:
        async with transactional(db, "delete_transaction"):
            existing = await self._transactions.get_transaction(db, seller_id, transaction_id)
            if existing is None:
                raise TransactionNotFoundError(transaction_id)
            customer = await self._locked_customer(db, seller_id, existing.customer_id)

            customer = await self._customers.save_balances(
                db, apply_effect(customer, existing, -1)
            )
            if not await self._transactions.delete_transaction(db, seller_id, transaction_id):
                raise TransactionNotFoundError(transaction_id)

        logger.info(
            "Deleted %s %s for customer %s: amount=%d balance=%d",
            existing.type, transaction_id, customer.id, existing.amount,
            customer.outstanding_balance,
        )
        return DeleteTransactionResponse(
            transaction_id=transaction_id,
            customer_balance=CustomerBalance.from_domain(customer),
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_transaction(
        self,
        db: AsyncSession,
        seller_id: str,
        transaction_id: str,
        now: datetime | None = None,
    ) -> TransactionView:
        transaction = await self._transactions.get_transaction(db, seller_id, transaction_id)
        if transaction is None:
            raise TransactionNotFoundError(transaction_id)
        return TransactionView.from_domain(transaction, now or self._clock())

    async def list_transactions(
        self,
        db: AsyncSession,
        seller_id: str,
        customer_id: str | None = None,
        tx_type: TransactionType | str | None = None,
        limit: int = 50,
        skip: int = 0,
        now: datetime | None = None,
    ) -> TransactionListResponse:
        type_value = TransactionType(tx_type).value if tx_type is not None else None
        transactions = await self._transactions.list_transactions(
            db, seller_id, customer_id, type_value, limit, skip
        )
        total = await self._transactions.count_transactions(
            db, seller_id, customer_id, type_value
        )
        as_of = now or self._clock()
        return TransactionListResponse(
            items=[TransactionView.from_domain(t, as_of) for t in transactions],
            total=total,
            limit=limit,
            skip=skip,
        )

    async def customer_statement(
        self,
        db: AsyncSession,
        seller_id: str,
        customer_id: str,
        limit: int = 100,
        skip: int = 0,
        now: datetime | None = None,
    ) -> CustomerStatementResponse:
        customer = await self._customers.get_customer(db, seller_id, customer_id)
        if customer is None:
            raise CustomerNotFoundError(customer_id)
        as_of = now or self._clock()
        transactions = await self._transactions.list_transactions(
            db, seller_id, customer_id, None, limit, skip
        )
        total = await self._transactions.count_transactions(db, seller_id, customer_id, None)
        interest_bearing = await self._transactions.list_interest_bearing(
            db, seller_id, customer_id
        )
        return CustomerStatementResponse(
            customer=CustomerResponse.from_domain(
                customer, total_accrued_interest(interest_bearing, as_of)
            ),
            transactions=[TransactionView.from_domain(t, as_of) for t in transactions],
            total_transactions=total,
        )

    def preview_interest(self, req: InterestPreviewRequest) -> InterestPreviewResponse:
        """Simple interest for the full duration, shown before a purchase is saved."""
        interest = simple_interest(
            req.principal_paise, req.interest_rate, req.duration, req.time_unit
        )
        total = req.principal_paise + interest
        return InterestPreviewResponse(
            principal_paise=req.principal_paise,
            interest_paise=interest,
            interest_display=paise_to_display(interest),
            total_paise=total,
            total_display=paise_to_display(total),
            interest_start_date=_interest_start(
                self._clock(), req.duration, req.time_unit
            ).isoformat(),
        )

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    async def send_balance_notification(
        self, db: AsyncSession, seller: SellerContext, customer_id: str
    ) -> NotificationResponse:
        """Explicit payment reminder for a customer's current balance."""
        customer = await self._customers.get_customer(db, seller.id, customer_id)
        if customer is None:
            raise CustomerNotFoundError(customer_id)
        contact = self._contact_for(customer)
        if not contact:
            raise MissingContactError(self.notifier.channel.value)
        return await self._send(seller, customer, contact, customer.outstanding_balance)

    async def _notify_after_write(
        self, seller: SellerContext, customer: Customer, balance: int
    ) -> NotificationResponse | None:
        if not seller.notifications_enabled or balance <= 0:
            return None
        contact = self._contact_for(customer)
        if not contact:
            return None
        return await self._send(seller, customer, contact, balance)

    async def _send(
        self, seller: SellerContext, customer: Customer, contact: str, balance: int
    ) -> NotificationResponse:
        sender = self.notifier
        message = render_message(
            seller.language,
            "balance_notification",
            customer.name,
            seller.business_name or seller.name,
            paise_to_display(balance),
        )
        try:
            result = await sender.send_balance_notification(contact, message)
        except Exception as exc:
            # Runs after commit: report the failure, never raise
            logger.warning(
                "Balance notification to customer %s raised: %s", customer.id, exc, exc_info=True
            )
            return NotificationResponse(sent=False, channel=sender.channel.value, error=str(exc))
        if not result.success:
            logger.warning(
                "Balance notification to customer %s failed: %s", customer.id, result.error
            )
        return NotificationResponse(
            sent=result.success,
            channel=sender.channel.value,
            message_id=result.message_id,
            error=result.error,
        )

    def _contact_for(self, customer: Customer) -> str | None:
        if self.notifier.channel == NotificationChannel.EMAIL:
            return customer.email
        return customer.phone

    # ------------------------------------------------------------------
    # Validation helpers
    # ------------------------------------------------------------------

    async def _locked_customer(
        self, db: AsyncSession, seller_id: str, customer_id: str
    ) -> Customer:
        customer = await self._customers.get_customer_for_update(db, seller_id, customer_id)
        if customer is None:
            raise CustomerNotFoundError(customer_id)
        return customer

    async def _check_payment_limit(
        self, db: AsyncSession, customer: Customer, amount: int, now: datetime
    ) -> None:
        """A payment may settle the outstanding balance plus accrued interest, no more."""
        interest_bearing = await self._transactions.list_interest_bearing(
            db, customer.seller_id, customer.id
        )
        limit = customer.outstanding_balance + total_accrued_interest(interest_bearing, now)
        if amount > limit:
            raise PaymentExceedsBalanceError(amount, limit)

    async def _build_transaction(
        self,
        db: AsyncSession,
        seller_id: str,
        req: CreateTransactionRequest,
        now: datetime,
    ) -> Transaction:
        if req.amount_paise <= 0:
            raise InvalidAmountError("amount must be greater than 0")

        is_purchase = req.type == TransactionType.PURCHASE
        if is_purchase:
            if not 0 <= req.initial_payment_paise <= req.amount_paise:
                raise InvalidAmountError(
                    "initial payment must be between 0 and the purchase amount"
                )
        else:
            if req.initial_payment_paise:
                raise InvalidAmountError("payments cannot carry an initial payment")
            if req.lines:
                raise InvalidTransactionError("product lines are only allowed on purchases")

        transaction = Transaction(
            id=None,
            seller_id=seller_id,
            customer_id=req.customer_id,
            type=req.type.value,
            amount=req.amount_paise,
            initial_payment=req.initial_payment_paise if is_purchase else 0,
            description=req.description,
            notes=req.notes,
            date=now,
        )

        if req.apply_interest:
            if not is_purchase:
                raise InvalidInterestTermsError("interest can only be applied to purchases")
            if req.interest_rate is None or req.interest_rate <= 0:
                raise InvalidInterestTermsError("interest_rate must be greater than 0")
            if req.interest_rate > MAX_INTEREST_RATE:
                raise InvalidInterestTermsError(
                    f"interest_rate must be at most {MAX_INTEREST_RATE}"
                )
            if req.interest_duration is None or req.interest_duration < 0:
                raise InvalidInterestTermsError("interest_duration must be 0 or more")
            transaction.interest_rate = req.interest_rate
            transaction.interest_duration = req.interest_duration
            transaction.interest_time_unit = req.interest_time_unit.value
            transaction.interest_start_date = _interest_start(
                now, req.interest_duration, req.interest_time_unit
            )

        for line in req.lines:
            product = await self._products.get_product(db, seller_id, line.product_id)
            if product is None:
                raise ProductNotFoundError(line.product_id)
            total = line.total_price_paise
            if total is None:
                total = round_to_paise(line.quantity * Decimal(line.price_per_unit_paise))
            transaction.lines.append(
                TransactionLine(
                    product_id=product.id,
                    name=product.name,
                    quantity=line.quantity,
                    price_per_unit=line.price_per_unit_paise,
                    total_price=total,
                )
            )
        return transaction
