"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/Seller
  2xxx: Customer
  3xxx: Product
  4xxx: Transaction / ledger
  9xxx: System
"""

from src.kb_common.paise import paise_to_display


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Auth/Seller ---

class InvalidTokenError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Invalid or expired token", 401)


class SellerDisabledError(AppError):
    def __init__(self) -> None:
        super().__init__(1002, "Seller account is disabled", 403)


# --- 2xxx: Customer ---

class CustomerNotFoundError(AppError):
    def __init__(self, customer_id: str) -> None:
        super().__init__(2001, f"Customer not found: {customer_id}", 404)


class CustomerExistsError(AppError):
    def __init__(self, phone: str) -> None:
        super().__init__(2002, f"Customer with phone {phone} already exists", 409)


class MissingContactError(AppError):
    def __init__(self, channel: str) -> None:
        super().__init__(2003, f"Customer has no contact address for {channel}", 422)


# --- 3xxx: Product ---

class ProductNotFoundError(AppError):
    def __init__(self, product_id: str) -> None:
        super().__init__(3001, f"Product not found: {product_id}", 404)


class ProductExistsError(AppError):
    def __init__(self, name: str) -> None:
        super().__init__(3002, f"Product with name {name!r} already exists", 409)


# --- 4xxx: Transaction ---

class TransactionNotFoundError(AppError):
    def __init__(self, transaction_id: str) -> None:
        super().__init__(4001, f"Transaction not found: {transaction_id}", 404)


class InvalidAmountError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(4002, f"Invalid amount: {detail}", 422)


class PaymentExceedsBalanceError(AppError):
    def __init__(self, amount: int, limit: int) -> None:
        super().__init__(
            4003,
            f"Payment of {paise_to_display(amount)} cannot exceed outstanding "
            f"balance ({paise_to_display(limit)})",
            422,
        )
        self.amount = amount
        self.limit = limit


class InvalidInterestTermsError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(4004, f"Invalid interest terms: {detail}", 422)


class InvalidTransactionError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(4005, f"Invalid transaction: {detail}", 422)


# --- 9xxx: System ---

class RateLimitError(AppError):
    def __init__(self) -> None:
        super().__init__(9001, "Rate limit exceeded", 429)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class PersistenceError(AppError):
    def __init__(self, operation: str) -> None:
        super().__init__(9003, f"Storage failure during {operation}; no changes were saved", 500)
