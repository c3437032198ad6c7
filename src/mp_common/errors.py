"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth
  4xxx: Order
  6xxx: Inventory
  7xxx: Payment
  9xxx: System

Every error carries a stable machine-readable ``kind`` next to its numeric
code. ``details`` holds extra structured context (e.g. the decline reason)
rendered into the error response body.
"""

from typing import Any


class AppError(Exception):
    """Base application error."""

    kind: str = "APP_ERROR"
    # Extra response headers, e.g. WWW-Authenticate on 401
    headers: dict[str, str] | None = None

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        self.details: dict[str, Any] = details or {}
        super().__init__(message)


# --- 1xxx: Auth ---

class InvalidCredentialsError(AppError):
    kind = "INVALID_CREDENTIALS"
    headers = {"WWW-Authenticate": "Bearer"}

    def __init__(self) -> None:
        super().__init__(1003, "Invalid or expired access token", 401)


# --- 4xxx: Order ---

class OrderValidationError(AppError):
    kind = "VALIDATION_ERROR"

    def __init__(self, detail: str) -> None:
        super().__init__(4000, f"Invalid order request: {detail}", 422)


class MixedCurrencyError(OrderValidationError):
    def __init__(self, currencies: list[str]) -> None:
        super().__init__(
            f"all items must share one currency, got {', '.join(sorted(currencies))}"
        )
        self.details = {"currencies": sorted(currencies)}


class OrderNotFoundError(AppError):
    kind = "ORDER_NOT_FOUND"

    def __init__(self, order_id: str) -> None:
        super().__init__(4004, f"Order not found: {order_id}", 404)


class DuplicateOrderNumberError(AppError):
    kind = "DUPLICATE_ORDER_NUMBER"

    def __init__(self, order_number: str) -> None:
        super().__init__(4005, f"Order number already taken: {order_number}", 409)


# --- 6xxx: Inventory ---

class ProductNotFoundError(AppError):
    kind = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: str) -> None:
        super().__init__(
            6001,
            f"Product not found: {product_id}",
            404,
            details={"product_id": product_id},
        )


class ProductUnavailableError(AppError):
    kind = "PRODUCT_UNAVAILABLE"

    def __init__(self, product_id: str, reason: str) -> None:
        super().__init__(
            6002,
            f"Product {product_id} is not available for purchase: {reason}",
            422,
            details={"product_id": product_id},
        )


class InsufficientStockError(AppError):
    kind = "INSUFFICIENT_STOCK"

    def __init__(self, product_id: str, requested: int, available: int) -> None:
        super().__init__(
            6003,
            f"Insufficient stock for {product_id}: requested {requested}, available {available}",
            409,
            details={
                "product_id": product_id,
                "requested": requested,
                "available": available,
            },
        )


# --- 7xxx: Payment ---

class PaymentAuthorizationFailedError(AppError):
    kind = "PAYMENT_AUTHORIZATION_FAILED"

    def __init__(self, reason: str, message: str) -> None:
        super().__init__(
            7001,
            f"Payment authorization failed: {message}",
            402,
            details={"reason": reason},
        )
        self.reason = reason


# --- 9xxx: System ---

class RateLimitError(AppError):
    kind = "RATE_LIMITED"

    def __init__(self) -> None:
        super().__init__(9001, "Rate limit exceeded", 429)


class InternalError(AppError):
    kind = "INTERNAL_ERROR"

    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class TransactionTimeoutError(AppError):
    kind = "TRANSACTION_TIMEOUT"

    def __init__(self, timeout_seconds: float) -> None:
        super().__init__(
            9003,
            f"Order transaction did not complete within {timeout_seconds:g}s",
            504,
        )
