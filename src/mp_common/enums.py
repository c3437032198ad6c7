"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class InventoryStatus(str, Enum):
    DRAFT = "DRAFT"
    PRICED = "PRICED"
    LISTED = "LISTED"


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    FULFILLED = "FULFILLED"
    # Reserved for a cancellation flow outside the order pipeline
    CANCELLED = "CANCELLED"


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class DiscountRejection(str, Enum):
    """Why a discount code was not applied; first failing rule wins."""
    INVALID = "INVALID"
    INACTIVE = "INACTIVE"
    EXPIRED = "EXPIRED"
    BELOW_MINIMUM = "BELOW_MINIMUM"


class DeclineReason(str, Enum):
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    CARD_DECLINED = "CARD_DECLINED"
    EXPIRED_CARD = "EXPIRED_CARD"
    FRAUD_DETECTED = "FRAUD_DETECTED"
    NETWORK_ERROR = "NETWORK_ERROR"
