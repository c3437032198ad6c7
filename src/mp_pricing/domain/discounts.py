"""DiscountCatalog — static discount codes and their validation rules.

Validation is a pure function of (code, subtotal, now). Rules are checked
in order and the first failure wins:

  1. unknown code            -> INVALID
  2. is_active is False      -> INACTIVE
  3. expires_at before now   -> EXPIRED
  4. subtotal < min_order    -> BELOW_MINIMUM

Amounts are int cents. Percentage discounts round half-up to the cent and
are capped at max_discount; every discount is clamped to the subtotal.

Checkout is lenient: ``apply_discount`` turns any rejection into a zero
discount instead of failing the order. The rejection reason is still
reported on the result so the caller can log or surface it.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime

from src.mp_common.cents import percent_of
from src.mp_common.datetime_utils import utc_now
from src.mp_common.enums import DiscountRejection, DiscountType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Discount:
    code: str
    description: str
    type: DiscountType
    value: int  # percent (0-100) for PERCENTAGE, cents for FIXED
    is_active: bool = True
    min_order_amount: int | None = None  # cents
    max_discount: int | None = None  # cents, PERCENTAGE only
    expires_at: datetime | None = None


@dataclass(frozen=True)
class DiscountValidation:
    valid: bool
    discount: Discount | None = None
    amount: int = 0
    rejection: DiscountRejection | None = None
    message: str | None = None


@dataclass(frozen=True)
class PricingResult:
    subtotal: int
    discount_code: str | None
    discount_amount: int
    total: int
    discount_description: str | None = None
    rejection: DiscountRejection | None = None


DEFAULT_DISCOUNTS: tuple[Discount, ...] = (
    Discount(
        code="WELCOME10",
        description="10% off your first order",
        type=DiscountType.PERCENTAGE,
        value=10,
    ),
    Discount(
        code="SAVE50",
        description="R50 off orders over R500",
        type=DiscountType.FIXED,
        value=5_000,
        min_order_amount=50_000,
    ),
    Discount(
        code="VIP20",
        description="20% off (max R200)",
        type=DiscountType.PERCENTAGE,
        value=20,
        max_discount=20_000,
    ),
    Discount(
        code="EXPIRED",
        description="Expired discount",
        type=DiscountType.PERCENTAGE,
        value=15,
        expires_at=datetime(2025, 12, 31, tzinfo=UTC),
    ),
    Discount(
        code="INACTIVE",
        description="Inactive discount",
        type=DiscountType.PERCENTAGE,
        value=25,
        is_active=False,
    ),
)


def normalize_code(code: str) -> str:
    return code.strip().upper()


class DiscountCatalog:
    """Immutable lookup of discount codes."""

    def __init__(self, discounts: Iterable[Discount] = DEFAULT_DISCOUNTS) -> None:
        self._discounts: dict[str, Discount] = {
            normalize_code(d.code): d for d in discounts
        }

    def get(self, code: str) -> Discount | None:
        return self._discounts.get(normalize_code(code))

    def validate(
        self, code: str, subtotal: int, now: datetime | None = None
    ) -> DiscountValidation:
        moment = now or utc_now()
        discount = self.get(code)

        if discount is None:
            return DiscountValidation(
                valid=False,
                rejection=DiscountRejection.INVALID,
                message=f"Invalid discount code: {code}",
            )
        if not discount.is_active:
            return DiscountValidation(
                valid=False,
                discount=discount,
                rejection=DiscountRejection.INACTIVE,
                message=f'Discount code "{code}" is no longer active',
            )
        if discount.expires_at is not None and moment > discount.expires_at:
            return DiscountValidation(
                valid=False,
                discount=discount,
                rejection=DiscountRejection.EXPIRED,
                message=f'Discount code "{code}" has expired',
            )
        if discount.min_order_amount is not None and subtotal < discount.min_order_amount:
            return DiscountValidation(
                valid=False,
                discount=discount,
                rejection=DiscountRejection.BELOW_MINIMUM,
                message=(
                    f"Minimum order of {discount.min_order_amount} cents "
                    f'required for code "{code}"'
                ),
            )

        return DiscountValidation(
            valid=True,
            discount=discount,
            amount=compute_discount_amount(discount, subtotal),
        )

    def apply_discount(
        self, subtotal: int, code: str | None = None, now: datetime | None = None
    ) -> PricingResult:
        if not code or not code.strip():
            return PricingResult(
                subtotal=subtotal, discount_code=None, discount_amount=0, total=subtotal
            )

        validation = self.validate(code, subtotal, now)
        if not validation.valid or validation.discount is None:
            logger.debug("Discount code ignored (%s): %s", validation.rejection, validation.message)
            return PricingResult(
                subtotal=subtotal,
                discount_code=None,
                discount_amount=0,
                total=subtotal,
                rejection=validation.rejection,
            )

        return PricingResult(
            subtotal=subtotal,
            discount_code=validation.discount.code,
            discount_amount=validation.amount,
            total=subtotal - validation.amount,
            discount_description=validation.discount.description,
        )


def compute_discount_amount(discount: Discount, subtotal: int) -> int:
    if discount.type == DiscountType.PERCENTAGE:
        amount = percent_of(subtotal, discount.value)
        if discount.max_discount is not None:
            amount = min(amount, discount.max_discount)
    else:
        amount = discount.value
    return max(0, min(amount, subtotal))
