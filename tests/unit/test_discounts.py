# tests/unit/test_discounts.py
"""DiscountCatalog: rule order, rounding, caps and lenient checkout."""
from datetime import UTC, datetime

import pytest

from src.mp_common.enums import DiscountRejection, DiscountType
from src.mp_pricing.domain.discounts import (
    DEFAULT_DISCOUNTS,
    Discount,
    DiscountCatalog,
    compute_discount_amount,
    normalize_code,
)

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=UTC)


@pytest.fixture
def catalog() -> DiscountCatalog:
    return DiscountCatalog()


class TestValidate:
    def test_welcome10_on_1000_rand(self, catalog: DiscountCatalog) -> None:
        result = catalog.validate("WELCOME10", 100_000, NOW)
        assert result.valid is True
        assert result.amount == 10_000
        assert result.discount is not None
        assert result.discount.code == "WELCOME10"

    def test_vip20_is_capped(self, catalog: DiscountCatalog) -> None:
        # 20% of R2000 is R400; cap is R200
        result = catalog.validate("VIP20", 200_000, NOW)
        assert result.amount == 20_000

    def test_vip20_below_cap(self, catalog: DiscountCatalog) -> None:
        assert catalog.validate("VIP20", 50_000, NOW).amount == 10_000

    def test_save50_fixed(self, catalog: DiscountCatalog) -> None:
        result = catalog.validate("SAVE50", 60_000, NOW)
        assert result.valid is True
        assert result.amount == 5_000

    def test_save50_at_exact_minimum(self, catalog: DiscountCatalog) -> None:
        assert catalog.validate("SAVE50", 50_000, NOW).valid is True

    def test_save50_below_minimum(self, catalog: DiscountCatalog) -> None:
        result = catalog.validate("SAVE50", 30_000, NOW)
        assert result.valid is False
        assert result.rejection == DiscountRejection.BELOW_MINIMUM
        assert result.amount == 0

    def test_unknown_code(self, catalog: DiscountCatalog) -> None:
        result = catalog.validate("FREESTUFF", 100_000, NOW)
        assert result.valid is False
        assert result.rejection == DiscountRejection.INVALID
        assert result.discount is None

    def test_inactive(self, catalog: DiscountCatalog) -> None:
        assert catalog.validate("INACTIVE", 100_000, NOW).rejection == DiscountRejection.INACTIVE

    def test_expired(self, catalog: DiscountCatalog) -> None:
        assert catalog.validate("EXPIRED", 100_000, NOW).rejection == DiscountRejection.EXPIRED

    def test_expired_code_still_valid_before_expiry(self, catalog: DiscountCatalog) -> None:
        before = datetime(2025, 6, 1, tzinfo=UTC)
        result = catalog.validate("EXPIRED", 100_000, before)
        assert result.valid is True
        assert result.amount == 15_000

    def test_inactive_checked_before_expiry(self) -> None:
        catalog = DiscountCatalog([
            Discount(
                code="OLD", description="old", type=DiscountType.PERCENTAGE, value=5,
                is_active=False, expires_at=datetime(2020, 1, 1, tzinfo=UTC),
            ),
        ])
        assert catalog.validate("OLD", 100, NOW).rejection == DiscountRejection.INACTIVE

    def test_case_and_whitespace_insensitive(self, catalog: DiscountCatalog) -> None:
        assert catalog.validate("  welcome10 ", 1_000, NOW).valid is True


class TestComputeDiscountAmount:
    def test_fixed_clamped_to_subtotal(self) -> None:
        discount = Discount(code="BIG", description="", type=DiscountType.FIXED, value=10_000)
        assert compute_discount_amount(discount, 4_000) == 4_000

    def test_percentage_rounds_half_up(self) -> None:
        discount = Discount(code="P10", description="", type=DiscountType.PERCENTAGE, value=10)
        assert compute_discount_amount(discount, 1_005) == 101

    def test_never_negative(self) -> None:
        discount = Discount(code="Z", description="", type=DiscountType.PERCENTAGE, value=0)
        assert compute_discount_amount(discount, 1_000) == 0


class TestApplyDiscount:
    def test_no_code(self, catalog: DiscountCatalog) -> None:
        result = catalog.apply_discount(30_000, None, NOW)
        assert result.discount_code is None
        assert result.discount_amount == 0
        assert result.total == 30_000
        assert result.rejection is None

    def test_blank_code(self, catalog: DiscountCatalog) -> None:
        assert catalog.apply_discount(30_000, "   ", NOW).total == 30_000

    def test_valid_code(self, catalog: DiscountCatalog) -> None:
        result = catalog.apply_discount(100_000, "welcome10", NOW)
        assert result.discount_code == "WELCOME10"
        assert result.discount_amount == 10_000
        assert result.total == 90_000
        assert result.discount_description == "10% off your first order"

    def test_rejected_code_is_lenient(self, catalog: DiscountCatalog) -> None:
        result = catalog.apply_discount(30_000, "SAVE50", NOW)
        assert result.discount_code is None
        assert result.discount_amount == 0
        assert result.total == 30_000
        assert result.rejection == DiscountRejection.BELOW_MINIMUM

    @pytest.mark.parametrize("subtotal", [0, 1, 999, 50_000, 1_000_000])
    @pytest.mark.parametrize("code", [d.code for d in DEFAULT_DISCOUNTS])
    def test_total_consistency(self, catalog: DiscountCatalog, code: str, subtotal: int) -> None:
        result = catalog.apply_discount(subtotal, code, NOW)
        assert 0 <= result.discount_amount <= subtotal
        assert result.total == subtotal - result.discount_amount


def test_normalize_code() -> None:
    assert normalize_code(" vip20 ") == "VIP20"


def test_get_is_case_insensitive() -> None:
    catalog = DiscountCatalog()
    discount = catalog.get("vip20")
    assert discount is not None
    assert discount.max_discount == 20_000
