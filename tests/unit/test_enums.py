"""Tests for mp_common.enums — all enum values must match DB CHECK constraints."""

from src.mp_common.enums import (
    DeclineReason,
    DiscountRejection,
    DiscountType,
    InventoryStatus,
    OrderStatus,
)


class TestAllEnumsAreStr:
    """All enums inherit from (str, Enum) for JSON serialization."""

    def test_order_status_is_str(self) -> None:
        assert isinstance(OrderStatus.PENDING, str)
        assert OrderStatus.FULFILLED == "FULFILLED"

    def test_inventory_status_is_str(self) -> None:
        assert InventoryStatus.LISTED == "LISTED"

    def test_discount_type_values_are_lowercase(self) -> None:
        assert DiscountType.PERCENTAGE == "percentage"
        assert DiscountType.FIXED == "fixed"


class TestEnumMembers:
    def test_order_status_members(self) -> None:
        assert {s.value for s in OrderStatus} == {
            "PENDING", "CONFIRMED", "FULFILLED", "CANCELLED",
        }

    def test_inventory_status_members(self) -> None:
        assert [s.value for s in InventoryStatus] == ["DRAFT", "PRICED", "LISTED"]

    def test_decline_reasons(self) -> None:
        assert {r.value for r in DeclineReason} == {
            "INSUFFICIENT_FUNDS", "CARD_DECLINED", "EXPIRED_CARD",
            "FRAUD_DETECTED", "NETWORK_ERROR",
        }

    def test_discount_rejection_order(self) -> None:
        assert [r.value for r in DiscountRejection] == [
            "INVALID", "INACTIVE", "EXPIRED", "BELOW_MINIMUM",
        ]
