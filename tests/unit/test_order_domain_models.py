"""Tests for mp_order domain models: status history and line snapshots."""

import json
from datetime import UTC, datetime, timedelta

from src.mp_order.domain.models import (
    Order,
    OrderItem,
    StatusHistoryEntry,
    dump_status_history,
    parse_status_history,
)

T0 = datetime(2026, 10, 18, 12, 0, 0, tzinfo=UTC)


def _make_order(**kwargs) -> Order:
    defaults = dict(
        id="100", order_number="ORD-20261018120000-AB12", buyer_id="buyer-1",
        subtotal=30_000, total=30_000, currency="ZAR",
    )
    defaults.update(kwargs)
    return Order(**defaults)


class TestOrderDefaults:
    def test_new_order_is_pending(self) -> None:
        order = _make_order()
        assert order.status == "PENDING"
        assert order.discount_amount == 0
        assert order.status_history == ()
        assert order.items == []
        assert order.item_count == 0

    def test_item_count(self) -> None:
        items = [
            OrderItem(id=str(n), order_id="100", product_id=f"P{n}", product_title="t",
                      product_brand=None, unit_price=100, quantity=n, line_total=100 * n)
            for n in range(1, 4)
        ]
        assert _make_order(items=items).item_count == 3


class TestRecordStatus:
    def test_appends_entries(self) -> None:
        order = _make_order()
        order.record_status("PENDING", "Order created", T0)
        order.record_status("FULFILLED", "done", T0 + timedelta(seconds=1))
        assert [e.status for e in order.status_history] == ["PENDING", "FULFILLED"]
        assert order.status_history[1].note == "done"

    def test_history_is_replaced_not_mutated(self) -> None:
        order = _make_order()
        order.record_status("PENDING", at=T0)
        before = order.status_history
        order.record_status("FULFILLED", at=T0 + timedelta(seconds=1))
        assert len(before) == 1
        assert len(order.status_history) == 2

    def test_equal_timestamps_are_bumped(self) -> None:
        order = _make_order()
        order.record_status("PENDING", at=T0)
        entry = order.record_status("FULFILLED", at=T0)
        assert entry.timestamp > T0

    def test_clock_going_backwards_keeps_order(self) -> None:
        order = _make_order()
        order.record_status("PENDING", at=T0)
        entry = order.record_status("FULFILLED", at=T0 - timedelta(minutes=5))
        assert entry.timestamp > order.status_history[0].timestamp

    def test_defaults_to_now(self) -> None:
        entry = _make_order().record_status("PENDING")
        assert entry.timestamp.tzinfo is not None


class TestHistorySerialization:
    def test_entry_round_trip(self) -> None:
        entry = StatusHistoryEntry("FULFILLED", T0, "ready")
        assert StatusHistoryEntry.from_dict(entry.to_dict()) == entry

    def test_dump_is_json_array(self) -> None:
        dumped = dump_status_history((StatusHistoryEntry("PENDING", T0, "Order created"),))
        assert json.loads(dumped) == [
            {"status": "PENDING", "timestamp": T0.isoformat(), "note": "Order created"},
        ]

    def test_parse_accepts_string_and_list(self) -> None:
        raw = [{"status": "PENDING", "timestamp": T0.isoformat(), "note": None}]
        assert parse_status_history(raw) == parse_status_history(json.dumps(raw))
        assert parse_status_history(raw)[0].timestamp == T0

    def test_parse_missing_note(self) -> None:
        parsed = parse_status_history([{"status": "PENDING", "timestamp": T0.isoformat()}])
        assert parsed[0].note is None

    def test_parse_none(self) -> None:
        assert parse_status_history(None) == ()
