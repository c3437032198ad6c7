"""Order domain model — pure dataclasses, no SQLAlchemy dependency."""

import json
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from src.mp_common.datetime_utils import utc_now
from src.mp_common.enums import OrderStatus

_MIN_TICK = timedelta(microseconds=1)


@dataclass(frozen=True)
class StatusHistoryEntry:
    status: str
    timestamp: datetime
    note: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "timestamp": self.timestamp.isoformat(),
            "note": self.note,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "StatusHistoryEntry":
        return cls(
            status=raw["status"],
            timestamp=datetime.fromisoformat(raw["timestamp"]),
            note=raw.get("note"),
        )


def parse_status_history(raw: Any) -> tuple[StatusHistoryEntry, ...]:
    """Accept the JSONB column as a JSON string or an already-decoded list."""
    if raw is None:
        return ()
    if isinstance(raw, str):
        raw = json.loads(raw)
    return tuple(StatusHistoryEntry.from_dict(entry) for entry in raw)


def dump_status_history(entries: tuple[StatusHistoryEntry, ...]) -> str:
    return json.dumps([entry.to_dict() for entry in entries])


@dataclass(frozen=True)
class ProductSnapshot:
    """Read-only view of the product behind an order line."""

    id: str
    title: str
    brand: str | None
    category: str
    condition: str


@dataclass
class OrderItem:
    id: str
    order_id: str
    product_id: str
    product_title: str
    product_brand: str | None
    unit_price: int  # cents, captured at order time
    quantity: int
    line_total: int  # cents
    product: ProductSnapshot | None = None


@dataclass
class Order:
    id: str
    order_number: str
    buyer_id: str
    subtotal: int  # cents
    total: int  # cents
    currency: str
    status: str = OrderStatus.PENDING.value
    discount_code: str | None = None
    discount_amount: int = 0
    payment_auth_id: str | None = None
    fulfilled_at: datetime | None = None
    cancelled_at: datetime | None = None
    # Append-only: replaced by a longer tuple, never edited in place
    status_history: tuple[StatusHistoryEntry, ...] = ()
    items: list[OrderItem] = field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def item_count(self) -> int:
        return len(self.items)

    def record_status(
        self, status: str, note: str | None = None, at: datetime | None = None
    ) -> StatusHistoryEntry:
        """Append a history entry; timestamps are kept strictly increasing."""
        moment = at or utc_now()
        if self.status_history and moment <= self.status_history[-1].timestamp:
            moment = self.status_history[-1].timestamp + _MIN_TICK
        entry = StatusHistoryEntry(status=status, timestamp=moment, note=note)
        self.status_history = (*self.status_history, entry)
        return entry
