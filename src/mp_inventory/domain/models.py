"""Inventory domain model — pure dataclass, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime

from src.mp_common.enums import InventoryStatus


@dataclass
class InventoryItem:
    id: str
    seller_id: str
    title: str
    brand: str | None
    category: str
    condition: str
    resale_price: int | None  # cents; None until priced
    currency: str
    quantity: int
    status: str  # DRAFT / PRICED / LISTED
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_listed(self) -> bool:
        return self.status == InventoryStatus.LISTED
