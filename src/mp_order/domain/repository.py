"""OrderRepository Protocol — interface contract for persistence layer."""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.mp_order.domain.models import Order, StatusHistoryEntry


class OrderRepositoryProtocol(Protocol):
    async def save(self, order: Order, db: AsyncSession) -> None:
        """Insert order + items. Raises DuplicateOrderNumberError on conflict."""
        ...

    async def update_pricing(self, order: Order, db: AsyncSession) -> None: ...

    async def set_payment_auth(
        self, order_id: str, payment_auth_id: str, db: AsyncSession
    ) -> None: ...

    async def update_status(
        self,
        order_id: str,
        status: str,
        db: AsyncSession,
        history_entry: StatusHistoryEntry | None = None,
        fulfilled_at: datetime | None = None,
    ) -> None: ...

    async def get_by_id(
        self, order_id: str, buyer_id: str | None, db: AsyncSession
    ) -> Order | None: ...

    async def list_by_buyer(
        self, buyer_id: str, limit: int, cursor_id: str | None, db: AsyncSession
    ) -> list[Order]: ...
