"""InventoryRepository Protocol: the store the order pipeline reads and decrements.

Unit tests inject an in-memory implementation that conforms to this Protocol.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.mp_inventory.domain.models import InventoryItem


class InventoryRepositoryProtocol(Protocol):
    async def get_by_id(self, item_id: str, db: AsyncSession) -> InventoryItem | None: ...

    async def get_by_ids(
        self, item_ids: list[str], db: AsyncSession
    ) -> list[InventoryItem]: ...

    async def get_listed_item(
        self, item_id: str, db: AsyncSession
    ) -> InventoryItem | None: ...

    async def conditional_decrement(
        self, item_id: str, amount: int, db: AsyncSession
    ) -> InventoryItem:
        """Atomically subtract ``amount`` if at least that much is in stock.

        Raises InsufficientStockError (or ProductNotFoundError) instead of
        ever letting quantity go negative.
        """
        ...
