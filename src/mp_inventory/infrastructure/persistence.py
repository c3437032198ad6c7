"""InventoryRepository — raw SQL persistence implementation.

The stock decrement is a single conditional UPDATE ... RETURNING. Zero rows
means the precondition (enough stock) did not hold at write time, so it is
safe under concurrent buyers: a competing transaction that already took
the row lock makes Postgres re-evaluate the WHERE clause against the
committed quantity before this UPDATE proceeds.

Transaction ownership: the CALLER (order coordinator) starts and commits
the transaction via ``async with db.begin()``.
"""

from typing import Any

from sqlalchemy import bindparam, text
from sqlalchemy.ext.asyncio import AsyncSession

from src.mp_common.errors import InsufficientStockError, ProductNotFoundError
from src.mp_inventory.domain.models import InventoryItem

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_SELECT_COLUMNS = """
    id, seller_id, title, brand, category, condition,
    resale_price, currency, quantity, status, created_at, updated_at
"""

_GET_ITEM_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM inventory_items WHERE id = :id
""")

_GET_ITEMS_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM inventory_items WHERE id IN :ids
""").bindparams(bindparam("ids", expanding=True))

_GET_LISTED_ITEM_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM inventory_items
    WHERE id = :id AND status = 'LISTED' AND resale_price IS NOT NULL
""")

_CONDITIONAL_DECREMENT_SQL = text(f"""
    UPDATE inventory_items
    SET quantity = quantity - :amount,
        updated_at = NOW()
    WHERE id = :id AND quantity >= :amount
    RETURNING {_SELECT_COLUMNS}
""")


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_item(row: Any) -> InventoryItem:
    """Convert a DB result row to an InventoryItem domain object."""
    return InventoryItem(
        id=row.id,
        seller_id=row.seller_id,
        title=row.title,
        brand=row.brand,
        category=row.category,
        condition=row.condition,
        resale_price=row.resale_price,
        currency=row.currency,
        quantity=row.quantity,
        status=row.status,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class InventoryRepository:
    """Concrete implementation of InventoryRepositoryProtocol using raw SQL."""

    async def get_by_id(self, item_id: str, db: AsyncSession) -> InventoryItem | None:
        result = await db.execute(_GET_ITEM_SQL, {"id": item_id})
        row = result.fetchone()
        return _row_to_item(row) if row else None

    async def get_by_ids(
        self, item_ids: list[str], db: AsyncSession
    ) -> list[InventoryItem]:
        if not item_ids:
            return []
        result = await db.execute(_GET_ITEMS_SQL, {"ids": list(item_ids)})
        return [_row_to_item(row) for row in result.fetchall()]

    async def get_listed_item(
        self, item_id: str, db: AsyncSession
    ) -> InventoryItem | None:
        result = await db.execute(_GET_LISTED_ITEM_SQL, {"id": item_id})
        row = result.fetchone()
        return _row_to_item(row) if row else None

    async def conditional_decrement(
        self, item_id: str, amount: int, db: AsyncSession
    ) -> InventoryItem:
        if amount <= 0:
            raise ValueError(f"decrement amount must be positive, got {amount}")
        result = await db.execute(
            _CONDITIONAL_DECREMENT_SQL, {"id": item_id, "amount": amount}
        )
        row = result.fetchone()
        if row is None:
            # Read back only to build an accurate error message
            current = await self.get_by_id(item_id, db)
            if current is None:
                raise ProductNotFoundError(item_id)
            raise InsufficientStockError(item_id, amount, current.quantity)
        return _row_to_item(row)
