"""OrderRepository — raw SQL persistence implementation.

status_history is a JSONB array that is only ever extended with ``||``;
no statement rewrites existing entries.
"""

import json
from datetime import datetime
from typing import Any

from sqlalchemy import bindparam, text
from sqlalchemy.ext.asyncio import AsyncSession

from src.mp_common.errors import DuplicateOrderNumberError
from src.mp_order.domain.models import (
    Order,
    OrderItem,
    ProductSnapshot,
    StatusHistoryEntry,
    dump_status_history,
    parse_status_history,
)

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_INSERT_ORDER_SQL = text("""
    INSERT INTO orders (id, order_number, buyer_id,
        subtotal, discount_code, discount_amount, total, currency,
        status, status_history)
    VALUES (:id, :order_number, :buyer_id,
        :subtotal, :discount_code, :discount_amount, :total, :currency,
        :status, CAST(:status_history AS JSONB))
    ON CONFLICT (order_number) DO NOTHING
    RETURNING created_at, updated_at
""")

_INSERT_ITEM_SQL = text("""
    INSERT INTO order_items (id, order_id, product_id, product_title, product_brand,
        unit_price, quantity, line_total)
    VALUES (:id, :order_id, :product_id, :product_title, :product_brand,
        :unit_price, :quantity, :line_total)
""")

_UPDATE_PRICING_SQL = text("""
    UPDATE orders
    SET discount_code = :discount_code,
        discount_amount = :discount_amount,
        total = :total,
        updated_at = NOW()
    WHERE id = :id
""")

_SET_PAYMENT_AUTH_SQL = text("""
    UPDATE orders
    SET payment_auth_id = :payment_auth_id, updated_at = NOW()
    WHERE id = :id
""")

_UPDATE_STATUS_SQL = text("""
    UPDATE orders
    SET status = :status,
        fulfilled_at = COALESCE(CAST(:fulfilled_at AS TIMESTAMPTZ), fulfilled_at),
        status_history = status_history || CAST(:new_entries AS JSONB),
        updated_at = NOW()
    WHERE id = :id
""")

_SELECT_COLUMNS = """
    id, order_number, buyer_id, subtotal, discount_code, discount_amount,
    total, currency, status, payment_auth_id, fulfilled_at, cancelled_at,
    status_history, created_at, updated_at
"""

_GET_ORDER_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM orders
    WHERE id = :id
      AND (CAST(:buyer_id AS TEXT) IS NULL OR buyer_id = :buyer_id)
""")

_LIST_ORDERS_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM orders
    WHERE buyer_id = :buyer_id
      AND (CAST(:cursor_id AS TEXT) IS NULL OR id < :cursor_id)
    ORDER BY id DESC
    LIMIT :limit
""")

_GET_ITEMS_SQL = text("""
    SELECT oi.id, oi.order_id, oi.product_id, oi.product_title, oi.product_brand,
           oi.unit_price, oi.quantity, oi.line_total,
           p.id AS p_id, p.title AS p_title, p.brand AS p_brand,
           p.category AS p_category, p.condition AS p_condition
    FROM order_items oi
    LEFT JOIN inventory_items p ON p.id = oi.product_id
    WHERE oi.order_id IN :order_ids
    ORDER BY oi.id
""").bindparams(bindparam("order_ids", expanding=True))


# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_order(row: Any) -> Order:
    """Convert a DB result row to an Order domain object (items attached separately)."""
    return Order(
        id=row.id,
        order_number=row.order_number,
        buyer_id=row.buyer_id,
        subtotal=row.subtotal,
        discount_code=row.discount_code,
        discount_amount=row.discount_amount,
        total=row.total,
        currency=row.currency,
        status=row.status,
        payment_auth_id=row.payment_auth_id,
        fulfilled_at=row.fulfilled_at,
        cancelled_at=row.cancelled_at,
        status_history=parse_status_history(row.status_history),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _row_to_item(row: Any) -> OrderItem:
    product = None
    if row.p_id is not None:
        product = ProductSnapshot(
            id=row.p_id,
            title=row.p_title,
            brand=row.p_brand,
            category=row.p_category,
            condition=row.p_condition,
        )
    return OrderItem(
        id=row.id,
        order_id=row.order_id,
        product_id=row.product_id,
        product_title=row.product_title,
        product_brand=row.product_brand,
        unit_price=row.unit_price,
        quantity=row.quantity,
        line_total=row.line_total,
        product=product,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class OrderRepository:
    """Concrete implementation of OrderRepositoryProtocol using raw SQL."""

    async def save(self, order: Order, db: AsyncSession) -> None:
        result = await db.execute(
            _INSERT_ORDER_SQL,
            {
                "id": order.id,
                "order_number": order.order_number,
                "buyer_id": order.buyer_id,
                "subtotal": order.subtotal,
                "discount_code": order.discount_code,
                "discount_amount": order.discount_amount,
                "total": order.total,
                "currency": order.currency,
                "status": order.status,
                "status_history": dump_status_history(order.status_history),
            },
        )
        row = result.fetchone()
        if row is None:
            # ON CONFLICT DO NOTHING keeps the surrounding transaction usable
            raise DuplicateOrderNumberError(order.order_number)
        order.created_at = row.created_at
        order.updated_at = row.updated_at

        if order.items:
            await db.execute(
                _INSERT_ITEM_SQL,
                [
                    {
                        "id": item.id,
                        "order_id": order.id,
                        "product_id": item.product_id,
                        "product_title": item.product_title,
                        "product_brand": item.product_brand,
                        "unit_price": item.unit_price,
                        "quantity": item.quantity,
                        "line_total": item.line_total,
                    }
                    for item in order.items
                ],
            )

    async def update_pricing(self, order: Order, db: AsyncSession) -> None:
        await db.execute(
            _UPDATE_PRICING_SQL,
            {
                "id": order.id,
                "discount_code": order.discount_code,
                "discount_amount": order.discount_amount,
                "total": order.total,
            },
        )

    async def set_payment_auth(
        self, order_id: str, payment_auth_id: str, db: AsyncSession
    ) -> None:
        await db.execute(
            _SET_PAYMENT_AUTH_SQL, {"id": order_id, "payment_auth_id": payment_auth_id}
        )

    async def update_status(
        self,
        order_id: str,
        status: str,
        db: AsyncSession,
        history_entry: StatusHistoryEntry | None = None,
        fulfilled_at: datetime | None = None,
    ) -> None:
        new_entries = [history_entry.to_dict()] if history_entry else []
        await db.execute(
            _UPDATE_STATUS_SQL,
            {
                "id": order_id,
                "status": status,
                "fulfilled_at": fulfilled_at,
                "new_entries": json.dumps(new_entries),
            },
        )

    async def get_by_id(
        self, order_id: str, buyer_id: str | None, db: AsyncSession
    ) -> Order | None:
        result = await db.execute(_GET_ORDER_SQL, {"id": order_id, "buyer_id": buyer_id})
        row = result.fetchone()
        if row is None:
            return None
        order = _row_to_order(row)
        await self._attach_items([order], db)
        return order

    async def list_by_buyer(
        self, buyer_id: str, limit: int, cursor_id: str | None, db: AsyncSession
    ) -> list[Order]:
        result = await db.execute(
            _LIST_ORDERS_SQL,
            {"buyer_id": buyer_id, "cursor_id": cursor_id, "limit": limit},
        )
        orders = [_row_to_order(row) for row in result.fetchall()]
        await self._attach_items(orders, db)
        return orders

    async def _attach_items(self, orders: list[Order], db: AsyncSession) -> None:
        if not orders:
            return
        by_id = {order.id: order for order in orders}
        result = await db.execute(_GET_ITEMS_SQL, {"order_ids": list(by_id)})
        for row in result.fetchall():
            by_id[row.order_id].items.append(_row_to_item(row))
