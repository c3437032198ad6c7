"""OrderApplicationService: thin composition layer for the order API.

create_order delegates to the coordinator, which owns its transaction.
get_order and list_orders are read-only and run without explicit transaction.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from src.mp_common.errors import OrderNotFoundError
from src.mp_order.application.coordinator import OrderTransactionCoordinator
from src.mp_order.application.schemas import (
    CreateOrderRequest,
    OrderListResponse,
    OrderResponse,
)
from src.mp_order.domain.repository import OrderRepositoryProtocol
from src.mp_order.infrastructure.persistence import OrderRepository
from src.mp_pricing.domain.pricing import RequestedItem


class OrderApplicationService:
    def __init__(
        self,
        coordinator: OrderTransactionCoordinator | None = None,
        repo: OrderRepositoryProtocol | None = None,
    ) -> None:
        self._repo: OrderRepositoryProtocol = repo or OrderRepository()
        self._coordinator = coordinator or OrderTransactionCoordinator(orders=self._repo)

    async def create_order(
        self, req: CreateOrderRequest, buyer_id: str, db: AsyncSession
    ) -> OrderResponse:
        requested = [RequestedItem(i.product_id, i.quantity) for i in req.items]
        order = await self._coordinator.create_order(buyer_id, requested, req.discount_code, db)
        return OrderResponse.from_domain(order)

    async def get_order(
        self, order_id: str, buyer_id: str, db: AsyncSession
    ) -> OrderResponse:
        # Scoped to the buyer: someone else's order is indistinguishable from a missing one
        order = await self._repo.get_by_id(order_id, buyer_id, db)
        if order is None:
            raise OrderNotFoundError(order_id)
        return OrderResponse.from_domain(order)

    async def list_orders(
        self, buyer_id: str, limit: int, cursor: str | None, db: AsyncSession
    ) -> OrderListResponse:
        # Fetch limit+1 to detect has_more without a COUNT(*) query
        orders = await self._repo.list_by_buyer(buyer_id, limit + 1, cursor, db)
        has_more = len(orders) > limit
        page = orders[:limit]
        return OrderListResponse(
            items=[OrderResponse.from_domain(o) for o in page],
            next_cursor=page[-1].id if has_more and page else None,
            has_more=has_more,
        )


_service: OrderApplicationService | None = None


def get_order_service() -> OrderApplicationService:
    global _service  # noqa: PLW0603
    if _service is None:
        _service = OrderApplicationService()
    return _service
