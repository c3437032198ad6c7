"""Integration-test fixtures.

Needs PostgreSQL with ``alembic upgrade head`` applied and a reachable
Redis; the whole directory is skipped unless RUN_INTEGRATION=1.

All integration tests share a single event-loop so that the module-level
SQLAlchemy async engine pool and Redis pool (both created at import time)
remain valid across the entire test session.
"""

import os
import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text

from src.main import app
from src.mp_common.database import async_session_factory
from src.mp_gateway.auth.jwt_handler import create_access_token
from src.mp_order.application.coordinator import OrderTransactionCoordinator
from src.mp_order.application.service import OrderApplicationService, get_order_service
from src.mp_payment.infrastructure.simulated_gateway import SimulatedPaymentGateway

_RUN = os.environ.get("RUN_INTEGRATION") == "1"


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    skip = pytest.mark.skip(reason="set RUN_INTEGRATION=1 to run against PostgreSQL + Redis")
    for item in items:
        if "integration" in item.path.parts:
            item.add_marker(pytest.mark.integration)
            if not _RUN:
                item.add_marker(skip)


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncGenerator[AsyncClient, None]:  # type: ignore[override]
    """Session-scoped async HTTP client with an always-approving, instant gateway."""
    service = OrderApplicationService(
        coordinator=OrderTransactionCoordinator(
            gateway=SimulatedPaymentGateway(success_rate=1.0, min_latency_ms=0, max_latency_ms=0)
        )
    )
    app.dependency_overrides[get_order_service] = lambda: service
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def buyer_headers() -> dict[str, str]:
    """A fresh buyer per test keeps order lists and rate-limit windows isolated."""
    buyer_id = f"buyer-{uuid.uuid4().hex[:8]}"
    return {"Authorization": f"Bearer {create_access_token(buyer_id)}"}


async def purge_items(item_ids: list[str]) -> None:
    """Delete the given inventory rows and every order that bought any of them.

    Removing the orders cascades to their order_items.
    """
    async with async_session_factory() as session, session.begin():
        await session.execute(
            text("""
                DELETE FROM orders WHERE id IN (
                    SELECT order_id FROM order_items WHERE product_id = ANY(:ids)
                )
            """),
            {"ids": item_ids},
        )
        await session.execute(
            text("DELETE FROM inventory_items WHERE id = ANY(:ids)"), {"ids": item_ids}
        )


@pytest_asyncio.fixture(loop_scope="session")
async def listed_item() -> AsyncGenerator[Callable[..., Awaitable[str]], None]:
    """Factory inserting a LISTED inventory item; rows are removed afterwards."""
    created: list[str] = []

    async def _create(quantity: int = 5, resale_price: int = 15_000, status: str = "LISTED") -> str:
        item_id = f"IT-{uuid.uuid4().hex[:12]}"
        async with async_session_factory() as session, session.begin():
            await session.execute(
                text("""
                    INSERT INTO inventory_items (id, seller_id, title, brand, category,
                        condition, original_price, resale_price, currency, quantity, status)
                    VALUES (:id, 'seller-it', 'Integration Tee', 'Test', 'Tops',
                        'GOOD', :price * 2, :price, 'ZAR', :quantity, :status)
                """),
                {"id": item_id, "price": resale_price, "quantity": quantity, "status": status},
            )
        created.append(item_id)
        return item_id

    yield _create

    await purge_items(created)


@pytest.fixture
def purge() -> Callable[[list[str]], Awaitable[None]]:
    return purge_items


@pytest.fixture
def stock_of() -> Callable[[str], Awaitable[int]]:
    async def _stock_of(item_id: str) -> int:
        async with async_session_factory() as session:
            result = await session.execute(
                text("SELECT quantity FROM inventory_items WHERE id = :id"), {"id": item_id}
            )
            return int(result.scalar_one())

    return _stock_of
