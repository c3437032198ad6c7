from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from config.settings import settings


class Base(DeclarativeBase):
    """Declarative base for the inventory and order ORM models (DDL reference)."""

    pass


# READ COMMITTED is enough for the order pipeline: oversell protection comes
# from the conditional UPDATE on inventory_items, which re-checks the row
# after waiting on a concurrent writer's row lock.
engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_size=20,
    max_overflow=10,
    isolation_level="READ COMMITTED",
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one AsyncSession per request, closed afterwards.

    The session is handed out without an open transaction; the order
    coordinator owns ``async with db.begin()``.
    """
    async with async_session_factory() as session:
        yield session
