import logging
from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from beacon.configs import configs

logger = logging.getLogger(__name__)

ASYNC_DATABASE_URL = configs.Database.url


def _engine_kwargs() -> dict[str, Any]:
    if configs.Database.Engine == "sqlite":
        return {"connect_args": {"check_same_thread": False}}
    pg = configs.Database.Postgres
    return {
        "pool_size": pg.PoolSize,
        "max_overflow": pg.MaxOverflow,
        "pool_timeout": pg.PoolTimeout,
        "pool_pre_ping": True,
        "pool_recycle": 1800,
    }


async_engine: AsyncEngine = create_async_engine(
    ASYNC_DATABASE_URL,
    echo=False,
    future=True,
    **_engine_kwargs(),
)

AsyncSessionLocal = async_sessionmaker(
    bind=async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request, rolled back on error."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def create_db_and_tables() -> None:
    # Import models so their tables are registered on SQLModel.metadata
    import beacon.models  # noqa: F401

    async with async_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("Database tables ensured (engine=%s)", configs.Database.Engine)
