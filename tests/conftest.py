from collections.abc import AsyncGenerator, Callable

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

import beacon.models  # noqa: F401
from beacon.configs import configs
from beacon.models.sessions import Session
from tests.fixtures.client import async_client  # noqa: F401
from tests.fixtures.store import create_auth_session


@pytest_asyncio.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSession(db_engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
def override_get_session(db_session: AsyncSession) -> Callable[[], AsyncGenerator[AsyncSession, None]]:
    async def _override() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    return _override


@pytest.fixture
def vapid_keys(monkeypatch: pytest.MonkeyPatch) -> None:
    """Pretend a VAPID key pair is configured so dispatch attempts delivery."""
    monkeypatch.setattr(configs.Push, "VapidPublicKey", "test-public-key")
    monkeypatch.setattr(configs.Push, "VapidPrivateKey", "test-private-key")


@pytest_asyncio.fixture
async def auth_session(db_session: AsyncSession) -> Session:
    return await create_auth_session(db_session, "test-user")


@pytest.fixture
def auth_headers(auth_session: Session) -> dict[str, str]:
    return {"Authorization": f"Bearer {auth_session.token}"}
