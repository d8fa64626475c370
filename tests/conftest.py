import os
import tempfile
from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from planets.database import get_db
from planets.main import app
from planets.models import Base, Player, PlayerRole
from planets.services.auth_service import create_access_token


@pytest.fixture
async def db_engine():
    db_fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(db_fd)
    test_db_url = f"sqlite+aiosqlite:///{db_path}"
    engine = create_async_engine(test_db_url, connect_args={"check_same_thread": False})
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
async def db_session(db_engine) -> AsyncSession:
    session_factory = async_sessionmaker(db_engine, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client() -> AsyncClient:
    """HTTP client that does NOT override the DB (for endpoints that don't need DB)."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def db_client(db_session: AsyncSession) -> AsyncClient:
    """HTTP client with DB dependency overridden to use the test SQLite DB."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def make_player(db: AsyncSession, tag: str, role: PlayerRole = PlayerRole.user) -> Player:
    player = Player(
        username=tag,
        email=f"{tag}@example.com",
        display_name=tag.title(),
        role=role,
    )
    db.add(player)
    await db.commit()
    await db.refresh(player)
    return player


@pytest.fixture
async def admin_headers(db_session: AsyncSession) -> dict:
    admin = await make_player(db_session, "admin", PlayerRole.admin)
    return {"Authorization": f"Bearer {create_access_token(admin)}"}


@pytest.fixture
async def user_headers(db_session: AsyncSession) -> dict:
    user = await make_player(db_session, "pilot")
    return {"Authorization": f"Bearer {create_access_token(user)}"}


class FakeClock:
    """Settable UTC clock for time-dependent components."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()
