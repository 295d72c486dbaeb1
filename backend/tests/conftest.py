"""Shared test fixtures for all test groups."""

import os
import time

# Set before any apoio import: get_settings() is cached on first call.
os.environ.setdefault("AUTH_SECRET", "test-auth-secret-0123456789abcdef0123")
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_dummy")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_test_dummy")
os.environ.setdefault("HOST_URL", "https://apoio.test")

import jwt as pyjwt
import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from apoio.db.base import Base, make_engine, normalize_async_url
from apoio.db.models import Donation, User


@pytest.fixture
def test_db_url(tmp_path) -> str:
    """TEST_DATABASE_URL when set (e.g. PostgreSQL), otherwise a throwaway SQLite file."""
    url = os.getenv("TEST_DATABASE_URL") or f"sqlite+aiosqlite:///{tmp_path / 'apoio_test.db'}"
    return normalize_async_url(url)


@pytest.fixture
async def engine(test_db_url: str) -> AsyncEngine:
    """Create the test engine with a fresh schema.

    Also sets the global session factory in the pytest-asyncio event loop so
    services that call get_session_factory() work in-process. Tests using
    TestClient (api_client) reset the global in their own loop.
    """
    import apoio.db.base as db_mod

    engine = make_engine(test_db_url)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    db_mod._engine = engine
    db_mod._session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    db_mod._engine = None
    db_mod._session_factory = None
    await engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncSession:
    """Async session bound to the pytest-asyncio event loop."""
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest.fixture
def fresh_session(engine: AsyncEngine):
    """Factory for new sessions, for reading what another session committed."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture(autouse=True)
def _reset_provisioned_cache():
    from apoio.core import auth

    auth._provisioned_cache.clear()
    yield
    auth._provisioned_cache.clear()


@pytest.fixture
async def creator(db_session: AsyncSession) -> User:
    """Onboarded creator with a connected Stripe account."""
    user = User(
        id="user_creator_001",
        name="Maria Souza",
        email="maria@example.com",
        username="maria-souza",
        bio="Podcast sobre culinária",
        connected_stripe_account_id="acct_1",
    )
    db_session.add(user)
    await db_session.commit()
    return user


@pytest.fixture
def make_donation(db_session: AsyncSession):
    """Factory that persists a donation for a user."""

    async def _make(user_id: str, amount: int = 1800, status: str = "PAID", **kwargs) -> Donation:
        donation = Donation(
            user_id=user_id,
            amount=amount,
            donor_name=kwargs.pop("donor_name", "Ana"),
            donor_message=kwargs.pop("donor_message", "Obrigada pelo conteúdo"),
            status=status,
            **kwargs,
        )
        db_session.add(donation)
        await db_session.commit()
        return donation

    return _make


@pytest.fixture
def make_session_token():
    """Mint HS256 session tokens signed with the test AUTH_SECRET."""

    def _make(sub: str, expires_in: int = 3600, **claims) -> str:
        payload = {"sub": sub, "exp": int(time.time()) + expires_in, **claims}
        return pyjwt.encode(payload, os.environ["AUTH_SECRET"], algorithm="HS256")

    return _make
