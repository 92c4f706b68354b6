"""Pytest configuration and shared fixtures for all tests."""

import os
import sys
from pathlib import Path

# Minimal environment for settings validation
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_FILE", "")

# Add project root to PYTHONPATH
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import itertools
from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from capital.config.database import create_session_maker
from capital.config.platform import PlatformConfig
from capital.models import Bank, Base, User
from capital.services.investment import InvestmentService
from capital.services.wallet_ledger import WalletLedger
from capital.utils.datetime_utils import FrozenClock


START_TIME = datetime(2025, 1, 1, 8, 0, tzinfo=UTC)

_phones = itertools.count(90000001)
_codes = itertools.count(1)


@pytest.fixture
def clock():
    """Controllable clock frozen at 2025-01-01 08:00 UTC."""
    return FrozenClock(START_TIME)


@pytest.fixture
def config():
    """Default platform configuration."""
    return PlatformConfig()


@pytest_asyncio.fixture
async def engine():
    """In-memory SQLite engine with all tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_maker(engine):
    """Session factory bound to the test engine."""
    return create_session_maker(engine)


@pytest_asyncio.fixture
async def session(session_maker):
    """Async session for one test."""
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def make_user(session, config, clock):
    """
    Factory creating an active user with an empty wallet.

    Password hashing is skipped; registration itself is covered by the
    user service tests.
    """

    async def _make_user(
        referred_by: int | None = None,
        is_active: bool = True,
        full_name: str = "Test User",
    ) -> User:
        now = clock.now()
        user = User(
            phone=str(next(_phones)),
            country_code="TG",
            full_name=full_name,
            password_hash="not-a-hash",
            referral_code=f"CODE{next(_codes):04d}",
            referred_by=referred_by,
            is_active=is_active,
            is_admin=False,
            created_at=now,
            updated_at=now,
        )
        session.add(user)
        await session.flush()
        await WalletLedger(session, config, clock).create_wallet(user.id)
        await session.commit()
        return user

    return _make_user


@pytest_asyncio.fixture
async def fund(session, config, clock):
    """Factory crediting a wallet outside of any workflow."""

    async def _fund(user_id: int, amount: Decimal | str) -> None:
        await WalletLedger(session, config, clock).credit(
            user_id, Decimal(amount)
        )
        await session.commit()

    return _fund


@pytest_asyncio.fixture
async def ledger(session, config, clock):
    """Wallet ledger bound to the test session."""
    return WalletLedger(session, config, clock)


@pytest_asyncio.fixture
async def bank(session):
    """Active bank."""
    bank = Bank(name="Ecobank", code="ECO", country_code="TG", is_active=True)
    session.add(bank)
    await session.commit()
    return bank


@pytest_asyncio.fixture
async def products(session, config, clock):
    """Default VIP catalog loaded into the store."""
    service = InvestmentService(session, config, clock)
    await service.seed_products()
    return await service.get_products()


@pytest.fixture
def mock_redis_client():
    """Mock Redis client for lock tests."""
    client = AsyncMock()
    client.set = AsyncMock(return_value=True)
    client.eval = AsyncMock(return_value=1)
    client.get = AsyncMock(return_value=None)
    client.delete = AsyncMock()
    return client
