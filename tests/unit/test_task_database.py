"""
Tests for engine construction in the API process and in task workers.

Covers:
- PostgreSQL task engine without connection pooling
- PostgreSQL pool sizing for the shared engine
"""

from sqlalchemy.pool import NullPool, QueuePool

from capital.config.database import create_engine
from capital.config.settings import settings
from jobs.utils.database import create_task_engine

POSTGRES_URL = "postgresql+asyncpg://user:pw@localhost:5432/capital"


class TestCreateTaskEngine:
    """Test worker engine setup."""

    def test_postgres_task_engine_uses_null_pool(self, monkeypatch):
        monkeypatch.setattr(settings, "database_url", POSTGRES_URL)

        engine = create_task_engine()

        assert isinstance(engine.sync_engine.pool, NullPool)
        assert engine.url.drivername == "postgresql+asyncpg"

    def test_sqlite_task_engine(self, monkeypatch):
        monkeypatch.setattr(settings, "database_url", "sqlite+aiosqlite:///:memory:")

        engine = create_task_engine()

        assert engine.url.drivername == "sqlite+aiosqlite"


class TestCreateEngine:
    """Test shared engine setup."""

    def test_postgres_pool_sizing(self):
        engine = create_engine(POSTGRES_URL)

        pool = engine.sync_engine.pool
        assert isinstance(pool, QueuePool)
        assert pool.size() == 10

    def test_explicit_pool_class_skips_sizing(self):
        engine = create_engine(POSTGRES_URL, poolclass=NullPool)

        assert isinstance(engine.sync_engine.pool, NullPool)
