"""Database setup shared by background tasks."""
import redis.asyncio as redis
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool

from capital.config.database import create_engine, create_session_maker
from capital.config.settings import settings


def create_task_engine() -> AsyncEngine:
    """Create an engine without pooling for worker threads."""
    if settings.database_url.startswith("sqlite"):
        return create_engine(settings.database_url)
    return create_engine(settings.database_url, poolclass=NullPool)


def create_task_session_maker(
    engine: AsyncEngine | None = None,
) -> async_sessionmaker[AsyncSession]:
    """Create a session maker for tasks."""
    if engine is None:
        engine = create_task_engine()
    return create_session_maker(engine)


def create_redis_client() -> redis.Redis:
    """Create a Redis client for task locks."""
    return redis.Redis(
        host=settings.redis_host,
        port=settings.redis_port,
        password=settings.redis_password,
        db=settings.redis_db,
        decode_responses=True,
    )
