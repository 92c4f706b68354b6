"""
Database configuration.

Async SQLAlchemy engine and session factory.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from capital.config.settings import settings


def create_engine(database_url: str | None = None, **kwargs) -> AsyncEngine:
    """
    Create async engine.

    Args:
        database_url: Database URL (defaults to settings.database_url)
        **kwargs: Extra engine options

    Returns:
        Async engine
    """
    url = database_url or settings.database_url
    if url.startswith("postgresql"):
        # Sizing options are only valid for the default QueuePool
        if "poolclass" not in kwargs:
            kwargs.setdefault("pool_size", 10)
            kwargs.setdefault("max_overflow", 20)
        kwargs.setdefault("pool_pre_ping", True)
    return create_async_engine(url, echo=settings.database_echo, **kwargs)


def create_session_maker(
    engine: AsyncEngine,
) -> async_sessionmaker[AsyncSession]:
    """Create session maker bound to engine."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


engine = create_engine()
async_session_maker = create_session_maker(engine)
