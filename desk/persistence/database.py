"""Async engine and session factory for PostgreSQL."""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from desk.config import Settings

APPLICATION_NAME = "blackdesk-api"


def create_engine(settings: Settings) -> AsyncEngine:
    """Create the asyncpg engine.

    Connections are tagged with ``application_name`` so they can be told
    apart in ``pg_stat_activity``.

    Args:
        settings: Application settings with database URL and pool sizes
    """
    return create_async_engine(
        settings.database_url,
        echo=settings.debug,
        pool_pre_ping=True,
        pool_size=settings.database.pool_size,
        max_overflow=settings.database.max_overflow,
        connect_args={"server_settings": {"application_name": APPLICATION_NAME}},
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create the per-request session factory.

    Repositories work with SQLAlchemy Core and map rows themselves, so
    nothing relies on ORM expiry or autoflush.
    """
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)
