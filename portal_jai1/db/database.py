# portal_jai1/db/database.py
from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncEngine, AsyncSession
from typing import AsyncGenerator

from portal_jai1.core.config import get_settings


def _async_url(url: str) -> str:
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


def build_engine(url: str, **overrides) -> AsyncEngine:
    """Create the async engine; pool sizing only applies to server databases"""
    settings = get_settings()
    url = _async_url(url)
    options = {"echo": settings.DEBUG}
    if not url.startswith("sqlite"):
        options.update(pool_size=settings.DB_POOL_SIZE, max_overflow=settings.DB_MAX_OVERFLOW)
    options.update(overrides)
    return create_async_engine(url, **options)


engine = build_engine(get_settings().DATABASE_URL)

# Create async session factory
async_session_local = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Database session dependency"""
    async with async_session_local() as session:
        try:
            yield session
        finally:
            await session.close()


async def ping(session: AsyncSession) -> None:
    """Light query used by the detailed health check"""
    await session.execute(text("SELECT 1"))


async def init_db():
    """Initialize database (create tables)"""
    from portal_jai1.db.base import Base

    async with engine.begin() as conn:
        # Import all models to ensure they're registered
        from portal_jai1.db.models import client_profile, audit_log  # noqa: F401

        await conn.run_sync(Base.metadata.create_all)


async def close_db():
    """Close database connections"""
    await engine.dispose()
