# booking_notifier/db/session.py
"""
Database session and base class setup (SQLAlchemy 2.0 style).
"""
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from booking_notifier.config import settings

DATABASE_URL = settings.DATABASE_URL

# If tests set an in-memory SQLite URL, replace it with a file-backed URL
# so multiple connections share the same schema during pytest runs.
if DATABASE_URL and ":memory:" in DATABASE_URL:
    DATABASE_URL = "sqlite+aiosqlite:///./.test_sqlite.db"

engine = create_async_engine(DATABASE_URL, future=True, echo=False, pool_pre_ping=True)
SessionLocal = sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
    autocommit=False,
)

Base = declarative_base()


async def init_models() -> None:
    """Create tables that do not exist yet."""
    # Models must be imported so they register on Base.metadata
    from booking_notifier.db import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def check_db_ready() -> bool:
    """Return True if the database responds to a simple SELECT 1, else False."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except (SQLAlchemyError, OSError):
        return False


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that yields an `AsyncSession` instance.

    Usage in endpoints:
        db: AsyncSession = Depends(get_async_session)

    Returns:
        AsyncGenerator yielding a database session that is closed after use.
    """
    async with SessionLocal() as session:
        yield session
