"""
Database engine and session management.

Async SQLAlchemy engine shared by the REST routers and the realtime gateway.
"""

from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from core.config import settings

Base = declarative_base()


def build_engine(url: str, echo: bool = False):
    """Create an async engine; SQLite connections get foreign keys switched on."""
    engine = create_async_engine(url, echo=echo, future=True)

    if url.startswith("sqlite"):
        @event.listens_for(engine.sync_engine, "connect")
        def _enable_sqlite_fk(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


engine = build_engine(settings.database_url, echo=settings.DEBUG)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a session per request."""
    async with AsyncSessionLocal() as session:
        yield session


async def init_models(bind=None) -> None:
    """Create all tables. Used for development startup and tests."""
    # Registers every model on Base.metadata
    import models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
