"""Async engine and session factory.

SQLite is used for local development and tests; production points
``DATABASE_URL`` at PostgreSQL (asyncpg).
"""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.config import settings
from app.models import Base

_connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}

engine = create_async_engine(settings.database_url, echo=False, connect_args=_connect_args)
AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session


async def create_tables() -> None:
    """Create the schema in place. Only used for SQLite; PostgreSQL goes through Alembic."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
