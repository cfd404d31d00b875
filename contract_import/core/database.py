"""Async SQLAlchemy engine and session factory.

The import pipeline owns its own transaction, so sessions handed out here
never commit on their own; callers commit or roll back explicitly.
"""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from contract_import.core.config import settings

engine = create_async_engine(
    settings.database_url,
    pool_size=settings.db.pool_size,
    max_overflow=settings.db.max_overflow,
    echo=settings.db.echo,
    future=True,
)

async_session_maker = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)
