"""Async SQLAlchemy engine, session factory and declarative base for SqlRepository."""

from __future__ import annotations

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from genrepo.domain.errors import ConfigurationError

from .config import RepositorySettings, get_settings


class Base(DeclarativeBase):
    """Shared declarative base for ORM models backing SqlRepository."""


def create_engine(settings: RepositorySettings | None = None) -> AsyncEngine:
    settings = settings or get_settings()
    if not settings.database_url:
        raise ConfigurationError("GENREPO_DATABASE_URL is not configured")
    return create_async_engine(
        settings.database_url,
        echo=settings.echo_sql,
        pool_pre_ping=True,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def session_scope(
    factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Yield a session inside a transaction; commits on success, rolls back on error.

    Batch operations are only atomic when run inside this boundary.
    """
    async with factory() as session:
        async with session.begin():
            yield session
