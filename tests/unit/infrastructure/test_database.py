"""Tests for genrepo/infrastructure/database.py.

No database connection is required.
"""

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from genrepo.domain.errors import ConfigurationError
from genrepo.infrastructure.config import RepositorySettings
from genrepo.infrastructure.database import (
    Base,
    create_engine,
    create_session_factory,
    session_scope,
)


def test_base_is_declarative_base():
    assert issubclass(Base, DeclarativeBase)


def test_create_engine_requires_url(monkeypatch):
    monkeypatch.delenv("GENREPO_DATABASE_URL", raising=False)
    with pytest.raises(ConfigurationError):
        create_engine(RepositorySettings(_env_file=None))


async def test_create_engine_is_async():
    engine = create_engine(RepositorySettings(_env_file=None, database_url="sqlite+aiosqlite://"))
    try:
        assert isinstance(engine, AsyncEngine)
    finally:
        await engine.dispose()


async def test_session_factory_produces_async_sessions():
    engine = create_engine(RepositorySettings(_env_file=None, database_url="sqlite+aiosqlite://"))
    try:
        factory = create_session_factory(engine)
        assert isinstance(factory, async_sessionmaker)
        assert factory.class_ is AsyncSession
    finally:
        await engine.dispose()


async def test_session_scope_yields_session_in_transaction():
    engine = create_engine(RepositorySettings(_env_file=None, database_url="sqlite+aiosqlite://"))
    try:
        async for session in session_scope(create_session_factory(engine)):
            assert isinstance(session, AsyncSession)
            assert session.in_transaction()
    finally:
        await engine.dispose()
