"""Repository backends: an in-process dict store and an async SQLAlchemy store."""

from .memory import InMemoryRepository
from .sql import SqlRepository

__all__ = ["InMemoryRepository", "SqlRepository"]
