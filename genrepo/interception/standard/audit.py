"""Audit interceptor: reports successful writes as AuditEntry records."""

from __future__ import annotations

import logging
from typing import Callable, TypeVar

from genrepo.domain.models.entities import AuditEntry

from ..interceptor import RepositoryInterceptor

logger = logging.getLogger(__name__)

T = TypeVar("T")
K = TypeVar("K")

AuditSink = Callable[[AuditEntry], None]


class AuditInterceptor(RepositoryInterceptor[T, K]):
    """Emits one AuditEntry to ``sink`` after each write completes.

    Nothing is emitted when the write raises. Single deletes are audited
    only when the backend reports True. Reads are not audited.
    """

    def __init__(
        self,
        entity_name: str,
        sink: AuditSink,
        user_provider: Callable[[], str | None] | None = None,
    ) -> None:
        if sink is None:
            raise ValueError("sink must not be None")
        self.entity_name = entity_name
        self.sink = sink
        self.user_provider = user_provider

    def _record(self, operation: str, details: str) -> None:
        entry = AuditEntry(
            entity_type=self.entity_name,
            operation=operation,
            user=self.user_provider() if self.user_provider else None,
            details=details,
        )
        logger.debug("Audit %s %s: %s", entry.entity_type, entry.operation, entry.details)
        self.sink(entry)

    async def insert(self, next, entity, cancel=None):
        result = await next()
        self._record("insert", "Entity inserted")
        return result

    async def update(self, next, entity, cancel=None):
        result = await next()
        self._record("update", "Entity updated")
        return result

    async def delete(self, next, entity, cancel=None):
        result = await next()
        if result:
            self._record("delete", "Entity deleted")
        return result

    async def delete_by_key(self, next, key, cancel=None):
        result = await next()
        if result:
            self._record("delete", f"Entity with key {key} deleted")
        return result

    async def insert_range(self, next, entities, cancel=None):
        result = await next()
        self._record("insert_range", f"{len(result or [])} entities inserted")
        return result

    async def update_range(self, next, entities, cancel=None):
        result = await next()
        self._record("update_range", f"{len(result or [])} entities updated")
        return result

    async def delete_range(self, next, entities, cancel=None):
        result = await next()
        self._record("delete_range", f"{result} entities deleted")
        return result

    async def delete_range_by_filter(self, next, filter, cancel=None):
        result = await next()
        self._record("delete_range_by_filter", f"{result} entities deleted by filter")
        return result
