"""Logical deletion on top of any repository of SoftDeletable entities.

Deletes become updates that set ``is_deleted``/``deleted_at`` (and
``deleted_by`` when an actor is known); every read hides rows so marked.
Rows are only physically removed through ``permanently_delete``.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, AsyncIterable, Callable, Generic, Iterable, Sequence, TypeVar

from genrepo.domain.cancellation import CancellationToken, raise_if_cancelled
from genrepo.domain.errors import require
from genrepo.domain.models.entities import utc_now
from genrepo.domain.models.enums import DuplicateKeyPolicy
from genrepo.domain.predicates import Predicate, PredicateLike, Sort, attr, combine
from genrepo.domain.query import Query
from genrepo.domain.repositories.base import Repository

logger = logging.getLogger(__name__)

T = TypeVar("T")
K = TypeVar("K")

NOT_DELETED: Predicate = attr("is_deleted").is_false()


class SoftDeleteRepository(Repository[T, K], Generic[T, K]):
    """Decorator that turns deletes into ``is_deleted`` updates.

    The actor recorded in ``deleted_by`` comes from the ``deleted_by``
    keyword of the delete call or, failing that, from a value staged with
    set_deleted_by(). A staged value sits in a plain instance slot that the
    next delete reads and clears in one step. The slot is shared by every
    caller of this repository and is not safe for concurrent use; pass
    ``deleted_by=`` when deletes may overlap.

    Already-deleted entities are skipped: delete and delete_by_key return
    False for them and the range forms leave them out of the count. When the
    wrapped repository fails, the deletion fields of the caller's entities
    are put back as they were.
    """

    def __init__(
        self,
        inner: Repository[T, K],
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._inner = require(inner, "inner")
        self._clock = clock
        self._staged_actor: str | None = None

    @property
    def inner(self) -> Repository[T, K]:
        return self._inner

    @property
    def duplicate_key_policy(self) -> DuplicateKeyPolicy:
        return self._inner.duplicate_key_policy

    @property
    def entity_name(self) -> str:
        return self._inner.entity_name

    # --- actor ---

    def set_deleted_by(self, actor: str | None) -> None:
        """Stage ``actor`` for the next delete on this repository, whoever issues it."""
        self._staged_actor = actor

    def _take_actor(self, deleted_by: str | None) -> str | None:
        staged, self._staged_actor = self._staged_actor, None
        return deleted_by if deleted_by is not None else staged

    def _mark(self, entity: T, when: datetime, actor: str | None) -> None:
        entity.is_deleted = True
        entity.deleted_at = when
        if actor:
            entity.deleted_by = actor

    # --- reads ---

    async def get(
        self,
        filter: PredicateLike[T] | None = None,
        order_by: Sort[T] | None = None,
        include: Sequence[str] = (),
        cancel: CancellationToken | None = None,
    ) -> list[T]:
        return await self._inner.get(combine(filter, NOT_DELETED), order_by, include, cancel)

    async def get_by_key(self, key: K, cancel: CancellationToken | None = None) -> T | None:
        entity = await self._inner.get_by_key(key, cancel)
        if entity is not None and entity.is_deleted:
            return None
        return entity

    async def get_by_query(self, query: Query[T], cancel: CancellationToken | None = None) -> list[T]:
        require(query, "query")
        return await self._inner.get_by_query(
            query.with_filter(combine(query.filter, NOT_DELETED)), cancel
        )

    def stream_all(
        self,
        filter: PredicateLike[T] | None = None,
        order_by: Sort[T] | None = None,
        include: Sequence[str] = (),
        cancel: CancellationToken | None = None,
    ) -> AsyncIterable[T]:
        return self._inner.stream_all(combine(filter, NOT_DELETED), order_by, include, cancel)

    async def get_including_deleted(
        self,
        filter: PredicateLike[T] | None = None,
        order_by: Sort[T] | None = None,
        include: Sequence[str] = (),
        cancel: CancellationToken | None = None,
    ) -> list[T]:
        """List entities without hiding deleted ones."""
        return await self._inner.get(filter, order_by, include, cancel)

    # --- writes ---

    async def insert(self, entity: T, cancel: CancellationToken | None = None) -> T:
        return await self._inner.insert(entity, cancel)

    async def update(self, entity: T, cancel: CancellationToken | None = None) -> T:
        return await self._inner.update(entity, cancel)

    async def insert_range(
        self, entities: Iterable[T], cancel: CancellationToken | None = None
    ) -> list[T]:
        return await self._inner.insert_range(entities, cancel)

    async def update_range(
        self, entities: Iterable[T], cancel: CancellationToken | None = None
    ) -> list[T]:
        return await self._inner.update_range(entities, cancel)

    async def delete(
        self,
        entity: T,
        cancel: CancellationToken | None = None,
        *,
        deleted_by: str | None = None,
    ) -> bool:
        """Soft-delete one entity. Returns False when it is already deleted."""
        require(entity, "entity")
        raise_if_cancelled(cancel)
        actor = self._take_actor(deleted_by)
        if entity.is_deleted:
            return False
        before = _snapshot(entity)
        self._mark(entity, self._clock(), actor)
        try:
            updated = await self._inner.update(entity, cancel)
        except BaseException:
            _put_back(entity, before)
            raise
        logger.debug("Soft-deleted %s %r", self.entity_name, entity.id)
        return updated is not None

    async def delete_by_key(
        self,
        key: K,
        cancel: CancellationToken | None = None,
        *,
        deleted_by: str | None = None,
    ) -> bool:
        """Soft-delete by key. Returns False when the key is missing or already deleted."""
        require(key, "key")
        actor = self._take_actor(deleted_by)
        entity = await self._inner.get_by_key(key, cancel)
        if entity is None:
            return False
        return await self.delete(entity, cancel, deleted_by=actor)

    async def delete_range(
        self,
        entities: Iterable[T],
        cancel: CancellationToken | None = None,
        *,
        deleted_by: str | None = None,
    ) -> int:
        """Soft-delete each entity not already deleted; returns how many were marked."""
        items = list(require(entities, "entities"))
        raise_if_cancelled(cancel)
        actor = self._take_actor(deleted_by)
        pending = [e for e in items if not e.is_deleted]
        if not pending:
            return 0
        before = [_snapshot(entity) for entity in pending]
        now = self._clock()
        for entity in pending:
            self._mark(entity, now, actor)
        try:
            await self._inner.update_range(pending, cancel)
        except BaseException:
            for entity, state in zip(pending, before):
                _put_back(entity, state)
            raise
        logger.debug("Soft-deleted %d %s entities", len(pending), self.entity_name)
        return len(pending)

    async def delete_range_by_filter(
        self,
        filter: PredicateLike[T],
        cancel: CancellationToken | None = None,
        *,
        deleted_by: str | None = None,
    ) -> int:
        require(filter, "filter")
        matches = await self._inner.get(combine(filter, NOT_DELETED), cancel=cancel)
        return await self.delete_range(matches, cancel, deleted_by=deleted_by)

    # --- deletion management ---

    async def restore(self, entity: T, cancel: CancellationToken | None = None) -> T:
        """Clear the deletion fields and persist; a live entity is returned unchanged."""
        require(entity, "entity")
        if not entity.is_deleted:
            return entity
        before = _snapshot(entity)
        _put_back(entity, (False, None, None))
        try:
            return await self._inner.update(entity, cancel)
        except BaseException:
            _put_back(entity, before)
            raise

    async def restore_by_key(self, key: K, cancel: CancellationToken | None = None) -> T | None:
        require(key, "key")
        entity = await self._inner.get_by_key(key, cancel)
        if entity is None:
            return None
        return await self.restore(entity, cancel)

    async def permanently_delete(self, entity: T, cancel: CancellationToken | None = None) -> bool:
        require(entity, "entity")
        return await self._inner.delete(entity, cancel)

    async def permanently_delete_by_key(self, key: K, cancel: CancellationToken | None = None) -> bool:
        require(key, "key")
        return await self._inner.delete_by_key(key, cancel)


def _snapshot(entity: Any) -> tuple[bool, datetime | None, str | None]:
    return entity.is_deleted, entity.deleted_at, entity.deleted_by


def _put_back(entity: Any, state: tuple[bool, datetime | None, str | None]) -> None:
    entity.is_deleted, entity.deleted_at, entity.deleted_by = state
