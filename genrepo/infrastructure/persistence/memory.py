"""In-process repository backed by a dict.

Suitable for tests and development. Entities are stored and returned by
reference; callers that mutate a returned entity mutate the stored one.

Concurrency: single dict operations (setdefault, pop, item assignment) are
atomic, and key generation draws from one lock-guarded counter, so
concurrent inserts, reads and updates are individually safe. There is no
cross-operation isolation: a batch mutates the dict entry by entry, and a
concurrent reader may observe it half-applied.
"""

from __future__ import annotations

import itertools
import logging
import threading
from typing import Any, AsyncIterator, Generic, Iterable, Sequence, TypeVar

from genrepo.domain.cancellation import CancellationToken, raise_if_cancelled
from genrepo.domain.errors import DuplicateKeyError, require
from genrepo.domain.models.enums import DuplicateKeyPolicy
from genrepo.domain.predicates import PredicateLike, Sort, as_predicate
from genrepo.domain.query import Query
from genrepo.domain.repositories.base import Repository, is_integer_key, key_of, key_type_of
from genrepo.domain.repositories.batch import apply_each
from genrepo.domain.repositories.streams import ReplayableStream

logger = logging.getLogger(__name__)

T = TypeVar("T")
K = TypeVar("K")


class InMemoryRepository(Repository[T, K], Generic[T, K]):
    """Dict-backed Repository.

    Inserting an entity whose key is already stored returns the stored
    entity unchanged (RETURN_EXISTING) unless the repository is built with
    DuplicateKeyPolicy.RAISE. For integer keys an id of 0 is replaced by the
    next value of a counter starting at 1. Updating a key that is not
    stored is a silent no-op.
    """

    def __init__(
        self,
        entity_type: type[T],
        *,
        key_type: Any = None,
        duplicate_key_policy: DuplicateKeyPolicy = DuplicateKeyPolicy.RETURN_EXISTING,
    ) -> None:
        self._entity_type = entity_type
        self._key_type = key_type if key_type is not None else key_type_of(entity_type)
        self._generates_keys = is_integer_key(self._key_type)
        self._policy = DuplicateKeyPolicy(duplicate_key_policy)
        self._data: dict[K, T] = {}
        self._ids = itertools.count(1)
        self._id_lock = threading.Lock()

    @property
    def duplicate_key_policy(self) -> DuplicateKeyPolicy:
        return self._policy

    @property
    def entity_name(self) -> str:
        return self._entity_type.__name__

    def _next_id(self) -> int:
        with self._id_lock:
            return next(self._ids)

    def _select(self, filter: PredicateLike[T] | None, order_by: Sort[T] | None) -> list[T]:
        predicate = as_predicate(filter)
        items = list(self._data.values())
        if predicate is not None:
            items = [e for e in items if predicate(e)]
        if order_by is not None:
            items = list(order_by(items))
        return items

    # --- reads ---

    async def get(
        self,
        filter: PredicateLike[T] | None = None,
        order_by: Sort[T] | None = None,
        include: Sequence[str] = (),
        cancel: CancellationToken | None = None,
    ) -> list[T]:
        raise_if_cancelled(cancel)
        # include hints have no meaning for an in-process store
        return self._select(filter, order_by)

    async def get_by_key(self, key: K, cancel: CancellationToken | None = None) -> T | None:
        raise_if_cancelled(cancel)
        require(key, "key")
        return self._data.get(key)

    async def get_by_query(self, query: Query[T], cancel: CancellationToken | None = None) -> list[T]:
        raise_if_cancelled(cancel)
        require(query, "query")
        items = self._select(query.filter, query.order_by)
        if query.skip is not None:
            items = items[query.skip : query.skip + query.take]
        return items

    def stream_all(
        self,
        filter: PredicateLike[T] | None = None,
        order_by: Sort[T] | None = None,
        include: Sequence[str] = (),
        cancel: CancellationToken | None = None,
    ) -> ReplayableStream[T]:
        return ReplayableStream(lambda: self._stream(filter, order_by, cancel))

    async def _stream(
        self,
        filter: PredicateLike[T] | None,
        order_by: Sort[T] | None,
        cancel: CancellationToken | None,
    ) -> AsyncIterator[T]:
        raise_if_cancelled(cancel)
        for entity in self._select(filter, order_by):
            raise_if_cancelled(cancel)
            yield entity

    # --- writes ---

    async def insert(self, entity: T, cancel: CancellationToken | None = None) -> T:
        raise_if_cancelled(cancel)
        require(entity, "entity")
        if self._generates_keys and key_of(entity) == 0:
            entity.id = self._next_id()
        key = require(key_of(entity), "entity.id")
        stored = self._data.setdefault(key, entity)
        if stored is not entity:
            if self._policy is DuplicateKeyPolicy.RAISE:
                raise DuplicateKeyError(self.entity_name, key)
            logger.debug("%s %r already stored; returning existing entity", self.entity_name, key)
        return stored

    async def update(self, entity: T, cancel: CancellationToken | None = None) -> T:
        raise_if_cancelled(cancel)
        require(entity, "entity")
        key = require(key_of(entity), "entity.id")
        if key in self._data:
            self._data[key] = entity
        return entity

    async def delete(self, entity: T, cancel: CancellationToken | None = None) -> bool:
        raise_if_cancelled(cancel)
        require(entity, "entity")
        self._remove(key_of(entity))
        return True

    async def delete_by_key(self, key: K, cancel: CancellationToken | None = None) -> bool:
        raise_if_cancelled(cancel)
        require(key, "key")
        self._remove(key)
        return True

    def _remove(self, key: K) -> bool:
        return self._data.pop(key, None) is not None

    # --- batches ---

    async def insert_range(
        self, entities: Iterable[T], cancel: CancellationToken | None = None
    ) -> list[T]:
        raise_if_cancelled(cancel)
        items = list(require(entities, "entities"))
        return await apply_each("insert_range", items, lambda e: self.insert(e, cancel), cancel)

    async def update_range(
        self, entities: Iterable[T], cancel: CancellationToken | None = None
    ) -> list[T]:
        raise_if_cancelled(cancel)
        items = list(require(entities, "entities"))
        return await apply_each("update_range", items, lambda e: self.update(e, cancel), cancel)

    async def delete_range(
        self, entities: Iterable[T], cancel: CancellationToken | None = None
    ) -> int:
        raise_if_cancelled(cancel)
        items = list(require(entities, "entities"))

        async def remove(entity: T) -> bool:
            require(entity, "entity")
            return self._remove(key_of(entity))

        removed = await apply_each("delete_range", items, remove, cancel)
        return sum(removed)

    async def delete_range_by_filter(
        self, filter: PredicateLike[T], cancel: CancellationToken | None = None
    ) -> int:
        raise_if_cancelled(cancel)
        require(filter, "filter")
        matches = await self.get(filter=filter, cancel=cancel)
        return await self.delete_range(matches, cancel)
