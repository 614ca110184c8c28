"""Generic repository contract.

Repository[T, K] is the operation surface every backend and every decorator
implements. Decorators (ComposableRepository, SoftDeleteRepository) wrap
another Repository and are themselves Repositories, so they nest freely.

Design notes:
  - All methods are async; backends that never suspend (in-memory) still
    expose coroutines so callers do not care which backend they hold.
  - None for an entity, key, filter, query or collection raises
    MissingArgumentError before any work is done.
  - Not-found is never an error for reads: get_by_key returns None and
    list reads return [].
  - Deletes are idempotent: deleting a missing key is a successful no-op.
  - Behaviour on inserting an existing key differs between backends and is
    advertised through ``duplicate_key_policy``; decorators pass the
    backend's answer through unchanged.
  - Batches are best-effort (see batch.apply_each); wrap them in a backend
    transaction when atomicity matters.
  - Every operation accepts an optional CancellationToken as ``cancel``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, AsyncIterable, Generic, Iterable, Sequence, TypeVar

from ..cancellation import CancellationToken
from ..models.enums import DuplicateKeyPolicy
from ..predicates import PredicateLike, Sort
from ..query import Query

T = TypeVar("T")
K = TypeVar("K")


class Repository(ABC, Generic[T, K]):
    """Abstract CRUD interface for one entity type keyed by K."""

    @property
    @abstractmethod
    def duplicate_key_policy(self) -> DuplicateKeyPolicy:
        """How insert() treats a key that is already stored."""

    @property
    @abstractmethod
    def entity_name(self) -> str:
        """Name of the stored entity type, used in log lines and audit entries."""

    @abstractmethod
    async def get(
        self,
        filter: PredicateLike[T] | None = None,
        order_by: Sort[T] | None = None,
        include: Sequence[str] = (),
        cancel: CancellationToken | None = None,
    ) -> list[T]:
        """Return matching entities, optionally ordered; [] when nothing matches."""

    @abstractmethod
    async def get_by_key(self, key: K, cancel: CancellationToken | None = None) -> T | None:
        """Return the entity stored under ``key``, or None if not found."""

    @abstractmethod
    async def get_by_query(self, query: Query[T], cancel: CancellationToken | None = None) -> list[T]:
        """Execute a Query object: filter, order, includes and paging."""

    @abstractmethod
    async def insert(self, entity: T, cancel: CancellationToken | None = None) -> T:
        """Store a new entity and return it (with a generated key where applicable)."""

    @abstractmethod
    async def update(self, entity: T, cancel: CancellationToken | None = None) -> T:
        """Persist changes to an entity and return it."""

    @abstractmethod
    async def delete(self, entity: T, cancel: CancellationToken | None = None) -> bool:
        """Remove the entity. Returns True, including when it was already gone."""

    @abstractmethod
    async def delete_by_key(self, key: K, cancel: CancellationToken | None = None) -> bool:
        """Remove the entity stored under ``key``."""

    @abstractmethod
    async def insert_range(
        self, entities: Iterable[T], cancel: CancellationToken | None = None
    ) -> list[T]:
        """Insert each entity in order; returns the inserted (or existing) entities."""

    @abstractmethod
    async def update_range(
        self, entities: Iterable[T], cancel: CancellationToken | None = None
    ) -> list[T]:
        """Update each entity in order."""

    @abstractmethod
    async def delete_range(
        self, entities: Iterable[T], cancel: CancellationToken | None = None
    ) -> int:
        """Delete each entity; returns how many were actually removed."""

    @abstractmethod
    async def delete_range_by_filter(
        self, filter: PredicateLike[T], cancel: CancellationToken | None = None
    ) -> int:
        """Delete every entity matching ``filter``; returns the count removed."""

    @abstractmethod
    def stream_all(
        self,
        filter: PredicateLike[T] | None = None,
        order_by: Sort[T] | None = None,
        include: Sequence[str] = (),
        cancel: CancellationToken | None = None,
    ) -> AsyncIterable[T]:
        """Return a lazy, restartable async sequence of matching entities.

        Nothing executes until iteration starts, and every new iteration of
        the returned handle re-runs the query.
        """


def key_of(entity: Any) -> Any:
    """The key of an entity (its ``id`` attribute)."""
    return entity.id


def key_type_of(entity_type: type) -> Any:
    """The declared type of an entity class's ``id`` field, if any."""
    fields = getattr(entity_type, "model_fields", None)
    if fields and "id" in fields:
        return fields["id"].annotation
    return getattr(entity_type, "__annotations__", {}).get("id")


def is_integer_key(key_type: Any) -> bool:
    """True when keys of this type are generated from a counter (0 means "unset")."""
    return isinstance(key_type, type) and issubclass(key_type, int) and key_type is not bool
