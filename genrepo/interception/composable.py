"""Repository decorator that threads each call through a chain of interceptors."""

from __future__ import annotations

import logging
from functools import partial
from typing import Any, AsyncIterable, Awaitable, Callable, Generic, Iterable, Sequence, TypeVar, Union

from genrepo.domain.cancellation import CancellationToken
from genrepo.domain.errors import require
from genrepo.domain.models.enums import DuplicateKeyPolicy
from genrepo.domain.predicates import PredicateLike, Sort
from genrepo.domain.query import Query
from genrepo.domain.repositories.base import Repository

from .context import ContextInterceptor, ContextInterceptorAdapter
from .interceptor import RepositoryInterceptor

logger = logging.getLogger(__name__)

T = TypeVar("T")
K = TypeVar("K")

AnyInterceptor = Union[RepositoryInterceptor, ContextInterceptor]


class ComposableRepository(Repository[T, K], Generic[T, K]):
    """Wraps ``inner`` with an ordered, immutable list of interceptors.

    For every call the chain is rebuilt from the last interceptor to the
    first, so the first-declared interceptor enters first and exits last.
    Missing arguments are rejected before any interceptor runs.

    Consecutive ContextInterceptors are grouped into one
    ContextInterceptorAdapter and share a single OperationContext.

    stream_all is not intercepted: it is forwarded to ``inner`` as-is.
    """

    def __init__(self, inner: Repository[T, K], interceptors: Iterable[AnyInterceptor] = ()) -> None:
        self._inner = require(inner, "inner")
        self._interceptors = _adapt(interceptors, inner.entity_name)

    @property
    def inner(self) -> Repository[T, K]:
        return self._inner

    @property
    def interceptors(self) -> tuple[RepositoryInterceptor, ...]:
        return self._interceptors

    @property
    def duplicate_key_policy(self) -> DuplicateKeyPolicy:
        return self._inner.duplicate_key_policy

    @property
    def entity_name(self) -> str:
        return self._inner.entity_name

    async def _run(
        self,
        hook: str,
        terminal: Callable[[], Awaitable[Any]],
        *args: Any,
        cancel: CancellationToken | None = None,
    ) -> Any:
        call = terminal
        for interceptor in reversed(self._interceptors):
            call = partial(getattr(interceptor, hook), call, *args, cancel=cancel)
        return await call()

    # --- reads ---

    async def get(
        self,
        filter: PredicateLike[T] | None = None,
        order_by: Sort[T] | None = None,
        include: Sequence[str] = (),
        cancel: CancellationToken | None = None,
    ) -> list[T]:
        return await self._run(
            "get",
            lambda: self._inner.get(filter, order_by, include, cancel),
            filter, order_by, include, cancel=cancel,
        )

    async def get_by_key(self, key: K, cancel: CancellationToken | None = None) -> T | None:
        require(key, "key")
        return await self._run(
            "get_by_key", lambda: self._inner.get_by_key(key, cancel), key, cancel=cancel
        )

    async def get_by_query(self, query: Query[T], cancel: CancellationToken | None = None) -> list[T]:
        require(query, "query")
        return await self._run(
            "get_by_query", lambda: self._inner.get_by_query(query, cancel), query, cancel=cancel
        )

    def stream_all(
        self,
        filter: PredicateLike[T] | None = None,
        order_by: Sort[T] | None = None,
        include: Sequence[str] = (),
        cancel: CancellationToken | None = None,
    ) -> AsyncIterable[T]:
        return self._inner.stream_all(filter, order_by, include, cancel)

    # --- writes ---

    async def insert(self, entity: T, cancel: CancellationToken | None = None) -> T:
        require(entity, "entity")
        return await self._run(
            "insert", lambda: self._inner.insert(entity, cancel), entity, cancel=cancel
        )

    async def update(self, entity: T, cancel: CancellationToken | None = None) -> T:
        require(entity, "entity")
        return await self._run(
            "update", lambda: self._inner.update(entity, cancel), entity, cancel=cancel
        )

    async def delete(self, entity: T, cancel: CancellationToken | None = None) -> bool:
        require(entity, "entity")
        return await self._run(
            "delete", lambda: self._inner.delete(entity, cancel), entity, cancel=cancel
        )

    async def delete_by_key(self, key: K, cancel: CancellationToken | None = None) -> bool:
        require(key, "key")
        return await self._run(
            "delete_by_key", lambda: self._inner.delete_by_key(key, cancel), key, cancel=cancel
        )

    # --- batches ---

    async def insert_range(
        self, entities: Iterable[T], cancel: CancellationToken | None = None
    ) -> list[T]:
        items = list(require(entities, "entities"))
        return await self._run(
            "insert_range", lambda: self._inner.insert_range(items, cancel), items, cancel=cancel
        )

    async def update_range(
        self, entities: Iterable[T], cancel: CancellationToken | None = None
    ) -> list[T]:
        items = list(require(entities, "entities"))
        return await self._run(
            "update_range", lambda: self._inner.update_range(items, cancel), items, cancel=cancel
        )

    async def delete_range(
        self, entities: Iterable[T], cancel: CancellationToken | None = None
    ) -> int:
        items = list(require(entities, "entities"))
        return await self._run(
            "delete_range", lambda: self._inner.delete_range(items, cancel), items, cancel=cancel
        )

    async def delete_range_by_filter(
        self, filter: PredicateLike[T], cancel: CancellationToken | None = None
    ) -> int:
        require(filter, "filter")
        return await self._run(
            "delete_range_by_filter",
            lambda: self._inner.delete_range_by_filter(filter, cancel),
            filter, cancel=cancel,
        )


def _adapt(interceptors: Iterable[AnyInterceptor], entity_name: str) -> tuple[RepositoryInterceptor, ...]:
    adapted: list[RepositoryInterceptor] = []
    pending: list[ContextInterceptor] = []
    for interceptor in interceptors:
        require(interceptor, "interceptor")
        if isinstance(interceptor, ContextInterceptor):
            pending.append(interceptor)
            continue
        if not isinstance(interceptor, RepositoryInterceptor):
            raise TypeError(f"not an interceptor: {interceptor!r}")
        if pending:
            adapted.append(ContextInterceptorAdapter(pending, entity_name))
            pending = []
        adapted.append(interceptor)
    if pending:
        adapted.append(ContextInterceptorAdapter(pending, entity_name))
    logger.debug("Composed %d interceptor(s) around %s", len(adapted), entity_name)
    return tuple(adapted)
