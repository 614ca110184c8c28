"""Typed interceptors: one overridable around-hook per repository operation.

Every hook receives ``next`` first: a zero-argument coroutine function that
runs the rest of the chain (later interceptors, then the wrapped
repository). The remaining arguments are the operation's own arguments,
for inspection only; to change what reaches the backend, mutate the
entity before calling ``next``.

A hook that returns without awaiting ``next`` short-circuits silently: the
backend is never reached and the hook's return value becomes the result.
Interceptors that do this must say so in their docstring. Refusing an
operation is done by raising.

The default hooks pass straight through, so subclasses override only what
they care about.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Generic, Iterable, Sequence, TypeVar

from genrepo.domain.cancellation import CancellationToken
from genrepo.domain.query import Query

T = TypeVar("T")
K = TypeVar("K")
R = TypeVar("R")

Next = Callable[[], Awaitable[R]]


class RepositoryInterceptor(Generic[T, K]):
    """Pass-through base for typed interceptors.

    ``stream_all`` has no hook: ComposableRepository hands streams straight
    to the wrapped repository.
    """

    async def get(
        self,
        next: Next[list[T]],
        filter: Any = None,
        order_by: Any = None,
        include: Sequence[str] = (),
        cancel: CancellationToken | None = None,
    ) -> list[T]:
        return await next()

    async def get_by_key(
        self, next: Next[T | None], key: K, cancel: CancellationToken | None = None
    ) -> T | None:
        return await next()

    async def get_by_query(
        self, next: Next[list[T]], query: Query[T], cancel: CancellationToken | None = None
    ) -> list[T]:
        return await next()

    async def insert(self, next: Next[T], entity: T, cancel: CancellationToken | None = None) -> T:
        return await next()

    async def update(self, next: Next[T], entity: T, cancel: CancellationToken | None = None) -> T:
        return await next()

    async def delete(
        self, next: Next[bool], entity: T, cancel: CancellationToken | None = None
    ) -> bool:
        return await next()

    async def delete_by_key(
        self, next: Next[bool], key: K, cancel: CancellationToken | None = None
    ) -> bool:
        return await next()

    async def insert_range(
        self, next: Next[list[T]], entities: Iterable[T], cancel: CancellationToken | None = None
    ) -> list[T]:
        return await next()

    async def update_range(
        self, next: Next[list[T]], entities: Iterable[T], cancel: CancellationToken | None = None
    ) -> list[T]:
        return await next()

    async def delete_range(
        self, next: Next[int], entities: Iterable[T], cancel: CancellationToken | None = None
    ) -> int:
        return await next()

    async def delete_range_by_filter(
        self, next: Next[int], filter: Any, cancel: CancellationToken | None = None
    ) -> int:
        return await next()
