"""Restartable async sequences returned by Repository.stream_all."""

from __future__ import annotations

from typing import AsyncIterator, Callable, Generic, TypeVar

T = TypeVar("T")


class ReplayableStream(Generic[T]):
    """Async iterable that re-runs its query on every ``async for``.

    Obtaining the stream does no work. Each call to ``__aiter__`` asks the
    factory for a fresh async iterator, so a caller may enumerate the same
    handle twice and see the store's current state both times.
    """

    __slots__ = ("_factory",)

    def __init__(self, factory: Callable[[], AsyncIterator[T]]) -> None:
        self._factory = factory

    def __aiter__(self) -> AsyncIterator[T]:
        return self._factory()

    async def to_list(self) -> list[T]:
        return [item async for item in self]
