"""Context interceptors: one hook for every operation kind.

A ContextInterceptor sees each call as an OperationContext, a mutable
per-call record it may inspect, annotate through ``items`` or abort with
``short_circuit_with``. ContextPipeline threads a list of them around a
terminal step that runs the real operation.

Context interceptors are not a second composition mechanism: they reach a
repository through ContextInterceptorAdapter, an ordinary typed interceptor
whose hooks all funnel into one pipeline run.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Generic, Iterable, Sequence, TypeVar

from genrepo.domain.cancellation import CancellationToken
from genrepo.domain.models.enums import RepositoryOperation

from .interceptor import Next, RepositoryInterceptor

T = TypeVar("T")
K = TypeVar("K")

ContextNext = Callable[["OperationContext"], Awaitable[None]]


@dataclass
class OperationContext(Generic[T, K]):
    """State of one repository call as it moves through a ContextPipeline.

    Created fresh per call and discarded when the call returns.
    """

    operation: RepositoryOperation
    entity_name: str | None = None
    entity: T | None = None
    entities: Sequence[T] | None = None
    key: K | None = None
    result: Any = None
    success: bool = True
    error: BaseException | None = None
    items: dict[str, Any] = field(default_factory=dict)
    short_circuit: bool = False
    cancel: CancellationToken | None = None

    def short_circuit_with(self, result: Any = None, error: BaseException | None = None) -> None:
        """Stop the chain here.

        Remaining interceptors and the backend operation are skipped; the
        caller receives ``result``, or ``error`` is raised when given.
        """
        self.short_circuit = True
        self.result = result
        if error is not None:
            self.success = False
            self.error = error


class ContextInterceptor(ABC, Generic[T, K]):
    @abstractmethod
    async def invoke(self, context: OperationContext[T, K], next: ContextNext) -> None:
        """Do work around ``await next(context)``; skip the call to abort."""


class ContextPipeline(Generic[T, K]):
    """Runs context interceptors in declaration order around one operation."""

    def __init__(self, interceptors: Iterable[ContextInterceptor[T, K]]) -> None:
        self._interceptors = tuple(interceptors)

    def __len__(self) -> int:
        return len(self._interceptors)

    async def execute(
        self,
        context: OperationContext[T, K],
        operation: Callable[[], Awaitable[Any]],
    ) -> None:
        async def terminal(ctx: OperationContext[T, K]) -> None:
            if ctx.short_circuit:
                return
            try:
                result = await operation()
            except Exception as exc:
                ctx.success = False
                ctx.error = exc
                raise
            ctx.result = result
            if ctx.operation in (RepositoryOperation.INSERT, RepositoryOperation.UPDATE):
                ctx.entity = result

        pipeline: ContextNext = terminal
        for interceptor in reversed(self._interceptors):
            pipeline = _wrap(interceptor, pipeline)
        await pipeline(context)


def _wrap(interceptor: ContextInterceptor, inner: ContextNext) -> ContextNext:
    async def step(ctx: OperationContext) -> None:
        if ctx.short_circuit:
            await inner(ctx)
        else:
            await interceptor.invoke(ctx, inner)

    return step


class ContextInterceptorAdapter(RepositoryInterceptor[T, K]):
    """Typed interceptor that runs a ContextPipeline for every hook.

    Reads map to GET, both single delete forms to DELETE and both batch
    delete forms to DELETE_RANGE. When an interceptor short-circuits, the
    context's error is raised if it has one; otherwise its result is
    returned without reaching the backend.
    """

    def __init__(
        self,
        interceptors: Iterable[ContextInterceptor[T, K]],
        entity_name: str | None = None,
    ) -> None:
        self.pipeline = ContextPipeline(interceptors)
        self.entity_name = entity_name

    async def _dispatch(self, next: Next[Any], operation: RepositoryOperation, **fields: Any) -> Any:
        context = OperationContext(operation=operation, entity_name=self.entity_name, **fields)
        await self.pipeline.execute(context, next)
        if context.short_circuit and context.error is not None:
            raise context.error
        return context.result

    async def get(self, next, filter=None, order_by=None, include=(), cancel=None):
        return await self._dispatch(next, RepositoryOperation.GET, cancel=cancel)

    async def get_by_key(self, next, key, cancel=None):
        return await self._dispatch(next, RepositoryOperation.GET, key=key, cancel=cancel)

    async def get_by_query(self, next, query, cancel=None):
        return await self._dispatch(next, RepositoryOperation.GET, cancel=cancel)

    async def insert(self, next, entity, cancel=None):
        return await self._dispatch(next, RepositoryOperation.INSERT, entity=entity, cancel=cancel)

    async def update(self, next, entity, cancel=None):
        return await self._dispatch(next, RepositoryOperation.UPDATE, entity=entity, cancel=cancel)

    async def delete(self, next, entity, cancel=None):
        return await self._dispatch(next, RepositoryOperation.DELETE, entity=entity, cancel=cancel)

    async def delete_by_key(self, next, key, cancel=None):
        return await self._dispatch(next, RepositoryOperation.DELETE, key=key, cancel=cancel)

    async def insert_range(self, next, entities, cancel=None):
        return await self._dispatch(
            next, RepositoryOperation.INSERT_RANGE, entities=list(entities), cancel=cancel
        )

    async def update_range(self, next, entities, cancel=None):
        return await self._dispatch(
            next, RepositoryOperation.UPDATE_RANGE, entities=list(entities), cancel=cancel
        )

    async def delete_range(self, next, entities, cancel=None):
        return await self._dispatch(
            next, RepositoryOperation.DELETE_RANGE, entities=list(entities), cancel=cancel
        )

    async def delete_range_by_filter(self, next, filter, cancel=None):
        return await self._dispatch(next, RepositoryOperation.DELETE_RANGE, cancel=cancel)
