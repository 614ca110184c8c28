"""Logging interceptor: one line on entry and one on exit for every operation."""

from __future__ import annotations

import logging
import time
from typing import Any, Awaitable, Callable, TypeVar

from genrepo.infrastructure.config import get_settings

from ..interceptor import RepositoryInterceptor

T = TypeVar("T")
K = TypeVar("K")
R = TypeVar("R")

_default_logger = logging.getLogger(__name__)


class LoggingInterceptor(RepositoryInterceptor[T, K]):
    """Logs ``[Entity] Starting op`` / ``Completed op`` at INFO and failures at ERROR.

    Failures are logged and re-raised unchanged. With ``log_performance``
    the elapsed time in milliseconds is appended; it defaults to the
    GENREPO_LOG_PERFORMANCE setting.
    """

    def __init__(
        self,
        entity_name: str,
        logger: logging.Logger | None = None,
        log_performance: bool | None = None,
    ) -> None:
        self.entity_name = entity_name
        self.logger = logger or _default_logger
        if log_performance is None:
            log_performance = get_settings().log_performance
        self.log_performance = log_performance

    async def _logged(self, operation: str, next: Callable[[], Awaitable[R]]) -> R:
        prefix = f"[{self.entity_name}]"
        self.logger.info("%s Starting %s", prefix, operation)
        started = time.perf_counter()
        try:
            result = await next()
        except Exception as exc:
            if self.log_performance:
                self.logger.error(
                    "%s Failed %s in %dms: %s", prefix, operation, _elapsed_ms(started), exc
                )
            else:
                self.logger.error("%s Failed %s: %s", prefix, operation, exc)
            raise
        if self.log_performance:
            self.logger.info("%s Completed %s in %dms", prefix, operation, _elapsed_ms(started))
        else:
            self.logger.info("%s Completed %s", prefix, operation)
        return result

    async def get(self, next, filter=None, order_by=None, include=(), cancel=None):
        return await self._logged("get", next)

    async def get_by_key(self, next, key, cancel=None):
        return await self._logged(f"get_by_key({key})", next)

    async def get_by_query(self, next, query, cancel=None):
        return await self._logged("get_by_query", next)

    async def insert(self, next, entity, cancel=None):
        return await self._logged("insert", next)

    async def update(self, next, entity, cancel=None):
        return await self._logged("update", next)

    async def delete(self, next, entity, cancel=None):
        return await self._logged("delete", next)

    async def delete_by_key(self, next, key, cancel=None):
        return await self._logged(f"delete_by_key({key})", next)

    async def insert_range(self, next, entities, cancel=None):
        return await self._logged(f"insert_range(count={_count(entities)})", next)

    async def update_range(self, next, entities, cancel=None):
        return await self._logged(f"update_range(count={_count(entities)})", next)

    async def delete_range(self, next, entities, cancel=None):
        return await self._logged(f"delete_range(count={_count(entities)})", next)

    async def delete_range_by_filter(self, next, filter, cancel=None):
        return await self._logged("delete_range_by_filter", next)


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000


def _count(entities: Any) -> int:
    try:
        return len(entities)
    except TypeError:
        return 0
