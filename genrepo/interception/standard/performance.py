"""Performance interceptor: times every operation and flags slow ones."""

from __future__ import annotations

import logging
import time
from typing import Callable, TypeVar

from genrepo.infrastructure.config import get_settings

from ..context import ContextInterceptor, ContextNext, OperationContext

logger = logging.getLogger(__name__)

T = TypeVar("T")
K = TypeVar("K")

PerformanceReporter = Callable[[str, float], None]

PERFORMANCE_MS = "performance_ms"
SLOW_OPERATION = "slow_operation"


class PerformanceInterceptor(ContextInterceptor[T, K]):
    """Reports ``"{Entity}.{operation}"`` and elapsed milliseconds to ``reporter``.

    Timing is recorded whether or not the operation succeeds. The elapsed
    time is also left in ``context.items["performance_ms"]``; operations
    slower than ``threshold_ms`` additionally set ``items["slow_operation"]``
    and log a warning. A threshold of 0 or less disables the slow check.
    """

    def __init__(self, reporter: PerformanceReporter, threshold_ms: float | None = None) -> None:
        if reporter is None:
            raise ValueError("reporter must not be None")
        self.reporter = reporter
        if threshold_ms is None:
            threshold_ms = get_settings().slow_operation_threshold_ms
        self.threshold_ms = threshold_ms

    async def invoke(self, context: OperationContext[T, K], next: ContextNext) -> None:
        started = time.perf_counter()
        try:
            await next(context)
        finally:
            elapsed = (time.perf_counter() - started) * 1000
            name = f"{context.entity_name or 'Entity'}.{context.operation.value}"
            self.reporter(name, elapsed)
            context.items[PERFORMANCE_MS] = elapsed
            if self.threshold_ms > 0 and elapsed > self.threshold_ms:
                context.items[SLOW_OPERATION] = True
                logger.warning("Slow operation %s took %.1fms", name, elapsed)
