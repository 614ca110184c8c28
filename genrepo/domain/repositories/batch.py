"""Per-item batch execution with best-effort, partial-failure semantics."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Sequence, TypeVar

from ..cancellation import CancellationToken, raise_if_cancelled
from ..errors import BatchOperationError, OperationCancelledError

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


async def apply_each(
    operation: str,
    items: Sequence[T],
    action: Callable[[T], Awaitable[R]],
    cancel: CancellationToken | None = None,
) -> list[R]:
    """Run ``action`` over ``items`` one at a time, in order.

    No fan-out: each item is awaited before the next starts. Nothing is
    rolled back on failure; items already applied stay applied and the
    failure surfaces as BatchOperationError whose ``succeeded`` tells the
    caller how far the batch got. Cancellation and argument errors are not
    wrapped.
    """
    results: list[R] = []
    for item in items:
        raise_if_cancelled(cancel)
        try:
            results.append(await action(item))
        except (OperationCancelledError, ValueError):
            raise
        except Exception as exc:
            logger.debug(
                "%s stopped after %d of %d item(s): %s",
                operation, len(results), len(items), exc,
            )
            raise BatchOperationError(operation, len(results), len(items)) from exc
    return results
