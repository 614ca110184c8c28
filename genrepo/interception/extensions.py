"""Fluent helpers for attaching interceptors to a repository.

Each helper returns a new ComposableRepository wrapping the given one, so
calls chain outermost-last::

    repo = with_auditing(with_logging(InMemoryRepository(Customer)), sink)

Here auditing wraps logging, so its hooks enter first.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, TypeVar

from genrepo.domain.models.entities import utc_now
from genrepo.domain.repositories.base import Repository

from .composable import AnyInterceptor, ComposableRepository
from .soft_delete import SoftDeleteRepository
from .standard.audit import AuditInterceptor, AuditSink
from .standard.log import LoggingInterceptor
from .standard.performance import PerformanceInterceptor, PerformanceReporter
from .standard.validation import ValidationInterceptor, Validator

T = TypeVar("T")
K = TypeVar("K")


def with_interceptors(repository: Repository[T, K], *interceptors: AnyInterceptor) -> Repository[T, K]:
    """Wrap ``repository`` with ``interceptors``; with none, return it unchanged."""
    if not interceptors:
        return repository
    return ComposableRepository(repository, interceptors)


def with_logging(
    repository: Repository[T, K],
    logger: logging.Logger | None = None,
    log_performance: bool | None = None,
) -> Repository[T, K]:
    return with_interceptors(
        repository, LoggingInterceptor(repository.entity_name, logger, log_performance)
    )


def with_validation(
    repository: Repository[T, K], validator: Validator | None = None
) -> Repository[T, K]:
    return with_interceptors(repository, ValidationInterceptor(validator))


def with_performance_monitoring(
    repository: Repository[T, K],
    reporter: PerformanceReporter,
    threshold_ms: float | None = None,
) -> Repository[T, K]:
    return with_interceptors(repository, PerformanceInterceptor(reporter, threshold_ms))


def with_auditing(
    repository: Repository[T, K],
    sink: AuditSink,
    user_provider: Callable[[], str | None] | None = None,
) -> Repository[T, K]:
    return with_interceptors(
        repository, AuditInterceptor(repository.entity_name, sink, user_provider)
    )


def with_soft_delete(
    repository: Repository[T, K], clock: Callable[[], datetime] = utc_now
) -> SoftDeleteRepository[T, K]:
    return SoftDeleteRepository(repository, clock)
