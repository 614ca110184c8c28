"""Repository decorators: interceptor chains and soft delete."""

from .composable import ComposableRepository
from .context import (
    ContextInterceptor,
    ContextInterceptorAdapter,
    ContextPipeline,
    OperationContext,
)
from .extensions import (
    with_auditing,
    with_interceptors,
    with_logging,
    with_performance_monitoring,
    with_soft_delete,
    with_validation,
)
from .interceptor import RepositoryInterceptor
from .soft_delete import SoftDeleteRepository

__all__ = [
    "ComposableRepository",
    "ContextInterceptor",
    "ContextInterceptorAdapter",
    "ContextPipeline",
    "OperationContext",
    "RepositoryInterceptor",
    "SoftDeleteRepository",
    "with_auditing",
    "with_interceptors",
    "with_logging",
    "with_performance_monitoring",
    "with_soft_delete",
    "with_validation",
]
