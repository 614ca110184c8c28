"""Storage-agnostic generic repository with composable interceptors."""

from genrepo.domain.cancellation import CancellationToken
from genrepo.domain.errors import (
    BatchOperationError,
    ConfigurationError,
    DuplicateKeyError,
    EntityNotFoundError,
    EntityValidationError,
    MissingArgumentError,
    OperationCancelledError,
    RepositoryArgumentError,
    RepositoryError,
    UntranslatablePredicateError,
)
from genrepo.domain.models import (
    AuditEntry,
    DuplicateKeyPolicy,
    Entity,
    IntEntity,
    RepositoryOperation,
    SoftDeletable,
    SoftDeletableEntity,
    UuidEntity,
)
from genrepo.domain.predicates import Predicate, attr, combine, order_by
from genrepo.domain.query import Query
from genrepo.domain.repositories import Repository, ReplayableStream
from genrepo.domain.specifications import PredicateSpecification, Specification
from genrepo.infrastructure.persistence import InMemoryRepository, SqlRepository
from genrepo.interception import (
    ComposableRepository,
    ContextInterceptor,
    OperationContext,
    RepositoryInterceptor,
    SoftDeleteRepository,
    with_auditing,
    with_interceptors,
    with_logging,
    with_performance_monitoring,
    with_soft_delete,
    with_validation,
)

__version__ = "0.1.0"

__all__ = [
    "AuditEntry",
    "BatchOperationError",
    "CancellationToken",
    "ComposableRepository",
    "ConfigurationError",
    "ContextInterceptor",
    "DuplicateKeyError",
    "DuplicateKeyPolicy",
    "Entity",
    "EntityNotFoundError",
    "EntityValidationError",
    "InMemoryRepository",
    "IntEntity",
    "MissingArgumentError",
    "OperationCancelledError",
    "OperationContext",
    "Predicate",
    "PredicateSpecification",
    "Query",
    "ReplayableStream",
    "Repository",
    "RepositoryArgumentError",
    "RepositoryError",
    "RepositoryInterceptor",
    "RepositoryOperation",
    "SoftDeletable",
    "SoftDeletableEntity",
    "SoftDeleteRepository",
    "Specification",
    "SqlRepository",
    "UntranslatablePredicateError",
    "UuidEntity",
    "attr",
    "combine",
    "order_by",
    "with_auditing",
    "with_interceptors",
    "with_logging",
    "with_performance_monitoring",
    "with_soft_delete",
    "with_validation",
]
