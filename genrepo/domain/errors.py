"""Error taxonomy for the repository layer.

Four kinds of failure reach callers:
  - argument errors (ValueError subclasses) raised before any interceptor runs,
  - validation failures raised by a validation interceptor,
  - backend failures (duplicate key, missing row, I/O) propagated unchanged,
  - cancellation, which is deliberately not a RepositoryError.
"""

from __future__ import annotations

from typing import Any


class RepositoryArgumentError(ValueError):
    """An argument passed to a repository operation is invalid."""


class MissingArgumentError(RepositoryArgumentError):
    """A required argument (entity, key, filter, query, collection) is None."""

    def __init__(self, name: str) -> None:
        super().__init__(f"{name} must not be None")
        self.name = name


class RepositoryError(Exception):
    """Root of the failures raised by repositories and interceptors."""


class EntityValidationError(RepositoryError):
    """An entity was rejected by a validation interceptor."""

    def __init__(self, message: str, entity: Any = None, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.entity = entity
        self.errors = errors or [message]


class DuplicateKeyError(RepositoryError):
    def __init__(self, entity_type: str, key: Any) -> None:
        super().__init__(f"{entity_type} with key {key!r} already exists")
        self.entity_type = entity_type
        self.key = key


class EntityNotFoundError(RepositoryError):
    def __init__(self, entity_type: str, key: Any) -> None:
        super().__init__(f"{entity_type} {key!r} not found")
        self.entity_type = entity_type
        self.key = key


class BatchOperationError(RepositoryError):
    """A batch stopped part-way through.

    Batches are best-effort: items before the failing one stay applied and
    nothing is rolled back. ``succeeded`` counts the items that completed;
    the original failure is available as ``__cause__``.
    """

    def __init__(self, operation: str, succeeded: int, total: int) -> None:
        super().__init__(
            f"{operation} failed after {succeeded} of {total} item(s) were applied"
        )
        self.operation = operation
        self.succeeded = succeeded
        self.total = total


class UntranslatablePredicateError(RepositoryError):
    """A backend received a filter or sort it cannot translate into a query."""


class ConfigurationError(RepositoryError):
    pass


class OperationCancelledError(Exception):
    """The operation observed a cancelled CancellationToken."""

    def __init__(self, message: str = "Operation was cancelled") -> None:
        super().__init__(message)


def require(value: Any, name: str) -> Any:
    """Return ``value`` or raise MissingArgumentError when it is None."""
    if value is None:
        raise MissingArgumentError(name)
    return value
