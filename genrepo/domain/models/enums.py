"""Domain enumerations for the repository layer.

String-valued enums use the str mixin so they log and serialize as their
plain values.
"""

from enum import Enum


class RepositoryOperation(str, Enum):
    """Operation kinds seen by context interceptors.

    Point and range reads share GET; delete-by-entity and delete-by-key share
    DELETE; both batch delete forms share DELETE_RANGE.
    """

    GET = "get"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"
    INSERT_RANGE = "insert_range"
    UPDATE_RANGE = "update_range"
    DELETE_RANGE = "delete_range"

    @property
    def is_write(self) -> bool:
        return self in (
            RepositoryOperation.INSERT,
            RepositoryOperation.UPDATE,
            RepositoryOperation.INSERT_RANGE,
            RepositoryOperation.UPDATE_RANGE,
        )


class DuplicateKeyPolicy(str, Enum):
    """What a backend does when insert() meets a key that already exists."""

    RETURN_EXISTING = "return_existing"  # idempotent insert, stored entity returned unchanged
    RAISE = "raise"  # DuplicateKeyError
