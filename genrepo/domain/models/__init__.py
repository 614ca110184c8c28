from .entities import (
    AuditEntry,
    Entity,
    IntEntity,
    SoftDeletable,
    SoftDeletableEntity,
    UuidEntity,
    utc_now,
)
from .enums import DuplicateKeyPolicy, RepositoryOperation

__all__ = [
    "AuditEntry",
    "DuplicateKeyPolicy",
    "Entity",
    "IntEntity",
    "RepositoryOperation",
    "SoftDeletable",
    "SoftDeletableEntity",
    "UuidEntity",
    "utc_now",
]
