"""Entity base models.

Entities are mutable pydantic models: backends assign generated keys on
insert and the soft-delete decorator flips the deletion fields in place.
Field assignment is not re-validated; ValidationInterceptor re-validates
whole entities before writes.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Generic, TypeVar
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

K = TypeVar("K")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Entity(BaseModel, Generic[K]):
    """An addressable record. ``id`` is the key and must not be None."""

    id: K


class IntEntity(Entity[int]):
    """Integer-keyed entity. An id of 0 asks the backend to generate one."""

    id: int = 0


class UuidEntity(Entity[UUID]):
    id: UUID = Field(default_factory=uuid4)


class SoftDeletable(BaseModel):
    """Logical-deletion fields.

    is_deleted is False at creation, set together with deleted_at (and
    deleted_by when an actor is known) on delete, and cleared on restore.
    """

    is_deleted: bool = False
    deleted_at: datetime | None = None
    deleted_by: str | None = None


class SoftDeletableEntity(SoftDeletable, IntEntity):
    pass


class AuditEntry(BaseModel):
    """One audited repository write. Produced, never stored, by AuditInterceptor."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=utc_now)
    entity_type: str
    operation: str
    user: str | None = None
    details: str | None = None
