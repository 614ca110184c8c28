"""Validation interceptor: rejects invalid entities before they reach the backend."""

from __future__ import annotations

from typing import Any, Callable, Optional, Tuple, TypeVar

from pydantic import BaseModel, ValidationError

from genrepo.domain.errors import EntityValidationError, MissingArgumentError

from ..context import ContextInterceptor, ContextNext, OperationContext

T = TypeVar("T")
K = TypeVar("K")

Validator = Callable[[Any], Tuple[bool, Optional[str]]]


def validate_model(entity: Any) -> tuple[bool, str | None]:
    """Re-run pydantic validation over the entity's current field values.

    Catches values assigned after construction, which pydantic does not
    check by default. Non-pydantic entities always pass.
    """
    if not isinstance(entity, BaseModel):
        return True, None
    try:
        type(entity).model_validate(entity.model_dump())
    except ValidationError as exc:
        return False, "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
    return True, None


class ValidationInterceptor(ContextInterceptor[T, K]):
    """Validates entities on insert, update and their range forms.

    On the first invalid entity the chain is short-circuited with an
    EntityValidationError, so the backend is never called and the caller
    receives that error. A write with neither an entity nor entities
    short-circuits with MissingArgumentError. Reads and deletes pass through.
    """

    def __init__(self, validator: Validator | None = None) -> None:
        self.validator = validator or validate_model

    def _check(self, context: OperationContext[T, K], entity: Any, fallback: str) -> bool:
        ok, message = self.validator(entity)
        if ok:
            return True
        context.short_circuit_with(
            error=EntityValidationError(message or fallback, entity=entity)
        )
        return False

    async def invoke(self, context: OperationContext[T, K], next: ContextNext) -> None:
        if context.operation.is_write:
            if context.entity is None and context.entities is None:
                context.short_circuit_with(error=MissingArgumentError("entity"))
                return
            if context.entity is not None:
                if not self._check(context, context.entity, "Entity validation failed"):
                    return
            for entity in context.entities or ():
                if not self._check(
                    context, entity, "Entity validation failed for one or more entities"
                ):
                    return
        await next(context)
