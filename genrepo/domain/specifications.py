"""Specification pattern: named, reusable business rules.

A Specification produces a predicate tree, so it can be handed to any
repository operation that takes a filter and is translated by SQL backends
like any other predicate. Combinators build new specifications without
evaluating anything.

    class ActiveCustomers(Specification[Customer]):
        def to_predicate(self):
            return attr("is_active").is_true()

    await repo.get(filter=ActiveCustomers() & ~PremiumCustomers())
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from .predicates import AndPredicate, NotPredicate, OrPredicate, Predicate, PredicateLike, as_predicate

T = TypeVar("T")


class Specification(ABC, Generic[T]):
    @abstractmethod
    def to_predicate(self) -> Predicate[T]:
        """Return the predicate tree expressing this rule."""

    def is_satisfied_by(self, entity: T) -> bool:
        return self.to_predicate()(entity)

    def __and__(self, other: PredicateLike[T]) -> Specification[T]:
        return AndSpecification(self, other)

    def __rand__(self, other: PredicateLike[T]) -> Specification[T]:
        return AndSpecification(other, self)

    def __or__(self, other: PredicateLike[T]) -> Specification[T]:
        return OrSpecification(self, other)

    def __ror__(self, other: PredicateLike[T]) -> Specification[T]:
        return OrSpecification(other, self)

    def __invert__(self) -> Specification[T]:
        return NotSpecification(self)


class PredicateSpecification(Specification[T]):
    """Adapts a predicate (or plain callable) into a Specification."""

    def __init__(self, predicate: Predicate[T]) -> None:
        resolved = as_predicate(predicate)
        if resolved is None:
            raise TypeError("predicate must not be None")
        self._predicate = resolved

    def to_predicate(self) -> Predicate[T]:
        return self._predicate


def _as_specification(value: PredicateLike[T]) -> Specification[T]:
    if isinstance(value, Specification):
        return value
    return PredicateSpecification(value)


class AndSpecification(Specification[T]):
    def __init__(self, left: PredicateLike[T], right: PredicateLike[T]) -> None:
        if left is None or right is None:
            raise TypeError("AndSpecification needs two specifications")
        self.left = _as_specification(left)
        self.right = _as_specification(right)

    def to_predicate(self) -> Predicate[T]:
        return AndPredicate(self.left.to_predicate(), self.right.to_predicate())


class OrSpecification(Specification[T]):
    def __init__(self, left: PredicateLike[T], right: PredicateLike[T]) -> None:
        if left is None or right is None:
            raise TypeError("OrSpecification needs two specifications")
        self.left = _as_specification(left)
        self.right = _as_specification(right)

    def to_predicate(self) -> Predicate[T]:
        return OrPredicate(self.left.to_predicate(), self.right.to_predicate())


class NotSpecification(Specification[T]):
    def __init__(self, operand: Specification[T]) -> None:
        if operand is None:
            raise TypeError("NotSpecification needs a specification")
        self.operand = operand

    def to_predicate(self) -> Predicate[T]:
        return NotPredicate(self.operand.to_predicate())
