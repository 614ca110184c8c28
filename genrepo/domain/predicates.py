"""Predicate trees and orderings over entities.

A filter is a tree of Predicate nodes rather than an opaque function so that
a backend can either evaluate it in memory (every node is callable) or walk
it and emit a single query clause (see
genrepo.infrastructure.persistence.sql_predicates). Plain callables are
accepted everywhere a filter is expected; they are wrapped in
CallablePredicate, which only in-memory backends can execute.

Orderings follow the same split: OrderBy is a callable ``list -> list`` and
also carries the (attribute, direction) pairs a SQL backend needs.
"""

from __future__ import annotations

import operator
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterable, TypeVar, Union

T = TypeVar("T")


class Predicate(ABC, Generic[T]):
    """Boolean condition over an entity, composable with ``&``, ``|`` and ``~``."""

    @abstractmethod
    def __call__(self, entity: T) -> bool: ...

    def __and__(self, other: PredicateLike[T]) -> Predicate[T]:
        return AndPredicate(self, _require(other))

    def __rand__(self, other: PredicateLike[T]) -> Predicate[T]:
        return AndPredicate(_require(other), self)

    def __or__(self, other: PredicateLike[T]) -> Predicate[T]:
        return OrPredicate(self, _require(other))

    def __ror__(self, other: PredicateLike[T]) -> Predicate[T]:
        return OrPredicate(_require(other), self)

    def __invert__(self) -> Predicate[T]:
        return NotPredicate(self)


PredicateLike = Union[Predicate[T], Callable[[T], bool]]


@dataclass(frozen=True)
class AndPredicate(Predicate[T]):
    left: Predicate[T]
    right: Predicate[T]

    def __call__(self, entity: T) -> bool:
        # right is never evaluated once left is false
        return bool(self.left(entity)) and bool(self.right(entity))


@dataclass(frozen=True)
class OrPredicate(Predicate[T]):
    left: Predicate[T]
    right: Predicate[T]

    def __call__(self, entity: T) -> bool:
        return bool(self.left(entity)) or bool(self.right(entity))


@dataclass(frozen=True)
class NotPredicate(Predicate[T]):
    operand: Predicate[T]

    def __call__(self, entity: T) -> bool:
        return not self.operand(entity)


def _contains(actual: Any, expected: Any) -> bool:
    return actual is not None and expected in actual


def _startswith(actual: Any, expected: Any) -> bool:
    return actual is not None and actual.startswith(expected)


def _is_in(actual: Any, expected: Any) -> bool:
    return actual in expected


def _is_none(actual: Any, _: Any) -> bool:
    return actual is None


_OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    "eq": operator.eq,
    "ne": operator.ne,
    "lt": operator.lt,
    "le": operator.le,
    "gt": operator.gt,
    "ge": operator.ge,
    "contains": _contains,
    "startswith": _startswith,
    "in": _is_in,
    "is_none": _is_none,
}


@dataclass(frozen=True)
class Comparison(Predicate[T]):
    """``getattr(entity, attribute) <op> value``."""

    attribute: str
    op: str
    value: Any = None

    def __post_init__(self) -> None:
        if self.op not in _OPERATORS:
            raise ValueError(f"Unknown comparison operator {self.op!r}")

    def __call__(self, entity: T) -> bool:
        return bool(_OPERATORS[self.op](getattr(entity, self.attribute), self.value))


@dataclass(frozen=True)
class CallablePredicate(Predicate[T]):
    """Opaque wrapper around a plain function. Not translatable to SQL."""

    func: Callable[[T], bool]

    def __call__(self, entity: T) -> bool:
        return bool(self.func(entity))


class Attribute:
    """Builder for Comparison nodes: ``attr("name").contains("Active")``."""

    __slots__ = ("name",)

    def __init__(self, name: str) -> None:
        self.name = name

    def eq(self, value: Any) -> Comparison:
        return Comparison(self.name, "eq", value)

    def ne(self, value: Any) -> Comparison:
        return Comparison(self.name, "ne", value)

    def lt(self, value: Any) -> Comparison:
        return Comparison(self.name, "lt", value)

    def le(self, value: Any) -> Comparison:
        return Comparison(self.name, "le", value)

    def gt(self, value: Any) -> Comparison:
        return Comparison(self.name, "gt", value)

    def ge(self, value: Any) -> Comparison:
        return Comparison(self.name, "ge", value)

    def contains(self, value: Any) -> Comparison:
        return Comparison(self.name, "contains", value)

    def startswith(self, value: str) -> Comparison:
        return Comparison(self.name, "startswith", value)

    def is_in(self, values: Iterable[Any]) -> Comparison:
        return Comparison(self.name, "in", tuple(values))

    def is_none(self) -> Comparison:
        return Comparison(self.name, "is_none")

    def is_true(self) -> Comparison:
        return Comparison(self.name, "eq", True)

    def is_false(self) -> Comparison:
        return Comparison(self.name, "eq", False)


def attr(name: str) -> Attribute:
    return Attribute(name)


def as_predicate(value: PredicateLike[T] | None) -> Predicate[T] | None:
    """Normalise a filter argument into a Predicate (None stays None).

    Accepts Predicate instances, specifications (anything with a
    ``to_predicate()`` method) and plain callables.
    """
    if value is None or isinstance(value, Predicate):
        return value
    to_predicate = getattr(value, "to_predicate", None)
    if callable(to_predicate):
        return to_predicate()
    if callable(value):
        return CallablePredicate(value)
    raise TypeError(f"Cannot use {type(value).__name__} as a filter")


def _require(value: PredicateLike[T]) -> Predicate[T]:
    predicate = as_predicate(value)
    if predicate is None:
        raise TypeError("Cannot combine a predicate with None")
    return predicate


def combine(
    first: PredicateLike[T] | None, second: PredicateLike[T] | None
) -> PredicateLike[T] | None:
    """AND two filters into one predicate tree.

    If either side is None the other is returned unchanged. Otherwise the
    result is a single AndPredicate, so a SQL backend renders one WHERE
    clause and in-memory evaluation skips ``second`` whenever ``first`` is
    false.
    """
    if first is None:
        return second
    if second is None:
        return first
    return AndPredicate(_require(first), _require(second))


# ─────────────────────────────────────────────────────────────────────────── #
# Ordering                                                                     #
# ─────────────────────────────────────────────────────────────────────────── #


@dataclass(frozen=True)
class SortKey:
    attribute: str
    descending: bool = False


class OrderBy(Generic[T]):
    """Multi-key ordering: ``order_by("name").then_by("created_at", descending=True)``.

    Calling it sorts a list (stable, None values last). Instances are
    immutable; then_by returns a new OrderBy.
    """

    __slots__ = ("keys",)

    def __init__(self, keys: Iterable[SortKey]) -> None:
        self.keys: tuple[SortKey, ...] = tuple(keys)
        if not self.keys:
            raise ValueError("OrderBy needs at least one sort key")

    def then_by(self, attribute: str, descending: bool = False) -> OrderBy[T]:
        return OrderBy((*self.keys, SortKey(attribute, descending)))

    def __call__(self, items: Iterable[T]) -> list[T]:
        result = list(items)
        # Stable sort applied from the least significant key up.
        for key in reversed(self.keys):
            present = [e for e in result if getattr(e, key.attribute) is not None]
            missing = [e for e in result if getattr(e, key.attribute) is None]
            present.sort(key=operator.attrgetter(key.attribute), reverse=key.descending)
            result = present + missing
        return result

    def __repr__(self) -> str:
        parts = ", ".join(
            f"{k.attribute} {'desc' if k.descending else 'asc'}" for k in self.keys
        )
        return f"OrderBy({parts})"


def order_by(attribute: str, descending: bool = False) -> OrderBy[Any]:
    return OrderBy((SortKey(attribute, descending),))


Sort = Union[OrderBy[T], Callable[[list[T]], list[T]]]
