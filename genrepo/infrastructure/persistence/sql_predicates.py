"""Translate predicate trees and orderings into SQLAlchemy clauses.

A whole tree becomes one boolean clause, so a filter combined with the
soft-delete condition is pushed down as a single WHERE rather than loaded
and filtered twice.
"""

from __future__ import annotations

import re
from typing import Any

from sqlalchemy import and_, not_, or_
from sqlalchemy.sql.elements import ColumnElement

from genrepo.domain.errors import UntranslatablePredicateError
from genrepo.domain.predicates import (
    AndPredicate,
    CallablePredicate,
    Comparison,
    NotPredicate,
    OrderBy,
    OrPredicate,
    as_predicate,
)


def _column(model: type, attribute: str) -> Any:
    column = getattr(model, attribute, None)
    if column is None:
        raise UntranslatablePredicateError(
            f"{model.__name__} has no mapped attribute {attribute!r}"
        )
    return column


def _comparison(model: type, node: Comparison) -> ColumnElement[bool]:
    column = _column(model, node.attribute)
    value = node.value
    if node.op == "eq":
        return column.is_(None) if value is None else column == value
    if node.op == "ne":
        return column.is_not(None) if value is None else column != value
    if node.op == "lt":
        return column < value
    if node.op == "le":
        return column <= value
    if node.op == "gt":
        return column > value
    if node.op == "ge":
        return column >= value
    # Case-sensitive literal match, same as the in-memory operators.
    if node.op == "contains":
        return column.regexp_match(re.escape(str(value)))
    if node.op == "startswith":
        return column.regexp_match("^" + re.escape(str(value)))
    if node.op == "in":
        return column.in_(value)
    if node.op == "is_none":
        return column.is_(None)
    raise UntranslatablePredicateError(f"Unsupported operator {node.op!r}")


def compile_predicate(filter: Any, model: type) -> ColumnElement[bool]:
    """Render a filter (predicate, specification) as one SQLAlchemy clause."""
    node = as_predicate(filter)
    if isinstance(node, AndPredicate):
        return and_(compile_predicate(node.left, model), compile_predicate(node.right, model))
    if isinstance(node, OrPredicate):
        return or_(compile_predicate(node.left, model), compile_predicate(node.right, model))
    if isinstance(node, NotPredicate):
        return not_(compile_predicate(node.operand, model))
    if isinstance(node, Comparison):
        return _comparison(model, node)
    if isinstance(node, CallablePredicate):
        raise UntranslatablePredicateError(
            "Plain callables cannot be translated to SQL; build the filter with attr(...)"
        )
    raise UntranslatablePredicateError(f"Cannot translate {type(node).__name__} to SQL")


def compile_order(order_by: Any, model: type) -> list[Any]:
    if not isinstance(order_by, OrderBy):
        raise UntranslatablePredicateError(
            "SQL ordering requires an OrderBy built with order_by(...)"
        )
    clauses = []
    for key in order_by.keys:
        column = _column(model, key.attribute)
        clauses.append(column.desc() if key.descending else column.asc())
    return clauses
