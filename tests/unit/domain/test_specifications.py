"""Tests for genrepo/domain/specifications.py."""

from types import SimpleNamespace

import pytest

from genrepo.domain.predicates import AndPredicate, attr
from genrepo.domain.models import IntEntity
from genrepo.domain.specifications import PredicateSpecification, Specification
from genrepo.infrastructure.persistence.memory import InMemoryRepository


class _Adult(Specification):
    def to_predicate(self):
        return attr("age").ge(18)


class _Active(Specification):
    def to_predicate(self):
        return attr("is_active").is_true()


class _Person(IntEntity):
    age: int = 0
    is_active: bool = True


def _person(age=30, is_active=True):
    return SimpleNamespace(age=age, is_active=is_active)


def test_specification_is_abstract():
    with pytest.raises(TypeError):
        Specification()  # type: ignore[abstract]


def test_is_satisfied_by():
    assert _Adult().is_satisfied_by(_person(age=40))
    assert not _Adult().is_satisfied_by(_person(age=12))


def test_and_specification():
    spec = _Adult() & _Active()
    assert spec.is_satisfied_by(_person())
    assert not spec.is_satisfied_by(_person(is_active=False))
    assert isinstance(spec.to_predicate(), AndPredicate)


def test_or_specification():
    spec = _Adult() | _Active()
    assert spec.is_satisfied_by(_person(age=10, is_active=True))
    assert not spec.is_satisfied_by(_person(age=10, is_active=False))


def test_not_specification():
    assert (~_Adult()).is_satisfied_by(_person(age=10))


def test_predicate_specification_accepts_callable():
    spec = PredicateSpecification(lambda p: p.age == 7)
    assert spec.is_satisfied_by(_person(age=7))


def test_predicate_specification_rejects_none():
    with pytest.raises(TypeError):
        PredicateSpecification(None)


# --- mixing specifications and predicates ---

def test_specification_and_predicate():
    spec = _Adult() & attr("is_active").is_true()
    assert spec.is_satisfied_by(_person())
    assert not spec.is_satisfied_by(_person(is_active=False))
    assert isinstance(spec.to_predicate(), AndPredicate)


def test_predicate_and_specification():
    combined = attr("is_active").is_true() & _Adult()
    assert combined(_person())
    assert not combined(_person(age=12))


def test_specification_or_callable_either_side():
    left = _Adult() | (lambda p: p.age == 7)
    right = (lambda p: p.age == 7) | _Adult()
    for spec in (left, right):
        assert spec.is_satisfied_by(_person(age=7))
        assert not spec.is_satisfied_by(_person(age=8))


def test_specification_and_invalid_operand_rejected():
    with pytest.raises(TypeError):
        _Adult() & 5
    with pytest.raises(TypeError):
        _Adult() & None


async def test_mixed_filter_evaluates_in_memory_repository():
    repo = InMemoryRepository(_Person)
    await repo.insert_range([_Person(age=40), _Person(age=40, is_active=False), _Person(age=9)])
    either_order = [
        _Adult() & attr("is_active").is_true(),
        attr("is_active").is_true() & _Adult(),
    ]
    for spec in either_order:
        [match] = await repo.get(spec)
        assert (match.age, match.is_active) == (40, True)
