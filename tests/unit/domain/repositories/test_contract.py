"""Tests for genrepo/domain/repositories/base.py."""

from uuid import UUID

import pytest

from genrepo.domain.models import IntEntity, UuidEntity
from genrepo.domain.repositories.base import Repository, is_integer_key, key_of, key_type_of


def test_repository_cannot_be_instantiated_directly():
    with pytest.raises(TypeError):
        Repository()  # type: ignore[abstract]


def test_repository_concrete_subclass_must_implement_all_methods():
    class _Partial(Repository):
        async def get(self, filter=None, order_by=None, include=(), cancel=None): return []
        # missing the remaining operations

    with pytest.raises(TypeError):
        _Partial()  # type: ignore[abstract]


def test_key_of_reads_id():
    assert key_of(IntEntity(id=4)) == 4


def test_key_type_of_pydantic_models():
    assert key_type_of(IntEntity) is int
    assert key_type_of(UuidEntity) is UUID


def test_key_type_of_plain_class_annotations():
    class _Plain:
        id: str

    assert key_type_of(_Plain) is str


def test_key_type_of_missing_id():
    class _NoKey:
        pass

    assert key_type_of(_NoKey) is None


@pytest.mark.parametrize(
    "key_type,expected",
    [(int, True), (bool, False), (str, False), (UUID, False), (None, False)],
)
def test_is_integer_key(key_type, expected):
    assert is_integer_key(key_type) is expected
