"""Tests for SqlRepository: mapping and session interaction with a mocked session."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from genrepo.domain.cancellation import CancellationToken
from genrepo.domain.errors import (
    DuplicateKeyError,
    EntityNotFoundError,
    MissingArgumentError,
    OperationCancelledError,
)
from genrepo.domain.models import DuplicateKeyPolicy, IntEntity
from genrepo.domain.query import Query
from genrepo.infrastructure.persistence.sql import SqlRepository


class _Base(DeclarativeBase):
    pass


class _ProductRow(_Base):
    __tablename__ = "mock_products"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str]


class Product(IntEntity):
    name: str


def _mock_session(get_result=None, rows=()):
    session = AsyncMock()
    session.add = MagicMock()
    session.expunge = MagicMock()
    session.get.return_value = get_result
    session.execute.return_value = MagicMock(scalars=MagicMock(return_value=list(rows)))
    return session


def _repo(session):
    return SqlRepository(session, Product, _ProductRow)


# --- mapping ---

def test_to_domain_reads_attributes():
    repo = _repo(_mock_session())
    product = repo._to_domain(SimpleNamespace(id=3, name="lamp"))
    assert product == Product(id=3, name="lamp")


def test_policy_is_raise():
    assert _repo(_mock_session()).duplicate_key_policy is DuplicateKeyPolicy.RAISE


def test_entity_name():
    assert _repo(_mock_session()).entity_name == "Product"


# --- session interaction ---

async def test_get_by_key_returns_none_when_not_found():
    assert await _repo(_mock_session(get_result=None)).get_by_key(1) is None


async def test_get_by_key_returns_fresh_domain_object():
    row = _ProductRow(id=1, name="lamp")
    result = await _repo(_mock_session(get_result=row)).get_by_key(1)
    assert result == Product(id=1, name="lamp")
    assert result is not row


async def test_insert_existing_key_raises_duplicate():
    session = _mock_session(get_result=_ProductRow(id=5, name="old"))
    with pytest.raises(DuplicateKeyError):
        await _repo(session).insert(Product(id=5, name="new"))
    session.add.assert_not_called()


async def test_insert_zero_key_writes_back_generated_key():
    session = _mock_session()

    async def flush():
        session.add.call_args.args[0].id = 11

    session.flush.side_effect = flush
    product = await _repo(session).insert(Product(name="lamp"))
    assert product.id == 11
    added = session.add.call_args.args[0]
    assert added.name == "lamp"
    session.get.assert_not_called()


async def test_update_missing_raises_not_found():
    with pytest.raises(EntityNotFoundError):
        await _repo(_mock_session(get_result=None)).update(Product(id=9, name="x"))


async def test_update_copies_columns_onto_row():
    row = _ProductRow(id=2, name="old")
    session = _mock_session(get_result=row)
    await _repo(session).update(Product(id=2, name="new"))
    assert row.name == "new"
    session.flush.assert_awaited()


async def test_delete_by_key_missing_is_true_without_flush():
    session = _mock_session(get_result=None)
    assert await _repo(session).delete_by_key(4) is True
    session.flush.assert_not_awaited()


async def test_get_by_query_no_tracking_expunges_rows():
    rows = [_ProductRow(id=1, name="a"), _ProductRow(id=2, name="b")]
    session = _mock_session(rows=rows)
    result = await _repo(session).get_by_query(Query().with_no_tracking())
    assert [p.name for p in result] == ["a", "b"]
    assert session.expunge.call_count == 2


async def test_insert_none_rejected_before_session_use():
    session = _mock_session()
    with pytest.raises(MissingArgumentError):
        await _repo(session).insert(None)
    session.add.assert_not_called()


# --- streaming ---

class _ScalarStream:
    def __init__(self, rows):
        self._rows = list(rows)
        self.close = AsyncMock()

    async def __aiter__(self):
        for row in self._rows:
            yield row


_ROWS = [SimpleNamespace(id=1, name="a"), SimpleNamespace(id=2, name="b")]


def _streaming_session(rows):
    session = _mock_session()
    stream = _ScalarStream(rows)
    session.stream_scalars.return_value = stream
    return session, stream


async def test_stream_closes_result_when_exhausted():
    session, stream = _streaming_session(_ROWS)
    names = [p.name async for p in _repo(session).stream_all()]
    assert names == ["a", "b"]
    stream.close.assert_awaited_once()


async def test_stream_closes_result_when_cancelled_midway():
    session, stream = _streaming_session(_ROWS)
    token = CancellationToken()
    seen = []
    with pytest.raises(OperationCancelledError):
        async for product in _repo(session).stream_all(cancel=token):
            seen.append(product.name)
            token.cancel()
    assert seen == ["a"]
    stream.close.assert_awaited_once()
