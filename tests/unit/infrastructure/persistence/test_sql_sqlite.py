"""SqlRepository against an in-memory SQLite database (aiosqlite)."""

from datetime import datetime
from typing import Optional

import pytest
from sqlalchemy import ForeignKey
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.pool import StaticPool

from genrepo.domain.errors import (
    DuplicateKeyError,
    EntityNotFoundError,
    UntranslatablePredicateError,
)
from genrepo.domain.models import IntEntity, SoftDeletableEntity
from genrepo.domain.predicates import attr, order_by
from genrepo.domain.query import Query
from genrepo.infrastructure.database import create_session_factory
from genrepo.infrastructure.persistence.sql import SqlRepository
from genrepo.interception.soft_delete import SoftDeleteRepository


class _Base(DeclarativeBase):
    pass


class _CustomerRow(_Base):
    __tablename__ = "customers"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str]
    is_active: Mapped[bool] = mapped_column(default=True)
    orders: Mapped[list["_OrderRow"]] = relationship(back_populates="customer")


class _OrderRow(_Base):
    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(primary_key=True)
    customer_id: Mapped[int] = mapped_column(ForeignKey("customers.id"))
    customer: Mapped[_CustomerRow] = relationship(back_populates="orders")


class _NoteRow(_Base):
    __tablename__ = "notes"

    id: Mapped[int] = mapped_column(primary_key=True)
    text: Mapped[str]
    is_deleted: Mapped[bool] = mapped_column(default=False)
    deleted_at: Mapped[Optional[datetime]]
    deleted_by: Mapped[Optional[str]]


class Customer(IntEntity):
    name: str
    is_active: bool = True


class Note(SoftDeletableEntity):
    text: str


@pytest.fixture
async def session():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(_Base.metadata.create_all)
    factory = create_session_factory(engine)
    async with factory() as session:
        yield session
    await engine.dispose()


@pytest.fixture
def customers(session):
    return SqlRepository(session, Customer, _CustomerRow)


async def test_insert_generates_sequential_keys(customers):
    first = await customers.insert(Customer(name="a"))
    second = await customers.insert(Customer(name="b"))
    assert first.id > 0
    assert second.id == first.id + 1


async def test_insert_duplicate_key_raises(customers):
    await customers.insert(Customer(id=10, name="a"))
    with pytest.raises(DuplicateKeyError):
        await customers.insert(Customer(id=10, name="b"))


async def test_end_to_end_filter_and_sort(customers):
    await customers.insert_range(
        [Customer(name=n) for n in ("Active Z", "Inactive A", "Active A", "Active M")]
    )
    result = await customers.get(filter=attr("name").startswith("Active"), order_by=order_by("name"))
    assert [c.name for c in result] == ["Active A", "Active M", "Active Z"]


async def test_end_to_end_contains_and_sort(customers):
    await customers.insert_range(
        [Customer(name=n) for n in ("Active Z", "Inactive A", "Active A", "Active M")]
    )
    result = await customers.get(filter=attr("name").contains("Active"), order_by=order_by("name"))
    assert [c.name for c in result] == ["Active A", "Active M", "Active Z"]


async def test_contains_treats_wildcards_literally(customers):
    await customers.insert_range([Customer(name=n) for n in ("50% off", "500 off", "a_b", "axb")])
    percent = await customers.get(filter=attr("name").contains("0%"))
    underscore = await customers.get(filter=attr("name").startswith("a_"))
    assert [c.name for c in percent] == ["50% off"]
    assert [c.name for c in underscore] == ["a_b"]


async def test_get_by_query_pages(customers):
    await customers.insert_range([Customer(name=n) for n in "edcba"])
    page = await customers.get_by_query(Query().sort(order_by("name")).paged(2, 2))
    assert [c.name for c in page] == ["c", "d"]


async def test_include_loads_relationship_without_error(customers, session):
    stored = await customers.insert(Customer(name="a"))
    session.add(_OrderRow(customer_id=stored.id))
    await session.flush()
    assert len(await customers.get(include=["orders"])) == 1


async def test_plain_callable_filter_rejected(customers):
    with pytest.raises(UntranslatablePredicateError):
        await customers.get(filter=lambda c: True)


async def test_update_and_missing_update(customers):
    stored = await customers.insert(Customer(name="a"))
    stored.name = "renamed"
    await customers.update(stored)
    assert (await customers.get_by_key(stored.id)).name == "renamed"
    with pytest.raises(EntityNotFoundError):
        await customers.update(Customer(id=999, name="ghost"))


async def test_delete_range_by_filter(customers):
    await customers.insert_range([Customer(name=n) for n in ("keep1", "drop1", "keep2", "drop2")])
    assert await customers.delete_range_by_filter(attr("name").startswith("drop")) == 2
    remaining = await customers.get(order_by=order_by("name"))
    assert [c.name for c in remaining] == ["keep1", "keep2"]


async def test_stream_all(customers):
    await customers.insert_range([Customer(name="a"), Customer(name="b")])
    stream = customers.stream_all(order_by=order_by("name"))
    assert [c.name async for c in stream] == ["a", "b"]


async def test_soft_delete_over_sql(session):
    repo = SoftDeleteRepository(SqlRepository(session, Note, _NoteRow))
    note = await repo.insert(Note(text="hello"))

    assert await repo.delete(note, deleted_by="alice") is True

    assert await repo.get_by_key(note.id) is None
    assert await repo.get() == []
    hidden = await repo.get_including_deleted()
    assert hidden[0].is_deleted is True
    assert hidden[0].deleted_by == "alice"
    assert hidden[0].deleted_at is not None

    restored = await repo.restore_by_key(note.id)
    assert restored.is_deleted is False
    assert (await repo.get_by_key(note.id)).text == "hello"
