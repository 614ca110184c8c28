"""End-to-end checks through the public genrepo package surface."""

import logging

import genrepo
from genrepo import (
    InMemoryRepository,
    IntEntity,
    SoftDeletableEntity,
    attr,
    order_by,
    with_auditing,
    with_logging,
    with_soft_delete,
    with_validation,
)


class Customer(IntEntity):
    name: str


class Account(SoftDeletableEntity):
    name: str


def test_public_names_exported():
    for name in genrepo.__all__:
        assert hasattr(genrepo, name), name


async def test_filter_contains_and_sort_by_name():
    repo = with_logging(InMemoryRepository(Customer), logging.getLogger("tests.e2e"))
    for name in ("Active Z", "Inactive A", "Active A", "Active M"):
        await repo.insert(Customer(name=name))
    result = await repo.get(filter=attr("name").contains("Active"), order_by=order_by("name"))
    assert [c.name for c in result] == ["Active A", "Active M", "Active Z"]


async def test_full_stack_soft_delete_with_audit_and_validation():
    entries = []
    repo = with_soft_delete(
        with_auditing(
            with_validation(InMemoryRepository(Account), lambda a: (bool(a.name), "name required")),
            entries.append,
            lambda: "svc",
        )
    )
    account = await repo.insert(Account(name="main"))
    await repo.delete(account, deleted_by="ops")

    assert await repo.get() == []
    [hidden] = await repo.get_including_deleted()
    assert hidden.deleted_by == "ops"
    assert [(e.operation, e.user) for e in entries] == [("insert", "svc"), ("update", "svc")]
