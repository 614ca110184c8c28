"""Tests for genrepo/domain/query.py."""

import pytest

from genrepo.domain.errors import MissingArgumentError, RepositoryArgumentError
from genrepo.domain.predicates import attr, order_by
from genrepo.domain.query import Query


def test_defaults():
    query = Query()
    assert query.filter is None
    assert query.order_by is None
    assert query.includes == []
    assert query.no_tracking is False


def test_skip_and_take_absent_without_paging():
    query = Query(page=2)
    assert query.skip is None
    assert query.take is None


def test_skip_and_take_from_paging():
    query = Query().paged(3, 10)
    assert query.skip == 20
    assert query.take == 10


def test_fluent_calls_return_same_query():
    query = Query()
    assert query.where(attr("a").eq(1)).sort(order_by("a")).include("orders") is query
    assert query.includes == ["orders"]


def test_where_none_rejected():
    with pytest.raises(MissingArgumentError):
        Query().where(None)


def test_sort_none_rejected():
    with pytest.raises(MissingArgumentError):
        Query().sort(None)


def test_include_none_rejected():
    with pytest.raises(MissingArgumentError):
        Query().include(None)


@pytest.mark.parametrize("page,page_size", [(0, 10), (1, 0), (-1, 5)])
def test_invalid_paging_rejected(page, page_size):
    with pytest.raises(RepositoryArgumentError):
        Query().paged(page, page_size)


def test_invalid_page_rejected_at_construction():
    with pytest.raises(RepositoryArgumentError):
        Query(page=0, page_size=5)


def test_with_no_tracking():
    assert Query().with_no_tracking().no_tracking is True
    assert Query(no_tracking=True).with_no_tracking(False).no_tracking is False


def test_with_filter_returns_copy():
    original_filter = attr("a").eq(1)
    query = Query(filter=original_filter, includes=["x"]).paged(1, 5)
    copy = query.with_filter(attr("b").eq(2))
    assert copy is not query
    assert query.filter is original_filter
    assert copy.page == 1 and copy.page_size == 5
    copy.include("y")
    assert query.includes == ["x"]
