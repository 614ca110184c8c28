"""Query object: filter, ordering, eager-load hints, paging and tracking in one value.

Consumed by backends through Repository.get_by_query; interceptors see it
only as an opaque argument.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Generic, TypeVar

from .errors import MissingArgumentError, RepositoryArgumentError

T = TypeVar("T")


def _check_page(page: int | None, page_size: int | None) -> None:
    if page is not None and page < 1:
        raise RepositoryArgumentError("page must be greater than or equal to 1")
    if page_size is not None and page_size < 1:
        raise RepositoryArgumentError("page_size must be greater than or equal to 1")


@dataclass
class Query(Generic[T]):
    """Fluent, mutable query description.

    page is 1-based. skip and take are only defined when both page and
    page_size are set. Calling where() again replaces the filter; combine
    conditions with ``&`` or a Specification instead.
    """

    filter: Any = None
    order_by: Any = None
    includes: list[str] = field(default_factory=list)
    page: int | None = None
    page_size: int | None = None
    no_tracking: bool = False

    def __post_init__(self) -> None:
        _check_page(self.page, self.page_size)

    def where(self, filter: Any) -> Query[T]:
        if filter is None:
            raise MissingArgumentError("filter")
        self.filter = filter
        return self

    def sort(self, order_by: Any) -> Query[T]:
        if order_by is None:
            raise MissingArgumentError("order_by")
        self.order_by = order_by
        return self

    def include(self, path: str) -> Query[T]:
        """Add a navigation path to eager-load; dotted paths nest (``"orders.lines"``)."""
        if path is None:
            raise MissingArgumentError("path")
        self.includes.append(path)
        return self

    def paged(self, page: int, page_size: int) -> Query[T]:
        _check_page(page, page_size)
        self.page = page
        self.page_size = page_size
        return self

    def with_no_tracking(self, no_tracking: bool = True) -> Query[T]:
        self.no_tracking = no_tracking
        return self

    def with_filter(self, filter: Any) -> Query[T]:
        """Return a copy carrying ``filter``; this query is left untouched."""
        return replace(self, filter=filter, includes=list(self.includes))

    @property
    def skip(self) -> int | None:
        if self.page is None or self.page_size is None:
            return None
        return (self.page - 1) * self.page_size

    @property
    def take(self) -> int | None:
        if self.page is None or self.page_size is None:
            return None
        return self.page_size
