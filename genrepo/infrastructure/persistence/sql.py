"""SQLAlchemy implementation of Repository.

Maps between a pydantic entity type and an ORM model with matching column
names. Reads always materialise fresh entity instances; callers never share
state with the session's identity map.

Policy differences from InMemoryRepository:
  - inserting an existing key raises DuplicateKeyError (RAISE policy),
  - updating a missing key raises EntityNotFoundError,
  - integer keys equal to 0 are left out of the INSERT so the database
    generates them; the generated value is written back to the entity.

The repository flushes but never commits. Transactions (and therefore batch
atomicity) belong to whoever owns the session, e.g. database.session_scope.
"""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Generic, Iterable, Sequence, TypeVar

from sqlalchemy import Select, inspect as sa_inspect, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from genrepo.domain.cancellation import CancellationToken, raise_if_cancelled
from genrepo.domain.errors import DuplicateKeyError, EntityNotFoundError, require
from genrepo.domain.models.enums import DuplicateKeyPolicy
from genrepo.domain.predicates import PredicateLike, Sort
from genrepo.domain.query import Query
from genrepo.domain.repositories.base import Repository, is_integer_key, key_of, key_type_of
from genrepo.domain.repositories.batch import apply_each
from genrepo.domain.repositories.streams import ReplayableStream

from .sql_predicates import compile_order, compile_predicate

logger = logging.getLogger(__name__)

T = TypeVar("T")
K = TypeVar("K")


class SqlRepository(Repository[T, K], Generic[T, K]):
    def __init__(self, session: AsyncSession, entity_type: type[T], orm_model: type) -> None:
        self._session = session
        self._entity_type = entity_type
        self._orm_model = orm_model
        self._columns = frozenset(attr.key for attr in sa_inspect(orm_model).column_attrs)
        self._generates_keys = is_integer_key(key_type_of(entity_type))

    @property
    def duplicate_key_policy(self) -> DuplicateKeyPolicy:
        return DuplicateKeyPolicy.RAISE

    @property
    def entity_name(self) -> str:
        return self._entity_type.__name__

    def _to_domain(self, row: Any) -> T:
        return self._entity_type.model_validate(row, from_attributes=True)

    def _column_values(self, entity: T) -> dict[str, Any]:
        return {k: v for k, v in entity.model_dump().items() if k in self._columns}

    def _to_row(self, entity: T, include_key: bool = True) -> Any:
        values = self._column_values(entity)
        if not include_key:
            values.pop("id", None)
        return self._orm_model(**values)

    def _load_option(self, path: str) -> Any:
        model = self._orm_model
        option = None
        for name in path.split("."):
            relationship = getattr(model, name)
            option = selectinload(relationship) if option is None else option.selectinload(relationship)
            model = relationship.property.mapper.class_
        return option

    def _select(
        self,
        filter: PredicateLike[T] | None,
        order_by: Sort[T] | None,
        include: Sequence[str],
    ) -> Select:
        stmt = select(self._orm_model)
        if filter is not None:
            stmt = stmt.where(compile_predicate(filter, self._orm_model))
        for path in include:
            stmt = stmt.options(self._load_option(path))
        if order_by is not None:
            stmt = stmt.order_by(*compile_order(order_by, self._orm_model))
        return stmt

    # --- reads ---

    async def get(
        self,
        filter: PredicateLike[T] | None = None,
        order_by: Sort[T] | None = None,
        include: Sequence[str] = (),
        cancel: CancellationToken | None = None,
    ) -> list[T]:
        raise_if_cancelled(cancel)
        result = await self._session.execute(self._select(filter, order_by, include))
        raise_if_cancelled(cancel)
        return [self._to_domain(row) for row in result.scalars()]

    async def get_by_key(self, key: K, cancel: CancellationToken | None = None) -> T | None:
        raise_if_cancelled(cancel)
        require(key, "key")
        row = await self._session.get(self._orm_model, key)
        return self._to_domain(row) if row is not None else None

    async def get_by_query(self, query: Query[T], cancel: CancellationToken | None = None) -> list[T]:
        raise_if_cancelled(cancel)
        require(query, "query")
        stmt = self._select(query.filter, query.order_by, query.includes)
        if query.skip is not None:
            stmt = stmt.offset(query.skip).limit(query.take)
        result = await self._session.execute(stmt)
        raise_if_cancelled(cancel)
        rows = list(result.scalars())
        entities = [self._to_domain(row) for row in rows]
        if query.no_tracking:
            for row in rows:
                self._session.expunge(row)
        return entities

    def stream_all(
        self,
        filter: PredicateLike[T] | None = None,
        order_by: Sort[T] | None = None,
        include: Sequence[str] = (),
        cancel: CancellationToken | None = None,
    ) -> ReplayableStream[T]:
        return ReplayableStream(lambda: self._stream(filter, order_by, include, cancel))

    async def _stream(
        self,
        filter: PredicateLike[T] | None,
        order_by: Sort[T] | None,
        include: Sequence[str],
        cancel: CancellationToken | None,
    ) -> AsyncIterator[T]:
        raise_if_cancelled(cancel)
        result = await self._session.stream_scalars(self._select(filter, order_by, include))
        try:
            async for row in result:
                raise_if_cancelled(cancel)
                yield self._to_domain(row)
        finally:
            await result.close()

    # --- writes ---

    async def insert(self, entity: T, cancel: CancellationToken | None = None) -> T:
        raise_if_cancelled(cancel)
        require(entity, "entity")
        generate = self._generates_keys and key_of(entity) == 0
        if not generate:
            key = require(key_of(entity), "entity.id")
            if await self._session.get(self._orm_model, key) is not None:
                raise DuplicateKeyError(self.entity_name, key)
        row = self._to_row(entity, include_key=not generate)
        self._session.add(row)
        await self._session.flush()
        if generate:
            entity.id = row.id
            logger.debug("Generated key %r for %s", row.id, self.entity_name)
        return entity

    async def update(self, entity: T, cancel: CancellationToken | None = None) -> T:
        raise_if_cancelled(cancel)
        require(entity, "entity")
        key = require(key_of(entity), "entity.id")
        row = await self._session.get(self._orm_model, key)
        if row is None:
            raise EntityNotFoundError(self.entity_name, key)
        for name, value in self._column_values(entity).items():
            setattr(row, name, value)
        await self._session.flush()
        return entity

    async def delete(self, entity: T, cancel: CancellationToken | None = None) -> bool:
        require(entity, "entity")
        return await self.delete_by_key(key_of(entity), cancel)

    async def delete_by_key(self, key: K, cancel: CancellationToken | None = None) -> bool:
        raise_if_cancelled(cancel)
        require(key, "key")
        if await self._remove(key):
            await self._session.flush()
        return True

    async def _remove(self, key: K) -> bool:
        row = await self._session.get(self._orm_model, key)
        if row is None:
            return False
        await self._session.delete(row)
        return True

    # --- batches ---

    async def insert_range(
        self, entities: Iterable[T], cancel: CancellationToken | None = None
    ) -> list[T]:
        raise_if_cancelled(cancel)
        items = list(require(entities, "entities"))
        return await apply_each("insert_range", items, lambda e: self.insert(e, cancel), cancel)

    async def update_range(
        self, entities: Iterable[T], cancel: CancellationToken | None = None
    ) -> list[T]:
        raise_if_cancelled(cancel)
        items = list(require(entities, "entities"))
        return await apply_each("update_range", items, lambda e: self.update(e, cancel), cancel)

    async def delete_range(
        self, entities: Iterable[T], cancel: CancellationToken | None = None
    ) -> int:
        raise_if_cancelled(cancel)
        items = list(require(entities, "entities"))
        if not items:
            return 0

        async def remove(entity: T) -> bool:
            require(entity, "entity")
            return await self._remove(key_of(entity))

        removed = await apply_each("delete_range", items, remove, cancel)
        await self._session.flush()
        return sum(removed)

    async def delete_range_by_filter(
        self, filter: PredicateLike[T], cancel: CancellationToken | None = None
    ) -> int:
        raise_if_cancelled(cancel)
        require(filter, "filter")
        stmt = select(self._orm_model).where(compile_predicate(filter, self._orm_model))
        rows = list((await self._session.execute(stmt)).scalars())
        for row in rows:
            raise_if_cancelled(cancel)
            await self._session.delete(row)
        if rows:
            await self._session.flush()
        return len(rows)
