"""Lazy, composable queries over an entity collection.

A query is only a description (predicate, ordering, paging). Nothing touches
the store until it is iterated, and every iteration issues a fresh ``find``,
so results always reflect the live collection.

    query = accessor.query(Order).where({"status": "open"}).order_by("rank").limit(10)
    for order in query:
        ...
"""

from __future__ import annotations

from contextlib import aclosing
from typing import Any, AsyncIterator, Dict, Generic, Iterator, List, Optional, Type

from pymongo import ASCENDING

from .documents import from_document
from .errors import InvalidArgumentError
from .typing import EntityT, Predicate, SortKeys


class _QueryBase(Generic[EntityT]):
    def __init__(
        self,
        collection: Any,
        model: Type[EntityT],
        predicate: Optional[Dict[str, Any]] = None,
        sort: Optional[SortKeys] = None,
        skip: int = 0,
        limit: int = 0,
    ) -> None:
        self._collection = collection
        self.model = model
        self._predicate = predicate
        self._sort: SortKeys = list(sort or [])
        self._skip = skip
        self._limit = limit

    def _clone(self, **changes: Any):
        params = {
            "predicate": self._predicate,
            "sort": self._sort,
            "skip": self._skip,
            "limit": self._limit,
        }
        params.update(changes)
        return type(self)(self._collection, self.model, **params)

    @property
    def filter(self) -> Dict[str, Any]:
        return dict(self._predicate or {})

    @property
    def sort(self) -> SortKeys:
        return list(self._sort)

    def where(self, predicate: Predicate):
        """Narrow the query; successive calls are combined with ``$and``."""

        if predicate is None:
            raise InvalidArgumentError("predicate must not be None")
        if self._predicate is None:
            combined = dict(predicate)
        else:
            combined = {"$and": [self._predicate, dict(predicate)]}
        return self._clone(predicate=combined)

    def order_by(self, key: str, direction: int = ASCENDING):
        return self._clone(sort=self._sort + [(key, direction)])

    def skip(self, count: int):
        if count < 0:
            raise InvalidArgumentError("skip must be zero or positive")
        return self._clone(skip=count)

    def limit(self, count: int):
        if count < 0:
            raise InvalidArgumentError("limit must be zero or positive")
        return self._clone(limit=count)

    def _find(self) -> Any:
        return self._collection.find(
            self.filter,
            sort=self._sort or None,
            skip=self._skip,
            limit=self._limit,
        )

    def _count_options(self) -> Dict[str, int]:
        options = {}
        if self._skip:
            options["skip"] = self._skip
        if self._limit:
            options["limit"] = self._limit
        return options

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({self.model.__name__}, filter={self.filter!r}, "
            f"sort={self._sort!r}, skip={self._skip}, limit={self._limit})"
        )


class EntityQuery(_QueryBase[EntityT]):
    """Blocking query; iterate it, or call ``to_list``/``first``/``count``."""

    def __iter__(self) -> Iterator[EntityT]:
        for document in self._find():
            yield from_document(self.model, document)

    def to_list(self) -> List[EntityT]:
        return list(self)

    def first(self) -> Optional[EntityT]:
        return next(iter(self.limit(1)), None)

    def count(self) -> int:
        return self._collection.count_documents(self.filter, **self._count_options())


class AsyncEntityQuery(_QueryBase[EntityT]):
    """Awaitable query; use ``async for`` or await ``to_list``/``first``/``count``."""

    async def __aiter__(self) -> AsyncIterator[EntityT]:
        cursor = self._find()
        try:
            async for document in cursor:
                yield from_document(self.model, document)
        finally:
            await cursor.close()

    async def to_list(self) -> List[EntityT]:
        return [entity async for entity in self]

    async def first(self) -> Optional[EntityT]:
        async with aclosing(self.limit(1).__aiter__()) as entities:
            async for entity in entities:
                return entity
        return None

    async def count(self) -> int:
        return await self._collection.count_documents(
            self.filter, **self._count_options()
        )
