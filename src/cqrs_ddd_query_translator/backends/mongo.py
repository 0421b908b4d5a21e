"""
MongoDB backend (Motor).

Lowers the predicate tree into a MongoDB filter document and runs it with
``find()`` on a Motor collection. Nested paths use dot notation
(``address.city``), which Mongo also applies through arrays.

Null semantics follow the SQL backend: ``$exists True`` matches fields
that are present *and* not null, ``$exists False`` matches null or
missing fields.
"""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from ..exceptions import UnsupportedPredicateError
from ..logger import LogContext
from ..predicates import Combinator, PredicateOperator
from ..types import OrderDirection

if TYPE_CHECKING:
    from motor.motor_asyncio import AsyncIOMotorCollection

    from ..logger import QueryLogger
    from ..predicates import FieldRef, Predicate

logger = logging.getLogger("cqrs_ddd.query.mongo")

T = TypeVar("T")


def _eq(value: Any) -> dict[str, Any]:
    return {"$eq": value}


def _in(value: Any) -> dict[str, Any]:
    return {"$in": list(value)}


def _exists(value: Any) -> dict[str, Any]:
    return {"$ne": None} if value else {"$eq": None}


def _ilike(value: Any) -> dict[str, Any]:
    if not isinstance(value, str):
        raise TypeError(f"$ilike requires a string value, got {type(value).__name__}")
    return {"$regex": re.escape(value), "$options": "i"}


_LEAF_COMPILERS: dict[PredicateOperator, Callable[[Any], dict[str, Any]]] = {
    PredicateOperator.EQ: _eq,
    PredicateOperator.IN: _in,
    PredicateOperator.EXISTS: _exists,
    PredicateOperator.ILIKE: _ilike,
}


def build_mongo_filter(predicate: Predicate) -> dict[str, Any]:
    """Lower a predicate tree to a MongoDB filter document."""
    if isinstance(predicate, Combinator):
        compiled = [build_mongo_filter(child) for child in predicate.children]
        if predicate.op == PredicateOperator.AND:
            return {"$and": compiled}
        if predicate.op == PredicateOperator.OR:
            return {"$or": compiled}
        raise UnsupportedPredicateError(predicate.op.value, "mongo")

    compiler = _LEAF_COMPILERS.get(predicate.op)
    if compiler is None:
        raise UnsupportedPredicateError(predicate.op.value, "mongo")
    return {predicate.field.path: compiler(predicate.value)}


class MongoQueryBackend(Generic[T]):
    """
    ``IQueryBackend`` over a Motor collection.

    Args:
        collection: ``AsyncIOMotorCollection`` (or a compatible mock).
        query_logger: Optional :class:`QueryLogger` notified after each
            fetch with the filter document and timing.
        connection_name: Reported to the query logger.
        document_factory: Optional callable turning each raw document into
            the returned item type; raw dicts are returned by default.
    """

    def __init__(
        self,
        collection: AsyncIOMotorCollection,
        *,
        query_logger: QueryLogger | None = None,
        connection_name: str | None = None,
        document_factory: Callable[[dict[str, Any]], T] | None = None,
    ) -> None:
        self._collection = collection
        self._query_logger = query_logger
        self._connection_name = connection_name
        self._document_factory = document_factory
        self._filters: list[dict[str, Any]] = []
        self._sort: list[tuple[str, int]] = []
        self._limit: int | None = None
        self._skip: int | None = None

    def add_order(self, field: FieldRef, direction: OrderDirection) -> None:
        self._sort.append((field.path, -1 if direction == OrderDirection.DESC else 1))

    def set_limit(self, limit: int, offset: int) -> None:
        self._limit = limit
        self._skip = offset

    def and_where(self, predicate: Predicate) -> None:
        self._filters.append(build_mongo_filter(predicate))

    def build_filter(self) -> dict[str, Any]:
        """The filter document assembled so far."""
        if not self._filters:
            return {}
        if len(self._filters) == 1:
            return self._filters[0]
        return {"$and": list(self._filters)}

    def build_sort(self) -> list[tuple[str, int]]:
        return list(self._sort)

    async def fetch(self) -> list[T]:
        filter_query = self.build_filter()
        start = time.perf_counter()

        cursor = self._collection.find(filter_query)
        if self._sort:
            cursor = cursor.sort(self._sort)
        if self._skip:
            cursor = cursor.skip(self._skip)
        if self._limit is not None:
            cursor = cursor.limit(self._limit)

        rows: list[Any] = []
        async for doc in cursor:
            rows.append(
                self._document_factory(doc) if self._document_factory else doc
            )

        took = round((time.perf_counter() - start) * 1000, 2)
        logger.debug("Fetched %d documents in %.2fms", len(rows), took)
        if self._query_logger is not None:
            self._query_logger.log_query(
                LogContext(
                    query=repr(filter_query),
                    connection_type="mongo",
                    connection_name=self._connection_name,
                    took=took,
                )
            )
        return rows
