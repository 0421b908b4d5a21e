"""
SQLAlchemy backend.

Lowers the predicate tree into a SQLAlchemy ``ColumnElement[bool]`` and
accumulates it on a ``Select`` statement, which is executed on an
``AsyncSession``::

    backend = SQLAlchemyQueryBackend(session, UserModel)
    page = await QueryTranslator(backend).id("status", status_filter).execute()

Multi-segment field paths traverse relationships (e.g. ``posts.title``):
collections use ``.any()`` and scalar relationships ``.has()``, both of
which render as ``EXISTS`` sub-queries. Unknown attributes raise
``AttributeError``; database errors are raised by the session. Neither is
caught here.

Sorting on a nested path never changes which rows come back: scalar
relationships are LEFT OUTER JOINed, and a path through a collection sorts by
the smallest (ascending) or largest (descending) value among the children,
computed in a correlated sub-query.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Generic, TypeVar, cast

from sqlalchemy import ColumnElement, Select, and_, asc, desc, func, or_, select

from ..exceptions import UnsupportedPredicateError
from ..logger import LogContext
from ..predicates import Combinator, PredicateOperator
from ..types import OrderDirection

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

    from ..logger import QueryLogger
    from ..predicates import Comparison, FieldRef, Predicate

logger = logging.getLogger("cqrs_ddd.query.sqlalchemy")

T = TypeVar("T")


def _eq(column: Any, value: Any) -> ColumnElement[bool]:
    return cast("ColumnElement[bool]", column == value)


def _in(column: Any, value: Any) -> ColumnElement[bool]:
    return cast("ColumnElement[bool]", column.in_(value))


def _exists(column: Any, value: Any) -> ColumnElement[bool]:
    if value:
        return cast("ColumnElement[bool]", column.is_not(None))
    return cast("ColumnElement[bool]", column.is_(None))


def _ilike(column: Any, value: Any) -> ColumnElement[bool]:
    return cast("ColumnElement[bool]", column.icontains(value, autoescape=True))


_LEAF_COMPILERS: dict[PredicateOperator, Callable[[Any, Any], ColumnElement[bool]]] = {
    PredicateOperator.EQ: _eq,
    PredicateOperator.IN: _in,
    PredicateOperator.EXISTS: _exists,
    PredicateOperator.ILIKE: _ilike,
}


# ---------------------------------------------------------------------------
# Predicate lowering
# ---------------------------------------------------------------------------


def build_sqla_filter(model: type[Any], predicate: Predicate) -> ColumnElement[bool]:
    """Lower a predicate tree to a SQLAlchemy boolean expression on *model*."""
    if isinstance(predicate, Combinator):
        children = [build_sqla_filter(model, child) for child in predicate.children]
        if predicate.op == PredicateOperator.AND:
            return and_(*children)
        if predicate.op == PredicateOperator.OR:
            return or_(*children)
        raise UnsupportedPredicateError(predicate.op.value, "sqlalchemy")
    return _compile_leaf(model, predicate.field.parts, predicate)


def _compile_leaf(
    model: type[Any],
    parts: Sequence[str],
    predicate: Comparison,
) -> ColumnElement[bool]:
    compiler = _LEAF_COMPILERS.get(predicate.op)
    if compiler is None:
        raise UnsupportedPredicateError(predicate.op.value, "sqlalchemy")

    if len(parts) > 1:
        rel_attr = getattr(model, parts[0], None)
        if rel_attr is None:
            raise AttributeError(f"Model {model} has no relationship {parts[0]}")

        target_model = rel_attr.property.mapper.class_
        inner_expr = _compile_leaf(target_model, parts[1:], predicate)

        if rel_attr.property.uselist:
            return cast("ColumnElement[bool]", rel_attr.any(inner_expr))
        return cast("ColumnElement[bool]", rel_attr.has(inner_expr))

    column = getattr(model, parts[0], None)
    if column is None:
        raise AttributeError(f"Model {model} has no attribute {parts[0]}")
    return compiler(column, predicate.value)


def _relationship(model: type[Any], name: str) -> Any:
    rel_attr = getattr(model, name, None)
    if rel_attr is None:
        raise AttributeError(f"Model {model} has no relationship {name}")
    return rel_attr


def _column(model: type[Any], name: str) -> Any:
    column = getattr(model, name, None)
    if column is None:
        raise AttributeError(f"Model {model} has no attribute {name}")
    return column


def _collection_sort_key(
    rel_attr: Any, parts: Sequence[str], direction: OrderDirection
) -> Any:
    """
    Sort key for a path through a collection relationship.

    Ascending sorts use the smallest child value, descending the largest.
    Parents without children get NULL and are kept.
    """
    prop = rel_attr.property
    target: type[Any] = prop.mapper.class_
    model = target
    inner_joins: list[Any] = []
    for part in parts[:-1]:
        inner = _relationship(model, part)
        inner_joins.append(inner)
        model = inner.property.mapper.class_

    aggregate = func.max if direction == OrderDirection.DESC else func.min
    subq = select(aggregate(_column(model, parts[-1]))).select_from(target)
    for inner in inner_joins:
        subq = subq.join(inner)
    subq = subq.where(prop.primaryjoin)
    if prop.secondaryjoin is not None:
        subq = subq.where(prop.secondaryjoin)
    return subq.scalar_subquery()


# ---------------------------------------------------------------------------
# Backend
# ---------------------------------------------------------------------------


class SQLAlchemyQueryBackend(Generic[T]):
    """
    ``IQueryBackend`` building a ``Select`` for one mapped model.

    Args:
        session: Session the statement is executed on.
        model: Mapped class; rows are returned as its instances.
        stmt: Optional base statement (defaults to ``select(model)``). It
            must select *model* as its first entity.
        query_logger: Optional :class:`QueryLogger` notified after each
            fetch with the compiled SQL and timing.
    """

    def __init__(
        self,
        session: AsyncSession,
        model: type[T],
        *,
        stmt: Select[Any] | None = None,
        query_logger: QueryLogger | None = None,
    ) -> None:
        self._session = session
        self._model = model
        self._stmt: Select[Any] = stmt if stmt is not None else select(model)
        self._query_logger = query_logger
        self._joined: set[tuple[type[Any], str]] = set()

    def statement(self) -> Select[Any]:
        """The statement assembled so far."""
        return self._stmt

    def add_order(self, field: FieldRef, direction: OrderDirection) -> None:
        column = self._resolve_order_column(field, direction)
        clause = desc(column) if direction == OrderDirection.DESC else asc(column)
        self._stmt = self._stmt.order_by(clause)

    def set_limit(self, limit: int, offset: int) -> None:
        self._stmt = self._stmt.limit(limit).offset(offset)

    def and_where(self, predicate: Predicate) -> None:
        self._stmt = self._stmt.where(build_sqla_filter(self._model, predicate))

    async def fetch(self) -> list[T]:
        start = time.perf_counter()
        result = await self._session.execute(self._stmt)
        rows = list(result.scalars().all())
        took = round((time.perf_counter() - start) * 1000, 2)
        logger.debug("Fetched %d %s rows in %.2fms", len(rows), self._model, took)
        self._report(took)
        return rows

    # -- internals -----------------------------------------------------------

    def _resolve_order_column(self, field: FieldRef, direction: OrderDirection) -> Any:
        """
        Resolve a sort expression without changing the result rows.

        Scalar relationships are outer-joined once each; the first collection
        on the path hands the rest of it to a correlated aggregate sub-query.
        """
        model: type[Any] = self._model
        parts = field.parts
        for index, part in enumerate(parts[:-1]):
            rel_attr = _relationship(model, part)
            if rel_attr.property.uselist:
                return _collection_sort_key(rel_attr, parts[index + 1 :], direction)
            if (model, part) not in self._joined:
                self._joined.add((model, part))
                self._stmt = self._stmt.outerjoin(rel_attr)
            model = rel_attr.property.mapper.class_
        return _column(model, parts[-1])

    def _report(self, took: float) -> None:
        if self._query_logger is None or not self._query_logger.is_enabled("query"):
            return
        dialect = self._session.get_bind().dialect
        compiled = self._stmt.compile(dialect=dialect)
        self._query_logger.log_query(
            LogContext(
                query=str(compiled),
                params=list(compiled.params.values()),
                connection_type=dialect.name,
                took=took,
            )
        )
