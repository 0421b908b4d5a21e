"""
In-memory backend.

Evaluates the predicate tree against an in-process sequence of records
(dicts or plain objects). Used for tests, fixtures and small cached data
sets where a database round-trip is not worth it.

Field resolution follows dot paths through dict keys or attributes; a list
met on the way is traversed implicitly and the leaf matches when any of
its elements matches.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from ..exceptions import UnsupportedPredicateError
from ..predicates import Combinator, Comparison, PredicateOperator
from ..types import OrderDirection

if TYPE_CHECKING:
    from ..predicates import FieldRef, Predicate

logger = logging.getLogger("cqrs_ddd.query.memory")

T = TypeVar("T")

_MISSING = object()


def _eq(field_value: Any, condition_value: Any) -> bool:
    return bool(field_value == condition_value)


def _in(field_value: Any, condition_value: Any) -> bool:
    return field_value in condition_value


def _exists(field_value: Any, condition_value: Any) -> bool:
    present = field_value is not _MISSING and field_value is not None
    return present is bool(condition_value)


def _ilike(field_value: Any, condition_value: Any) -> bool:
    if field_value is _MISSING or field_value is None:
        return False
    return str(condition_value).lower() in str(field_value).lower()


_LEAF_EVALUATORS: dict[PredicateOperator, Callable[[Any, Any], bool]] = {
    PredicateOperator.EQ: _eq,
    PredicateOperator.IN: _in,
    PredicateOperator.EXISTS: _exists,
    PredicateOperator.ILIKE: _ilike,
}


def resolve_field(obj: Any, parts: Sequence[str]) -> Any:
    """
    Resolve *parts* on *obj*.

    Returns ``_MISSING`` for absent keys/attributes and a list of resolved
    values when a list is traversed.
    """
    for index, part in enumerate(parts):
        if obj is None or obj is _MISSING:
            return _MISSING
        if isinstance(obj, list | tuple):
            rest = parts[index:]
            return [resolve_field(item, rest) for item in obj]
        if isinstance(obj, dict):
            obj = obj.get(part, _MISSING)
        else:
            obj = getattr(obj, part, _MISSING)
    return obj


def evaluate(predicate: Predicate, record: Any) -> bool:
    """Return ``True`` if *record* satisfies *predicate*."""
    if isinstance(predicate, Combinator):
        results = (evaluate(child, record) for child in predicate.children)
        if predicate.op == PredicateOperator.AND:
            return all(results)
        if predicate.op == PredicateOperator.OR:
            return any(results)
        raise UnsupportedPredicateError(predicate.op.value, "memory")

    evaluator = _LEAF_EVALUATORS.get(predicate.op)
    if evaluator is None:
        raise UnsupportedPredicateError(predicate.op.value, "memory")
    return _match(evaluator, resolve_field(record, predicate.field.parts), predicate)


def _match(
    evaluator: Callable[[Any, Any], bool], value: Any, predicate: Comparison
) -> bool:
    if predicate.op == PredicateOperator.EXISTS and isinstance(value, list):
        # Empty lists, or lists of missing values, count as absent.
        present = [v for v in value if v is not _MISSING and v is not None]
        return evaluator(present or None, predicate.value)
    # A list matches when any element does, except for whole-list equality.
    whole_list = predicate.op == PredicateOperator.EQ and isinstance(
        predicate.value, list
    )
    if isinstance(value, list) and not whole_list:
        return any(_match(evaluator, item, predicate) for item in value)
    return evaluator(value, predicate.value)


class MemoryQueryBackend(Generic[T]):
    """``IQueryBackend`` over an in-process sequence of records."""

    def __init__(self, records: Sequence[T]) -> None:
        self.records = records
        self._predicates: list[Predicate] = []
        self._order: list[tuple[FieldRef, OrderDirection]] = []
        self._limit: int | None = None
        self._offset = 0

    def add_order(self, field: FieldRef, direction: OrderDirection) -> None:
        self._order.append((field, direction))

    def set_limit(self, limit: int, offset: int) -> None:
        self._limit = limit
        self._offset = offset

    def and_where(self, predicate: Predicate) -> None:
        self._predicates.append(predicate)

    @property
    def predicates(self) -> list[Predicate]:
        return list(self._predicates)

    async def fetch(self) -> list[T]:
        rows = [
            r for r in self.records if all(evaluate(p, r) for p in self._predicates)
        ]
        # Stable sorts, last key first.
        for field, direction in reversed(self._order):
            rows.sort(
                key=lambda r, f=field: _sort_key(resolve_field(r, f.parts)),
                reverse=direction == OrderDirection.DESC,
            )
        end = None if self._limit is None else self._offset + self._limit
        page = rows[self._offset : end]
        logger.debug(
            "Matched %d of %d records, returning %d",
            len(rows),
            len(self.records),
            len(page),
        )
        return page


def _sort_key(value: Any) -> tuple[bool, Any]:
    if value is _MISSING or value is None:
        return (False, 0)
    return (True, value)
