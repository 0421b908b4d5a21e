"""
QueryTranslator: fluent translation of a query descriptor onto a backend.

Example::

    items, has_more = await (
        QueryTranslator(backend)
        .order(Order(field="created_at", direction=OrderDirection.DESC))
        .pager(Pager(take=20, offset=40))
        .search([SearchField(path="name"), SearchField(path="bio")], "ada")
        .id("status", {"conditions": {"eq": {"value": "active"}}})
        .execute()
    )

Every configuration method returns ``self`` and treats ``None`` arguments
as a no-op. Filters are ANDed at the top level, so the call order does not
change the result.

Pagination uses a look-ahead row: ``pager(take=N)`` asks the backend for
``N + 1`` rows, ``execute()`` returns the first ``N`` and reports whether
the extra row existed.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Generic, NamedTuple, TypeVar

from .compiler import compile_field_filter, compile_search
from .families import DEFAULT_FAMILIES
from .predicates import FieldRef
from .types import FieldFilter, Order, Pager, SearchField

if TYPE_CHECKING:
    from .families import FamilyRegistry
    from .ports import IQueryBackend
    from .predicates import FieldLike, Predicate

logger = logging.getLogger("cqrs_ddd.query")

T = TypeVar("T")

FilterInput = FieldFilter | Mapping[str, Any] | None


class Page(NamedTuple):
    """One page of results; unpacks as ``(items, has_more)``."""

    items: list[Any]
    has_more: bool


class QueryTranslator(Generic[T]):
    """
    Builds one query on one backend, then executes it once.

    The translator owns *backend* exclusively for its lifetime and is not
    meant to be shared between callers.
    """

    def __init__(
        self,
        backend: IQueryBackend[T],
        *,
        families: FamilyRegistry | None = None,
    ) -> None:
        self._backend = backend
        self._families = families if families is not None else DEFAULT_FAMILIES
        self._requested_size: int | None = None

    @property
    def requested_size(self) -> int | None:
        return self._requested_size

    # -- ordering / paging ---------------------------------------------------

    def order(
        self, order: Order | Mapping[str, Any] | None = None
    ) -> QueryTranslator[T]:
        if order is None:
            return self
        if not isinstance(order, Order):
            order = Order.model_validate(order)
        ref = FieldRef.parse_or_none(order.field)
        if ref is not None:
            self._backend.add_order(ref, order.direction)
        return self

    def pager(
        self, pager: Pager | Mapping[str, Any] | None = None
    ) -> QueryTranslator[T]:
        if pager is None:
            return self
        if not isinstance(pager, Pager):
            pager = Pager.model_validate(pager)
        if pager.take is None or pager.take <= 0:
            return self
        self._requested_size = pager.take
        self._backend.set_limit(pager.take + 1, pager.offset or 0)
        return self

    # -- search --------------------------------------------------------------

    def search(
        self,
        fields: Sequence[SearchField | Mapping[str, Any] | str] | None = None,
        value: str | None = None,
    ) -> QueryTranslator[T]:
        return self._and_where(compile_search(fields, value))

    # -- typed filters -------------------------------------------------------

    def id(self, field: FieldLike, query: FilterInput = None) -> QueryTranslator[T]:
        return self.filter("id", field, query)

    def date(self, field: FieldLike, query: FilterInput = None) -> QueryTranslator[T]:
        return self.filter("date", field, query)

    def string(self, field: FieldLike, query: FilterInput = None) -> QueryTranslator[T]:
        return self.filter("string", field, query)

    def number(self, field: FieldLike, query: FilterInput = None) -> QueryTranslator[T]:
        return self.filter("number", field, query)

    def bigint(self, field: FieldLike, query: FilterInput = None) -> QueryTranslator[T]:
        return self.filter("bigint", field, query)

    def filter(
        self,
        family: str,
        field: FieldLike,
        query: FilterInput = None,
    ) -> QueryTranslator[T]:
        """
        Apply a filter of any registered family.

        Raises:
            UnknownFamilyError: If *family* is not registered.
        """
        descriptor = self._families.require(family)
        if not field or query is None:
            return self
        return self._and_where(compile_field_filter(descriptor, field, query))

    # -- execution -----------------------------------------------------------

    async def execute(self) -> Page:
        """
        Run the query and return ``Page(items, has_more)``.

        Backend errors propagate unchanged.
        """
        rows = await self._backend.fetch()
        size = self._requested_size
        if size is None:
            logger.debug("Fetched %d rows (unpaged)", len(rows))
            return Page(list(rows), False)

        has_more = len(rows) >= size + 1
        logger.debug(
            "Fetched %d rows for page size %d (has_more=%s)", len(rows), size, has_more
        )
        return Page(list(rows[:size]), has_more)

    # -- internals -----------------------------------------------------------

    def _and_where(self, predicate: Predicate | None) -> QueryTranslator[T]:
        if predicate is not None:
            logger.debug("AND %s", predicate)
            self._backend.and_where(predicate)
        return self
