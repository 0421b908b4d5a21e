"""IQueryBackend: the protocol the translator drives."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, TypeVar, runtime_checkable

if TYPE_CHECKING:
    from .predicates import FieldRef, Predicate
    from .types import OrderDirection

T_co = TypeVar("T_co", covariant=True)


@runtime_checkable
class IQueryBackend(Protocol[T_co]):
    """
    Mutable backend query builder.

    The translator only ever calls these four methods and never reads
    backend state. Implementations lower :mod:`predicates` into their
    native query language.
    """

    def add_order(self, field: FieldRef, direction: OrderDirection) -> None:
        """Append a sort key."""
        ...

    def set_limit(self, limit: int, offset: int) -> None:
        """Fetch at most *limit* rows starting at *offset*."""
        ...

    def and_where(self, predicate: Predicate) -> None:
        """AND *predicate* into the accumulated filter."""
        ...

    async def fetch(self) -> list[T_co]:
        """Run the query and return the rows in order."""
        ...
