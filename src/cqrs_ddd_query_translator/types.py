"""
Query descriptor types.

These are the transport-agnostic inputs of the translator: ordering,
pagination, free-text search fields and per-field typed filters. They are
produced upstream (request parsing is out of scope) and are immutable.

Filters accept plain dicts through ``model_validate``::

    StringType.model_validate(
        {"conditions": {"eq": {"value": "x"}, "contains": {"value": "y"}},
         "operator": "or"}
    )
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class OrderDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class Operator(str, Enum):
    """Combinator used when a field filter carries several conditions."""

    AND = "and"
    OR = "or"


class _Descriptor(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class Order(_Descriptor):
    field: str
    direction: OrderDirection = OrderDirection.ASC


class Pager(_Descriptor):
    """
    ``take`` absent (or not positive) means no limit and no has-more flag.
    ``offset`` must not be negative.
    """

    take: int | None = None
    offset: int | None = Field(default=None, ge=0)


class SearchField(_Descriptor):
    path: str


# ---------------------------------------------------------------------------
# Conditions
# ---------------------------------------------------------------------------


class EqCondition(_Descriptor):
    value: Any = None


class InCondition(_Descriptor):
    values: list[Any] | None = None


class ExistsCondition(_Descriptor):
    value: bool | None = None


class ContainsCondition(_Descriptor):
    value: str | None = None


class Conditions(_Descriptor):
    """
    Named conditions of one field filter.

    Every family shares this shape; which names apply is decided by the
    family descriptor, unsupported ones are ignored.
    """

    eq: EqCondition | None = None
    in_: InCondition | None = Field(default=None, alias="in")
    exists: ExistsCondition | None = None
    contains: ContainsCondition | None = None

    def items(self) -> list[tuple[str, Any]]:
        """Return ``(name, condition)`` pairs for the conditions that are set."""
        pairs = (
            ("eq", self.eq),
            ("in", self.in_),
            ("exists", self.exists),
            ("contains", self.contains),
        )
        return [(name, cond) for name, cond in pairs if cond is not None]


class FieldFilter(_Descriptor):
    conditions: Conditions | None = None
    operator: Operator | None = None


# Family aliases, kept for call sites that name the scalar type.
IDType = FieldFilter
DateType = FieldFilter
StringType = FieldFilter
NumberType = FieldFilter
BigIntType = FieldFilter
