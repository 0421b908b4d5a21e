"""
Scalar filter families.

Each family (identifier, date, string, number, large integer) is described
by a small :class:`ScalarFamily` descriptor: the condition names it accepts
and the value type its condition values are cast to. One generic compiler
(:func:`cqrs_ddd_query_translator.compiler.compile_field_filter`) serves all
of them.

Families live in a :class:`FamilyRegistry`. Custom families are added with
``register()``::

    registry = build_default_families()
    registry.register(
        ScalarFamily("uuid", frozenset({ConditionName.EQ}), value_type="uuid")
    )
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .exceptions import UnknownFamilyError
from .predicates import Comparison, FieldRef, eq, exists, ilike, in_
from .utils import cast_value


class ConditionName(str, Enum):
    EQ = "eq"
    IN = "in"
    EXISTS = "exists"
    CONTAINS = "contains"


# Condition order inside a multi-condition combinator.
CANONICAL_ORDER: tuple[ConditionName, ...] = (
    ConditionName.EQ,
    ConditionName.IN,
    ConditionName.EXISTS,
    ConditionName.CONTAINS,
)


def _compile_eq(
    field: FieldRef, cond: Any, value_type: str | None
) -> Comparison | None:
    value = getattr(cond, "value", None)
    if value is None:
        return None
    return eq(field, cast_value(value, value_type))


def _compile_in(
    field: FieldRef, cond: Any, value_type: str | None
) -> Comparison | None:
    values = getattr(cond, "values", None)
    if values is None:
        return None
    # An empty list still compiles; matching nothing is the backend's call.
    return in_(field, cast_value(list(values), value_type))


def _compile_exists(
    field: FieldRef, cond: Any, _value_type: str | None
) -> Comparison | None:
    value = getattr(cond, "value", None)
    if value is None:
        return None
    return exists(field, value)


def _compile_contains(
    field: FieldRef, cond: Any, _value_type: str | None
) -> Comparison | None:
    value = getattr(cond, "value", None)
    if not value:
        return None
    return ilike(field, value)


_CONDITION_COMPILERS: dict[
    ConditionName, Callable[[FieldRef, Any, str | None], Comparison | None]
] = {
    ConditionName.EQ: _compile_eq,
    ConditionName.IN: _compile_in,
    ConditionName.EXISTS: _compile_exists,
    ConditionName.CONTAINS: _compile_contains,
}


@dataclass(frozen=True)
class ScalarFamily:
    """
    Descriptor of one scalar filter family.

    Attributes:
        name: Registry key (``"id"``, ``"date"``...).
        allowed_conditions: Condition names this family compiles; others
            are ignored.
        value_type: Optional :func:`cast_value` type applied to ``eq`` and
            ``in`` values.
    """

    name: str
    allowed_conditions: frozenset[ConditionName]
    value_type: str | None = None

    def compile_condition(
        self, field: FieldRef, name: ConditionName | str, condition: Any
    ) -> Comparison | None:
        """Compile one condition to a leaf, or ``None`` if it does not apply."""
        try:
            cond_name = ConditionName(name)
        except ValueError:
            return None
        if cond_name not in self.allowed_conditions or condition is None:
            return None
        return _CONDITION_COMPILERS[cond_name](field, condition, self.value_type)


class FamilyRegistry:
    """Registry of :class:`ScalarFamily` descriptors keyed by name."""

    def __init__(self) -> None:
        self._families: dict[str, ScalarFamily] = {}

    def register(self, family: ScalarFamily) -> None:
        self._families[family.name] = family

    def register_all(self, *families: ScalarFamily) -> None:
        for family in families:
            self.register(family)

    def unregister(self, name: str) -> None:
        self._families.pop(name, None)

    def get(self, name: str) -> ScalarFamily | None:
        return self._families.get(name)

    def has(self, name: str) -> bool:
        return name in self._families

    @property
    def names(self) -> set[str]:
        return set(self._families.keys())

    def require(self, name: str) -> ScalarFamily:
        """
        Look up a family.

        Raises:
            UnknownFamilyError: If the family is not registered.
        """
        family = self.get(name)
        if family is None:
            raise UnknownFamilyError(name, sorted(self._families))
        return family


ID = ScalarFamily(
    "id",
    frozenset({ConditionName.EQ, ConditionName.IN, ConditionName.EXISTS}),
)
DATE = ScalarFamily(
    "date",
    frozenset({ConditionName.EQ, ConditionName.IN, ConditionName.EXISTS}),
    value_type="datetime",
)
STRING = ScalarFamily(
    "string",
    frozenset({ConditionName.EQ, ConditionName.IN, ConditionName.CONTAINS}),
    value_type="string",
)
NUMBER = ScalarFamily(
    "number",
    frozenset({ConditionName.EQ, ConditionName.IN}),
)
BIGINT = ScalarFamily(
    "bigint",
    frozenset({ConditionName.EQ, ConditionName.IN}),
    value_type="biginteger",
)


def build_default_families() -> FamilyRegistry:
    """Create a registry with the five built-in scalar families."""
    registry = FamilyRegistry()
    registry.register_all(ID, DATE, STRING, NUMBER, BIGINT)
    return registry


DEFAULT_FAMILIES: FamilyRegistry = build_default_families()
