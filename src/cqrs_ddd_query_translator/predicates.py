"""
Backend-neutral predicate tree.

The translator never builds backend objects directly. It produces a small
tagged tree made of :class:`Comparison` leaves and :class:`Combinator`
nodes through a closed set of constructors::

    eq("status", "active")
    in_("kind", ["a", "b"])
    exists("deleted_at", False)
    ilike("name", "jo")
    and_(p1, p2)
    or_(p1, p2, field="name")

Backend adapters lower the tree into their native representation.
Field paths are structured (:class:`FieldRef`), so nesting never depends
on string assignment into a dict.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union


class PredicateOperator(str, Enum):
    """Operators a predicate tree may contain."""

    EQ = "$eq"
    IN = "$in"
    EXISTS = "$exists"
    ILIKE = "$ilike"

    AND = "$and"
    OR = "$or"


@dataclass(frozen=True)
class FieldRef:
    """A possibly nested field, as a sequence of path segments."""

    parts: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.parts or any(not part for part in self.parts):
            raise ValueError(f"Invalid field path: {self.parts!r}")

    @classmethod
    def parse(cls, path: FieldLike) -> FieldRef:
        """Build a ``FieldRef`` from a dotted string or a segment sequence."""
        if isinstance(path, FieldRef):
            return path
        if isinstance(path, str):
            return cls(tuple(path.split(".")))
        return cls(tuple(path))

    @classmethod
    def parse_or_none(cls, path: FieldLike | None) -> FieldRef | None:
        """Like :meth:`parse`, but ``None`` for a missing or malformed path."""
        if path is None:
            return None
        try:
            return cls.parse(path)
        except ValueError:
            return None

    @property
    def path(self) -> str:
        return ".".join(self.parts)

    @property
    def is_nested(self) -> bool:
        return len(self.parts) > 1

    def __str__(self) -> str:
        return self.path


FieldLike = Union[str, Sequence[str], FieldRef]


@dataclass(frozen=True)
class Comparison:
    """Leaf predicate: ``field <op> value``."""

    field: FieldRef
    op: PredicateOperator
    value: Any

    def to_dict(self) -> dict[str, Any]:
        return _nest(self.field, {self.op.value: self.value})


@dataclass(frozen=True)
class Combinator:
    """
    Logical group of child predicates.

    When ``field`` is set the group is scoped to that one field path and
    renders as ``{"name": {"$or": [{"$eq": ...}, {"$ilike": ...}]}}``.
    """

    op: PredicateOperator
    children: tuple[Predicate, ...]
    field: FieldRef | None = None

    def to_dict(self) -> dict[str, Any]:
        if self.field is None:
            return {self.op.value: [child.to_dict() for child in self.children]}
        return _nest(
            self.field,
            {self.op.value: [self._scoped_body(child) for child in self.children]},
        )

    def _scoped_body(self, child: Predicate) -> dict[str, Any]:
        if isinstance(child, Comparison) and child.field == self.field:
            return {child.op.value: child.value}
        return child.to_dict()


Predicate = Union[Comparison, Combinator]


def _nest(field: FieldRef, body: dict[str, Any]) -> dict[str, Any]:
    """Wrap *body* in one nested mapping per path segment."""
    result: dict[str, Any] = body
    for part in reversed(field.parts):
        result = {part: result}
    return result


# ---------------------------------------------------------------------------
# Constructors
# ---------------------------------------------------------------------------


def eq(field: FieldLike, value: Any) -> Comparison:
    return Comparison(FieldRef.parse(field), PredicateOperator.EQ, value)


def in_(field: FieldLike, values: Sequence[Any]) -> Comparison:
    return Comparison(FieldRef.parse(field), PredicateOperator.IN, list(values))


def exists(field: FieldLike, value: bool = True) -> Comparison:
    return Comparison(FieldRef.parse(field), PredicateOperator.EXISTS, bool(value))


def ilike(field: FieldLike, value: str) -> Comparison:
    """Case-insensitive substring match."""
    return Comparison(FieldRef.parse(field), PredicateOperator.ILIKE, value)


def and_(*children: Predicate, field: FieldLike | None = None) -> Combinator:
    return _combine(PredicateOperator.AND, children, field)


def or_(*children: Predicate, field: FieldLike | None = None) -> Combinator:
    return _combine(PredicateOperator.OR, children, field)


def _combine(
    op: PredicateOperator,
    children: tuple[Predicate, ...],
    field: FieldLike | None,
) -> Combinator:
    if not children:
        raise ValueError(f"Cannot create an empty {op.value} group")
    return Combinator(
        op,
        tuple(children),
        FieldRef.parse(field) if field is not None else None,
    )
