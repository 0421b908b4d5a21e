"""
Compile query descriptors into predicates.

``compile_field_filter`` is the one generic condition compiler shared by
all scalar families; the family descriptor decides which conditions apply
and how values are cast. ``compile_search`` turns a free-text value into
an OR of case-insensitive substring matches.

Both return ``None`` when the input contributes nothing, so the caller can
skip the backend entirely.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from .families import CANONICAL_ORDER
from .predicates import Comparison, FieldRef, Predicate, and_, ilike, or_
from .types import FieldFilter, Operator, SearchField

if TYPE_CHECKING:
    from .families import ScalarFamily
    from .predicates import FieldLike


def coerce_filter(query: FieldFilter | Mapping[str, Any] | None) -> FieldFilter | None:
    """Accept a ``FieldFilter`` or its plain-dict form."""
    if query is None or isinstance(query, FieldFilter):
        return query
    return FieldFilter.model_validate(query)


def active_conditions(
    family: ScalarFamily,
    field: FieldRef,
    query: FieldFilter | None,
) -> list[Comparison]:
    """Compile the non-empty conditions the family allows, in canonical order."""
    if query is None or query.conditions is None:
        return []
    present = dict(query.conditions.items())
    leaves: list[Comparison] = []
    for name in CANONICAL_ORDER:
        leaf = family.compile_condition(field, name, present.get(name.value))
        if leaf is not None:
            leaves.append(leaf)
    return leaves


def compile_field_filter(
    family: ScalarFamily,
    field: FieldLike,
    query: FieldFilter | Mapping[str, Any] | None,
) -> Predicate | None:
    """
    Compile one field filter.

    - no active condition   → ``None``
    - one active condition  → the leaf itself (operator ignored)
    - several               → field-scoped combinator, AND unless
      ``operator`` says OR
    """
    ref = FieldRef.parse_or_none(field)
    if ref is None:
        return None
    query = coerce_filter(query)
    leaves = active_conditions(family, ref, query)
    if not leaves:
        return None
    if len(leaves) == 1:
        return leaves[0]
    if query is not None and query.operator == Operator.OR:
        return or_(*leaves, field=ref)
    return and_(*leaves, field=ref)


def compile_search(
    fields: Sequence[SearchField | Mapping[str, Any] | str] | None,
    value: str | None,
) -> Predicate | None:
    """
    OR of ``ilike`` leaves, one per search path, or ``None``.

    Malformed paths (empty, or with an empty segment) are skipped.
    """
    if not value or not fields:
        return None
    paths = [ref for ref in map(_search_path, fields) if ref is not None]
    if not paths:
        return None
    return or_(*(ilike(ref, value) for ref in paths))


def _search_path(field: SearchField | Mapping[str, Any] | str) -> FieldRef | None:
    if isinstance(field, SearchField):
        return FieldRef.parse_or_none(field.path)
    if isinstance(field, Mapping):
        return FieldRef.parse_or_none(SearchField.model_validate(field).path)
    return FieldRef.parse_or_none(field)
