"""
Value casting for filter conditions.

Filter families name a value type (``"datetime"``, ``"biginteger"``...) and
their ``eq`` / ``in`` values are cast to it before they reach a backend.
Values that cannot be cast are returned unchanged so that the backend
reports the mismatch itself.
"""

from __future__ import annotations

import datetime
import uuid
from collections.abc import Callable
from typing import Any


def _to_int(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError("bool is not an integer value")
    return int(value)


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.lower() in ("true", "1", "yes")
    return bool(value)


def _to_date(value: Any) -> datetime.date:
    if isinstance(value, datetime.date):
        return value
    return datetime.date.fromisoformat(str(value))


def _to_datetime(value: Any) -> datetime.datetime:
    if isinstance(value, datetime.datetime):
        return value
    if isinstance(value, datetime.date):
        return datetime.datetime.combine(value, datetime.time())
    parsed = datetime.datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    # Aware values are normalised to UTC; naive ones are left as given.
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(datetime.timezone.utc)
    return parsed


def _to_uuid(value: Any) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    return uuid.UUID(str(value))


_CASTERS: dict[str, Callable[[Any], Any]] = {
    "string": str,
    "text": str,
    "str": str,
    "integer": _to_int,
    "int": _to_int,
    "biginteger": _to_int,
    "float": float,
    "decimal": float,
    "numeric": float,
    "boolean": _to_bool,
    "bool": _to_bool,
    "date": _to_date,
    "datetime": _to_datetime,
    "uuid": _to_uuid,
}


def cast_value(value: Any, value_type: str | None = None) -> Any:
    """
    Cast *value* to the Python type named by *value_type*.

    Lists are cast item by item. ``None``, a missing *value_type* and an
    unknown *value_type* all pass through unchanged, as does any value the
    caster rejects.
    """
    if isinstance(value, list):
        return [cast_value(item, value_type) for item in value]
    if value is None or value_type is None:
        return value

    caster = _CASTERS.get(value_type.lower())
    if caster is None:
        return value
    try:
        return caster(value)
    except (ValueError, TypeError, OverflowError):
        return value
