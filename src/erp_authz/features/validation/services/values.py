"""Helpers for reading and comparing entity values."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Mapping, Optional


MISSING = object()


def get_value(entity: Mapping[str, Any], path: str, default: Any = None) -> Any:
    """Read a dotted path from a nested mapping."""
    current: Any = entity
    for part in path.split("."):
        if isinstance(current, Mapping) and part in current:
            current = current[part]
        else:
            return default
    return current


def is_blank(value: Any) -> bool:
    """Absent, None, whitespace-only string or empty collection."""
    if value is None or value is MISSING:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, frozenset, dict)):
        return len(value) == 0
    return False


def _parse_temporal(value: str, like: Optional[Any]) -> Any:
    if isinstance(like, datetime):
        return datetime.fromisoformat(value)
    if isinstance(like, date):
        try:
            return date.fromisoformat(value)
        except ValueError:
            return datetime.fromisoformat(value).date()
    if "T" in value or " " in value:
        return datetime.fromisoformat(value)
    return date.fromisoformat(value)


def to_comparable(value: Any, like: Optional[Any] = None) -> Any:
    """Coerce ``value`` so it can be compared with ``like``.

    Numbers stay numbers, ISO strings become dates or datetimes, and dates
    are aligned with the reference type.

    Raises:
        TypeError: When the value cannot be compared
    """
    if isinstance(value, bool) or isinstance(like, bool):
        raise TypeError("Booleans are not comparable")

    if isinstance(like, (int, float, Decimal)):
        if isinstance(value, (int, float, Decimal)):
            return value
        if isinstance(value, str):
            try:
                return float(value)
            except ValueError:
                raise TypeError(f"Not a number: {value!r}") from None
        raise TypeError(f"Not a number: {value!r}")

    if isinstance(like, datetime):
        if isinstance(value, datetime):
            return value
        if isinstance(value, date):
            return datetime(value.year, value.month, value.day, tzinfo=like.tzinfo)
    elif isinstance(like, date):
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value

    if like is None and isinstance(value, (int, float, Decimal, date)):
        return value

    if isinstance(value, str):
        if like is None:
            try:
                return float(value)
            except ValueError:
                pass
        try:
            return _parse_temporal(value, like)
        except ValueError:
            raise TypeError(f"Not a date: {value!r}") from None

    raise TypeError(f"Cannot compare {value!r}")
