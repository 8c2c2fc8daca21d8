"""
Value transforms applied to every literal before it is bound as a parameter.

These are pure functions: they validate and normalise a candidate filter
value and never touch query state.
"""

from __future__ import annotations

import datetime
from collections.abc import Iterable
from typing import Any

from .exceptions import InvalidArgumentError
from .parameters import ConditionValue

INVALID_VALUE_MESSAGE = (
    "Invalid value passed to query condition. "
    "Only boolean / number / string / date and null values are supported"
)

# Sentinels bound in place of a missing range endpoint
OPEN_LOWER_BOUND = "NULL"
OPEN_UPPER_BOUND = "*"


def stringify_date(value: datetime.date) -> str:
    """
    Render a date/datetime in the server's canonical form.

    ``YYYY-MM-DDTHH:MM:SS.fffffff`` (seven fractional digits); UTC-aware
    datetimes get a ``Z`` suffix, other aware values are converted to UTC.
    """
    if not isinstance(value, datetime.datetime):
        value = datetime.datetime(value.year, value.month, value.day)

    suffix = ""
    if value.tzinfo is not None and value.utcoffset() is not None:
        value = value.astimezone(datetime.timezone.utc).replace(tzinfo=None)
        suffix = "Z"

    return value.strftime("%Y-%m-%dT%H:%M:%S.%f") + "0" + suffix


def transform_value(value: Any) -> ConditionValue:
    """Validate and normalise a single condition value.

    Raises:
        InvalidArgumentError: For any type other than bool, int, float,
            str, date/datetime or ``None``.
    """
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, datetime.date):
        return stringify_date(value)
    if isinstance(value, bool | int | float):
        return value
    raise InvalidArgumentError(INVALID_VALUE_MESSAGE)


def unpack_values(values: Iterable[Any]) -> list[Any]:
    """Flatten arbitrarily nested lists/tuples into a flat list."""
    result: list[Any] = []
    for value in values:
        if isinstance(value, list | tuple):
            result.extend(unpack_values(value))
        else:
            result.append(value)
    return result


def transform_values(values: Iterable[Any]) -> list[ConditionValue]:
    """Flatten *values* and transform each element individually.

    Raises:
        InvalidArgumentError: If *values* is a bare string or not iterable,
            or for any element ``transform_value`` rejects.
    """
    if isinstance(values, str | bytes) or not isinstance(values, Iterable):
        raise InvalidArgumentError(
            f"Expected a list of values, got {type(values).__name__}"
        )
    return [transform_value(value) for value in unpack_values(values)]


def transform_range_value(value: Any, sentinel: str) -> ConditionValue:
    """Transform a range endpoint, substituting *sentinel* for ``None``."""
    if value is None:
        return sentinel
    return transform_value(value)
