"""
Lexical helpers for rendering RQL.

Everything caller-supplied that reaches the query text goes through one of
these: identifiers are quoted and escaped, numbers are coerced, and values
are only ever referenced as ``$name`` parameters.
"""

from __future__ import annotations

import math
import re

from .exceptions import QueryBuilderError

_IDENTIFIER_REGEX = re.compile(
    r"^[A-Za-z_@][A-Za-z0-9_@\-]*(\[\])?"
    r"(\.[A-Za-z_@][A-Za-z0-9_@\-]*(\[\])?)*$"
)
_PARAMETER_NAME_REGEX = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Words that must be quoted when used as a field name
_RESERVED = frozenset(
    {
        "as", "select", "where", "load", "group", "order", "include",
        "update", "from", "index", "and", "or", "not", "between", "in",
        "all", "true", "false", "null", "by", "asc", "desc", "distinct",
    }
)


def quote_string(value: str) -> str:
    """Single-quote a string, escaping backslashes and quotes."""
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def format_field(field_name: str) -> str:
    """Render a field name, quoting it unless it is a plain identifier."""
    if not field_name:
        raise QueryBuilderError("Field name cannot be empty")
    if _IDENTIFIER_REGEX.match(field_name) and field_name.lower() not in _RESERVED:
        return field_name
    return quote_string(field_name)


def format_parameter(parameter_name: str) -> str:
    """Render a parameter reference (``$p0``)."""
    if not _PARAMETER_NAME_REGEX.match(parameter_name or ""):
        raise QueryBuilderError(f"Invalid parameter name: {parameter_name!r}")
    return f"${parameter_name}"


def format_number(value: float | int) -> str:
    """Render a structural number (boost, distance error, ...)."""
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise QueryBuilderError(f"Expected a number, got {type(value).__name__}")
    if isinstance(value, float) and not math.isfinite(value):
        raise QueryBuilderError(f"Expected a finite number, got {value}")
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return repr(value)
