"""QueryParameters — named bindings referenced from the rendered query text."""

from __future__ import annotations

from typing import Any, Union

ConditionValue = Union[str, int, float, bool, None]
ParameterValue = Union[ConditionValue, list[ConditionValue]]

PARAMETER_PREFIX = "p"


class QueryParameters(dict[str, Any]):
    """
    Insertion-ordered mapping of parameter name to bound value.

    Generated names follow the running size of the table (``p0``, ``p1``,
    ...), so they are unique for the lifetime of one query as long as the
    caller does not register the same name by hand.
    """

    def add(self, value: ParameterValue) -> str:
        """Bind *value* under a freshly generated name and return the name."""
        name = f"{PARAMETER_PREFIX}{len(self)}"
        self[name] = value
        return name

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a plain JSON-compatible dictionary."""
        return {
            key: list(value) if isinstance(value, list | tuple) else value
            for key, value in self.items()
        }
