"""Structured request types for filter calls."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .exceptions import InvalidArgumentError


@dataclass(frozen=True)
class WhereParams:
    """
    Canonical form of a filter call: field, value and the ``exact`` flag.

    ``exact`` disables analyzer/tokenisation for the comparison.
    """

    field_name: str
    value: Any = None
    exact: bool = False

    @classmethod
    def from_(cls, params: WhereParams | Mapping[str, Any]) -> WhereParams:
        """Build from a ``WhereParams`` or a mapping with the same keys."""
        if isinstance(params, WhereParams):
            return params
        if isinstance(params, Mapping):
            if not params.get("field_name"):
                raise InvalidArgumentError("Where params require a 'field_name'")
            return cls(
                field_name=params["field_name"],
                value=params.get("value"),
                exact=bool(params.get("exact", False)),
            )
        raise InvalidArgumentError(
            f"Expected field name, WhereParams or mapping, got {type(params).__name__}"
        )

    @classmethod
    def normalize(
        cls,
        params_or_field_name: WhereParams | Mapping[str, Any] | str,
        value: Any = None,
        exact: bool = False,
    ) -> WhereParams:
        """Fold the positional ``(field, value, exact)`` form into ``WhereParams``."""
        if isinstance(params_or_field_name, str):
            return cls(field_name=params_or_field_name, value=value, exact=exact)
        return cls.from_(params_or_field_name)

    def parametrize(self, parameter_name: str) -> ParametrizedWhereParams:
        """Swap the value for the name it was bound under."""
        return ParametrizedWhereParams(
            field_name=self.field_name,
            parameter_name=parameter_name,
            exact=self.exact,
        )


@dataclass(frozen=True)
class ParametrizedWhereParams:
    """What the builder receives: a field and a parameter name, never a value."""

    field_name: str
    parameter_name: str
    exact: bool = False
