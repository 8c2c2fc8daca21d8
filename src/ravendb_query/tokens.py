"""Query tokens accumulated by :class:`~ravendb_query.builder.QueryBuilder`."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from .exceptions import QueryBuilderError
from .operators import QueryOperator, SearchOperator, WhereOperator
from .rql import format_number, format_parameter

_COMPARISON_SYMBOLS: dict[WhereOperator, str] = {
    WhereOperator.EQUALS: "=",
    WhereOperator.NOT_EQUALS: "!=",
    WhereOperator.GREATER_THAN: ">",
    WhereOperator.GREATER_THAN_OR_EQUAL: ">=",
    WhereOperator.LESS_THAN: "<",
    WhereOperator.LESS_THAN_OR_EQUAL: "<=",
}

_FUNCTION_NAMES: dict[WhereOperator, str] = {
    WhereOperator.STARTS_WITH: "startsWith",
    WhereOperator.ENDS_WITH: "endsWith",
}


class QueryToken(ABC):
    """A piece of the where clause; ``render()`` returns its RQL text."""

    @abstractmethod
    def render(self) -> str: ...


@dataclass
class WhereToken(QueryToken):
    """
    A single predicate.

    ``field`` is already rendered (quoted or ``id()``); ``parameter_names``
    reference bindings in the query's parameter table.  ``boost``,
    ``fuzzy`` and ``proximity`` are set after the fact by the builder's
    modifier methods.
    """

    operator: WhereOperator
    field: str = ""
    parameter_names: tuple[str, ...] = ()
    exact: bool = False
    search_operator: SearchOperator = SearchOperator.OR
    expression: str | None = None
    boost: float | None = None
    fuzzy: float | None = None
    proximity: int | None = None

    def _params(self) -> list[str]:
        return [format_parameter(name) for name in self.parameter_names]

    def _render_predicate(self) -> str:
        op = self.operator
        if op in _COMPARISON_SYMBOLS:
            (param,) = self._params()
            return f"{self.field} {_COMPARISON_SYMBOLS[op]} {param}"
        if op == WhereOperator.IN:
            (param,) = self._params()
            return f"{self.field} in ({param})"
        if op == WhereOperator.ALL_IN:
            (param,) = self._params()
            return f"{self.field} all in ({param})"
        if op in _FUNCTION_NAMES:
            (param,) = self._params()
            return f"{_FUNCTION_NAMES[op]}({self.field}, {param})"
        if op == WhereOperator.BETWEEN:
            start, end = self._params()
            return f"{self.field} between {start} and {end}"
        if op == WhereOperator.EXISTS:
            return f"exists({self.field})"
        if op == WhereOperator.TRUE:
            return "true"
        if op == WhereOperator.SEARCH:
            (param,) = self._params()
            if self.search_operator == SearchOperator.AND:
                return f"search({self.field}, {param}, and)"
            return f"search({self.field}, {param})"
        if op in (WhereOperator.SPATIAL, WhereOperator.SPATIAL_WITHIN_RADIUS):
            if not self.expression:
                raise QueryBuilderError("Spatial token has no expression")
            return self.expression
        raise QueryBuilderError(f"Unsupported where operator: {op}")

    def render(self) -> str:
        text = self._render_predicate()
        if self.exact:
            text = f"exact({text})"
        if self.fuzzy is not None:
            text = f"fuzzy({text}, {format_number(self.fuzzy)})"
        if self.proximity is not None:
            text = f"proximity({text}, {format_number(self.proximity)})"
        if self.boost is not None:
            text = f"boost({text}, {format_number(self.boost)})"
        return text


@dataclass(frozen=True)
class QueryOperatorToken(QueryToken):
    operator: QueryOperator

    def render(self) -> str:
        return self.operator.value


class OpenSubclauseToken(QueryToken):
    def render(self) -> str:
        return "("


class CloseSubclauseToken(QueryToken):
    def render(self) -> str:
        return ")"


class NegateToken(QueryToken):
    def render(self) -> str:
        return "not"


class IntersectMarkerToken:
    """
    Boundary between ``intersect(...)`` sub-queries.

    Not rendered itself: the builder splits the where clause on it.
    """


def join_tokens(tokens: list[QueryToken]) -> str:
    """Join rendered tokens with spaces, hugging parentheses."""
    out: list[str] = []
    for token in tokens:
        text = token.render()
        if out and not out[-1].endswith("(") and text != ")":
            out.append(" ")
        out.append(text)
    return "".join(out)


@dataclass
class OrderByToken:
    """One entry of the ``order by`` list."""

    expression: str
    descending: bool = False
    ordering_suffix: str | None = None

    def render(self) -> str:
        text = self.expression
        if self.ordering_suffix:
            text += f" as {self.ordering_suffix}"
        if self.descending:
            text += " desc"
        return text
