"""
Fluent RQL builder.

Accumulates clause tokens and renders them into one query string on
demand.  The builder never sees literal values: every method that takes a
value takes the *name* it was bound under in the query's parameter table.

Example::

    builder = QueryBuilder(collection_name="Products")
    builder.where_equals("Name", "p0").where_greater_than("Price", "p1")
    str(builder)
    # → from Products where Name = $p0 and Price > $p1
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .exceptions import QueryBuilderError
from .operators import (
    OrderingType,
    QueryOperator,
    SearchOperator,
    SpatialRelation,
    SpatialUnit,
    WhereOperator,
)
from .rql import format_field, format_parameter, quote_string
from .spatial import (
    SpatialCriteria,
    SpatialParameterNameGenerator,
    render_circle,
    render_point,
    render_relation,
    render_wkt,
)
from .tokens import (
    CloseSubclauseToken,
    IntersectMarkerToken,
    NegateToken,
    OpenSubclauseToken,
    OrderByToken,
    QueryOperatorToken,
    QueryToken,
    WhereToken,
    join_tokens,
)
from .where_params import ParametrizedWhereParams

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)

ALL_DOCS_COLLECTION = "@all_docs"


class QueryBuilder:
    """
    Append-only token sequence renderable to RQL via ``str()``.

    Where clauses are combined with the default operator (AND unless
    changed with ``using_default_operator``) unless ``and_also()`` /
    ``or_else()`` is called explicitly.  ``negate_next()`` toggles negation
    of the next clause or subclause.
    """

    def __init__(
        self,
        index_name: str | None = None,
        collection_name: str | None = None,
        id_property_name: str = "id",
    ) -> None:
        self._index_name: str | None = None
        self._collection_name: str | None = None
        self._id_property_name = id_property_name
        self._raw_query: str | None = None

        self._where_tokens: list[QueryToken | IntersectMarkerToken] = []
        self._order_by_tokens: list[OrderByToken] = []
        self._group_by_fields: list[str] = []
        self._group_projections: list[str] = []
        self._select_fields: list[tuple[str, str | None]] = []
        self._includes: list[str] = []

        self._default_operator = QueryOperator.AND
        self._negate = False
        self._subclause_depth = 0
        self._distinct = False
        self._is_dynamic_map_reduce = False

        self.from_(index_name, collection_name)

    # -- state ---------------------------------------------------------------

    @property
    def is_dynamic_map_reduce(self) -> bool:
        """True once any ``group_by`` has been applied."""
        return self._is_dynamic_map_reduce

    @property
    def index_name(self) -> str | None:
        return self._index_name

    @property
    def collection_name(self) -> str | None:
        return self._collection_name

    def get_projection_fields(self) -> list[str]:
        return [field for field, _ in self._select_fields]

    # -- source / raw --------------------------------------------------------

    def from_(
        self,
        index_name: str | None = None,
        collection_name: str | None = None,
    ) -> QueryBuilder:
        """Select the index (takes precedence) or collection to query."""
        if index_name:
            self._index_name = index_name
            self._collection_name = None
        else:
            self._index_name = None
            self._collection_name = collection_name or ALL_DOCS_COLLECTION
        return self

    def raw_query(self, query: str) -> QueryBuilder:
        """Use *query* verbatim; excludes every clause method."""
        if self._has_clauses():
            raise QueryBuilderError(
                "raw_query() cannot be combined with clauses already added to the query"
            )
        self._raw_query = query
        return self

    # -- projection ----------------------------------------------------------

    def select_fields(
        self,
        fields: Sequence[str],
        projections: Sequence[str] | None = None,
    ) -> QueryBuilder:
        """Project *fields*, optionally renamed to the matching *projections*."""
        self._assert_no_raw_query()
        if projections is not None and len(projections) != len(fields):
            raise QueryBuilderError(
                "projections must have the same length as fields "
                f"({len(projections)} != {len(fields)})"
            )
        aliases = list(projections) if projections is not None else [None] * len(fields)
        self._select_fields = [
            (field, alias if alias != field else None)
            for field, alias in zip(fields, aliases)
        ]
        return self

    def distinct(self) -> QueryBuilder:
        self._assert_no_raw_query()
        self._distinct = True
        return self

    def include(self, path: str) -> QueryBuilder:
        """Side-load the documents referenced by *path*."""
        self._assert_no_raw_query()
        if path not in self._includes:
            self._includes.append(path)
        return self

    # -- ordering ------------------------------------------------------------

    def order_by(
        self, field: str, ordering: OrderingType | str | None = None
    ) -> QueryBuilder:
        return self._add_order(self._field(field), False, ordering)

    def order_by_descending(
        self, field: str, ordering: OrderingType | str | None = None
    ) -> QueryBuilder:
        return self._add_order(self._field(field), True, ordering)

    def order_by_score(self) -> QueryBuilder:
        return self._add_order("score()", False)

    def order_by_score_descending(self) -> QueryBuilder:
        return self._add_order("score()", True)

    def random_ordering(self, seed_parameter_name: str | None = None) -> QueryBuilder:
        if seed_parameter_name is None:
            return self._add_order("random()", False)
        return self._add_order(f"random({format_parameter(seed_parameter_name)})", False)

    def custom_sort_using(
        self, type_name_parameter_name: str, descending: bool = False
    ) -> QueryBuilder:
        return self._add_order(
            f"custom({format_parameter(type_name_parameter_name)})", descending
        )

    def order_by_distance(
        self,
        field: str,
        latitude_or_shape_wkt_parameter_name: str,
        longitude_parameter_name: str | None = None,
    ) -> QueryBuilder:
        return self._add_order(
            self._distance_expression(
                field, latitude_or_shape_wkt_parameter_name, longitude_parameter_name
            ),
            False,
        )

    def order_by_distance_descending(
        self,
        field: str,
        latitude_or_shape_wkt_parameter_name: str,
        longitude_parameter_name: str | None = None,
    ) -> QueryBuilder:
        return self._add_order(
            self._distance_expression(
                field, latitude_or_shape_wkt_parameter_name, longitude_parameter_name
            ),
            True,
        )

    # -- where: comparisons ----------------------------------------------------

    def where_equals(
        self,
        params_or_field: ParametrizedWhereParams | str,
        parameter_name: str | None = None,
        exact: bool = False,
    ) -> QueryBuilder:
        params = _parametrized(params_or_field, parameter_name, exact)
        return self._where(
            WhereOperator.EQUALS, params.field_name, (params.parameter_name,), params.exact
        )

    def where_not_equals(
        self,
        params_or_field: ParametrizedWhereParams | str,
        parameter_name: str | None = None,
        exact: bool = False,
    ) -> QueryBuilder:
        params = _parametrized(params_or_field, parameter_name, exact)
        return self._where(
            WhereOperator.NOT_EQUALS, params.field_name, (params.parameter_name,), params.exact
        )

    def where_in(self, field: str, parameter_name: str, exact: bool = False) -> QueryBuilder:
        return self._where(WhereOperator.IN, field, (parameter_name,), exact)

    def where_all_in(self, field: str, parameter_name: str) -> QueryBuilder:
        return self._where(WhereOperator.ALL_IN, field, (parameter_name,))

    def where_starts_with(self, field: str, parameter_name: str) -> QueryBuilder:
        return self._where(WhereOperator.STARTS_WITH, field, (parameter_name,))

    def where_ends_with(self, field: str, parameter_name: str) -> QueryBuilder:
        return self._where(WhereOperator.ENDS_WITH, field, (parameter_name,))

    def where_between(
        self,
        field: str,
        from_parameter_name: str,
        to_parameter_name: str,
        exact: bool = False,
    ) -> QueryBuilder:
        return self._where(
            WhereOperator.BETWEEN,
            field,
            (from_parameter_name, to_parameter_name),
            exact,
        )

    def where_greater_than(
        self, field: str, parameter_name: str, exact: bool = False
    ) -> QueryBuilder:
        return self._where(WhereOperator.GREATER_THAN, field, (parameter_name,), exact)

    def where_greater_than_or_equal(
        self, field: str, parameter_name: str, exact: bool = False
    ) -> QueryBuilder:
        return self._where(
            WhereOperator.GREATER_THAN_OR_EQUAL, field, (parameter_name,), exact
        )

    def where_less_than(
        self, field: str, parameter_name: str, exact: bool = False
    ) -> QueryBuilder:
        return self._where(WhereOperator.LESS_THAN, field, (parameter_name,), exact)

    def where_less_than_or_equal(
        self, field: str, parameter_name: str, exact: bool = False
    ) -> QueryBuilder:
        return self._where(
            WhereOperator.LESS_THAN_OR_EQUAL, field, (parameter_name,), exact
        )

    def where_exists(self, field: str) -> QueryBuilder:
        return self._where(WhereOperator.EXISTS, field)

    def where_true(self) -> QueryBuilder:
        self._assert_no_raw_query()
        self._append_where(WhereToken(WhereOperator.TRUE))
        return self

    def search(
        self,
        field: str,
        search_terms_parameter_name: str,
        operator: SearchOperator | str = SearchOperator.OR,
    ) -> QueryBuilder:
        self._assert_no_raw_query()
        self._append_where(
            WhereToken(
                WhereOperator.SEARCH,
                field=self._field(field),
                parameter_names=(search_terms_parameter_name,),
                search_operator=SearchOperator(operator),
            )
        )
        return self

    # -- where: spatial --------------------------------------------------------

    def within_radius_of(
        self,
        field: str,
        radius_parameter_name: str,
        latitude_parameter_name: str,
        longitude_parameter_name: str,
        radius_units: SpatialUnit | str | None = None,
        dist_error_percent: float | None = None,
    ) -> QueryBuilder:
        self._assert_no_raw_query()
        rendered_field = self._field(field)
        shape = render_circle(
            radius_parameter_name,
            latitude_parameter_name,
            longitude_parameter_name,
            radius_units,
        )
        self._append_where(
            WhereToken(
                WhereOperator.SPATIAL_WITHIN_RADIUS,
                field=rendered_field,
                parameter_names=(
                    radius_parameter_name,
                    latitude_parameter_name,
                    longitude_parameter_name,
                ),
                expression=render_relation(
                    SpatialRelation.WITHIN, rendered_field, shape, dist_error_percent
                ),
            )
        )
        return self

    def spatial(
        self,
        field: str,
        shape_wkt_parameter_name_or_criteria: str | SpatialCriteria,
        relation_or_generator: SpatialRelation | str | SpatialParameterNameGenerator,
        dist_error_percent: float | None = None,
    ) -> QueryBuilder:
        """
        Add a spatial predicate.

        Two forms:

        - ``spatial(field, shape_wkt_parameter_name, relation, dist_error_percent)``
        - ``spatial(field, criteria, parameter_name_generator)``; the criteria
          binds its own values through the generator.
        """
        self._assert_no_raw_query()
        rendered_field = self._field(field)
        if isinstance(shape_wkt_parameter_name_or_criteria, SpatialCriteria):
            if not callable(relation_or_generator):
                raise QueryBuilderError(
                    "spatial() with criteria requires a parameter name generator"
                )
            expression = shape_wkt_parameter_name_or_criteria.to_query_token(
                rendered_field, relation_or_generator
            )
            parameter_names: tuple[str, ...] = ()
        else:
            if callable(relation_or_generator) and not isinstance(
                relation_or_generator, str
            ):
                raise QueryBuilderError("spatial() with a WKT shape requires a relation")
            expression = render_relation(
                relation_or_generator,
                rendered_field,
                render_wkt(shape_wkt_parameter_name_or_criteria),
                dist_error_percent,
            )
            parameter_names = (shape_wkt_parameter_name_or_criteria,)
        self._append_where(
            WhereToken(
                WhereOperator.SPATIAL,
                field=rendered_field,
                parameter_names=parameter_names,
                expression=expression,
            )
        )
        return self

    # -- connectors / grouping -------------------------------------------------

    def using_default_operator(self, operator: QueryOperator | str) -> QueryBuilder:
        if isinstance(operator, str) and not isinstance(operator, QueryOperator):
            operator = operator.lower()
        self._default_operator = QueryOperator(operator)
        return self

    def and_also(self) -> QueryBuilder:
        return self._add_operator(QueryOperator.AND)

    def or_else(self) -> QueryBuilder:
        return self._add_operator(QueryOperator.OR)

    def negate_next(self) -> QueryBuilder:
        self._assert_no_raw_query()
        self._negate = not self._negate
        return self

    def open_subclause(self) -> QueryBuilder:
        self._assert_no_raw_query()
        self._prepare_for_clause()
        self._where_tokens.append(OpenSubclauseToken())
        self._subclause_depth += 1
        return self

    def close_subclause(self) -> QueryBuilder:
        self._assert_no_raw_query()
        if self._subclause_depth <= 0:
            raise QueryBuilderError("close_subclause() called without an open subclause")
        last = self._where_tokens[-1]
        if isinstance(last, OpenSubclauseToken):
            raise QueryBuilderError("Cannot close an empty subclause")
        if isinstance(last, QueryOperatorToken):
            raise QueryBuilderError(
                f"Subclause ends with a dangling '{last.operator.value}' operator"
            )
        self._where_tokens.append(CloseSubclauseToken())
        self._subclause_depth -= 1
        return self

    def intersect(self) -> QueryBuilder:
        """Close the current ``intersect()`` sub-query and start the next one."""
        self._assert_no_raw_query()
        if self._subclause_depth:
            raise QueryBuilderError("intersect() cannot be used inside a subclause")
        if not self._where_tokens or isinstance(
            self._where_tokens[-1], IntersectMarkerToken
        ):
            raise QueryBuilderError("intersect() requires a preceding clause")
        self._where_tokens.append(IntersectMarkerToken())
        return self

    # -- modifiers -------------------------------------------------------------

    def boost(self, boost: float) -> QueryBuilder:
        token = self._last_where_token("boost")
        if boost < 0:
            raise QueryBuilderError("Boost factor must be a non-negative number")
        token.boost = None if boost == 1 else boost
        return self

    def fuzzy(self, fuzzy: float) -> QueryBuilder:
        token = self._last_where_token("fuzzy")
        if token.operator != WhereOperator.EQUALS:
            raise QueryBuilderError("fuzzy() can only follow where_equals()")
        if not 0 <= fuzzy <= 1:
            raise QueryBuilderError("Fuzzy distance must be between 0.0 and 1.0")
        token.fuzzy = fuzzy
        return self

    def proximity(self, proximity: int) -> QueryBuilder:
        token = self._last_where_token("proximity")
        if token.operator != WhereOperator.SEARCH:
            raise QueryBuilderError("proximity() can only follow search()")
        if proximity < 1:
            raise QueryBuilderError("Proximity distance must be a positive number")
        token.proximity = proximity
        return self

    # -- map-reduce ------------------------------------------------------------

    def group_by(self, field: str, *fields: str) -> QueryBuilder:
        self._assert_no_raw_query()
        for name in (field, *fields):
            self._group_by_fields.append(self._field(name))
        self._is_dynamic_map_reduce = True
        return self

    def group_by_key(
        self, field: str | None = None, projected_name: str | None = None
    ) -> QueryBuilder:
        self._assert_no_raw_query()
        expression = "key()" if field is None else self._field(field)
        self._group_projections.append(_aliased(expression, projected_name))
        return self

    def group_by_sum(self, field: str, projected_name: str | None = None) -> QueryBuilder:
        self._assert_no_raw_query()
        self._group_projections.append(
            _aliased(f"sum({self._field(field)})", projected_name)
        )
        return self

    def group_by_count(self, projected_name: str | None = None) -> QueryBuilder:
        self._assert_no_raw_query()
        self._group_projections.append(_aliased("count()", projected_name))
        return self

    # -- rendering -------------------------------------------------------------

    def to_string(self) -> str:
        if self._raw_query is not None:
            return self._raw_query

        if self._subclause_depth:
            raise QueryBuilderError(
                f"Unbalanced subclauses: {self._subclause_depth} subclause(s) still open"
            )
        if self._negate:
            raise QueryBuilderError("negate_next() was not followed by a clause")

        parts = [self._render_from()]
        if self._group_by_fields:
            parts.append("group by " + ", ".join(self._group_by_fields))
        if self._where_tokens:
            parts.append("where " + self._render_where())
        if self._order_by_tokens:
            parts.append(
                "order by " + ", ".join(token.render() for token in self._order_by_tokens)
            )
        select = self._render_select()
        if select:
            parts.append(select)
        if self._includes:
            parts.append("include " + ", ".join(format_field(p) for p in self._includes))

        query = " ".join(parts)
        logger.debug("Rendered query: %s", query)
        return query

    def __str__(self) -> str:
        return self.to_string()

    def _render_from(self) -> str:
        if self._index_name:
            return f"from index {quote_string(self._index_name)}"
        return f"from {format_field(self._collection_name or ALL_DOCS_COLLECTION)}"

    def _render_where(self) -> str:
        last = self._where_tokens[-1]
        if isinstance(last, QueryOperatorToken):
            raise QueryBuilderError(
                f"Query ends with a dangling '{last.operator.value}' operator"
            )
        if isinstance(last, IntersectMarkerToken):
            raise QueryBuilderError("intersect() must be followed by a clause")

        groups: list[list[QueryToken]] = [[]]
        for token in self._where_tokens:
            if isinstance(token, IntersectMarkerToken):
                groups.append([])
            else:
                groups[-1].append(token)
        rendered = [join_tokens(group) for group in groups]
        if len(rendered) == 1:
            return rendered[0]
        return f"intersect({', '.join(rendered)})"

    def _render_select(self) -> str:
        items = [_aliased(format_field(field), alias) for field, alias in self._select_fields]
        items.extend(self._group_projections)
        if not items and not self._distinct:
            return ""
        prefix = "select distinct " if self._distinct else "select "
        return prefix + (", ".join(items) if items else "*")

    # -- internals -------------------------------------------------------------

    def _field(self, field_name: str) -> str:
        if field_name == self._id_property_name:
            return "id()"
        return format_field(field_name)

    def _has_clauses(self) -> bool:
        return bool(
            self._where_tokens
            or self._order_by_tokens
            or self._group_by_fields
            or self._group_projections
            or self._select_fields
            or self._includes
            or self._distinct
        )

    def _assert_no_raw_query(self) -> None:
        if self._raw_query is not None:
            raise QueryBuilderError(
                "Clause methods cannot be combined with raw_query()"
            )

    def _where(
        self,
        operator: WhereOperator,
        field: str,
        parameter_names: tuple[str, ...] = (),
        exact: bool = False,
    ) -> QueryBuilder:
        self._assert_no_raw_query()
        self._append_where(
            WhereToken(
                operator,
                field=self._field(field),
                parameter_names=parameter_names,
                exact=exact,
            )
        )
        return self

    def _append_where(self, token: WhereToken) -> None:
        self._prepare_for_clause()
        self._where_tokens.append(token)

    def _prepare_for_clause(self) -> None:
        """Insert the default operator and pending negation before a clause."""
        last = self._where_tokens[-1] if self._where_tokens else None
        if isinstance(last, WhereToken | CloseSubclauseToken):
            self._where_tokens.append(QueryOperatorToken(self._default_operator))
            last = self._where_tokens[-1]

        if not self._negate:
            return
        self._negate = False
        if last is None or isinstance(last, OpenSubclauseToken | IntersectMarkerToken):
            # RQL cannot start a group with "not"
            self._where_tokens.append(WhereToken(WhereOperator.TRUE))
            self._where_tokens.append(QueryOperatorToken(QueryOperator.AND))
        self._where_tokens.append(NegateToken())

    def _add_operator(self, operator: QueryOperator) -> QueryBuilder:
        self._assert_no_raw_query()
        last = self._where_tokens[-1] if self._where_tokens else None
        if not isinstance(last, WhereToken | CloseSubclauseToken):
            raise QueryBuilderError(
                f"Cannot add '{operator.value}': no preceding clause to connect"
            )
        self._where_tokens.append(QueryOperatorToken(operator))
        return self

    def _last_where_token(self, modifier: str) -> WhereToken:
        self._assert_no_raw_query()
        last = self._where_tokens[-1] if self._where_tokens else None
        if not isinstance(last, WhereToken):
            raise QueryBuilderError(f"{modifier}() must directly follow a where clause")
        return last

    def _add_order(
        self,
        expression: str,
        descending: bool,
        ordering: OrderingType | str | None = None,
    ) -> QueryBuilder:
        self._assert_no_raw_query()
        suffix = OrderingType(ordering).value if ordering is not None else None
        self._order_by_tokens.append(OrderByToken(expression, descending, suffix))
        return self

    def _distance_expression(
        self,
        field: str,
        latitude_or_shape_wkt_parameter_name: str,
        longitude_parameter_name: str | None,
    ) -> str:
        if longitude_parameter_name is None:
            shape = render_wkt(latitude_or_shape_wkt_parameter_name)
        else:
            shape = render_point(
                latitude_or_shape_wkt_parameter_name, longitude_parameter_name
            )
        return f"spatial.distance({self._field(field)}, {shape})"


def _parametrized(
    params_or_field: ParametrizedWhereParams | str,
    parameter_name: str | None,
    exact: bool,
) -> ParametrizedWhereParams:
    if isinstance(params_or_field, ParametrizedWhereParams):
        return params_or_field
    if parameter_name is None:
        raise QueryBuilderError(f"No parameter name given for field '{params_or_field}'")
    return ParametrizedWhereParams(params_or_field, parameter_name, exact)


def _aliased(expression: str, alias: str | None) -> str:
    if not alias:
        return expression
    return f"{expression} as {format_field(alias)}"
