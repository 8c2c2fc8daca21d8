"""
DocumentQuery — the fluent filter / sort / group surface.

Every literal accepted here is validated by the value transforms, bound in
the query's parameter table, and only its parameter name is handed to the
builder::

    products = await (
        session.query(collection="Products")
        .where_equals("Name", "test")
        .where_greater_than("Price", 10)
        .order_by("Price", OrderingType.DOUBLE)
        .all()
    )
    # from Products where Name = $p0 and Price > $p1 order by Price as double
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, TypeVar

from ..exceptions import InvalidArgumentError
from ..operators import (
    OrderingType,
    QueryOperator,
    SearchOperator,
    SpatialRelation,
    SpatialUnit,
)
from ..parameters import ParameterValue
from ..spatial import SpatialCriteria
from ..values import (
    OPEN_LOWER_BOUND,
    OPEN_UPPER_BOUND,
    transform_range_value,
    transform_value,
    transform_values,
)
from ..where_params import WhereParams
from .base import DocumentQueryBase

T = TypeVar("T")

WhereParamsLike = WhereParams | Mapping[str, Any] | str


class DocumentQuery(DocumentQueryBase[T]):
    """Typed query; every method returns the query itself for chaining."""

    @property
    def not_(self) -> DocumentQuery[T]:
        """Negate the next clause (``query.not_.where_equals(...)``)."""
        return self.negate_next()

    @property
    def is_dynamic_map_reduce(self) -> bool:
        return self._builder.is_dynamic_map_reduce

    def _add_query_parameter(self, value: ParameterValue) -> str:
        return self._query_parameters.add(value)

    # -- projection / source ---------------------------------------------------

    def select_fields(
        self, fields: Sequence[str], projections: Sequence[str] | None = None
    ) -> DocumentQuery[T]:
        self._builder.select_fields(fields, projections)
        return self

    def get_projection_fields(self) -> list[str]:
        return self._builder.get_projection_fields()

    def include(self, path: str) -> DocumentQuery[T]:
        self._builder.include(path)
        return self

    def distinct(self) -> DocumentQuery[T]:
        self._builder.distinct()
        return self

    def using_default_operator(self, operator: QueryOperator | str) -> DocumentQuery[T]:
        self._builder.using_default_operator(operator)
        return self

    # -- ordering ----------------------------------------------------------------

    def random_ordering(self, seed: str | None = None) -> DocumentQuery[T]:
        parameter_name = None if seed is None else self._add_query_parameter(
            transform_value(seed)
        )
        self._builder.random_ordering(parameter_name)
        return self

    def custom_sort_using(self, type_name: str, descending: bool = False) -> DocumentQuery[T]:
        self._builder.custom_sort_using(
            self._add_query_parameter(transform_value(type_name)), descending
        )
        return self

    def order_by(
        self, field: str, ordering: OrderingType | str | None = None
    ) -> DocumentQuery[T]:
        self._builder.order_by(field, ordering)
        return self

    def order_by_descending(
        self, field: str, ordering: OrderingType | str | None = None
    ) -> DocumentQuery[T]:
        self._builder.order_by_descending(field, ordering)
        return self

    def order_by_score(self) -> DocumentQuery[T]:
        self._builder.order_by_score()
        return self

    def order_by_score_descending(self) -> DocumentQuery[T]:
        self._builder.order_by_score_descending()
        return self

    def order_by_distance(
        self,
        field: str,
        latitude_or_shape_wkt: float | str,
        longitude: float | None = None,
    ) -> DocumentQuery[T]:
        """Order by distance from a point (lat, lng) or from a WKT shape."""
        self._builder.order_by_distance(
            field, *self._distance_parameters(latitude_or_shape_wkt, longitude)
        )
        return self

    def order_by_distance_descending(
        self,
        field: str,
        latitude_or_shape_wkt: float | str,
        longitude: float | None = None,
    ) -> DocumentQuery[T]:
        self._builder.order_by_distance_descending(
            field, *self._distance_parameters(latitude_or_shape_wkt, longitude)
        )
        return self

    def _distance_parameters(
        self, latitude_or_shape_wkt: float | str, longitude: float | None
    ) -> tuple[str, str | None]:
        first = transform_value(latitude_or_shape_wkt)
        if longitude is None:
            return self._add_query_parameter(first), None
        second = transform_value(longitude)
        return self._add_query_parameter(first), self._add_query_parameter(second)

    # -- equality ------------------------------------------------------------------

    def where_equals(
        self, params_or_field: WhereParamsLike, value: Any = None, exact: bool = False
    ) -> DocumentQuery[T]:
        params = WhereParams.normalize(params_or_field, value, exact)
        transformed = transform_value(params.value)
        self._builder.where_equals(params.parametrize(self._add_query_parameter(transformed)))
        return self

    def where_not_equals(
        self, params_or_field: WhereParamsLike, value: Any = None, exact: bool = False
    ) -> DocumentQuery[T]:
        params = WhereParams.normalize(params_or_field, value, exact)
        transformed = transform_value(params.value)
        self._builder.where_not_equals(
            params.parametrize(self._add_query_parameter(transformed))
        )
        return self

    # -- sets ----------------------------------------------------------------------

    def where_in(
        self, field: str, values: Sequence[Any], exact: bool = False
    ) -> DocumentQuery[T]:
        """``field in (...)``; an empty (flattened) list adds no clause."""
        transformed = transform_values(values)
        if transformed:
            self._builder.where_in(field, self._add_query_parameter(transformed), exact)
        return self

    def contains_any(self, field: str, values: Sequence[Any]) -> DocumentQuery[T]:
        transformed = transform_values(values)
        if transformed:
            self._builder.where_in(field, self._add_query_parameter(transformed))
        return self

    def contains_all(self, field: str, values: Sequence[Any]) -> DocumentQuery[T]:
        transformed = transform_values(values)
        if transformed:
            self._builder.where_all_in(field, self._add_query_parameter(transformed))
        return self

    # -- strings -------------------------------------------------------------------

    def where_starts_with(self, field: str, value: Any) -> DocumentQuery[T]:
        transformed = transform_value(value)
        self._builder.where_starts_with(field, self._add_query_parameter(transformed))
        return self

    def where_ends_with(self, field: str, value: Any) -> DocumentQuery[T]:
        transformed = transform_value(value)
        self._builder.where_ends_with(field, self._add_query_parameter(transformed))
        return self

    def search(
        self,
        field: str,
        search_terms: str,
        operator: SearchOperator | str = SearchOperator.OR,
    ) -> DocumentQuery[T]:
        transformed = transform_value(search_terms)
        self._builder.search(field, self._add_query_parameter(transformed), operator)
        return self

    # -- ranges ----------------------------------------------------------------------

    def where_between(
        self, field: str, start: Any, end: Any, exact: bool = False
    ) -> DocumentQuery[T]:
        """``start``/``end`` of ``None`` leave that side of the range open."""
        transformed_start = transform_range_value(start, OPEN_LOWER_BOUND)
        transformed_end = transform_range_value(end, OPEN_UPPER_BOUND)
        self._builder.where_between(
            field,
            self._add_query_parameter(transformed_start),
            self._add_query_parameter(transformed_end),
            exact,
        )
        return self

    def where_greater_than(self, field: str, value: Any, exact: bool = False) -> DocumentQuery[T]:
        transformed = transform_range_value(value, OPEN_LOWER_BOUND)
        self._builder.where_greater_than(field, self._add_query_parameter(transformed), exact)
        return self

    def where_greater_than_or_equal(
        self, field: str, value: Any, exact: bool = False
    ) -> DocumentQuery[T]:
        transformed = transform_range_value(value, OPEN_LOWER_BOUND)
        self._builder.where_greater_than_or_equal(
            field, self._add_query_parameter(transformed), exact
        )
        return self

    def where_less_than(self, field: str, value: Any, exact: bool = False) -> DocumentQuery[T]:
        transformed = transform_range_value(value, OPEN_UPPER_BOUND)
        self._builder.where_less_than(field, self._add_query_parameter(transformed), exact)
        return self

    def where_less_than_or_equal(
        self, field: str, value: Any, exact: bool = False
    ) -> DocumentQuery[T]:
        transformed = transform_range_value(value, OPEN_UPPER_BOUND)
        self._builder.where_less_than_or_equal(
            field, self._add_query_parameter(transformed), exact
        )
        return self

    # -- misc predicates -------------------------------------------------------------

    def where_exists(self, field: str) -> DocumentQuery[T]:
        self._builder.where_exists(field)
        return self

    def where_true(self) -> DocumentQuery[T]:
        self._builder.where_true()
        return self

    # -- spatial ---------------------------------------------------------------------

    def within_radius_of(
        self,
        field: str,
        radius: float,
        latitude: float,
        longitude: float,
        radius_units: SpatialUnit | str | None = None,
        dist_error_percent: float | None = None,
    ) -> DocumentQuery[T]:
        radius, latitude, longitude = (
            transform_value(radius),
            transform_value(latitude),
            transform_value(longitude),
        )
        self._builder.within_radius_of(
            field,
            self._add_query_parameter(radius),
            self._add_query_parameter(latitude),
            self._add_query_parameter(longitude),
            radius_units,
            dist_error_percent,
        )
        return self

    def spatial(
        self,
        field: str,
        shape_wkt_or_criteria: str | SpatialCriteria,
        relation: SpatialRelation | str | None = None,
        dist_error_percent: float | None = None,
    ) -> DocumentQuery[T]:
        """
        Spatial predicate from a WKT shape + relation, or from a criteria
        object (see ``ravendb_query.spatial``).
        """
        if isinstance(shape_wkt_or_criteria, SpatialCriteria):
            # every shape value is validated before the first one is bound
            pending = iter([transform_value(value) for value in shape_wkt_or_criteria.values()])
            self._builder.spatial(
                field,
                shape_wkt_or_criteria,
                lambda _value: self._add_query_parameter(next(pending)),
            )
            return self

        if relation is None:
            raise InvalidArgumentError("spatial() with a WKT shape requires a relation")
        shape_wkt = transform_value(shape_wkt_or_criteria)
        self._builder.spatial(
            field, self._add_query_parameter(shape_wkt), relation, dist_error_percent
        )
        return self

    # -- connectors ------------------------------------------------------------------

    def and_also(self) -> DocumentQuery[T]:
        self._builder.and_also()
        return self

    def or_else(self) -> DocumentQuery[T]:
        self._builder.or_else()
        return self

    def negate_next(self) -> DocumentQuery[T]:
        self._builder.negate_next()
        return self

    def open_subclause(self) -> DocumentQuery[T]:
        self._builder.open_subclause()
        return self

    def close_subclause(self) -> DocumentQuery[T]:
        self._builder.close_subclause()
        return self

    def intersect(self) -> DocumentQuery[T]:
        self._builder.intersect()
        return self

    # -- relevance -------------------------------------------------------------------

    def boost(self, boost: float) -> DocumentQuery[T]:
        self._builder.boost(boost)
        return self

    def fuzzy(self, fuzzy: float) -> DocumentQuery[T]:
        self._builder.fuzzy(fuzzy)
        return self

    def proximity(self, proximity: int) -> DocumentQuery[T]:
        self._builder.proximity(proximity)
        return self

    # -- map-reduce ------------------------------------------------------------------

    def group_by(self, field: str, *fields: str) -> DocumentQuery[T]:
        self._builder.group_by(field, *fields)
        return self

    def group_by_key(
        self, field: str | None = None, projected_name: str | None = None
    ) -> DocumentQuery[T]:
        self._builder.group_by_key(field, projected_name)
        return self

    def group_by_sum(self, field: str, projected_name: str | None = None) -> DocumentQuery[T]:
        self._builder.group_by_sum(field, projected_name)
        return self

    def group_by_count(self, projected_name: str | None = None) -> DocumentQuery[T]:
        self._builder.group_by_count(projected_name)
        return self
