"""
Narrow capability protocols over ``DocumentQueryBase``.

``IDocumentQuery`` is the typed clause surface, ``IRawDocumentQuery`` the
raw-RQL surface; both share the paging and terminal calls of
``IDocumentQueryBase``.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Protocol, TypeVar, runtime_checkable

if TYPE_CHECKING:
    from ..index_query import IndexQuery
    from ..operators import (
        OrderingType,
        QueryOperator,
        SearchOperator,
        SpatialRelation,
        SpatialUnit,
    )
    from ..spatial import SpatialCriteria
    from .base import QueryCallback, QueryResultsWithStatistics

T_co = TypeVar("T_co", covariant=True)


@runtime_checkable
class IDocumentQueryBase(Protocol[T_co]):
    def take(self, count: int | None) -> Any: ...
    def skip(self, count: int | None) -> Any: ...
    def wait_for_non_stale_results(self) -> Any: ...
    def wait_for_non_stale_results_as_of(
        self, cut_off_etag: int, wait_timeout: int | None = None
    ) -> Any: ...
    def wait_for_non_stale_results_as_of_now(self, wait_timeout: int | None = None) -> Any: ...
    def get_index_query(self) -> IndexQuery: ...
    def on(self, event: str, listener: Any) -> None: ...

    async def single(self, callback: QueryCallback | None = None) -> T_co: ...
    async def first(self, callback: QueryCallback | None = None) -> T_co | None: ...
    async def count(self, callback: QueryCallback | None = None) -> int: ...
    async def all(
        self, callback: QueryCallback | None = None
    ) -> list[T_co] | QueryResultsWithStatistics[T_co]: ...


@runtime_checkable
class IRawDocumentQuery(IDocumentQueryBase[T_co], Protocol[T_co]):
    def raw_query(self, query: str) -> IRawDocumentQuery[T_co]: ...
    def add_parameter(self, name: str, value: Any) -> IRawDocumentQuery[T_co]: ...


@runtime_checkable
class IDocumentQuery(IDocumentQueryBase[T_co], Protocol[T_co]):
    @property
    def not_(self) -> IDocumentQuery[T_co]: ...
    @property
    def is_dynamic_map_reduce(self) -> bool: ...

    def select_fields(
        self, fields: Sequence[str], projections: Sequence[str] | None = None
    ) -> IDocumentQuery[T_co]: ...
    def get_projection_fields(self) -> list[str]: ...
    def include(self, path: str) -> IDocumentQuery[T_co]: ...
    def distinct(self) -> IDocumentQuery[T_co]: ...
    def using_default_operator(self, operator: QueryOperator | str) -> IDocumentQuery[T_co]: ...

    def random_ordering(self, seed: str | None = None) -> IDocumentQuery[T_co]: ...
    def custom_sort_using(self, type_name: str, descending: bool = False) -> IDocumentQuery[T_co]: ...
    def order_by(
        self, field: str, ordering: OrderingType | str | None = None
    ) -> IDocumentQuery[T_co]: ...
    def order_by_descending(
        self, field: str, ordering: OrderingType | str | None = None
    ) -> IDocumentQuery[T_co]: ...
    def order_by_score(self) -> IDocumentQuery[T_co]: ...
    def order_by_score_descending(self) -> IDocumentQuery[T_co]: ...
    def order_by_distance(
        self, field: str, latitude_or_shape_wkt: float | str, longitude: float | None = None
    ) -> IDocumentQuery[T_co]: ...
    def order_by_distance_descending(
        self, field: str, latitude_or_shape_wkt: float | str, longitude: float | None = None
    ) -> IDocumentQuery[T_co]: ...

    def where_equals(
        self, params_or_field: Any, value: Any = None, exact: bool = False
    ) -> IDocumentQuery[T_co]: ...
    def where_not_equals(
        self, params_or_field: Any, value: Any = None, exact: bool = False
    ) -> IDocumentQuery[T_co]: ...
    def where_in(
        self, field: str, values: Sequence[Any], exact: bool = False
    ) -> IDocumentQuery[T_co]: ...
    def contains_any(self, field: str, values: Sequence[Any]) -> IDocumentQuery[T_co]: ...
    def contains_all(self, field: str, values: Sequence[Any]) -> IDocumentQuery[T_co]: ...
    def where_starts_with(self, field: str, value: Any) -> IDocumentQuery[T_co]: ...
    def where_ends_with(self, field: str, value: Any) -> IDocumentQuery[T_co]: ...
    def where_between(
        self, field: str, start: Any, end: Any, exact: bool = False
    ) -> IDocumentQuery[T_co]: ...
    def where_greater_than(self, field: str, value: Any, exact: bool = False) -> IDocumentQuery[T_co]: ...
    def where_greater_than_or_equal(
        self, field: str, value: Any, exact: bool = False
    ) -> IDocumentQuery[T_co]: ...
    def where_less_than(self, field: str, value: Any, exact: bool = False) -> IDocumentQuery[T_co]: ...
    def where_less_than_or_equal(
        self, field: str, value: Any, exact: bool = False
    ) -> IDocumentQuery[T_co]: ...
    def where_exists(self, field: str) -> IDocumentQuery[T_co]: ...
    def where_true(self) -> IDocumentQuery[T_co]: ...
    def search(
        self, field: str, search_terms: str, operator: SearchOperator | str = ...
    ) -> IDocumentQuery[T_co]: ...
    def within_radius_of(
        self,
        field: str,
        radius: float,
        latitude: float,
        longitude: float,
        radius_units: SpatialUnit | str | None = None,
        dist_error_percent: float | None = None,
    ) -> IDocumentQuery[T_co]: ...
    def spatial(
        self,
        field: str,
        shape_wkt_or_criteria: str | SpatialCriteria,
        relation: SpatialRelation | str | None = None,
        dist_error_percent: float | None = None,
    ) -> IDocumentQuery[T_co]: ...

    def and_also(self) -> IDocumentQuery[T_co]: ...
    def or_else(self) -> IDocumentQuery[T_co]: ...
    def negate_next(self) -> IDocumentQuery[T_co]: ...
    def open_subclause(self) -> IDocumentQuery[T_co]: ...
    def close_subclause(self) -> IDocumentQuery[T_co]: ...
    def intersect(self) -> IDocumentQuery[T_co]: ...
    def boost(self, boost: float) -> IDocumentQuery[T_co]: ...
    def fuzzy(self, fuzzy: float) -> IDocumentQuery[T_co]: ...
    def proximity(self, proximity: int) -> IDocumentQuery[T_co]: ...

    def group_by(self, field: str, *fields: str) -> IDocumentQuery[T_co]: ...
    def group_by_key(
        self, field: str | None = None, projected_name: str | None = None
    ) -> IDocumentQuery[T_co]: ...
    def group_by_sum(self, field: str, projected_name: str | None = None) -> IDocumentQuery[T_co]: ...
    def group_by_count(self, projected_name: str | None = None) -> IDocumentQuery[T_co]: ...
