"""
Spatial criteria for ``spatial()`` clauses.

A criteria object describes a shape and a relation without knowing about
the query it ends up in.  Shape values are bound through the
``parameter_name_generator`` callback the query hands over, so they land in
the query's own parameter table like every other value.

Example::

    query.spatial("Location", within_radius(10, 32.1, 34.8, SpatialUnit.MILES))
    # where spatial.within(Location, spatial.circle($p0, $p1, $p2, 'Miles'))
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable

from .operators import SpatialRelation, SpatialUnit
from .rql import format_number, format_parameter, quote_string

SpatialParameterNameGenerator = Callable[[str | float | int], str]


def render_circle(
    radius_parameter_name: str,
    latitude_parameter_name: str,
    longitude_parameter_name: str,
    radius_units: SpatialUnit | str | None = None,
) -> str:
    args = [
        format_parameter(radius_parameter_name),
        format_parameter(latitude_parameter_name),
        format_parameter(longitude_parameter_name),
    ]
    if radius_units is not None:
        args.append(quote_string(SpatialUnit(radius_units).value))
    return f"spatial.circle({', '.join(args)})"


def render_wkt(shape_wkt_parameter_name: str) -> str:
    return f"spatial.wkt({format_parameter(shape_wkt_parameter_name)})"


def render_point(latitude_parameter_name: str, longitude_parameter_name: str) -> str:
    return (
        f"spatial.point({format_parameter(latitude_parameter_name)}, "
        f"{format_parameter(longitude_parameter_name)})"
    )


def render_relation(
    relation: SpatialRelation | str,
    field: str,
    shape: str,
    dist_error_percent: float | None = None,
) -> str:
    """``spatial.<relation>(<field>, <shape>[, <error>])``; *field* is pre-rendered."""
    args = [field, shape]
    if dist_error_percent is not None:
        args.append(format_number(dist_error_percent))
    return f"spatial.{SpatialRelation(relation).value}({', '.join(args)})"


class SpatialCriteria(ABC):
    """Base for shape criteria; subclasses render the shape expression."""

    def __init__(
        self,
        relation: SpatialRelation | str,
        dist_error_percent: float | None = None,
    ) -> None:
        self.relation = SpatialRelation(relation)
        self.dist_error_percent = dist_error_percent

    @abstractmethod
    def values(self) -> tuple[str | float | int, ...]:
        """Raw shape values, in the order ``get_shape_token`` binds them."""

    @abstractmethod
    def get_shape_token(self, parameter_name_generator: SpatialParameterNameGenerator) -> str:
        """Bind the shape values through the generator and return the shape."""

    def to_query_token(
        self,
        field: str,
        parameter_name_generator: SpatialParameterNameGenerator,
    ) -> str:
        shape = self.get_shape_token(parameter_name_generator)
        return render_relation(self.relation, field, shape, self.dist_error_percent)


class WktCriteria(SpatialCriteria):
    def __init__(
        self,
        shape_wkt: str,
        relation: SpatialRelation | str,
        dist_error_percent: float | None = None,
    ) -> None:
        super().__init__(relation, dist_error_percent)
        self.shape_wkt = shape_wkt

    def values(self) -> tuple[str | float | int, ...]:
        return (self.shape_wkt,)

    def get_shape_token(self, parameter_name_generator: SpatialParameterNameGenerator) -> str:
        return render_wkt(parameter_name_generator(self.shape_wkt))


class CircleCriteria(SpatialCriteria):
    def __init__(
        self,
        radius: float,
        latitude: float,
        longitude: float,
        radius_units: SpatialUnit | str | None = None,
        relation: SpatialRelation | str = SpatialRelation.WITHIN,
        dist_error_percent: float | None = None,
    ) -> None:
        super().__init__(relation, dist_error_percent)
        self.radius = radius
        self.latitude = latitude
        self.longitude = longitude
        self.radius_units = radius_units

    def values(self) -> tuple[str | float | int, ...]:
        return (self.radius, self.latitude, self.longitude)

    def get_shape_token(self, parameter_name_generator: SpatialParameterNameGenerator) -> str:
        return render_circle(
            parameter_name_generator(self.radius),
            parameter_name_generator(self.latitude),
            parameter_name_generator(self.longitude),
            self.radius_units,
        )


# -- factory helpers -------------------------------------------------------


def relates_to_shape(
    shape_wkt: str,
    relation: SpatialRelation | str,
    dist_error_percent: float | None = None,
) -> WktCriteria:
    return WktCriteria(shape_wkt, relation, dist_error_percent)


def intersects(shape_wkt: str, dist_error_percent: float | None = None) -> WktCriteria:
    return relates_to_shape(shape_wkt, SpatialRelation.INTERSECTS, dist_error_percent)


def contains(shape_wkt: str, dist_error_percent: float | None = None) -> WktCriteria:
    return relates_to_shape(shape_wkt, SpatialRelation.CONTAINS, dist_error_percent)


def disjoint(shape_wkt: str, dist_error_percent: float | None = None) -> WktCriteria:
    return relates_to_shape(shape_wkt, SpatialRelation.DISJOINT, dist_error_percent)


def within(shape_wkt: str, dist_error_percent: float | None = None) -> WktCriteria:
    return relates_to_shape(shape_wkt, SpatialRelation.WITHIN, dist_error_percent)


def within_radius(
    radius: float,
    latitude: float,
    longitude: float,
    radius_units: SpatialUnit | str | None = None,
    dist_error_percent: float | None = None,
) -> CircleCriteria:
    return CircleCriteria(
        radius,
        latitude,
        longitude,
        radius_units,
        SpatialRelation.WITHIN,
        dist_error_percent,
    )
