"""Tests for spatial criteria and shape rendering."""

from __future__ import annotations

import pytest

from ravendb_query import (
    CircleCriteria,
    SpatialRelation,
    SpatialUnit,
    WktCriteria,
    contains,
    disjoint,
    intersects,
    relates_to_shape,
    within,
    within_radius,
)
from ravendb_query.spatial import render_circle, render_point, render_relation, render_wkt


@pytest.fixture
def generator():
    """Parameter-name generator recording what it was asked to bind."""
    bound: list[object] = []

    def _generate(value: object) -> str:
        bound.append(value)
        return f"p{len(bound) - 1}"

    _generate.bound = bound  # type: ignore[attr-defined]
    return _generate


# -- Rendering helpers -------------------------------------------------------


def test_render_shapes():
    assert render_circle("r", "lat", "lng") == "spatial.circle($r, $lat, $lng)"
    assert render_circle("r", "lat", "lng", "Kilometers") == (
        "spatial.circle($r, $lat, $lng, 'Kilometers')"
    )
    assert render_wkt("shape") == "spatial.wkt($shape)"
    assert render_point("lat", "lng") == "spatial.point($lat, $lng)"


def test_render_relation_with_error_margin():
    assert render_relation("contains", "Area", "spatial.wkt($p0)", 0.05) == (
        "spatial.contains(Area, spatial.wkt($p0), 0.05)"
    )


def test_unknown_relation_is_rejected():
    with pytest.raises(ValueError):
        render_relation("touches", "Area", "spatial.wkt($p0)")


# -- Criteria ----------------------------------------------------------------


@pytest.mark.parametrize(
    ("factory", "relation"),
    [
        (intersects, SpatialRelation.INTERSECTS),
        (contains, SpatialRelation.CONTAINS),
        (disjoint, SpatialRelation.DISJOINT),
        (within, SpatialRelation.WITHIN),
    ],
)
def test_wkt_factories(factory, relation, generator):
    criteria = factory("POLYGON((0 0, 1 1, 1 0, 0 0))")
    assert isinstance(criteria, WktCriteria)
    assert criteria.relation is relation
    assert criteria.to_query_token("Area", generator) == (
        f"spatial.{relation.value}(Area, spatial.wkt($p0))"
    )
    assert generator.bound == ["POLYGON((0 0, 1 1, 1 0, 0 0))"]


def test_relates_to_shape_keeps_error_margin(generator):
    criteria = relates_to_shape("POINT(1 2)", "within", 0.1)
    assert criteria.to_query_token("Location", generator) == (
        "spatial.within(Location, spatial.wkt($p0), 0.1)"
    )


def test_within_radius_binds_each_value(generator):
    criteria = within_radius(10, 32.1, 34.8, SpatialUnit.MILES)
    assert isinstance(criteria, CircleCriteria)
    assert criteria.to_query_token("Location", generator) == (
        "spatial.within(Location, spatial.circle($p0, $p1, $p2, 'Miles'))"
    )
    assert generator.bound == [10, 32.1, 34.8]


def test_criteria_values_follow_binding_order(generator):
    circle = within_radius(10, 32.1, 34.8)
    wkt = intersects("POINT(1 2)")

    circle.to_query_token("Location", generator)
    wkt.to_query_token("Location", generator)

    assert circle.values() == (10, 32.1, 34.8)
    assert wkt.values() == ("POINT(1 2)",)
    assert list(circle.values() + wkt.values()) == generator.bound


def test_circle_with_other_relation(generator):
    criteria = CircleCriteria(5, 1.0, 2.0, relation=SpatialRelation.DISJOINT)
    assert criteria.get_shape_token(generator) == "spatial.circle($p0, $p1, $p2)"
    assert criteria.relation is SpatialRelation.DISJOINT
