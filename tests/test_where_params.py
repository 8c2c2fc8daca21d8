"""Tests for WhereParams normalisation."""

from __future__ import annotations

import pytest

from ravendb_query import InvalidArgumentError, ParametrizedWhereParams, WhereParams


def test_positional_form_is_normalized():
    params = WhereParams.normalize("Name", "test", True)
    assert params == WhereParams("Name", "test", exact=True)


def test_structured_form_is_returned_as_is():
    params = WhereParams("Name", "test")
    assert WhereParams.normalize(params) is params


def test_mapping_form_is_converted():
    params = WhereParams.from_({"field_name": "Name", "value": 3, "exact": 1})
    assert params == WhereParams("Name", 3, exact=True)


def test_mapping_without_field_name_is_rejected():
    with pytest.raises(InvalidArgumentError, match="field_name"):
        WhereParams.from_({"value": 3})


def test_unsupported_form_is_rejected():
    with pytest.raises(InvalidArgumentError):
        WhereParams.from_(42)  # type: ignore[arg-type]


def test_parametrize_swaps_value_for_name():
    parametrized = WhereParams("Name", "secret", exact=True).parametrize("p3")
    assert parametrized == ParametrizedWhereParams("Name", "p3", exact=True)
    assert not hasattr(parametrized, "value")
