"""Tests for where-clause tokens."""

from __future__ import annotations

import pytest

from ravendb_query import QueryOperator, WhereOperator
from ravendb_query.tokens import (
    CloseSubclauseToken,
    IntersectMarkerToken,
    NegateToken,
    OpenSubclauseToken,
    QueryOperatorToken,
    QueryToken,
    WhereToken,
    join_tokens,
)


def test_query_token_is_abstract():
    with pytest.raises(TypeError):
        QueryToken()  # type: ignore[abstract]


def test_intersect_marker_is_not_a_rendered_token():
    assert not isinstance(IntersectMarkerToken(), QueryToken)


def test_where_token_modifiers_wrap_in_order():
    token = WhereToken(WhereOperator.EQUALS, "Name", ("p0",), exact=True, fuzzy=0.5, boost=2)
    assert token.render() == "boost(fuzzy(exact(Name = $p0), 0.5), 2)"


def test_join_tokens_hugs_parentheses():
    tokens = [
        NegateToken(),
        OpenSubclauseToken(),
        WhereToken(WhereOperator.EXISTS, "Name"),
        QueryOperatorToken(QueryOperator.OR),
        WhereToken(WhereOperator.TRUE),
        CloseSubclauseToken(),
    ]
    assert join_tokens(tokens) == "not (exists(Name) or true)"
