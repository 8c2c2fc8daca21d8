"""Tests for RawDocumentQuery."""

from __future__ import annotations

import pytest

from ravendb_query import RawDocumentQuery


def test_raw_query_and_parameters(session):
    query = session.raw_query("from Products where Price > $min", {"min": 10})

    index_query = query.get_index_query()

    assert isinstance(query, RawDocumentQuery)
    assert index_query.query == "from Products where Price > $min"
    assert index_query.query_parameters == {"min": 10}


def test_add_parameter_skips_value_transform(session, executor):
    query = RawDocumentQuery.create(session, executor).raw_query("from @all_docs")
    query.add_parameter("filter", {"nested": [1, 2]})
    assert query.get_index_query().query_parameters == {"filter": {"nested": [1, 2]}}


def test_create_accepts_mapping_options(session, executor):
    query = RawDocumentQuery.create(session, executor, {"with_statistics": True})
    assert query.with_statistics is True


def test_raw_query_twice_replaces_text(session):
    query = session.raw_query("from Products").raw_query("from Orders")
    assert str(query) == "from Orders"


@pytest.mark.asyncio
async def test_raw_query_executes(session, executor):
    executor.queue({"Results": [{"Name": "A", "@metadata": {"@id": "products/1"}}]})

    results = await session.raw_query("from Products").all()

    assert results == [{"Name": "A", "id": "products/1"}]
    assert executor.last_index_query.query == "from Products"

