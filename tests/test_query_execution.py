"""Tests for query execution, result shaping and notifications."""

from __future__ import annotations

from typing import Any

import pytest

from ravendb_query import (
    DocumentQuery,
    DocumentQueryBase,
    ErrorResponseError,
    IndexStaleError,
    InvalidOperationError,
    QueryCommand,
    QueryResultsWithStatistics,
)
from ravendb_query.index_query import MAX_INT32


def _doc(doc_id: str, name: str, **metadata: Any) -> dict[str, Any]:
    return {"Name": name, "@metadata": {"@id": doc_id, **metadata}}


def _envelope(*results: dict[str, Any], **extra: Any) -> dict[str, Any]:
    return {"Results": list(results), "Includes": [], "TotalResults": len(results), **extra}


@pytest.fixture
def events(products: DocumentQuery) -> dict[str, list[Any]]:
    recorded: dict[str, list[Any]] = {"queried": [], "document": [], "includes": []}
    products.on(DocumentQueryBase.EVENT_DOCUMENTS_QUERIED, lambda: recorded["queried"].append(None))
    products.on(DocumentQueryBase.EVENT_DOCUMENT_FETCHED, recorded["document"].append)
    products.on(DocumentQueryBase.EVENT_INCLUDES_FETCHED, recorded["includes"].append)
    return recorded


# -- all() -------------------------------------------------------------------


@pytest.mark.asyncio
async def test_all_submits_query_command(products: DocumentQuery, executor):
    executor.queue(_envelope(_doc("products/1", "Chai")))

    results = await products.where_equals("Name", "Chai").all()

    assert results == [{"Name": "Chai", "id": "products/1"}]
    command = executor.commands[0]
    assert isinstance(command, QueryCommand)
    assert command.payload["Query"] == "from Products where Name = $p0"
    assert command.payload["QueryParameters"] == {"p0": "Chai"}
    assert command.end_point == "http://fake-node:8080/databases/Northwind/queries"


@pytest.mark.asyncio
async def test_all_converts_to_registered_type(session, conventions, executor, product_cls):
    conventions.register_document_type(product_cls)
    executor.queue(_envelope({"Name": "Chai", "Price": 18, "@metadata": {"@id": "products/1"}}))

    results = await session.query(collection="Products").all()

    assert results == [product_cls(id="products/1", Name="Chai", Price=18)]


@pytest.mark.asyncio
async def test_all_uses_current_paging(products: DocumentQuery, executor):
    executor.queue(_envelope())
    await products.take(5).skip(10).all()
    assert executor.last_index_query.page_size == 5
    assert executor.last_index_query.start == 10


@pytest.mark.asyncio
async def test_all_with_statistics(session, executor):
    response = _envelope(_doc("products/1", "A"), _doc("products/2", "B"), IsStale=False)
    executor.queue(response)

    result = await session.query(collection="Products", with_statistics=True).all()

    assert isinstance(result, QueryResultsWithStatistics)
    assert result.response is response
    assert len(result.results) == len(response["Results"]) == 2


@pytest.mark.asyncio
async def test_all_with_statistics_on_empty_result(session, executor):
    response = _envelope()
    executor.queue(response)

    result = await session.query(collection="Products", with_statistics=True).all()

    assert result == QueryResultsWithStatistics([], response)


@pytest.mark.asyncio
async def test_no_content_is_an_empty_result(products: DocumentQuery, executor):
    executor.queue(None)
    assert await products.all() == []


@pytest.mark.asyncio
async def test_stale_index_fails(products: DocumentQuery, executor):
    executor.queue(_envelope(_doc("products/1", "A"), IsStale=True))

    with pytest.raises(IndexStaleError, match="The index is still stale after reached the timeout"):
        await products.all()


@pytest.mark.asyncio
async def test_execute_query_returns_envelope(products: DocumentQuery, executor):
    executor.queue(None)
    assert await products.execute_query() == {"Results": [], "Includes": []}

    response = _envelope(_doc("products/1", "A"))
    executor.queue(response)
    assert await products.execute_query() is response


# -- single() ----------------------------------------------------------------


@pytest.mark.asyncio
async def test_single_returns_the_only_result(products: DocumentQuery, executor):
    executor.queue(_envelope(_doc("products/1", "Chai")))

    result = await products.single()

    assert result == {"Name": "Chai", "id": "products/1"}
    assert executor.last_index_query.page_size == 2
    assert executor.last_index_query.start == 0


@pytest.mark.asyncio
async def test_single_with_no_result(products: DocumentQuery, executor):
    executor.queue(_envelope())
    with pytest.raises(InvalidOperationError, match="There's no results"):
        await products.single()


@pytest.mark.asyncio
async def test_single_with_many_results(products: DocumentQuery, executor):
    executor.queue(_envelope(_doc("products/1", "A"), _doc("products/2", "B")))
    with pytest.raises(InvalidOperationError, match="more than one result"):
        await products.single()


@pytest.mark.asyncio
async def test_single_restores_paging_and_statistics(session, executor):
    query = session.query(collection="Products", with_statistics=True).take(10).skip(3)
    executor.queue(_envelope(_doc("products/1", "A")))

    result = await query.single()

    assert result == {"Name": "A", "id": "products/1"}
    assert query.with_statistics is True
    assert query.get_index_query().page_size == 10
    assert query.get_index_query().start == 3


@pytest.mark.asyncio
async def test_single_restores_paging_on_failure(products: DocumentQuery, executor):
    products.take(7).skip(1)
    executor.queue(ErrorResponseError("server down", status_code=500))

    with pytest.raises(ErrorResponseError):
        await products.single()

    assert products.get_index_query().page_size == 7
    assert products.get_index_query().start == 1


# -- first() -----------------------------------------------------------------


@pytest.mark.asyncio
async def test_first_returns_first_result(products: DocumentQuery, executor):
    executor.queue(_envelope(_doc("products/1", "A"), _doc("products/2", "B")))

    assert await products.first() == {"Name": "A", "id": "products/1"}
    assert executor.last_index_query.page_size == 1
    assert executor.last_index_query.start == 0


@pytest.mark.asyncio
async def test_first_on_empty_result_is_none(products: DocumentQuery, executor):
    executor.queue(_envelope())
    assert await products.first() is None


@pytest.mark.asyncio
async def test_first_ignores_statistics_mode(session, executor):
    query = session.query(collection="Products", with_statistics=True)
    executor.queue(_envelope(_doc("products/1", "A")))

    assert await query.first() == {"Name": "A", "id": "products/1"}
    assert query.with_statistics is True


# -- count() -----------------------------------------------------------------


@pytest.mark.asyncio
async def test_count_forces_take_zero(products: DocumentQuery, executor):
    products.take(50).skip(5)
    executor.queue({"Results": [], "TotalResults": 42})

    assert await products.count() == 42
    assert executor.last_index_query.page_size == 0
    assert executor.last_index_query.start == 0
    assert products.get_index_query().page_size == 50
    assert products.get_index_query().start == 5


@pytest.mark.asyncio
async def test_count_without_total_is_zero(products: DocumentQuery, executor):
    executor.queue(None)
    assert await products.count() == 0


# -- Reuse -------------------------------------------------------------------


@pytest.mark.asyncio
async def test_bindings_persist_across_terminal_calls(products: DocumentQuery, executor):
    products.where_equals("Name", "A")
    executor.queue(_envelope(_doc("products/1", "A")), {"TotalResults": 1})

    await products.first()
    await products.count()

    first, count = executor.commands
    assert first.index_query.query == count.index_query.query
    assert count.index_query.query_parameters == {"p0": "A"}
    assert products.get_index_query().page_size == MAX_INT32


# -- Callbacks ---------------------------------------------------------------


@pytest.mark.asyncio
async def test_sync_callback_receives_result(products: DocumentQuery, executor):
    received: list[tuple[Any, Any]] = []
    executor.queue({"TotalResults": 3})

    result = await products.count(lambda value, error: received.append((value, error)))

    assert result == 3
    assert received == [(3, None)]


@pytest.mark.asyncio
async def test_async_callback_receives_result(products: DocumentQuery, executor):
    received: list[Any] = []

    async def callback(value: Any, error: BaseException | None) -> None:
        received.append(value)

    executor.queue(_envelope(_doc("products/1", "A")))
    await products.all(callback)

    assert received == [[{"Name": "A", "id": "products/1"}]]


@pytest.mark.asyncio
async def test_callback_receives_same_error(products: DocumentQuery, executor):
    received: list[tuple[Any, Any]] = []
    executor.queue(_envelope())

    with pytest.raises(InvalidOperationError) as exc_info:
        await products.single(lambda value, error: received.append((value, error)))

    assert received == [(None, exc_info.value)]


# -- Notifications -----------------------------------------------------------


@pytest.mark.asyncio
async def test_queried_emitted_before_each_execution(products: DocumentQuery, executor, events):
    await products.all()
    await products.count()
    assert len(events["queried"]) == 2


@pytest.mark.asyncio
async def test_document_fetched_per_result(products: DocumentQuery, executor, events):
    executor.queue(_envelope(_doc("products/1", "A"), _doc("products/2", "B")))

    await products.all()

    assert [c.document_id for c in events["document"]] == ["products/1", "products/2"]
    assert events["document"][0].raw_entity["Name"] == "A"
    assert events["includes"] == []


@pytest.mark.asyncio
async def test_projections_do_not_emit_document_fetched(products: DocumentQuery, executor, events):
    executor.queue(
        _envelope(
            _doc("products/1", "A", **{"@projection": True}),
            _doc("products/2", "B"),
        )
    )

    results = await products.all()

    assert len(results) == 2
    assert [c.document_id for c in events["document"]] == ["products/2"]


@pytest.mark.asyncio
async def test_includes_emitted_once_as_batch(products: DocumentQuery, executor, events):
    includes = {
        "suppliers/1": {"Name": "S1", "@metadata": {"@id": "suppliers/1"}},
        "suppliers/2": {"Name": "S2", "@metadata": {"@id": "suppliers/2"}},
    }
    executor.queue({**_envelope(_doc("products/1", "A")), "Includes": includes})

    await products.include("Supplier").all()

    assert events["includes"] == [list(includes.values())]


@pytest.mark.asyncio
async def test_empty_result_emits_no_fetch_events(products: DocumentQuery, executor, events):
    executor.queue({"Results": [], "Includes": [{"@metadata": {"@id": "x/1"}}]})

    await products.all()

    assert events["document"] == []
    assert events["includes"] == []
    assert len(events["queried"]) == 1
