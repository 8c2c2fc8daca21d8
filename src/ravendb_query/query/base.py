"""
DocumentQueryBase — execution and conversion engine shared by every query.

Owns the parameter table and the builder, holds paging and staleness
options, and turns the server's response envelope into typed entities.
Terminal calls (``single``, ``first``, ``count``, ``all``) are coroutines
and also report their outcome to an optional ``callback(result, error)``.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field
from inspect import isawaitable
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from ..builder import QueryBuilder
from ..commands.query import QueryCommand
from ..exceptions import IndexStaleError, InvalidArgumentError, InvalidOperationError
from ..index_query import DEFAULT_TIMEOUT, IndexQuery, IndexQueryOptions
from ..observable import Observable
from ..parameters import QueryParameters
from .options import DocumentQueryOptions

if TYPE_CHECKING:
    from ..conventions import DocumentConventions, DocumentType
    from ..http import IRequestExecutor
    from ..session import IDocumentSession

logger = logging.getLogger(__name__)

T = TypeVar("T")
Q = TypeVar("Q", bound="DocumentQueryBase[Any]")

QueryCallback = Callable[[Any, BaseException | None], Any]

MORE_THAN_ONE_RESULT_MESSAGE = (
    "There's more than one result corresponding to given query criteria."
)
NO_RESULTS_MESSAGE = "There's no results corresponding to given query criteria."
STALE_INDEX_MESSAGE = "The index is still stale after reached the timeout"


@dataclass
class QueryResultsWithStatistics(Generic[T]):
    """``all()`` result when statistics are on: entities plus the raw envelope."""

    results: list[T] = field(default_factory=list)
    response: dict[str, Any] = field(default_factory=dict)


async def _invoke_callback(
    callback: QueryCallback | None, result: Any, error: BaseException | None
) -> None:
    if callback is None:
        return
    outcome = callback(result, error)
    if isawaitable(outcome):
        await outcome


class DocumentQueryBase(Observable, Generic[T]):
    """
    Shared core of ``DocumentQuery`` and ``RawDocumentQuery``.

    Events (see ``Observable``):

    - ``queried:documents``: before every execution, no payload.
    - ``fetched:document``: per non-projection result, with its
      ``DocumentConversionResult``.
    - ``fetched:includes``: at most once per execution, with the list of
      raw include documents.
    """

    EVENT_DOCUMENTS_QUERIED = "queried:documents"
    EVENT_DOCUMENT_FETCHED = "fetched:document"
    EVENT_INCLUDES_FETCHED = "fetched:includes"

    def __init__(
        self,
        session: IDocumentSession,
        request_executor: IRequestExecutor,
        collection: str | None = None,
        index_name: str | None = None,
        document_type: DocumentType | None = None,
        nested_object_types: Mapping[str, DocumentType] | None = None,
        with_statistics: bool = False,
        index_query_options: IndexQueryOptions | None = None,
    ) -> None:
        super().__init__()
        conventions = session.conventions

        if index_name:
            self._index_name: str | None = index_name
            self._collection_name: str | None = None
        else:
            self._index_name = None
            self._collection_name = collection or conventions.all_docs

        if document_type is None and collection and collection not in (
            conventions.all_docs,
            conventions.empty_collection,
        ):
            document_type = conventions.get_document_type_name(collection)

        self.session = session
        self.request_executor = request_executor
        self.document_type = document_type
        self.nested_object_types: dict[str, DocumentType] = dict(nested_object_types or {})
        self.with_statistics = with_statistics
        self.index_query_options = index_query_options or IndexQueryOptions()

        self._take: int | None = None
        self._skip: int | None = None
        self._query_parameters = QueryParameters()
        self._builder = QueryBuilder(
            self._index_name,
            self._collection_name,
            conventions.get_id_property_name(document_type),
        )

    @classmethod
    def create(
        cls: type[Q],
        session: IDocumentSession,
        request_executor: IRequestExecutor,
        options: DocumentQueryOptions | Mapping[str, Any] | None = None,
    ) -> Q:
        if options is None:
            options = DocumentQueryOptions()
        elif not isinstance(options, DocumentQueryOptions):
            options = DocumentQueryOptions.model_validate(dict(options))
        return cls(
            session,
            request_executor,
            collection=options.collection,
            index_name=options.index_name,
            document_type=options.document_type,
            nested_object_types=options.nested_object_types,
            with_statistics=options.with_statistics,
            index_query_options=options.index_query_options,
        )

    # -- properties ----------------------------------------------------------

    @property
    def index_name(self) -> str | None:
        return self._index_name

    @property
    def collection_name(self) -> str | None:
        return self._collection_name

    @property
    def conventions(self) -> DocumentConventions:
        return self.session.conventions

    @property
    def query_parameters(self) -> QueryParameters:
        return self._query_parameters

    # -- paging / staleness --------------------------------------------------

    def take(self: Q, count: int | None) -> Q:
        self._take = _validate_paging("take", count)
        return self

    def skip(self: Q, count: int | None) -> Q:
        self._skip = _validate_paging("skip", count)
        return self

    def wait_for_non_stale_results(self: Q) -> Q:
        self.index_query_options = self.index_query_options.model_copy(
            update={
                "cut_off_etag": None,
                "wait_for_non_stale_results": True,
                "wait_for_non_stale_results_timeout": DEFAULT_TIMEOUT,
            }
        )
        return self

    def wait_for_non_stale_results_as_of(
        self: Q, cut_off_etag: int, wait_timeout: int | None = None
    ) -> Q:
        self.index_query_options = self.index_query_options.model_copy(
            update={
                "cut_off_etag": cut_off_etag,
                "wait_for_non_stale_results": True,
                "wait_for_non_stale_results_timeout": wait_timeout or DEFAULT_TIMEOUT,
            }
        )
        return self

    def wait_for_non_stale_results_as_of_now(self: Q, wait_timeout: int | None = None) -> Q:
        self.index_query_options = self.index_query_options.model_copy(
            update={
                "cut_off_etag": None,
                "wait_for_non_stale_results": True,
                "wait_for_non_stale_results_as_of_now": True,
                "wait_for_non_stale_results_timeout": wait_timeout or DEFAULT_TIMEOUT,
            }
        )
        return self

    def get_index_query(self) -> IndexQuery:
        """Freeze the current builder, parameters, paging and options."""
        return IndexQuery.create(
            query=self._builder.to_string(),
            query_parameters=self._query_parameters.to_dict(),
            page_size=self._take,
            start=self._skip,
            options=self.index_query_options,
        )

    def __str__(self) -> str:
        return self._builder.to_string()

    # -- terminal calls --------------------------------------------------------

    async def single(self, callback: QueryCallback | None = None) -> T:
        """
        The only result of the query.

        Raises:
            InvalidOperationError: If the query matches no document or more
                than one.
        """

        async def _single() -> T:
            with self._paging_override(take=2, skip=0, with_statistics=False):
                response = await self.execute_query()
                results = self.convert_response_to_documents(response)
            if len(results) > 1:
                raise InvalidOperationError(MORE_THAN_ONE_RESULT_MESSAGE)
            if not results:
                raise InvalidOperationError(NO_RESULTS_MESSAGE)
            return results[0]

        return await self._complete(_single, callback)

    async def first(self, callback: QueryCallback | None = None) -> T | None:
        """The first result, or ``None`` for an empty result set."""

        async def _first() -> T | None:
            with self._paging_override(take=1, skip=0, with_statistics=False):
                response = await self.execute_query()
                results = self.convert_response_to_documents(response)
            return results[0] if results else None

        return await self._complete(_first, callback)

    async def count(self, callback: QueryCallback | None = None) -> int:
        """The server-reported total number of matches."""

        async def _count() -> int:
            with self._paging_override(take=0, skip=0):
                response = await self.execute_query()
            return int(response.get("TotalResults") or 0)

        return await self._complete(_count, callback)

    async def all(
        self, callback: QueryCallback | None = None
    ) -> list[T] | QueryResultsWithStatistics[T]:
        """Every result on the current page; paired with the envelope when
        statistics are on."""

        async def _all() -> list[T] | QueryResultsWithStatistics[T]:
            response = await self.execute_query()
            return self.convert_response_to_documents(response)

        return await self._complete(_all, callback)

    async def _complete(
        self,
        operation: Callable[[], Awaitable[Any]],
        callback: QueryCallback | None,
    ) -> Any:
        try:
            result = await operation()
        except Exception as e:
            await _invoke_callback(callback, None, e)
            raise
        await _invoke_callback(callback, result, None)
        return result

    @contextmanager
    def _paging_override(
        self,
        take: int | None,
        skip: int | None,
        with_statistics: bool | None = None,
    ) -> Iterator[None]:
        """Temporarily replace paging (and statistics); restored on every exit."""
        saved = (self._take, self._skip, self.with_statistics)
        self._take = take
        self._skip = skip
        if with_statistics is not None:
            self.with_statistics = with_statistics
        try:
            yield
        finally:
            self._take, self._skip, self.with_statistics = saved

    # -- execution / conversion ------------------------------------------------

    async def execute_query(self) -> dict[str, Any]:
        """
        Submit the query and return the response envelope.

        A ``None`` response becomes an empty envelope.

        Raises:
            IndexStaleError: If the server reports the index as stale.
        """
        self.emit(self.EVENT_DOCUMENTS_QUERIED)

        index_query = self.get_index_query()
        logger.debug(
            "Executing query %r with %d parameter(s)",
            index_query.query,
            len(index_query.query_parameters),
        )
        response = await self.request_executor.execute(QueryCommand(index_query))

        if response is None:
            return {"Results": [], "Includes": []}
        if response.get("IsStale"):
            raise IndexStaleError(STALE_INDEX_MESSAGE, body=response)
        return response

    def convert_response_to_documents(
        self, response: dict[str, Any]
    ) -> list[T] | QueryResultsWithStatistics[T]:
        conventions = self.conventions
        raw_results = conventions.try_fetch_results(response)

        if not raw_results:
            if self.with_statistics:
                return QueryResultsWithStatistics([], response)
            return []

        results: list[T] = []
        for raw_result in raw_results:
            conversion = conventions.convert_to_document(
                raw_result, self.document_type, self.nested_object_types
            )
            results.append(conversion.document)
            if not conventions.check_is_projection(raw_result):
                self.emit(self.EVENT_DOCUMENT_FETCHED, conversion)

        includes = conventions.try_fetch_includes(response)
        if includes:
            self.emit(self.EVENT_INCLUDES_FETCHED, includes)

        if self.with_statistics:
            return QueryResultsWithStatistics(results, response)
        return results


def _validate_paging(name: str, count: int | None) -> int | None:
    if count is None:
        return None
    if isinstance(count, bool) or not isinstance(count, int) or count < 0:
        raise InvalidArgumentError(
            f"{name} must be a non-negative integer or None, got {count!r}"
        )
    return count
