"""
Document session — query factory and identity map.

``IDocumentSession`` is what a query needs from its session (the
conventions).  ``DocumentSession`` is a minimal concrete session: it
creates queries bound to its executor, listens to their notifications and
keeps every fetched entity by id.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from .commands.documents import GetDocumentCommand
from .conventions import METADATA_KEY, DocumentConventions
from .query.base import DocumentQueryBase
from .query.document import DocumentQuery
from .query.options import DocumentQueryOptions
from .query.raw import RawDocumentQuery

if TYPE_CHECKING:
    from .conventions import DocumentConversionResult, DocumentType
    from .http import IRequestExecutor
    from .index_query import IndexQueryOptions

logger = logging.getLogger(__name__)


@runtime_checkable
class IDocumentSession(Protocol):
    """Session as seen by a query."""

    @property
    def conventions(self) -> DocumentConventions: ...


class DocumentSession:
    """
    Creates queries and tracks what they fetch.

    ``documents_by_id`` holds converted entities of every non-projection
    result; ``included_documents_by_id`` holds raw side-loaded documents.
    """

    def __init__(
        self,
        request_executor: IRequestExecutor,
        conventions: DocumentConventions | None = None,
    ) -> None:
        self.request_executor = request_executor
        self._conventions = conventions or DocumentConventions()
        self.documents_by_id: dict[str, Any] = {}
        self.included_documents_by_id: dict[str, dict[str, Any]] = {}
        self.number_of_requests = 0

    @property
    def conventions(self) -> DocumentConventions:
        return self._conventions

    # -- query factories ---------------------------------------------------------

    def query(
        self,
        collection: str | None = None,
        index_name: str | None = None,
        document_type: DocumentType | None = None,
        nested_object_types: Mapping[str, DocumentType] | None = None,
        with_statistics: bool = False,
        index_query_options: IndexQueryOptions | None = None,
    ) -> DocumentQuery[Any]:
        options = _options(
            collection,
            index_name,
            document_type,
            nested_object_types,
            with_statistics,
            index_query_options,
        )
        return self._attach(DocumentQuery.create(self, self.request_executor, options))

    def raw_query(
        self,
        query: str,
        parameters: Mapping[str, Any] | None = None,
        document_type: DocumentType | None = None,
        nested_object_types: Mapping[str, DocumentType] | None = None,
        with_statistics: bool = False,
        index_query_options: IndexQueryOptions | None = None,
    ) -> RawDocumentQuery[Any]:
        options = _options(
            None,
            None,
            document_type,
            nested_object_types,
            with_statistics,
            index_query_options,
        )
        raw = RawDocumentQuery.create(self, self.request_executor, options).raw_query(query)
        for name, value in (parameters or {}).items():
            raw.add_parameter(name, value)
        return self._attach(raw)

    # -- loading -------------------------------------------------------------------

    async def load(
        self,
        document_id: str,
        document_type: DocumentType | None = None,
        nested_object_types: Mapping[str, DocumentType] | None = None,
    ) -> Any:
        """Load one document by id; ``None`` when it does not exist."""
        if document_id in self.documents_by_id:
            return self.documents_by_id[document_id]

        self.number_of_requests += 1
        response = await self.request_executor.execute(GetDocumentCommand(document_id))
        results = self.conventions.try_fetch_results(response)
        if not results or results[0] is None:
            return None

        for include in self.conventions.try_fetch_includes(response):
            self._on_include(include)
        conversion = self.conventions.convert_to_document(
            results[0], document_type, nested_object_types
        )
        self._on_document_fetched(conversion)
        return conversion.document

    # -- notifications -----------------------------------------------------------

    def _attach(self, query: Any) -> Any:
        query.on(DocumentQueryBase.EVENT_DOCUMENTS_QUERIED, self._on_documents_queried)
        query.on(DocumentQueryBase.EVENT_DOCUMENT_FETCHED, self._on_document_fetched)
        query.on(DocumentQueryBase.EVENT_INCLUDES_FETCHED, self._on_includes_fetched)
        return query

    def _on_documents_queried(self) -> None:
        self.number_of_requests += 1

    def _on_document_fetched(self, conversion: DocumentConversionResult[Any]) -> None:
        document_id = conversion.document_id
        if document_id is None:
            logger.debug("Fetched document without @id not tracked")
            return
        self.documents_by_id[document_id] = conversion.document

    def _on_includes_fetched(self, includes: list[dict[str, Any]]) -> None:
        for include in includes:
            self._on_include(include)

    def _on_include(self, include: Mapping[str, Any] | None) -> None:
        if not include:
            return
        document_id = (include.get(METADATA_KEY) or {}).get("@id")
        if document_id:
            self.included_documents_by_id[document_id] = dict(include)


def _options(
    collection: str | None,
    index_name: str | None,
    document_type: DocumentType | None,
    nested_object_types: Mapping[str, DocumentType] | None,
    with_statistics: bool,
    index_query_options: IndexQueryOptions | None,
) -> DocumentQueryOptions:
    values: dict[str, Any] = {
        "collection": collection,
        "index_name": index_name,
        "document_type": document_type,
        "nested_object_types": dict(nested_object_types or {}),
        "with_statistics": with_statistics,
    }
    if index_query_options is not None:
        values["index_query_options"] = index_query_options
    return DocumentQueryOptions(**values)
