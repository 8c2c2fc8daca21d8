"""QueryCommand — POST an ``IndexQuery`` to the database's query endpoint."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..exceptions import ErrorResponseError, InvalidArgumentError
from ..operators import RequestMethod
from .base import RavenCommand

if TYPE_CHECKING:
    import httpx

    from ..http import ServerNode
    from ..index_query import IndexQuery

logger = logging.getLogger(__name__)


class QueryCommand(RavenCommand):
    """
    Runs a query on a node.

    ``metadata_only`` asks the server to return document metadata only;
    ``index_entries_only`` returns raw index entries instead of documents.
    """

    def __init__(
        self,
        index_query: IndexQuery,
        metadata_only: bool = False,
        index_entries_only: bool = False,
    ) -> None:
        if index_query is None:
            raise InvalidArgumentError("Index query cannot be None")
        super().__init__(method=RequestMethod.POST)
        self.index_query = index_query
        self.metadata_only = metadata_only
        self.index_entries_only = index_entries_only

    def create_request(self, server_node: ServerNode) -> None:
        self.end_point = f"{server_node.url}/databases/{server_node.database}/queries"
        self.payload = self.index_query.to_json()
        self._remove_params(["metadata-only", "index-entries-only"])
        if self.metadata_only:
            self._add_params("metadata-only", "true")
        if self.index_entries_only:
            self._add_params("index-entries-only", "true")
        logger.debug("Query command for %s: %s", server_node.url, self.index_query.query)

    def set_response(self, response: httpx.Response) -> Any:
        result = super().set_response(response)
        if result is not None and not isinstance(result, dict):
            raise ErrorResponseError(
                f"Unexpected query response body of type {type(result).__name__}",
                status_code=response.status_code,
                body=result,
            )
        return result
