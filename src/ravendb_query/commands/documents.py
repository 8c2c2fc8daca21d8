"""Document commands: load by id and store."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..exceptions import InvalidArgumentError
from ..operators import RequestMethod
from .base import RavenCommand

if TYPE_CHECKING:
    import httpx

    from ..http import ServerNode


def _docs_url(server_node: ServerNode) -> str:
    return f"{server_node.url}/databases/{server_node.database}/docs"


class GetDocumentCommand(RavenCommand):
    """
    Load one or more documents by id.

    A missing document yields ``None`` instead of an error.
    """

    def __init__(
        self,
        id_or_ids: str | list[str],
        includes: list[str] | None = None,
        metadata_only: bool = False,
    ) -> None:
        super().__init__(method=RequestMethod.GET)
        ids = [id_or_ids] if isinstance(id_or_ids, str) else list(id_or_ids)
        if not ids or not all(ids):
            raise InvalidArgumentError("Document id(s) cannot be empty")
        self.ids = ids
        self.includes = list(includes or [])
        self.metadata_only = metadata_only

    def create_request(self, server_node: ServerNode) -> None:
        self.end_point = _docs_url(server_node)
        self.params = {"id": list(self.ids)}
        if self.includes:
            self._add_params("include", list(self.includes))
        if self.metadata_only:
            self._add_params("metadata-only", "true")

    def set_response(self, response: httpx.Response) -> Any:
        if response.status_code == 404:
            self._last_response = response
            return None
        return super().set_response(response)


class PutDocumentCommand(RavenCommand):
    """Store *document* under *document_id*; ``@metadata`` travels in the body."""

    def __init__(
        self,
        document_id: str,
        document: dict[str, Any],
        change_vector: str | None = None,
    ) -> None:
        if not document_id:
            raise InvalidArgumentError("Document id cannot be empty")
        if not isinstance(document, dict):
            raise InvalidArgumentError("Document must be a dict")
        super().__init__(method=RequestMethod.PUT, payload=document)
        self.document_id = document_id
        self.change_vector = change_vector

    def create_request(self, server_node: ServerNode) -> None:
        self.end_point = _docs_url(server_node)
        self._add_params("id", self.document_id)
        if self.change_vector:
            self.headers["If-Match"] = f'"{self.change_vector}"'
