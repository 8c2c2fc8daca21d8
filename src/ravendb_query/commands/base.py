"""
RavenCommand — the unit of work handed to a request executor.

A command knows its HTTP method, endpoint, query-string parameters, JSON
payload and headers, and remembers which nodes it already failed against.
Concrete commands fill in the endpoint in ``create_request`` once the
executor has picked a node.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from ..exceptions import raise_for_response
from ..operators import RequestMethod

if TYPE_CHECKING:
    import httpx

    from ..http import ServerNode

logger = logging.getLogger(__name__)


class RavenCommand(ABC):
    """Base class for every command submitted through ``IRequestExecutor``."""

    def __init__(
        self,
        end_point: str | None = None,
        method: RequestMethod | str = RequestMethod.GET,
        params: dict[str, Any] | None = None,
        payload: Any = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.end_point = end_point
        self.method = RequestMethod(method)
        self.params: dict[str, Any] = dict(params or {})
        self.payload = payload
        self.headers: dict[str, str] = dict(headers or {})
        self._failed_nodes: set[ServerNode] = set()
        self._last_response: httpx.Response | None = None

    @abstractmethod
    def create_request(self, server_node: ServerNode) -> None:
        """Point the command at *server_node* (sets ``end_point`` and friends)."""

    @property
    def server_response(self) -> httpx.Response | None:
        """The last response passed to ``set_response``."""
        return self._last_response

    # -- failed-node bookkeeping -----------------------------------------------

    @property
    def was_failed(self) -> bool:
        return bool(self._failed_nodes)

    def add_failed_node(self, node: ServerNode) -> None:
        self._failed_nodes.add(node)

    def was_failed_with_node(self, node: ServerNode) -> bool:
        return node in self._failed_nodes

    def path_with_node(self, node: ServerNode) -> str:
        """The endpoint relative to the node's base URL."""
        return (self.end_point or "").replace(node.url, "", 1)

    # -- transport -------------------------------------------------------------

    def to_request_options(self) -> dict[str, Any]:
        """
        Keyword arguments for ``httpx.AsyncClient.request``.

        ``params`` and ``json`` are included only when non-empty.
        """
        options: dict[str, Any] = {
            "method": self.method.value,
            "url": self.end_point,
            "headers": dict(self.headers),
        }
        if self.params:
            options["params"] = dict(self.params)
        if self.payload is not None and self.payload != {} and self.payload != []:
            options["json"] = self.payload
        return options

    def set_response(self, response: httpx.Response) -> Any:
        """
        Store and validate *response*, returning its decoded JSON body.

        Raises:
            ErrorResponseError: (or a subclass) for error status codes.
        """
        self._last_response = response
        logger.debug(
            "%s %s answered %d", self.method.value, self.end_point, response.status_code
        )
        raise_for_response(response)
        if not response.content:
            return None
        return response.json()

    # -- parameter helpers -----------------------------------------------------

    def _add_params(self, params: dict[str, Any] | str | None, value: Any = None) -> None:
        if params is None:
            return
        if isinstance(params, str):
            self.params[params] = value
        else:
            self.params.update(params)

    def _remove_params(self, params: list[str] | str, *other_params: str) -> None:
        names = list(params) if isinstance(params, list) else [params, *other_params]
        for name in names:
            self.params.pop(name, None)
