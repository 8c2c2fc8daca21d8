"""
Request execution boundary.

``IRequestExecutor`` is all a query needs: ``execute(command)`` resolves to
the decoded response body or ``None``.  ``HttpRequestExecutor`` is a small
concrete executor over ``httpx.AsyncClient`` that walks the configured
nodes in order; topology discovery and health checks are out of its scope.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import httpx

from .exceptions import AllTopologyNodesDownError, InvalidArgumentError

if TYPE_CHECKING:
    from types import TracebackType

    from .commands.base import RavenCommand

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServerNode:
    """One database server node."""

    url: str
    database: str
    cluster_tag: str | None = None

    def __post_init__(self) -> None:
        if not self.url:
            raise InvalidArgumentError("Server node URL cannot be empty")
        object.__setattr__(self, "url", self.url.rstrip("/"))

    def __str__(self) -> str:
        return f"{self.url} ({self.database})"


@runtime_checkable
class IRequestExecutor(Protocol):
    """Submits a command and resolves to its response body (``None`` = no content)."""

    async def execute(self, command: RavenCommand) -> Any: ...


class HttpRequestExecutor:
    """
    ``IRequestExecutor`` over ``httpx``.

    Nodes are tried in order.  A transport error marks the node failed on
    the command and moves on to the next one; error *responses* are not
    failover material and propagate from ``command.set_response``.

    Usage::

        async with HttpRequestExecutor(["http://localhost:8080"], "Northwind") as ex:
            body = await ex.execute(QueryCommand(index_query))
    """

    def __init__(
        self,
        urls: list[str] | str,
        database: str,
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        urls = [urls] if isinstance(urls, str) else list(urls)
        if not urls:
            raise InvalidArgumentError("At least one server URL is required")
        if not database:
            raise InvalidArgumentError("Database name cannot be empty")
        self.database = database
        self.nodes = [ServerNode(url, database) for url in urls]
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout, headers=headers)

    async def execute(self, command: RavenCommand) -> Any:
        last_error: BaseException | None = None
        for node in self.nodes:
            if command.was_failed_with_node(node):
                continue

            command.create_request(node)
            logger.debug(
                "%s %s via %s", command.method.value, command.path_with_node(node), node
            )
            try:
                response = await self._client.request(**command.to_request_options())
            except httpx.TransportError as e:
                logger.warning("Request to %s failed: %s", node, e)
                command.add_failed_node(node)
                last_error = e
                continue

            return command.set_response(response)

        raise AllTopologyNodesDownError(self.nodes, last_error)

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> HttpRequestExecutor:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()
