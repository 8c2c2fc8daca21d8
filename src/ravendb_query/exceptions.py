"""
Exception hierarchy for ravendb-query.

All exceptions inherit from ``RavenQueryError`` and provide ``to_dict()``
for API-friendly error responses.  Server responses are mapped onto the
hierarchy by :func:`raise_for_response`.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import httpx


class RavenQueryError(Exception):
    """Root exception for the entire ravendb-query package."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": str(self),
        }


class InvalidArgumentError(RavenQueryError, ValueError):
    """Raised when a caller passes a value the query surface cannot bind."""


class InvalidOperationError(RavenQueryError):
    """Raised when an operation is not valid for the current result set.

    Usage: ``single()`` raises this when the query matches zero or more
    than one document.
    """


class QueryBuilderError(RavenQueryError):
    """Raised on malformed builder usage.

    Unbalanced subclauses, mixing a raw query with clause methods, or a
    connector/modifier with no clause to apply to.
    """


class ConversionError(RavenQueryError):
    """Raised when a raw document cannot be converted to its target type."""


class ErrorResponseError(RavenQueryError):
    """Raised when the server answers with an error.

    Carries the HTTP status code and the decoded error body when available.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: Any = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.body = body
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "status_code": self.status_code,
        }


class IndexStaleError(ErrorResponseError):
    """Raised when an index is still stale after the requested wait timeout."""


class IndexDoesNotExistError(ErrorResponseError):
    """Raised when the queried index does not exist."""


class DatabaseDoesNotExistError(ErrorResponseError):
    """Raised when the target database does not exist."""


class InvalidQueryError(ErrorResponseError):
    """Raised when the server rejects the rendered query."""


class ConcurrencyError(ErrorResponseError):
    """Raised on a server-side optimistic concurrency conflict."""


class AuthorizationError(ErrorResponseError):
    """Raised when the server refuses the request for lack of rights."""


class AllTopologyNodesDownError(RavenQueryError):
    """Failed to execute a command on every known node.

    Carries the nodes that were tried and the last transport error.
    """

    def __init__(self, nodes: list[Any], last_error: BaseException | None = None) -> None:
        self.nodes = nodes
        self.last_error = last_error
        msg = f"Tried to send request to all {len(nodes)} node(s), all failed"
        if last_error is not None:
            msg += f" - last error: {last_error}"
        super().__init__(msg)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "ALL_TOPOLOGY_NODES_DOWN",
            "message": str(self),
            "nodes": [str(node) for node in self.nodes],
        }


# ── Server response mapping ──────────────────────────────────────────

# Server exception type (last dotted segment of "Type") -> local class
_ERROR_CLASS_MAP: dict[str, type[ErrorResponseError]] = {
    "IndexDoesNotExistException": IndexDoesNotExistError,
    "DatabaseDoesNotExistException": DatabaseDoesNotExistError,
    "InvalidQueryException": InvalidQueryError,
    "ConcurrencyException": ConcurrencyError,
    "AuthorizationException": AuthorizationError,
}

_STATUS_CLASS_MAP: dict[int, type[ErrorResponseError]] = {
    401: AuthorizationError,
    403: AuthorizationError,
    409: ConcurrencyError,
}

_TYPE_SUFFIX_REGEX = re.compile(r"([A-Za-z]+Exception)$")


def error_from_response(response: httpx.Response) -> ErrorResponseError | None:
    """Build a typed exception for an error response, ``None`` for success."""
    status = response.status_code
    if status < 400:
        return None

    body: Any = None
    if response.content:
        try:
            body = response.json()
        except ValueError:
            body = response.text

    message = f"HTTP {status}"
    error_class: type[ErrorResponseError] = _STATUS_CLASS_MAP.get(
        status, ErrorResponseError
    )
    if isinstance(body, dict):
        message = body.get("Message") or body.get("Error") or message
        match = _TYPE_SUFFIX_REGEX.search(str(body.get("Type") or ""))
        if match:
            error_class = _ERROR_CLASS_MAP.get(match.group(1), error_class)
    elif isinstance(body, str) and body:
        message = f"{message}: {body}"

    return error_class(message, status_code=status, body=body)


def raise_for_response(response: httpx.Response) -> None:
    """Raise the typed exception matching an error response, if any."""
    error = error_from_response(response)
    if error is not None:
        raise error
