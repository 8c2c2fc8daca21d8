"""
IndexQuery — the immutable query descriptor submitted to the server.

``IndexQueryOptions`` holds the staleness-wait settings a query carries;
``IndexQuery`` bundles them with the rendered text, the parameter map and
paging.  Both are frozen pydantic models: a descriptor is produced once by
``get_index_query()`` and never mutated afterwards.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Milliseconds the server waits for a stale index when no timeout is given
DEFAULT_TIMEOUT = 15_000

# "Unbounded" page size
MAX_INT32 = 2**31 - 1


def format_time_span(milliseconds: int) -> str:
    """Render milliseconds as a server TimeSpan string (``[d.]hh:mm:ss[.fff]``)."""
    if milliseconds < 0:
        raise ValueError("TimeSpan cannot be negative")
    seconds, millis = divmod(milliseconds, 1000)
    minutes, seconds = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    days, hours = divmod(hours, 24)

    text = f"{hours:02d}:{minutes:02d}:{seconds:02d}"
    if days:
        text = f"{days}.{text}"
    if millis:
        text += f".{millis:03d}"
    return text


class IndexQueryOptions(BaseModel):
    """Index-freshness wait options consulted by the server, never enforced locally."""

    model_config = ConfigDict(frozen=True)

    cut_off_etag: int | None = None
    wait_for_non_stale_results: bool = False
    wait_for_non_stale_results_as_of_now: bool = False
    wait_for_non_stale_results_timeout: int | None = Field(default=None, ge=0)


class IndexQuery(BaseModel):
    """
    Query text + parameter map + paging + staleness options.

    ``query`` references every filter value by parameter name only; the
    values themselves travel in ``query_parameters``.
    """

    model_config = ConfigDict(frozen=True)

    query: str
    query_parameters: dict[str, Any] = Field(default_factory=dict)
    page_size: int = Field(default=MAX_INT32, ge=0)
    start: int = Field(default=0, ge=0)
    cut_off_etag: int | None = None
    wait_for_non_stale_results: bool = False
    wait_for_non_stale_results_as_of_now: bool = False
    wait_for_non_stale_results_timeout: int | None = Field(default=None, ge=0)

    @classmethod
    def create(
        cls,
        query: str,
        query_parameters: dict[str, Any] | None = None,
        page_size: int | None = None,
        start: int | None = None,
        options: IndexQueryOptions | None = None,
    ) -> IndexQuery:
        """Build a descriptor; ``None`` paging falls back to the defaults."""
        options = options or IndexQueryOptions()
        return cls(
            query=query,
            query_parameters=dict(query_parameters or {}),
            page_size=MAX_INT32 if page_size is None else page_size,
            start=0 if start is None else start,
            cut_off_etag=options.cut_off_etag,
            wait_for_non_stale_results=options.wait_for_non_stale_results,
            wait_for_non_stale_results_as_of_now=options.wait_for_non_stale_results_as_of_now,
            wait_for_non_stale_results_timeout=options.wait_for_non_stale_results_timeout,
        )

    def to_json(self) -> dict[str, Any]:
        """Wire body of the query request; unset optional keys are omitted."""
        body: dict[str, Any] = {
            "Query": self.query,
            "QueryParameters": dict(self.query_parameters),
            "Start": self.start,
            "PageSize": self.page_size,
        }
        if self.wait_for_non_stale_results:
            body["WaitForNonStaleResults"] = True
        if self.wait_for_non_stale_results_as_of_now:
            body["WaitForNonStaleResultsAsOfNow"] = True
        if self.wait_for_non_stale_results_timeout is not None:
            body["WaitForNonStaleResultsTimeout"] = format_time_span(
                self.wait_for_non_stale_results_timeout
            )
        if self.cut_off_etag is not None:
            body["CutoffEtag"] = self.cut_off_etag
        return body
