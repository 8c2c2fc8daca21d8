"""DocumentQueryOptions — settings a query is created with."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..index_query import IndexQueryOptions


class DocumentQueryOptions(BaseModel):
    """
    Options accepted by ``DocumentQuery.create`` / ``RawDocumentQuery.create``.

    Attributes:
        collection: Collection to query (``@all_docs`` when neither this nor
            ``index_name`` is set).
        index_name: Index to query; takes precedence over ``collection``.
        document_type: Target class, or a type name registered with the
            conventions.
        nested_object_types: Field name -> type for nested values.
        with_statistics: Make ``all()`` return results with the response.
        index_query_options: Initial staleness-wait options.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    collection: str | None = None
    index_name: str | None = None
    document_type: Any = None
    nested_object_types: dict[str, Any] = Field(default_factory=dict)
    with_statistics: bool = False
    index_query_options: IndexQueryOptions = Field(default_factory=IndexQueryOptions)
