"""RawDocumentQuery — caller-written RQL with explicitly named parameters."""

from __future__ import annotations

from typing import Any, TypeVar

from .base import DocumentQueryBase

T = TypeVar("T")


class RawDocumentQuery(DocumentQueryBase[T]):
    """
    Executes RQL verbatim.

    Parameters are bound exactly as given, without the value transforms the
    typed surface applies::

        await (
            session.raw_query("from Products where Price > $min")
            .add_parameter("min", 10)
            .all()
        )
    """

    def raw_query(self, query: str) -> RawDocumentQuery[T]:
        self._builder.raw_query(query)
        return self

    def add_parameter(self, name: str, value: Any) -> RawDocumentQuery[T]:
        self._query_parameters[name] = value
        return self
