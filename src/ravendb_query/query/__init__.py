from ravendb_query.query.base import DocumentQueryBase, QueryCallback, QueryResultsWithStatistics
from ravendb_query.query.document import DocumentQuery
from ravendb_query.query.interfaces import IDocumentQuery, IDocumentQueryBase, IRawDocumentQuery
from ravendb_query.query.options import DocumentQueryOptions
from ravendb_query.query.raw import RawDocumentQuery

__all__ = [
    "DocumentQuery",
    "DocumentQueryBase",
    "DocumentQueryOptions",
    "IDocumentQuery",
    "IDocumentQueryBase",
    "IRawDocumentQuery",
    "QueryCallback",
    "QueryResultsWithStatistics",
    "RawDocumentQuery",
]
