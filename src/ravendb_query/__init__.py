from .builder import QueryBuilder
from .commands import GetDocumentCommand, PutDocumentCommand, QueryCommand, RavenCommand
from .conventions import DocumentConventions, DocumentConversionResult
from .exceptions import (
    AllTopologyNodesDownError,
    AuthorizationError,
    ConcurrencyError,
    ConversionError,
    DatabaseDoesNotExistError,
    ErrorResponseError,
    IndexDoesNotExistError,
    IndexStaleError,
    InvalidArgumentError,
    InvalidOperationError,
    InvalidQueryError,
    QueryBuilderError,
    RavenQueryError,
)
from .http import HttpRequestExecutor, IRequestExecutor, ServerNode
from .index_query import DEFAULT_TIMEOUT, IndexQuery, IndexQueryOptions
from .observable import Observable
from .operators import (
    OrderingType,
    QueryOperator,
    RequestMethod,
    SearchOperator,
    SpatialRelation,
    SpatialUnit,
    WhereOperator,
)
from .parameters import QueryParameters
from .query import (
    DocumentQuery,
    DocumentQueryBase,
    DocumentQueryOptions,
    IDocumentQuery,
    IRawDocumentQuery,
    QueryResultsWithStatistics,
    RawDocumentQuery,
)
from .session import DocumentSession, IDocumentSession
from .spatial import (
    CircleCriteria,
    SpatialCriteria,
    WktCriteria,
    contains,
    disjoint,
    intersects,
    relates_to_shape,
    within,
    within_radius,
)
from .where_params import ParametrizedWhereParams, WhereParams

__all__ = [
    # Session / queries
    "DocumentSession",
    "IDocumentSession",
    "DocumentQuery",
    "DocumentQueryBase",
    "DocumentQueryOptions",
    "RawDocumentQuery",
    "IDocumentQuery",
    "IRawDocumentQuery",
    "QueryResultsWithStatistics",
    # Builder
    "QueryBuilder",
    "QueryParameters",
    "WhereParams",
    "ParametrizedWhereParams",
    # Query descriptor
    "IndexQuery",
    "IndexQueryOptions",
    "DEFAULT_TIMEOUT",
    # Operators
    "WhereOperator",
    "QueryOperator",
    "SearchOperator",
    "OrderingType",
    "SpatialUnit",
    "SpatialRelation",
    "RequestMethod",
    # Spatial
    "SpatialCriteria",
    "WktCriteria",
    "CircleCriteria",
    "relates_to_shape",
    "intersects",
    "contains",
    "disjoint",
    "within",
    "within_radius",
    # Commands / transport
    "RavenCommand",
    "QueryCommand",
    "GetDocumentCommand",
    "PutDocumentCommand",
    "IRequestExecutor",
    "HttpRequestExecutor",
    "ServerNode",
    # Conversion / notifications
    "DocumentConventions",
    "DocumentConversionResult",
    "Observable",
    # Exceptions
    "RavenQueryError",
    "InvalidArgumentError",
    "InvalidOperationError",
    "QueryBuilderError",
    "ConversionError",
    "ErrorResponseError",
    "IndexStaleError",
    "IndexDoesNotExistError",
    "DatabaseDoesNotExistError",
    "InvalidQueryError",
    "ConcurrencyError",
    "AuthorizationError",
    "AllTopologyNodesDownError",
]
