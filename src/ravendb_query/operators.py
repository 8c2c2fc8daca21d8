from enum import Enum


class WhereOperator(str, Enum):
    """Kinds of where-clause tokens the builder renders."""

    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    IN = "in"
    ALL_IN = "all_in"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    BETWEEN = "between"
    GREATER_THAN = "greater_than"
    GREATER_THAN_OR_EQUAL = "greater_than_or_equal"
    LESS_THAN = "less_than"
    LESS_THAN_OR_EQUAL = "less_than_or_equal"
    EXISTS = "exists"
    TRUE = "true"
    SEARCH = "search"
    SPATIAL_WITHIN_RADIUS = "spatial_within_radius"
    SPATIAL = "spatial"


class QueryOperator(str, Enum):
    """Boolean operator placed between adjacent clauses."""

    AND = "and"
    OR = "or"


class SearchOperator(str, Enum):
    """How the terms of a ``search()`` clause are combined."""

    OR = "or"
    AND = "and"


class OrderingType(str, Enum):
    """Type hint for ``order by``; rendered as ``as <type>``."""

    STRING = "string"
    LONG = "long"
    DOUBLE = "double"
    ALPHA_NUMERIC = "alphaNumeric"


class SpatialUnit(str, Enum):
    KILOMETERS = "Kilometers"
    MILES = "Miles"


class SpatialRelation(str, Enum):
    """Relation between an indexed shape and the query shape."""

    WITHIN = "within"
    CONTAINS = "contains"
    DISJOINT = "disjoint"
    INTERSECTS = "intersects"


class RequestMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
