"""
DataAPI Query - Query operators for $match filters
"""
from .interfaces import QueryInterface
from .node import (
    ANY,
    ARRAY,
    BIN_DATA,
    BOOL,
    INT,
    JAVASCRIPT,
    NUMBER,
    OBJECT,
    QUERY,
    REGEX,
    STRING,
    Encode,
    Operator,
    build,
    op,
    optional,
    register,
    required,
    variadic,
)

SINGLE = Encode.SINGLE
LIST = Encode.ARRAY
OBJ = Encode.OBJECT


class LogicalQuery(Operator, QueryInterface):
    """
    Base of ``$and``, ``$or`` and ``$nor``.

    Each query is a mapping of field names to a value, a query operator or
    a list of query operators. A list is merged into a single document when
    encoded, so ``{'price': [Query.gt(10), Query.lt(100)]}`` becomes
    ``{'price': {'$gt': 10, '$lt': 100}}``.
    """

    ENCODE = Encode.SINGLE
    PARAMS = (variadic("query", QUERY),)


class AndQuery(LogicalQuery):
    NAME = "$and"


class OrQuery(LogicalQuery):
    NAME = "$or"


class NorQuery(LogicalQuery):
    NAME = "$nor"


def _comparison(name):
    return op(name, SINGLE, None, required("value", ANY))


def _bits(name):
    return op(name, SINGLE, None, required("bitmask", INT, BIN_DATA, ARRAY))


def _shape(name):
    return op(name, SINGLE, None, required("value", ARRAY))


def _near(name):
    return op(
        name,
        OBJ,
        None,
        required("$geometry", OBJECT),
        optional("$maxDistance", NUMBER),
        optional("$minDistance", NUMBER),
    )


QUERY_OPERATORS = (
    op("$all", SINGLE, None, variadic("value", ANY)),
    _bits("$bitsAllClear"),
    _bits("$bitsAllSet"),
    _bits("$bitsAnyClear"),
    _bits("$bitsAnySet"),
    _shape("$box"),
    _shape("$center"),
    _shape("$centerSphere"),
    op("$comment", SINGLE, None, required("comment", STRING)),
    op("$elemMatch", SINGLE, None, required("query", QUERY)),
    _comparison("$eq"),
    op("$exists", SINGLE, None, required("exists", BOOL)),
    op("$expr", SINGLE, None, required("expression", ANY)),
    op(
        "$geometry",
        OBJ,
        None,
        required("type", STRING),
        required("coordinates", ARRAY),
        optional("crs", OBJECT),
    ),
    op("$geoIntersects", SINGLE, None, required("geometry", OBJECT, QUERY)),
    op("$geoWithin", SINGLE, None, required("geometry", OBJECT, QUERY)),
    _comparison("$gt"),
    _comparison("$gte"),
    op("$in", SINGLE, None, required("value", ARRAY)),
    op("$jsonSchema", SINGLE, None, required("schema", OBJECT)),
    _comparison("$lt"),
    _comparison("$lte"),
    op("$maxDistance", SINGLE, None, required("value", NUMBER)),
    op("$minDistance", SINGLE, None, required("value", NUMBER)),
    op("$mod", LIST, None, required("divisor", NUMBER), required("remainder", NUMBER)),
    _comparison("$ne"),
    _near("$near"),
    _near("$nearSphere"),
    op("$nin", SINGLE, None, required("value", ARRAY)),
    op("$not", SINGLE, None, required("expression", QUERY, REGEX)),
    _shape("$polygon"),
    op("$regex", SINGLE, None, required("regex", REGEX)),
    op("$sampleRate", SINGLE, None, required("rate", NUMBER)),
    op("$size", SINGLE, None, required("value", INT)),
    op(
        "$text",
        OBJ,
        None,
        required("$search", STRING),
        optional("$language", STRING),
        optional("$caseSensitive", BOOL),
        optional("$diacriticSensitive", BOOL),
    ),
    op("$type", SINGLE, None, variadic("type", INT, STRING)),
    op("$where", SINGLE, None, required("function", JAVASCRIPT)),
)

OPERATORS = build(
    QUERY_OPERATORS,
    "Query",
    QueryInterface,
    __name__,
    "Builder for the ``{name}`` query operator.\n\n"
    "See https://www.mongodb.com/docs/manual/reference/operator/query/{bare}/",
)
globals().update(OPERATORS)


class Query:
    """
    Factories for query operators.

    Operators are placed under a field name in a plain mapping; logical
    operators take such mappings.

    Example:
        >>> Stage.match(Query.or_(
        ...     {'price': [Query.gt(10), Query.lt(100)]},
        ...     {'status': Query.eq('A')},
        ... ))
    """

    and_ = AndQuery
    or_ = OrQuery
    nor = NorQuery


register(Query, OPERATORS)
