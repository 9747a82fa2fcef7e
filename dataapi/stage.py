"""
DataAPI Stage - Aggregation pipeline stages
"""
from .interfaces import StageInterface
from .node import (
    ACCUMULATOR,
    ANY,
    ARRAY,
    BOOL,
    INT,
    NUMBER,
    OBJECT,
    PIPELINE,
    QUERY,
    STRING,
    TIMESTAMP,
    Encode,
    Operator,
    build,
    op,
    optional,
    register,
    required,
    variadic,
    variadic_map,
)

SINGLE = Encode.SINGLE
OBJ = Encode.OBJECT


class GroupStage(Operator, StageInterface):
    """
    Groups input documents by ``_id`` ($group).

    The accumulator fields are encoded next to ``_id`` in the same document:

        >>> GroupStage(Expression.field_path('customer'), total=Aggregation.sum(...))
        {'$group': {'_id': '$customer', 'total': {'$sum': ...}}}

    See https://www.mongodb.com/docs/manual/reference/operator/aggregation/group/
    """

    NAME = "$group"
    ENCODE = Encode.OBJECT
    PARAMS = (
        required("_id", ANY),
        variadic_map("fields", ACCUMULATOR, OBJECT),
    )


class ProjectStage(Operator, StageInterface):
    """
    Includes, excludes or computes fields ($project).

    Specifications are encoded in insertion order. ``0`` or ``False``
    excludes a field, any other value includes or computes it.

    See https://www.mongodb.com/docs/manual/reference/operator/aggregation/project/
    """

    NAME = "$project"
    ENCODE = Encode.OBJECT
    PARAMS = (variadic_map("specifications", ANY, min_items=1),)


def _no_options(name):
    return op(name, OBJ, None)


def _list_sessions(name):
    return op(name, OBJ, None, optional("users", ARRAY), optional("allUsers", BOOL))


STAGES = (
    op("$addFields", SINGLE, None, variadic_map("expression", ANY, min_items=1)),
    op(
        "$bucket",
        OBJ,
        None,
        required("groupBy", ANY),
        required("boundaries", ARRAY),
        optional("default", ANY),
        optional("output", OBJECT),
    ),
    op(
        "$bucketAuto",
        OBJ,
        None,
        required("groupBy", ANY),
        required("buckets", INT),
        optional("output", OBJECT),
        optional("granularity", STRING),
    ),
    op(
        "$changeStream",
        OBJ,
        None,
        optional("allChangesForCluster", BOOL),
        optional("fullDocument", STRING),
        optional("fullDocumentBeforeChange", STRING),
        optional("resumeAfter", OBJECT),
        optional("showExpandedEvents", BOOL),
        optional("startAfter", OBJECT),
        optional("startAtOperationTime", TIMESTAMP),
    ),
    _no_options("$changeStreamSplitLargeEvent"),
    op(
        "$collStats",
        OBJ,
        None,
        optional("latencyStats", OBJECT),
        optional("storageStats", OBJECT),
        optional("count", OBJECT),
        optional("queryExecStats", OBJECT),
    ),
    op("$count", SINGLE, None, required("field", STRING)),
    op(
        "$currentOp",
        OBJ,
        None,
        optional("allUsers", BOOL),
        optional("idleConnections", BOOL),
        optional("idleCursors", BOOL),
        optional("idleSessions", BOOL),
        optional("localOps", BOOL),
    ),
    op(
        "$densify",
        OBJ,
        None,
        required("field", STRING),
        optional("partitionByFields", ARRAY),
        required("range", OBJECT),
        signature=("field", "range", "partitionByFields"),
    ),
    op("$documents", SINGLE, None, required("documents", ARRAY)),
    op("$facet", SINGLE, None, variadic_map("facet", PIPELINE, min_items=1)),
    op(
        "$fill",
        OBJ,
        None,
        optional("partitionBy", OBJECT, STRING),
        optional("partitionByFields", ARRAY),
        optional("sortBy", OBJECT),
        required("output", OBJECT),
        signature=("output", "partitionBy", "partitionByFields", "sortBy"),
    ),
    op(
        "$geoNear",
        OBJ,
        None,
        required("distanceField", STRING),
        optional("distanceMultiplier", NUMBER),
        optional("includeLocs", STRING),
        optional("key", STRING),
        optional("maxDistance", NUMBER),
        optional("minDistance", NUMBER),
        required("near", OBJECT, ARRAY),
        optional("query", QUERY),
        optional("spherical", BOOL),
        signature=(
            "distanceField",
            "near",
            "distanceMultiplier",
            "includeLocs",
            "key",
            "maxDistance",
            "minDistance",
            "query",
            "spherical",
        ),
    ),
    op(
        "$graphLookup",
        OBJ,
        None,
        required("from", STRING),
        required("startWith", ANY),
        required("connectFromField", STRING),
        required("connectToField", STRING),
        required("as", STRING),
        optional("maxDepth", INT),
        optional("depthField", STRING),
        optional("restrictSearchWithMatch", QUERY),
    ),
    _no_options("$indexStats"),
    op("$limit", SINGLE, None, required("limit", INT)),
    _list_sessions("$listLocalSessions"),
    op("$listSampledQueries", OBJ, None, optional("namespace", STRING)),
    op("$listSearchIndexes", OBJ, None, optional("id", STRING), optional("name", STRING)),
    _list_sessions("$listSessions"),
    op(
        "$lookup",
        OBJ,
        None,
        optional("from", STRING),
        optional("localField", STRING),
        optional("foreignField", STRING),
        optional("let", OBJECT),
        optional("pipeline", PIPELINE),
        required("as", STRING),
        signature=("from", "localField", "foreignField", "as", "let", "pipeline"),
    ),
    op("$match", SINGLE, None, required("query", QUERY)),
    op(
        "$merge",
        OBJ,
        None,
        required("into", STRING, OBJECT),
        optional("on", STRING, ARRAY),
        optional("let", OBJECT),
        optional("whenMatched", STRING, PIPELINE),
        optional("whenNotMatched", STRING),
    ),
    op("$out", SINGLE, None, required("coll", STRING, OBJECT)),
    _no_options("$planCacheStats"),
    op("$redact", SINGLE, None, required("expression", ANY)),
    op("$replaceRoot", OBJ, None, required("newRoot", OBJECT)),
    op("$replaceWith", SINGLE, None, required("expression", OBJECT)),
    op("$sample", OBJ, None, required("size", INT)),
    op("$search", SINGLE, None, required("search", OBJECT)),
    op("$searchMeta", SINGLE, None, required("meta", OBJECT)),
    op("$set", SINGLE, None, variadic_map("field", ANY, min_items=1)),
    op(
        "$setWindowFields",
        OBJ,
        None,
        optional("partitionBy", ANY),
        required("sortBy", OBJECT),
        required("output", OBJECT),
        signature=("sortBy", "output", "partitionBy"),
    ),
    _no_options("$shardedDataDistribution"),
    op("$skip", SINGLE, None, required("skip", INT)),
    op("$sort", SINGLE, None, required("sort", OBJECT)),
    op("$sortByCount", SINGLE, None, required("expression", ANY)),
    op("$unionWith", OBJ, None, required("coll", STRING), optional("pipeline", PIPELINE)),
    op("$unset", SINGLE, None, variadic("field", STRING)),
    op(
        "$unwind",
        OBJ,
        None,
        required("path", STRING),
        optional("includeArrayIndex", STRING),
        optional("preserveNullAndEmptyArrays", BOOL),
    ),
    op(
        "$vectorSearch",
        OBJ,
        None,
        required("index", STRING),
        required("path", STRING),
        required("queryVector", ARRAY),
        required("numCandidates", INT),
        required("limit", INT),
        optional("filter", QUERY),
    ),
)

OPERATORS = build(
    STAGES,
    "Stage",
    StageInterface,
    __name__,
    "Builder for the ``{name}`` stage.\n\n"
    "See https://www.mongodb.com/docs/manual/reference/operator/aggregation/{bare}/",
)
globals().update(OPERATORS)


class Stage:
    """
    Factories for pipeline stages.

    Example:
        >>> pipeline = Pipeline(
        ...     Stage.match({'age': {'$gte': 18}}),
        ...     Stage.group(Expression.field_path('city'), count=Aggregation.sum(1)),
        ...     Stage.sort({'count': -1}),
        ...     Stage.limit(10),
        ... )
    """

    group = GroupStage
    project = ProjectStage


register(Stage, OPERATORS)
