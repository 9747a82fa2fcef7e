"""
DataAPI Aggregation - Accumulators and window operators
"""
from .expression import (
    AndOperator,
    EqOperator,
    FilterOperator,
    GteOperator,
    GtOperator,
    LteOperator,
    LtOperator,
    NeOperator,
)
from .interfaces import (
    AccumulatorInterface,
    ResolvesToAny,
    ResolvesToArray,
    ResolvesToDouble,
    ResolvesToInt,
    ResolvesToNumber,
    ResolvesToObject,
)
from .node import (
    ANY,
    ARRAY,
    INT,
    JAVASCRIPT,
    NUMBER,
    OBJECT,
    STRING,
    Encode,
    build,
    op,
    optional,
    register,
    required,
)

SINGLE = Encode.SINGLE
LIST = Encode.ARRAY
OBJ = Encode.OBJECT


def _n_of(name, *params):
    return op(name, OBJ, ResolvesToArray, *params)


def _covariance(name):
    return op(name, LIST, ResolvesToDouble, required("expression1", NUMBER), required("expression2", NUMBER))


ACCUMULATORS = (
    op(
        "$accumulator",
        OBJ,
        ResolvesToAny,
        required("init", JAVASCRIPT),
        optional("initArgs", ARRAY),
        required("accumulate", JAVASCRIPT),
        required("accumulateArgs", ARRAY),
        required("merge", JAVASCRIPT),
        optional("finalize", JAVASCRIPT),
        required("lang", STRING),
        signature=("init", "accumulate", "accumulateArgs", "merge", "lang", "initArgs", "finalize"),
    ),
    op("$addToSet", SINGLE, ResolvesToArray, required("expression", ANY)),
    op("$avg", SINGLE, ResolvesToDouble, required("expression", NUMBER)),
    op("$bottom", OBJ, ResolvesToAny, required("sortBy", OBJECT), required("output", ANY)),
    _n_of("$bottomN", required("n", INT), required("sortBy", OBJECT), required("output", ANY)),
    op("$count", OBJ, ResolvesToInt),
    _covariance("$covariancePop"),
    _covariance("$covarianceSamp"),
    op("$denseRank", OBJ, ResolvesToInt),
    op("$derivative", OBJ, ResolvesToDouble, required("input", NUMBER), optional("unit", STRING)),
    op("$documentNumber", OBJ, ResolvesToInt),
    op(
        "$expMovingAvg",
        OBJ,
        ResolvesToDouble,
        required("input", NUMBER),
        optional("N", INT),
        optional("alpha", NUMBER),
    ),
    op("$first", SINGLE, ResolvesToAny, required("expression", ANY)),
    _n_of("$firstN", required("input", ANY), required("n", INT)),
    op("$integral", OBJ, ResolvesToDouble, required("input", NUMBER), optional("unit", STRING)),
    op("$last", SINGLE, ResolvesToAny, required("expression", ANY)),
    _n_of("$lastN", required("input", ANY), required("n", INT)),
    op("$linearFill", SINGLE, ResolvesToNumber, required("expression", NUMBER)),
    op("$locf", SINGLE, ResolvesToAny, required("expression", ANY)),
    op("$max", SINGLE, ResolvesToAny, required("expression", ANY)),
    _n_of("$maxN", required("input", ANY), required("n", INT)),
    op("$median", OBJ, ResolvesToDouble, required("input", NUMBER), required("method", STRING)),
    op("$mergeObjects", SINGLE, ResolvesToObject, required("document", OBJECT)),
    op("$min", SINGLE, ResolvesToAny, required("expression", ANY)),
    _n_of("$minN", required("input", ANY), required("n", INT)),
    op(
        "$percentile",
        OBJ,
        ResolvesToArray,
        required("input", NUMBER),
        required("p", ARRAY),
        required("method", STRING),
    ),
    op("$push", SINGLE, ResolvesToArray, required("expression", ANY)),
    op("$rank", OBJ, ResolvesToInt),
    op("$shift", OBJ, ResolvesToAny, required("output", ANY), required("by", INT), optional("default", ANY)),
    op("$stdDevPop", SINGLE, ResolvesToDouble, required("expression", NUMBER)),
    op("$stdDevSamp", SINGLE, ResolvesToDouble, required("expression", NUMBER)),
    op("$sum", SINGLE, ResolvesToNumber, required("expression", NUMBER)),
    op("$top", OBJ, ResolvesToAny, required("sortBy", OBJECT), required("output", ANY)),
    _n_of("$topN", required("n", INT), required("sortBy", OBJECT), required("output", ANY)),
)

OPERATORS = build(
    ACCUMULATORS,
    "Accumulator",
    AccumulatorInterface,
    __name__,
    "Builder for the ``{name}`` accumulator.\n\n"
    "See https://www.mongodb.com/docs/manual/reference/operator/aggregation/{bare}/",
)
globals().update(OPERATORS)


class Aggregation:
    """
    Factories for ``$group`` accumulators and ``$setWindowFields`` operators.

    The comparison and boolean expression operators most often used next to
    accumulators are available here too (``and_``, ``eq``, ``gt``, ``gte``,
    ``lt``, ``lte``, ``ne``, ``filter``).

    Example:
        >>> Stage.group(
        ...     Expression.field_path('city'),
        ...     avgAge=Aggregation.avg(Expression.field_path('age')),
        ...     total=Aggregation.sum(Expression.field_path('amount')),
        ...     count=Aggregation.count(),
        ... )
    """

    and_ = AndOperator
    eq = EqOperator
    gt = GtOperator
    gte = GteOperator
    lt = LtOperator
    lte = LteOperator
    ne = NeOperator
    filter = FilterOperator


register(Aggregation, OPERATORS)
