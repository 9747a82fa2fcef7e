"""
DataAPI Interfaces - Kind markers and capability tags for builder values

Kind markers say where a value may appear (inside an expression, at the top
of a pipeline, in a query filter, in a ``$group``). Capability tags say what
an expression resolves to; constructors use them to reject arguments of the
wrong type before anything is encoded. Neither affects encoding.
"""


class ExpressionInterface:
    """Value usable inside an aggregation expression."""


class StageInterface:
    """Value usable as a top-level pipeline stage."""


class QueryInterface:
    """Value usable inside a query filter."""


class AccumulatorInterface:
    """Value usable as a ``$group`` accumulator or a window operator."""


class ResolvesToAny(ExpressionInterface):
    """Expression whose result type is only known at runtime."""


class ResolvesToBool(ExpressionInterface):
    pass


class ResolvesToNumber(ExpressionInterface):
    pass


class ResolvesToInt(ResolvesToNumber):
    pass


class ResolvesToLong(ResolvesToNumber):
    pass


class ResolvesToDouble(ResolvesToNumber):
    pass


class ResolvesToDecimal(ResolvesToNumber):
    pass


class ResolvesToString(ExpressionInterface):
    pass


class ResolvesToArray(ExpressionInterface):
    pass


class ResolvesToObject(ExpressionInterface):
    pass


class ResolvesToDate(ExpressionInterface):
    pass


class ResolvesToTimestamp(ExpressionInterface):
    pass


class ResolvesToObjectId(ExpressionInterface):
    pass


class ResolvesToBinData(ExpressionInterface):
    pass


class ResolvesToRegex(ExpressionInterface):
    pass


class ResolvesToNull(ExpressionInterface):
    pass
