"""
DataAPI Expression - Field paths, variables and expression operators

The operator classes (``AddOperator``, ``FilterOperator``, ...) are built
from ``EXPRESSION_OPERATORS`` and exposed on the ``Expression`` namespace
under their snake case names:

    >>> Expression.std_dev_samp(1, 2, 3)
    StdDevSampOperator(expression=(1, 2, 3))
"""
from .errors import InvalidArgumentError
from .interfaces import (
    ExpressionInterface,
    ResolvesToAny,
    ResolvesToArray,
    ResolvesToBinData,
    ResolvesToBool,
    ResolvesToDate,
    ResolvesToDecimal,
    ResolvesToDouble,
    ResolvesToInt,
    ResolvesToLong,
    ResolvesToNull,
    ResolvesToNumber,
    ResolvesToObject,
    ResolvesToObjectId,
    ResolvesToRegex,
    ResolvesToString,
    ResolvesToTimestamp,
)
from .node import (
    ANY,
    ARRAY,
    BIN_DATA,
    BOOL,
    DATE,
    INT,
    JAVASCRIPT,
    NULL,
    NUMBER,
    OBJECT,
    REGEX,
    STRING,
    TIMESTAMP,
    Encode,
    build,
    op,
    optional,
    register,
    required,
    snake_case,
    variadic,
)

SINGLE = Encode.SINGLE
LIST = Encode.ARRAY
OBJ = Encode.OBJECT


class BaseFieldPath(ExpressionInterface):
    """
    Reference to a field of the current document, encoded as ``"$" + path``.

    Args:
        path: Dotted field path, with or without the leading ``$``
    """

    __slots__ = ("path",)

    def __init__(self, path: str):
        if not isinstance(path, str) or not path.lstrip("$"):
            raise InvalidArgumentError(
                f"Expected field path to be a non-empty string, got {type(path).__name__}: {path!r}"
            )
        object.__setattr__(self, "path", path)

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __eq__(self, other) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.path == other.path

    def __hash__(self) -> int:
        return hash((type(self), self.path))

    def __reduce__(self):
        return type(self), (self.path,)

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.path!r})"


class FieldPath(BaseFieldPath, ResolvesToAny):
    """Field path of unknown type, accepted by every expression argument."""

    __slots__ = ()


class Variable(ResolvesToAny):
    """
    Reference to a pipeline variable, encoded as ``"$$" + name``.

    Args:
        name: Variable name, e.g. 'this' or 'ROOT'
    """

    __slots__ = ("name",)

    def __init__(self, name: str):
        if not isinstance(name, str) or not name.lstrip("$"):
            raise InvalidArgumentError(
                f"Expected variable name to be a non-empty string, got {type(name).__name__}: {name!r}"
            )
        object.__setattr__(self, "name", name)

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __eq__(self, other) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash((type(self), self.name))

    def __reduce__(self):
        return type(self), (self.name,)

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __repr__(self) -> str:
        return f"Variable({self.name!r})"


# Typed field paths are only accepted where their capability tag is
class ArrayFieldPath(BaseFieldPath, ResolvesToArray):
    __slots__ = ()


class BinDataFieldPath(BaseFieldPath, ResolvesToBinData):
    __slots__ = ()


class BoolFieldPath(BaseFieldPath, ResolvesToBool):
    __slots__ = ()


class DateFieldPath(BaseFieldPath, ResolvesToDate):
    __slots__ = ()


class DecimalFieldPath(BaseFieldPath, ResolvesToDecimal):
    __slots__ = ()


class DoubleFieldPath(BaseFieldPath, ResolvesToDouble):
    __slots__ = ()


class IntFieldPath(BaseFieldPath, ResolvesToInt):
    __slots__ = ()


class LongFieldPath(BaseFieldPath, ResolvesToLong):
    __slots__ = ()


class NullFieldPath(BaseFieldPath, ResolvesToNull):
    __slots__ = ()


class NumberFieldPath(BaseFieldPath, ResolvesToNumber):
    __slots__ = ()


class ObjectFieldPath(BaseFieldPath, ResolvesToObject):
    __slots__ = ()


class ObjectIdFieldPath(BaseFieldPath, ResolvesToObjectId):
    __slots__ = ()


class RegexFieldPath(BaseFieldPath, ResolvesToRegex):
    __slots__ = ()


class StringFieldPath(BaseFieldPath, ResolvesToString):
    __slots__ = ()


class TimestampFieldPath(BaseFieldPath, ResolvesToTimestamp):
    __slots__ = ()


TYPED_FIELD_PATHS = (
    ArrayFieldPath,
    BinDataFieldPath,
    BoolFieldPath,
    DateFieldPath,
    DecimalFieldPath,
    DoubleFieldPath,
    IntFieldPath,
    LongFieldPath,
    NullFieldPath,
    NumberFieldPath,
    ObjectFieldPath,
    ObjectIdFieldPath,
    RegexFieldPath,
    StringFieldPath,
    TimestampFieldPath,
)


def _date_part(name):
    return op(name, OBJ, ResolvesToInt, required("date", DATE), optional("timezone", STRING))


def _trig(name):
    return op(name, SINGLE, ResolvesToDouble, required("expression", NUMBER))


def _comparison(name, returns=ResolvesToBool):
    return op(name, LIST, returns, required("expression1", ANY), required("expression2", ANY))


def _conversion(name, returns):
    return op(name, SINGLE, returns, required("expression", ANY))


def _regex(name, returns):
    return op(
        name,
        OBJ,
        returns,
        required("input", STRING),
        required("regex", REGEX, STRING),
        optional("options", STRING),
    )


def _trim(name):
    return op(name, OBJ, ResolvesToString, required("input", STRING), optional("chars", STRING))


def _replace(name):
    return op(
        name,
        OBJ,
        ResolvesToString,
        required("input", STRING, NULL),
        required("find", STRING, NULL),
        required("replacement", STRING, NULL),
    )


def _index_of(name):
    return op(
        name,
        LIST,
        ResolvesToInt,
        required("string", STRING),
        required("substring", STRING),
        optional("start", INT),
        optional("end", INT),
    )


def _substring(name):
    return op(
        name,
        LIST,
        ResolvesToString,
        required("string", STRING),
        required("start", INT),
        required("length", INT),
    )


def _date_arithmetic(name):
    return op(
        name,
        OBJ,
        ResolvesToDate,
        required("startDate", DATE),
        required("unit", STRING),
        required("amount", INT),
        optional("timezone", STRING),
    )


EXPRESSION_OPERATORS = (
    op("$abs", SINGLE, ResolvesToNumber, required("value", NUMBER)),
    _trig("$acos"),
    _trig("$acosh"),
    op("$add", SINGLE, (ResolvesToNumber, ResolvesToDate), variadic("expression", NUMBER, DATE)),
    op("$allElementsTrue", LIST, ResolvesToBool, required("expression", ARRAY)),
    op("$and", SINGLE, ResolvesToBool, variadic("expression", ANY)),
    op("$anyElementTrue", LIST, ResolvesToBool, required("expression", ARRAY)),
    op("$arrayElemAt", LIST, ResolvesToAny, required("array", ARRAY), required("idx", INT)),
    op("$arrayToObject", SINGLE, ResolvesToObject, required("array", ARRAY)),
    _trig("$asin"),
    _trig("$asinh"),
    _trig("$atan"),
    op("$atan2", LIST, ResolvesToDouble, required("y", NUMBER), required("x", NUMBER)),
    _trig("$atanh"),
    op("$avg", SINGLE, ResolvesToDouble, variadic("expression", NUMBER)),
    op("$binarySize", SINGLE, ResolvesToInt, required("expression", STRING, BIN_DATA, NULL)),
    op("$bitAnd", SINGLE, (ResolvesToInt, ResolvesToLong), variadic("expression", INT)),
    op("$bitNot", SINGLE, (ResolvesToInt, ResolvesToLong), required("expression", INT)),
    op("$bitOr", SINGLE, (ResolvesToInt, ResolvesToLong), variadic("expression", INT)),
    op("$bitXor", SINGLE, (ResolvesToInt, ResolvesToLong), variadic("expression", INT)),
    op("$bsonSize", SINGLE, ResolvesToInt, required("object", OBJECT, NULL)),
    op("$ceil", SINGLE, ResolvesToInt, required("expression", NUMBER)),
    _comparison("$cmp", ResolvesToInt),
    op("$concat", SINGLE, ResolvesToString, variadic("expression", STRING)),
    op("$concatArrays", SINGLE, ResolvesToArray, variadic("array", ARRAY)),
    op(
        "$cond",
        OBJ,
        ResolvesToAny,
        required("if", BOOL),
        required("then", ANY),
        required("else", ANY),
    ),
    op(
        "$convert",
        OBJ,
        ResolvesToAny,
        required("input", ANY),
        required("to", STRING, INT),
        optional("onError", ANY),
        optional("onNull", ANY),
    ),
    _trig("$cos"),
    _trig("$cosh"),
    _date_arithmetic("$dateAdd"),
    op(
        "$dateDiff",
        OBJ,
        ResolvesToInt,
        required("startDate", DATE),
        required("endDate", DATE),
        required("unit", STRING),
        optional("timezone", STRING),
        optional("startOfWeek", STRING),
    ),
    op(
        "$dateFromParts",
        OBJ,
        ResolvesToDate,
        optional("year", NUMBER),
        optional("isoWeekYear", NUMBER),
        optional("month", NUMBER),
        optional("isoWeek", NUMBER),
        optional("day", NUMBER),
        optional("isoDayOfWeek", NUMBER),
        optional("hour", NUMBER),
        optional("minute", NUMBER),
        optional("second", NUMBER),
        optional("millisecond", NUMBER),
        optional("timezone", STRING),
    ),
    op(
        "$dateFromString",
        OBJ,
        ResolvesToDate,
        required("dateString", STRING),
        optional("format", STRING),
        optional("timezone", STRING),
        optional("onError", ANY),
        optional("onNull", ANY),
    ),
    _date_arithmetic("$dateSubtract"),
    op(
        "$dateToParts",
        OBJ,
        ResolvesToObject,
        required("date", DATE),
        optional("timezone", STRING),
        optional("iso8601", BOOL),
    ),
    op(
        "$dateToString",
        OBJ,
        ResolvesToString,
        required("date", DATE),
        optional("format", STRING),
        optional("timezone", STRING),
        optional("onNull", ANY),
    ),
    op(
        "$dateTrunc",
        OBJ,
        ResolvesToDate,
        required("date", DATE),
        required("unit", STRING),
        optional("binSize", NUMBER),
        optional("timezone", STRING),
        optional("startOfWeek", STRING),
    ),
    _date_part("$dayOfMonth"),
    _date_part("$dayOfWeek"),
    _date_part("$dayOfYear"),
    _trig("$degreesToRadians"),
    op("$divide", LIST, ResolvesToDouble, required("dividend", NUMBER), required("divisor", NUMBER)),
    _comparison("$eq"),
    op("$exp", SINGLE, ResolvesToDouble, required("exponent", NUMBER)),
    op(
        "$filter",
        OBJ,
        ResolvesToArray,
        required("input", ARRAY),
        required("cond", BOOL),
        optional("as", STRING),
        optional("limit", INT),
    ),
    op("$first", SINGLE, ResolvesToAny, required("expression", ARRAY)),
    op("$firstN", OBJ, ResolvesToArray, required("n", INT), required("input", ARRAY)),
    op("$floor", SINGLE, ResolvesToInt, required("expression", NUMBER)),
    op(
        "$function",
        OBJ,
        ResolvesToAny,
        required("body", JAVASCRIPT),
        required("args", ARRAY),
        required("lang", STRING),
    ),
    op("$getField", OBJ, ResolvesToAny, required("field", STRING), optional("input", ANY)),
    _comparison("$gt"),
    _comparison("$gte"),
    _date_part("$hour"),
    op("$ifNull", SINGLE, ResolvesToAny, variadic("expression", ANY, min_items=2)),
    op("$in", LIST, ResolvesToBool, required("expression", ANY), required("array", ARRAY)),
    op(
        "$indexOfArray",
        LIST,
        ResolvesToInt,
        required("array", ARRAY),
        required("search", ANY),
        optional("start", INT),
        optional("end", INT),
    ),
    _index_of("$indexOfBytes"),
    _index_of("$indexOfCP"),
    op("$isArray", LIST, ResolvesToBool, required("expression", ANY)),
    _date_part("$isoDayOfWeek"),
    _date_part("$isoWeek"),
    _date_part("$isoWeekYear"),
    op("$isNumber", SINGLE, ResolvesToBool, required("expression", ANY)),
    op("$last", SINGLE, ResolvesToAny, required("expression", ARRAY)),
    op("$lastN", OBJ, ResolvesToArray, required("n", INT), required("input", ARRAY)),
    op("$let", OBJ, ResolvesToAny, required("vars", OBJECT), required("in", ANY)),
    op("$literal", SINGLE, ResolvesToAny, required("value", ANY)),
    op("$ln", SINGLE, ResolvesToDouble, required("number", NUMBER)),
    op("$log", LIST, ResolvesToDouble, required("number", NUMBER), required("base", NUMBER)),
    op("$log10", SINGLE, ResolvesToDouble, required("number", NUMBER)),
    _comparison("$lt"),
    _comparison("$lte"),
    _trim("$ltrim"),
    op(
        "$map",
        OBJ,
        ResolvesToArray,
        required("input", ARRAY),
        optional("as", STRING),
        required("in", ANY),
        signature=("input", "in", "as"),
    ),
    op("$max", SINGLE, ResolvesToAny, variadic("expression", ANY)),
    op("$maxN", OBJ, ResolvesToArray, required("input", ARRAY), required("n", INT)),
    op("$median", OBJ, ResolvesToDouble, required("input", NUMBER, ARRAY), required("method", STRING)),
    op("$mergeObjects", SINGLE, ResolvesToObject, variadic("document", OBJECT)),
    op("$meta", SINGLE, ResolvesToAny, required("keyword", STRING)),
    _date_part("$millisecond"),
    op("$min", SINGLE, ResolvesToAny, variadic("expression", ANY)),
    op("$minN", OBJ, ResolvesToArray, required("input", ARRAY), required("n", INT)),
    _date_part("$minute"),
    op("$mod", LIST, ResolvesToNumber, required("dividend", NUMBER), required("divisor", NUMBER)),
    _date_part("$month"),
    op("$multiply", SINGLE, ResolvesToNumber, variadic("expression", NUMBER)),
    _comparison("$ne"),
    op("$not", LIST, ResolvesToBool, required("expression", ANY)),
    op("$objectToArray", SINGLE, ResolvesToArray, required("object", OBJECT)),
    op("$or", SINGLE, ResolvesToBool, variadic("expression", ANY)),
    op(
        "$percentile",
        OBJ,
        ResolvesToArray,
        required("input", NUMBER, ARRAY),
        required("p", ARRAY),
        required("method", STRING),
    ),
    op("$pow", LIST, ResolvesToNumber, required("number", NUMBER), required("exponent", NUMBER)),
    _trig("$radiansToDegrees"),
    op("$rand", OBJ, ResolvesToDouble),
    op(
        "$range",
        LIST,
        ResolvesToArray,
        required("start", INT),
        required("end", INT),
        optional("step", INT),
    ),
    op(
        "$reduce",
        OBJ,
        ResolvesToAny,
        required("input", ARRAY),
        required("initialValue", ANY),
        required("in", ANY),
    ),
    _regex("$regexFind", ResolvesToObject),
    _regex("$regexFindAll", ResolvesToArray),
    _regex("$regexMatch", ResolvesToBool),
    _replace("$replaceAll"),
    _replace("$replaceOne"),
    op("$reverseArray", SINGLE, ResolvesToArray, required("expression", ARRAY)),
    op("$round", LIST, ResolvesToNumber, required("number", NUMBER), optional("place", INT)),
    _trim("$rtrim"),
    _date_part("$second"),
    op(
        "$setDifference",
        LIST,
        ResolvesToArray,
        required("expression1", ARRAY),
        required("expression2", ARRAY),
    ),
    op("$setEquals", SINGLE, ResolvesToBool, variadic("expression", ARRAY)),
    op(
        "$setField",
        OBJ,
        ResolvesToObject,
        required("field", STRING),
        required("input", OBJECT),
        required("value", ANY),
    ),
    op("$setIntersection", SINGLE, ResolvesToArray, variadic("expression", ARRAY)),
    op(
        "$setIsSubset",
        LIST,
        ResolvesToBool,
        required("expression1", ARRAY),
        required("expression2", ARRAY),
    ),
    op("$setUnion", SINGLE, ResolvesToArray, variadic("expression", ARRAY)),
    _trig("$sin"),
    _trig("$sinh"),
    op("$size", SINGLE, ResolvesToInt, required("expression", ARRAY)),
    op(
        "$slice",
        LIST,
        ResolvesToArray,
        required("expression", ARRAY),
        optional("position", INT),
        required("n", INT),
        signature=("expression", "n", "position"),
    ),
    op("$sortArray", OBJ, ResolvesToArray, required("input", ARRAY), required("sortBy", OBJECT, INT)),
    op("$split", LIST, ResolvesToArray, required("string", STRING), required("delimiter", STRING)),
    op("$sqrt", SINGLE, ResolvesToDouble, required("number", NUMBER)),
    op("$stdDevPop", SINGLE, ResolvesToDouble, variadic("expression", NUMBER)),
    op("$stdDevSamp", SINGLE, ResolvesToDouble, variadic("expression", NUMBER)),
    _comparison("$strcasecmp", ResolvesToInt),
    op("$strLenBytes", SINGLE, ResolvesToInt, required("expression", STRING)),
    op("$strLenCP", SINGLE, ResolvesToInt, required("expression", STRING)),
    _substring("$substr"),
    _substring("$substrBytes"),
    _substring("$substrCP"),
    op(
        "$subtract",
        LIST,
        (ResolvesToNumber, ResolvesToDate),
        required("expression1", NUMBER, DATE),
        required("expression2", NUMBER, DATE),
    ),
    op("$sum", SINGLE, ResolvesToNumber, variadic("expression", NUMBER, ARRAY)),
    op("$switch", OBJ, ResolvesToAny, required("branches", ARRAY), optional("default", ANY)),
    _trig("$tan"),
    _trig("$tanh"),
    _conversion("$toBool", ResolvesToBool),
    _conversion("$toDate", ResolvesToDate),
    _conversion("$toDecimal", ResolvesToDecimal),
    _conversion("$toDouble", ResolvesToDouble),
    op("$toHashedIndexKey", SINGLE, ResolvesToLong, required("value", ANY)),
    _conversion("$toInt", ResolvesToInt),
    _conversion("$toLong", ResolvesToLong),
    op("$toLower", SINGLE, ResolvesToString, required("expression", STRING)),
    _conversion("$toObjectId", ResolvesToObjectId),
    _conversion("$toString", ResolvesToString),
    op("$toUpper", SINGLE, ResolvesToString, required("expression", STRING)),
    _trim("$trim"),
    op("$trunc", LIST, ResolvesToNumber, required("number", NUMBER), optional("place", INT)),
    op("$tsIncrement", SINGLE, ResolvesToLong, required("expression", TIMESTAMP)),
    op("$tsSecond", SINGLE, ResolvesToLong, required("expression", TIMESTAMP)),
    _conversion("$type", ResolvesToString),
    op("$unsetField", OBJ, ResolvesToObject, required("field", STRING), required("input", OBJECT)),
    _date_part("$week"),
    _date_part("$year"),
    op(
        "$zip",
        OBJ,
        ResolvesToArray,
        required("inputs", ARRAY),
        optional("useLongestLength", BOOL),
        optional("defaults", ARRAY),
    ),
)

OPERATORS = build(
    EXPRESSION_OPERATORS,
    "Operator",
    ExpressionInterface,
    __name__,
    "Builder for the ``{name}`` expression operator.\n\n"
    "See https://www.mongodb.com/docs/manual/reference/operator/aggregation/{bare}/",
)
globals().update(OPERATORS)


class Expression:
    """
    Factories for aggregation expressions.

    Every expression operator is available under its snake case name, with a
    trailing underscore for Python keywords and for ``min``, ``max``,
    ``all`` and ``type``.

    Example:
        >>> Expression.add(Expression.number_field_path('price'), 10)
        >>> Expression.cond(if_=Expression.gt(Expression.field_path('qty'), 250), then=30, else_=20)
    """

    @staticmethod
    def field_path(path: str) -> FieldPath:
        """
        Reference a field of the current document.

        Args:
            path: Dotted field path, e.g. 'address.city'

        Example:
            >>> Expression.field_path('address.city')
            FieldPath('address.city')
        """
        return FieldPath(path)

    @staticmethod
    def variable(name: str) -> Variable:
        """
        Reference a user-defined or system variable.

        Example:
            >>> Expression.variable('this')
            Variable('this')
        """
        return Variable(name)


for _cls in TYPED_FIELD_PATHS:
    # ArrayFieldPath -> Expression.array_field_path
    setattr(Expression, snake_case(_cls.__name__), _cls)

register(Expression, OPERATORS)
