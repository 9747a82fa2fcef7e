"""
DataAPI Node - Generic operator node driven by a parameter table

Every stage, expression operator, accumulator and query operator is a
subclass of ``Operator`` declaring three class attributes:

- ``NAME``: the wire operator token, e.g. ``"$stdDevSamp"``
- ``ENCODE``: how the arguments are laid out (see ``Encode``)
- ``PARAMS``: the ordered parameter table

The catalogs build those subclasses from ``OperatorSpec`` rows with
``build()``. Arguments are bound, type checked and frozen once, in the
constructor; nodes never change afterwards.
"""
import datetime
import enum
import keyword
import re
from collections import namedtuple
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Dict, Iterable, Optional, Tuple

from .errors import InvalidArgumentError
from .interfaces import (
    AccumulatorInterface,
    QueryInterface,
    ResolvesToAny,
    ResolvesToArray,
    ResolvesToBinData,
    ResolvesToBool,
    ResolvesToDate,
    ResolvesToInt,
    ResolvesToLong,
    ResolvesToNull,
    ResolvesToNumber,
    ResolvesToObject,
    ResolvesToObjectId,
    ResolvesToRegex,
    ResolvesToString,
    ResolvesToTimestamp,
    StageInterface,
)
from .pipeline import Pipeline
from .scalars import (
    UNDEFINED,
    Binary,
    Code,
    DatetimeMS,
    Decimal128,
    ObjectId,
    Regex,
    Timestamp,
)


class Encode(str, enum.Enum):
    """Layout of an operator's arguments in its encoded document."""

    # The first argument is the operator value
    SINGLE = "single"
    # Arguments are encoded as a list of values, names are ignored
    ARRAY = "array"
    # Arguments are encoded as a map of names to values
    OBJECT = "object"


# Variadic parameter kinds
LIST = "list"
MAP = "map"

# Argument type names used in the catalogs
ANY = "any"
BOOL = "bool"
NUMBER = "number"
INT = "int"
STRING = "string"
ARRAY = "array"
OBJECT = "object"
DATE = "date"
TIMESTAMP = "timestamp"
OBJECT_ID = "objectId"
BIN_DATA = "binData"
REGEX = "regex"
NULL = "null"
JAVASCRIPT = "javascript"
PIPELINE = "pipeline"
QUERY = "query"
ACCUMULATOR = "accumulator"


def _is_number(value) -> bool:
    return isinstance(value, (int, float, Decimal128)) and not isinstance(value, bool)


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_list(value) -> bool:
    return isinstance(value, (list, tuple))


def _is_stage_list(value) -> bool:
    return _is_list(value) and all(isinstance(item, StageInterface) for item in value)


# name -> (literal check, capability tags, accepts ResolvesToAny)
_TypeRule = namedtuple("_TypeRule", "accepts tags expression")

TYPES: Dict[str, _TypeRule] = {
    ANY: _TypeRule(lambda value: True, (), True),
    BOOL: _TypeRule(lambda value: isinstance(value, bool), (ResolvesToBool,), True),
    NUMBER: _TypeRule(_is_number, (ResolvesToNumber,), True),
    INT: _TypeRule(_is_int, (ResolvesToInt, ResolvesToLong), True),
    STRING: _TypeRule(lambda value: isinstance(value, str), (ResolvesToString,), True),
    ARRAY: _TypeRule(_is_list, (ResolvesToArray,), True),
    OBJECT: _TypeRule(lambda value: isinstance(value, Mapping), (ResolvesToObject,), True),
    DATE: _TypeRule(
        lambda value: isinstance(value, (datetime.datetime, DatetimeMS, ObjectId, Timestamp)),
        (ResolvesToDate, ResolvesToTimestamp, ResolvesToObjectId),
        True,
    ),
    TIMESTAMP: _TypeRule(lambda value: isinstance(value, Timestamp), (ResolvesToTimestamp,), True),
    OBJECT_ID: _TypeRule(lambda value: isinstance(value, ObjectId), (ResolvesToObjectId,), True),
    BIN_DATA: _TypeRule(lambda value: isinstance(value, (Binary, bytes)), (ResolvesToBinData,), True),
    REGEX: _TypeRule(lambda value: isinstance(value, (Regex, re.Pattern)), (ResolvesToRegex,), True),
    NULL: _TypeRule(lambda value: value is None, (ResolvesToNull,), False),
    JAVASCRIPT: _TypeRule(lambda value: isinstance(value, (Code, str)), (), False),
    PIPELINE: _TypeRule(lambda value: isinstance(value, Pipeline) or _is_stage_list(value), (), False),
    QUERY: _TypeRule(lambda value: isinstance(value, Mapping), (QueryInterface,), False),
    ACCUMULATOR: _TypeRule(lambda value: isinstance(value, Mapping), (AccumulatorInterface,), False),
}

# Names that get a trailing underscore as factories and keyword arguments
RESERVED_NAMES = frozenset(["min", "max", "all", "type"])


def snake_case(name: str) -> str:
    """
    Convert a wire name to snake case.

    Example:
        >>> snake_case('$stdDevSamp')
        'std_dev_samp'
    """
    return re.sub(r"(?<=[a-z0-9])([A-Z])", r"_\1", name.lstrip("$")).lower()


def python_name(name: str) -> str:
    """Snake case name that is safe to use as an identifier."""
    converted = snake_case(name)
    if keyword.iskeyword(converted) or converted in RESERVED_NAMES:
        converted += "_"
    return converted


class Param(namedtuple("Param", "name types optional variadic min_items")):
    """
    One operator parameter.

    ``name`` is the wire key. ``variadic`` is ``LIST`` for parameters that
    collect positional arguments and ``MAP`` for parameters that collect
    keyword arguments (or a single mapping).
    """

    __slots__ = ()

    @property
    def argname(self) -> str:
        if self.name.startswith("_"):
            return self.name
        return python_name(self.name)


def required(name: str, *types: str) -> Param:
    return Param(name, types, False, None, 0)


def optional(name: str, *types: str) -> Param:
    return Param(name, types, True, None, 0)


def variadic(name: str, *types: str, min_items: int = 1) -> Param:
    return Param(name, types, False, LIST, min_items)


def variadic_map(name: str, *types: str, min_items: int = 0) -> Param:
    return Param(name, types, False, MAP, min_items)


OperatorSpec = namedtuple("OperatorSpec", "name encode returns params signature")


def op(name: str, encode: Encode, returns, *params: Param, signature=None) -> OperatorSpec:
    """
    Declare a catalog row.

    Args:
        name: Wire operator token
        encode: Argument layout
        returns: Capability tag (or tuple of tags, or None)
        *params: Parameters in declaration (and encoding) order
        signature: Positional order of the fixed parameters, when it differs
            from the declaration order
    """
    if returns is None:
        returns = ()
    elif not isinstance(returns, tuple):
        returns = (returns,)
    return OperatorSpec(name, encode, returns, params, signature)


def freeze(value):
    """Return an immutable deep copy of mappings and lists in ``value``."""
    if isinstance(value, Mapping):
        return MappingProxyType({key: freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(item) for item in value)
    return value


def thaw(value):
    """Reverse ``freeze``: plain dicts for mappings, tuples kept as they are."""
    if isinstance(value, Mapping):
        return {key: thaw(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return tuple(thaw(item) for item in value)
    return value


def _restore(cls, arguments):
    """Rebuild a node from already bound arguments (used by pickle)."""
    node = cls.__new__(cls)
    object.__setattr__(
        node,
        "_arguments",
        MappingProxyType({name: freeze(value) for name, value in arguments.items()}),
    )
    return node


def _accepts(type_name: str, value) -> bool:
    rule = TYPES[type_name]
    if rule.accepts(value):
        return True
    if rule.tags and isinstance(value, rule.tags):
        return True
    return rule.expression and isinstance(value, ResolvesToAny)


def _check(owner: str, param: Param, value) -> None:
    if any(_accepts(type_name, value) for type_name in param.types):
        return
    if ARRAY in param.types and OBJECT not in param.types and isinstance(value, Mapping):
        raise InvalidArgumentError.not_a_list(owner, param.argname, value)
    raise InvalidArgumentError.invalid_type(owner, param.argname, param.types, value)


def _normalize(param: Param, value):
    if PIPELINE in param.types and not isinstance(value, Pipeline) and _is_stage_list(value):
        return Pipeline(*value)
    return freeze(value)


def bind(cls, args: Tuple, kwargs: Dict[str, Any]) -> Dict[str, Any]:
    """
    Bind constructor arguments to the parameters of ``cls``.

    Returns:
        Frozen argument values keyed by wire name, in declaration order.
        Absent optional parameters are set to ``UNDEFINED``.

    Raises:
        InvalidArgumentError: On any type, arity or shape violation
    """
    owner = cls.NAME or cls.__name__
    params = cls.PARAMS
    rest = next((param for param in params if param.variadic), None)

    if rest is not None and rest.variadic == LIST:
        if kwargs:
            raise InvalidArgumentError(
                f"Expected '{rest.argname}' arguments of {owner} to be a list, "
                "named arguments are not supported"
            )
        if len(args) < rest.min_items:
            raise InvalidArgumentError.too_few(owner, rest.argname, rest.min_items, len(args))
        for item in args:
            _check(owner, rest, item)
        return {rest.name: tuple(_normalize(rest, item) for item in args)}

    fixed = {}
    for param in params:
        if not param.variadic:
            fixed[param.name] = param
            fixed[param.argname] = param
    order = [fixed[name] for name in cls.SIGNATURE] if cls.SIGNATURE else [
        param for param in params if not param.variadic
    ]

    values = {}
    for param, value in zip(order, args):
        values[param.name] = value

    extra = {}
    surplus = args[len(order):]
    if surplus:
        if rest is None or len(surplus) > 1 or not isinstance(surplus[0], Mapping):
            raise InvalidArgumentError(
                f"{owner} takes at most {len(order)} positional arguments, got {len(args)}"
            )
        for key, value in surplus[0].items():
            if key in fixed:
                raise InvalidArgumentError(
                    f"Field '{key}' of {owner} conflicts with the '{fixed[key].argname}' argument"
                )
            extra[key] = value

    for key, value in kwargs.items():
        param = fixed.get(key)
        if param is not None:
            if param.name in values:
                raise InvalidArgumentError(
                    f"{owner} got multiple values for argument '{param.argname}'"
                )
            values[param.name] = value
        elif rest is not None:
            if key in extra:
                raise InvalidArgumentError(f"{owner} got multiple values for field '{key}'")
            extra[key] = value
        else:
            raise InvalidArgumentError(f"{owner} got an unexpected argument '{key}'")

    bound = {}
    for param in params:
        if param.variadic == MAP:
            if len(extra) < param.min_items:
                raise InvalidArgumentError.too_few(owner, param.argname, param.min_items, len(extra))
            fields = {}
            for key, value in extra.items():
                if not isinstance(key, str):
                    raise InvalidArgumentError(
                        f"Expected field names of {owner} to be strings, got {type(key).__name__}: {key!r}"
                    )
                if value is not UNDEFINED:
                    _check(owner, param, value)
                fields[key] = _normalize(param, value)
            bound[param.name] = MappingProxyType(fields)
            continue

        value = values.get(param.name, UNDEFINED)
        if value is UNDEFINED:
            if not param.optional:
                raise InvalidArgumentError(f"Missing required argument '{param.argname}' of {owner}")
            bound[param.name] = UNDEFINED
            continue
        _check(owner, param, value)
        bound[param.name] = _normalize(param, value)

    if cls.ENCODE == Encode.ARRAY:
        # Array operands are positional: a gap would shift later values
        missing = None
        for param in params:
            if bound.get(param.name, UNDEFINED) is UNDEFINED:
                missing = missing or param
            elif missing is not None:
                raise InvalidArgumentError(
                    f"{owner} needs '{missing.argname}' when '{param.argname}' is given"
                )

    return bound


class Operator:
    """
    Base class of every operator node.

    Arguments are available through ``arguments`` (keyed by wire name, in
    declaration order) and as attributes under either their wire name or
    their Python name.
    """

    NAME: Optional[str] = None
    ENCODE: Optional[Encode] = None
    PARAMS: Tuple[Param, ...] = ()
    SIGNATURE: Optional[Tuple[str, ...]] = None

    def __init__(self, *args, **kwargs):
        object.__setattr__(self, "_arguments", MappingProxyType(bind(type(self), args, kwargs)))

    @property
    def arguments(self) -> Mapping:
        return self._arguments

    def __getattr__(self, name):
        try:
            arguments = object.__getattribute__(self, "_arguments")
        except AttributeError:
            raise AttributeError(name) from None
        for param in type(self).PARAMS:
            if name == param.name or name == param.argname:
                return arguments[param.name]
        raise AttributeError(f"'{type(self).__name__}' object has no attribute '{name}'")

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __eq__(self, other) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return dict(self._arguments) == dict(other._arguments)

    __hash__ = None

    def __reduce__(self):
        return _restore, (type(self), thaw(self._arguments))

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __repr__(self) -> str:
        shown = ", ".join(
            f"{name}={value!r}" for name, value in self._arguments.items() if value is not UNDEFINED
        )
        return f"{type(self).__name__}({shown})"


def class_name(name: str, suffix: str) -> str:
    """
    Example:
        >>> class_name('$stdDevSamp', 'Operator')
        'StdDevSampOperator'
    """
    bare = name.lstrip("$")
    return bare[0].upper() + bare[1:] + suffix


def build(specs: Iterable[OperatorSpec], suffix: str, kind: type, module: str, doc: str) -> Dict[str, type]:
    """
    Create one ``Operator`` subclass per catalog row.

    Args:
        specs: Catalog rows
        suffix: Class name suffix ('Operator', 'Stage', ...)
        kind: Kind marker added to the bases
        module: Module the classes are reported to live in
        doc: Docstring template, formatted with ``name`` and ``bare``

    Returns:
        Classes keyed by class name, in catalog order
    """
    classes = {}
    for spec in specs:
        variadics = [param for param in spec.params if param.variadic]
        if len(variadics) > 1 or (
            variadics and variadics[0].variadic == LIST and len(spec.params) > 1
        ):
            raise ValueError(f"Unsupported parameter table for {spec.name}")
        bases = (Operator,) + spec.returns + (kind,)
        name = class_name(spec.name, suffix)
        classes[name] = type(
            name,
            bases,
            {
                "__doc__": doc.format(name=spec.name, bare=spec.name.lstrip("$")),
                "__module__": module,
                "NAME": spec.name,
                "ENCODE": spec.encode,
                "PARAMS": spec.params,
                "SIGNATURE": spec.signature,
            },
        )
    return classes


def register(namespace: type, classes: Dict[str, type]) -> None:
    """Expose each class on ``namespace`` under its snake case factory name."""
    for cls in classes.values():
        setattr(namespace, python_name(cls.NAME), cls)
