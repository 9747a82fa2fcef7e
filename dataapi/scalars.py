"""
DataAPI Scalars - Wire scalar types and the undefined sentinel

The scalar types come from the ``bson`` package shipped with PyMongo. They
are immutable and compare by value, so the codec passes them through as-is.
"""
import datetime
import re

from bson.binary import Binary
from bson.code import Code
from bson.datetime_ms import DatetimeMS
from bson.decimal128 import Decimal128
from bson.int64 import Int64
from bson.max_key import MaxKey
from bson.min_key import MinKey
from bson.objectid import ObjectId
from bson.regex import Regex
from bson.timestamp import Timestamp


class Undefined:
    """
    Marks a value as absent.

    A field whose encoded value is ``UNDEFINED`` is removed from its
    enclosing document. Optional builder arguments default to it, which is
    how they disappear from the encoded output. ``None`` on the other hand
    is a real value and is encoded as null.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __reduce__(self):
        return "UNDEFINED"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self


UNDEFINED = Undefined()

# Scalars with no native Python counterpart
WIRE_SCALAR_TYPES = (
    Int64,
    Decimal128,
    Binary,
    ObjectId,
    DatetimeMS,
    Regex,
    Code,
    MinKey,
    MaxKey,
    Timestamp,
)

# Everything the codec emits unchanged
SCALAR_TYPES = (
    str,
    int,
    float,
    bool,
    type(None),
    bytes,
    datetime.datetime,
    re.Pattern,
) + WIRE_SCALAR_TYPES


def is_scalar(value) -> bool:
    """Return True if ``value`` encodes to itself."""
    return isinstance(value, SCALAR_TYPES)


__all__ = [
    "Binary",
    "Code",
    "DatetimeMS",
    "Decimal128",
    "Int64",
    "MaxKey",
    "MinKey",
    "ObjectId",
    "Regex",
    "Timestamp",
    "Undefined",
    "UNDEFINED",
    "WIRE_SCALAR_TYPES",
    "SCALAR_TYPES",
    "is_scalar",
]
