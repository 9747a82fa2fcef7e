"""
DataAPI Codec - Encodes pipelines, stages and expressions to documents

The codec is write-only: it turns builder values into an ordered document
tree (``dict``, ``list`` and scalars) and refuses to decode anything.
"""
import logging
from collections.abc import Mapping
from typing import Any, Dict, List, Optional

from .errors import UnsupportedValueError
from .expression import BaseFieldPath, Variable
from .interfaces import (
    AccumulatorInterface,
    ExpressionInterface,
    QueryInterface,
    StageInterface,
)
from .node import Encode, Operator
from .pipeline import Pipeline
from .query import LogicalQuery
from .scalars import UNDEFINED, is_scalar
from .stage import GroupStage, ProjectStage

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 128

BUILDER_TYPES = (
    Pipeline,
    StageInterface,
    ExpressionInterface,
    QueryInterface,
    AccumulatorInterface,
)


class BuilderCodec:
    """
    Encoder for aggregation builder values.

    Args:
        max_depth: Maximum nesting depth of the encoded document, or None
            for no limit (default: 128)

    Example:
        >>> codec = BuilderCodec()
        >>> codec.encode(Pipeline(Stage.match({'status': 'A'})))
        [{'$match': {'status': 'A'}}]
    """

    ENCODE_AS_SINGLE = Encode.SINGLE
    ENCODE_AS_ARRAY = Encode.ARRAY
    ENCODE_AS_OBJECT = Encode.OBJECT

    def __init__(self, max_depth: Optional[int] = DEFAULT_MAX_DEPTH):
        self.max_depth = max_depth

    def can_decode(self, value) -> bool:
        return False

    def can_encode(self, value) -> bool:
        return isinstance(value, BUILDER_TYPES)

    def decode(self, value):
        """Always raises: the wire format is never read back."""
        raise UnsupportedValueError.invalid_decodable_value(value)

    def decode_if_supported(self, value):
        return value

    def encode(self, value) -> Any:
        """
        Encode a builder value.

        Args:
            value: Pipeline, stage, expression, query or accumulator

        Returns:
            A list for pipelines, a dict for operators, a string for field
            paths and variables

        Raises:
            UnsupportedValueError: If ``value`` (or anything it contains)
                cannot be encoded
        """
        if not self.can_encode(value):
            raise UnsupportedValueError.invalid_encodable_value(value)
        if isinstance(value, Pipeline):
            logger.debug("Encoding pipeline with %d stages", len(value))
        return self._encode(value, 0)

    def encode_if_supported(self, value) -> Any:
        """Encode builder values, return anything else unchanged."""
        if self.can_encode(value):
            return self.encode(value)
        return value

    def encode_document(self, value) -> Any:
        """
        Encode an arbitrary value that may contain builder values.

        Used for filters, documents and updates whose top level is a plain
        mapping or list rather than a builder value.
        """
        if value is UNDEFINED:
            raise UnsupportedValueError.invalid_encodable_value(value)
        return self._encode(value, 0)

    def _encode(self, value, depth: int) -> Any:
        if self.max_depth is not None and depth > self.max_depth:
            raise UnsupportedValueError(
                f"Maximum nesting depth of {self.max_depth} exceeded while encoding "
                f"{type(value).__name__}"
            )
        depth += 1

        # A pipeline is encoded as a list of stages
        if isinstance(value, Pipeline):
            return [self._encode(stage, depth) for stage in value]

        if isinstance(value, BaseFieldPath):
            if value.path.startswith("$"):
                return value.path
            return "$" + value.path

        if isinstance(value, Variable):
            if value.name.startswith("$$"):
                return value.name
            return "$$" + value.name.lstrip("$")

        if isinstance(value, GroupStage):
            return {value.NAME: self._encode_group(value, depth)}

        if isinstance(value, ProjectStage):
            return {value.NAME: self._encode_fields(value.specifications, depth)}

        if isinstance(value, LogicalQuery):
            return {value.NAME: [self._encode_query(query, depth) for query in value.query]}

        if isinstance(value, Operator):
            return self._encode_operator(value, depth)

        if value is UNDEFINED or is_scalar(value):
            return value

        if isinstance(value, Mapping):
            return self._encode_fields(value, depth)

        if isinstance(value, (list, tuple)):
            return self._encode_list(value, depth)

        raise UnsupportedValueError.invalid_encodable_value(value)

    def _encode_operator(self, value: Operator, depth: int) -> Dict[str, Any]:
        if value.ENCODE == Encode.SINGLE:
            return {value.NAME: self._encode_single(value, depth)}
        if value.ENCODE == Encode.ARRAY:
            return {value.NAME: self._encode_list(value.arguments.values(), depth)}
        if value.ENCODE == Encode.OBJECT:
            return {value.NAME: self._encode_fields(value.arguments, depth)}

        raise UnsupportedValueError(
            f'Class "{type(value).__name__}" does not have a valid ENCODE attribute: {value.ENCODE!r}'
        )

    def _encode_single(self, value: Operator, depth: int) -> Any:
        arguments = list(value.arguments.values())
        if not arguments:
            return {}
        encoded = self._encode(arguments[0], depth)
        if encoded is UNDEFINED:
            return {}
        return encoded

    def _encode_list(self, values, depth: int) -> List[Any]:
        result = []
        for item in values:
            encoded = self._encode(item, depth)
            if encoded is not UNDEFINED:
                result.append(encoded)
        return result

    def _encode_fields(self, fields: Mapping, depth: int) -> Dict[str, Any]:
        result = {}
        for key, item in fields.items():
            if not isinstance(key, str):
                raise UnsupportedValueError(
                    f"Document keys must be strings, got {type(key).__name__}: {key!r}"
                )
            encoded = self._encode(item, depth)
            if encoded is not UNDEFINED:
                result[key] = encoded
        return result

    def _encode_group(self, value: GroupStage, depth: int) -> Dict[str, Any]:
        result = {"_id": self._encode(value._id, depth)}
        # Accumulators are siblings of _id, not a sub-document
        result.update(self._encode_fields(value.fields, depth))
        return result

    def _encode_query(self, query, depth: int) -> Any:
        if not isinstance(query, Mapping):
            return self._encode(query, depth)

        result = {}
        for field, expression in query.items():
            if not isinstance(field, str):
                raise UnsupportedValueError(
                    f"Document keys must be strings, got {type(field).__name__}: {field!r}"
                )
            if isinstance(expression, (list, tuple)):
                items = self._encode_list(expression, depth + 1)
                operators = [_is_operator_document(item) for item in items]
                if items and all(operators):
                    result[field] = self._merge_operators(field, items)
                elif any(operators):
                    raise UnsupportedValueError(
                        f"Cannot mix operators and values in the query on '{field}': {items!r}"
                    )
                else:
                    # A list of plain values is an array equality match
                    result[field] = items
            else:
                encoded = self._encode(expression, depth)
                if encoded is not UNDEFINED:
                    result[field] = encoded
        return result

    @staticmethod
    def _merge_operators(field: str, items: List[Mapping]) -> Dict[str, Any]:
        # Several operators on one field are merged into one document
        merged = {}
        for encoded in items:
            for key, operand in encoded.items():
                if key in merged:
                    raise UnsupportedValueError(
                        f"Duplicate operator '{key}' in the query on '{field}'"
                    )
                merged[key] = operand
        return merged


def _is_operator_document(value) -> bool:
    return isinstance(value, Mapping) and bool(value) and all(
        isinstance(key, str) and key.startswith("$") for key in value
    )


_default_codec = BuilderCodec()


def encode(value) -> Any:
    """
    Encode a builder value with a default ``BuilderCodec``.

    Example:
        >>> encode(Expression.std_dev_samp(1, 2, 3))
        {'$stdDevSamp': [1, 2, 3]}
    """
    return _default_codec.encode(value)


def decode(value):
    """Always raises ``UnsupportedValueError``."""
    return _default_codec.decode(value)
