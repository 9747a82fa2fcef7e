"""
Tests for DataAPI BuilderCodec
"""
import datetime
import logging

import pytest
from bson.decimal128 import Decimal128
from bson.int64 import Int64
from bson.objectid import ObjectId

from dataapi import (
    UNDEFINED,
    Aggregation,
    BuilderCodec,
    Expression,
    FieldPath,
    InvalidArgumentError,
    Pipeline,
    Query,
    Stage,
    UnsupportedValueError,
    Variable,
    decode,
    encode,
)


@pytest.fixture
def codec():
    """Create a codec with the default depth limit."""
    return BuilderCodec()


class TestScenarios:
    """End-to-end encoding of builder values."""

    def test_simple_match(self):
        """Test a pipeline with a single $match stage."""
        pipeline = Pipeline(Stage.match({'status': 'A'}))
        assert encode(pipeline) == [{'$match': {'status': 'A'}}]

    def test_group_accumulators_are_siblings_of_id(self):
        """Test $group accumulators are encoded next to _id."""
        pipeline = Pipeline(
            Stage.group(
                Expression.field_path('customer'),
                {'total': Aggregation.sum(Expression.field_path('amount'))},
            )
        )
        assert encode(pipeline) == [
            {'$group': {'_id': '$customer', 'total': {'$sum': '$amount'}}}
        ]

    def test_filter_omits_absent_optionals(self):
        """Test $filter leaves out 'as' and 'limit' when not given."""
        expression = Aggregation.filter(
            Expression.field_path('items'),
            Aggregation.gt(Expression.field_path('$$this.qty'), 0),
        )
        encoded = encode(expression)

        assert encoded == {'$filter': {'input': '$items', 'cond': {'$gt': ['$$this.qty', 0]}}}
        assert 'as' not in encoded['$filter']
        assert 'limit' not in encoded['$filter']

    def test_or_merges_operators_on_one_field(self):
        """Test a list of operators on one field becomes one document."""
        query = Query.or_({'price': [Query.gt(10), Query.lt(100)]})
        assert encode(query) == {'$or': [{'price': {'$gt': 10, '$lt': 100}}]}

    def test_variadic_std_dev_samp(self):
        """Test $stdDevSamp encodes its values as a list."""
        assert encode(Expression.std_dev_samp(1, 2, 3)) == {'$stdDevSamp': [1, 2, 3]}

    def test_variadic_std_dev_samp_requires_a_value(self):
        """Test $stdDevSamp without values is rejected."""
        with pytest.raises(InvalidArgumentError):
            Expression.std_dev_samp()

    def test_project_drops_undefined_entries(self):
        """Test $project leaves out UNDEFINED specifications."""
        stage = Stage.project(name=1, secret=UNDEFINED, total=Expression.field_path('amount'), _id=0)
        encoded = encode(stage)

        assert encoded == {'$project': {'name': 1, 'total': '$amount', '_id': 0}}
        assert list(encoded['$project']) == ['name', 'total', '_id']


class TestProperties:
    """Invariants that hold for every builder value."""

    @pytest.mark.parametrize('stages', [
        (),
        (Stage.limit(1),),
        (Stage.match({'a': 1}), Stage.skip(5), Stage.limit(10)),
        (Stage.unset('a', 'b'), Stage.count('n'), Stage.sort({'n': -1}), Stage.sample(size=3)),
    ])
    def test_pipeline_length_is_preserved(self, stages):
        """Test a pipeline encodes to one document per stage."""
        encoded = encode(Pipeline(*stages))
        assert isinstance(encoded, list)
        assert len(encoded) == len(stages)

    @pytest.mark.parametrize('node, expected', [
        (Expression.gt(Expression.field_path('qty'), 250), {'$gt': ['$qty', 250]}),
        (Expression.mod(10, 3), {'$mod': [10, 3]}),
        (Expression.array_elem_at([1, 2, 3], 0), {'$arrayElemAt': [[1, 2, 3], 0]}),
        (Expression.slice(Expression.field_path('items'), 5), {'$slice': ['$items', 5]}),
        (Expression.slice(Expression.field_path('items'), 5, 2), {'$slice': ['$items', 2, 5]}),
        (Query.mod(4, 0), {'$mod': [4, 0]}),
    ])
    def test_array_encoding(self, node, expected):
        """Test array-encoded operators list their arguments in order."""
        assert encode(node) == expected

    @pytest.mark.parametrize('node, keys', [
        (Expression.filter(cond=True, input=[1, 2], limit=1), ['input', 'cond', 'limit']),
        (Expression.filter([1], True, as_='x'), ['input', 'cond', 'as']),
        (Stage.lookup('inventory', 'item', 'sku', 'stock'), ['from', 'localField', 'foreignField', 'as']),
        (Stage.unwind('$sizes'), ['path']),
        (Stage.unwind(preserve_null_and_empty_arrays=True, path='$sizes'), ['path', 'preserveNullAndEmptyArrays']),
    ])
    def test_object_encoding_keeps_declaration_order(self, node, keys):
        """Test object-encoded operators emit defined arguments in declaration order."""
        assert list(encode(node)[node.NAME]) == keys

    @pytest.mark.parametrize('path, expected', [
        ('amount', '$amount'),
        ('address.city', '$address.city'),
        ('$amount', '$amount'),
        ('$$this.qty', '$$this.qty'),
    ])
    def test_field_path_prefix(self, path, expected):
        """Test field paths get exactly one leading '$'."""
        assert encode(FieldPath(path)) == expected
        assert encode(Expression.number_field_path(path)) == expected

    @pytest.mark.parametrize('name, expected', [
        ('this', '$$this'),
        ('$$ROOT', '$$ROOT'),
        ('$now', '$$now'),
    ])
    def test_variable_prefix(self, name, expected):
        """Test variables get exactly one leading '$$'."""
        assert encode(Variable(name)) == expected

    @pytest.mark.parametrize('value', [
        None,
        [],
        {'$match': {}},
        [{'$limit': 1}],
        'string',
        Pipeline(),
    ])
    def test_decode_is_rejected(self, codec, value):
        """Test decoding always raises."""
        assert not codec.can_decode(value)
        with pytest.raises(UnsupportedValueError):
            codec.decode(value)
        with pytest.raises(UnsupportedValueError):
            decode(value)

    def test_encoding_is_deterministic(self, codec):
        """Test repeated encodes give equal output."""
        pipeline = Pipeline(
            Stage.match(Query.and_({'qty': [Query.gte(1), Query.lte(9)]}, {'status': 'A'})),
            Stage.group(Expression.field_path('item'), count=Aggregation.sum(1)),
        )
        assert codec.encode(pipeline) == codec.encode(pipeline)
        assert codec.encode(pipeline) == BuilderCodec().encode(pipeline)

    def test_arguments_are_copied(self):
        """Test changing the caller's containers does not change the output."""
        specifications = {'tags': ['a', 'b'], 'nested': {'x': 1}}
        stage = Stage.project(specifications)
        specifications['tags'].append('c')
        specifications['nested']['y'] = 2
        specifications['added'] = 1

        assert encode(stage) == {'$project': {'tags': ['a', 'b'], 'nested': {'x': 1}}}

    def test_list_arguments_are_copied(self):
        """Test changing a list argument does not change the output."""
        values = [1, 2, 3]
        expression = Expression.in_(Expression.field_path('a'), values)
        values.append(4)

        assert encode(expression) == {'$in': ['$a', [1, 2, 3]]}


class TestBuilderCodec:
    """Test BuilderCodec behaviour."""

    def test_strategy_constants(self):
        """Test the encode strategy constants."""
        assert BuilderCodec.ENCODE_AS_SINGLE == 'single'
        assert BuilderCodec.ENCODE_AS_ARRAY == 'array'
        assert BuilderCodec.ENCODE_AS_OBJECT == 'object'

    @pytest.mark.parametrize('value', [
        Pipeline(),
        Stage.limit(1),
        Expression.field_path('a'),
        Expression.variable('this'),
        Expression.abs(-1),
        Query.eq(1),
        Aggregation.count(),
    ])
    def test_can_encode_builder_values(self, codec, value):
        """Test builder values are encodable."""
        assert codec.can_encode(value)

    @pytest.mark.parametrize('value', [1, 'a', None, {'a': 1}, [Stage.limit(1)], UNDEFINED])
    def test_cannot_encode_plain_values(self, codec, value):
        """Test plain values are not builder values."""
        assert not codec.can_encode(value)
        with pytest.raises(UnsupportedValueError):
            codec.encode(value)

    def test_encode_if_supported(self, codec):
        """Test encode_if_supported passes other values through."""
        document = {'a': 1}
        assert codec.encode_if_supported(document) is document
        assert codec.encode_if_supported(Stage.limit(3)) == {'$limit': 3}

    def test_encode_document(self, codec):
        """Test plain documents containing builder values."""
        document = {'qty': Query.gt(5), 'items': [Expression.field_path('a'), 1], 'skip': UNDEFINED}
        assert codec.encode_document(document) == {'qty': {'$gt': 5}, 'items': ['$a', 1]}

    def test_encode_document_rejects_undefined(self, codec):
        """Test UNDEFINED cannot be encoded at the top level."""
        with pytest.raises(UnsupportedValueError):
            codec.encode_document(UNDEFINED)

    def test_unsupported_value(self, codec):
        """Test unknown objects are rejected with their type name."""
        with pytest.raises(UnsupportedValueError, match='object'):
            codec.encode_document({'a': object()})

    def test_non_string_key(self, codec):
        """Test documents with non-string keys are rejected."""
        with pytest.raises(UnsupportedValueError, match='keys must be strings'):
            codec.encode_document({1: 'a'})

    def test_scalars_pass_through(self):
        """Test wire scalars are emitted unchanged."""
        oid = ObjectId()
        when = datetime.datetime(2024, 1, 2, 3, 4, 5)
        stage = Stage.match({
            '_id': oid,
            'count': Int64(7),
            'price': Decimal128('9.99'),
            'at': when,
            'deleted': None,
        })
        assert encode(stage) == {'$match': {
            '_id': oid,
            'count': Int64(7),
            'price': Decimal128('9.99'),
            'at': when,
            'deleted': None,
        }}

    def test_null_is_kept(self):
        """Test an explicit None is encoded as null."""
        expression = Expression.if_null(Expression.field_path('a'), None)
        assert encode(expression) == {'$ifNull': ['$a', None]}

    def test_single_without_arguments(self):
        """Test a single-encoded operator without arguments encodes to {}."""
        assert encode(Aggregation.count()) == {'$count': {}}
        assert encode(Stage.index_stats()) == {'$indexStats': {}}

    def test_default_depth_limit(self, codec):
        """Test deeply nested documents are rejected."""
        document = {}
        for _ in range(200):
            document = {'a': document}

        with pytest.raises(UnsupportedValueError, match='depth'):
            codec.encode_document(document)

    def test_custom_depth_limit(self):
        """Test a custom depth limit."""
        codec = BuilderCodec(max_depth=2)
        assert codec.encode_document({'a': {'b': 1}}) == {'a': {'b': 1}}
        with pytest.raises(UnsupportedValueError):
            codec.encode_document({'a': {'b': {'c': 1}}})

    def test_no_depth_limit(self):
        """Test max_depth=None disables the limit."""
        document = 1
        for _ in range(150):
            document = [document]

        encoded = BuilderCodec(max_depth=None).encode_document(document)
        for _ in range(150):
            encoded = encoded[0]
        assert encoded == 1

    def test_duplicate_operator_in_merge(self):
        """Test merging the same operator twice on a field is rejected."""
        query = Query.or_({'price': [Query.gt(10), Query.gt(20)]})
        with pytest.raises(UnsupportedValueError, match='Duplicate'):
            encode(query)

    def test_merge_rejects_mixed_values(self):
        """Test operators and plain values cannot share a field query."""
        query = Query.or_({'price': [Query.gt(10), 5]})
        with pytest.raises(UnsupportedValueError, match="Cannot mix operators and values in the query on 'price'"):
            encode(query)

    @pytest.mark.parametrize('factory', [Query.and_, Query.or_, Query.nor])
    def test_literal_array_is_an_equality_match(self, factory):
        """Test a list of plain values on a field is kept as an array."""
        query = factory({'tags': ['a', 'b']}, {'sizes': [{'h': 14, 'w': 21}]}, {'empty': []})
        assert encode(query) == {
            factory.NAME: [{'tags': ['a', 'b']}, {'sizes': [{'h': 14, 'w': 21}]}, {'empty': []}]
        }

    def test_logs_pipeline_encoding(self, codec, caplog):
        """Test pipeline encoding is logged at DEBUG."""
        caplog.set_level(logging.DEBUG, logger='dataapi.codec')
        codec.encode(Pipeline(Stage.limit(1), Stage.skip(1)))
        assert 'Encoding pipeline with 2 stages' in caplog.text
