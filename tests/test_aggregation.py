"""
Tests for DataAPI Aggregation builder
"""
import pytest

from dataapi import Aggregation, Expression, InvalidArgumentError, Pipeline, Stage, encode
from dataapi.aggregation import CountAccumulator, SumAccumulator
from dataapi.expression import FilterOperator, GtOperator
from dataapi.interfaces import AccumulatorInterface


class TestAccumulators:
    """Test accumulator operators."""

    def test_sum(self):
        """Test $sum accumulator."""
        accumulator = Aggregation.sum(Expression.field_path('amount'))
        assert isinstance(accumulator, SumAccumulator)
        assert isinstance(accumulator, AccumulatorInterface)
        assert encode(accumulator) == {'$sum': '$amount'}

    def test_sum_constant(self):
        """Test counting with $sum: 1."""
        assert encode(Aggregation.sum(1)) == {'$sum': 1}

    def test_avg(self):
        """Test $avg accumulator."""
        assert encode(Aggregation.avg(Expression.field_path('age'))) == {'$avg': '$age'}

    def test_min_max(self):
        """Test $min and $max accumulators."""
        assert encode(Aggregation.min_(Expression.field_path('age'))) == {'$min': '$age'}
        assert encode(Aggregation.max_(Expression.field_path('age'))) == {'$max': '$age'}

    def test_count(self):
        """Test $count accumulator."""
        accumulator = Aggregation.count()
        assert isinstance(accumulator, CountAccumulator)
        assert encode(accumulator) == {'$count': {}}

    def test_push_and_add_to_set(self):
        """Test $push and $addToSet accumulators."""
        assert encode(Aggregation.push(Expression.field_path('item'))) == {'$push': '$item'}
        assert encode(Aggregation.add_to_set(Expression.field_path('tag'))) == {'$addToSet': '$tag'}

    def test_first_n(self):
        """Test $firstN accumulator."""
        accumulator = Aggregation.first_n(Expression.field_path('score'), 3)
        assert encode(accumulator) == {'$firstN': {'input': '$score', 'n': 3}}

    def test_top_n(self):
        """Test $topN accumulator."""
        accumulator = Aggregation.top_n(2, {'score': -1}, Expression.field_path('player'))
        assert encode(accumulator) == {
            '$topN': {'n': 2, 'sortBy': {'score': -1}, 'output': '$player'}
        }

    def test_covariance(self):
        """Test $covariancePop takes two expressions as a list."""
        accumulator = Aggregation.covariance_pop(Expression.field_path('x'), Expression.field_path('y'))
        assert encode(accumulator) == {'$covariancePop': ['$x', '$y']}

    def test_percentile(self):
        """Test $percentile accumulator."""
        accumulator = Aggregation.percentile(Expression.field_path('score'), [0.5, 0.9], 'approximate')
        assert encode(accumulator) == {
            '$percentile': {'input': '$score', 'p': [0.5, 0.9], 'method': 'approximate'}
        }

    def test_accumulator_with_javascript(self):
        """Test $accumulator with positional order for required arguments."""
        accumulator = Aggregation.accumulator(
            'function() { return 0 }',
            'function(state, x) { return state + x }',
            [Expression.field_path('qty')],
            'function(a, b) { return a + b }',
            'js',
        )
        assert encode(accumulator) == {
            '$accumulator': {
                'init': 'function() { return 0 }',
                'accumulate': 'function(state, x) { return state + x }',
                'accumulateArgs': ['$qty'],
                'merge': 'function(a, b) { return a + b }',
                'lang': 'js',
            }
        }

    def test_shift_window_operator(self):
        """Test $shift window operator with a default."""
        accumulator = Aggregation.shift(Expression.field_path('qty'), -1, default=None)
        assert encode(accumulator) == {'$shift': {'output': '$qty', 'by': -1, 'default': None}}

    def test_sum_rejects_strings(self):
        """Test $sum requires a numeric expression."""
        with pytest.raises(InvalidArgumentError):
            Aggregation.sum('amount')


class TestShortcuts:
    """Test the expression shortcuts on Aggregation."""

    def test_shortcuts_are_expression_operators(self):
        """Test shortcuts forward to the expression operators."""
        assert Aggregation.filter is FilterOperator
        assert Aggregation.gt is GtOperator

    def test_filter(self):
        """Test $filter through Aggregation."""
        expression = Aggregation.filter(
            Expression.field_path('items'),
            Aggregation.and_(
                Aggregation.gte(Expression.variable('item.price'), 100),
                Aggregation.ne(Expression.variable('item.sold'), True),
            ),
            as_='item',
            limit=5,
        )
        assert encode(expression) == {
            '$filter': {
                'input': '$items',
                'cond': {'$and': [{'$gte': ['$$item.price', 100]}, {'$ne': ['$$item.sold', True]}]},
                'as': 'item',
                'limit': 5,
            }
        }

    def test_comparisons(self):
        """Test comparison shortcuts."""
        path = Expression.field_path('qty')
        assert encode(Aggregation.eq(path, 1)) == {'$eq': ['$qty', 1]}
        assert encode(Aggregation.lt(path, 1)) == {'$lt': ['$qty', 1]}
        assert encode(Aggregation.lte(path, 1)) == {'$lte': ['$qty', 1]}


class TestAggregationPipeline:
    """Test complete pipelines."""

    def test_complex_pipeline(self):
        """Test building a complex aggregation pipeline."""
        pipeline = Pipeline(
            Stage.match({'status': 'active'}),
            Stage.group(
                Expression.field_path('city'),
                avgAge=Aggregation.avg(Expression.field_path('age')),
                count=Aggregation.sum(1),
                maxAge=Aggregation.max_(Expression.field_path('age')),
            ),
            Stage.sort({'count': -1}),
            Stage.limit(10),
            Stage.project(city=Expression.field_path('_id'), avgAge=1, count=1, _id=0),
        )

        assert encode(pipeline) == [
            {'$match': {'status': 'active'}},
            {'$group': {
                '_id': '$city',
                'avgAge': {'$avg': '$age'},
                'count': {'$sum': 1},
                'maxAge': {'$max': '$age'},
            }},
            {'$sort': {'count': -1}},
            {'$limit': 10},
            {'$project': {'city': '$_id', 'avgAge': 1, 'count': 1, '_id': 0}},
        ]

    def test_window_fields(self):
        """Test $setWindowFields with window operators."""
        stage = Stage.set_window_fields(
            {'orderDate': 1},
            {'cumulativeQty': {
                '$sum': Expression.field_path('quantity'),
                'window': {'documents': ['unbounded', 'current']},
            }},
            partition_by=Expression.field_path('state'),
        )
        assert encode(stage) == {
            '$setWindowFields': {
                'partitionBy': '$state',
                'sortBy': {'orderDate': 1},
                'output': {'cumulativeQty': {
                    '$sum': '$quantity',
                    'window': {'documents': ['unbounded', 'current']},
                }},
            }
        }
