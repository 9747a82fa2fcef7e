"""
Tests for DataAPI Query builder
"""
import re

import pytest
from bson.code import Code
from bson.regex import Regex

from dataapi import Expression, InvalidArgumentError, Query, Stage, encode
from dataapi.interfaces import QueryInterface
from dataapi.query import AndQuery, LogicalQuery, NorQuery, OrQuery


class TestQuery:
    """Test Query builder."""

    def test_eq(self):
        """Test $eq operator."""
        assert encode(Query.eq(30)) == {'$eq': 30}

    def test_ne(self):
        """Test $ne operator."""
        assert encode(Query.ne('inactive')) == {'$ne': 'inactive'}

    def test_gt(self):
        """Test $gt operator."""
        assert encode(Query.gt(25)) == {'$gt': 25}

    def test_gte(self):
        """Test $gte operator."""
        assert encode(Query.gte(18)) == {'$gte': 18}

    def test_lt(self):
        """Test $lt operator."""
        assert encode(Query.lt(65)) == {'$lt': 65}

    def test_lte(self):
        """Test $lte operator."""
        assert encode(Query.lte(100)) == {'$lte': 100}

    def test_in(self):
        """Test $in operator."""
        assert encode(Query.in_(['NY', 'SF'])) == {'$in': ['NY', 'SF']}

    def test_nin(self):
        """Test $nin operator."""
        assert encode(Query.nin(['banned'])) == {'$nin': ['banned']}

    def test_not(self):
        """Test $not operator."""
        assert encode(Query.not_(Query.gt(5))) == {'$not': {'$gt': 5}}

    def test_exists(self):
        """Test $exists operator."""
        assert encode(Query.exists(True)) == {'$exists': True}

    def test_type(self):
        """Test $type operator."""
        assert encode(Query.type_('string')) == {'$type': ['string']}
        assert encode(Query.type_(2, 'double')) == {'$type': [2, 'double']}

    def test_all(self):
        """Test $all operator."""
        assert encode(Query.all_('a', 'b')) == {'$all': ['a', 'b']}

    def test_elem_match(self):
        """Test $elemMatch operator."""
        query = Query.elem_match({'score': Query.gt(80)})
        assert encode(query) == {'$elemMatch': {'score': {'$gt': 80}}}

    def test_size(self):
        """Test $size operator."""
        assert encode(Query.size(3)) == {'$size': 3}

    def test_regex(self):
        """Test $regex operator."""
        pattern = Regex('^Al', 'i')
        assert encode(Query.regex(pattern)) == {'$regex': pattern}

        compiled = re.compile('^Al')
        assert encode(Query.regex(compiled)) == {'$regex': compiled}

    def test_regex_rejects_plain_string(self):
        """Test $regex requires a regular expression object."""
        with pytest.raises(InvalidArgumentError):
            Query.regex('^Al')

    def test_text(self):
        """Test $text operator."""
        query = Query.text('coffee shop', language='en')
        assert encode(query) == {'$text': {'$search': 'coffee shop', '$language': 'en'}}

    def test_near(self):
        """Test $near operator."""
        query = Query.near(
            {'type': 'Point', 'coordinates': [-73.97, 40.77]},
            max_distance=1000,
        )
        assert encode(query) == {
            '$near': {
                '$geometry': {'type': 'Point', 'coordinates': [-73.97, 40.77]},
                '$maxDistance': 1000,
            }
        }

    def test_geo_within(self):
        """Test $geoWithin operator."""
        polygon = [[[0, 0], [3, 6], [6, 1], [0, 0]]]
        query = Query.geo_within(Query.geometry('Polygon', polygon))
        assert encode(query) == {
            '$geoWithin': {'$geometry': {'type': 'Polygon', 'coordinates': polygon}}
        }

    def test_expr(self):
        """Test $expr with an aggregation expression."""
        query = Query.expr(Expression.gt(Expression.field_path('spent'), Expression.field_path('budget')))
        assert encode(query) == {'$expr': {'$gt': ['$spent', '$budget']}}

    def test_where(self):
        """Test $where with JavaScript code."""
        code = Code('this.a > this.b')
        assert encode(Query.where(code)) == {'$where': code}
        assert encode(Query.where('this.a > this.b')) == {'$where': 'this.a > this.b'}

    def test_mod(self):
        """Test $mod operator."""
        assert encode(Query.mod(4, 0)) == {'$mod': [4, 0]}

    def test_bits(self):
        """Test bitwise query operators."""
        assert encode(Query.bits_all_set([1, 5])) == {'$bitsAllSet': [1, 5]}
        assert encode(Query.bits_any_clear(35)) == {'$bitsAnyClear': 35}

    def test_query_operators_are_queries(self):
        """Test query operators carry the query kind."""
        assert isinstance(Query.eq(1), QueryInterface)
        assert isinstance(Query.or_({'a': 1}), QueryInterface)


class TestLogicalQuery:
    """Test $and, $or and $nor."""

    def test_and(self):
        """Test $and operator."""
        query = Query.and_({'age': Query.gte(18)}, {'status': 'active'})
        assert isinstance(query, AndQuery)
        assert encode(query) == {'$and': [{'age': {'$gte': 18}}, {'status': 'active'}]}

    def test_or(self):
        """Test $or operator."""
        query = Query.or_({'city': 'NY'}, {'city': 'SF'})
        assert isinstance(query, OrQuery)
        assert encode(query) == {'$or': [{'city': 'NY'}, {'city': 'SF'}]}

    def test_nor(self):
        """Test $nor operator."""
        query = Query.nor({'price': 1.99}, {'sale': True})
        assert isinstance(query, NorQuery)
        assert encode(query) == {'$nor': [{'price': 1.99}, {'sale': True}]}

    @pytest.mark.parametrize('factory', [Query.and_, Query.or_, Query.nor])
    def test_merge_on_one_field(self, factory):
        """Test a list of operators on one field is merged for every logical operator."""
        query = factory({'qty': [Query.gte(1), Query.lte(9)]}, {'status': 'A'})
        assert encode(query) == {
            factory.NAME: [{'qty': {'$gte': 1, '$lte': 9}}, {'status': 'A'}]
        }

    def test_nested_logical_queries(self):
        """Test logical queries inside logical queries."""
        query = Query.or_(Query.and_({'a': 1}, {'b': 2}), {'c': Query.exists(False)})
        assert encode(query) == {
            '$or': [{'$and': [{'a': 1}, {'b': 2}]}, {'c': {'$exists': False}}]
        }

    def test_requires_a_query(self):
        """Test logical queries need at least one query."""
        with pytest.raises(InvalidArgumentError):
            Query.or_()

    def test_rejects_non_queries(self):
        """Test logical queries reject plain values."""
        with pytest.raises(InvalidArgumentError):
            Query.or_('status')

    def test_logical_queries_share_a_base(self):
        """Test the logical queries have one implementation."""
        for cls in (AndQuery, OrQuery, NorQuery):
            assert issubclass(cls, LogicalQuery)

    def test_complex_query(self):
        """Test a complex $match query."""
        stage = Stage.match(Query.and_(
            {'age': [Query.gte(18), Query.lte(65)]},
            Query.or_({'city': 'NY'}, {'city': 'SF'}),
            {'status': Query.ne('inactive')},
        ))
        assert encode(stage) == {
            '$match': {
                '$and': [
                    {'age': {'$gte': 18, '$lte': 65}},
                    {'$or': [{'city': 'NY'}, {'city': 'SF'}]},
                    {'status': {'$ne': 'inactive'}},
                ]
            }
        }
