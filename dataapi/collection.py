"""
DataAPI Collection - Interface for collection operations
"""
from typing import Any, Dict, List, Optional, Union

from .endpoint import (
    Aggregate,
    DeleteMany,
    DeleteOne,
    Find,
    FindOne,
    InsertMany,
    InsertOne,
    UpdateMany,
    UpdateOne,
)
from .pipeline import Pipeline


class Collection:
    """
    Collection object for performing CRUD operations and aggregations.

    Filters, updates and documents may contain builder values (query
    operators, expressions); they are encoded before being sent.

    Args:
        database: Database the collection belongs to
        name: Collection name

    Example:
        >>> orders = client.get_collection('shop', 'orders')
        >>> orders.insert_one({'item': 'pen', 'qty': 10})
    """

    def __init__(self, database, name: str):
        self.database = database
        self.name = name

    @property
    def client(self):
        return self.database.client

    def _namespace(self):
        return self.client.data_source, self.database.name, self.name

    def insert_one(self, document: Dict[str, Any]) -> Any:
        """
        Insert a single document into the collection.

        Args:
            document: Document to insert

        Returns:
            Inserted document ID

        Example:
            >>> doc_id = orders.insert_one({'item': 'pen', 'qty': 10})
        """
        response = InsertOne(*self._namespace(), document).execute(self.client)
        return response.get("insertedId")

    def insert_many(self, documents: List[Dict[str, Any]]) -> List[Any]:
        """
        Insert multiple documents into the collection.

        Args:
            documents: List of documents to insert

        Returns:
            List of inserted document IDs

        Example:
            >>> ids = orders.insert_many([
            ...     {'item': 'pen', 'qty': 10},
            ...     {'item': 'ink', 'qty': 3}
            ... ])
        """
        response = InsertMany(*self._namespace(), documents).execute(self.client)
        return response.get("insertedIds", [])

    def find_one(
        self,
        filter: Optional[Dict[str, Any]] = None,
        projection: Optional[Dict[str, Any]] = None
    ) -> Optional[Dict[str, Any]]:
        """
        Find a single document matching the filter.

        Args:
            filter: Query filter (default: {})
            projection: Field projection (1 = include, 0 = exclude)

        Returns:
            Matching document or None

        Example:
            >>> doc = orders.find_one({'item': Query.eq('pen')})
        """
        endpoint = FindOne(*self._namespace(), filter or {}, {"projection": projection})
        return endpoint.execute(self.client).get("document")

    def find(
        self,
        filter: Optional[Dict[str, Any]] = None,
        projection: Optional[Dict[str, Any]] = None,
        sort: Optional[Dict[str, int]] = None,
        skip: Optional[int] = None,
        limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        """
        Find multiple documents matching the filter.

        Args:
            filter: Query filter (default: {})
            projection: Field projection (1 = include, 0 = exclude)
            sort: Sort specification (1 = ascending, -1 = descending)
            skip: Number of documents to skip
            limit: Maximum number of documents to return

        Returns:
            List of matching documents

        Example:
            >>> docs = orders.find(
            ...     {'qty': Query.gte(5)},
            ...     projection={'item': 1, 'qty': 1},
            ...     sort={'qty': -1},
            ...     limit=10
            ... )
        """
        options = {"projection": projection, "sort": sort, "skip": skip, "limit": limit}
        endpoint = Find(*self._namespace(), filter or {}, options)
        return endpoint.execute(self.client).get("documents", [])

    def update_one(
        self,
        filter: Dict[str, Any],
        update: Dict[str, Any],
        upsert: Optional[bool] = None
    ) -> Dict[str, Any]:
        """
        Update a single document matching the filter.

        Args:
            filter: Query filter
            update: Update operations (must use update operators like $set)
            upsert: Insert a document when nothing matches

        Returns:
            Result with ``matchedCount``, ``modifiedCount`` and, after an
            upsert, ``upsertedId``

        Example:
            >>> orders.update_one({'item': 'pen'}, {'$set': {'qty': 11}})
        """
        endpoint = UpdateOne(*self._namespace(), filter, update, {"upsert": upsert})
        return endpoint.execute(self.client)

    def update_many(
        self,
        filter: Dict[str, Any],
        update: Dict[str, Any],
        upsert: Optional[bool] = None
    ) -> Dict[str, Any]:
        """
        Update multiple documents matching the filter.

        Returns:
            Result with ``matchedCount`` and ``modifiedCount``

        Example:
            >>> orders.update_many({'qty': Query.lt(5)}, {'$set': {'low': True}})
        """
        endpoint = UpdateMany(*self._namespace(), filter, update, {"upsert": upsert})
        return endpoint.execute(self.client)

    def delete_one(self, filter: Dict[str, Any]) -> int:
        """
        Delete a single document matching the filter.

        Returns:
            Number of deleted documents (0 or 1)
        """
        response = DeleteOne(*self._namespace(), filter).execute(self.client)
        return response.get("deletedCount", 0)

    def delete_many(self, filter: Dict[str, Any]) -> int:
        """
        Delete all documents matching the filter.

        Returns:
            Number of deleted documents

        Example:
            >>> deleted = orders.delete_many({'qty': 0})
        """
        response = DeleteMany(*self._namespace(), filter).execute(self.client)
        return response.get("deletedCount", 0)

    def aggregate(self, pipeline: Union[Pipeline, List[Any]]) -> List[Dict[str, Any]]:
        """
        Run an aggregation pipeline.

        Args:
            pipeline: A ``Pipeline``, a list of stages or a list of raw
                stage documents

        Returns:
            Result documents

        Example:
            >>> results = orders.aggregate(Pipeline(
            ...     Stage.match({'status': 'A'}),
            ...     Stage.group(Expression.field_path('item'),
            ...                 total=Aggregation.sum(Expression.field_path('qty'))),
            ...     Stage.sort({'total': -1}),
            ... ))
        """
        response = Aggregate(*self._namespace(), pipeline).execute(self.client)
        return response.get("documents", [])

    def __repr__(self) -> str:
        """String representation of the collection."""
        return f"Collection(database='{self.database.name}', name='{self.name}')"
