"""
DataAPI Python Client

A Python client library for document database Data APIs, with a typed
aggregation pipeline builder and its encoder.
"""

from .aggregation import Aggregation
from .client import Client
from .codec import BuilderCodec, decode, encode
from .collection import Collection
from .database import Database
from .errors import (
    ApiError,
    DataApiError,
    InvalidArgumentError,
    TransportError,
    UnsupportedValueError,
)
from .expression import Expression, FieldPath, Variable
from .pipeline import Pipeline
from .query import Query
from .scalars import UNDEFINED
from .stage import Stage

__version__ = "1.0.0"
__all__ = [
    "Client",
    "Database",
    "Collection",
    "Pipeline",
    "Stage",
    "Expression",
    "Aggregation",
    "Query",
    "FieldPath",
    "Variable",
    "BuilderCodec",
    "encode",
    "decode",
    "UNDEFINED",
    "DataApiError",
    "InvalidArgumentError",
    "UnsupportedValueError",
    "ApiError",
    "TransportError",
]


def create_client(base_url, api_key=None, **kwargs):
    """
    Create a new DataAPI client with default configuration.

    Args:
        base_url: Data API endpoint root
        api_key: API key (default: None)
        **kwargs: Additional client configuration options

    Returns:
        Client: DataAPI client instance

    Example:
        >>> client = create_client('https://data.example.com/endpoint/data/v1', api_key='...')
        >>> orders = client.get_collection('shop', 'orders')
    """
    return Client(base_url, api_key=api_key, **kwargs)
