"""
DataAPI Client - Main entry point for talking to a Data API endpoint
"""
import logging
from typing import Any, Dict, Optional
from urllib.parse import urljoin

import requests
from bson import json_util
from bson.json_util import JSONOptions

from .codec import BuilderCodec
from .errors import ApiError, TransportError

logger = logging.getLogger(__name__)

DEFAULT_DATA_SOURCE = "mongodb-atlas"


class Client:
    """
    Client for a document database Data API over HTTPS.

    Request bodies are encoded with a ``BuilderCodec`` (so pipelines,
    stages and query operators can be passed anywhere a document is
    expected) and serialised as Extended JSON.

    Args:
        base_url: Endpoint root, e.g. 'https://data.example.com/app/my-app/endpoint/data/v1'
        api_key: API key sent in the ``api-key`` header (default: None)
        data_source: Name of the linked data source (default: 'mongodb-atlas')
        timeout: Request timeout in seconds (default: 30)
        max_connections: Maximum number of connections in the pool (default: 10)
        codec: Codec used to encode request bodies (default: BuilderCodec())
        json_options: Extended JSON options (default: canonical mode)
        session: Pre-configured ``requests.Session`` to use instead of a new one

    Example:
        >>> client = Client('https://data.example.com/endpoint/data/v1', api_key='...')
        >>> orders = client.get_collection('shop', 'orders')
    """

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        data_source: str = DEFAULT_DATA_SOURCE,
        timeout: int = 30,
        max_connections: int = 10,
        codec: Optional[BuilderCodec] = None,
        json_options: JSONOptions = json_util.CANONICAL_JSON_OPTIONS,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/") + "/"
        self.data_source = data_source
        self.timeout = timeout
        self.codec = codec or BuilderCodec()
        self.json_options = json_options

        if session is None:
            # Create session with connection pooling
            session = requests.Session()
            adapter = requests.adapters.HTTPAdapter(
                pool_connections=max_connections,
                pool_maxsize=max_connections,
                max_retries=0,
            )
            session.mount("http://", adapter)
            session.mount("https://", adapter)
        self.session = session

        self.session.headers.update({
            "Accept": "application/ejson",
            "Content-Type": "application/ejson",
            "User-Agent": "DataAPI-Python-Client/1.0.0",
        })
        if api_key:
            self.session.headers["api-key"] = api_key

    def _request(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """
        POST an action to the Data API.

        Args:
            path: Action path (relative to base URL), e.g. 'action/find'
            body: Request body, may contain builder values

        Returns:
            Decoded response document

        Raises:
            UnsupportedValueError: If the body cannot be encoded
            TransportError: If the HTTP request fails
            ApiError: If the API answers with an error
        """
        url = urljoin(self.base_url, path)
        payload = json_util.dumps(self.codec.encode_document(body), json_options=self.json_options)

        logger.debug("POST %s", url)
        try:
            response = self.session.request(
                method="POST",
                url=url,
                data=payload,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error("Request to %s failed: %s", url, e)
            raise TransportError(f"HTTP request failed: {str(e)}") from e

        logger.debug("Response %s from %s", response.status_code, url)
        if response.status_code >= 400:
            raise self._api_error(response)

        if not response.text:
            return {}
        return json_util.loads(response.text)

    @staticmethod
    def _api_error(response: requests.Response) -> ApiError:
        error_code = None
        try:
            data = response.json()
        except ValueError:
            message = response.text or response.reason
        else:
            message = data.get("error") or data.get("message") or "API request failed"
            error_code = data.get("error_code")

        logger.error("Data API error %s: %s", response.status_code, message)
        return ApiError(
            f"Data API error: {message}",
            status_code=response.status_code,
            error_code=error_code,
        )

    def get_database(self, name: str) -> "Database":
        """
        Get a database object.

        Example:
            >>> shop = client.get_database('shop')
        """
        from .database import Database
        return Database(self, name)

    def get_collection(self, database_name: str, collection_name: str) -> "Collection":
        """
        Get a collection object for performing operations.

        Example:
            >>> orders = client.get_collection('shop', 'orders')
            >>> orders.find_one({'status': 'A'})
        """
        return self.get_database(database_name).get_collection(collection_name)

    def __getitem__(self, name: str) -> "Database":
        return self.get_database(name)

    def __getattr__(self, name: str) -> "Database":
        if name.startswith("_"):
            raise AttributeError(name)
        return self.get_database(name)

    def close(self):
        """
        Close the client and release resources.

        Example:
            >>> client.close()
        """
        self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()

    def __repr__(self) -> str:
        """String representation of the client."""
        return f"Client(base_url='{self.base_url}', data_source='{self.data_source}')"
