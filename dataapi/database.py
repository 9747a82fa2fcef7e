"""
DataAPI Database - Named database handle
"""


class Database:
    """
    Database handle, created by ``Client.get_database``.

    Args:
        client: DataAPI client instance
        name: Database name

    Example:
        >>> shop = client.get_database('shop')
        >>> orders = shop.get_collection('orders')
        >>> orders = shop['orders']
    """

    def __init__(self, client, name: str):
        self.client = client
        self.name = name

    def get_collection(self, name: str) -> "Collection":
        from .collection import Collection
        return Collection(self, name)

    def __getitem__(self, name: str) -> "Collection":
        return self.get_collection(name)

    def __getattr__(self, name: str) -> "Collection":
        if name.startswith("_"):
            raise AttributeError(name)
        return self.get_collection(name)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Database):
            return NotImplemented
        return self.client is other.client and self.name == other.name

    def __hash__(self) -> int:
        return hash((id(self.client), self.name))

    def __repr__(self) -> str:
        return f"Database(name='{self.name}')"
