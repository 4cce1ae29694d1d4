"""
BookstoreClient - connection to the bookstore database.

Owns the pymongo AsyncMongoClient for one run and hands out the books
collection wrapper.
"""

from __future__ import annotations

from types import TracebackType
from typing import Any

from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError

from .collection import BookCollection
from .config import DEFAULT_COLLECTION, DEFAULT_DATABASE, Settings
from .types import ClientNotConnectedError, DatabaseConnectionError

__all__ = ["BookstoreClient"]


class BookstoreClient:
    """
    MongoDB client scoped to the bookstore database.

    Example:
        client = BookstoreClient("mongodb://localhost:27017")
        await client.connect()
        books = client.books
        ...
        await client.close()

        # Or use as async context manager
        async with BookstoreClient.from_settings(Settings()) as client:
            await client.books.find({"genre": "Fantasy"})
    """

    __slots__ = ("_uri", "_database_name", "_collection_name", "_options", "_client", "_books")

    def __init__(
        self,
        uri: str,
        database: str = DEFAULT_DATABASE,
        collection: str = DEFAULT_COLLECTION,
        **options: Any,
    ) -> None:
        """
        Initialize the client.

        Args:
            uri: MongoDB connection string.
            database: Database name.
            collection: Name of the books collection.
            **options: Keyword options for AsyncMongoClient
                (e.g. serverSelectionTimeoutMS).
        """
        self._uri = uri
        self._database_name = database
        self._collection_name = collection
        self._options = options
        self._client: AsyncMongoClient[Any] | None = None
        self._books: BookCollection | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> BookstoreClient:
        return cls(
            settings.uri,
            database=settings.database,
            collection=settings.collection,
            **settings.client_options(),
        )

    @property
    def uri(self) -> str:
        """Get the connection URI."""
        return self._uri

    @property
    def database_name(self) -> str:
        return self._database_name

    @property
    def is_connected(self) -> bool:
        """Check if the client is connected."""
        return self._client is not None

    async def connect(self) -> BookstoreClient:
        """
        Connect to the server and check it answers a ping.

        Returns:
            Self for chaining.

        Raises:
            DatabaseConnectionError: If the server cannot be reached.
        """
        if self._client is not None:
            return self

        client: AsyncMongoClient[Any] = AsyncMongoClient(self._uri, **self._options)
        try:
            await client.admin.command("ping")
        except PyMongoError as e:
            await client.close()
            raise DatabaseConnectionError(f"Failed to connect to {self._uri}: {e}") from e

        self._client = client
        return self

    async def close(self) -> None:
        """Close the connection."""
        if self._client is not None:
            await self._client.close()
            self._client = None
        self._books = None

    @property
    def books(self) -> BookCollection:
        """
        Get the books collection.

        Raises:
            ClientNotConnectedError: If connect() has not been called.
        """
        if self._client is None:
            raise ClientNotConnectedError("Client is not connected. Call connect() first.")

        if self._books is None:
            database = self._client[self._database_name]
            self._books = BookCollection(database[self._collection_name])
        return self._books

    async def __aenter__(self) -> BookstoreClient:
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Async context manager exit."""
        await self.close()

    def __repr__(self) -> str:
        status = "connected" if self.is_connected else "disconnected"
        return f"BookstoreClient({self._uri!r}, {status})"
