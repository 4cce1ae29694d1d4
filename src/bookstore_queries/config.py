"""Connection settings for a query run."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Any

__all__ = [
    "DEFAULT_COLLECTION",
    "DEFAULT_DATABASE",
    "DEFAULT_URI",
    "Settings",
]

DEFAULT_URI = "mongodb://localhost:27017"
DEFAULT_DATABASE = "plp_bookstore"
DEFAULT_COLLECTION = "books"


@dataclass(frozen=True)
class Settings:
    """
    Where to connect and which collection to query.

    Attributes:
        uri: MongoDB connection string.
        database: Database name.
        collection: Collection name.
        server_selection_timeout_ms: How long the driver waits for a server
            before failing the first operation.
        seed: Reload the sample books before running.
    """

    uri: str = DEFAULT_URI
    database: str = DEFAULT_DATABASE
    collection: str = DEFAULT_COLLECTION
    server_selection_timeout_ms: int = 30_000
    seed: bool = False

    @classmethod
    def from_env(cls, **overrides: Any) -> Settings:
        """
        Build settings from MONGO_URL, BOOKSTORE_DB and BOOKSTORE_COLLECTION.

        Keyword overrides whose value is None are ignored, so CLI options
        that were not given fall back to the environment, then the defaults.
        """
        settings = cls(
            uri=os.environ.get("MONGO_URL", DEFAULT_URI),
            database=os.environ.get("BOOKSTORE_DB", DEFAULT_DATABASE),
            collection=os.environ.get("BOOKSTORE_COLLECTION", DEFAULT_COLLECTION),
        )
        given = {k: v for k, v in overrides.items() if v is not None}
        return replace(settings, **given)

    def client_options(self) -> dict[str, Any]:
        """Keyword options passed to the driver client."""
        return {"serverSelectionTimeoutMS": self.server_selection_timeout_ms}
