"""
BookCollection - async operations on the books collection.

Wraps a pymongo AsyncCollection with the reads, writes, aggregations and
index calls the query run issues, returning plain lists and result
dataclasses and re-raising driver errors as OperationFailure.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pymongo.errors import PyMongoError

from . import queries
from .types import (
    Book,
    DeleteOutcome,
    ExplainStats,
    IndexInfo,
    OperationFailure,
    UpdateOutcome,
)

if TYPE_CHECKING:
    from pymongo.asynchronous.collection import AsyncCollection

    from .types import Filter, IndexKeys, Pipeline, Projection, Sort

__all__ = ["BookCollection"]


def _failure(exc: PyMongoError) -> OperationFailure:
    return OperationFailure(str(exc), code=getattr(exc, "code", None))


class BookCollection:
    """
    The books collection with async query operations.

    Example:
        books = client.books

        fantasy = await books.find({"genre": "Fantasy"})
        cheapest = await books.find({}, sort=[("price", 1)], limit=5)
        result = await books.update_one({"title": "Dune"}, {"$set": {"price": 9.99}})
        stats = await books.explain({"title": "Dune"}, hint=[("title", 1)])
    """

    __slots__ = ("_collection",)

    def __init__(self, collection: AsyncCollection[Any]) -> None:
        """
        Initialize the wrapper.

        Args:
            collection: Driver collection handle.
        """
        self._collection = collection

    @property
    def name(self) -> str:
        """Get the collection name."""
        return self._collection.name

    @property
    def full_name(self) -> str:
        """Get the full collection name (database.collection)."""
        return self._collection.full_name

    async def find(
        self,
        filter: Filter | None = None,
        projection: Projection = None,
        sort: Sort | None = None,
        skip: int = 0,
        limit: int = 0,
    ) -> list[Book]:
        """
        Find documents matching the filter.

        Args:
            filter: Query filter.
            projection: Fields to include/exclude.
            sort: List of (field, direction) pairs.
            skip: Number of documents to skip.
            limit: Maximum number of documents (0 for no limit).

        Returns:
            List of matching documents.

        Raises:
            OperationFailure: If the query fails.
        """
        try:
            cursor = self._collection.find(filter or {}, projection)
            if sort:
                cursor = cursor.sort(sort)
            if skip > 0:
                cursor = cursor.skip(skip)
            if limit > 0:
                cursor = cursor.limit(limit)
            return await cursor.to_list()
        except PyMongoError as e:
            raise _failure(e) from e

    async def paginate(
        self,
        filter: Filter | None,
        projection: Projection,
        sort: Sort,
        page: int,
        page_size: int,
    ) -> list[Book]:
        """
        Read one page of a sorted query.

        The sort must be stable across pages (e.g. on a unique field) for
        pages to be disjoint.

        Args:
            filter: Query filter.
            projection: Fields to include/exclude.
            sort: List of (field, direction) pairs.
            page: 1-based page number.
            page_size: Documents per page.

        Returns:
            Documents on the page, possibly fewer than page_size.
        """
        skip, limit = queries.page_bounds(page, page_size)
        return await self.find(filter, projection, sort=sort, skip=skip, limit=limit)

    async def find_one(
        self,
        filter: Filter | None = None,
        projection: Projection = None,
    ) -> Book | None:
        """
        Find a single document.

        Returns:
            The matching document, or None if not found.
        """
        try:
            return await self._collection.find_one(filter or {}, projection)
        except PyMongoError as e:
            raise _failure(e) from e

    async def insert_many(self, documents: list[Book]) -> list[Any]:
        """
        Insert documents.

        Returns:
            The _ids of the inserted documents.
        """
        try:
            result = await self._collection.insert_many([dict(doc) for doc in documents])
        except PyMongoError as e:
            raise _failure(e) from e
        return list(result.inserted_ids)

    async def update_one(self, filter: Filter, update: dict[str, Any]) -> UpdateOutcome:
        """
        Update a single document.

        Args:
            filter: Query filter to match the document.
            update: Update operations ($set, etc.).

        Returns:
            UpdateOutcome with match/modify counts.

        Raises:
            OperationFailure: If the update fails.
        """
        try:
            result = await self._collection.update_one(filter, update)
        except PyMongoError as e:
            raise _failure(e) from e
        return UpdateOutcome(
            matched_count=result.matched_count,
            modified_count=result.modified_count,
        )

    async def delete_one(self, filter: Filter) -> DeleteOutcome:
        """
        Delete a single document.

        Returns:
            DeleteOutcome with the deleted count.

        Raises:
            OperationFailure: If the delete fails.
        """
        try:
            result = await self._collection.delete_one(filter)
        except PyMongoError as e:
            raise _failure(e) from e
        return DeleteOutcome(deleted_count=result.deleted_count)

    async def aggregate(self, pipeline: Pipeline) -> list[dict[str, Any]]:
        """
        Run an aggregation pipeline.

        Args:
            pipeline: List of aggregation stages.

        Returns:
            List of output documents.
        """
        try:
            cursor = await self._collection.aggregate(pipeline)
            return await cursor.to_list()
        except PyMongoError as e:
            raise _failure(e) from e

    async def create_index(self, keys: IndexKeys, **kwargs: Any) -> str:
        """
        Create an index on the collection.

        Args:
            keys: Index keys as list of (field, direction) tuples,
                  or a single field name (ascending).
            **kwargs: Additional index options (unique, name, etc.).

        Returns:
            Name of the created index.
        """
        if isinstance(keys, str):
            keys = [(keys, queries.ASCENDING)]

        try:
            return await self._collection.create_index(list(keys), **kwargs)
        except PyMongoError as e:
            raise _failure(e) from e

    async def list_indexes(self) -> list[IndexInfo]:
        """List the indexes on the collection, _id_ included."""
        try:
            cursor = await self._collection.list_indexes()
            docs = await cursor.to_list()
        except PyMongoError as e:
            raise _failure(e) from e
        return [IndexInfo.from_document(doc) for doc in docs]

    async def explain(
        self,
        filter: Filter,
        hint: Sort | str | None = None,
    ) -> ExplainStats:
        """
        Explain a find with executionStats verbosity.

        Args:
            filter: Query filter.
            hint: Index to force, as (field, direction) pairs or an index name.

        Returns:
            ExplainStats with documents examined and execution time.
        """
        command = queries.explain_find(self.name, filter, hint)
        try:
            result = await self._collection.database.command(command)
        except PyMongoError as e:
            raise _failure(e) from e
        return ExplainStats.from_explain(result)

    async def drop(self) -> None:
        """Drop the collection."""
        try:
            await self._collection.drop()
        except PyMongoError as e:
            raise _failure(e) from e

    def __repr__(self) -> str:
        return f"BookCollection({self.full_name!r})"
