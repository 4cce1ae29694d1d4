"""
Type definitions for bookstore-queries.

Provides the book document shape, the result types returned by the
query steps, and the exception hierarchy raised by the client wrappers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence, TypedDict


class Book(TypedDict, total=False):
    """A document in the books collection."""

    _id: Any
    title: str
    author: str
    genre: str
    published_year: int
    price: float
    in_stock: bool


@dataclass
class UpdateOutcome:
    """
    Result of an update_one call.

    Attributes:
        matched_count: Number of documents matched.
        modified_count: Number of documents modified.
    """

    matched_count: int = 0
    modified_count: int = 0


@dataclass
class DeleteOutcome:
    """
    Result of a delete_one call.

    Attributes:
        deleted_count: Number of documents deleted.
    """

    deleted_count: int = 0


@dataclass
class GenrePriceSummary:
    """Average price and book count for one genre."""

    genre: str
    average_price: float
    book_count: int

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> GenrePriceSummary:
        return cls(
            genre=doc["_id"],
            average_price=doc["averagePrice"],
            book_count=doc["bookCount"],
        )


@dataclass
class AuthorCount:
    """Number of books written by one author."""

    author: str
    book_count: int

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> AuthorCount:
        return cls(author=doc["_id"], book_count=doc["bookCount"])


@dataclass
class DecadeGroup:
    """
    Books published in one decade.

    Attributes:
        decade: First year of the decade (e.g. 1930).
        book_count: Number of books in the decade.
        books: Titles in the decade, in the order the server pushed them.
    """

    decade: int
    book_count: int
    books: list[str] = field(default_factory=list)

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> DecadeGroup:
        return cls(
            decade=doc["_id"],
            book_count=doc["bookCount"],
            books=list(doc.get("books", [])),
        )


@dataclass
class IndexInfo:
    """
    An index on the collection.

    Attributes:
        name: Server-side index name (e.g. "title_1").
        key: Ordered (field, direction) pairs.
    """

    name: str
    key: list[tuple[str, Any]] = field(default_factory=list)

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> IndexInfo:
        return cls(name=doc.get("name", ""), key=list(dict(doc["key"]).items()))

    def key_document(self) -> dict[str, Any]:
        """Return the key as a plain dict, as the server prints it."""
        return dict(self.key)


@dataclass
class ExplainStats:
    """
    Execution statistics reported by explain for a find.

    Attributes:
        docs_examined: totalDocsExamined.
        execution_time_ms: executionTimeMillis.
        n_returned: nReturned.
        stage: Top stage of the winning plan (e.g. "COLLSCAN", "FETCH").
        index_name: Name of the index the winning plan scanned, if any.
    """

    docs_examined: int = 0
    execution_time_ms: int = 0
    n_returned: int = 0
    stage: str | None = None
    index_name: str | None = None

    @classmethod
    def from_explain(cls, result: Mapping[str, Any]) -> ExplainStats:
        stats = result.get("executionStats", {})
        plan = result.get("queryPlanner", {}).get("winningPlan", {})
        # slot-based engine nests the stage tree one level down
        plan = plan.get("queryPlan", plan)
        return cls(
            docs_examined=stats.get("totalDocsExamined", 0),
            execution_time_ms=stats.get("executionTimeMillis", 0),
            n_returned=stats.get("nReturned", 0),
            stage=plan.get("stage"),
            index_name=_find_index_name(plan),
        )


def _find_index_name(plan: Mapping[str, Any]) -> str | None:
    # IXSCAN sits below FETCH/PROJECTION stages
    while plan:
        if "indexName" in plan:
            return plan["indexName"]
        plan = plan.get("inputStage", {})
    return None


# Type aliases for clarity
Filter = Mapping[str, Any]
Projection = Mapping[str, Any] | None
Sort = list[tuple[str, int]]
Pipeline = list[dict[str, Any]]
IndexKeys = Sequence[tuple[str, int]] | str


class BookstoreError(Exception):
    """Base exception for bookstore query runs."""

    def __init__(self, message: str, code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


class DatabaseConnectionError(BookstoreError):
    """Error raised when the MongoDB server cannot be reached."""

    pass


class ClientNotConnectedError(BookstoreError):
    """Error raised when a collection is requested before connect()."""

    pass


class OperationFailure(BookstoreError):
    """Error raised when a database operation fails."""

    pass
