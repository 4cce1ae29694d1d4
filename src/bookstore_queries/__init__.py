"""
bookstore-queries - MongoDB query walkthrough for the PLP bookstore.

This package connects to a MongoDB server and runs a fixed sequence of
operations against the books collection:
- Basic CRUD (find by genre/author/year, update a price, delete a title)
- Advanced queries (compound filters, projection, sorting, pagination)
- Aggregation pipelines (average price by genre, top authors, decades)
- Indexing (single and compound indexes, explain, index listing)

Example usage:
    import asyncio

    from bookstore_queries import BookstoreClient, QueryRunner, Settings

    async def main():
        async with BookstoreClient.from_settings(Settings()) as client:
            runner = QueryRunner(client.books)
            report = await runner.run_aggregations()
            for genre in report.genres:
                print(genre.genre, genre.average_price)

    asyncio.run(main())

Or run the whole sequence from the command line:
    bookstore-queries --seed
"""

from __future__ import annotations

__version__ = "0.1.0"

from .client import BookstoreClient
from .collection import BookCollection
from .config import Settings
from .runner import (
    AdvancedReport,
    AggregationReport,
    CrudReport,
    IndexReport,
    QueryRunner,
    run_queries,
)
from .seed import SAMPLE_BOOKS, seed_books
from .types import (
    AuthorCount,
    Book,
    BookstoreError,
    ClientNotConnectedError,
    DatabaseConnectionError,
    DecadeGroup,
    DeleteOutcome,
    ExplainStats,
    GenrePriceSummary,
    IndexInfo,
    OperationFailure,
    UpdateOutcome,
)

__all__ = [
    # Main classes
    "BookstoreClient",
    "BookCollection",
    "QueryRunner",
    "Settings",
    "run_queries",
    # Seed data
    "SAMPLE_BOOKS",
    "seed_books",
    # Result types
    "Book",
    "UpdateOutcome",
    "DeleteOutcome",
    "GenrePriceSummary",
    "AuthorCount",
    "DecadeGroup",
    "IndexInfo",
    "ExplainStats",
    "CrudReport",
    "AdvancedReport",
    "AggregationReport",
    "IndexReport",
    # Exceptions
    "BookstoreError",
    "DatabaseConnectionError",
    "ClientNotConnectedError",
    "OperationFailure",
    # Version
    "__version__",
]
