"""
QueryRunner - the bookstore query sequence.

Runs the CRUD, advanced query, aggregation and indexing tasks against the
books collection in a fixed order, printing each result to the console.
Steps are strictly sequential; the first error aborts the rest and is
handled once, in run_queries().
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from loguru import logger
from rich.console import Console

from . import queries
from .client import BookstoreClient
from .collection import BookCollection
from .config import Settings
from .seed import seed_books
from .types import (
    AuthorCount,
    Book,
    DecadeGroup,
    DeleteOutcome,
    ExplainStats,
    GenrePriceSummary,
    IndexInfo,
    UpdateOutcome,
)

__all__ = [
    "AdvancedReport",
    "AggregationReport",
    "CrudReport",
    "IndexReport",
    "QueryRunner",
    "run_queries",
]

GENRE = "Fantasy"
PUBLISHED_AFTER = 2000
AUTHOR = "J.R.R. Tolkien"
UPDATE_TITLE = "The Great Gatsby"
NEW_PRICE = 15.99
DELETE_TITLE = "The Catcher in the Rye"
IN_STOCK_AFTER = 2010
SORT_LIMIT = 5
PAGE_SIZE = 5
TOP_AUTHORS = 3
EXPLAIN_TITLE = "The Hobbit"

TITLE_INDEX = [("title", queries.ASCENDING)]
AUTHOR_YEAR_INDEX = [("author", queries.ASCENDING), ("published_year", queries.ASCENDING)]

RULE_WIDTH = 60


@dataclass
class CrudReport:
    """Results of the basic CRUD task."""

    by_genre: list[Book]
    published_after: list[Book]
    by_author: list[Book]
    update: UpdateOutcome
    updated_book: Book | None
    delete: DeleteOutcome


@dataclass
class AdvancedReport:
    """Results of the advanced query task."""

    in_stock_recent: list[Book]
    projected: list[Book]
    price_ascending: list[Book]
    price_descending: list[Book]
    pages: list[list[Book]] = field(default_factory=list)


@dataclass
class AggregationReport:
    """Results of the aggregation task."""

    genres: list[GenrePriceSummary]
    authors: list[AuthorCount]
    decades: list[DecadeGroup]


@dataclass
class IndexReport:
    """Results of the indexing task."""

    created: list[str]
    without_hint: ExplainStats
    with_hint: ExplainStats
    indexes: list[IndexInfo]


class QueryRunner:
    """
    Runs the query tasks against one books collection.

    Example:
        runner = QueryRunner(client.books)
        crud = await runner.run_crud()
        print(crud.update.modified_count)
    """

    def __init__(self, books: BookCollection, console: Console | None = None) -> None:
        self.books = books
        self.console = console or Console()

    def _task(self, title: str) -> None:
        self.console.print(f"\n🎯 {title}")
        self.console.print("-" * 40)

    def _step(self, heading: str) -> None:
        logger.debug("Step: {}", heading)
        self.console.print(f"\n{heading}")

    def _line(self, text: str) -> None:
        self.console.print(f"   {text}", markup=False, highlight=False, emoji=False)

    async def run(self) -> None:
        """Run every task in order."""
        self.console.print("=" * RULE_WIDTH)
        self.console.print("📚 MONGODB QUERIES - PLP BOOKSTORE")
        self.console.print("=" * RULE_WIDTH)

        await self.run_crud()
        await self.run_advanced()
        await self.run_aggregations()
        await self.run_indexing()

    async def run_crud(self) -> CrudReport:
        self._task("TASK 2: BASIC CRUD OPERATIONS")

        self._step(f"1. 📖 All {GENRE} books:")
        by_genre = await self.books.find(queries.by_genre(GENRE))
        for book in by_genre:
            self._line(f"- {book['title']} by {book['author']}")

        self._step(f"2. 📅 Books published after {PUBLISHED_AFTER}:")
        recent = await self.books.find(queries.published_after(PUBLISHED_AFTER))
        for book in recent:
            self._line(f"- {book['title']} ({book['published_year']})")

        self._step(f"3. ✍️ Books by {AUTHOR}:")
        by_author = await self.books.find(queries.by_author(AUTHOR))
        for book in by_author:
            self._line(f"- {book['title']} ({book['published_year']})")

        self._step(f"4. 💰 Updating price of '{UPDATE_TITLE}'...")
        update = await self.books.update_one(
            queries.by_title(UPDATE_TITLE),
            queries.set_fields(price=NEW_PRICE),
        )
        self._line(f"✅ Modified {update.modified_count} document(s)")

        updated_book = await self.books.find_one(queries.by_title(UPDATE_TITLE))
        if updated_book is None:
            self._line(f"'{UPDATE_TITLE}' not found")
        else:
            self._line(f"New price: ${updated_book['price']}")

        self._step(f"5. 🗑️ Deleting '{DELETE_TITLE}'...")
        delete = await self.books.delete_one(queries.by_title(DELETE_TITLE))
        self._line(f"✅ Deleted {delete.deleted_count} document(s)")

        return CrudReport(
            by_genre=by_genre,
            published_after=recent,
            by_author=by_author,
            update=update,
            updated_book=updated_book,
            delete=delete,
        )

    async def run_advanced(self) -> AdvancedReport:
        self._task("TASK 3: ADVANCED QUERIES")

        self._step(f"1. 📦 In-stock books published after {IN_STOCK_AFTER}:")
        in_stock = await self.books.find(queries.in_stock_published_after(IN_STOCK_AFTER))
        for book in in_stock:
            self._line(f"- {book['title']} ({book['published_year']}) - ${book['price']}")

        self._step("2. 🎯 Books with projection (title, author, price only):")
        projected = await self.books.find(
            queries.by_genre(GENRE),
            queries.include_fields("title", "author", "price"),
        )
        self.console.print(projected)

        price_projection = queries.include_fields("title", "price")

        self._step("3. 📊 Books sorted by price (ascending):")
        ascending = await self.books.find(
            {},
            price_projection,
            sort=[("price", queries.ASCENDING)],
            limit=SORT_LIMIT,
        )
        self.console.print(ascending)

        self._step("   📊 Books sorted by price (descending):")
        descending = await self.books.find(
            {},
            price_projection,
            sort=[("price", queries.DESCENDING)],
            limit=SORT_LIMIT,
        )
        self.console.print(descending)

        pages = []
        for page in (1, 2):
            indent = "" if page == 1 else "   "
            prefix = "4. " if page == 1 else ""
            self._step(f"{indent}{prefix}📄 Pagination - Page {page} ({PAGE_SIZE} books):")
            docs = await self.books.paginate(
                {},
                queries.include_fields("title", "author"),
                sort=[("title", queries.ASCENDING)],
                page=page,
                page_size=PAGE_SIZE,
            )
            self.console.print(docs)
            pages.append(docs)

        return AdvancedReport(
            in_stock_recent=in_stock,
            projected=projected,
            price_ascending=ascending,
            price_descending=descending,
            pages=pages,
        )

    async def run_aggregations(self) -> AggregationReport:
        self._task("TASK 4: AGGREGATION PIPELINE")

        self._step("1. 📈 Average price by genre:")
        genre_docs = await self.books.aggregate(queries.average_price_by_genre())
        self.console.print(genre_docs)

        self._step("2. 👑 Author with most books:")
        author_docs = await self.books.aggregate(queries.top_authors(TOP_AUTHORS))
        self.console.print(author_docs)

        self._step("3. 📅 Books by publication decade:")
        decade_docs = await self.books.aggregate(queries.books_by_decade())
        self.console.print(decade_docs)

        return AggregationReport(
            genres=[GenrePriceSummary.from_document(doc) for doc in genre_docs],
            authors=[AuthorCount.from_document(doc) for doc in author_docs],
            decades=[DecadeGroup.from_document(doc) for doc in decade_docs],
        )

    async def run_indexing(self) -> IndexReport:
        self._task("TASK 5: INDEXING")

        self._step("1. 🔍 Creating index on 'title' field...")
        title_index = await self.books.create_index(TITLE_INDEX)
        self._line("✅ Index created on title field")

        self._step("2. 🔍 Creating compound index on 'author' and 'published_year'...")
        compound_index = await self.books.create_index(AUTHOR_YEAR_INDEX)
        self._line("✅ Compound index created on author and published_year")

        self._step("3. ⚡ Performance comparison with explain():")
        title_filter = queries.by_title(EXPLAIN_TITLE)

        self._step("   Without index (collection scan):")
        without_hint = await self.books.explain(title_filter)
        self._explain_lines(without_hint)

        self._step("   With index (index scan):")
        with_hint = await self.books.explain(title_filter, hint=TITLE_INDEX)
        self._explain_lines(with_hint)

        self._step("4. 📋 Current indexes on books collection:")
        indexes = await self.books.list_indexes()
        for i, index in enumerate(indexes, start=1):
            self._line(f"{i}. {_compact_json(index.key_document())}")

        return IndexReport(
            created=[title_index, compound_index],
            without_hint=without_hint,
            with_hint=with_hint,
            indexes=indexes,
        )

    def _explain_lines(self, stats: ExplainStats) -> None:
        self._line(f"Documents examined: {stats.docs_examined}")
        self._line(f"Execution time: {stats.execution_time_ms}ms")


def _compact_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), default=str)


async def run_queries(
    settings: Settings | None = None,
    console: Console | None = None,
) -> bool:
    """
    Connect, run every task, and always close the connection.

    Any error aborts the remaining steps and is logged here; writes that
    already happened stay applied.

    Args:
        settings: Connection settings. Defaults to Settings().
        console: Console to print results to.

    Returns:
        True if every step completed, False if the run failed.
    """
    settings = settings or Settings()
    console = console or Console()
    client = BookstoreClient.from_settings(settings)

    try:
        await client.connect()
        logger.info("Connected to {} ({})", settings.uri, settings.database)
        console.print("✅ Connected successfully to MongoDB")

        if settings.seed:
            await seed_books(client.books)

        await QueryRunner(client.books, console).run()
        return True
    except Exception as e:
        logger.exception("Error: {}", e)
        return False
    finally:
        await client.close()
        logger.info("Connection closed")
        console.print("\n🔌 Connection closed")
