"""Sample books used to (re)load the collection before a run."""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from .types import Book

if TYPE_CHECKING:
    from .collection import BookCollection

__all__ = ["SAMPLE_BOOKS", "seed_books"]

SAMPLE_BOOKS: list[Book] = [
    {
        "title": "To Kill a Mockingbird",
        "author": "Harper Lee",
        "genre": "Fiction",
        "published_year": 1960,
        "price": 12.99,
        "in_stock": True,
    },
    {
        "title": "1984",
        "author": "George Orwell",
        "genre": "Dystopian",
        "published_year": 1949,
        "price": 10.99,
        "in_stock": True,
    },
    {
        "title": "The Great Gatsby",
        "author": "F. Scott Fitzgerald",
        "genre": "Fiction",
        "published_year": 1925,
        "price": 9.99,
        "in_stock": True,
    },
    {
        "title": "Brave New World",
        "author": "Aldous Huxley",
        "genre": "Dystopian",
        "published_year": 1932,
        "price": 11.5,
        "in_stock": False,
    },
    {
        "title": "The Hobbit",
        "author": "J.R.R. Tolkien",
        "genre": "Fantasy",
        "published_year": 1937,
        "price": 14.99,
        "in_stock": True,
    },
    {
        "title": "The Catcher in the Rye",
        "author": "J.D. Salinger",
        "genre": "Fiction",
        "published_year": 1951,
        "price": 8.99,
        "in_stock": True,
    },
    {
        "title": "Pride and Prejudice",
        "author": "Jane Austen",
        "genre": "Romance",
        "published_year": 1813,
        "price": 7.99,
        "in_stock": True,
    },
    {
        "title": "The Lord of the Rings",
        "author": "J.R.R. Tolkien",
        "genre": "Fantasy",
        "published_year": 1954,
        "price": 19.98,
        "in_stock": True,
    },
    {
        "title": "Animal Farm",
        "author": "George Orwell",
        "genre": "Political Satire",
        "published_year": 1945,
        "price": 8.5,
        "in_stock": False,
    },
    {
        "title": "The Alchemist",
        "author": "Paulo Coelho",
        "genre": "Fiction",
        "published_year": 1988,
        "price": 10.49,
        "in_stock": True,
    },
    {
        "title": "The Night Circus",
        "author": "Erin Morgenstern",
        "genre": "Fantasy",
        "published_year": 2011,
        "price": 13.49,
        "in_stock": True,
    },
    {
        "title": "The Road",
        "author": "Cormac McCarthy",
        "genre": "Dystopian",
        "published_year": 2006,
        "price": 11.25,
        "in_stock": False,
    },
]


async def seed_books(collection: BookCollection, books: list[Book] | None = None) -> int:
    """
    Replace the collection contents with the sample books.

    Drops the collection (and its indexes) first, so repeated runs start
    from the same data.

    Args:
        collection: Target collection.
        books: Documents to load. Defaults to SAMPLE_BOOKS.

    Returns:
        Number of documents inserted.
    """
    books = SAMPLE_BOOKS if books is None else books
    await collection.drop()
    inserted = await collection.insert_many([dict(book) for book in books])
    logger.info("Seeded {} with {} books", collection.full_name, len(inserted))
    return len(inserted)
