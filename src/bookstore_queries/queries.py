"""
Query documents for the bookstore run.

Every filter, projection, sort, aggregation pipeline and explain command
the runner sends is built here, so the exact parameters can be read and
tested without a server.
"""

from __future__ import annotations

from typing import Any

from .types import Filter, Pipeline, Sort

__all__ = [
    "ASCENDING",
    "DESCENDING",
    "average_price_by_genre",
    "books_by_decade",
    "by_author",
    "by_genre",
    "by_title",
    "explain_find",
    "in_stock_published_after",
    "include_fields",
    "page_bounds",
    "published_after",
    "set_fields",
    "top_authors",
]

ASCENDING = 1
DESCENDING = -1


def by_genre(genre: str) -> Filter:
    return {"genre": genre}


def by_author(author: str) -> Filter:
    return {"author": author}


def by_title(title: str) -> Filter:
    return {"title": title}


def published_after(year: int) -> Filter:
    """Books with published_year strictly greater than year."""
    return {"published_year": {"$gt": year}}


def in_stock_published_after(year: int) -> Filter:
    return {"in_stock": True, "published_year": {"$gt": year}}


def set_fields(**fields: Any) -> dict[str, Any]:
    return {"$set": fields}


def include_fields(*fields: str, with_id: bool = False) -> dict[str, int]:
    """
    Build an inclusion projection.

    Args:
        *fields: Fields to return.
        with_id: Keep _id, which the server returns unless excluded.

    Returns:
        Projection document, e.g. {"title": 1, "price": 1, "_id": 0}.
    """
    projection = {name: 1 for name in fields}
    if not with_id:
        projection["_id"] = 0
    return projection


def page_bounds(page: int, page_size: int) -> tuple[int, int]:
    """
    Convert a 1-based page number into (skip, limit).

    Raises:
        ValueError: If page or page_size is not positive.
    """
    if page < 1:
        raise ValueError(f"page must be >= 1, got {page}")
    if page_size < 1:
        raise ValueError(f"page_size must be >= 1, got {page_size}")
    return (page - 1) * page_size, page_size


def average_price_by_genre() -> Pipeline:
    return [
        {
            "$group": {
                "_id": "$genre",
                "averagePrice": {"$avg": "$price"},
                "bookCount": {"$sum": 1},
            }
        },
        {"$sort": {"averagePrice": DESCENDING}},
    ]


def top_authors(limit: int = 3) -> Pipeline:
    return [
        {"$group": {"_id": "$author", "bookCount": {"$sum": 1}}},
        {"$sort": {"bookCount": DESCENDING}},
        {"$limit": limit},
    ]


def books_by_decade() -> Pipeline:
    """Group titles by decade, where decade = year - year % 10."""
    return [
        {
            "$project": {
                "title": 1,
                "published_year": 1,
                "decade": {
                    "$subtract": [
                        "$published_year",
                        {"$mod": ["$published_year", 10]},
                    ]
                },
            }
        },
        {
            "$group": {
                "_id": "$decade",
                "bookCount": {"$sum": 1},
                "books": {"$push": "$title"},
            }
        },
        {"$sort": {"_id": ASCENDING}},
    ]


def explain_find(
    collection: str,
    filter: Filter,
    hint: Sort | str | None = None,
    verbosity: str = "executionStats",
) -> dict[str, Any]:
    """
    Build an explain command for a find.

    Args:
        collection: Collection name.
        filter: Query filter.
        hint: Index to force, as (field, direction) pairs or an index name.
        verbosity: Explain verbosity.

    Returns:
        Command document for Database.command().
    """
    find: dict[str, Any] = {"find": collection, "filter": dict(filter)}
    if hint is not None:
        find["hint"] = hint if isinstance(hint, str) else dict(hint)
    return {"explain": find, "verbosity": verbosity}
