"""Command-line entry point for the bookstore query run."""

from __future__ import annotations

import asyncio

import typer

from .config import Settings
from .log import configure_logging
from .runner import run_queries

app = typer.Typer(
    help="Run the PLP bookstore MongoDB queries and print the results.",
    add_completion=False,
)


@app.command()
def run(
    uri: str | None = typer.Option(
        None, "--uri", help="MongoDB connection string. Defaults to $MONGO_URL or localhost."
    ),
    database: str | None = typer.Option(
        None, "--database", "-d", help="Database name. Defaults to $BOOKSTORE_DB or plp_bookstore."
    ),
    collection: str | None = typer.Option(
        None, "--collection", "-c", help="Collection name. Defaults to $BOOKSTORE_COLLECTION or books."
    ),
    seed: bool = typer.Option(
        False, "--seed/--no-seed", help="Reload the sample books before running the queries."
    ),
    log_level: str = typer.Option(
        "INFO",
        "--log-level",
        case_sensitive=False,
        help="Logging level (TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL).",
    ),
) -> None:
    """
    Connect, run every query task in order, and close the connection.
    """
    configure_logging(log_level)

    settings = Settings.from_env(uri=uri, database=database, collection=collection, seed=seed)
    ok = asyncio.run(run_queries(settings))
    if not ok:
        raise typer.Exit(code=1)


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
