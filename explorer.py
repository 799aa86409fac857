#!/usr/bin/env python3
"""Book Search Explorer CLI - catalog search with preview availability."""
import argparse
import asyncio
import sys
import json
from tabulate import tabulate
from booksearch.client import CatalogSearchClient
from booksearch.config import Config
from booksearch.embed import embed_url, embed_url_or_blank
from booksearch.links import borrow_url, cover_url, detail_url
from booksearch.models import AdvancedFilters, Availability
from booksearch.orchestrator import SearchOrchestrator, SearchState
import logging

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def build_filters(args) -> AdvancedFilters:
    """Build search filters from CLI arguments."""
    return AdvancedFilters(
        author=args.author,
        subject=args.subject,
        year=args.year,
        availability=Availability(args.availability)
    )


async def run_search(args, config: Config):
    """Run one search and return the final snapshot (None for a no-op)."""
    filters = build_filters(args)

    async with CatalogSearchClient(config=config, timeout=args.timeout) as client:
        orchestrator = SearchOrchestrator(client)
        snapshot = await orchestrator.search(args.query, filters)

    if snapshot.state == SearchState.IDLE:
        logger.warning("Nothing to search for: give a query or at least one filter")
        return None
    if snapshot.state == SearchState.FAILED:
        logger.error(f"❌ {snapshot.error}")
        sys.exit(1)
    return snapshot


def availability_label(book) -> str:
    """Badge text for a book's availability."""
    if book.has_fulltext:
        return "Full text"
    if book.preview_available:
        return "Preview"
    if book.preview_available is None:
        return "Unknown"
    return "-"


def display_books(snapshot, format_type: str, config: Config):
    """Display books in specified format."""
    books = snapshot.books

    if format_type == "table":
        headers = ["Title", "Author", "Year", "Publisher", "Languages", "Available"]
        rows = [
            [
                book.title[:50] + "..." if len(book.title) > 50 else book.title,
                book.author[:30] + "..." if len(book.author) > 30 else book.author,
                book.year,
                book.publisher[:30] + "..." if len(book.publisher) > 30 else book.publisher,
                book.languages_str,
                availability_label(book)
            ]
            for book in books
        ]
        print("\n" + tabulate(rows, headers=headers, tablefmt="grid"))
        print(f"\nShowing {len(books)} of {snapshot.total} results")

    elif format_type == "json":
        books_dict = [
            {
                "id": book.id,
                "title": book.title,
                "author": book.author,
                "year": book.year,
                "publisher": book.publisher,
                "languages": book.languages,
                "isbn": book.isbn,
                "ia_identifier": book.ia_identifier,
                "has_fulltext": book.has_fulltext,
                "preview_available": book.preview_available,
                "preview_url": book.preview_url,
                "read_url": book.read_url,
                "readable": book.readable,
                "cover_url": cover_url(book, "M", config),
                "detail_url": detail_url(book, config),
                "borrow_url": borrow_url(book, config) if book.has_fulltext else None,
                "embed_url": embed_url(book)
            }
            for book in books
        ]
        print(json.dumps({"total": snapshot.total, "books": books_dict}, indent=2))

    elif format_type == "compact":
        for i, book in enumerate(books, 1):
            print(f"{i}. {book.title} - {book.author} [{availability_label(book)}]")


def search_books(args, config: Config):
    """Search for books and display them."""
    snapshot = asyncio.run(run_search(args, config))
    if snapshot is not None:
        display_books(snapshot, args.format, config)


def show_preview(args, config: Config):
    """Print the embeddable preview URL of one result."""
    snapshot = asyncio.run(run_search(args, config))
    if snapshot is None:
        return

    if not 1 <= args.index <= len(snapshot.books):
        logger.error(f"❌ Result {args.index} out of range (got {len(snapshot.books)} results)")
        sys.exit(1)

    book = snapshot.books[args.index - 1]
    print(f"{book.title} - {book.author}")
    print(embed_url_or_blank(book))


def add_filter_arguments(parser: argparse.ArgumentParser):
    """Query and filter arguments shared by all commands."""
    parser.add_argument("query", nargs="?", default="", help="Free-text query")
    parser.add_argument("--author", default="", help="Restrict to an author")
    parser.add_argument("--subject", default="", help="Restrict to a subject")
    parser.add_argument("--year", default="", help="Restrict to a publish year")
    parser.add_argument(
        "--availability",
        choices=[a.value for a in Availability],
        default=Availability.ALL.value,
        help="Availability filter (default: all)"
    )
    parser.add_argument("--timeout", type=int, default=None, help="Request timeout in seconds")


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Book Search Explorer - search the catalog and find readable previews",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Search with defaults
  %(prog)s search "the hobbit"

  # Only books with a readable preview
  %(prog)s search "dune" --author herbert --availability preview

  # Filters only, JSON output
  %(prog)s search --subject astronomy --year 1990 --format json

  # Embeddable preview URL of the second result
  %(prog)s preview "alice in wonderland" --index 2
        """
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # Search command
    search_parser = subparsers.add_parser("search", help="Search for books")
    add_filter_arguments(search_parser)
    search_parser.add_argument("--format", choices=["table", "json", "compact"], default="table", help="Output format")

    # Preview command
    preview_parser = subparsers.add_parser("preview", help="Show the embeddable preview URL of a result")
    add_filter_arguments(preview_parser)
    preview_parser.add_argument("--index", type=int, default=1, help="Result number (default: 1)")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    config = Config()

    try:
        if args.command == "search":
            search_books(args, config)

        elif args.command == "preview":
            show_preview(args, config)

    except KeyboardInterrupt:
        logger.info("\n⚠️  Interrupted by user")
        sys.exit(0)
    except Exception as e:
        logger.error(f"❌ Error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
