"""URL schemes for covers, catalog pages and archive copies."""
from typing import Optional

from booksearch.config import Config
from booksearch.models import Book

COVER_SIZES = ("S", "M")


def cover_url(book: Book, size: str = "M", config: Optional[Config] = None) -> Optional[str]:
    """Cover image URL, or None when the book has no cover."""
    if size not in COVER_SIZES:
        raise ValueError(f"Unsupported cover size: {size}")
    if book.cover_id is None:
        return None
    config = config or Config()
    return f"{config.COVERS_URL}/b/id/{book.cover_id}-{size}.jpg"


def detail_url(book: Book, config: Optional[Config] = None) -> str:
    config = config or Config()
    return f"{config.OPENLIBRARY_URL}{book.id}"


def borrow_url(book: Book, config: Optional[Config] = None) -> str:
    return f"{detail_url(book, config)}/borrow"


def archive_details_url(ia_identifier: str, config: Optional[Config] = None) -> str:
    config = config or Config()
    return f"{config.ARCHIVE_URL}/details/{ia_identifier}"
