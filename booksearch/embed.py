"""Rewrite preview URLs into directly embeddable viewer URLs."""
from enum import Enum
from typing import Callable, Dict, Optional

import httpx

from booksearch.models import Book

BLANK_FRAME = "about:blank"
GOOGLE_BOOKS_EMBED = "https://www.google.com/books/edition/_/{id}?hl=en&gbpv=0&gboembed=true"


class PreviewProvider(Enum):
    """Preview hosts, keyed by the host substring that identifies them."""
    ARCHIVE = "archive.org"
    OPENLIBRARY = "openlibrary.org"
    GOOGLE_BOOKS = "books.google.com"
    OTHER = ""


def detect_provider(url: str) -> PreviewProvider:
    """Match a URL to the first provider whose host it contains."""
    for provider in PreviewProvider:
        if provider.value and provider.value in url:
            return provider
    return PreviewProvider.OTHER


def _archive(url: str) -> str:
    return url.replace("/details/", "/embed/")


def _google_books(url: str) -> str:
    volume_id = httpx.URL(url).params.get("id")
    if volume_id:
        return GOOGLE_BOOKS_EMBED.format(id=volume_id)
    return url


def _unchanged(url: str) -> str:
    return url


EMBEDDERS: Dict[PreviewProvider, Callable[[str], str]] = {
    PreviewProvider.ARCHIVE: _archive,
    PreviewProvider.OPENLIBRARY: _unchanged,
    PreviewProvider.GOOGLE_BOOKS: _google_books,
    PreviewProvider.OTHER: _unchanged,
}


def embed_url(book: Book) -> Optional[str]:
    """
    Get the embeddable URL for a book's preview.

    Args:
        book: Resolved book

    Returns:
        Embeddable URL, or None when the book has no preview
    """
    if not book.preview_url:
        return None
    provider = detect_provider(book.preview_url)
    return EMBEDDERS[provider](book.preview_url)


def embed_url_or_blank(book: Book) -> str:
    """Embeddable URL, falling back to an empty frame."""
    return embed_url(book) or BLANK_FRAME
