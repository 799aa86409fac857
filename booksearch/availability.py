"""Enrich books with preview and full-text availability."""
import asyncio
import logging
from collections import defaultdict
from typing import Dict, List, Optional, Sequence, TypeVar

from booksearch.config import Config
from booksearch.errors import AvailabilityLookupFailed
from booksearch.links import archive_details_url
from booksearch.models import AvailabilityInfo, Book

logger = logging.getLogger(__name__)

T = TypeVar("T")


def chunk(items: Sequence[T], size: int) -> List[List[T]]:
    """Split items into consecutive batches of ``size`` (the last may be smaller)."""
    if size < 1:
        raise ValueError("batch size must be positive")
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


def apply_availability(book: Book, info: AvailabilityInfo):
    """Copy one lookup result onto a book."""
    book.preview_available = bool(info.preview_url)
    book.preview_url = info.preview_url or None
    book.readable = bool(info.borrow_url)
    book.read_url = info.borrow_url or info.preview_url or None


def apply_archive_fallback(books: List[Book], config: Optional[Config] = None) -> int:
    """
    Point books without a confirmed preview at their archive copy.

    Books that already have ``preview_available is True`` are left alone.

    Returns:
        Number of books that received the fallback
    """
    applied = 0
    for book in books:
        if book.preview_available is not True and book.ia_identifier:
            url = archive_details_url(book.ia_identifier, config)
            book.preview_available = True
            book.preview_url = url
            book.read_url = url
            applied += 1
    return applied


class AvailabilityResolver:
    """Batched ISBN availability lookup with an archive fallback."""

    def __init__(self, client, batch_size: Optional[int] = None, config: Optional[Config] = None):
        """
        Args:
            client: Anything with an async ``lookup_availability(bibkeys)``
            batch_size: Bibkeys per lookup (defaults to AVAILABILITY_BATCH_SIZE)
            config: Hosts used for archive fallback URLs
        """
        self.client = client
        self.config = config or Config()
        self.batch_size = batch_size if batch_size is not None else self.config.AVAILABILITY_BATCH_SIZE
        if self.batch_size < 1:
            raise ValueError("batch size must be at least 1")

    def batches(self, books: List[Book]) -> List[List[Book]]:
        """ISBN-bearing books split into lookup batches."""
        return chunk([book for book in books if book.isbn], self.batch_size)

    async def _resolve_batch(self, batch: List[Book]) -> int:
        by_key: Dict[str, List[Book]] = defaultdict(list)
        for book in batch:
            by_key[book.bibkey].append(book)

        try:
            availability = await self.client.lookup_availability(list(by_key))
        except AvailabilityLookupFailed as e:
            logger.warning(f"Availability lookup failed, leaving batch unresolved: {e}")
            return 0

        resolved = 0
        for bibkey, info in availability.items():
            for book in by_key.get(bibkey, []):
                apply_availability(book, info)
                resolved += 1
        return resolved

    async def resolve(self, books: List[Book]) -> List[Book]:
        """
        Fill availability fields in place.

        Books whose bibkey is missing from a lookup response, or whose
        batch failed, keep ``preview_available`` as ``None``.

        Returns:
            The same list, enriched
        """
        batches = self.batches(books)
        if batches:
            results = await asyncio.gather(*(self._resolve_batch(batch) for batch in batches))
            logger.info(f"Resolved availability for {sum(results)} books in {len(batches)} batches")

        fallbacks = apply_archive_fallback(books, self.config)
        if fallbacks:
            logger.info(f"Applied archive fallback to {fallbacks} books")
        return books
