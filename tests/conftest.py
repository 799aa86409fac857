"""Shared test helpers."""
import asyncio
from typing import Dict, List, Optional

import pytest

from booksearch.errors import AvailabilityLookupFailed, SearchFailed
from booksearch.models import AvailabilityInfo, Book, SearchPage


def make_book(id: str, isbn: Optional[str] = None, ia: Optional[str] = None,
              has_fulltext: bool = False) -> Book:
    return Book(id=id, title=f"Title {id}", isbn=isbn, ia_identifier=ia, has_fulltext=has_fulltext)


class FakeCatalogClient:
    """In-memory stand-in for CatalogSearchClient."""

    def __init__(self, availability: Optional[Dict[str, AvailabilityInfo]] = None,
                 page: Optional[SearchPage] = None):
        self.availability = availability or {}
        self.page = page or SearchPage(num_found=0, books=[])
        self.failing_bibkeys = set()
        self.search_error: Optional[SearchFailed] = None
        self.search_calls: List[tuple] = []
        self.lookup_calls: List[List[str]] = []
        self.gates: List[asyncio.Event] = []

    async def search(self, query, availability, limit=None):
        self.search_calls.append((query, availability))
        if self.gates:
            await self.gates.pop(0).wait()
        if self.search_error:
            raise self.search_error
        return SearchPage(
            num_found=self.page.num_found,
            books=[Book(**vars(book)) for book in self.page.books]
        )

    async def lookup_availability(self, bibkeys):
        self.lookup_calls.append(list(bibkeys))
        if self.failing_bibkeys & set(bibkeys):
            raise AvailabilityLookupFailed(bibkeys, "status 503")
        return {key: self.availability[key] for key in bibkeys if key in self.availability}


@pytest.fixture
def fake_client():
    return FakeCatalogClient()
