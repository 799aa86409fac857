"""Availability post-filtering of resolved results."""
from typing import List

from booksearch.models import Availability, Book


def filter_by_availability(books: List[Book], availability: Availability) -> List[Book]:
    """
    Apply the availability filter.

    Args:
        books: Resolved books
        availability: Requested availability

    Returns:
        Books matching the filter (the input list itself for ``all``)
    """
    if availability == Availability.PREVIEW:
        return [book for book in books if book.preview_available is True]
    if availability == Availability.FULLTEXT:
        return [book for book in books if book.has_fulltext is True]
    return books


def reported_total(num_found: int, books: List[Book], availability: Availability) -> int:
    """Server total for ``all``; the server total is not filter-aware otherwise."""
    if availability == Availability.ALL:
        return num_found
    return len(books)
