"""Compose catalog search queries from free text and filters."""
from booksearch.models import AdvancedFilters, Availability


def is_searchable(query: str, filters: AdvancedFilters) -> bool:
    """
    Check whether a query/filter pair should trigger a search at all.

    An empty query with every filter at its default is a no-op.
    """
    return bool(
        query
        or filters.author
        or filters.subject
        or filters.year
        or filters.availability != Availability.ALL
    )


def build_query(query: str, filters: AdvancedFilters) -> str:
    """
    Build the catalog query string.

    Args:
        query: Free text (may be empty)
        filters: Structured filters

    Returns:
        Query with ``author:``, ``subject:`` and ``publishdate:`` terms appended
    """
    query_string = query
    if filters.author:
        query_string += f" author:{filters.author}"
    if filters.subject:
        query_string += f" subject:{filters.subject}"
    if filters.year:
        query_string += f" publishdate:{filters.year}"
    return query_string
