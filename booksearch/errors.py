"""Exceptions raised by the search pipeline."""
from typing import Optional, Sequence


class BookSearchError(Exception):
    """Base class for search pipeline errors."""


class SearchFailed(BookSearchError):
    """The primary catalog search failed; no results are available."""

    USER_MESSAGE = "Failed to fetch search results"

    def __init__(self, reason: str, status_code: Optional[int] = None):
        super().__init__(reason)
        self.reason = reason
        self.status_code = status_code

    @property
    def user_message(self) -> str:
        return self.USER_MESSAGE


class AvailabilityLookupFailed(BookSearchError):
    """A batched availability lookup failed. Never fatal to a search."""

    def __init__(self, bibkeys: Sequence[str], reason: str):
        super().__init__(f"{reason} ({len(bibkeys)} bibkeys)")
        self.bibkeys = list(bibkeys)
        self.reason = reason
