"""Search orchestration: query, catalog search, availability, filtering."""
import asyncio
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple

from booksearch.availability import AvailabilityResolver
from booksearch.errors import SearchFailed
from booksearch.filters import filter_by_availability, reported_total
from booksearch.models import AdvancedFilters, Book
from booksearch.query import build_query, is_searchable

logger = logging.getLogger(__name__)


class SearchState(str, Enum):
    """Lifecycle of the published search result."""
    IDLE = "idle"
    SEARCHING = "searching"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class SearchSnapshot:
    """Everything a consumer may read about the current search."""
    state: SearchState = SearchState.IDLE
    books: Tuple[Book, ...] = ()
    total: int = 0
    error: Optional[str] = None
    request_id: int = 0

    @property
    def loading(self) -> bool:
        """Whether this snapshot belongs to a running search."""
        return self.state == SearchState.SEARCHING


class SearchOrchestrator:
    """
    Runs the search pipeline and publishes its result.

    The published snapshot is replaced by a single assignment, so readers
    always see a consistent state. Each search takes a new request id and
    only the latest request may publish its outcome.
    """

    def __init__(self, client, resolver: Optional[AvailabilityResolver] = None):
        """
        Args:
            client: Catalog client with async ``search`` and ``lookup_availability``
            resolver: Availability resolver (built around ``client`` by default)
        """
        self.client = client
        self.resolver = resolver or AvailabilityResolver(client)
        self._snapshot = SearchSnapshot()
        self._request_seq = 0

    @property
    def snapshot(self) -> SearchSnapshot:
        """Current published snapshot."""
        return self._snapshot

    @property
    def state(self) -> SearchState:
        """Current lifecycle state."""
        return self._snapshot.state

    @property
    def books(self) -> Tuple[Book, ...]:
        """Books of the published result."""
        return self._snapshot.books

    @property
    def total(self) -> int:
        """Reported total for the published result."""
        return self._snapshot.total

    @property
    def loading(self) -> bool:
        """Whether a search is in flight."""
        return self._snapshot.loading

    @property
    def error(self) -> Optional[str]:
        """User-visible error message, if the last search failed."""
        return self._snapshot.error

    @staticmethod
    def _failed(request_id: int, message: str) -> SearchSnapshot:
        """Failed snapshot: no books, only the user-visible message."""
        return SearchSnapshot(state=SearchState.FAILED, error=message, request_id=request_id)

    def _publish(self, snapshot: SearchSnapshot) -> bool:
        """Publish a snapshot unless a newer request has started since."""
        if snapshot.request_id != self._request_seq:
            logger.debug(
                f"Discarding stale result of request {snapshot.request_id} "
                f"(latest is {self._request_seq})"
            )
            return False
        self._snapshot = snapshot
        return True

    async def search(self, query: str, filters: Optional[AdvancedFilters] = None) -> SearchSnapshot:
        """
        Run a search and publish its outcome.

        A query/filter pair that is not searchable is a no-op and returns
        the current snapshot unchanged.

        Returns:
            The snapshot produced by this request (published only if still latest)
        """
        filters = filters or AdvancedFilters()
        if not is_searchable(query, filters):
            logger.debug("Empty query and default filters, not searching")
            return self._snapshot

        self._request_seq += 1
        request_id = self._request_seq
        self._publish(replace(
            self._snapshot,
            state=SearchState.SEARCHING,
            error=None,
            request_id=request_id
        ))

        try:
            page = await self.client.search(build_query(query, filters), filters.availability)
            books = await self.resolver.resolve(page.books)
            books = filter_by_availability(books, filters.availability)
        except SearchFailed as e:
            logger.error(f"Search request {request_id} failed: {e}")
            failed = self._failed(request_id, e.user_message)
            self._publish(failed)
            return failed
        except (Exception, asyncio.CancelledError) as e:
            logger.error(f"Search request {request_id} aborted: {e!r}")
            self._publish(self._failed(request_id, SearchFailed.USER_MESSAGE))
            raise

        ready = SearchSnapshot(
            state=SearchState.READY,
            books=tuple(books),
            total=reported_total(page.num_found, books, filters.availability),
            request_id=request_id
        )
        self._publish(ready)
        return ready

    def clear(self):
        """Drop results and return to idle. Any in-flight search becomes stale."""
        self._request_seq += 1
        self._snapshot = SearchSnapshot(request_id=self._request_seq)
