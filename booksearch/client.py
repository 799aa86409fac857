"""Async HTTP client for the Open Library search and books APIs."""
import asyncio
import httpx
from typing import Dict, List, Optional, Any
import logging

from booksearch.config import Config
from booksearch.errors import AvailabilityLookupFailed, SearchFailed
from booksearch.models import Availability, AvailabilityInfo, SearchPage
from booksearch.parse import parse_availability_response, parse_search_response

logger = logging.getLogger(__name__)


class CatalogSearchClient:
    """Async client for catalog searches and availability lookups."""

    def __init__(
        self,
        config: Optional[Config] = None,
        timeout: Optional[int] = None,
        max_concurrent: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize async client.

        Args:
            config: Hosts and defaults (environment-backed by default)
            timeout: Request timeout in seconds
            max_concurrent: Maximum concurrent availability lookups
            transport: Optional httpx transport (used by tests)
        """
        self.config = config or Config()
        self.timeout = timeout or self.config.DEFAULT_TIMEOUT
        if max_concurrent is None:
            max_concurrent = self.config.AVAILABILITY_CONCURRENCY
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be at least 1")
        self.semaphore = asyncio.Semaphore(max_concurrent)

        # Create async HTTP client
        self.client = httpx.AsyncClient(
            timeout=self.timeout,
            transport=transport,
            follow_redirects=True,
            headers={"Accept": "application/json"}
        )

    async def search(
        self,
        query: str,
        availability: Availability = Availability.ALL,
        limit: Optional[int] = None
    ) -> SearchPage:
        """
        Search the catalog.

        Args:
            query: Composed query string
            availability: Adds a server-side full-text constraint for ``fulltext``
            limit: Result cap (defaults to SEARCH_LIMIT)

        Returns:
            Server total and mapped books

        Raises:
            SearchFailed: On any transport, status or decode failure
        """
        params: Dict[str, Any] = {
            "q": query,
            "limit": limit or self.config.SEARCH_LIMIT
        }
        if availability == Availability.FULLTEXT:
            params["has_fulltext"] = "true"

        try:
            logger.info(f"Catalog search: {query!r} (availability={availability.value})")
            response = await self.client.get(self.config.SEARCH_URL, params=params)
        except httpx.HTTPError as e:
            logger.error(f"Catalog search failed: {e}")
            raise SearchFailed(str(e)) from e

        if not response.is_success:
            logger.error(f"Catalog search returned status {response.status_code}")
            raise SearchFailed(
                f"search returned status {response.status_code}",
                status_code=response.status_code
            )

        try:
            page = parse_search_response(response.json())
        except ValueError as e:
            logger.error(f"Undecodable catalog response: {e}")
            raise SearchFailed(f"undecodable search response: {e}") from e

        logger.info(f"Catalog search found {page.num_found} records, mapped {len(page.books)}")
        return page

    async def lookup_availability(self, bibkeys: List[str]) -> Dict[str, AvailabilityInfo]:
        """
        Look up preview/borrow availability for a batch of bibkeys.

        Args:
            bibkeys: Keys of the form ``ISBN:<isbn>``

        Returns:
            Mapping of bibkey to availability; keys the server does not know are absent

        Raises:
            AvailabilityLookupFailed: On any transport, status or decode failure
        """
        params = {
            "bibkeys": ",".join(bibkeys),
            "format": "json",
            "jscmd": "viewapi"
        }

        # Use semaphore to limit concurrency
        async with self.semaphore:
            try:
                logger.debug(f"Availability lookup for {len(bibkeys)} bibkeys")
                response = await self.client.get(self.config.BOOKS_API_URL, params=params)
            except httpx.HTTPError as e:
                raise AvailabilityLookupFailed(bibkeys, str(e)) from e

        if not response.is_success:
            raise AvailabilityLookupFailed(bibkeys, f"status {response.status_code}")

        try:
            return parse_availability_response(response.json())
        except ValueError as e:
            raise AvailabilityLookupFailed(bibkeys, f"undecodable response: {e}") from e

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
