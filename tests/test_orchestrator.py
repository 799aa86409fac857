"""Tests for search orchestration."""
import asyncio

import httpx
import pytest

from booksearch.client import CatalogSearchClient
from booksearch.errors import SearchFailed
from booksearch.models import AdvancedFilters, Availability, AvailabilityInfo, Book, SearchPage
from booksearch.orchestrator import SearchOrchestrator, SearchState

from conftest import make_book


def catalog_page():
    return SearchPage(num_found=812, books=[
        make_book("/works/preview", isbn="1"),
        make_book("/works/fulltext", isbn="2", has_fulltext=True),
        make_book("/works/archive", ia="ia-archive"),
        make_book("/works/none"),
    ])


@pytest.fixture
def client(fake_client):
    fake_client.page = catalog_page()
    fake_client.availability = {
        "ISBN:1": AvailabilityInfo(preview_url="https://openlibrary.org/p/1"),
        "ISBN:2": AvailabilityInfo(),
    }
    return fake_client


@pytest.mark.asyncio
async def test_empty_search_is_noop(client):
    """No query and default filters never reach the catalog."""
    orchestrator = SearchOrchestrator(client)

    snapshot = await orchestrator.search("", AdvancedFilters())

    assert client.search_calls == []
    assert snapshot.state == SearchState.IDLE
    assert orchestrator.state == SearchState.IDLE


@pytest.mark.asyncio
async def test_search_all(client):
    """The ``all`` filter publishes every book with the server total."""
    orchestrator = SearchOrchestrator(client)

    await orchestrator.search("dune", AdvancedFilters(author="herbert"))

    assert client.search_calls == [("dune author:herbert", Availability.ALL)]
    assert orchestrator.state == SearchState.READY
    assert orchestrator.loading is False
    assert orchestrator.error is None
    assert orchestrator.total == 812
    assert [book.id for book in orchestrator.books] == [
        "/works/preview", "/works/fulltext", "/works/archive", "/works/none"
    ]


@pytest.mark.asyncio
async def test_search_preview_filter(client):
    """Preview includes ISBN previews and archive fallbacks; total is the filtered count."""
    orchestrator = SearchOrchestrator(client)

    await orchestrator.search("dune", AdvancedFilters(availability=Availability.PREVIEW))

    assert [book.id for book in orchestrator.books] == ["/works/preview", "/works/archive"]
    assert orchestrator.total == 2


@pytest.mark.asyncio
async def test_search_fulltext_filter(client):
    orchestrator = SearchOrchestrator(client)

    await orchestrator.search("", AdvancedFilters(availability=Availability.FULLTEXT))

    assert client.search_calls == [("", Availability.FULLTEXT)]
    assert [book.id for book in orchestrator.books] == ["/works/fulltext"]
    assert orchestrator.total == 1


@pytest.mark.asyncio
async def test_failed_search_clears_results(client):
    """A fatal failure publishes no books, not stale ones."""
    orchestrator = SearchOrchestrator(client)
    await orchestrator.search("dune")
    assert orchestrator.books

    client.search_error = SearchFailed("search returned status 500", status_code=500)
    await orchestrator.search("dune messiah")

    assert orchestrator.state == SearchState.FAILED
    assert orchestrator.books == ()
    assert orchestrator.total == 0
    assert orchestrator.error == "Failed to fetch search results"


@pytest.mark.asyncio
async def test_availability_failure_is_not_fatal(client):
    client.failing_bibkeys = {"ISBN:1"}
    orchestrator = SearchOrchestrator(client)

    await orchestrator.search("dune")

    assert orchestrator.state == SearchState.READY
    assert orchestrator.books[0].preview_available is None


@pytest.mark.asyncio
async def test_loading_while_searching(client):
    gate = asyncio.Event()
    client.gates = [gate]
    orchestrator = SearchOrchestrator(client)

    task = asyncio.create_task(orchestrator.search("dune"))
    await asyncio.sleep(0)
    assert orchestrator.loading is True
    assert orchestrator.state == SearchState.SEARCHING

    gate.set()
    await task
    assert orchestrator.loading is False


@pytest.mark.asyncio
async def test_last_request_wins(client):
    """A slow earlier search cannot overwrite a newer result."""
    slow, fast = asyncio.Event(), asyncio.Event()
    client.gates = [slow, fast]
    orchestrator = SearchOrchestrator(client)

    first = asyncio.create_task(orchestrator.search("old query"))
    await asyncio.sleep(0)
    second = asyncio.create_task(orchestrator.search("new query"))
    await asyncio.sleep(0)

    fast.set()
    newest = await second
    client.page = SearchPage(num_found=1, books=[Book(id="/works/stale")])
    slow.set()
    await first

    assert orchestrator.snapshot == newest
    assert orchestrator.snapshot.request_id == 2
    assert "/works/stale" not in [book.id for book in orchestrator.books]


@pytest.mark.asyncio
async def test_clear_returns_to_idle(client):
    orchestrator = SearchOrchestrator(client)
    await orchestrator.search("dune")

    orchestrator.clear()

    assert orchestrator.state == SearchState.IDLE
    assert orchestrator.books == ()
    assert orchestrator.total == 0


@pytest.mark.asyncio
async def test_plain_string_availability_is_accepted():
    """A plain "fulltext" string works end to end with the real client."""
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json={"numFound": 1, "docs": [
            {"key": "/works/OL1W", "title": "Dune", "has_fulltext": True}
        ]})

    async with CatalogSearchClient(transport=httpx.MockTransport(handler)) as client:
        orchestrator = SearchOrchestrator(client)
        await orchestrator.search("dune", AdvancedFilters(availability="fulltext"))

    assert requests[0].url.params["has_fulltext"] == "true"
    assert orchestrator.state == SearchState.READY
    assert orchestrator.loading is False
    assert [book.id for book in orchestrator.books] == ["/works/OL1W"]


class BrokenResolver:
    async def resolve(self, books):
        raise RuntimeError("resolver crashed")


@pytest.mark.asyncio
async def test_unexpected_error_publishes_failed(client):
    """An unexpected exception propagates but never leaves the search loading."""
    orchestrator = SearchOrchestrator(client, resolver=BrokenResolver())

    with pytest.raises(RuntimeError):
        await orchestrator.search("dune")

    assert orchestrator.state == SearchState.FAILED
    assert orchestrator.loading is False
    assert orchestrator.books == ()
    assert orchestrator.error == "Failed to fetch search results"


@pytest.mark.asyncio
async def test_cancelled_search_publishes_failed(client):
    gate = asyncio.Event()
    client.gates = [gate]
    orchestrator = SearchOrchestrator(client)

    task = asyncio.create_task(orchestrator.search("dune"))
    await asyncio.sleep(0)
    assert orchestrator.loading is True

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert orchestrator.state == SearchState.FAILED
    assert orchestrator.loading is False
