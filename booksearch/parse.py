"""Parse and normalize Open Library API responses."""
import logging
from typing import Dict, Any, List, Optional

from booksearch.models import (
    AvailabilityInfo,
    Book,
    SearchPage,
    UNKNOWN_AUTHOR,
    UNKNOWN_LANGUAGE,
    UNKNOWN_PUBLISHER,
    UNKNOWN_TITLE,
    UNKNOWN_YEAR,
)

logger = logging.getLogger(__name__)

LANGUAGE_NAMES = {
    "eng": "English",
    "fre": "French",
    "spa": "Spanish",
    "ger": "German",
    "ita": "Italian",
}


def _first(values: Optional[List[Any]]) -> Optional[Any]:
    return values[0] if values else None


def map_languages(codes: Optional[List[str]]) -> List[str]:
    """
    Map MARC language codes to display names.

    Unknown codes pass through unchanged; no codes gives ``["Unknown"]``.
    """
    if not codes:
        return [UNKNOWN_LANGUAGE]
    return [LANGUAGE_NAMES.get(code, code) for code in codes]


def parse_record(doc: Dict[str, Any]) -> Optional[Book]:
    """
    Parse a single record from the search endpoint.

    Args:
        doc: Single entry of the ``docs`` array

    Returns:
        Book with availability left unset, or None if the record has no key
    """
    key = doc.get("key")
    if not key:
        return None

    return Book(
        id=key,
        title=doc.get("title") or UNKNOWN_TITLE,
        author=_first(doc.get("author_name")) or UNKNOWN_AUTHOR,
        year=doc.get("first_publish_year") or UNKNOWN_YEAR,
        cover_id=doc.get("cover_i") or None,
        publisher=_first(doc.get("publisher")) or UNKNOWN_PUBLISHER,
        languages=map_languages(doc.get("language")),
        isbn=_first(doc.get("isbn")),
        ia_identifier=_first(doc.get("ia")),
        has_fulltext=doc.get("has_fulltext") is True,
    )


def parse_search_response(response_json: Any) -> SearchPage:
    """
    Parse a full search response.

    Raises:
        ValueError: If the body does not have the expected shape
    """
    if not isinstance(response_json, dict):
        raise ValueError("search response is not a JSON object")

    docs = response_json.get("docs", [])
    if not isinstance(docs, list):
        raise ValueError("'docs' is not a list")

    books = []
    for doc in docs:
        if not isinstance(doc, dict):
            raise ValueError("search record is not a JSON object")
        book = parse_record(doc)
        if book:
            books.append(book)
        else:
            logger.warning("Skipping search record without a key")

    num_found = response_json.get("numFound", len(books))
    if not isinstance(num_found, int):
        raise ValueError("'numFound' is not an integer")

    return SearchPage(num_found=num_found, books=books)


def parse_availability_response(response_json: Any) -> Dict[str, AvailabilityInfo]:
    """
    Parse a viewapi response keyed by bibkey.

    Raises:
        ValueError: If the body does not have the expected shape
    """
    if not isinstance(response_json, dict):
        raise ValueError("availability response is not a JSON object")

    availability = {}
    for bibkey, info in response_json.items():
        if not isinstance(info, dict):
            raise ValueError(f"availability entry for {bibkey} is not a JSON object")
        availability[bibkey] = AvailabilityInfo(
            preview_url=info.get("preview_url") or None,
            borrow_url=info.get("borrow_url") or None,
        )
    return availability
