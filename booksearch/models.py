"""Data models for books and search filters."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Union

UNKNOWN_TITLE = "Unknown Title"
UNKNOWN_AUTHOR = "Unknown Author"
UNKNOWN_PUBLISHER = "Unknown Publisher"
UNKNOWN_YEAR = "Unknown Year"
UNKNOWN_LANGUAGE = "Unknown"


class Availability(str, Enum):
    """Availability filter applied to a search."""
    ALL = "all"
    PREVIEW = "preview"
    FULLTEXT = "fulltext"


@dataclass(frozen=True)
class AdvancedFilters:
    """Structured constraints for a single search invocation."""
    author: str = ""
    subject: str = ""
    year: str = ""
    availability: Availability = Availability.ALL

    def __post_init__(self):
        # Accept plain strings such as "fulltext"; unknown values raise ValueError
        object.__setattr__(self, "availability", Availability(self.availability))


@dataclass
class Book:
    """Normalized book representation.

    Availability fields start out as ``None`` (unknown) and are only
    filled in by the availability resolver, so ``False`` always means
    "looked up and not available".
    """
    id: str
    title: str = UNKNOWN_TITLE
    author: str = UNKNOWN_AUTHOR
    year: Union[int, str] = UNKNOWN_YEAR
    cover_id: Optional[int] = None
    publisher: str = UNKNOWN_PUBLISHER
    languages: List[str] = field(default_factory=lambda: [UNKNOWN_LANGUAGE])
    isbn: Optional[str] = None
    ia_identifier: Optional[str] = None
    has_fulltext: bool = False
    preview_available: Optional[bool] = None
    preview_url: Optional[str] = None
    read_url: Optional[str] = None
    readable: Optional[bool] = None

    @property
    def bibkey(self) -> Optional[str]:
        """Availability lookup key, e.g. ``ISBN:0140328726``."""
        return f"ISBN:{self.isbn}" if self.isbn else None

    @property
    def languages_str(self) -> str:
        """Format languages as comma-separated string."""
        return ", ".join(self.languages)


@dataclass(frozen=True)
class AvailabilityInfo:
    """One entry of an availability lookup response."""
    preview_url: Optional[str] = None
    borrow_url: Optional[str] = None


@dataclass
class SearchPage:
    """Mapped catalog response: server total plus the mapped books."""
    num_found: int
    books: List[Book]
