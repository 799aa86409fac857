"""Configuration management."""
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def positive_int_env(name: str, default: int) -> int:
    """
    Read an integer setting that must be at least 1.

    Raises:
        ValueError: If the value is not an integer or is below 1
    """
    value = int(os.getenv(name, str(default)))
    if value < 1:
        raise ValueError(f"{name} must be at least 1, got {value}")
    return value


class Config:
    """Application configuration."""

    # Hosts
    OPENLIBRARY_URL = os.getenv("OPENLIBRARY_URL", "https://openlibrary.org")
    COVERS_URL = os.getenv("COVERS_URL", "https://covers.openlibrary.org")
    ARCHIVE_URL = os.getenv("ARCHIVE_URL", "https://archive.org")

    @property
    def SEARCH_URL(self):
        """Catalog search endpoint."""
        return f"{self.OPENLIBRARY_URL}/search.json"

    @property
    def BOOKS_API_URL(self):
        """Availability (viewapi) endpoint."""
        return f"{self.OPENLIBRARY_URL}/api/books"

    # Defaults
    DEFAULT_TIMEOUT = positive_int_env("DEFAULT_TIMEOUT", 10)
    SEARCH_LIMIT = positive_int_env("SEARCH_LIMIT", 20)
    AVAILABILITY_BATCH_SIZE = positive_int_env("AVAILABILITY_BATCH_SIZE", 10)
    AVAILABILITY_CONCURRENCY = positive_int_env("AVAILABILITY_CONCURRENCY", 1)
