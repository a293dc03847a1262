# ABOUTME: Core data structures for scanned book candidates.
# ABOUTME: Candidate is the interchange format between search, selection, and the library list.

from dataclasses import dataclass
from enum import Enum

UNKNOWN_PAGE_COUNT = -1


class ScanMode(Enum):
    """Recognition mode, valued by the endpoint name it posts to."""

    COVER = "scan_cover"
    SHELF = "scan_shelf"

    @property
    def is_shelf(self) -> bool:
        return self is ScanMode.SHELF


@dataclass(frozen=True)
class RecognizedBook:
    """A title/author guess produced by the recognition endpoint."""

    title: str = ""
    author: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.title and not self.author


@dataclass
class Candidate:
    """A book proposed to the user after recognition and search.

    Candidates only live for one picture -> selection interaction. The
    author field keeps the comma-delimited form the search service returns.
    """

    id: str
    isbn: str
    title: str
    author: str = ""
    excerpt: str = ""
    summary: str = ""
    image: str = ""
    page_count: int = UNKNOWN_PAGE_COUNT
    published_date: str = ""
    publisher: str = ""
    is_favorite: bool = False

    def __post_init__(self) -> None:
        if self.page_count < UNKNOWN_PAGE_COUNT:
            msg = f"page_count must be -1 or non-negative, got {self.page_count}"
            raise ValueError(msg)

    @property
    def authors(self) -> list[str]:
        """Author string split into individual names."""
        return [name.strip() for name in self.author.split(",") if name.strip()]

    @property
    def has_page_count(self) -> bool:
        return self.page_count != UNKNOWN_PAGE_COUNT
