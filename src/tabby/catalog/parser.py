# ABOUTME: Parsing functions for recognition and search API JSON responses.
# ABOUTME: Converts service-specific payloads into RecognizedBook and Candidate instances.

from itertools import zip_longest
from typing import Any

from tabby.catalog.errors import MalformedResponseError
from tabby.catalog.types import UNKNOWN_PAGE_COUNT, Candidate, RecognizedBook

UNKNOWN_RATING = -1.0


def _text(value: Any) -> str:
    """Coerce an optional JSON value to a string ("" for null)."""
    if value is None:
        return ""
    return str(value)


def parse_cover_scan(data: dict[str, Any]) -> RecognizedBook:
    """Parse a scan_cover response: ``{"title": ..., "author": ...}``."""
    return RecognizedBook(
        title=_text(data.get("title")).strip(),
        author=_text(data.get("author")).strip(),
    )


def parse_shelf_scan(data: dict[str, Any]) -> list[RecognizedBook]:
    """Parse a scan_shelf response into one RecognizedBook per detected spine.

    The ``titles`` and ``authors`` arrays are index-aligned. If one array is
    shorter, the missing side is treated as empty.
    """
    titles = data.get("titles") or []
    authors = data.get("authors") or []
    if not isinstance(titles, list) or not isinstance(authors, list):
        raise MalformedResponseError("scan_shelf response titles/authors must be lists")

    return [
        RecognizedBook(title=_text(title).strip(), author=_text(author).strip())
        for title, author in zip_longest(titles, authors, fillvalue="")
    ]


def parse_search_results(data: dict[str, Any]) -> list[dict[str, Any]]:
    """Return the raw ``results`` list from a books/search response."""
    results = data.get("results", [])
    if not isinstance(results, list):
        raise MalformedResponseError("books/search response results must be a list")
    return [item for item in results if isinstance(item, dict)]


def api_book_to_candidate(data: dict[str, Any], candidate_id: str) -> Candidate:
    """Map one search result to a Candidate.

    ``rating`` is not carried over; the service sends the -1.0 sentinel for
    nearly every book.
    """
    page_count = data.get("page_count")
    try:
        page_count = int(page_count) if page_count is not None else UNKNOWN_PAGE_COUNT
    except (TypeError, ValueError, OverflowError):
        page_count = UNKNOWN_PAGE_COUNT
    if page_count < 0:
        page_count = UNKNOWN_PAGE_COUNT

    return Candidate(
        id=candidate_id,
        isbn=_text(data.get("isbn")),
        title=_text(data.get("title")),
        author=_text(data.get("authors")),
        excerpt=_text(data.get("excerpt")),
        summary=_text(data.get("summary")),
        image=_text(data.get("thumbnail")),
        page_count=page_count,
        published_date=_text(data.get("published_date")),
        publisher=_text(data.get("publisher")),
    )


def candidate_to_api_book(candidate: Candidate) -> dict[str, Any]:
    """Inverse of api_book_to_candidate, in the search service's field names."""
    return {
        "authors": candidate.author,
        "excerpt": candidate.excerpt,
        "isbn": candidate.isbn,
        "page_count": candidate.page_count,
        "published_date": candidate.published_date,
        "publisher": candidate.publisher,
        "rating": UNKNOWN_RATING,
        "summary": candidate.summary,
        "thumbnail": candidate.image,
        "title": candidate.title,
    }
