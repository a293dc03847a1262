# ABOUTME: Candidate resolution stage: turns recognised titles/authors into book candidates.
# ABOUTME: Queries books/search per title/author pair and deduplicates the batch by ISBN.

import itertools
import logging
from dataclasses import dataclass, field
from typing import Any

from tabby.catalog.errors import (
    MalformedResponseError,
    ScanFetchError,
    SearchError,
    TabbyError,
)
from tabby.catalog.http import HttpClient
from tabby.catalog.parser import (
    api_book_to_candidate,
    parse_cover_scan,
    parse_search_results,
    parse_shelf_scan,
)
from tabby.catalog.types import Candidate, RecognizedBook, ScanMode

logger = logging.getLogger(__name__)

SHELF_RESULTS_PER_TITLE = 3


@dataclass
class ResolutionResult:
    """Candidates from one resolution batch plus any per-search failures."""

    candidates: list[Candidate] = field(default_factory=list)
    errors: list[TabbyError] = field(default_factory=list)
    searches_attempted: int = 0

    @property
    def isbns(self) -> set[str]:
        return {c.isbn for c in self.candidates}

    def add(self, candidate: Candidate) -> bool:
        """Append ``candidate`` unless its ISBN is already in the batch."""
        if candidate.isbn in self.isbns:
            return False
        self.candidates.append(candidate)
        return True


def build_search_params(book: RecognizedBook) -> dict[str, str]:
    """Query parameters for books/search, omitting empty fields."""
    params: dict[str, str] = {}
    if book.title:
        params["title"] = book.title
    if book.author:
        params["author"] = book.author
    return params


class CandidateResolver:
    """Resolves recognition output against the book search service.

    Temporary candidate ids (``tempid0``, ``tempid1``, ...) come from a
    counter owned by this instance.
    """

    def __init__(self, http_client: HttpClient, cpu_url: str) -> None:
        self._http = http_client
        self._search_url = f"{cpu_url.rstrip('/')}/books/search"
        self._ids = itertools.count()

    @property
    def search_url(self) -> str:
        return self._search_url

    def next_id(self) -> str:
        return f"tempid{next(self._ids)}"

    def resolve(self, recognition: dict[str, Any], mode: ScanMode) -> ResolutionResult:
        """Parse a recognition response for ``mode`` and resolve it."""
        if mode.is_shelf:
            return self.resolve_shelf(parse_shelf_scan(recognition))
        return self.resolve_cover(parse_cover_scan(recognition))

    def resolve_cover(self, book: RecognizedBook) -> ResolutionResult:
        """Search for a single cover's title/author and keep every result.

        No request is made when both fields are empty.

        Raises:
            SearchError: If the search request fails.
        """
        result = ResolutionResult()
        if book.is_empty:
            logger.info("Cover scan found no title or author, skipping search")
            return result

        for item in self._search(book, result):
            result.add(api_book_to_candidate(item, self.next_id()))
        return result

    def resolve_shelf(self, books: list[RecognizedBook]) -> ResolutionResult:
        """Search for every detected spine, keeping the top results of each.

        Spines with neither title nor author are skipped. A failed search
        is logged and recorded on the result; the remaining spines are
        still searched.
        """
        result = ResolutionResult()
        for book in books:
            if book.is_empty:
                continue
            try:
                items = self._search(book, result)
            except SearchError as exc:
                logger.warning(
                    "Search failed for title=%r author=%r: %s (status=%s body=%s)",
                    book.title,
                    book.author,
                    exc,
                    exc.status,
                    exc.body,
                )
                result.errors.append(exc)
                continue
            except MalformedResponseError as exc:
                logger.warning(
                    "Unreadable search response for title=%r author=%r: %s",
                    book.title,
                    book.author,
                    exc,
                )
                result.errors.append(exc)
                continue

            for item in items[:SHELF_RESULTS_PER_TITLE]:
                result.add(api_book_to_candidate(item, self.next_id()))
        return result

    def _search(self, book: RecognizedBook, result: ResolutionResult) -> list[dict[str, Any]]:
        params = build_search_params(book)
        result.searches_attempted += 1
        logger.debug("Searching %s with %s", self._search_url, params)
        try:
            data = self._http.get(self._search_url, params=params)
        except ScanFetchError as exc:
            raise SearchError(str(exc), status=exc.status, body=exc.body) from exc
        return parse_search_results(data)
