# ABOUTME: In-memory recommendation list with add-to-library toggling.
# ABOUTME: Keyed by candidate id; the library flag is Candidate.is_favorite.

from collections.abc import Iterable, Iterator

from tabby.catalog.types import Candidate


class RecommendationList:
    """Ordered list of candidates the user can add to or remove from their library."""

    def __init__(self, candidates: Iterable[Candidate] = ()) -> None:
        self._books: list[Candidate] = []
        self.add(candidates)

    def __iter__(self) -> Iterator[Candidate]:
        return iter(self._books)

    def __len__(self) -> int:
        return len(self._books)

    def add(self, candidates: Iterable[Candidate]) -> None:
        """Append candidates, ignoring any whose id is already listed."""
        known = {book.id for book in self._books}
        for candidate in candidates:
            if candidate.id in known:
                continue
            self._books.append(candidate)
            known.add(candidate.id)

    def get(self, candidate_id: str) -> Candidate:
        """Return the candidate with ``candidate_id``.

        Raises:
            KeyError: If no candidate has that id.
        """
        for book in self._books:
            if book.id == candidate_id:
                return book
        raise KeyError(candidate_id)

    def toggle_library(self, candidate_id: str) -> Candidate:
        """Flip the library flag of a candidate and return it."""
        book = self.get(candidate_id)
        book.is_favorite = not book.is_favorite
        return book

    def in_library(self) -> list[Candidate]:
        return [book for book in self._books if book.is_favorite]
