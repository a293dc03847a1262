# ABOUTME: Unit tests for ScanWorkflow.
# ABOUTME: Checks stage ordering, outcome statuses, and that each failure alerts exactly once.

from pathlib import Path
from typing import Any
from unittest.mock import patch

from tabby.catalog.errors import MalformedResponseError, ScanFetchError
from tabby.catalog.ingestion import ImageIngestion
from tabby.catalog.resolver import CandidateResolver
from tabby.catalog.types import Candidate, ScanMode
from tabby.core.handoff import SelectionHandoff, SelectionState
from tabby.core.workflow import (
    COVER_SEARCH_FAILED,
    COVER_UNEXPECTED,
    COVER_UPLOAD_FAILED,
    NO_BOOKS_FOUND,
    SHELF_PARTIAL_RESULTS,
    SHELF_UPLOAD_FAILED,
    Notifier,
    ScanStatus,
    ScanWorkflow,
)
from tests.fixtures.api_responses import (
    COVER_SCAN_EMPTY,
    COVER_SCAN_RESPONSE,
    SEARCH_RESPONSE_DUNE,
    SEARCH_RESPONSE_EMPTY,
    SEARCH_RESPONSE_ROSE,
    SHELF_SCAN_RESPONSE,
)
from tests.fixtures.fake_http import FakeHttpClient

GPU = "https://gpu.example.com"
CPU = "https://cpu.example.com"


class FakeNotifier:
    def __init__(self) -> None:
        self.messages: list[str] = []

    def alert(self, message: str) -> None:
        self.messages.append(message)


class PickFirstSelector:
    def __init__(self) -> None:
        self.calls: list[tuple[list[Candidate], bool]] = []

    def select(self, candidates: list[Candidate], is_shelf: bool) -> list[Candidate]:
        self.calls.append((candidates, is_shelf))
        return candidates[:1]


class CancelSelector:
    def select(self, candidates: list[Candidate], is_shelf: bool) -> list[Candidate]:
        return []


def _workflow(
    client: FakeHttpClient,
    selector: Any = None,
    on_state_change: Any = None,
) -> tuple[ScanWorkflow, FakeNotifier, SelectionHandoff]:
    notifier = FakeNotifier()
    handoff = SelectionHandoff(selector or PickFirstSelector(), on_state_change=on_state_change)
    workflow = ScanWorkflow(
        ingestion=ImageIngestion(client, GPU),
        resolver=CandidateResolver(client, CPU),
        handoff=handoff,
        notifier=notifier,
    )
    return workflow, notifier, handoff


class TestCoverFlow:
    """Tests for a single-cover scan."""

    def test_happy_path_selects_candidate(self, cover_image: Path) -> None:
        client = FakeHttpClient(
            {"/books/scan_cover": COVER_SCAN_RESPONSE, "/books/search": SEARCH_RESPONSE_DUNE}
        )
        selector = PickFirstSelector()
        workflow, notifier, handoff = _workflow(client, selector)

        outcome = workflow.run(cover_image, ScanMode.COVER)

        assert outcome.status is ScanStatus.SELECTED
        assert outcome.succeeded
        assert [c.title for c in outcome.selected] == ["Dune"]
        assert len(outcome.candidates) == 4
        assert selector.calls[0][1] is False
        assert notifier.messages == []
        assert handoff.state is SelectionState.DONE
        assert [r.method for r in client.requests] == ["POST", "GET"]

    def test_user_cancels(self, cover_image: Path) -> None:
        client = FakeHttpClient(
            {"/books/scan_cover": COVER_SCAN_RESPONSE, "/books/search": SEARCH_RESPONSE_DUNE}
        )
        workflow, notifier, _ = _workflow(client, CancelSelector())

        outcome = workflow.run(cover_image, ScanMode.COVER)

        assert outcome.status is ScanStatus.CANCELLED
        assert notifier.messages == []

    def test_empty_recognition_alerts_no_books(self, cover_image: Path) -> None:
        """Empty title and author: no search call, one 'no books' alert."""
        client = FakeHttpClient({"/books/scan_cover": COVER_SCAN_EMPTY})
        workflow, notifier, _ = _workflow(client)

        outcome = workflow.run(cover_image, ScanMode.COVER)

        assert outcome.status is ScanStatus.NO_RESULTS
        assert outcome.candidates == []
        assert client.requests_to("/books/search") == []
        assert notifier.messages == [NO_BOOKS_FOUND]

    def test_empty_search_alerts_no_books(self, cover_image: Path) -> None:
        client = FakeHttpClient(
            {"/books/scan_cover": COVER_SCAN_RESPONSE, "/books/search": SEARCH_RESPONSE_EMPTY}
        )
        workflow, notifier, _ = _workflow(client)

        outcome = workflow.run(cover_image, ScanMode.COVER)

        assert outcome.status is ScanStatus.NO_RESULTS
        assert notifier.messages == [NO_BOOKS_FOUND]

    def test_recognition_http_error_alerts_once(self, cover_image: Path) -> None:
        client = FakeHttpClient(
            {"/books/scan_cover": ScanFetchError("HTTP 500", status=500, body="oom")}
        )
        workflow, notifier, handoff = _workflow(client)

        outcome = workflow.run(cover_image, ScanMode.COVER)

        assert outcome.status is ScanStatus.FAILED
        assert outcome.candidates == []
        assert notifier.messages == [COVER_UPLOAD_FAILED]
        assert handoff.state is SelectionState.IDLE

    def test_search_http_error_alerts_once(self, cover_image: Path) -> None:
        client = FakeHttpClient(
            {
                "/books/scan_cover": COVER_SCAN_RESPONSE,
                "/books/search": ScanFetchError("HTTP 404", status=404, body="not found"),
            }
        )
        workflow, notifier, _ = _workflow(client)

        outcome = workflow.run(cover_image, ScanMode.COVER)

        assert outcome.status is ScanStatus.FAILED
        assert notifier.messages == [COVER_SEARCH_FAILED]

    def test_transport_error_alerts_generic(self, cover_image: Path) -> None:
        client = FakeHttpClient({"/books/scan_cover": ScanFetchError("connection refused")})
        workflow, notifier, _ = _workflow(client)

        outcome = workflow.run(cover_image, ScanMode.COVER)

        assert outcome.status is ScanStatus.FAILED
        assert notifier.messages == [COVER_UNEXPECTED]

    def test_malformed_response_alerts_generic(self, cover_image: Path) -> None:
        client = FakeHttpClient({"/books/scan_cover": MalformedResponseError("not json")})
        workflow, notifier, _ = _workflow(client)

        outcome = workflow.run(cover_image, ScanMode.COVER)

        assert outcome.status is ScanStatus.FAILED
        assert notifier.messages == [COVER_UNEXPECTED]

    def test_unreadable_image_alerts_generic(self, empty_image: Path) -> None:
        client = FakeHttpClient()
        workflow, notifier, _ = _workflow(client)

        outcome = workflow.run(empty_image, ScanMode.COVER)

        assert outcome.status is ScanStatus.FAILED
        assert client.requests == []
        assert notifier.messages == [COVER_UNEXPECTED]

    def test_permission_denied_aborts_silently(self, cover_image: Path) -> None:
        client = FakeHttpClient()
        workflow, notifier, handoff = _workflow(client)

        with patch.object(Path, "read_bytes", side_effect=PermissionError("denied")):
            outcome = workflow.run(cover_image, ScanMode.COVER)

        assert outcome.status is ScanStatus.ABORTED
        assert notifier.messages == []
        assert client.requests == []
        assert handoff.state is SelectionState.IDLE

    def test_overflowing_page_count_still_selects(self, cover_image: Path) -> None:
        """A page_count of infinity from the search service is treated as unknown."""
        search = {"results": [{**SEARCH_RESPONSE_DUNE["results"][0], "page_count": float("inf")}]}
        client = FakeHttpClient({"/books/scan_cover": COVER_SCAN_RESPONSE, "/books/search": search})
        workflow, notifier, _ = _workflow(client)

        outcome = workflow.run(cover_image, ScanMode.COVER)

        assert outcome.status is ScanStatus.SELECTED
        assert outcome.selected[0].page_count == -1
        assert notifier.messages == []

    def test_unexpected_exception_alerts_generic(self, cover_image: Path) -> None:
        """Any other error raised by a stage ends in one generic alert, not a crash."""

        def explode(params: dict[str, str]) -> dict[str, Any]:
            raise RuntimeError("resolver bug")

        client = FakeHttpClient({"/books/scan_cover": COVER_SCAN_RESPONSE, "/books/search": explode})
        workflow, notifier, handoff = _workflow(client)

        outcome = workflow.run(cover_image, ScanMode.COVER)

        assert outcome.status is ScanStatus.FAILED
        assert notifier.messages == [COVER_UNEXPECTED]
        assert handoff.state is SelectionState.IDLE

    def test_handoff_not_ready_alerts_once(self, cover_image: Path) -> None:
        client = FakeHttpClient(
            {"/books/scan_cover": COVER_SCAN_RESPONSE, "/books/search": SEARCH_RESPONSE_DUNE}
        )
        workflow, notifier, _ = _workflow(
            client, on_state_change=lambda state: state is not SelectionState.CHOOSING
        )

        outcome = workflow.run(cover_image, ScanMode.COVER)

        assert outcome.status is ScanStatus.FAILED
        assert len(outcome.candidates) == 4
        assert notifier.messages == [COVER_UNEXPECTED]


class TestShelfFlow:
    """Tests for a bookshelf scan."""

    def test_happy_path_hands_off_as_shelf(self, shelf_image: Path) -> None:
        def search(params: dict[str, str]) -> dict[str, Any]:
            if params.get("title") == "Dune":
                return SEARCH_RESPONSE_DUNE
            return SEARCH_RESPONSE_ROSE

        client = FakeHttpClient({"/books/scan_shelf": SHELF_SCAN_RESPONSE, "/books/search": search})
        selector = PickFirstSelector()
        workflow, notifier, _ = _workflow(client, selector)

        outcome = workflow.run(shelf_image, ScanMode.SHELF)

        assert outcome.status is ScanStatus.SELECTED
        assert selector.calls[0][1] is True
        # Third spine is blank on both fields and is skipped.
        assert len(client.requests_to("/books/search")) == 2
        isbns = [c.isbn for c in outcome.candidates]
        assert len(isbns) == len(set(isbns))
        assert notifier.messages == []

    def test_recognition_http_error_alerts_once(self, shelf_image: Path) -> None:
        client = FakeHttpClient({"/books/scan_shelf": ScanFetchError("HTTP 500", status=500)})
        workflow, notifier, _ = _workflow(client)

        outcome = workflow.run(shelf_image, ScanMode.SHELF)

        assert outcome.status is ScanStatus.FAILED
        assert notifier.messages == [SHELF_UPLOAD_FAILED]

    def test_partial_search_failure_alerts_once_and_hands_off(self, shelf_image: Path) -> None:
        def search(params: dict[str, str]) -> dict[str, Any]:
            if params.get("title") == "Dune":
                raise ScanFetchError("HTTP 500", status=500, body="boom")
            return SEARCH_RESPONSE_ROSE

        client = FakeHttpClient({"/books/scan_shelf": SHELF_SCAN_RESPONSE, "/books/search": search})
        workflow, notifier, _ = _workflow(client)

        outcome = workflow.run(shelf_image, ScanMode.SHELF)

        assert outcome.status is ScanStatus.SELECTED
        assert [c.title for c in outcome.candidates] == ["The Name of the Rose", "Dune"]
        assert notifier.messages == [SHELF_PARTIAL_RESULTS]

    def test_unreadable_search_response_keeps_partial_results(self, shelf_image: Path) -> None:
        def search(params: dict[str, str]) -> dict[str, Any]:
            if params.get("title") == "Dune":
                return SEARCH_RESPONSE_DUNE
            raise MalformedResponseError("Invalid JSON from books/search")

        client = FakeHttpClient({"/books/scan_shelf": SHELF_SCAN_RESPONSE, "/books/search": search})
        workflow, notifier, _ = _workflow(client)

        outcome = workflow.run(shelf_image, ScanMode.SHELF)

        assert outcome.status is ScanStatus.SELECTED
        assert [c.title for c in outcome.candidates] == ["Dune", "Dune Messiah", "Children of Dune"]
        assert notifier.messages == [SHELF_PARTIAL_RESULTS]

    def test_all_searches_failing_alerts_once(self, shelf_image: Path) -> None:
        client = FakeHttpClient(
            {
                "/books/scan_shelf": SHELF_SCAN_RESPONSE,
                "/books/search": ScanFetchError("HTTP 503", status=503),
            }
        )
        workflow, notifier, _ = _workflow(client)

        outcome = workflow.run(shelf_image, ScanMode.SHELF)

        assert outcome.status is ScanStatus.FAILED
        assert len(client.requests_to("/books/search")) == 2
        assert notifier.messages == [SHELF_UPLOAD_FAILED]

    def test_no_spines_alerts_no_books(self, shelf_image: Path) -> None:
        client = FakeHttpClient({"/books/scan_shelf": {"titles": [], "authors": []}})
        workflow, notifier, _ = _workflow(client)

        outcome = workflow.run(shelf_image, ScanMode.SHELF)

        assert outcome.status is ScanStatus.NO_RESULTS
        assert notifier.messages == [NO_BOOKS_FOUND]


class TestBusy:
    def test_busy_mode_is_ignored(self, cover_image: Path) -> None:
        """A scan started while the same mode is uploading returns BUSY silently."""
        workflow: ScanWorkflow
        nested: list[Any] = []

        def reenter(params: dict[str, str]) -> dict[str, Any]:
            nested.append(workflow.run(cover_image, ScanMode.COVER))
            return COVER_SCAN_RESPONSE

        client = FakeHttpClient({"/books/scan_cover": reenter, "/books/search": SEARCH_RESPONSE_DUNE})
        workflow, notifier, _ = _workflow(client)

        outcome = workflow.run(cover_image, ScanMode.COVER)

        assert nested[0].status is ScanStatus.BUSY
        assert outcome.status is ScanStatus.SELECTED
        assert notifier.messages == []


def test_fake_notifier_satisfies_protocol() -> None:
    assert isinstance(FakeNotifier(), Notifier)
