# ABOUTME: Scan workflow: image upload -> candidate search -> user selection.
# ABOUTME: Runs the stages in order and reports each failure as exactly one user alert.

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Protocol, runtime_checkable

from tabby.catalog.errors import (
    HandoffNotReadyError,
    ImagePermissionError,
    ImageReadError,
    IngestionBusyError,
    MalformedResponseError,
    RecognitionError,
    SearchError,
)
from tabby.catalog.ingestion import ImageIngestion
from tabby.catalog.resolver import CandidateResolver, ResolutionResult
from tabby.catalog.types import Candidate, ScanMode
from tabby.core.handoff import SelectionHandoff

logger = logging.getLogger(__name__)

NO_BOOKS_FOUND = "No books found. Please try again"
COVER_UPLOAD_FAILED = "Something went wrong with uploading image. Please try again."
COVER_SEARCH_FAILED = "Something went wrong with uploading author and title. Please try again."
COVER_UNEXPECTED = "Something went wrong. Please try again."
SHELF_UPLOAD_FAILED = "Failed to upload image. Please try again"
SHELF_PARTIAL_RESULTS = "Some books could not be looked up. Showing partial results."


@runtime_checkable
class Notifier(Protocol):
    """Shows a user-visible alert."""

    def alert(self, message: str) -> None: ...


class ScanStatus(Enum):
    SELECTED = "selected"
    CANCELLED = "cancelled"
    NO_RESULTS = "no_results"
    FAILED = "failed"
    ABORTED = "aborted"
    BUSY = "busy"


@dataclass
class ScanOutcome:
    """Result of one picture -> selection interaction."""

    status: ScanStatus
    mode: ScanMode
    candidates: list[Candidate] = field(default_factory=list)
    selected: list[Candidate] = field(default_factory=list)
    alert: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status is ScanStatus.SELECTED


def _upload_failed_message(mode: ScanMode) -> str:
    return SHELF_UPLOAD_FAILED if mode.is_shelf else COVER_UPLOAD_FAILED


def _unexpected_message(mode: ScanMode) -> str:
    return SHELF_UPLOAD_FAILED if mode.is_shelf else COVER_UNEXPECTED


class ScanWorkflow:
    """Runs ImageIngestion, CandidateResolver, and SelectionHandoff in sequence.

    Stage errors surface here: each run shows at most one alert through
    the notifier and returns a ScanOutcome instead of raising.
    """

    def __init__(
        self,
        ingestion: ImageIngestion,
        resolver: CandidateResolver,
        handoff: SelectionHandoff,
        notifier: Notifier,
    ) -> None:
        self._ingestion = ingestion
        self._resolver = resolver
        self._handoff = handoff
        self._notifier = notifier

    def run(self, path: Path, mode: ScanMode) -> ScanOutcome:
        if self._ingestion.is_processing(mode):
            logger.info("Ignoring %s request while another is in progress", mode.value)
            return ScanOutcome(ScanStatus.BUSY, mode)

        self._handoff.begin_processing()
        outcome = self._run_stages(path, mode)
        if outcome.status is not ScanStatus.SELECTED and outcome.status is not ScanStatus.CANCELLED:
            self._handoff.reset()
        return outcome

    def _run_stages(self, path: Path, mode: ScanMode) -> ScanOutcome:
        try:
            recognition = self._ingestion.scan(path, mode)
            result = self._resolver.resolve(recognition, mode)
        except ImagePermissionError as exc:
            logger.info("Image access refused, aborting: %s", exc)
            return ScanOutcome(ScanStatus.ABORTED, mode)
        except ImageReadError as exc:
            logger.error("Error reading image: %s", exc)
            return self._fail(mode, _unexpected_message(mode))
        except RecognitionError as exc:
            logger.error("Error uploading image: %s (status=%s body=%s)", exc, exc.status, exc.body)
            if exc.status is None:
                return self._fail(mode, _unexpected_message(mode))
            return self._fail(mode, _upload_failed_message(mode))
        except SearchError as exc:
            logger.error(
                "Error searching author and title: %s (status=%s body=%s)",
                exc,
                exc.status,
                exc.body,
            )
            if exc.status is None:
                return self._fail(mode, _unexpected_message(mode))
            return self._fail(mode, COVER_SEARCH_FAILED)
        except MalformedResponseError as exc:
            logger.error("Unexpected response while scanning: %s", exc)
            return self._fail(mode, _unexpected_message(mode))
        except IngestionBusyError as exc:
            logger.info("%s", exc)
            return ScanOutcome(ScanStatus.BUSY, mode)
        except Exception:
            logger.exception("Unexpected error while scanning %s", path)
            return self._fail(mode, _unexpected_message(mode))

        return self._select(mode, result)

    def _select(self, mode: ScanMode, result: ResolutionResult) -> ScanOutcome:
        alert: str | None = None
        if not result.candidates:
            if result.errors:
                return self._fail(mode, SHELF_UPLOAD_FAILED)
            return self._fail(mode, NO_BOOKS_FOUND, status=ScanStatus.NO_RESULTS)
        if result.errors:
            alert = SHELF_PARTIAL_RESULTS
            self._notifier.alert(alert)

        try:
            selected = self._handoff.handoff(result.candidates, mode.is_shelf)
        except HandoffNotReadyError as exc:
            logger.error("Selection handoff failed: %s", exc)
            if alert is not None:
                return ScanOutcome(ScanStatus.FAILED, mode, result.candidates, alert=alert)
            return self._fail(mode, _unexpected_message(mode), candidates=result.candidates)

        status = ScanStatus.SELECTED if selected else ScanStatus.CANCELLED
        return ScanOutcome(status, mode, result.candidates, selected, alert=alert)

    def _fail(
        self,
        mode: ScanMode,
        message: str,
        *,
        status: ScanStatus = ScanStatus.FAILED,
        candidates: list[Candidate] | None = None,
    ) -> ScanOutcome:
        self._notifier.alert(message)
        return ScanOutcome(status, mode, candidates or [], alert=message)
