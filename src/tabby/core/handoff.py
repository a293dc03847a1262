# ABOUTME: Selection handoff: passes resolved candidates to the selection UI.
# ABOUTME: Waits for the UI to acknowledge the choosing state before handing over.

import logging
from collections.abc import Callable
from enum import Enum
from typing import Protocol, runtime_checkable

from tabby.catalog.errors import HandoffNotReadyError
from tabby.catalog.types import Candidate

logger = logging.getLogger(__name__)


class SelectionState(Enum):
    IDLE = "idle"
    PROCESSING = "processing"
    CHOOSING = "choosing"
    DONE = "done"


@runtime_checkable
class Selector(Protocol):
    """The UI collaborator that lets the user pick among candidates.

    Returns the chosen candidates; an empty list means the user cancelled.
    Cover scans expect at most one pick, shelf scans may return several.
    """

    def select(self, candidates: list[Candidate], is_shelf: bool) -> list[Candidate]: ...


StateListener = Callable[[SelectionState], bool | None]


class SelectionHandoff:
    """Tracks the selection state and hands candidates to a Selector.

    The state listener is told about every transition. On entering
    CHOOSING its return value is the readiness signal: anything but an
    explicit False lets the handoff proceed.
    """

    def __init__(
        self,
        selector: Selector,
        *,
        on_state_change: StateListener | None = None,
    ) -> None:
        self._selector = selector
        self._on_state_change = on_state_change
        self._state = SelectionState.IDLE

    @property
    def state(self) -> SelectionState:
        return self._state

    def begin_processing(self) -> None:
        self._transition(SelectionState.PROCESSING)

    def reset(self) -> None:
        self._transition(SelectionState.IDLE)

    def handoff(self, candidates: list[Candidate], is_shelf: bool) -> list[Candidate]:
        """Enter CHOOSING, wait for acknowledgement, then run the selector.

        Raises:
            HandoffNotReadyError: If the state listener refuses the transition.
        """
        if self._transition(SelectionState.CHOOSING) is False:
            self._transition(SelectionState.IDLE)
            raise HandoffNotReadyError("Selection UI is not ready to show candidates")

        logger.debug("Handing %d candidate(s) to selector (shelf=%s)", len(candidates), is_shelf)
        selected = self._selector.select(list(candidates), is_shelf)
        if not is_shelf:
            selected = selected[:1]
        self._transition(SelectionState.DONE)
        return selected

    def _transition(self, state: SelectionState) -> bool | None:
        self._state = state
        if self._on_state_change is None:
            return None
        return self._on_state_change(state)
