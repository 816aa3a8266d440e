"""Cell state tracking and interruption control for runs."""

import signal
import threading
from enum import Enum
from typing import Any

from scripture_sync.utils.logging import get_logger

logger = get_logger(__name__)


class CellState(str, Enum):
    """States of a single cell: pending -> fetching -> applying/skipped/errored -> done."""

    PENDING = "pending"
    FETCHING = "fetching"
    APPLYING = "applying"
    SKIPPED = "skipped"
    ERRORED = "errored"
    DONE = "done"


_TRANSITIONS: dict[CellState, frozenset[CellState]] = {
    CellState.PENDING: frozenset(
        {CellState.FETCHING, CellState.SKIPPED, CellState.ERRORED}
    ),
    CellState.FETCHING: frozenset(
        {CellState.APPLYING, CellState.SKIPPED, CellState.ERRORED}
    ),
    CellState.APPLYING: frozenset({CellState.ERRORED, CellState.DONE}),
    CellState.SKIPPED: frozenset({CellState.DONE}),
    CellState.ERRORED: frozenset({CellState.DONE}),
    CellState.DONE: frozenset(),
}


class CellProgress:
    """Forward-only state holder for one cell."""

    def __init__(self, label: str):
        self.label = label
        self.state = CellState.PENDING

    def advance(self, state: CellState) -> None:
        if state not in _TRANSITIONS[self.state]:
            msg = f"Illegal cell transition for {self.label}: {self.state.value} -> {state.value}"
            raise ValueError(msg)
        logger.debug(
            "cell_state_changed",
            cell=self.label,
            from_state=self.state.value,
            to_state=state.value,
        )
        self.state = state

    def finish(self) -> None:
        if self.state != CellState.DONE:
            self.advance(CellState.DONE)


class RunControl:
    """Thread-safe interruption flag shared by every worker in a run.

    Signal handlers only set the flag; the cell runner stops starting new
    cells and the processors stop issuing new fetches once it is set.
    Writes already applied are kept.
    """

    def __init__(self) -> None:
        self._interrupt_event = threading.Event()
        self._signal_handlers_installed = False
        self._previous_handlers: dict[int, Any] = {}

    def install_signal_handlers(self) -> None:
        """Install SIGINT/SIGTERM handlers for graceful interruption."""
        if self._signal_handlers_installed:
            return

        def signal_handler(signum: int, frame: Any) -> None:
            logger.warning("run_interrupt_requested", signal=signal.Signals(signum).name)
            self._interrupt_event.set()

        for signum in (signal.SIGINT, signal.SIGTERM):
            self._previous_handlers[signum] = signal.signal(signum, signal_handler)
        self._signal_handlers_installed = True
        logger.debug("signal_handlers_installed")

    def restore_signal_handlers(self) -> None:
        if not self._signal_handlers_installed:
            return
        for signum, handler in self._previous_handlers.items():
            signal.signal(signum, handler)
        self._previous_handlers.clear()
        self._signal_handlers_installed = False

    def interrupt(self) -> None:
        self._interrupt_event.set()

    def is_interrupted(self) -> bool:
        """Check if the run was interrupted (thread-safe)."""
        return self._interrupt_event.is_set()


__all__ = ["CellProgress", "CellState", "RunControl"]
