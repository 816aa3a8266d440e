"""Tests for cell state tracking, interruption control and the cell runner."""

import signal
import threading

import pytest

from scripture_sync.sync.cell_runner import CellRunner
from scripture_sync.sync.outcomes import (
    CellError,
    CellOutcome,
    CellStatus,
    RunSummary,
)
from scripture_sync.sync.progress import CellProgress, CellState, RunControl


class TestCellProgress:
    """Forward-only state machine."""

    def test_happy_path(self):
        progress = CellProgress("Jude 1")

        progress.advance(CellState.FETCHING)
        progress.advance(CellState.APPLYING)
        progress.finish()

        assert progress.state == CellState.DONE

    def test_skip_from_pending(self):
        progress = CellProgress("Jude 1 KJV")

        progress.advance(CellState.SKIPPED)
        progress.finish()

        assert progress.state == CellState.DONE

    @pytest.mark.parametrize(
        ("path", "illegal"),
        [
            ([], CellState.APPLYING),
            ([CellState.FETCHING, CellState.APPLYING], CellState.FETCHING),
            ([CellState.ERRORED], CellState.APPLYING),
            ([CellState.SKIPPED, CellState.DONE], CellState.PENDING),
        ],
    )
    def test_illegal_transitions_raise(self, path, illegal):
        progress = CellProgress("Jude 1")
        for state in path:
            progress.advance(state)

        with pytest.raises(ValueError, match="Illegal cell transition"):
            progress.advance(illegal)

    def test_finish_is_idempotent(self):
        progress = CellProgress("Jude 1")
        progress.advance(CellState.ERRORED)

        progress.finish()
        progress.finish()

        assert progress.state == CellState.DONE


class TestRunControl:
    """Interruption flag and signal handling."""

    def test_interrupt_sets_flag(self, run_control):
        assert not run_control.is_interrupted()

        run_control.interrupt()

        assert run_control.is_interrupted()

    def test_sigint_sets_flag_and_handlers_restore(self):
        control = RunControl()
        previous = signal.getsignal(signal.SIGINT)

        control.install_signal_handlers()
        try:
            signal.raise_signal(signal.SIGINT)
        finally:
            control.restore_signal_handlers()

        assert control.is_interrupted()
        assert signal.getsignal(signal.SIGINT) is previous


def _outcome(cell, status=CellStatus.ADDED, added=1):
    return CellOutcome(book="Jude", chapter=cell, translation="WEB", status=status, added=added)


class TestCellRunner:
    """Sequential and thread-pooled cell iteration."""

    def test_sequential_processes_all_cells(self):
        summary = CellRunner().run([1, 2, 3], _outcome)

        assert summary.cells_processed == 3
        assert summary.verses_added == 3
        assert summary.per_translation["WEB"].cells == 3

    def test_parallel_processes_all_cells(self):
        seen = []
        lock = threading.Lock()

        def process(cell):
            with lock:
                seen.append(cell)
            return _outcome(cell)

        summary = CellRunner(max_workers=4).run(list(range(1, 21)), process)

        assert sorted(seen) == list(range(1, 21))
        assert summary.cells_processed == 20

    def test_stops_starting_cells_once_interrupted(self, run_control):
        def process(cell):
            if cell == 2:
                run_control.interrupt()
            return _outcome(cell)

        summary = CellRunner(run_control).run([1, 2, 3, 4], process)

        assert summary.cells_processed == 2
        assert summary.interrupted

    def test_outcome_callback(self):
        outcomes = []

        CellRunner().run([1, 2], _outcome, on_outcome=outcomes.append)

        assert [o.chapter for o in outcomes] == [1, 2]

    def test_invalid_worker_count(self):
        with pytest.raises(ValueError):
            CellRunner(max_workers=0)


class TestRunSummary:
    """Aggregation of cell outcomes."""

    def test_records_errors_and_corrections(self):
        summary = RunSummary()
        summary.record(
            CellOutcome(
                book="3 John",
                chapter=1,
                translation="WEB",
                status=CellStatus.COMPLETE,
                declared_verses_before=14,
                declared_verses_after=15,
            )
        )
        summary.record(
            CellOutcome(
                book="3 John",
                chapter=2,
                translation="WEB",
                status=CellStatus.ERROR,
                error=CellError(
                    book="3 John", chapter=2, reason="HTTP 500", error_code="SRC_FETCH_FAILED"
                ),
            )
        )

        assert summary.chapters_corrected == 1
        assert summary.error_count == 1
        assert summary.per_translation["WEB"].errors == 1

    def test_merge_combines_translations(self):
        base = CellRunner().run([1, 2], _outcome)
        overlay = RunSummary()
        overlay.record(
            CellOutcome(book="Jude", chapter=1, translation="KJV", status=CellStatus.ADDED, added=7)
        )

        base.merge(overlay)

        assert base.cells_processed == 3
        assert base.verses_added == 9
        assert set(base.per_translation) == {"WEB", "KJV"}
