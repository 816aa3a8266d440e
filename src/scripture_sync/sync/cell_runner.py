"""Sequential or thread-pooled iteration over independent cells."""

import contextvars
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import TypeVar

from scripture_sync.sync.outcomes import CellOutcome, RunSummary
from scripture_sync.sync.progress import RunControl
from scripture_sync.utils.logging import get_logger

logger = get_logger(__name__)

C = TypeVar("C")


class CellRunner:
    """Run a per-cell function over a flat list of cells.

    Cells have no cross-cell dependencies, so they may run in any order.
    The interrupt flag is checked before each cell starts; cells already
    finished keep their writes and are folded into the summary.
    """

    def __init__(self, control: RunControl | None = None, max_workers: int = 1):
        if max_workers < 1:
            msg = f"max_workers must be at least 1, got {max_workers}"
            raise ValueError(msg)
        self.control = control or RunControl()
        self.max_workers = max_workers

    def run(
        self,
        cells: Sequence[C],
        process: Callable[[C], CellOutcome],
        summary: RunSummary | None = None,
        on_outcome: Callable[[CellOutcome], None] | None = None,
    ) -> RunSummary:
        summary = summary if summary is not None else RunSummary()
        if not cells:
            return summary

        if self.max_workers == 1 or len(cells) == 1:
            self._run_sequential(cells, process, summary, on_outcome)
        else:
            self._run_parallel(cells, process, summary, on_outcome)

        if self.control.is_interrupted():
            summary.interrupted = True
        return summary

    def _run_sequential(
        self,
        cells: Sequence[C],
        process: Callable[[C], CellOutcome],
        summary: RunSummary,
        on_outcome: Callable[[CellOutcome], None] | None,
    ) -> None:
        for index, cell in enumerate(cells):
            if self.control.is_interrupted():
                logger.warning(
                    "run_interrupted",
                    cells_done=index,
                    cells_remaining=len(cells) - index,
                )
                return
            outcome = process(cell)
            summary.record(outcome)
            if on_outcome:
                on_outcome(outcome)

    def _run_parallel(
        self,
        cells: Sequence[C],
        process: Callable[[C], CellOutcome],
        summary: RunSummary,
        on_outcome: Callable[[CellOutcome], None] | None,
    ) -> None:
        workers = min(self.max_workers, len(cells))
        logger.info("parallel_run_started", cells=len(cells), max_workers=workers)

        def guarded(cell: C) -> CellOutcome | None:
            if self.control.is_interrupted():
                return None
            return process(cell)

        skipped = 0
        with ThreadPoolExecutor(max_workers=workers) as executor:
            base_context = contextvars.copy_context()
            futures: list[Future[CellOutcome | None]] = [
                executor.submit(base_context.copy().run, guarded, cell)
                for cell in cells
            ]
            for future in as_completed(futures):
                if self.control.is_interrupted():
                    for pending in futures:
                        pending.cancel()
                if future.cancelled():
                    skipped += 1
                    continue
                outcome = future.result()
                if outcome is None:
                    skipped += 1
                    continue
                summary.record(outcome)
                if on_outcome:
                    on_outcome(outcome)

        if skipped:
            logger.warning(
                "run_interrupted",
                cells_done=len(cells) - skipped,
                cells_remaining=skipped,
            )


__all__ = ["CellRunner"]
