"""Base-translation reconciliation: fill missing verses, correct chapter sizes."""

from collections.abc import Sequence

from scripture_sync.domain.entities.book import Book
from scripture_sync.domain.entities.verse import Verse
from scripture_sync.domain.interfaces.corpus_store import ICorpusStore
from scripture_sync.domain.interfaces.text_source import ITextSource
from scripture_sync.error_codes import ErrorCode
from scripture_sync.exceptions import StoreError
from scripture_sync.sync.cell_runner import CellRunner
from scripture_sync.sync.cells import ChapterCell, chapter_cells, plan_chapters
from scripture_sync.sync.outcomes import CellError, CellOutcome, CellStatus, RunSummary
from scripture_sync.sync.progress import CellProgress, CellState, RunControl
from scripture_sync.translations import BASE_TRANSLATION
from scripture_sync.utils.logging import get_logger

logger = get_logger(__name__)


class Reconciler:
    """Bring (book, chapter) cells to completeness for the base translation.

    The remote source is ground truth. For each cell the verses it reports
    that are absent from the store are inserted, and the chapter's declared
    verse count is overwritten with the fetched count when they disagree.
    A cell already at parity performs no writes, so re-running is safe.
    """

    def __init__(
        self,
        store: ICorpusStore,
        source: ITextSource,
        base_translation: str = BASE_TRANSLATION,
        control: RunControl | None = None,
        max_workers: int = 1,
    ):
        self.store = store
        self.source = source
        self.base_translation = base_translation
        self.control = control or RunControl()
        self.runner = CellRunner(self.control, max_workers=max_workers)

    def run(
        self,
        books: Sequence[Book],
        start_book: str | None = None,
        start_chapter: int | None = None,
    ) -> RunSummary:
        """Reconcile every active chapter of the given books."""
        pairs = plan_chapters(self.store, books, start_book, start_chapter)
        cells = chapter_cells(pairs, self.base_translation)
        logger.info(
            "reconcile_started",
            translation=self.base_translation,
            books=len(books),
            cells=len(cells),
        )
        summary = self.runner.run(cells, self.reconcile_cell)
        logger.info(
            "reconcile_completed",
            translation=self.base_translation,
            cells_processed=summary.cells_processed,
            verses_added=summary.verses_added,
            chapters_corrected=summary.chapters_corrected,
            errors=len(summary.errors),
            interrupted=summary.interrupted,
        )
        return summary

    def reconcile_cell(self, cell: ChapterCell) -> CellOutcome:
        """Reconcile one chapter. Never raises for fetch or store failures."""
        book, chapter = cell.book, cell.chapter
        progress = CellProgress(cell.label)

        try:
            persisted = self.store.find_verses(
                book.name, chapter.chapter_number, self.base_translation
            )
        except StoreError as e:
            progress.advance(CellState.ERRORED)
            progress.finish()
            logger.error(
                "cell_read_failed",
                book=book.name,
                chapter=chapter.chapter_number,
                error=e.message,
            )
            return self._errored(cell, e.message, ErrorCode.STO_READ_FAILED)
        persisted_numbers = {verse.verse_number for verse in persisted}

        progress.advance(CellState.FETCHING)
        result = self.source.fetch_chapter(
            book.name, chapter.chapter_number, self.base_translation
        )
        if not result.ok:
            progress.advance(CellState.ERRORED)
            progress.finish()
            logger.warning(
                "cell_fetch_failed",
                book=book.name,
                chapter=chapter.chapter_number,
                reason=result.reason,
                attempts=result.attempts,
            )
            return self._errored(
                cell,
                result.reason or "fetch failed",
                ErrorCode.SRC_FETCH_FAILED,
            )

        fetched = {verse.verse_number: verse for verse in result.value or []}
        missing = sorted(set(fetched) - persisted_numbers)
        fetched_count = len(fetched)

        progress.advance(CellState.APPLYING)
        added = 0
        try:
            for number in missing:
                self.store.insert_verse(
                    Verse(
                        book_id=chapter.book_id,
                        book_name=book.name,
                        chapter_number=chapter.chapter_number,
                        verse_number=number,
                        text=fetched[number].text,
                        translation=self.base_translation,
                    )
                )
                added += 1
                logger.debug(
                    "verse_inserted",
                    book=book.name,
                    chapter=chapter.chapter_number,
                    verse=number,
                )

            declared_after = chapter.verses
            if fetched_count != chapter.verses:
                self.store.update_chapter_verse_count(chapter.id, fetched_count)
                declared_after = fetched_count
                logger.info(
                    "chapter_verse_count_corrected",
                    book=book.name,
                    chapter=chapter.chapter_number,
                    declared=chapter.verses,
                    fetched=fetched_count,
                )
        except StoreError as e:
            progress.advance(CellState.ERRORED)
            progress.finish()
            logger.error(
                "cell_write_failed",
                book=book.name,
                chapter=chapter.chapter_number,
                added_before_failure=added,
                error=e.message,
            )
            outcome = self._errored(cell, e.message, ErrorCode.STO_WRITE_FAILED)
            outcome.added = added
            return outcome

        progress.finish()
        status = CellStatus.ADDED if added else CellStatus.COMPLETE
        logger.info(
            "cell_reconciled",
            book=book.name,
            chapter=chapter.chapter_number,
            status=status.value,
            added=added,
            persisted=len(persisted_numbers),
            fetched=fetched_count,
        )
        return CellOutcome(
            book=book.name,
            chapter=chapter.chapter_number,
            translation=self.base_translation,
            status=status,
            added=added,
            declared_verses_before=chapter.verses,
            declared_verses_after=declared_after,
        )

    def _errored(
        self, cell: ChapterCell, reason: str, code: ErrorCode
    ) -> CellOutcome:
        error = CellError(
            book=cell.book.name,
            chapter=cell.chapter.chapter_number,
            translation=self.base_translation,
            reason=reason,
            error_code=code.value,
        )
        return CellOutcome(
            book=cell.book.name,
            chapter=cell.chapter.chapter_number,
            translation=self.base_translation,
            status=CellStatus.ERROR,
            error=error,
        )


__all__ = ["Reconciler"]
