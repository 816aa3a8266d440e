"""Translation overlay: populate other translations on the base skeleton."""

from collections.abc import Sequence

from scripture_sync.config_settings import DEFAULT_MIN_TEXT_LENGTH
from scripture_sync.domain.entities.book import Book
from scripture_sync.domain.entities.verse import Verse, has_usable_text
from scripture_sync.domain.interfaces.corpus_store import ICorpusStore
from scripture_sync.domain.interfaces.text_source import ITextSource
from scripture_sync.error_codes import ErrorCode
from scripture_sync.exceptions import StoreError
from scripture_sync.sync.cell_runner import CellRunner
from scripture_sync.sync.cells import (
    ChapterCell,
    chapter_cells,
    final_verse_count,
    plan_chapters,
)
from scripture_sync.sync.outcomes import CellError, CellOutcome, CellStatus, RunSummary
from scripture_sync.sync.progress import CellProgress, CellState, RunControl
from scripture_sync.translations import BASE_TRANSLATION
from scripture_sync.utils.logging import get_logger

logger = get_logger(__name__)


class OverlayBuilder:
    """Fetch non-base translations for addresses the base translation defines.

    Overlay verses are only ever written at (book, chapter, verse) addresses
    that already exist in the base translation. A chapter with no base verses
    is skipped, not errored: it simply has not been reconciled yet.
    """

    def __init__(
        self,
        store: ICorpusStore,
        source: ITextSource,
        base_translation: str = BASE_TRANSLATION,
        min_text_length: int = DEFAULT_MIN_TEXT_LENGTH,
        control: RunControl | None = None,
        max_workers: int = 1,
    ):
        self.store = store
        self.source = source
        self.base_translation = base_translation
        self.min_text_length = min_text_length
        self.control = control or RunControl()
        self.runner = CellRunner(self.control, max_workers=max_workers)

    def run(
        self,
        books: Sequence[Book],
        translations: Sequence[str],
        start_book: str | None = None,
        start_chapter: int | None = None,
    ) -> RunSummary:
        """Overlay every requested translation across the given books.

        Translations are processed one after another; the summary carries a
        final active verse count per translation for auditing.
        """
        pairs = plan_chapters(self.store, books, start_book, start_chapter)
        summary = RunSummary()
        for translation in translations:
            if translation == self.base_translation:
                logger.warning("overlay_base_translation_ignored", translation=translation)
                continue
            if self.control.is_interrupted():
                summary.interrupted = True
                break

            cells = chapter_cells(pairs, translation)
            logger.info(
                "overlay_started",
                translation=translation,
                base_translation=self.base_translation,
                cells=len(cells),
            )
            self.runner.run(cells, self.overlay_cell, summary)

            counts = summary.per_translation.get(translation)
            final_count = final_verse_count(self.store, translation)
            if counts is not None:
                counts.final_count = final_count
            logger.info(
                "overlay_completed",
                translation=translation,
                added=counts.added if counts else 0,
                updated=counts.updated if counts else 0,
                skipped=counts.skipped if counts else 0,
                final_count=final_count,
            )
        return summary

    def overlay_cell(self, cell: ChapterCell) -> CellOutcome:
        """Overlay one (book, chapter, translation) cell."""
        book, chapter, translation = cell.book, cell.chapter, cell.translation
        progress = CellProgress(cell.label)
        outcome = CellOutcome(
            book=book.name,
            chapter=chapter.chapter_number,
            translation=translation,
            status=CellStatus.SKIPPED,
        )

        try:
            base_verses = self.store.find_verses(
                book.name, chapter.chapter_number, self.base_translation
            )
            if base_verses:
                existing = {
                    verse.verse_number: verse
                    for verse in self.store.find_verses(
                        book.name, chapter.chapter_number, translation
                    )
                }
        except StoreError as e:
            return self._failed(
                outcome, progress, e, ErrorCode.STO_READ_FAILED, "overlay_cell_read_failed"
            )
        if not base_verses:
            progress.advance(CellState.SKIPPED)
            progress.finish()
            logger.info(
                "overlay_cell_skipped",
                book=book.name,
                chapter=chapter.chapter_number,
                translation=translation,
                reason="no_base_verses",
            )
            return outcome

        satisfied = 0
        progress.advance(CellState.FETCHING)
        try:
            for base_verse in base_verses:
                current = existing.get(base_verse.verse_number)
                if current is not None and has_usable_text(
                    current.text, self.min_text_length
                ):
                    satisfied += 1
                    outcome.skipped += 1
                    continue

                if self.control.is_interrupted():
                    outcome.interrupted = True
                    break

                result = self.source.fetch_verse(
                    book.name,
                    chapter.chapter_number,
                    base_verse.verse_number,
                    translation,
                )
                if not result.ok or not has_usable_text(
                    result.value, self.min_text_length
                ):
                    outcome.skipped += 1
                    outcome.fetch_failures += int(not result.ok)
                    logger.debug(
                        "overlay_verse_skipped",
                        verse=str(base_verse.address),
                        translation=translation,
                        reason=result.reason or "text_below_threshold",
                    )
                    continue

                text = (result.value or "").strip()
                if progress.state == CellState.FETCHING:
                    progress.advance(CellState.APPLYING)
                if current is not None and current.id is not None:
                    self.store.update_verse_text(current.id, text)
                    outcome.updated += 1
                    continue

                inserted = self.store.upsert_verse(
                    Verse(
                        book_id=base_verse.book_id,
                        book_name=book.name,
                        chapter_number=chapter.chapter_number,
                        verse_number=base_verse.verse_number,
                        text=text,
                        translation=translation,
                    )
                )
                if inserted:
                    outcome.added += 1
                else:
                    outcome.updated += 1
        except StoreError as e:
            return self._failed(
                outcome, progress, e, ErrorCode.STO_WRITE_FAILED, "overlay_cell_write_failed"
            )

        if progress.state == CellState.FETCHING:
            progress.advance(CellState.SKIPPED)
        progress.finish()

        if outcome.added or outcome.updated:
            outcome.status = CellStatus.ADDED
        elif satisfied == len(base_verses):
            outcome.status = CellStatus.COMPLETE
        logger.info(
            "overlay_cell_done",
            book=book.name,
            chapter=chapter.chapter_number,
            translation=translation,
            status=outcome.status.value,
            added=outcome.added,
            updated=outcome.updated,
            skipped=outcome.skipped,
        )
        return outcome

    @staticmethod
    def _failed(
        outcome: CellOutcome,
        progress: CellProgress,
        error: StoreError,
        code: ErrorCode,
        event: str,
    ) -> CellOutcome:
        progress.advance(CellState.ERRORED)
        progress.finish()
        outcome.status = CellStatus.ERROR
        outcome.error = CellError(
            book=outcome.book,
            chapter=outcome.chapter,
            translation=outcome.translation,
            reason=error.message,
            error_code=code.value,
        )
        logger.error(
            event,
            book=outcome.book,
            chapter=outcome.chapter,
            translation=outcome.translation,
            error=error.message,
        )
        return outcome


__all__ = ["OverlayBuilder"]
