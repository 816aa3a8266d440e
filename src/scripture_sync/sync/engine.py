"""Run orchestration: preflight, book selection and the reconcile/audit entry points."""

from collections.abc import Sequence
from types import TracebackType
from typing import Any

from scripture_sync.config import Config
from scripture_sync.domain.entities.book import Book
from scripture_sync.domain.entities.verse import VerseAddress
from scripture_sync.domain.interfaces.corpus_store import ICorpusStore
from scripture_sync.domain.interfaces.text_source import ITextSource
from scripture_sync.error_codes import ErrorCode
from scripture_sync.exceptions import BookNotFoundError
from scripture_sync.infrastructure.dry_run_store import DryRunCorpusStore
from scripture_sync.sync.auditor import CompletenessAuditor
from scripture_sync.sync.cells import final_verse_count
from scripture_sync.sync.coverage import CoverageReport, CoverageReporter
from scripture_sync.sync.outcomes import AuditReport, RunSummary
from scripture_sync.sync.overlay import OverlayBuilder
from scripture_sync.sync.progress import RunControl
from scripture_sync.sync.reconciler import Reconciler
from scripture_sync.utils.logging import get_logger

logger = get_logger(__name__)


class SyncEngine:
    """Entry point for every run against one store and one source.

    Fatal problems (unreachable store, unknown book) raise before any cell is
    processed. Once cells start, failures are reported in the summary.
    """

    def __init__(
        self,
        config: Config,
        store: ICorpusStore,
        source: ITextSource | None,
        control: RunControl | None = None,
        dry_run: bool = False,
    ):
        """
        Initialize engine.

        Args:
            config: Service configuration
            store: Corpus store
            source: Remote text source (not needed for read-only runs)
            control: Shared interruption flag
            dry_run: Record writes instead of applying them
        """
        self.config = config
        self.dry_run = dry_run
        self.store: ICorpusStore = DryRunCorpusStore(store) if dry_run else store
        self._inner_store = store
        self.source = source
        self.control = control or RunControl()
        self.base_translation = config.base_translation

    def __enter__(self) -> "SyncEngine":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        for resource in (self.source, self._inner_store):
            close = getattr(resource, "close", None)
            if callable(close):
                close()

    @property
    def recorded_writes(self) -> list[Any]:
        if isinstance(self.store, DryRunCorpusStore):
            return list(self.store.writes)
        return []

    def preflight(self) -> None:
        """Verify the store is reachable before any cell runs."""
        self.store.ping()

    def resolve_books(self, names: Sequence[str] | None = None) -> list[Book]:
        """Return the requested active books in canonical order.

        Raises:
            BookNotFoundError: If any requested name has no active book
        """
        if not names:
            return self.store.find_books()
        books = self.store.find_books(names)
        found = {book.name for book in books}
        missing = [name for name in names if name not in found]
        if missing:
            msg = f"Book(s) not found: {', '.join(missing)}"
            raise BookNotFoundError(
                msg,
                suggestion="Book names must match the seeded corpus exactly (e.g. '1 John')",
                error_code=ErrorCode.CFG_BOOK_NOT_FOUND.value,
                context={"missing": missing},
            )
        return books

    def reconcile(
        self,
        translations: Sequence[str] | None = None,
        book_names: Sequence[str] | None = None,
        start_book: str | None = None,
        start_chapter: int | None = None,
    ) -> RunSummary:
        """Reconcile the base translation and/or build overlays.

        With no translations (or only the base code) the base translation is
        reconciled. Non-base codes are overlaid after the base pass when the
        base is also requested.
        """
        if self.source is None:
            msg = "A text source is required for reconciliation"
            raise ValueError(msg)

        self.preflight()
        books = self.resolve_books(book_names)
        codes = list(translations) if translations else [self.base_translation]
        overlays = [code for code in codes if code != self.base_translation]

        summary = RunSummary(dry_run=self.dry_run)
        if self.base_translation in codes:
            reconciler = Reconciler(
                self.store,
                self.source,
                base_translation=self.base_translation,
                control=self.control,
                max_workers=self.config.max_workers,
            )
            summary.merge(reconciler.run(books, start_book, start_chapter))
            counts = summary.per_translation.get(self.base_translation)
            if counts is not None:
                counts.final_count = final_verse_count(
                    self.store, self.base_translation
                )

        if overlays and not self.control.is_interrupted():
            builder = OverlayBuilder(
                self.store,
                self.source,
                base_translation=self.base_translation,
                min_text_length=self.config.min_text_length,
                control=self.control,
                max_workers=self.config.max_workers,
            )
            summary.merge(builder.run(books, overlays, start_book, start_chapter))

        if self.control.is_interrupted():
            summary.interrupted = True
            logger.warning(
                "run_interrupted",
                cells_processed=summary.cells_processed,
                error_code=ErrorCode.RUN_INTERRUPTED.value,
            )

        logger.info(
            "run_summary",
            cells_processed=summary.cells_processed,
            verses_added=summary.verses_added,
            verses_updated=summary.verses_updated,
            verses_skipped=summary.verses_skipped,
            errors=summary.error_count,
            interrupted=summary.interrupted,
            dry_run=summary.dry_run,
        )
        return summary

    def audit(self, book_names: Sequence[str] | None = None) -> AuditReport:
        self.preflight()
        books = self.resolve_books(book_names)
        return CompletenessAuditor(self.store, self.base_translation).audit(books)

    def coverage(self, translations: Sequence[str] | None = None) -> CoverageReport:
        self.preflight()
        reporter = CoverageReporter(
            self.store,
            self.base_translation,
            alert_threshold=self.config.coverage_alert_threshold,
        )
        return reporter.report(translations)

    def missing(
        self,
        translation: str,
        book: str | None = None,
        start_chapter: int | None = None,
        end_chapter: int | None = None,
    ) -> list[VerseAddress]:
        self.preflight()
        reporter = CoverageReporter(self.store, self.base_translation)
        return reporter.missing_overlay_addresses(
            translation, book, start_chapter, end_chapter
        )


__all__ = ["SyncEngine"]
