"""Read-only completeness audit of the base translation."""

from collections.abc import Sequence

from scripture_sync.domain.entities.book import Book
from scripture_sync.domain.interfaces.corpus_store import ICorpusStore
from scripture_sync.sync.outcomes import AuditReport, DeficientChapter
from scripture_sync.translations import BASE_TRANSLATION
from scripture_sync.utils.logging import get_logger

logger = get_logger(__name__)


class CompletenessAuditor:
    """Compare each active chapter's declared verse count with stored verses.

    Never writes, so it is safe to run at any time, including while a
    reconciliation is in progress.
    """

    def __init__(self, store: ICorpusStore, base_translation: str = BASE_TRANSLATION):
        self.store = store
        self.base_translation = base_translation

    def audit(self, books: Sequence[Book] | None = None) -> AuditReport:
        """Audit the given books (all active books when omitted)."""
        if books is None:
            books = self.store.find_books()

        report = AuditReport(translation=self.base_translation)
        for book in sorted(books, key=lambda b: b.order):
            for chapter in self.store.find_chapters(book.id):
                actual = self.store.count_verses(
                    translation=self.base_translation,
                    book_name=book.name,
                    chapter_number=chapter.chapter_number,
                )
                report.chapters_checked += 1
                report.expected_total += chapter.verses
                report.actual_total += actual
                if actual < chapter.verses:
                    report.deficient_chapters.append(
                        DeficientChapter(
                            book=book.name,
                            chapter=chapter.chapter_number,
                            expected=chapter.verses,
                            actual=actual,
                        )
                    )

        logger.info(
            "audit_completed",
            translation=self.base_translation,
            chapters=report.chapters_checked,
            expected_total=report.expected_total,
            actual_total=report.actual_total,
            completion_percent=report.completion_percent,
            deficient_chapters=len(report.deficient_chapters),
        )
        return report


__all__ = ["CompletenessAuditor"]
