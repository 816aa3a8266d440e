"""Translation coverage reporting against the base translation."""

from collections.abc import Sequence
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field, computed_field

from scripture_sync.domain.entities.verse import VerseAddress
from scripture_sync.domain.interfaces.corpus_store import ICorpusStore
from scripture_sync.error_codes import ErrorCode
from scripture_sync.exceptions import BookNotFoundError
from scripture_sync.translations import BASE_TRANSLATION
from scripture_sync.utils.logging import get_logger

logger = get_logger(__name__)

# Below this ratio a translation is effectively absent
CRITICAL_THRESHOLD = 0.1


class CoverageStatus(str, Enum):
    HEALTHY = "HEALTHY"
    INCOMPLETE = "INCOMPLETE"
    CRITICAL = "CRITICAL"


class TranslationCoverage(BaseModel):
    translation: str
    count: int
    expected: int
    status: CoverageStatus

    @computed_field  # type: ignore[prop-decorator]
    @property
    def completeness(self) -> float:
        if self.expected == 0:
            return 0.0
        return round(self.count / self.expected, 4)


class CoverageReport(BaseModel):
    """Per-translation coverage, using base-translation verses as the expected total."""

    base_translation: str
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    alert_threshold: float
    translations: list[TranslationCoverage] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def average_completeness(self) -> float:
        if not self.translations:
            return 0.0
        total = sum(item.completeness for item in self.translations)
        return round(total / len(self.translations), 4)

    @property
    def critical(self) -> list[TranslationCoverage]:
        return [t for t in self.translations if t.status == CoverageStatus.CRITICAL]

    @property
    def incomplete(self) -> list[TranslationCoverage]:
        return [t for t in self.translations if t.status == CoverageStatus.INCOMPLETE]


class CoverageReporter:
    """Read-only coverage checks for overlay translations."""

    def __init__(
        self,
        store: ICorpusStore,
        base_translation: str = BASE_TRANSLATION,
        alert_threshold: float = 0.8,
    ):
        self.store = store
        self.base_translation = base_translation
        self.alert_threshold = alert_threshold

    def classify(self, count: int, expected: int) -> CoverageStatus:
        ratio = count / expected if expected else 0.0
        if ratio < CRITICAL_THRESHOLD:
            return CoverageStatus.CRITICAL
        if ratio < self.alert_threshold:
            return CoverageStatus.INCOMPLETE
        return CoverageStatus.HEALTHY

    def report(self, translations: Sequence[str] | None = None) -> CoverageReport:
        """Build a coverage report.

        Args:
            translations: Codes to report on. Defaults to every code with at
                least one active verse.
        """
        counts = self.store.count_verses_by_translation()
        expected = counts.get(self.base_translation, 0)
        codes = list(translations) if translations else sorted(
            counts, key=lambda code: (-counts[code], code)
        )

        report = CoverageReport(
            base_translation=self.base_translation,
            alert_threshold=self.alert_threshold,
        )
        for code in codes:
            count = counts.get(code, 0)
            report.translations.append(
                TranslationCoverage(
                    translation=code,
                    count=count,
                    expected=expected,
                    status=self.classify(count, expected),
                )
            )

        for item in report.critical:
            logger.warning(
                "coverage_critical",
                translation=item.translation,
                completeness=item.completeness,
            )
        for item in report.incomplete:
            logger.info(
                "coverage_incomplete",
                translation=item.translation,
                completeness=item.completeness,
            )
        logger.info(
            "coverage_completed",
            translations=len(report.translations),
            expected=expected,
            average_completeness=report.average_completeness,
        )
        return report

    def missing_overlay_addresses(
        self,
        translation: str,
        book: str | None = None,
        start_chapter: int | None = None,
        end_chapter: int | None = None,
    ) -> list[VerseAddress]:
        """List base-translation addresses with no active record in ``translation``."""
        if book is not None:
            found = self.store.find_book(book)
            if found is None:
                msg = f"Book not found: {book}"
                raise BookNotFoundError(
                    msg,
                    suggestion="Run 'scripture-sync audit' to list the seeded books",
                    error_code=ErrorCode.CFG_BOOK_NOT_FOUND.value,
                )
            books = [found]
        else:
            books = self.store.find_books()

        missing: list[VerseAddress] = []
        for current in books:
            for chapter in self.store.find_chapters(current.id):
                number = chapter.chapter_number
                if start_chapter is not None and number < start_chapter:
                    continue
                if end_chapter is not None and number > end_chapter:
                    continue
                present = {
                    verse.verse_number
                    for verse in self.store.find_verses(current.name, number, translation)
                }
                missing.extend(
                    verse.address
                    for verse in self.store.find_verses(
                        current.name, number, self.base_translation
                    )
                    if verse.verse_number not in present
                )

        logger.info(
            "missing_overlay_addresses",
            translation=translation,
            book=book,
            missing=len(missing),
        )
        return missing


__all__ = [
    "CRITICAL_THRESHOLD",
    "CoverageReport",
    "CoverageReporter",
    "CoverageStatus",
    "TranslationCoverage",
]
