"""Structured run outputs for reconciliation, overlay and audit runs."""

from enum import Enum

from pydantic import BaseModel, Field, computed_field


class CellStatus(str, Enum):
    """Terminal result of processing one cell."""

    ADDED = "added"
    COMPLETE = "complete"
    SKIPPED = "skipped"
    ERROR = "error"


class CellError(BaseModel):
    """A per-cell failure entry in a run summary."""

    book: str
    chapter: int
    translation: str | None = None
    reason: str
    error_code: str


class CellOutcome(BaseModel):
    """Outcome of one (book, chapter[, translation]) cell."""

    book: str
    chapter: int
    translation: str
    status: CellStatus
    added: int = Field(default=0, ge=0)
    updated: int = Field(default=0, ge=0)
    skipped: int = Field(default=0, ge=0)
    fetch_failures: int = Field(default=0, ge=0)
    declared_verses_before: int | None = None
    declared_verses_after: int | None = None
    interrupted: bool = False
    error: CellError | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def complete(self) -> bool:
        return self.status == CellStatus.COMPLETE

    @property
    def writes(self) -> int:
        """Number of store writes this cell performed."""
        corrected = int(
            self.declared_verses_after is not None
            and self.declared_verses_after != self.declared_verses_before
        )
        return self.added + self.updated + corrected


class TranslationCounts(BaseModel):
    """Per-translation totals for an overlay or reconcile run."""

    translation: str
    cells: int = 0
    added: int = 0
    updated: int = 0
    skipped: int = 0
    errors: int = 0
    final_count: int | None = None


class RunSummary(BaseModel):
    """Aggregate outcome of a reconciliation or overlay run.

    A run that hits per-cell failures still produces a complete summary:
    every failed cell is listed in ``errors``.
    """

    cells_processed: int = 0
    verses_added: int = 0
    verses_updated: int = 0
    verses_skipped: int = 0
    chapters_corrected: int = 0
    errors: list[CellError] = Field(default_factory=list)
    interrupted: bool = False
    dry_run: bool = False
    per_translation: dict[str, TranslationCounts] = Field(default_factory=dict)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def error_count(self) -> int:
        return len(self.errors)

    def record(self, outcome: CellOutcome) -> None:
        """Fold one cell outcome into the totals."""
        self.cells_processed += 1
        self.verses_added += outcome.added
        self.verses_updated += outcome.updated
        self.verses_skipped += outcome.skipped
        if (
            outcome.declared_verses_after is not None
            and outcome.declared_verses_after != outcome.declared_verses_before
        ):
            self.chapters_corrected += 1
        if outcome.error is not None:
            self.errors.append(outcome.error)
        if outcome.interrupted:
            self.interrupted = True

        counts = self.per_translation.setdefault(
            outcome.translation, TranslationCounts(translation=outcome.translation)
        )
        counts.cells += 1
        counts.added += outcome.added
        counts.updated += outcome.updated
        counts.skipped += outcome.skipped
        if outcome.error is not None:
            counts.errors += 1

    def merge(self, other: "RunSummary") -> None:
        """Fold another run's totals into this one (base pass then overlays)."""
        self.cells_processed += other.cells_processed
        self.verses_added += other.verses_added
        self.verses_updated += other.verses_updated
        self.verses_skipped += other.verses_skipped
        self.chapters_corrected += other.chapters_corrected
        self.errors.extend(other.errors)
        self.interrupted = self.interrupted or other.interrupted
        self.dry_run = self.dry_run or other.dry_run
        for code, counts in other.per_translation.items():
            mine = self.per_translation.get(code)
            if mine is None:
                self.per_translation[code] = counts.model_copy()
                continue
            mine.cells += counts.cells
            mine.added += counts.added
            mine.updated += counts.updated
            mine.skipped += counts.skipped
            mine.errors += counts.errors
            if counts.final_count is not None:
                mine.final_count = counts.final_count


class DeficientChapter(BaseModel):
    """A chapter holding fewer active verses than it declares."""

    book: str
    chapter: int
    expected: int
    actual: int

    @computed_field  # type: ignore[prop-decorator]
    @property
    def missing(self) -> int:
        return self.expected - self.actual


class AuditReport(BaseModel):
    """Read-only completeness report for the base translation."""

    translation: str
    chapters_checked: int = 0
    expected_total: int = 0
    actual_total: int = 0
    deficient_chapters: list[DeficientChapter] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def completion_percent(self) -> float:
        if self.expected_total == 0:
            return 100.0
        return round(self.actual_total / self.expected_total * 100.0, 2)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def missing_total(self) -> int:
        return sum(chapter.missing for chapter in self.deficient_chapters)

    @property
    def is_complete(self) -> bool:
        return not self.deficient_chapters


__all__ = [
    "AuditReport",
    "CellError",
    "CellOutcome",
    "CellStatus",
    "DeficientChapter",
    "RunSummary",
    "TranslationCounts",
]
