"""Reconcile command implementation logic."""

from typing import Any

import typer
from rich.table import Table

from ..config import Config
from ..exceptions import ScriptureSyncError
from ..sync.outcomes import AuditReport, RunSummary
from ..sync.progress import RunControl
from ..translations import normalize_codes
from .shared import EXIT_INTERRUPTED, build_engine, console, report_fatal


def run_reconcile(
    config: Config,
    logger: Any,
    translations: list[str] | None = None,
    overlays: bool = False,
    books: list[str] | None = None,
    start_book: str | None = None,
    start_chapter: int | None = None,
    audit_only: bool = False,
    dry_run: bool = False,
    allow_unknown: bool = False,
    as_json: bool = False,
) -> None:
    """Execute a reconciliation, overlay, or audit-only run.

    With ``overlays`` the configured overlay codes are added to the requested
    ones, and the base is reconciled first when nothing else was requested.

    Raises:
        typer.Exit: 1 on fatal errors, 130 when interrupted
    """
    control = RunControl()
    try:
        requested = list(translations or [])
        if overlays:
            requested = (requested or [config.base_translation]) + list(
                config.overlay_translations
            )
        codes = normalize_codes(requested, allow_unknown=allow_unknown)
        with build_engine(
            config, dry_run=dry_run, control=control, with_source=not audit_only
        ) as engine:
            if audit_only:
                report = engine.audit(books)
                render_audit(report, as_json=as_json)
                return

            control.install_signal_handlers()
            try:
                summary = engine.reconcile(
                    translations=codes or None,
                    book_names=books,
                    start_book=start_book,
                    start_chapter=start_chapter,
                )
            finally:
                control.restore_signal_handlers()
            if dry_run:
                console.print(
                    f"[yellow]Dry run: {len(engine.recorded_writes)} write(s) not applied[/yellow]"
                )
    except ScriptureSyncError as e:
        report_fatal(e, logger)
        raise typer.Exit(code=1) from e

    render_summary(summary, as_json=as_json)
    if summary.interrupted:
        raise typer.Exit(code=EXIT_INTERRUPTED)


def render_summary(summary: RunSummary, as_json: bool = False) -> None:
    """Print a run summary as a table, or as JSON."""
    if as_json:
        console.print_json(summary.model_dump_json())
        return

    table = Table(title="Reconciliation Summary")
    table.add_column("Translation", style="cyan")
    table.add_column("Cells", justify="right")
    table.add_column("Added", justify="right", style="green")
    table.add_column("Updated", justify="right", style="yellow")
    table.add_column("Skipped", justify="right")
    table.add_column("Errors", justify="right", style="red")
    table.add_column("Final count", justify="right")
    for code, counts in summary.per_translation.items():
        table.add_row(
            code,
            str(counts.cells),
            str(counts.added),
            str(counts.updated),
            str(counts.skipped),
            str(counts.errors),
            "-" if counts.final_count is None else str(counts.final_count),
        )
    console.print(table)
    console.print(
        f"Cells processed: {summary.cells_processed} | "
        f"chapters corrected: {summary.chapters_corrected}"
    )

    if summary.errors:
        errors = Table(title="Cell Errors")
        errors.add_column("Book", style="cyan")
        errors.add_column("Chapter", justify="right")
        errors.add_column("Translation")
        errors.add_column("Code", style="magenta")
        errors.add_column("Reason", style="red")
        for error in summary.errors:
            errors.add_row(
                error.book,
                str(error.chapter),
                error.translation or "-",
                error.error_code,
                error.reason,
            )
        console.print(errors)

    if summary.interrupted:
        console.print("[bold yellow]Interrupted: remaining cells were not processed.[/bold yellow]")


def render_audit(report: AuditReport, as_json: bool = False) -> None:
    """Print a completeness audit as a table, or as JSON."""
    if as_json:
        console.print_json(report.model_dump_json())
        return

    if report.deficient_chapters:
        table = Table(title=f"Deficient Chapters ({report.translation})")
        table.add_column("Book", style="cyan")
        table.add_column("Chapter", justify="right")
        table.add_column("Expected", justify="right")
        table.add_column("Actual", justify="right")
        table.add_column("Missing", justify="right", style="red")
        for chapter in report.deficient_chapters:
            table.add_row(
                chapter.book,
                str(chapter.chapter),
                str(chapter.expected),
                str(chapter.actual),
                str(chapter.missing),
            )
        console.print(table)
    else:
        console.print("[green]All audited chapters are complete.[/green]")

    console.print(
        f"Chapters: {report.chapters_checked} | expected {report.expected_total} | "
        f"actual {report.actual_total} | {report.completion_percent:.2f}% complete"
    )
