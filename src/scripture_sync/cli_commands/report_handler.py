"""Read-only report commands: audit, coverage, missing overlay addresses."""

import json
from typing import Any

import typer
from rich.table import Table

from ..config import Config
from ..exceptions import ScriptureSyncError
from ..sync.coverage import CoverageReport, CoverageStatus
from ..translations import normalize_codes
from .reconcile_handler import render_audit
from .shared import build_engine, console, report_fatal

_STATUS_STYLE = {
    CoverageStatus.HEALTHY: "green",
    CoverageStatus.INCOMPLETE: "yellow",
    CoverageStatus.CRITICAL: "red",
}


def run_audit(
    config: Config, logger: Any, books: list[str] | None, as_json: bool
) -> None:
    try:
        with build_engine(config, with_source=False) as engine:
            report = engine.audit(books)
    except ScriptureSyncError as e:
        report_fatal(e, logger)
        raise typer.Exit(code=1) from e
    render_audit(report, as_json=as_json)


def run_coverage(
    config: Config,
    logger: Any,
    translations: list[str] | None,
    allow_unknown: bool,
    as_json: bool,
) -> None:
    try:
        codes = normalize_codes(translations or [], allow_unknown=allow_unknown)
        with build_engine(config, with_source=False) as engine:
            report = engine.coverage(codes or None)
    except ScriptureSyncError as e:
        report_fatal(e, logger)
        raise typer.Exit(code=1) from e
    render_coverage(report, as_json=as_json)


def run_missing(
    config: Config,
    logger: Any,
    translation: str,
    book: str | None,
    start: int | None,
    end: int | None,
    allow_unknown: bool,
    as_json: bool,
) -> None:
    try:
        (code,) = normalize_codes([translation], allow_unknown=allow_unknown)
        with build_engine(config, with_source=False) as engine:
            addresses = engine.missing(code, book, start, end)
    except ScriptureSyncError as e:
        report_fatal(e, logger)
        raise typer.Exit(code=1) from e

    if as_json:
        payload = [
            {
                "book": address.book_name,
                "chapter": address.chapter_number,
                "verse": address.verse_number,
            }
            for address in addresses
        ]
        console.print_json(json.dumps({"translation": code, "missing": payload}))
        return

    if not addresses:
        console.print(f"[green]No missing {code} verses in the selected range.[/green]")
        return
    for address in addresses:
        console.print(str(address))
    console.print(f"\n[yellow]{len(addresses)} {code} verse(s) missing[/yellow]")


def render_coverage(report: CoverageReport, as_json: bool = False) -> None:
    if as_json:
        console.print_json(report.model_dump_json())
        return

    table = Table(title=f"Translation Coverage (expected = {report.base_translation} verses)")
    table.add_column("Translation", style="cyan")
    table.add_column("Verses", justify="right")
    table.add_column("Expected", justify="right")
    table.add_column("Complete", justify="right")
    table.add_column("Status")
    for item in report.translations:
        style = _STATUS_STYLE[item.status]
        table.add_row(
            item.translation,
            str(item.count),
            str(item.expected),
            f"{item.completeness:.0%}",
            f"[{style}]{item.status.value}[/{style}]",
        )
    console.print(table)
    console.print(f"Average completeness: {report.average_completeness:.0%}")
