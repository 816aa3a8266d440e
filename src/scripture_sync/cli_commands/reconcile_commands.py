"""Reconcile command: base-translation reconciliation and overlays."""

from __future__ import annotations

import time
from pathlib import Path
from typing import Annotated

import typer

from .reconcile_handler import run_reconcile
from .shared import load_cli_config


def register(app: typer.Typer) -> None:
    """Register the reconcile command on the given Typer app."""

    @app.command()
    def reconcile(
        translation: Annotated[
            list[str] | None,
            typer.Option(
                "--translation",
                "-t",
                help="Translation code(s); the base code reconciles, others overlay",
            ),
        ] = None,
        overlays: Annotated[
            bool,
            typer.Option(
                "--overlays",
                help="Also overlay the configured overlay_translations",
            ),
        ] = False,
        book: Annotated[
            list[str] | None,
            typer.Option("--book", "-b", help="Limit to these book(s)"),
        ] = None,
        start_book: Annotated[
            str | None,
            typer.Option("--start-book", help="Resume from this book"),
        ] = None,
        start_chapter: Annotated[
            int | None,
            typer.Option(
                "--start-chapter", min=1, help="Resume from this chapter of --start-book"
            ),
        ] = None,
        audit_only: Annotated[
            bool,
            typer.Option("--audit-only", help="Run the completeness audit instead"),
        ] = False,
        workers: Annotated[
            int | None,
            typer.Option(
                "--workers", min=1, max=32, help="Cells processed concurrently"
            ),
        ] = None,
        dry_run: Annotated[
            bool,
            typer.Option("--dry-run", help="Compute outcomes without writing"),
        ] = False,
        allow_unknown: Annotated[
            bool,
            typer.Option(
                "--allow-unknown", help="Accept translation codes outside the catalog"
            ),
        ] = False,
        as_json: Annotated[
            bool,
            typer.Option("--json", help="Print the summary as JSON"),
        ] = False,
        config_path: Annotated[
            Path | None,
            typer.Option("--config", help="Path to config.yaml", exists=True),
        ] = None,
        log_level: Annotated[
            str | None,
            typer.Option("--log-level", help="Log level (DEBUG, INFO, WARN, ERROR)"),
        ] = None,
        verbose: Annotated[
            bool,
            typer.Option(
                "--verbose",
                "-v",
                help="Show all log messages on terminal (for debugging)",
            ),
        ] = False,
    ) -> None:
        """Fill missing verses from the remote source and build translation overlays."""
        start_time = time.time()
        config, logger = load_cli_config(config_path, log_level, verbose=verbose)
        if workers is not None:
            config.max_workers = workers

        logger.info(
            "cli_command_started",
            command="reconcile",
            translations=translation,
            overlays=overlays,
            books=book,
            start_book=start_book,
            start_chapter=start_chapter,
            audit_only=audit_only,
            dry_run=dry_run,
            max_workers=config.max_workers,
        )

        try:
            run_reconcile(
                config=config,
                logger=logger,
                translations=translation,
                overlays=overlays,
                books=book,
                start_book=start_book,
                start_chapter=start_chapter,
                audit_only=audit_only,
                dry_run=dry_run,
                allow_unknown=allow_unknown,
                as_json=as_json,
            )
        finally:
            logger.info(
                "cli_command_completed",
                command="reconcile",
                duration=round(time.time() - start_time, 2),
            )
