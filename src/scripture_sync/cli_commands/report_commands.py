"""Read-only report commands: audit, coverage, missing."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from .report_handler import run_audit, run_coverage, run_missing
from .shared import load_cli_config

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", help="Path to config.yaml", exists=True),
]
LogLevelOption = Annotated[
    str | None,
    typer.Option("--log-level", help="Log level (DEBUG, INFO, WARN, ERROR)"),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Show all log messages on terminal"),
]
JsonOption = Annotated[bool, typer.Option("--json", help="Print the report as JSON")]
AllowUnknownOption = Annotated[
    bool,
    typer.Option("--allow-unknown", help="Accept translation codes outside the catalog"),
]


def register(app: typer.Typer) -> None:
    """Register report commands on the given Typer app."""

    @app.command()
    def audit(
        book: Annotated[
            list[str] | None,
            typer.Option("--book", "-b", help="Limit to these book(s)"),
        ] = None,
        as_json: JsonOption = False,
        config_path: ConfigOption = None,
        log_level: LogLevelOption = None,
        verbose: VerboseOption = False,
    ) -> None:
        """Report chapters whose stored verse count is below the declared count."""
        config, logger = load_cli_config(config_path, log_level, verbose=verbose)
        run_audit(config, logger, book, as_json)

    @app.command()
    def coverage(
        translation: Annotated[
            list[str] | None,
            typer.Option("--translation", "-t", help="Translation code(s) to report"),
        ] = None,
        allow_unknown: AllowUnknownOption = False,
        as_json: JsonOption = False,
        config_path: ConfigOption = None,
        log_level: LogLevelOption = None,
        verbose: VerboseOption = False,
    ) -> None:
        """Report per-translation completeness against the base translation."""
        config, logger = load_cli_config(config_path, log_level, verbose=verbose)
        run_coverage(config, logger, translation, allow_unknown, as_json)

    @app.command()
    def missing(
        translation: Annotated[str, typer.Argument(help="Overlay translation code")],
        book: Annotated[
            str | None, typer.Argument(help="Limit to one book")
        ] = None,
        start: Annotated[
            int | None, typer.Option("--start", min=1, help="First chapter")
        ] = None,
        end: Annotated[
            int | None, typer.Option("--end", min=1, help="Last chapter")
        ] = None,
        allow_unknown: AllowUnknownOption = False,
        as_json: JsonOption = False,
        config_path: ConfigOption = None,
        log_level: LogLevelOption = None,
        verbose: VerboseOption = False,
    ) -> None:
        """List base-translation verses that have no record in TRANSLATION."""
        config, logger = load_cli_config(config_path, log_level, verbose=verbose)
        run_missing(
            config, logger, translation, book, start, end, allow_unknown, as_json
        )
