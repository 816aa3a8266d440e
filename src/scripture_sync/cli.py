"""Command-line interface for scripture-sync."""

from __future__ import annotations

import typer

from .cli_commands import reconcile_commands, report_commands

app = typer.Typer(
    name="scripture-sync",
    help="Reconcile a stored scripture corpus against a remote verse provider.",
    no_args_is_help=True,
)

reconcile_commands.register(app)
report_commands.register(app)


def cli() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    cli()
