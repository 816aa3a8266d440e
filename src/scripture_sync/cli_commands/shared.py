"""Shared utilities for CLI commands."""

from pathlib import Path
from typing import Any

import typer
from rich.console import Console

from scripture_sync.config import Config, load_config, set_config
from scripture_sync.exceptions import ScriptureSyncError
from scripture_sync.infrastructure.mongo_corpus_store import MongoCorpusStore
from scripture_sync.providers.bible_api import BibleApiSource
from scripture_sync.sync.engine import SyncEngine
from scripture_sync.sync.progress import RunControl
from scripture_sync.utils.logging import configure_logging, get_logger
from scripture_sync.utils.resilience import FixedIntervalRateLimiter

# Shared console for all commands
console = Console()

# Exit code for a run stopped by SIGINT/SIGTERM
EXIT_INTERRUPTED = 130

# Cached across commands within one process
_config: Config | None = None
_logger: Any | None = None


def get_config_and_logger(
    config_path: Path | None = None,
    log_level: str | None = None,
    verbose: bool = False,
) -> tuple[Config, Any]:
    """Load configuration and configure logging once per process.

    Args:
        config_path: Optional path to config file
        log_level: Console log level (defaults to the configured one)
        verbose: Show all log messages on terminal (for debugging)

    Returns:
        Tuple of (Config, Logger)
    """
    global _config, _logger

    if _config is None:
        _config = load_config(config_path)
        set_config(_config)
        configure_logging(
            log_level or _config.log_level,
            log_dir=_config.get_log_dir(),
            verbose=verbose,
        )
        _logger = get_logger("cli")

    return _config, _logger


def load_cli_config(
    config_path: Path | None = None,
    log_level: str | None = None,
    verbose: bool = False,
) -> tuple[Config, Any]:
    """Like get_config_and_logger, but a bad config exits 1 with a readable error.

    Raises:
        typer.Exit: 1 when the configuration cannot be loaded
    """
    try:
        return get_config_and_logger(config_path, log_level, verbose=verbose)
    except ScriptureSyncError as e:
        report_fatal(e, get_logger("cli"))
        raise typer.Exit(code=1) from e


def reset_cli_state() -> None:
    """Forget the cached config and logger (used by tests)."""
    global _config, _logger
    _config = None
    _logger = None


def build_engine(
    config: Config,
    dry_run: bool = False,
    control: RunControl | None = None,
    with_source: bool = True,
) -> SyncEngine:
    """Wire the MongoDB store, rate-limited HTTP source and engine from config."""
    store = MongoCorpusStore(
        config.mongodb_uri,
        database=config.mongodb_database,
        server_selection_timeout_ms=config.mongodb_server_selection_timeout_ms,
    )
    source = None
    if with_source:
        source = BibleApiSource(
            config.source_base_url,
            rate_limiter=FixedIntervalRateLimiter(config.rate_limit.interval),
            retry_config=config.retry,
            timeout=config.source_timeout,
            user_agent=config.source_user_agent,
        )
    return SyncEngine(config, store, source, control=control, dry_run=dry_run)


def report_fatal(error: ScriptureSyncError, logger: Any) -> None:
    """Print a fatal error with its suggestion and log it."""
    details = error.to_dict()
    logger.error("run_failed", error=details.pop("message"), **details)
    console.print(f"\n[bold red]Error:[/bold red] {error.message}")
    if error.suggestion:
        console.print(f"[dim]{error.suggestion}[/dim]")


__all__ = [
    "EXIT_INTERRUPTED",
    "build_engine",
    "console",
    "get_config_and_logger",
    "load_cli_config",
    "report_fatal",
    "reset_cli_state",
]
