"""Logging configuration using structlog for structured JSON logging."""

import logging
import sys
import threading
import time
from collections import deque
from collections.abc import Callable, Mapping, MutableMapping
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog
from structlog.dev import ConsoleRenderer
from structlog.processors import JSONRenderer
from structlog.stdlib import LoggerFactory, add_log_level, add_logger_name

_LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# Events shown on the terminal without --verbose (ERROR and above always pass)
USER_FACING_EVENTS: set[str] = {
    "reconcile_started",
    "overlay_started",
    "audit_completed",
    "coverage_completed",
    "run_summary",
    "run_interrupted",
    "run_failed",
    "config_warning",
}


def _get_level_no(level_name: str) -> int:
    """Get numeric log level from name."""
    return _LOG_LEVELS.get(level_name.upper(), logging.INFO)


@dataclass(slots=True)
class HighVolumeEventPolicy:
    """
    Rate-limiting policy for high-frequency log events.

    Attributes:
        max_occurrences: Maximum number of events allowed within the window.
        window_seconds: Sliding window size in seconds for counting events.
    """

    max_occurrences: int
    window_seconds: float


class ConsoleNoiseFilterProcessor:
    """
    Rate-limits specific high-volume events, as a structlog processor or a
    logging filter on the console handler.

    Per-verse events during an overlay run can number in the tens of thousands;
    the console keeps a handful per window while the file log keeps everything.
    """

    def __init__(
        self,
        high_volume_policies: Mapping[str, HighVolumeEventPolicy] | None = None,
        time_func: Callable[[], float] | None = None,
    ) -> None:
        self.high_volume_policies = dict(high_volume_policies or {})
        self._event_windows: dict[str, deque[float]] = {
            event: deque() for event in self.high_volume_policies
        }
        self._lock = threading.Lock()
        self._time_func = time_func or time.monotonic

    def __call__(
        self, logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
    ) -> MutableMapping[str, Any]:
        """Drop the event if its policy window is already full."""
        if not self._allow(event_dict.get("event", "")):
            raise structlog.DropEvent
        return event_dict

    def filter(self, record: logging.LogRecord) -> bool:
        """Apply the same policy as a handler filter.

        Records emitted through structlog carry their event dict in ``msg``.
        """
        if isinstance(record.msg, Mapping):
            return self._allow(record.msg.get("event", ""))
        return self._allow(record.getMessage())

    def _allow(self, message: Any) -> bool:
        policy = (
            self.high_volume_policies.get(message) if isinstance(message, str) else None
        )
        if not policy:
            return True
        now = self._time_func()
        with self._lock:
            window = self._event_windows.setdefault(message, deque())
            while window and now - window[0] > policy.window_seconds:
                window.popleft()
            if len(window) >= policy.max_occurrences:
                return False
            window.append(now)
        return True


class UserFacingConsoleFilter(logging.Filter):
    """Logging filter that only passes user-facing events to console.

    Allows:
    - Events in USER_FACING_EVENTS set
    - All ERROR and CRITICAL level messages
    - All messages when verbose mode is enabled
    """

    def __init__(self, verbose: bool = False) -> None:
        super().__init__()
        self.verbose = verbose

    def filter(self, record: logging.LogRecord) -> bool:
        if self.verbose:
            return True

        if record.levelno >= logging.ERROR:
            return True

        if isinstance(record.msg, Mapping):
            event = record.msg.get("event")
        else:
            event = record.getMessage()
        return event in USER_FACING_EVENTS


class UserFriendlyConsoleRenderer:
    """Renders user-facing logs in a clean, readable format for terminal output."""

    def __init__(self) -> None:
        self._fallback = ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.plain_traceback,
        )

    def __call__(
        self, logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
    ) -> str:
        event = event_dict.get("event", "")
        level = str(event_dict.get("level", "info")).upper()

        if event == "reconcile_started":
            translation = event_dict.get("translation", "")
            cells = event_dict.get("cells", 0)
            return f"Reconciling {cells} chapters ({translation})"

        if event == "overlay_started":
            translation = event_dict.get("translation", "")
            return f"Building {translation} overlay"

        if event == "run_summary":
            processed = event_dict.get("cells_processed", 0)
            added = event_dict.get("verses_added", 0)
            updated = event_dict.get("verses_updated", 0)
            skipped = event_dict.get("verses_skipped", 0)
            errors = event_dict.get("errors", 0)
            summary = f"Summary: {processed} cells processed"
            if added or updated or skipped:
                summary += f" | {added} added, {updated} updated, {skipped} skipped"
            if errors:
                summary += f" | {errors} errors"
            return summary

        if event == "run_interrupted":
            return "Run interrupted; already applied writes were kept"

        if event == "run_failed":
            error = event_dict.get("error", "Unknown error")
            return f"Run failed: {error}"

        if level == "ERROR":
            error = event_dict.get("error", event)
            return f"ERROR: {error}"

        return str(self._fallback(logger, method_name, event_dict))


DEFAULT_HIGH_VOLUME_EVENTS: dict[str, HighVolumeEventPolicy] = {
    "overlay_verse_skipped": HighVolumeEventPolicy(5, 10.0),
    "verse_inserted": HighVolumeEventPolicy(5, 10.0),
    "fetch_retry": HighVolumeEventPolicy(10, 30.0),
}

_configured = False
_handlers: list[logging.Handler] = []


def _base_processors() -> list[structlog.typing.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        add_log_level,
        add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def _setup_structlog() -> None:
    """Route structlog through standard library logging."""
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    structlog.configure(
        processors=[
            *_base_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging(
    log_level: str = "INFO",
    log_dir: Path | None = None,
    verbose: bool = False,
    enable_console_noise_filter: bool = True,
    enable_file_logging: bool = True,
) -> None:
    """Configure structlog logging with console and rotating file output.

    Args:
        log_level: Minimum console log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for log files (default: ./logs)
        verbose: If True, show all log messages on terminal
        enable_console_noise_filter: Toggle console-side rate limiting
        enable_file_logging: Write JSON log files in addition to the console
    """
    global _configured

    _setup_structlog()

    root_logger = logging.getLogger()
    for handler in _handlers:
        root_logger.removeHandler(handler)
        handler.close()
    _handlers.clear()

    level = _get_level_no(log_level)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)

    console_pre_chain = _base_processors()
    if enable_console_noise_filter:
        console_handler.addFilter(
            ConsoleNoiseFilterProcessor(high_volume_policies=DEFAULT_HIGH_VOLUME_EVENTS)
        )

    console_handler.addFilter(UserFacingConsoleFilter(verbose=verbose))

    if verbose:
        renderer: Any = ConsoleRenderer(
            colors=True, exception_formatter=structlog.dev.plain_traceback
        )
    else:
        renderer = UserFriendlyConsoleRenderer()

    console_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=console_pre_chain,
        )
    )
    root_logger.addHandler(console_handler)
    _handlers.append(console_handler)

    if enable_file_logging:
        if log_dir is None:
            log_dir = Path("./logs")
        log_dir.mkdir(exist_ok=True, parents=True)

        file_formatter = structlog.stdlib.ProcessorFormatter(
            processor=JSONRenderer(),
            foreign_pre_chain=_base_processors(),
        )

        # 50MB per file, 5 backups
        file_handler = RotatingFileHandler(
            filename=str(log_dir / "scripture-sync.log"),
            maxBytes=50 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(file_formatter)
        root_logger.addHandler(file_handler)
        _handlers.append(file_handler)

        error_handler = RotatingFileHandler(
            filename=str(log_dir / "errors.log"),
            maxBytes=10 * 1024 * 1024,
            backupCount=10,
            encoding="utf-8",
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(file_formatter)
        root_logger.addHandler(error_handler)
        _handlers.append(error_handler)

    _configured = True

    get_logger("scripture_sync.utils.logging").debug(
        "logging_configured",
        console_level=log_level,
        log_dir=str(log_dir) if log_dir else None,
        verbose=verbose,
        file_logging=enable_file_logging,
    )


def get_logger(name: str) -> Any:
    """Get a logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Structlog logger bound to the given name
    """
    if not _configured:
        # Console-only defaults until a command configures file output
        configure_logging(enable_file_logging=False)

    return structlog.get_logger(name)
