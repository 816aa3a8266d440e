"""Tests for logging configuration."""

import json
import logging

import pytest
import structlog

from scripture_sync.utils.logging import (
    ConsoleNoiseFilterProcessor,
    HighVolumeEventPolicy,
    UserFacingConsoleFilter,
    configure_logging,
    get_logger,
)


@pytest.fixture
def log_dir(tmp_path):
    """Configure file logging into a temp dir and restore console-only after."""
    path = tmp_path / "logs"
    yield path
    configure_logging(enable_file_logging=False)


def _flush():
    for handler in logging.getLogger().handlers:
        handler.flush()


def _json_lines(path):
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines() if line.strip()]


class TestFileLogging:
    """Rotating JSON log files."""

    def test_log_files_created(self, log_dir):
        configure_logging(log_level="DEBUG", log_dir=log_dir)

        logger = get_logger("test")
        logger.info("test_message", test_field="test_value")
        logger.error("test_error", error_type="TestError")
        _flush()

        assert (log_dir / "scripture-sync.log").exists()
        assert (log_dir / "errors.log").exists()

    def test_main_log_is_json_with_bound_fields(self, log_dir):
        configure_logging(log_level="INFO", log_dir=log_dir)

        get_logger("scripture_sync.sync.reconciler").info(
            "cell_completed", book="Jude", chapter=1, added=5
        )
        _flush()

        entries = _json_lines(log_dir / "scripture-sync.log")
        entry = next(e for e in entries if e.get("event") == "cell_completed")
        assert entry["book"] == "Jude"
        assert entry["added"] == 5
        assert entry["level"] == "info"
        assert entry["logger"] == "scripture_sync.sync.reconciler"
        assert "timestamp" in entry

    def test_error_log_separation(self, log_dir):
        configure_logging(log_level="INFO", log_dir=log_dir)

        logger = get_logger("test")
        logger.info("info_message")
        logger.warning("warning_message")
        logger.error("error_message", error_code="STO_WRITE_FAILED")
        _flush()

        content = (log_dir / "errors.log").read_text(encoding="utf-8")
        entries = _json_lines(log_dir / "errors.log")
        assert [e["event"] for e in entries if e["event"].endswith("_message")] == [
            "error_message"
        ]
        assert entries[-1]["error_code"] == "STO_WRITE_FAILED"
        assert "info_message" not in content

    def test_debug_reaches_file_even_at_info_console_level(self, log_dir):
        configure_logging(log_level="INFO", log_dir=log_dir)

        get_logger("test").debug("verse_inserted", verse=3)
        _flush()

        events = [e["event"] for e in _json_lines(log_dir / "scripture-sync.log")]
        assert "verse_inserted" in events

    def test_reconfigure_replaces_handlers(self, log_dir):
        configure_logging(log_dir=log_dir)
        configure_logging(log_dir=log_dir)

        file_handlers = [
            h
            for h in logging.getLogger().handlers
            if isinstance(h, logging.FileHandler)
        ]
        assert len(file_handlers) == 2


class TestConsoleNoiseFilter:
    """Rate limiting of high-volume events."""

    def test_drops_events_beyond_window(self):
        now = [0.0]
        processor = ConsoleNoiseFilterProcessor(
            high_volume_policies={"verse_inserted": HighVolumeEventPolicy(2, 10.0)},
            time_func=lambda: now[0],
        )

        processor(None, "info", {"event": "verse_inserted"})
        processor(None, "info", {"event": "verse_inserted"})
        with pytest.raises(structlog.DropEvent):
            processor(None, "info", {"event": "verse_inserted"})

        now[0] = 11.0
        assert processor(None, "info", {"event": "verse_inserted"})

    def test_other_events_pass(self):
        processor = ConsoleNoiseFilterProcessor(
            high_volume_policies={"verse_inserted": HighVolumeEventPolicy(0, 10.0)}
        )

        event = {"event": "run_summary"}
        assert processor(None, "info", event) is event

    def test_filter_reads_structlog_event_dict(self):
        noise = ConsoleNoiseFilterProcessor(
            high_volume_policies={"fetch_retry": HighVolumeEventPolicy(1, 30.0)},
            time_func=lambda: 0.0,
        )

        def record():
            return logging.LogRecord(
                "x", logging.INFO, __file__, 1, {"event": "fetch_retry"}, None, None
            )

        assert noise.filter(record())
        assert not noise.filter(record())


class TestUserFacingConsoleFilter:
    """Terminal shows only user-facing events unless verbose."""

    @staticmethod
    def _record(level, msg):
        return logging.LogRecord("x", level, __file__, 1, msg, None, None)

    def test_user_facing_event_passes(self):
        assert UserFacingConsoleFilter().filter(self._record(logging.INFO, "run_summary"))

    def test_internal_event_hidden(self):
        assert not UserFacingConsoleFilter().filter(
            self._record(logging.INFO, "cell_completed")
        )

    def test_errors_always_pass(self):
        assert UserFacingConsoleFilter().filter(
            self._record(logging.ERROR, "cell_failed")
        )

    def test_verbose_passes_everything(self):
        assert UserFacingConsoleFilter(verbose=True).filter(
            self._record(logging.DEBUG, "cell_completed")
        )

    def test_structlog_record_matches_on_event_name_only(self):
        hidden = self._record(
            logging.INFO, {"event": "cell_completed", "note": "before run_summary"}
        )
        shown = self._record(logging.INFO, {"event": "run_summary", "errors": 0})

        console_filter = UserFacingConsoleFilter()

        assert not console_filter.filter(hidden)
        assert console_filter.filter(shown)

    def test_plain_message_containing_event_name_is_hidden(self):
        assert not UserFacingConsoleFilter().filter(
            self._record(logging.INFO, "about to log run_summary")
        )
