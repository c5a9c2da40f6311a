"""Tests for the per-request error reporter"""
import logging

from marketplace.observability import ErrorReporter


def test_report_records_and_logs(caplog):
    reporter = ErrorReporter()
    caplog.set_level(logging.WARNING)

    entry = reporter.report("expire-orders", "get_stats", RuntimeError("timeout"), context={"attempt": 1})

    assert reporter.has_errors
    assert len(reporter) == 1
    assert entry.message == "timeout"
    assert entry.context == {"attempt": 1}
    assert entry.fatal is False
    assert "[expire-orders] get_stats: timeout" in caplog.text


def test_fatal_reports_log_at_error(caplog):
    reporter = ErrorReporter()
    caplog.set_level(logging.WARNING)

    reporter.report("setup-cron", "upsert_jobs", RuntimeError("denied"), fatal=True)

    assert caplog.records[-1].levelno == logging.ERROR


def test_buffer_is_bounded():
    reporter = ErrorReporter(max_reports=3)

    for i in range(5):
        reporter.report("c", f"a{i}", ValueError(str(i)))

    assert [r.action for r in reporter.get_reports()] == ["a2", "a3", "a4"]


def test_get_by_component_and_clear():
    reporter = ErrorReporter()
    reporter.report("expire-orders", "x", ValueError("1"))
    reporter.report("setup-cron", "y", ValueError("2"))

    assert [r.action for r in reporter.get_by_component("setup-cron")] == ["y"]

    reporter.clear()
    assert not reporter.has_errors


def test_reporters_are_independent():
    first, second = ErrorReporter(), ErrorReporter()

    first.report("c", "a", ValueError("x"))

    assert len(first) == 1
    assert len(second) == 0


def test_control_characters_escaped_in_log(caplog):
    caplog.set_level(logging.WARNING)

    ErrorReporter().report("c", "a", ValueError("line1\nFAKE - ERROR - injected"))

    assert "line1\\nFAKE" in caplog.text
