from unittest.mock import patch

from steadyui.report_tools import failure_reporter
from steadyui.report_tools.failure_reporter import (
    DEFAULT_MAX_EVENTS,
    AllureFailureReporter,
    FailureEvent,
    FailureReporter,
    reporter_from_config,
)


class DummyConfig:
    def __init__(self, allure_enabled):
        self.allure_enabled = allure_enabled

    def get(self, key, default=None):
        return self.allure_enabled if key == "reporting.allure" else default


def make_event(**overrides):
    fields = dict(invocation_id="test_a", error_kind="timeout", attempt=1, max_attempts=2)
    fields.update(overrides)
    return FailureEvent(**fields)


def test_event_label_prefers_kind_then_type():
    assert make_event().label == "timeout"
    assert make_event(error_kind=None, error_type="AssertionError").label == "AssertionError"
    assert make_event(error_kind=None).label == "failure"


def test_event_to_dict_contains_required_fields():
    data = make_event(terminal=True, message="boom").to_dict()

    for key in ("invocation_id", "error_kind", "attempt", "max_attempts", "terminal", "timestamp"):
        assert key in data
    assert data["terminal"] is True


def test_reporter_keeps_events_per_invocation():
    reporter = FailureReporter()
    reporter.report(make_event())
    reporter.report(make_event(invocation_id="test_b"))
    reporter.report(make_event(attempt=2, terminal=True))

    assert [e.attempt for e in reporter.events_for("test_a")] == [1, 2]

    reporter.clear()
    assert list(reporter.events) == []


def test_reporter_keeps_only_most_recent_events():
    reporter = FailureReporter(max_events=3)

    for attempt in range(1, 6):
        reporter.report(make_event(attempt=attempt))

    assert [e.attempt for e in reporter.events] == [3, 4, 5]
    assert [e.attempt for e in reporter.events_for("test_a")] == [3, 4, 5]


def test_allure_reporter_attaches_each_event():
    reporter = AllureFailureReporter()

    with patch.object(failure_reporter, "attach_json") as attach, \
            patch.object(failure_reporter, "attach_text") as attach_text:
        reporter.report(make_event())
        reporter.report(make_event(attempt=2, terminal=True, message="Timeout waiting for #login"))

    names = [call.kwargs["name"] for call in attach.call_args_list]
    assert names == ["Failure on attempt 1: timeout", "Final failure: timeout"]

    attach_text.assert_called_once()
    summary = attach_text.call_args.args[0]
    assert "failed after 2/2 attempt(s) (last error: timeout)" in summary
    assert "Timeout waiting for #login" in summary


def test_single_attempt_failure_has_no_retry_summary():
    reporter = AllureFailureReporter()

    with patch.object(failure_reporter, "attach_json"), \
            patch.object(failure_reporter, "attach_text") as attach_text:
        reporter.report(make_event(max_attempts=1, terminal=True))

    attach_text.assert_not_called()


def test_reporter_selected_from_config():
    assert isinstance(reporter_from_config(DummyConfig(True)), AllureFailureReporter)
    assert type(reporter_from_config(DummyConfig(False))) is FailureReporter


def test_reporter_event_window_defaults_when_not_configured():
    assert reporter_from_config(DummyConfig(False)).events.maxlen == DEFAULT_MAX_EVENTS


def test_attach_png_uses_png_attachment_type():
    with patch.object(failure_reporter.allure, "attach") as attach:
        failure_reporter.attach_png(b"\x89PNG", name="failure_screenshot")

    attach.assert_called_once_with(
        b"\x89PNG",
        name="failure_screenshot",
        attachment_type=failure_reporter.allure.attachment_type.PNG,
    )
