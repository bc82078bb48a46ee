import pytest

from steadyui.common.config_loader import ConfigurationError
from steadyui.framework.errors import (
    ElementNotFoundError,
    ErrorKind,
    PollTimeoutError,
    SessionClosedError,
)
from steadyui.framework.retry_policy import Failure, RetryDecision, RetryPolicy, RetryTracker
from steadyui.report_tools.failure_reporter import FailureReporter


class DummyConfig:
    def __init__(self, **values):
        self.values = values

    def get(self, key, default=None):
        return self.values.get(key, default)


class TestRetryPolicy:
    def test_retries_until_budget_is_spent(self):
        policy = RetryPolicy(enabled=True, max_attempts=3)
        failure = Failure(ErrorKind.TIMEOUT)

        decisions = [policy.decide(attempt, failure) for attempt in (1, 2, 3)]

        assert decisions == [RetryDecision.RETRY, RetryDecision.RETRY, RetryDecision.STOP]

    def test_disabled_policy_stops_on_first_failure(self):
        policy = RetryPolicy(enabled=False, max_attempts=5)

        assert policy.decide(1, Failure(ErrorKind.NOT_FOUND)) is RetryDecision.STOP
        assert policy.effective_attempts == 1

    def test_single_attempt_budget_never_retries(self):
        assert RetryPolicy(max_attempts=1).decide(1, Failure()) is RetryDecision.STOP

    def test_closed_session_is_never_retried(self):
        policy = RetryPolicy(max_attempts=3)
        assert policy.decide(1, Failure(ErrorKind.SESSION_CLOSED)) is RetryDecision.STOP

    def test_failures_without_kind_are_retried(self):
        policy = RetryPolicy(max_attempts=2)
        failure = Failure.from_exception(AssertionError("expected 3 rows"))

        assert failure.error_kind is None
        assert policy.decide(1, failure) is RetryDecision.RETRY

    def test_attempt_numbers_start_at_one(self):
        with pytest.raises(ValueError):
            RetryPolicy().decide(0, Failure())

    def test_budget_must_allow_one_attempt(self):
        with pytest.raises(ConfigurationError):
            RetryPolicy(max_attempts=0)

    @pytest.mark.parametrize("count, attempts", [(0, 1), (1, 2), (3, 4)])
    def test_from_config_counts_extra_runs(self, count, attempts):
        policy = RetryPolicy.from_config(DummyConfig(**{"retry.max_retry_count": count}))
        assert policy.max_attempts == attempts

    def test_from_config_rejects_negative_count(self):
        with pytest.raises(ConfigurationError):
            RetryPolicy.from_config(DummyConfig(**{"retry.max_retry_count": -1}))

    def test_from_config_reads_enabled(self):
        policy = RetryPolicy.from_config(DummyConfig(**{"retry.enabled": False}))
        assert policy.enabled is False


class TestFailure:
    def test_classifies_framework_errors(self):
        failure = Failure.from_exception(ElementNotFoundError("#login not found\nmore"))

        assert failure.error_kind is ErrorKind.NOT_FOUND
        assert failure.message == "#login not found"
        assert failure.error_type == "ElementNotFoundError"
        assert failure.label == "not_found"

    def test_label_falls_back_to_type_name(self):
        assert Failure.from_exception(KeyError("x")).label == "KeyError"
        assert Failure().label == "failure"


class TestRetryTracker:
    def test_starts_at_attempt_one(self):
        tracker = RetryTracker(RetryPolicy(max_attempts=3), "test_a")

        assert tracker.attempt == 1
        assert tracker.context.max_attempts == 3
        assert not tracker.retried

    def test_emits_one_event_per_decision(self):
        reporter = FailureReporter()
        tracker = RetryTracker(RetryPolicy(max_attempts=2), "test_login", reporter)
        failure = Failure.from_exception(PollTimeoutError("Timeout waiting for #login"))

        assert tracker.on_failure(failure) is RetryDecision.RETRY
        assert tracker.attempt == 2
        assert tracker.on_failure(failure) is RetryDecision.STOP
        assert tracker.attempt == 2

        events = reporter.events_for("test_login")
        assert [(e.attempt, e.max_attempts, e.terminal) for e in events] == [
            (1, 2, False),
            (2, 2, True),
        ]
        assert {e.error_kind for e in events} == {"timeout"}

    def test_summary_names_budget_and_last_error(self):
        tracker = RetryTracker(RetryPolicy(max_attempts=2), "test_login")
        tracker.on_failure(Failure(ErrorKind.STALE_ELEMENT))
        tracker.on_failure(Failure(ErrorKind.TIMEOUT))

        assert tracker.summary() == "failed after 2/2 attempt(s) (last error: timeout)"

    def test_closed_session_stops_immediately(self):
        reporter = FailureReporter()
        tracker = RetryTracker(RetryPolicy(max_attempts=3), "test_a", reporter)

        decision = tracker.on_failure(Failure.from_exception(SessionClosedError("closed")))

        assert decision is RetryDecision.STOP
        assert reporter.events[-1].terminal

    def test_trackers_do_not_share_counters(self):
        policy = RetryPolicy(max_attempts=3)
        first = RetryTracker(policy, "test_a")
        first.on_failure(Failure())
        first.on_failure(Failure())

        second = RetryTracker(policy, "test_b")

        assert first.attempt == 3
        assert second.attempt == 1
        assert second.on_failure(Failure()) is RetryDecision.RETRY
