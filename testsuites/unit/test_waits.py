import pytest

from steadyui.framework.errors import (
    ElementNotFoundError,
    ErrorKind,
    PollTimeoutError,
    SessionClosedError,
)
from steadyui.framework.invocation import InvocationContext
from steadyui.framework.poll_engine import PollPolicy
from steadyui.framework.waits import Waiter
from steadyui.report_tools.failure_reporter import FailureReporter


@pytest.fixture
def waiter(fake_session, fake_clock):
    return Waiter(fake_session, PollPolicy(timeout=2, interval=0.5))


class TestWaiter:
    def test_for_visible_returns_state(self, waiter, backend):
        backend.add("#login")
        assert waiter.for_visible("#login").visible

    def test_per_call_timeout_overrides_default(self, waiter, fake_clock):
        with pytest.raises(PollTimeoutError):
            waiter.for_url_contains("/never", timeout=5)
        assert 5 <= fake_clock.now < 5.5

    def test_default_policy_timeout_applies(self, waiter, fake_clock):
        with pytest.raises(PollTimeoutError):
            waiter.for_title("Never")
        assert 2 <= fake_clock.now < 2.5

    def test_for_presence_waits_for_late_element(self, waiter, backend, fake_clock):
        def attach_later(seconds):
            fake_clock.now += seconds
            if fake_clock.now >= 1.0:
                backend.add(".row", visible=False)

        fake_clock.sleep = attach_later

        state = waiter.for_presence(".row")

        assert state.visible is False
        assert fake_clock.now == 1.0

    def test_for_visible_missing_element_fails_fast(self, waiter, fake_clock):
        with pytest.raises(ElementNotFoundError):
            waiter.for_visible("#missing")
        assert fake_clock.now == 0

    def test_fluent_visible_tolerates_missing_element(self, waiter, backend, fake_clock):
        def attach_later(seconds):
            fake_clock.now += seconds
            if fake_clock.now >= 0.5:
                backend.add("#late")

        fake_clock.sleep = attach_later

        assert waiter.fluent_visible("#late", timeout=3, interval=0.25).visible
        assert fake_clock.now == 0.5

    def test_for_invisibility_of_missing_element(self, waiter, fake_clock):
        assert waiter.for_invisibility("#spinner") is True
        assert fake_clock.now == 0

    def test_for_text_and_attribute(self, waiter, backend):
        backend.add("#status", text="Order placed", **{"data-state": "done"})

        assert waiter.for_text("#status", "placed") == "Order placed"
        assert waiter.for_attribute("#status", "data-state", "done") == "done"

    def test_for_url(self, waiter, backend):
        backend.url = "http://localhost:3000/home"
        assert waiter.for_url("http://localhost:3000/home") == "http://localhost:3000/home"

    def test_click_waits_then_clicks(self, waiter, backend):
        backend.add("#submit")

        waiter.click("#submit")

        assert backend.actions == [("click", "#submit")]

    def test_click_on_disabled_element_times_out_without_clicking(self, waiter, backend):
        backend.add("#submit", enabled=False)

        with pytest.raises(PollTimeoutError):
            waiter.click("#submit")
        assert backend.actions == []

    def test_fill_passes_real_value(self, waiter, backend):
        backend.add("#password")

        waiter.fill("#password", "s3cret")

        assert backend.actions == [("fill", "#password", "s3cret")]

    def test_navigate_waits_for_page_ready(self, waiter, backend, fake_clock):
        backend.readiness = "loading"

        def finish_loading(seconds):
            fake_clock.now += seconds
            backend.readiness = "complete"

        fake_clock.sleep = finish_loading

        waiter.navigate("http://localhost:3000/login")

        assert backend.url == "http://localhost:3000/login"
        assert fake_clock.now == 0.5

    def test_navigate_without_waiting(self, waiter, backend):
        backend.readiness = "loading"
        waiter.navigate("http://localhost:3000/login", wait_ready=False)
        assert backend.actions == [("navigate", "http://localhost:3000/login")]

    def test_is_visible_never_raises_for_missing_element(self, waiter, fake_clock):
        assert waiter.is_visible("#missing", timeout=1) is False
        assert 1 <= fake_clock.now < 1.5

    def test_is_visible_true(self, waiter, backend):
        backend.add("#banner")
        assert waiter.is_visible("#banner") is True

    def test_timeouts_reported_through_context(self, fake_session, fake_clock):
        reporter = FailureReporter()
        context = InvocationContext("test_checkout", reporter=reporter)
        waiter = Waiter(fake_session, PollPolicy(timeout=1, interval=0.5), context)

        with pytest.raises(PollTimeoutError):
            waiter.for_url_contains("/checkout")

        assert [e.error_kind for e in reporter.events_for("test_checkout")] == [
            ErrorKind.TIMEOUT.value
        ]

    def test_closed_session_is_never_polled(self, waiter, fake_session, fake_clock):
        fake_session._close()

        with pytest.raises(SessionClosedError):
            waiter.for_url_contains("/dashboard")
        assert fake_clock.sleeps == []
