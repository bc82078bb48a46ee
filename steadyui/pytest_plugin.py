"""
================================================================================
Pytest Plugin
================================================================================

Wires the synchronization core into pytest.

Key Features:
- Whole-test retry: a failing test is re-run (setup, call, teardown) while its
  RetryTracker says RETRY; only the final attempt is reported
- Fresh session per attempt (function-scoped SessionManager, released at teardown)
- Per-invocation attempt counter, never shared between tests
- `retry` marker to override the configured policy per test, validated at collection
- Best-effort screenshot of the live session attached when a test call fails
- Command-line overrides for browser, headed mode and retry budget

Fixtures:
    steadyui_config    ConfigLoader instance
    failure_reporter   Reporter receiving retry and poll-timeout events
    invocation         InvocationContext of the running attempt
    session_config     SessionConfig from configuration and options
    session_manager    SessionManager owned by the running attempt
    session            Live SessionHandle
    waiter             Waiter bound to the session and invocation

================================================================================
"""

from __future__ import annotations

from dataclasses import replace
from typing import Generator, List, Optional, Sequence, Tuple

import pytest
from _pytest.runner import runtestprotocol
from loguru import logger

from steadyui.common.config_loader import ConfigLoader, ConfigurationError
from steadyui.common.log_config import init_logger
from steadyui.framework.browser_backend import ENGINES, launch_playwright_backend
from steadyui.framework.invocation import InvocationContext
from steadyui.framework.poll_engine import PollPolicy
from steadyui.framework.retry_policy import Failure, RetryDecision, RetryPolicy, RetryTracker
from steadyui.framework.session import SessionConfig, SessionHandle
from steadyui.framework.session_manager import BackendFactory, SessionManager
from steadyui.framework.waits import Waiter
from steadyui.report_tools.failure_reporter import FailureReporter, attach_png, reporter_from_config


RETRY_POLICY_KEY = pytest.StashKey[RetryPolicy]()
REPORTER_KEY = pytest.StashKey[FailureReporter]()
RETRIED_KEY = pytest.StashKey[List[Tuple[str, int, str]]]()
TRACKER_KEY = pytest.StashKey[RetryTracker]()
FAILURE_KEY = pytest.StashKey[Optional[Failure]]()

RETRY_SECTION = "steadyui retry"


# ================================================================================
# Pytest Configuration
# ================================================================================

def pytest_addoption(parser):
    """Register command-line overrides for the session and retry settings."""
    group = parser.getgroup("steadyui", "UI synchronization core")
    group.addoption(
        "--ui-browser",
        action="store",
        default=None,
        choices=sorted(ENGINES),
        help="Browser engine for UI sessions (overrides browser.engine)",
    )
    group.addoption(
        "--ui-headed",
        action="store_true",
        default=False,
        help="Run the browser with a visible window",
    )
    group.addoption(
        "--ui-retries",
        action="store",
        type=int,
        default=None,
        help="Extra runs for a failing test (overrides retry.max_retry_count)",
    )
    group.addoption(
        "--ui-no-retry",
        action="store_true",
        default=False,
        help="Disable whole-test retry",
    )


def pytest_configure(config):
    """Register the retry marker and build the run-wide retry policy."""
    config.addinivalue_line(
        "markers",
        "retry(max_attempts=None, enabled=True): override the whole-test retry policy",
    )
    init_logger()

    loader = ConfigLoader()
    policy = RetryPolicy.from_config(loader)
    retries = config.getoption("ui_retries")
    if retries is not None:
        if retries < 0:
            raise pytest.UsageError("--ui-retries must not be negative")
        policy = replace(policy, max_attempts=retries + 1)
    if config.getoption("ui_no_retry"):
        policy = replace(policy, enabled=False)

    config.stash[RETRY_POLICY_KEY] = policy
    config.stash[REPORTER_KEY] = reporter_from_config(loader)
    config.stash[RETRIED_KEY] = []


def _policy_for(item: pytest.Item) -> RetryPolicy:
    """Run-wide policy, overridden by the closest `retry` marker."""
    policy = item.config.stash[RETRY_POLICY_KEY]
    marker = item.get_closest_marker("retry")
    if marker is None:
        return policy
    max_attempts = marker.kwargs.get(
        "max_attempts", marker.args[0] if marker.args else policy.max_attempts
    )
    return RetryPolicy(
        enabled=marker.kwargs.get("enabled", policy.enabled),
        max_attempts=int(max_attempts),
    )


def pytest_collection_modifyitems(config, items):
    """Reject malformed `retry` markers before any test runs."""
    for item in items:
        if item.get_closest_marker("retry") is None:
            continue
        try:
            _policy_for(item)
        except (ConfigurationError, TypeError, ValueError) as e:
            raise pytest.UsageError(f"{item.nodeid}: invalid retry marker: {e}") from e


# ================================================================================
# Test Lifecycle Hooks
# ================================================================================

@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """
    Remember the exception of a failed setup or call phase for classification,
    and attach a screenshot of the live session when the call phase failed.
    """
    outcome = yield
    report = outcome.get_result()

    if report.failed and report.when in ("setup", "call") and call.excinfo is not None:
        item.stash[FAILURE_KEY] = Failure.from_exception(call.excinfo.value)

    if report.when == "call" and report.failed:
        _attach_failure_screenshot(item)


def _attach_failure_screenshot(item: pytest.Item) -> None:
    manager = getattr(item, "funcargs", {}).get("session_manager")
    if manager is None or manager.handle is None:
        return
    try:
        attach_png(manager.handle.screenshot(), name="failure_screenshot")
    except Exception as e:
        # Log but don't fail if screenshot capture fails
        logger.warning(f"Failed to capture screenshot on failure: {e}")


def _retryable_failure(reports: Sequence[pytest.TestReport]) -> Optional[pytest.TestReport]:
    for report in reports:
        if report.failed and report.when in ("setup", "call"):
            return report
    return None


@pytest.hookimpl(tryfirst=True)
def pytest_runtest_protocol(item, nextitem):
    """
    Run the item, re-running it as a whole while the retry tracker allows.

    Each attempt goes through setup, call and teardown, so function-scoped
    fixtures (and the session) are rebuilt. Reports of discarded attempts are
    not logged; the final attempt's reports are.
    """
    tracker = RetryTracker(
        _policy_for(item),
        item.nodeid,
        item.config.stash[REPORTER_KEY],
    )
    item.stash[TRACKER_KEY] = tracker

    item.ihook.pytest_runtest_logstart(nodeid=item.nodeid, location=item.location)
    while True:
        item.stash[FAILURE_KEY] = None
        reports = runtestprotocol(item, nextitem=nextitem, log=False)

        failed_report = _retryable_failure(reports)
        if failed_report is None:
            break

        failure = item.stash.get(FAILURE_KEY, None) or Failure(message=failed_report.longreprtext[-200:])
        if tracker.on_failure(failure) is RetryDecision.STOP:
            failed_report.sections.append((RETRY_SECTION, tracker.summary()))
            break

    for report in reports:
        item.ihook.pytest_runtest_logreport(report=report)
    item.ihook.pytest_runtest_logfinish(nodeid=item.nodeid, location=item.location)

    if tracker.retried:
        status = "failed" if failed_report is not None else "passed"
        item.config.stash[RETRIED_KEY].append((item.nodeid, tracker.attempt, status))
        item.user_properties.append(("attempts", tracker.attempt))
    return True


def pytest_terminal_summary(terminalreporter, exitstatus, config):
    """List the tests that needed more than one attempt."""
    retried = config.stash.get(RETRIED_KEY, [])
    if not retried:
        return
    terminalreporter.section("steadyui retries")
    for nodeid, attempts, status in retried:
        terminalreporter.write_line(f"{nodeid}: {status} after {attempts} attempt(s)")


# ================================================================================
# Fixtures
# ================================================================================

@pytest.fixture(scope="session")
def steadyui_config() -> ConfigLoader:
    """Process-wide configuration loader."""
    return ConfigLoader()


@pytest.fixture(scope="session")
def failure_reporter(pytestconfig) -> FailureReporter:
    return pytestconfig.stash[REPORTER_KEY]


@pytest.fixture
def invocation(request, failure_reporter: FailureReporter) -> InvocationContext:
    """
    Context of the running attempt.

    Falls back to a single-attempt context when the retry protocol did not
    run (e.g. another plugin owns `pytest_runtest_protocol`).
    """
    tracker = request.node.stash.get(TRACKER_KEY, None)
    if tracker is None:
        return InvocationContext(request.node.nodeid, reporter=failure_reporter)
    return tracker.context


@pytest.fixture
def session_config(pytestconfig, steadyui_config: ConfigLoader) -> SessionConfig:
    """Session parameters from configuration, with command-line overrides."""
    config = SessionConfig.from_config(steadyui_config)
    browser = pytestconfig.getoption("ui_browser")
    if browser:
        config = replace(config, engine=browser)
    if pytestconfig.getoption("ui_headed"):
        config = replace(config, headless=False)
    return config


@pytest.fixture
def session_backend_factory() -> BackendFactory:
    """Backend factory used by `session_manager`. Override to plug in another backend."""
    return launch_playwright_backend


@pytest.fixture
def session_manager(
    session_config: SessionConfig,
    session_backend_factory: BackendFactory,
) -> Generator[SessionManager, None, None]:
    """
    Session manager owned by the running attempt.

    The session is released at teardown, so a retried attempt always starts
    from a freshly constructed session.
    """
    manager = SessionManager(session_config, backend_factory=session_backend_factory)
    yield manager
    manager.release()


@pytest.fixture
def session(session_manager: SessionManager) -> SessionHandle:
    return session_manager.get_or_create()


@pytest.fixture
def waiter(
    session: SessionHandle,
    invocation: InvocationContext,
    steadyui_config: ConfigLoader,
) -> Waiter:
    return Waiter(session, PollPolicy.from_config(steadyui_config), invocation)
