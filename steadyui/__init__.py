"""
================================================================================
steadyui
================================================================================

Synchronization and session-lifecycle core for UI acceptance tests that drive
a slow, flaky remote browser.

Modules:
    - framework: poll engine, condition library, session manager, retry policy
    - common: configuration loading and logging setup
    - report_tools: failure events and reporters
    - pytest_plugin: fixtures and whole-test retry for pytest

Example:
    from steadyui import SessionManager, Waiter

    with SessionManager() as manager:
        waiter = Waiter(manager.get_or_create())
        waiter.navigate("http://localhost:3000/login")
        waiter.click("[data-testid='btn-login']")

================================================================================
"""

__version__ = "1.0.0"

from .framework import (
    Condition,
    ErrorKind,
    PollPolicy,
    PollTimeoutError,
    RetryPolicy,
    SessionManager,
    Waiter,
    conditions,
    poll,
)

__all__ = [
    "Condition",
    "ErrorKind",
    "PollPolicy",
    "PollTimeoutError",
    "RetryPolicy",
    "SessionManager",
    "Waiter",
    "conditions",
    "poll",
]
