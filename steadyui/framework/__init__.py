"""
================================================================================
Synchronization Framework
================================================================================

Polling, conditions, session lifecycle and retry policy for UI automation.

Components:
    - conditions: Builders of reusable predicates over session state
    - poll_engine: Bounded-time polling loop and poll policies
    - waits: Named waits bound to a session (Waiter)
    - session_manager: Lifecycle of the single shared session
    - browser_backend: Playwright-driven session backend
    - retry_policy: Whole-invocation retry decisions

Author: Automation Team
License: MIT
================================================================================
"""

from . import conditions
from .conditions import Condition
from .errors import (
    ConfigurationError,
    ElementNotFoundError,
    ElementNotInteractableError,
    ElementQueryError,
    ErrorKind,
    PollTimeoutError,
    SessionClosedError,
    SessionInitError,
    StaleElementError,
    SteadyUIError,
)
from .invocation import InvocationContext
from .outcome import Outcome, OutcomeStatus
from .poll_engine import POLL_SCENARIOS, PollPolicy, get_poll_policy, poll
from .retry_policy import Failure, RetryDecision, RetryPolicy, RetryTracker
from .session import ElementState, SessionConfig, SessionHandle
from .session_manager import SessionManager, SessionState
from .waits import Waiter

__all__ = [
    "conditions",
    "Condition",
    "ConfigurationError",
    "ElementNotFoundError",
    "ElementNotInteractableError",
    "ElementQueryError",
    "ErrorKind",
    "PollTimeoutError",
    "SessionClosedError",
    "SessionInitError",
    "StaleElementError",
    "SteadyUIError",
    "InvocationContext",
    "Outcome",
    "OutcomeStatus",
    "POLL_SCENARIOS",
    "PollPolicy",
    "get_poll_policy",
    "poll",
    "Failure",
    "RetryDecision",
    "RetryPolicy",
    "RetryTracker",
    "ElementState",
    "SessionConfig",
    "SessionHandle",
    "SessionManager",
    "SessionState",
    "Waiter",
]
