"""
================================================================================
Error Taxonomy
================================================================================

Error kinds and exception classes shared by the poll engine, the condition
library, the session manager and the retry policy.

Kinds:
    - not_found:        target does not exist in the live page
    - not_interactable: target exists but cannot be acted on
    - stale_element:    target detached between lookup and read
    - timeout:          poll budget exhausted
    - session_init:     session construction failed (fatal per attempt)
    - session_closed:   handle used after release (never retried)

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Optional, Type

from steadyui.common.config_loader import ConfigurationError

if TYPE_CHECKING:
    from .outcome import Outcome


class ErrorKind(str, Enum):
    """Classification tag distinguishing transient from fatal failures."""

    NOT_FOUND = "not_found"
    NOT_INTERACTABLE = "not_interactable"
    STALE_ELEMENT = "stale_element"
    TIMEOUT = "timeout"
    SESSION_INIT = "session_init"
    SESSION_CLOSED = "session_closed"


class SteadyUIError(Exception):
    """
    Base class for all failures raised by the synchronization core.

    Attributes:
        kind: ErrorKind tag for this failure
        outcome: Last condition outcome, when raised out of a poll
    """

    kind: Optional[ErrorKind] = None

    def __init__(self, message: str = "", outcome: Optional["Outcome"] = None):
        super().__init__(message)
        self.outcome = outcome


class ElementQueryError(SteadyUIError):
    """Base for element-level failures reported by a session query."""
    pass


class ElementNotFoundError(ElementQueryError):
    kind = ErrorKind.NOT_FOUND


class ElementNotInteractableError(ElementQueryError):
    kind = ErrorKind.NOT_INTERACTABLE


class StaleElementError(ElementQueryError):
    kind = ErrorKind.STALE_ELEMENT


class PollTimeoutError(SteadyUIError):
    """
    Raised when a poll exhausts its time budget.

    Attributes:
        attempts: Number of condition evaluations performed
        elapsed: Seconds spent polling
    """

    kind = ErrorKind.TIMEOUT

    def __init__(
        self,
        message: str = "",
        outcome: Optional["Outcome"] = None,
        attempts: int = 0,
        elapsed: float = 0.0,
    ):
        super().__init__(message, outcome)
        self.attempts = attempts
        self.elapsed = elapsed


class SessionInitError(SteadyUIError):
    """Raised when the automation session cannot be constructed."""

    kind = ErrorKind.SESSION_INIT


class SessionClosedError(SteadyUIError):
    """Raised when a released session handle is used."""

    kind = ErrorKind.SESSION_CLOSED


_ERRORS_BY_KIND: Dict[ErrorKind, Type[SteadyUIError]] = {
    ErrorKind.NOT_FOUND: ElementNotFoundError,
    ErrorKind.NOT_INTERACTABLE: ElementNotInteractableError,
    ErrorKind.STALE_ELEMENT: StaleElementError,
    ErrorKind.TIMEOUT: PollTimeoutError,
    ErrorKind.SESSION_INIT: SessionInitError,
    ErrorKind.SESSION_CLOSED: SessionClosedError,
}


def error_for_kind(kind: ErrorKind) -> Type[SteadyUIError]:
    """Return the exception class raised for a failed outcome of `kind`."""
    return _ERRORS_BY_KIND[kind]


def kind_of(exc: BaseException) -> Optional[ErrorKind]:
    """Return the ErrorKind carried by `exc`, or None for foreign exceptions."""
    kind: Any = getattr(exc, "kind", None)
    return kind if isinstance(kind, ErrorKind) else None


__all__ = [
    "ErrorKind",
    "ConfigurationError",
    "SteadyUIError",
    "ElementQueryError",
    "ElementNotFoundError",
    "ElementNotInteractableError",
    "StaleElementError",
    "PollTimeoutError",
    "SessionInitError",
    "SessionClosedError",
    "error_for_kind",
    "kind_of",
]
