"""
================================================================================
Retry Policy
================================================================================

Decides whether a failed test invocation is re-executed.

The policy itself is immutable configuration. The attempt counter lives in a
RetryTracker that is created fresh for every invocation and never shared
between test instances, sequential or parallel.

Configuration:
    retry.enabled          -> RetryPolicy.enabled
    retry.max_retry_count  -> RetryPolicy.max_attempts - 1

Usage:
    >>> policy = RetryPolicy(enabled=True, max_attempts=3)
    >>> tracker = RetryTracker(policy, "tests/test_login.py::test_login")
    >>> tracker.on_failure(Failure.from_exception(exc))
    <RetryDecision.RETRY: 'retry'>

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from loguru import logger

from steadyui.report_tools.failure_reporter import FailureReporter

from .errors import ConfigurationError, ErrorKind, kind_of
from .invocation import InvocationContext


class RetryDecision(str, Enum):
    RETRY = "retry"
    STOP = "stop"


@dataclass(frozen=True)
class Failure:
    """
    Classified failure of one attempt.

    Attributes:
        error_kind: ErrorKind of the failure, None for plain assertion or
            unexpected errors
        message: Short failure message
        error_type: Exception class name, if the failure came from one
    """
    error_kind: Optional[ErrorKind] = None
    message: str = ""
    error_type: Optional[str] = None

    @classmethod
    def from_exception(cls, exc: BaseException) -> "Failure":
        message = str(exc).strip().splitlines()[0] if str(exc).strip() else ""
        return cls(
            error_kind=kind_of(exc),
            message=message,
            error_type=type(exc).__name__,
        )

    @property
    def label(self) -> str:
        if self.error_kind is not None:
            return self.error_kind.value
        return self.error_type or "failure"


@dataclass(frozen=True)
class RetryPolicy:
    """
    Attempt-budgeted decision rule for whole-invocation re-execution.

    Attributes:
        enabled: When False, every failure stops the invocation
        max_attempts: Total attempts allowed, first run included (>= 1)
    """
    enabled: bool = True
    max_attempts: int = 2

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ConfigurationError(
                f"max_attempts must be at least 1, got {self.max_attempts}"
            )

    @property
    def effective_attempts(self) -> int:
        return self.max_attempts if self.enabled else 1

    def decide(self, attempt: int, failure: Failure) -> RetryDecision:
        """
        Decide whether the invocation runs again after failing `attempt`.

        Args:
            attempt: 1-based number of the attempt that just failed
            failure: Classified failure of that attempt

        Returns:
            RETRY while attempt < max_attempts, STOP otherwise. Disabled
            policies and closed-session contract violations always STOP.
        """
        if attempt < 1:
            raise ValueError(f"attempt numbers start at 1, got {attempt}")
        if not self.enabled:
            return RetryDecision.STOP
        if failure.error_kind is ErrorKind.SESSION_CLOSED:
            return RetryDecision.STOP
        if attempt < self.max_attempts:
            return RetryDecision.RETRY
        return RetryDecision.STOP

    @classmethod
    def from_config(cls, loader: Any) -> "RetryPolicy":
        """
        Build the policy from `retry.enabled` and `retry.max_retry_count`.

        `max_retry_count` counts extra runs, so the attempt budget is one more.
        """
        max_retry_count = int(loader.get("retry.max_retry_count", 1))
        if max_retry_count < 0:
            raise ConfigurationError(
                f"retry.max_retry_count must not be negative, got {max_retry_count}"
            )
        return cls(
            enabled=bool(loader.get("retry.enabled", True)),
            max_attempts=max_retry_count + 1,
        )


class RetryTracker:
    """
    Attempt counter for exactly one test invocation.

    Starts at attempt 1. Every failure is passed to the policy; a RETRY
    decision emits a diagnostic event and advances the counter, a STOP
    decision emits the terminal failure event.
    """

    def __init__(
        self,
        policy: RetryPolicy,
        invocation_id: str,
        reporter: Optional[FailureReporter] = None,
    ):
        self.policy = policy
        self.context = InvocationContext(
            invocation_id=invocation_id,
            attempt=1,
            max_attempts=policy.effective_attempts,
            reporter=reporter or FailureReporter(),
        )
        self.last_failure: Optional[Failure] = None
        self.decision: Optional[RetryDecision] = None

    @property
    def attempt(self) -> int:
        return self.context.attempt

    @property
    def retried(self) -> bool:
        return self.context.attempt > 1

    def on_failure(self, failure: Failure) -> RetryDecision:
        self.last_failure = failure
        decision = self.policy.decide(self.context.attempt, failure)
        self.decision = decision

        terminal = decision is RetryDecision.STOP
        self.context.emit(
            failure.error_kind.value if failure.error_kind else None,
            failure.message,
            terminal=terminal,
            error_type=failure.error_type,
        )

        if decision is RetryDecision.RETRY:
            logger.warning(
                f"🔁 Retrying {self.context.invocation_id} "
                f"(attempt {self.context.attempt + 1}/{self.context.max_attempts})"
            )
            self.context.attempt += 1
        return decision

    def summary(self) -> str:
        """One-line account of the exhausted budget and the last error."""
        label = self.last_failure.label if self.last_failure else "none"
        return (
            f"failed after {self.context.attempt}/{self.context.max_attempts} "
            f"attempt(s) (last error: {label})"
        )


__all__ = [
    "Failure",
    "RetryDecision",
    "RetryPolicy",
    "RetryTracker",
]
