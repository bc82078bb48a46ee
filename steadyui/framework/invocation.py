"""
Invocation context threaded through one test invocation.

Holds the identity and attempt position of the running invocation so that
components without their own view of the retry layer (the poll engine) can
emit failure events that name the test and its attempt budget.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from steadyui.report_tools.failure_reporter import FailureEvent, FailureReporter


@dataclass
class InvocationContext:
    """
    Attributes:
        invocation_id: Test identifier (pytest node id)
        attempt: Current attempt number, 1-based
        max_attempts: Attempt budget for this invocation
        reporter: Sink for failure events
    """
    invocation_id: str
    attempt: int = 1
    max_attempts: int = 1
    reporter: FailureReporter = field(default_factory=FailureReporter)

    def emit(
        self,
        error_kind: Optional[str],
        message: str = "",
        terminal: bool = False,
        error_type: Optional[str] = None,
    ) -> FailureEvent:
        event = FailureEvent(
            invocation_id=self.invocation_id,
            error_kind=error_kind,
            attempt=self.attempt,
            max_attempts=self.max_attempts,
            terminal=terminal,
            message=message,
            error_type=error_type,
        )
        self.reporter.report(event)
        return event


__all__ = ["InvocationContext"]
