"""
================================================================================
Failure Reporter
================================================================================

Structured failure events and the reporters that consume them.

Events are emitted by the retry tracker (one per retry decision, plus a
terminal event when the budget is spent) and by the poll engine on timeouts.
Reporters may attach diagnostic artifacts; the core never depends on that
happening.

Features:
    - FailureEvent value object ({invocation_id, error_kind, attempt, max_attempts})
    - Loguru-backed reporter that keeps a bounded window of recent events
    - Allure-backed reporter attaching each event as JSON
    - Attachment helpers for JSON/text payloads and PNG screenshots

================================================================================
"""

from __future__ import annotations

import json
from collections import deque
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Deque, Dict, List, Optional

import allure
from loguru import logger


# ================================================================================
# Attachment Helpers
# ================================================================================

def attach_json(data: Any, name: str = "Data") -> None:
    """
    Attach JSON data to Allure report.

    Args:
        data: Data to attach (will be JSON serialized)
        name: Attachment name
    """
    json_str = json.dumps(data, indent=2, default=str)
    allure.attach(
        json_str,
        name=name,
        attachment_type=allure.attachment_type.JSON
    )


def attach_text(text: str, name: str = "Text") -> None:
    """
    Attach text content to Allure report.

    Args:
        text: Text to attach
        name: Attachment name
    """
    allure.attach(
        text,
        name=name,
        attachment_type=allure.attachment_type.TEXT
    )


def attach_png(png: bytes, name: str = "Screenshot") -> None:
    """Attach PNG image bytes to Allure report."""
    allure.attach(png, name=name, attachment_type=allure.attachment_type.PNG)


# ================================================================================
# Failure Events
# ================================================================================

@dataclass(frozen=True)
class FailureEvent:
    """
    One failure notification for the external reporter.

    Attributes:
        invocation_id: Identifier of the failing test invocation
        error_kind: ErrorKind value ("timeout" for poll timeouts), None when
            the failure carries no kind (plain assertion)
        attempt: Attempt number that failed (1-based)
        max_attempts: Attempt budget of the invocation
        terminal: True when no further attempt will be made
        message: Short failure description
        error_type: Exception class name, when the failure came from one
        timestamp: ISO time the event was created
    """
    invocation_id: str
    error_kind: Optional[str]
    attempt: int
    max_attempts: int
    terminal: bool = False
    message: str = ""
    error_type: Optional[str] = None
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @property
    def label(self) -> str:
        return self.error_kind or self.error_type or "failure"


DEFAULT_MAX_EVENTS = 500


class FailureReporter:
    """
    Logs failure events and keeps the most recent ones for later inspection.

    Only the last `max_events` events are kept; older ones have already been
    logged and forwarded. Subclass and override `on_event` to forward events
    elsewhere.
    """

    def __init__(self, max_events: int = DEFAULT_MAX_EVENTS) -> None:
        self.events: Deque[FailureEvent] = deque(maxlen=max_events)

    def report(self, event: FailureEvent) -> None:
        self.events.append(event)
        self._log(event)
        self.on_event(event)

    def on_event(self, event: FailureEvent) -> None:
        pass

    def _log(self, event: FailureEvent) -> None:
        progress = f"attempt {event.attempt}/{event.max_attempts}"
        if event.terminal:
            logger.error(
                f"❌ {event.invocation_id} failed ({progress}, "
                f"last error: {event.label}): {event.message}"
            )
        else:
            logger.warning(
                f"⚠️ {event.invocation_id} {event.label} ({progress}): {event.message}"
            )

    def events_for(self, invocation_id: str) -> List[FailureEvent]:
        return [e for e in self.events if e.invocation_id == invocation_id]

    def clear(self) -> None:
        self.events.clear()


class AllureFailureReporter(FailureReporter):
    """Failure reporter that also attaches every event to the Allure report."""

    def on_event(self, event: FailureEvent) -> None:
        kind = "Final failure" if event.terminal else f"Failure on attempt {event.attempt}"
        attach_json(event.to_dict(), name=f"{kind}: {event.label}")
        if event.terminal and event.max_attempts > 1:
            attach_text(
                f"{event.invocation_id} failed after {event.attempt}/{event.max_attempts} "
                f"attempt(s) (last error: {event.label})\n{event.message}",
                name="Retry summary",
            )


def reporter_from_config(loader: Any) -> FailureReporter:
    """Choose a reporter according to the `reporting.allure` setting."""
    max_events = int(loader.get("reporting.max_events", DEFAULT_MAX_EVENTS))
    if loader.get("reporting.allure", True):
        return AllureFailureReporter(max_events)
    return FailureReporter(max_events)


__all__ = [
    "attach_json",
    "attach_text",
    "attach_png",
    "FailureEvent",
    "FailureReporter",
    "AllureFailureReporter",
    "reporter_from_config",
]
