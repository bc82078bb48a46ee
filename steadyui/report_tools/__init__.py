"""Failure events and reporters consumed by the retry layer and poll timeouts."""

from .failure_reporter import (
    AllureFailureReporter,
    FailureEvent,
    FailureReporter,
    attach_json,
    attach_text,
    reporter_from_config,
)

__all__ = [
    "AllureFailureReporter",
    "FailureEvent",
    "FailureReporter",
    "attach_json",
    "attach_text",
    "reporter_from_config",
]
