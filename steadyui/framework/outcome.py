"""
Outcome of a single condition evaluation.

A condition never raises for expected page states; it returns one of:
    - Outcome.not_yet()         -> keep polling
    - Outcome.satisfied(value)  -> stop, hand `value` back to the caller
    - Outcome.failed(kind)      -> stop, unless the poll policy ignores `kind`
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

from .errors import ErrorKind


T = TypeVar("T")


class OutcomeStatus(str, Enum):
    NOT_YET_SATISFIED = "not_yet_satisfied"
    SATISFIED = "satisfied"
    FAILED = "failed"


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """
    Immutable result of evaluating a condition once.

    Attributes:
        status: Which variant this outcome is
        value: Result handed back by `poll` (SATISFIED only)
        error_kind: Failure classification (FAILED only)
        detail: Human-readable note used in logs and timeout messages
    """

    status: OutcomeStatus
    value: Optional[T] = None
    error_kind: Optional[ErrorKind] = None
    detail: Optional[str] = None

    @classmethod
    def not_yet(cls, detail: Optional[str] = None) -> "Outcome[Any]":
        return cls(status=OutcomeStatus.NOT_YET_SATISFIED, detail=detail)

    @classmethod
    def satisfied(cls, value: Any = True) -> "Outcome[Any]":
        return cls(status=OutcomeStatus.SATISFIED, value=value)

    @classmethod
    def failed(cls, kind: ErrorKind, detail: Optional[str] = None) -> "Outcome[Any]":
        return cls(status=OutcomeStatus.FAILED, error_kind=kind, detail=detail)

    @property
    def is_satisfied(self) -> bool:
        return self.status is OutcomeStatus.SATISFIED

    @property
    def is_failed(self) -> bool:
        return self.status is OutcomeStatus.FAILED

    def __str__(self) -> str:
        if self.is_satisfied:
            return f"satisfied({self.value!r})"
        if self.is_failed:
            kind = self.error_kind.value if self.error_kind else "unknown"
            return f"failed({kind}: {self.detail})" if self.detail else f"failed({kind})"
        return f"not_yet({self.detail})" if self.detail else "not_yet"


__all__ = [
    "Outcome",
    "OutcomeStatus",
]
