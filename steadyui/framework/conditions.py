"""
================================================================================
Condition Library
================================================================================

Builders producing reusable predicates over session state.

Every builder returns the same `Condition` type: a closure over the target
(locator, URL fragment, ...) and the success criteria. Conditions are
re-evaluated on each poll tick and keep no state between evaluations.

Element-level query errors are turned into `Outcome.failed(kind)`; whether a
failure keeps the poll going is decided by the caller's PollPolicy. Each
builder declares the kinds it expects to be ignorable, which the poll engine
uses only when the caller supplies no policy of its own.

Usage:
    >>> from steadyui.framework import conditions
    >>> poll(session, conditions.clickable("[data-testid='btn-login']"))
    >>> poll(session, conditions.url_contains("/dashboard"))

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, FrozenSet, Generic, Optional, TypeVar

from .errors import ElementQueryError, ErrorKind
from .outcome import Outcome
from .session import ElementState, SessionHandle


T = TypeVar("T")

# document.readyState value signalling that the page finished loading
READY_STATE_COMPLETE = "complete"


@dataclass(frozen=True)
class Condition(Generic[T]):
    """
    Pure predicate over session state.

    Attributes:
        description: Human-readable name used in logs and timeout messages
        evaluate: Function from SessionHandle to Outcome
        expected_ignorable: Error kinds that are transient for this condition
    """
    description: str
    evaluate: Callable[[SessionHandle], Outcome[T]]
    expected_ignorable: FrozenSet[ErrorKind] = field(default_factory=frozenset)

    def __call__(self, session: SessionHandle) -> Outcome[T]:
        return self.evaluate(session)

    def __str__(self) -> str:
        return self.description


def _query_failure(error: ElementQueryError) -> Outcome[Any]:
    return Outcome.failed(error.kind, str(error) or None)


# =============================================================================
# Element Conditions
# =============================================================================

def visible(locator: str) -> Condition[ElementState]:
    """
    Satisfied once the element is present and rendered.

    Absence is reported as `Failed(not_found)`; callers expecting transient
    absence must add `not_found` to their policy's ignored kinds (see the
    `fluent` poll scenario). Expected ignorable: stale_element.
    """
    def evaluate(session: SessionHandle) -> Outcome[ElementState]:
        try:
            state = session.inspect(locator)
        except ElementQueryError as e:
            return _query_failure(e)
        if state.visible:
            return Outcome.satisfied(state)
        return Outcome.not_yet("present but hidden")

    return Condition(
        f"visibility of {locator}",
        evaluate,
        frozenset({ErrorKind.STALE_ELEMENT}),
    )


def clickable(locator: str) -> Condition[ElementState]:
    """
    Satisfied once the element is visible, enabled and not covered.

    Expected ignorable: stale_element.
    """
    def evaluate(session: SessionHandle) -> Outcome[ElementState]:
        try:
            state = session.inspect(locator)
        except ElementQueryError as e:
            return _query_failure(e)
        if state.clickable:
            return Outcome.satisfied(state)
        reasons = [
            reason
            for reason, blocked in (
                ("hidden", not state.visible),
                ("disabled", not state.enabled),
                ("obscured", state.obscured),
            )
            if blocked
        ]
        return Outcome.not_yet(", ".join(reasons))

    return Condition(
        f"clickability of {locator}",
        evaluate,
        frozenset({ErrorKind.STALE_ELEMENT}),
    )


def present(locator: str) -> Condition[ElementState]:
    """
    Satisfied once the element exists in the page, visible or not.

    Absence is what this condition waits out, so it reports NotYetSatisfied
    rather than a failure. Expected ignorable: stale_element.
    """
    def evaluate(session: SessionHandle) -> Outcome[ElementState]:
        try:
            return Outcome.satisfied(session.inspect(locator))
        except ElementQueryError as e:
            if e.kind is ErrorKind.NOT_FOUND:
                return Outcome.not_yet("not attached")
            return _query_failure(e)

    return Condition(
        f"presence of {locator}",
        evaluate,
        frozenset({ErrorKind.STALE_ELEMENT}),
    )


def absent(locator: str) -> Condition[bool]:
    """
    Satisfied once the element is hidden or gone.

    A `not_found` (or stale) answer from the query is success here, returned
    on the same tick. It is never treated as an ignorable failure.
    """
    def evaluate(session: SessionHandle) -> Outcome[bool]:
        try:
            state = session.inspect(locator)
        except ElementQueryError as e:
            if e.kind in (ErrorKind.NOT_FOUND, ErrorKind.STALE_ELEMENT):
                return Outcome.satisfied(True)
            return _query_failure(e)
        if not state.visible:
            return Outcome.satisfied(True)
        return Outcome.not_yet("still visible")

    return Condition(f"invisibility of {locator}", evaluate)


# Alias for callers that think in "wait for invisibility" terms
invisible = absent


def text_contains(locator: str, expected: str) -> Condition[str]:
    """
    Satisfied once the element's live text contains `expected`.

    `Failed(not_found)` if the element vanished. Expected ignorable: stale_element.
    """
    def evaluate(session: SessionHandle) -> Outcome[str]:
        try:
            text = session.text_of(locator)
        except ElementQueryError as e:
            return _query_failure(e)
        if expected in (text or ""):
            return Outcome.satisfied(text)
        return Outcome.not_yet(f"text is {text!r}")

    return Condition(
        f"text of {locator} containing {expected!r}",
        evaluate,
        frozenset({ErrorKind.STALE_ELEMENT}),
    )


def attribute_contains(locator: str, name: str, expected: str) -> Condition[str]:
    """
    Satisfied once attribute `name` of the element contains `expected`.

    A missing attribute counts as not yet satisfied. `Failed(not_found)` if the
    element vanished. Expected ignorable: stale_element.
    """
    def evaluate(session: SessionHandle) -> Outcome[str]:
        try:
            value = session.attribute_of(locator, name)
        except ElementQueryError as e:
            return _query_failure(e)
        if value is not None and expected in value:
            return Outcome.satisfied(value)
        return Outcome.not_yet(f"{name}={value!r}")

    return Condition(
        f"attribute {name} of {locator} containing {expected!r}",
        evaluate,
        frozenset({ErrorKind.STALE_ELEMENT}),
    )


# =============================================================================
# Session-global Conditions
# =============================================================================

# Page-level reads interrupted by a navigation surface as stale_element
_PAGE_IGNORABLE = frozenset({ErrorKind.STALE_ELEMENT})


def url_contains(fragment: str) -> Condition[str]:
    """Satisfied once the current URL contains `fragment`."""
    def evaluate(session: SessionHandle) -> Outcome[str]:
        try:
            url = session.current_url()
        except ElementQueryError as e:
            return _query_failure(e)
        if fragment in url:
            return Outcome.satisfied(url)
        return Outcome.not_yet(f"url is {url}")

    return Condition(f"url containing {fragment!r}", evaluate, _PAGE_IGNORABLE)


def url_equals(expected: str) -> Condition[str]:
    """Satisfied once the current URL equals `expected`."""
    def evaluate(session: SessionHandle) -> Outcome[str]:
        try:
            url = session.current_url()
        except ElementQueryError as e:
            return _query_failure(e)
        if url == expected:
            return Outcome.satisfied(url)
        return Outcome.not_yet(f"url is {url}")

    return Condition(f"url equal to {expected!r}", evaluate, _PAGE_IGNORABLE)


def title_contains(fragment: str) -> Condition[str]:
    def evaluate(session: SessionHandle) -> Outcome[str]:
        try:
            title = session.title()
        except ElementQueryError as e:
            return _query_failure(e)
        if fragment in title:
            return Outcome.satisfied(title)
        return Outcome.not_yet(f"title is {title!r}")

    return Condition(f"title containing {fragment!r}", evaluate, _PAGE_IGNORABLE)


def title_is(expected: str) -> Condition[str]:
    def evaluate(session: SessionHandle) -> Outcome[str]:
        try:
            title = session.title()
        except ElementQueryError as e:
            return _query_failure(e)
        if title == expected:
            return Outcome.satisfied(title)
        return Outcome.not_yet(f"title is {title!r}")

    return Condition(f"title equal to {expected!r}", evaluate, _PAGE_IGNORABLE)


def page_ready() -> Condition[str]:
    """Satisfied once `document.readyState` reports the page fully loaded."""
    def evaluate(session: SessionHandle) -> Outcome[str]:
        try:
            state = session.ready_state()
        except ElementQueryError as e:
            return _query_failure(e)
        if state == READY_STATE_COMPLETE:
            return Outcome.satisfied(state)
        return Outcome.not_yet(f"readyState is {state!r}")

    return Condition("page load complete", evaluate, _PAGE_IGNORABLE)


def from_predicate(
    description: str,
    predicate: Callable[[SessionHandle], Optional[T]],
    ignorable: FrozenSet[ErrorKind] = frozenset(),
) -> Condition[T]:
    """
    Wrap an ad-hoc predicate as a Condition.

    The predicate returns a truthy value when satisfied and a falsy value
    otherwise; element query errors become failed outcomes.
    """
    def evaluate(session: SessionHandle) -> Outcome[T]:
        try:
            value = predicate(session)
        except ElementQueryError as e:
            return _query_failure(e)
        return Outcome.satisfied(value) if value else Outcome.not_yet()

    return Condition(description, evaluate, frozenset(ignorable))


__all__ = [
    "Condition",
    "READY_STATE_COMPLETE",
    "visible",
    "clickable",
    "present",
    "absent",
    "invisible",
    "text_contains",
    "attribute_contains",
    "url_contains",
    "url_equals",
    "title_contains",
    "title_is",
    "page_ready",
    "from_predicate",
]
