# ================================================================================
# Poll Engine
# ================================================================================
#
# Bounded-time polling loop that waits for transient remote state to settle.
#
# A condition is evaluated against the session on every tick until it is
# satisfied, fails with a non-ignorable error kind, or the policy's timeout
# elapses. Polling is purely local to one `poll` call: no retries across calls,
# no background threads, no cancellation other than the timeout itself.
#
# Key Features:
#   - Fixed-interval polling with a hard deadline
#   - Declarative ignore set (PollPolicy.ignored) instead of exception juggling
#   - Fail-fast on non-ignorable error kinds
#   - Pre-configured poll scenarios
#   - Allure step reporting and loguru tracing
#
# Usage:
#   state = poll(session, conditions.visible("#login"), get_poll_policy("fast"))
#   poll(session, conditions.present(".row"), PollPolicy(timeout=5, interval=0.2))
#
# ================================================================================

from __future__ import annotations

import time
from dataclasses import dataclass, field, replace
from typing import Any, Dict, FrozenSet, Iterable, Optional, TypeVar

import allure
from loguru import logger

from .conditions import Condition
from .errors import ConfigurationError, ErrorKind, PollTimeoutError, error_for_kind
from .invocation import InvocationContext
from .outcome import Outcome
from .session import SessionHandle


T = TypeVar('T')


@dataclass(frozen=True)
class PollPolicy:
    """
    Timing and error-tolerance configuration for one `poll` call.

    Attributes:
        timeout: Total time budget in seconds (0 = evaluate exactly once)
        interval: Sleep between evaluations in seconds, strictly positive
        ignored: Error kinds absorbed by the loop instead of failing fast
    """
    timeout: float = 8.0
    interval: float = 0.5
    ignored: FrozenSet[ErrorKind] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if self.interval <= 0:
            raise ConfigurationError(
                f"Poll interval must be greater than 0, got {self.interval}"
            )
        if self.timeout < 0:
            raise ConfigurationError(
                f"Poll timeout must not be negative, got {self.timeout}"
            )
        # Accept any iterable of kinds (lists from YAML, sets from callers)
        object.__setattr__(self, "ignored", frozenset(ErrorKind(k) for k in self.ignored))

    def with_timeout(self, timeout: float) -> "PollPolicy":
        return replace(self, timeout=timeout)

    def with_interval(self, interval: float) -> "PollPolicy":
        return replace(self, interval=interval)

    def with_ignored(self, ignored: Iterable[ErrorKind]) -> "PollPolicy":
        """Return a copy whose ignore set is exactly `ignored`."""
        return replace(self, ignored=frozenset(ignored))

    def ignoring(self, *kinds: ErrorKind) -> "PollPolicy":
        """Return a copy that additionally ignores `kinds`."""
        return replace(self, ignored=self.ignored | frozenset(kinds))

    @classmethod
    def from_config(cls, loader: Any) -> "PollPolicy":
        """
        Build the default policy from configuration.

        Reads `wait.explicit_wait` (seconds) and `wait.poll_interval` (seconds).
        """
        defaults = cls()
        return cls(
            timeout=float(loader.get("wait.explicit_wait", defaults.timeout)),
            interval=float(loader.get("wait.poll_interval", defaults.interval)),
        )


# Pre-configured poll policies for common scenarios
POLL_SCENARIOS: Dict[str, PollPolicy] = {
    # Default configuration
    "default": PollPolicy(),

    # Quick checks on elements expected to be there already
    "fast": PollPolicy(timeout=2.0, interval=0.1),

    # Tolerates elements that appear late or re-render while polled
    "fluent": PollPolicy(
        timeout=8.0,
        interval=0.25,
        ignored=frozenset({ErrorKind.NOT_FOUND, ErrorKind.STALE_ELEMENT}),
    ),

    # Full page navigations; reads racing the navigation come back stale
    "page_load": PollPolicy(
        timeout=30.0,
        interval=0.5,
        ignored=frozenset({ErrorKind.STALE_ELEMENT}),
    ),
}


def get_poll_policy(scenario: str) -> PollPolicy:
    """
    Get poll policy for a specific scenario.

    Args:
        scenario: Scenario name (e.g., "fast", "fluent")

    Returns:
        PollPolicy for the scenario, or default if not found
    """
    return POLL_SCENARIOS.get(scenario, POLL_SCENARIOS["default"])


def poll(
    session: SessionHandle,
    condition: Condition[T],
    policy: Optional[PollPolicy] = None,
    description: Optional[str] = None,
    context: Optional[InvocationContext] = None,
) -> T:
    """
    Evaluate `condition` against `session` until it settles.

    Args:
        session: Live session handle the condition is evaluated against
        condition: Condition built from the condition library
        policy: Timeout/interval/ignore set. When omitted, the default policy
            is used with the condition's expected-ignorable kinds.
        description: Human-readable description for logging
        context: Running invocation; poll timeouts are reported through it

    Returns:
        The value carried by the first Satisfied outcome

    Raises:
        PollTimeoutError: If the deadline passes without a Satisfied outcome
        SteadyUIError: The error class of the first non-ignorable failed outcome

    Example:
        state = poll(
            session,
            conditions.clickable("[data-testid='btn-submit']"),
            PollPolicy(timeout=10, interval=0.5),
        )
    """
    if policy is None:
        policy = POLL_SCENARIOS["default"].with_ignored(condition.expected_ignorable)
    description = description or condition.description

    with allure.step(f"Poll: {description}"):
        return _run_poll(session, condition, policy, description, context)


def _run_poll(
    session: SessionHandle,
    condition: Condition[T],
    policy: PollPolicy,
    description: str,
    context: Optional[InvocationContext],
) -> T:
    start_time = time.monotonic()
    deadline = start_time + policy.timeout
    attempt = 0
    last_outcome: Optional[Outcome[T]] = None

    logger.debug(
        f"Starting poll: {description} "
        f"(timeout={policy.timeout}s, interval={policy.interval}s)"
    )

    while True:
        attempt += 1
        outcome = condition(session)
        last_outcome = outcome

        if outcome.is_satisfied:
            elapsed = time.monotonic() - start_time
            logger.debug(
                f"Poll satisfied after {attempt} attempts ({elapsed:.2f}s): {description}"
            )
            return outcome.value

        if outcome.is_failed and outcome.error_kind not in policy.ignored:
            logger.debug(f"Poll failed on attempt {attempt}: {description} -> {outcome}")
            error_cls = error_for_kind(outcome.error_kind)
            raise error_cls(f"{description}: {outcome}", outcome=outcome)

        now = time.monotonic()
        if now >= deadline:
            break

        logger.debug(
            f"Attempt {attempt}: {outcome}. Waiting {policy.interval}s..."
        )
        time.sleep(policy.interval)

    elapsed = time.monotonic() - start_time
    error_msg = (
        f"Timeout after {elapsed:.2f}s ({attempt} attempts) waiting for: "
        f"{description}. Last outcome: {last_outcome}"
    )
    logger.warning(error_msg)
    if context is not None:
        context.emit(ErrorKind.TIMEOUT.value, error_msg, error_type=PollTimeoutError.__name__)
    raise PollTimeoutError(error_msg, outcome=last_outcome, attempts=attempt, elapsed=elapsed)


__all__ = [
    "PollPolicy",
    "POLL_SCENARIOS",
    "get_poll_policy",
    "poll",
]
