"""
================================================================================
Waiter
================================================================================

Named waits bound to one session and one invocation.

A Waiter carries the default PollPolicy read from configuration and the
running InvocationContext, so page objects and test steps can write
`waiter.for_visible(locator)` instead of assembling a condition and a policy
for every call.

Usage:
    waiter = Waiter(session, policy=PollPolicy.from_config(ConfigLoader()))
    waiter.for_page_ready()
    waiter.click("[data-testid='btn-login']")
    waiter.for_url_contains("/dashboard", timeout=15)

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Optional, TypeVar

import allure
from loguru import logger

from . import conditions
from .conditions import Condition
from .errors import ErrorKind, PollTimeoutError
from .invocation import InvocationContext
from .poll_engine import POLL_SCENARIOS, PollPolicy, get_poll_policy, poll
from .session import ElementState, SessionHandle


T = TypeVar("T")


class Waiter:
    """
    Explicit-wait helper bound to a session.

    Each `for_*` method builds a condition from the condition library and
    polls it. The per-call `timeout` overrides only the timeout of the
    waiter's default policy; `policy` replaces the policy entirely.
    """

    def __init__(
        self,
        session: SessionHandle,
        policy: Optional[PollPolicy] = None,
        context: Optional[InvocationContext] = None,
    ):
        """
        Initialize waiter.

        Args:
            session: Live session handle
            policy: Default poll policy (timeout/interval)
            context: Running invocation, used to report poll timeouts
        """
        self.session = session
        self.policy = policy or POLL_SCENARIOS["default"]
        self.context = context

    def until(
        self,
        condition: Condition[T],
        policy: Optional[PollPolicy] = None,
        timeout: Optional[float] = None,
        description: Optional[str] = None,
    ) -> T:
        """
        Poll `condition` with the waiter's session and context.

        Without an explicit `policy`, the waiter's default timing is combined
        with the condition's expected-ignorable kinds.
        """
        if policy is None:
            policy = self.policy.with_ignored(
                self.policy.ignored | condition.expected_ignorable
            )
        if timeout is not None:
            policy = policy.with_timeout(timeout)
        return poll(
            self.session,
            condition,
            policy,
            description=description,
            context=self.context,
        )

    # =========================================================================
    # Element Waits
    # =========================================================================

    def for_visible(self, locator: str, timeout: Optional[float] = None) -> ElementState:
        return self.until(conditions.visible(locator), timeout=timeout)

    def for_clickable(self, locator: str, timeout: Optional[float] = None) -> ElementState:
        return self.until(conditions.clickable(locator), timeout=timeout)

    def for_presence(self, locator: str, timeout: Optional[float] = None) -> ElementState:
        return self.until(conditions.present(locator), timeout=timeout)

    def for_invisibility(self, locator: str, timeout: Optional[float] = None) -> bool:
        return self.until(conditions.absent(locator), timeout=timeout)

    def for_text(
        self,
        locator: str,
        text: str,
        timeout: Optional[float] = None,
    ) -> str:
        return self.until(conditions.text_contains(locator, text), timeout=timeout)

    def for_attribute(
        self,
        locator: str,
        name: str,
        value: str,
        timeout: Optional[float] = None,
    ) -> str:
        return self.until(
            conditions.attribute_contains(locator, name, value),
            timeout=timeout,
        )

    def fluent_visible(
        self,
        locator: str,
        timeout: Optional[float] = None,
        interval: Optional[float] = None,
    ) -> ElementState:
        """
        Wait for visibility while tolerating missing and stale elements.

        Args:
            locator: Element selector
            timeout: Total timeout in seconds (scenario default if omitted)
            interval: Polling interval in seconds (scenario default if omitted)
        """
        policy = get_poll_policy("fluent")
        if timeout is not None:
            policy = policy.with_timeout(timeout)
        if interval is not None:
            policy = policy.with_interval(interval)
        return self.until(conditions.visible(locator), policy=policy)

    # =========================================================================
    # Page Waits
    # =========================================================================

    def for_url_contains(self, fragment: str, timeout: Optional[float] = None) -> str:
        return self.until(conditions.url_contains(fragment), timeout=timeout)

    def for_url(self, url: str, timeout: Optional[float] = None) -> str:
        return self.until(conditions.url_equals(url), timeout=timeout)

    def for_title(self, title: str, timeout: Optional[float] = None) -> str:
        return self.until(conditions.title_is(title), timeout=timeout)

    def for_page_ready(self, timeout: Optional[float] = None) -> str:
        policy = get_poll_policy("page_load")
        if timeout is not None:
            policy = policy.with_timeout(timeout)
        return self.until(conditions.page_ready(), policy=policy)

    # =========================================================================
    # Wait-then-act
    # =========================================================================

    def click(self, locator: str, timeout: Optional[float] = None) -> None:
        """Wait until the element is clickable, then click it."""
        with allure.step(f"Click: {locator}"):
            self.for_clickable(locator, timeout=timeout)
            self.session.click(locator)
            logger.debug(f"Clicked: {locator}")

    def fill(self, locator: str, value: str, timeout: Optional[float] = None) -> None:
        """Wait until the element is visible, then fill it."""
        masked = "*" * len(value) if "password" in locator.lower() else value
        with allure.step(f"Fill {locator}: {masked}"):
            self.for_visible(locator, timeout=timeout)
            self.session.fill(locator, value)

    def navigate(self, url: str, wait_ready: bool = True) -> None:
        """Navigate to `url` and optionally wait for the load-complete signal."""
        with allure.step(f"Navigate to {url}"):
            self.session.navigate(url)
            if wait_ready:
                self.for_page_ready()

    def is_visible(self, locator: str, timeout: float = 2.0) -> bool:
        """
        Check visibility without failing the test.

        Missing elements are tolerated for the whole timeout.
        """
        policy = self.policy.with_timeout(timeout).ignoring(
            ErrorKind.NOT_FOUND, ErrorKind.STALE_ELEMENT
        )
        try:
            poll(self.session, conditions.visible(locator), policy)
            return True
        except PollTimeoutError:
            logger.debug(f"{locator} not visible after {timeout}s")
            return False


__all__ = ["Waiter"]
