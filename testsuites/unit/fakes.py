"""
Fakes for exercising the synchronization core without a browser:

- FakeClock replaces the poll engine's time source, so timing properties are
  checked exactly and instantly
- FakeBackend is a scriptable in-memory page implementing the session
  backend operations
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from steadyui.framework.errors import (
    ElementNotFoundError,
    ElementNotInteractableError,
    StaleElementError,
)
from steadyui.framework.session import ElementState


class FakeClock:
    """Monotonic clock that only moves when slept on or advanced."""

    def __init__(self, start: float = 0.0):
        self.now = start
        self.sleeps: List[float] = []

    def monotonic(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeBackend:
    """
    In-memory page model.

    Elements are dicts keyed by locator with `visible`, `enabled`, `obscured`,
    `stale`, `text` and `attributes` entries.
    """

    def __init__(self) -> None:
        self.elements: Dict[str, Dict[str, Any]] = {}
        self.url = "about:blank"
        self.page_title = ""
        self.readiness = "complete"
        self.navigating = False
        self.closed = False
        self.actions: List[tuple] = []
        self.queries = 0

    def add(
        self,
        locator: str,
        visible: bool = True,
        enabled: bool = True,
        obscured: bool = False,
        text: str = "",
        **attributes: str,
    ) -> None:
        self.elements[locator] = {
            "visible": visible,
            "enabled": enabled,
            "obscured": obscured,
            "stale": False,
            "text": text,
            "attributes": dict(attributes),
        }

    def update(self, locator: str, **changes: Any) -> None:
        self.elements[locator].update(changes)

    def remove(self, locator: str) -> None:
        self.elements.pop(locator, None)

    def _element(self, locator: str) -> Dict[str, Any]:
        self.queries += 1
        element = self.elements.get(locator)
        if element is None:
            raise ElementNotFoundError(f"No element matches {locator}")
        if element["stale"]:
            raise StaleElementError(f"{locator} went stale")
        return element

    def inspect(self, locator: str) -> ElementState:
        element = self._element(locator)
        return ElementState(
            locator=locator,
            visible=element["visible"],
            enabled=element["enabled"],
            obscured=element["obscured"],
        )

    def text_of(self, locator: str) -> str:
        return self._element(locator)["text"]

    def attribute_of(self, locator: str, name: str) -> Optional[str]:
        return self._element(locator)["attributes"].get(name)

    def _page(self) -> None:
        if self.navigating:
            raise StaleElementError("Execution context was destroyed")

    def current_url(self) -> str:
        self._page()
        return self.url

    def title(self) -> str:
        self._page()
        return self.page_title

    def ready_state(self) -> str:
        self._page()
        return self.readiness

    def navigate(self, url: str) -> None:
        self.actions.append(("navigate", url))
        self.url = url

    def click(self, locator: str) -> None:
        element = self._element(locator)
        if not (element["visible"] and element["enabled"]):
            raise ElementNotInteractableError(f"Cannot click {locator}")
        self.actions.append(("click", locator))

    def fill(self, locator: str, value: str) -> None:
        self._element(locator)
        self.actions.append(("fill", locator, value))

    def screenshot(self) -> bytes:
        return b"\x89PNG"

    def close(self) -> None:
        self.closed = True

