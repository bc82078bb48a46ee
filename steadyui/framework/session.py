"""
================================================================================
Session Handle
================================================================================

Opaque reference to the one live automation resource.

The handle never inspects the remote protocol. It forwards query and action
operations to a backend (see `browser_backend.PlaywrightBackend`) and refuses
every operation once it has been released.

Features:
    - Backend protocol shared by real and fake automation backends
    - Element state snapshots for condition evaluation
    - Session construction parameters read from configuration
    - Closed-handle guard (SessionClosedError)

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any, Optional, Protocol

from loguru import logger

from .errors import SessionClosedError


@dataclass(frozen=True)
class ElementState:
    """
    Snapshot of one element as seen by a single session query.

    Attributes:
        locator: Selector the element was found with
        visible: Element is rendered with a non-empty box
        enabled: Element accepts input
        obscured: Another element covers the element's center point
    """
    locator: str
    visible: bool
    enabled: bool = True
    obscured: bool = False

    @property
    def clickable(self) -> bool:
        return self.visible and self.enabled and not self.obscured


@dataclass(frozen=True)
class SessionConfig:
    """
    Parameters used to construct a session.

    Attributes:
        engine: Backend selector - 'chromium', 'chrome', 'firefox', 'webkit', 'edge'
        headless: Run the browser without a visible window
        implicit_wait: Default per-operation wait in seconds
        page_load_timeout: Navigation timeout in seconds
        window_width: Viewport width in pixels
        window_height: Viewport height in pixels
        base_url: Initial navigation target for test setup
    """
    engine: str = "chromium"
    headless: bool = True
    implicit_wait: float = 10.0
    page_load_timeout: float = 30.0
    window_width: int = 1920
    window_height: int = 1080
    base_url: str = "http://localhost:3000"

    @classmethod
    def from_config(cls, loader: Any) -> "SessionConfig":
        """
        Build session parameters from a config loader.

        Args:
            loader: Object exposing `get(key, default)` (e.g. ConfigLoader)
        """
        defaults = cls()
        return cls(
            engine=str(loader.get("browser.engine", defaults.engine)).lower(),
            headless=loader.get("browser.headless", defaults.headless),
            implicit_wait=loader.get("browser.implicit_wait", defaults.implicit_wait),
            page_load_timeout=loader.get("browser.page_load_timeout", defaults.page_load_timeout),
            window_width=loader.get("browser.window_width", defaults.window_width),
            window_height=loader.get("browser.window_height", defaults.window_height),
            base_url=loader.get("ui.base_url", defaults.base_url),
        )


class SessionBackend(Protocol):
    """
    Operations a backend must provide to be driven through a SessionHandle.

    Element queries raise ElementNotFoundError when the locator matches nothing
    and StaleElementError when the element detached mid-read. Page-level reads
    (url, title, ready state) raise StaleElementError when a navigation
    interrupts them. Actions raise ElementNotInteractableError when the
    element cannot be acted on.
    """

    def inspect(self, locator: str) -> ElementState: ...

    def text_of(self, locator: str) -> str: ...

    def attribute_of(self, locator: str, name: str) -> Optional[str]: ...

    def current_url(self) -> str: ...

    def title(self) -> str: ...

    def ready_state(self) -> str: ...

    def navigate(self, url: str) -> None: ...

    def click(self, locator: str) -> None: ...

    def fill(self, locator: str, value: str) -> None: ...

    def screenshot(self) -> bytes: ...

    def close(self) -> None: ...


class SessionHandle:
    """
    Opaque, closable reference to a live automation backend.

    Handles are created by SessionManager only. After `SessionManager.release()`
    every operation raises SessionClosedError; a new handle must be obtained
    through `get_or_create()`.
    """

    def __init__(self, backend: SessionBackend, config: SessionConfig):
        self._backend = backend
        self._config = config
        self._closed = False
        self.session_id = uuid.uuid4().hex[:12]

    def __repr__(self) -> str:
        state = "closed" if self._closed else "live"
        return f"<SessionHandle {self.session_id} {self._config.engine} {state}>"

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def config(self) -> SessionConfig:
        return self._config

    def _ensure_open(self, operation: str) -> SessionBackend:
        if self._closed:
            raise SessionClosedError(
                f"Session {self.session_id} is closed; cannot {operation}"
            )
        return self._backend

    def _close(self) -> None:
        """Close the backend and mark the handle unusable. Called by SessionManager."""
        if self._closed:
            return
        self._closed = True
        try:
            self._backend.close()
        except Exception as e:
            logger.error(f"Error while closing session {self.session_id}: {e}")

    # =========================================================================
    # Queries
    # =========================================================================

    def inspect(self, locator: str) -> ElementState:
        return self._ensure_open("inspect element").inspect(locator)

    def text_of(self, locator: str) -> str:
        return self._ensure_open("read text").text_of(locator)

    def attribute_of(self, locator: str, name: str) -> Optional[str]:
        return self._ensure_open("read attribute").attribute_of(locator, name)

    def current_url(self) -> str:
        return self._ensure_open("read url").current_url()

    def title(self) -> str:
        return self._ensure_open("read title").title()

    def ready_state(self) -> str:
        return self._ensure_open("read ready state").ready_state()

    # =========================================================================
    # Actions
    # =========================================================================

    def navigate(self, url: str) -> None:
        self._ensure_open("navigate").navigate(url)
        logger.debug(f"[{self.session_id}] Navigated to: {url}")

    def click(self, locator: str) -> None:
        self._ensure_open("click").click(locator)

    def fill(self, locator: str, value: str) -> None:
        self._ensure_open("fill").fill(locator, value)

    def screenshot(self) -> bytes:
        return self._ensure_open("take screenshot").screenshot()


__all__ = [
    "ElementState",
    "SessionBackend",
    "SessionConfig",
    "SessionHandle",
]
