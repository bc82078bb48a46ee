"""
================================================================================
Playwright Backend
================================================================================

Automation backend driving a real browser through Playwright's sync API.

The session manager calls `launch_playwright_backend(config)` to build the
single live resource; the SessionHandle then forwards queries and actions
here. Playwright errors are translated into the core's error taxonomy so
conditions can classify them without knowing Playwright.

Features:
    - Engine selection: chromium (alias chrome), firefox, webkit, edge
    - Headless / headed launch
    - Viewport from configured window size
    - Default action and navigation timeouts baked into the context
    - Cleanup of partially constructed sessions

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Tuple

from loguru import logger
from playwright.sync_api import Browser, BrowserContext, Page, Playwright
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from .errors import (
    ElementNotFoundError,
    ElementNotInteractableError,
    SessionInitError,
    StaleElementError,
)
from .session import ElementState, SessionConfig


# Engine name -> (Playwright browser type, launch channel)
ENGINES: Dict[str, Tuple[str, Optional[str]]] = {
    "chromium": ("chromium", None),
    "chrome": ("chromium", None),
    "firefox": ("firefox", None),
    "webkit": ("webkit", None),
    "edge": ("chromium", "msedge"),
}

# Browser launch arguments applied to chromium-based engines
CHROMIUM_ARGS = [
    "--no-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--ignore-certificate-errors",
]

# True when another element receives pointer events at the element's center
OBSCURED_SCRIPT = """
el => {
    const rect = el.getBoundingClientRect();
    const x = rect.left + rect.width / 2;
    const y = rect.top + rect.height / 2;
    const top = document.elementFromPoint(x, y);
    return top !== null && top !== el && !el.contains(top);
}
"""


class PlaywrightBackend:
    """
    Session backend wrapping one Playwright page.

    Use `launch_playwright_backend()` to construct; the constructor only
    takes ownership of already-created Playwright objects.
    """

    def __init__(
        self,
        playwright: Playwright,
        browser: Browser,
        context: BrowserContext,
        page: Page,
    ):
        self._playwright = playwright
        self._browser = browser
        self._context = context
        self.page = page

    # =========================================================================
    # Queries
    # =========================================================================

    def _page_read(self, what: str, read: Callable[[], Any]) -> Any:
        """
        Run a page-level read, tagging Playwright failures as stale.

        A navigation in flight destroys the execution context the read ran in;
        the next poll tick reads from the new document.
        """
        try:
            return read()
        except PlaywrightError as e:
            raise StaleElementError(f"Page changed while reading {what}: {e.message}") from e

    def _count(self, locator: str) -> int:
        return self._page_read(f"matches of {locator}", self.page.locator(locator).count)

    def _first(self, locator: str) -> Any:
        if self._count(locator) == 0:
            raise ElementNotFoundError(f"No element matches {locator}")
        return self.page.locator(locator).first

    def _read(self, locator: str, read: Any) -> Any:
        element = self._first(locator)
        try:
            return read(element)
        except PlaywrightError as e:
            # The element matched a moment ago; tell "gone" from "re-rendered"
            if self._count(locator) == 0:
                raise ElementNotFoundError(f"{locator} detached: {e.message}") from e
            raise StaleElementError(f"{locator} went stale: {e.message}") from e

    def inspect(self, locator: str) -> ElementState:
        def read(element: Any) -> ElementState:
            is_visible = element.is_visible()
            return ElementState(
                locator=locator,
                visible=is_visible,
                enabled=element.is_enabled(),
                obscured=bool(element.evaluate(OBSCURED_SCRIPT)) if is_visible else False,
            )

        return self._read(locator, read)

    def text_of(self, locator: str) -> str:
        return self._read(locator, lambda element: element.inner_text())

    def attribute_of(self, locator: str, name: str) -> Optional[str]:
        return self._read(locator, lambda element: element.get_attribute(name))

    def current_url(self) -> str:
        return self._page_read("url", lambda: self.page.url)

    def title(self) -> str:
        return self._page_read("title", self.page.title)

    def ready_state(self) -> str:
        return str(self._page_read("ready state", lambda: self.page.evaluate("document.readyState")))

    # =========================================================================
    # Actions
    # =========================================================================

    def navigate(self, url: str) -> None:
        self.page.goto(url)

    def click(self, locator: str) -> None:
        try:
            self._first(locator).click()
        except PlaywrightError as e:
            raise ElementNotInteractableError(f"Cannot click {locator}: {e.message}") from e

    def fill(self, locator: str, value: str) -> None:
        try:
            self._first(locator).fill(value)
        except PlaywrightError as e:
            raise ElementNotInteractableError(f"Cannot fill {locator}: {e.message}") from e

    def screenshot(self) -> bytes:
        return self.page.screenshot(full_page=True)

    def close(self) -> None:
        """Close context, browser and Playwright, in that order."""
        _shutdown(self._playwright, self._browser, self._context)
        logger.debug("Browser closed")


def _shutdown(
    playwright: Optional[Playwright],
    browser: Optional[Browser],
    context: Optional[BrowserContext],
) -> None:
    if context is not None:
        try:
            context.close()
        except PlaywrightError as e:
            logger.warning(f"Failed to close browser context: {e.message}")
    if browser is not None:
        browser.close()
    if playwright is not None:
        playwright.stop()


def launch_playwright_backend(config: SessionConfig) -> PlaywrightBackend:
    """
    Start Playwright and open one page configured from `config`.

    Args:
        config: Session construction parameters

    Returns:
        PlaywrightBackend owning the new browser

    Raises:
        SessionInitError: If the engine is unsupported. Other launch errors
            propagate after the partially built session is shut down.
    """
    engine = config.engine.lower()
    if engine not in ENGINES:
        raise SessionInitError(
            f"Unsupported browser engine: {config.engine}. "
            f"Expected one of: {', '.join(sorted(ENGINES))}"
        )
    browser_type, channel = ENGINES[engine]

    launch_options: Dict[str, Any] = {"headless": config.headless}
    if browser_type == "chromium":
        launch_options["args"] = list(CHROMIUM_ARGS)
    if channel:
        launch_options["channel"] = channel

    playwright: Optional[Playwright] = None
    browser: Optional[Browser] = None
    context: Optional[BrowserContext] = None
    try:
        playwright = sync_playwright().start()
        browser = getattr(playwright, browser_type).launch(**launch_options)
        context = browser.new_context(
            viewport={"width": config.window_width, "height": config.window_height},
            ignore_https_errors=True,
        )
        context.set_default_timeout(config.implicit_wait * 1000)
        context.set_default_navigation_timeout(config.page_load_timeout * 1000)
        page = context.new_page()
    except Exception:
        logger.error(f"Failed to launch {engine} (headless={config.headless})")
        try:
            _shutdown(playwright, browser, context)
        except Exception as cleanup_error:
            logger.warning(f"Cleanup after failed launch also failed: {cleanup_error}")
        raise

    logger.info(
        f"Browser started: {engine} "
        f"(headless={config.headless}, implicit_wait={config.implicit_wait}s)"
    )
    return PlaywrightBackend(playwright, browser, context, page)


__all__ = [
    "ENGINES",
    "PlaywrightBackend",
    "launch_playwright_backend",
]
