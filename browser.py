"""Playwright-backed element driver with multi-browser support."""
from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import Any, List, Literal, Optional

from playwright.async_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    Playwright,
    TimeoutError as PlaywrightTimeout,
    async_playwright,
)

from driver import By, ElementDriver, LocateMode
from exceptions import (
    DriverNotStartedError,
    InvalidLocatorError,
    NavigationError,
    StaleElementError,
    StructuralError,
)
from elements import DocumentScope

BrowserType = Literal["chromium", "firefox", "webkit"]

_SELECTOR_ERRORS = ("is not a valid selector", "Unexpected token", "Unknown engine", "SyntaxError")
_STALE_ERRORS = ("not attached to the DOM", "Element is detached", "has been disposed", "Target closed")
_NAVIGATION_ERRORS = ("Execution context was destroyed", "Cannot find context with specified id")


def _quote(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def to_selector(locator: By) -> str:
    """Translate a locator into Playwright selector syntax."""
    strategy, value = locator.strategy, locator.value
    if strategy == "css":
        return value
    if strategy == "xpath":
        return f"xpath={value}"
    if strategy == "id":
        return f"[id={_quote(value)}]"
    if strategy == "name":
        return f"[name={_quote(value)}]"
    if strategy == "class_name":
        return f"[class~={_quote(value)}]"
    if strategy == "tag_name":
        return value
    if strategy == "text":
        return f"text={value}"
    if strategy == "link_text":
        return f"a:text-is({_quote(value)})"
    raise InvalidLocatorError(f"Unsupported locator strategy: {strategy}", locator=locator)


class PlaywrightDriver(ElementDriver):
    """Element driver running one Playwright browser page."""

    def __init__(
        self,
        browser_type: BrowserType = "chromium",
        headless: bool = True,
        viewport_width: int = 1440,
        viewport_height: int = 900,
        slow_mo: int = 0,
        action_timeout_ms: float = 5000,
        logger: Optional[logging.Logger] = None,
    ):
        self.browser_type = browser_type
        self.headless = headless
        self.viewport_width = viewport_width
        self.viewport_height = viewport_height
        self.slow_mo = slow_mo
        self.action_timeout_ms = action_timeout_ms
        self.logger = logger or logging.getLogger("steady.browser")

        self._playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None
        self._session_id: Optional[str] = None

    @property
    def session_id(self) -> Optional[str]:
        return self._session_id

    def _ensure_started(self) -> None:
        """Raise if browser not started."""
        if self.page is None:
            raise DriverNotStartedError()

    async def start(self) -> None:
        """Start the browser with specified engine."""
        self._playwright = await async_playwright().start()

        browser_launcher = getattr(self._playwright, self.browser_type)
        launch_options: dict[str, Any] = {"headless": self.headless}
        if self.slow_mo > 0:
            launch_options["slow_mo"] = self.slow_mo

        self.browser = await browser_launcher.launch(**launch_options)
        self.context = await self.browser.new_context(
            viewport={"width": self.viewport_width, "height": self.viewport_height}
        )
        self.page = await self.context.new_page()
        self._session_id = uuid.uuid4().hex

        self.logger.info(f"Browser started: {self.browser_type} (headless={self.headless}, session={self._session_id})")

    async def close(self) -> None:
        """Close the browser and clean up resources."""
        if self.page:
            await self.page.close()
        if self.context:
            await self.context.close()
        if self.browser:
            await self.browser.close()
        if self._playwright:
            await self._playwright.stop()
        self.page = None
        self.context = None
        self.browser = None
        self._playwright = None
        self.logger.info(f"Browser closed (session={self._session_id})")

    async def __aenter__(self) -> "PlaywrightDriver":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    def document(self, **kwargs: Any) -> DocumentScope:
        """Whole-page search scope bound to this driver."""
        return DocumentScope(self, **kwargs)

    # ─────────────────────────────────────────────────────────────────────────
    # Navigation
    # ─────────────────────────────────────────────────────────────────────────

    async def goto(
        self,
        url: str,
        wait_until: Literal["load", "domcontentloaded", "networkidle", "commit"] = "load",
        timeout: float = 30000,
    ) -> None:
        """Navigate to a URL with configurable wait strategy."""
        self._ensure_started()
        try:
            await self.page.goto(url, wait_until=wait_until, timeout=timeout)
        except PlaywrightTimeout as e:
            raise NavigationError(f"Navigation timed out: {url}", url=url, timeout=timeout) from e
        except PlaywrightError as e:
            raise NavigationError(f"Navigation failed: {e}", url=url) from e

    def get_url(self) -> str:
        self._ensure_started()
        return self.page.url

    async def screenshot(self, path: Optional[Path] = None, full_page: bool = False) -> bytes:
        """Capture the current page, optionally saving it to ``path``."""
        self._ensure_started()
        return await self.page.screenshot(path=path, full_page=full_page)

    # ─────────────────────────────────────────────────────────────────────────
    # Element driver capability
    # ─────────────────────────────────────────────────────────────────────────

    def _translate(self, error: PlaywrightError, locator: Optional[By] = None) -> StructuralError:
        message = str(error)
        if any(marker in message for marker in _SELECTOR_ERRORS):
            return InvalidLocatorError(f"Invalid locator: {message}", locator=locator)
        if any(marker in message for marker in _STALE_ERRORS):
            return StaleElementError(f"Element is no longer attached: {message}")
        return StructuralError(f"Browser error: {message}")

    async def _matches_mode(self, handle: Any, mode: LocateMode) -> bool:
        if mode is LocateMode.ANY:
            return True
        if not await handle.is_visible():
            return False
        if mode is LocateMode.CLICKABLE:
            return await handle.is_enabled()
        return True

    async def locate(self, scope: Any, locator: By, mode: LocateMode) -> List[Any]:
        self._ensure_started()
        root = scope if scope is not None else self.page
        selector = to_selector(locator)
        try:
            handles = await root.query_selector_all(selector)
            return [h for h in handles if await self._matches_mode(h, mode)]
        except PlaywrightError as e:
            if any(marker in str(e) for marker in _NAVIGATION_ERRORS):
                # page is mid-navigation, nothing can match yet
                self.logger.debug(f"Locate {locator} during navigation: {e}")
                return []
            raise self._translate(e, locator) from e

    async def click(self, node: Any) -> None:
        try:
            await node.click(timeout=self.action_timeout_ms)
        except PlaywrightError as e:
            raise self._translate(e) from e

    async def type_text(self, node: Any, text: str, clear: bool = False) -> None:
        try:
            if clear:
                await node.fill(text, timeout=self.action_timeout_ms)
            else:
                await node.type(text, timeout=self.action_timeout_ms)
        except PlaywrightError as e:
            raise self._translate(e) from e

    async def text(self, node: Any) -> str:
        try:
            return await node.inner_text()
        except PlaywrightError as e:
            raise self._translate(e) from e

    async def position(self, node: Any) -> Optional[tuple[float, float]]:
        try:
            box = await node.bounding_box()
        except PlaywrightError as e:
            raise self._translate(e) from e
        if box is None:
            return None
        return (box["x"], box["y"])

    async def attribute(self, node: Any, name: str) -> Optional[str]:
        try:
            return await node.get_attribute(name)
        except PlaywrightError as e:
            raise self._translate(e) from e
