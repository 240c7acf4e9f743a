"""Search scopes exposing the full find/wait operation set.

``DocumentScope`` searches the whole page and ``ElementHandle`` searches
under a previously resolved node. Both share every operation through
``SearchScope``, so lookups can be chained to any depth.
"""
from __future__ import annotations

import logging
import time
from typing import Any, List, Optional

import conditions
from driver import By, ElementDriver, LocateMode
from exceptions import PreconditionError, WaitTimeoutError
from polling import DEFAULT_POLL_INTERVAL, poll_until

DEFAULT_WAIT_SECONDS = 30
DEFAULT_NOT_MOVING_INTERVAL = 0.2


def _require_locator(locator: Optional[By]) -> By:
    if locator is None:
        raise PreconditionError("Locator must not be None")
    return locator


class SearchScope:
    """Root against which locators are evaluated."""

    def __init__(
        self,
        driver: ElementDriver,
        node: Any = None,
        wait_seconds: float = DEFAULT_WAIT_SECONDS,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        not_moving_interval: float = DEFAULT_NOT_MOVING_INTERVAL,
        logger: Optional[logging.Logger] = None,
    ):
        if driver is None:
            raise PreconditionError("Driver must not be None")
        if wait_seconds < 0:
            raise PreconditionError(f"Wait time must not be negative, got {wait_seconds}")
        self.driver = driver
        self.node = node
        self.wait_seconds = wait_seconds
        self.poll_interval = poll_interval
        self.not_moving_interval = not_moving_interval
        self.logger = logger or logging.getLogger("steady.waits")

    def _wrap(self, node: Any) -> "ElementHandle":
        return ElementHandle(
            self.driver,
            node,
            wait_seconds=self.wait_seconds,
            poll_interval=self.poll_interval,
            not_moving_interval=self.not_moving_interval,
            logger=self.logger,
        )

    async def _wait(self, probe: conditions.Probe, wait_seconds: float, what: str) -> List[Any]:
        started = time.monotonic()
        try:
            nodes = await poll_until(
                probe,
                wait_seconds,
                interval=self.poll_interval,
                description=what,
            )
        except WaitTimeoutError:
            self.logger.debug(f"Timed out after {wait_seconds}s: {what}")
            raise
        self.logger.debug(f"Waited {time.monotonic() - started:.2f}s for {what}")
        return nodes

    # ─────────────────────────────────────────────────────────────────────────
    # Single element lookups
    # ─────────────────────────────────────────────────────────────────────────

    async def find_element_present(self, locator: By) -> "ElementHandle":
        return await self.find_element_present_after(locator, self.wait_seconds)

    async def find_element_present_after(self, locator: By, wait_seconds: float) -> "ElementHandle":
        """Wait until at least one node matches and return the first."""
        locator = _require_locator(locator)
        probe = conditions.present(self.driver, self.node, locator)
        nodes = await self._wait(probe, wait_seconds, f"{locator} to be present")
        return self._wrap(nodes[0])

    async def find_element_visible(self, locator: By) -> "ElementHandle":
        return await self.find_element_visible_after(locator, self.wait_seconds)

    async def find_element_visible_after(self, locator: By, wait_seconds: float) -> "ElementHandle":
        locator = _require_locator(locator)
        probe = conditions.visible(self.driver, self.node, locator)
        nodes = await self._wait(probe, wait_seconds, f"{locator} to be visible")
        return self._wrap(nodes[0])

    async def find_element_clickable(self, locator: By) -> "ElementHandle":
        return await self.find_element_clickable_after(locator, self.wait_seconds)

    async def find_element_clickable_after(self, locator: By, wait_seconds: float) -> "ElementHandle":
        locator = _require_locator(locator)
        probe = conditions.clickable(self.driver, self.node, locator)
        nodes = await self._wait(probe, wait_seconds, f"{locator} to be clickable")
        return self._wrap(nodes[0])

    async def find_element_not_moving(self, locator: By) -> "ElementHandle":
        return await self.find_element_not_moving_after(locator, self.wait_seconds)

    async def find_element_not_moving_after(self, locator: By, wait_seconds: float) -> "ElementHandle":
        """Wait until the first match keeps its position across two samples."""
        locator = _require_locator(locator)
        probe = conditions.not_moving(self.driver, self.node, locator, self.not_moving_interval)
        nodes = await self._wait(probe, wait_seconds, f"{locator} to stop moving")
        return self._wrap(nodes[0])

    async def find_element_contain(self, locator: By, text: str) -> "ElementHandle":
        return await self.find_element_contain_after(locator, text, self.wait_seconds)

    async def find_element_contain_after(self, locator: By, text: str, wait_seconds: float) -> "ElementHandle":
        """Wait until a match's rendered text includes ``text``."""
        locator = _require_locator(locator)
        if not text:
            raise PreconditionError("Text to look for must not be empty")
        probe = conditions.contains(self.driver, self.node, locator, text)
        nodes = await self._wait(probe, wait_seconds, f"{locator} to contain {text!r}")
        return self._wrap(nodes[0])

    # ─────────────────────────────────────────────────────────────────────────
    # Collection lookups
    # ─────────────────────────────────────────────────────────────────────────

    async def find_elements_present(self, locator: By) -> List["ElementHandle"]:
        return await self.find_elements_present_after(locator, self.wait_seconds)

    async def find_elements_present_after(self, locator: By, wait_seconds: float) -> List["ElementHandle"]:
        """Every node matching at the moment the first match appears."""
        locator = _require_locator(locator)
        probe = conditions.present(self.driver, self.node, locator)
        nodes = await self._wait(probe, wait_seconds, f"elements {locator} to be present")
        return [self._wrap(node) for node in nodes]

    async def find_elements_visible(self, locator: By) -> List["ElementHandle"]:
        return await self.find_elements_visible_after(locator, self.wait_seconds)

    async def find_elements_visible_after(self, locator: By, wait_seconds: float) -> List["ElementHandle"]:
        locator = _require_locator(locator)
        probe = conditions.visible(self.driver, self.node, locator)
        nodes = await self._wait(probe, wait_seconds, f"elements {locator} to be visible")
        return [self._wrap(node) for node in nodes]

    async def find_elements_clickable(self, locator: By) -> List["ElementHandle"]:
        return await self.find_elements_clickable_after(locator, self.wait_seconds)

    async def find_elements_clickable_after(self, locator: By, wait_seconds: float) -> List["ElementHandle"]:
        locator = _require_locator(locator)
        probe = conditions.clickable(self.driver, self.node, locator)
        nodes = await self._wait(probe, wait_seconds, f"elements {locator} to be clickable")
        return [self._wrap(node) for node in nodes]

    # ─────────────────────────────────────────────────────────────────────────
    # Boolean queries
    # ─────────────────────────────────────────────────────────────────────────

    async def is_element_present(self, locator: By) -> bool:
        return await self.is_element_present_after(locator, self.wait_seconds)

    async def is_element_present_after(self, locator: By, wait_seconds: float) -> bool:
        try:
            await self.find_element_present_after(locator, wait_seconds)
            return True
        except WaitTimeoutError:
            return False

    async def is_element_present_immediate(self, locator: By) -> bool:
        return await self.is_element_present_after(locator, 0)

    async def is_element_visible(self, locator: By) -> bool:
        return await self.is_element_visible_after(locator, self.wait_seconds)

    async def is_element_visible_after(self, locator: By, wait_seconds: float) -> bool:
        try:
            await self.find_element_visible_after(locator, wait_seconds)
            return True
        except WaitTimeoutError:
            return False

    async def is_element_visible_immediate(self, locator: By) -> bool:
        return await self.is_element_visible_after(locator, 0)

    async def is_element_clickable(self, locator: By) -> bool:
        return await self.is_element_clickable_after(locator, self.wait_seconds)

    async def is_element_clickable_after(self, locator: By, wait_seconds: float) -> bool:
        try:
            await self.find_element_clickable_after(locator, wait_seconds)
            return True
        except WaitTimeoutError:
            return False

    async def is_element_clickable_immediate(self, locator: By) -> bool:
        return await self.is_element_clickable_after(locator, 0)

    # ─────────────────────────────────────────────────────────────────────────
    # Absence
    # ─────────────────────────────────────────────────────────────────────────

    async def wait_element_to_not_be_present(self, locator: By) -> None:
        await self.wait_element_to_not_be_present_after(locator, self.wait_seconds)

    async def wait_element_to_not_be_present_after(self, locator: By, wait_seconds: float) -> None:
        locator = _require_locator(locator)
        probe = conditions.absent(self.driver, self.node, locator, LocateMode.ANY)
        await self._wait(probe, wait_seconds, f"{locator} to not be present")

    async def wait_element_to_not_be_visible(self, locator: By) -> None:
        await self.wait_element_to_not_be_visible_after(locator, self.wait_seconds)

    async def wait_element_to_not_be_visible_after(self, locator: By, wait_seconds: float) -> None:
        locator = _require_locator(locator)
        probe = conditions.absent(self.driver, self.node, locator, LocateMode.VISIBLE)
        await self._wait(probe, wait_seconds, f"{locator} to not be visible")

    # ─────────────────────────────────────────────────────────────────────────
    # Composite
    # ─────────────────────────────────────────────────────────────────────────

    async def click_and_present(self, click: By, wait: By) -> "ElementHandle":
        return await self.click_and_present_after(click, wait, self.wait_seconds)

    async def click_and_present_after(self, click: By, wait: By, wait_seconds: float) -> "ElementHandle":
        """Click ``click`` once clickable, then wait for ``wait`` to be present.

        Each half gets its own ``wait_seconds`` budget.
        """
        _require_locator(click)
        _require_locator(wait)
        target = await self.find_element_clickable_after(click, wait_seconds)
        await target.click()
        return await self.find_element_present_after(wait, wait_seconds)


class DocumentScope(SearchScope):
    """Search scope covering the whole document."""

    def __init__(self, driver: ElementDriver, **kwargs: Any):
        super().__init__(driver, None, **kwargs)

    def __repr__(self) -> str:
        return f"DocumentScope(wait_seconds={self.wait_seconds})"


class ElementHandle(SearchScope):
    """A resolved node that is also a search scope for nested lookups.

    Handles are not refreshed: if the page changes underneath, the next
    operation surfaces the driver's stale-element error.
    """

    def __init__(self, driver: ElementDriver, node: Any, **kwargs: Any):
        if node is None:
            raise PreconditionError("Element handle requires a node")
        super().__init__(driver, node, **kwargs)

    def __repr__(self) -> str:
        return f"ElementHandle({self.node!r})"

    async def click(self) -> None:
        await self.driver.click(self.node)

    async def type_text(self, text: str, clear: bool = False) -> None:
        await self.driver.type_text(self.node, text, clear=clear)

    async def text(self) -> str:
        return await self.driver.text(self.node)

    async def position(self) -> Optional[tuple[float, float]]:
        return await self.driver.position(self.node)

    async def attribute(self, name: str) -> Optional[str]:
        return await self.driver.attribute(self.node, name)
