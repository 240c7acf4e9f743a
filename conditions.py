"""Probes for the element conditions the wait layer polls on.

Each builder returns a zero-argument coroutine function suitable for
``polling.poll_until``: it returns the matching nodes when the condition
holds and raises ``ConditionNotMet`` when it does not hold yet. Driver
errors are not caught here.
"""
from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, List

from driver import By, ElementDriver, LocateMode
from exceptions import ConditionNotMet

Probe = Callable[[], Awaitable[List[Any]]]


def _matching(driver: ElementDriver, scope: Any, locator: By, mode: LocateMode) -> Probe:
    async def probe() -> List[Any]:
        nodes = await driver.locate(scope, locator, mode)
        if not nodes:
            raise ConditionNotMet(f"No {mode.value} element for {locator}")
        return nodes

    return probe


def present(driver: ElementDriver, scope: Any, locator: By) -> Probe:
    return _matching(driver, scope, locator, LocateMode.ANY)


def visible(driver: ElementDriver, scope: Any, locator: By) -> Probe:
    return _matching(driver, scope, locator, LocateMode.VISIBLE)


def clickable(driver: ElementDriver, scope: Any, locator: By) -> Probe:
    return _matching(driver, scope, locator, LocateMode.CLICKABLE)


def not_moving(driver: ElementDriver, scope: Any, locator: By, interval: float) -> Probe:
    """First match whose position is the same in two samples ``interval`` apart."""

    async def probe() -> List[Any]:
        nodes = await driver.locate(scope, locator, LocateMode.ANY)
        if not nodes:
            raise ConditionNotMet(f"No element present for {locator}")
        node = nodes[0]
        before = await driver.position(node)
        if before is None:
            raise ConditionNotMet(f"Element {locator} is not rendered")
        await asyncio.sleep(interval)
        after = await driver.position(node)
        if before != after:
            raise ConditionNotMet(f"Element {locator} moved from {before} to {after}")
        return [node]

    return probe


def contains(driver: ElementDriver, scope: Any, locator: By, text: str) -> Probe:
    """First match whose rendered text includes ``text``."""

    async def probe() -> List[Any]:
        nodes = await driver.locate(scope, locator, LocateMode.ANY)
        for node in nodes:
            if text in (await driver.text(node) or ""):
                return [node]
        raise ConditionNotMet(f"No element for {locator} contains {text!r}")

    return probe


def absent(driver: ElementDriver, scope: Any, locator: By, mode: LocateMode) -> Probe:
    """Holds once no node matches ``locator`` under ``mode``."""

    async def probe() -> List[Any]:
        nodes = await driver.locate(scope, locator, mode)
        if nodes:
            raise ConditionNotMet(f"{len(nodes)} {mode.value} element(s) still match {locator}")
        return []

    return probe
