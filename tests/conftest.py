"""Pytest fixtures for steady tests."""
from __future__ import annotations

import tempfile
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

from context import RunContext
from discovery import quarantine, skip, tag, test
from driver import By, ElementDriver, LocateMode
from elements import DocumentScope
from suite_types import Outcome


@dataclass(eq=False)
class FakeNode:
    """In-memory stand-in for a page node."""

    name: str
    visible: bool = True
    enabled: bool = True
    text: str = ""
    positions: List[tuple] = field(default_factory=lambda: [(0.0, 0.0)])
    children: Dict[By, List["FakeNode"]] = field(default_factory=dict)
    position_calls: int = 0

    def next_position(self) -> Optional[tuple]:
        index = min(self.position_calls, len(self.positions) - 1)
        self.position_calls += 1
        return self.positions[index]


class FakeDriver(ElementDriver):
    """
    Element driver over a dict of locator -> nodes.

    ``schedule`` queues successive results for a locator; the last queued
    result keeps being returned once the queue runs out.
    """

    def __init__(self, session_id: Optional[str] = "fake-session"):
        self._session_id = session_id
        self.dom: Dict[By, List[FakeNode]] = {}
        self.schedules: Dict[By, List[List[FakeNode]]] = {}
        self.errors: Dict[By, Exception] = {}
        self.locate_calls: List[tuple] = []
        self.clicked: List[FakeNode] = []
        self.typed: List[tuple] = []

    @property
    def session_id(self) -> Optional[str]:
        return self._session_id

    def node(self, name: str, **kwargs: Any) -> FakeNode:
        return FakeNode(name=name, **kwargs)

    def add(self, locator: By, *nodes: FakeNode) -> None:
        self.dom.setdefault(locator, []).extend(nodes)

    def schedule(self, locator: By, *results: List[FakeNode]) -> None:
        self.schedules[locator] = list(results)

    def locate_count(self, locator: By) -> int:
        return sum(1 for call in self.locate_calls if call[1] == locator)

    async def locate(self, scope: Any, locator: By, mode: LocateMode) -> List[Any]:
        self.locate_calls.append((scope, locator, mode))
        if locator in self.errors:
            raise self.errors[locator]
        if scope is None and locator in self.schedules:
            queue = self.schedules[locator]
            nodes = queue.pop(0) if len(queue) > 1 else queue[0]
        elif scope is None:
            nodes = self.dom.get(locator, [])
        else:
            nodes = scope.children.get(locator, [])
        if mode is LocateMode.VISIBLE:
            return [n for n in nodes if n.visible]
        if mode is LocateMode.CLICKABLE:
            return [n for n in nodes if n.visible and n.enabled]
        return list(nodes)

    async def click(self, node: Any) -> None:
        self.clicked.append(node)

    async def type_text(self, node: Any, text: str, clear: bool = False) -> None:
        self.typed.append((node, text, clear))

    async def text(self, node: Any) -> str:
        return node.text

    async def position(self, node: Any) -> Optional[tuple]:
        return node.next_position()

    async def attribute(self, node: Any, name: str) -> Optional[str]:
        return getattr(node, name, None)


@pytest.fixture
def fake_driver() -> FakeDriver:
    return FakeDriver()


@pytest.fixture
def document(fake_driver: FakeDriver) -> DocumentScope:
    """Document scope with short waits so timeouts stay fast."""
    return DocumentScope(
        fake_driver,
        wait_seconds=0.3,
        poll_interval=0.02,
        not_moving_interval=0.01,
    )


@pytest.fixture
def run_context() -> RunContext:
    return RunContext(unique_id="1234567890", wait_seconds=0.3, poll_interval=0.02, not_moving_interval=0.01)


@pytest.fixture
def temp_dir() -> Path:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


class MarkedSuite:
    """Suite mirroring every marker combination."""

    def helper(self, ctx):
        pass

    @test
    async def a(self, ctx):
        pass

    @test
    @skip("broken on staging")
    async def b(self, ctx):
        pass

    @test
    @skip()
    @quarantine("flaky")
    async def c(self, ctx):
        pass

    @test
    @quarantine("flaky")
    async def d(self, ctx):
        pass

    @test
    @tag("smoke")
    async def e(self, ctx):
        pass


@pytest.fixture
def marked_suite() -> type:
    return MarkedSuite


@pytest.fixture
def sample_outcome(marked_suite: type) -> Outcome:
    from discovery import discover

    descriptor = next(d for d in discover(marked_suite) if d.method_name == "a")
    return Outcome(
        descriptor=descriptor,
        passed=True,
        started_at=datetime(2024, 1, 1, 10, 0, 0),
        finished_at=datetime(2024, 1, 1, 10, 0, 30),
        session_id="abc123",
        unique_id="1234567890",
        attempts=1,
    )
