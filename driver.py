"""Locator values and the element driver interface the wait layer builds on."""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional


class LocateMode(str, Enum):
    """Which matching nodes a locate call returns."""
    ANY = "any"
    VISIBLE = "visible"
    CLICKABLE = "clickable"


@dataclass(frozen=True)
class By:
    """Selection rule for zero or more nodes within a search scope."""

    strategy: str
    value: str

    def __str__(self) -> str:
        return f"By.{self.strategy}: {self.value}"

    @classmethod
    def css(cls, selector: str) -> "By":
        return cls("css", selector)

    @classmethod
    def xpath(cls, expression: str) -> "By":
        return cls("xpath", expression)

    @classmethod
    def id(cls, element_id: str) -> "By":
        return cls("id", element_id)

    @classmethod
    def name(cls, name: str) -> "By":
        return cls("name", name)

    @classmethod
    def class_name(cls, class_name: str) -> "By":
        return cls("class_name", class_name)

    @classmethod
    def tag_name(cls, tag: str) -> "By":
        return cls("tag_name", tag)

    @classmethod
    def text(cls, text: str) -> "By":
        return cls("text", text)

    @classmethod
    def link_text(cls, text: str) -> "By":
        return cls("link_text", text)


class ElementDriver(ABC):
    """
    Capability consumed by the wait layer.

    Nodes are opaque references owned by the driver. ``scope`` is either
    ``None`` (the whole document) or a node returned by an earlier
    ``locate`` call.
    """

    @property
    @abstractmethod
    def session_id(self) -> Optional[str]:
        """Identifier of the automation session, or None before it exists."""
        pass

    @abstractmethod
    async def locate(self, scope: Any, locator: By, mode: LocateMode) -> List[Any]:
        """
        Return the nodes under ``scope`` matching ``locator`` and ``mode``.

        Returns an empty list when nothing matches. Raises a
        ``StructuralError`` for faults that retrying cannot fix, such as a
        malformed locator.
        """
        pass

    @abstractmethod
    async def click(self, node: Any) -> None:
        pass

    @abstractmethod
    async def type_text(self, node: Any, text: str, clear: bool = False) -> None:
        pass

    @abstractmethod
    async def text(self, node: Any) -> str:
        """Rendered text of the node."""
        pass

    @abstractmethod
    async def position(self, node: Any) -> Optional[tuple[float, float]]:
        """Top-left corner of the node on screen, or None if it has no layout box."""
        pass

    @abstractmethod
    async def attribute(self, node: Any, name: str) -> Optional[str]:
        pass
