"""Test discovery over suite classes and the validity filter."""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Callable, FrozenSet, Iterable, List, Optional, Set

from exceptions import TestDefinitionError

_MARKER_ATTR = "__steady_markers__"
_TAGS_ATTR = "__steady_tags__"
_SKIP_REASON_ATTR = "__steady_skip_reason__"
_QUARANTINE_REASON_ATTR = "__steady_quarantine_reason__"


class Marker(enum.Flag):
    """Structural markers a test method can carry."""
    NONE = 0
    TEST = enum.auto()
    SKIP = enum.auto()
    QUARANTINE = enum.auto()


def _add_marker(func: Callable, marker: Marker) -> Callable:
    current = getattr(func, _MARKER_ATTR, Marker.NONE)
    setattr(func, _MARKER_ATTR, current | marker)
    return func


def test(func: Callable) -> Callable:
    """Mark a suite method as a test."""
    return _add_marker(func, Marker.TEST)


# Keep pytest from collecting the decorator when imported into test modules.
test.__test__ = False


def skip(reason: Optional[str] = None) -> Callable[[Callable], Callable]:
    def decorator(func: Callable) -> Callable:
        setattr(func, _SKIP_REASON_ATTR, reason)
        return _add_marker(func, Marker.SKIP)

    return decorator


def quarantine(reason: Optional[str] = None) -> Callable[[Callable], Callable]:
    """Exclude a flaky test from runs until it is fixed."""

    def decorator(func: Callable) -> Callable:
        setattr(func, _QUARANTINE_REASON_ATTR, reason)
        return _add_marker(func, Marker.QUARANTINE)

    return decorator


def tag(*names: str) -> Callable[[Callable], Callable]:
    def decorator(func: Callable) -> Callable:
        current = getattr(func, _TAGS_ATTR, frozenset())
        setattr(func, _TAGS_ATTR, current | frozenset(names))
        return func

    return decorator


@dataclass(frozen=True)
class TestDescriptor:
    """One declared method of a suite class and the markers it carries."""

    __test__ = False

    suite_class: type
    method_name: str
    markers: Marker = Marker.NONE
    tags: FrozenSet[str] = field(default_factory=frozenset)
    skip_reason: Optional[str] = None
    quarantine_reason: Optional[str] = None

    @property
    def name(self) -> str:
        return f"{self.suite_class.__name__}.{self.method_name}"

    def has_marker(self, marker: Marker) -> bool:
        return marker in self.markers

    def has_tag(self, tag_name: str) -> bool:
        """Check if test has a specific tag."""
        return tag_name.lower() in {t.lower() for t in self.tags}

    def has_any_tag(self, tags: Set[str]) -> bool:
        lower_tags = {t.lower() for t in tags}
        return bool(lower_tags & {t.lower() for t in self.tags})

    def matches_filter(
        self,
        include_tags: Optional[Set[str]] = None,
        exclude_tags: Optional[Set[str]] = None,
    ) -> bool:
        """Check if test matches tag filters."""
        if include_tags and not self.has_any_tag(include_tags):
            return False
        if exclude_tags and self.has_any_tag(exclude_tags):
            return False
        return True


def _describe(suite_class: type, name: str, member: Any) -> TestDescriptor:
    return TestDescriptor(
        suite_class=suite_class,
        method_name=name,
        markers=getattr(member, _MARKER_ATTR, Marker.NONE),
        tags=frozenset(getattr(member, _TAGS_ATTR, frozenset())),
        skip_reason=getattr(member, _SKIP_REASON_ATTR, None),
        quarantine_reason=getattr(member, _QUARANTINE_REASON_ATTR, None),
    )


def discover(suite_class: type) -> List[TestDescriptor]:
    """
    Describe every method declared on ``suite_class`` and its bases.

    Methods are listed in declaration order, base classes first; an
    override replaces the inherited method in place.
    """
    if not isinstance(suite_class, type):
        raise TestDefinitionError(f"Expected a suite class, got {type(suite_class).__name__}")

    members: dict[str, Any] = {}
    for klass in reversed(suite_class.__mro__):
        if klass is object:
            continue
        for name, member in vars(klass).items():
            if name.startswith("__") or not callable(member):
                continue
            members[name] = member

    return [_describe(suite_class, name, member) for name, member in members.items()]


def is_valid(descriptor: TestDescriptor) -> bool:
    """A test runs only if marked as a test and neither skipped nor quarantined."""
    return (
        descriptor.has_marker(Marker.TEST)
        and not descriptor.has_marker(Marker.SKIP)
        and not descriptor.has_marker(Marker.QUARANTINE)
    )


def select_tests(
    descriptors: Iterable[TestDescriptor],
    only_names: Optional[Iterable[str]] = None,
    include_tags: Optional[Set[str]] = None,
    exclude_tags: Optional[Set[str]] = None,
) -> List[TestDescriptor]:
    """
    Keep the valid descriptors that pass the optional filters.

    Args:
        descriptors: Output of ``discover``
        only_names: If provided, only keep tests with these method names
        include_tags: If provided, only keep tests with at least one of these tags
        exclude_tags: If provided, drop tests with any of these tags

    Returns:
        Valid descriptors in discovery order
    """
    name_filter = set(only_names or [])
    found: List[TestDescriptor] = []

    for descriptor in descriptors:
        if not is_valid(descriptor):
            continue
        if name_filter and descriptor.method_name not in name_filter:
            continue
        if not descriptor.matches_filter(include_tags, exclude_tags):
            continue
        found.append(descriptor)

    if name_filter:
        missing = name_filter - {d.method_name for d in found}
        if missing:
            raise TestDefinitionError(f"Tests not found or not runnable: {', '.join(sorted(missing))}")

    return found
