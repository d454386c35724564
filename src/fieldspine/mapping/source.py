"""Source descriptors.

The resolver only ever reads ``source.pattern``; anything exposing that
attribute works. ``Source`` is a small immutable descriptor for callers
that do not already have one.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class SourceLike(Protocol):
    """Anything addressed by a pattern over backing collections."""

    @property
    def pattern(self) -> str: ...


@dataclass(frozen=True)
class Source:
    """A pattern over backing collections plus query shaping parameters.

    ``size`` and ``query`` do not take part in schema resolution: two sources
    with the same pattern resolve to the same field table.

    Example:
        >>> Source("logs-*", size=5).with_pattern("metrics-*").size
        5
    """

    pattern: str
    size: int | None = None
    query: dict[str, Any] | None = field(default=None, compare=False, hash=False)

    def __post_init__(self) -> None:
        if not self.pattern or not self.pattern.strip():
            raise ValueError("source pattern must be a non-empty string")

    def with_pattern(self, pattern: str) -> Source:
        return replace(self, pattern=pattern)

    def with_size(self, size: int) -> Source:
        return replace(self, size=size)


__all__ = ["Source", "SourceLike"]
