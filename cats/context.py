from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class PathContext:
    """One segment of a "where did this fail" chain.

    Nodes are immutable; ``push`` returns a new node whose parent is this
    one, so sibling branches of a recursive walk share their common prefix
    without ever seeing each other's segments.
    """

    segment: str
    parent: Optional["PathContext"] = None

    def push(self, segment: str) -> "PathContext":
        return PathContext(segment, self)

    def segments(self) -> List[str]:
        out: List[str] = []
        node: Optional[PathContext] = self
        while node is not None:
            out.append(node.segment)
            node = node.parent
        out.reverse()
        return out

    def depth(self) -> int:
        n = 0
        node = self.parent
        while node is not None:
            n += 1
            node = node.parent
        return n

    def render(self) -> str:
        return "/".join(self.segments())

    def __str__(self) -> str:
        return self.render()
