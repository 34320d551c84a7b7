"""Indentation bookkeeping for nested emitted blocks."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager


class Layout:
    """Current block depth and its whitespace prefix.

    ``indent()``/``outdent()`` must be paired; ``block()`` pairs them for you
    and restores the depth even if generation raises.
    """

    def __init__(self, depth: int = 0, unit: str = "\t") -> None:
        self.depth = depth
        self.unit = unit

    def whitespace(self) -> str:
        return self.unit * self.depth

    def indent(self) -> None:
        self.depth += 1

    def outdent(self) -> None:
        self.depth -= 1

    @contextmanager
    def block(self) -> Iterator[Layout]:
        saved = self.depth
        self.depth += 1
        try:
            yield self
        finally:
            self.depth = saved

    def __repr__(self) -> str:
        return f"Layout(depth={self.depth}, unit={self.unit!r})"
