"""Unique symbol names for generated code."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Callable

_Writer = Callable[[str], None]


class NamingAuthority:
    """Hands out collision-free symbol names.

    The first request for a base name returns the base itself. Later
    requests for the same base get ``base_N``, where ``N`` is a counter
    shared by all bases and incremented on every suffixed name.

    Reserved names are never handed out and are not declared as globals;
    they stand for identifiers the surrounding routine already defines.
    """

    def __init__(self, reserved: Iterable[str] = ()) -> None:
        self._reserved: set[str] = set(reserved)
        self._names: set[str] = set()
        self._counter = 0

    def get_unique_name(self, base: str) -> str:
        if base not in self:
            self._names.add(base)
            return base

        while True:
            unique = f"{base}_{self._counter}"
            self._counter += 1
            if unique not in self:
                break
        self._names.add(unique)
        return unique

    def reserve(self, name: str) -> None:
        self._reserved.add(name)

    def emit_global_declarations(self, w: _Writer) -> None:
        """Write ``float <name>;`` for every issued name, sorted."""
        for name in sorted(self._names):
            w(f"float {name};")

    @property
    def issued(self) -> frozenset[str]:
        return frozenset(self._names)

    def __contains__(self, name: object) -> bool:
        return name in self._names or name in self._reserved

    def __len__(self) -> int:
        return len(self._names)


_default: NamingAuthority = NamingAuthority()


def default_authority() -> NamingAuthority:
    """Return the process-wide authority used by nodes built without ``names=``."""
    return _default


def reset_default_authority() -> NamingAuthority:
    """Replace the process-wide authority with a fresh one and return it."""
    global _default
    _default = NamingAuthority()
    return _default
