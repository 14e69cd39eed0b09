"""Immutable view of a process environment.

Detection and patching work on snapshots instead of ``os.environ`` so they
are deterministic and never touch the calling process's own environment.
"""

import os
from collections.abc import Iterator, Mapping
from typing import Optional


class EnvironmentSnapshot(Mapping[str, str]):
    """Read-only mapping of environment variable name to value."""

    __slots__ = ("_values",)

    def __init__(self, values: Optional[Mapping[str, str]] = None):
        self._values: dict[str, str] = dict(values or {})

    @classmethod
    def from_os(cls) -> "EnvironmentSnapshot":
        """Capture the current process environment."""
        return cls(os.environ)

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, EnvironmentSnapshot):
            return self._values == other._values
        if isinstance(other, Mapping):
            return self._values == dict(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(frozenset(self._values.items()))

    def __repr__(self) -> str:
        return f"<EnvironmentSnapshot {len(self._values)} vars>"

    def with_overrides(self, delta: Mapping[str, str]) -> "EnvironmentSnapshot":
        """Return a copy with every key in ``delta`` set (later wins)."""
        merged = dict(self._values)
        merged.update(delta)
        return EnvironmentSnapshot(merged)

    def prepend_path(self, entry: str, var: str = "PATH") -> str:
        """Return the value ``var`` would have with ``entry`` in front.

        An entry that is already first is not duplicated.
        """
        current = self._values.get(var, "")
        if not current:
            return entry
        parts = current.split(os.pathsep)
        if parts[0] == entry:
            return current
        return os.pathsep.join([entry] + parts)

    def to_dict(self) -> dict[str, str]:
        """Plain mutable copy, suitable for ``subprocess`` ``env=``."""
        return dict(self._values)
