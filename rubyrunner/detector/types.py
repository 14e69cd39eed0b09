"""Shared types for the detector module.

Every detector produces an Installation (or None when the manager is not
installed). Installations compare equal by kind and root only, so a cached
instance stays valid while the manager lives at the same place.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Optional


class ManagerKind(StrEnum):
    """Supported Ruby version managers."""

    RVM = "rvm"
    RBENV = "rbenv"


# Executable that must exist under the root for an installation to be valid.
MANAGER_EXECUTABLES: dict[ManagerKind, str] = {
    ManagerKind.RVM: "bin/rvm-shell",
    ManagerKind.RBENV: "bin/rbenv",
}

# Subdirectory holding one directory per installed interpreter.
INTERPRETERS_DIRS: dict[ManagerKind, str] = {
    ManagerKind.RVM: "rubies",
    ManagerKind.RBENV: "versions",
}


@dataclass(frozen=True)
class Installation:
    """A detected, validated version-manager instance on the host.

    source records how the root was found: "env" for an environment
    variable hint, "filesystem" for a probed candidate directory.
    gemsets maps an RVM interpreter identifier to its gemset names.
    """

    kind: ManagerKind
    root: Path
    interpreters: frozenset[str] = field(default=frozenset(), compare=False)
    default_interpreter: Optional[str] = field(default=None, compare=False)
    gemsets: dict[str, frozenset[str]] = field(default_factory=dict, compare=False, hash=False)
    source: str = field(default="filesystem", compare=False)

    def __post_init__(self) -> None:
        if not is_valid_root(self.kind, self.root):
            raise ValueError(
                f"{self.root} is not a {self.kind} installation "
                f"(missing {MANAGER_EXECUTABLES[self.kind]})"
            )

    @property
    def executable(self) -> Path:
        """Path to the manager executable (rvm-shell or rbenv)."""
        return self.root / MANAGER_EXECUTABLES[self.kind]

    @property
    def interpreters_dir(self) -> Path:
        return self.root / INTERPRETERS_DIRS[self.kind]

    def has_interpreter(self, identifier: str) -> bool:
        return identifier in self.interpreters

    def to_dict(self) -> dict:
        return {
            "kind": str(self.kind),
            "root": str(self.root),
            "interpreters": sorted(self.interpreters),
            "default_interpreter": self.default_interpreter,
            "gemsets": {k: sorted(v) for k, v in sorted(self.gemsets.items())},
            "source": self.source,
        }

    def __repr__(self) -> str:
        return f"<Installation {self.kind} @ {self.root} ({len(self.interpreters)} interpreters)>"


@dataclass(frozen=True)
class InterpreterSelection:
    """Interpreter identifier plus optional gemset.

    An empty identifier means "whatever the manager resolves by itself"
    (.rvmrc, .ruby-version, global default). The gemset is not validated;
    the version manager checks it when the process starts.
    """

    identifier: str = ""
    gemset: Optional[str] = None

    @property
    def ruby_string(self) -> str:
        """RVM ruby string, e.g. ``ruby-1.9.2@rails3``."""
        if not self.identifier:
            return ""
        if self.gemset:
            return f"{self.identifier}@{self.gemset}"
        return self.identifier


def is_valid_root(kind: ManagerKind, root: Path) -> bool:
    """Return True when root exists and contains the manager executable."""
    return root.is_dir() and (root / MANAGER_EXECUTABLES[kind]).is_file()
