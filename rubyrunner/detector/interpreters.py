"""Interpreter enumeration helpers shared by the RVM and rbenv detectors."""

import logging
import re
from pathlib import Path
from typing import Iterable, Optional

from rubyrunner.detector.types import Installation, ManagerKind

logger = logging.getLogger(__name__)

# Ruby implementations RVM and rbenv (via ruby-build) know how to install.
KNOWN_IMPLEMENTATIONS = (
    "ruby",
    "jruby",
    "ree",
    "rbx",
    "maglev",
    "macruby",
    "ironruby",
    "truffleruby",
    "mruby",
    "topaz",
)

# RVM directory names: implementation, optionally followed by "-<version>..."
_RVM_NAME_RE = re.compile(
    r"^(?:%s)(?:-\d[\w.\-]*)?$" % "|".join(KNOWN_IMPLEMENTATIONS)
)

# rbenv version names: bare "2.7.1", "jruby-9.2.0.0", "truffleruby-22.1.0" ...
_RBENV_NAME_RE = re.compile(
    r"^(?:(?:%s)-)?\d+\.\d+[\w.\-]*$|^(?:%s)$"
    % ("|".join(KNOWN_IMPLEMENTATIONS), "|".join(KNOWN_IMPLEMENTATIONS))
)

# Patch-level suffix in RVM names: ruby-1.9.2-p320
_PATCH_LEVEL_RE = re.compile(r"-p\d+")

_NAME_PATTERNS: dict[ManagerKind, re.Pattern] = {
    ManagerKind.RVM: _RVM_NAME_RE,
    ManagerKind.RBENV: _RBENV_NAME_RE,
}

# Executable names inside <interpreter>/bin, in lookup order.
INTERPRETER_EXECUTABLES = ("ruby", "jruby")


def is_interpreter_name(kind: ManagerKind, name: str) -> bool:
    """Return True if a directory name looks like an installed interpreter."""
    return bool(_NAME_PATTERNS[kind].match(name))


def list_interpreters(kind: ManagerKind, directory: Path) -> frozenset[str]:
    """List interpreter identifiers found in a rubies/ or versions/ directory.

    Symlinks are skipped (RVM keeps a ``default`` alias next to the real
    interpreters). A missing or unreadable directory yields an empty set.
    """
    if not directory.is_dir():
        return frozenset()

    try:
        entries = list(directory.iterdir())
    except OSError as exc:
        logger.warning("Cannot list interpreters in %s: %s", directory, exc)
        return frozenset()

    names = {
        entry.name
        for entry in entries
        if entry.is_dir()
        and not entry.is_symlink()
        and is_interpreter_name(kind, entry.name)
    }
    return frozenset(names)


def rvm_default_interpreter(root: Path, interpreters: frozenset[str]) -> Optional[str]:
    """Resolve RVM's ``rubies/default`` alias to an installed interpreter."""
    alias = root / "rubies" / "default"
    if not alias.is_symlink():
        return None
    try:
        name = alias.resolve().name
    except OSError:
        return None
    return name if name in interpreters else None


def rbenv_default_interpreter(root: Path, interpreters: frozenset[str]) -> Optional[str]:
    """Read rbenv's global ``version`` file."""
    version_file = root / "version"
    if not version_file.is_file():
        return None
    try:
        lines = version_file.read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Failed to read %s: %s", version_file, exc)
        return None
    name = lines[0].strip() if lines else ""
    return name if name in interpreters else None


def rvm_gemsets(root: Path, interpreters: frozenset[str]) -> dict[str, frozenset[str]]:
    """Map each interpreter to the gemsets found under ``<root>/gems``.

    RVM stores gemsets as ``gems/<interpreter>@<gemset>`` directories.
    """
    gems_dir = root / "gems"
    if not gems_dir.is_dir():
        return {}

    found: dict[str, set[str]] = {}
    try:
        entries = list(gems_dir.iterdir())
    except OSError as exc:
        logger.warning("Cannot list gemsets in %s: %s", gems_dir, exc)
        return {}

    for entry in entries:
        if "@" not in entry.name or not entry.is_dir():
            continue
        interpreter, _, gemset = entry.name.partition("@")
        if interpreter in interpreters and gemset:
            found.setdefault(interpreter, set()).add(gemset)
    return {k: frozenset(v) for k, v in found.items()}


def interpreter_executable(installation: Installation, identifier: str) -> Optional[Path]:
    """Return the ruby/jruby executable of an installed interpreter.

    None when the identifier is unknown or its ``bin`` directory has no
    recognised executable.
    """
    if not installation.has_interpreter(identifier):
        return None
    bin_dir = installation.interpreters_dir / identifier / "bin"
    for name in INTERPRETER_EXECUTABLES:
        candidate = bin_dir / name
        if candidate.is_file():
            return candidate
    return None


def _version_key(name: str) -> tuple:
    # Digit runs compare numerically, everything else lexically.
    parts = re.split(r"(\d+)", name)
    return tuple((0, int(p)) if p.isdigit() else (1, p) for p in parts if p)


def latest_patch_versions(identifiers: Iterable[str]) -> set[str]:
    """Keep only the newest patch level of each interpreter version.

    ``{"ruby-1.9.2-p180", "ruby-1.9.2-p320", "jruby"}`` becomes
    ``{"ruby-1.9.2-p320", "jruby"}``.
    """
    latest: dict[str, str] = {}
    for name in identifiers:
        base = _PATCH_LEVEL_RE.sub("", name)
        current = latest.get(base)
        if current is None or _version_key(current) < _version_key(name):
            latest[base] = name
    return set(latest.values())
