"""RVM detector.

Entry point: detect_rvm(environment) -> Installation | None

Root lookup order:
  1. ``rvm_path`` environment variable
  2. ``$HOME/.rvm``
  3. system roots (``/usr/local/rvm`` by default)

A candidate is accepted only when it contains ``bin/rvm-shell``.
"""

import logging
from pathlib import Path
from typing import Iterable, Mapping, Optional

from rubyrunner.core.config import DEFAULT_RVM_SYSTEM_ROOTS
from rubyrunner.detector import interpreters
from rubyrunner.detector.types import Installation, ManagerKind, is_valid_root

logger = logging.getLogger(__name__)

RVM_PATH_ENV = "rvm_path"
HOME_DIR_NAME = ".rvm"


def detect_rvm_from_env(environment: Mapping[str, str]) -> Optional[Installation]:
    """Detect RVM from the ``rvm_path`` hint only."""
    hint = environment.get(RVM_PATH_ENV, "").strip()
    if not hint:
        return None
    root = Path(hint)
    if not is_valid_root(ManagerKind.RVM, root):
        logger.warning(
            "%s=%s does not contain bin/rvm-shell, ignoring", RVM_PATH_ENV, hint
        )
        return None
    return _try_build(root, source="env")


def detect_rvm_from_filesystem(
    environment: Mapping[str, str],
    system_roots: Iterable[str] = DEFAULT_RVM_SYSTEM_ROOTS,
) -> Optional[Installation]:
    """Probe the home directory and system roots for an RVM installation."""
    for root in _candidate_roots(environment, system_roots):
        if is_valid_root(ManagerKind.RVM, root):
            installation = _try_build(root, source="filesystem")
            if installation is not None:
                return installation
            continue
        logger.debug("No RVM at %s", root)
    return None


def detect_rvm(
    environment: Mapping[str, str],
    system_roots: Iterable[str] = DEFAULT_RVM_SYSTEM_ROOTS,
) -> Optional[Installation]:
    """Run full RVM detection; the environment hint wins over probing."""
    return detect_rvm_from_env(environment) or detect_rvm_from_filesystem(
        environment, system_roots
    )


def build_installation(root: Path, source: str) -> Installation:
    """Enumerate rubies, default alias and gemsets of a validated RVM root."""
    rubies = interpreters.list_interpreters(ManagerKind.RVM, root / "rubies")
    installation = Installation(
        kind=ManagerKind.RVM,
        root=root,
        interpreters=rubies,
        default_interpreter=interpreters.rvm_default_interpreter(root, rubies),
        gemsets=interpreters.rvm_gemsets(root, rubies),
        source=source,
    )
    logger.info(
        "Detected RVM at %s (%s): %d interpreters",
        root, source, len(rubies),
    )
    return installation


def _try_build(root: Path, source: str) -> Optional[Installation]:
    try:
        return build_installation(root, source)
    except ValueError as exc:
        # root changed between the probe and enumeration
        logger.warning("Skipping %s: %s", root, exc)
        return None


def _candidate_roots(
    environment: Mapping[str, str],
    system_roots: Iterable[str],
) -> list[Path]:
    candidates: list[Path] = []
    home = environment.get("HOME", "").strip()
    if home:
        candidates.append(Path(home) / HOME_DIR_NAME)
    candidates.extend(Path(p) for p in system_roots)
    return candidates
