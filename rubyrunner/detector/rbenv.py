"""rbenv detector.

Entry point: detect_rbenv(environment) -> Installation | None

Root lookup order:
  1. ``RBENV_ROOT`` environment variable
  2. ``$HOME/.rbenv``
  3. the ``rbenv`` executable found on the snapshot's PATH
     (root is the parent of its ``bin/`` directory)
  4. configured system roots

A candidate is accepted only when it contains ``bin/rbenv``.
"""

import logging
import shutil
from pathlib import Path
from typing import Iterable, Mapping, Optional

from rubyrunner.detector import interpreters
from rubyrunner.detector.types import Installation, ManagerKind, is_valid_root

logger = logging.getLogger(__name__)

RBENV_ROOT_ENV = "RBENV_ROOT"
HOME_DIR_NAME = ".rbenv"


def detect_rbenv_from_env(environment: Mapping[str, str]) -> Optional[Installation]:
    """Detect rbenv from the ``RBENV_ROOT`` hint only."""
    hint = environment.get(RBENV_ROOT_ENV, "").strip()
    if not hint:
        return None
    root = Path(hint)
    if not is_valid_root(ManagerKind.RBENV, root):
        logger.warning(
            "%s=%s does not contain bin/rbenv, ignoring", RBENV_ROOT_ENV, hint
        )
        return None
    return _try_build(root, source="env")


def detect_rbenv_from_filesystem(
    environment: Mapping[str, str],
    system_roots: Iterable[str] = (),
) -> Optional[Installation]:
    """Probe home directory, PATH and system roots for rbenv."""
    for root in _candidate_roots(environment, system_roots):
        if is_valid_root(ManagerKind.RBENV, root):
            installation = _try_build(root, source="filesystem")
            if installation is not None:
                return installation
            continue
        logger.debug("No rbenv at %s", root)
    return None


def detect_rbenv(
    environment: Mapping[str, str],
    system_roots: Iterable[str] = (),
) -> Optional[Installation]:
    """Run full rbenv detection; the environment hint wins over probing."""
    return detect_rbenv_from_env(environment) or detect_rbenv_from_filesystem(
        environment, system_roots
    )


def build_installation(root: Path, source: str) -> Installation:
    """Enumerate versions and the global version of a validated rbenv root."""
    versions = interpreters.list_interpreters(ManagerKind.RBENV, root / "versions")
    installation = Installation(
        kind=ManagerKind.RBENV,
        root=root,
        interpreters=versions,
        default_interpreter=interpreters.rbenv_default_interpreter(root, versions),
        source=source,
    )
    logger.info(
        "Detected rbenv at %s (%s): %d versions",
        root, source, len(versions),
    )
    return installation


def _root_from_path(environment: Mapping[str, str]) -> Optional[Path]:
    search_path = environment.get("PATH")
    if not search_path:
        return None
    found = shutil.which("rbenv", path=search_path)
    if not found:
        return None
    # Package managers often symlink bin/rbenv into /usr/local/bin.
    resolved = Path(found).resolve()
    if resolved.parent.name != "bin":
        return None
    return resolved.parent.parent


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
    path_root = _root_from_path(environment)
    if path_root is not None:
        candidates.append(path_root)
    candidates.extend(Path(p) for p in system_roots)
    return candidates
