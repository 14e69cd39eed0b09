"""Detector orchestrator: picks the version manager a build should use.

Detection flow:
1. Environment hints (``rvm_path``, ``RBENV_ROOT``) for every requested kind.
2. Filesystem probing (home directory, PATH, system roots) for every
   requested kind.

An explicit hint always beats a probed directory, whichever manager it
names. Within a phase RVM is checked before rbenv.

Detection is a pure read of the given snapshot and the filesystem: HOME and
PATH come from the snapshot, never from the calling process.
"""

import logging
from typing import Callable, Iterable, Mapping, Optional

from rubyrunner.core.config import Settings, get_settings
from rubyrunner.detector import rbenv, rvm
from rubyrunner.detector.types import Installation, ManagerKind

logger = logging.getLogger(__name__)

DEFAULT_KIND_ORDER = (ManagerKind.RVM, ManagerKind.RBENV)

Detector = Callable[[Mapping[str, str]], Optional[Installation]]


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def detect(
    environment: Mapping[str, str],
    settings: Optional[Settings] = None,
    kinds: Iterable[ManagerKind] = DEFAULT_KIND_ORDER,
) -> Optional[Installation]:
    """Locate an installed version manager.

    Returns None when nothing is installed; callers fall back to a bare
    interpreter in that case.
    """
    settings = settings or get_settings()
    kinds = tuple(kinds)

    for kind in kinds:
        installation = _from_env(kind, environment)
        if installation is not None:
            return installation

    for kind in kinds:
        installation = _from_filesystem(kind, environment, settings)
        if installation is not None:
            return installation

    logger.info("No Ruby version manager detected (checked %s)", ", ".join(kinds))
    return None


def detect_rvm(
    environment: Mapping[str, str],
    settings: Optional[Settings] = None,
) -> Optional[Installation]:
    return detect(environment, settings, kinds=(ManagerKind.RVM,))


def detect_rbenv(
    environment: Mapping[str, str],
    settings: Optional[Settings] = None,
) -> Optional[Installation]:
    return detect(environment, settings, kinds=(ManagerKind.RBENV,))


# ---------------------------------------------------------------------------
# Per-manager routing
# ---------------------------------------------------------------------------

def _from_env(kind: ManagerKind, environment: Mapping[str, str]) -> Optional[Installation]:
    if kind == ManagerKind.RVM:
        return rvm.detect_rvm_from_env(environment)
    return rbenv.detect_rbenv_from_env(environment)


def _from_filesystem(
    kind: ManagerKind,
    environment: Mapping[str, str],
    settings: Settings,
) -> Optional[Installation]:
    if kind == ManagerKind.RVM:
        return rvm.detect_rvm_from_filesystem(environment, settings.rvm_system_roots)
    return rbenv.detect_rbenv_from_filesystem(environment, settings.rbenv_system_roots)
