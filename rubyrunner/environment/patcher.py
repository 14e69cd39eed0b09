"""Environment patching for version-manager shells.

Computes the variables a child process needs to resolve rubies and gems the
way the version manager's own shell would:

  RVM: rvm_path, rvm_trust_rvmrcs_flag=1 (honour .rvmrc/.ruby-version
          without an interactive prompt), rvm_ruby_string for an explicit
          selection. PATH is left alone; rvm-shell sets it up at spawn time.
  rbenv: RBENV_ROOT, RBENV_VERSION for an explicit selection, and the
          shims directory prepended to PATH.

Every key is an override except PATH under rbenv, which is prepended.
"""

import logging
from typing import Mapping, Optional

from rubyrunner.detector.types import Installation, InterpreterSelection, ManagerKind
from rubyrunner.environment.snapshot import EnvironmentSnapshot
from rubyrunner.errors import InvalidSelectionError

logger = logging.getLogger(__name__)

RVM_PATH = "rvm_path"
RVM_TRUST_RVMRCS_FLAG = "rvm_trust_rvmrcs_flag"
RVM_RUBY_STRING = "rvm_ruby_string"
RBENV_ROOT = "RBENV_ROOT"
RBENV_VERSION = "RBENV_VERSION"


def validate_selection(installation: Installation, selection: InterpreterSelection) -> None:
    """Raise InvalidSelectionError if the identifier is not installed.

    An empty identifier is always valid. The selection is never replaced by
    a different interpreter.
    """
    if selection.identifier and not installation.has_interpreter(selection.identifier):
        raise InvalidSelectionError(selection.identifier, installation.interpreters)


def environment_delta(
    base: Mapping[str, str],
    installation: Installation,
    selection: Optional[InterpreterSelection] = None,
) -> dict[str, str]:
    """Return the ordered variable overrides for ``installation``."""
    selection = selection or InterpreterSelection()
    validate_selection(installation, selection)

    if installation.kind == ManagerKind.RVM:
        return _rvm_delta(installation, selection)
    return _rbenv_delta(EnvironmentSnapshot(base), installation, selection)


def patch(
    base: Mapping[str, str],
    installation: Installation,
    selection: Optional[InterpreterSelection] = None,
) -> EnvironmentSnapshot:
    """Return a new snapshot with the version-manager variables applied.

    ``base`` is never modified.
    """
    snapshot = base if isinstance(base, EnvironmentSnapshot) else EnvironmentSnapshot(base)
    delta = environment_delta(snapshot, installation, selection)
    logger.debug("Patching environment for %r: %s", installation, sorted(delta))
    return snapshot.with_overrides(delta)


def _rvm_delta(installation: Installation, selection: InterpreterSelection) -> dict[str, str]:
    delta = {
        RVM_PATH: str(installation.root),
        RVM_TRUST_RVMRCS_FLAG: "1",
    }
    if selection.identifier:
        delta[RVM_RUBY_STRING] = selection.ruby_string
    return delta


def _rbenv_delta(
    base: EnvironmentSnapshot,
    installation: Installation,
    selection: InterpreterSelection,
) -> dict[str, str]:
    if selection.gemset:
        logger.warning(
            "rbenv has no gemsets; ignoring gemset '%s' for %s",
            selection.gemset,
            selection.identifier or "the default version",
        )

    delta = {RBENV_ROOT: str(installation.root)}
    if selection.identifier:
        delta[RBENV_VERSION] = selection.identifier
    delta["PATH"] = base.prepend_path(str(installation.root / "shims"))
    return delta
