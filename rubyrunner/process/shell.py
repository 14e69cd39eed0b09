"""Running Ruby code under a version manager.

RvmShellRunner: writes a shell script with a ``#!<rvm>/bin/rvm-shell``
    shebang into the working directory and runs it there.
run_under_rvm_shell: ``rvm-shell [ruby-string] -- args...`` for commands.
run_ruby_source: writes Ruby source to a temp ``.rb`` file and runs
    ``interpreter ruby_args... script script_args...``.

Unix only: rvm-shell is a bash script and relies on shebang execution.
"""

import logging
import tempfile
import threading
from pathlib import Path
from typing import Mapping, Optional, Sequence

from rubyrunner.core.config import Settings, get_settings
from rubyrunner.detector.cache import InstallationCache
from rubyrunner.detector.orchestrator import detect_rvm
from rubyrunner.detector.types import Installation, InterpreterSelection, ManagerKind
from rubyrunner.environment.patcher import patch
from rubyrunner.environment.snapshot import EnvironmentSnapshot
from rubyrunner.errors import DetectionError
from rubyrunner.process.runner import StrPath, run, run_script
from rubyrunner.process.types import ProcessResult
from rubyrunner.sandbox.scripts import materialize

logger = logging.getLogger(__name__)


class RvmShellRunner:
    """Runs shell scripts through an RVM installation's rvm-shell."""

    def __init__(self, installation: Installation, settings: Optional[Settings] = None):
        if installation.kind != ManagerKind.RVM:
            raise ValueError(f"RvmShellRunner needs an RVM installation, got {installation.kind}")
        self.installation = installation
        self.settings = settings or get_settings()

    @property
    def shebang(self) -> str:
        return str(self.installation.executable)

    def run(
        self,
        script: str,
        working_directory: StrPath,
        environment: Optional[Mapping[str, str]] = None,
        selection: Optional[InterpreterSelection] = None,
    ) -> ProcessResult:
        """Run ``script`` with rvm-shell from ``working_directory``.

        The script file lives in ``working_directory`` so that the
        directory's ``.rvmrc`` applies; it is deleted afterwards no matter
        how the run ends.
        """
        base = environment if environment is not None else EnvironmentSnapshot.from_os()
        env = patch(base, self.installation, selection)

        with materialize(
            Path(working_directory),
            script,
            shebang=self.shebang,
            prefix=self.settings.script_prefix,
            suffix=".sh",
        ) as script_file:
            return run_script(working_directory, script_file.path, env, settings=self.settings)


_runner_cache = InstallationCache(detector=detect_rvm)
_runner: Optional[RvmShellRunner] = None
_runner_lock = threading.Lock()


def get_rvm_shell_runner(environment: Optional[Mapping[str, str]] = None) -> RvmShellRunner:
    """Return a runner bound to the currently detected RVM installation.

    The runner is reused while detection keeps finding the same RVM
    installation; a new ruby or gemset under the root rebinds it.

    Raises:
        DetectionError: RVM is not installed.
    """
    global _runner
    environment = environment if environment is not None else EnvironmentSnapshot.from_os()
    installation = _runner_cache.get(environment)
    if installation is None:
        raise DetectionError("RVM is not installed", cause="rvm_path unset and no RVM root found")
    with _runner_lock:
        if _runner is None or _runner.installation is not installation:
            _runner = RvmShellRunner(installation)
        return _runner


def run_under_rvm_shell(
    installation: Installation,
    working_directory: StrPath,
    *args: StrPath,
    environment: Optional[Mapping[str, str]] = None,
    selection: Optional[InterpreterSelection] = None,
    settings: Optional[Settings] = None,
) -> ProcessResult:
    """Run ``rvm-shell [ruby-string] -- args...`` in ``working_directory``."""
    if installation.kind != ManagerKind.RVM:
        raise ValueError(f"rvm-shell needs an RVM installation, got {installation.kind}")

    base = environment if environment is not None else EnvironmentSnapshot.from_os()
    env = patch(base, installation, selection)

    argv: list[StrPath] = []
    if selection is not None and selection.ruby_string:
        argv.append(selection.ruby_string)
    argv.append("--")
    argv.extend(args)
    return run(
        installation.executable,
        *argv,
        environment=env,
        working_directory=working_directory,
        settings=settings,
    )


def run_ruby_source(
    interpreter: StrPath,
    source: str,
    *,
    ruby_args: Sequence[str] = (),
    script_args: Sequence[str] = (),
    environment: Optional[Mapping[str, str]] = None,
    installation: Optional[Installation] = None,
    selection: Optional[InterpreterSelection] = None,
    directory: Optional[StrPath] = None,
    settings: Optional[Settings] = None,
) -> ProcessResult:
    """Run Ruby ``source`` with ``interpreter``.

    When an installation is given the environment is patched for it first.
    The temporary ``.rb`` file goes to ``directory`` (system temp dir by
    default) and is removed afterwards.
    """
    env: Mapping[str, str] = (
        environment if environment is not None else EnvironmentSnapshot.from_os()
    )
    if installation is not None:
        env = patch(env, installation, selection)

    target = Path(directory) if directory is not None else Path(tempfile.gettempdir())
    with materialize(target, source, prefix="script", suffix=".rb") as script_file:
        return run(
            interpreter,
            *ruby_args,
            script_file.path,
            *script_args,
            environment=env,
            settings=settings,
        )
