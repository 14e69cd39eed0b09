"""Error taxonomy shared by every stage of a Ruby invocation.

Each error names the stage that failed (detection, patch, materialize,
spawn, wait) and carries the underlying cause text. Absence of a version
manager is not an error: detectors return None for that.
"""

from enum import StrEnum
from typing import Optional


class Stage(StrEnum):
    """Pipeline stage an error originated from."""

    DETECTION = "detection"
    PATCH = "patch"
    MATERIALIZE = "materialize"
    SPAWN = "spawn"
    WAIT = "wait"


class RubyRunnerError(Exception):
    """Base class for all rubyrunner failures."""

    stage: Stage = Stage.DETECTION

    def __init__(self, message: str, cause: Optional[str] = None):
        self.message = message
        self.cause = cause or ""
        super().__init__(self._render())

    def _render(self) -> str:
        text = f"[{self.stage}] {self.message}"
        if self.cause:
            text = f"{text}: {self.cause}"
        return text


class DetectionError(RubyRunnerError):
    """Raised when an operation requires a version manager that is not installed."""

    stage = Stage.DETECTION


class InvalidSelectionError(RubyRunnerError):
    """Requested interpreter is not installed in the detected installation."""

    stage = Stage.PATCH

    def __init__(self, identifier: str, available: frozenset[str]):
        self.identifier = identifier
        self.available = available
        listed = ", ".join(sorted(available)) or "none"
        super().__init__(
            f"Interpreter '{identifier}' is not installed",
            cause=f"available interpreters: {listed}",
        )


class ScriptIOError(RubyRunnerError):
    """Temporary script could not be created, written or made executable."""

    stage = Stage.MATERIALIZE


class SpawnError(RubyRunnerError):
    """Executable could not be launched (not found, permission denied, bad cwd)."""

    stage = Stage.SPAWN

    def __init__(self, command: list[str], cause: str):
        self.command = command
        super().__init__(f"Failed to start {command[0] if command else '<empty>'}", cause=cause)


class WaitError(RubyRunnerError):
    """Process started but could not be awaited."""

    stage = Stage.WAIT

    def __init__(self, command: list[str], cause: str, stdout: str = "", stderr: str = ""):
        self.command = command
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(f"Failed to wait for {command[0] if command else '<empty>'}", cause=cause)
