"""Types for process execution."""

import signal
from dataclasses import dataclass
from typing import Optional


@dataclass
class ProcessResult:
    """Captured output and termination status of one child process.

    stdout_bytes/stderr_bytes hold the exact bytes each stream produced;
    stdout/stderr are the same contents decoded with the locale encoding
    (undecodable bytes become U+FFFD). Nothing is truncated.
    exit_code is the raw return code (negative when killed by a signal, in
    which case failure_reason names the signal). A non-zero exit code is
    ordinary data for the caller to interpret, not an error.
    """

    command: list[str]
    exit_code: int
    stdout: str = ""
    stderr: str = ""
    stdout_bytes: bytes = b""
    stderr_bytes: bytes = b""
    duration_seconds: float = 0.0
    failure_reason: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return self.exit_code == 0

    def to_dict(self) -> dict:
        return {
            "command": self.command,
            "exit_code": self.exit_code,
            "failure_reason": self.failure_reason,
            "duration_seconds": round(self.duration_seconds, 3),
            "stdout_lines": self.stdout.count("\n") + 1 if self.stdout else 0,
            "stderr_lines": self.stderr.count("\n") + 1 if self.stderr else 0,
            "is_success": self.is_success,
        }


def describe_return_code(returncode: int) -> Optional[str]:
    """Failure reason for a signal-terminated child, None otherwise."""
    if returncode >= 0:
        return None
    try:
        name = signal.Signals(-returncode).name
    except ValueError:
        name = f"signal {-returncode}"
    return f"terminated by {name}"
