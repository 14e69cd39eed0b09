"""Blocking process runner with concurrent stdout/stderr capture.

Each call spawns one child and drains its two pipes on two threads, so a
child flooding one stream never stalls on the other. Both drains are joined
before the result is built; per-stream byte order is preserved, ordering
across streams is not reconstructible.

There is no timeout: callers that need one run this on their own worker
and kill the child themselves.
"""

import locale
import logging
import subprocess
import threading
import time
from os import PathLike
from pathlib import Path
from typing import IO, Mapping, Optional, Union

from rubyrunner.core.config import Settings, get_settings
from rubyrunner.errors import SpawnError, WaitError
from rubyrunner.process.types import ProcessResult, describe_return_code
from rubyrunner.sandbox.limits import limits_preexec

logger = logging.getLogger(__name__)

StrPath = Union[str, PathLike]


def run(
    command: StrPath,
    *args: StrPath,
    environment: Optional[Mapping[str, str]] = None,
    working_directory: Optional[StrPath] = None,
    settings: Optional[Settings] = None,
) -> ProcessResult:
    """Run ``command args...`` and wait for it to exit.

    ``environment`` must already be fully resolved (base snapshot plus
    patches); None inherits the current process environment.
    ``working_directory`` None keeps the current directory.

    Raises:
        SpawnError: the executable could not be started.
        WaitError: the child started but could not be awaited.
    """
    settings = settings or get_settings()
    argv = [str(command)] + [str(a) for a in args]
    cwd = str(working_directory) if working_directory is not None else None
    env = dict(environment) if environment is not None else None

    preexec_fn = None
    if settings.resource_limits:
        try:
            preexec_fn = limits_preexec(environment)
        except ValueError as exc:
            raise SpawnError(argv, f"invalid resource limit: {exc}") from exc

    logger.info("Running %s (cwd=%s)", " ".join(argv), cwd or ".")
    start = time.monotonic()

    try:
        process = subprocess.Popen(
            argv,
            cwd=cwd,
            env=env,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            preexec_fn=preexec_fn,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        cause = str(exc) or exc.__class__.__name__
        logger.error("Failed to start %s: %s", argv[0], cause)
        raise SpawnError(argv, cause) from exc

    stdout_drain = _StreamDrain(process.stdout, settings.read_chunk_size, "stdout")
    stderr_drain = _StreamDrain(process.stderr, settings.read_chunk_size, "stderr")
    stdout_drain.start()
    stderr_drain.start()

    try:
        returncode = process.wait()
    except BaseException as exc:
        process.kill()
        stdout_drain.join()
        stderr_drain.join()
        if not isinstance(exc, OSError):
            raise
        raise WaitError(
            argv,
            str(exc) or exc.__class__.__name__,
            stdout=stdout_drain.text(),
            stderr=stderr_drain.text(),
        ) from exc

    stdout_drain.join()
    stderr_drain.join()
    for drain in (stdout_drain, stderr_drain):
        if drain.error is not None:
            raise WaitError(
                argv,
                f"reading {drain.stream_name} failed: {drain.error}",
                stdout=stdout_drain.text(),
                stderr=stderr_drain.text(),
            ) from drain.error

    result = ProcessResult(
        command=argv,
        exit_code=returncode,
        stdout=stdout_drain.text(),
        stderr=stderr_drain.text(),
        stdout_bytes=stdout_drain.data(),
        stderr_bytes=stderr_drain.data(),
        duration_seconds=time.monotonic() - start,
        failure_reason=describe_return_code(returncode),
    )

    status = "OK" if result.is_success else "FAILED"
    logger.info(
        "%s %s (exit=%d, %.1fs)",
        argv[0], status, result.exit_code, result.duration_seconds,
    )
    if not result.is_success and result.stderr:
        logger.warning("%s stderr (tail):\n%s", argv[0], _truncate_output(result.stderr))
    return result


def run_script(
    working_directory: StrPath,
    script_path: StrPath,
    environment: Optional[Mapping[str, str]] = None,
    settings: Optional[Settings] = None,
) -> ProcessResult:
    """Execute an executable script file directly (its shebang picks the interpreter)."""
    return run(
        Path(script_path).absolute(),
        environment=environment,
        working_directory=working_directory,
        settings=settings,
    )


class _StreamDrain(threading.Thread):
    """Reads one pipe to EOF into memory."""

    def __init__(self, stream: IO[bytes], chunk_size: int, name: str):
        super().__init__(name=f"rubyrunner-{name}-drain", daemon=True)
        self._stream = stream
        self._chunk_size = chunk_size
        self._chunks: list[bytes] = []
        self.stream_name = name
        self.error: Optional[BaseException] = None

    def run(self) -> None:
        try:
            while True:
                data = self._stream.read1(self._chunk_size)
                if not data:
                    break
                self._chunks.append(data)
        except (OSError, ValueError) as exc:
            self.error = exc
        finally:
            self._stream.close()

    def data(self) -> bytes:
        return b"".join(self._chunks)

    def text(self) -> str:
        return self.data().decode(locale.getpreferredencoding(False), errors="replace")


def _truncate_output(text: str, max_lines: int = 40, max_chars: int = 4000) -> str:
    """Return a concise tail of command output for logs."""
    if not text:
        return ""
    lines = text.splitlines()
    joined = "\n".join(lines[-max_lines:])
    if len(joined) > max_chars:
        joined = joined[-max_chars:]
    return joined
