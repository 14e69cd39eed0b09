"""Temporary script files for script-based invocations.

The script is created inside a caller-chosen directory: rvm-shell resolves
``.rvmrc`` relative to the script location, so moving it elsewhere changes
which ruby runs.

Usage:
    with materialize(work_dir, "bundle exec rake", shebang=rvm_shell) as script:
        run_script(work_dir, script.path, env)
"""

import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Optional

from rubyrunner.errors import ScriptIOError

logger = logging.getLogger(__name__)

# chmod a+x on top of rw-r--r--
EXECUTABLE_MODE = (
    stat.S_IRWXU
    | stat.S_IRGRP | stat.S_IXGRP
    | stat.S_IROTH | stat.S_IXOTH
)


class ScriptFile:
    """Handle to a materialized script. Releasing deletes the file.

    release() is idempotent and also runs when a ``with`` block exits,
    whether normally or through an exception.
    """

    def __init__(self, path: Path, shebang: Optional[str], executable: bool):
        self.path = path
        self.shebang = shebang
        self.executable = executable
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        try:
            self.path.unlink()
        except FileNotFoundError:
            return
        except OSError as exc:
            # best effort
            logger.warning("Failed to delete script %s: %s", self.path, exc)
            return
        logger.debug("Deleted script %s", self.path)

    def __enter__(self) -> "ScriptFile":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    def __repr__(self) -> str:
        state = "released" if self._released else "live"
        return f"<ScriptFile {self.path} ({state})>"


def render_script(body: str, shebang: Optional[str] = None) -> str:
    """Return the file content: ``#!<shebang>`` line plus body, or body verbatim."""
    if shebang:
        return f"#!{shebang}\n{body}"
    return body


def materialize(
    directory: Path,
    body: str,
    shebang: Optional[str] = None,
    *,
    prefix: str = "script",
    suffix: str = ".sh",
    executable: Optional[bool] = None,
) -> ScriptFile:
    """Write ``body`` to a uniquely named file in ``directory``.

    ``executable`` defaults to True when a shebang is given (the script is
    run directly) and False otherwise (the script is passed to an
    interpreter).

    Raises:
        ScriptIOError: creation, write or chmod failed. No file is left behind.
    """
    if executable is None:
        executable = shebang is not None

    directory = Path(directory)
    try:
        fd, raw_path = tempfile.mkstemp(prefix=prefix, suffix=suffix, dir=str(directory))
    except OSError as exc:
        raise ScriptIOError(
            f"Failed to create temp file in {directory}", cause=str(exc)
        ) from exc

    path = Path(raw_path).absolute()
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
            handle.write(render_script(body, shebang))
        if executable:
            os.chmod(path, EXECUTABLE_MODE)
    except (OSError, UnicodeEncodeError) as exc:
        _discard(path)
        raise ScriptIOError(f"Failed to write script {path}", cause=str(exc)) from exc

    logger.debug("Materialized script %s (executable=%s)", path, executable)
    return ScriptFile(path=path, shebang=shebang, executable=executable)


def _discard(path: Path) -> None:
    try:
        path.unlink()
    except OSError as exc:
        logger.warning("Could not remove partial script %s: %s", path, exc)
