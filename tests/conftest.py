"""Shared fixtures: fake RVM and rbenv installation roots.

Roots are built under tmp_path; no real version manager is touched.
System roots are disabled so detection never probes /usr/local.
"""

import os
import stat
from pathlib import Path
from typing import Iterable, Optional

import pytest

from rubyrunner.core.config import Settings

# Stub rvm-shell: reports the injected environment, then behaves like a shell.
#   rvm-shell [ruby-string] -- cmd args...  -> runs cmd
#   rvm-shell script.sh                     -> runs the script with /bin/sh
RVM_SHELL_STUB = """\
#!/bin/sh
echo "rvm_path=$rvm_path"
echo "trust=$rvm_trust_rvmrcs_flag"
case "$1" in
  ruby-*|jruby*) echo "ruby_string=$1"; shift ;;
esac
if [ "$1" = "--" ]; then
  shift
  exec "$@"
fi
exec /bin/sh "$@"
"""

RBENV_STUB = """\
#!/bin/sh
echo "rbenv 1.2.0"
"""


def _write_executable(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def settings() -> Settings:
    return Settings(rvm_system_roots=[], rbenv_system_roots=[])


@pytest.fixture
def make_rvm_root(tmp_path):
    def _make(
        name: str = "rvm",
        rubies: Iterable[str] = (),
        gemsets: Iterable[str] = (),
        default: Optional[str] = None,
        with_shell: bool = True,
    ) -> Path:
        root = tmp_path / name
        (root / "rubies").mkdir(parents=True)
        if with_shell:
            _write_executable(root / "bin" / "rvm-shell", RVM_SHELL_STUB)
        for ruby in rubies:
            _write_executable(root / "rubies" / ruby / "bin" / "ruby", "#!/bin/sh\n")
        for gemset_dir in gemsets:
            (root / "gems" / gemset_dir).mkdir(parents=True)
        if default:
            os.symlink(root / "rubies" / default, root / "rubies" / "default")
        return root

    return _make


@pytest.fixture
def make_rbenv_root(tmp_path):
    def _make(
        name: str = "rbenv",
        versions: Iterable[str] = (),
        global_version: Optional[str] = None,
        with_executable: bool = True,
    ) -> Path:
        root = tmp_path / name
        (root / "versions").mkdir(parents=True)
        (root / "shims").mkdir()
        if with_executable:
            _write_executable(root / "bin" / "rbenv", RBENV_STUB)
        for version in versions:
            _write_executable(root / "versions" / version / "bin" / "ruby", "#!/bin/sh\n")
        if global_version:
            (root / "version").write_text(global_version + "\n", encoding="utf-8")
        return root

    return _make
