"""Process execution under a patched Ruby environment."""

from rubyrunner.process.runner import run, run_script
from rubyrunner.process.shell import (
    RvmShellRunner,
    get_rvm_shell_runner,
    run_ruby_source,
    run_under_rvm_shell,
)
from rubyrunner.process.types import ProcessResult

__all__ = [
    "run",
    "run_script",
    "run_ruby_source",
    "run_under_rvm_shell",
    "get_rvm_shell_runner",
    "RvmShellRunner",
    "ProcessResult",
]
