"""Sandbox module for script files and child-process limits."""

from rubyrunner.sandbox.limits import (
    ResourceLimits,
    apply_resource_limits,
    limits_preexec,
    resolve_limits,
)
from rubyrunner.sandbox.scripts import ScriptFile, materialize

__all__ = [
    "ResourceLimits",
    "ScriptFile",
    "apply_resource_limits",
    "limits_preexec",
    "materialize",
    "resolve_limits",
]
