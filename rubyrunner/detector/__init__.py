"""Detector module for locating Ruby version managers.

Public API:
    detect(environment) -> Installation | None
"""

from rubyrunner.detector.cache import InstallationCache
from rubyrunner.detector.interpreters import interpreter_executable, latest_patch_versions
from rubyrunner.detector.orchestrator import detect, detect_rbenv, detect_rvm
from rubyrunner.detector.types import Installation, InterpreterSelection, ManagerKind

__all__ = [
    "detect",
    "detect_rvm",
    "detect_rbenv",
    "interpreter_executable",
    "latest_patch_versions",
    "Installation",
    "InstallationCache",
    "InterpreterSelection",
    "ManagerKind",
]
