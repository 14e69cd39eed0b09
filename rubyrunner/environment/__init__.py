"""Environment snapshots and version-manager patching."""

from rubyrunner.environment.patcher import environment_delta, patch, validate_selection
from rubyrunner.environment.snapshot import EnvironmentSnapshot

__all__ = ["EnvironmentSnapshot", "environment_delta", "patch", "validate_selection"]
