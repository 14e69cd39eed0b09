"""Publishing a detected installation to build-agent configuration.

The build agent owns its event model; it calls
``AgentRubyEnvDetector.build_finished`` after each build so newly installed
rubies show up, and ``parameters`` when it reports its capabilities.

Published values:

  RVM: env ``rvm_path``; parameters ``ruby.rvm.path``, ``ruby.rvm.rubies``
  rbenv: env ``RBENV_ROOT``; parameters ``ruby.rbenv.root``,
          ``ruby.rbenv.versions``

Interpreter lists are sorted and comma-joined. A missing installation
publishes nothing.
"""

import logging
from typing import Callable, Mapping, Optional, Protocol

from rubyrunner.detector.orchestrator import detect
from rubyrunner.detector.types import Installation, ManagerKind
from rubyrunner.environment.patcher import RBENV_ROOT, RVM_PATH

logger = logging.getLogger(__name__)

ENV_PREFIX = "env."

RVM_PATH_PARAM = "ruby.rvm.path"
RVM_RUBIES_PARAM = "ruby.rvm.rubies"
RBENV_ROOT_PARAM = "ruby.rbenv.root"
RBENV_VERSIONS_PARAM = "ruby.rbenv.versions"


class ConfigurationApplier(Protocol):
    """Sink for agent environment variables and configuration parameters."""

    def add_environment_variable(self, key: str, value: str) -> None:
        """Add an environment variable to every build run by the agent."""

    def add_configuration_parameter(self, key: str, value: str) -> None:
        """Add a configuration parameter reported by the agent."""


class ParameterCollector:
    """ConfigurationApplier that flattens everything into one mapping.

    Environment variables are stored under ``env.<KEY>``.
    """

    def __init__(self) -> None:
        self.parameters: dict[str, str] = {}

    def add_environment_variable(self, key: str, value: str) -> None:
        self.parameters[ENV_PREFIX + key] = value

    def add_configuration_parameter(self, key: str, value: str) -> None:
        self.parameters[key] = value


def patch_agent_configuration(
    applier: ConfigurationApplier,
    installation: Optional[Installation],
) -> None:
    """Push ``installation`` into the agent configuration."""
    if installation is None:
        return

    root = str(installation.root)
    listed = ",".join(sorted(installation.interpreters))

    if installation.kind == ManagerKind.RVM:
        applier.add_environment_variable(RVM_PATH, root)
        applier.add_configuration_parameter(RVM_PATH_PARAM, root)
        applier.add_configuration_parameter(RVM_RUBIES_PARAM, listed)
    else:
        applier.add_environment_variable(RBENV_ROOT, root)
        applier.add_configuration_parameter(RBENV_ROOT_PARAM, root)
        applier.add_configuration_parameter(RBENV_VERSIONS_PARAM, listed)


class AgentRubyEnvDetector:
    """Re-runs detection on agent lifecycle events."""

    def __init__(
        self,
        detector: Callable[[Mapping[str, str]], Optional[Installation]] = detect,
    ):
        self._detector = detector

    def build_finished(
        self,
        applier: ConfigurationApplier,
        environment: Mapping[str, str],
    ) -> Optional[Installation]:
        installation = self._detector(environment)
        patch_agent_configuration(applier, installation)
        return installation

    def parameters(self, environment: Mapping[str, str]) -> dict[str, str]:
        collector = ParameterCollector()
        patch_agent_configuration(collector, self._detector(environment))
        return collector.parameters


def collect_agent_parameters(environment: Mapping[str, str]) -> dict[str, str]:
    """Flat parameter mapping for the installation detected in ``environment``."""
    return AgentRubyEnvDetector().parameters(environment)
