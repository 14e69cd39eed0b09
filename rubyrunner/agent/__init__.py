"""Build-agent integration for detected Ruby installations."""

from rubyrunner.agent.parameters import (
    AgentRubyEnvDetector,
    ConfigurationApplier,
    ParameterCollector,
    collect_agent_parameters,
    patch_agent_configuration,
)

__all__ = [
    "AgentRubyEnvDetector",
    "ConfigurationApplier",
    "ParameterCollector",
    "collect_agent_parameters",
    "patch_agent_configuration",
]
