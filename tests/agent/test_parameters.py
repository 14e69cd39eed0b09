"""Tests for publishing detected installations to agent configuration."""

from unittest.mock import MagicMock, call

from rubyrunner.agent.parameters import (
    AgentRubyEnvDetector,
    ParameterCollector,
    collect_agent_parameters,
    patch_agent_configuration,
)
from rubyrunner.detector.rbenv import build_installation as build_rbenv
from rubyrunner.detector.rvm import build_installation as build_rvm


class TestPatchAgentConfiguration:
    def test_rvm_publishes_path_and_rubies(self, make_rvm_root):
        root = make_rvm_root(rubies=["ruby-1.9.2", "jruby-1.6.0", "ree-1.8.7"])
        collector = ParameterCollector()

        patch_agent_configuration(collector, build_rvm(root, "env"))

        assert collector.parameters == {
            "env.rvm_path": str(root),
            "ruby.rvm.path": str(root),
            "ruby.rvm.rubies": "jruby-1.6.0,ree-1.8.7,ruby-1.9.2",
        }

    def test_rbenv_publishes_root_and_versions(self, make_rbenv_root):
        root = make_rbenv_root(versions=["3.2.2", "2.7.1"])
        collector = ParameterCollector()

        patch_agent_configuration(collector, build_rbenv(root, "env"))

        assert collector.parameters == {
            "env.RBENV_ROOT": str(root),
            "ruby.rbenv.root": str(root),
            "ruby.rbenv.versions": "2.7.1,3.2.2",
        }

    def test_empty_interpreter_list(self, make_rvm_root):
        collector = ParameterCollector()

        patch_agent_configuration(collector, build_rvm(make_rvm_root(), "env"))

        assert collector.parameters["ruby.rvm.rubies"] == ""

    def test_no_installation_applies_nothing(self):
        applier = MagicMock()

        patch_agent_configuration(applier, None)

        applier.add_environment_variable.assert_not_called()
        applier.add_configuration_parameter.assert_not_called()

    def test_calls_applier_methods(self, make_rvm_root):
        root = make_rvm_root(rubies=["ruby-1.9.2"])
        applier = MagicMock()

        patch_agent_configuration(applier, build_rvm(root, "env"))

        applier.add_environment_variable.assert_called_once_with("rvm_path", str(root))
        assert applier.add_configuration_parameter.call_args_list == [
            call("ruby.rvm.path", str(root)),
            call("ruby.rvm.rubies", "ruby-1.9.2"),
        ]


class TestAgentRubyEnvDetector:
    def test_build_finished_redetects_each_time(self, make_rvm_root):
        root = make_rvm_root(rubies=["ruby-1.9.2"])
        detector = MagicMock(return_value=build_rvm(root, "env"))
        agent = AgentRubyEnvDetector(detector=detector)
        applier = MagicMock()

        agent.build_finished(applier, {"rvm_path": str(root)})
        agent.build_finished(applier, {"rvm_path": str(root)})

        assert detector.call_count == 2
        assert applier.add_environment_variable.call_count == 2

    def test_build_finished_picks_up_new_rubies(self, make_rvm_root):
        root = make_rvm_root(rubies=["ruby-1.9.2"])
        agent = AgentRubyEnvDetector()
        env = {"rvm_path": str(root)}

        before = agent.parameters(env)
        (root / "rubies" / "ruby-2.0.0").mkdir()
        after = agent.parameters(env)

        assert before["ruby.rvm.rubies"] == "ruby-1.9.2"
        assert after["ruby.rvm.rubies"] == "ruby-1.9.2,ruby-2.0.0"

    def test_build_finished_without_manager(self):
        agent = AgentRubyEnvDetector(detector=lambda env: None)
        applier = MagicMock()

        assert agent.build_finished(applier, {}) is None
        applier.add_environment_variable.assert_not_called()

    def test_collect_agent_parameters(self, make_rbenv_root):
        root = make_rbenv_root(versions=["3.2.2"])

        params = collect_agent_parameters({"RBENV_ROOT": str(root)})

        assert params["env.RBENV_ROOT"] == str(root)
        assert params["ruby.rbenv.versions"] == "3.2.2"
