"""Tests for the RVM detector.

All tests use fake roots written to tmp_path: no real RVM is required.
"""

from pathlib import Path
from unittest.mock import patch

from rubyrunner.detector.rvm import detect_rvm, detect_rvm_from_env
from rubyrunner.detector.types import ManagerKind


class TestRvmPathHint:
    def test_detects_root_from_rvm_path(self, make_rvm_root):
        root = make_rvm_root(rubies=["ruby-1.9.2-p320", "jruby-1.6.4"])

        installation = detect_rvm_from_env({"rvm_path": str(root)})

        assert installation is not None
        assert installation.kind == ManagerKind.RVM
        assert installation.root == root
        assert installation.source == "env"
        assert installation.interpreters == {"ruby-1.9.2-p320", "jruby-1.6.4"}

    def test_hint_without_rvm_shell_is_absent(self, make_rvm_root):
        root = make_rvm_root(with_shell=False)

        assert detect_rvm_from_env({"rvm_path": str(root)}) is None

    def test_hint_to_missing_directory_is_absent(self, tmp_path):
        assert detect_rvm_from_env({"rvm_path": str(tmp_path / "nope")}) is None

    def test_blank_hint_is_ignored(self):
        assert detect_rvm_from_env({"rvm_path": "   "}) is None


class TestRvmFilesystemProbe:
    def test_home_directory_root(self, make_rvm_root, tmp_path):
        root = make_rvm_root(name="home/.rvm", rubies=["ruby-2.0.0-p0"])

        installation = detect_rvm({"HOME": str(tmp_path / "home")}, system_roots=[])

        assert installation is not None
        assert installation.root == root
        assert installation.source == "filesystem"

    def test_system_root(self, make_rvm_root, tmp_path):
        root = make_rvm_root(name="usr/local/rvm")

        installation = detect_rvm({"HOME": str(tmp_path / "home")}, system_roots=[str(root)])

        assert installation is not None
        assert installation.root == root

    def test_home_wins_over_system_root(self, make_rvm_root, tmp_path):
        home_root = make_rvm_root(name="home/.rvm")
        system_root = make_rvm_root(name="usr/local/rvm")

        installation = detect_rvm(
            {"HOME": str(tmp_path / "home")}, system_roots=[str(system_root)]
        )

        assert installation.root == home_root

    def test_hint_wins_over_home(self, make_rvm_root, tmp_path):
        make_rvm_root(name="home/.rvm")
        hinted = make_rvm_root(name="custom/rvm")

        installation = detect_rvm(
            {"HOME": str(tmp_path / "home"), "rvm_path": str(hinted)}, system_roots=[]
        )

        assert installation.root == hinted
        assert installation.source == "env"

    def test_invalid_hint_falls_back_to_filesystem(self, make_rvm_root, tmp_path):
        home_root = make_rvm_root(name="home/.rvm")
        broken = make_rvm_root(name="broken", with_shell=False)

        installation = detect_rvm(
            {"HOME": str(tmp_path / "home"), "rvm_path": str(broken)}, system_roots=[]
        )

        assert installation.root == home_root

    def test_nothing_installed(self, tmp_path):
        assert detect_rvm({"HOME": str(tmp_path)}, system_roots=[]) is None

    def test_empty_environment(self):
        assert detect_rvm({}, system_roots=[]) is None


class TestRvmEnumeration:
    def test_ignores_non_interpreter_directories(self, make_rvm_root):
        root = make_rvm_root(rubies=["ruby-1.8.7", "jruby"])
        (root / "rubies" / "notes").mkdir()

        installation = detect_rvm_from_env({"rvm_path": str(root)})

        assert installation.interpreters == {"ruby-1.8.7", "jruby"}

    def test_default_alias_is_resolved_and_not_listed(self, make_rvm_root):
        root = make_rvm_root(rubies=["ruby-1.9.2", "ruby-1.8.7"], default="ruby-1.9.2")

        installation = detect_rvm_from_env({"rvm_path": str(root)})

        assert installation.default_interpreter == "ruby-1.9.2"
        assert "default" not in installation.interpreters

    def test_no_default_alias(self, make_rvm_root):
        root = make_rvm_root(rubies=["ruby-1.9.2"])

        installation = detect_rvm_from_env({"rvm_path": str(root)})

        assert installation.default_interpreter is None

    def test_gemsets_grouped_by_interpreter(self, make_rvm_root):
        root = make_rvm_root(
            rubies=["ruby-1.9.2", "ruby-1.8.7"],
            gemsets=[
                "ruby-1.9.2@rails3",
                "ruby-1.9.2@global",
                "ruby-1.8.7@legacy",
                "ruby-2.0.0@orphan",
                "ruby-1.9.2",
            ],
        )

        installation = detect_rvm_from_env({"rvm_path": str(root)})

        assert installation.gemsets == {
            "ruby-1.9.2": {"rails3", "global"},
            "ruby-1.8.7": {"legacy"},
        }

    def test_missing_rubies_directory(self, tmp_path, make_rvm_root):
        root = make_rvm_root()
        (root / "rubies").rmdir()

        installation = detect_rvm_from_env({"rvm_path": str(root)})

        assert installation is not None
        assert installation.interpreters == frozenset()

    def test_to_dict_is_sorted(self, make_rvm_root):
        root = make_rvm_root(rubies=["ruby-1.9.2", "jruby"])

        data = detect_rvm_from_env({"rvm_path": str(root)}).to_dict()

        assert data["kind"] == "rvm"
        assert data["root"] == str(Path(root))
        assert data["interpreters"] == ["jruby", "ruby-1.9.2"]


class TestRootRemovedDuringDetection:
    """The root passes the probe, then loses bin/rvm-shell before enumeration."""

    def test_hint_root_removed_is_absent(self, make_rvm_root, caplog):
        root = make_rvm_root(with_shell=False)

        with patch("rubyrunner.detector.rvm.is_valid_root", return_value=True):
            installation = detect_rvm_from_env({"rvm_path": str(root)})

        assert installation is None
        assert "Skipping" in caplog.text

    def test_removed_root_falls_through_to_next_candidate(self, make_rvm_root, tmp_path):
        make_rvm_root(name="home/.rvm", with_shell=False)
        system_root = make_rvm_root(name="usr/local/rvm")

        with patch("rubyrunner.detector.rvm.is_valid_root", return_value=True):
            installation = detect_rvm(
                {"HOME": str(tmp_path / "home")}, system_roots=[str(system_root)]
            )

        assert installation is not None
        assert installation.root == system_root
