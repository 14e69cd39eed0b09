"""Tests for environment-driven settings."""

import pytest
from pydantic import ValidationError

from rubyrunner.core.config import DEFAULT_RVM_SYSTEM_ROOTS, Settings, get_settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in (
        "RUBYRUNNER_RVM_SYSTEM_ROOTS",
        "RUBYRUNNER_RBENV_SYSTEM_ROOTS",
        "RUBYRUNNER_SCRIPT_PREFIX",
        "RUBYRUNNER_READ_CHUNK_SIZE",
        "RUBYRUNNER_RESOURCE_LIMITS",
        "RUBYRUNNER_DEBUG",
    ):
        monkeypatch.delenv(name, raising=False)


class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings()

        assert settings.rvm_system_roots == DEFAULT_RVM_SYSTEM_ROOTS
        assert settings.rbenv_system_roots == []
        assert settings.script_prefix == "rvm_shell"
        assert settings.read_chunk_size == 64 * 1024
        assert settings.resource_limits is False
        assert settings.debug is True

    def test_env_overrides(self, monkeypatch) -> None:
        monkeypatch.setenv("RUBYRUNNER_RESOURCE_LIMITS", "true")
        monkeypatch.setenv("RUBYRUNNER_RVM_SYSTEM_ROOTS", '["/opt/rvm", "/usr/share/rvm"]')
        monkeypatch.setenv("RUBYRUNNER_READ_CHUNK_SIZE", "4096")

        settings = get_settings()

        assert settings.resource_limits is True
        assert settings.rvm_system_roots == ["/opt/rvm", "/usr/share/rvm"]
        assert settings.read_chunk_size == 4096

    def test_dotenv_file(self, tmp_path) -> None:
        (tmp_path / ".env").write_text("RUBYRUNNER_SCRIPT_PREFIX=build_step\n")

        assert Settings().script_prefix == "build_step"

    def test_unrelated_variables_ignored(self, monkeypatch) -> None:
        monkeypatch.setenv("RUBYRUNNER_SOMETHING_ELSE", "1")

        Settings()

    @pytest.mark.parametrize("size", [0, -1])
    def test_chunk_size_must_be_positive(self, size) -> None:
        with pytest.raises(ValidationError, match="read_chunk_size"):
            Settings(read_chunk_size=size)

