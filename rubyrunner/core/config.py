from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_RVM_SYSTEM_ROOTS = ["/usr/local/rvm"]


class Settings(BaseSettings):
    """Runner settings loaded from environment variables.

    Every field can be overridden with a ``RUBYRUNNER_``-prefixed variable,
    e.g. ``RUBYRUNNER_RVM_SYSTEM_ROOTS='["/opt/rvm"]'``.

    System roots are probed after the environment hint and the home
    directory, in the order given.
    """

    model_config = SettingsConfigDict(
        env_prefix="RUBYRUNNER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Detection
    rvm_system_roots: list[str] = DEFAULT_RVM_SYSTEM_ROOTS
    rbenv_system_roots: list[str] = []

    # Script materialization
    script_prefix: str = "rvm_shell"

    # Process runner: bytes per read() in each drain thread.
    read_chunk_size: int = 64 * 1024

    # Apply rlimits (see rubyrunner.sandbox.limits) to spawned processes.
    resource_limits: bool = False

    # App
    debug: bool = True

    @field_validator("read_chunk_size")
    @classmethod
    def positive_chunk_size(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("read_chunk_size must be positive")
        return v


def get_settings() -> Settings:
    return Settings()
