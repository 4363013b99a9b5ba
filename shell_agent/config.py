# File: shell_agent/config.py
# Purpose: Unified configuration management with pydantic-settings
from functools import lru_cache
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Runtime settings for the bash tools.
    Values come from environment variables or a local .env file.
    """
    model_config = SettingsConfigDict(
        env_file=[".env"],
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    # Application Configuration
    APP_NAME: str = "shell_agent"
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "./logs"
    LOG_TO_FILE: bool = False

    # Foreground execution
    BASH_DEFAULT_TIMEOUT_MS: int = 120_000
    BASH_MAX_TIMEOUT_MS: int = 600_000

    # Background sessions
    BASH_MAX_BUFFERED_LINES: int = 10_000
    # None keeps KillBash waiting until the process tree is gone
    BASH_KILL_WAIT_TIMEOUT_S: Optional[float] = None
    BASH_EXIT_DRAIN_WAIT_S: float = 1.0

    # Shell executables
    BASH_POSIX_SHELL: str = "/bin/bash"
    BASH_WINDOWS_SHELL: str = "cmd.exe"

    @field_validator("BASH_MAX_BUFFERED_LINES", "BASH_DEFAULT_TIMEOUT_MS", "BASH_MAX_TIMEOUT_MS")
    @classmethod
    def _positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be a positive integer")
        return value

    def effective_timeout_ms(self, requested_ms: int) -> int:
        """Resolve the foreground timeout: non-positive means default, otherwise clamp to the ceiling."""
        if requested_ms <= 0:
            return self.BASH_DEFAULT_TIMEOUT_MS
        return min(requested_ms, self.BASH_MAX_TIMEOUT_MS)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses lru_cache to ensure singleton pattern.
    """
    return Settings()
