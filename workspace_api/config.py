"""Centralized configuration management using Pydantic Settings.

This module provides typed configuration for all application settings,
loaded from environment variables with sensible defaults.

Usage:
    from workspace_api.config import get_settings
    settings = get_settings()
    root = settings.workspace.root
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class WorkspaceSettings(BaseSettings):
    """Workspace root configuration."""

    model_config = SettingsConfigDict(env_prefix="WORKSPACE_", extra="ignore")

    root: Path = Field(
        default=Path("workspace"), validate_default=True, description="Workspace root directory"
    )

    @field_validator("root", mode="after")
    @classmethod
    def make_absolute(cls, v: Path) -> Path:
        return v.expanduser().resolve()


class SandboxSettings(BaseSettings):
    """Process execution configuration."""

    model_config = SettingsConfigDict(env_prefix="SANDBOX_", extra="ignore")

    enabled: bool = Field(default=True, description="Enable code execution and installs")
    execute_timeout_sec: float = Field(default=30.0, gt=0, description="Execution timeout")
    install_timeout_sec: float = Field(default=120.0, gt=0, description="Package install timeout")
    max_output_chars: int = Field(default=50000, gt=0, description="Combined output cap")
    drain_grace_sec: float = Field(
        default=1.0, ge=0, description="Time allowed for output pipes to close after exit"
    )
    pip_command: str = Field(default="pip3", description="Package manager binary for python")

    @field_validator("enabled", mode="before")
    @classmethod
    def parse_enabled(cls, v):
        if isinstance(v, str):
            return v.lower() in ("1", "true", "yes")
        return bool(v)


class CorsSettings(BaseSettings):
    """CORS configuration."""

    model_config = SettingsConfigDict(extra="ignore", populate_by_name=True)

    origins_raw: str = Field(
        default="http://localhost:5173",
        validation_alias="CORS_ORIGINS",
    )

    @property
    def origins(self) -> list[str]:
        """Parse comma-separated origins into list."""
        return [o.strip() for o in self.origins_raw.split(",") if o.strip()]

    @property
    def allow_credentials(self) -> bool:
        """Credentials not allowed with wildcard origins."""
        return self.origins != ["*"]


class DebugSettings(BaseSettings):
    """Debug flags configuration."""

    model_config = SettingsConfigDict(extra="ignore")

    request: bool = Field(default=False, alias="request_debug")

    @field_validator("*", mode="before")
    @classmethod
    def parse_bool(cls, v):
        if isinstance(v, str):
            return v.lower() in ("1", "true", "yes")
        return bool(v)


class Settings:
    """Main application settings combining all configuration sections.

    This is not a BaseSettings subclass to avoid env var conflicts.
    Each subsetting is loaded independently with its own prefix.
    """

    def __init__(self) -> None:
        self.workspace = WorkspaceSettings()
        self.sandbox = SandboxSettings()
        self.cors = CorsSettings()
        self.debug = DebugSettings()


@lru_cache
def get_settings() -> Settings:
    """Get cached Settings instance (singleton pattern)."""
    return Settings()


def clear_settings_cache() -> None:
    """Clear cached settings (useful for testing)."""
    get_settings.cache_clear()
