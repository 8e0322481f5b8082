"""Configuration models for Morlock."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from morlock.errors import ConfigError

# Config file lives at project root or in the home directory (user-editable)
CONFIG_FILE = ".morlockrc.toml"


class GitConfig(BaseModel):
    """Git backend configuration."""

    executable: str = Field(
        default="git",
        description="Git executable to run",
    )
    context_lines: int = Field(
        default=3,
        ge=0,
        description="Unified diff context lines requested from git diff",
    )
    timeout_seconds: int = Field(
        default=30,
        gt=0,
        description="Timeout for a single blocking git command",
    )


class ServerConfig(BaseModel):
    """HTTP server configuration."""

    host: str = Field(
        default="127.0.0.1",
        description="Server host to bind to",
    )
    port: int = Field(
        default=8008,
        description="Server port",
    )


class MorlockConfig(BaseSettings):
    """Main Morlock configuration."""

    model_config = SettingsConfigDict(
        env_prefix="MORLOCK_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    version: str = Field(default="1.0", description="Config version")
    git: GitConfig = Field(default_factory=GitConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    @classmethod
    def load(cls, config_path: Path | None = None) -> MorlockConfig:
        """Load configuration from file and environment.

        The first file found wins:
        1. Provided config file path
        2. .morlockrc.toml in current directory
        3. .morlockrc.toml in home directory

        Values from the file override environment variables, which override
        built-in defaults.
        """
        config_data: dict[str, Any] = {}

        locations = []
        if config_path:
            locations.append(config_path)
        locations.extend(
            [
                Path.cwd() / CONFIG_FILE,
                Path.home() / CONFIG_FILE,
            ]
        )

        for loc in locations:
            if loc.exists():
                try:
                    with open(loc, "rb") as f:
                        config_data = tomllib.load(f)
                except tomllib.TOMLDecodeError as e:
                    raise ConfigError(f"Invalid config file {loc}: {e}", path=str(loc)) from e
                break

        # The [morlock] table carries top-level keys
        config_data.update(config_data.pop("morlock", {}))
        return cls(**config_data)


def get_default_config_toml() -> str:
    """Generate default .morlockrc.toml content."""
    return """# Morlock Configuration

[morlock]
version = "1.0"

[git]
executable = "git"
context_lines = 3  # Lines of context around each diff hunk
timeout_seconds = 30

[server]
host = "127.0.0.1"
port = 8008
"""
