"""Tool configuration loaded from environment variables."""

from __future__ import annotations

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """cargo-bin settings.

    Every field can be set through a ``CARGO_BIN_``-prefixed environment
    variable; command-line flags take precedence.
    """

    model_config = SettingsConfigDict(
        env_prefix="CARGO_BIN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Manifest
    manifest_name: str = "Cargo.toml"

    # Sources, relative to the manifest directory
    source_dir: Path = Path("src/bin")
    source_extension: str = ".rs"

    # Tidy
    recursive_scan: bool = False
    strict_names: bool = False

    # Logging
    debug: bool = False

    @field_validator("source_extension")
    @classmethod
    def _check_extension(cls, value: str) -> str:
        if not value.startswith(".") or len(value) < 2:
            msg = f"source_extension must start with '.' and name an extension, got {value!r}"
            raise ValueError(msg)
        return value

    @field_validator("source_dir")
    @classmethod
    def _check_source_dir(cls, value: Path) -> Path:
        if value.is_absolute():
            msg = f"source_dir must be relative to the manifest directory, got {value}"
            raise ValueError(msg)
        return value
