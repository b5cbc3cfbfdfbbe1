"""Tests for tool configuration."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from cargo_bin.config import Settings


class TestSettings:
    def test_default_settings(self) -> None:
        s = Settings(_env_file=None)
        assert s.manifest_name == "Cargo.toml"
        assert s.source_dir == Path("src/bin")
        assert s.source_extension == ".rs"
        assert s.recursive_scan is False
        assert s.strict_names is False
        assert s.debug is False

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CARGO_BIN_SOURCE_DIR", "tools")
        monkeypatch.setenv("CARGO_BIN_RECURSIVE_SCAN", "true")
        s = Settings(_env_file=None)
        assert s.source_dir == Path("tools")
        assert s.recursive_scan is True

    def test_init_values_beat_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CARGO_BIN_STRICT_NAMES", "false")
        s = Settings(_env_file=None, strict_names=True)
        assert s.strict_names is True

    def test_env_file(self, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("CARGO_BIN_DEBUG=true\n")
        s = Settings(_env_file=env_file)
        assert s.debug is True

    def test_rejects_extension_without_dot(self) -> None:
        with pytest.raises(ValidationError, match="source_extension"):
            Settings(_env_file=None, source_extension="rs")

    def test_rejects_absolute_source_dir(self) -> None:
        with pytest.raises(ValidationError, match="source_dir"):
            Settings(_env_file=None, source_dir=Path("/abs/bin"))
