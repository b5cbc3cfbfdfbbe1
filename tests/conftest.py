"""Shared test fixtures for cargo-bin."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from cargo_bin.config import Settings

if TYPE_CHECKING:
    from pathlib import Path

CARGO_TOML = """\
[package]
name = "demo"
version = "0.1.0"
edition = "2021"

[dependencies]
anyhow = "1"
serde = { version = "1", features = ["derive"] }
"""

MAIN_RS = 'fn main() {\n    println!("hi");\n}\n'
LIB_RS = "pub fn helper() -> u32 {\n    42\n}\n"


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Create a Cargo project with an empty ``src/bin`` directory."""
    project = tmp_path / "demo"
    (project / "src" / "bin").mkdir(parents=True)
    (project / "Cargo.toml").write_text(CARGO_TOML, encoding="utf-8")
    return project


@pytest.fixture
def manifest_path(project_dir: Path) -> Path:
    return project_dir / "Cargo.toml"


@pytest.fixture
def settings() -> Settings:
    """Default settings, isolated from any local .env file."""
    return Settings(_env_file=None)


def write_source(project_dir: Path, rel_path: str, content: str = MAIN_RS) -> Path:
    """Write a source file under the project and return its path."""
    path = project_dir / rel_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path
