"""Shared test fixtures and configuration."""

import os
import sys
from pathlib import Path

# Add guardian_cli/ to Python path so `from guardian.xxx` imports work
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "guardian_cli"))

import pytest

os.environ["GUARDIAN_DEV_MODE"] = "true"


def _write(root: Path, relative: str, content: str) -> Path:
    """Create ``root/relative`` with its parents and return it."""
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A small clean single-crate project."""
    _write(tmp_path, "Cargo.toml", '[package]\nname = "demo"\nversion = "0.1.0"\nedition = "2024"\n')
    _write(tmp_path, "src/main.rs", "fn main() {\n    println!(\"hi\");\n}\n")
    return tmp_path


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """An empty guardian.toml so commands never fall back to the user's config."""
    path = tmp_path / "guardian.toml"
    path.write_text("", encoding="utf-8")
    return path


@pytest.fixture
def write():
    """Return a helper that creates ``root/relative`` with ``content``."""
    return _write
