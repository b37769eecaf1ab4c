"""Tests for guardian.toml loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from guardian.config import ConfigError, GuardianConfig, default_config_path
from guardian.llm.ollama import DEFAULT_PROBE_TIMEOUT_MS

FULL_CONFIG = """\
[ollama]
default_timeout_ms = 1500
default_model = "qwen2.5-coder:14b"

[[ollama.hosts]]
name = "workstation"
base_url = "http://192.168.1.10:11434"
description = "GPU box"

[[ollama.hosts]]
name = "laptop"
base_url = "http://localhost:11434"
fallback = true

[checks]
max_file_loc = 400
required_edition = "2021"
"""


class TestLoad:
    def test_full_config(self, tmp_path: Path) -> None:
        path = tmp_path / "guardian.toml"
        path.write_text(FULL_CONFIG, encoding="utf-8")
        config = GuardianConfig.load(path)

        assert config.timeout_ms == 1500
        assert config.ollama.default_model == "qwen2.5-coder:14b"
        assert [h.name for h in config.host_pool.enabled_hosts()] == ["workstation", "laptop"]
        assert config.host_pool.fallback_hosts()[0].name == "laptop"
        assert config.checks.max_file_loc == 400
        assert config.checks.warn_file_loc == 350
        assert config.checks.required_edition == "2021"

    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        config = GuardianConfig.load(tmp_path / "absent.toml")
        assert config.timeout_ms == DEFAULT_PROBE_TIMEOUT_MS
        assert config.ollama.hosts == []
        assert config.checks.max_modules_per_crate == 4

    def test_empty_file(self, config_file: Path) -> None:
        assert GuardianConfig.load(config_file) == GuardianConfig()

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "guardian.toml"
        path.write_text("[ollama\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="Failed to parse TOML"):
            GuardianConfig.load(path)

    def test_invalid_values(self) -> None:
        with pytest.raises(ConfigError, match="Invalid config"):
            GuardianConfig.from_toml("[ollama]\ndefault_timeout_ms = -5\n")

    def test_duplicate_host_names(self) -> None:
        text = (
            '[[ollama.hosts]]\nname = "a"\nbase_url = "http://a"\n'
            '[[ollama.hosts]]\nname = "a"\nbase_url = "http://b"\n'
        )
        with pytest.raises(ConfigError, match="duplicate host name"):
            GuardianConfig.from_toml(text)

    def test_warning_threshold_above_max(self) -> None:
        with pytest.raises(ConfigError, match="must be below max_file_loc"):
            GuardianConfig.from_toml("[checks]\nmax_file_loc = 300\n")


class TestDefaultPath:
    def test_env_override(self, monkeypatch, tmp_path: Path) -> None:
        monkeypatch.setenv("GUARDIAN_CONFIG", str(tmp_path / "custom.toml"))
        assert default_config_path() == tmp_path / "custom.toml"

    def test_xdg_config_home(self, monkeypatch, tmp_path: Path) -> None:
        monkeypatch.delenv("GUARDIAN_CONFIG", raising=False)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert default_config_path() == tmp_path / "guardian-cli" / "guardian.toml"
