"""Configuration loading from ``guardian.toml``."""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Annotated

from pydantic import AfterValidator, BaseModel, Field, ValidationError

from guardian.checks.models import CheckConfig
from guardian.llm.hosts import HostPool, OllamaHost, ensure_unique_names
from guardian.llm.ollama import DEFAULT_PROBE_TIMEOUT_MS

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "GUARDIAN_CONFIG"
APP_DIR_NAME = "guardian-cli"
CONFIG_FILE_NAME = "guardian.toml"


class ConfigError(Exception):
    """The configuration file exists but cannot be used."""


class OllamaSection(BaseModel):
    default_timeout_ms: int | None = Field(None, gt=0)
    default_host: str | None = None
    default_model: str | None = None
    hosts: Annotated[list[OllamaHost], AfterValidator(ensure_unique_names)] = Field(
        default_factory=list
    )


class GuardianConfig(BaseModel):
    """Root configuration: Ollama hosts plus check thresholds."""

    ollama: OllamaSection = Field(default_factory=OllamaSection)
    checks: CheckConfig = Field(default_factory=CheckConfig)

    @property
    def timeout_ms(self) -> int:
        return self.ollama.default_timeout_ms or DEFAULT_PROBE_TIMEOUT_MS

    @property
    def host_pool(self) -> HostPool:
        return HostPool(hosts=self.ollama.hosts)

    @classmethod
    def from_toml(cls, text: str) -> GuardianConfig:
        try:
            return cls.model_validate(tomllib.loads(text))
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Failed to parse TOML config: {e}") from e
        except ValidationError as e:
            raise ConfigError(f"Invalid config: {e}") from e

    @classmethod
    def load(cls, config_path: Path | None = None) -> GuardianConfig:
        """Load from ``config_path`` or the default location.

        A missing file yields the defaults.
        """
        path = config_path or default_config_path()
        if not path.exists():
            logger.warning("Config file not found at %s, using defaults", path)
            return cls()

        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Failed to read config file at {path}: {e}") from e

        try:
            return cls.from_toml(text)
        except ConfigError as e:
            raise ConfigError(f"{path}: {e}") from e


def default_config_path() -> Path:
    """``$GUARDIAN_CONFIG``, else ``$XDG_CONFIG_HOME/guardian-cli/guardian.toml``."""
    explicit = os.environ.get(CONFIG_ENV_VAR)
    if explicit:
        return Path(explicit).expanduser()
    config_home = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(config_home) / APP_DIR_NAME / CONFIG_FILE_NAME
