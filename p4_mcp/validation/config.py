"""
p4-mcp Configuration - Configuration loading and validation.

This module provides the Config class for managing p4-mcp configuration
from global (~/.p4mcp/config.yaml) and local (.p4mcp/config.yaml) sources,
with environment variables applied on top.
"""

import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from p4_mcp.tools.schema import ExecutionMode

MOCK_MODE_ENV = "P4_MOCK_MODE"
BINARY_ENV = "P4MCP_P4_BINARY"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

FALSE_STRINGS = {"", "0", "false", "no", "off"}


class ConfigError(Exception):
    """Raised when there's a configuration error."""

    pass


class ServerConfig(BaseModel):
    """Configuration for the stdio server."""

    mock_mode: bool = False
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level


class P4Config(BaseModel):
    """Configuration for the p4 client invocation."""

    binary: str = "p4"
    timeout: Optional[float] = None


class P4MCPConfig(BaseModel):
    """Complete p4-mcp configuration schema."""

    server: ServerConfig = Field(default_factory=ServerConfig)
    p4: P4Config = Field(default_factory=P4Config)


def env_flag(value: Optional[str]) -> bool:
    """
    Interpret a boolean-like environment value.

    Unset or one of ``0/false/no/off`` (or empty) is false; anything else,
    including values that are not recognisably boolean, is true.
    """
    if value is None:
        return False
    return value.strip().lower() not in FALSE_STRINGS


class Config:
    """
    p4-mcp configuration manager.

    Handles loading, merging, and validating configuration from:
    - Global: ~/.p4mcp/config.yaml
    - Local: .p4mcp/config.yaml (found by walking up from the cwd)
    - Environment: P4_MOCK_MODE, P4MCP_P4_BINARY

    Local configuration overrides global configuration; environment
    variables override both.

    Example:
        >>> config = Config.load()
        >>> config.execution_mode
        <ExecutionMode.LIVE: 'live'>
    """

    GLOBAL_CONFIG_DIR = Path.home() / ".p4mcp"
    LOCAL_CONFIG_DIR = Path(".p4mcp")

    def __init__(
        self,
        global_config: Optional[Dict[str, Any]] = None,
        local_config: Optional[Dict[str, Any]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        """
        Initialize Config.

        Args:
            global_config: Global configuration dictionary.
            local_config: Local (project) configuration dictionary.
            environ: Environment to read overrides from (defaults to none).
        """
        self._global_config = global_config or {}
        self._local_config = local_config or {}
        self._environ = environ or {}
        self._merged: Optional[P4MCPConfig] = None

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Config":
        """
        Load configuration from default locations.

        Args:
            config_path: Explicit file used instead of the local config.

        Returns:
            Config instance with loaded configuration.
        """
        global_config = cls._load_yaml(cls.GLOBAL_CONFIG_DIR / "config.yaml")
        if config_path is not None:
            if not config_path.exists():
                raise ConfigError(f"Config file not found: {config_path}")
            local_config = cls._load_yaml(config_path)
        else:
            local_config = cls._load_yaml(cls._find_local_config())

        return cls(global_config=global_config, local_config=local_config, environ=os.environ)

    @classmethod
    def _load_yaml(cls, path: Optional[Path]) -> Dict[str, Any]:
        """Load YAML file if it exists."""
        if path is None or not path.exists():
            return {}

        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to load config from {path}: {e}")

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")
        return data

    @classmethod
    def _find_local_config(cls) -> Optional[Path]:
        """Find the local config file by walking up the directory tree."""
        current = Path.cwd()
        while current != current.parent:
            config_path = current / cls.LOCAL_CONFIG_DIR / "config.yaml"
            if config_path.exists():
                return config_path
            current = current.parent
        return None

    def get_merged_config(self) -> Dict[str, Any]:
        """Get the merged configuration as a dictionary, env overrides included."""
        merged = self._deep_merge(self._global_config.copy(), self._local_config)
        return self._deep_merge(merged, self._env_overrides())

    def _env_overrides(self) -> Dict[str, Any]:
        overrides: Dict[str, Any] = {}
        if MOCK_MODE_ENV in self._environ:
            overrides["server"] = {"mock_mode": env_flag(self._environ[MOCK_MODE_ENV])}
        binary = self._environ.get(BINARY_ENV)
        if binary:
            overrides["p4"] = {"binary": binary}
        return overrides

    @property
    def merged(self) -> P4MCPConfig:
        """Get the validated merged configuration."""
        if self._merged is None:
            try:
                merged_dict = self.get_merged_config()
                self._merged = P4MCPConfig(**merged_dict)
            except (ValidationError, TypeError) as e:
                raise ConfigError(f"Invalid configuration: {e}")
        return self._merged

    @property
    def execution_mode(self) -> ExecutionMode:
        """Live or mock execution, as configured."""
        return ExecutionMode.MOCK if self.merged.server.mock_mode else ExecutionMode.LIVE

    def set_mock_mode(self, enabled: bool) -> None:
        """Force mock mode on or off for this process (e.g. from ``--mock``)."""
        self._local_config.setdefault("server", {})["mock_mode"] = enabled
        self._environ = {k: v for k, v in self._environ.items() if k != MOCK_MODE_ENV}
        self._merged = None  # Reset cache

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two dictionaries, with override taking precedence."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
