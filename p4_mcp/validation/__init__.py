"""p4-mcp configuration and validation."""

from p4_mcp.validation.config import Config, ConfigError, P4MCPConfig

__all__ = ["Config", "ConfigError", "P4MCPConfig"]
