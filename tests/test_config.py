"""Tests for configuration management."""

import tempfile
from pathlib import Path

import pytest

from p4_mcp.tools.schema import ExecutionMode
from p4_mcp.validation.config import Config, ConfigError, P4MCPConfig, env_flag


class TestConfig:
    """Tests for Config class."""

    @pytest.fixture
    def temp_config_dir(self):
        """Create a temporary config directory."""
        with tempfile.TemporaryDirectory() as tmpdir:
            yield Path(tmpdir)

    def test_deep_merge(self):
        """Test deep merging of dictionaries."""
        config = Config()

        base = {
            "a": 1,
            "b": {"c": 2, "d": 3},
            "e": [1, 2, 3],
        }

        override = {
            "b": {"c": 10, "f": 5},
            "g": "new",
        }

        result = config._deep_merge(base, override)

        assert result["a"] == 1
        assert result["b"]["c"] == 10
        assert result["b"]["d"] == 3
        assert result["b"]["f"] == 5
        assert result["e"] == [1, 2, 3]
        assert result["g"] == "new"

    def test_get_merged_config(self):
        """Test getting merged configuration."""
        config = Config(
            global_config={"p4": {"binary": "/usr/bin/p4", "timeout": 30}},
            local_config={"p4": {"binary": "/opt/p4"}},
        )
        merged = config.get_merged_config()

        # Local should override global
        assert merged["p4"]["binary"] == "/opt/p4"
        # Global should be preserved
        assert merged["p4"]["timeout"] == 30

    def test_defaults_select_live(self):
        config = Config()
        assert config.execution_mode is ExecutionMode.LIVE
        assert config.merged.p4.binary == "p4"
        assert config.merged.p4.timeout is None

    def test_mock_mode_from_file(self):
        config = Config(local_config={"server": {"mock_mode": True}})
        assert config.execution_mode is ExecutionMode.MOCK

    def test_env_overrides_files(self):
        config = Config(
            local_config={"server": {"mock_mode": False}, "p4": {"binary": "/opt/p4"}},
            environ={"P4_MOCK_MODE": "1", "P4MCP_P4_BINARY": "/custom/p4"},
        )

        assert config.execution_mode is ExecutionMode.MOCK
        assert config.merged.p4.binary == "/custom/p4"

    def test_env_false_disables_mock(self):
        config = Config(
            local_config={"server": {"mock_mode": True}},
            environ={"P4_MOCK_MODE": "false"},
        )
        assert config.execution_mode is ExecutionMode.LIVE

    def test_set_mock_mode_beats_env(self):
        config = Config(environ={"P4_MOCK_MODE": "0"})
        assert config.execution_mode is ExecutionMode.LIVE

        config.set_mock_mode(True)
        assert config.execution_mode is ExecutionMode.MOCK

    def test_invalid_config(self):
        config = Config(local_config={"p4": {"timeout": "soon"}})
        with pytest.raises(ConfigError, match="Invalid configuration"):
            config.merged

    def test_invalid_log_level(self):
        config = Config(local_config={"server": {"log_level": "chatty"}})
        with pytest.raises(ConfigError):
            config.merged

    def test_load_yaml(self, temp_config_dir):
        path = temp_config_dir / "config.yaml"
        path.write_text("server:\n  mock_mode: true\n  log_level: debug\n")

        data = Config._load_yaml(path)

        assert data == {"server": {"mock_mode": True, "log_level": "debug"}}
        assert Config(local_config=data).merged.server.log_level == "DEBUG"

    def test_load_yaml_missing_file(self, temp_config_dir):
        assert Config._load_yaml(temp_config_dir / "nope.yaml") == {}
        assert Config._load_yaml(None) == {}

    def test_load_yaml_invalid(self, temp_config_dir):
        path = temp_config_dir / "config.yaml"
        path.write_text("server: [unclosed\n")
        with pytest.raises(ConfigError, match="Failed to load config"):
            Config._load_yaml(path)

    def test_load_yaml_not_mapping(self, temp_config_dir):
        path = temp_config_dir / "config.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ConfigError, match="must contain a mapping"):
            Config._load_yaml(path)

    def test_load_finds_local_config(self, temp_config_dir, monkeypatch):
        project = temp_config_dir / "project"
        nested = project / "src" / "pkg"
        nested.mkdir(parents=True)
        (project / ".p4mcp").mkdir()
        (project / ".p4mcp" / "config.yaml").write_text("p4:\n  binary: /local/p4\n")

        monkeypatch.setattr(Config, "GLOBAL_CONFIG_DIR", temp_config_dir / "home")
        monkeypatch.chdir(nested)
        monkeypatch.delenv("P4_MOCK_MODE", raising=False)
        monkeypatch.delenv("P4MCP_P4_BINARY", raising=False)

        config = Config.load()

        assert config.merged.p4.binary == "/local/p4"
        assert config.execution_mode is ExecutionMode.LIVE

    def test_load_explicit_path_missing(self, temp_config_dir):
        with pytest.raises(ConfigError, match="not found"):
            Config.load(temp_config_dir / "missing.yaml")


class TestP4MCPConfig:
    """Tests for P4MCPConfig schema."""

    def test_default_config(self):
        config = P4MCPConfig()

        assert config.server.mock_mode is False
        assert config.server.log_level == "INFO"
        assert config.p4.binary == "p4"


class TestEnvFlag:
    @pytest.mark.parametrize("value", ["1", "true", "YES", "on", "anything"])
    def test_truthy(self, value):
        assert env_flag(value) is True

    @pytest.mark.parametrize("value", [None, "", "0", "false", "No", "off"])
    def test_falsy(self, value):
        assert env_flag(value) is False
