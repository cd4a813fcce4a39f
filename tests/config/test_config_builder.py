"""Tests for configuration system.

Tests the ConfigBuilder class and configuration loading mechanism,
including YAML loading, environment variable resolution, nested access,
and the runtime environment / reflection settings derived from it.
"""

import os

import pytest

from actionreg.base.errors import ConfigurationError
from actionreg.utils import config as config_module
from actionreg.utils.config import (
    ConfigBuilder,
    get_config_builder,
    get_config_value,
    get_environment,
    get_reflection_settings,
    is_dev_environment,
)


class TestConfigBuilder:
    """Test ConfigBuilder class."""

    def test_config_builder_loads_yaml(self, tmp_path):
        """Test that ConfigBuilder loads valid YAML configuration."""
        config_file = tmp_path / "config.yml"
        config_file.write_text(
            """
runtime:
  environment: dev
reflection:
  host: 0.0.0.0
  port: 4000
"""
        )

        builder = ConfigBuilder(str(config_file))

        assert builder.raw_config["runtime"]["environment"] == "dev"
        assert builder.get("reflection.port") == 4000
        assert builder.get("reflection.missing", "fallback") == "fallback"

    def test_environment_variable_resolution(self, tmp_path, monkeypatch):
        """Test that environment variables are resolved in config."""
        monkeypatch.setenv("TEST_REFLECTION_HOST", "10.0.0.5")
        monkeypatch.delenv("TEST_UNSET_PORT", raising=False)

        config_file = tmp_path / "config.yml"
        config_file.write_text(
            """
reflection:
  host: ${TEST_REFLECTION_HOST}
  port: ${TEST_UNSET_PORT:-3200}
  label: $TEST_REFLECTION_HOST
  untouched: ${TEST_UNSET_PORT}
"""
        )

        builder = ConfigBuilder(str(config_file))

        assert builder.get("reflection.host") == "10.0.0.5"
        assert builder.get("reflection.port") == "3200"
        assert builder.get("reflection.label") == "10.0.0.5"
        assert builder.get("reflection.untouched") == "${TEST_UNSET_PORT}"
        assert builder.get_unexpanded_config()["reflection"]["host"] == "${TEST_REFLECTION_HOST}"

    def test_missing_default_file_gives_empty_config(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        builder = ConfigBuilder()

        assert builder.config_path is None
        assert builder.raw_config == {}

    def test_picks_up_config_in_cwd(self, tmp_path, monkeypatch):
        (tmp_path / "config.yml").write_text("runtime:\n  environment: staging\n")
        monkeypatch.chdir(tmp_path)

        assert ConfigBuilder().get("runtime.environment") == "staging"

    def test_explicit_missing_file_raises(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            ConfigBuilder(str(tmp_path / "nope.yml"))

    def test_invalid_yaml_raises(self, tmp_path):
        config_file = tmp_path / "config.yml"
        config_file.write_text("reflection: [unclosed\n")

        with pytest.raises(ConfigurationError, match="Error parsing YAML"):
            ConfigBuilder(str(config_file))

    def test_non_mapping_raises(self, tmp_path):
        config_file = tmp_path / "config.yml"
        config_file.write_text("- just\n- a list\n")

        with pytest.raises(ConfigurationError, match="dictionary/mapping"):
            ConfigBuilder(str(config_file))

    def test_empty_file_is_empty_config(self, tmp_path):
        config_file = tmp_path / "config.yml"
        config_file.write_text("")

        assert ConfigBuilder(str(config_file)).raw_config == {}

    def test_dotenv_loaded_from_cwd(self, tmp_path, monkeypatch):
        monkeypatch.delenv("DOTENV_ONLY_VALUE", raising=False)
        (tmp_path / ".env").write_text("DOTENV_ONLY_VALUE=from-dotenv\n")
        (tmp_path / "config.yml").write_text("value: ${DOTENV_ONLY_VALUE}\n")
        monkeypatch.chdir(tmp_path)

        try:
            assert ConfigBuilder().get("value") == "from-dotenv"
        finally:
            # load_dotenv writes os.environ directly, outside monkeypatch's undo log
            os.environ.pop("DOTENV_ONLY_VALUE", None)


class TestGlobalConfig:
    def test_get_config_value_with_explicit_path(self, tmp_path):
        config_file = tmp_path / "config.yml"
        config_file.write_text("reflection:\n  port: 5000\n")

        assert get_config_value("reflection.port", config_path=config_file) == 5000
        assert get_config_value("reflection.host", "localhost", config_file) == "localhost"

    def test_explicit_path_is_cached(self, tmp_path):
        config_file = tmp_path / "config.yml"
        config_file.write_text("a: 1\n")

        assert get_config_builder(config_file) is get_config_builder(str(config_file))

    def test_config_file_env_var(self, tmp_path, monkeypatch):
        config_file = tmp_path / "custom.yml"
        config_file.write_text("runtime:\n  environment: dev\n")
        monkeypatch.setenv("CONFIG_FILE", str(config_file))

        assert get_config_value("runtime.environment") == "dev"

    def test_empty_path_rejected(self):
        with pytest.raises(ValueError):
            get_config_value("")

    def test_reset_config_cache(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        first = get_config_builder()

        config_module.reset_config_cache()

        assert get_config_builder() is not first


class TestRuntimeSettings:
    def test_environment_defaults_to_prod(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        assert get_environment() == "prod"
        assert not is_dev_environment()

    def test_env_var_overrides_config(self, tmp_path, monkeypatch):
        config_file = tmp_path / "config.yml"
        config_file.write_text("runtime:\n  environment: prod\n")
        monkeypatch.setenv("ACTIONREG_ENV", "dev")

        assert get_environment(config_file) == "dev"
        assert is_dev_environment(config_file)

    def test_environment_from_config(self, tmp_path):
        config_file = tmp_path / "config.yml"
        config_file.write_text("runtime:\n  environment: dev\n")

        assert is_dev_environment(config_file)

    def test_reflection_settings_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        assert get_reflection_settings() == ("127.0.0.1", 3100)

    def test_reflection_settings_coerce_port(self, tmp_path):
        config_file = tmp_path / "config.yml"
        config_file.write_text("reflection:\n  host: 0.0.0.0\n  port: '4100'\n")

        assert get_reflection_settings(config_file) == ("0.0.0.0", 4100)

    def test_reflection_settings_bad_port(self, tmp_path):
        config_file = tmp_path / "config.yml"
        config_file.write_text("reflection:\n  port: not-a-port\n")

        with pytest.raises(ConfigurationError, match="reflection.port"):
            get_reflection_settings(config_file)
