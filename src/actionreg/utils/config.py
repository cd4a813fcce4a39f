"""
Configuration System

YAML-backed configuration for actionreg. Features:
- Single-file YAML loading (explicit path, CONFIG_FILE, or ./config.yml)
- .env loading via python-dotenv before variable expansion
- ${VAR}, ${VAR:-default} and $VAR expansion in string values
- Dot-path access with defaults

Unlike an application, a library must be importable without any config
file present, so a missing file yields an empty configuration rather
than an error.
"""

import copy
import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from actionreg.base.errors import ConfigurationError

# Use standard logging (not get_logger) to avoid circular imports with logger.py
logger = logging.getLogger("CONFIG")

ENVIRONMENT_VARIABLE = "ACTIONREG_ENV"
DEFAULT_REFLECTION_HOST = "127.0.0.1"
DEFAULT_REFLECTION_PORT = 3100


class ConfigBuilder:
    """
    Configuration builder.

    Holds both the raw YAML mapping (with ${VAR} placeholders preserved)
    and the expanded mapping used for lookups.
    """

    def __init__(self, config_path: str | Path | None = None):
        """
        Initialize configuration builder.

        Args:
            config_path: Path to a config.yml file. If None, looks in the
                current directory and silently falls back to an empty config.

        Raises:
            ConfigurationError: If an explicit config_path does not exist or the
                file does not contain a mapping.
        """
        dotenv_path = Path.cwd() / ".env"
        if dotenv_path.exists():
            load_dotenv(dotenv_path, override=False)  # Don't override existing env vars
            logger.debug(f"Loaded .env file from {dotenv_path}")

        if config_path is None:
            cwd_config = Path.cwd() / "config.yml"
            self.config_path = cwd_config if cwd_config.exists() else None
        else:
            self.config_path = Path(config_path)
            if not self.config_path.exists():
                raise ConfigurationError(f"Configuration file not found: {self.config_path}")

        self.raw_config, self._unexpanded_config = self._load_config()

    def _load_yaml_file(self, file_path: Path) -> dict[str, Any]:
        """Load and validate a YAML configuration file."""
        try:
            with open(file_path) as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            error_msg = f"Error parsing YAML configuration: {e}"
            logger.error(error_msg)
            raise ConfigurationError(error_msg) from e

        if config is None:
            logger.warning(f"Configuration file is empty: {file_path}")
            return {}

        if not isinstance(config, dict):
            error_msg = f"Configuration file must contain a dictionary/mapping: {file_path}"
            logger.error(error_msg)
            raise ConfigurationError(error_msg)

        return config

    def _resolve_env_vars(self, data: Any) -> Any:
        """Recursively resolve environment variables in configuration data.

        Supports both simple and bash-style default value syntax:
        - ${VAR_NAME} - simple substitution
        - ${VAR_NAME:-default_value} - with default value
        - $VAR_NAME - simple substitution without braces
        """
        if isinstance(data, dict):
            return {key: self._resolve_env_vars(value) for key, value in data.items()}
        elif isinstance(data, list):
            return [self._resolve_env_vars(item) for item in data]
        elif isinstance(data, str):

            def replace_env_var(match):
                if match.group(1):  # ${VAR_NAME:-default} or ${VAR_NAME}
                    var_name = match.group(1)
                    default_value = match.group(2)
                else:  # $VAR_NAME
                    var_name = match.group(3)
                    default_value = None

                env_value = os.environ.get(var_name)
                if env_value is None:
                    if default_value is not None:
                        return default_value
                    logger.debug(f"Environment variable '{var_name}' not found, keeping original value")
                    return match.group(0)
                return env_value

            pattern = r"\$\{([^}:]+)(?::-(.*?))?\}|\$([A-Za-z_][A-Za-z0-9_]*)"
            return re.sub(pattern, replace_env_var, data)
        else:
            return data

    def _load_config(self) -> tuple[dict[str, Any], dict[str, Any]]:
        """Load configuration, returning (expanded_config, unexpanded_config)."""
        if self.config_path is None:
            logger.debug("No config.yml found, using empty configuration")
            return {}, {}

        config = self._load_yaml_file(self.config_path)
        unexpanded_config = copy.deepcopy(config)
        expanded_config = self._resolve_env_vars(config)

        logger.info(f"Loaded configuration from {self.config_path}")
        return expanded_config, unexpanded_config

    def get_unexpanded_config(self) -> dict[str, Any]:
        """Get configuration with environment variable placeholders preserved."""
        return copy.deepcopy(self._unexpanded_config)

    def get(self, path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation path."""
        keys = path.split(".")
        value = self.raw_config

        try:
            for key in keys:
                value = value[key]
            return value
        except (KeyError, TypeError):
            return default


# =============================================================================
# GLOBAL CONFIGURATION
# =============================================================================

_default_config: ConfigBuilder | None = None

# Per-path config cache for explicit config paths
_config_cache: dict[str, ConfigBuilder] = {}


def _get_config(config_path: str | Path | None = None) -> ConfigBuilder:
    """Get configuration instance (singleton, or cached per explicit path)."""
    global _default_config

    if config_path is None:
        if _default_config is None:
            config_file = os.environ.get("CONFIG_FILE")
            _default_config = ConfigBuilder(config_file) if config_file else ConfigBuilder()
            logger.debug("Initialized default configuration system")
        return _default_config

    resolved_path = str(Path(config_path).resolve())
    if resolved_path not in _config_cache:
        logger.debug(f"Loading configuration from explicit path: {resolved_path}")
        _config_cache[resolved_path] = ConfigBuilder(resolved_path)

    return _config_cache[resolved_path]


def get_config_builder(config_path: str | Path | None = None) -> ConfigBuilder:
    """Get configuration builder instance for full config access.

    Args:
        config_path: Optional explicit path to configuration file. If None,
            uses the default singleton (CONFIG_FILE env var or cwd/config.yml).

    Returns:
        ConfigBuilder instance

    Examples:
        >>> config = get_config_builder()
        >>> port = config.get("reflection.port", 3100)
    """
    return _get_config(config_path)


def get_config_value(path: str, default: Any = None, config_path: str | Path | None = None) -> Any:
    """
    Get a specific configuration value by dot-separated path.

    Args:
        path: Dot-separated configuration path (e.g., "reflection.port")
        default: Default value to return if path is not found
        config_path: Optional explicit path to configuration file

    Returns:
        The configuration value at the specified path, or default if not found

    Raises:
        ValueError: If path is empty or None
    """
    if not path:
        raise ValueError("Configuration path cannot be empty or None")

    return _get_config(config_path).get(path, default)


def reset_config_cache() -> None:
    """Drop the default and per-path configuration instances (used by tests)."""
    global _default_config
    _default_config = None
    _config_cache.clear()


def get_environment(config_path: str | Path | None = None) -> str:
    """Return the runtime environment name.

    ``ACTIONREG_ENV`` wins over ``runtime.environment`` from config.yml.
    Defaults to ``"prod"``.
    """
    env_value = os.environ.get(ENVIRONMENT_VARIABLE)
    if env_value:
        return env_value
    return str(get_config_value("runtime.environment", "prod", config_path))


def is_dev_environment(config_path: str | Path | None = None) -> bool:
    """True when the runtime environment is ``dev``."""
    return get_environment(config_path) == "dev"


def get_reflection_settings(config_path: str | Path | None = None) -> tuple[str, int]:
    """Return ``(host, port)`` for the reflection API.

    Raises:
        ConfigurationError: If ``reflection.port`` is not an integer.
    """
    host = get_config_value("reflection.host", DEFAULT_REFLECTION_HOST, config_path)
    port = get_config_value("reflection.port", DEFAULT_REFLECTION_PORT, config_path)
    try:
        port = int(port)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"reflection.port must be an integer, got {port!r}") from e
    return str(host), port
