"""
================================================================================
Configuration Loader
================================================================================

YAML-based configuration management with environment variable override support.

Features:
    - Hierarchical YAML configuration loading (project config/config.yaml, or the
      defaults shipped in the package)
    - Environment overlay (config/{ENVIRONMENT}.yaml merged over config.yaml)
    - Environment variable override (BROWSER_ENGINE overrides browser.engine)
    - Dot notation path access
    - Default value support

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from loguru import logger

# Default configuration file paths
DEFAULT_CONFIG_DIR = Path(__file__).parent.parent / "config"
DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / "config.yaml"
PROJECT_CONFIG_PATH = Path("config") / "config.yaml"
CONFIG_PATH_ENV = "STEADYUI_CONFIG"


class ConfigurationError(Exception):
    """Raised when configuration loading or a configured value is invalid."""
    pass


def resolve_config_path(config_path: Optional[Path] = None) -> Path:
    """
    Pick the configuration file to load.

    Lookup order:
        1. Explicit path
        2. STEADYUI_CONFIG environment variable
        3. config/config.yaml under the current working directory
        4. Defaults shipped with the package
    """
    if config_path:
        return Path(config_path)
    env_path = os.getenv(CONFIG_PATH_ENV)
    if env_path:
        return Path(env_path)
    project_path = Path.cwd() / PROJECT_CONFIG_PATH
    if project_path.exists():
        return project_path
    return DEFAULT_CONFIG_PATH


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Deep merges two dictionaries, with override taking precedence.
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class ConfigLoader:
    """
    Configuration loader with YAML and environment variable support.

    Configuration hierarchy (highest to lowest priority):
        1. Environment variables (BROWSER_HEADLESS)
        2. Environment overlay file (config/staging.yaml when ENVIRONMENT=staging)
        3. YAML configuration file
        4. Default values

    Usage:
        >>> config = ConfigLoader()
        >>> config.get("browser.engine", "chromium")
        'firefox'  # From YAML or env var

        >>> config.get("retry.max_retry_count", 1)
        1  # Default value if not configured

    Environment Variable Mapping:
        - browser.engine -> BROWSER_ENGINE
        - browser.headless -> BROWSER_HEADLESS
        - retry.max_retry_count -> RETRY_MAX_RETRY_COUNT
        - ui.base_url -> UI_BASE_URL
    """

    _instance: Optional["ConfigLoader"] = None
    _config: Dict[str, Any] = {}

    def __new__(cls, config_path: Optional[Path] = None) -> "ConfigLoader":
        """
        Singleton pattern - return existing instance if available.

        This ensures configuration is loaded only once per process,
        improving performance and ensuring consistency.
        """
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path: Optional[Path] = None) -> None:
        """
        Initialize configuration loader.

        Args:
            config_path: Path to YAML configuration file.
                        Resolved by `resolve_config_path` if not specified.
        """
        if getattr(self, "_initialized", False):
            return

        self._config_path = resolve_config_path(config_path)
        self._load_config()
        self._initialized = True

    def _read_yaml(self, path: Path) -> Dict[str, Any]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                return yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in configuration file {path}: {e}"
            ) from e

    def _load_config(self) -> None:
        """Load configuration from YAML file and the environment overlay."""
        if not self._config_path.exists():
            logger.warning(
                f"Configuration file not found: {self._config_path}. "
                f"Using defaults and environment variables only."
            )
            self._config = {}
            return

        self._config = self._read_yaml(self._config_path)
        logger.debug(f"Loaded configuration from: {self._config_path}")

        env = os.getenv("ENVIRONMENT")
        if env:
            overlay_path = self._config_path.parent / f"{env}.yaml"
            if overlay_path.exists():
                self._config = _deep_merge(self._config, self._read_yaml(overlay_path))
                logger.debug(f"Merged environment config: {overlay_path}")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by dot-notation path.

        First checks environment variables, then YAML config, then default.

        Args:
            key: Dot-notation path (e.g., "browser.engine")
            default: Default value if key not found

        Returns:
            Configuration value or default

        Examples:
            >>> config.get("browser.implicit_wait")
            10

            >>> config.get("wait.poll_interval", 0.5)
            0.5
        """
        # Check environment variable first
        env_key = key.upper().replace(".", "_")
        env_value = os.environ.get(env_key)
        if env_value is not None:
            return self._convert_type(env_value, default)

        # Navigate YAML config by dot notation
        value = self._config
        for part in key.split("."):
            if isinstance(value, dict):
                value = value.get(part)
            else:
                value = None

            if value is None:
                return default

        return value

    def get_section(self, section: str) -> Dict[str, Any]:
        """
        Get entire configuration section.

        Args:
            section: Section name (e.g., "browser", "retry")

        Returns:
            Section dictionary or empty dict if not found
        """
        return self._config.get(section, {})

    def reload(self) -> None:
        """
        Reload configuration from file.

        Useful when configuration file has been updated during runtime.
        """
        self._load_config()
        logger.info(f"Configuration reloaded from: {self._config_path}")

    def _convert_type(self, value: str, reference: Any) -> Any:
        """
        Convert string value to match reference type.

        Used for environment variables which are always strings.
        """
        if reference is None:
            return value

        if isinstance(reference, bool):
            return value.lower() in ("true", "1", "yes", "on")
        if isinstance(reference, int):
            try:
                return int(value)
            except ValueError:
                return value
        if isinstance(reference, float):
            try:
                return float(value)
            except ValueError:
                return value

        return value

    @classmethod
    def reset(cls) -> None:
        """
        Reset singleton instance.

        Useful for testing when configuration needs to be reloaded
        with different settings.
        """
        cls._instance = None
        cls._config = {}


__all__ = [
    "ConfigLoader",
    "ConfigurationError",
    "resolve_config_path",
]
