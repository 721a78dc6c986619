"""
Config Module - Black Box Interface

Purpose: Application configuration management
Interface: get_config(), reset_config(), ConfigModule.get()
Hidden: Config sources, validation logic, environment parsing

Structured sections (sources, sinks, containers) live in
sessionrelay.config.provider; this module holds the scalar server settings.
"""

import os
from typing import Any, Dict


# Configuration Contract: Required and Optional Keys

REQUIRED_CONFIG_KEYS = {
    "host": "API server bind address",
    "port": "API server port",
    "log_level": "Logging level (DEBUG, INFO, WARNING, ERROR)",
    "debounce_seconds": "Delay between the first unpublished change and the status publish",
    "publish_timeout": "Upper bound in seconds for a single sink delivery",
}

OPTIONAL_CONFIG_KEYS = {
    "debug": {
        "description": "Enable debug mode",
        "default": False,
    },
}


class ConfigModule:
    """Configuration management module."""

    def __init__(self):
        """Initialize with environment variables."""
        self._config = self._load_from_env()
        self._validate_required_keys()

    def _validate_required_keys(self) -> None:
        """
        Validate that all required configuration keys are present and sane.

        Raises:
            ValueError: If required keys are missing or out of range
        """
        missing_keys = []
        for key in REQUIRED_CONFIG_KEYS:
            if key not in self._config or self._config[key] is None:
                missing_keys.append(key)

        if missing_keys:
            raise ValueError(
                f"Missing required configuration keys: {', '.join(missing_keys)}. "
                f"Check environment variables and deployment configuration."
            )

        if self._config["debounce_seconds"] < 0:
            raise ValueError("DEBOUNCE_SECONDS must not be negative")
        if self._config["publish_timeout"] <= 0:
            raise ValueError("PUBLISH_TIMEOUT must be positive")

    def _load_from_env(self) -> Dict[str, Any]:
        """Load configuration from environment."""
        return {
            # API settings
            "host": os.getenv("API_HOST", "0.0.0.0"),
            "port": int(os.getenv("API_PORT", "9393")),
            "log_level": os.getenv("LOG_LEVEL", "INFO").upper(),
            "debug": os.getenv("DEBUG", "false").lower() == "true",
            # Publishing settings
            "debounce_seconds": float(os.getenv("DEBOUNCE_SECONDS", "5")),
            "publish_timeout": float(os.getenv("PUBLISH_TIMEOUT", "10")),
        }

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value."""
        return self._config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set configuration value."""
        self._config[key] = value

    def get_all(self) -> Dict[str, Any]:
        """Get all configuration values."""
        return self._config.copy()

    @staticmethod
    def get_config_schema() -> Dict[str, Any]:
        """
        Get the configuration schema (contract) for this module.

        Returns:
            Dictionary with 'required' and 'optional' key specifications

        Example:
            >>> schema = ConfigModule.get_config_schema()
            >>> print(schema['required']['debounce_seconds'])
            'Delay between the first unpublished change and the status publish'
        """
        return {
            "required": REQUIRED_CONFIG_KEYS.copy(),
            "optional": OPTIONAL_CONFIG_KEYS.copy(),
        }


# Singleton instance
_instance = None


def get_config() -> ConfigModule:
    """Get the configuration module singleton."""
    global _instance
    if _instance is None:
        _instance = ConfigModule()
    return _instance


def reset_config() -> None:
    """Drop the cached singleton so the next get_config() rereads the environment."""
    global _instance
    _instance = None
