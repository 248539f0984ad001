"""Configuration management for crumbler."""

import json
import logging
from pathlib import Path
from typing import Any

from .constants import (
    CONFIG_DIR,
    CONFIG_FILE,
    CONFIG_VERSION,
    DEFAULT_SETTINGS,
    LOGS_DIR,
    OUTPUT_FORMATS,
    SUPPORTED_BROWSERS,
)
from .errors import ConfigError

logger = logging.getLogger(__name__)


class ConfigManager:
    """Manages application configuration loading, validation, and persistence."""

    def __init__(self, config_path: Path | None = None):
        self.config_path = config_path or CONFIG_FILE
        self._config: dict[str, Any] = {}
        self._ensure_directories()
        self.load()

    def _ensure_directories(self) -> None:
        """Create application directories if they don't exist."""
        directories = {self.config_path.parent}
        if self.config_path == CONFIG_FILE:
            directories.update((CONFIG_DIR, LOGS_DIR))
        for directory in directories:
            directory.mkdir(parents=True, exist_ok=True)

    def _create_default_config(self) -> dict[str, Any]:
        """Generate default configuration."""
        return {
            "version": CONFIG_VERSION,
            "settings": DEFAULT_SETTINGS.copy(),
        }

    def _validate_settings(self, settings: dict[str, Any]) -> list[str]:
        """Validate the settings section and return list of errors."""
        errors = []

        unknown = set(settings) - set(DEFAULT_SETTINGS)
        for key in sorted(unknown):
            errors.append(f"Unknown setting '{key}'")

        browser = settings.get("browser", DEFAULT_SETTINGS["browser"])
        if browser not in SUPPORTED_BROWSERS:
            errors.append(
                f"Invalid browser '{browser}': must be one of "
                f"{', '.join(SUPPORTED_BROWSERS)}"
            )

        output_format = settings.get("output_format", DEFAULT_SETTINGS["output_format"])
        if output_format not in OUTPUT_FORMATS:
            errors.append(
                f"Invalid output_format '{output_format}': must be one of "
                f"{', '.join(OUTPUT_FORMATS)}"
            )

        for flag in ("bypass_lock", "debug"):
            if not isinstance(settings.get(flag, False), bool):
                errors.append(f"'{flag}' must be a boolean")

        return errors

    def _validate_config(self, config: Any) -> list[str]:
        """Validate configuration and return list of errors."""
        if not isinstance(config, dict):
            return ["Configuration must be a JSON object"]

        errors = []

        if not isinstance(config.get("version"), int):
            errors.append("Missing or invalid 'version' field")

        settings = config.get("settings")
        if not isinstance(settings, dict):
            errors.append("Missing or invalid 'settings' field")
        else:
            errors.extend(self._validate_settings(settings))

        return errors

    def load(self) -> None:
        """Load configuration from file, creating defaults if needed."""
        if not self.config_path.exists():
            logger.info("Config file not found, creating defaults at %s", self.config_path)
            self._config = self._create_default_config()
            self.save()
            return

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                loaded_config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in config file: {e}") from e

        errors = self._validate_config(loaded_config)
        if errors:
            for error in errors:
                logger.error("Config validation error: %s", error)
            raise ConfigError(f"Configuration validation failed: {'; '.join(errors)}")

        self._config = loaded_config
        logger.debug("Configuration loaded from %s", self.config_path)

    def save(self) -> None:
        """Save current configuration to file."""
        with open(self.config_path, "w", encoding="utf-8") as f:
            json.dump(self._config, f, indent=2)
        logger.debug("Configuration saved to %s", self.config_path)

    @property
    def config(self) -> dict[str, Any]:
        """Return a copy of the current configuration."""
        return self._config.copy()

    @property
    def settings(self) -> dict[str, Any]:
        """Return application settings, with defaults for missing keys."""
        settings = DEFAULT_SETTINGS.copy()
        settings.update(self._config.get("settings", {}))
        return settings
