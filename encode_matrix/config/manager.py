"""
Configuration management for encode matrix.

This module loads the YAML configuration, resolves named sweep presets and
writes default configuration files.
"""

from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError as PydanticValidationError

from encode_matrix.config.models import MatrixConfig, SweepPreset
from encode_matrix.utils import ConfigurationError, get_logger

logger = get_logger(__name__)


class ConfigManager:
    """Manages encode matrix configuration."""

    DEFAULT_CONFIG_LOCATIONS = [
        Path.home() / ".encode-matrix.yaml",
        Path.home() / ".config" / "encode-matrix" / "config.yaml",
        Path.cwd() / ".encode-matrix.yaml",
    ]

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize configuration manager.

        Args:
            config_path: Optional path to configuration file
        """
        self.config_path = config_path
        self._config: Optional[MatrixConfig] = None

    @property
    def config(self) -> MatrixConfig:
        """
        Get current configuration, loading it if necessary.

        Raises:
            ConfigurationError: If configuration cannot be loaded
        """
        if self._config is None:
            self._config = self.load()
        return self._config

    def load(self, config_path: Optional[Path] = None) -> MatrixConfig:
        """
        Load configuration from file or create default.

        An explicit path must exist; otherwise the default locations are
        searched in order and the built-in presets are used if none exists.

        Args:
            config_path: Optional path to configuration file

        Returns:
            Loaded MatrixConfig

        Raises:
            ConfigurationError: If configuration file is missing or invalid
        """
        path = config_path or self.config_path

        if path:
            if not path.exists():
                raise ConfigurationError(f"Configuration file not found: {path}")
            return self._load_from_file(path)

        for default_path in self.DEFAULT_CONFIG_LOCATIONS:
            if default_path.exists():
                logger.info(f"Loading configuration from {default_path}")
                return self._load_from_file(default_path)

        logger.debug("No configuration file found, using defaults")
        return MatrixConfig.create_default()

    def _load_from_file(self, path: Path) -> MatrixConfig:
        """
        Load configuration from YAML file.

        Args:
            path: Path to configuration file

        Returns:
            Loaded MatrixConfig

        Raises:
            ConfigurationError: If file cannot be read or parsed
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Failed to read configuration: {e}") from e

        if data is None:
            raise ConfigurationError(f"Configuration file is empty: {path}")
        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration must be a mapping: {path}")

        try:
            config = MatrixConfig(**data)
        except PydanticValidationError as e:
            raise ConfigurationError(f"Invalid configuration in {path}: {e}") from e

        logger.debug(f"Successfully loaded configuration from {path}")
        return config

    def save(self, path: Optional[Path] = None, config: Optional[MatrixConfig] = None) -> None:
        """
        Save configuration to file.

        Args:
            path: Path to save configuration (uses default if None)
            config: Configuration to save (uses current if None)

        Raises:
            ConfigurationError: If configuration cannot be saved
        """
        cfg = config or self.config
        save_path = path or self.config_path or self.DEFAULT_CONFIG_LOCATIONS[0]

        data = cfg.model_dump(mode="json")
        try:
            save_path.parent.mkdir(parents=True, exist_ok=True)
            with open(save_path, "w", encoding="utf-8") as f:
                yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False, indent=2)
        except OSError as e:
            raise ConfigurationError(f"Failed to save configuration: {e}") from e

        logger.info(f"Configuration saved to {save_path}")

    def init_default_config(self, path: Optional[Path] = None, force: bool = False) -> Path:
        """
        Write the default configuration file.

        Args:
            path: Path to create configuration file (uses default if None)
            force: Overwrite existing file

        Returns:
            Path to created configuration file

        Raises:
            ConfigurationError: If file already exists and force=False
        """
        target_path = path or self.DEFAULT_CONFIG_LOCATIONS[0]

        if target_path.exists() and not force:
            raise ConfigurationError(
                f"Configuration file already exists: {target_path}. Use --force to overwrite."
            )

        self.save(target_path, MatrixConfig.create_default())
        return target_path

    def reload(self) -> MatrixConfig:
        """Reload configuration from file."""
        self._config = None
        return self.config

    def get_preset(self, name: Optional[str] = None) -> SweepPreset:
        """
        Get a sweep preset by name.

        Args:
            name: Preset name (uses the configured default if None)

        Returns:
            SweepPreset

        Raises:
            ConfigurationError: If the preset doesn't exist
        """
        preset_name = name or self.config.default_preset
        preset = self.config.get_preset(preset_name)
        if preset is None:
            available = ", ".join(self.config.presets.keys()) or "none"
            raise ConfigurationError(
                f"Preset '{preset_name}' not found. Available presets: {available}"
            )
        return preset

    @property
    def available_presets(self) -> list[str]:
        """Get list of available preset names."""
        return list(self.config.presets.keys())


# Global configuration manager instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager(config_path: Optional[Path] = None) -> ConfigManager:
    """
    Get global configuration manager instance.

    A new manager is created when an explicit path is given.

    Args:
        config_path: Optional path to configuration file

    Returns:
        ConfigManager instance
    """
    global _config_manager

    if _config_manager is None or config_path is not None:
        _config_manager = ConfigManager(config_path)

    return _config_manager


def get_config(config_path: Optional[Path] = None) -> MatrixConfig:
    """Get encode matrix configuration."""
    return get_config_manager(config_path).config
