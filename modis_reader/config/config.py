# modis_reader/config/config.py

import copy
import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, Union

from . import defaults
from ..exceptions import ConfigError

CONFIG_ENV_VAR = 'MODIS_READER_CONFIG'


class Config:
    """Configuration manager with YAML override support."""

    def __init__(self, config_file: Optional[Union[str, Path]] = None,
                 overrides: Optional[Dict[str, Any]] = None):
        self.settings = self.load_defaults()
        self.config_file = None

        if config_file is None:
            config_file = self._find_config_file()
        elif not Path(config_file).exists():
            raise ConfigError(f"Config not found: {config_file}")

        if config_file is not None:
            self._load_yaml_config(Path(config_file))
            self.config_file = Path(config_file)

        if overrides:
            self._deep_merge(self.settings, overrides)

    def _find_config_file(self) -> Optional[Path]:
        """Find config.yml from the environment or the working directory."""
        potential_locations = []
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            potential_locations.append(Path(env_path))
        potential_locations.append(Path.cwd() / 'config.yml')

        for location in potential_locations:
            if location.exists() and location.is_file():
                return location

        return None

    def load_defaults(self) -> Dict[str, Any]:
        """Load default configuration settings."""
        return {
            'reader': copy.deepcopy(defaults.READER),
            'gap_recovery': copy.deepcopy(defaults.GAP_RECOVERY),
            'logging': copy.deepcopy(defaults.LOGGING),
        }

    def _load_yaml_config(self, config_file: Path):
        """Load and merge configuration from a YAML file."""
        try:
            with open(config_file, 'r') as file:
                yaml_config = yaml.safe_load(file)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_file}", e)

        if yaml_config is None:
            return
        if not isinstance(yaml_config, dict):
            raise ConfigError(f"Expected YAML mapping at {config_file}")
        self._deep_merge(self.settings, yaml_config)

    def _deep_merge(self, base: dict, override: dict):
        """Deep merge override into base dictionary."""
        for key, value in override.items():
            if isinstance(value, dict) and key in base and isinstance(base[key], dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value using dot notation."""
        keys = key.split(".")
        value = self.settings

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value

    def set(self, key: str, value: Any) -> None:
        """Set configuration value using dot notation."""
        keys = key.split(".")
        target = self.settings
        for k in keys[:-1]:
            target = target.setdefault(k, {})
        target[keys[-1]] = value

    @property
    def reader(self) -> Dict[str, Any]:
        return self.settings.get('reader', {})

    @property
    def gap_recovery(self) -> Dict[str, Any]:
        return self.settings.get('gap_recovery', {})

    @property
    def logging(self) -> Dict[str, Any]:
        return self.settings.get('logging', {})
