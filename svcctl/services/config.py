"""Configuration discovery and file operations."""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from svcctl.exceptions import ConfigError
from svcctl.models.config import SvcctlConfig

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "SVCCTL_CONFIG"
CONFIG_DIR_NAME = ".svcctl"
CONFIG_FILE_NAME = "config.yaml"


def global_config_path() -> Path:
    """Get the per-user config file path."""
    return Path.home() / CONFIG_DIR_NAME / CONFIG_FILE_NAME


class ConfigService:
    """Service for locating, reading and writing the svcctl config file."""

    def __init__(self, config_path: Path | None = None) -> None:
        """Initialize the config service.

        Args:
            config_path: Optional explicit config file. If not provided,
                        the file is discovered on first use.
        """
        self._config_path = config_path
        self._discovered = config_path is not None

    @property
    def config_path(self) -> Path | None:
        """Get the active config file, discovering it if necessary.

        Returns:
            Path to the config file, or None when none exists.
        """
        if not self._discovered:
            self._config_path = self._discover_config()
            self._discovered = True
        return self._config_path

    def _discover_config(self) -> Path | None:
        """Discover the config file.

        Search order:
        1. SVCCTL_CONFIG environment variable
        2. .svcctl/config.yaml in current directory
        3. ~/.svcctl/config.yaml global config

        Returns:
            Path to the config file, or None to use defaults.

        Raises:
            ConfigError: If SVCCTL_CONFIG points at a missing file.
        """
        # 1. Environment variable
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            path = Path(env_path).expanduser()
            if path.is_file():
                return path
            raise ConfigError(f"{CONFIG_ENV_VAR} is set but the file does not exist", str(path))

        # 2. Local config
        local_config = Path.cwd() / CONFIG_DIR_NAME / CONFIG_FILE_NAME
        if local_config.is_file():
            return local_config

        # 3. Global config
        global_config = global_config_path()
        if global_config.is_file():
            return global_config

        return None

    def get_raw(self) -> dict[str, Any]:
        """Read the config file as a dictionary.

        Returns:
            Configuration dictionary, empty when no file exists.

        Raises:
            ConfigError: If the file cannot be read or parsed.
        """
        path = self.config_path
        if path is None or not path.exists():
            return {}

        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to read config: {e}", str(path)) from e

        if not isinstance(data, dict):
            raise ConfigError("Config must be a mapping", str(path))
        return data

    def load(self) -> SvcctlConfig:
        """Load and validate the configuration.

        Returns:
            SvcctlConfig with file values over built-in defaults.

        Raises:
            ConfigError: If the file is unreadable or a value is invalid.
        """
        data = self.get_raw()
        try:
            config = SvcctlConfig(**data)
        except ValidationError as e:
            raise ConfigError(f"Invalid config: {e}", str(self.config_path)) from e
        logger.debug("Loaded config from %s", self.config_path or "defaults")
        return config

    def set_raw(self, data: dict[str, Any]) -> Path:
        """Write the configuration.

        Writes to the active config file, or to the global one when none
        exists yet.

        Args:
            data: Configuration dictionary to write.

        Returns:
            Path that was written.
        """
        path = self.config_path or global_config_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(data, f, default_flow_style=False)
        self._config_path = path
        return path


def load_config(config_path: Path | None = None) -> SvcctlConfig:
    """Load the configuration from an explicit or discovered file."""
    return ConfigService(config_path).load()
