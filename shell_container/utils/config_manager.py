"""Configuration management utilities."""

import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError

from ..models.config import ManagerConfig
from ..core.constants import CONTEXT_DIR_ENV_VAR, IMAGE_ENV_VAR
from ..services.exceptions import ConfigError


class ConfigManager:
    """Resolves the manager configuration.

    Values come from an optional JSON file, then the environment, then
    explicit overrides, each layer winning over the previous one.
    """

    def __init__(self, config_file: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None):
        """Initialize config manager."""
        self.config_file = Path(config_file) if config_file else None
        self.environ = os.environ if environ is None else environ

    def load_file(self) -> Dict[str, Any]:
        """Load the JSON configuration file, if any."""
        if not self.config_file or not self.config_file.exists():
            return {}
        try:
            data = json.loads(self.config_file.read_text())
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Could not read {self.config_file}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"{self.config_file} must contain a JSON object")
        return data

    def load_environment(self) -> Dict[str, Any]:
        """Read configuration values from environment variables."""
        values = {}
        if self.environ.get(IMAGE_ENV_VAR):
            values['image_name'] = self.environ[IMAGE_ENV_VAR]
        if self.environ.get(CONTEXT_DIR_ENV_VAR):
            values['context_dir'] = self.environ[CONTEXT_DIR_ENV_VAR]
        return values

    def get_config(self, **overrides) -> ManagerConfig:
        """Build the effective configuration.

        Raises:
            ConfigError: If no image name is configured or a value is invalid
        """
        data = self.load_file()
        data.update(self.load_environment())
        data.update({key: value for key, value in overrides.items() if value is not None})

        if not data.get('image_name'):
            raise ConfigError(
                f"No image name configured. Set {IMAGE_ENV_VAR} or pass --image."
            )
        try:
            return ManagerConfig(**data)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e
