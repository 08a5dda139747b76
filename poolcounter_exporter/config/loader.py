"""Configuration loader for environment variables and optional YAML files."""

import yaml
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

from ..exceptions import ConfigurationError
from .models import ExporterConfig
from .settings import ENV_PREFIX, Settings


class ConfigLoader:
    """Load and validate exporter configuration."""

    @staticmethod
    def load(config_path: Optional[str] = None, prefix: str = ENV_PREFIX) -> ExporterConfig:
        """
        Load configuration from an optional YAML file overlaid with environment variables.

        Args:
            config_path: Optional path to YAML configuration file
            prefix: Environment variable prefix

        Returns:
            ExporterConfig: Validated configuration object

        Raises:
            ConfigurationError: If the YAML file is missing or malformed
            pydantic.ValidationError: If configuration validation fails
        """
        raw_config: Dict[str, Any] = {}
        if config_path:
            raw_config = ConfigLoader._read_file(config_path)

        raw_config.update(Settings.collect(ExporterConfig.model_fields, prefix))

        return ExporterConfig(**raw_config)

    @staticmethod
    def _read_file(config_path: str) -> Dict[str, Any]:
        """
        Read a YAML mapping with environment variable substitution.

        Raises:
            ConfigurationError: If the file doesn't exist or isn't a YAML mapping
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with open(config_file, 'r') as f:
                raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

        if raw_config is None:
            return {}
        if not isinstance(raw_config, dict):
            raise ConfigurationError(f"Configuration file must contain a mapping: {config_path}")

        return ConfigLoader._substitute_env_vars(raw_config)

    @staticmethod
    def _substitute_env_vars(obj: Any) -> Any:
        """
        Recursively substitute ${ENV_VAR} placeholders with environment values.

        Args:
            obj: Object to process (str, dict, list, or primitive)

        Returns:
            Object with environment variables substituted
        """
        if isinstance(obj, str):
            pattern = r'\$\{(\w+)\}'
            return re.sub(pattern, lambda m: os.getenv(m.group(1), ''), obj)

        elif isinstance(obj, dict):
            return {k: ConfigLoader._substitute_env_vars(v) for k, v in obj.items()}

        elif isinstance(obj, list):
            return [ConfigLoader._substitute_env_vars(item) for item in obj]

        return obj
