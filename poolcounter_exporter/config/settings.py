"""Environment settings lookup."""

import os
from typing import Dict, Iterable, Optional


ENV_PREFIX = "EXPORTER_"


class Settings:
    """Exporter settings from environment variables."""

    @staticmethod
    def get(key: str, default: Optional[str] = None) -> str:
        """
        Get environment variable value.

        Args:
            key: Environment variable name
            default: Default value if not set

        Returns:
            str: Environment variable value
        """
        value = os.getenv(key, default)
        return value or ""

    @staticmethod
    def env_name(field_name: str, prefix: str = ENV_PREFIX) -> str:
        """Environment variable name for a config field (``EXPORTER_LOG_LEVEL``)."""
        return f"{prefix}{field_name.upper()}"

    @staticmethod
    def collect(field_names: Iterable[str], prefix: str = ENV_PREFIX) -> Dict[str, str]:
        """
        Read all set environment variables for the given config fields.

        Unset and empty variables are left out so model defaults apply.

        Returns:
            Dict[str, str]: Field name to raw environment value
        """
        values = {}
        for name in field_names:
            value = Settings.get(Settings.env_name(name, prefix))
            if value:
                values[name] = value
        return values
