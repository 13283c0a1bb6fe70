"""Environment settings used as fallbacks for command-line flags."""

import os
from typing import Optional


class Settings:
    """Application settings from environment variables."""

    USERNAME_VAR = "MESOS_EXPORTER_USERNAME"
    PASSWORD_VAR = "MESOS_EXPORTER_PASSWORD"
    PRIVATE_KEY_VAR = "MESOS_EXPORTER_PRIVATE_KEY"
    SD_PORT_VAR = "CADVISOR_PORT"
    SD_LABELS_VAR = "LABELS"
    LOG_LEVEL_VAR = "LOG_LEVEL"

    @staticmethod
    def get(key: str, default: Optional[str] = None) -> str:
        """
        Get environment variable value.

        Args:
            key: Environment variable name
            default: Default value if not set

        Returns:
            str: Environment variable value, empty string when unset
        """
        return os.getenv(key, default) or ""

    @staticmethod
    def flag_or_env(flag_value: Optional[str], key: str) -> str:
        """Return the flag value when given, else the environment variable."""
        if flag_value:
            return flag_value
        return Settings.get(key)
