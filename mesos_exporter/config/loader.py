"""Configuration loader: YAML file, environment fallbacks and CLI flags."""

import argparse
import yaml
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional
from .models import ExporterConfig
from .settings import Settings


class ConfigLoader:
    """Load and validate exporter configuration."""

    @staticmethod
    def load_from_file(config_path: str) -> ExporterConfig:
        """
        Load configuration from YAML file with environment variable substitution.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            ExporterConfig: Validated configuration object

        Raises:
            FileNotFoundError: If config file doesn't exist
            yaml.YAMLError: If YAML parsing fails
            pydantic.ValidationError: If configuration validation fails
        """
        return ExporterConfig(**ConfigLoader._read_yaml(config_path))

    @staticmethod
    def from_args(args: argparse.Namespace) -> ExporterConfig:
        """
        Build configuration from parsed command-line arguments.

        Values come from, in order of precedence: explicit flags, the
        environment fallbacks, the optional YAML file, model defaults.

        Args:
            args: Namespace produced by the exporter's argument parser

        Returns:
            ExporterConfig: Validated configuration object

        Raises:
            FileNotFoundError: If --config points to a missing file
            pydantic.ValidationError: If configuration validation fails
        """
        raw = ConfigLoader._read_yaml(args.config) if getattr(args, "config", None) else {}
        auth = dict(raw.pop("auth", None) or {})
        discovery = dict(raw.pop("discovery", None) or {})

        ConfigLoader._set(raw, "addr", args.addr)
        ConfigLoader._set(raw, "master_url", args.master)
        ConfigLoader._set(raw, "slave_url", args.slave)
        ConfigLoader._set(raw, "timeout", args.timeout)
        ConfigLoader._set(raw, "exported_task_labels", args.exported_task_labels)
        ConfigLoader._set(raw, "exported_slave_attributes", args.exported_slave_attributes)
        ConfigLoader._set(raw, "log_level", args.log_level or Settings.get(Settings.LOG_LEVEL_VAR))

        ConfigLoader._set(auth, "trusted_certs", args.trusted_certs)
        ConfigLoader._set(auth, "login_url", args.login_url)
        ConfigLoader._set(auth, "username", Settings.flag_or_env(args.username, Settings.USERNAME_VAR))
        ConfigLoader._set(auth, "password", Settings.flag_or_env(args.password, Settings.PASSWORD_VAR))
        ConfigLoader._set(
            auth, "private_key", Settings.flag_or_env(args.private_key, Settings.PRIVATE_KEY_VAR)
        )
        if args.strict_mode:
            auth["strict_mode"] = True
        if args.skip_ssl_verify:
            auth["skip_ssl_verify"] = True

        ConfigLoader._set(discovery, "companion_port", args.sd_port or Settings.get(Settings.SD_PORT_VAR))
        ConfigLoader._set(discovery, "labels", args.sd_labels or Settings.get(Settings.SD_LABELS_VAR))

        raw["auth"] = auth
        raw["discovery"] = discovery
        return ExporterConfig(**raw)

    @staticmethod
    def _set(target: Dict[str, Any], key: str, value: Optional[Any]) -> None:
        """Override *key* only when a non-empty value was supplied."""
        if value:
            target[key] = value

    @staticmethod
    def _read_yaml(config_path: str) -> Dict[str, Any]:
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_file, 'r') as f:
            raw_config = yaml.safe_load(f) or {}

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
