"""Configuration loader for YAML files and environment variables."""

import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from dotenv import load_dotenv

from .config_schema import AppConfig

DEFAULT_CONFIG_PATH = "config.yaml"

# (section, key) each environment variable maps to
ENV_OVERRIDES = {
    "NOTION_API_KEY": ("notion", "api_key"),
    "NOTION_DATABASE_ID": ("notion", "database_id"),
    "OPENAI_API_KEY": ("tts", "api_key"),
    "CLOUDFLARE_ACCOUNT_ID": ("storage", "account_id"),
    "CLOUDFLARE_R2_ACCESS_KEY_ID": ("storage", "access_key_id"),
    "CLOUDFLARE_R2_SECRET_ACCESS_KEY": ("storage", "secret_access_key"),
    "CLOUDFLARE_R2_BUCKET_NAME": ("storage", "bucket_name"),
    "CLOUDFLARE_R2_PUBLIC_URL": ("storage", "public_url"),
}


class ConfigLoader:
    """Load and validate configuration from YAML files and the environment."""

    @staticmethod
    def load_config(
        path: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
        load_env_file: bool = True,
    ) -> AppConfig:
        """
        Load configuration.

        The YAML file is optional when no path is given explicitly; credentials
        usually come from the environment (or a .env file).

        Args:
            path: Path to configuration file (default: config.yaml if present)
            environ: Environment mapping (default: os.environ)
            load_env_file: Whether to read a .env file into the environment first

        Returns:
            Validated AppConfig instance

        Raises:
            FileNotFoundError: If an explicitly named config file doesn't exist
            ValueError: If config is invalid
        """
        if load_env_file:
            load_dotenv()
        if environ is None:
            environ = os.environ

        config_dict: Dict[str, Any] = {}
        if path is not None:
            config_path = Path(path)
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {path}")
            config_dict = ConfigLoader._read_yaml(config_path)
        elif Path(DEFAULT_CONFIG_PATH).exists():
            config_dict = ConfigLoader._read_yaml(Path(DEFAULT_CONFIG_PATH))

        for env_name, (section, key) in ENV_OVERRIDES.items():
            value = environ.get(env_name)
            if value:
                config_dict.setdefault(section, {})
                config_dict[section][key] = value

        return AppConfig(**config_dict)

    @staticmethod
    def _read_yaml(config_path: Path) -> Dict[str, Any]:
        with open(config_path, "r", encoding="utf-8") as f:
            config_dict = yaml.safe_load(f)

        if config_dict is None:
            return {}
        if not isinstance(config_dict, dict):
            raise ValueError(f"Configuration file must contain a mapping: {config_path}")
        # A section header with nothing under it ("notion:") loads as None
        return {key: {} if value is None else value for key, value in config_dict.items()}


def load_config(
    path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
    load_env_file: bool = True,
) -> AppConfig:
    """
    Convenience function to load configuration.

    Args:
        path: Path to configuration file
        environ: Environment mapping (default: os.environ)
        load_env_file: Whether to read a .env file first

    Returns:
        Validated AppConfig instance
    """
    return ConfigLoader.load_config(path, environ=environ, load_env_file=load_env_file)
