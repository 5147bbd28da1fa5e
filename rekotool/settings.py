"""
Configuration Loading
Reads the YAML configuration file and merges it with command-line values.
"""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml


DEFAULT_CONFIG_PATH = "config/config.yaml"


class ConfigurationError(ValueError):
    """Raised when settings are missing or invalid before a batch starts."""


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load the YAML configuration file.

    The default path is optional and yields an empty config when absent;
    an explicitly given path must exist.

    Args:
        config_path: Path to the config file, or None for the default

    Returns:
        Parsed configuration dictionary
    """
    explicit = config_path is not None
    path = Path(config_path if explicit else DEFAULT_CONFIG_PATH)

    if not path.exists():
        if explicit:
            raise ConfigurationError(f"Configuration file not found: {path}")
        return {}

    with open(path, 'r') as file:
        try:
            config = yaml.safe_load(file) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid configuration file {path}: {e}") from e

    if not isinstance(config, dict):
        raise ConfigurationError(f"Configuration file {path} must contain a mapping")
    return config


def resolve_credentials(config: Dict[str, Any], access_key: Optional[str] = None,
                        secret_key: Optional[str] = None,
                        region: Optional[str] = None) -> Dict[str, str]:
    """
    Merge credentials and region: command line first, then the config file.

    Raises:
        ConfigurationError: If any of the three values is missing
    """
    section = config.get('rekognition') or {}
    resolved = {
        'access_key': access_key or section.get('access_key'),
        'secret_key': secret_key or section.get('secret_key'),
        'region': region or section.get('region'),
    }

    missing = [name for name, value in resolved.items() if not value]
    if missing:
        options = ", ".join("--" + name.replace("_", "-") for name in missing)
        raise ConfigurationError(f"Missing required option(s): {options}")
    return resolved


def show_progress(config: Dict[str, Any]) -> Optional[bool]:
    """Progress bar setting from the `batch` section; None means auto."""
    return (config.get('batch') or {}).get('show_progress')
