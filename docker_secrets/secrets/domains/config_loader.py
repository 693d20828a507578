"""Configuration loader for docker-secrets."""
import os
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple
import yaml

from .models import SecretsFileSettings
from .naming import DEFAULT_SEPARATOR
from .property_sources import (
    APPLICATION_CONFIG_PROPERTY_SOURCE_NAME,
    COMMAND_LINE_PROPERTY_SOURCE_NAME,
    PropertySource,
    PropertySourceChain,
    SystemEnvironmentPropertySource,
)

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "DOCKER_SECRETS_CONFIG"

BASE_DIR_PROPERTY = "secrets.file.base-dir"
SEPARATOR_PROPERTY = "secrets.file.separator"
DEFAULT_BASE_DIR = "/run/secrets"


class ConfigError(Exception):
    """Configuration error exception."""
    pass


def default_config_path() -> Path:
    """XDG location of the config file."""
    return Path.home() / ".config" / "docker-secrets" / "config.yml"


def locate_config(explicit_path: Optional[str] = None) -> Tuple[Optional[Path], str]:
    """
    Find the config file and report where the location came from.

    Priority order:
    1. Explicit path (e.g. --config)
    2. DOCKER_SECRETS_CONFIG environment variable
    3. Default location: ~/.config/docker-secrets/config.yml

    Returns:
        Tuple of (path or None, source) where source is one of
        'argument', 'env', 'default' or 'none'

    Raises:
        ConfigError: If an explicitly requested config file doesn't exist
    """
    # 1. Explicit path
    if explicit_path:
        config_path = Path(explicit_path).expanduser()
        if not config_path.is_file():
            raise ConfigError(f"Configuration file not found at: {config_path}")
        logger.info(f"Using config from argument: {config_path}")
        return config_path, "argument"

    # 2. Environment variable
    env_path = os.getenv(CONFIG_PATH_ENV)
    if env_path:
        config_path = Path(env_path).expanduser()
        if not config_path.is_file():
            raise ConfigError(
                f"Configuration file not found at: {config_path}\n"
                f"Check the {CONFIG_PATH_ENV} environment variable."
            )
        logger.info(f"Using config from {CONFIG_PATH_ENV}: {config_path}")
        return config_path, "env"

    # 3. Default location, optional
    default_config = default_config_path()
    if default_config.is_file():
        logger.info(f"Using default config location: {default_config}")
        return default_config, "default"

    logger.debug(f"No config file at {default_config}, using defaults")
    return None, "none"


def get_config_path(explicit_path: Optional[str] = None) -> Optional[Path]:
    """Return the config file path, or None if there is no config file."""
    config_path, _source = locate_config(explicit_path)
    return config_path


def flatten(config: Mapping[str, Any], prefix: str = "") -> Dict[str, Any]:
    """
    Flatten nested mappings into dotted property keys.

    {"secrets": {"file": {"base-dir": "/x"}}} becomes
    {"secrets.file.base-dir": "/x"}.
    """
    flat: Dict[str, Any] = {}
    for key, value in config.items():
        name = f"{prefix}{key}"
        if isinstance(value, Mapping):
            flat.update(flatten(value, prefix=f"{name}."))
        else:
            flat[name] = value
    return flat


def load_config(config_path: Path) -> Dict[str, Any]:
    """
    Load a YAML config file as flat, dotted properties.

    Args:
        config_path: Path to the YAML file

    Returns:
        Dict of dotted property keys to values, empty for an empty file

    Raises:
        ConfigError: If the file can't be read or parsed, or isn't a mapping
    """
    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML config at {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config file at {config_path}: {e}") from e

    if config is None:
        logger.debug(f"Config file at {config_path} is empty")
        return {}

    if not isinstance(config, Mapping):
        raise ConfigError(
            f"Config file at {config_path} must contain a mapping, got {type(config).__name__}\n"
            f"Expected format:\n"
            f"secrets:\n"
            f"  file:\n"
            f"    base-dir: /run/secrets\n"
            f"    separator: '.'"
        )

    properties = flatten(config)
    logger.info(f"Configuration loaded successfully from {config_path}")
    return properties


def create_environment(config_path: Optional[str] = None,
                       overrides: Optional[Mapping[str, Any]] = None,
                       environ: Optional[Mapping[str, str]] = None) -> PropertySourceChain:
    """
    Build the standard property source chain.

    Order of precedence: command line overrides, system environment,
    application config file.

    Args:
        config_path: Explicit config file path
        overrides: Properties given on the command line
        environ: Environment variables, os.environ if not given
    """
    sources = PropertySourceChain()
    sources.add_last(SystemEnvironmentPropertySource(os.environ if environ is None else environ))

    resolved_path = get_config_path(config_path)
    if resolved_path is not None:
        sources.add_last(PropertySource(APPLICATION_CONFIG_PROPERTY_SOURCE_NAME, load_config(resolved_path)))
    if overrides:
        sources.add_first(PropertySource(COMMAND_LINE_PROPERTY_SOURCE_NAME, dict(overrides)))
    return sources


def resolve_settings(sources: PropertySourceChain) -> SecretsFileSettings:
    """
    Read the secrets directory settings from the chain.

    Raises:
        ConfigError: If the separator isn't a single character
    """
    base_dir = sources.get_property(BASE_DIR_PROPERTY, DEFAULT_BASE_DIR)
    separator = sources.get_property(SEPARATOR_PROPERTY, DEFAULT_SEPARATOR)

    separator = str(separator)
    if len(separator) != 1:
        raise ConfigError(
            f"Invalid '{SEPARATOR_PROPERTY}': {separator!r}\n"
            f"The separator must be exactly one character."
        )

    logger.debug(f"Using secrets directory: {base_dir}")
    logger.debug(f"Using separator: '{separator}'")
    return SecretsFileSettings(base_dir=Path(str(base_dir)), separator=separator)
