"""Configuration loader for pa."""
import os
import copy
import logging
from pathlib import Path
from typing import Dict, Any
import yaml

from .generator import DEFAULT_LENGTH, DEFAULT_PATTERN, expand_pattern
from .age_client import DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

ALIGNMENTS = ("relative", "absolute")


class ConfigError(Exception):
    """Configuration error exception."""
    pass


def _xdg_dir(env_var: str, fallback: str) -> Path:
    value = os.getenv(env_var)
    if value:
        return Path(value)
    return Path.home() / fallback


def default_store_dir() -> Path:
    """Return ``$XDG_DATA_HOME/pa``, falling back to ``~/.local/share/pa``."""
    return _xdg_dir("XDG_DATA_HOME", ".local/share") / "pa"


def get_config_path() -> Path:
    """
    Get config file path.

    Priority order:
    1. PA_CONFIG environment variable
    2. $XDG_CONFIG_HOME/pa/config.yml (default ~/.config/pa/config.yml)

    The file is not required to exist.
    """
    env_path = os.getenv("PA_CONFIG")
    if env_path:
        return Path(env_path).expanduser()
    return _xdg_dir("XDG_CONFIG_HOME", ".config") / "pa" / "config.yml"


def _defaults() -> Dict[str, Any]:
    return {
        "store": {"dir": str(default_store_dir())},
        "age": {"binary": "age", "timeout": DEFAULT_TIMEOUT},
        "passwords": {"length": DEFAULT_LENGTH, "pattern": DEFAULT_PATTERN},
        "selector": {"alignment": "relative"},
    }


def _merge(config: Dict[str, Any], overrides: Dict[str, Any], config_path: Path) -> None:
    for section, values in overrides.items():
        if section not in config:
            logger.warning(f"Ignoring unknown section '{section}' in {config_path}")
            continue
        if not isinstance(values, dict):
            raise ConfigError(f"Section '{section}' in {config_path} must be a mapping")
        config[section].update(values)


def _apply_env(config: Dict[str, Any]) -> None:
    if os.getenv("PA_DIR"):
        config["store"]["dir"] = os.environ["PA_DIR"]
        logger.debug(f"Using PA_DIR from environment: {config['store']['dir']}")
    if os.getenv("PA_LENGTH"):
        config["passwords"]["length"] = os.environ["PA_LENGTH"]
    if os.getenv("PA_PATTERN"):
        config["passwords"]["pattern"] = os.environ["PA_PATTERN"]


def _validate(config: Dict[str, Any], config_path: Path) -> None:
    try:
        length = int(config["passwords"]["length"])
    except (TypeError, ValueError):
        raise ConfigError(f"'passwords.length' must be an integer (config: {config_path})")
    if length <= 0:
        raise ConfigError(f"'passwords.length' must be positive, got {length}")
    config["passwords"]["length"] = length

    try:
        alphabet = expand_pattern(str(config["passwords"]["pattern"]))
    except ValueError as e:
        raise ConfigError(f"Invalid 'passwords.pattern': {e}")
    if not alphabet:
        raise ConfigError("'passwords.pattern' expands to an empty alphabet")
    config["passwords"]["alphabet"] = alphabet

    try:
        timeout = float(config["age"]["timeout"])
    except (TypeError, ValueError):
        raise ConfigError(f"'age.timeout' must be a number (config: {config_path})")
    if timeout <= 0:
        raise ConfigError(f"'age.timeout' must be positive, got {timeout}")
    config["age"]["timeout"] = timeout

    alignment = config["selector"]["alignment"]
    if alignment not in ALIGNMENTS:
        raise ConfigError(
            f"Unsupported selector alignment: {alignment}\n"
            f"Use one of: {', '.join(ALIGNMENTS)}"
        )

    config["store"]["dir"] = str(Path(str(config["store"]["dir"])).expanduser())


def load_config() -> Dict[str, Any]:
    """
    Load configuration from the optional YAML file plus environment overrides.

    Returns:
        Dict with sections:
        - store: dir
        - age: binary, timeout
        - passwords: length, pattern, alphabet (expanded pattern)
        - selector: alignment

    Raises:
        ConfigError: If the config file is invalid or a value is out of range
    """
    config_path = get_config_path()
    config = copy.deepcopy(_defaults())

    if config_path.exists():
        try:
            with open(config_path, 'r') as f:
                file_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse YAML config at {config_path}: {e}")
        except OSError as e:
            raise ConfigError(f"Failed to read config file at {config_path}: {e}")

        if file_config is None:
            logger.debug(f"Config file at {config_path} is empty, using defaults")
        elif not isinstance(file_config, dict):
            raise ConfigError(f"Config file at {config_path} must contain a mapping")
        else:
            _merge(config, file_config, config_path)
            logger.info(f"Configuration loaded from {config_path}")
    else:
        logger.debug(f"No config file at {config_path}, using defaults")

    _apply_env(config)
    _validate(config, config_path)

    logger.debug(f"Using store directory: {config['store']['dir']}")
    return config
