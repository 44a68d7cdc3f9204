"""Configuration loading for gorg.

Settings come from an optional TOML file:

    projects_path = "~/Projects"
    index_path = "~/Projects/.gorg-index"
    git_command = "git"
    git_remote_name = "origin"
    max_find_items = 20

The file is looked up in order: the --config flag, $GORG_CONFIG, then
$XDG_CONFIG_HOME/gorg/config.toml (~/.config/gorg/config.toml).
"""

import logging
import os
import tomllib
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

from .errors import ConfigError
from .models import DEFAULT_INDEX_NAME, DEFAULT_PROJECTS_DIR

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "GORG_CONFIG"
CONFIG_DIRNAME = "gorg"
CONFIG_FILENAME = "config.toml"
DEFAULT_MAX_FIND_ITEMS = 20


@dataclass(frozen=True)
class Config:
    """Fully resolved settings."""

    projects_path: str
    index_path: str
    git_command: str = "git"
    git_remote_name: str = "origin"
    max_find_items: int = DEFAULT_MAX_FIND_ITEMS


def default_config() -> Config:
    projects = os.path.expanduser(DEFAULT_PROJECTS_DIR)
    return Config(projects_path=projects, index_path=os.path.join(projects, DEFAULT_INDEX_NAME))


def config_path() -> str:
    """Return the implicit config file location."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return env_path
    config_home = os.environ.get("XDG_CONFIG_HOME") or os.path.join(os.path.expanduser("~"), ".config")
    return os.path.join(config_home, CONFIG_DIRNAME, CONFIG_FILENAME)


def _path_value(payload: Dict[str, Any], key: str, base_dir: str) -> Optional[str]:
    value = payload.get(key)
    if value is None:
        return None
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"Config field '{key}' must be a non-empty string.")
    return os.path.normpath(os.path.join(base_dir, os.path.expanduser(value)))


def _str_value(payload: Dict[str, Any], key: str, default: str) -> str:
    value = payload.get(key, default)
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"Config field '{key}' must be a non-empty string.")
    return value


def parse_config(payload: Dict[str, Any], base_dir: str) -> Config:
    """Build a Config from a parsed TOML table; relative paths resolve against base_dir."""
    defaults = default_config()
    known = {f.name for f in fields(Config)}
    for key in payload:
        if key not in known:
            logger.warning("Ignoring unknown config key: %s", key)

    projects = _path_value(payload, "projects_path", base_dir) or defaults.projects_path
    index = _path_value(payload, "index_path", base_dir) or os.path.join(projects, DEFAULT_INDEX_NAME)

    max_items = payload.get("max_find_items", DEFAULT_MAX_FIND_ITEMS)
    if isinstance(max_items, bool) or not isinstance(max_items, int) or max_items < 1:
        raise ConfigError("Config field 'max_find_items' must be a positive integer.")

    return Config(
        projects_path=projects,
        index_path=index,
        git_command=_str_value(payload, "git_command", defaults.git_command),
        git_remote_name=_str_value(payload, "git_remote_name", defaults.git_remote_name),
        max_find_items=max_items,
    )


def read_config_file(path: str) -> Config:
    try:
        with open(path, "rb") as f:
            payload = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid config file {path}: {e}") from e
    return parse_config(payload, os.path.dirname(os.path.abspath(path)))


def load_config(path: Optional[str] = None) -> Config:
    """Load settings from path, or from the implicit location.

    An explicitly given file must exist; a missing implicit file means
    defaults.
    """
    if path is not None:
        logger.debug("Reading config from path: %s", path)
        try:
            return read_config_file(path)
        except OSError as e:
            raise ConfigError(f"Cannot read config file {path}: {e}") from e

    implicit = config_path()
    logger.debug("Reading config from path: %s", implicit)
    try:
        return read_config_file(implicit)
    except FileNotFoundError:
        logger.debug("Config not found from %s. Using default configuration.", implicit)
        return default_config()
    except OSError as e:
        raise ConfigError(f"Cannot read config file {implicit}: {e}") from e
