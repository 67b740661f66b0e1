"""
contractgraph.config - Configuration loading and defaults
"""

from contractgraph.config.defaults import CONFIG_FILENAME, DEFAULT_CONFIG
from contractgraph.config.loader import (
    _apply_env_overrides,
    _try_parse_env_value,
    find_config_file,
    get_config,
    load_config,
    merge_configs,
    parse_toml,
    resolve_config_path,
)

__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_CONFIG",
    "_apply_env_overrides",
    "_try_parse_env_value",
    "find_config_file",
    "get_config",
    "load_config",
    "merge_configs",
    "parse_toml",
    "resolve_config_path",
]
