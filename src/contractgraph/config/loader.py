"""
contractgraph.config.loader - Find, parse and merge configuration.

Precedence, lowest first: DEFAULT_CONFIG, ``.contractgraph.toml``,
``CONTRACTGRAPH_<SECTION>_<KEY>`` environment variables. CLI flags are
applied on top by the commands themselves.
"""

from __future__ import annotations

import copy
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

import tomlkit

from contractgraph.config.defaults import CONFIG_FILENAME, DEFAULT_CONFIG, ENV_PREFIX

# Directory the configuration was loaded from; relative paths resolve against it.
CONFIG_DIR_KEY = "_config_dir"


def parse_toml(content: str) -> Dict[str, Any]:
    """Parse TOML text into plain Python containers."""
    return tomlkit.parse(content).unwrap()


def find_config_file(start: Path) -> Optional[Path]:
    """Walk up from ``start`` looking for ``.contractgraph.toml``."""
    current = start.resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        if current.parent == current:
            return None
        current = current.parent


def merge_configs(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep-merge ``override`` into a copy of ``base``."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _try_parse_env_value(value: str) -> Any:
    """Turn an environment string into a typed config value.

    JSON lists/objects, booleans and integers are recognised; anything
    else (including malformed JSON) stays a string.
    """
    stripped = value.strip()
    if stripped.startswith(("[", "{")):
        try:
            return json.loads(stripped)
        except json.JSONDecodeError:
            return value
    lowered = stripped.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    try:
        return int(stripped)
    except ValueError:
        return value


def _apply_env_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
    """Apply ``CONTRACTGRAPH_<SECTION>_<KEY>`` variables to ``config``.

    ``CONTRACTGRAPH_SEARCH_DEFAULT_LIMIT=25`` sets ``search.default_limit``.
    Sections are created when missing.
    """
    for name, raw_value in os.environ.items():
        if not name.startswith(ENV_PREFIX):
            continue
        remainder = name[len(ENV_PREFIX):].lower()
        if "_" not in remainder:
            continue
        section, key = remainder.split("_", 1)
        if not section or not key:
            continue
        target = config.setdefault(section, {})
        if isinstance(target, dict):
            target[key] = _try_parse_env_value(raw_value)
    return config


def load_config(config_path: Path) -> Dict[str, Any]:
    """Load a config file merged over the defaults, with env overrides."""
    user_config = parse_toml(config_path.read_text(encoding="utf-8"))
    config = merge_configs(DEFAULT_CONFIG, user_config)
    config[CONFIG_DIR_KEY] = str(config_path.resolve().parent)
    return _apply_env_overrides(config)


def get_config(config_path: Optional[Path] = None, start_dir: Optional[Path] = None) -> Dict[str, Any]:
    """Load configuration from an explicit path, a discovered file, or defaults.

    Args:
        config_path: Explicit config file (``--config``)
        start_dir: Where to start searching for ``.contractgraph.toml``

    Raises:
        FileNotFoundError: If an explicit ``config_path`` does not exist
    """
    if config_path is not None:
        if not config_path.is_file():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        return load_config(config_path)

    start = start_dir or Path.cwd()
    found = find_config_file(start)
    if found is not None:
        return load_config(found)

    config = copy.deepcopy(DEFAULT_CONFIG)
    config[CONFIG_DIR_KEY] = str(start.resolve())
    return _apply_env_overrides(config)


def resolve_config_path(config: Dict[str, Any], value: str) -> Path:
    """Resolve a path-valued setting relative to the config directory."""
    path = Path(value)
    if path.is_absolute():
        return path
    base = Path(config.get(CONFIG_DIR_KEY) or Path.cwd())
    return base / path
