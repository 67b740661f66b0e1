"""
contractgraph.config.defaults - Default configuration values.
"""

from typing import Any, Dict

CONFIG_FILENAME = ".contractgraph.toml"

ENV_PREFIX = "CONTRACTGRAPH_"

DEFAULT_CONFIG: Dict[str, Any] = {
    "contracts": {
        # Glob pattern, relative to the directory holding the config file
        "path": "contracts/**/*.yaml",
    },
    "graph": {
        "database": ".contractgraph/graph.kuzu",
    },
    "embedding": {
        "enabled": True,
        "model": "all-MiniLM-L6-v2",
        "device": "cpu",
    },
    "search": {
        "default_limit": 10,
    },
    "server": {
        "host": "127.0.0.1",
        "port": 5000,
    },
    "logging": {
        "level": "WARNING",
    },
}
