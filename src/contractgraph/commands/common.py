"""
contractgraph.commands.common - Setup shared by the CLI commands.

Loads configuration (file, environment, then command-line flags),
configures logging and builds the store, provider and service objects.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from contractgraph.config.loader import CONFIG_DIR_KEY, get_config, resolve_config_path
from contractgraph.embedding import EmbeddingConfig, EmbeddingProvider, get_embedding_provider
from contractgraph.graph import GraphStore
from contractgraph.graph.store import IN_MEMORY
from contractgraph.service import ContractService


def configure_logging(args: argparse.Namespace, config: Dict[str, Any]) -> None:
    """Set the root log level from -v/-q, falling back to ``[logging] level``."""
    if getattr(args, "verbose", False):
        level = logging.DEBUG
    elif getattr(args, "quiet", False):
        level = logging.ERROR
    else:
        name = str(config.get("logging", {}).get("level", "WARNING")).upper()
        level = getattr(logging, name, logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    logging.getLogger().setLevel(level)


def load_configuration(args: argparse.Namespace) -> Optional[Dict[str, Any]]:
    """Load configuration and apply command-line overrides.

    Returns:
        The configuration dict, or None if an explicit --config is missing
    """
    try:
        config = get_config(getattr(args, "config", None))
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return None

    contracts = getattr(args, "contracts", None)
    if contracts:
        pattern = contracts if Path(contracts).is_absolute() else str(Path.cwd() / contracts)
        config.setdefault("contracts", {})["path"] = pattern

    db = getattr(args, "db", None)
    if db:
        database = db if db == IN_MEMORY else str(Path(db).resolve())
        config.setdefault("graph", {})["database"] = database

    configure_logging(args, config)
    return config


def contracts_base_dir(config: Dict[str, Any]) -> Optional[Path]:
    """Directory relative contract patterns are resolved against."""
    base = config.get(CONFIG_DIR_KEY)
    return Path(base) if base else None


def open_store(config: Dict[str, Any]) -> GraphStore:
    """Open the graph database named by ``[graph] database``."""
    database = config.get("graph", {}).get("database") or IN_MEMORY
    if database == IN_MEMORY:
        return GraphStore().open()
    return GraphStore(resolve_config_path(config, database)).open()


def build_embedder(config: Dict[str, Any], background: bool = False) -> Optional[EmbeddingProvider]:
    """Create the embedding provider, or None when ``[embedding] enabled`` is false.

    Args:
        config: Configuration dict
        background: Load the model on a background thread instead of now
    """
    embedding_config = EmbeddingConfig.from_dict(config.get("embedding", {}))
    if not embedding_config.enabled:
        return None
    provider = get_embedding_provider(embedding_config)
    if background:
        provider.start_background_initialization()
    else:
        provider.initialize()
    return provider


def build_service(
    config: Dict[str, Any],
    store: GraphStore,
    embedder: Optional[EmbeddingProvider] = None,
) -> ContractService:
    return ContractService.from_config(config, store, embedder)
