"""
contractgraph.commands.serve - Run the REST API server.

The embedding model loads on a background thread; until it is ready,
semantic search answers 503 and apply stores modules without embeddings.
"""

import argparse
import logging

from contractgraph.commands.common import (
    build_embedder,
    build_service,
    load_configuration,
    open_store,
)

logger = logging.getLogger(__name__)


def run(args: argparse.Namespace) -> int:
    config = load_configuration(args)
    if config is None:
        return 1

    from contractgraph.server import create_app

    server_config = config.get("server", {})
    host = args.host or server_config.get("host", "127.0.0.1")
    port = args.port or server_config.get("port", 5000)

    embedder = build_embedder(config, background=True)

    with open_store(config) as store:
        app = create_app(build_service(config, store, embedder), config)
        print(f"contractgraph API listening on http://{host}:{port}")
        logger.info("Serving graph database %s", store.db_path or "in-memory")
        app.run(host=host, port=port, threaded=True)
    return 0
