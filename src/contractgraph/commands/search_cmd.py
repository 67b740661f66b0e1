"""
contractgraph.commands.search_cmd - Search modules by description or attributes.

With query text the search is semantic and loads the embedding model first;
with only --type/--category it is a plain attribute filter.
"""

import argparse
import json
import sys

from contractgraph.commands.common import (
    build_embedder,
    build_service,
    load_configuration,
    open_store,
)
from contractgraph.errors import ContractSourceError, EmbeddingNotReadyError, InvalidSearchError


def run(args: argparse.Namespace) -> int:
    config = load_configuration(args)
    if config is None:
        return 1

    query = (args.query or "").strip()
    embedder = build_embedder(config) if query else None

    with open_store(config) as store:
        service = build_service(config, store, embedder)
        try:
            result = service.search(
                query=query,
                module_type=args.type,
                category=args.category,
                limit=args.limit,
            )
        except (InvalidSearchError, EmbeddingNotReadyError, ContractSourceError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    if getattr(args, "json", False):
        print(json.dumps(result.to_dict(), indent=2))
        return 0

    if not result.results:
        print("No matching modules.")
        return 0

    for hit in result.results:
        module_id = hit.contract_file.module_id
        description = (hit.contract_file.parsed or {}).get("description", "")
        print(f"  {hit.similarity:.3f}  {module_id:<30} {description}")
    if not args.quiet:
        print()
        print(f"{result.results_count} result(s)")
    return 0
