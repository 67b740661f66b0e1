"""
contractgraph.commands.apply_cmd - Rebuild the graph from the contract files.

Validation runs first; an invalid batch is reported and nothing is written.
"""

import argparse
import sys

from contractgraph.commands.common import (
    build_embedder,
    build_service,
    load_configuration,
    open_store,
)
from contractgraph.commands.validate import print_report
from contractgraph.errors import ContractSourceError, ContractValidationError


def run(args: argparse.Namespace) -> int:
    """
    Run the apply command.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 on success, 1 for invalid contracts or a failed apply)
    """
    config = load_configuration(args)
    if config is None:
        return 1

    # Applying without a model still works; modules get no embedding
    embedder = build_embedder(config)
    if embedder is not None and not embedder.is_ready() and not args.quiet:
        print(f"Warning: embeddings unavailable ({embedder.last_error})", file=sys.stderr)

    with open_store(config) as store:
        service = build_service(config, store, embedder)
        try:
            result = service.apply()
        except ContractSourceError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        except ContractValidationError as e:
            print(f"Error: {e}", file=sys.stderr)
            print_report(e.validation, quiet=args.quiet)
            return 1

    if not result.success:
        print(f"Error: {result.message}", file=sys.stderr)
        return 1

    if not args.quiet:
        print(f"✓ {result.message}")
    return 0
