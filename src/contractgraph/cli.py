"""
contractgraph.cli - Command-line interface.

Main entry point for the contractgraph CLI tool.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from contractgraph import __version__
from contractgraph.commands import (
    apply_cmd,
    check,
    relations_cmd,
    search_cmd,
    serve,
    validate,
)
from contractgraph.graph.search import MAX_LIMIT, MIN_LIMIT


def _limit(value: str) -> int:
    limit = int(value)
    if not MIN_LIMIT <= limit <= MAX_LIMIT:
        raise argparse.ArgumentTypeError(f"must be between {MIN_LIMIT} and {MAX_LIMIT}")
    return limit


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="contractgraph",
        description="Module contract validation and dependency graph tools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  contractgraph validate                   # Validate all contract files
  contractgraph check                      # Show changes since the last apply
  contractgraph apply                      # Rebuild the graph from the contracts
  contractgraph relations user-service     # Dependencies of one module
  contractgraph search "user sign-in"      # Semantic search over descriptions
  contractgraph search --type service      # Filter modules by type
  contractgraph serve --port 8080          # Run the REST API

Configuration is read from .contractgraph.toml (searched upward from the
current directory) and CONTRACTGRAPH_<SECTION>_<KEY> environment variables.

For detailed command help: contractgraph <command> --help
        """,
    )

    # Global options
    parser.add_argument(
        "--version",
        action="version",
        version=f"contractgraph {__version__}",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to configuration file",
        metavar="PATH",
    )
    parser.add_argument(
        "--contracts",
        help="Override the contracts glob pattern",
        metavar="GLOB",
    )
    parser.add_argument(
        "--db",
        help="Override the graph database path (':memory:' for a throwaway graph)",
        metavar="PATH",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose output",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress non-error output",
    )

    # Subcommands
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # validate command
    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate contract structure and references",
    )
    validate_parser.add_argument(
        "-j",
        "--json",
        action="store_true",
        help="Output the validation result as JSON",
    )

    # check command
    check_parser = subparsers.add_parser(
        "check",
        help="Show contracts added, modified or removed since the last apply",
    )
    check_parser.add_argument(
        "-j",
        "--json",
        action="store_true",
        help="Output the change list as JSON",
    )

    # apply command
    subparsers.add_parser(
        "apply",
        help="Validate contracts, then rebuild the graph from them",
    )

    # relations command
    relations_parser = subparsers.add_parser(
        "relations",
        help="Show incoming and outgoing dependencies of a module",
    )
    relations_parser.add_argument("module_id", help="Module id")
    relations_parser.add_argument(
        "-j",
        "--json",
        action="store_true",
        help="Output as JSON",
    )

    # search command
    search_parser = subparsers.add_parser(
        "search",
        help="Search modules by description or by type/category",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  contractgraph search "stores user sessions"
  contractgraph search "payments" --category billing --limit 5
  contractgraph search --type frontend
""",
    )
    search_parser.add_argument("query", nargs="?", default="", help="Free-text query")
    search_parser.add_argument("--type", help="Exact module type")
    search_parser.add_argument("--category", help="Exact module category")
    search_parser.add_argument(
        "--limit",
        type=_limit,
        default=None,
        help=f"Maximum results ({MIN_LIMIT}-{MAX_LIMIT}, default from config)",
    )
    search_parser.add_argument(
        "-j",
        "--json",
        action="store_true",
        help="Output as JSON",
    )

    # serve command
    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the REST API server",
    )
    serve_parser.add_argument("--host", help="Bind address (default from config)")
    serve_parser.add_argument("--port", type=int, help="Port (default from config)")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    # Handle no command
    if not args.command:
        parser.print_help()
        return 0

    try:
        # Dispatch to command handlers
        if args.command == "validate":
            return validate.run(args)
        elif args.command == "check":
            return check.run(args)
        elif args.command == "apply":
            return apply_cmd.run(args)
        elif args.command == "relations":
            return relations_cmd.run(args)
        elif args.command == "search":
            return search_cmd.run(args)
        elif args.command == "serve":
            return serve.run(args)
        else:
            parser.print_help()
            return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled.", file=sys.stderr)
        return 130
    except Exception as e:
        if args.verbose:
            raise
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
