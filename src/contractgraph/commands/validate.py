"""
contractgraph.commands.validate - Validate contract files.

Runs the structural and referential checks without touching the graph.
"""

import argparse
import json
import sys

from contractgraph.commands.common import contracts_base_dir, load_configuration
from contractgraph.errors import ContractSourceError
from contractgraph.loader import load_contract_files
from contractgraph.validation import ValidationResult, validate_contracts


def run(args: argparse.Namespace) -> int:
    """
    Run the validate command.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 when every file is valid, 1 otherwise)
    """
    config = load_configuration(args)
    if config is None:
        return 1

    pattern = config.get("contracts", {}).get("path")
    try:
        files = load_contract_files(pattern, contracts_base_dir(config))
    except ContractSourceError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    result = validate_contracts(files)

    if getattr(args, "json", False):
        print(json.dumps(result.to_dict(), indent=2))
        return 0 if result.valid else 1

    if not files:
        print(f"No contract files found matching: {pattern}", file=sys.stderr)
        return 0

    if not args.quiet:
        print(f"Validating {len(files)} contract file(s) from: {pattern}")
    print_report(result, quiet=args.quiet)
    return 0 if result.valid else 1


def print_report(result: ValidationResult, quiet: bool = False) -> None:
    """Print each invalid file with its violations, then a summary."""
    for file_validation in result.files:
        if file_validation.valid:
            continue
        print()
        print(f"✗ {file_validation.file_name}  ({file_validation.file_path})")
        for violation in file_validation.errors:
            print(f"    {violation}")

    if quiet:
        return

    print("─" * 60)
    valid_count = sum(1 for f in result.files if f.valid)
    print(f"✓ {valid_count}/{len(result.files)} contract files valid")
    if not result.valid:
        print(f"❌ {result.error_count} errors")

