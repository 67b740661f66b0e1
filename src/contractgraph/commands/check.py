"""
contractgraph.commands.check - Show contracts changed since the last apply.
"""

import argparse
import json
import sys

from contractgraph.changes import ChangeCheckResult
from contractgraph.commands.common import build_service, load_configuration, open_store
from contractgraph.errors import ContractSourceError


def run(args: argparse.Namespace) -> int:
    """Run the check command.

    Exit code is 0 whether or not there are changes; 1 only on errors.
    """
    config = load_configuration(args)
    if config is None:
        return 1

    with open_store(config) as store:
        service = build_service(config, store)
        try:
            result = service.check_modified()
        except ContractSourceError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    if getattr(args, "json", False):
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print_changes(result)
    return 0


def print_changes(result: ChangeCheckResult) -> None:
    if not result.has_changes:
        print("No contract changes since the last apply.")
        return

    symbols = {"added": "+", "modified": "~", "removed": "-"}
    for change in result.changes:
        symbol = symbols[change.status.value]
        print(f"  {symbol} {change.module_id:<30} {change.status.value:<9} {change.file_path}")

    print()
    print(
        f"{result.total_changes} change(s): "
        f"{result.added_count} added, {result.modified_count} modified, "
        f"{result.removed_count} removed"
    )
