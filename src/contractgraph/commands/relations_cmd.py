"""
contractgraph.commands.relations_cmd - Show a module's dependencies.
"""

import argparse
import json
import sys

from contractgraph.commands.common import build_service, load_configuration, open_store
from contractgraph.errors import UnknownModuleError


def run(args: argparse.Namespace) -> int:
    config = load_configuration(args)
    if config is None:
        return 1

    with open_store(config) as store:
        service = build_service(config, store)
        try:
            relations = service.relations(args.module_id)
        except UnknownModuleError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    if getattr(args, "json", False):
        print(json.dumps(relations.to_dict(), indent=2))
        return 0

    print(f"{relations.module_id}")
    _print_edges("depends on", relations.outgoing_dependencies)
    _print_edges("used by", relations.incoming_dependencies)
    return 0


def _print_edges(label: str, edges) -> None:
    print(f"  {label}:")
    if not edges:
        print("    (none)")
        return
    for edge in edges:
        parts = ", ".join(f"{p['part_id']} ({p['type']})" for p in edge["parts"])
        print(f"    {edge['module_id']}: {parts}")
