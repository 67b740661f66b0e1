"""
contractgraph.commands - CLI command implementations
"""

__all__ = [
    "apply_cmd",
    "check",
    "relations_cmd",
    "search_cmd",
    "serve",
    "validate",
]
