"""Graph - Persisted contract graph, synchronization and search.

- GraphStore / GraphSession: Kuzu database handle and per-operation session
- apply_contracts: full reset-and-rebuild from a validated batch
- search_modules: semantic or filter-only module search
- get_module_relations / get_module_detail: read-side queries
"""

from contractgraph.graph.queries import (
    ModuleDetail,
    ModuleRelations,
    get_module_detail,
    get_module_relations,
    list_categories,
    list_types,
    verify_connection,
)
from contractgraph.graph.search import SearchHit, SearchResult, search_modules
from contractgraph.graph.store import GraphSession, GraphStore
from contractgraph.graph.sync import ApplyResult, apply_contracts

__all__ = [
    "ApplyResult",
    "GraphSession",
    "GraphStore",
    "ModuleDetail",
    "ModuleRelations",
    "SearchHit",
    "SearchResult",
    "apply_contracts",
    "get_module_detail",
    "get_module_relations",
    "list_categories",
    "list_types",
    "search_modules",
    "verify_connection",
]
