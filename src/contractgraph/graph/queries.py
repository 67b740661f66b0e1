"""Read-only queries over the applied contract graph."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from contractgraph.errors import UnknownModuleError
from contractgraph.graph.store import GraphStore


@dataclass
class ModuleRelations:
    """Dependencies of one module in both directions.

    Each entry is ``{"module_id": ..., "parts": [{"part_id", "type"}, ...]}``.
    """

    module_id: str
    outgoing_dependencies: list[dict[str, Any]] = field(default_factory=list)
    incoming_dependencies: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "module_id": self.module_id,
            "outgoing_dependencies": self.outgoing_dependencies,
            "incoming_dependencies": self.incoming_dependencies,
        }


@dataclass
class ModuleDetail:
    """A module as stored in the graph, with its parts."""

    id: str
    type: str
    category: str
    description: str
    parts: list[dict[str, str]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "category": self.category,
            "description": self.description,
            "parts": self.parts,
        }


def get_module_relations(store: GraphStore, module_id: str) -> ModuleRelations:
    """Outgoing and incoming dependencies of a module.

    Raises:
        UnknownModuleError: If the module is not in the graph
    """
    with store.session() as session:
        if not session.module_exists(module_id):
            raise UnknownModuleError(module_id)
        return ModuleRelations(
            module_id=module_id,
            outgoing_dependencies=session.outgoing_dependencies(module_id),
            incoming_dependencies=session.incoming_dependencies(module_id),
        )


def get_module_detail(store: GraphStore, module_id: str) -> ModuleDetail:
    """Stored attributes and parts of a module.

    Raises:
        UnknownModuleError: If the module is not in the graph
    """
    with store.session() as session:
        module = session.get_module(module_id)
        if module is None:
            raise UnknownModuleError(module_id)
        return ModuleDetail(
            id=module["module_id"],
            type=module["type"],
            category=module["category"],
            description=module["description"],
            parts=session.module_parts(module_id),
        )


def list_categories(store: GraphStore) -> list[str]:
    with store.session() as session:
        return session.distinct_values("category")


def list_types(store: GraphStore) -> list[str]:
    with store.session() as session:
        return session.distinct_values("type")


def verify_connection(store: GraphStore) -> dict[str, Any]:
    """Check the graph database answers queries."""
    try:
        with store.session() as session:
            session.ping()
            counts = session.count_nodes()
    except Exception as e:
        return {"connected": False, "message": f"Failed to connect to graph database: {e}"}
    return {
        "connected": True,
        "message": "Successfully connected to graph database",
        "database": str(store.db_path) if store.db_path else "in-memory",
        "modules": counts["modules"],
        "parts": counts["parts"],
    }
