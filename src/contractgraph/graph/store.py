"""
Kuzu Graph Store

Persists applied contracts in an embedded Kuzu database and answers the
queries the rest of contractgraph needs. Callers never hold a raw
connection: every logical operation opens one ``GraphSession`` via
``GraphStore.session()`` and the connection is closed when the ``with``
block exits, however it exits.

Schema:
    Module(module_id PK, module_type, category, description,
           contract_file_hash, embedding DOUBLE[])
    Part(part_key PK, part_id, module_id, part_type)
    MODULE_PART(Module -> Part)
    MODULE_DEPENDENCY(Module -> Module, module_id, parts)

``part_key`` is ``"<module_id>::<part_id>"``; Kuzu tables have a single
primary key column.
"""

from __future__ import annotations

import json
import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional

import kuzu

logger = logging.getLogger(__name__)

IN_MEMORY = ":memory:"

SCHEMA_DDL = [
    """
    CREATE NODE TABLE IF NOT EXISTS Module (
        module_id           STRING,
        module_type         STRING,
        category            STRING,
        description         STRING,
        contract_file_hash  STRING,
        embedding           DOUBLE[],
        PRIMARY KEY (module_id)
    )
    """,
    """
    CREATE NODE TABLE IF NOT EXISTS Part (
        part_key    STRING,
        part_id     STRING,
        module_id   STRING,
        part_type   STRING,
        PRIMARY KEY (part_key)
    )
    """,
    """
    CREATE REL TABLE IF NOT EXISTS MODULE_PART (
        FROM Module TO Part
    )
    """,
    """
    CREATE REL TABLE IF NOT EXISTS MODULE_DEPENDENCY (
        FROM Module TO Module,
        module_id   STRING,
        parts       STRING
    )
    """,
]

# Module properties that may be used as exact-match filters / distinct lists
_MODULE_FIELDS = {
    "type": "module_type",
    "category": "category",
}


def part_key(module_id: str, part_id: str) -> str:
    return f"{module_id}::{part_id}"


def _module_filters(
    module_type: Optional[str],
    category: Optional[str],
    require_embedding: bool = False,
) -> tuple[str, dict[str, Any]]:
    """Build a WHERE clause (possibly empty) and its parameters."""
    conditions: list[str] = []
    params: dict[str, Any] = {}
    if require_embedding:
        conditions.append("m.embedding IS NOT NULL")
    if module_type is not None:
        conditions.append("m.module_type = $module_type")
        params["module_type"] = module_type
    if category is not None:
        conditions.append("m.category = $category")
        params["category"] = category
    where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
    return where, params


def _decode_parts(raw: Optional[str]) -> list[dict[str, Any]]:
    if not raw:
        return []
    return json.loads(raw)


class GraphSession:
    """One connection's worth of graph queries.

    Obtain through ``GraphStore.session()``; do not construct directly.
    """

    def __init__(self, conn: "kuzu.Connection"):
        self._conn = conn
        self._in_transaction = False

    def _rows(self, query: str, params: Optional[dict[str, Any]] = None) -> list[list[Any]]:
        result = self._conn.execute(query, params or {})
        return result.get_all()

    def _run(self, query: str, params: Optional[dict[str, Any]] = None) -> None:
        self._conn.execute(query, params or {})

    # ============================================================
    # Transactions
    # ============================================================

    @property
    def in_transaction(self) -> bool:
        return self._in_transaction

    def begin(self) -> None:
        self._run("BEGIN TRANSACTION")
        self._in_transaction = True

    def commit(self) -> None:
        self._run("COMMIT")
        self._in_transaction = False

    def rollback(self) -> None:
        self._in_transaction = False
        self._run("ROLLBACK")

    @contextmanager
    def transaction(self) -> Iterator["GraphSession"]:
        """Run the block in one write transaction; roll back if it raises."""
        self.begin()
        try:
            yield self
        except BaseException:
            try:
                self.rollback()
            except Exception as rollback_error:
                logger.error("Rollback failed: %s", rollback_error)
            raise
        self.commit()

    # ============================================================
    # Write API
    # ============================================================

    def clear_all(self) -> None:
        """Delete every node and relationship."""
        self._run("MATCH (n) DETACH DELETE n")

    def upsert_module(
        self,
        module_id: str,
        module_type: str,
        category: str,
        description: str,
        contract_file_hash: str,
        embedding: Optional[list[float]] = None,
    ) -> None:
        assignments = [
            "m.module_type = $module_type",
            "m.category = $category",
            "m.description = $description",
            "m.contract_file_hash = $contract_file_hash",
        ]
        params: dict[str, Any] = {
            "module_id": module_id,
            "module_type": module_type,
            "category": category,
            "description": description,
            "contract_file_hash": contract_file_hash,
        }
        if embedding is not None:
            assignments.append("m.embedding = $embedding")
            params["embedding"] = [float(x) for x in embedding]

        set_clause = ", ".join(assignments)
        query = f"""
        MERGE (m:Module {{module_id: $module_id}})
        ON CREATE SET {set_clause}
        ON MATCH SET {set_clause}
        """
        self._run(query, params)

    def upsert_part(self, module_id: str, part_id: str, part_type: str) -> None:
        query = """
        MERGE (p:Part {part_key: $part_key})
        ON CREATE SET p.part_id = $part_id, p.module_id = $module_id, p.part_type = $part_type
        ON MATCH SET p.part_id = $part_id, p.module_id = $module_id, p.part_type = $part_type
        """
        self._run(
            query,
            {
                "part_key": part_key(module_id, part_id),
                "part_id": part_id,
                "module_id": module_id,
                "part_type": part_type,
            },
        )

    def link_part(self, module_id: str, part_id: str) -> None:
        query = """
        MATCH (m:Module {module_id: $module_id})
        MATCH (p:Part {part_key: $part_key})
        MERGE (m)-[:MODULE_PART]->(p)
        """
        self._run(query, {"module_id": module_id, "part_key": part_key(module_id, part_id)})

    def upsert_dependency(
        self,
        from_module_id: str,
        to_module_id: str,
        parts: list[dict[str, Any]],
    ) -> None:
        """Create/update a dependency edge; ``parts`` is stored as a JSON blob."""
        query = """
        MATCH (m:Module {module_id: $from_module_id})
        MATCH (d:Module {module_id: $to_module_id})
        MERGE (m)-[r:MODULE_DEPENDENCY]->(d)
        ON CREATE SET r.module_id = $to_module_id, r.parts = $parts
        ON MATCH SET r.module_id = $to_module_id, r.parts = $parts
        """
        self._run(
            query,
            {
                "from_module_id": from_module_id,
                "to_module_id": to_module_id,
                "parts": json.dumps(parts),
            },
        )

    # ============================================================
    # Query API
    # ============================================================

    def ping(self) -> bool:
        rows = self._rows("RETURN 1")
        return bool(rows) and rows[0][0] == 1

    def stored_hashes(self) -> dict[str, str]:
        """module id -> contract file hash recorded at the last apply."""
        rows = self._rows("MATCH (m:Module) RETURN m.module_id, m.contract_file_hash")
        return {row[0]: row[1] for row in rows if row[0] and row[1]}

    def module_exists(self, module_id: str) -> bool:
        rows = self._rows(
            "MATCH (m:Module {module_id: $module_id}) RETURN count(*)",
            {"module_id": module_id},
        )
        return bool(rows) and rows[0][0] > 0

    def get_module(self, module_id: str) -> Optional[dict[str, Any]]:
        rows = self._rows(
            """
            MATCH (m:Module {module_id: $module_id})
            RETURN m.module_id, m.module_type, m.category, m.description, m.contract_file_hash
            """,
            {"module_id": module_id},
        )
        if not rows:
            return None
        row = rows[0]
        return {
            "module_id": row[0],
            "type": row[1],
            "category": row[2],
            "description": row[3],
            "contract_file_hash": row[4],
        }

    def module_parts(self, module_id: str) -> list[dict[str, str]]:
        rows = self._rows(
            """
            MATCH (m:Module {module_id: $module_id})-[:MODULE_PART]->(p:Part)
            RETURN p.part_id, p.part_type
            ORDER BY p.part_id
            """,
            {"module_id": module_id},
        )
        return [{"id": row[0], "type": row[1]} for row in rows]

    def outgoing_dependencies(self, module_id: str) -> list[dict[str, Any]]:
        """Modules ``module_id`` depends on, with the parts it uses."""
        rows = self._rows(
            """
            MATCH (m:Module {module_id: $module_id})-[r:MODULE_DEPENDENCY]->(d:Module)
            RETURN d.module_id, r.parts
            ORDER BY d.module_id
            """,
            {"module_id": module_id},
        )
        return [{"module_id": row[0], "parts": _decode_parts(row[1])} for row in rows]

    def incoming_dependencies(self, module_id: str) -> list[dict[str, Any]]:
        """Modules depending on ``module_id``, with the parts they use."""
        rows = self._rows(
            """
            MATCH (s:Module)-[r:MODULE_DEPENDENCY]->(m:Module {module_id: $module_id})
            RETURN s.module_id, r.parts
            ORDER BY s.module_id
            """,
            {"module_id": module_id},
        )
        return [{"module_id": row[0], "parts": _decode_parts(row[1])} for row in rows]

    def module_embeddings(
        self,
        module_type: Optional[str] = None,
        category: Optional[str] = None,
    ) -> list[tuple[str, list[float]]]:
        """(module id, embedding) for modules with an embedding, filtered exactly."""
        where, params = _module_filters(module_type, category, require_embedding=True)
        rows = self._rows(f"MATCH (m:Module) {where} RETURN m.module_id, m.embedding", params)
        return [(row[0], row[1]) for row in rows if row[1] is not None]

    def filter_modules(
        self,
        module_type: Optional[str] = None,
        category: Optional[str] = None,
    ) -> list[str]:
        """Module ids matching the filters, ascending."""
        where, params = _module_filters(module_type, category)
        rows = self._rows(f"MATCH (m:Module) {where} RETURN m.module_id ORDER BY m.module_id", params)
        return [row[0] for row in rows]

    def distinct_values(self, field: str) -> list[str]:
        """Sorted distinct values of a Module field (``type`` or ``category``)."""
        try:
            column = _MODULE_FIELDS[field]
        except KeyError:
            raise ValueError(f"Unsupported module field: {field}") from None
        rows = self._rows(
            f"""
            MATCH (m:Module)
            WHERE m.{column} IS NOT NULL
            RETURN DISTINCT m.{column} AS value
            ORDER BY value
            """
        )
        return [row[0] for row in rows]

    def count_nodes(self) -> dict[str, int]:
        modules = self._rows("MATCH (m:Module) RETURN count(*)")[0][0]
        parts = self._rows("MATCH (p:Part) RETURN count(*)")[0][0]
        return {"modules": modules, "parts": parts}


class GraphStore:
    """Handle on the Kuzu database holding the applied contract graph.

    Usage:
        with GraphStore("/path/to/graph.kuzu") as store:
            with store.session() as session:
                hashes = session.stored_hashes()

    ``open()``/``close()`` are explicit lifecycle calls for long-running
    processes (the REST server opens at startup, closes at shutdown).
    """

    def __init__(self, db_path: str | Path | None = None):
        """
        Args:
            db_path: Path to the Kuzu database; None for an in-memory database
        """
        self.db_path = Path(db_path) if db_path is not None else None
        self._db: Optional["kuzu.Database"] = None
        # At most one apply at a time within this process
        self.apply_lock = threading.Lock()

    @property
    def is_open(self) -> bool:
        return self._db is not None

    def open(self) -> "GraphStore":
        if self._db is not None:
            return self
        if self.db_path is None:
            self._db = kuzu.Database(IN_MEMORY)
        else:
            # Kuzu creates the database itself, but not its parent directory
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._db = kuzu.Database(str(self.db_path))
        self._initialize_schema()
        logger.info("Opened graph database: %s", self.db_path or IN_MEMORY)
        return self

    def close(self) -> None:
        if self._db is None:
            return
        self._db.close()
        self._db = None
        logger.info("Graph database closed")

    def __enter__(self) -> "GraphStore":
        return self.open()

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _initialize_schema(self) -> None:
        conn = kuzu.Connection(self._db)
        try:
            for ddl in SCHEMA_DDL:
                conn.execute(ddl)
        finally:
            conn.close()

    @contextmanager
    def session(self) -> Iterator[GraphSession]:
        """Open a connection for one logical operation; always closed on exit."""
        if self._db is None:
            raise RuntimeError("Graph store is not open")
        conn = kuzu.Connection(self._db)
        session = GraphSession(conn)
        try:
            yield session
        finally:
            if session.in_transaction:
                try:
                    session.rollback()
                except Exception as e:
                    logger.error("Rollback on session close failed: %s", e)
            conn.close()
