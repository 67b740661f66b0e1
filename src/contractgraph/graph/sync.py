"""Graph synchronization - Rebuild the graph from a validated contract batch.

Every apply is a full reset: all graph content is deleted, then every
module, part, membership edge and dependency edge is written again inside
one write transaction. There are no incremental upserts across batches.

The delete runs (and commits) before that transaction starts, so a
failure during the rebuild leaves the graph empty rather than restored
to its previous contents.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from contractgraph.embedding import EmbeddingStatus, provider_status
from contractgraph.errors import ContractValidationError
from contractgraph.graph.store import GraphSession, GraphStore
from contractgraph.models import Contract, ContractFile
from contractgraph.validation import ValidationResult

logger = logging.getLogger(__name__)


@dataclass
class ApplyResult:
    """Outcome of applying a contract batch to the graph."""

    success: bool
    modules_processed: int
    parts_processed: int
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "modulesProcessed": self.modules_processed,
            "partsProcessed": self.parts_processed,
            "message": self.message,
        }


def embed_description(embedder: Optional[Any], contract: Contract) -> Optional[list[float]]:
    """Embedding for a contract's description, or None.

    None when there is no provider, it is not ready, or it fails for this
    text. A failure only affects this one module.
    """
    if provider_status(embedder) is not EmbeddingStatus.READY:
        return None
    try:
        return embedder.generate_embedding(contract.description)
    except Exception as e:
        logger.warning("Embedding failed for module %s: %s", contract.id, e)
        return None


def _write_batch(
    session: GraphSession,
    batch: list[tuple[ContractFile, Contract]],
    embedder: Optional[Any],
) -> tuple[int, int]:
    modules = 0
    parts = 0

    # Modules and parts first so dependency edges can reach any module
    for source, contract in batch:
        session.upsert_module(
            module_id=contract.id,
            module_type=contract.type,
            category=contract.category,
            description=contract.description,
            contract_file_hash=source.file_hash,
            embedding=embed_description(embedder, contract),
        )
        modules += 1
        logger.debug("Created/updated module: %s", contract.id)

        for part in contract.iter_parts():
            session.upsert_part(contract.id, part.id, part.type)
            session.link_part(contract.id, part.id)
            parts += 1

    for _, contract in batch:
        for dependency in contract.iter_dependencies():
            session.upsert_dependency(
                contract.id,
                dependency.module_id,
                [dep_part.model_dump() for dep_part in dependency.parts],
            )

    return modules, parts


def apply_contracts(
    store: GraphStore,
    validation: ValidationResult,
    embedder: Optional[Any] = None,
) -> ApplyResult:
    """Replace the graph contents with a validated contract batch.

    Args:
        store: Open graph store
        validation: Result of ``validate_contracts`` for the batch to apply
        embedder: Optional embedding provider for module descriptions

    Returns:
        ApplyResult; write failures are reported here, not raised

    Raises:
        ContractValidationError: If the batch did not validate
    """
    if not validation.valid:
        raise ContractValidationError(validation)

    batch = validation.contracts()

    with store.apply_lock, store.session() as session:
        try:
            logger.info("Clearing all existing data from graph database")
            session.clear_all()

            logger.info("Applying %d contracts to graph", len(batch))
            with session.transaction():
                modules, parts = _write_batch(session, batch, embedder)
        except Exception as e:
            logger.error("Error applying contracts to graph: %s", e)
            return ApplyResult(
                success=False,
                modules_processed=0,
                parts_processed=0,
                message=f"Failed to apply contracts to graph: {e}",
            )

    message = f"Successfully applied {modules} modules and {parts} parts to graph"
    logger.info(message)
    return ApplyResult(
        success=True,
        modules_processed=modules,
        parts_processed=parts,
        message=message,
    )
