"""Similarity search over module descriptions.

Two modes, picked by whether query text is given:

- semantic: embed the query and rank modules by cosine similarity
  (a dot product, embeddings are unit length). Needs a READY provider.
  Only positive similarities are returned, best first.
- filter-only: no query, exact ``type``/``category`` match, ordered by
  module id, every similarity is 1.0.

Results are joined back to the current contract files so callers get the
full, current contract content rather than the subset stored in the graph.
Modules in the graph with no current file are dropped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

import numpy as np

from contractgraph.embedding import EmbeddingStatus, provider_status
from contractgraph.errors import EmbeddingNotReadyError, InvalidSearchError
from contractgraph.graph.store import GraphStore
from contractgraph.models import ContractFile

logger = logging.getLogger(__name__)

MIN_LIMIT = 1
MAX_LIMIT = 100
DEFAULT_LIMIT = 10


@dataclass(frozen=True)
class SearchHit:
    """A matching contract file and its similarity to the query."""

    contract_file: ContractFile
    similarity: float

    def to_dict(self) -> dict[str, Any]:
        data = self.contract_file.to_dict()
        data["similarity"] = self.similarity
        return data


@dataclass
class SearchResult:
    query: str
    results: list[SearchHit] = field(default_factory=list)

    @property
    def results_count(self) -> int:
        return len(self.results)

    def to_dict(self) -> dict[str, Any]:
        return {
            "query": self.query,
            "resultsCount": self.results_count,
            "results": [hit.to_dict() for hit in self.results],
        }


def _check_limit(limit: Any) -> int:
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise InvalidSearchError(f"limit must be an integer between {MIN_LIMIT} and {MAX_LIMIT}")
    if not MIN_LIMIT <= limit <= MAX_LIMIT:
        raise InvalidSearchError(f"limit must be between {MIN_LIMIT} and {MAX_LIMIT}, got {limit}")
    return limit


def rank_by_similarity(
    query_vector: list[float],
    candidates: list[tuple[str, list[float]]],
) -> list[tuple[str, float]]:
    """Score candidates against the query; keep positive scores, best first.

    Candidates whose dimension differs from the query (embedded with another
    model) are skipped. Ties are broken by module id.
    """
    query = np.asarray(query_vector, dtype=np.float64)
    usable = [(module_id, vec) for module_id, vec in candidates if len(vec) == query.shape[0]]
    if not usable:
        return []

    matrix = np.asarray([vec for _, vec in usable], dtype=np.float64)
    scores = matrix @ query

    ranked = [
        (module_id, float(score))
        for (module_id, _), score in zip(usable, scores)
        if score > 0
    ]
    ranked.sort(key=lambda item: (-item[1], item[0]))
    return ranked


def _join_files(
    scored: Iterable[tuple[str, float]],
    files: Iterable[ContractFile],
    limit: int,
) -> list[SearchHit]:
    by_module: dict[str, ContractFile] = {}
    for contract_file in files:
        module_id = contract_file.module_id
        if module_id is not None and module_id not in by_module:
            by_module[module_id] = contract_file

    hits: list[SearchHit] = []
    for module_id, similarity in scored:
        contract_file = by_module.get(module_id)
        if contract_file is None:
            logger.debug("Module %s is in the graph but has no contract file", module_id)
            continue
        hits.append(SearchHit(contract_file=contract_file, similarity=similarity))
        if len(hits) >= limit:
            break
    return hits


def search_modules(
    store: GraphStore,
    files: list[ContractFile],
    embedder: Optional[Any] = None,
    query: Optional[str] = None,
    module_type: Optional[str] = None,
    category: Optional[str] = None,
    limit: int = DEFAULT_LIMIT,
) -> SearchResult:
    """Find modules by description similarity or by exact attributes.

    Args:
        store: Open graph store
        files: Current contract files to join results against
        embedder: Embedding provider (required for semantic mode)
        query: Free-text query; blank means filter-only mode
        module_type: Exact module type filter
        category: Exact category filter
        limit: Maximum number of results, 1-100

    Raises:
        InvalidSearchError: Bad limit, or neither query nor filter given
        EmbeddingNotReadyError: Query given but the provider is not ready
    """
    limit = _check_limit(limit)
    query = (query or "").strip()

    if query:
        status = provider_status(embedder)
        if status is not EmbeddingStatus.READY:
            raise EmbeddingNotReadyError(
                f"Embedding service is not ready (status: {status.value}). Please try again later."
            )
        query_vector = embedder.generate_embedding(query)
        with store.session() as session:
            candidates = session.module_embeddings(module_type, category)
        scored = rank_by_similarity(query_vector, candidates)
        logger.info("Semantic search matched %d of %d module(s)", len(scored), len(candidates))
    elif module_type is not None or category is not None:
        with store.session() as session:
            module_ids = session.filter_modules(module_type, category)
        scored = [(module_id, 1.0) for module_id in module_ids]
        logger.info("Filter search matched %d module(s)", len(scored))
    else:
        raise InvalidSearchError("Provide a query or at least one of type/category")

    return SearchResult(query=query, results=_join_files(scored, files, limit))
