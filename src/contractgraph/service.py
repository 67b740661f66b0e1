"""
contractgraph.service - Contract operations for the CLI and REST server.

Contracts are reloaded from disk on every call: there is no cached batch,
each operation sees the files as they are now. The graph store and the
embedding provider are passed in, never looked up globally.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from contractgraph.changes import ChangeCheckResult, check_for_changes
from contractgraph.config.loader import CONFIG_DIR_KEY
from contractgraph.errors import ContractValidationError
from contractgraph.graph import (
    ApplyResult,
    GraphStore,
    ModuleDetail,
    ModuleRelations,
    SearchResult,
    apply_contracts,
    get_module_detail,
    get_module_relations,
    list_categories,
    list_types,
    search_modules,
    verify_connection,
)
from contractgraph.graph.search import DEFAULT_LIMIT
from contractgraph.loader import load_contract_files
from contractgraph.models import ContractFile
from contractgraph.validation import ValidationResult, validate_contracts

logger = logging.getLogger(__name__)


class ContractService:
    """Contract operations bound to one store, source pattern and provider."""

    def __init__(
        self,
        store: GraphStore,
        contracts_pattern: Optional[str],
        base_dir: Optional[Path] = None,
        embedder: Optional[Any] = None,
        default_limit: int = DEFAULT_LIMIT,
    ):
        self.store = store
        self.contracts_pattern = contracts_pattern
        self.base_dir = base_dir
        self.embedder = embedder
        self.default_limit = default_limit

    @classmethod
    def from_config(
        cls,
        config: Dict[str, Any],
        store: GraphStore,
        embedder: Optional[Any] = None,
    ) -> "ContractService":
        base_dir = config.get(CONFIG_DIR_KEY)
        return cls(
            store=store,
            contracts_pattern=config.get("contracts", {}).get("path"),
            base_dir=Path(base_dir) if base_dir else None,
            embedder=embedder,
            default_limit=config.get("search", {}).get("default_limit", DEFAULT_LIMIT),
        )

    def load_files(self) -> list[ContractFile]:
        """Every contract file currently matching the source pattern."""
        return load_contract_files(self.contracts_pattern, self.base_dir)

    def get_all_contracts(self) -> list[ContractFile]:
        """Contract files that parsed, for listing."""
        return [f for f in self.load_files() if f.parse_error is None]

    def validate(self) -> ValidationResult:
        return validate_contracts(self.load_files())

    def check_modified(self) -> ChangeCheckResult:
        return check_for_changes(self.store, self.load_files())

    def apply(self) -> ApplyResult:
        """Validate the current files and, if valid, rebuild the graph from them.

        Raises:
            ContractValidationError: If any file is invalid
        """
        validation = self.validate()
        if not validation.valid:
            logger.warning("Refusing to apply: %d validation error(s)", validation.error_count)
            raise ContractValidationError(validation)
        return apply_contracts(self.store, validation, self.embedder)

    def relations(self, module_id: str) -> ModuleRelations:
        return get_module_relations(self.store, module_id)

    def detail(self, module_id: str) -> ModuleDetail:
        return get_module_detail(self.store, module_id)

    def categories(self) -> list[str]:
        return list_categories(self.store)

    def types(self) -> list[str]:
        return list_types(self.store)

    def search(
        self,
        query: Optional[str] = None,
        module_type: Optional[str] = None,
        category: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> SearchResult:
        return search_modules(
            self.store,
            self.load_files(),
            embedder=self.embedder,
            query=query,
            module_type=module_type,
            category=category,
            limit=self.default_limit if limit is None else limit,
        )

    def verify_connection(self) -> dict[str, Any]:
        return verify_connection(self.store)
