"""
contractgraph.errors - Exception types raised by contract operations.

Structural and referential violations are never raised; they are returned
as data on a ValidationResult. These exceptions cover the conditions a
caller has to branch on instead.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from contractgraph.validation import ValidationResult


class ContractGraphError(Exception):
    """Base class for contractgraph errors."""


class ContractSourceError(ContractGraphError):
    """No contract source location is configured."""


class ContractValidationError(ContractGraphError):
    """A contract batch failed validation and cannot be applied."""

    def __init__(self, validation: "ValidationResult", message: str | None = None):
        self.validation = validation
        super().__init__(message or "Contract validation failed. Cannot apply invalid contracts.")


class UnknownModuleError(ContractGraphError):
    """The requested module is not present in the graph."""

    def __init__(self, module_id: str):
        self.module_id = module_id
        super().__init__(f'Module "{module_id}" not found')


class EmbeddingNotReadyError(ContractGraphError):
    """Semantic search was requested while the embedding provider is not ready."""


class InvalidSearchError(ContractGraphError, ValueError):
    """Search arguments are out of range or name nothing to search for."""
