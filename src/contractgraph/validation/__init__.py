"""Validation module - Contract structure and reference validation.

Structural checks look at one contract in isolation; referential checks
look at the whole batch. ``validate_contracts`` runs both.
"""

from contractgraph.validation.violations import FileValidation, ValidationResult, Violation
from contractgraph.validation.structural import parse_contract, validate_structure
from contractgraph.validation.referential import (
    ContractIndex,
    build_index,
    check_references,
    validate_contracts,
)

__all__ = [
    "ContractIndex",
    "FileValidation",
    "ValidationResult",
    "Violation",
    "build_index",
    "check_references",
    "parse_contract",
    "validate_contracts",
    "validate_structure",
]
