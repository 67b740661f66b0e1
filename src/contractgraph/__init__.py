"""
contractgraph - Module contract validation and graph synchronization

contractgraph validates declarative module contracts (YAML records that
declare a module's parts and its dependencies on other modules' parts),
detects which contracts changed since the last apply, and keeps a
property graph plus a semantic search index in sync with them.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("contractgraph")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"  # Not installed
__license__ = "MIT"

from contractgraph.models import Contract, ContractFile, Dependency, DependencyPart, Part
from contractgraph.utilities.hasher import calculate_hash
from contractgraph.validation import ValidationResult, Violation, validate_contracts

__all__ = [
    "__version__",
    "Contract",
    "ContractFile",
    "Dependency",
    "DependencyPart",
    "Part",
    "ValidationResult",
    "Violation",
    "calculate_hash",
    "validate_contracts",
]
