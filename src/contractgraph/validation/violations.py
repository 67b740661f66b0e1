"""Validation result types shared by the structural and referential passes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from contractgraph.models import Contract, ContractFile


@dataclass(frozen=True)
class Violation:
    """A single contract problem.

    Attributes:
        path: Dotted location of the offending field (e.g.
              ``dependencies.0.parts.1.type``), ``root`` for the whole
              document or ``file`` for an unreadable file
        message: Human-readable description
    """

    path: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"path": self.path, "message": self.message}

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


@dataclass
class FileValidation:
    """Validation outcome for one contract file."""

    file_path: str
    file_name: str
    errors: list[Violation] = field(default_factory=list)
    contract: Contract | None = None

    @property
    def valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "filePath": self.file_path,
            "fileName": self.file_name,
            "valid": self.valid,
        }
        if self.errors:
            data["errors"] = [v.to_dict() for v in self.errors]
        return data


@dataclass
class ValidationResult:
    """Validation outcome for a whole batch of contract files.

    ``files`` lists every input file in input order, including files that
    could not be parsed. The batch is valid only if every file is.
    """

    files: list[FileValidation] = field(default_factory=list)
    sources: list[ContractFile] = field(default_factory=list, repr=False)

    @property
    def valid(self) -> bool:
        return all(f.valid for f in self.files)

    @property
    def error_count(self) -> int:
        return sum(len(f.errors) for f in self.files)

    def contracts(self) -> list[tuple[ContractFile, Contract]]:
        """Typed contracts paired with their source files, in input order.

        Raises:
            ValueError: If the batch is not valid
        """
        if not self.valid:
            raise ValueError("Invalid contract batch has no applicable contracts")
        return [
            (source, result.contract)
            for source, result in zip(self.sources, self.files)
            if result.contract is not None
        ]

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "files": [f.to_dict() for f in self.files],
        }
