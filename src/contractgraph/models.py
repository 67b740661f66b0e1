"""
contractgraph.models - Contract record model.

Two stages, kept separate on purpose:

- ``ContractFile`` is what the loader produces: the raw text, its hash and
  whatever YAML deserialization returned (any shape at all).
- ``Contract`` and friends are the typed records. A ``Contract`` only
  exists once ``contractgraph.validation.structural`` has accepted the
  parsed data.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr


class _Record(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class Part(_Record):
    """An exportable element of a module (function, class, interface...)."""

    id: StrictStr = Field(min_length=1)
    type: StrictStr = Field(min_length=1)


class DependencyPart(_Record):
    """A reference to a part of another module, with its expected type."""

    part_id: StrictStr = Field(min_length=1)
    type: StrictStr = Field(min_length=1)


class Dependency(_Record):
    """A unidirectional dependency on specific parts of another module."""

    module_id: StrictStr = Field(min_length=1)
    parts: list[DependencyPart] = Field(min_length=1)


class Contract(_Record):
    """A module contract: identity, exported parts and dependencies."""

    id: StrictStr = Field(min_length=1)
    type: StrictStr = Field(min_length=1)
    category: StrictStr = Field(min_length=1)
    description: StrictStr = Field(min_length=1)
    # May be left out, but not given as null
    parts: list[Part] = Field(default_factory=list)
    dependencies: list[Dependency] = Field(default_factory=list)

    def iter_parts(self) -> list[Part]:
        return list(self.parts)

    def iter_dependencies(self) -> list[Dependency]:
        return list(self.dependencies)


@dataclass
class ContractFile:
    """A contract file as read from disk, before validation.

    Attributes:
        file_name: Base name of the file.
        file_path: Absolute path of the file.
        raw_content: Literal file text (what the hash is computed over).
        parsed: Untyped YAML deserialization result, None on parse failure.
        file_hash: SHA-256 hex digest of raw_content.
        parse_error: Parser message when the YAML could not be read.
    """

    file_name: str
    file_path: str
    raw_content: str
    parsed: Any
    file_hash: str
    parse_error: Optional[str] = None

    @property
    def module_id(self) -> Optional[str]:
        """The declared module id, if the parsed data has a usable one."""
        if self.parse_error is not None or not isinstance(self.parsed, dict):
            return None
        value = self.parsed.get("id")
        if isinstance(value, str) and value:
            return value
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "fileName": self.file_name,
            "filePath": self.file_path,
            "content": self.parsed,
            "fileHash": self.file_hash,
        }
