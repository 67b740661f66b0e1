"""
contractgraph.changes - Detect contracts changed since the last apply.

Each Module node in the graph keeps the hash of the file it was applied
from. Comparing those against the hashes of the files on disk, matched by
module id (a contract may move to another file), classifies every module
as added, modified or removed. Unchanged modules are not reported.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Iterable, Mapping, Optional

from contractgraph.models import ContractFile

if TYPE_CHECKING:
    from contractgraph.graph.store import GraphStore

logger = logging.getLogger(__name__)

UNKNOWN_LOCATION = "unknown"


class ChangeStatus(Enum):
    """How a module differs from the applied graph."""

    ADDED = "added"
    MODIFIED = "modified"
    REMOVED = "removed"


@dataclass(frozen=True)
class ContractChange:
    """One changed module."""

    module_id: str
    file_name: str
    file_path: str
    current_hash: str
    stored_hash: Optional[str]
    status: ChangeStatus

    def to_dict(self) -> dict[str, Any]:
        return {
            "moduleId": self.module_id,
            "fileName": self.file_name,
            "filePath": self.file_path,
            "currentHash": self.current_hash,
            "storedHash": self.stored_hash,
            "status": self.status.value,
        }


@dataclass
class ChangeCheckResult:
    """All changes between the files on disk and the applied graph."""

    changes: list[ContractChange] = field(default_factory=list)

    def _count(self, status: ChangeStatus) -> int:
        return sum(1 for c in self.changes if c.status is status)

    @property
    def total_changes(self) -> int:
        return len(self.changes)

    @property
    def modified_count(self) -> int:
        return self._count(ChangeStatus.MODIFIED)

    @property
    def added_count(self) -> int:
        return self._count(ChangeStatus.ADDED)

    @property
    def removed_count(self) -> int:
        return self._count(ChangeStatus.REMOVED)

    @property
    def has_changes(self) -> bool:
        return self.total_changes > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "hasChanges": self.has_changes,
            "totalChanges": self.total_changes,
            "modifiedCount": self.modified_count,
            "addedCount": self.added_count,
            "removedCount": self.removed_count,
            "changes": [c.to_dict() for c in self.changes],
        }


def detect_changes(
    files: Iterable[ContractFile],
    stored_hashes: Mapping[str, str],
) -> ChangeCheckResult:
    """Classify modules as added, modified or removed.

    Each stored entry is consumed at most once; whatever is left after the
    pass over current files was removed from disk.

    Args:
        files: Current contract files (unparseable or id-less files are skipped)
        stored_hashes: module id -> hash recorded at the last apply

    Returns:
        ChangeCheckResult listing added/modified first (file order),
        then removed modules (module id order)
    """
    remaining = dict(stored_hashes)
    result = ChangeCheckResult()

    for contract_file in files:
        module_id = contract_file.module_id
        if module_id is None:
            continue

        stored_hash = remaining.pop(module_id, None)
        if stored_hash is None:
            status = ChangeStatus.ADDED
        elif stored_hash != contract_file.file_hash:
            status = ChangeStatus.MODIFIED
        else:
            continue

        result.changes.append(
            ContractChange(
                module_id=module_id,
                file_name=contract_file.file_name,
                file_path=contract_file.file_path,
                current_hash=contract_file.file_hash,
                stored_hash=stored_hash,
                status=status,
            )
        )

    for module_id in sorted(remaining):
        result.changes.append(
            ContractChange(
                module_id=module_id,
                file_name=UNKNOWN_LOCATION,
                file_path=UNKNOWN_LOCATION,
                current_hash="",
                stored_hash=remaining[module_id],
                status=ChangeStatus.REMOVED,
            )
        )

    logger.info(
        "Contract changes detected: %d modified, %d added, %d removed",
        result.modified_count,
        result.added_count,
        result.removed_count,
    )
    return result


def check_for_changes(store: "GraphStore", files: list[ContractFile]) -> ChangeCheckResult:
    """Compare current contract files with the hashes stored in the graph."""
    with store.session() as session:
        stored_hashes = session.stored_hashes()
    return detect_changes(files, stored_hashes)
