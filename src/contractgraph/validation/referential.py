"""Referential validation - Check contracts against each other.

Cross-contract checks need to see the whole batch before judging any one
contract, so this runs in two explicit phases:

1. ``build_index`` collects every declared module id, which files declare
   it and the parts each module exports.
2. ``check_references`` validates a single contract against that index.

Because the index is complete before any check runs, a dependency on a
contract that appears later in the batch resolves the same way as one on
an earlier contract. Nothing here depends on batch order.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from contractgraph.models import Contract, ContractFile
from contractgraph.validation.structural import parse_contract
from contractgraph.validation.violations import FileValidation, ValidationResult, Violation

logger = logging.getLogger(__name__)


@dataclass
class ContractIndex:
    """Batch-wide lookup tables built before any reference is checked.

    Attributes:
        declarations: module id -> (file_path, file_name) of every file
                      declaring it, sorted by path
        module_parts: module id -> {part id: part type} taken from the
                      declaration with the smallest file path
    """

    declarations: dict[str, list[tuple[str, str]]] = field(default_factory=dict)
    module_parts: dict[str, dict[str, Any]] = field(default_factory=dict)

    @property
    def available_module_ids(self) -> set[str]:
        return set(self.declarations)

    def has_module(self, module_id: str) -> bool:
        return module_id in self.declarations

    def parts_of(self, module_id: str) -> dict[str, Any]:
        return self.module_parts.get(module_id, {})


def _declared_parts(parsed: dict[str, Any]) -> dict[str, Any]:
    """Read part declarations from not-yet-validated data, skipping junk."""
    parts: dict[str, Any] = {}
    raw_parts = parsed.get("parts")
    if not isinstance(raw_parts, list):
        return parts
    for raw_part in raw_parts:
        if not isinstance(raw_part, dict):
            continue
        part_id = raw_part.get("id")
        if isinstance(part_id, str) and part_id not in parts:
            parts[part_id] = raw_part.get("type")
    return parts


def build_index(files: Iterable[ContractFile]) -> ContractIndex:
    """Index pass: collect module ids and parts across the whole batch.

    Files that failed to parse or have no usable id are left out.
    """
    index = ContractIndex()
    parts_by_path: dict[str, dict[str, Any]] = {}

    for contract_file in files:
        module_id = contract_file.module_id
        if module_id is None:
            continue
        index.declarations.setdefault(module_id, []).append(
            (contract_file.file_path, contract_file.file_name)
        )
        parts_by_path[contract_file.file_path] = _declared_parts(contract_file.parsed)

    for module_id, declarations in index.declarations.items():
        declarations.sort()
        index.module_parts[module_id] = parts_by_path.get(declarations[0][0], {})

    return index


def _duplicate_id_violations(module_id: str, file_path: str, index: ContractIndex) -> list[Violation]:
    others = sorted(name for path, name in index.declarations.get(module_id, []) if path != file_path)
    if not others:
        return []
    return [
        Violation(
            path="id",
            message=f'Duplicate module id "{module_id}" (also declared in {", ".join(others)})',
        )
    ]


def _duplicated_positions(values: list[str]) -> set[int]:
    """Every index whose value occurs more than once (not just the repeats)."""
    counts = Counter(values)
    return {i for i, value in enumerate(values) if counts[value] > 1}


def _dependency_violations(contract: Contract, index: ContractIndex) -> list[Violation]:
    violations: list[Violation] = []
    dependencies = contract.iter_dependencies()
    duplicate_deps = _duplicated_positions([dep.module_id for dep in dependencies])

    for i, dep in enumerate(dependencies):
        dep_path = f"dependencies.{i}"
        is_self = dep.module_id == contract.id

        if is_self:
            violations.append(
                Violation(
                    path=f"{dep_path}.module_id",
                    message=f'Module "{contract.id}" cannot depend on itself',
                )
            )

        if i in duplicate_deps:
            violations.append(
                Violation(
                    path=f"{dep_path}.module_id",
                    message=f'Duplicate dependency on module "{dep.module_id}"',
                )
            )

        module_exists = index.has_module(dep.module_id)
        if not module_exists:
            violations.append(
                Violation(
                    path=f"{dep_path}.module_id",
                    message=f'Referenced module "{dep.module_id}" does not exist',
                )
            )

        check_refs = module_exists and not is_self
        declared = index.parts_of(dep.module_id) if check_refs else {}
        duplicate_parts = _duplicated_positions([part.part_id for part in dep.parts])

        for j, dep_part in enumerate(dep.parts):
            part_path = f"{dep_path}.parts.{j}"

            if j in duplicate_parts:
                violations.append(
                    Violation(
                        path=f"{part_path}.part_id",
                        message=(
                            f'Duplicate part "{dep_part.part_id}" in dependency '
                            f'on module "{dep.module_id}"'
                        ),
                    )
                )

            if not check_refs:
                continue

            if dep_part.part_id not in declared:
                violations.append(
                    Violation(
                        path=f"{part_path}.part_id",
                        message=f'Part "{dep_part.part_id}" does not exist in module "{dep.module_id}"',
                    )
                )
                continue

            expected_type = declared[dep_part.part_id]
            if expected_type != dep_part.type:
                violations.append(
                    Violation(
                        path=f"{part_path}.type",
                        message=(
                            f'Part type mismatch: expected "{expected_type}" '
                            f'but got "{dep_part.type}"'
                        ),
                    )
                )

    return violations


def check_references(
    contract_file: ContractFile,
    contract: Optional[Contract],
    index: ContractIndex,
) -> list[Violation]:
    """Check pass for one contract file.

    The duplicate-id check runs for any file with a usable id. Dependency
    checks need a structurally valid ``contract`` and are skipped without
    one.
    """
    violations: list[Violation] = []
    module_id = contract_file.module_id
    if module_id is not None:
        violations.extend(_duplicate_id_violations(module_id, contract_file.file_path, index))
    if contract is not None:
        violations.extend(_dependency_violations(contract, index))
    return violations


def validate_contracts(files: list[ContractFile]) -> ValidationResult:
    """Validate a complete batch of contract files.

    Reports every file, in input order: parse failures, structural
    violations and referential violations. Never raises for invalid
    contracts and never mutates anything.

    Args:
        files: Every contract file of the batch

    Returns:
        ValidationResult for the batch
    """
    index = build_index(files)
    result = ValidationResult(sources=list(files))

    for contract_file in files:
        file_result = FileValidation(
            file_path=contract_file.file_path,
            file_name=contract_file.file_name,
        )

        if contract_file.parse_error is not None:
            file_result.errors.append(
                Violation(path="file", message=f"Failed to parse YAML: {contract_file.parse_error}")
            )
            logger.error("Parse error in %s: %s", contract_file.file_name, contract_file.parse_error)
            result.files.append(file_result)
            continue

        contract, structural = parse_contract(contract_file.parsed)
        file_result.errors.extend(structural)
        file_result.errors.extend(check_references(contract_file, contract, index))

        if file_result.errors:
            logger.warning("Invalid: %s (%d errors)", contract_file.file_name, len(file_result.errors))
        else:
            file_result.contract = contract
            logger.debug("Valid: %s", contract_file.file_name)
        result.files.append(file_result)

    logger.info(
        "Validated %d contract file(s): %d error(s)", len(result.files), result.error_count
    )
    return result
