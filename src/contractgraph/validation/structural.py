"""Structural validation - Check one contract record against the record model.

The parsed YAML is untrusted until it gets through here. pydantic does the
shape checking; this module turns its error locations into dotted paths
(``dependencies.0.parts.1.type``) and its error types into stable,
human-readable messages.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import ValidationError

from contractgraph.models import Contract
from contractgraph.validation.violations import Violation

ROOT_PATH = "root"

_SPECIAL_LABELS = {
    "module_id": "Module id",
    "part_id": "Part id",
}


def _json_type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _field_label(loc: tuple) -> str:
    """Human label for the field at ``loc`` (e.g. "Contract id", "Part type")."""
    field = str(loc[-1])
    if field in _SPECIAL_LABELS:
        return _SPECIAL_LABELS[field]
    owner = "Contract" if len(loc) == 1 else "Part"
    return f"{owner} {field}"


def _format_message(error: dict[str, Any]) -> str:
    loc = error.get("loc", ())
    kind = error.get("type", "")
    received = _json_type_name(error.get("input"))

    if kind in ("model_type", "model_attributes_type", "dict_type"):
        return f"Expected object, received {received}"
    if not loc:
        return error.get("msg", "Invalid contract")

    if kind in ("missing", "string_too_short"):
        return f"{_field_label(loc)} is required"
    if kind == "too_short":
        if loc[-1] == "parts":
            return "At least one part must be specified"
        return f"{_field_label(loc)} must not be empty"
    if kind == "string_type":
        return f"Expected string, received {received}"
    if kind == "list_type":
        return f"Expected array, received {received}"
    return error.get("msg", "Invalid value")


def _format_path(loc: tuple) -> str:
    return ".".join(str(part) for part in loc) or ROOT_PATH


def parse_contract(raw: Any) -> tuple[Optional[Contract], list[Violation]]:
    """Validate parsed YAML data and build a typed Contract from it.

    Args:
        raw: Whatever YAML deserialization returned for one file

    Returns:
        Tuple of (Contract or None, violations). The contract is only
        returned when there are no violations.
    """
    try:
        contract = Contract.model_validate(raw)
    except ValidationError as e:
        violations = [
            Violation(path=_format_path(tuple(err.get("loc", ()))), message=_format_message(err))
            for err in e.errors()
        ]
        return None, violations
    return contract, []


def validate_structure(raw: Any) -> list[Violation]:
    """Return the structural violations of one parsed record (empty if valid)."""
    _, violations = parse_contract(raw)
    return violations
