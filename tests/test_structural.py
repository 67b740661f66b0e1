"""Tests for structural validation of single contract records."""

import pytest

from contractgraph.validation import parse_contract, validate_structure


def _by_path(violations):
    return {v.path: v.message for v in violations}


# ─────────────────────────────────────────────────────────────────────────────
# Valid records
# ─────────────────────────────────────────────────────────────────────────────


class TestValidRecords:
    def test_minimal_record(self, make_contract):
        assert validate_structure(make_contract("a")) == []

    def test_full_record(self, sample_contracts):
        for record in sample_contracts:
            assert validate_structure(record) == []

    def test_parse_returns_typed_contract(self, make_contract):
        record = make_contract(
            "auth",
            parts=[("login", "function")],
            dependencies={"profiles": [("getProfile", "function")]},
        )
        contract, violations = parse_contract(record)

        assert violations == []
        assert contract.id == "auth"
        assert contract.iter_parts()[0].id == "login"
        assert contract.iter_dependencies()[0].parts[0].part_id == "getProfile"

    def test_unknown_fields_are_ignored(self, make_contract):
        record = make_contract("a")
        record["owner"] = "team-x"
        assert validate_structure(record) == []

    def test_empty_parts_and_dependencies_lists(self, make_contract):
        record = make_contract("a", parts=[], dependencies={})
        assert validate_structure(record) == []


# ─────────────────────────────────────────────────────────────────────────────
# Invalid records
# ─────────────────────────────────────────────────────────────────────────────


class TestInvalidRecords:
    @pytest.mark.parametrize("field", ["id", "type", "category", "description"])
    def test_missing_required_field(self, make_contract, field):
        record = make_contract("a")
        del record[field]

        violations = _by_path(validate_structure(record))

        assert violations == {field: f"Contract {field} is required"}

    def test_empty_string_is_missing(self, make_contract):
        record = make_contract("a")
        record["id"] = ""
        assert _by_path(validate_structure(record)) == {"id": "Contract id is required"}

    def test_wrong_scalar_type(self, make_contract):
        record = make_contract("a")
        record["type"] = 42
        assert _by_path(validate_structure(record)) == {
            "type": "Expected string, received number"
        }

    def test_parts_not_a_list(self, make_contract):
        record = make_contract("a")
        record["parts"] = "login"
        assert _by_path(validate_structure(record)) == {
            "parts": "Expected array, received string"
        }

    def test_null_collections_rejected(self, make_contract):
        record = make_contract("a")
        record["parts"] = None
        record["dependencies"] = None
        assert _by_path(validate_structure(record)) == {
            "parts": "Expected array, received null",
            "dependencies": "Expected array, received null",
        }

    def test_part_missing_type(self, make_contract):
        record = make_contract("a")
        record["parts"] = [{"id": "login"}]
        assert _by_path(validate_structure(record)) == {"parts.0.type": "Part type is required"}

    def test_dependency_without_parts(self, make_contract):
        record = make_contract("a")
        record["dependencies"] = [{"module_id": "b", "parts": []}]
        assert _by_path(validate_structure(record)) == {
            "dependencies.0.parts": "At least one part must be specified"
        }

    def test_dependency_part_nested_path(self, make_contract):
        record = make_contract("a", dependencies={"b": [("x", "function")]})
        record["dependencies"][0]["parts"].append({"part_id": "y"})

        assert _by_path(validate_structure(record)) == {
            "dependencies.0.parts.1.type": "Part type is required"
        }

    def test_dependency_missing_module_id(self, make_contract):
        record = make_contract("a")
        record["dependencies"] = [{"parts": [{"part_id": "x", "type": "function"}]}]
        assert _by_path(validate_structure(record)) == {
            "dependencies.0.module_id": "Module id is required"
        }

    def test_several_violations_reported_together(self, make_contract):
        record = make_contract("a")
        del record["type"]
        del record["category"]
        assert set(_by_path(validate_structure(record))) == {"type", "category"}

    @pytest.mark.parametrize(
        "raw,received",
        [(None, "null"), (["a"], "array"), ("text", "string"), (3, "number")],
    )
    def test_document_not_an_object(self, raw, received):
        violations = validate_structure(raw)

        assert len(violations) == 1
        assert violations[0].path == "root"
        assert violations[0].message == f"Expected object, received {received}"

    def test_invalid_record_yields_no_contract(self, make_contract):
        record = make_contract("a")
        del record["id"]
        contract, violations = parse_contract(record)
        assert contract is None
        assert violations
