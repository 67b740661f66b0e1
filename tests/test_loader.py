"""Tests for reading contract files from disk."""

import hashlib

import pytest

from contractgraph.errors import ContractSourceError
from contractgraph.loader import load_contract_files, read_contract_file, resolve_contract_paths
from contractgraph.utilities.hasher import calculate_hash


class TestResolveContractPaths:
    def test_recursive_glob_sorted(self, contracts_dir, write_contract, make_contract):
        write_contract(make_contract("b"))
        write_contract(make_contract("a"), subdir="nested/deeper")
        write_contract("not yaml", file_name="notes.txt")

        paths = resolve_contract_paths("contracts/**/*.yaml", contracts_dir.parent)

        assert [p.name for p in paths] == ["b.yaml", "a.yaml"]
        assert paths == sorted(paths)
        assert all(p.is_absolute() for p in paths)

    def test_absolute_pattern_ignores_base_dir(self, contracts_dir, write_contract, make_contract, tmp_path):
        write_contract(make_contract("a"))

        paths = resolve_contract_paths(str(contracts_dir / "*.yaml"), tmp_path / "elsewhere")

        assert [p.name for p in paths] == ["a.yaml"]


class TestReadContractFile:
    def test_parsed_with_hash_of_raw_text(self, write_contract):
        text = "# auth contract\nid: auth\ntype: service\ncategory: security\ndescription: Auth\n"
        path = write_contract(text, file_name="auth.yaml")

        contract_file = read_contract_file(path)

        assert contract_file.parse_error is None
        assert contract_file.raw_content == text
        assert contract_file.file_hash == calculate_hash(text)
        assert contract_file.module_id == "auth"
        assert contract_file.file_name == "auth.yaml"
        assert contract_file.file_path == str(path)

    def test_crlf_file_hashed_as_written(self, contracts_dir):
        contracts_dir.mkdir(parents=True, exist_ok=True)
        raw_bytes = b"id: auth\r\ntype: service\r\ncategory: security\r\ndescription: Auth\r\n"
        crlf_path = contracts_dir / "crlf.yaml"
        lf_path = contracts_dir / "lf.yaml"
        crlf_path.write_bytes(raw_bytes)
        lf_path.write_bytes(raw_bytes.replace(b"\r\n", b"\n"))

        crlf_file = read_contract_file(crlf_path)
        lf_file = read_contract_file(lf_path)

        assert crlf_file.file_hash == hashlib.sha256(raw_bytes).hexdigest()
        assert "\r\n" in crlf_file.raw_content
        assert crlf_file.file_hash != lf_file.file_hash
        assert crlf_file.parsed == lf_file.parsed

    def test_yaml_error_is_captured(self, write_contract):
        path = write_contract("id: [unclosed\n", file_name="broken.yaml")

        contract_file = read_contract_file(path)

        assert contract_file.parsed is None
        assert contract_file.parse_error
        assert contract_file.module_id is None
        assert contract_file.file_hash == calculate_hash("id: [unclosed\n")

    def test_non_mapping_document_has_no_module_id(self, write_contract):
        path = write_contract("- one\n- two\n", file_name="list.yaml")
        contract_file = read_contract_file(path)
        assert contract_file.parsed == ["one", "two"]
        assert contract_file.module_id is None

    def test_to_dict(self, write_contract, make_contract):
        record = make_contract("a")
        contract_file = read_contract_file(write_contract(record))

        data = contract_file.to_dict()

        assert data["fileName"] == "a.yaml"
        assert data["content"] == record
        assert data["fileHash"] == contract_file.file_hash
        assert data["filePath"].endswith("a.yaml")


class TestLoadContractFiles:
    def test_loads_every_match(self, contracts_dir, write_contract, make_contract):
        write_contract(make_contract("a"))
        write_contract("key: [\n", file_name="bad.yaml")

        files = load_contract_files("contracts/*.yaml", contracts_dir.parent)

        assert [f.file_name for f in files] == ["a.yaml", "bad.yaml"]
        assert files[1].parse_error is not None

    def test_no_match_is_empty(self, tmp_path):
        assert load_contract_files("nothing/**/*.yaml", tmp_path) == []

    @pytest.mark.parametrize("pattern", [None, ""])
    def test_unconfigured_pattern(self, pattern, tmp_path):
        with pytest.raises(ContractSourceError, match="not configured"):
            load_contract_files(pattern, tmp_path)
