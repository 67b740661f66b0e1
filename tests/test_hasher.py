"""Tests for contractgraph.utilities.hasher."""

from contractgraph.utilities.hasher import calculate_hash


class TestCalculateHash:
    def test_full_sha256_digest(self):
        assert calculate_hash("") == (
            "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
        )

    def test_deterministic(self):
        text = "id: a\ntype: service\n"
        assert calculate_hash(text) == calculate_hash(text)

    def test_distinct_texts_differ(self):
        assert calculate_hash("id: a\n") != calculate_hash("id: b\n")

    def test_whitespace_and_comments_are_changes(self):
        base = "id: a\ntype: service\n"
        assert calculate_hash(base) != calculate_hash(base + "\n")
        assert calculate_hash(base) != calculate_hash("# note\n" + base)

    def test_line_endings_are_changes(self):
        assert calculate_hash("id: a\r\ntype: service\r\n") != calculate_hash("id: a\ntype: service\n")
