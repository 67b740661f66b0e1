"""Tests for semantic and filter-only module search."""

import pytest

from contractgraph.embedding import EmbeddingStatus
from contractgraph.errors import EmbeddingNotReadyError, InvalidSearchError
from contractgraph.graph import apply_contracts, search_modules
from contractgraph.graph.search import rank_by_similarity
from contractgraph.validation import validate_contracts

# ─────────────────────────────────────────────────────────────────────────────
# Fixtures
# ─────────────────────────────────────────────────────────────────────────────


class RecordingStore:
    """Store stand-in that counts sessions; any session is a failure here."""

    def __init__(self):
        self.sessions = 0

    def session(self):
        self.sessions += 1
        raise AssertionError("store should not be queried")


@pytest.fixture
def sample_files(make_file, sample_contracts):
    return [make_file(r) for r in sample_contracts]


@pytest.fixture
def applied_store(store, sample_files, embedder):
    result = apply_contracts(store, validate_contracts(sample_files), embedder)
    assert result.success
    return store


def _ids(result):
    return [hit.contract_file.module_id for hit in result.results]


# ─────────────────────────────────────────────────────────────────────────────
# Semantic mode
# ─────────────────────────────────────────────────────────────────────────────


class TestSemanticSearch:
    def test_ranked_by_similarity_positive_only(self, applied_store, sample_files, embedder):
        result = search_modules(applied_store, sample_files, embedder, query="user login")

        assert _ids(result) == ["auth", "profiles"]
        similarities = [hit.similarity for hit in result.results]
        assert similarities == sorted(similarities, reverse=True)
        assert similarities[0] == pytest.approx(0.5 ** 0.5)
        assert all(s > 0 for s in similarities)

    def test_filters_narrow_candidates(self, applied_store, sample_files, embedder):
        result = search_modules(
            applied_store, sample_files, embedder, query="user", module_type="repository"
        )
        assert _ids(result) == ["profiles"]

    def test_limit(self, applied_store, sample_files, embedder):
        result = search_modules(applied_store, sample_files, embedder, query="user login", limit=1)
        assert _ids(result) == ["auth"]
        assert result.results_count == 1

    def test_query_is_trimmed(self, applied_store, sample_files, embedder):
        result = search_modules(applied_store, sample_files, embedder, query="  invoice  ")
        assert result.query == "invoice"
        assert _ids(result) == ["billing"]

    def test_modules_without_current_file_dropped(self, applied_store, sample_files, embedder):
        current = [f for f in sample_files if f.module_id != "auth"]
        result = search_modules(applied_store, current, embedder, query="user login")
        assert _ids(result) == ["profiles"]

    def test_results_carry_current_file_content(self, applied_store, sample_files, embedder):
        result = search_modules(applied_store, sample_files, embedder, query="invoice")

        data = result.to_dict()

        assert data["query"] == "invoice"
        assert data["resultsCount"] == 1
        hit = data["results"][0]
        assert hit["fileName"] == "billing.yaml"
        assert hit["content"]["id"] == "billing"
        assert hit["similarity"] == pytest.approx(0.5 ** 0.5)

    @pytest.mark.parametrize("status", [EmbeddingStatus.NOT_READY, EmbeddingStatus.ERROR])
    def test_not_ready_issues_no_store_queries(self, sample_files, embedder, status):
        embedder.set_status(status)
        recording = RecordingStore()

        with pytest.raises(EmbeddingNotReadyError, match="not ready"):
            search_modules(recording, sample_files, embedder, query="user")

        assert recording.sessions == 0
        assert embedder.calls == []

    def test_missing_provider_is_not_ready(self, sample_files):
        recording = RecordingStore()
        with pytest.raises(EmbeddingNotReadyError):
            search_modules(recording, sample_files, None, query="user")
        assert recording.sessions == 0


# ─────────────────────────────────────────────────────────────────────────────
# Filter-only mode
# ─────────────────────────────────────────────────────────────────────────────


class TestFilterSearch:
    def test_category_filter_ordered_by_module_id(self, store, make_file, make_contract):
        files = [
            make_file(make_contract("zeta")),
            make_file(make_contract("alpha")),
            make_file(make_contract("mid")),
            make_file(make_contract("other", category="frontend")),
        ]
        apply_contracts(store, validate_contracts(files))

        result = search_modules(store, files, None, category="backend")

        assert _ids(result) == ["alpha", "mid", "zeta"]
        assert all(hit.similarity == 1.0 for hit in result.results)
        assert result.query == ""

    def test_type_and_category_combined(self, applied_store, sample_files):
        result = search_modules(applied_store, sample_files, None, module_type="service", category="payments")
        assert _ids(result) == ["billing"]

    def test_type_filter(self, applied_store, sample_files):
        result = search_modules(applied_store, sample_files, None, module_type="service")
        assert _ids(result) == ["auth", "billing"]

    def test_no_matches(self, applied_store, sample_files):
        result = search_modules(applied_store, sample_files, None, category="nope")
        assert result.results == []

    def test_works_while_provider_not_ready(self, applied_store, sample_files, embedder):
        embedder.set_status(EmbeddingStatus.NOT_READY)
        result = search_modules(applied_store, sample_files, embedder, category="security")
        assert _ids(result) == ["auth"]


# ─────────────────────────────────────────────────────────────────────────────
# Arguments
# ─────────────────────────────────────────────────────────────────────────────


class TestSearchArguments:
    @pytest.mark.parametrize("limit", [0, 101, -1, True, "5"])
    def test_bad_limit(self, limit):
        with pytest.raises(InvalidSearchError, match="limit"):
            search_modules(RecordingStore(), [], None, category="backend", limit=limit)

    @pytest.mark.parametrize("query", [None, "", "   "])
    def test_nothing_to_search_for(self, query):
        with pytest.raises(InvalidSearchError, match="query or at least one"):
            search_modules(RecordingStore(), [], None, query=query)


class TestRankBySimilarity:
    def test_orders_and_drops_non_positive(self):
        ranked = rank_by_similarity(
            [1.0, 0.0],
            [("b", [0.6, 0.8]), ("a", [0.6, 0.8]), ("c", [1.0, 0.0]), ("d", [0.0, 1.0]), ("e", [-1.0, 0.0])],
        )
        assert ranked == [("c", 1.0), ("a", pytest.approx(0.6)), ("b", pytest.approx(0.6))]

    def test_skips_other_dimensions(self):
        assert rank_by_similarity([1.0, 0.0], [("a", [1.0, 0.0, 0.0])]) == []

    def test_no_candidates(self):
        assert rank_by_similarity([1.0], []) == []
