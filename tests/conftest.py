"""Shared fixtures for contractgraph tests."""

from __future__ import annotations

import math
import re
from pathlib import Path
from typing import Any, Callable, Optional

import pytest
import yaml

from contractgraph.embedding import EmbeddingStatus
from contractgraph.graph import GraphStore
from contractgraph.models import ContractFile
from contractgraph.utilities.hasher import calculate_hash

# ─────────────────────────────────────────────────────────────────────────────
# Fake embedding provider
# ─────────────────────────────────────────────────────────────────────────────

VOCABULARY = [
    "user",
    "login",
    "session",
    "token",
    "payment",
    "invoice",
    "email",
    "notification",
    "profile",
    "storage",
    "report",
    "search",
]


class FakeEmbeddingProvider:
    """Bag-of-words embeddings over a fixed vocabulary; no model download.

    Texts sharing vocabulary words get positive similarity, texts sharing
    none get exactly zero.
    """

    def __init__(self, status: EmbeddingStatus = EmbeddingStatus.READY, fail_on: tuple = ()):
        self._status = status
        self.fail_on = set(fail_on)
        self.calls: list[str] = []

    def status(self) -> EmbeddingStatus:
        return self._status

    def is_ready(self) -> bool:
        return self._status is EmbeddingStatus.READY

    def set_status(self, status: EmbeddingStatus) -> None:
        self._status = status

    def generate_embedding(self, text: str) -> list[float]:
        self.calls.append(text)
        if text in self.fail_on:
            raise RuntimeError(f"cannot embed {text!r}")
        words = re.findall(r"[a-z]+", text.lower())
        vector = [float(sum(1 for w in words if w.startswith(term))) for term in VOCABULARY]
        norm = math.sqrt(sum(x * x for x in vector))
        if norm == 0:
            return vector
        return [x / norm for x in vector]


@pytest.fixture
def embedder():
    return FakeEmbeddingProvider()


# ─────────────────────────────────────────────────────────────────────────────
# Contract data
# ─────────────────────────────────────────────────────────────────────────────


def contract_data(
    module_id: str,
    module_type: str = "service",
    category: str = "backend",
    description: Optional[str] = None,
    parts: Optional[list[tuple[str, str]]] = None,
    dependencies: Optional[dict[str, list[tuple[str, str]]]] = None,
) -> dict[str, Any]:
    """Build a contract record; parts as (id, type), deps as {module: [(part, type)]}."""
    data: dict[str, Any] = {
        "id": module_id,
        "type": module_type,
        "category": category,
        "description": description or f"The {module_id} module",
    }
    if parts is not None:
        data["parts"] = [{"id": pid, "type": ptype} for pid, ptype in parts]
    if dependencies is not None:
        data["dependencies"] = [
            {
                "module_id": target,
                "parts": [{"part_id": pid, "type": ptype} for pid, ptype in dep_parts],
            }
            for target, dep_parts in dependencies.items()
        ]
    return data


@pytest.fixture
def make_contract() -> Callable[..., dict[str, Any]]:
    return contract_data


@pytest.fixture
def make_file() -> Callable[..., ContractFile]:
    """Build an in-memory ContractFile from a record (no disk access)."""

    def _make(data: Any, file_name: Optional[str] = None, directory: str = "/contracts") -> ContractFile:
        if file_name is None:
            file_name = f"{data['id']}.yaml"
        raw = yaml.safe_dump(data, sort_keys=False)
        return ContractFile(
            file_name=file_name,
            file_path=f"{directory}/{file_name}",
            raw_content=raw,
            parsed=data,
            file_hash=calculate_hash(raw),
        )

    return _make


@pytest.fixture
def contracts_dir(tmp_path: Path) -> Path:
    path = tmp_path / "contracts"
    path.mkdir()
    return path


@pytest.fixture
def write_contract(contracts_dir: Path) -> Callable[..., Path]:
    """Write a record (or raw text) as a YAML file under ``contracts_dir``."""

    def _write(data: Any, file_name: Optional[str] = None, subdir: Optional[str] = None) -> Path:
        directory = contracts_dir / subdir if subdir else contracts_dir
        directory.mkdir(parents=True, exist_ok=True)
        if file_name is None:
            file_name = f"{data['id']}.yaml"
        path = directory / file_name
        text = data if isinstance(data, str) else yaml.safe_dump(data, sort_keys=False)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def sample_contracts(make_contract) -> list[dict[str, Any]]:
    """Three modules: billing depends on auth, auth depends on profiles."""
    return [
        make_contract(
            "auth",
            category="security",
            description="Handles user login and session tokens",
            parts=[("login", "function"), ("Session", "class")],
            dependencies={"profiles": [("getProfile", "function")]},
        ),
        make_contract(
            "billing",
            category="payments",
            description="Creates invoice and payment records",
            parts=[("charge", "function")],
            dependencies={"auth": [("login", "function"), ("Session", "class")]},
        ),
        make_contract(
            "profiles",
            module_type="repository",
            category="backend",
            description="User profile storage",
            parts=[("getProfile", "function"), ("Profile", "class")],
        ),
    ]


# ─────────────────────────────────────────────────────────────────────────────
# Graph store
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def store(tmp_path: Path):
    """A real Kuzu database in a temporary directory."""
    graph_store = GraphStore(tmp_path / "graph" / "contracts.kuzu").open()
    yield graph_store
    graph_store.close()
