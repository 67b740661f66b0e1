"""
contractgraph.embedding - Description embeddings for similarity search.

The provider wraps a sentence-transformers model. Loading the model is slow
and may fail (package missing, no network for the first download), so the
rest of the system never waits for it: callers poll ``status()`` and treat
NOT_READY as an ordinary state. Apply stores null embeddings, filter-only
search keeps working, and only semantic search refuses to run.

Vectors are L2-normalized, so cosine similarity is a plain dot product.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class EmbeddingStatus(Enum):
    """Readiness of the embedding provider."""

    READY = "ready"
    NOT_READY = "not_ready"
    ERROR = "error"


@dataclass
class EmbeddingConfig:
    """Configuration for the embedding provider."""

    model: str = "all-MiniLM-L6-v2"  # sentence-transformers model id
    device: str = "cpu"
    enabled: bool = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EmbeddingConfig":
        """Create from the ``[embedding]`` config section."""
        return cls(
            model=data.get("model", cls.model),
            device=data.get("device", cls.device),
            enabled=data.get("enabled", True),
        )


class EmbeddingProvider:
    """Lazily loaded sentence-transformers model.

    Usage:
        provider = EmbeddingProvider(EmbeddingConfig())
        provider.start_background_initialization()
        ...
        if provider.is_ready():
            vector = provider.generate_embedding("Handles user sign-in")
    """

    def __init__(self, config: Optional[EmbeddingConfig] = None):
        self._config = config or EmbeddingConfig()
        self._model = None
        self._error: Optional[str] = None
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None

    @property
    def model_name(self) -> str:
        return self._config.model

    @property
    def last_error(self) -> Optional[str]:
        return self._error

    def initialize(self) -> EmbeddingStatus:
        """Load the model (blocking). Safe to call more than once.

        Failures are recorded, not raised; the provider then reports ERROR.
        """
        with self._lock:
            if self._model is not None:
                return EmbeddingStatus.READY
            if not self._config.enabled:
                logger.info("Embeddings disabled by configuration")
                return EmbeddingStatus.NOT_READY

            logger.info("Initializing embedding model: %s", self._config.model)
            try:
                from sentence_transformers import SentenceTransformer

                self._model = SentenceTransformer(self._config.model, device=self._config.device)
            except ImportError:
                self._error = "sentence-transformers is not installed (pip install contractgraph[embeddings])"
                logger.warning(self._error)
                return EmbeddingStatus.ERROR
            except Exception as e:
                self._error = f"Failed to initialize embedding model: {e}"
                logger.error(self._error)
                return EmbeddingStatus.ERROR

            self._error = None
            logger.info("Embedding model initialized")
            return EmbeddingStatus.READY

    def start_background_initialization(self) -> None:
        """Load the model in a daemon thread; poll ``status()`` for the outcome."""
        if self._thread is not None or self._model is not None:
            return
        self._thread = threading.Thread(
            target=self.initialize, name="contractgraph-embedding-init", daemon=True
        )
        self._thread.start()

    def status(self) -> EmbeddingStatus:
        """Current readiness, without side effects."""
        if self._model is not None:
            return EmbeddingStatus.READY
        if self._error is not None:
            return EmbeddingStatus.ERROR
        return EmbeddingStatus.NOT_READY

    def is_ready(self) -> bool:
        return self.status() is EmbeddingStatus.READY

    def generate_embedding(self, text: str) -> List[float]:
        """Embed one text.

        Raises:
            ValueError: If ``text`` is empty or whitespace
            RuntimeError: If the model is not loaded or encoding fails
        """
        if not text or not text.strip():
            raise ValueError("Text cannot be empty")
        if self._model is None:
            raise RuntimeError("Embedding model not initialized. Call initialize() first.")

        try:
            vector = self._model.encode(
                text,
                convert_to_numpy=True,
                normalize_embeddings=True,
            )
        except Exception as e:
            raise RuntimeError(f"Failed to generate embedding: {e}") from e

        logger.debug("Generated embedding with %d dimensions", len(vector))
        return [float(x) for x in vector]


def provider_status(provider: Optional[Any]) -> EmbeddingStatus:
    """Readiness of an optional provider; a missing provider is NOT_READY.

    Providers that only implement ``is_ready()`` are accepted too.
    """
    if provider is None:
        return EmbeddingStatus.NOT_READY
    try:
        status = getattr(provider, "status", None)
        if callable(status):
            return status()
        return EmbeddingStatus.READY if provider.is_ready() else EmbeddingStatus.NOT_READY
    except Exception as e:
        logger.warning("Embedding provider status check failed: %s", e)
        return EmbeddingStatus.ERROR


# Process-wide provider, created on first use
_embedding_provider: Optional[EmbeddingProvider] = None


def get_embedding_provider(config: Optional[EmbeddingConfig] = None) -> EmbeddingProvider:
    """Get or create the embedding provider singleton."""
    global _embedding_provider
    if _embedding_provider is None:
        _embedding_provider = EmbeddingProvider(config)
    return _embedding_provider
