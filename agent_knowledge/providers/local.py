"""
On-device embedding provider backed by a sentence-transformers model.

The model is downloaded/loaded on first use, never at import time, so
registering a LocalProvider at startup costs nothing.
"""

import logging
from typing import List, Optional

from .base import EmbeddingProvider, ProviderInitError, ProviderKind

logger = logging.getLogger(__name__)

DEFAULT_LOCAL_MODEL = "BAAI/bge-small-en-v1.5"
DEFAULT_LOCAL_DIMENSIONS = 384


class LocalProvider(EmbeddingProvider):

    kind = ProviderKind.LOCAL

    def __init__(self, model_name: str = DEFAULT_LOCAL_MODEL,
                 dimensions: int = DEFAULT_LOCAL_DIMENSIONS,
                 cache_folder: Optional[str] = None,
                 normalize: bool = True):
        super().__init__(dimensions)
        self.model_name = model_name
        self.cache_folder = cache_folder
        self.normalize = normalize
        self._model = None

    @classmethod
    def from_config(cls, config) -> "LocalProvider":
        return cls(
            model_name=config.LOCAL_EMBEDDING_MODEL,
            dimensions=config.LOCAL_EMBEDDING_DIMENSIONS,
            cache_folder=config.LOCAL_MODEL_CACHE_DIR,
        )

    def _load_model(self):
        """Return a ``SentenceTransformer`` for ``model_name``."""
        try:
            from sentence_transformers import SentenceTransformer  # type: ignore
        except ImportError as exc:
            raise ProviderInitError(
                "sentence-transformers package is required for local embeddings. "
                "Install it with: pip install 'agent_knowledge[local]'"
            ) from exc
        return SentenceTransformer(self.model_name, cache_folder=self.cache_folder)

    def _initialize(self) -> None:
        logger.info("[LocalProvider] Loading local embedding model: %s", self.model_name)
        model = self._load_model()

        reported = None
        if hasattr(model, "get_sentence_embedding_dimension"):
            reported = model.get_sentence_embedding_dimension()
        if reported is not None and int(reported) != self.dimensions:
            raise ProviderInitError(
                f"Model {self.model_name} produces {reported}-dim vectors, "
                f"configured for {self.dimensions}")
        self._model = model

    def _embed(self, text: str) -> List[float]:
        vecs = self._model.encode([text], normalize_embeddings=self.normalize)
        vec = vecs[0]
        return vec.tolist() if hasattr(vec, "tolist") else list(vec)
