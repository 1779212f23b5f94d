import logging
from typing import List, Optional, Tuple

import requests

from .base import EmbeddingProvider, ProviderCallError, ProviderInitError, ProviderKind

logger = logging.getLogger(__name__)

DEFAULT_OLLAMA_URL = "http://localhost:11434"
DEFAULT_OLLAMA_MODEL = "nomic-embed-text"
DEFAULT_OLLAMA_DIMENSIONS = 768


class OllamaProvider(EmbeddingProvider):
    """Embeddings from a local Ollama server (``POST /api/embed``)."""

    kind = ProviderKind.OLLAMA

    def __init__(self, base_url: str = DEFAULT_OLLAMA_URL,
                 model: str = DEFAULT_OLLAMA_MODEL,
                 dimensions: int = DEFAULT_OLLAMA_DIMENSIONS,
                 timeout: float | Tuple[float, float] = (10, 60),
                 session: Optional[requests.Session] = None):
        super().__init__(dimensions)
        self.base_url = base_url
        self.model = model
        self.timeout = timeout
        self._session = session
        # Accept either the server root or a full endpoint like /api/generate
        if "/api/" in base_url:
            self._api_root = base_url.rsplit("/api/", 1)[0]
        else:
            self._api_root = base_url.rstrip("/")

    @classmethod
    def from_config(cls, config) -> "OllamaProvider":
        return cls(
            base_url=config.OLLAMA_BASE_URL,
            model=config.OLLAMA_EMBEDDING_MODEL,
            dimensions=config.OLLAMA_EMBEDDING_DIMENSIONS,
            timeout=(10, config.REQUEST_TIMEOUT),
        )

    def _initialize(self) -> None:
        if not self.model:
            raise ProviderInitError("No Ollama embedding model configured")
        if self._session is None:
            self._session = requests.Session()

    def _embed(self, text: str) -> List[float]:
        url = f"{self._api_root}/api/embed"
        payload = {"model": self.model, "input": text}
        response = self._session.post(url, json=payload, timeout=self.timeout)
        response.raise_for_status()
        data = response.json()
        embeddings = data.get("embeddings") if isinstance(data, dict) else None
        if not embeddings:
            raise ProviderCallError("[Ollama] Response contained no embeddings")
        return embeddings[0]
