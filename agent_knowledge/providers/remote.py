"""
Remote embedding provider — works with OpenAI and any other service that
implements the OpenAI ``/embeddings`` API (Together.ai, LM Studio, vLLM, ...).

Hosted services with their own request shapes subclass :class:`RemoteProvider`
and override ``_endpoint``, ``_payload`` and ``_parse`` (see ``hosted.py``).
"""

import logging
from typing import Any, List, Optional, Tuple

import requests

from .base import EmbeddingProvider, ProviderCallError, ProviderInitError, ProviderKind

logger = logging.getLogger(__name__)

DEFAULT_REMOTE_MODEL = "text-embedding-3-small"
DEFAULT_REMOTE_DIMENSIONS = 1536
DEFAULT_OPENAI_BASE_URL = "https://api.openai.com/v1"

# text-embedding-3-* accept a "dimensions" request parameter; ada-002 rejects it
_SHORTENABLE_MODEL_PREFIX = "text-embedding-3"


class RemoteProvider(EmbeddingProvider):
    """Embeddings over HTTP from an OpenAI-compatible ``/embeddings`` API.

    Pass ``kind`` to register a second OpenAI-compatible backend beside the
    default ``openai`` one.
    """

    kind = ProviderKind.OPENAI
    api_key_setting = "OPENAI_API_KEY"
    api_key_required = True

    def __init__(self, api_key: str, model: str = DEFAULT_REMOTE_MODEL,
                 base_url: str = DEFAULT_OPENAI_BASE_URL,
                 dimensions: int = DEFAULT_REMOTE_DIMENSIONS,
                 timeout: float | Tuple[float, float] = (10, 60),
                 session: Optional[requests.Session] = None,
                 kind: Optional[str] = None):
        super().__init__(dimensions)
        if kind:
            self.kind = kind
        self.api_key = api_key
        self.model = model
        self.base_url = (base_url or "").rstrip("/")
        self.timeout = timeout
        self._session = session

    @classmethod
    def from_config(cls, config) -> "RemoteProvider":
        return cls(
            api_key=config.OPENAI_API_KEY,
            model=config.OPENAI_EMBEDDING_MODEL,
            base_url=config.OPENAI_BASE_URL,
            dimensions=config.OPENAI_EMBEDDING_DIMENSIONS,
            timeout=(10, config.REQUEST_TIMEOUT),
        )

    @property
    def _name(self) -> str:
        return type(self).__name__

    # ── Request hooks ──

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _endpoint(self) -> str:
        return f"{self.base_url}/embeddings"

    def _payload(self, text: str) -> dict:
        payload = {"model": self.model, "input": text}
        if self.model.startswith(_SHORTENABLE_MODEL_PREFIX):
            payload["dimensions"] = self.dimensions
        return payload

    def _parse(self, data: Any) -> Any:
        items = data.get("data") if isinstance(data, dict) else None
        if not items:
            raise ProviderCallError(f"[{self._name}] Response contained no embeddings")
        usage = data.get("usage") or {}
        logger.debug("[%s] Usage: prompt=%s", self._name, usage.get("prompt_tokens"))
        return items[0].get("embedding")

    # ── Provider hooks ──

    def _initialize(self) -> None:
        if self.api_key_required and not self.api_key:
            raise ProviderInitError(
                f"{self.api_key_setting} is not set; '{self.kind}' embeddings are unavailable.")
        if not self.base_url:
            raise ProviderInitError(f"{self._name} has no endpoint configured.")
        if self._session is None:
            self._session = requests.Session()
        logger.debug("[%s] Ready: %s @ %s", self._name, self.model, self.base_url)

    def _embed(self, text: str) -> List[float]:
        response = self._session.post(self._endpoint(), headers=self._headers(),
                                      json=self._payload(text), timeout=self.timeout)
        response.raise_for_status()
        return self._parse(response.json())
