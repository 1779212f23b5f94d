"""
Hosted embedding services — HuggingFace Inference, Cohere, Azure OpenAI and
GaiaNet nodes.

All of them are :class:`RemoteProvider` subclasses: same session, timeout and
error handling, different URL, payload and response shape.
"""

from typing import Any, Optional, Tuple

import requests

from .base import ProviderCallError, ProviderInitError, ProviderKind
from .remote import RemoteProvider

DEFAULT_HUGGINGFACE_URL = "https://api-inference.huggingface.co/pipeline/feature-extraction"
DEFAULT_HUGGINGFACE_MODEL = "sentence-transformers/all-mpnet-base-v2"
DEFAULT_HUGGINGFACE_DIMENSIONS = 768

DEFAULT_COHERE_URL = "https://api.cohere.ai/v1"
DEFAULT_COHERE_MODEL = "embed-english-v3.0"
DEFAULT_COHERE_DIMENSIONS = 1024

DEFAULT_AZURE_DEPLOYMENT = "text-embedding-ada-002"
DEFAULT_AZURE_API_VERSION = "2023-05-15"
DEFAULT_AZURE_DIMENSIONS = 1536

DEFAULT_GAIANET_MODEL = "nomic-embed"
DEFAULT_GAIANET_DIMENSIONS = 768


class HuggingFaceProvider(RemoteProvider):
    """Feature-extraction pipeline of the HuggingFace Inference API."""

    kind = ProviderKind.HUGGINGFACE
    api_key_setting = "HUGGINGFACE_API_KEY"

    def __init__(self, api_key: str, model: str = DEFAULT_HUGGINGFACE_MODEL,
                 base_url: str = DEFAULT_HUGGINGFACE_URL,
                 dimensions: int = DEFAULT_HUGGINGFACE_DIMENSIONS, **kwargs):
        super().__init__(api_key, model=model, base_url=base_url,
                         dimensions=dimensions, **kwargs)

    @classmethod
    def from_config(cls, config) -> "HuggingFaceProvider":
        return cls(
            api_key=config.HUGGINGFACE_API_KEY,
            model=config.HUGGINGFACE_EMBEDDING_MODEL,
            base_url=config.HUGGINGFACE_BASE_URL,
            dimensions=config.HUGGINGFACE_EMBEDDING_DIMENSIONS,
            timeout=(10, config.REQUEST_TIMEOUT),
        )

    def _endpoint(self) -> str:
        return f"{self.base_url}/{self.model}"

    def _payload(self, text: str) -> dict:
        return {"inputs": text, "options": {"wait_for_model": True}}

    def _parse(self, data: Any) -> Any:
        if isinstance(data, dict) and "error" in data:
            raise ProviderCallError(f"[HuggingFaceProvider] {data['error']}")
        # Pooled models return [floats]; a one-sentence batch comes back as [[floats]]
        if isinstance(data, list) and len(data) == 1 and isinstance(data[0], list):
            return data[0]
        return data


class CohereProvider(RemoteProvider):
    """Cohere ``POST /v1/embed``."""

    kind = ProviderKind.COHERE
    api_key_setting = "COHERE_API_KEY"

    def __init__(self, api_key: str, model: str = DEFAULT_COHERE_MODEL,
                 base_url: str = DEFAULT_COHERE_URL,
                 dimensions: int = DEFAULT_COHERE_DIMENSIONS,
                 input_type: str = "search_document", **kwargs):
        super().__init__(api_key, model=model, base_url=base_url,
                         dimensions=dimensions, **kwargs)
        self.input_type = input_type

    @classmethod
    def from_config(cls, config) -> "CohereProvider":
        return cls(
            api_key=config.COHERE_API_KEY,
            model=config.COHERE_EMBEDDING_MODEL,
            base_url=config.COHERE_BASE_URL,
            dimensions=config.COHERE_EMBEDDING_DIMENSIONS,
            timeout=(10, config.REQUEST_TIMEOUT),
        )

    def _endpoint(self) -> str:
        return f"{self.base_url}/embed"

    def _payload(self, text: str) -> dict:
        return {"model": self.model, "texts": [text], "input_type": self.input_type}

    def _parse(self, data: Any) -> Any:
        embeddings = data.get("embeddings") if isinstance(data, dict) else None
        # embedding_types responses nest the vectors under "float"
        if isinstance(embeddings, dict):
            embeddings = embeddings.get("float")
        if not embeddings:
            raise ProviderCallError("[CohereProvider] Response contained no embeddings")
        return embeddings[0]


class AzureOpenAIProvider(RemoteProvider):
    """Azure OpenAI deployment; authenticates with the ``api-key`` header."""

    kind = ProviderKind.AZURE_OPENAI
    api_key_setting = "AZURE_OPENAI_KEY"

    def __init__(self, api_key: str, endpoint: str,
                 deployment: str = DEFAULT_AZURE_DEPLOYMENT,
                 api_version: str = DEFAULT_AZURE_API_VERSION,
                 dimensions: int = DEFAULT_AZURE_DIMENSIONS,
                 timeout: float | Tuple[float, float] = (10, 60),
                 session: Optional[requests.Session] = None):
        super().__init__(api_key, model=deployment, base_url=endpoint,
                         dimensions=dimensions, timeout=timeout, session=session)
        self.api_version = api_version

    @classmethod
    def from_config(cls, config) -> "AzureOpenAIProvider":
        return cls(
            api_key=config.AZURE_OPENAI_KEY,
            endpoint=config.AZURE_OPENAI_ENDPOINT,
            deployment=config.AZURE_OPENAI_DEPLOYMENT,
            api_version=config.AZURE_OPENAI_API_VERSION,
            dimensions=config.AZURE_OPENAI_EMBEDDING_DIMENSIONS,
            timeout=(10, config.REQUEST_TIMEOUT),
        )

    def _initialize(self) -> None:
        if not self.base_url:
            raise ProviderInitError(
                "AZURE_OPENAI_ENDPOINT is not set; Azure OpenAI embeddings are unavailable.")
        super()._initialize()

    def _headers(self) -> dict:
        return {"Content-Type": "application/json", "api-key": self.api_key}

    def _endpoint(self) -> str:
        return (f"{self.base_url}/openai/deployments/{self.model}/embeddings"
                f"?api-version={self.api_version}")

    def _payload(self, text: str) -> dict:
        # the deployment picks the model
        return {"input": text}


class GaiaNetProvider(RemoteProvider):
    """A GaiaNet node's OpenAI-compatible API.  The API key is optional."""

    kind = ProviderKind.GAIANET
    api_key_setting = "GAIANET_API_KEY"
    api_key_required = False

    def __init__(self, base_url: str, api_key: str = "",
                 model: str = DEFAULT_GAIANET_MODEL,
                 dimensions: int = DEFAULT_GAIANET_DIMENSIONS, **kwargs):
        super().__init__(api_key, model=model, base_url=base_url,
                         dimensions=dimensions, **kwargs)

    @classmethod
    def from_config(cls, config) -> "GaiaNetProvider":
        return cls(
            base_url=config.GAIANET_BASE_URL,
            api_key=config.GAIANET_API_KEY,
            model=config.GAIANET_EMBEDDING_MODEL,
            dimensions=config.GAIANET_EMBEDDING_DIMENSIONS,
            timeout=(10, config.REQUEST_TIMEOUT),
        )
