"""
Embedding orchestrator — cache first, then the active provider, then a
zero-vector fallback.

``embed`` never raises for bad input or provider trouble:

* blank / non-string input      -> ``[]``  (no cache lookup, no provider call)
* cache hit                     -> the cached vector, verbatim
* no provider for the kind      -> ``[]``  plus a warning
* provider init / call failure  -> ``provider.get_zero_vector()`` plus a warning

Writing computed vectors back to the cache is the caller's job.  Use
``embed_with_result`` when the caller needs to tell a degraded result from
a real one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .providers.base import ProviderError
from .providers.local import DEFAULT_LOCAL_DIMENSIONS
from .runtime import RuntimeContext

logger = logging.getLogger(__name__)

SOURCE_CACHE = "cache"
SOURCE_PROVIDER = "provider"
SOURCE_FALLBACK = "fallback"
SOURCE_INVALID = "invalid"


@dataclass(frozen=True)
class EmbeddingResult:
    """A vector plus where it came from."""

    vector: list[float]
    source: str
    provider_kind: Optional[str] = None
    error: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        """True for the empty / zero vectors returned instead of a real embedding."""
        return self.source in (SOURCE_FALLBACK, SOURCE_INVALID)


def _preview(text: str, limit: int = 50) -> str:
    return text[:limit] + ("..." if len(text) > limit else "")


def retrieve_cached_embedding(runtime: RuntimeContext, text: str) -> Optional[list[float]]:
    """Return the first cached vector for *text*, or None on a miss."""
    store = runtime.knowledge_store
    if store is None:
        return None
    try:
        results = store.get_cached_embeddings(text)
    except Exception as e:
        logger.warning("[embed] Cache lookup failed, treating as miss: %s", e)
        return None
    if not results:
        return None

    first = results[0]
    if isinstance(first, dict):
        return first.get("embedding")
    return getattr(first, "embedding", None)


def embed_with_result(runtime: RuntimeContext, text: str) -> EmbeddingResult:
    """Embed *text* for *runtime*, reporting how the vector was obtained."""
    kind = str(runtime.provider_kind)

    if not isinstance(text, str) or not text.strip():
        logger.debug("[embed] Invalid embedding input (type=%s, length=%s)",
                     type(text).__name__, len(text) if isinstance(text, str) else None)
        return EmbeddingResult(vector=[], source=SOURCE_INVALID, provider_kind=kind,
                               error="empty input")

    cached = retrieve_cached_embedding(runtime, text)
    if cached is not None:
        logger.debug("[embed] Cache hit for '%s'", _preview(text))
        return EmbeddingResult(vector=cached, source=SOURCE_CACHE, provider_kind=kind)

    provider = runtime.registry.get_provider(runtime.provider_kind)
    if provider is None:
        logger.warning("[embed] No embedding provider registered for '%s'; "
                       "returning empty vector", kind)
        return EmbeddingResult(vector=[], source=SOURCE_FALLBACK, provider_kind=kind,
                               error=f"no provider registered for '{kind}'")

    try:
        vector = provider.generate_embedding(text)
    except ProviderError as e:
        logger.warning("[embed] Provider '%s' failed, falling back to zero vector: %s",
                       kind, e)
        return EmbeddingResult(vector=provider.get_zero_vector(), source=SOURCE_FALLBACK,
                               provider_kind=kind, error=str(e))
    except Exception as e:
        # providers overriding generate_embedding may raise anything
        logger.warning("[embed] Provider '%s' raised %s, falling back to zero vector: %s",
                       kind, type(e).__name__, e)
        return EmbeddingResult(vector=provider.get_zero_vector(), source=SOURCE_FALLBACK,
                               provider_kind=kind, error=f"{type(e).__name__}: {e}")

    logger.debug("[embed] Computed %d-dim embedding via '%s'", len(vector), kind)
    return EmbeddingResult(vector=vector, source=SOURCE_PROVIDER, provider_kind=kind)


def embed(runtime: RuntimeContext, text: str) -> list[float]:
    """Embed *text* for *runtime*.  See the module docstring for fallbacks."""
    return embed_with_result(runtime, text).vector


def get_embedding_zero_vector(runtime: RuntimeContext) -> list[float]:
    """Zero vector of the active provider (384 dims when none is registered)."""
    provider = runtime.registry.get_provider(runtime.provider_kind)
    if provider is None:
        return [0.0] * DEFAULT_LOCAL_DIMENSIONS
    return provider.get_zero_vector()
