"""
Knowledge Store — the surface ingestion and embedding rely on, plus an
in-memory implementation.

Stores keep ingested items and an exact-text embedding cache.  The cache is
read by ``embed``; writing it is up to whoever computed the vector (see
:meth:`KnowledgeStore.embed_item`).
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

from .embedding import SOURCE_PROVIDER, EmbeddingResult, embed_with_result
from .knowledge import KnowledgeItem

if TYPE_CHECKING:
    from .runtime import RuntimeContext

logger = logging.getLogger(__name__)


class KnowledgeStore(ABC):
    """Where knowledge items and cached embeddings live."""

    @abstractmethod
    def set(self, runtime: "RuntimeContext", item: KnowledgeItem) -> bool:
        """Persist *item*.  Returns False (or raises) on failure."""

    @abstractmethod
    def get(self, item_id: str) -> Optional[KnowledgeItem]:
        """Return the item with *item_id*, or None."""

    @abstractmethod
    def get_cached_embeddings(self, text: str) -> list[dict]:
        """Return ``[{"embedding": vector}, ...]`` for an exact *text* match."""

    @abstractmethod
    def cache_embedding(self, text: str, vector: list[float]) -> None:
        """Associate *vector* with *text* in the embedding cache."""

    def embed_item(self, runtime: "RuntimeContext",
                   item_id: str) -> Optional[EmbeddingResult]:
        """
        Compute (or fetch) the embedding of an item's text and cache it.

        Fallback vectors are returned but never cached.  Returns None when
        the item does not exist.
        """
        item = self.get(item_id)
        if item is None:
            return None
        result = embed_with_result(runtime, item.content.text)
        if result.source == SOURCE_PROVIDER:
            self.cache_embedding(item.content.text, result.vector)
        elif result.is_fallback:
            logger.warning("[KnowledgeStore] Degraded embedding for %s (%s)",
                           item_id, result.error)
        return result


class InMemoryKnowledgeStore(KnowledgeStore):
    """Dict-backed store.  Thread-safe; contents vanish with the process."""

    def __init__(self):
        self._items: dict[str, KnowledgeItem] = {}
        self._embeddings: dict[str, list[float]] = {}
        self._lock = threading.Lock()

    def set(self, runtime: "RuntimeContext", item: KnowledgeItem) -> bool:
        with self._lock:
            self._items[item.id] = item
        logger.debug("[InMemoryKnowledgeStore] Stored %s (%s)", item.id, item.content.source)
        return True

    def get(self, item_id: str) -> Optional[KnowledgeItem]:
        with self._lock:
            return self._items.get(item_id)

    def items(self) -> list[KnowledgeItem]:
        with self._lock:
            return list(self._items.values())

    def remove(self, item_id: str) -> bool:
        with self._lock:
            return self._items.pop(item_id, None) is not None

    def get_cached_embeddings(self, text: str) -> list[dict]:
        with self._lock:
            vector = self._embeddings.get(text)
        return [{"embedding": list(vector)}] if vector is not None else []

    def cache_embedding(self, text: str, vector: list[float]) -> None:
        with self._lock:
            self._embeddings[text] = list(vector)

    @property
    def size(self) -> int:
        """Number of items stored."""
        with self._lock:
            return len(self._items)
