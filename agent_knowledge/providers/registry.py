"""
Embedding Provider Registry — maps a provider kind to one provider instance.

Constructed explicitly at startup and handed to components through the
runtime context; there is no process-wide singleton.
"""

from __future__ import annotations

import logging
import threading

from .base import EmbeddingProvider, ProviderKind, ProviderUnavailableError

logger = logging.getLogger(__name__)


class EmbeddingProviderRegistry:
    """Thread-safe ``kind -> provider`` map.

    Every read and write goes through one lock.  Registering a kind twice
    replaces the earlier provider (last write wins).
    """

    def __init__(self):
        self._providers: dict[ProviderKind | str, EmbeddingProvider] = {}
        self._lock = threading.RLock()

    def register_provider(self, kind: ProviderKind | str,
                          provider: EmbeddingProvider) -> None:
        """Register *provider* under *kind*.  No readiness check is made."""
        with self._lock:
            replaced = self._providers.get(kind)
            self._providers[kind] = provider
        if replaced is not None and replaced is not provider:
            logger.debug("[Registry] Replaced provider for '%s': %r -> %r",
                         kind, replaced, provider)
        else:
            logger.debug("[Registry] Registered provider for '%s': %r", kind, provider)

    def get_provider(self, kind: ProviderKind | str) -> EmbeddingProvider | None:
        """Return the provider for *kind*, or None.  Never raises."""
        try:
            with self._lock:
                return self._providers.get(kind)
        except TypeError:
            # unhashable kind
            return None

    def has_provider(self, kind: ProviderKind | str) -> bool:
        return self.get_provider(kind) is not None

    def require_provider(self, kind: ProviderKind | str) -> EmbeddingProvider:
        """Like :meth:`get_provider` but raises :class:`ProviderUnavailableError`."""
        provider = self.get_provider(kind)
        if provider is None:
            raise ProviderUnavailableError(f"No embedding provider registered for '{kind}'")
        return provider

    def unregister_provider(self, kind: ProviderKind | str) -> bool:
        """Remove the provider for *kind*.  Returns True if one was removed."""
        with self._lock:
            return self._providers.pop(kind, None) is not None

    def kinds(self) -> list[ProviderKind | str]:
        with self._lock:
            return list(self._providers.keys())

    def __contains__(self, kind) -> bool:
        return self.has_provider(kind)

    def __len__(self) -> int:
        with self._lock:
            return len(self._providers)
