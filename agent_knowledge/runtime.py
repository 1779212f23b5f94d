"""
Runtime context — what an agent runtime exposes to embedding and ingestion.
"""

from __future__ import annotations

import os
import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Mapping, Optional

from .providers.base import ProviderKind
from .providers.registry import EmbeddingProviderRegistry

if TYPE_CHECKING:
    from .knowledge_store import KnowledgeStore


@dataclass
class RuntimeContext:
    """Read-only view of the agent runtime.

    Attributes
    ----------
    agent_id:
        Identity of the agent the work is done for.
    provider_kind:
        Kind of the embedding provider ``embed`` should use.
    registry:
        Provider registry consulted on cache misses.
    knowledge_store:
        Store that receives ingested items and owns the embedding cache.
    settings:
        Extra settings, looked up by :meth:`get_setting`.
    """

    agent_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    provider_kind: ProviderKind | str = ProviderKind.LOCAL
    registry: EmbeddingProviderRegistry = field(default_factory=EmbeddingProviderRegistry)
    knowledge_store: Optional["KnowledgeStore"] = None
    settings: Mapping[str, Any] = field(default_factory=dict)

    def get_setting(self, key: str, default: Any = None) -> Any:
        """Settings mapping first (case-insensitive), then ``$KEY``, then *default*."""
        for candidate in (key, key.lower()):
            if candidate in self.settings and self.settings[candidate] is not None:
                return self.settings[candidate]
        env_val = os.getenv(key.upper())
        if env_val is not None:
            return env_val
        return default

    def get_provider(self):
        """Provider registered for ``provider_kind``, or None."""
        return self.registry.get_provider(self.provider_kind)
