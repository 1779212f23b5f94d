"""
agent_knowledge — embedding providers, cache-first embedding and folder
ingestion for agent runtimes.

Public API for library usage::

    from agent_knowledge import Config, create_runtime, embed, ingest_folder

    runtime = create_runtime(Config.load())
    ids = ingest_folder(runtime, "docs/")
    vector = embed(runtime, "How do I reset my password?")
"""

from .config import Config
from .embedding import EmbeddingResult, embed, embed_with_result, get_embedding_zero_vector
from .ingest import IngestionError, IngestionOptions, ingest_folder
from .knowledge import KnowledgeContent, KnowledgeItem
from .knowledge_store import InMemoryKnowledgeStore, KnowledgeStore
from .knowledge_store_sqlite import SQLiteKnowledgeStore
from .providers import EmbeddingProvider, EmbeddingProviderRegistry, ProviderKind
from .runtime import RuntimeContext
from .startup import build_registry, create_runtime

__version__ = "0.1.0"

__all__ = [
    "Config",
    "EmbeddingProvider",
    "EmbeddingProviderRegistry",
    "EmbeddingResult",
    "InMemoryKnowledgeStore",
    "IngestionError",
    "IngestionOptions",
    "KnowledgeContent",
    "KnowledgeItem",
    "KnowledgeStore",
    "ProviderKind",
    "RuntimeContext",
    "SQLiteKnowledgeStore",
    "build_registry",
    "create_runtime",
    "embed",
    "embed_with_result",
    "get_embedding_zero_vector",
    "ingest_folder",
]
