"""
Startup — builds the provider registry and the runtime context from
configuration.

Every built-in provider is constructed and registered explicitly; providers
are cheap to construct because models and HTTP sessions are only set up on
first use.  Third-party providers come in through
:class:`~agent_knowledge.providers.plugins.ProviderPluginLoader`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from .config import Config
from .knowledge_store import InMemoryKnowledgeStore, KnowledgeStore
from .providers.hosted import (
    AzureOpenAIProvider,
    CohereProvider,
    GaiaNetProvider,
    HuggingFaceProvider,
)
from .providers.local import LocalProvider
from .providers.ollama import OllamaProvider
from .providers.plugins import ProviderPluginLoader
from .providers.registry import EmbeddingProviderRegistry
from .providers.remote import RemoteProvider
from .runtime import RuntimeContext

logger = logging.getLogger(__name__)

# Hosted providers and the settings each one needs before it is registered
_HOSTED_PROVIDERS = (
    (RemoteProvider, ("OPENAI_API_KEY",)),
    (HuggingFaceProvider, ("HUGGINGFACE_API_KEY",)),
    (CohereProvider, ("COHERE_API_KEY",)),
    (AzureOpenAIProvider, ("AZURE_OPENAI_KEY", "AZURE_OPENAI_ENDPOINT")),
    (GaiaNetProvider, ("GAIANET_BASE_URL",)),
)


@dataclass
class StartupReport:
    """What :func:`build_registry` registered and what it skipped."""

    registered: list[str] = field(default_factory=list)
    skipped: dict[str, str] = field(default_factory=dict)
    plugins: list[str] = field(default_factory=list)


def build_registry(config: Config,
                   registry: Optional[EmbeddingProviderRegistry] = None,
                   report: Optional[StartupReport] = None) -> EmbeddingProviderRegistry:
    """
    Register the built-in providers and any configured plugins.

    Parameters
    ----------
    config:
        Loaded configuration.
    registry:
        Registry to fill; a fresh one is created when omitted.
    report:
        Optional report that records what happened.

    Returns
    -------
    EmbeddingProviderRegistry
    """
    registry = registry if registry is not None else EmbeddingProviderRegistry()
    report = report if report is not None else StartupReport()

    for provider_cls in (LocalProvider, OllamaProvider):
        provider = provider_cls.from_config(config)
        registry.register_provider(provider.kind, provider)
        report.registered.append(str(provider.kind))

    for provider_cls, required in _HOSTED_PROVIDERS:
        missing = [name for name in required if not getattr(config, name)]
        if missing:
            reason = f"{', '.join(missing)} not set"
            report.skipped[str(provider_cls.kind)] = reason
            logger.debug("[startup] %s skipped: %s", provider_cls.__name__, reason)
            continue
        provider = provider_cls.from_config(config)
        registry.register_provider(provider.kind, provider)
        report.registered.append(str(provider.kind))

    loader = ProviderPluginLoader(config)
    for plugin in loader.discover(config.PROVIDER_PLUGINS):
        registry.register_provider(plugin.kind, plugin)
        report.plugins.append(str(plugin.kind))

    logger.info("[startup] Embedding providers: %s", ", ".join(map(str, registry.kinds())))
    return registry


def create_runtime(config: Config,
                   store: Optional[KnowledgeStore] = None,
                   registry: Optional[EmbeddingProviderRegistry] = None,
                   agent_id: Optional[str] = None,
                   report: Optional[StartupReport] = None) -> RuntimeContext:
    """Wire a :class:`RuntimeContext` for *config*.

    When *registry* is omitted one is built, filling *report* if given.
    """
    if registry is None:
        registry = build_registry(config, report=report)
    if store is None:
        store = InMemoryKnowledgeStore()

    kind = config.EMBEDDING_PROVIDER
    if not registry.has_provider(kind):
        reason = report.skipped.get(kind) if report is not None else None
        logger.warning("[startup] Configured embedding provider '%s' is not registered%s; "
                       "embeddings will fall back to empty vectors",
                       kind, f" ({reason})" if reason else "")

    runtime_kwargs = {
        "provider_kind": kind,
        "registry": registry,
        "knowledge_store": store,
        "settings": config.to_settings(),
    }
    agent_id = agent_id or config.AGENT_ID
    if agent_id:
        runtime_kwargs["agent_id"] = agent_id
    return RuntimeContext(**runtime_kwargs)
