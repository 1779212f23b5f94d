"""
Provider Plugins — loads third-party embedding providers.

Plugins can be registered via:
1. Config file (``provider_plugins`` list of dotted import paths)
2. Setuptools entry points (``agent_knowledge.providers`` group)

A plugin must be an :class:`EmbeddingProvider` subclass with a non-empty
``kind``; it is instantiated with ``from_config(config)``.
"""

from __future__ import annotations

import importlib
import importlib.metadata

from ..cli_display import log
from .base import EmbeddingProvider

ENTRY_POINT_GROUP = "agent_knowledge.providers"


class ProviderPluginLoader:
    """Discovers provider plugins and builds instances of them."""

    def __init__(self, config=None):
        self._config = config
        self._providers: list[EmbeddingProvider] = []

    def discover(self, config_plugins: list[str] | None = None) -> list[EmbeddingProvider]:
        """Load plugins from config paths and entry points."""
        # 1. Config-specified plugins (Python import paths)
        if config_plugins:
            for path in config_plugins:
                provider = self.load_from_path(path)
                if provider:
                    self._providers.append(provider)

        # 2. Entry points (setuptools-based discovery)
        for ep in importlib.metadata.entry_points(group=ENTRY_POINT_GROUP):
            try:
                obj = ep.load()
            except Exception as e:
                log.warning(f"[ProviderPlugins] Failed to load entry point "
                            f"'{ep.name}': {e}")
                continue
            provider = self._instantiate(obj, ep.name)
            if provider:
                self._providers.append(provider)

        log.info(f"[ProviderPlugins] {len(self._providers)} plugin provider(s) loaded")
        return list(self._providers)

    def load_from_path(self, dotted_path: str) -> EmbeddingProvider | None:
        """Load a provider class from a dotted Python import path.

        Example: ``my_package.embeddings.CohereProvider``
        """
        try:
            module_path, cls_name = dotted_path.rsplit(".", 1)
            module = importlib.import_module(module_path)
            obj = getattr(module, cls_name)
        except (ImportError, AttributeError, ValueError) as e:
            log.warning(f"[ProviderPlugins] Failed to load '{dotted_path}': {e}")
            return None
        return self._instantiate(obj, dotted_path)

    def _instantiate(self, obj, label: str) -> EmbeddingProvider | None:
        if not (isinstance(obj, type) and issubclass(obj, EmbeddingProvider)):
            log.warning(f"[ProviderPlugins] {label} is not an EmbeddingProvider subclass")
            return None
        if not obj.kind:
            log.warning(f"[ProviderPlugins] {label} does not declare a provider kind")
            return None
        try:
            instance = obj.from_config(self._config)
        except Exception as e:
            log.warning(f"[ProviderPlugins] Could not construct {label}: {e}")
            return None
        log.info(f"[ProviderPlugins] Loaded plugin: {label} "
                 f"(kind={instance.kind}, dims={instance.dimensions})")
        return instance

    @property
    def providers(self) -> list[EmbeddingProvider]:
        return list(self._providers)
