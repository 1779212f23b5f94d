from .base import (
    EmbeddingError,
    EmbeddingProvider,
    InvalidInputError,
    ProviderCallError,
    ProviderError,
    ProviderInitError,
    ProviderKind,
    ProviderUnavailableError,
)
from .hosted import AzureOpenAIProvider, CohereProvider, GaiaNetProvider, HuggingFaceProvider
from .local import LocalProvider
from .ollama import OllamaProvider
from .plugins import ProviderPluginLoader
from .registry import EmbeddingProviderRegistry
from .remote import RemoteProvider
