import math
import threading
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, List, Sequence


class ProviderKind(str, Enum):
    """Provider families known to the runtime.

    Being a ``str`` enum, ``"local"`` and ``ProviderKind.LOCAL`` address the
    same registry slot.  Plugin providers may use any other string.
    """

    LOCAL = "local"
    OPENAI = "openai"
    OLLAMA = "ollama"
    HUGGINGFACE = "huggingface"
    COHERE = "cohere"
    AZURE_OPENAI = "azure_openai"
    GAIANET = "gaianet"

    def __str__(self) -> str:
        return self.value


# ── Errors ──

class EmbeddingError(Exception):
    """Base class for embedding failures."""


class InvalidInputError(EmbeddingError, ValueError):
    """Raised when the text to embed is empty or not a string."""


class ProviderError(EmbeddingError):
    """Raised when a provider cannot produce an embedding."""


class ProviderInitError(ProviderError):
    """Raised when a provider backend could not be set up."""


class ProviderCallError(ProviderError):
    """Raised when the backend call fails or returns malformed data."""


class ProviderUnavailableError(ProviderError):
    """Raised when no provider is registered for the configured kind."""


# ── Provider interface ──

class EmbeddingProvider(ABC):
    """Base class for embedding backends.

    Subclasses set ``kind`` and implement ``_initialize`` and ``_embed``.
    ``initialize`` is idempotent and safe to retry after a failure;
    ``generate_embedding`` initializes lazily on first use.

    Example::

        class HashProvider(EmbeddingProvider):
            kind = "hash"

            def _initialize(self) -> None:
                pass

            def _embed(self, text: str) -> list[float]:
                return [float(hash(text) % 7)] * self.dimensions
    """

    kind: Any = ""

    def __init__(self, dimensions: int):
        dimensions = int(dimensions)
        if dimensions <= 0:
            raise ValueError(f"dimensions must be positive, got {dimensions}")
        self._dimensions = dimensions
        self._ready = False
        self._init_lock = threading.Lock()

    @classmethod
    def from_config(cls, config) -> "EmbeddingProvider":
        """Build the provider from a :class:`~agent_knowledge.config.Config`.

        The default calls the no-argument constructor.
        """
        return cls()

    @property
    def dimensions(self) -> int:
        return self._dimensions

    @property
    def is_ready(self) -> bool:
        return self._ready

    def initialize(self) -> None:
        """Set up the backend once.  Raises :class:`ProviderInitError`."""
        if self._ready:
            return
        with self._init_lock:
            if self._ready:
                return
            try:
                self._initialize()
            except ProviderError:
                raise
            except Exception as e:
                raise ProviderInitError(
                    f"{type(self).__name__} failed to initialize: {e}") from e
            self._ready = True

    def generate_embedding(self, text: str) -> List[float]:
        """Embed *text*, returning exactly ``dimensions`` floats."""
        if not isinstance(text, str) or not text.strip():
            raise InvalidInputError("embedding input must be non-empty text")

        self.initialize()
        try:
            raw = self._embed(text)
        except ProviderError:
            raise
        except Exception as e:
            raise ProviderCallError(
                f"{type(self).__name__} embedding call failed: {e}") from e
        return self._check_vector(raw)

    def get_zero_vector(self) -> List[float]:
        return [0.0] * self._dimensions

    def _check_vector(self, raw: Sequence[Any] | None) -> List[float]:
        if raw is None or isinstance(raw, (str, bytes)):
            raise ProviderCallError(
                f"{type(self).__name__} returned no embedding")
        try:
            vector = [float(v) for v in raw]
        except (TypeError, ValueError) as e:
            raise ProviderCallError(
                f"{type(self).__name__} returned a malformed embedding: {e}") from e
        if len(vector) != self._dimensions:
            raise ProviderCallError(
                f"{type(self).__name__} returned {len(vector)} dimensions, "
                f"expected {self._dimensions}")
        if not all(math.isfinite(v) for v in vector):
            raise ProviderCallError(
                f"{type(self).__name__} returned non-finite values")
        return vector

    # ── Subclass hooks ──

    @abstractmethod
    def _initialize(self) -> None:
        """Load models / open clients.  Raise on failure."""

    @abstractmethod
    def _embed(self, text: str) -> Sequence[float]:
        """Return the raw embedding for *text*."""

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(kind={str(self.kind)!r}, "
                f"dimensions={self._dimensions}, ready={self._ready})")
