"""
Configuration — loads settings from .agent_knowledge.yaml, environment
variables, and built-in defaults (in that priority order: CLI args > env >
YAML > defaults).
"""

import os

import yaml


_DEFAULTS = {
    "embedding_provider": "local",
    "local_model": "BAAI/bge-small-en-v1.5",
    "local_dimensions": 384,
    "local_cache_dir": None,
    "openai_api_key": "",
    "openai_base_url": "https://api.openai.com/v1",
    "openai_model": "text-embedding-3-small",
    "openai_dimensions": 1536,
    "ollama_base_url": "http://localhost:11434",
    "ollama_model": "nomic-embed-text",
    "ollama_dimensions": 768,
    "huggingface_api_key": "",
    "huggingface_base_url": "https://api-inference.huggingface.co/pipeline/feature-extraction",
    "huggingface_model": "sentence-transformers/all-mpnet-base-v2",
    "huggingface_dimensions": 768,
    "cohere_api_key": "",
    "cohere_base_url": "https://api.cohere.ai/v1",
    "cohere_model": "embed-english-v3.0",
    "cohere_dimensions": 1024,
    "azure_openai_key": "",
    "azure_openai_endpoint": "",
    "azure_openai_deployment": "text-embedding-ada-002",
    "azure_openai_api_version": "2023-05-15",
    "azure_openai_dimensions": 1536,
    "gaianet_api_key": "",
    "gaianet_base_url": "",
    "gaianet_model": "nomic-embed",
    "gaianet_dimensions": 768,
    "request_timeout": 60.0,
    "ingest_extensions": [".md", ".txt", ".mdx"],
    "ingest_recursive": True,
    "knowledge_db": ".agent_knowledge/knowledge.db",
    "log_dir": ".agent_knowledge/logs",
    "provider_plugins": [],
    "agent_id": None,
}

# Config file search locations
_CONFIG_FILENAMES = [".agent_knowledge.yaml", ".agent_knowledge.yml"]


def _find_config_file(explicit_path: str | None = None) -> str | None:
    """Find the config file. Checks explicit path, CWD, then user home."""
    if explicit_path:
        if os.path.isfile(explicit_path):
            return explicit_path
        return None

    # Search CWD first, then home directory
    search_dirs = [os.getcwd(), os.path.expanduser("~")]
    for d in search_dirs:
        for name in _CONFIG_FILENAMES:
            path = os.path.join(d, name)
            if os.path.isfile(path):
                return path
    return None


def _load_yaml(path: str) -> dict:
    """Load YAML file, returns empty dict on failure."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError):
        return {}


def _as_list(value) -> list[str]:
    """Accept a YAML list or a comma-separated string."""
    if isinstance(value, str):
        return [v.strip() for v in value.split(",") if v.strip()]
    if isinstance(value, (list, tuple, set)):
        return [str(v).strip() for v in value if str(v).strip()]
    return []


def _as_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


class Config:
    """Application configuration.

    Settings are resolved in priority order:
    1. CLI arguments (handled by caller)
    2. Environment variables
    3. .agent_knowledge.yaml config file
    4. Built-in defaults
    """

    def __init__(self, yaml_data: dict | None = None):
        yd = yaml_data or {}

        def _section(name: str) -> dict:
            value = yd.get(name)
            return value if isinstance(value, dict) else {}

        local_section = _section("local")
        openai_section = _section("openai")
        ollama_section = _section("ollama")
        hf_section = _section("huggingface")
        cohere_section = _section("cohere")
        azure_section = _section("azure_openai")
        gaianet_section = _section("gaianet")
        ingest_section = _section("ingest")

        # Helper: env var > yaml > default
        def _get(env_key: str | None, yaml_val, default, cast=str):
            env_val = os.getenv(env_key) if env_key else None
            if env_val is not None:
                return cast(env_val)
            if yaml_val is not None:
                return cast(yaml_val)
            return default

        self.EMBEDDING_PROVIDER = _get(
            "EMBEDDING_PROVIDER", yd.get("embedding_provider"),
            _DEFAULTS["embedding_provider"]).strip().lower()

        # Local (on-device) model
        self.LOCAL_EMBEDDING_MODEL = _get(
            "LOCAL_EMBEDDING_MODEL", local_section.get("model"), _DEFAULTS["local_model"])
        self.LOCAL_EMBEDDING_DIMENSIONS = _get(
            "LOCAL_EMBEDDING_DIMENSIONS", local_section.get("dimensions"),
            _DEFAULTS["local_dimensions"], cast=int)
        self.LOCAL_MODEL_CACHE_DIR = _get(
            "LOCAL_MODEL_CACHE_DIR", local_section.get("cache_dir"),
            _DEFAULTS["local_cache_dir"])

        # OpenAI-compatible remote API
        self.OPENAI_API_KEY = _get(
            "OPENAI_API_KEY", openai_section.get("api_key"), _DEFAULTS["openai_api_key"])
        self.OPENAI_BASE_URL = _get(
            "OPENAI_BASE_URL", openai_section.get("base_url"), _DEFAULTS["openai_base_url"])
        self.OPENAI_EMBEDDING_MODEL = _get(
            "OPENAI_EMBEDDING_MODEL", openai_section.get("model"), _DEFAULTS["openai_model"])
        self.OPENAI_EMBEDDING_DIMENSIONS = _get(
            "OPENAI_EMBEDDING_DIMENSIONS", openai_section.get("dimensions"),
            _DEFAULTS["openai_dimensions"], cast=int)

        # Ollama
        self.OLLAMA_BASE_URL = _get(
            "OLLAMA_BASE_URL", ollama_section.get("base_url"), _DEFAULTS["ollama_base_url"])
        self.OLLAMA_EMBEDDING_MODEL = _get(
            "OLLAMA_EMBEDDING_MODEL", ollama_section.get("model"), _DEFAULTS["ollama_model"])
        self.OLLAMA_EMBEDDING_DIMENSIONS = _get(
            "OLLAMA_EMBEDDING_DIMENSIONS", ollama_section.get("dimensions"),
            _DEFAULTS["ollama_dimensions"], cast=int)

        # HuggingFace Inference API
        self.HUGGINGFACE_API_KEY = _get(
            "HUGGINGFACE_API_KEY", hf_section.get("api_key"), _DEFAULTS["huggingface_api_key"])
        self.HUGGINGFACE_BASE_URL = _get(
            "HUGGINGFACE_BASE_URL", hf_section.get("base_url"),
            _DEFAULTS["huggingface_base_url"])
        self.HUGGINGFACE_EMBEDDING_MODEL = _get(
            "HUGGINGFACE_EMBEDDING_MODEL", hf_section.get("model"),
            _DEFAULTS["huggingface_model"])
        self.HUGGINGFACE_EMBEDDING_DIMENSIONS = _get(
            "HUGGINGFACE_EMBEDDING_DIMENSIONS", hf_section.get("dimensions"),
            _DEFAULTS["huggingface_dimensions"], cast=int)

        # Cohere
        self.COHERE_API_KEY = _get(
            "COHERE_API_KEY", cohere_section.get("api_key"), _DEFAULTS["cohere_api_key"])
        self.COHERE_BASE_URL = _get(
            "COHERE_BASE_URL", cohere_section.get("base_url"), _DEFAULTS["cohere_base_url"])
        self.COHERE_EMBEDDING_MODEL = _get(
            "COHERE_EMBEDDING_MODEL", cohere_section.get("model"), _DEFAULTS["cohere_model"])
        self.COHERE_EMBEDDING_DIMENSIONS = _get(
            "COHERE_EMBEDDING_DIMENSIONS", cohere_section.get("dimensions"),
            _DEFAULTS["cohere_dimensions"], cast=int)

        # Azure OpenAI
        self.AZURE_OPENAI_KEY = _get(
            "AZURE_OPENAI_KEY", azure_section.get("api_key"), _DEFAULTS["azure_openai_key"])
        self.AZURE_OPENAI_ENDPOINT = _get(
            "AZURE_OPENAI_ENDPOINT", azure_section.get("endpoint"),
            _DEFAULTS["azure_openai_endpoint"])
        self.AZURE_OPENAI_DEPLOYMENT = _get(
            "AZURE_OPENAI_DEPLOYMENT", azure_section.get("deployment"),
            _DEFAULTS["azure_openai_deployment"])
        self.AZURE_OPENAI_API_VERSION = _get(
            "AZURE_OPENAI_API_VERSION", azure_section.get("api_version"),
            _DEFAULTS["azure_openai_api_version"])
        self.AZURE_OPENAI_EMBEDDING_DIMENSIONS = _get(
            "AZURE_OPENAI_EMBEDDING_DIMENSIONS", azure_section.get("dimensions"),
            _DEFAULTS["azure_openai_dimensions"], cast=int)

        # GaiaNet node
        self.GAIANET_API_KEY = _get(
            "GAIANET_API_KEY", gaianet_section.get("api_key"), _DEFAULTS["gaianet_api_key"])
        self.GAIANET_BASE_URL = _get(
            "GAIANET_BASE_URL", gaianet_section.get("base_url"), _DEFAULTS["gaianet_base_url"])
        self.GAIANET_EMBEDDING_MODEL = _get(
            "GAIANET_EMBEDDING_MODEL", gaianet_section.get("model"),
            _DEFAULTS["gaianet_model"])
        self.GAIANET_EMBEDDING_DIMENSIONS = _get(
            "GAIANET_EMBEDDING_DIMENSIONS", gaianet_section.get("dimensions"),
            _DEFAULTS["gaianet_dimensions"], cast=int)

        self.REQUEST_TIMEOUT = _get(
            "EMBEDDING_REQUEST_TIMEOUT", yd.get("request_timeout"),
            _DEFAULTS["request_timeout"], cast=float)

        # Ingestion defaults
        self.INGEST_EXTENSIONS: list[str] = _get(
            "INGEST_EXTENSIONS", ingest_section.get("extensions"),
            list(_DEFAULTS["ingest_extensions"]), cast=_as_list)
        self.INGEST_RECURSIVE = _get(
            "INGEST_RECURSIVE", ingest_section.get("recursive"),
            _DEFAULTS["ingest_recursive"], cast=_as_bool)

        self.KNOWLEDGE_DB = _get("KNOWLEDGE_DB", yd.get("knowledge_db"),
                                 _DEFAULTS["knowledge_db"])
        self.LOG_DIR = _get("AGENT_KNOWLEDGE_LOG_DIR", yd.get("log_dir"),
                            _DEFAULTS["log_dir"])
        self.AGENT_ID = _get("AGENT_ID", yd.get("agent_id"), _DEFAULTS["agent_id"])

        # Plugins
        self.PROVIDER_PLUGINS: list[str] = yd.get("provider_plugins",
                                                  _DEFAULTS["provider_plugins"])
        if not isinstance(self.PROVIDER_PLUGINS, list):
            self.PROVIDER_PLUGINS = []

    def to_settings(self) -> dict:
        """Return all settings as a lower-cased dict (runtime settings lookup)."""
        return {k.lower(): v for k, v in vars(self).items() if k.isupper()}

    @classmethod
    def load(cls, config_path: str | None = None) -> "Config":
        """Load config from YAML file (if found) + env vars + defaults."""
        path = _find_config_file(config_path)
        yaml_data = _load_yaml(path) if path else {}
        return cls(yaml_data)
