"""
Knowledge ingestion — walks a directory tree and hands every matching text
file to the runtime's knowledge store as a new :class:`KnowledgeItem`.

Each call is all-or-nothing: the first listing, read or store failure raises
:class:`IngestionError` and nothing after it is attempted.  Items already
handed to the store stay there.  Re-ingesting a folder mints new ids every
time; duplicate detection is left to the store (``content_hash`` metadata).
"""

from __future__ import annotations

import hashlib
import logging
import os
from dataclasses import dataclass, field
from typing import Iterable, Optional

from .knowledge import KnowledgeItem
from .runtime import RuntimeContext

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = (".md", ".txt", ".mdx")


class IngestionError(Exception):
    """Raised when a folder could not be ingested completely."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


def _normalize_extensions(extensions: Optional[Iterable[str]]) -> frozenset[str]:
    if extensions is None:
        extensions = DEFAULT_EXTENSIONS
    normalized = set()
    for ext in extensions:
        ext = str(ext).strip().lower()
        if not ext:
            continue
        if not ext.startswith("."):
            ext = "." + ext
        normalized.add(ext)
    return frozenset(normalized)


@dataclass(frozen=True)
class IngestionOptions:
    """Which files to ingest.

    ``extensions`` are matched case-insensitively; ``"md"`` means ``".md"``.
    ``None`` selects the defaults.
    """

    extensions: frozenset[str] = field(default_factory=lambda: frozenset(DEFAULT_EXTENSIONS))
    recursive: bool = True

    def __post_init__(self):
        if isinstance(self.extensions, str):
            raise TypeError("extensions must be a collection of suffixes, not a string")
        object.__setattr__(self, "extensions", _normalize_extensions(self.extensions))

    @classmethod
    def from_config(cls, config) -> "IngestionOptions":
        return cls(extensions=config.INGEST_EXTENSIONS, recursive=config.INGEST_RECURSIVE)

    def accepts(self, filename: str) -> bool:
        return os.path.splitext(filename)[1].lower() in self.extensions


def ingest_folder(runtime: RuntimeContext, folder_path: str,
                  options: Optional[IngestionOptions] = None) -> list[str]:
    """
    Ingest every matching file under *folder_path* into the knowledge store.

    Parameters
    ----------
    runtime:
        Runtime whose ``knowledge_store`` receives the items.
    folder_path:
        Directory to walk.
    options:
        Extension filter and recursion flag; defaults to
        ``.md``/``.txt``/``.mdx``, recursive.

    Returns
    -------
    list[str]
        Ids of the new items, in depth-first listing order.

    Raises
    ------
    IngestionError
        If a directory cannot be listed, a file cannot be read, or the store
        rejects an item.
    """
    if options is None:
        options = IngestionOptions()
    if runtime.knowledge_store is None:
        raise IngestionError("runtime has no knowledge store", path=folder_path)

    root = os.path.abspath(folder_path)
    ids = _ingest_dir(runtime, folder_path, root, options,
                      ancestors=frozenset({os.path.realpath(folder_path)}))
    logger.info("[ingest] Ingested %d file(s) from %s", len(ids), folder_path)
    return ids


def _ingest_dir(runtime: RuntimeContext, dir_path: str, root: str,
                options: IngestionOptions, ancestors: frozenset[str]) -> list[str]:
    """Depth-first walk.  *ancestors* holds the real paths of *dir_path* and its parents."""
    try:
        entries = sorted(os.listdir(dir_path))
    except OSError as e:
        raise IngestionError(f"Cannot list directory {dir_path}: {e}", path=dir_path) from e

    ids: list[str] = []
    for name in entries:
        path = os.path.join(dir_path, name)

        if os.path.isdir(path):
            if not options.recursive:
                continue
            real = os.path.realpath(path)
            if real in ancestors:
                logger.info("[ingest] Skipping %s: links back to %s", path, real)
                continue
            ids.extend(_ingest_dir(runtime, path, root, options, ancestors | {real}))
            continue

        if not os.path.isfile(path):
            continue
        if not options.accepts(name):
            continue

        ids.append(_ingest_file(runtime, path, root))
    return ids


def _ingest_file(runtime: RuntimeContext, path: str, root: str) -> str:
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as fh:
            text = fh.read()
    except OSError as e:
        raise IngestionError(f"Cannot read {path}: {e}", path=path) from e

    relative = os.path.relpath(os.path.abspath(path), root).replace(os.sep, "/")
    item = KnowledgeItem.create(
        text=text,
        source=path,
        metadata={
            "extension": os.path.splitext(path)[1].lower(),
            "relative_path": relative,
            "content_hash": hashlib.sha256(text.encode("utf-8")).hexdigest(),
            "agent_id": runtime.agent_id,
        },
    )

    try:
        stored = runtime.knowledge_store.set(runtime, item)
    except Exception as e:
        raise IngestionError(f"Knowledge store rejected {path}: {e}", path=path) from e
    if stored is False:
        raise IngestionError(f"Knowledge store rejected {path}", path=path)

    logger.debug("[ingest] %s -> %s", relative, item.id)
    return item.id
