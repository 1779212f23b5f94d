"""
Persistent Knowledge Store — SQLite-backed items and embedding cache.

Embeddings are cached by ``sha256(text)``; the stored text is compared as
well so a lookup only ever hits on an exact match.
"""

import hashlib
import json
import logging
import os
import sqlite3
import threading
import time
from typing import TYPE_CHECKING, Optional

from .knowledge import KnowledgeItem
from .knowledge_store import KnowledgeStore

if TYPE_CHECKING:
    from .runtime import RuntimeContext

logger = logging.getLogger(__name__)


_CREATE_ITEMS = """
CREATE TABLE IF NOT EXISTS knowledge (
    id          TEXT PRIMARY KEY,
    agent_id    TEXT,
    text        TEXT NOT NULL,
    source      TEXT,
    metadata    TEXT NOT NULL DEFAULT '{}',
    created_at  REAL NOT NULL
)
"""

_CREATE_CACHE = """
CREATE TABLE IF NOT EXISTS embedding_cache (
    text_hash   TEXT PRIMARY KEY,
    text        TEXT NOT NULL,
    vector      TEXT NOT NULL,
    created_at  REAL NOT NULL
)
"""

_INSERT_ITEM = ("INSERT OR REPLACE INTO knowledge "
                "(id, agent_id, text, source, metadata, created_at) VALUES (?, ?, ?, ?, ?, ?)")
_SELECT_ITEM = "SELECT id, text, source, metadata FROM knowledge WHERE id = ?"
_SELECT_ALL = "SELECT id, text, source, metadata FROM knowledge ORDER BY rowid"
_DELETE_ITEM = "DELETE FROM knowledge WHERE id = ?"
_COUNT_ITEMS = "SELECT COUNT(*) FROM knowledge"
_INSERT_CACHE = ("INSERT OR REPLACE INTO embedding_cache (text_hash, text, vector, created_at) "
                 "VALUES (?, ?, ?, ?)")
_SELECT_CACHE = "SELECT text, vector FROM embedding_cache WHERE text_hash = ?"


def _text_hash(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8", errors="replace")).hexdigest()


class SQLiteKnowledgeStore(KnowledgeStore):
    """Knowledge store persisted to a single SQLite file."""

    def __init__(self, db_path: str = ".agent_knowledge/knowledge.db"):
        self._db_path = db_path
        if db_path != ":memory:":
            os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._lock = threading.Lock()
        self._conn.execute(_CREATE_ITEMS)
        self._conn.execute(_CREATE_CACHE)
        self._conn.commit()
        logger.debug("[SQLiteKnowledgeStore] Opened %s", db_path)

    def set(self, runtime: "RuntimeContext", item: KnowledgeItem) -> bool:
        """Insert or replace *item*.  Raises ``sqlite3.Error`` on failure."""
        content = item.content
        agent_id = getattr(runtime, "agent_id", None)
        with self._lock:
            self._conn.execute(_INSERT_ITEM, (
                item.id, agent_id, content.text, content.source,
                json.dumps(content.metadata), time.time(),
            ))
            self._conn.commit()
        return True

    def get(self, item_id: str) -> Optional[KnowledgeItem]:
        with self._lock:
            row = self._conn.execute(_SELECT_ITEM, (item_id,)).fetchone()
        return self._row_to_item(row) if row else None

    def items(self) -> list[KnowledgeItem]:
        with self._lock:
            rows = self._conn.execute(_SELECT_ALL).fetchall()
        return [self._row_to_item(row) for row in rows]

    def remove(self, item_id: str) -> bool:
        with self._lock:
            cursor = self._conn.execute(_DELETE_ITEM, (item_id,))
            self._conn.commit()
        return cursor.rowcount > 0

    def get_cached_embeddings(self, text: str) -> list[dict]:
        """Exact-match lookup.  Read errors count as a miss."""
        try:
            with self._lock:
                row = self._conn.execute(_SELECT_CACHE, (_text_hash(text),)).fetchone()
            if not row or row[0] != text:
                return []
            return [{"embedding": json.loads(row[1])}]
        except (sqlite3.Error, json.JSONDecodeError) as e:
            logger.warning("[SQLiteKnowledgeStore] Cache read error: %s", e)
            return []

    def cache_embedding(self, text: str, vector: list[float]) -> None:
        try:
            with self._lock:
                self._conn.execute(_INSERT_CACHE, (
                    _text_hash(text), text, json.dumps(list(vector)), time.time(),
                ))
                self._conn.commit()
        except sqlite3.Error as e:
            logger.warning("[SQLiteKnowledgeStore] Cache write error: %s", e)

    @property
    def size(self) -> int:
        """Number of items stored."""
        with self._lock:
            return self._conn.execute(_COUNT_ITEMS).fetchone()[0]

    def close(self):
        """Close the SQLite connection."""
        try:
            self._conn.close()
        except sqlite3.Error:
            pass

    @staticmethod
    def _row_to_item(row) -> KnowledgeItem:
        item_id, text, source, metadata = row
        try:
            meta = json.loads(metadata) if metadata else {}
        except json.JSONDecodeError:
            meta = {}
        return KnowledgeItem.from_dict({
            "id": item_id,
            "content": {"text": text, "source": source, "metadata": meta},
        })
