"""
Knowledge items — the unit of ingested content handed to a knowledge store.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class KnowledgeContent:
    """Text plus where it came from."""

    text: str
    source: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class KnowledgeItem:
    """A piece of knowledge with a globally unique id."""

    id: str
    content: KnowledgeContent

    @classmethod
    def create(cls, text: str, source: Optional[str] = None,
               metadata: Optional[dict[str, Any]] = None) -> "KnowledgeItem":
        """Build an item with a freshly minted uuid4 id."""
        return cls(
            id=str(uuid.uuid4()),
            content=KnowledgeContent(text=text, source=source,
                                     metadata=dict(metadata or {})),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "content": {
                "text": self.content.text,
                "source": self.content.source,
                "metadata": dict(self.content.metadata),
            },
        }

    @classmethod
    def from_dict(cls, data: dict) -> "KnowledgeItem":
        content = data.get("content", {})
        return cls(
            id=data["id"],
            content=KnowledgeContent(
                text=content.get("text", ""),
                source=content.get("source"),
                metadata=dict(content.get("metadata") or {}),
            ),
        )
