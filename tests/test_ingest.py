"""
Unit tests for agent_knowledge.ingest — folder ingestion into a store.
"""

from __future__ import annotations

import logging
import os
import uuid
from unittest.mock import MagicMock

import pytest

from agent_knowledge.config import Config
from agent_knowledge.ingest import IngestionError, IngestionOptions, ingest_folder
from agent_knowledge.knowledge import KnowledgeItem
from agent_knowledge.knowledge_store import InMemoryKnowledgeStore
from agent_knowledge.runtime import RuntimeContext


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class RecordingStore(InMemoryKnowledgeStore):
    def __init__(self):
        super().__init__()
        self.calls = []

    def set(self, runtime, item):
        self.calls.append((runtime, item))
        return super().set(runtime, item)


def _runtime(store=None):
    return RuntimeContext(agent_id="agent-42",
                          knowledge_store=store if store is not None else RecordingStore())


def _docs_tree(root):
    """root/{test1.md, test2.txt, ignored.json, subdir/test3.md}"""
    (root / "subdir").mkdir()
    (root / "test1.md").write_text("# Test Document 1\nThis is a test", encoding="utf-8")
    (root / "test2.txt").write_text("Test Document 2", encoding="utf-8")
    (root / "subdir" / "test3.md").write_text("## Nested Document\nThis is nested",
                                              encoding="utf-8")
    (root / "ignored.json").write_text('{"test": "This should be ignored"}', encoding="utf-8")
    return root


def _sources(store):
    return [item.content.source for _, item in store.calls]


# ---------------------------------------------------------------------------
# Tests: IngestionOptions
# ---------------------------------------------------------------------------

class TestIngestionOptions:
    def test_defaults(self):
        opts = IngestionOptions()
        assert opts.extensions == frozenset({".md", ".txt", ".mdx"})
        assert opts.recursive is True

    def test_extensions_normalized(self):
        opts = IngestionOptions(extensions=["MD", ".Txt", " .rst ", ""])
        assert opts.extensions == frozenset({".md", ".txt", ".rst"})

    def test_none_extensions_means_defaults(self):
        opts = IngestionOptions(extensions=None)
        assert opts.extensions == frozenset({".md", ".txt", ".mdx"})
        assert opts.accepts("notes.TXT")

    def test_string_extensions_rejected(self):
        with pytest.raises(TypeError):
            IngestionOptions(extensions=".md")

    def test_accepts_is_case_insensitive(self):
        opts = IngestionOptions(extensions=[".md"])
        assert opts.accepts("README.MD")
        assert not opts.accepts("notes.txt")
        assert not opts.accepts("Makefile")

    def test_from_config(self, monkeypatch):
        monkeypatch.setenv("INGEST_EXTENSIONS", ".rst, md")
        monkeypatch.setenv("INGEST_RECURSIVE", "false")
        opts = IngestionOptions.from_config(Config({}))
        assert opts.extensions == frozenset({".rst", ".md"})
        assert opts.recursive is False


# ---------------------------------------------------------------------------
# Tests: ingest_folder
# ---------------------------------------------------------------------------

class TestIngestFolder:
    def test_ingests_markdown_and_text_recursively(self, tmp_path):
        _docs_tree(tmp_path)
        store = RecordingStore()
        runtime = _runtime(store)

        ids = ingest_folder(runtime, str(tmp_path))

        assert len(ids) == 3
        assert len(store.calls) == 3
        by_name = {os.path.basename(item.content.source): item for _, item in store.calls}
        assert "# Test Document 1" in by_name["test1.md"].content.text
        assert "## Nested Document" in by_name["test3.md"].content.text
        nested = by_name["test3.md"].content.source
        assert nested.replace(os.sep, "/").endswith("subdir/test3.md")
        assert "ignored.json" not in by_name

    def test_extension_filter(self, tmp_path):
        (tmp_path / "a.md").write_text("alpha", encoding="utf-8")
        (tmp_path / "b.txt").write_text("beta", encoding="utf-8")
        (tmp_path / "c.json").write_text("{}", encoding="utf-8")
        store = RecordingStore()

        ids = ingest_folder(_runtime(store), str(tmp_path), IngestionOptions(extensions=[".md"]))

        assert len(ids) == 1
        item = store.calls[0][1]
        assert item.content.source.endswith("a.md")
        assert "alpha" in item.content.text

    def test_non_recursive_skips_directories(self, tmp_path):
        (tmp_path / "sub").mkdir()
        (tmp_path / "x.md").write_text("x", encoding="utf-8")
        (tmp_path / "sub" / "y.md").write_text("y", encoding="utf-8")
        store = RecordingStore()

        ids = ingest_folder(_runtime(store), str(tmp_path), IngestionOptions(recursive=False))

        assert len(ids) == 1
        assert _sources(store)[0].endswith("x.md")

    def test_recursive_by_default(self, tmp_path):
        (tmp_path / "sub").mkdir()
        (tmp_path / "x.md").write_text("x", encoding="utf-8")
        (tmp_path / "sub" / "y.md").write_text("y", encoding="utf-8")
        store = RecordingStore()

        ids = ingest_folder(_runtime(store), str(tmp_path))

        assert len(ids) == 2
        assert any(s.replace(os.sep, "/").endswith("sub/y.md") for s in _sources(store))

    def test_uppercase_extension_matches(self, tmp_path):
        (tmp_path / "README.MD").write_text("hi", encoding="utf-8")
        assert len(ingest_folder(_runtime(), str(tmp_path))) == 1

    def test_depth_first_listing_order(self, tmp_path):
        (tmp_path / "a").mkdir()
        (tmp_path / "a" / "inner.md").write_text("1", encoding="utf-8")
        (tmp_path / "b.md").write_text("2", encoding="utf-8")
        (tmp_path / "c").mkdir()
        (tmp_path / "c" / "deep.md").write_text("3", encoding="utf-8")
        store = RecordingStore()

        ids = ingest_folder(_runtime(store), str(tmp_path))

        assert [store.get(i).content.text for i in ids] == ["1", "2", "3"]
        assert ids == [item.id for _, item in store.calls]

    def test_ids_are_fresh_uuids_each_run(self, tmp_path):
        (tmp_path / "a.md").write_text("same content", encoding="utf-8")
        store = RecordingStore()
        runtime = _runtime(store)

        first = ingest_folder(runtime, str(tmp_path))
        second = ingest_folder(runtime, str(tmp_path))

        assert first != second
        for item_id in first + second:
            uuid.UUID(item_id)
        assert store.size == 2

    def test_item_metadata(self, tmp_path):
        (tmp_path / "sub").mkdir()
        (tmp_path / "sub" / "Note.MDX").write_text("body", encoding="utf-8")
        store = RecordingStore()

        ingest_folder(_runtime(store), str(tmp_path))

        runtime, item = store.calls[0]
        meta = item.content.metadata
        assert isinstance(item, KnowledgeItem)
        assert runtime.agent_id == "agent-42"
        assert meta["extension"] == ".mdx"
        assert meta["relative_path"] == "sub/Note.MDX"
        assert meta["agent_id"] == "agent-42"
        assert len(meta["content_hash"]) == 64

    def test_identical_content_same_hash(self, tmp_path):
        (tmp_path / "a.md").write_text("dup", encoding="utf-8")
        (tmp_path / "b.md").write_text("dup", encoding="utf-8")
        store = RecordingStore()

        ingest_folder(_runtime(store), str(tmp_path))

        hashes = {item.content.metadata["content_hash"] for _, item in store.calls}
        assert len(hashes) == 1
        assert store.size == 2

    def test_undecodable_bytes_replaced(self, tmp_path):
        (tmp_path / "bin.txt").write_bytes(b"ok \xff\xfe end")
        store = RecordingStore()

        ingest_folder(_runtime(store), str(tmp_path))

        text = store.calls[0][1].content.text
        assert text.startswith("ok ")
        assert text.endswith(" end")

    def test_empty_folder(self, tmp_path):
        assert ingest_folder(_runtime(), str(tmp_path)) == []

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
    def test_symlink_back_to_ancestor_is_skipped(self, tmp_path, caplog):
        (tmp_path / "real").mkdir()
        (tmp_path / "real" / "a.md").write_text("a", encoding="utf-8")
        try:
            os.symlink(tmp_path, tmp_path / "real" / "loop", target_is_directory=True)
        except OSError:
            pytest.skip("cannot create symlink")

        with caplog.at_level(logging.INFO, logger="agent_knowledge"):
            ids = ingest_folder(_runtime(), str(tmp_path))

        assert len(ids) == 1
        assert "links back to" in caplog.text

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
    def test_symlinked_directory_is_followed(self, tmp_path):
        outside = tmp_path / "outside"
        outside.mkdir()
        (outside / "shared.md").write_text("shared", encoding="utf-8")
        docs = tmp_path / "docs"
        docs.mkdir()
        (docs / "own.md").write_text("own", encoding="utf-8")
        try:
            os.symlink(outside, docs / "linked", target_is_directory=True)
        except OSError:
            pytest.skip("cannot create symlink")
        store = RecordingStore()

        ids = ingest_folder(_runtime(store), str(docs))

        assert len(ids) == 2
        rel = sorted(item.content.metadata["relative_path"] for _, item in store.calls)
        assert rel == ["linked/shared.md", "own.md"]

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
    def test_symlinked_directory_not_followed_when_not_recursive(self, tmp_path):
        outside = tmp_path / "outside"
        outside.mkdir()
        (outside / "shared.md").write_text("shared", encoding="utf-8")
        docs = tmp_path / "docs"
        docs.mkdir()
        try:
            os.symlink(outside, docs / "linked", target_is_directory=True)
        except OSError:
            pytest.skip("cannot create symlink")

        assert ingest_folder(_runtime(), str(docs), IngestionOptions(recursive=False)) == []


# ---------------------------------------------------------------------------
# Tests: failures
# ---------------------------------------------------------------------------

class TestIngestFailures:
    def test_missing_folder(self, tmp_path):
        with pytest.raises(IngestionError) as exc_info:
            ingest_folder(_runtime(), str(tmp_path / "nope"))
        assert exc_info.value.path == str(tmp_path / "nope")
        assert isinstance(exc_info.value.__cause__, OSError)

    def test_store_exception_aborts(self, tmp_path):
        (tmp_path / "a.md").write_text("a", encoding="utf-8")
        (tmp_path / "b.md").write_text("b", encoding="utf-8")
        store = MagicMock()
        store.set.side_effect = RuntimeError("disk full")

        with pytest.raises(IngestionError, match="disk full"):
            ingest_folder(_runtime(store), str(tmp_path))
        assert store.set.call_count == 1

    def test_store_returning_false_aborts(self, tmp_path):
        (tmp_path / "a.md").write_text("a", encoding="utf-8")
        store = MagicMock()
        store.set.return_value = False

        with pytest.raises(IngestionError) as exc_info:
            ingest_folder(_runtime(store), str(tmp_path))
        assert exc_info.value.path.endswith("a.md")

    def test_read_failure_aborts(self, tmp_path, monkeypatch):
        (tmp_path / "a.md").write_text("a", encoding="utf-8")
        (tmp_path / "b.md").write_text("b", encoding="utf-8")
        store = RecordingStore()

        real_open = open

        def _open(path, *args, **kwargs):
            if str(path).endswith("b.md"):
                raise PermissionError("denied")
            return real_open(path, *args, **kwargs)

        monkeypatch.setattr("builtins.open", _open)

        with pytest.raises(IngestionError, match="Cannot read") as exc_info:
            ingest_folder(_runtime(store), str(tmp_path))
        assert isinstance(exc_info.value.__cause__, PermissionError)
        assert len(store.calls) == 1

    def test_no_store(self, tmp_path):
        runtime = RuntimeContext(knowledge_store=None)
        with pytest.raises(IngestionError):
            ingest_folder(runtime, str(tmp_path))
