"""
`agent-knowledge` command line interface.

Commands
--------
agent-knowledge ingest <folder>                    -- ingest .md/.txt/.mdx files
agent-knowledge ingest <folder> --ext .md --ext .rst
agent-knowledge ingest <folder> --no-recursive
agent-knowledge ingest <folder> --embed            -- also compute + cache embeddings
agent-knowledge embed "<text>"                     -- embed one string
agent-knowledge embed "<text>" --provider ollama
agent-knowledge embed "<text>" --strict            -- fail instead of falling back
agent-knowledge providers                          -- list registered providers
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

from tqdm import tqdm

from .cli_display import print_kv, setup_logger
from .config import Config
from .embedding import embed_with_result
from .ingest import IngestionError, IngestionOptions, ingest_folder
from .knowledge_store import InMemoryKnowledgeStore
from .knowledge_store_sqlite import SQLiteKnowledgeStore
from .providers.base import EmbeddingError
from .startup import StartupReport, build_registry, create_runtime

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _open_store(args: argparse.Namespace, config: Config):
    if getattr(args, "memory", False):
        return InMemoryKnowledgeStore()
    return SQLiteKnowledgeStore(args.db or config.KNOWLEDGE_DB)


def _runtime(args: argparse.Namespace, config: Config, store):
    runtime = create_runtime(config, store=store, report=StartupReport())
    provider = getattr(args, "provider", None)
    if provider:
        runtime.provider_kind = provider.strip().lower()
    return runtime


def _close(store) -> None:
    if hasattr(store, "close"):
        store.close()


# ---------------------------------------------------------------------------
# Sub-command handlers
# ---------------------------------------------------------------------------

def _cmd_ingest(args: argparse.Namespace, config: Config) -> int:
    """Ingest a folder into the knowledge store."""
    base = IngestionOptions.from_config(config)
    options = IngestionOptions(
        extensions=args.ext if args.ext else base.extensions,
        recursive=base.recursive and not args.no_recursive,
    )

    store = _open_store(args, config)
    try:
        runtime = _runtime(args, config, store)
        try:
            ids = ingest_folder(runtime, args.folder, options)
        except IngestionError as exc:
            print(f"Ingestion failed: {exc}", file=sys.stderr)
            return 1

        print(f"Ingested {len(ids)} file(s) from {args.folder}")

        if args.embed and ids:
            fallbacks = 0
            for item_id in tqdm(ids, desc="Embedding", unit="item"):
                result = store.embed_item(runtime, item_id)
                if result is None or result.is_fallback:
                    fallbacks += 1
            print(f"Embedded {len(ids) - fallbacks} item(s), {fallbacks} fallback(s)")

        if args.verbose:
            for item_id in ids:
                print(f"  {item_id}")
        return 0
    finally:
        _close(store)


def _cmd_embed(args: argparse.Namespace, config: Config) -> int:
    """Embed a single string and print a summary."""
    store = _open_store(args, config)
    try:
        runtime = _runtime(args, config, store)

        if args.strict:
            try:
                provider = runtime.registry.require_provider(runtime.provider_kind)
                vector = provider.generate_embedding(args.text)
            except EmbeddingError as exc:
                print(f"Embedding failed: {exc}", file=sys.stderr)
                return 1
            source = "provider"
        else:
            result = embed_with_result(runtime, args.text)
            vector, source = result.vector, result.source

        head = ", ".join(f"{v:.4f}" for v in vector[:args.head])
        print_kv("Embedding", {
            "provider": runtime.provider_kind,
            "source": source,
            "dimensions": len(vector),
            "head": f"[{head}{', ...' if len(vector) > args.head else ''}]",
        })
        return 0
    finally:
        _close(store)


def _cmd_providers(args: argparse.Namespace, config: Config) -> int:
    """List registered providers."""
    report = StartupReport()
    registry = build_registry(config, report=report)
    rows = {}
    for kind in registry.kinds():
        provider = registry.get_provider(kind)
        marker = " (active)" if kind == config.EMBEDDING_PROVIDER else ""
        rows[f"{kind}{marker}"] = f"{type(provider).__name__}, {provider.dimensions} dims"
    print_kv("Embedding providers", rows)

    if report.skipped:
        print_kv("Not registered", {
            f"{kind}{' (active)' if kind == config.EMBEDDING_PROVIDER else ''}": reason
            for kind, reason in report.skipped.items()
        })
    return 0


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    parser = argparse.ArgumentParser(
        prog="agent-knowledge",
        description="Agent knowledge ingestion and embedding tools",
    )
    parser.add_argument("--config", help="Path to .agent_knowledge.yaml")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Verbose console output")
    subparsers = parser.add_subparsers(dest="cmd", metavar="COMMAND")
    subparsers.required = True

    # --- ingest ---
    ingest_p = subparsers.add_parser("ingest", help="Ingest a folder of documents")
    ingest_p.add_argument("folder", help="Folder to ingest")
    ingest_p.add_argument("--ext", action="append", default=None,
                          help="File extension to include (repeatable)")
    ingest_p.add_argument("--no-recursive", action="store_true",
                          help="Do not descend into subdirectories")
    ingest_p.add_argument("--embed", action="store_true",
                          help="Compute and cache embeddings for the new items")
    ingest_p.add_argument("--db", default=None, help="SQLite knowledge database path")
    ingest_p.add_argument("--memory", action="store_true",
                          help="Use a throwaway in-memory store")
    ingest_p.add_argument("--provider", default=None, help="Embedding provider kind")
    ingest_p.set_defaults(func=_cmd_ingest)

    # --- embed ---
    embed_p = subparsers.add_parser("embed", help="Embed a piece of text")
    embed_p.add_argument("text", help="Text to embed")
    embed_p.add_argument("--provider", default=None, help="Embedding provider kind")
    embed_p.add_argument("--strict", action="store_true",
                         help="Report provider errors instead of falling back")
    embed_p.add_argument("--head", type=int, default=5,
                         help="Number of leading values to print")
    embed_p.add_argument("--db", default=None, help="SQLite knowledge database path")
    embed_p.add_argument("--memory", action="store_true",
                         help="Skip the persistent embedding cache")
    embed_p.set_defaults(func=_cmd_embed)

    # --- providers ---
    providers_p = subparsers.add_parser("providers", help="List embedding providers")
    providers_p.set_defaults(func=_cmd_providers)

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for `agent-knowledge`.

    Parameters
    ----------
    argv:
        Argument list without the program name.  Defaults to sys.argv.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    # Configure console logging if not already configured
    if not logging.root.handlers:
        logging.basicConfig(
            level=logging.INFO if args.verbose else logging.WARNING,
            format="%(levelname)s  %(name)s  %(message)s",
        )

    config = Config.load(args.config)
    try:
        setup_logger(config.LOG_DIR)
    except OSError as exc:
        logger.warning("Could not create log directory %s: %s", config.LOG_DIR, exc)

    return args.func(args, config)


if __name__ == "__main__":
    sys.exit(main())
