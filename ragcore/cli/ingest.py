"""Standalone CLI for ingesting content into the ragcore vector store.

Usage::

    python -m ragcore.cli text "Some notes worth remembering" --name notes-2024
    python -m ragcore.cli file ./docs/handbook.pdf
    python -m ragcore.cli file ./talks/keynote.vtt
    python -m ragcore.cli url https://example.com/article
    python -m ragcore.cli batch ./docs ./talks/keynote.vtt https://example.com/a.pdf
    python -m ragcore.cli query "How are refunds handled?" -k 5
    python -m ragcore.cli sources
    python -m ragcore.cli delete handbook.pdf

Configuration comes from environment variables / ``.env`` (see
:class:`ragcore.config.settings.Settings`).
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any

from ragcore.config.settings import Settings

_BATCH_EXTENSIONS = (".txt", ".md", ".csv", ".pdf", ".vtt")


def _build_components(app_settings: Settings) -> dict[str, Any]:
    """Deferred import so ``--help`` does not load chromadb or openai."""
    from ragcore.main import build_components

    return build_components(app_settings)


def _expand_batch_inputs(items: list[str]) -> list[str]:
    """Expand directories into their supported files (sorted, non-recursive)."""
    expanded: list[str] = []
    for item in items:
        path = Path(item)
        if not item.startswith(("http://", "https://")) and path.is_dir():
            expanded.extend(
                str(child)
                for child in sorted(path.iterdir())
                if child.is_file() and child.suffix.lower() in _BATCH_EXTENSIONS
            )
        else:
            expanded.append(item)
    return expanded


def _print_result(result) -> None:  # noqa: ANN001
    print("\nIngestion complete:")
    print(f"  Source:         {result.source_name}")
    print(f"  Type:           {result.source_type.value}")
    print(f"  Chunks stored:  {result.chunk_count}")
    print(f"  Time:           {result.ingestion_time:.2f}s")


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def _handle_text(args: argparse.Namespace, components: dict[str, Any]) -> int:
    from ragcore.models.rag import SourceType

    text = sys.stdin.read() if args.text == "-" else args.text
    declared = SourceType.VTT if args.vtt else None
    result = await components["ingestion_service"].ingest_text(
        text, name=args.name, declared_type=declared
    )
    _print_result(result)
    return 0


async def _handle_file(args: argparse.Namespace, components: dict[str, Any]) -> int:
    print(f"Ingesting file: {args.path}")
    result = await components["ingestion_service"].ingest_file(args.path)
    _print_result(result)
    return 0


async def _handle_url(args: argparse.Namespace, components: dict[str, Any]) -> int:
    print(f"Ingesting URL: {args.url}")
    result = await components["ingestion_service"].ingest_url(args.url)
    _print_result(result)
    return 0


async def _handle_batch(args: argparse.Namespace, components: dict[str, Any]) -> int:
    inputs = _expand_batch_inputs(args.inputs)
    if not inputs:
        print("Nothing to ingest.", file=sys.stderr)
        return 1

    coordinator = components["job_coordinator"]
    job_id = await coordinator.submit(inputs)
    print(f"Job {job_id}: {len(inputs)} input(s)")

    async def _on_progress(_job_id: str, item: str, progress: int, message: str) -> None:
        if item:
            print(f"  [{progress:3d}%] {message}")

    coordinator.register_listener(job_id, _on_progress)
    job = await coordinator.wait(job_id)

    print(f"\nJob {job.status.value}")
    if job.summary is not None:
        print(f"  Total:       {job.summary.total}")
        print(f"  Successful:  {job.summary.successful}")
        print(f"  Failed:      {job.summary.failed}")
        print(f"  Chunks:      {job.summary.total_chunks}")
    for outcome in sorted(job.results, key=lambda o: o.position):
        if not outcome.success:
            print(f"  ! {outcome.input}: {outcome.error}")
    if job.error:
        print(f"  Error: {job.error}", file=sys.stderr)
        return 1
    return 0


async def _handle_query(args: argparse.Namespace, components: dict[str, Any]) -> int:
    retriever = components["retriever"]
    results = await retriever.retrieve(args.query, k=args.k)
    if not results:
        print("No matching chunks.")
        return 0
    print(retriever.format_context(results))
    return 0


async def _handle_sources(components: dict[str, Any]) -> int:
    sources = await components["registry"].list()
    if not sources:
        print("No sources stored.")
        return 0

    print(f"{'TYPE':<8} {'CHUNKS':>6}  {'ID':<32}  NAME")
    for source in sources:
        print(f"{source.type.value:<8} {source.chunk_count:>6}  {source.id:<32}  {source.name}")
    print(f"\n{len(sources)} source(s)")
    return 0


async def _handle_delete(args: argparse.Namespace, components: dict[str, Any]) -> int:
    removed = await components["registry"].remove(args.source)
    if not removed:
        print(f"No source matching {args.source!r}.")
        return 1
    print(f"Deleted {args.source}.")
    return 0


async def _dispatch(args: argparse.Namespace, app_settings: Settings) -> int:
    from ragcore.main import close_components
    from ragcore.utils.errors import RagCoreError

    components: dict[str, Any] | None = None
    try:
        components = _build_components(app_settings)
        if args.command == "text":
            return await _handle_text(args, components)
        if args.command == "file":
            return await _handle_file(args, components)
        if args.command == "url":
            return await _handle_url(args, components)
        if args.command == "batch":
            return await _handle_batch(args, components)
        if args.command == "query":
            return await _handle_query(args, components)
        if args.command == "sources":
            return await _handle_sources(components)
        if args.command == "delete":
            return await _handle_delete(args, components)
        return 1
    except RagCoreError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        if components is not None:
            await close_components(components)


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the ingestion CLI."""
    parser = argparse.ArgumentParser(
        prog="python -m ragcore.cli",
        description="Ingest content into, and query, the ragcore vector store.",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    text_parser = subparsers.add_parser("text", help="Ingest a piece of text ('-' reads stdin)")
    text_parser.add_argument("text", help="The text to ingest, or '-' for stdin")
    text_parser.add_argument("--name", help="Source key / display name (generated if omitted)")
    text_parser.add_argument("--vtt", action="store_true", help="Treat the text as a WebVTT track")

    file_parser = subparsers.add_parser("file", help="Ingest a .txt/.md/.csv/.pdf/.vtt file")
    file_parser.add_argument("path", help="Path to the file")

    url_parser = subparsers.add_parser("url", help="Ingest a web page or remote PDF")
    url_parser.add_argument("url", help="http(s) URL")

    batch_parser = subparsers.add_parser("batch", help="Ingest many files, directories and URLs")
    batch_parser.add_argument("inputs", nargs="+", help="Files, directories or URLs")

    query_parser = subparsers.add_parser("query", help="Retrieve the chunks closest to a query")
    query_parser.add_argument("query", help="Natural-language query")
    query_parser.add_argument("-k", type=int, default=None, help="Number of results")

    subparsers.add_parser("sources", help="List stored sources")

    delete_parser = subparsers.add_parser("delete", help="Delete a source by key or id")
    delete_parser.add_argument("source", help="Source key (file name / URL) or id")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    app_settings = Settings()

    from ragcore.utils.logging import configure_logging

    configure_logging(app_settings.log_level)

    exit_code = asyncio.run(_dispatch(args, app_settings))
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
