"""``outline-rag`` command-line entry point.

Subcommands
-----------
ingest
    Page through Outline, chunk every new document and load it into ChromaDB.
ask QUESTION
    Run the RAG workflow once and print the answer.
chat
    Interactive shell (see :mod:`outline_rag.cli.chat`).
stats [--documents]
    Print stored proposition / document / collection counts, optionally
    followed by the ids of the stored documents.
purge-document DOCUMENT_ID
    Delete a document's stored propositions so the next ingestion reloads it.

Every handler returns a process exit code; configuration and provider
errors are printed to stderr as ``Error: ...`` with exit code 1.
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from outline_rag.config.settings import Settings, load_settings
from outline_rag.utils.errors import OutlineRAGError
from outline_rag.utils.logging import configure_logging


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="outline-rag",
        description="Agentic chunking and question answering over an Outline knowledge base.",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("ingest", help="Ingest new Outline documents into the vector store")

    ask_parser = subparsers.add_parser("ask", help="Answer a single question")
    ask_parser.add_argument("question", help="The question to ask")
    ask_parser.add_argument(
        "--show-context",
        action="store_true",
        dest="show_context",
        help="Also print the retrieved propositions",
    )

    subparsers.add_parser("chat", help="Start the interactive chat shell")
    stats_parser = subparsers.add_parser("stats", help="Show vector store statistics")
    stats_parser.add_argument(
        "--documents",
        action="store_true",
        help="Also list the ids of the documents that have stored propositions",
    )

    purge_parser = subparsers.add_parser(
        "purge-document", help="Delete a document's propositions so it is re-ingested"
    )
    purge_parser.add_argument("document_id", help="Outline document id")
    purge_parser.add_argument("--yes", "-y", action="store_true", help="Skip confirmation prompt")

    return parser


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

async def _handle_ingest(app_settings: Settings) -> int:
    from outline_rag.main import build_http_client, build_ingestion_service

    async with build_http_client(app_settings) as http_client:
        service = build_ingestion_service(app_settings, http_client)
        report = await service.ingest()

    print("Ingestion finished:")
    print(f"  Documents reported: {report.total_documents}")
    print(f"  Pages fetched:      {report.pages_fetched}")
    print(f"  Documents seen:     {report.documents_seen}")
    print(f"  Loaded:             {report.loaded}")
    print(f"  Already present:    {report.skipped_existing}")
    print(f"  No propositions:    {report.empty}")
    print(f"  Failed:             {report.failed}")
    print(f"  Propositions:       {report.propositions_stored}")
    print(f"  Time:               {report.elapsed_seconds:.2f}s")
    if report.failed_document_ids:
        print("  Failed documents:")
        for document_id in report.failed_document_ids:
            print(f"    - {document_id}")
    return 0 if report.failed == 0 else 2


async def _handle_ask(args: argparse.Namespace, app_settings: Settings) -> int:
    from outline_rag.main import build_rag_workflow

    workflow = build_rag_workflow(app_settings)
    state = await workflow.invoke(args.question)

    print(state.answer or "No answer generated")
    if args.show_context:
        print("\nContext:")
        for chunk in state.context:
            print(f"  - [{chunk.proposition.source_document_title}] {chunk.content}")
    return 0


async def _handle_chat(app_settings: Settings) -> int:
    from outline_rag.cli.chat import ChatShell
    from outline_rag.main import build_rag_workflow

    return await ChatShell(build_rag_workflow(app_settings)).run()


async def _handle_stats(args: argparse.Namespace, app_settings: Settings) -> int:
    from outline_rag.main import build_embedding_provider, build_vector_store

    store = build_vector_store(app_settings, build_embedding_provider(app_settings))
    stats = await store.get_stats()

    print("Corpus Statistics")
    print("=" * 40)
    print(f"  Collection:        {app_settings.chromadb_collection}")
    print(f"  Propositions:      {stats.total_chunks}")
    print(f"  Documents:         {stats.total_documents}")
    print(f"  Collections:       {stats.total_collections}")

    if args.documents:
        print()
        print("Stored documents:")
        for source_id in sorted(await store.get_source_ids()):
            print(f"  {source_id}")
    return 0


async def _handle_purge_document(args: argparse.Namespace, app_settings: Settings) -> int:
    from outline_rag.main import build_embedding_provider, build_vector_store

    store = build_vector_store(app_settings, build_embedding_provider(app_settings))
    if not await store.exists_by_source_id(args.document_id):
        print(f"No propositions stored for document '{args.document_id}'. Nothing to purge.")
        return 0

    if not args.yes:
        confirm = input(f"  Delete all propositions of '{args.document_id}'? [y/N] ")
        if confirm.strip().lower() not in ("y", "yes"):
            print("  Aborted.")
            return 0

    deleted = await store.delete_by_source(args.document_id)
    print(f"Deleted {deleted} propositions; the document will be re-ingested on the next run.")
    return 0


async def _dispatch(args: argparse.Namespace, app_settings: Settings) -> int:
    if args.command == "ingest":
        return await _handle_ingest(app_settings)
    if args.command == "ask":
        return await _handle_ask(args, app_settings)
    if args.command == "chat":
        return await _handle_chat(app_settings)
    if args.command == "stats":
        return await _handle_stats(args, app_settings)
    if args.command == "purge-document":
        return await _handle_purge_document(args, app_settings)
    raise ValueError(f"Unknown command: {args.command}")


def run(argv: list[str] | None = None, app_settings: Settings | None = None) -> int:
    """Parse *argv*, run the command and return its exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    try:
        app_settings = app_settings or load_settings()
        configure_logging(
            log_level=app_settings.log_level,
            json_output=(app_settings.app_env == "production"),
            stream=sys.stderr,
        )
        return asyncio.run(_dispatch(args, app_settings))
    except OutlineRAGError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


def main() -> None:
    """Console-script entry point."""
    sys.exit(run())


if __name__ == "__main__":
    main()
