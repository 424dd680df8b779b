"""Command line entry point: ``support-rag ingest`` and ``support-rag chat``.

The interface layer only parses arguments and formats output; all
orchestration lives in the use cases.
"""

import argparse
import asyncio
import sys
from collections.abc import Sequence

from support_rag.application.dto.chat_dto import ConfirmationRequest, DirectAnswer
from support_rag.config.composition import (
    build_chatbot_config,
    build_chatbot_service,
    build_document_processor,
    build_embedding_generator,
    build_processing_options,
)
from support_rag.config.logging_setup import configure_logging
from support_rag.config.settings import AppSettings
from support_rag.infrastructure.memory.static_providers import (
    LoggingEscalationExecutor,
    StaticCategoryProvider,
    StaticConfigProvider,
)
from support_rag.infrastructure.vectorstore.in_memory_index import InMemoryVectorIndex


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="support-rag")
    sub = parser.add_subparsers(dest="command", required=True)

    ingest = sub.add_parser("ingest", help="Chunk (and embed) .txt/.md files")
    ingest.add_argument("paths", nargs="+")
    ingest.add_argument("--chunk-size", type=int)
    ingest.add_argument("--chunk-overlap", type=int)
    ingest.add_argument("--tag", action="append", default=[], help="Tag added to every chunk")
    ingest.add_argument("--dedup", action="store_true", help="Drop repeated chunks per document")
    ingest.add_argument("--skip-embedding", action="store_true")

    chat = sub.add_parser("chat", help="Run one chatbot turn")
    chat.add_argument("--message", required=True)
    chat.add_argument("--user", default="cli-user")
    chat.add_argument("--kb", action="append", default=[], help="Knowledge file to load first")
    chat.add_argument(
        "--category", action="append", default=[], help="Enabled escalation category"
    )
    chat.add_argument(
        "--confirm",
        choices=("ask", "yes", "no"),
        default="ask",
        help="How to answer an escalation proposal",
    )
    return parser


async def _ingest(args: argparse.Namespace, settings: AppSettings) -> int:
    processor = build_document_processor(settings)
    options = build_processing_options(
        settings,
        chunk_size=args.chunk_size,
        chunk_overlap=args.chunk_overlap,
        tags=frozenset(args.tag),
        deduplicate=args.dedup,
        skip_embedding=args.skip_embedding,
    )
    report = await processor.process_documents(args.paths, options)

    print(f"Processed {report.processed} file(s), {len(report.failed)} failed")
    for path, reason in report.failed.items():
        print(f"  ✗ {path}: {reason}")
    for chunk in report.chunks:
        m = chunk.metadata
        dims = len(chunk.embedding) if chunk.embedding is not None else 0
        print(
            f"  {m.source.name} [{m.chunk_index + 1}/{m.total_chunks}] "
            f"chars={m.char_count} words={m.word_count} dims={dims}"
        )
    return 0 if not report.failed else 1


def _ask(prompt: str) -> bool:
    answer = input(f"{prompt} [y/N] ").strip().lower()
    return answer in ("y", "yes")


async def _chat(args: argparse.Namespace, settings: AppSettings) -> int:
    config = build_chatbot_config(settings)
    embeddings = build_embedding_generator(settings)

    index = None
    if args.kb:
        index = InMemoryVectorIndex()
        processor = build_document_processor(settings, embeddings)
        report = await processor.process_documents(args.kb)
        index.add_chunks(config.guild_id, report.chunks)

    service = build_chatbot_service(
        settings,
        categories=StaticCategoryProvider.from_names(args.category),
        executor=LoggingEscalationExecutor(),
        configs=StaticConfigProvider({config.channel_id: config}),
        index=index,
        embeddings=embeddings,
    )

    result = await service.handle_message(args.message, args.user, config, config.channel_id)
    if not result.ok:
        assert result.error is not None
        print(result.error.user_message)
        return 1

    reply = result.value
    if isinstance(reply, DirectAnswer):
        for segment in reply.segments:
            print(segment)
            print()
        return 0

    assert isinstance(reply, ConfirmationRequest)
    print(f"🎫 {reply.explanation}")
    print(f"Category: {reply.category_name}")
    print(f"Your message: {reply.user_message_preview}")
    confirmed = args.confirm == "yes" or (args.confirm == "ask" and _ask("Create ticket?"))

    resolution = await service.resolve(reply.confirmation_id, confirmed, args.user)
    if resolution.ok and resolution.value is not None:
        print(resolution.value.message)
        return 0
    assert resolution.error is not None
    print(resolution.error.user_message)
    return 1


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = AppSettings()
    configure_logging(settings.log_level, quiet_third_party=settings.log_quiet_third_party)

    if args.command == "ingest":
        return asyncio.run(_ingest(args, settings))
    return asyncio.run(_chat(args, settings))


if __name__ == "__main__":
    sys.exit(main())
