"""Command line entry point for resolving placeholder links in a document."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

from .config import ConfigError, ConfigManager, load_settings
from .document import DocumentError
from .logging import install_exception_hook, setup_logging
from .services import (
    ChatClient,
    ConversationalResolver,
    ResolutionSession,
    SearchClient,
    UrlVerifier,
)
from .ui import ConsoleInteraction


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="linkresolver",
        description=(
            "Replace [label](description) placeholder links with real URLs, "
            "suggested by a chat model and confirmed interactively."
        ),
    )
    parser.add_argument("-i", "--in-place", action="store_true", help="rewrite the input file")
    parser.add_argument("input", help="document to process")
    parser.add_argument("output", nargs="?", help="where to write the result")
    parser.add_argument("--gui", action="store_true", help="review suggestions in Qt dialogs")
    parser.add_argument(
        "--no-verify",
        dest="verify_urls",
        action="store_false",
        default=None,
        help="do not check suggested URLs before showing them",
    )
    parser.add_argument("--model", help="chat model name")
    parser.add_argument("--base-url", help="chat completions server base URL")
    parser.add_argument("--search-url", help="SearxNG base URL for ranked search results")
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug output")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.in_place and args.output:
        parser.error("-i takes a single input file")
    if not args.in_place and not args.output:
        parser.error("an output file is required unless -i is given")

    logger = setup_logging(level=logging.DEBUG if args.verbose else logging.INFO)
    install_exception_hook(logger)

    try:
        settings = load_settings(
            ConfigManager(),
            overrides={
                "model": args.model,
                "base_url": args.base_url,
                "search_url": args.search_url,
                "verify_urls": args.verify_urls,
            },
        )
        api_key = settings.api_key()
    except ConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.gui:
        from .ui.review_dialog import QtInteraction

        interaction = QtInteraction()
    else:
        interaction = ConsoleInteraction()

    chat_client = ChatClient(
        api_key=api_key,
        base_url=settings.base_url,
        model=settings.model,
        timeout=settings.request_timeout,
        max_retries=settings.max_retries,
        retry_backoff=settings.retry_backoff,
    )
    verifier = UrlVerifier(timeout=settings.verify_timeout) if settings.verify_urls else None
    search_client = (
        SearchClient(settings.search_url, max_results=settings.search_results)
        if settings.search_url
        else None
    )
    resolver = ConversationalResolver(
        chat_client,
        interaction,
        verifier=verifier,
        search_client=search_client,
        confidence_floor=settings.confidence_floor,
        max_automatic_rounds=settings.max_automatic_rounds,
    )
    session = ResolutionSession(resolver, interaction)

    logger.info(
        "Starting resolution run",
        extra={"input": args.input, "output": args.output, "in_place": args.in_place},
    )
    try:
        session.process_file(args.input, args.output, in_place=args.in_place)
    except DocumentError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted; no changes were written.", file=sys.stderr)
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
