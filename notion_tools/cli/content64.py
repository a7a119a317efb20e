"""CLI entry point for Content64 audio encoding and cleanup."""

import argparse
import time

from ..notion.client import NotionClient
from ..notion.traversal import WorkspaceTraverser
from ..payload.writer import ChunkedPayloadWriter
from ..tts.openai_tts import OpenAISpeechSynthesizer
from ..utils.logging import setup_logging
from ..workflows.content64 import Content64Workflow
from .common import (
    add_common_arguments,
    config_or_exit_code,
    confirm,
    print_workflow_summary,
    resolve_database_id,
    run_cli,
)

CLEANUP_GRACE_SECONDS = 3


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        description="Store speech audio as base64 in Content64 page properties",
        prog="notion-content64",
    )
    add_common_arguments(parser)

    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("encode", help="Encode the Content property of each post (default)")
    cleanup = subparsers.add_parser("cleanup", help="Clear all Content64 fields")
    cleanup.add_argument("-y", "--yes", action="store_true", help="Skip confirmation prompt")
    return parser


def run(args: argparse.Namespace) -> int:
    """
    Encode or clean up stored audio.

    Returns:
        Exit code (0 for success)
    """
    cleanup = args.command == "cleanup"
    require = ("notion",) if cleanup else ("notion", "tts")

    config = config_or_exit_code(args.config, require=require)
    if config is None:
        return 1

    client = NotionClient.from_config(config.notion)
    database_id = resolve_database_id(client, config)
    if not database_id:
        return 1

    writer = ChunkedPayloadWriter(client, config.writer)
    pages = WorkspaceTraverser(client).database_pages(database_id)

    if cleanup:
        print("WARNING: This will clear all Content64 data from your blog posts.")
        if args.yes:
            print(f"Press Ctrl+C to cancel, continuing in {CLEANUP_GRACE_SECONDS} seconds...")
            time.sleep(CLEANUP_GRACE_SECONDS)
        elif not confirm("Do you want to continue?"):
            print("Operation cancelled")
            return 0
        stats = Content64Workflow(writer).clear(pages)
        print_workflow_summary(stats, ["Pages cleared", "Pages skipped (no data)", "Field errors"])
        return 0

    workflow = Content64Workflow(writer, OpenAISpeechSynthesizer.from_config(config.tts))
    stats = workflow.run(pages)
    print_workflow_summary(stats, ["Processed", "Skipped", "Failed"])
    return 0


def main():
    """Main entry point for CLI."""
    parser = create_parser()
    args = parser.parse_args()

    setup_logging(verbosity=args.verbose)
    run_cli(run, args)


if __name__ == "__main__":
    main()
