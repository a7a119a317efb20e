"""CLI entry point for the narration workflow (TTS to R2)."""

import argparse
import logging

from ..notion.client import NotionClient
from ..notion.traversal import WorkspaceTraverser
from ..storage.r2 import R2Storage
from ..tts.openai_tts import OpenAISpeechSynthesizer
from ..utils.logging import setup_logging
from ..workflows.audio_upload import AudioUploadWorkflow
from .common import (
    add_common_arguments,
    config_or_exit_code,
    print_workflow_summary,
    resolve_database_id,
    run_cli,
)

DEFAULT_BATCH_SIZE = 5

HELP_TEXT = """TTS Cloudflare workflow commands:

  notion-tts run      Process all blog posts
  notion-tts test     Test with 1 post
  notion-tts batch N  Process N posts
  notion-tts help     Show this help
"""


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        description="Narrate blog posts with text-to-speech and upload the audio to R2",
        prog="notion-tts",
    )
    add_common_arguments(parser)
    parser.add_argument(
        "command",
        nargs="?",
        default="run",
        choices=["run", "test", "batch", "help"],
        help="Command to run (default: run)",
    )
    parser.add_argument(
        "count",
        nargs="?",
        type=int,
        default=DEFAULT_BATCH_SIZE,
        help=f"Number of posts for 'batch' (default: {DEFAULT_BATCH_SIZE})",
    )
    return parser


def run(args: argparse.Namespace) -> int:
    """
    Run the narration workflow.

    Returns:
        Exit code (0 for success)
    """
    logger = logging.getLogger(__name__)

    if args.command == "help":
        print(HELP_TEXT)
        return 0

    limit = None
    if args.command == "test":
        limit = 1
    elif args.command == "batch":
        limit = args.count

    config = config_or_exit_code(args.config, require=("notion", "tts", "storage"))
    if config is None:
        return 1

    client = NotionClient.from_config(config.notion)
    database_id = resolve_database_id(client, config)
    if not database_id:
        return 1

    workflow = AudioUploadWorkflow(
        client,
        OpenAISpeechSynthesizer.from_config(config.tts),
        R2Storage.from_config(config.storage),
        min_content_length=config.export.min_content_length,
    )

    logger.info(f"Narrating pages of database {database_id} (limit: {limit or 'none'})")
    pages = WorkspaceTraverser(client).database_pages(database_id, limit=limit)
    stats = workflow.run(pages, limit=limit)

    print_workflow_summary(stats)
    print(f"Total audio generated: {stats.total_bytes / 1024 / 1024:.2f} MB")
    return 0


def main():
    """Main entry point for CLI."""
    parser = create_parser()
    args = parser.parse_args()

    setup_logging(verbosity=args.verbose)
    run_cli(run, args)


if __name__ == "__main__":
    main()
