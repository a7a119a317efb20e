"""CLI entry point for copying page text into the Content property."""

import argparse

from ..notion.client import NotionClient
from ..notion.traversal import WorkspaceTraverser
from ..utils.logging import setup_logging
from ..workflows.content_copy import ContentCopyWorkflow
from .common import (
    add_common_arguments,
    config_or_exit_code,
    print_workflow_summary,
    resolve_database_id,
    run_cli,
)


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        description="Extract page text and store it in each post's Content property",
        prog="notion-copy-content",
    )
    add_common_arguments(parser)
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Process at most this many posts",
    )
    return parser


def run(args: argparse.Namespace) -> int:
    config = config_or_exit_code(args.config)
    if config is None:
        return 1

    client = NotionClient.from_config(config.notion)
    database_id = resolve_database_id(client, config)
    if not database_id:
        return 1

    pages = WorkspaceTraverser(client).database_pages(database_id, limit=args.limit)
    stats = ContentCopyWorkflow(client).run(pages)
    print_workflow_summary(stats, ["Processed", "No content", "Failed"])
    return 0


def main():
    """Main entry point for CLI."""
    parser = create_parser()
    args = parser.parse_args()

    setup_logging(verbosity=args.verbose)
    run_cli(run, args)


if __name__ == "__main__":
    main()
