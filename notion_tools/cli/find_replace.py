"""CLI entry point for workspace-wide find and replace."""

import argparse
import logging
import sys

from ..notion.client import NotionClient
from ..notion.find_replace import FindReplace
from ..notion.traversal import WorkspaceTraverser
from ..utils.logging import setup_logging
from .common import (
    add_common_arguments,
    config_or_exit_code,
    confirm,
    print_progress,
    print_transform_summary,
    run_cli,
)


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        description="Find and replace text across all pages in a Notion workspace",
        prog="notion-find-replace",
    )
    add_common_arguments(parser)

    subparsers = parser.add_subparsers(dest="command", required=True)

    replace = subparsers.add_parser("replace", help="Find and replace text in all pages")
    replace.add_argument("-s", "--search", help="Text to search for")
    replace.add_argument("-r", "--replace", help="Text to replace with")
    replace.add_argument("-y", "--yes", action="store_true", help="Skip confirmation prompt")
    replace.add_argument(
        "--silent",
        action="store_true",
        help="Suppress warnings about individual block errors",
    )

    dry_run = subparsers.add_parser(
        "dry-run", help="Preview what would be replaced without making changes"
    )
    dry_run.add_argument("-s", "--search", help="Text to search for")

    return parser


def run(args: argparse.Namespace) -> int:
    """
    Run find and replace with given arguments.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 for success)
    """
    logger = logging.getLogger(__name__)
    dry_run = args.command == "dry-run"

    search = args.search or input("Enter text to search for: ")
    if not search:
        print("Error: Search text cannot be empty", file=sys.stderr)
        return 1

    replace = ""
    if not dry_run:
        replace = args.replace if args.replace is not None else input("Enter replacement text: ")

    config = config_or_exit_code(args.config)
    if config is None:
        return 1

    if dry_run:
        print(f'Searching for occurrences of: "{search}"')
    else:
        print("WARNING: This will modify all pages in your Notion workspace!")
        print(f'Searching for: "{search}"')
        print(f'Replacing with: "{replace}"')
        if not confirm("Do you want to continue?", args.yes):
            print("Operation cancelled")
            return 0

    client = NotionClient.from_config(config.notion)
    pages = WorkspaceTraverser(client).all_pages()
    logger.info(f"Scanning {len(pages)} pages")

    tool = FindReplace(client, search, replace)
    stats = tool.run(
        pages,
        dry_run=dry_run,
        silent=getattr(args, "silent", False),
        progress_callback=print_progress,
    )
    print()
    print_transform_summary(stats, "updated")
    return 0


def main():
    """Main entry point for CLI."""
    parser = create_parser()
    args = parser.parse_args()

    setup_logging(verbosity=args.verbose)
    run_cli(run, args)


if __name__ == "__main__":
    main()
