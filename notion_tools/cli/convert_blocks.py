"""CLI entry points for block type conversions."""

import argparse
from typing import Callable

from ..notion.client import NotionClient
from ..notion.transforms import BlockTypeConverter, checkbox_to_bullet, quote_to_paragraph
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


def create_parser(prog: str, description: str, quotes: bool = False) -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(description=description, prog=prog)
    add_common_arguments(parser)
    parser.add_argument(
        "-d",
        "--dry-run",
        action="store_true",
        help="Show what would be converted without making changes",
    )
    parser.add_argument("-y", "--yes", action="store_true", help="Skip confirmation prompt")
    if quotes:
        parser.add_argument(
            "--no-quote-marks",
            action="store_true",
            help="Don't wrap converted text in quotation marks",
        )
    return parser


def run_conversion(
    args: argparse.Namespace, build: Callable[[NotionClient], BlockTypeConverter]
) -> int:
    """
    Convert blocks across the whole workspace.

    Args:
        args: Parsed command line arguments
        build: Creates the converter from a client

    Returns:
        Exit code (0 for success)
    """
    config = config_or_exit_code(args.config)
    if config is None:
        return 1

    client = NotionClient.from_config(config.notion)
    converter = build(client)
    label = f"{converter.source_type} blocks to {converter.target_type}"

    if args.dry_run:
        print(f"DRY RUN - converting {label}, no changes will be made")
    else:
        print(f"WARNING: This will convert all {label} in your workspace!")
        print("The original blocks are deleted and this can't be undone.")
        if not confirm("Do you want to continue?", args.yes):
            print("Operation cancelled")
            return 0

    pages = WorkspaceTraverser(client).all_pages()
    stats = converter.run(pages, dry_run=args.dry_run, progress_callback=print_progress)
    print()
    print_transform_summary(stats, "converted")
    return 0


def main_checkboxes():
    """Entry point: to-do checkboxes to bulleted list items."""
    parser = create_parser(
        "notion-convert-checkboxes",
        "Convert all checkbox (to-do) blocks to bullet points",
    )
    args = parser.parse_args()
    setup_logging(verbosity=args.verbose)
    run_cli(lambda a: run_conversion(a, checkbox_to_bullet), args)


def main_quotes():
    """Entry point: quote blocks to paragraphs."""
    parser = create_parser(
        "notion-convert-quotes",
        "Convert all quote blocks to regular text",
        quotes=True,
    )
    args = parser.parse_args()
    setup_logging(verbosity=args.verbose)
    add_marks = not args.no_quote_marks
    run_cli(lambda a: run_conversion(a, lambda c: quote_to_paragraph(c, add_marks)), args)


if __name__ == "__main__":
    main_checkboxes()
