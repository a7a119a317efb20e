"""CLI entry point for the NotebookLM export workflow."""

import argparse
import sys

from ..notion.client import NotionClient
from ..notion.traversal import WorkspaceTraverser
from ..utils.logging import setup_logging
from ..workflows.notebooklm import NotebookLMWorkflow
from .common import (
    add_common_arguments,
    config_or_exit_code,
    confirm,
    print_workflow_summary,
    resolve_database_id,
    run_cli,
)

# Commands that only touch the export directory
LOCAL_COMMANDS = ("list", "record", "csv")

NEXT_STEPS = """Next steps:
1. Open {output_dir}
2. Upload the .md files to NotebookLM
3. Generate audio/video content
4. Record the URLs with 'notion-notebooklm record' or 'import-csv'
5. Run 'notion-notebooklm sync' to write the links to Notion
"""


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        description="Export blog posts for NotebookLM and sync generated media back to Notion",
        prog="notion-notebooklm",
    )
    add_common_arguments(parser)

    subparsers = parser.add_subparsers(dest="command")

    pull = subparsers.add_parser("pull", help="Export posts as markdown")
    pull.add_argument("--force", action="store_true", help="Export posts that already have media")

    subparsers.add_parser("sync", help="Write media links from .media.json files to Notion")

    run_parser = subparsers.add_parser("run", help="Pull, write instructions, then sync (default)")
    run_parser.add_argument("--force", action="store_true", help="Export posts that already have media")

    subparsers.add_parser("list", help="List exported posts without media")

    record = subparsers.add_parser("record", help="Record media URLs for one exported post")
    record.add_argument("slug", help="Post slug")
    record.add_argument("--audio", help="Audio URL")
    record.add_argument("--video", help="Video URL")

    subparsers.add_parser("csv", help="Generate a batch tracking CSV")

    import_csv = subparsers.add_parser("import-csv", help="Create media files from the tracking CSV")
    import_csv.add_argument("path", nargs="?", help="CSV path (default: output dir)")
    import_csv.add_argument("-y", "--yes", action="store_true", help="Sync to Notion without asking")

    subparsers.add_parser("help", help="Show this help")
    return parser


def run(args: argparse.Namespace) -> int:
    """
    Run one NotebookLM workflow command.

    Returns:
        Exit code (0 for success)
    """
    command = args.command or "run"
    if command == "help":
        create_parser().print_help()
        return 0

    local = command in LOCAL_COMMANDS
    config = config_or_exit_code(args.config, require=() if local else ("notion",))
    if config is None:
        return 1

    client = None if local else NotionClient.from_config(config.notion)
    workflow = NotebookLMWorkflow.from_config(client, config.export)

    if command in ("pull", "run"):
        database_id = resolve_database_id(client, config)
        if not database_id:
            return 1
        pages = WorkspaceTraverser(client).database_pages(database_id)
        result = workflow.pull(pages, force=getattr(args, "force", False))

        print(f"\nExported: {len(result.exported)} posts")
        print(f"Skipped: {result.skipped} posts")
        if result.errors:
            print(f"Errors: {len(result.errors)} posts")
            for error in result.errors[:10]:
                print(f"  - {error}")
        print(f"Files saved to: {workflow.output_dir}")

        if command == "pull":
            return 0
        print(f"Instructions written to: {workflow.write_instructions()}")

    if command in ("sync", "run"):
        stats = workflow.sync()
        print_workflow_summary(stats, ["Synced", "Skipped", "Errors"])
        if command == "run":
            print(NEXT_STEPS.format(output_dir=workflow.output_dir))
        return 0

    if command == "list":
        unprocessed = workflow.list_unprocessed()
        if not unprocessed:
            print("All files have been processed!")
            return 0
        print(f"Found {len(unprocessed)} unprocessed files:\n")
        for index, item in enumerate(unprocessed, start=1):
            print(f"  {index}. {item['title']}")
            print(f"     File: {item['file']}")
        return 0

    if command == "record":
        if not args.audio and not args.video:
            print("Error: Provide --audio and/or --video", file=sys.stderr)
            return 1
        try:
            workflow.record_media(args.slug, args.audio, args.video)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        print(f"Created media file for {args.slug}")
        return 0

    if command == "csv":
        print(f"CSV created: {workflow.generate_csv()}")
        return 0

    if command == "import-csv":
        try:
            imported = workflow.import_csv(args.path)
        except (OSError, ValueError) as e:
            print(f"Error reading CSV: {e}", file=sys.stderr)
            return 1
        print(f"Imported {imported} media records from CSV")
        if imported and confirm("Sync all to Notion now?", args.yes):
            stats = workflow.sync(archive=False)
            print_workflow_summary(stats, ["Synced", "Skipped", "Errors"])
        return 0

    print(f"Unknown command: {command}", file=sys.stderr)
    return 1


def main():
    """Main entry point for CLI."""
    parser = create_parser()
    args = parser.parse_args()

    setup_logging(verbosity=args.verbose)
    run_cli(run, args)


if __name__ == "__main__":
    main()
