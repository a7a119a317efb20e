"""CLI entry point for read-only workspace audits."""

import argparse

from ..notion.client import NotionClient
from ..notion.traversal import WorkspaceTraverser
from ..utils.logging import setup_logging
from ..workflows.h1_audit import REPORT_FILE, H1Audit, count_database_pages
from .common import SEPARATOR, add_common_arguments, config_or_exit_code, resolve_database_id, run_cli


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        description="Audit a Notion workspace",
        prog="notion-audit",
    )
    add_common_arguments(parser)

    subparsers = parser.add_subparsers(dest="command", required=True)

    h1 = subparsers.add_parser("h1", help="Report which pages have a heading 1 block")
    h1.add_argument("-o", "--output", default=REPORT_FILE, help=f"Report path (default: {REPORT_FILE})")

    count = subparsers.add_parser("count", help="Count pages in the blog database")
    count.add_argument("--database-id", help="Database ID (default: configured or searched)")
    return parser


def run_h1(client: NotionClient, args: argparse.Namespace) -> int:
    pages = WorkspaceTraverser(client).all_pages()
    report = H1Audit(client).run(pages)

    print("\n" + SEPARATOR)
    print("H1 TAG REPORT")
    print(SEPARATOR)
    print(f"Pages WITH h1 tags: {len(report.with_h1)}")
    print(f"Pages WITHOUT h1 tags: {len(report.without_h1)}")
    if report.error_count:
        print(f"Pages with errors: {report.error_count}")
    print(f"Total pages checked: {report.checked}")
    print(f"Percentage with h1: {report.percentage_with_h1:.1f}%")

    if report.without_h1:
        print("\nSample of pages without h1 tags:")
        for page in report.without_h1[:20]:
            print(f"  - {page.title}")
        if len(report.without_h1) > 20:
            print(f"  ... and {len(report.without_h1) - 20} more")

    path = H1Audit.save_report(report, args.output)
    print(f"\nFull report saved to {path}")
    return 0


def run_count(client: NotionClient, args: argparse.Namespace, config) -> int:
    if args.database_id:
        database_id = args.database_id
    else:
        database_id = resolve_database_id(client, config)
        if not database_id:
            return 1

    result = count_database_pages(client, database_id)
    print(f"Total pages in database: {result.total}")
    print(f"Database ID: {result.database_id}")
    print("\nSample pages (first 10):")
    for index, title in enumerate(result.sample_titles, start=1):
        print(f"  {index}. {title}")
    if result.total > len(result.sample_titles):
        print(f"  ... and {result.total - len(result.sample_titles)} more pages")
    return 0


def run(args: argparse.Namespace) -> int:
    config = config_or_exit_code(args.config)
    if config is None:
        return 1

    client = NotionClient.from_config(config.notion)
    if args.command == "h1":
        return run_h1(client, args)
    return run_count(client, args, config)


def main():
    """Main entry point for CLI."""
    parser = create_parser()
    args = parser.parse_args()

    setup_logging(verbosity=args.verbose)
    run_cli(run, args)


if __name__ == "__main__":
    main()
