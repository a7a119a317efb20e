"""Helpers shared by the command line tools."""

import argparse
import sys
from typing import Callable, Iterable, List, Optional

from pydantic import ValidationError

from ..config.config_loader import load_config
from ..config.config_schema import AppConfig
from ..notion.client import NotionClient
from ..notion.models import TransformStats, WorkflowStats
from ..notion.traversal import WorkspaceTraverser

SEPARATOR = "=" * 40


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    """Add the config and verbosity options every tool accepts."""
    parser.add_argument(
        "-c",
        "--config",
        default=None,
        help="Path to configuration file (default: config.yaml if present)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v, -vv, -vvv)",
    )


def load_app_config(config_path: Optional[str], require: Iterable[str] = ("notion",)) -> AppConfig:
    """
    Load configuration and check the credentials a tool needs.

    Args:
        config_path: Explicit config file path or None
        require: Sections whose credentials must be set ("notion", "tts", "storage")

    Raises:
        FileNotFoundError: If an explicit config file is missing
        ValueError: If configuration is invalid or credentials are missing
    """
    try:
        config = load_config(config_path)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e

    for section in require:
        getattr(config, f"require_{section}")()
    return config


def config_or_exit_code(config_path: Optional[str], require: Iterable[str] = ("notion",)):
    """
    Load configuration, printing the problem on failure.

    Returns:
        AppConfig, or None when the tool should exit with code 1
    """
    try:
        return load_app_config(config_path, require)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
    return None


def resolve_database_id(client: NotionClient, config: AppConfig) -> Optional[str]:
    """Configured database ID, or the result of searching by name."""
    database_id = WorkspaceTraverser(client).resolve_database(
        config.notion.database_id, config.notion.database_query
    )
    if not database_id:
        print(
            f"Error: No database found matching '{config.notion.database_query}'",
            file=sys.stderr,
        )
    return database_id


def confirm(prompt: str, assume_yes: bool = False) -> bool:
    """Ask a yes/no question on the terminal."""
    if assume_yes:
        return True
    try:
        answer = input(f"{prompt} (y/N): ")
    except EOFError:
        return False
    return answer.strip().lower() in ("y", "yes")


def print_progress(index: int, total: int, title: str) -> None:
    """Print a single-line progress indicator."""
    if len(title) > 40:
        title = title[:37] + "..."
    print(f"\rProcessing page {index}/{total} | {title:<40}", end="", flush=True)


def print_transform_summary(stats: TransformStats, action: str, max_errors: int = 10) -> None:
    """Print the outcome of a conversion or find/replace run."""
    print("\n" + SEPARATOR)
    print("SUMMARY" + (" (dry run)" if stats.dry_run else ""))
    print(SEPARATOR)
    print(f"Pages processed: {stats.pages_processed}")
    print(f"Pages with matches: {len(stats.pages_with_matches)}")
    if stats.dry_run:
        print(f"Blocks that would be {action}: {stats.matches}")
    else:
        print(f"Blocks {action}: {stats.changed}")
    if stats.occurrences:
        print(f"Occurrences: {stats.occurrences}")
    print(f"Failed: {stats.failed}")

    for page in stats.pages_with_matches[:max_errors]:
        print(f"  - {page.title}: {page.matches}")

    if stats.errors:
        print("Errors:")
        for failure in stats.errors[:max_errors]:
            where = f" (block {failure.block_id})" if failure.block_id else ""
            print(f"  - {failure.page_title}{where}: {failure.error}")
        if len(stats.errors) > max_errors:
            print(f"  ... and {len(stats.errors) - max_errors} more")


def print_workflow_summary(stats: WorkflowStats, labels: Optional[List[str]] = None) -> None:
    """Print processed/skipped/failed counts of a workflow run."""
    processed, skipped, failed = labels or ["Processed", "Skipped", "Failed"]
    print("\n" + SEPARATOR)
    print("SUMMARY")
    print(SEPARATOR)
    print(f"{processed}: {stats.processed}")
    print(f"{skipped}: {stats.skipped}")
    print(f"{failed}: {stats.failed}")
    for error in stats.errors[:10]:
        print(f"  - {error}")
    if len(stats.errors) > 10:
        print(f"  ... and {len(stats.errors) - 10} more")


def run_cli(run: Callable[[argparse.Namespace], int], args: argparse.Namespace) -> None:
    """Run a tool body and exit with its code."""
    try:
        sys.exit(run(args))
    except KeyboardInterrupt:
        print("\nCancelled by user")
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
