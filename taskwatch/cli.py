"""CLI entry point for workspace discovery and status checks."""

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from .config.config_loader import load_config
from .errors import TraversalError
from .main import Components, build_components, run_server
from .monitor.models import TickResult
from .notion.models import DiscoveryResult, TraversalProgress
from .utils.logging import setup_logging

logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        description="Discover Notion workspaces and watch task status changes",
        prog="taskwatch",
    )

    parser.add_argument(
        "-c",
        "--config",
        default=None,
        help="Path to configuration file (default: $TASKWATCH_CONFIG or config.yaml)",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v, -vv, -vvv)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    discover = subparsers.add_parser("discover", help="Find pages and databases for a user")
    discover.add_argument("--user", required=True, help="User email address")
    discover.add_argument("--json", action="store_true", help="Print the raw JSON result")

    hierarchy = subparsers.add_parser("hierarchy", help="Summarize the workspace hierarchy")
    hierarchy.add_argument("--json", action="store_true", help="Print the raw JSON result")

    check = subparsers.add_parser("check", help="Poll tracked databases for status changes")
    check.add_argument(
        "--ticks",
        type=int,
        default=2,
        help="Number of polls; the first one only records current statuses (default: 2)",
    )
    check.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Seconds between polls (default: monitor.interval_seconds)",
    )

    subparsers.add_parser("serve", help="Run the web server and status monitor")

    return parser


def print_progress(progress: TraversalProgress) -> None:
    """Print traversal progress on a single line."""
    status = f"\rNodes: {progress.nodes_found} found"
    if progress.nodes_skipped > 0:
        status += f", {progress.nodes_skipped} skipped"
    if progress.current_title:
        title = progress.current_title
        if len(title) > 40:
            title = title[:37] + "..."
        status += f" | Current: {title}"
    print(status, end="", flush=True)


def print_discovery(result: DiscoveryResult) -> None:
    """Print a human-readable discovery report."""
    print(f"User: {result.user_identity}")
    print(f"\nPages owned ({len(result.owned_pages)}):")
    for page in result.owned_pages:
        print(f"  - {page.title} ({page.url})")

    print(f"\nDatabases with matching records ({len(result.owned_collections)}):")
    for owned in result.owned_collections:
        c = owned.collection
        print(f"  - {c.parent_title} > {c.title}: {owned.record_count} records")

    print(f"\nAll databases: {len(result.all_collections)}")
    print(f"Matching records: {result.totals.records}")
    print(f"Page owners seen: {len(result.totals.users)}")

    if result.errors:
        print(f"\nSkipped ({len(result.errors)}):")
        for error in result.errors[:10]:
            print(f"  - {error}")
        if len(result.errors) > 10:
            print(f"  ... and {len(result.errors) - 10} more")


def print_tick(index: int, result: TickResult) -> None:
    """Print the outcome of one poll."""
    if result.skipped:
        print(f"Poll {index}: skipped (tracked databases unreadable)")
        return
    print(f"Poll {index}: {result.records_checked} records, {len(result.changes)} changes")
    for event in result.changes:
        print(
            f"  - {event.title} [{event.project_name}]: "
            f"{event.previous_label} -> {event.current_label}"
        )


def run_discover(components: Components, args: argparse.Namespace) -> int:
    if args.verbose >= 1 and not args.json:
        components.walker.progress_callback = print_progress

    result = components.discovery.discover(components.root_id, args.user)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        if components.walker.progress_callback:
            print()
        print_discovery(result)
    return 0


def run_hierarchy(components: Components, args: argparse.Namespace) -> int:
    summary = components.discovery.summarize_hierarchy(components.root_id)

    if args.json:
        print(json.dumps(summary.to_dict(), indent=2))
        return 0

    for page in summary.pages:
        owner = page.owner_identity or "no owner"
        print(f"{page.title} ({owner}): {len(page.collections)} databases, {page.record_count} records")
    print(f"\nDatabases on root page: {summary.root_collections}")
    print(f"Total databases: {summary.totals.collections}")
    print(f"Total records: {summary.totals.records}")
    print(f"Unique users: {len(summary.totals.users)}")
    return 0


async def run_check(components: Components, args: argparse.Namespace) -> int:
    monitor = components.monitor
    interval = args.interval if args.interval is not None else monitor.interval_seconds

    for index in range(1, max(args.ticks, 1) + 1):
        if index > 1:
            await asyncio.sleep(interval)
        result = await monitor.run_tick()
        print_tick(index, result)

    return 0


def main(argv: Optional[List[str]] = None):
    """Main entry point for CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(verbosity=args.verbose, log_file=config.log_file)

    try:
        components = build_components(config)

        if args.command == "discover":
            exit_code = run_discover(components, args)
        elif args.command == "hierarchy":
            exit_code = run_hierarchy(components, args)
        elif args.command == "check":
            exit_code = asyncio.run(run_check(components, args))
        else:
            asyncio.run(run_server(components))
            exit_code = 0

        sys.exit(exit_code)
    except TraversalError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    except KeyboardInterrupt:
        print("\nCancelled by user")
        sys.exit(1)


if __name__ == "__main__":
    main()
