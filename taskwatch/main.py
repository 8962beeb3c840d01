"""Main entry point: wire components from configuration and serve them."""

import argparse
import asyncio
import logging
import sys
from dataclasses import dataclass
from typing import List, Optional

from .config.config_loader import load_config
from .config.config_schema import AppConfig
from .monitor.cache import StatusCache
from .monitor.status_monitor import (
    StatusMonitor,
    discovered_collections,
    fixed_collections,
)
from .notifications.base import NotificationDispatcher
from .notifications.dispatchers import LoggingDispatcher
from .notion.client import NotionClient
from .notion.discovery import WorkspaceDiscovery
from .notion.ownership import OwnershipResolver
from .notion.reader import CollectionReader
from .notion.status import StatusNormalizer
from .notion.traversal import TreeWalker
from .utils.logging import setup_logging
from .web.server import TaskwatchServer

logger = logging.getLogger(__name__)


@dataclass
class Components:
    """Everything the CLI and the web server need."""

    config: AppConfig
    root_id: str
    client: NotionClient
    walker: TreeWalker
    reader: CollectionReader
    discovery: WorkspaceDiscovery
    monitor: StatusMonitor


def build_components(
    config: AppConfig,
    dispatcher: Optional[NotificationDispatcher] = None,
    cache: Optional[StatusCache] = None,
) -> Components:
    """
    Create the Notion client, discovery and monitor from configuration.

    Args:
        config: Validated application configuration
        dispatcher: Notification dispatcher (defaults to LoggingDispatcher)
        cache: Status cache to reuse (a fresh one if omitted)

    Returns:
        Components bundle
    """
    notion_config = config.notion
    root_id = notion_config.resolve_root_id()

    client = NotionClient(
        api_key=notion_config.api_key,
        rate_limit_delay=notion_config.rate_limit_delay,
        timeout_ms=notion_config.timeout_ms,
        page_size=notion_config.page_size,
    )
    walker = TreeWalker(client)
    resolver = OwnershipResolver()
    normalizer = StatusNormalizer()
    reader = CollectionReader(client, resolver=resolver, normalizer=normalizer)

    discovery = WorkspaceDiscovery(
        walker=walker,
        reader=reader,
        resolver=resolver,
        max_depth=config.discovery.max_depth,
        max_workers=config.discovery.max_workers,
    )

    if config.monitor.collection_ids:
        source = fixed_collections(config.monitor.collection_ids)
    else:
        source = discovered_collections(walker, root_id, config.discovery.max_depth)

    monitor = StatusMonitor(
        reader=reader,
        dispatcher=dispatcher or LoggingDispatcher(),
        collection_source=source,
        cache=cache,
        normalizer=normalizer,
        interval_seconds=config.monitor.interval_seconds,
        read_timeout_seconds=config.monitor.read_timeout_seconds,
        admin_identity=config.monitor.admin_email,
    )

    return Components(
        config=config,
        root_id=root_id,
        client=client,
        walker=walker,
        reader=reader,
        discovery=discovery,
        monitor=monitor,
    )


async def run_server(components: Components) -> None:
    """Serve the HTTP trigger surface until interrupted."""
    server = TaskwatchServer(
        discovery=components.discovery,
        monitor=components.monitor,
        root_id=components.root_id,
        host=components.config.web.host,
        port=components.config.web.port,
        start_monitor=components.config.monitor.enabled,
    )
    logger.info(f"Serving on {server.get_url()}")
    await server.start()


def main(argv: Optional[List[str]] = None) -> None:
    """Start the web server with the status monitor."""
    parser = argparse.ArgumentParser(prog="taskwatch-server", description="Run the taskwatch server")
    parser.add_argument(
        "-c",
        "--config",
        default=None,
        help="Path to configuration file (default: $TASKWATCH_CONFIG or config.yaml)",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase verbosity")
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
        asyncio.run(run_server(build_components(config)))
    except KeyboardInterrupt:
        logger.info("Shutting down")


if __name__ == "__main__":
    main()
