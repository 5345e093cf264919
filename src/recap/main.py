#!/usr/bin/env python
"""Command line entry point for recap."""
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError

from recap import __version__
from recap.config import config
from recap.exceptions import ConfigurationError, RecapError
from recap.models.schema import Item
from recap.observability import configure_logging
from recap.services.recap_service import RecapService
from recap.storage import open_store
from recap.utils import parse_tags

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="recap",
        description="Tag-indexed note store",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--database-path",
        help="SQLite database file path",
        type=str,
        default=None,
    )
    parser.add_argument(
        "--log-level",
        help="Logging level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
    )
    parser.add_argument(
        "--log-dir",
        help="Directory for rotating log files",
        type=str,
        default=None,
    )

    commands = parser.add_subparsers(dest="command", metavar="COMMAND")
    commands.required = True

    create = commands.add_parser("create", help="Create an item")
    create.add_argument("title")
    create.add_argument("content")
    create.add_argument("tags", help="Comma-separated tags, e.g. 'work, ideas'")

    update = commands.add_parser("update", help="Update an item by its current title")
    update.add_argument("target", help="Current title of the item (or its ID with --id)")
    update.add_argument("title", help="New title")
    update.add_argument("content", help="New content")
    update.add_argument("tags", help="New comma-separated tags, replacing the old ones")
    update.add_argument("--id", action="store_true", help="Treat TARGET as an item ID")

    read = commands.add_parser("read", help="List items carrying any of the tags")
    read.add_argument("tags", help="Comma-separated tags")

    commands.add_parser("tags", help="List all tags")

    trash = commands.add_parser("trash", help="Move an item to the trash")
    trash.add_argument("target", help="Title of the item (or its ID with --id)")
    trash.add_argument("--id", action="store_true", help="Treat TARGET as an item ID")

    commands.add_parser("trashed", help="List trashed items")

    return parser


def update_config(args: argparse.Namespace) -> None:
    """Update the global config with command line arguments."""
    try:
        if args.database_path:
            config.database_path = Path(args.database_path)
        if args.log_level:
            config.log_level = args.log_level
        if args.log_dir:
            config.log_dir = Path(args.log_dir)
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def _item_id(target: str) -> int:
    try:
        return int(target)
    except ValueError:
        raise ConfigurationError(f"Not an item ID: {target!r}", config_key="id") from None


def format_items(items: Sequence[Item]) -> List[str]:
    """Render items as a pipe-delimited table."""
    if not items:
        return ["No results found"]
    lines = ["|Title\t|Content\t|Tags\t|"]
    for item in items:
        lines.append(f"|{item.title}\t|{item.content}\t|{', '.join(item.tags)}|")
    return lines


def run_command(service: RecapService, args: argparse.Namespace) -> List[str]:
    """Execute one parsed command and return the lines to print."""
    if args.command == "create":
        item = service.create_item(args.title, args.content, parse_tags(args.tags))
        return [f"Created item {item.id}"]

    if args.command == "update":
        tags = parse_tags(args.tags)
        if args.id:
            item = service.update_item(_item_id(args.target), args.title, args.content, tags)
        else:
            item = service.update_item_by_title(args.target, args.title, args.content, tags)
        return [f"Updated item {item.id}"]

    if args.command == "read":
        return format_items(service.find_by_tags(parse_tags(args.tags)))

    if args.command == "tags":
        return ["---Tags---", *service.list_tags()]

    if args.command == "trash":
        if args.id:
            trashed = service.trash_item(_item_id(args.target))
        else:
            trashed = service.trash_item_by_title(args.target)
        return [f"Trashed '{trashed.title}'"]

    if args.command == "trashed":
        entries = service.list_trash()
        if not entries:
            return ["Trash is empty"]
        return [
            f"{entry.trashed_at.isoformat()}\t{entry.title}\t{entry.tags}"
            for entry in entries
        ]

    raise ConfigurationError(f"Unknown command: {args.command}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the recap command line. Returns the process exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        update_config(args)
    except ConfigurationError as e:
        print(e.message, file=sys.stderr)
        return 1

    log_level = logging.getLevelName(config.log_level)
    try:
        configure_logging(level=log_level, log_dir=config.log_dir, console=True)
    except OSError as e:
        # Fall back to basic console logging if file logging fails
        logging.basicConfig(level=log_level)
        logger.warning(f"Failed to configure file logging: {e}")

    database_path = config.get_absolute_path(config.database_path)
    logger.info(f"Using database: {database_path}")

    try:
        with open_store(database_path) as store:
            for line in run_command(RecapService(store), args):
                print(line)
    except RecapError as e:
        logger.debug("Command failed", exc_info=True)
        print(e.message, file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
