#!/usr/bin/env python3
"""
diarysync - Daily notes and reservations for SiYuan

Main entry point for the diarysync command line. It stands in for the
toolbar menu of the SiYuan plugin: listing notebooks, opening today's diary,
moving blocks into it and syncing reservations.
"""

import logging
import sys
import argparse
from typing import Optional

import yaml

from diarysync.config import ConfigManager, ListItemPolicy
from diarysync.diary import block_url
from diarysync.errors import DiarySyncError
from diarysync.models import InsertPosition, Notebook, RenderVariant
from diarysync.reservation import TimeWindow
from diarysync.service import DiaryContext
from diarysync.store import BaseDocumentStore, MockDocumentStore, SiYuanStore


def setup_logging(config: ConfigManager):
    """Configure logging for the application."""
    logging_config = config.get_section("logging")
    level = getattr(logging, str(logging_config.get("level", "INFO")).upper(), logging.INFO)
    format_str = logging_config.get("format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    handlers = [logging.StreamHandler(sys.stdout)]
    if config.log_filename:
        handlers.append(logging.FileHandler(config.log_filename))

    logging.basicConfig(level=level, format=format_str, handlers=handlers)


def create_store(kind: str, config: ConfigManager) -> BaseDocumentStore:
    """
    Build the document store selected on the command line.

    Args:
        kind: "siyuan" or "mock"
        config: Loaded configuration

    Returns:
        The store instance
    """
    if kind == "mock":
        logging.info("Using the in-memory sample store")
        return MockDocumentStore.with_sample_data()
    return SiYuanStore(host=config.store_host, token=config.store_token, timeout=config.store_timeout)


def pick_notebook(context: DiaryContext, key: Optional[str]) -> Notebook:
    if key:
        return context.get_notebook(key)
    notebook = context.default_notebook()
    if notebook is None:
        raise DiarySyncError("No notebook available")
    return notebook


def build_window(name: str, offsets) -> TimeWindow:
    if name == "future":
        return TimeWindow.future()
    if name == "offset":
        return TimeWindow.date_offset(*(offsets or []))
    return TimeWindow.today()


def run_command(args, context: DiaryContext) -> int:
    """Dispatch one sub-command; returns the process exit code."""
    if args.command == "set":
        value = yaml.safe_load(args.value)
        if not context.config.set(args.key, value):
            print(f'Could not set "{args.key}" to {value!r}')
            return 1
        print(f"{args.key} = {value}")
        return 0

    if args.command == "startup":
        notebooks = context.load_notebooks()
        print(f"Loaded {len(notebooks)} notebooks")
        doc_id = context.open_on_start()
        if doc_id:
            print(block_url(doc_id))
        return 0

    context.refresh_notebooks()

    if args.command == "notebooks":
        status = context.diary_status()
        for notebook in context.notebooks:
            marker = "*" if status.get(notebook.id) else " "
            print(f"{marker} {notebook.name:<24} {notebook.daily_note_path}  ({notebook.id})")
        return 0

    if args.command == "open":
        notebook = pick_notebook(context, args.notebook)
        doc_id = context.resolve_diary(notebook)
        print(block_url(doc_id))
        return 0

    if args.command == "move":
        notebook = pick_notebook(context, args.notebook)
        root_id = context.relocate_into_diary(args.block_id, notebook, args.policy)
        print(f"{root_id} moved to {notebook.name}")
        return 0

    if args.command == "sync":
        notebook = pick_notebook(context, args.notebook)
        doc_id = context.resolve_diary(notebook)
        block_id = context.sync_reservations(
            args.variant or context.config.get("reservation.variant", "embed"),
            args.position or context.config.get("reservation.position", "top"),
            build_window(args.window, args.offset),
            doc_id,
        )
        print(f"Reservations written to {block_url(block_id)}")
        return 0

    return 2


def parse_arguments(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="diarysync - Daily notes and reservations for SiYuan",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py notebooks                          # List notebooks and today's diaries
  python main.py open Work                          # Open (create) today's diary of "Work"
  python main.py move 20240101120000-abcdefg        # Move a block into the default diary
  python main.py sync --variant link --window future
  python main.py sync --window offset --offset "-7 days"
  python main.py --store mock notebooks             # Try it without SiYuan
        """
    )

    parser.add_argument("--config", default="diarysync.yaml", help="Configuration file (default: diarysync.yaml)")
    parser.add_argument("--store", choices=["siyuan", "mock"], default="siyuan",
                        help="Document store to use (default: siyuan)")
    parser.add_argument("--version", action="version", version="diarysync 0.1.0")

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("notebooks", help="List notebooks with their daily note path")
    commands.add_parser("startup", help="Discover notebooks and open the default diary")

    open_parser = commands.add_parser("open", help="Resolve today's diary of a notebook")
    open_parser.add_argument("notebook", nargs="?", help="Notebook id or name")

    move_parser = commands.add_parser("move", help="Move a block into today's diary")
    move_parser.add_argument("block_id")
    move_parser.add_argument("--notebook", help="Notebook id or name")
    move_parser.add_argument("--policy", choices=[policy.value for policy in ListItemPolicy],
                             help="List item policy (default: from config)")

    sync_parser = commands.add_parser("sync", help="Write reservations into today's diary")
    sync_parser.add_argument("--notebook", help="Notebook id or name")
    sync_parser.add_argument("--variant", choices=[variant.value for variant in RenderVariant] + ["ref"])
    sync_parser.add_argument("--position", choices=[position.value for position in InsertPosition])
    sync_parser.add_argument("--window", choices=["today", "future", "offset"], default="today")
    sync_parser.add_argument("--offset", nargs="+", help='Date modifiers for --window offset, e.g. "-7 days"')

    set_parser = commands.add_parser("set", help="Update and save a setting")
    set_parser.add_argument("key", help='Dotted key, e.g. "move.list_item_policy"')
    set_parser.add_argument("value", help="New value (YAML scalar)")

    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point."""
    args = parse_arguments(argv)
    config = ConfigManager(args.config)
    setup_logging(config)

    store = create_store(args.store, config)
    context = DiaryContext(store, config)
    try:
        exit_code = run_command(args, context)
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        exit_code = 130
    except (DiarySyncError, ValueError) as e:
        logging.error(f"{args.command} failed: {e}")
        print(f"\n{args.command} failed: {e}")
        exit_code = 1
    finally:
        if isinstance(store, SiYuanStore):
            store.close()

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
