"""LemonDB CLI entry points.
This module exposes small commands for inspecting and editing a database file.
It maps argparse commands onto SDK calls.
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Sequence

from core.config import LemonOption
from core.errors import LemonError, LemonStorageError
from core.types import SUPPORTED_SERIALIZERS, DumpRule
from store.document_store import LemonDb


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="lemondb", description="LemonDB document store CLI")
    parser.add_argument("--db", required=True, help="Database file path")
    parser.add_argument(
        "--serializer",
        choices=SUPPORTED_SERIALIZERS,
        help="Override LEMONDB_SERIALIZER for this command",
    )
    parser.add_argument("--table", help="Override LEMONDB_TABLE_NAME for this command")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_init_command(subparsers)
    _add_insert_command(subparsers)
    _add_get_command(subparsers)
    subparsers.add_parser("tables", help="List tables with document counts")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the LemonDB CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        option = _build_option(args)
        if args.command == "init":
            return _run_init_command(args, option)
        if args.command == "insert":
            return _run_insert_command(args, option)
        if args.command == "get":
            return _run_get_command(args, option)
        if args.command == "tables":
            return _run_tables_command(args, option)
    except LemonError as error:
        print(f"error: {error}", file=sys.stderr)
        return 1
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_option(args: argparse.Namespace) -> LemonOption:
    """Build options from env with CLI overrides.

    Writes are flushed explicitly once per command, so the dump rule is
    disabled for the session.
    """
    option = LemonOption.from_env()
    if args.serializer:
        option = replace(option, serializer=args.serializer)
    if args.table:
        option = replace(option, table_name=args.table)
    return replace(option, dump_rule=DumpRule.never())


def _run_init_command(args: argparse.Namespace, option: LemonOption) -> int:
    """Handle init command."""
    if Path(args.db).exists() and not args.force:
        raise LemonStorageError(
            f"Database file {args.db} already exists. "
            "Pass --force to replace it with an empty database."
        )
    db = LemonDb.new(args.db, option)
    db.flush()
    print(db.db_path)
    return 0


def _run_insert_command(args: argparse.Namespace, option: LemonOption) -> int:
    """Handle insert command."""
    db = LemonDb.open(args.db, option)
    document_id = db.insert(args.key, _parse_value(args.value))
    db.flush()
    print(document_id)
    return 0


def _run_get_command(args: argparse.Namespace, option: LemonOption) -> int:
    """Handle get command."""
    db = LemonDb.open(args.db, option)
    value = db.get(args.key)
    if value is None:
        print(f"error: key '{args.key}' not found in table '{db.table_name}'", file=sys.stderr)
        return 1
    print(json.dumps(value, ensure_ascii=False, default=str))
    return 0


def _run_tables_command(args: argparse.Namespace, option: LemonOption) -> int:
    """Handle tables command."""
    db = LemonDb.open(args.db, option)
    for name in db.tables():
        print(f"{name}\t{len(db.table(name))}")
    return 0


def _parse_value(raw_value: str) -> Any:
    """Parse a CLI value as a JSON literal, falling back to plain text."""
    try:
        return json.loads(raw_value)
    except json.JSONDecodeError:
        return raw_value


def _add_init_command(subparsers: Any) -> None:
    """Register init subcommand."""
    parser = subparsers.add_parser("init", help="Create an empty database file")
    parser.add_argument(
        "--force",
        action="store_true",
        help="Replace an existing database file",
    )


def _add_insert_command(subparsers: Any) -> None:
    """Register insert subcommand."""
    parser = subparsers.add_parser("insert", help="Insert a key/value document")
    parser.add_argument("key", help="Data key")
    parser.add_argument("value", help="JSON literal or plain text value")


def _add_get_command(subparsers: Any) -> None:
    """Register get subcommand."""
    parser = subparsers.add_parser("get", help="Print the latest value stored under a key")
    parser.add_argument("key", help="Data key")
