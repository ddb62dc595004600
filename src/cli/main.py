"""Indexer CLI entry points.

This module exposes commands for indexing an event feed and printing
the target schema. It maps argparse commands onto SDK calls.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
from typing import Any, Sequence

from cli.index_command import add_index_command, run_index_command
from core.config import IndexerConfig
from store.schema import schema_statements


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="grants-indexer",
        description="Translate chain events into database mutations",
    )
    parser.add_argument(
        "--checkpoint-dir",
        help="Override INDEXER_CHECKPOINT_DIR for this command",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    add_index_command(subparsers)
    _add_schema_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the indexer CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    config = _build_config(args.checkpoint_dir)
    if args.command == "index":
        return run_index_command(config, args)
    if args.command == "schema":
        return _run_schema_command()
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_config(checkpoint_dir: str | None) -> IndexerConfig:
    """Build runtime config with optional checkpoint-dir override."""
    config = IndexerConfig.from_env()
    if checkpoint_dir:
        config = replace(config, checkpoint_dir=Path(checkpoint_dir).expanduser().resolve())
    return config


def _run_schema_command() -> int:
    """Print the ``CREATE TABLE`` statements, one per statement."""
    for statement in schema_statements():
        print(f"{statement};")
    return 0


def _add_schema_command(subparsers: Any) -> None:
    """Register schema subcommand."""
    subparsers.add_parser("schema", help="Print the target database schema")
