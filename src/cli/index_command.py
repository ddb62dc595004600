"""Index command wiring for the indexer CLI."""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Any

from core.config import IndexerConfig
from core.constants import (
    DEFAULT_STREAM_NAME,
    LOOKUP_FAILURE_ABORT,
    SUPPORTED_LOOKUP_FAILURE_POLICIES,
)
from core.errors import IndexerConfigError, IndexerError
from core.types import IndexerRunOptions, IndexerRunResult
from ingest.checkpoint_store import IndexerCheckpointStore
from ingest.event_source import events_from_ndjson_stdin
from ingest.pipeline import resolve_start_offset, run_indexer
from lookup.ipfs_gateway import IpfsGatewayLookup
from store.sinks import DatabaseSink, MutationSink, PrintSink, create_database_engine


def add_index_command(subparsers: Any) -> None:
    """Register index subcommand."""
    parser = subparsers.add_parser(
        "index",
        help="Translate NDJSON events from stdin into SQL mutations",
    )
    parser.add_argument(
        "--show-warnings",
        action="store_true",
        help="Display warnings for parse errors",
    )
    parser.add_argument(
        "--start",
        type=int,
        default=0,
        help="Zero-based input line to start from",
    )
    parser.add_argument(
        "--apply",
        action="store_true",
        help="Apply mutations to the database instead of printing them",
    )
    parser.add_argument("--database-url", help="Override INDEXER_DATABASE_URL")
    parser.add_argument(
        "--resume",
        action="store_true",
        help="Resume after the last checkpointed line and record progress",
    )
    parser.add_argument(
        "--stream-name",
        default=DEFAULT_STREAM_NAME,
        help="Checkpoint key for this input feed",
    )
    parser.add_argument(
        "--on-lookup-failure",
        choices=SUPPORTED_LOOKUP_FAILURE_POLICIES,
        default=LOOKUP_FAILURE_ABORT,
        help="Abort the run or skip the event when a metadata lookup fails",
    )


def run_index_command(config: IndexerConfig, args: argparse.Namespace) -> int:
    """Execute the index workflow over standard input."""
    if args.start < 0:
        print("error=--start must be zero or greater", file=sys.stderr)
        return 2
    options = IndexerRunOptions(
        start=args.start,
        warn_on_unparseable_items=args.show_warnings,
        on_lookup_failure=args.on_lookup_failure,
        stream_name=args.stream_name,
        resume=args.resume,
    )
    try:
        sink = _build_sink(config, args)
        asyncio.run(_index_stdin(config, options, sink))
    except IndexerError as error:
        print(f"error={error}", file=sys.stderr)
        return 1
    return 0


async def _index_stdin(
    config: IndexerConfig,
    options: IndexerRunOptions,
    sink: MutationSink,
) -> IndexerRunResult:
    checkpoint = (
        IndexerCheckpointStore(config.checkpoint_dir, options.stream_name)
        if options.resume
        else None
    )
    start = resolve_start_offset(options, checkpoint)
    events = events_from_ndjson_stdin(start, options.warn_on_unparseable_items)
    async with _build_lookup(config) as lookup:
        return await run_indexer(events, lookup, sink, options, checkpoint)


def _build_lookup(config: IndexerConfig) -> IpfsGatewayLookup:
    return IpfsGatewayLookup.from_config(config)


def _build_sink(config: IndexerConfig, args: argparse.Namespace) -> MutationSink:
    """Pick the printing or database sink.

    Raises:
        IndexerConfigError: If ``--apply`` is given without a database URL.
    """
    if not args.apply:
        return PrintSink()
    database_url = args.database_url or config.database_url
    if not database_url:
        raise IndexerConfigError(
            "--apply requires a database URL. "
            "Pass --database-url or set INDEXER_DATABASE_URL."
        )
    return DatabaseSink(create_database_engine(database_url))
