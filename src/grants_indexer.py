"""Public SDK surface for the indexer.

This module provides a stable import path for library users.
It re-exports the event model, sources, translator, and sinks.
"""

from __future__ import annotations

from core.config import IndexerConfig
from core.errors import (
    EventParseError,
    IndexerError,
    IndexerSourceError,
    IndexerStoreError,
    MetadataLookupError,
)
from core.types import (
    Event,
    EventPayload,
    IndexerRunOptions,
    IndexerRunResult,
    MetadataUpdated,
    MetaPtr,
    Mutation,
    OwnerAdded,
    OwnerRemoved,
    ProjectCreated,
    RoundCreated,
)
from ingest.checkpoint_store import IndexerCheckpointStore
from ingest.event_payload import parse_event, serialize_event
from ingest.event_source import (
    events_from_lines,
    events_from_list,
    events_from_ndjson_file,
    events_from_ndjson_stdin,
)
from ingest.pipeline import run_indexer
from lookup.base import MetadataLookup
from lookup.ipfs_gateway import IpfsGatewayLookup
from store.schema import create_schema, schema_statements
from store.sinks import DatabaseSink, MutationSink, PrintSink, create_database_engine
from translate.mutations import event_to_mutation

__all__ = [
    "DatabaseSink",
    "Event",
    "EventParseError",
    "EventPayload",
    "IndexerCheckpointStore",
    "IndexerConfig",
    "IndexerError",
    "IndexerRunOptions",
    "IndexerRunResult",
    "IndexerSourceError",
    "IndexerStoreError",
    "IpfsGatewayLookup",
    "MetaPtr",
    "MetadataLookup",
    "MetadataLookupError",
    "MetadataUpdated",
    "Mutation",
    "MutationSink",
    "OwnerAdded",
    "OwnerRemoved",
    "PrintSink",
    "ProjectCreated",
    "RoundCreated",
    "create_database_engine",
    "create_schema",
    "event_to_mutation",
    "events_from_lines",
    "events_from_list",
    "events_from_ndjson_file",
    "events_from_ndjson_stdin",
    "parse_event",
    "run_indexer",
    "schema_statements",
    "serialize_event",
]
