"""Indexing pipeline orchestration.

This module pulls ``(event, index)`` pairs from a source, translates
each event into a mutation, and hands it to a sink, strictly in feed
order. The next event is only pulled after the previous mutation was
consumed, so a slow sink pauses extraction.
"""

from __future__ import annotations

from typing import Iterable

from core.constants import LOOKUP_FAILURE_SKIP, SUPPORTED_LOOKUP_FAILURE_POLICIES
from core.errors import IndexerConfigError, MetadataLookupError
from core.logging_config import get_logger
from core.types import Event, IndexerRunOptions, IndexerRunResult
from ingest.checkpoint_store import IndexerCheckpointStore
from lookup.base import MetadataLookup
from store.sinks import MutationSink
from translate.mutations import event_to_mutation

_LOGGER = get_logger(__name__)


class IndexerPipelineRunner:
    """Stateful runner for one pass over an event stream."""

    def __init__(
        self,
        lookup: MetadataLookup,
        sink: MutationSink,
        options: IndexerRunOptions,
        checkpoint: IndexerCheckpointStore | None = None,
    ) -> None:
        if options.on_lookup_failure not in SUPPORTED_LOOKUP_FAILURE_POLICIES:
            raise IndexerConfigError(
                f"Unsupported lookup failure policy '{options.on_lookup_failure}'. "
                f"Use one of {SUPPORTED_LOOKUP_FAILURE_POLICIES}."
            )
        self._lookup = lookup
        self._sink = sink
        self._options = options
        self._checkpoint = checkpoint
        self._events_processed = 0
        self._mutations_applied = 0
        self._events_skipped = 0
        self._last_index: int | None = None

    async def run(self, events: Iterable[tuple[Event, int]]) -> IndexerRunResult:
        """Drive all events through translation into the sink.

        The event iterator is closed on every exit path.

        Raises:
            MetadataLookupError: If a lookup fails under the abort policy.
            IndexerSourceError: If the input stream fails.
            IndexerStoreError: If the sink cannot apply a mutation.
        """
        try:
            self._sink.prepare()
            for event, index in events:
                await self._process_event(event, index)
        finally:
            _close_events(events)
        result = IndexerRunResult(
            events_processed=self._events_processed,
            mutations_applied=self._mutations_applied,
            events_skipped=self._events_skipped,
            last_index=self._last_index,
        )
        _log_run_completion(self._options, result)
        return result

    async def _process_event(self, event: Event, index: int) -> None:
        self._events_processed += 1
        try:
            mutation = await event_to_mutation(event, self._lookup)
        except MetadataLookupError as error:
            if self._options.on_lookup_failure != LOOKUP_FAILURE_SKIP:
                raise
            _LOGGER.warning(
                "event_skipped_after_lookup_failure",
                index=index,
                chain_id=event.chain_id,
                block_number=event.block_number,
                log_index=event.log_index,
                pointer=error.pointer,
                error=str(error),
            )
            self._events_skipped += 1
            self._mark_done(index)
            return
        self._sink.apply(mutation)
        self._mutations_applied += 1
        self._mark_done(index)

    def _mark_done(self, index: int) -> None:
        self._last_index = index
        if self._checkpoint is not None:
            self._checkpoint.record(index)


async def run_indexer(
    events: Iterable[tuple[Event, int]],
    lookup: MetadataLookup,
    sink: MutationSink,
    options: IndexerRunOptions | None = None,
    checkpoint: IndexerCheckpointStore | None = None,
) -> IndexerRunResult:
    """Translate an event stream into sink mutations.

    Args:
        events: Ordered ``(event, index)`` pairs from an event source.
        lookup: Metadata lookup for ``MetadataUpdated`` events.
        sink: Mutation consumer.
        options: Run options; defaults abort on lookup failure.
        checkpoint: Optional store recording the last handled index.

    Returns:
        Run summary.
    """
    runner = IndexerPipelineRunner(lookup, sink, options or IndexerRunOptions(), checkpoint)
    return await runner.run(events)


def resolve_start_offset(
    options: IndexerRunOptions,
    checkpoint: IndexerCheckpointStore | None,
) -> int:
    """Return the origin index a run should start from."""
    if not options.resume or checkpoint is None:
        return options.start
    return max(options.start, checkpoint.resume_offset())


def _close_events(events: Iterable[tuple[Event, int]]) -> None:
    """Close generator-backed sources so held handles are released."""
    close = getattr(events, "close", None)
    if callable(close):
        close()


def _log_run_completion(options: IndexerRunOptions, result: IndexerRunResult) -> None:
    """Log pipeline completion with contextual metadata."""
    _LOGGER.info(
        "indexer_run_completed",
        stream_name=options.stream_name,
        start=options.start,
        events_processed=result.events_processed,
        mutations_applied=result.mutations_applied,
        events_skipped=result.events_skipped,
        last_index=result.last_index,
        on_lookup_failure=options.on_lookup_failure,
    )
