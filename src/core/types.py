"""Shared typed models.

This module defines immutable data models used by the event codec,
event sources, translator, sinks, and pipeline to keep interfaces
explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from sqlalchemy.dialects import postgresql
from sqlalchemy.sql.base import Executable

from core.constants import DEFAULT_STREAM_NAME, LOOKUP_FAILURE_ABORT


@dataclass(frozen=True)
class MetaPtr:
    """Content pointer to an off-chain metadata document.

    Attributes:
        pointer: Opaque content identifier, e.g. an IPFS CID.
    """

    pointer: str


@dataclass(frozen=True)
class ProjectCreated:
    """A project was registered on chain."""

    project_id: str


@dataclass(frozen=True)
class MetadataUpdated:
    """A project's metadata pointer changed."""

    project_id: str
    meta_ptr: MetaPtr


@dataclass(frozen=True)
class OwnerAdded:
    """An owner was added to a project."""

    project_id: str
    owner: str


@dataclass(frozen=True)
class OwnerRemoved:
    """An owner was removed from a project."""

    project_id: str
    owner: str


@dataclass(frozen=True)
class RoundCreated:
    """A funding round contract was deployed."""

    round_address: str


EventPayload = Union[ProjectCreated, MetadataUpdated, OwnerAdded, OwnerRemoved, RoundCreated]


@dataclass(frozen=True)
class Event:
    """One chain event decoded from the feed.

    Attributes:
        chain_id: Numeric chain identifier.
        address: Emitting contract address, passed through verbatim.
        block_number: Block the event was emitted in.
        log_index: Position of the log within its block.
        payload: Variant-specific event data.
    """

    chain_id: int
    address: str
    block_number: int
    log_index: int
    payload: EventPayload


@dataclass(frozen=True)
class Mutation:
    """One self-contained database change derived from one event.

    Attributes:
        statement: SQLAlchemy Core statement with bound parameters.
    """

    statement: Executable

    @property
    def sql(self) -> str:
        """Render the statement as escaped PostgreSQL with inlined values."""
        # named paramstyle keeps literal percent signs from being doubled
        compiled = self.statement.compile(
            dialect=postgresql.dialect(paramstyle="named"),
            compile_kwargs={"literal_binds": True},
        )
        return str(compiled)


@dataclass(frozen=True)
class IndexerRunOptions:
    """Options for one pipeline run.

    Attributes:
        start: Zero-based origin position to start from.
        warn_on_unparseable_items: Emit a diagnostic per dropped line.
        on_lookup_failure: ``abort`` re-raises, ``skip`` drops the event.
        stream_name: Checkpoint key for the consumed feed.
        resume: Continue after the last checkpointed index.
    """

    start: int = 0
    warn_on_unparseable_items: bool = False
    on_lookup_failure: str = LOOKUP_FAILURE_ABORT
    stream_name: str = DEFAULT_STREAM_NAME
    resume: bool = False


@dataclass(frozen=True)
class IndexerRunResult:
    """Summary of one pipeline run.

    Attributes:
        events_processed: Events pulled from the source.
        mutations_applied: Mutations handed to the sink.
        events_skipped: Events dropped after a lookup failure.
        last_index: Origin index of the last processed event.
    """

    events_processed: int
    mutations_applied: int
    events_skipped: int
    last_index: int | None
