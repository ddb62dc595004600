"""Translate chain events into database mutations.

Every event variant yields exactly one statement. All values travel
as bound parameters; rendering to SQL text escapes them through the
PostgreSQL dialect. Statements target rows by key columns only and
do not check whether a row exists.
"""

from __future__ import annotations

import json

from sqlalchemy import Text, cast, func, insert, literal, update
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql.expression import ColumnElement, Insert, Update

from core.errors import MetadataLookupError
from core.types import (
    Event,
    MetadataUpdated,
    Mutation,
    OwnerAdded,
    OwnerRemoved,
    ProjectCreated,
    RoundCreated,
)
from lookup.base import MetadataLookup
from store.schema import PROJECT_TABLE, ROUND_TABLE


async def event_to_mutation(event: Event, lookup: MetadataLookup) -> Mutation:
    """Build the mutation for one event.

    Args:
        event: Decoded event.
        lookup: Metadata lookup, awaited only for ``MetadataUpdated``.

    Returns:
        Mutation describing the required change.

    Raises:
        MetadataLookupError: If the metadata pointer cannot be resolved.
    """
    payload = event.payload
    if isinstance(payload, ProjectCreated):
        return Mutation(_insert_project(event, payload))
    if isinstance(payload, MetadataUpdated):
        document = await lookup.resolve(payload.meta_ptr.pointer)
        return Mutation(_update_metadata(event, payload, document))
    if isinstance(payload, OwnerAdded):
        return Mutation(_append_owner(event, payload))
    if isinstance(payload, OwnerRemoved):
        return Mutation(_remove_owner(event, payload))
    if isinstance(payload, RoundCreated):
        return Mutation(_insert_round(event, payload))
    raise TypeError(f"unsupported event payload {type(payload).__name__}")


def _insert_project(event: Event, payload: ProjectCreated) -> Insert:
    return insert(PROJECT_TABLE).values(
        chain_id=event.chain_id,
        project_id=payload.project_id,
        created_at_block=event.block_number,
    )


def _update_metadata(event: Event, payload: MetadataUpdated, document: str) -> Update:
    """Set ``metadata`` to the resolved document text.

    The document is validated, never re-encoded. Raw line breaks can only
    sit in JSON whitespace, so folding them to spaces keeps the document
    intact and the rendered statement on one line.

    Raises:
        MetadataLookupError: If the document is not JSON.
    """
    try:
        json.loads(document, parse_constant=_reject_constant)
    except ValueError as error:
        raise MetadataLookupError(
            payload.meta_ptr.pointer,
            f"Metadata for pointer '{payload.meta_ptr.pointer}' is not a JSON document: "
            f"{error}.",
        ) from error
    single_line = document.replace("\r", " ").replace("\n", " ")
    return _update_project(event, payload.project_id).values(
        metadata=cast(literal(single_line, Text), JSONB)
    )


def _reject_constant(name: str) -> None:
    raise ValueError(f"{name} is not valid JSON")


def _append_owner(event: Event, payload: OwnerAdded) -> Update:
    # Appends unconditionally; a repeated OwnerAdded stores the owner twice.
    owners = func.coalesce(PROJECT_TABLE.c.owners, _jsonb_value([]))
    return _update_project(event, payload.project_id).values(
        owners=owners.op("||", return_type=JSONB)(_jsonb_value([payload.owner]))
    )


def _remove_owner(event: Event, payload: OwnerRemoved) -> Update:
    owners = PROJECT_TABLE.c.owners
    return _update_project(event, payload.project_id).values(
        owners=owners.op("-", return_type=JSONB)(cast(literal(payload.owner, Text), Text))
    )


def _insert_round(event: Event, payload: RoundCreated) -> Insert:
    return insert(ROUND_TABLE).values(
        chain_id=event.chain_id,
        round_address=payload.round_address,
        created_at_block=event.block_number,
    )


def _update_project(event: Event, project_id: str) -> Update:
    return (
        update(PROJECT_TABLE)
        .where(PROJECT_TABLE.c.chain_id == event.chain_id)
        .where(PROJECT_TABLE.c.project_id == project_id)
    )


def _jsonb_value(value: object) -> ColumnElement:
    """Bind a Python value as JSON text cast to JSONB."""
    return cast(literal(json.dumps(value), Text), JSONB)
