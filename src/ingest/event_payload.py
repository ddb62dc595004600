"""NDJSON wire codec for chain events.

This module maps the external event feed format onto typed events.
Key spellings follow the feed producer exactly and must not drift.
"""

from __future__ import annotations

import json
from typing import Any, Callable, Mapping

from core.errors import EventParseError
from core.types import (
    Event,
    EventPayload,
    MetadataUpdated,
    MetaPtr,
    OwnerAdded,
    OwnerRemoved,
    ProjectCreated,
    RoundCreated,
)


def parse_event(line: str) -> Event:
    """Decode one NDJSON line into an event.

    Args:
        line: Raw JSON text line.

    Returns:
        Parsed event.

    Raises:
        EventParseError: If the line is not a valid event record.
    """
    try:
        payload = json.loads(line)
    except json.JSONDecodeError as error:
        raise EventParseError(line, f"invalid JSON: {error.msg} at column {error.colno}") from error
    try:
        return event_from_payload(payload)
    except (KeyError, TypeError, ValueError) as error:
        raise EventParseError(line, _describe_error(error)) from error


def event_from_payload(payload: Any) -> Event:
    """Build an event from a decoded JSON object.

    Args:
        payload: Decoded JSON value.

    Returns:
        Parsed event.

    Raises:
        KeyError: If a required key is missing.
        TypeError: If a value has the wrong JSON type.
        ValueError: If the variant tag is unknown or an identifier is empty.
    """
    record = _require_object(payload, "event")
    return Event(
        chain_id=_require_int(record, "chainId"),
        address=_require_str(record, "address", allow_empty=True),
        block_number=_require_int(record, "blockNumber"),
        log_index=_require_int(record, "logIndex"),
        payload=_payload_from_data(_require_object(record["data"], "data")),
    )


def event_to_payload(event: Event) -> dict[str, object]:
    """Serialize an event into its wire payload.

    Args:
        event: Event instance.

    Returns:
        Dictionary payload for JSON encoding.
    """
    return {
        "chainId": event.chain_id,
        "address": event.address,
        "blockNumber": event.block_number,
        "logIndex": event.log_index,
        "data": _data_from_payload(event.payload),
    }


def serialize_event(event: Event) -> str:
    """Encode an event as one NDJSON line without trailing newline."""
    return json.dumps(event_to_payload(event), sort_keys=True)


def _payload_from_data(data: Mapping[str, Any]) -> EventPayload:
    """Dispatch on the ``type`` tag of the ``data`` object."""
    variant = _require_str(data, "type")
    builder = _PAYLOAD_BUILDERS.get(variant)
    if builder is None:
        raise ValueError(f"unknown event type '{variant}'")
    return builder(data)


def _build_project_created(data: Mapping[str, Any]) -> EventPayload:
    return ProjectCreated(project_id=_require_str(data, "projectID"))


def _build_metadata_updated(data: Mapping[str, Any]) -> EventPayload:
    meta_ptr = _require_object(data["metaPtr"], "metaPtr")
    return MetadataUpdated(
        project_id=_require_str(data, "projectID"),
        meta_ptr=MetaPtr(pointer=_require_str(meta_ptr, "pointer")),
    )


def _build_owner_added(data: Mapping[str, Any]) -> EventPayload:
    return OwnerAdded(
        project_id=_require_str(data, "projectID"),
        owner=_require_str(data, "owner"),
    )


def _build_owner_removed(data: Mapping[str, Any]) -> EventPayload:
    return OwnerRemoved(
        project_id=_require_str(data, "projectID"),
        owner=_require_str(data, "owner"),
    )


def _build_round_created(data: Mapping[str, Any]) -> EventPayload:
    return RoundCreated(round_address=_require_str(data, "roundAddress"))


_PAYLOAD_BUILDERS: dict[str, Callable[[Mapping[str, Any]], EventPayload]] = {
    "ProjectCreated": _build_project_created,
    "MetadataUpdated": _build_metadata_updated,
    "OwnerAdded": _build_owner_added,
    "OwnerRemoved": _build_owner_removed,
    "RoundCreated": _build_round_created,
}


def _data_from_payload(payload: EventPayload) -> dict[str, object]:
    """Encode a payload variant into its tagged ``data`` object."""
    if isinstance(payload, ProjectCreated):
        return {"type": "ProjectCreated", "projectID": payload.project_id}
    if isinstance(payload, MetadataUpdated):
        return {
            "type": "MetadataUpdated",
            "projectID": payload.project_id,
            "metaPtr": {"pointer": payload.meta_ptr.pointer},
        }
    if isinstance(payload, OwnerAdded):
        return {"type": "OwnerAdded", "projectID": payload.project_id, "owner": payload.owner}
    if isinstance(payload, OwnerRemoved):
        return {"type": "OwnerRemoved", "projectID": payload.project_id, "owner": payload.owner}
    if isinstance(payload, RoundCreated):
        return {"type": "RoundCreated", "roundAddress": payload.round_address}
    raise TypeError(f"unsupported event payload {type(payload).__name__}")


def _require_object(value: Any, name: str) -> Mapping[str, Any]:
    if not isinstance(value, dict):
        raise TypeError(f"expected JSON object for '{name}'")
    return value


def _require_int(record: Mapping[str, Any], key: str) -> int:
    value = record[key]
    # bool is an int subclass; the feed never encodes numbers as booleans
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"expected integer field '{key}'")
    return value


def _require_str(record: Mapping[str, Any], key: str, allow_empty: bool = False) -> str:
    value = record[key]
    if not isinstance(value, str):
        raise TypeError(f"expected string field '{key}'")
    if not value and not allow_empty:
        raise ValueError(f"empty string field '{key}'")
    return value


def _describe_error(error: Exception) -> str:
    """Render validation errors, naming the missing key for KeyError."""
    if isinstance(error, KeyError):
        return f"missing field {error.args[0]!r}"
    return str(error)
