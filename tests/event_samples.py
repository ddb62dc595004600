"""Shared sample events and lookup fakes for tests."""

from __future__ import annotations

from core.errors import MetadataLookupError
from core.types import (
    Event,
    MetadataUpdated,
    MetaPtr,
    OwnerAdded,
    OwnerRemoved,
    ProjectCreated,
    RoundCreated,
)


class StaticLookup:
    """Lookup returning one fixed document and recording pointers."""

    def __init__(self, document: str = '{"foo":"bar"}') -> None:
        self.document = document
        self.pointers: list[str] = []

    async def resolve(self, pointer: str) -> str:
        self.pointers.append(pointer)
        return self.document


class FailingLookup:
    """Lookup that always fails."""

    async def resolve(self, pointer: str) -> str:
        raise MetadataLookupError(pointer, f"gateway unavailable for {pointer}")


def build_event(payload, block_number: int = 4242, log_index: int = 1) -> Event:
    """Wrap a payload in an event on chain 1."""
    return Event(
        chain_id=1,
        address="0x123",
        block_number=block_number,
        log_index=log_index,
        payload=payload,
    )


def sample_events() -> list[Event]:
    """Three events at blocks 10, 20, 30."""
    return [
        build_event(ProjectCreated(project_id="proj-123"), block_number=10, log_index=0),
        build_event(
            MetadataUpdated(project_id="proj-123", meta_ptr=MetaPtr(pointer="123")),
            block_number=20,
        ),
        build_event(OwnerAdded(project_id="proj-123", owner="0x123"), block_number=30),
    ]


def all_variant_events() -> list[Event]:
    """One event per payload variant, in feed order."""
    return [
        build_event(ProjectCreated(project_id="proj-123"), log_index=0),
        build_event(MetadataUpdated(project_id="proj-123", meta_ptr=MetaPtr(pointer="123"))),
        build_event(OwnerAdded(project_id="proj-123", owner="0x123"), log_index=2),
        build_event(OwnerRemoved(project_id="proj-123", owner="0x123"), log_index=3),
        build_event(RoundCreated(round_address="0x456"), log_index=4),
    ]
