"""Indexer exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class IndexerError(Exception):
    """Base exception for all indexer failures."""


class IndexerConfigError(IndexerError):
    """Raised for invalid runtime configuration."""


class EventParseError(IndexerError):
    """Raised when one line of the event feed cannot be decoded.

    Attributes:
        raw_text: Offending line content, unmodified.
        cause: Underlying decode or validation failure message.
    """

    def __init__(self, raw_text: str, cause: str) -> None:
        super().__init__(cause)
        self.raw_text = raw_text
        self.cause = cause


class MetadataLookupError(IndexerError):
    """Raised when a metadata pointer cannot be resolved to a document."""

    def __init__(self, pointer: str, message: str) -> None:
        super().__init__(message)
        self.pointer = pointer


class IndexerSourceError(IndexerError):
    """Raised for I/O failures on the event input stream."""


class IndexerStoreError(IndexerError):
    """Raised when a mutation cannot be applied to the store."""


class IndexerCheckpointError(IndexerError):
    """Raised for unreadable or invalid resume checkpoints."""
