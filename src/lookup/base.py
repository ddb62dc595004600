"""Metadata lookup capability used by the translator."""

from __future__ import annotations

from typing import Protocol


class MetadataLookup(Protocol):
    """Resolve a content pointer to its document text."""

    async def resolve(self, pointer: str) -> str:
        """Return the document for ``pointer``.

        Raises:
            MetadataLookupError: If the document cannot be fetched.
        """
        ...
