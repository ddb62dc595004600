"""Mutation sinks.

This module provides the consumers that receive generated mutations:
one prints escaped SQL, one applies statements to a live database.
"""

from __future__ import annotations

import sys
from typing import Protocol, TextIO

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from core.errors import IndexerStoreError
from core.logging_config import get_logger
from core.types import Mutation
from store.schema import create_schema

_LOGGER = get_logger(__name__)


class MutationSink(Protocol):
    """Consumer of translated mutations, called once per event in order."""

    def prepare(self) -> None:
        """Run one-time setup before the first mutation."""
        ...

    def apply(self, mutation: Mutation) -> None:
        """Consume one mutation."""
        ...


class PrintSink:
    """Write one SQL statement per line."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    def prepare(self) -> None:
        """Nothing to set up for printed output."""

    def apply(self, mutation: Mutation) -> None:
        """Print the rendered statement."""
        stream = self._stream or sys.stdout
        print(mutation.sql, file=stream, flush=True)


class DatabaseSink:
    """Apply mutations to a database, one transaction per mutation."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def prepare(self) -> None:
        """Create the schema if it is missing.

        Raises:
            IndexerStoreError: If schema creation fails.
        """
        try:
            with self._engine.begin() as connection:
                create_schema(connection)
        except SQLAlchemyError as error:
            raise IndexerStoreError(
                f"Failed to create indexer schema: {error}. "
                "Check database connectivity and permissions."
            ) from error

    def apply(self, mutation: Mutation) -> None:
        """Execute one mutation in its own transaction.

        Zero matched rows is not an error at this boundary.

        Raises:
            IndexerStoreError: If the statement fails.
        """
        try:
            with self._engine.begin() as connection:
                result = connection.execute(mutation.statement)
        except SQLAlchemyError as error:
            raise IndexerStoreError(
                f"Failed to apply mutation: {error}. Statement: {mutation.sql}"
            ) from error
        if result.rowcount == 0:
            _LOGGER.debug("mutation_matched_no_rows", sql=mutation.sql)


def create_database_engine(database_url: str) -> Engine:
    """Create a SQLAlchemy engine for the target store.

    Raises:
        IndexerStoreError: If the URL is invalid or the driver is missing.
    """
    try:
        return create_engine(database_url, future=True)
    except (SQLAlchemyError, ImportError) as error:
        raise IndexerStoreError(
            f"Failed to create database engine: {error}. "
            "Provide a valid SQLAlchemy URL, e.g. postgresql+psycopg2://user@host/db."
        ) from error
