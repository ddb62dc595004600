"""Unit tests for mutation sinks."""

from __future__ import annotations

import asyncio
import io
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from core.errors import IndexerStoreError
from core.types import OwnerAdded, ProjectCreated
from store.sinks import DatabaseSink, PrintSink, create_database_engine
from tests.event_samples import StaticLookup, build_event
from translate.mutations import event_to_mutation


def _mutation(payload):
    return asyncio.run(event_to_mutation(build_event(payload), StaticLookup()))


def test_print_sink_writes_one_statement_per_line() -> None:
    """Printed output should hold one statement per mutation, in order."""
    stream = io.StringIO()
    sink = PrintSink(stream)
    sink.prepare()

    sink.apply(_mutation(ProjectCreated(project_id="proj-123")))
    sink.apply(_mutation(OwnerAdded(project_id="proj-123", owner="0x123")))
    lines = stream.getvalue().splitlines()

    assert len(lines) == 2
    assert lines[0].startswith("INSERT INTO project")
    assert lines[1].startswith("UPDATE project")


def test_print_sink_defaults_to_stdout(capsys: pytest.CaptureFixture[str]) -> None:
    """Without a stream the sink should print to standard output."""
    PrintSink().apply(_mutation(ProjectCreated(project_id="proj-123")))

    assert capsys.readouterr().out.startswith("INSERT INTO project")


def test_database_sink_executes_statement_in_transaction() -> None:
    """Apply should execute the mutation statement on a fresh transaction."""
    engine = MagicMock()
    connection = engine.begin.return_value.__enter__.return_value
    connection.execute.return_value.rowcount = 1
    mutation = _mutation(ProjectCreated(project_id="proj-123"))

    DatabaseSink(engine).apply(mutation)

    connection.execute.assert_called_once_with(mutation.statement)


def test_database_sink_tolerates_zero_matched_rows() -> None:
    """An update that matches no rows should not raise."""
    engine = MagicMock()
    connection = engine.begin.return_value.__enter__.return_value
    connection.execute.return_value.rowcount = 0

    DatabaseSink(engine).apply(_mutation(OwnerAdded(project_id="missing", owner="0x1")))

    assert connection.execute.call_count == 1


def test_database_sink_wraps_storage_errors() -> None:
    """Storage failures should surface as IndexerStoreError with the SQL."""
    engine = MagicMock()
    connection = engine.begin.return_value.__enter__.return_value
    connection.execute.side_effect = OperationalError("INSERT", {}, Exception("db down"))

    with pytest.raises(IndexerStoreError) as error_info:
        DatabaseSink(engine).apply(_mutation(ProjectCreated(project_id="proj-123")))

    assert "INSERT INTO project" in str(error_info.value)


def test_create_database_engine_rejects_invalid_url() -> None:
    """Malformed URLs should raise IndexerStoreError."""
    with pytest.raises(IndexerStoreError):
        create_database_engine("not a url")
