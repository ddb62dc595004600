"""Unit tests for event-to-mutation translation."""

from __future__ import annotations

import asyncio
import json

import pytest
from sqlalchemy.dialects import postgresql

from core.errors import MetadataLookupError
from core.types import (
    Mutation,
    MetadataUpdated,
    MetaPtr,
    OwnerAdded,
    OwnerRemoved,
    ProjectCreated,
    RoundCreated,
)
from tests.event_samples import FailingLookup, StaticLookup, build_event
from translate.mutations import event_to_mutation


def _translate(payload, lookup=None) -> Mutation:
    return asyncio.run(event_to_mutation(build_event(payload), lookup or StaticLookup()))


def _bound_values(mutation: Mutation) -> list[object]:
    compiled = mutation.statement.compile(dialect=postgresql.dialect())
    return list(compiled.params.values())


def test_project_created_inserts_project_row() -> None:
    """ProjectCreated should insert the key columns and creation block."""
    mutation = _translate(ProjectCreated(project_id="proj-123"))

    assert mutation.sql == (
        "INSERT INTO project (chain_id, project_id, created_at_block) "
        "VALUES (1, 'proj-123', 4242)"
    )


def test_round_created_inserts_round_row() -> None:
    """RoundCreated should insert into the round table by chain and address."""
    mutation = _translate(RoundCreated(round_address="0x123"))
    compiled = mutation.statement.compile(dialect=postgresql.dialect())

    assert mutation.statement.table.name == "round"
    assert compiled.params == {"chain_id": 1, "round_address": "0x123", "created_at_block": 4242}


def test_metadata_updated_sets_resolved_document() -> None:
    """MetadataUpdated should write the looked-up document for the event's key."""
    lookup = StaticLookup('{"foo":"bar"}')

    mutation = _translate(
        MetadataUpdated(project_id="proj-123", meta_ptr=MetaPtr(pointer="123")), lookup
    )
    values = _bound_values(mutation)
    documents = [json.loads(value) for value in values if isinstance(value, str) and "{" in value]

    assert lookup.pointers == ["123"]
    assert documents == [{"foo": "bar"}]
    assert 1 in values and "proj-123" in values
    assert mutation.sql.startswith("UPDATE project SET metadata=")
    assert "project.project_id = 'proj-123'" in mutation.sql


def test_metadata_updated_propagates_lookup_failure() -> None:
    """A failed lookup should fail the translation without a mutation."""
    with pytest.raises(MetadataLookupError):
        _translate(
            MetadataUpdated(project_id="proj-123", meta_ptr=MetaPtr(pointer="123")),
            FailingLookup(),
        )


def test_metadata_updated_rejects_non_json_document() -> None:
    """A resolved document that is not JSON should fail as a lookup error."""
    with pytest.raises(MetadataLookupError) as error_info:
        _translate(
            MetadataUpdated(project_id="proj-123", meta_ptr=MetaPtr(pointer="cid-1")),
            StaticLookup("<html>gateway timeout</html>"),
        )

    assert error_info.value.pointer == "cid-1"


def test_metadata_updated_stores_document_text_unchanged() -> None:
    """Number spelling in the document should survive translation as written."""
    mutation = _translate(
        MetadataUpdated(project_id="proj-123", meta_ptr=MetaPtr(pointer="123")),
        StaticLookup('{"n": 1e400, "price": 0.10000000000000000001}'),
    )

    assert "CAST('{\"n\": 1e400, \"price\": 0.10000000000000000001}' AS JSONB)" in mutation.sql
    assert "Infinity" not in mutation.sql


def test_metadata_updated_keeps_statement_on_one_line() -> None:
    """Line breaks between JSON tokens should fold to spaces."""
    mutation = _translate(
        MetadataUpdated(project_id="proj-123", meta_ptr=MetaPtr(pointer="123")),
        StaticLookup('{\r\n  "title": "Project"\n}\n'),
    )

    values = _bound_values(mutation)
    documents = [json.loads(value) for value in values if isinstance(value, str) and "{" in value]

    assert "\n" not in mutation.sql and "\r" not in mutation.sql
    assert documents == [{"title": "Project"}]


def test_metadata_updated_rejects_non_standard_constants() -> None:
    """NaN is not JSON and should fail as a lookup error."""
    with pytest.raises(MetadataLookupError):
        _translate(
            MetadataUpdated(project_id="proj-123", meta_ptr=MetaPtr(pointer="cid-1")),
            StaticLookup('{"score": NaN}'),
        )


def test_owner_added_appends_owner_for_key() -> None:
    """OwnerAdded should append the owner to the owners array of the keyed row."""
    mutation = _translate(OwnerAdded(project_id="proj-123", owner="0x123"))
    values = _bound_values(mutation)

    assert '["0x123"]' in values
    assert 1 in values and "proj-123" in values
    assert mutation.sql.startswith("UPDATE project SET owners=")
    assert "||" in mutation.sql
    assert "CAST('[\"0x123\"]' AS JSONB)" in mutation.sql


def test_owner_added_twice_appends_twice() -> None:
    """Appends are unconditional; a repeated owner is not deduplicated."""
    payload = OwnerAdded(project_id="proj-123", owner="0x123")

    first = _translate(payload)
    second = _translate(payload)

    assert first.sql == second.sql
    assert "coalesce(project.owners" in first.sql


def test_owner_removed_removes_owner_for_key() -> None:
    """OwnerRemoved should subtract the owner value from the owners array."""
    mutation = _translate(OwnerRemoved(project_id="proj-123", owner="0x123"))
    values = _bound_values(mutation)

    assert "0x123" in values
    assert "project.owners - CAST('0x123' AS TEXT)" in mutation.sql
    assert "project.chain_id = 1" in mutation.sql


@pytest.mark.parametrize(
    "payload",
    [
        OwnerAdded(project_id="p'; DROP TABLE project; --", owner="o'wner"),
        OwnerRemoved(project_id="p'; DROP TABLE project; --", owner="o'wner"),
    ],
    ids=["added", "removed"],
)
def test_owner_mutations_escape_quotes(payload) -> None:
    """Quotes in identifiers should be escaped, never break out of literals."""
    mutation = _translate(payload)

    assert "'p''; DROP TABLE project; --'" in mutation.sql
    assert "o''wner" in mutation.sql
    assert "p'; DROP TABLE project; --" in _bound_values(mutation)


def test_rendered_sql_keeps_percent_signs() -> None:
    """Percent signs in values should render unchanged."""
    mutation = _translate(ProjectCreated(project_id="100%"))

    assert "'100%'" in mutation.sql
