"""Relational schema for reconstructed application state.

This module declares the ``project`` and ``round`` tables with
SQLAlchemy Core. Mutations target these tables by key columns.
"""

from __future__ import annotations

from sqlalchemy import BigInteger, Column, Integer, MetaData, String, Table, text
from sqlalchemy.dialects import postgresql
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.engine import Connection
from sqlalchemy.schema import CreateTable

from core.constants import PROJECT_TABLE_NAME, ROUND_TABLE_NAME

SCHEMA_METADATA = MetaData()

PROJECT_TABLE = Table(
    PROJECT_TABLE_NAME,
    SCHEMA_METADATA,
    Column("chain_id", Integer, primary_key=True, autoincrement=False),
    Column("project_id", String, primary_key=True),
    Column("created_at_block", BigInteger, nullable=False),
    Column("metadata", JSONB, nullable=True),
    Column("owners", JSONB, nullable=False, server_default=text("'[]'::jsonb")),
)

ROUND_TABLE = Table(
    ROUND_TABLE_NAME,
    SCHEMA_METADATA,
    Column("chain_id", Integer, primary_key=True, autoincrement=False),
    Column("round_address", String, primary_key=True),
    Column("created_at_block", BigInteger, nullable=False),
)


def schema_statements() -> list[str]:
    """Render the ``CREATE TABLE`` statements for PostgreSQL.

    Returns:
        One statement per table, in creation order.
    """
    dialect = postgresql.dialect()
    return [
        str(CreateTable(table).compile(dialect=dialect)).strip()
        for table in SCHEMA_METADATA.sorted_tables
    ]


def create_schema(connection: Connection) -> None:
    """Create missing tables; existing tables are left untouched."""
    SCHEMA_METADATA.create_all(connection, checkfirst=True)
