"""Fixtures for tests against a live PostgreSQL database."""

import os

import psycopg
import pytest
from psycopg import Connection

TEST_DATABASE_URL = os.environ.get("TABLESEED_TEST_DATABASE_URL")


@pytest.fixture
def db_conn() -> Connection:
    """
    Provide a test database connection.

    Set TABLESEED_TEST_DATABASE_URL (e.g. postgresql://localhost/tableseed_test)
    to run these tests; they are skipped otherwise.
    """
    if not TEST_DATABASE_URL:
        pytest.skip("TABLESEED_TEST_DATABASE_URL not set")

    conn = psycopg.connect(TEST_DATABASE_URL, autocommit=False)

    yield conn

    conn.rollback()
    conn.close()


@pytest.fixture
def test_schema(db_conn: Connection) -> str:
    """
    Create a test schema with a sample table.

    Returns the schema name.
    """
    schema_name = "tableseed_test"

    with db_conn.cursor() as cur:
        cur.execute(f"DROP SCHEMA IF EXISTS {schema_name} CASCADE")
        cur.execute(f"CREATE SCHEMA {schema_name}")

        cur.execute(f"""
            CREATE TABLE {schema_name}.organizations (
                id INTEGER PRIMARY KEY,
                name TEXT NOT NULL
            )
        """)

        cur.execute(f"""
            CREATE TABLE {schema_name}.persons (
                id INTEGER GENERATED ALWAYS AS IDENTITY PRIMARY KEY,
                token UUID NOT NULL DEFAULT gen_random_uuid(),
                name TEXT NOT NULL,
                email TEXT,
                born_on DATE,
                balance NUMERIC(12, 2),
                settings JSONB,
                labels JSONB,
                motto JSONB,
                shift_length INTERVAL,
                tags TEXT[],
                organization_id INTEGER REFERENCES {schema_name}.organizations(id),
                name_length INTEGER GENERATED ALWAYS AS (length(name)) STORED,
                inserted_at TIMESTAMP NOT NULL DEFAULT now(),
                updated_at TIMESTAMP NOT NULL DEFAULT now()
            )
        """)

        db_conn.commit()

    yield schema_name

    with db_conn.cursor() as cur:
        cur.execute(f"DROP SCHEMA IF EXISTS {schema_name} CASCADE")
        db_conn.commit()
