"""Staging backend - in-memory tables for testing without database."""

from collections.abc import Sequence
from typing import Any

from tableseed.backends.base import validate_on_conflict
from tableseed.exceptions import MissingPrimaryKeyError, TableNotFoundError
from tableseed.models import Row, TableDescriptor


def _key_part(value: Any) -> tuple[bool, Any]:
    # Missing key components sort last instead of failing to compare
    return (value is None, value)


class StagingBackend:
    """
    In-memory backend for dumping and loading seed data without database.

    Simulates database behavior:
    - Returns rows in primary key order
    - Rejects duplicate primary keys (or conflict target values)
    - Applies each insert_all() call atomically

    Use case: Fast unit tests, offline development, inspecting seed files.
    """

    def __init__(self, name: str = "staging"):
        """
        Initialize staging backend with no tables.

        Args:
            name: Connection identity (picks the seeds directory)
        """
        self.name = name
        self._tables: dict[str, TableDescriptor] = {}
        self._data: dict[str, list[dict[str, Any]]] = {}

    def create_table(
        self, descriptor: TableDescriptor, rows: Sequence[Row] | None = None
    ) -> None:
        """
        Register a table (replacing any existing one) and optionally fill it.

        Args:
            descriptor: Table metadata
            rows: Initial rows
        """
        self._tables[descriptor.name] = descriptor
        self._data[descriptor.name] = []
        if rows:
            self.insert_all(descriptor, rows)

    def describe_table(self, table_name: str) -> TableDescriptor:
        """Get descriptor of a registered table."""
        if table_name not in self._tables:
            raise TableNotFoundError(table_name, "staging")
        return self._tables[table_name]

    def fetch_all(self, table: TableDescriptor) -> list[dict[str, Any]]:
        """Get copies of all rows ordered by primary key."""
        if not table.primary_key:
            raise MissingPrimaryKeyError(table.name)
        rows = self.get_data(table.name)
        return sorted(
            (dict(row) for row in rows),
            key=lambda row: tuple(_key_part(row.get(col)) for col in table.primary_key),
        )

    def insert_all(
        self,
        table: TableDescriptor,
        rows: Sequence[Row],
        *,
        on_conflict: str | None = None,
        conflict_target: Sequence[str] | None = None,
        overriding_system_value: bool = False,
    ) -> int:
        """
        Simulate a multi-row INSERT.

        Args:
            table: Table descriptor
            rows: Rows to insert
            on_conflict: None (raise), "nothing" (skip) or "update" (overwrite)
            conflict_target: Key columns (default: primary key)
            overriding_system_value: Accepted for DirectBackend compatibility

        Returns:
            Number of rows inserted or updated

        Raises:
            ValueError: On a key conflict when on_conflict is None
        """
        validate_on_conflict(on_conflict)
        if table.name not in self._data:
            raise TableNotFoundError(table.name, "staging")

        key_columns = list(conflict_target or table.primary_key)
        stored = [dict(row) for row in self._data[table.name]]
        positions = {
            tuple(row.get(col) for col in key_columns): index
            for index, row in enumerate(stored)
        }

        count = 0
        for row in rows:
            new_row = dict(row)
            if not key_columns:
                stored.append(new_row)
                count += 1
                continue

            key = tuple(new_row.get(col) for col in key_columns)
            if key in positions:
                if on_conflict is None:
                    raise ValueError(
                        f"duplicate key value violates unique constraint on "
                        f"'{table.name}' {tuple(key_columns)}: {key}"
                    )
                if on_conflict == "nothing":
                    continue
                stored[positions[key]] = new_row
            else:
                positions[key] = len(stored)
                stored.append(new_row)
            count += 1

        # Nothing is stored unless the whole call succeeded
        self._data[table.name] = stored
        return count

    def upsert_all(
        self,
        table: TableDescriptor,
        rows: Sequence[Row],
        *,
        conflict_target: Sequence[str] | None = None,
        overriding_system_value: bool = False,
    ) -> int:
        """Insert rows, overwriting rows whose key already exists."""
        return self.insert_all(
            table,
            rows,
            on_conflict="update",
            conflict_target=conflict_target,
            overriding_system_value=overriding_system_value,
        )

    def get_data(self, table_name: str) -> list[dict[str, Any]]:
        """
        Get in-memory data for inspection.

        Args:
            table_name: Table name

        Returns:
            List of row dicts for the table, in insertion order
        """
        return self._data.get(table_name, [])

    def clear(self) -> None:
        """Drop all tables and data."""
        self._tables.clear()
        self._data.clear()
