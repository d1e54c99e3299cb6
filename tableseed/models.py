"""Data models and type definitions."""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

Row = dict[str, Any]

DEFAULT_CHUNK_SIZE = 1000


@dataclass
class TableDescriptor:
    """
    Table metadata needed to dump and load seed data.

    Attributes:
        name: Table name (also names the seed file)
        primary_key: Primary key column(s), used to order table scans
        columns: Ordered column names (empty means "whatever the scan returns")
        associations: Fields referencing related records, never persisted
        autogenerated: Fields the database fills in (timestamps, generated columns)
        schema: Database schema, if the backend is schema-aware
        column_types: Database type of each column, where the backend knows it
    """

    name: str
    primary_key: list[str] = field(default_factory=list)
    columns: list[str] = field(default_factory=list)
    associations: list[str] = field(default_factory=list)
    autogenerated: list[str] = field(default_factory=list)
    schema: str | None = None
    column_types: dict[str, str] = field(default_factory=dict)

    @property
    def excluded_fields(self) -> frozenset[str]:
        """Fields stripped from every row before it is written to an archive."""
        return frozenset(self.associations) | frozenset(self.autogenerated)

    @property
    def persisted_columns(self) -> list[str]:
        """Columns that end up in an archive, in table order."""
        excluded = self.excluded_fields
        return [col for col in self.columns if col not in excluded]

    @property
    def qualified_name(self) -> str:
        """Get schema-qualified table name."""
        if self.schema:
            return f"{self.schema}.{self.name}"
        return self.name


@dataclass
class DumpOptions:
    """
    Options for dumping a table to its seed file.

    Attributes:
        comment: Free text written at the top of the seed file
        seed_data: Rows to dump instead of the current table contents
    """

    comment: str | None = None
    seed_data: list[Row] | None = None


@dataclass
class LoadOptions:
    """
    Options for loading a seed file into its table.

    Attributes:
        insert_operation: Backend method name, or a callable taking
            (table, rows, **insert_options)
        insert_options: Passed verbatim to every insert call
            (e.g. on_conflict="nothing")
        chunk_size: Rows per insert call (None means the configured default)
    """

    insert_operation: str | Callable[..., Any] = "insert_all"
    insert_options: dict[str, Any] = field(default_factory=dict)
    chunk_size: int | None = None
