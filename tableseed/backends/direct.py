"""Direct backend - reads and inserts through a psycopg connection."""

from collections.abc import Iterable, Sequence
from typing import Any

from psycopg import Connection, sql
from psycopg.rows import dict_row
from psycopg.types.json import Json, Jsonb

from tableseed.backends.base import validate_on_conflict
from tableseed.exceptions import MissingPrimaryKeyError
from tableseed.introspection import DEFAULT_TIMESTAMP_COLUMNS, SchemaIntrospector
from tableseed.models import Row, TableDescriptor


# Column types whose values go to the server as JSON documents
_JSON_TYPES = {"json": Json, "jsonb": Jsonb}


def _adapt_value(value: Any, column_type: str | None = None) -> Any:
    """
    Wrap JSON values so psycopg sends them as json/jsonb.

    With a known column type only json and jsonb columns are wrapped, whatever
    the Python shape of the value (a JSON list of strings or a bare JSON string
    included). Without one, dicts and lists of containers are taken for jsonb.
    """
    if value is None:
        return None
    if column_type is not None:
        wrapper = _JSON_TYPES.get(column_type)
        return wrapper(value) if wrapper is not None else value
    if isinstance(value, dict):
        return Jsonb(value)
    if isinstance(value, list) and any(isinstance(item, (dict, list)) for item in value):
        return Jsonb(value)
    return value


class DirectBackend:
    """
    Execute table scans and bulk inserts with plain SQL.

    Each insert_all() call is one multi-row INSERT statement. With commit=True
    (the default) every call is committed on its own; pass commit=False and
    wrap the load in ``conn.transaction()`` for all-or-nothing loading.
    """

    def __init__(
        self,
        conn: Connection,
        schema: str = "public",
        name: str = "app",
        commit: bool = True,
        timestamp_columns: Iterable[str] = DEFAULT_TIMESTAMP_COLUMNS,
    ):
        """
        Initialize backend.

        Args:
            conn: PostgreSQL connection
            schema: Schema for tables described by name
            name: Connection identity (picks the seeds directory)
            commit: Commit after every insert_all() call
            timestamp_columns: Columns treated as autogenerated when present
        """
        self.conn = conn
        self.schema = schema
        self.name = name
        self.commit = commit
        self.timestamp_columns = tuple(timestamp_columns)
        self._introspector: SchemaIntrospector | None = None

    @property
    def introspector(self) -> SchemaIntrospector:
        if self._introspector is None:
            self._introspector = SchemaIntrospector(
                self.conn, self.schema, timestamp_columns=self.timestamp_columns
            )
        return self._introspector

    def describe_table(self, table_name: str) -> TableDescriptor:
        """Get descriptor for a table in this backend's schema."""
        return self.introspector.get_table_descriptor(table_name)

    def _table_identifier(self, table: TableDescriptor) -> sql.Identifier:
        return sql.Identifier(table.schema or self.schema, table.name)

    def fetch_all(self, table: TableDescriptor) -> list[dict[str, Any]]:
        """
        Get all rows of a table ordered by primary key.

        Raises:
            MissingPrimaryKeyError: If the table has no primary key
        """
        if not table.primary_key:
            raise MissingPrimaryKeyError(table.name)

        if table.persisted_columns:
            columns = sql.SQL(", ").join(map(sql.Identifier, table.persisted_columns))
        else:
            columns = sql.SQL("*")

        query = sql.SQL("SELECT {columns} FROM {table} ORDER BY {order}").format(
            columns=columns,
            table=self._table_identifier(table),
            order=sql.SQL(", ").join(map(sql.Identifier, table.primary_key)),
        )

        with self.conn.cursor(row_factory=dict_row) as cur:
            cur.execute(query)
            return cur.fetchall()

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
        Insert rows using one multi-row INSERT.

        Args:
            table: Table descriptor
            rows: Rows sharing one column set
            on_conflict: None (raise), "nothing" (skip) or "update" (overwrite)
            conflict_target: Conflict columns (default: primary key for "update")
            overriding_system_value: Write explicit values into
                GENERATED ALWAYS identity columns

        Returns:
            Number of rows inserted or updated
        """
        validate_on_conflict(on_conflict)
        if not rows:
            return 0

        columns = list(rows[0])
        single_placeholder = sql.SQL("({})").format(
            sql.SQL(", ").join([sql.Placeholder()] * len(columns))
        )

        parts = [
            sql.SQL("INSERT INTO {table} ({columns})").format(
                table=self._table_identifier(table),
                columns=sql.SQL(", ").join(map(sql.Identifier, columns)),
            )
        ]
        if overriding_system_value:
            parts.append(sql.SQL("OVERRIDING SYSTEM VALUE"))
        parts.append(sql.SQL("VALUES"))
        parts.append(sql.SQL(", ").join([single_placeholder] * len(rows)))
        parts.extend(self._conflict_clause(table, columns, on_conflict, conflict_target))

        # Flatten values: [row1_col1, row1_col2, row2_col1, row2_col2, ...]
        values = [
            _adapt_value(row.get(col), table.column_types.get(col))
            for row in rows
            for col in columns
        ]

        with self.conn.cursor() as cur:
            cur.execute(sql.SQL(" ").join(parts), values)
            count = cur.rowcount

        if self.commit:
            self.conn.commit()
        return count

    def upsert_all(
        self,
        table: TableDescriptor,
        rows: Sequence[Row],
        *,
        conflict_target: Sequence[str] | None = None,
        overriding_system_value: bool = False,
    ) -> int:
        """Insert rows, overwriting rows whose conflict target already exists."""
        return self.insert_all(
            table,
            rows,
            on_conflict="update",
            conflict_target=conflict_target,
            overriding_system_value=overriding_system_value,
        )

    def _conflict_clause(
        self,
        table: TableDescriptor,
        columns: list[str],
        on_conflict: str | None,
        conflict_target: Sequence[str] | None,
    ) -> list[sql.Composable]:
        if on_conflict is None:
            return []

        target = list(conflict_target or [])
        if on_conflict == "update" and not target:
            if not table.primary_key:
                raise MissingPrimaryKeyError(table.name)
            target = list(table.primary_key)

        clause: list[sql.Composable] = [sql.SQL("ON CONFLICT")]
        if target:
            clause.append(
                sql.SQL("({})").format(sql.SQL(", ").join(map(sql.Identifier, target)))
            )

        updates = [col for col in columns if col not in target]
        if on_conflict == "nothing" or not updates:
            clause.append(sql.SQL("DO NOTHING"))
        else:
            clause.append(
                sql.SQL("DO UPDATE SET {}").format(
                    sql.SQL(", ").join(
                        sql.SQL("{col} = EXCLUDED.{col}").format(col=sql.Identifier(col))
                        for col in updates
                    )
                )
            )
        return clause
