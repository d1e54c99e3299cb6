"""Build table descriptors from the PostgreSQL catalog."""

from collections.abc import Iterable

from psycopg import Connection

from tableseed.exceptions import SchemaNotFoundError, TableNotFoundError
from tableseed.models import TableDescriptor

DEFAULT_TIMESTAMP_COLUMNS = ("inserted_at", "updated_at")


class SchemaIntrospector:
    """Describe the tables of one schema, caching descriptors per table."""

    def __init__(
        self,
        conn: Connection,
        schema: str,
        timestamp_columns: Iterable[str] = DEFAULT_TIMESTAMP_COLUMNS,
    ):
        """
        Initialize introspector.

        Args:
            conn: PostgreSQL connection
            schema: Schema holding the tables
            timestamp_columns: Column names treated as autogenerated when present

        Raises:
            SchemaNotFoundError: If the schema is missing
        """
        self.conn = conn
        self.schema = schema
        self.timestamp_columns = tuple(timestamp_columns)
        self._descriptors: dict[str, TableDescriptor] = {}

        with self.conn.cursor() as cur:
            cur.execute("SELECT 1 FROM pg_namespace WHERE nspname = %s", (schema,))
            if cur.fetchone() is None:
                raise SchemaNotFoundError(schema)

    def get_tables(self) -> list[str]:
        """Get table names in the schema, sorted."""
        with self.conn.cursor() as cur:
            cur.execute(
                """
                SELECT c.relname
                FROM pg_class c
                JOIN pg_namespace n ON n.oid = c.relnamespace
                WHERE n.nspname = %s AND c.relkind IN ('r', 'p')
                ORDER BY c.relname
                """,
                (self.schema,),
            )
            return [name for (name,) in cur.fetchall()]

    def _table_oid(self, table_name: str) -> int:
        with self.conn.cursor() as cur:
            cur.execute(
                """
                SELECT c.oid
                FROM pg_class c
                JOIN pg_namespace n ON n.oid = c.relnamespace
                WHERE n.nspname = %s AND c.relname = %s AND c.relkind IN ('r', 'p')
                """,
                (self.schema, table_name),
            )
            found = cur.fetchone()
        if found is None:
            raise TableNotFoundError(table_name, self.schema)
        return found[0]

    def get_table_descriptor(self, table_name: str) -> TableDescriptor:
        """
        Get descriptor for a table (cached).

        Generated columns and the configured timestamp columns are marked
        autogenerated, so they are left out of seed files.

        Raises:
            TableNotFoundError: If the schema has no such table
        """
        cached = self._descriptors.get(table_name)
        if cached is not None:
            return cached

        oid = self._table_oid(table_name)
        columns = self._columns(oid)
        names = [name for name, _, _ in columns]
        autogenerated = [name for name, generated, _ in columns if generated]
        autogenerated += [
            name
            for name in names
            if name in self.timestamp_columns and name not in autogenerated
        ]

        descriptor = TableDescriptor(
            name=table_name,
            primary_key=self._primary_key(oid),
            columns=names,
            autogenerated=autogenerated,
            schema=self.schema,
            column_types={name: type_name for name, _, type_name in columns},
        )
        self._descriptors[table_name] = descriptor
        return descriptor

    def get_columns(self, table_name: str) -> list[tuple[str, bool, str]]:
        """Get (column name, is generated, type) triples in table order."""
        return self._columns(self._table_oid(table_name))

    def get_primary_key(self, table_name: str) -> list[str]:
        """Get primary key columns in key order (empty if none)."""
        return self._primary_key(self._table_oid(table_name))

    def _columns(self, oid: int) -> list[tuple[str, bool, str]]:
        # attgenerated is 's' for GENERATED ALWAYS AS (...) STORED columns,
        # which reject explicit values on insert
        with self.conn.cursor() as cur:
            cur.execute(
                """
                SELECT attname, attgenerated <> '', format_type(atttypid, NULL)
                FROM pg_attribute
                WHERE attrelid = %s::oid AND attnum > 0 AND NOT attisdropped
                ORDER BY attnum
                """,
                (oid,),
            )
            return [
                (name, bool(generated), type_name)
                for name, generated, type_name in cur.fetchall()
            ]

    def _primary_key(self, oid: int) -> list[str]:
        with self.conn.cursor() as cur:
            cur.execute(
                """
                SELECT a.attname
                FROM pg_index i
                JOIN pg_attribute a
                  ON a.attrelid = i.indrelid AND a.attnum = ANY(i.indkey)
                WHERE i.indrelid = %s::oid AND i.indisprimary
                ORDER BY array_position(i.indkey::int2[], a.attnum)
                """,
                (oid,),
            )
            return [name for (name,) in cur.fetchall()]

    def clear_cache(self) -> None:
        self._descriptors.clear()
