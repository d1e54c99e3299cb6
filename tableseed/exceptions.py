"""Custom exceptions with helpful error messages."""

from pathlib import Path


class TableSeedError(Exception):
    """Base exception for tableseed errors."""

    pass


class SeedDirectoryNotFoundError(TableSeedError):
    """Seeds directory does not exist (project not set up for this connection)."""

    def __init__(self, directory: Path | str):
        self.directory = Path(directory)
        super().__init__(
            f"The seed files directory does not exist: {self.directory}\n\n"
            f"Suggestions:\n"
            f"1. Create it and try again: mkdir -p {self.directory}\n"
            f"2. Or run 'tableseed init' to create it\n"
            f"3. Check the 'seed.base_dir' / 'seed.directory' configuration"
        )


class SeedFileNotFoundError(TableSeedError):
    """No seed archive exists for the requested table."""

    def __init__(self, path: Path | str, table_name: str):
        self.path = Path(path)
        self.table_name = table_name
        super().__init__(
            f"No seed file for table '{table_name}' at {self.path}.\n\n"
            f"Suggestions:\n"
            f"1. Dump the table first: tableseed dump {table_name}\n"
            f"2. Check the table name spelling\n"
            f"3. Use 'tableseed list' to see archived tables"
        )


class SeedParseError(TableSeedError):
    """Seed archive content is not a well-formed archive."""

    def __init__(self, reason: str, path: Path | str | None = None):
        self.reason = reason
        self.path = Path(path) if path is not None else None
        location = f" {self.path}" if self.path is not None else ""
        super().__init__(f"Could not parse seed archive{location}: {reason}")


class SeedEncodeError(TableSeedError):
    """Rows cannot be serialized into a seed archive."""

    pass


class SeedIOError(TableSeedError):
    """Filesystem failure while reading or writing a seed archive."""

    def __init__(self, path: Path | str, action: str, error: OSError):
        self.path = Path(path)
        self.action = action
        super().__init__(f"Could not {action} seed file {self.path}: {error}")


class ChunkInsertError(TableSeedError):
    """Bulk insert failed for one chunk of rows."""

    def __init__(
        self,
        table_name: str,
        chunk_index: int,
        chunk_size: int,
        rows_inserted: int,
        error: Exception,
    ):
        self.table_name = table_name
        self.chunk_index = chunk_index
        self.chunk_size = chunk_size
        self.rows_inserted = rows_inserted
        super().__init__(
            f"Failed to insert chunk {chunk_index} ({chunk_size} rows) "
            f"into table '{table_name}': {error}\n\n"
            f"{rows_inserted} rows from earlier chunks were inserted and are "
            f"NOT rolled back.\n\n"
            f"Suggestions:\n"
            f"1. Wrap the load in a database transaction for all-or-nothing loading\n"
            f"2. Empty the table or load with on_conflict='nothing' before retrying\n"
            f"3. Check that the seed file matches the current table schema"
        )


class MissingPrimaryKeyError(TableSeedError):
    """Table has no primary key to order its rows by."""

    def __init__(self, table_name: str):
        self.table_name = table_name
        super().__init__(
            f"Table '{table_name}' has no primary key.\n\n"
            f"Suggestions:\n"
            f"1. Add a primary key to the table\n"
            f"2. Pass an explicit TableDescriptor with primary_key=[...]\n"
            f"3. Dump custom rows with DumpOptions(seed_data=[...])"
        )


class SchemaNotFoundError(TableSeedError):
    """Schema does not exist in database."""

    def __init__(self, schema: str):
        super().__init__(
            f"Schema '{schema}' not found in database.\n\n"
            f"Suggestions:\n"
            f"1. Check schema name spelling\n"
            f"2. Set 'database.schema' in tableseed.toml\n"
            f"3. Check database connection settings"
        )


class TableNotFoundError(TableSeedError):
    """Table does not exist in schema."""

    def __init__(self, table: str, schema: str):
        super().__init__(
            f"Table '{table}' not found in schema '{schema}'.\n\n"
            f"Suggestions:\n"
            f"1. Check table name spelling\n"
            f"2. Use SchemaIntrospector.get_tables() to see available tables"
        )
