"""SeedManager API for dumping tables to seed files and loading them back."""

import logging
from pathlib import Path
from typing import Any

from tableseed.backends.base import SeedBackend
from tableseed.codec import decode_archive, decode_comment, encode_archive
from tableseed.config import Config
from tableseed.loader import InsertFunction, load_rows
from tableseed.models import DumpOptions, LoadOptions, Row, TableDescriptor
from tableseed.projector import project_rows
from tableseed.store import SeedStore


class SeedManager:
    """
    Save and load table data as compressed seed files.

    Example:
        >>> manager = SeedManager(DirectBackend(conn, name="MyProject.Repo"))
        >>> manager.dump("persons", DumpOptions(comment="Copied from legacy"))
        PosixPath('priv/my_project/seeds/persons.seed.gz')
        >>> manager.load("persons", LoadOptions(insert_options={"on_conflict": "nothing"}))
        1250
    """

    def __init__(
        self,
        backend: SeedBackend,
        store: SeedStore | None = None,
        config: Config | None = None,
        logger: logging.Logger | None = None,
    ):
        """
        Initialize SeedManager.

        Args:
            backend: Data access handle for the connection
            store: Seed file store (default: built from config)
            config: Configuration (default: defaults plus environment)
            logger: Logger for progress messages
        """
        self.backend = backend
        self.config = config or Config()
        self.store = store or self.config.get_store()
        self.logger = logger or logging.getLogger(__name__)

    def _describe(self, table: TableDescriptor | str) -> TableDescriptor:
        if isinstance(table, TableDescriptor):
            return table
        return self.backend.describe_table(table)

    def archive_path(self, table: TableDescriptor | str) -> Path:
        """Get the seed file path for a table."""
        table_name = table.name if isinstance(table, TableDescriptor) else table
        return self.store.resolve_path(self.backend.name, table_name)

    def dump(self, table: TableDescriptor | str, options: DumpOptions | None = None) -> Path:
        """
        Dump table data to its seed file, replacing any previous one.

        Args:
            table: Table descriptor or table name
            options: Comment and custom seed data

        Returns:
            Path of the written seed file

        Raises:
            SeedEncodeError: If rows cannot be serialized
            SeedIOError: If the seed file cannot be written
        """
        options = options or DumpOptions()

        if options.seed_data is not None:
            table_name = table.name if isinstance(table, TableDescriptor) else table
            rows = list(options.seed_data)
        else:
            descriptor = self._describe(table)
            table_name = descriptor.name
            # Records come back ordered by primary key so dumps are repeatable
            rows = project_rows(
                self.backend.fetch_all(descriptor), descriptor.excluded_fields
            )

        path = self.store.resolve_path(self.backend.name, table_name)
        self.logger.info(
            f'Dumping seed data for the table "{table_name}" to "{path}" ({len(rows)} rows)...'
        )

        data = encode_archive(rows, options.comment)
        self.store.ensure_directory(self.backend.name)
        self.store.write(path, data)
        return path

    def _resolve_insert(self, operation: str | InsertFunction) -> InsertFunction:
        if callable(operation):
            return operation
        insert = getattr(self.backend, operation, None)
        if insert is None or not callable(insert):
            raise ValueError(
                f"Backend {type(self.backend).__name__} has no insert operation '{operation}'"
            )
        return insert

    def load(self, table: TableDescriptor | str, options: LoadOptions | None = None) -> int:
        """
        Load a table's seed file into the table.

        Rows are inserted in chunks, one insert call per chunk. Chunks already
        inserted are not rolled back if a later chunk fails.

        Args:
            table: Table descriptor or table name
            options: Insert operation, insert options and chunk size

        Returns:
            Number of rows inserted

        Raises:
            SeedDirectoryNotFoundError: If the seeds directory is missing
            SeedFileNotFoundError: If the table has no seed file
            SeedParseError: If the seed file is corrupt
            ChunkInsertError: If a chunk fails to insert
        """
        options = options or LoadOptions()
        insert = self._resolve_insert(options.insert_operation)
        chunk_size = options.chunk_size
        if chunk_size is None:
            chunk_size = self.config.seed.chunk_size

        path = self.archive_path(table)
        rows = decode_archive(self.store.read(path), path).rows
        descriptor = self._describe(table)

        self.logger.info(
            f'Loading seed data for the table "{descriptor.name}" from "{path}" '
            f"({len(rows)} rows)..."
        )
        return load_rows(
            insert,
            descriptor,
            rows,
            chunk_size=chunk_size,
            insert_options=options.insert_options,
        )

    def read_archive(
        self, table: TableDescriptor | str, comment_only: bool = False
    ) -> list[Row] | str | None:
        """
        Read a table's seed file without touching the database.

        Args:
            table: Table descriptor or table name
            comment_only: Return just the embedded comment (None if absent)

        Returns:
            The rows, or the comment when comment_only is set
        """
        path = self.archive_path(table)
        if comment_only:
            with self.store.open(path) as f:
                return decode_comment(f, path)
        return decode_archive(self.store.read(path), path).rows


def dump(backend: SeedBackend, table: TableDescriptor | str, **options: Any) -> Path:
    """Dump a table with default configuration (options as in DumpOptions)."""
    return SeedManager(backend).dump(table, DumpOptions(**options))


def load(backend: SeedBackend, table: TableDescriptor | str, **options: Any) -> int:
    """Load a table with default configuration (options as in LoadOptions)."""
    return SeedManager(backend).load(table, LoadOptions(**options))


def read_archive(
    backend: SeedBackend, table: TableDescriptor | str, comment_only: bool = False
) -> list[Row] | str | None:
    """Read a table's seed file with default configuration."""
    return SeedManager(backend).read_archive(table, comment_only=comment_only)
