"""Locate, read and write seed files on disk."""

import logging
import os
import re
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import IO

from tableseed.exceptions import (
    SeedDirectoryNotFoundError,
    SeedFileNotFoundError,
    SeedIOError,
)

logger = logging.getLogger(__name__)

SEEDS_DIRNAME = "seeds"
SEED_FILE_SUFFIX = ".seed.gz"


def namespace_for(connection_name: str) -> str:
    """
    Get the project namespace owning a connection.

    Uses the first dotted component of the connection name, in snake_case:
        "MyProject.Repo"  →  "my_project"
        "inventory"       →  "inventory"
    """
    head = connection_name.split(".", 1)[0]
    head = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", head)
    head = re.sub(r"([a-z\d])([A-Z])", r"\1_\2", head)
    return head.replace("-", "_").lower()


class SeedStore:
    """
    Seed files for each connection, one file per table.

    Layout: <base_dir>/<namespace>/seeds/<table>.seed.gz, or
    <directory>/<table>.seed.gz when an explicit directory is configured.
    """

    def __init__(self, base_dir: Path | str = "priv", directory: Path | str | None = None):
        """
        Initialize store.

        Args:
            base_dir: Root holding one <namespace>/seeds directory per project
            directory: Use this seeds directory for every connection instead
        """
        self.base_dir = Path(base_dir)
        self.directory = Path(directory) if directory is not None else None

    def seeds_directory(self, connection_name: str) -> Path:
        """Get the seeds directory for a connection."""
        if self.directory is not None:
            return self.directory
        return self.base_dir / namespace_for(connection_name) / SEEDS_DIRNAME

    def resolve_path(self, connection_name: str, table_name: str) -> Path:
        """
        Get the seed file path for a table.

        Raises:
            ValueError: If the table name could escape the seeds directory
        """
        if (
            not table_name
            or table_name.startswith(".")
            or "/" in table_name
            or "\\" in table_name
        ):
            raise ValueError(f"Invalid table name for a seed file: {table_name!r}")
        return self.seeds_directory(connection_name) / f"{table_name}{SEED_FILE_SUFFIX}"

    def ensure_directory(self, connection_name: str) -> Path:
        """Create the seeds directory (and parents) if missing."""
        directory = self.seeds_directory(connection_name)
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise SeedIOError(directory, "create directory for", e) from e
        return directory

    def write(self, path: Path, data: bytes) -> None:
        """
        Replace the file at path with data.

        Data goes to a temporary file next to the target first, so readers
        never see a partially written seed file.
        """
        path = Path(path)
        tmp_name = None
        try:
            with tempfile.NamedTemporaryFile(
                dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", delete=False
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(data)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.chmod(tmp_name, 0o644)
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise SeedIOError(path, "write", e) from e
        logger.debug(f"Wrote {len(data)} bytes to {path}")

    def _check_readable(self, path: Path) -> None:
        if not path.parent.is_dir():
            raise SeedDirectoryNotFoundError(path.parent)
        if not path.is_file():
            raise SeedFileNotFoundError(path, path.name.removesuffix(SEED_FILE_SUFFIX))

    def read(self, path: Path) -> bytes:
        """
        Read a seed file.

        Raises:
            SeedDirectoryNotFoundError: If the seeds directory is missing
            SeedFileNotFoundError: If the seed file is missing
            SeedIOError: If the file cannot be read
        """
        path = Path(path)
        self._check_readable(path)
        try:
            return path.read_bytes()
        except FileNotFoundError as e:
            raise SeedFileNotFoundError(path, path.name.removesuffix(SEED_FILE_SUFFIX)) from e
        except OSError as e:
            raise SeedIOError(path, "read", e) from e

    @contextmanager
    def open(self, path: Path) -> Iterator[IO[bytes]]:
        """Open a seed file for streaming reads (same checks as read())."""
        path = Path(path)
        self._check_readable(path)
        try:
            f = path.open("rb")
        except FileNotFoundError as e:
            raise SeedFileNotFoundError(path, path.name.removesuffix(SEED_FILE_SUFFIX)) from e
        except OSError as e:
            raise SeedIOError(path, "open", e) from e
        with f:
            yield f

    def list_tables(self, connection_name: str) -> list[str]:
        """Get names of tables that have a seed file (sorted)."""
        directory = self.seeds_directory(connection_name)
        if not directory.is_dir():
            return []
        return sorted(
            p.name.removesuffix(SEED_FILE_SUFFIX)
            for p in directory.glob(f"*{SEED_FILE_SUFFIX}")
            if p.is_file()
        )
